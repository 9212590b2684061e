import pytest

from faucet_miner.errors import InvalidDifficulty
from faucet_miner.job import ClaimJob, parse_uint


def test_parse_uint_forms():
    assert parse_uint(5) == 5
    assert parse_uint("100000000000000000") == 10**17
    assert parse_uint("0x16345785d8a0000") == 10**17
    assert parse_uint(" 42 ") == 42
    for bad in ("", "0xzz", "1.5", True, 1.5, None):
        with pytest.raises(ValueError):
            parse_uint(bad)


def test_claim_job_from_balance_mapping():
    job = ClaimJob.from_mapping(
        {"address": "0x" + "11" * 20, "balance": "0x16345785d8a0000", "difficulty": "4"}
    )
    assert job.address == b"\x11" * 20
    assert job.reference_value == 10**17
    assert job.difficulty == 4
    assert job.address_hex == "0x" + "11" * 20


def test_claim_job_from_block_number_mapping():
    job = ClaimJob.from_mapping({"address": "22" * 20, "block_number": 6_123_456, "difficulty": 3})
    assert job.reference_value == 6_123_456


def test_claim_job_rejects_missing_fields():
    with pytest.raises(ValueError):
        ClaimJob.from_mapping({"address": "0x" + "11" * 20, "difficulty": 1})
    with pytest.raises(ValueError):
        ClaimJob.from_mapping({"balance": 1, "difficulty": 1})


def test_claim_job_rejects_bad_difficulty():
    with pytest.raises(InvalidDifficulty):
        ClaimJob.create("0x" + "11" * 20, 1, 64)
