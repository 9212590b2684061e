import hashlib

import pytest

from faucet_miner.hashing import claim_digest, digest_to_int, keccak256, normalize_address, pack_claim

ADDR = "0x" + "00" * 19 + "01"


def test_keccak256_vectors():
    assert keccak256(b"").hex() == "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    assert keccak256(b"abc").hex() == "4e03657aea45a94fc7d47ba826c8d667c0d1e6e33a64a036ec44f58fa12d6c45"

    # NIST SHA3-256 pads differently; the contract uses keccak
    assert keccak256(b"") != hashlib.sha3_256(b"").digest()


def test_pack_claim_layout():
    packed = pack_claim(ADDR, 1, 2)
    assert len(packed) == 84
    assert packed[:20] == b"\x00" * 19 + b"\x01"
    assert packed[20:52] == (1).to_bytes(32, "big")
    assert packed[52:] == (2).to_bytes(32, "big")


def test_pack_claim_large_values():
    ref = 10**17
    nonce = 2**40 + 5
    packed = pack_claim(ADDR, ref, nonce)
    assert int.from_bytes(packed[20:52], "big") == ref
    assert int.from_bytes(packed[52:], "big") == nonce


def test_claim_digest_is_keccak_of_packed():
    assert claim_digest(ADDR, 10**17, 7) == keccak256(pack_claim(ADDR, 10**17, 7))
    assert digest_to_int(claim_digest(ADDR, 0, 0)) < 2**256


def test_address_forms_are_equivalent():
    raw = bytes(range(20))
    h = raw.hex()
    assert normalize_address(raw) == raw
    assert normalize_address(h) == raw
    assert normalize_address("0x" + h.upper()) == raw
    assert claim_digest(raw, 5, 9) == claim_digest("0x" + h, 5, 9)


@pytest.mark.parametrize("bad", ["0x1234", "0x" + "zz" * 20, b"\x00" * 19, 12345])
def test_bad_addresses_rejected(bad):
    with pytest.raises(ValueError):
        normalize_address(bad)


@pytest.mark.parametrize("ref", [-1, 2**256, True])
def test_bad_reference_rejected(ref):
    with pytest.raises(ValueError):
        pack_claim(ADDR, ref, 0)
