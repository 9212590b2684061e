from concurrent.futures import ProcessPoolExecutor

from faucet_miner.difficulty import target
from faucet_miner.hashing import claim_digest
from faucet_miner.scan import find_nonce_bounded
from faucet_miner.scan_auto import _stride_counts, find_nonce_bounded_auto
from faucet_miner.verify import is_valid

ADDR = "0x" + "00" * 19 + "01"


def test_everything_meets_unbounded_target():
    r = find_nonce_bounded(ADDR, 42, target(0), start_nonce=7, count=10)
    assert r is not None
    assert r.nonce == 7
    assert r.iterations == 1
    assert r.digest == claim_digest(ADDR, 42, 7)
    assert r.hash_hex == "0x" + r.digest.hex()


def test_nothing_meets_zero_target():
    assert find_nonce_bounded(ADDR, 42, 0, start_nonce=0, count=50) is None


def test_empty_range():
    assert find_nonce_bounded(ADDR, 42, target(0), start_nonce=0, count=0) is None


def test_bounded_scan_finds_first_valid_nonce():
    r = find_nonce_bounded(ADDR, 10**17, target(2), start_nonce=0, count=20_000)
    assert r is not None
    assert is_valid(ADDR, 10**17, r.nonce, 2)
    assert r.iterations == r.nonce + 1
    assert not any(is_valid(ADDR, 10**17, n, 2) for n in range(r.nonce))


def test_strided_scan_only_visits_its_residue():
    r = find_nonce_bounded(ADDR, 10**17, target(2), start_nonce=1, count=10_000, step=2)
    assert r is not None
    assert r.nonce % 2 == 1
    assert is_valid(ADDR, 10**17, r.nonce, 2)
    assert not any(is_valid(ADDR, 10**17, n, 2) for n in range(1, r.nonce, 2))


def test_stride_counts():
    assert _stride_counts(10, 3) == [4, 3, 3]
    assert _stride_counts(2, 4) == [1, 1, 0, 0]
    assert sum(_stride_counts(1000, 7)) == 1000


def test_auto_without_executor_is_python():
    res = find_nonce_bounded_auto(ADDR, 5, 0, start_nonce=0, count=100)
    assert res.backend == "python"
    assert res.found is None
    assert res.attempts == 100


def test_process_pool_matches_python():
    tgt = target(2)
    py = find_nonce_bounded_auto(ADDR, 123, tgt, start_nonce=0, count=5000)
    with ProcessPoolExecutor(max_workers=2) as ex:
        pp = find_nonce_bounded_auto(ADDR, 123, tgt, start_nonce=0, count=5000, executor=ex, workers=2)

    assert pp.backend == "process-pool"
    if py.found is None:
        assert pp.found is None
    else:
        assert pp.found is not None
        assert pp.found.nonce == py.found.nonce
        assert pp.found.digest == py.found.digest
        assert pp.attempts >= 1


def test_hash_int_matches_digest():
    r = find_nonce_bounded(ADDR, 42, target(0), start_nonce=3, count=1)
    assert r.hash_int == int.from_bytes(claim_digest(ADDR, 42, 3), "big")
