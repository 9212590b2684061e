from __future__ import annotations

from faucet_miner.hashing import claim_digest, keccak256, pack_claim

ADDR = b"\x00" * 19 + b"\x01"


def test_bench_keccak256_84bytes(benchmark):
    data = b"\x00" * 84
    benchmark(keccak256, data)


def test_bench_claim_digest_nonce_loop_like(benchmark):
    state = {"nonce": 0}

    def work():
        # bump the nonce like the search loop does
        state["nonce"] += 1
        claim_digest(ADDR, 10**17, state["nonce"])

    benchmark(work)


def test_bench_pack_claim(benchmark):
    benchmark(pack_claim, ADDR, 10**17, 2**40)
