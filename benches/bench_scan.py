from __future__ import annotations

from faucet_miner.difficulty import target
from faucet_miner.scan import find_nonce_bounded
from faucet_miner.submission import ClaimMsg, parse_json_line

ADDR = b"\x00" * 19 + b"\x01"


def test_bench_bounded_scan_1000(benchmark):
    # unreachable target: always scans the whole batch
    benchmark(find_nonce_bounded, ADDR, 10**17, 0, 0, 1000)


def test_bench_first_nonce_difficulty_2(benchmark):
    benchmark(find_nonce_bounded, ADDR, 10**17, target(2), 0, 100_000)


def test_bench_claim_codec(benchmark):
    line = ClaimMsg("0x" + ADDR.hex(), 10**17, 12345, "0x" + "ab" * 32).to_json_line()
    benchmark(parse_json_line, line)
