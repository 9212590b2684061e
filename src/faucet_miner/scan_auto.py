from __future__ import annotations

from concurrent.futures import Executor
from dataclasses import dataclass
from typing import List, Literal, Optional

from .hashing import AddressLike
from .scan import SearchResult, find_nonce_bounded


Backend = Literal["python", "process-pool"]


@dataclass(frozen=True)
class ScanResult:
    found: Optional[SearchResult]
    attempts: int
    backend: Backend


def _stride_counts(count: int, workers: int) -> List[int]:
    # worker k owns offsets k, k+W, k+2W, ... of a count-long range
    return [max(0, (count - k + workers - 1) // workers) for k in range(workers)]


def find_nonce_bounded_auto(
    address: AddressLike,
    reference_value: int,
    target_int: int,
    start_nonce: int,
    count: int,
    executor: Optional[Executor] = None,
    workers: int = 1,
) -> ScanResult:
    """
    Unified API:
      - fans the range [start_nonce, start_nonce+count) out over `executor`
        when workers > 1, worker k taking nonces congruent to k mod workers
      - otherwise scans sequentially in-process

    With several workers the lowest winning nonce in the range is kept, so
    the answer matches the sequential scan; attempts counts every hash the
    workers computed.
    """
    if executor is None or workers <= 1:
        r = find_nonce_bounded(address, reference_value, target_int, start_nonce, count)
        attempts = r.iterations if r is not None else max(0, count)
        return ScanResult(found=r, attempts=attempts, backend="python")

    counts = _stride_counts(count, workers)
    futures = [
        executor.submit(
            find_nonce_bounded,
            address,
            reference_value,
            target_int,
            start_nonce + k,
            counts[k],
            workers,
        )
        for k in range(workers)
        if counts[k] > 0
    ]

    best: Optional[SearchResult] = None
    attempts = 0
    for fut, n in zip(futures, [c for c in counts if c > 0]):
        r = fut.result()
        if r is None:
            attempts += n
            continue
        attempts += r.iterations
        if best is None or r.nonce < best.nonce:
            best = r

    return ScanResult(found=best, attempts=attempts, backend="process-pool")
