from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

from .config import DEFAULT_CONFIG, SearchConfig
from .difficulty import target
from .errors import SearchExhausted
from .hashing import AddressLike, claim_digest, digest_hex, normalize_address, uint256_be
from .progress import ProgressCallback, ProgressReporter
from .scan import SearchResult, find_nonce_bounded
from .searcher import CancelToken, SearchCancelled, Steps, drive, drive_async

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateResult:
    reference_value: int
    nonce: int
    digest: bytes
    iterations: int

    @property
    def hash_hex(self) -> str:
        return digest_hex(self.digest)


@dataclass
class _Candidate:
    reference_value: int
    next_nonce: int = 0
    found: Optional[SearchResult] = field(default=None)

    def active(self, cap: int) -> bool:
        return self.found is None and self.next_nonce < cap


WindowOutcome = Union[CandidateResult, SearchCancelled]


def _window_steps(
    address: bytes,
    reference_values: List[int],
    difficulty: int,
    target_int: int,
    cfg: SearchConfig,
    per_candidate_cap: int,
    on_progress: Optional[ProgressCallback],
    cancel_token: Optional[CancelToken],
) -> Steps[WindowOutcome]:
    """
    Round-robin over the candidates, one batch each per round; every batch
    ends at a suspension point like the single-reference search.

    The lowest reference value with a solution wins, so once candidate i is
    solved every candidate above it is dropped, and the window finishes when
    nothing below the best solution is still searchable.
    """
    cands = [_Candidate(rv) for rv in reference_values]
    reporter = ProgressReporter(difficulty, on_progress, cfg.progress_interval_s)
    iterations = 0
    last: Optional[_Candidate] = None

    while True:
        best = next((c for c in cands if c.found is not None), None)
        pending = [
            c for c in cands
            if c.active(per_candidate_cap) and (best is None or c.reference_value < best.reference_value)
        ]
        if not pending:
            break

        for c in pending:
            if last is not None:
                cur = last
                reporter.offer(
                    cur.next_nonce - 1,
                    iterations,
                    lambda p=cur: claim_digest(address, p.reference_value, p.next_nonce - 1),
                    reference_value=cur.reference_value,
                )
            yield

            if cancel_token is not None and cancel_token.cancelled:
                log.info("window search cancelled after %d iterations", iterations)
                return SearchCancelled(iterations=iterations)

            count = min(cfg.batch_size, per_candidate_cap - c.next_nonce)
            r = find_nonce_bounded(address, c.reference_value, target_int, c.next_nonce, count)
            last = c
            if r is None:
                iterations += count
                c.next_nonce += count
                continue

            iterations += r.iterations
            c.next_nonce = r.nonce + 1
            c.found = r
            log.info("found valid nonce=%d for reference=%d", r.nonce, c.reference_value)
            # higher candidates can no longer win
            break

    best = next((c for c in cands if c.found is not None), None)
    if best is None:
        log.info(
            "window %d..%d exhausted after %d iterations",
            reference_values[0],
            reference_values[-1],
            iterations,
        )
        raise SearchExhausted(reference_values[0], reference_values[-1], iterations)

    assert best.found is not None
    return CandidateResult(
        reference_value=best.reference_value,
        nonce=best.found.nonce,
        digest=best.found.digest,
        iterations=iterations,
    )


def _prepare(
    address: AddressLike,
    reference_values: Iterable[int],
    difficulty: int,
    per_candidate_cap: Optional[int],
    config: Optional[SearchConfig],
):
    cfg = config or DEFAULT_CONFIG
    cap = cfg.per_candidate_cap if per_candidate_cap is None else int(per_candidate_cap)
    if cap < 1:
        raise ValueError("per_candidate_cap must be >= 1")
    raw = list(reference_values)
    for v in raw:
        uint256_be(v, "reference_value")
    values = sorted(set(raw))
    if not values:
        raise ValueError("need at least one reference value")
    return normalize_address(address), values, target(difficulty), cfg, cap


def search_candidates(
    address: AddressLike,
    reference_values: Iterable[int],
    difficulty: int,
    per_candidate_cap: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancelToken] = None,
    *,
    config: Optional[SearchConfig] = None,
) -> WindowOutcome:
    addr, values, tgt, cfg, cap = _prepare(address, reference_values, difficulty, per_candidate_cap, config)
    return drive(_window_steps(addr, values, difficulty, tgt, cfg, cap, on_progress, cancel_token))


async def search_candidates_async(
    address: AddressLike,
    reference_values: Iterable[int],
    difficulty: int,
    per_candidate_cap: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancelToken] = None,
    *,
    config: Optional[SearchConfig] = None,
) -> WindowOutcome:
    addr, values, tgt, cfg, cap = _prepare(address, reference_values, difficulty, per_candidate_cap, config)
    return await drive_async(_window_steps(addr, values, difficulty, tgt, cfg, cap, on_progress, cancel_token))


def _window(start_reference: int, window: int) -> range:
    if window < 1:
        raise ValueError("window must be >= 1")
    return range(start_reference, start_reference + window)


def search_window(
    address: AddressLike,
    start_reference: int,
    difficulty: int,
    window: Optional[int] = None,
    per_candidate_cap: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancelToken] = None,
    *,
    config: Optional[SearchConfig] = None,
) -> WindowOutcome:
    """
    Search start_reference .. start_reference + window - 1 (e.g. upcoming
    block numbers) and return the lowest reference value that has a solution.
    Raises SearchExhausted if none does within per_candidate_cap nonces each.
    """
    cfg = config or DEFAULT_CONFIG
    values = _window(start_reference, cfg.window if window is None else window)
    return search_candidates(
        address, values, difficulty, per_candidate_cap, on_progress, cancel_token, config=cfg
    )


async def search_window_async(
    address: AddressLike,
    start_reference: int,
    difficulty: int,
    window: Optional[int] = None,
    per_candidate_cap: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancelToken] = None,
    *,
    config: Optional[SearchConfig] = None,
) -> WindowOutcome:
    cfg = config or DEFAULT_CONFIG
    values = _window(start_reference, cfg.window if window is None else window)
    return await search_candidates_async(
        address, values, difficulty, per_candidate_cap, on_progress, cancel_token, config=cfg
    )
