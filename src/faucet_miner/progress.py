from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from .difficulty import expected_iterations


@dataclass(frozen=True)
class ProgressSample:
    nonce: int
    digest: bytes
    iterations: int
    elapsed_ms: int
    hash_rate: float
    progress_percent: float
    reference_value: Optional[int] = None


ProgressCallback = Callable[[ProgressSample], None]


def progress_percent(iterations: int, difficulty: int) -> float:
    """
    Share of the expected work done, capped at 99 until a nonce is found:
    the expected count is a mean, not an upper bound.
    """
    return min(iterations / expected_iterations(difficulty) * 100.0, 99.0)


class ProgressReporter:
    """
    Rate-limited progress emitter.

    The search offers a sample at every batch boundary; the reporter forwards
    at most one per offer and none more often than min_interval_s.
    """

    def __init__(
        self,
        difficulty: int,
        callback: Optional[ProgressCallback],
        min_interval_s: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.difficulty = difficulty
        self.callback = callback
        self.min_interval_s = float(min_interval_s)
        self.clock = clock
        self.t0 = clock()
        self._last_emit: Optional[float] = None
        self.emitted = 0

    def elapsed_s(self) -> float:
        return max(0.0, self.clock() - self.t0)

    def hash_rate(self, iterations: int) -> float:
        dt = self.elapsed_s()
        return iterations / dt if dt > 0 else 0.0

    def _due(self, now: float) -> bool:
        if self._last_emit is None or self.min_interval_s <= 0:
            return True
        return (now - self._last_emit) >= self.min_interval_s

    def offer(
        self,
        nonce: int,
        iterations: int,
        digest_fn: Callable[[], bytes],
        reference_value: Optional[int] = None,
    ) -> bool:
        if self.callback is None:
            return False
        now = self.clock()
        if not self._due(now):
            return False

        dt = max(0.0, now - self.t0)
        sample = ProgressSample(
            nonce=nonce,
            digest=digest_fn(),
            iterations=iterations,
            elapsed_ms=int(dt * 1000),
            hash_rate=(iterations / dt) if dt > 0 else 0.0,
            progress_percent=progress_percent(iterations, self.difficulty),
            reference_value=reference_value,
        )
        self._last_emit = now
        self.emitted += 1
        self.callback(sample)
        return True
