from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
import threading
import time
from concurrent.futures import Executor, ProcessPoolExecutor
from dataclasses import dataclass
from typing import Generator, Optional, TypeVar, Union

from .config import DEFAULT_CONFIG, SearchConfig
from .difficulty import target
from .errors import InvalidDifficulty
from .hashing import AddressLike, claim_digest, normalize_address, uint256_be
from .progress import ProgressCallback, ProgressReporter
from .scan import SearchResult
from .scan_auto import find_nonce_bounded_auto

log = logging.getLogger(__name__)

T = TypeVar("T")


class SearchState(enum.Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    FOUND = "found"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class SearchCancelled:
    """Terminal outcome of a search stopped through its CancelToken."""

    iterations: int


Outcome = Union[SearchResult, SearchCancelled]


class CancelToken:
    """Cooperative cancellation flag, polled at batch boundaries."""

    def __init__(self) -> None:
        self._evt = threading.Event()

    def cancel(self) -> None:
        self._evt.set()

    @property
    def cancelled(self) -> bool:
        return self._evt.is_set()


# A step generator yields once per batch boundary and returns its outcome.
Steps = Generator[None, None, T]


def drive(steps: Steps[T]) -> T:
    while True:
        try:
            next(steps)
        except StopIteration as stop:
            return stop.value
        # hand the GIL to other threads
        time.sleep(0)


async def drive_async(steps: Steps[T]) -> T:
    while True:
        try:
            next(steps)
        except StopIteration as stop:
            return stop.value
        await asyncio.sleep(0)


def worker_pool(workers: int) -> contextlib.AbstractContextManager:
    if workers <= 1:
        return contextlib.nullcontext(None)
    return ProcessPoolExecutor(max_workers=workers)


class NonceSearcher:
    """
    Sequential nonce search for one (address, reference_value, difficulty).

    Nonces are tried in ascending order from zero, so a given triple always
    yields the same winning nonce. Between batches of config.batch_size
    attempts the search offers a progress sample, suspends, then checks
    the cancel token.
    """

    def __init__(
        self,
        address: AddressLike,
        reference_value: int,
        difficulty: int,
        config: Optional[SearchConfig] = None,
    ):
        self.address = normalize_address(address)
        uint256_be(reference_value, "reference_value")
        self.reference_value = reference_value
        self.difficulty = difficulty
        self.config = config or DEFAULT_CONFIG
        self.state = SearchState.IDLE

    def _target(self) -> int:
        try:
            return target(self.difficulty)
        except InvalidDifficulty:
            self.state = SearchState.FAILED
            log.info("rejected difficulty=%r", self.difficulty)
            raise

    def steps(
        self,
        target_int: int,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancelToken] = None,
        executor: Optional[Executor] = None,
    ) -> Steps[Outcome]:
        cfg = self.config
        batch = cfg.batch_size
        workers = cfg.workers if executor is not None else 1
        reporter = ProgressReporter(self.difficulty, on_progress, cfg.progress_interval_s)

        self.state = SearchState.SEARCHING
        log.debug(
            "search start difficulty=%d target=%x backend=%s",
            self.difficulty,
            target_int,
            "process-pool" if workers > 1 else "python",
        )

        nonce = 0
        iterations = 0
        while True:
            if iterations:
                reporter.offer(
                    nonce - 1,
                    iterations,
                    lambda n=nonce - 1: claim_digest(self.address, self.reference_value, n),
                )
            yield

            if cancel_token is not None and cancel_token.cancelled:
                self.state = SearchState.CANCELLED
                log.info("search cancelled after %d iterations", iterations)
                return SearchCancelled(iterations=iterations)

            scan = find_nonce_bounded_auto(
                self.address,
                self.reference_value,
                target_int,
                start_nonce=nonce,
                count=batch,
                executor=executor,
                workers=workers,
            )
            iterations += scan.attempts

            if scan.found is not None:
                self.state = SearchState.FOUND
                log.info(
                    "found valid nonce=%d iterations=%d elapsed=%.3fs",
                    scan.found.nonce,
                    iterations,
                    reporter.elapsed_s(),
                )
                return SearchResult(nonce=scan.found.nonce, digest=scan.found.digest, iterations=iterations)

            nonce += batch

    def search(
        self,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> Outcome:
        target_int = self._target()
        with worker_pool(self.config.workers) as executor:
            return drive(self.steps(target_int, on_progress, cancel_token, executor))

    async def search_async(
        self,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> Outcome:
        target_int = self._target()
        with worker_pool(self.config.workers) as executor:
            return await drive_async(self.steps(target_int, on_progress, cancel_token, executor))


def search(
    address: AddressLike,
    reference_value: int,
    difficulty: int,
    on_progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancelToken] = None,
    *,
    config: Optional[SearchConfig] = None,
) -> Outcome:
    return NonceSearcher(address, reference_value, difficulty, config).search(on_progress, cancel_token)


async def search_async(
    address: AddressLike,
    reference_value: int,
    difficulty: int,
    on_progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancelToken] = None,
    *,
    config: Optional[SearchConfig] = None,
) -> Outcome:
    s = NonceSearcher(address, reference_value, difficulty, config)
    return await s.search_async(on_progress, cancel_token)
