from __future__ import annotations


class MinerError(Exception):
    """Base class for errors raised by the miner."""


class InvalidDifficulty(MinerError, ValueError):
    def __init__(self, difficulty: object, reason: str = "out of range"):
        self.difficulty = difficulty
        super().__init__(f"invalid difficulty {difficulty!r}: {reason}")


class SearchExhausted(MinerError):
    """
    No candidate in a reference-value window produced a valid nonce
    within the iteration budget.
    """

    def __init__(self, start: int, end: int, iterations: int):
        self.start = start
        self.end = end
        self.iterations = iterations
        super().__init__(
            f"no valid nonce found for reference values {start} to {end} "
            f"after {iterations} iterations"
        )
