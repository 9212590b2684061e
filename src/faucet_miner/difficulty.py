from __future__ import annotations

from .errors import InvalidDifficulty

# 4 bits per level; 64 would shift the target down to 2**0.
MAX_DIFFICULTY = 63

DEFAULT_ASSUMED_HASH_RATE = 50_000.0


def check_difficulty(difficulty: int) -> int:
    if not isinstance(difficulty, int) or isinstance(difficulty, bool):
        raise InvalidDifficulty(difficulty, "must be an int")
    if difficulty < 0:
        raise InvalidDifficulty(difficulty, "must be >= 0")
    if difficulty > MAX_DIFFICULTY:
        raise InvalidDifficulty(difficulty, f"must be <= {MAX_DIFFICULTY}")
    return difficulty


def target(difficulty: int) -> int:
    """
    Exclusive digest bound: valid iff int(digest) < 2**(256 - 4*difficulty).

    Difficulty 0 gives 2**256, which every 256-bit digest is below.
    """
    return 1 << (256 - 4 * check_difficulty(difficulty))


def expected_iterations(difficulty: int) -> int:
    return 1 << (4 * check_difficulty(difficulty))


def expected_time_seconds(
    difficulty: int, assumed_hash_rate: float = DEFAULT_ASSUMED_HASH_RATE
) -> float:
    """Rough wall-clock estimate for UI display only."""
    if not assumed_hash_rate > 0:
        raise ValueError("assumed_hash_rate must be > 0")
    return expected_iterations(difficulty) / float(assumed_hash_rate)


def meets_target(digest: bytes, target_int: int) -> bool:
    return int.from_bytes(digest, "big") < target_int


def format_duration(seconds: float) -> str:
    if seconds < 60:
        return f"{round(seconds)}s"
    if seconds < 3600:
        return f"{round(seconds / 60)}m"
    return f"{round(seconds / 3600)}h"
