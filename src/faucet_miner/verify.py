from __future__ import annotations

from .difficulty import meets_target, target
from .hashing import AddressLike, claim_digest
from .scan import SearchResult


def is_valid(address: AddressLike, reference_value: int, nonce: int, difficulty: int) -> bool:
    """Same predicate the faucet contract applies to a claim."""
    return meets_target(claim_digest(address, reference_value, nonce), target(difficulty))


def check_result(
    address: AddressLike,
    reference_value: int,
    result: SearchResult,
    difficulty: int,
) -> bool:
    """is_valid, and the reported digest must be the one the nonce really produces."""
    if claim_digest(address, reference_value, result.nonce) != result.digest:
        return False
    return result.hash_int < target(difficulty)
