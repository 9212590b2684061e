from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from Crypto.Hash import keccak

from .hashing import AddressLike, UINT256_MAX, digest_hex, normalize_address, uint256_be


@dataclass(frozen=True)
class SearchResult:
    nonce: int
    digest: bytes
    iterations: int

    @property
    def hash_int(self) -> int:
        return int.from_bytes(self.digest, "big")

    @property
    def hash_hex(self) -> str:
        return digest_hex(self.digest)


def find_nonce_bounded(
    address: AddressLike,
    reference_value: int,
    target_int: int,
    start_nonce: int,
    count: int,
    step: int = 1,
) -> Optional[SearchResult]:
    """
    Brute-force scan nonces start_nonce, start_nonce+step, ... (count attempts)
    for keccak256(address || reference_value || nonce) < target_int.

    - address: 20-byte claimant address (bytes or hex).
    - reference_value: uint256 mixed into every hash (balance or block number).
    - target_int: exclusive 256-bit target.
    - step: stride between nonces; > 1 when a worker owns one residue class.

    Returns the first SearchResult found (iterations = attempts made in this
    scan, including the winning one), else None.
    """
    if count <= 0:
        return None
    if step <= 0:
        raise ValueError("step must be > 0")
    if start_nonce < 0:
        raise ValueError("start_nonce must be >= 0")

    prefix = normalize_address(address) + uint256_be(reference_value, "reference_value")
    last = start_nonce + (count - 1) * step
    if last > UINT256_MAX:
        raise ValueError("nonce range exceeds uint256")

    # stack-local bindings for the hot loop
    _new = keccak.new
    _from_bytes = int.from_bytes

    n = start_nonce
    for i in range(count):
        h = _new(digest_bits=256, data=prefix + n.to_bytes(32, "big")).digest()
        if _from_bytes(h, "big") < target_int:
            return SearchResult(nonce=n, digest=h, iterations=i + 1)
        n += step

    return None
