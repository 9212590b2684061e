from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from .difficulty import check_difficulty
from .hashing import AddressLike, normalize_address, uint256_be


def parse_uint(value: Union[int, str], name: str = "value") -> int:
    """
    Integers arrive from RPC layers as ints, decimal strings or 0x-hex strings.
    """
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise ValueError(f"{name} must be an int or str, got {type(value)}")
    s = value.strip()
    try:
        if s[:2] in ("0x", "0X"):
            return int(s, 16)
        return int(s, 10)
    except ValueError as e:
        raise ValueError(f"{name} is not an integer: {value!r}") from e


@dataclass(frozen=True)
class ClaimJob:
    """Everything one search needs from the outside world."""

    address: bytes
    reference_value: int
    difficulty: int

    @staticmethod
    def create(address: AddressLike, reference_value: int, difficulty: int) -> "ClaimJob":
        uint256_be(reference_value, "reference_value")
        return ClaimJob(
            address=normalize_address(address),
            reference_value=reference_value,
            difficulty=check_difficulty(difficulty),
        )

    @staticmethod
    def from_mapping(d: Mapping[str, Any]) -> "ClaimJob":
        # balance-bound and block-bound faucets name the reference differently
        for key in ("reference_value", "balance", "block_number"):
            if key in d:
                ref = parse_uint(d[key], key)
                break
        else:
            raise ValueError("missing reference_value / balance / block_number")
        if "address" not in d or "difficulty" not in d:
            raise ValueError("missing address or difficulty")
        return ClaimJob.create(
            address=d["address"],
            reference_value=ref,
            difficulty=parse_uint(d["difficulty"], "difficulty"),
        )

    @property
    def address_hex(self) -> str:
        return "0x" + self.address.hex()
