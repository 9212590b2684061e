from __future__ import annotations

from typing import Union

from Crypto.Hash import keccak

UINT256_MAX = (1 << 256) - 1

AddressLike = Union[str, bytes, bytearray]


def keccak256(data: bytes) -> bytes:
    """
    Ethereum-style Keccak-256 (original padding, not NIST SHA3-256).
    Returns raw 32-byte digest.
    """
    return keccak.new(digest_bits=256, data=data).digest()


def normalize_address(value: AddressLike) -> bytes:
    """20-byte address from raw bytes or a 40-digit hex string (0x optional)."""
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise ValueError("address must be 20 bytes")
        return bytes(value)
    if not isinstance(value, str):
        raise ValueError(f"unsupported address type: {type(value)}")
    s = value[2:] if value[:2] in ("0x", "0X") else value
    if len(s) != 40:
        raise ValueError("address must be 40 hex chars")
    try:
        return bytes.fromhex(s)
    except ValueError as e:
        raise ValueError(f"address is not hex: {value!r}") from e


def uint256_be(value: int, name: str = "value") -> bytes:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an int")
    if value < 0 or value > UINT256_MAX:
        raise ValueError(f"{name} must fit in uint256")
    return value.to_bytes(32, "big")


def pack_claim(address: AddressLike, reference_value: int, nonce: int) -> bytes:
    """
    abi.encodePacked(address, uint256, uint256):
    address(20) || reference_value(32 BE) || nonce(32 BE) = 84 bytes
    """
    return (
        normalize_address(address)
        + uint256_be(reference_value, "reference_value")
        + uint256_be(nonce, "nonce")
    )


def claim_digest(address: AddressLike, reference_value: int, nonce: int) -> bytes:
    return keccak256(pack_claim(address, reference_value, nonce))


def digest_to_int(digest: bytes) -> int:
    """Interpret a 32-byte digest as a big-endian unsigned 256-bit integer."""
    if len(digest) != 32:
        raise ValueError("digest must be 32 bytes")
    return int.from_bytes(digest, "big")


def digest_hex(digest: bytes) -> str:
    return "0x" + digest.hex()
