from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Protocol, TextIO

from .hashing import digest_hex
from .job import ClaimJob, parse_uint
from .scan import SearchResult
from .verify import check_result


@dataclass(frozen=True)
class ClaimMsg:
    """What a transaction sender needs to call claim(nonce) on the faucet."""

    address: str
    reference_value: int
    nonce: int
    digest: str

    def to_json_line(self) -> bytes:
        # uint256 values as decimal strings so JS consumers keep full precision
        obj = {
            "address": self.address,
            "reference_value": str(self.reference_value),
            "nonce": str(self.nonce),
            "hash": self.digest,
        }
        return (json.dumps(obj, separators=(",", ":")) + "\n").encode("utf-8")

    @staticmethod
    def from_result(job: ClaimJob, result: SearchResult) -> "ClaimMsg":
        return ClaimMsg(
            address=job.address_hex,
            reference_value=job.reference_value,
            nonce=result.nonce,
            digest=digest_hex(result.digest),
        )


def parse_json_line(line: bytes) -> dict[str, Any]:
    return json.loads(line.decode("utf-8").strip())


def claim_from_json_line(line: bytes) -> ClaimMsg:
    obj = parse_json_line(line)
    return ClaimMsg(
        address=str(obj["address"]),
        reference_value=parse_uint(obj["reference_value"], "reference_value"),
        nonce=parse_uint(obj["nonce"], "nonce"),
        digest=str(obj["hash"]),
    )


class Submitter(Protocol):
    def submit(self, msg: ClaimMsg) -> bool: ...


class JsonLineSubmitter:
    """Writes one JSON line per claim for a downstream transaction sender."""

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.submitted = 0

    def submit(self, msg: ClaimMsg) -> bool:
        self.stream.write(msg.to_json_line().decode("utf-8"))
        self.stream.flush()
        self.submitted += 1
        return True


def submit_claim(submitter: Submitter, job: ClaimJob, result: SearchResult) -> bool:
    """
    Re-check the result locally, then hand it to the submitter.
    Raises ValueError instead of sending a claim the contract would reject.
    """
    if not check_result(job.address, job.reference_value, result, job.difficulty):
        raise ValueError(f"nonce {result.nonce} does not satisfy difficulty {job.difficulty}")
    return submitter.submit(ClaimMsg.from_result(job, result))
