"""
Bounded sequence helpers.

Input sequences over their cap are rejected; derived output lists are
truncated at their cap.
"""

from typing import Iterable, List, Sequence, TypeVar

from .config import EVIDENCE_DIGEST_BYTES, SCORE_MAX, SCORE_MIN
from .errors import InvalidDataError

T = TypeVar("T")


def bounded(values: Sequence[T], cap: int, field_name: str, allow_empty: bool = True) -> List[T]:
    """Return ``values`` as a list, rejecting sequences longer than ``cap``."""
    if values is None or isinstance(values, (str, bytes, dict)):
        raise InvalidDataError(f"{field_name} must be a sequence")
    items = list(values)
    if not allow_empty and not items:
        raise InvalidDataError(f"{field_name} cannot be empty")
    if len(items) > cap:
        raise InvalidDataError(f"{field_name} exceeds {cap} entries ({len(items)})")
    return items


def capped_append(items: List[T], value: T, cap: int) -> bool:
    """Append unless the list is full. Returns whether the value was kept."""
    if len(items) >= cap:
        return False
    items.append(value)
    return True


def validate_metrics(metrics: Iterable[int], cap: int) -> List[int]:
    items = bounded(metrics, cap, "metrics", allow_empty=False)
    for m in items:
        if isinstance(m, bool) or not isinstance(m, int):
            raise InvalidDataError(f"metric {m!r} is not an integer")
        if m < SCORE_MIN or m > SCORE_MAX:
            raise InvalidDataError(f"metric {m} outside [{SCORE_MIN}, {SCORE_MAX}]")
    return items


def validate_findings(findings: Iterable[int], cap: int) -> List[int]:
    items = bounded(findings, cap, "findings")
    for f in items:
        if isinstance(f, bool) or not isinstance(f, int) or f < 0:
            raise InvalidDataError(f"finding {f!r} is not a non-negative integer")
    return items


def validate_digest(digest: bytes) -> bytes:
    """Evidence digests are opaque, fixed-size byte strings."""
    if not isinstance(digest, (bytes, bytearray)):
        raise InvalidDataError("evidence digest must be bytes")
    if len(digest) != EVIDENCE_DIGEST_BYTES:
        raise InvalidDataError(
            f"evidence digest must be {EVIDENCE_DIGEST_BYTES} bytes, got {len(digest)}"
        )
    return bytes(digest)
