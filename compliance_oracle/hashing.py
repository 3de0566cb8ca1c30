"""
Report hashing.

All hashes are SHA-256 with lowercase hexadecimal output and a
``sha256:`` prefix.
"""

import hashlib
from typing import Any, Union

from .canonicalization import canonicalize


def sha256_hash(data: Union[bytes, str]) -> str:
    if isinstance(data, str):
        data = data.encode('utf-8')
    return f"sha256:{hashlib.sha256(data).hexdigest()}"


def evidence_digest(data: Union[bytes, str]) -> bytes:
    """
    Raw 32-byte digest of off-chain evidence.

    Convenience for callers preparing a submission; the engine itself only
    stores digests and never re-derives them.
    """
    if isinstance(data, str):
        data = data.encode('utf-8')
    return hashlib.sha256(data).digest()


def report_hash(body: Any) -> str:
    """SHA-256 over the canonical encoding of a report body."""
    return sha256_hash(canonicalize(body))


def verify_hash(declared_hash: str, body: Any) -> bool:
    if not declared_hash.startswith("sha256:"):
        return False
    return report_hash(body) == declared_hash
