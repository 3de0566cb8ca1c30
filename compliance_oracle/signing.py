"""
Intelligence report signing.

Uses Ed25519 (RFC 8032) via PyNaCl. Signatures cover the canonical JSON
of a compiled report body, so any consumer holding the trust store can
check that a report was issued by this engine and not altered.
"""

import base64
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from .hashing import report_hash


@dataclass
class KeyPair:
    """Ed25519 key pair."""
    key_id: str
    signing_key: bytes
    verify_key: bytes
    valid_from: datetime
    valid_until: datetime
    algorithm: str = "Ed25519"

    def to_trust_store_entry(self) -> Dict[str, Any]:
        return {
            "key_id": self.key_id,
            "algorithm": self.algorithm,
            "public_key": base64.b64encode(self.verify_key).decode('utf-8'),
            "valid_from": self.valid_from.isoformat().replace("+00:00", "Z"),
            "valid_until": self.valid_until.isoformat().replace("+00:00", "Z"),
            "key_usage": ["sign_intelligence_reports"]
        }


class SigningService:
    """
    Holds report-signing keys and signs with the active one.

    Key validity is wall-clock based: it concerns key management, not the
    engine's logical clock.
    """

    def __init__(self):
        self._keys: Dict[str, KeyPair] = {}
        self._active_key_id: Optional[str] = None

    @property
    def active_key_id(self) -> Optional[str]:
        return self._active_key_id

    def generate_key_pair(self, key_id: str, validity_days: int = 90) -> KeyPair:
        signing_key = SigningKey.generate()
        return self.import_key_pair(key_id, bytes(signing_key), validity_days)

    def import_key_pair(self, key_id: str, seed: bytes, validity_days: int = 90) -> KeyPair:
        """Register a key from its 32-byte seed."""
        signing_key = SigningKey(seed)
        now = datetime.now(timezone.utc)

        key_pair = KeyPair(
            key_id=key_id,
            signing_key=bytes(signing_key),
            verify_key=bytes(signing_key.verify_key),
            valid_from=now,
            valid_until=now + timedelta(days=validity_days),
        )
        self._keys[key_id] = key_pair
        if self._active_key_id is None:
            self._active_key_id = key_id
        return key_pair

    def set_active_key(self, key_id: str):
        if key_id not in self._keys:
            raise ValueError(f"Key not found: {key_id}")
        self._active_key_id = key_id

    def sign(self, data: bytes, key_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Sign data with Ed25519.

        Returns:
            Signature dict with key_id, algorithm, and base64 signature
        """
        key_id = key_id or self._active_key_id
        if not key_id:
            raise ValueError("No signing key available")

        key_pair = self._keys.get(key_id)
        if not key_pair:
            raise ValueError(f"Key not found: {key_id}")

        now = datetime.now(timezone.utc)
        if now < key_pair.valid_from or now > key_pair.valid_until:
            raise ValueError(f"Key {key_id} is not currently valid")

        signature = SigningKey(key_pair.signing_key).sign(data).signature
        return {
            "key_id": key_id,
            "algorithm": "Ed25519",
            "sig": base64.b64encode(signature).decode('utf-8')
        }

    def get_trust_store(self) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        store = {
            "trust_store_version": now.strftime("%Y-%m-%d-001"),
            "effective_from": now.isoformat().replace("+00:00", "Z"),
            "keys": [kp.to_trust_store_entry() for kp in self._keys.values()]
        }
        store["trust_store_hash"] = report_hash(store)
        return store


def verify_signature(data: bytes, signature_b64: str, verify_key_b64: str) -> bool:
    """Verify an Ed25519 signature given base64 signature and public key."""
    try:
        signature = base64.b64decode(signature_b64)
        verify_key = VerifyKey(base64.b64decode(verify_key_b64))
        verify_key.verify(data, signature)
        return True
    except (BadSignatureError, ValueError, TypeError):
        return False
