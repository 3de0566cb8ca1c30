"""
Canonical JSON encoding.

Semantically identical report bodies must produce identical bytes so that
their hashes and signatures are reproducible.

Rules:
- Object keys sorted lexicographically (Unicode code point order)
- No whitespace between tokens
- UTF-8 encoding, no BOM
- Arrays preserve order
- Enums encode as their value
"""

import json
from enum import Enum
from typing import Any, Dict, List, Union


def canonicalize(obj: Any) -> bytes:
    """Return the UTF-8 bytes of the canonical JSON form of ``obj``."""
    canonical = _canonicalize_value(obj)
    return json.dumps(canonical, separators=(',', ':'), ensure_ascii=False).encode('utf-8')


def canonicalize_str(obj: Any) -> str:
    return canonicalize(obj).decode('utf-8')


def _canonicalize_value(value: Any) -> Any:
    if value is None:
        return None
    elif isinstance(value, Enum):
        return _canonicalize_value(value.value)
    elif isinstance(value, bool):
        return value
    elif isinstance(value, int):
        return value
    elif isinstance(value, float):
        # Scores and confidences are integers; floats would make hashes
        # depend on repr precision.
        raise ValueError(f"Cannot canonicalize float: {value!r}")
    elif isinstance(value, str):
        return value
    elif isinstance(value, bytes):
        return value.hex()
    elif isinstance(value, dict):
        return _canonicalize_object(value)
    elif isinstance(value, (list, tuple)):
        return _canonicalize_array(value)
    else:
        raise ValueError(f"Cannot canonicalize type: {type(value)}")


def _canonicalize_object(obj: Dict[str, Any]) -> Dict[str, Any]:
    for key in obj:
        if not isinstance(key, str):
            raise ValueError(f"Object keys must be strings, got {type(key)}")
    return {k: _canonicalize_value(obj[k]) for k in sorted(obj.keys())}


def _canonicalize_array(arr: Union[List, tuple]) -> List:
    return [_canonicalize_value(item) for item in arr]
