# evidence_bridge/evidence/canonical.py
"""
Canonical JSON for hashing.

Deterministic, key-order independent serialization:
- object keys sorted by codepoint
- arrays keep element order
- no insignificant whitespace
- integral floats rendered as integers (1.0 -> 1, 1e16 -> 10000000000000000),
  the way ECMAScript JSON.stringify renders them below 1e21
- strings must be encodable as UTF-8 (no lone surrogates)

Used ONLY to produce hash input. Never use it for display.
"""

import json
import math
from typing import Any

# JSON.stringify switches to exponent notation at this magnitude
_EXPONENT_THRESHOLD = 1e21


def _check_string(value: str) -> str:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValueError(f"String is not valid Unicode text: {e}") from e
    return value


def _normalize(value: Any) -> Any:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        return _check_string(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Non-finite number has no canonical JSON form: {value!r}")
        if value.is_integer() and abs(value) < _EXPONENT_THRESHOLD:
            return int(value)
        return value
    if isinstance(value, dict):
        normalized = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"Canonical JSON object keys must be strings, got {type(key).__name__}")
            normalized[_check_string(key)] = _normalize(item)
        return normalized
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    raise TypeError(f"Value of type {type(value).__name__} is not JSON serializable")


def canonical_json(value: Any) -> str:
    """
    Serialize a JSON-compatible value canonically.

    Args:
        value: dict / list / tuple / str / int / float / bool / None, nested

    Returns:
        Canonical JSON string

    Raises:
        TypeError: Non-JSON types or non-string object keys
        ValueError: NaN or infinite floats, strings with lone surrogates

    Example:
        >>> canonical_json({"b": 1, "a": [True, None]})
        '{"a":[true,null],"b":1}'
    """
    return json.dumps(
        _normalize(value),
        ensure_ascii=False,
        sort_keys=True,
        separators=(",", ":"),
        allow_nan=False,
    )
