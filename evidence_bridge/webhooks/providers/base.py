# evidence_bridge/webhooks/providers/base.py
"""
Webhook provider contract and shared payload helpers.
"""

import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from ...errors import PayloadParseError
from ...evidence.canonical import canonical_json
from ...events.models import NormalizedEvent


class WebhookProvider(Protocol):
    """Validates and parses events from one webhook source."""

    name: str
    # True for providers that match every request (must be registered last)
    catch_all: bool

    def matches(self, headers: Mapping[str, str]) -> bool:
        """True if this provider handles a request with these (lower-cased) headers."""
        ...

    def validate(self, headers: Mapping[str, str], body: str) -> None:
        """Check signature/token. Raises SignatureValidationError on failure."""
        ...

    def parse(self, headers: Mapping[str, str], body: str) -> NormalizedEvent:
        """Parse the body into a NormalizedEvent."""
        ...


def parse_json_object(body: str, provider: str) -> Dict[str, Any]:
    """
    Decode a webhook body that must be a JSON object.

    The payload must also have a canonical JSON form:
    NaN, Infinity and lone surrogate escapes such as "\\ud800" are rejected.
    """
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        raise PayloadParseError(f"{provider} webhook body is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise PayloadParseError(f"{provider} webhook body must be a JSON object")
    try:
        canonical_json(payload)
    except ValueError as e:
        raise PayloadParseError(f"{provider} webhook body cannot be hashed: {e}") from e
    return payload


def extract(obj: Any, path: str) -> Any:
    """Follow a dot-separated path through nested dicts; None when it breaks."""
    current = obj
    for key in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def extract_string(obj: Any, path: str) -> Optional[str]:
    """Nested string property, or None if the path does not resolve to a string."""
    value = extract(obj, path)
    return value if isinstance(value, str) else None


def extract_int(obj: Any, path: str) -> Optional[int]:
    """Nested integer property (booleans excluded), or None."""
    value = extract(obj, path)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def string_list(values: Any, key: Optional[str] = None) -> List[str]:
    """Strings from a list, optionally taken from `key` of each dict entry."""
    if not isinstance(values, list):
        return []
    result = []
    for value in values:
        if key is not None:
            value = value.get(key) if isinstance(value, dict) else None
        if isinstance(value, str):
            result.append(value)
    return result


def collect_changed_files(commits: Any) -> List[str]:
    """
    Unique changed paths across commits, in first-seen order.

    Merges the "added", "removed" and "modified" lists of every commit.
    """
    files: Dict[str, None] = {}
    if not isinstance(commits, list):
        return []
    for commit in commits:
        if not isinstance(commit, dict):
            continue
        for key in ("added", "removed", "modified"):
            for path in string_list(commit.get(key)):
                files.setdefault(path, None)
    return list(files)


def first_string(values: Iterable[Optional[str]]) -> Optional[str]:
    for value in values:
        if value is not None:
            return value
    return None
