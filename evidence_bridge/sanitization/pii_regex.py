# evidence_bridge/sanitization/pii_regex.py
"""
In-process regex PII redaction.

Redacted patterns:
- GitHub tokens
- AWS access key IDs
- Bearer tokens
- Social Security Numbers (SSN)
- Email addresses
- Phone numbers (US format)

Matches are replaced by [HIDDEN:<type>:<hmac8>] where hmac8 is the first
8 hex chars of HMAC-SHA256(salt, match). Equal secrets map to equal
tokens within one salt, so redacted evidence stays correlatable.

For JSON input only string values are redacted; numbers, keys and
structure are left alone so the result still parses.
"""

import hashlib
import hmac
import json
import re
from typing import Any, Dict, List, Pattern, Tuple

from ..evidence.hashing import compute_sha256
from .base import InputFormat, SanitizerRequest, SanitizerResult

# Order matters - more specific patterns first
PII_PATTERNS: List[Tuple[str, Pattern[str]]] = [
    ("github_token", re.compile(r"\b(?:gh[pousr]_[A-Za-z0-9]{36}|github_pat_[A-Za-z0-9_]{22,})\b")),
    ("aws_access_key", re.compile(r"\b(?:AKIA|ASIA)[A-Z0-9]{16}\b")),
    ("bearer_token", re.compile(r"\b[Bb]earer\s+[A-Za-z0-9\-._~+/]{8,}=*")),
    ("ssn", re.compile(r"\b\d{3}-\d{2}-\d{4}\b")),
    ("email", re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")),
    ("phone", re.compile(r"(?:\(\d{3}\)\s*\d{3}[-.]?\d{4}|\b\d{3}[-.]\d{3}[-.]\d{4}\b)")),
]

TOKEN_FORMAT = "[HIDDEN:<type>:<hmac8>]"


class RegexPIISanitizer:
    """Regex-based sanitizer running in-process."""

    engine_name = "regex-pii"
    engine_version = "1.0.0"
    method = "regex-in-process"
    token_format = TOKEN_FORMAT

    def __init__(self, salt: str = ""):
        self._salt = salt.encode("utf-8")

    def salt_fingerprint(self) -> str:
        """Fingerprint of the salt. The salt itself never leaves the sanitizer."""
        return compute_sha256(b"salt:" + self._salt)

    def _token(self, kind: str, match: str) -> str:
        digest = hmac.new(self._salt, match.encode("utf-8"), hashlib.sha256).hexdigest()
        return f"[HIDDEN:{kind}:{digest[:8]}]"

    def redact(self, text: str, counts: Dict[str, int]) -> str:
        """Redact one string, adding per-type counts to `counts`."""
        result = text
        for kind, pattern in PII_PATTERNS:
            def _replace(m, kind=kind):
                counts[kind] = counts.get(kind, 0) + 1
                return self._token(kind, m.group(0))
            result = pattern.sub(_replace, result)
        return result

    def _redact_value(self, value: Any, counts: Dict[str, int]) -> Any:
        if isinstance(value, str):
            return self.redact(value, counts)
        if isinstance(value, list):
            return [self._redact_value(v, counts) for v in value]
        if isinstance(value, dict):
            return {k: self._redact_value(v, counts) for k, v in value.items()}
        return value

    def sanitize(self, text: str, request: SanitizerRequest) -> SanitizerResult:
        counts: Dict[str, int] = {}

        sanitized = None
        if request.input_format == InputFormat.JSON:
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError:
                parsed = None
            else:
                redacted = self._redact_value(parsed, counts)
                sanitized = text if not counts else json.dumps(
                    redacted, ensure_ascii=False, separators=(",", ":")
                )
        if sanitized is None:
            sanitized = self.redact(text, counts)

        total = sum(counts.values())
        return SanitizerResult(
            sanitized_text=sanitized,
            changed=total > 0,
            redaction_count=total,
            redactions_by_type=counts,
            engine_name=self.engine_name,
            engine_version=self.engine_version,
            method=self.method,
            input_hash=compute_sha256(text),
            output_hash=compute_sha256(sanitized),
        )
