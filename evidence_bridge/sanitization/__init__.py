# Sanitization module - PII redaction before sealing
from typing import Optional

from .base import InputFormat, Sanitizer, SanitizerRequest, SanitizerResult
from .local_process import SubprocessSanitizer
from .pii_regex import PII_PATTERNS, RegexPIISanitizer
from .pipeline import WITHHELD_CONTENT, sanitize_items
from .remote import RemoteSanitizer


def build_sanitizer(settings) -> Optional[Sanitizer]:
    """
    Build the configured sanitizer (SANITIZER=none|regex|subprocess|remote).

    Returns None when sanitization is disabled.
    """
    kind = (settings.sanitizer or "none").lower()
    if kind == "none":
        return None
    if kind == "regex":
        return RegexPIISanitizer(salt=settings.sanitizer_salt)
    if kind == "subprocess":
        if not settings.sanitizer_command:
            raise ValueError("SANITIZER=subprocess requires SANITIZER_COMMAND")
        return SubprocessSanitizer(
            settings.sanitizer_command,
            timeout=settings.sanitizer_timeout_seconds,
        )
    if kind == "remote":
        if not settings.sanitizer_endpoint:
            raise ValueError("SANITIZER=remote requires SANITIZER_ENDPOINT")
        return RemoteSanitizer(
            settings.sanitizer_endpoint,
            api_key=settings.sanitizer_api_key,
            timeout=settings.sanitizer_timeout_seconds,
        )
    raise ValueError(f"Unknown SANITIZER: {settings.sanitizer}")


__all__ = [
    "InputFormat",
    "Sanitizer",
    "SanitizerRequest",
    "SanitizerResult",
    "SubprocessSanitizer",
    "PII_PATTERNS",
    "RegexPIISanitizer",
    "RemoteSanitizer",
    "WITHHELD_CONTENT",
    "sanitize_items",
    "build_sanitizer",
]
