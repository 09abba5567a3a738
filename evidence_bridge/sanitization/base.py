# evidence_bridge/sanitization/base.py
"""
Sanitizer contract.

A sanitizer redacts sensitive content from text:

    sanitize(text, SanitizerRequest) -> SanitizerResult

Implementations may run in-process (regex), as a local executable
(subprocess) or remotely (HTTP). The pipeline only depends on this shape.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Protocol, runtime_checkable


class InputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"
    DIFF = "diff"
    MARKDOWN = "markdown"


@dataclass(frozen=True)
class SanitizerRequest:
    """Per-call sanitizer options."""
    input_format: InputFormat = InputFormat.TEXT
    purpose: Optional[str] = None
    include_findings: bool = False


@dataclass(frozen=True)
class SanitizerResult:
    """Result of sanitizing one text."""
    sanitized_text: str
    changed: bool
    redaction_count: int = 0
    redactions_by_type: Dict[str, int] = field(default_factory=dict)
    engine_name: Optional[str] = None
    engine_version: Optional[str] = None
    method: Optional[str] = None
    input_hash: Optional[str] = None
    output_hash: Optional[str] = None


@runtime_checkable
class Sanitizer(Protocol):
    """Redaction capability injected into the pipeline."""

    def sanitize(self, text: str, request: SanitizerRequest) -> SanitizerResult:
        ...
