# evidence_bridge/events/models.py
"""
Normalized webhook event.

Every provider parses its payload into a NormalizedEvent. The bundle
pipeline only ever sees this shape; the provider name is carried
verbatim and never branched on.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Tuple


class EventType(str, Enum):
    """Event types normalized across providers."""
    PULL_REQUEST = "pull_request"
    PUSH = "push"
    CHECK_RUN = "check_run"
    MERGE_REQUEST = "merge_request"
    UNKNOWN = "unknown"


def utc_now_iso() -> str:
    """Current time as ISO 8601 with millisecond precision and Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class NormalizedEvent:
    """Provider-agnostic record of one webhook occurrence."""
    provider: str
    event_type: EventType
    repo: str
    raw_event_type: str = "unknown"
    pr_number: Optional[int] = None
    ref: Optional[str] = None
    sha: Optional[str] = None
    diff_url: Optional[str] = None
    author: Optional[str] = None
    labels: Tuple[str, ...] = ()
    changed_files: Tuple[str, ...] = ()
    action: Optional[str] = None
    timestamp: str = field(default_factory=utc_now_iso)
    raw_payload: Any = None

    def __post_init__(self):
        # Lists handed in by callers are frozen so the event stays immutable
        object.__setattr__(self, "event_type", EventType(self.event_type))
        object.__setattr__(self, "labels", tuple(self.labels))
        object.__setattr__(self, "changed_files", tuple(dict.fromkeys(self.changed_files)))
