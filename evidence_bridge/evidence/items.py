# evidence_bridge/evidence/items.py
"""
Evidence item construction.

Turns the facts of one NormalizedEvent into typed evidence items, each
carrying its canonical content string and the hash of that string.

Items (in order):
- diff: only when the event has a diff URL
- metadata: always
- check_result: only for check_run events with a raw payload
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from ..events.models import EventType, NormalizedEvent
from .canonical import canonical_json
from .hashing import compute_sha256


class EvidenceKind(str, Enum):
    """Kinds of evidence in a bundle."""
    DIFF = "diff"
    METADATA = "metadata"
    CHECK_RESULT = "check_result"


@dataclass(frozen=True)
class EvidenceItem:
    """One discrete piece of hashed content."""
    kind: EvidenceKind
    summary: str
    content: str
    content_hash: str
    url: Optional[str] = None

    @classmethod
    def create(
        cls,
        kind: EvidenceKind,
        summary: str,
        content: str,
        url: Optional[str] = None,
    ) -> "EvidenceItem":
        """Create an item, hashing its canonical content."""
        return cls(
            kind=EvidenceKind(kind),
            summary=summary,
            content=content,
            content_hash=compute_sha256(content),
            url=url,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = {
            "kind": self.kind.value,
            "summary": self.summary,
            "content": self.content,
            "contentHash": self.content_hash,
        }
        if self.url is not None:
            data["url"] = self.url
        return data


def _metadata_content(event: NormalizedEvent) -> str:
    payload: Dict[str, Any] = {
        "repo": event.repo,
        "labels": list(event.labels),
        "changedFiles": list(event.changed_files),
    }
    # Absent facts are omitted rather than serialized as null
    if event.author is not None:
        payload["author"] = event.author
    if event.sha is not None:
        payload["sha"] = event.sha
    return canonical_json(payload)


def build_items(event: NormalizedEvent) -> List[EvidenceItem]:
    """
    Build the evidence items for an event.

    Args:
        event: Normalized webhook event

    Returns:
        Items in diff, metadata, check_result order (at least one metadata item)
    """
    items: List[EvidenceItem] = []

    if event.diff_url:
        # Hash the payload behind the diff, not just the URL
        if event.raw_payload is not None:
            diff_content = canonical_json(event.raw_payload)
        else:
            diff_content = event.diff_url
        pr_suffix = f" #{event.pr_number}" if event.pr_number is not None else ""
        items.append(EvidenceItem.create(
            kind=EvidenceKind.DIFF,
            summary=f"Diff for {event.repo}{pr_suffix}",
            content=diff_content,
            url=event.diff_url,
        ))

    items.append(EvidenceItem.create(
        kind=EvidenceKind.METADATA,
        summary=f"Event metadata from {event.provider}",
        content=_metadata_content(event),
    ))

    if event.event_type == EventType.CHECK_RUN and event.raw_payload is not None:
        items.append(EvidenceItem.create(
            kind=EvidenceKind.CHECK_RESULT,
            summary="CI check run result",
            content=canonical_json(event.raw_payload),
        ))

    return items
