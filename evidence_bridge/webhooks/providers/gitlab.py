# evidence_bridge/webhooks/providers/gitlab.py
"""
GitLab webhook provider.

Handles: merge_request, push events.
Validates X-Gitlab-Token (constant-time compare) when a secret token is
configured.

GitLab uses human-readable event names ("Merge Request Hook",
"Push Hook"), normalized here.
"""

import hmac
from typing import Any, Dict, Mapping, Optional

from ...errors import SignatureValidationError
from ...events.models import EventType, NormalizedEvent
from .base import (
    collect_changed_files,
    extract_int,
    extract_string,
    first_string,
    parse_json_object,
    string_list,
)

EVENT_HEADER = "x-gitlab-event"
TOKEN_HEADER = "x-gitlab-token"


def normalize_event_type(raw: str) -> EventType:
    lower = raw.lower()
    if "merge request" in lower:
        return EventType.MERGE_REQUEST
    if "push" in lower:
        return EventType.PUSH
    return EventType.UNKNOWN


class GitLabProvider:
    """GitLab webhooks."""

    name = "gitlab"
    catch_all = False

    def __init__(self, secret_token: Optional[str] = None):
        self.secret_token = secret_token

    def matches(self, headers: Mapping[str, str]) -> bool:
        return EVENT_HEADER in headers

    def validate(self, headers: Mapping[str, str], body: str) -> None:
        if not self.secret_token:
            return

        token = headers.get(TOKEN_HEADER)
        if not token:
            raise SignatureValidationError(self.name, "Missing X-Gitlab-Token header")

        if not hmac.compare_digest(token.encode("utf-8"), self.secret_token.encode("utf-8")):
            raise SignatureValidationError(self.name, "Token mismatch")

    def parse(self, headers: Mapping[str, str], body: str) -> NormalizedEvent:
        raw_event_type = headers.get(EVENT_HEADER) or "unknown"
        payload = parse_json_object(body, self.name)
        event_type = normalize_event_type(raw_event_type)

        fields: Dict[str, Any] = {
            "provider": self.name,
            "event_type": event_type,
            "raw_event_type": raw_event_type,
            "repo": extract_string(payload, "project.path_with_namespace") or "unknown/unknown",
            "raw_payload": payload,
        }

        if event_type == EventType.MERGE_REQUEST:
            attrs = payload.get("object_attributes")
            if isinstance(attrs, dict):
                fields.update(
                    pr_number=extract_int(attrs, "iid"),
                    sha=extract_string(attrs, "last_commit.id"),
                    diff_url=extract_string(attrs, "url"),
                    author=extract_string(payload, "user.username"),
                    action=extract_string(attrs, "action"),
                    labels=string_list(attrs.get("labels"), key="title"),
                )
        elif event_type == EventType.PUSH:
            fields.update(
                ref=extract_string(payload, "ref"),
                sha=extract_string(payload, "after"),
                author=first_string([
                    extract_string(payload, "user_username"),
                    extract_string(payload, "user_name"),
                ]),
                changed_files=collect_changed_files(payload.get("commits")),
            )

        return NormalizedEvent(**fields)
