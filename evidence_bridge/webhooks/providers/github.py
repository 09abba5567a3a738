# evidence_bridge/webhooks/providers/github.py
"""
GitHub webhook provider.

Handles: pull_request, push, check_run events.
Validates X-Hub-Signature-256 (HMAC-SHA256 of the raw body) when a
secret is configured.
"""

import hashlib
import hmac
from typing import Any, Dict, Mapping, Optional

from ...errors import SignatureValidationError
from ...events.models import EventType, NormalizedEvent
from .base import (
    collect_changed_files,
    extract_int,
    extract_string,
    parse_json_object,
    string_list,
)

EVENT_HEADER = "x-github-event"
SIGNATURE_HEADER = "x-hub-signature-256"

_EVENT_TYPES = {
    "pull_request": EventType.PULL_REQUEST,
    "push": EventType.PUSH,
    "check_run": EventType.CHECK_RUN,
}


def sign_body(body: str, secret: str) -> str:
    """X-Hub-Signature-256 value for a body."""
    digest = hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()
    return f"sha256={digest}"


class GitHubProvider:
    """GitHub webhooks."""

    name = "github"
    catch_all = False

    def __init__(self, secret: Optional[str] = None):
        self.secret = secret

    def matches(self, headers: Mapping[str, str]) -> bool:
        return EVENT_HEADER in headers

    def validate(self, headers: Mapping[str, str], body: str) -> None:
        if not self.secret:
            return

        signature = headers.get(SIGNATURE_HEADER)
        if not signature:
            raise SignatureValidationError(self.name, "Missing X-Hub-Signature-256 header")

        expected = sign_body(body, self.secret)
        if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
            raise SignatureValidationError(self.name, "Signature mismatch")

    def parse(self, headers: Mapping[str, str], body: str) -> NormalizedEvent:
        raw_event_type = headers.get(EVENT_HEADER) or "unknown"
        payload = parse_json_object(body, self.name)

        fields: Dict[str, Any] = {
            "provider": self.name,
            "event_type": _EVENT_TYPES.get(raw_event_type, EventType.UNKNOWN),
            "raw_event_type": raw_event_type,
            "repo": extract_string(payload, "repository.full_name") or "unknown/unknown",
            "raw_payload": payload,
        }

        if raw_event_type == "pull_request":
            pr = payload.get("pull_request")
            if isinstance(pr, dict):
                fields.update(
                    pr_number=extract_int(pr, "number"),
                    sha=extract_string(pr, "head.sha"),
                    diff_url=extract_string(pr, "diff_url"),
                    author=extract_string(pr, "user.login"),
                    action=extract_string(payload, "action"),
                    labels=string_list(pr.get("labels"), key="name"),
                )
        elif raw_event_type == "push":
            fields.update(
                ref=extract_string(payload, "ref"),
                sha=extract_string(payload, "after"),
                diff_url=extract_string(payload, "compare"),
                author=extract_string(payload, "pusher.name"),
                changed_files=collect_changed_files(payload.get("commits")),
            )
        elif raw_event_type == "check_run":
            check_run = payload.get("check_run")
            if isinstance(check_run, dict):
                fields.update(
                    sha=extract_string(check_run, "head_sha"),
                    action=extract_string(payload, "action"),
                )

        return NormalizedEvent(**fields)
