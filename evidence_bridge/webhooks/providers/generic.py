# evidence_bridge/webhooks/providers/generic.py
"""
Generic webhook provider - pass-through for custom webhook sources.

Always matches, performs no signature validation. Register it LAST.
Because it accepts unauthenticated requests, the handler reports every
match through its Reporter.
"""

from typing import Mapping

from ...events.models import EventType, NormalizedEvent
from .base import extract_int, extract_string, first_string, parse_json_object, string_list


class GenericProvider:
    """Catch-all provider reading a flat JSON body."""

    name = "generic"
    catch_all = True

    def matches(self, headers: Mapping[str, str]) -> bool:
        return True

    def validate(self, headers: Mapping[str, str], body: str) -> None:
        # No validation for generic webhooks
        return None

    def parse(self, headers: Mapping[str, str], body: str) -> NormalizedEvent:
        payload = parse_json_object(body, self.name)

        return NormalizedEvent(
            provider=self.name,
            event_type=EventType.UNKNOWN,
            raw_event_type=extract_string(payload, "event_type") or "unknown",
            repo=first_string([
                extract_string(payload, "repo"),
                extract_string(payload, "repository"),
            ]) or "unknown",
            pr_number=extract_int(payload, "pr_number"),
            ref=extract_string(payload, "ref"),
            sha=extract_string(payload, "sha"),
            diff_url=extract_string(payload, "diff_url"),
            author=extract_string(payload, "author"),
            labels=string_list(payload.get("labels")),
            changed_files=string_list(payload.get("changed_files")),
            action=extract_string(payload, "action"),
            raw_payload=payload,
        )
