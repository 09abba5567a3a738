# evidence_bridge/sanitization/pipeline.py
"""
Sanitization pipeline.

Rewrites evidence item content through a Sanitizer BEFORE sealing, so the
hash chain only ever covers sanitized content.

Per item:
1. Canonicalize the item content (JSON items as-is, plain-text content as
   a JSON string literal) and send it with input_format=json,
   purpose=webhook_payload.
2. If the sanitizer reports a change, parse the sanitized text back and
   re-canonicalize it. On parse failure keep the sanitized text verbatim
   and mark the item failed.
3. If the sanitizer raises, the item's content is withheld and the item
   is marked failed.
4. Changed items get a fresh content hash over the new content.

One item failing never aborts the batch. Items may be processed
concurrently; results are always reassembled in item order because the
aggregate input/output hashes are order-sensitive.
"""

import json
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

from ..bundles.models import SanitizationStatus, SanitizationSummary
from ..evidence.canonical import canonical_json
from ..evidence.hashing import compute_sha256
from ..evidence.items import EvidenceItem
from ..logging import get_logger
from ..reporting import EventName, ObservabilityEvent, Reporter, Severity
from .base import InputFormat, Sanitizer, SanitizerRequest, SanitizerResult

logger = get_logger(__name__)

WEBHOOK_PAYLOAD_REQUEST = SanitizerRequest(
    input_format=InputFormat.JSON,
    purpose="webhook_payload",
)

# Replaces the content of an item whose sanitizer call raised
WITHHELD_CONTENT = canonical_json({"withheld": "sanitizer_error"})


@dataclass
class _ItemOutcome:
    """Result of sanitizing one item."""
    item: EvidenceItem
    input_text: str
    output_text: str
    result: Optional[SanitizerResult] = None
    failed: bool = False


def _decode_content(content: str) -> Tuple[Any, bool]:
    """Return (structured value, was_json) for an item content string."""
    try:
        return json.loads(content), True
    except json.JSONDecodeError:
        return content, False


def _sanitize_one(item: EvidenceItem, sanitizer: Sanitizer) -> _ItemOutcome:
    value, was_json = _decode_content(item.content)
    input_text = canonical_json(value)

    try:
        result = sanitizer.sanitize(input_text, WEBHOOK_PAYLOAD_REQUEST)
    except Exception as e:
        logger.warning(
            "sanitizer_call_failed",
            kind=item.kind.value,
            error=str(e),
            error_type=type(e).__name__,
        )
        withheld = replace(
            item,
            content=WITHHELD_CONTENT,
            content_hash=compute_sha256(WITHHELD_CONTENT),
        )
        return _ItemOutcome(withheld, input_text, WITHHELD_CONTENT, failed=True)

    if not result.changed:
        return _ItemOutcome(item, input_text, input_text, result=result)

    try:
        sanitized_value = json.loads(result.sanitized_text)
        output_text = canonical_json(sanitized_value)
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        logger.warning(
            "sanitized_content_unparseable",
            kind=item.kind.value,
            error=str(e),
        )
        output_text = result.sanitized_text
        degraded = replace(
            item,
            content=output_text,
            content_hash=compute_sha256(output_text),
        )
        return _ItemOutcome(degraded, input_text, output_text, result=result, failed=True)

    if was_json:
        new_content = output_text
    elif isinstance(sanitized_value, str):
        # Plain-text content (e.g. a diff URL) goes back to plain text
        new_content = sanitized_value
    else:
        new_content = output_text

    sanitized_item = replace(
        item,
        content=new_content,
        content_hash=compute_sha256(new_content),
    )
    return _ItemOutcome(sanitized_item, input_text, output_text, result=result)


def _engine_field(outcomes: List[_ItemOutcome], sanitizer: Sanitizer, name: str) -> str:
    for outcome in outcomes:
        value = getattr(outcome.result, name, None) if outcome.result else None
        if value:
            return value
    return getattr(sanitizer, name, None) or "unknown"


def _status(outcomes: List[_ItemOutcome]) -> SanitizationStatus:
    failures = sum(1 for o in outcomes if o.failed)
    if failures:
        succeeded = len(outcomes) - failures
        return SanitizationStatus.PARTIAL if succeeded else SanitizationStatus.ERROR
    if any(o.result is not None and o.result.changed for o in outcomes):
        return SanitizationStatus.SANITIZED
    return SanitizationStatus.NONE


def sanitize_items(
    items: List[EvidenceItem],
    sanitizer: Sanitizer,
    salt_fingerprint: str,
    max_workers: int = 1,
    reporter: Optional[Reporter] = None,
) -> Tuple[List[EvidenceItem], SanitizationSummary]:
    """
    Sanitize evidence items and summarize the redactions.

    Args:
        items: Items in bundle order
        sanitizer: Redaction capability
        salt_fingerprint: Fingerprint of the redaction salt (never the salt)
        max_workers: Concurrent sanitizer calls (1 = sequential)
        reporter: Receives SanitizationDegraded when any item failed

    Returns:
        (sanitized items in original order, summary)
    """
    if max_workers > 1 and len(items) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            # map() yields in submission order
            outcomes = list(executor.map(lambda item: _sanitize_one(item, sanitizer), items))
    else:
        outcomes = [_sanitize_one(item, sanitizer) for item in items]

    redactions_by_type: Dict[str, int] = {}
    redaction_count = 0
    for outcome in outcomes:
        if outcome.result is None:
            continue
        redaction_count += outcome.result.redaction_count
        for kind, count in outcome.result.redactions_by_type.items():
            redactions_by_type[kind] = redactions_by_type.get(kind, 0) + count

    status = _status(outcomes)
    summary = SanitizationSummary(
        engine_name=_engine_field(outcomes, sanitizer, "engine_name"),
        engine_version=_engine_field(outcomes, sanitizer, "engine_version"),
        method=_engine_field(outcomes, sanitizer, "method"),
        token_format=getattr(sanitizer, "token_format", None) or "unknown",
        salt_fingerprint=salt_fingerprint,
        redaction_count=redaction_count,
        redactions_by_type=redactions_by_type,
        status=status,
        input_hash=compute_sha256("".join(o.input_text for o in outcomes)),
        output_hash=compute_sha256("".join(o.output_text for o in outcomes)),
    )

    logger.info(
        "items_sanitized",
        item_count=len(items),
        changed=sum(1 for o in outcomes if o.result is not None and o.result.changed),
        failed=sum(1 for o in outcomes if o.failed),
        redaction_count=redaction_count,
        status=status.value,
    )

    if status in (SanitizationStatus.PARTIAL, SanitizationStatus.ERROR) and reporter is not None:
        reporter.report(ObservabilityEvent(
            name=EventName.SANITIZATION_DEGRADED,
            severity=Severity.WARNING if status == SanitizationStatus.PARTIAL else Severity.ERROR,
            fields={
                "status": status.value,
                "failed_kinds": [o.item.kind.value for o in outcomes if o.failed],
            },
        ))

    return [o.item for o in outcomes], summary
