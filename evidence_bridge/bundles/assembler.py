# evidence_bridge/bundles/assembler.py
"""
Bundle assembly.

Aggregates evidence items, the risk tier and event metadata into an
unsealed EmittedBundle. Sealing is a separate step (see sealing.client).
"""

import time
from typing import List, Optional
from uuid import uuid4

from ..events.models import NormalizedEvent, utc_now_iso
from ..evidence.items import EvidenceItem, build_items
from ..logging import get_logger
from ..risk.classifier import RiskConfig, classify
from .models import EmittedBundle, SCHEMA_VERSION_0_2_0

logger = get_logger(__name__)


def build_artifact_id(event: NormalizedEvent) -> str:
    """
    Derive the artifact identifier.

    Format: <repo with / replaced by -> then one of
    -pr-<n>, -<sha[0:8]>, or -<epoch-ms> when no stable identifier exists.
    """
    base = event.repo.replace("/", "-")
    if event.pr_number is not None:
        return f"{base}-pr-{event.pr_number}"
    if event.sha:
        return f"{base}-{event.sha[:8]}"
    return f"{base}-{int(time.time() * 1000)}"


def build_scope(event: NormalizedEvent) -> str:
    """Scope string: <provider>:<eventType>:<repo>[:#<pr>][:<action>]."""
    parts = [event.provider, event.event_type.value, event.repo]
    if event.pr_number is not None:
        parts.append(f"#{event.pr_number}")
    if event.action:
        parts.append(event.action)
    return ":".join(parts)


class BundleAssembler:
    """Builds unsealed bundles with a fresh identifier and timestamp."""

    def assemble(
        self,
        event: NormalizedEvent,
        items: List[EvidenceItem],
        tier: str,
    ) -> EmittedBundle:
        """
        Assemble an unsealed bundle.

        Args:
            event: Source event
            items: Evidence items built from the event
            tier: Risk tier

        Returns:
            EmittedBundle without an immutability proof
        """
        bundle = EmittedBundle(
            bundle_id=str(uuid4()),
            version=SCHEMA_VERSION_0_2_0,
            artifact_id=build_artifact_id(event),
            risk_tier=tier,
            scope=build_scope(event),
            items=list(items),
            created_at=utc_now_iso(),
            provider=event.provider,
        )

        logger.debug(
            "bundle_assembled",
            bundle_id=bundle.bundle_id,
            artifact_id=bundle.artifact_id,
            risk_tier=tier,
            item_count=len(bundle.items),
        )
        return bundle


class BundleEmitter:
    """
    Creates unsealed evidence bundles from normalized events.

    Usage:
        emitter = BundleEmitter(RiskConfig(risk_labels={"security": "critical"}))
        bundle = emitter.from_event(event)
    """

    def __init__(
        self,
        config: Optional[RiskConfig] = None,
        assembler: Optional[BundleAssembler] = None,
    ):
        self.config = config or RiskConfig()
        self.assembler = assembler or BundleAssembler()

    def from_event(self, event: NormalizedEvent) -> EmittedBundle:
        """Classify, build items and assemble. No proof is attached."""
        tier = classify(event, self.config)
        items = build_items(event)
        return self.assembler.assemble(event, items, tier)
