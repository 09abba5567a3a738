# evidence_bridge/sealing/client.py
"""
Sealing client.

Converts an EmittedBundle into the wire draft, invokes the sealing
authority and returns a sealed ImportBundle.

States of one sealing call:
    Draft -> SealAttempt(0.2.1 | 0.2.0) -> Sealed | Failed

Policy:
- FAIL HARD. There is no unsealed success path; every failure raises.
- A 0.2.1 draft (sanitized) rejected by the authority with
  SealingVersionRejected is retried exactly once as 0.2.0, with the
  sanitization summary moved into metadata. Nothing else is retried.
- The sealed items must be exactly the drafted items, in order, and the
  returned proof must verify against them.
"""

from typing import Any, Dict, List, Optional

from ..bundles.models import (
    SCHEMA_VERSION_0_2_0,
    SCHEMA_VERSION_0_2_1,
    EmittedBundle,
    ImmutabilityProof,
    ImportBundle,
    ImportBundleItem,
    SanitizationSummary,
)
from ..errors import (
    SealingError,
    SealingRejectedError,
    SealingUnavailableError,
    SealingVersionRejected,
)
from ..evidence.canonical import canonical_json
from ..evidence.items import EvidenceItem
from ..logging import get_logger
from ..reporting import EventName, ObservabilityEvent, Reporter, Severity
from .authority import SealResult, SealingAuthority, verify_proof

logger = get_logger(__name__)


def normalize_item_id(index: int, kind: str) -> str:
    return f"item-{index}-{kind}"


def content_type_for_kind(kind: str) -> str:
    return f"guardspine/webhook/{kind}"


def to_wire_items(items: List[EvidenceItem]) -> List[Dict[str, Any]]:
    """Convert adapter-native items to the wire item shape (no hashes yet)."""
    wire = []
    for index, item in enumerate(items):
        content: Dict[str, Any] = {
            "kind": item.kind.value,
            "summary": item.summary,
            "content": item.content,
        }
        if item.url is not None:
            content["url"] = item.url
        wire.append({
            "item_id": normalize_item_id(index, item.kind.value),
            "content_type": content_type_for_kind(item.kind.value),
            "content": content,
        })
    return wire


def _draft_mismatch(draft_items: List[Dict[str, Any]], items: List[ImportBundleItem]) -> Optional[str]:
    """Describe how sealed items differ from the submitted draft, or None."""
    if len(items) != len(draft_items):
        return f"Authority sealed {len(items)} items for a {len(draft_items)}-item draft"
    for index, (expected, item) in enumerate(zip(draft_items, items)):
        if item.item_id != expected["item_id"] or item.content_type != expected["content_type"]:
            return f"Sealed item {index} is {item.item_id}, expected {expected['item_id']}"
        try:
            same = canonical_json(item.content) == canonical_json(expected["content"])
        except (TypeError, ValueError) as e:
            return f"Sealed content of {item.item_id} is not canonical JSON: {e}"
        if not same:
            return f"Sealed content of {item.item_id} differs from the draft"
    return None


def _coerce_result(result: Any) -> SealResult:
    """Accept a SealResult or a JSON-shaped dict from the authority."""
    if isinstance(result, SealResult):
        return result
    if isinstance(result, dict):
        raw_proof = result.get("immutability_proof") or result.get("immutabilityProof")
        try:
            return SealResult(
                items=[
                    item if isinstance(item, ImportBundleItem) else ImportBundleItem.from_dict(item)
                    for item in result.get("items") or []
                ],
                immutability_proof=(
                    ImmutabilityProof.from_dict(raw_proof) if isinstance(raw_proof, dict) else raw_proof
                ),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise SealingRejectedError(f"Malformed sealing response: {e}") from e
    raise SealingRejectedError(
        f"Malformed sealing response of type {type(result).__name__}"
    )


class SealingClient:
    """
    Seals bundles through an injected SealingAuthority.

    Usage:
        client = SealingClient(LocalHashChainSealer())
        import_bundle = client.seal(bundle, sanitization=summary)
    """

    def __init__(
        self,
        authority: Optional[SealingAuthority],
        reporter: Optional[Reporter] = None,
        verify: bool = True,
    ):
        """
        Args:
            authority: Sealing authority; None means sealing is not configured
            reporter: Receives SealingVersionDowngraded events
            verify: Check the returned proof against the returned items
        """
        self.authority = authority
        self.reporter = reporter
        self.verify = verify

    def build_draft(
        self,
        bundle: EmittedBundle,
        sanitization: Optional[SanitizationSummary] = None,
        version: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Build the wire draft.

        With a sanitization summary the draft is 0.2.1 and carries it at
        the top level; a 0.2.0 draft carries it under metadata instead.
        """
        if version is None:
            version = SCHEMA_VERSION_0_2_1 if sanitization is not None else SCHEMA_VERSION_0_2_0

        metadata: Dict[str, Any] = {
            "artifact_id": bundle.artifact_id,
            "risk_tier": bundle.risk_tier,
            "scope": bundle.scope,
            "provider": bundle.provider,
        }
        draft: Dict[str, Any] = {
            "bundle_id": bundle.bundle_id,
            "version": version,
            "created_at": bundle.created_at,
            "items": to_wire_items(bundle.items),
            "metadata": metadata,
        }
        if sanitization is not None:
            if version == SCHEMA_VERSION_0_2_1:
                draft["sanitization"] = sanitization.to_dict()
            else:
                metadata["sanitization"] = sanitization.to_dict()
        return draft

    def _attempt(self, draft: Dict[str, Any]) -> SealResult:
        try:
            result = self.authority.seal(draft)
        except SealingError:
            raise
        except (ConnectionError, TimeoutError, OSError) as e:
            raise SealingUnavailableError(f"Sealing authority unreachable: {e}") from e
        except Exception as e:
            raise SealingRejectedError(f"Sealing authority failed: {e}") from e
        return _coerce_result(result)

    def seal(
        self,
        bundle: EmittedBundle,
        sanitization: Optional[SanitizationSummary] = None,
    ) -> ImportBundle:
        """
        Seal a bundle.

        Args:
            bundle: Unsealed bundle (items already sanitized, if applicable)
            sanitization: Summary from the sanitization pipeline, if it ran

        Returns:
            Sealed ImportBundle

        Raises:
            SealingUnavailableError: No authority configured, or unreachable
            SealingRejectedError: Draft rejected, proof missing or invalid, or
                the sealed items are not the ones submitted
        """
        if self.authority is None:
            raise SealingUnavailableError(
                "No sealing authority configured. Bundle integrity cannot be guaranteed."
            )

        draft = self.build_draft(bundle, sanitization)
        try:
            result = self._attempt(draft)
        except SealingVersionRejected as e:
            if draft["version"] != SCHEMA_VERSION_0_2_1:
                raise SealingRejectedError(str(e)) from e

            logger.warning(
                "sealing_version_downgrade",
                bundle_id=bundle.bundle_id,
                rejected_version=e.version,
                retry_version=SCHEMA_VERSION_0_2_0,
            )
            if self.reporter is not None:
                self.reporter.report(ObservabilityEvent(
                    name=EventName.SEALING_VERSION_DOWNGRADED,
                    severity=Severity.WARNING,
                    fields={
                        "bundle_id": bundle.bundle_id,
                        "from_version": SCHEMA_VERSION_0_2_1,
                        "to_version": SCHEMA_VERSION_0_2_0,
                    },
                ))

            draft = self.build_draft(bundle, sanitization, version=SCHEMA_VERSION_0_2_0)
            try:
                result = self._attempt(draft)
            except SealingVersionRejected as retry_error:
                raise SealingRejectedError(str(retry_error)) from retry_error

        if result.immutability_proof is None:
            logger.error("bundle_sealing_failed", bundle_id=bundle.bundle_id, reason="no_proof")
            raise SealingRejectedError(
                "Sealing authority did not return an immutability proof"
            )

        mismatch = _draft_mismatch(draft["items"], result.items)
        if mismatch is not None:
            logger.error("bundle_sealing_failed", bundle_id=bundle.bundle_id, reason=mismatch)
            raise SealingRejectedError(f"Sealed items do not match the submitted draft: {mismatch}")

        if self.verify:
            valid, error = verify_proof(result.items, result.immutability_proof)
            if not valid:
                logger.error("bundle_sealing_failed", bundle_id=bundle.bundle_id, reason=error)
                raise SealingRejectedError(f"Immutability proof failed verification: {error}")

        sealed = ImportBundle(
            bundle_id=draft["bundle_id"],
            version=draft["version"],
            created_at=draft["created_at"],
            items=list(result.items),
            immutability_proof=result.immutability_proof,
            metadata=draft["metadata"],
            sanitization=sanitization if draft["version"] == SCHEMA_VERSION_0_2_1 else None,
        )

        logger.info(
            "bundle_sealed",
            bundle_id=sealed.bundle_id,
            version=sealed.version,
            item_count=len(sealed.items),
            root_hash=sealed.immutability_proof.root_hash,
        )
        return sealed


def seal_bundle(
    bundle: EmittedBundle,
    authority: Optional[SealingAuthority],
    sanitization: Optional[SanitizationSummary] = None,
    reporter: Optional[Reporter] = None,
) -> ImportBundle:
    """Seal a bundle with a one-off SealingClient."""
    return SealingClient(authority, reporter=reporter).seal(bundle, sanitization)
