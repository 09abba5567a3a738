# evidence_bridge/bundles/models.py
"""
Evidence bundle models.

EmittedBundle is the unsealed, adapter-native bundle built from one event.
ImportBundle is the sealed wire form sent to GuardSpine:

{
  "bundle_id", "version": "0.2.0" | "0.2.1", "created_at",
  "items": [{"item_id", "content_type", "content", "content_hash"}],
  "immutability_proof": {"hash_chain": [...], "root_hash"},
  "sanitization": {...},   # 0.2.1 only
  "metadata": {...}
}
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..evidence.items import EvidenceItem

SCHEMA_VERSION_0_2_0 = "0.2.0"
SCHEMA_VERSION_0_2_1 = "0.2.1"
SUPPORTED_VERSIONS = (SCHEMA_VERSION_0_2_0, SCHEMA_VERSION_0_2_1)


@dataclass(frozen=True)
class ChainLink:
    """One link of the hash chain."""
    item_id: str
    content_type: str
    content_hash: str
    previous_hash: str
    sequence: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChainLink":
        return cls(
            item_id=data["item_id"],
            content_type=data["content_type"],
            content_hash=data["content_hash"],
            previous_hash=data["previous_hash"],
            sequence=int(data["sequence"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_id": self.item_id,
            "content_type": self.content_type,
            "content_hash": self.content_hash,
            "previous_hash": self.previous_hash,
            "sequence": self.sequence,
        }


@dataclass(frozen=True)
class ImmutabilityProof:
    """
    Hash chain plus root hash.

    Invariants:
        hash_chain[i].sequence == i
        hash_chain[0].previous_hash == GENESIS_HASH
        hash_chain[i].previous_hash == hash_chain[i-1].content_hash
    """
    hash_chain: List[ChainLink]
    root_hash: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImmutabilityProof":
        return cls(
            hash_chain=[ChainLink.from_dict(link) for link in data["hash_chain"]],
            root_hash=data["root_hash"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash_chain": [link.to_dict() for link in self.hash_chain],
            "root_hash": self.root_hash,
        }


class SanitizationStatus(str, Enum):
    """Outcome of sanitizing a bundle's items."""
    NONE = "none"
    SANITIZED = "sanitized"
    PARTIAL = "partial"
    ERROR = "error"


@dataclass(frozen=True)
class SanitizationSummary:
    """Redaction summary covering the whole item set."""
    engine_name: str
    engine_version: str
    method: str
    token_format: str
    salt_fingerprint: str
    redaction_count: int
    redactions_by_type: Dict[str, int]
    status: SanitizationStatus
    input_hash: str
    output_hash: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "engine_name": self.engine_name,
            "engine_version": self.engine_version,
            "method": self.method,
            "token_format": self.token_format,
            "salt_fingerprint": self.salt_fingerprint,
            "redaction_count": self.redaction_count,
            "redactions_by_type": dict(sorted(self.redactions_by_type.items())),
            "status": self.status.value,
            "input_hash": self.input_hash,
            "output_hash": self.output_hash,
        }


@dataclass
class EmittedBundle:
    """Unsealed evidence bundle built from one webhook event."""
    bundle_id: str
    version: str
    artifact_id: str
    risk_tier: str
    scope: str
    items: List[EvidenceItem]
    created_at: str
    provider: str
    immutability_proof: Optional[ImmutabilityProof] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = {
            "bundle_id": self.bundle_id,
            "version": self.version,
            "artifactId": self.artifact_id,
            "riskTier": self.risk_tier,
            "scope": self.scope,
            "items": [item.to_dict() for item in self.items],
            "created_at": self.created_at,
            "provider": self.provider,
        }
        if self.immutability_proof is not None:
            data["immutability_proof"] = self.immutability_proof.to_dict()
        return data


@dataclass(frozen=True)
class ImportBundleItem:
    """Item in wire form."""
    item_id: str
    content_type: str
    content: Dict[str, Any]
    content_hash: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImportBundleItem":
        return cls(
            item_id=data["item_id"],
            content_type=data["content_type"],
            content=data["content"],
            content_hash=data.get("content_hash"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "item_id": self.item_id,
            "content_type": self.content_type,
            "content": self.content,
        }
        if self.content_hash is not None:
            data["content_hash"] = self.content_hash
        return data


@dataclass(frozen=True)
class ImportBundle:
    """
    Sealed bundle ready for transmission.

    Only ever constructed with an immutability proof; see SealingClient.
    """
    bundle_id: str
    version: str
    created_at: str
    items: List[ImportBundleItem]
    immutability_proof: ImmutabilityProof
    metadata: Dict[str, Any] = field(default_factory=dict)
    sanitization: Optional[SanitizationSummary] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the ImportBundle JSON shape."""
        data = {
            "bundle_id": self.bundle_id,
            "version": self.version,
            "created_at": self.created_at,
            "items": [item.to_dict() for item in self.items],
            "immutability_proof": self.immutability_proof.to_dict(),
            "metadata": self.metadata,
        }
        if self.sanitization is not None:
            data["sanitization"] = self.sanitization.to_dict()
        return data
