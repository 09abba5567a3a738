# evidence_bridge/sealing/authority.py
"""
Sealing authority contract and the local reference authority.

A sealing authority receives a draft bundle (dict in ImportBundle shape,
without content hashes or proof) and returns the items with content
hashes plus an immutability proof, or raises.

Authorities that do not support the declared draft "version" MUST raise
SealingVersionRejected, which lets the client downgrade structurally
instead of parsing error text.

LocalHashChainSealer chain:
    content_hash[i]  = sha256(canonical_json(items[i].content))
    previous_hash[0] = GENESIS_HASH
    previous_hash[i] = content_hash[i-1]
    root_hash        = sha256("\n".join(
        f"{sequence}|{item_id}|{content_type}|{content_hash}|{previous_hash}"))
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from ..bundles.models import (
    SUPPORTED_VERSIONS,
    ChainLink,
    ImmutabilityProof,
    ImportBundleItem,
)
from ..errors import SealingRejectedError, SealingVersionRejected
from ..evidence.canonical import canonical_json
from ..evidence.hashing import GENESIS_HASH, compute_sha256


@dataclass(frozen=True)
class SealResult:
    """What an authority hands back on success."""
    items: List[ImportBundleItem]
    immutability_proof: Optional[ImmutabilityProof]


class SealingAuthority(Protocol):
    """External collaborator computing the hash chain and proof."""

    def seal(self, draft: Dict[str, Any]) -> SealResult:
        ...


def _link_material(link: ChainLink) -> str:
    return (
        f"{link.sequence}|{link.item_id}|{link.content_type}|"
        f"{link.content_hash}|{link.previous_hash}"
    )


def compute_root_hash(chain: List[ChainLink]) -> str:
    """Root hash combining every link of the chain."""
    return compute_sha256("\n".join(_link_material(link) for link in chain))


def build_hash_chain(items: List[ImportBundleItem]) -> List[ChainLink]:
    """Build chain links for items that already carry content hashes."""
    chain: List[ChainLink] = []
    previous = GENESIS_HASH
    for sequence, item in enumerate(items):
        link = ChainLink(
            item_id=item.item_id,
            content_type=item.content_type,
            content_hash=item.content_hash,
            previous_hash=previous,
            sequence=sequence,
        )
        chain.append(link)
        previous = link.content_hash
    return chain


def verify_proof(
    items: List[ImportBundleItem],
    proof: ImmutabilityProof,
) -> Tuple[bool, Optional[str]]:
    """
    Check a proof against the items it claims to cover.

    Verifies item ids, content types and content hashes (recomputed from
    content), sequence numbers and previous-hash linkage. The root hash is
    authority-specific and only checked for shape.

    Returns:
        (valid, error_message)
    """
    if len(proof.hash_chain) != len(items):
        return False, f"Chain has {len(proof.hash_chain)} links for {len(items)} items"
    if not isinstance(proof.root_hash, str) or not proof.root_hash:
        return False, "Proof has no root hash"

    previous = GENESIS_HASH
    for index, (item, link) in enumerate(zip(items, proof.hash_chain)):
        if link.sequence != index:
            return False, f"Link {index} has sequence {link.sequence}"
        if link.previous_hash != previous:
            return False, f"Link {index} does not chain to the previous content hash"
        if link.item_id != item.item_id or link.content_type != item.content_type:
            return False, f"Link {index} does not describe item {item.item_id}"
        expected = compute_sha256(canonical_json(item.content))
        if item.content_hash != expected or link.content_hash != expected:
            return False, f"Content hash mismatch for item {item.item_id}"
        previous = link.content_hash
    return True, None


class LocalHashChainSealer:
    """
    In-process sealing authority.

    `versions` restricts the schema versions it accepts, which is how a
    deployment talks to (or emulates) a 0.2.0-only authority.
    """

    def __init__(self, versions: Optional[Iterable[str]] = None):
        self.versions = tuple(versions) if versions is not None else SUPPORTED_VERSIONS

    def seal(self, draft: Dict[str, Any]) -> SealResult:
        version = draft.get("version")
        if version not in self.versions:
            raise SealingVersionRejected(str(version), supported=self.versions)

        raw_items = draft.get("items")
        if not isinstance(raw_items, list) or not raw_items:
            raise SealingRejectedError("Draft has no items to seal")

        items: List[ImportBundleItem] = []
        for raw in raw_items:
            try:
                content = raw["content"]
                items.append(ImportBundleItem(
                    item_id=raw["item_id"],
                    content_type=raw["content_type"],
                    content=content,
                    content_hash=compute_sha256(canonical_json(content)),
                ))
            except (KeyError, TypeError, ValueError) as e:
                raise SealingRejectedError(f"Malformed draft item: {e}") from e

        chain = build_hash_chain(items)
        return SealResult(
            items=items,
            immutability_proof=ImmutabilityProof(
                hash_chain=chain,
                root_hash=compute_root_hash(chain),
            ),
        )
