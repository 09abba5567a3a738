# Sealing module - immutability proofs and version negotiation
from .authority import (
    LocalHashChainSealer,
    SealResult,
    SealingAuthority,
    build_hash_chain,
    compute_root_hash,
    verify_proof,
)
from .client import (
    SealingClient,
    content_type_for_kind,
    normalize_item_id,
    seal_bundle,
    to_wire_items,
)

__all__ = [
    "LocalHashChainSealer",
    "SealResult",
    "SealingAuthority",
    "build_hash_chain",
    "compute_root_hash",
    "verify_proof",
    "SealingClient",
    "content_type_for_kind",
    "normalize_item_id",
    "seal_bundle",
    "to_wire_items",
]
