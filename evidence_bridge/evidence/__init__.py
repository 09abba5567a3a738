# Evidence module - canonical content, hashing and evidence items
from .canonical import canonical_json
from .hashing import GENESIS_HASH, compute_sha256, verify_sha256, is_hash_literal
from .items import EvidenceItem, EvidenceKind, build_items

__all__ = [
    "canonical_json",
    "GENESIS_HASH",
    "compute_sha256",
    "verify_sha256",
    "is_hash_literal",
    "EvidenceItem",
    "EvidenceKind",
    "build_items",
]
