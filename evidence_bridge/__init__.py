# evidence_bridge/__init__.py
"""
Webhook Evidence Bridge.

Turns source-control webhook events into sealed evidence bundles.
"""

from .bundles import BundleAssembler, BundleEmitter, EmittedBundle, ImportBundle
from .events import EventType, NormalizedEvent
from .evidence import EvidenceItem, EvidenceKind, build_items, canonical_json, compute_sha256
from .importer import ImportOptions, ImportResponse, post_import_bundle
from .pipeline import EvidencePipeline, PipelineResult
from .risk import RiskConfig, classify
from .sanitization import RegexPIISanitizer, RemoteSanitizer, SubprocessSanitizer, sanitize_items
from .sealing import LocalHashChainSealer, SealingClient, seal_bundle
from .webhooks import GenericProvider, GitHubProvider, GitLabProvider, WebhookHandler

__version__ = "0.2.1"

__all__ = [
    "BundleAssembler",
    "BundleEmitter",
    "EmittedBundle",
    "ImportBundle",
    "EventType",
    "NormalizedEvent",
    "EvidenceItem",
    "EvidenceKind",
    "build_items",
    "canonical_json",
    "compute_sha256",
    "ImportOptions",
    "ImportResponse",
    "post_import_bundle",
    "EvidencePipeline",
    "PipelineResult",
    "RiskConfig",
    "classify",
    "RegexPIISanitizer",
    "RemoteSanitizer",
    "SubprocessSanitizer",
    "sanitize_items",
    "LocalHashChainSealer",
    "SealingClient",
    "seal_bundle",
    "GenericProvider",
    "GitHubProvider",
    "GitLabProvider",
    "WebhookHandler",
]
