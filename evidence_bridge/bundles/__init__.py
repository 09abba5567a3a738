# Bundles module - bundle models and assembly
from .assembler import BundleAssembler, BundleEmitter, build_artifact_id, build_scope
from .models import (
    SCHEMA_VERSION_0_2_0,
    SCHEMA_VERSION_0_2_1,
    SUPPORTED_VERSIONS,
    ChainLink,
    EmittedBundle,
    ImmutabilityProof,
    ImportBundle,
    ImportBundleItem,
    SanitizationStatus,
    SanitizationSummary,
)

__all__ = [
    "BundleAssembler",
    "BundleEmitter",
    "build_artifact_id",
    "build_scope",
    "SCHEMA_VERSION_0_2_0",
    "SCHEMA_VERSION_0_2_1",
    "SUPPORTED_VERSIONS",
    "ChainLink",
    "EmittedBundle",
    "ImmutabilityProof",
    "ImportBundle",
    "ImportBundleItem",
    "SanitizationStatus",
    "SanitizationSummary",
]
