# evidence_bridge/pipeline.py
"""
End-to-end evidence pipeline.

NormalizedEvent
  -> classify + build items -> assemble     (BundleEmitter)
  -> sanitize (optional)                    (sanitize_items)
  -> seal, fail hard                        (SealingClient)
  -> submit (optional)                      (post_import_bundle)

Each process() call owns its bundle; the pipeline object itself holds
only configuration and stateless collaborators, so concurrent calls are
independent.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from .bundles.assembler import BundleEmitter
from .bundles.models import EmittedBundle, ImportBundle, SanitizationSummary
from .events.models import NormalizedEvent
from .importer import ImportOptions, ImportResponse, post_import_bundle
from .logging import get_logger
from .reporting import LoggingReporter, Reporter
from .risk.classifier import RiskConfig
from .sanitization.base import Sanitizer
from .sanitization.pipeline import sanitize_items
from .sealing.authority import LocalHashChainSealer, SealingAuthority
from .sealing.client import SealingClient

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    """Everything one pipeline run produced."""
    bundle: EmittedBundle
    import_bundle: ImportBundle
    sanitization: Optional[SanitizationSummary] = None
    submission: Optional[ImportResponse] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "artifact_id": self.bundle.artifact_id,
            "risk_tier": self.bundle.risk_tier,
            "scope": self.bundle.scope,
            "import_bundle": self.import_bundle.to_dict(),
            "submission": self.submission.to_dict() if self.submission else None,
        }


class EvidencePipeline:
    """
    Turns normalized events into sealed import bundles.

    Usage:
        pipeline = EvidencePipeline(
            risk_config=RiskConfig(risk_labels={"security": "critical"}),
            authority=LocalHashChainSealer(),
            sanitizer=RegexPIISanitizer(salt="..."),
        )
        result = pipeline.process(event)
    """

    def __init__(
        self,
        authority: Optional[SealingAuthority],
        risk_config: Optional[RiskConfig] = None,
        sanitizer: Optional[Sanitizer] = None,
        salt_fingerprint: Optional[str] = None,
        import_options: Optional[ImportOptions] = None,
        reporter: Optional[Reporter] = None,
        max_workers: int = 1,
    ):
        """
        Args:
            authority: Sealing authority (None makes every process() call fail)
            risk_config: Risk classification config
            sanitizer: Optional redaction capability
            salt_fingerprint: Overrides the sanitizer's own salt fingerprint
            import_options: Submit sealed bundles when set
            reporter: Observability sink
            max_workers: Concurrent sanitizer calls per bundle
        """
        self.reporter = reporter or LoggingReporter()
        self.emitter = BundleEmitter(risk_config)
        self.sealer = SealingClient(authority, reporter=self.reporter)
        self.sanitizer = sanitizer
        self.salt_fingerprint = salt_fingerprint
        self.import_options = import_options
        self.max_workers = max_workers

    @classmethod
    def from_settings(cls, settings=None, reporter: Optional[Reporter] = None) -> "EvidencePipeline":
        """Build a pipeline from application settings."""
        if settings is None:
            from .settings import settings
        from .sanitization import build_sanitizer

        return cls(
            authority=LocalHashChainSealer(versions=settings.sealer_versions),
            risk_config=RiskConfig.from_settings(settings),
            sanitizer=build_sanitizer(settings),
            import_options=ImportOptions.from_settings(settings),
            reporter=reporter,
            max_workers=settings.sanitizer_max_workers,
        )

    def _fingerprint(self) -> str:
        if self.salt_fingerprint:
            return self.salt_fingerprint
        fingerprint = getattr(self.sanitizer, "salt_fingerprint", None)
        if callable(fingerprint):
            return fingerprint()
        return "unknown"

    def process(self, event: NormalizedEvent, submit: bool = True) -> PipelineResult:
        """
        Run the pipeline for one event.

        Args:
            event: Normalized webhook event
            submit: Post the sealed bundle when import options are configured

        Returns:
            PipelineResult

        Raises:
            SealingUnavailableError / SealingRejectedError: sealing failed
        """
        bundle = self.emitter.from_event(event)

        summary = None
        if self.sanitizer is not None:
            items, summary = sanitize_items(
                bundle.items,
                self.sanitizer,
                self._fingerprint(),
                max_workers=self.max_workers,
                reporter=self.reporter,
            )
            bundle = replace(bundle, items=items)

        import_bundle = self.sealer.seal(bundle, sanitization=summary)
        bundle = replace(bundle, immutability_proof=import_bundle.immutability_proof)

        submission = None
        if submit and self.import_options is not None:
            submission = post_import_bundle(import_bundle, self.import_options)

        logger.info(
            "pipeline_completed",
            bundle_id=bundle.bundle_id,
            artifact_id=bundle.artifact_id,
            risk_tier=bundle.risk_tier,
            version=import_bundle.version,
            submitted=submission.ok if submission else None,
        )
        return PipelineResult(
            bundle=bundle,
            import_bundle=import_bundle,
            sanitization=summary,
            submission=submission,
        )
