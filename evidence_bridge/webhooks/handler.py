# evidence_bridge/webhooks/handler.py
"""
Webhook dispatch.

1. Lower-case header keys.
2. Pick the first provider whose matches() is true.
3. Validate signature/token through that provider.
4. Parse the body into a NormalizedEvent.

This is the only way events enter the bundle pipeline.
"""

from typing import List, Mapping, Optional

from ..errors import NoMatchingProviderError, PayloadParseError, SignatureValidationError
from ..events.models import NormalizedEvent
from ..logging import get_logger
from ..reporting import EventName, LoggingReporter, ObservabilityEvent, Reporter, Severity
from .providers.base import WebhookProvider

logger = get_logger(__name__)


class WebhookHandler:
    """
    Routes incoming webhook requests to the matching provider.

    Usage:
        handler = WebhookHandler([GitHubProvider(secret=...), GenericProvider()])
        event = handler.handle_request(headers, body)
    """

    def __init__(
        self,
        providers: List[WebhookProvider],
        reporter: Optional[Reporter] = None,
    ):
        if not providers:
            raise ValueError("At least one WebhookProvider is required")
        self.providers = list(providers)
        self.reporter = reporter or LoggingReporter()

    def handle_request(self, headers: Mapping[str, str], body: str) -> NormalizedEvent:
        """
        Process an incoming webhook request.

        Args:
            headers: Request headers (any key case)
            body: Raw request body

        Returns:
            NormalizedEvent

        Raises:
            NoMatchingProviderError: No provider matched
            SignatureValidationError: Validation failed
            PayloadParseError: Body is not a JSON object
        """
        normalized = {key.lower(): value for key, value in headers.items()}

        provider = next((p for p in self.providers if p.matches(normalized)), None)
        if provider is None:
            logger.warning("webhook_no_matching_provider", header_keys=sorted(normalized))
            raise NoMatchingProviderError()

        if getattr(provider, "catch_all", False):
            self.reporter.report(ObservabilityEvent(
                name=EventName.CATCH_ALL_PROVIDER_MATCHED,
                severity=Severity.WARNING,
                fields={"provider": provider.name, "validated": False},
            ))

        try:
            provider.validate(normalized, body)
        except SignatureValidationError:
            logger.warning("webhook_signature_rejected", provider=provider.name)
            raise
        except Exception as e:
            logger.warning("webhook_signature_rejected", provider=provider.name, error=str(e))
            raise SignatureValidationError(provider.name, str(e)) from e

        try:
            event = provider.parse(normalized, body)
        except PayloadParseError:
            logger.warning("webhook_payload_invalid", provider=provider.name)
            raise

        logger.info(
            "webhook_received",
            provider=event.provider,
            event_type=event.event_type.value,
            repo=event.repo,
            pr_number=event.pr_number,
        )
        return event
