# evidence_bridge/reporting.py
"""
Observability events for security-relevant paths.

Components that hit a fallback worth auditing (catch-all provider matched,
sanitization degraded, schema version downgraded) raise a typed
ObservabilityEvent through an injected Reporter instead of writing to a
process-wide log. LoggingReporter is the default sink.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from .logging import StructuredLogger, get_logger


class EventName(str, Enum):
    """Named observability events."""
    CATCH_ALL_PROVIDER_MATCHED = "CatchAllProviderMatched"
    SANITIZATION_DEGRADED = "SanitizationDegraded"
    SEALING_VERSION_DOWNGRADED = "SealingVersionDowngraded"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ObservabilityEvent:
    """A typed event raised on a security-relevant path."""
    name: EventName
    severity: Severity
    fields: Dict[str, Any] = field(default_factory=dict)


class Reporter(Protocol):
    """Receives observability events."""

    def report(self, event: ObservabilityEvent) -> None:
        ...


class LoggingReporter:
    """Writes events through the structured logger."""

    def __init__(self, logger: Optional[StructuredLogger] = None):
        self.logger = logger or get_logger("evidence_bridge.observability")

    def report(self, event: ObservabilityEvent) -> None:
        log = {
            Severity.INFO: self.logger.info,
            Severity.WARNING: self.logger.warning,
            Severity.ERROR: self.logger.error,
        }[event.severity]
        log(event.name.value, **event.fields)


class CollectingReporter:
    """Keeps events in memory, for callers that forward them to their own sink."""

    def __init__(self):
        self.events: List[ObservabilityEvent] = []

    def report(self, event: ObservabilityEvent) -> None:
        self.events.append(event)

    def named(self, name: EventName) -> List[ObservabilityEvent]:
        return [e for e in self.events if e.name == name]
