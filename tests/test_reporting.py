# tests/test_reporting.py
"""
Test structured logging and observability events.
"""

import json
import logging

from evidence_bridge.logging import StructuredLogFormatter, get_logger
from evidence_bridge.reporting import (
    CollectingReporter,
    EventName,
    LoggingReporter,
    ObservabilityEvent,
    Severity,
)


class TestStructuredLogging:
    """Tests for the JSON log formatter."""

    def test_structured_fields_in_output(self):
        """Keyword fields end up as top-level JSON keys."""
        record = logging.LogRecord(
            name="evidence_bridge.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="bundle_sealed",
            args=(),
            exc_info=None,
        )
        record.structured_data = {"bundle_id": "b-1", "item_count": 2}

        data = json.loads(StructuredLogFormatter().format(record))

        assert data["message"] == "bundle_sealed"
        assert data["level"] == "INFO"
        assert data["bundle_id"] == "b-1"
        assert data["item_count"] == 2
        assert "source" not in data

    def test_errors_carry_source(self):
        """Error records include their source location."""
        record = logging.LogRecord(
            name="evidence_bridge.test",
            level=logging.ERROR,
            pathname=__file__,
            lineno=7,
            msg="bundle_sealing_failed",
            args=(),
            exc_info=None,
        )

        data = json.loads(StructuredLogFormatter().format(record))

        assert data["source"]["line"] == 7

    def test_logger_passes_fields(self, caplog):
        """StructuredLogger attaches kwargs to the record."""
        logger = get_logger("evidence_bridge.test")

        with caplog.at_level(logging.INFO, logger="evidence_bridge.test"):
            logger.info("webhook_received", provider="github")

        assert caplog.records[-1].structured_data == {"provider": "github"}


class TestReporters:
    """Tests for observability sinks."""

    def test_collecting_reporter(self):
        """Events are kept in order and filterable by name."""
        reporter = CollectingReporter()
        reporter.report(ObservabilityEvent(EventName.CATCH_ALL_PROVIDER_MATCHED, Severity.WARNING))
        reporter.report(ObservabilityEvent(EventName.SANITIZATION_DEGRADED, Severity.ERROR))

        assert [e.name for e in reporter.events] == [
            EventName.CATCH_ALL_PROVIDER_MATCHED,
            EventName.SANITIZATION_DEGRADED,
        ]
        assert len(reporter.named(EventName.SANITIZATION_DEGRADED)) == 1

    def test_logging_reporter(self, caplog):
        """Events are logged at their severity under their name."""
        with caplog.at_level(logging.WARNING, logger="evidence_bridge.observability"):
            LoggingReporter().report(ObservabilityEvent(
                EventName.SEALING_VERSION_DOWNGRADED,
                Severity.WARNING,
                {"bundle_id": "b-1"},
            ))

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.getMessage() == "SealingVersionDowngraded"
        assert record.structured_data == {"bundle_id": "b-1"}
