# tests/conftest.py
"""
Pytest configuration and fixtures.

Everything runs in-process: no network, no database. HTTP collaborators
are exercised through httpx.MockTransport.
"""

import pytest

from evidence_bridge.events.models import EventType, NormalizedEvent
from evidence_bridge.reporting import CollectingReporter
from evidence_bridge.risk.classifier import RiskConfig


@pytest.fixture
def make_event():
    """Factory for NormalizedEvent with sensible defaults."""
    def _make(**overrides) -> NormalizedEvent:
        fields = {
            "provider": "github",
            "event_type": EventType.PULL_REQUEST,
            "raw_event_type": "pull_request",
            "repo": "org/repo",
            "timestamp": "2026-01-01T00:00:00.000Z",
        }
        fields.update(overrides)
        return NormalizedEvent(**fields)
    return _make


@pytest.fixture
def pr_event(make_event):
    """A labelled pull request with a diff URL."""
    return make_event(
        pr_number=42,
        sha="abc123def456",
        diff_url="https://github.com/org/repo/pull/42.diff",
        author="testuser",
        labels=["bug", "security"],
        action="opened",
        raw_payload={"action": "opened", "number": 42},
    )


@pytest.fixture
def risk_config():
    """Label and path rules used across tests."""
    return RiskConfig(
        risk_labels={"bug": "high", "security": "critical"},
        risk_paths={
            "critical": ["src/auth/"],
            "medium": ["src/"],
        },
    )


@pytest.fixture
def reporter():
    """In-memory observability sink."""
    return CollectingReporter()
