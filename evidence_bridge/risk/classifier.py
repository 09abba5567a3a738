# evidence_bridge/risk/classifier.py
"""
Risk tier classification.

Precedence:
1. Labels, in the order the event lists them. First mapped label wins,
   regardless of how severe its tier is.
2. Changed-file path prefixes, tiers in the order the config lists them.
3. The default tier.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..events.models import NormalizedEvent

DEFAULT_RISK_TIER = "unknown"


@dataclass
class RiskConfig:
    """Risk classification configuration."""
    default_risk_tier: str = DEFAULT_RISK_TIER
    risk_labels: Dict[str, str] = field(default_factory=dict)  # label -> tier
    risk_paths: Dict[str, List[str]] = field(default_factory=dict)  # tier -> path prefixes

    @classmethod
    def from_settings(cls, settings=None) -> "RiskConfig":
        """Build from application settings (RISK_LABELS, RISK_PATHS, DEFAULT_RISK_TIER)."""
        if settings is None:
            from ..settings import settings
        return cls(
            default_risk_tier=settings.default_risk_tier or DEFAULT_RISK_TIER,
            risk_labels=dict(settings.risk_labels),
            risk_paths={tier: list(prefixes) for tier, prefixes in settings.risk_paths.items()},
        )


def classify(event: NormalizedEvent, config: Optional[RiskConfig] = None) -> str:
    """
    Classify an event into a risk tier.

    Args:
        event: Normalized webhook event
        config: Risk configuration (defaults: no labels, no paths, "unknown")

    Returns:
        Risk tier string. Never raises.
    """
    config = config or RiskConfig()

    for label in event.labels:
        tier = config.risk_labels.get(label)
        if tier:
            return tier

    for tier, prefixes in config.risk_paths.items():
        for prefix in prefixes:
            if any(path.startswith(prefix) for path in event.changed_files):
                return tier

    return config.default_risk_tier
