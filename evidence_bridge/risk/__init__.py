# Risk module - risk tier classification
from .classifier import DEFAULT_RISK_TIER, RiskConfig, classify

__all__ = ["DEFAULT_RISK_TIER", "RiskConfig", "classify"]
