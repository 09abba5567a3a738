# evidence_bridge/settings.py
"""
Application settings.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

# Load .env file
from dotenv import load_dotenv
load_dotenv()


def _json_env(name: str, default: str) -> dict:
    """Read a JSON object from an environment variable."""
    raw = os.getenv(name, default)
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"{name} must be a JSON object: {e}") from e
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a JSON object, got {type(value).__name__}")
    return value


def _csv_env(name: str, default: str) -> List[str]:
    return [part.strip() for part in os.getenv(name, default).split(",") if part.strip()]


@dataclass
class Settings:
    """Application configuration."""

    # GuardSpine import endpoint
    guardspine_base_url: Optional[str] = os.getenv("GUARDSPINE_BASE_URL")
    guardspine_token: Optional[str] = os.getenv("GUARDSPINE_TOKEN")
    guardspine_timeout_seconds: float = float(os.getenv("GUARDSPINE_TIMEOUT", "10"))

    # Provider secrets
    github_webhook_secret: Optional[str] = os.getenv("GITHUB_WEBHOOK_SECRET")
    gitlab_secret_token: Optional[str] = os.getenv("GITLAB_SECRET_TOKEN")

    # Risk classification
    default_risk_tier: str = os.getenv("DEFAULT_RISK_TIER", "unknown")
    risk_labels: Dict[str, str] = field(
        default_factory=lambda: _json_env("RISK_LABELS", "{}")
    )
    risk_paths: Dict[str, List[str]] = field(
        default_factory=lambda: _json_env("RISK_PATHS", "{}")
    )

    # Sanitization
    sanitizer: str = os.getenv("SANITIZER", "none")
    sanitizer_command: Optional[str] = os.getenv("SANITIZER_COMMAND")
    sanitizer_endpoint: Optional[str] = os.getenv("SANITIZER_ENDPOINT")
    sanitizer_api_key: Optional[str] = os.getenv("SANITIZER_API_KEY")
    sanitizer_timeout_seconds: float = float(os.getenv("SANITIZER_TIMEOUT", "10"))
    sanitizer_salt: str = os.getenv("SANITIZER_SALT", "")
    sanitizer_max_workers: int = int(os.getenv("SANITIZER_MAX_WORKERS", "4"))

    # Sealing
    sealer_versions: List[str] = field(
        default_factory=lambda: _csv_env("SEALER_VERSIONS", "0.2.0,0.2.1")
    )

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = field(
        default_factory=lambda: os.getenv("LOG_JSON", "true").lower() not in ("0", "false", "no")
    )

    # API settings
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))


# Global settings instance
settings = Settings()
