# evidence_bridge/importer.py
"""
Import bundle submission.

POSTs a sealed ImportBundle to GuardSpine:

    POST <base_url>/api/v1/bundles/import
    Content-Type: application/json
    Authorization: Bearer <token>   (optional)

Failures are returned as data (ImportResponse.ok == False), never raised,
so callers can apply their own retry policy. Nothing is retried here.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from .bundles.models import ImportBundle
from .logging import get_logger

logger = get_logger(__name__)

IMPORT_PATH = "/api/v1/bundles/import"

# Default timeout for bundle submission (seconds)
DEFAULT_TIMEOUT = 10.0


@dataclass
class ImportOptions:
    """Where and how to submit bundles."""
    base_url: str
    token: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings=None) -> Optional["ImportOptions"]:
        """Options from settings, or None when GUARDSPINE_BASE_URL is unset."""
        if settings is None:
            from .settings import settings
        if not settings.guardspine_base_url:
            return None
        return cls(
            base_url=settings.guardspine_base_url,
            token=settings.guardspine_token,
            timeout_seconds=settings.guardspine_timeout_seconds,
        )


@dataclass
class ImportResponse:
    """Outcome of one submission. status == 0 means no HTTP response."""
    ok: bool
    status: int
    data: Any = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "status": self.status,
            "data": self.data,
            "error": self.error,
        }


def _safe_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def post_import_bundle(
    bundle: ImportBundle,
    options: ImportOptions,
    transport: Optional[httpx.BaseTransport] = None,
) -> ImportResponse:
    """
    Submit a sealed bundle.

    Args:
        bundle: Sealed ImportBundle
        options: Endpoint, token, timeout, extra headers
        transport: Optional httpx transport (tests use httpx.MockTransport)

    Returns:
        ImportResponse. Non-2xx, timeouts and transport errors are ok=False.
    """
    url = httpx.URL(options.base_url).join(IMPORT_PATH)
    headers = {
        "Content-Type": "application/json",
        **options.headers,
    }
    if options.token:
        headers["Authorization"] = f"Bearer {options.token}"

    body = json.dumps(bundle.to_dict(), ensure_ascii=False).encode("utf-8")

    try:
        with httpx.Client(timeout=options.timeout_seconds, transport=transport) as client:
            response = client.post(url, content=body, headers=headers)
    except httpx.TimeoutException as e:
        logger.warning(
            "bundle_submission_timeout",
            bundle_id=bundle.bundle_id,
            url=str(url),
            timeout_seconds=options.timeout_seconds,
        )
        return ImportResponse(ok=False, status=0, error=f"Timeout after {options.timeout_seconds}s: {e}")
    except httpx.HTTPError as e:
        logger.warning(
            "bundle_submission_failed",
            bundle_id=bundle.bundle_id,
            url=str(url),
            error=str(e),
        )
        return ImportResponse(ok=False, status=0, error=str(e))

    text = response.text
    ok = response.is_success
    logger.info(
        "bundle_submitted",
        bundle_id=bundle.bundle_id,
        status=response.status_code,
        ok=ok,
    )
    return ImportResponse(
        ok=ok,
        status=response.status_code,
        data=_safe_json(text) if text else None,
        error=None if ok else text,
    )
