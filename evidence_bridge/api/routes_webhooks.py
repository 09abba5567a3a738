# evidence_bridge/api/routes_webhooks.py
"""
Webhook ingestion API routes.

POST /webhooks/ingest receives a raw webhook (GitHub, GitLab or generic),
builds the evidence bundle, seals it and optionally submits it.

Error mapping:
- 404 no provider matched
- 401 signature/token validation failed
- 400 body is not UTF-8, not a JSON object, or has no canonical form
- 503 sealing authority unavailable
- 502 sealing authority rejected the bundle
"""

from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from ..errors import (
    NoMatchingProviderError,
    PayloadParseError,
    SealingRejectedError,
    SealingUnavailableError,
    SignatureValidationError,
)
from ..logging import get_api_logger
from ..pipeline import EvidencePipeline
from ..settings import settings
from ..webhooks import GenericProvider, GitHubProvider, GitLabProvider, WebhookHandler

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

logger = get_api_logger()


class IngestResponse(BaseModel):
    """Sealed bundle produced from one webhook."""
    artifact_id: str
    risk_tier: str
    scope: str
    import_bundle: Dict[str, Any]
    submission: Optional[Dict[str, Any]] = None


@lru_cache(maxsize=1)
def get_handler() -> WebhookHandler:
    """Provider chain: GitHub, GitLab, then the catch-all generic provider."""
    return WebhookHandler([
        GitHubProvider(secret=settings.github_webhook_secret),
        GitLabProvider(secret_token=settings.gitlab_secret_token),
        GenericProvider(),
    ])


@lru_cache(maxsize=1)
def get_pipeline() -> EvidencePipeline:
    return EvidencePipeline.from_settings(settings)


@router.post("/ingest", response_model=IngestResponse)
async def ingest_webhook(
    request: Request,
    handler: WebhookHandler = Depends(get_handler),
    pipeline: EvidencePipeline = Depends(get_pipeline),
) -> IngestResponse:
    """
    Ingest one webhook and return the sealed import bundle.

    The raw body is used as-is for signature validation, so it must
    decode as UTF-8 without substitutions.
    """
    raw = await request.body()
    try:
        body = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Webhook body is not valid UTF-8: {e}")
    headers = dict(request.headers)

    try:
        event = handler.handle_request(headers, body)
    except NoMatchingProviderError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SignatureValidationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except PayloadParseError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        result = await run_in_threadpool(pipeline.process, event)
    except SealingUnavailableError as e:
        logger.error("webhook_sealing_unavailable", repo=event.repo, error=str(e))
        raise HTTPException(status_code=503, detail=str(e))
    except SealingRejectedError as e:
        logger.error("webhook_sealing_rejected", repo=event.repo, error=str(e))
        raise HTTPException(status_code=502, detail=str(e))

    return IngestResponse(**result.to_dict())
