# evidence_bridge/sanitization/remote.py
"""
Remote HTTP sanitizer.

POSTs text to a sanitization service and maps the response onto
SanitizerResult. Uses httpx for the call and tenacity to retry transient
failures (timeouts, 5xx); the service is stateless so a retry is safe.

Request:  {"text", "inputFormat", "purpose", "includeFindings"}
Response: {"sanitizedText", "changed", "redactionCount", "redactionsByType",
           "engineName"?, "engineVersion"?, "method"?, "inputHash"?, "outputHash"?}
"""

from typing import Any, Dict, Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception,
)

from ..errors import SanitizerError
from ..logging import get_logger
from .base import SanitizerRequest, SanitizerResult

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_ATTEMPTS = 3


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, (httpx.TimeoutException, httpx.TransportError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return False


def _field(data: Dict[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    if camel in data:
        return data[camel]
    return data.get(snake, default)


class RemoteSanitizer:
    """Sanitizer backed by a remote HTTP endpoint."""

    method = "remote-http"
    token_format = "[HIDDEN:<hash>]"

    def __init__(
        self,
        endpoint: str,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            endpoint: Full URL of the sanitize endpoint
            api_key: Optional bearer token
            timeout: Per-attempt timeout in seconds
            max_attempts: Attempts before giving up on transient failures
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _post(self, body: Dict[str, Any]) -> Dict[str, Any]:
        @retry(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        )
        def _attempt() -> Dict[str, Any]:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.endpoint, json=body, headers=self._headers())
                response.raise_for_status()
                return response.json()

        return _attempt()

    def sanitize(self, text: str, request: SanitizerRequest) -> SanitizerResult:
        body = {
            "text": text,
            "inputFormat": request.input_format.value,
            "purpose": request.purpose,
            "includeFindings": request.include_findings,
        }

        try:
            data = self._post(body)
        except httpx.HTTPStatusError as e:
            raise SanitizerError(
                f"Sanitizer returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise SanitizerError(f"Sanitizer request failed: {e}") from e
        except ValueError as e:
            raise SanitizerError("Sanitizer returned a non-JSON response") from e

        if not isinstance(data, dict) or ("sanitizedText" not in data and "sanitized_text" not in data):
            raise SanitizerError("Sanitizer response is missing sanitizedText")

        sanitized = _field(data, "sanitizedText", "sanitized_text")
        return SanitizerResult(
            sanitized_text=sanitized,
            changed=bool(_field(data, "changed", "changed", sanitized != text)),
            redaction_count=int(_field(data, "redactionCount", "redaction_count", 0)),
            redactions_by_type=dict(_field(data, "redactionsByType", "redactions_by_type", {}) or {}),
            engine_name=_field(data, "engineName", "engine_name"),
            engine_version=_field(data, "engineVersion", "engine_version"),
            method=_field(data, "method", "method", self.method),
            input_hash=_field(data, "inputHash", "input_hash"),
            output_hash=_field(data, "outputHash", "output_hash"),
        )
