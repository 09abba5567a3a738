# evidence_bridge/errors.py
"""
Error taxonomy for the evidence bridge.

Webhook errors come from dispatch (before any bundle exists).
Sealing errors are always fatal for the sealing call; an unsealed bundle
is never handed back in place of a sealed one.

Sanitization degradation and submission failures are NOT exceptions:
the former is recorded in the SanitizationSummary status, the latter is
returned as an ImportResponse with ok=False.
"""

from typing import Optional


class EvidenceBridgeError(Exception):
    """Base exception for evidence bridge errors."""
    pass


# ============================================================
# WEBHOOK DISPATCH
# ============================================================

class WebhookError(EvidenceBridgeError):
    """Base exception for webhook dispatch errors."""
    pass


class NoMatchingProviderError(WebhookError):
    """Raised when no provider recognizes the incoming request."""

    def __init__(self, message: str = "No webhook provider matched the incoming request headers"):
        super().__init__(message)


class SignatureValidationError(WebhookError):
    """Raised when webhook signature or token validation fails."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f'Signature validation failed for provider "{provider}": {reason}')


class PayloadParseError(WebhookError):
    """Raised when the webhook body is not a JSON object."""
    pass


# ============================================================
# SEALING
# ============================================================

class SealingError(EvidenceBridgeError):
    """Base exception for sealing errors."""
    retryable = False


class SealingUnavailableError(SealingError):
    """Raised when the sealing authority cannot be reached or is not configured."""
    retryable = True


class SealingRejectedError(SealingError):
    """Raised when the authority rejects the draft or returns no valid proof."""
    pass


class SealingVersionRejected(SealingError):
    """
    Raised BY a sealing authority that does not support the declared
    bundle schema version.

    The sealing client consumes this to downgrade 0.2.1 -> 0.2.0 once.
    """

    def __init__(self, version: str, supported: Optional[tuple] = None):
        self.version = version
        self.supported = tuple(supported or ())
        detail = f" (supported: {', '.join(self.supported)})" if self.supported else ""
        super().__init__(f"Unsupported bundle version {version}{detail}")


# ============================================================
# SANITIZATION
# ============================================================

class SanitizerError(EvidenceBridgeError):
    """Raised by a sanitizer implementation when it cannot process text."""
    pass
