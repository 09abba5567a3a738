# evidence_bridge/main.py
"""
Webhook Evidence Bridge - Main Application

Receives source-control webhooks and turns them into sealed,
tamper-evident evidence bundles for GuardSpine.
"""

from fastapi import FastAPI

from .api import webhooks_router
from .logging import configure_logging
from .settings import settings


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    configure_logging(level=settings.log_level, json_output=settings.log_json)

    app = FastAPI(
        title="Webhook Evidence Bridge",
        description="""
        Converts GitHub / GitLab / generic webhooks into sealed evidence bundles.

        - Deterministic canonical JSON and SHA-256 content hashes
        - Risk tiers from labels and changed paths
        - Optional PII sanitization before sealing
        - Hash-chain immutability proofs (schema 0.2.0 / 0.2.1)
        """,
        version="0.2.1",
    )

    app.include_router(webhooks_router)

    @app.get("/health")
    async def health_check():
        """Basic health check."""
        return {"status": "ok", "service": "webhook-evidence-bridge"}

    return app


app = create_app()


def run():
    """Run the server (entry point for CLI)."""
    import uvicorn
    uvicorn.run(
        "evidence_bridge.main:app",
        host=settings.api_host,
        port=settings.api_port,
    )


if __name__ == "__main__":
    run()
