# tests/test_importer.py
"""
Test import bundle submission.

Failures come back as ImportResponse(ok=False), never as exceptions.
"""

import json

import httpx

from evidence_bridge.bundles.assembler import BundleEmitter
from evidence_bridge.importer import ImportOptions, post_import_bundle
from evidence_bridge.sealing import LocalHashChainSealer, seal_bundle
from evidence_bridge.settings import Settings


def _sealed(event):
    return seal_bundle(BundleEmitter().from_event(event), LocalHashChainSealer())


class TestPostImportBundle:
    """Tests for post_import_bundle."""

    def test_success(self, pr_event):
        """2xx responses are ok and carry the parsed body."""
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("authorization")
            seen["content_type"] = request.headers.get("content-type")
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": "imp-1"})

        bundle = _sealed(pr_event)
        response = post_import_bundle(
            bundle,
            ImportOptions(base_url="https://guardspine.test", token="tok"),
            transport=httpx.MockTransport(handler),
        )

        assert response.ok
        assert response.status == 201
        assert response.data == {"id": "imp-1"}
        assert response.error is None
        assert seen["url"] == "https://guardspine.test/api/v1/bundles/import"
        assert seen["auth"] == "Bearer tok"
        assert seen["content_type"] == "application/json"
        assert seen["body"]["bundle_id"] == bundle.bundle_id
        assert seen["body"]["immutability_proof"]["root_hash"] == bundle.immutability_proof.root_hash

    def test_no_token_no_auth_header(self, pr_event):
        """Without a token no Authorization header is sent."""
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={})

        post_import_bundle(
            _sealed(pr_event),
            ImportOptions(base_url="https://guardspine.test"),
            transport=httpx.MockTransport(handler),
        )

        assert seen["auth"] is None

    def test_extra_headers(self, pr_event):
        """Extra headers are sent with the request."""
        seen = {}

        def handler(request):
            seen["tenant"] = request.headers.get("x-tenant")
            return httpx.Response(200)

        post_import_bundle(
            _sealed(pr_event),
            ImportOptions(base_url="https://guardspine.test", headers={"X-Tenant": "acme"}),
            transport=httpx.MockTransport(handler),
        )

        assert seen["tenant"] == "acme"

    def test_non_2xx(self, pr_event):
        """Non-2xx responses are not ok and keep the body as the error."""
        transport = httpx.MockTransport(lambda request: httpx.Response(409, text="duplicate bundle"))

        response = post_import_bundle(
            _sealed(pr_event), ImportOptions(base_url="https://guardspine.test"), transport=transport
        )

        assert not response.ok
        assert response.status == 409
        assert response.error == "duplicate bundle"
        assert response.data == "duplicate bundle"

    def test_timeout(self, pr_event):
        """Timeouts are reported with status 0."""
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        response = post_import_bundle(
            _sealed(pr_event),
            ImportOptions(base_url="https://guardspine.test", timeout_seconds=0.1),
            transport=httpx.MockTransport(handler),
        )

        assert not response.ok
        assert response.status == 0
        assert "Timeout" in response.error

    def test_connection_error(self, pr_event):
        """Transport errors are reported with status 0."""
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        response = post_import_bundle(
            _sealed(pr_event),
            ImportOptions(base_url="https://guardspine.test"),
            transport=httpx.MockTransport(handler),
        )

        assert not response.ok
        assert response.status == 0
        assert "refused" in response.error

    def test_to_dict(self, pr_event):
        """ImportResponse serializes all fields."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"ok": 1}))
        response = post_import_bundle(
            _sealed(pr_event), ImportOptions(base_url="https://guardspine.test"), transport=transport
        )

        assert response.to_dict() == {"ok": True, "status": 200, "data": {"ok": 1}, "error": None}


class TestImportOptions:
    """Tests for options from settings."""

    def test_disabled_without_base_url(self):
        """No base URL means no submission."""
        assert ImportOptions.from_settings(Settings(guardspine_base_url=None)) is None

    def test_from_settings(self):
        """Base URL, token and timeout come from settings."""
        options = ImportOptions.from_settings(Settings(
            guardspine_base_url="https://gs.test",
            guardspine_token="t",
            guardspine_timeout_seconds=3.0,
        ))

        assert options.base_url == "https://gs.test"
        assert options.token == "t"
        assert options.timeout_seconds == 3.0
