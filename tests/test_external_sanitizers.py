# tests/test_external_sanitizers.py
"""
Test sanitizers that run outside the process.

The subprocess sanitizer is driven with the current Python interpreter
as its executable; the remote sanitizer with httpx.MockTransport.
"""

import json
import sys
import tempfile

import httpx
import pytest

from evidence_bridge.errors import SanitizerError
from evidence_bridge.sanitization import (
    InputFormat,
    RemoteSanitizer,
    SanitizerRequest,
    SubprocessSanitizer,
)

REDACT_SCRIPT = (
    "import sys; "
    "sys.stdout.write(sys.stdin.read().replace('secret', '[HIDDEN:abc123]'))"
)


def _python(script):
    return [sys.executable, "-c", script]


class TestSubprocessSanitizer:
    """Tests for the local executable sanitizer."""

    def test_redacts_via_stdout(self):
        """Output of the process becomes the sanitized text."""
        sanitizer = SubprocessSanitizer(_python(REDACT_SCRIPT))
        result = sanitizer.sanitize("my secret value", SanitizerRequest())

        assert result.sanitized_text == "my [HIDDEN:abc123] value"
        assert result.changed
        assert result.redaction_count == 1
        assert result.method == "subprocess"
        assert result.engine_name == "pii-shield"

    def test_unchanged(self):
        """Output equal to input (ignoring the trailing newline) is unchanged."""
        sanitizer = SubprocessSanitizer(_python(REDACT_SCRIPT))
        result = sanitizer.sanitize("nothing to hide", SanitizerRequest())

        assert not result.changed
        assert result.redaction_count == 0

    def test_non_zero_exit(self):
        """A failing process raises SanitizerError."""
        sanitizer = SubprocessSanitizer(_python("import sys; sys.exit(3)"))

        with pytest.raises(SanitizerError, match="status 3"):
            sanitizer.sanitize("text", SanitizerRequest())

    def test_timeout(self):
        """A hung process is killed and reported."""
        sanitizer = SubprocessSanitizer(_python("import time; time.sleep(10)"), timeout=0.5)

        with pytest.raises(SanitizerError, match="timed out"):
            sanitizer.sanitize("text", SanitizerRequest())

    def test_missing_executable(self):
        """An executable that cannot be started raises SanitizerError."""
        sanitizer = SubprocessSanitizer(["/nonexistent/pii-shield-binary"])

        with pytest.raises(SanitizerError):
            sanitizer.sanitize("text", SanitizerRequest())

    def test_temp_files_removed(self, tmp_path, monkeypatch):
        """Per-call temp directories are removed on success and failure."""
        monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))

        SubprocessSanitizer(_python(REDACT_SCRIPT)).sanitize("secret", SanitizerRequest())
        with pytest.raises(SanitizerError):
            SubprocessSanitizer(_python("import sys; sys.exit(1)")).sanitize("x", SanitizerRequest())

        assert list(tmp_path.iterdir()) == []

    def test_string_command_split(self):
        """String commands are split shell-style."""
        sanitizer = SubprocessSanitizer("pii-shield --mode redact")

        assert sanitizer.command == ["pii-shield", "--mode", "redact"]

    def test_empty_command_rejected(self):
        """An empty command is a configuration error."""
        with pytest.raises(ValueError):
            SubprocessSanitizer([])


class TestRemoteSanitizer:
    """Tests for the HTTP sanitizer."""

    def test_request_and_response_mapping(self):
        """Request is camelCase JSON; response maps onto SanitizerResult."""
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={
                "sanitizedText": '{"email":"[HIDDEN:1]"}',
                "changed": True,
                "redactionCount": 1,
                "redactionsByType": {"email": 1},
                "engineName": "pii-shield",
                "engineVersion": "2.0.0",
            })

        sanitizer = RemoteSanitizer(
            "https://sanitizer.test/v1/sanitize",
            api_key="k-123",
            transport=httpx.MockTransport(handler),
        )
        result = sanitizer.sanitize(
            '{"email":"a@b.co"}',
            SanitizerRequest(input_format=InputFormat.JSON, purpose="webhook_payload"),
        )

        assert seen["body"] == {
            "text": '{"email":"a@b.co"}',
            "inputFormat": "json",
            "purpose": "webhook_payload",
            "includeFindings": False,
        }
        assert seen["auth"] == "Bearer k-123"
        assert result.sanitized_text == '{"email":"[HIDDEN:1]"}'
        assert result.changed
        assert result.redactions_by_type == {"email": 1}
        assert result.engine_version == "2.0.0"
        assert result.method == "remote-http"

    def test_snake_case_response(self):
        """snake_case response keys are accepted too."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"sanitized_text": "x", "changed": False})
        )
        result = RemoteSanitizer("https://s.test/", transport=transport).sanitize(
            "x", SanitizerRequest()
        )

        assert result.sanitized_text == "x"
        assert not result.changed

    def test_retries_server_errors(self):
        """5xx responses are retried, then the success is used."""
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(503)
            return httpx.Response(200, json={"sanitizedText": "ok", "changed": True})

        sanitizer = RemoteSanitizer("https://s.test/", transport=httpx.MockTransport(handler))
        result = sanitizer.sanitize("raw", SanitizerRequest())

        assert len(calls) == 2
        assert result.sanitized_text == "ok"

    def test_client_error_not_retried(self):
        """4xx responses fail immediately."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(422, json={"error": "bad"})

        sanitizer = RemoteSanitizer("https://s.test/", transport=httpx.MockTransport(handler))

        with pytest.raises(SanitizerError, match="422"):
            sanitizer.sanitize("raw", SanitizerRequest())
        assert len(calls) == 1

    def test_transport_error(self):
        """Connection failures surface as SanitizerError after retries."""
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("refused", request=request)

        sanitizer = RemoteSanitizer(
            "https://s.test/", max_attempts=2, transport=httpx.MockTransport(handler)
        )

        with pytest.raises(SanitizerError):
            sanitizer.sanitize("raw", SanitizerRequest())
        assert len(calls) == 2

    def test_missing_sanitized_text(self):
        """A response without sanitizedText is rejected."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"changed": True}))

        with pytest.raises(SanitizerError, match="sanitizedText"):
            RemoteSanitizer("https://s.test/", transport=transport).sanitize("x", SanitizerRequest())

    def test_non_json_response(self):
        """A non-JSON body is rejected."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(SanitizerError, match="non-JSON"):
            RemoteSanitizer("https://s.test/", transport=transport).sanitize("x", SanitizerRequest())
