# evidence_bridge/sanitization/local_process.py
"""
Local executable sanitizer.

Runs a redaction binary (e.g. pii-shield) once per text: input on stdin,
redacted text on stdout. The call is synchronous. Its temp files live in
a per-call directory that is removed on every exit path.
"""

import os
import re
import shlex
import subprocess
import tempfile
from typing import Dict, List, Optional, Sequence, Union

from ..errors import SanitizerError
from ..evidence.hashing import compute_sha256
from ..logging import get_logger
from .base import SanitizerRequest, SanitizerResult

logger = get_logger(__name__)

HIDDEN_TOKEN_RE = re.compile(r"\[HIDDEN")

DEFAULT_TIMEOUT = 10.0


class SubprocessSanitizer:
    """Sanitizer backed by a local executable reading stdin, writing stdout."""

    method = "subprocess"
    token_format = "[HIDDEN:<hash>]"

    def __init__(
        self,
        command: Union[str, Sequence[str]],
        timeout: float = DEFAULT_TIMEOUT,
        env: Optional[Dict[str, str]] = None,
        engine_name: str = "pii-shield",
        engine_version: str = "unknown",
    ):
        """
        Args:
            command: Executable and arguments (a string is split shell-style)
            timeout: Seconds before the process is killed
            env: Extra environment variables for the process
            engine_name: Reported engine name
            engine_version: Reported engine version
        """
        self.command: List[str] = shlex.split(command) if isinstance(command, str) else list(command)
        if not self.command:
            raise ValueError("SubprocessSanitizer requires a command")
        self.timeout = timeout
        self.env = env or {}
        self.engine_name = engine_name
        self.engine_version = engine_version

    def sanitize(self, text: str, request: SanitizerRequest) -> SanitizerResult:
        # Line-based scanners need a trailing newline to flush the last line
        payload = text if text.endswith("\n") else text + "\n"

        with tempfile.TemporaryDirectory(prefix="sanitizer_") as workdir:
            in_path = os.path.join(workdir, "in")
            out_path = os.path.join(workdir, "out")
            err_path = os.path.join(workdir, "err")

            with open(in_path, "w", encoding="utf-8") as f:
                f.write(payload)

            with open(in_path, "rb") as stdin, \
                    open(out_path, "wb") as stdout, \
                    open(err_path, "wb") as stderr:
                try:
                    completed = subprocess.run(
                        self.command,
                        stdin=stdin,
                        stdout=stdout,
                        stderr=stderr,
                        env={**os.environ, **self.env},
                        timeout=self.timeout,
                        check=False,
                    )
                except subprocess.TimeoutExpired as e:
                    raise SanitizerError(
                        f"{self.engine_name} timed out after {self.timeout}s"
                    ) from e
                except OSError as e:
                    raise SanitizerError(f"Could not run {self.command[0]}: {e}") from e

            with open(out_path, encoding="utf-8", errors="replace") as f:
                output = f.read()

            if completed.returncode != 0:
                with open(err_path, encoding="utf-8", errors="replace") as f:
                    stderr_text = f.read().strip()
                logger.warning(
                    "sanitizer_process_failed",
                    command=self.command[0],
                    returncode=completed.returncode,
                    stderr=stderr_text[:500],
                )
                raise SanitizerError(
                    f"{self.engine_name} exited with status {completed.returncode}"
                )

        sanitized = output.strip()
        changed = sanitized != text.strip()
        redaction_count = len(HIDDEN_TOKEN_RE.findall(sanitized)) if changed else 0

        return SanitizerResult(
            sanitized_text=sanitized,
            changed=changed,
            redaction_count=redaction_count,
            redactions_by_type={},
            engine_name=self.engine_name,
            engine_version=self.engine_version,
            method=self.method,
            input_hash=compute_sha256(text),
            output_hash=compute_sha256(sanitized),
        )
