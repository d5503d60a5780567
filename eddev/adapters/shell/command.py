"""
Process runner shared by the tool adapters.

Wrapped tools run without a timeout: ``ddev config`` and
``composer create`` can legitimately take many minutes. In streaming
mode the tool writes straight to the user's terminal; otherwise its
output is captured and forwarded to the ``eddev.tools`` logger.
"""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass

from eddev.core.models.action import Receipt
from eddev.core.observability.logging_config import TOOL_LOGGER

logger = logging.getLogger(__name__)
tool_logger = logging.getLogger(TOOL_LOGGER)


@dataclass
class ToolResult:
    """Outcome of one external process."""

    argv: list[str]
    return_code: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.return_code == 0

    @property
    def error(self) -> str:
        """Best available failure description."""
        return self.stderr.strip() or f"{self.argv[0]} exited with code {self.return_code}"


def run_tool(
    argv: list[str],
    cwd: str | None = None,
    *,
    stream: bool = False,
    timeout: int | None = None,
) -> ToolResult:
    """Run ``argv`` and return its result.

    Raises:
        FileNotFoundError: If the executable is not installed.
        subprocess.TimeoutExpired: If ``timeout`` is set and exceeded.
    """
    logger.debug("Running: %s (cwd=%s)", " ".join(argv), cwd)
    start = time.monotonic()

    if stream:
        proc = subprocess.run(argv, cwd=cwd, timeout=timeout)
        return ToolResult(
            argv=argv,
            return_code=proc.returncode,
            duration_ms=int((time.monotonic() - start) * 1000),
        )

    proc = subprocess.run(
        argv,
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=timeout,
    )
    for line in (proc.stdout or "").splitlines():
        tool_logger.debug("[%s] %s", argv[0], line)
    for line in (proc.stderr or "").splitlines():
        tool_logger.debug("[%s:err] %s", argv[0], line)

    return ToolResult(
        argv=argv,
        return_code=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
        duration_ms=int((time.monotonic() - start) * 1000),
    )


def receipt_from_result(
    adapter: str,
    action_id: str,
    result: ToolResult,
    **metadata: object,
) -> Receipt:
    """Translate a ToolResult into a Receipt."""
    meta = {"command": " ".join(result.argv), "return_code": result.return_code, **metadata}
    if result.ok:
        return Receipt.success(
            adapter=adapter,
            action_id=action_id,
            output=result.stdout.strip(),
            duration_ms=result.duration_ms,
            metadata={**meta, "stderr": result.stderr.strip()},
        )
    return Receipt.failure(
        adapter=adapter,
        action_id=action_id,
        error=result.error,
        duration_ms=result.duration_ms,
        metadata={**meta, "stdout": result.stdout.strip()},
    )
