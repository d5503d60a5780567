"""
DDEV adapter — container environment operations.

Wraps the ddev CLI: project configuration, add-ons, lifecycle, command
execution inside the web container, and project discovery.
"""

from __future__ import annotations

import json
import logging
import shutil
from typing import Any

from eddev.adapters.base import Adapter, ExecutionContext
from eddev.adapters.shell.command import receipt_from_result, run_tool
from eddev.core.models.action import Receipt

logger = logging.getLogger(__name__)


def parse_ddev_json(output: str) -> Any:
    """Extract the ``raw`` payload from ``ddev ... -j`` output.

    ddev prints one JSON object per line (log records while it works);
    the line carrying the result has a ``raw`` key.

    Returns:
        The raw payload, or None if no line carried one.
    """
    for line in reversed(output.splitlines()):
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(record, dict) and "raw" in record:
            return record["raw"]
    return None


class DdevAdapter(Adapter):
    """DDEV project operations.

    Action params:
        operation (str): One of 'config', 'get', 'start', 'exec',
                         'describe', 'list', 'delete'.
        args (list[str]): Extra arguments (for 'config', 'exec', 'delete').
        addon (str): Add-on repository (for 'get').
        project (str): Project name (for 'describe').
    """

    _OPERATIONS = {"config", "get", "start", "exec", "describe", "list", "delete"}

    @property
    def name(self) -> str:
        return "ddev"

    def is_available(self) -> bool:
        return shutil.which("ddev") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.action.params.get("operation", "")
        if not operation:
            return False, "Missing required param: 'operation'"
        if operation not in self._OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(self._OPERATIONS))}"
        if operation == "get" and not context.action.params.get("addon"):
            return False, "Missing required param: 'addon' for get operation"
        if operation == "exec" and not context.action.params.get("args"):
            return False, "Missing required param: 'args' for exec operation"
        if operation == "describe" and not context.action.params.get("project"):
            return False, "Missing required param: 'project' for describe operation"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        operation = params["operation"]
        args = list(params.get("args", []))

        if operation == "config":
            argv = ["config", *args]
        elif operation == "get":
            argv = ["get", params["addon"]]
        elif operation == "start":
            argv = ["start"]
        elif operation == "exec":
            argv = ["exec", *args]
        elif operation == "delete":
            argv = ["delete", *args]
        elif operation == "describe":
            return self._query(context, ["describe", "-j", params["project"]])
        else:
            return self._query(context, ["list", "-j"])

        try:
            result = run_tool(["ddev", *argv], cwd=context.working_dir, stream=context.stream)
        except FileNotFoundError:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error="ddev is not installed or not on PATH",
            )
        except Exception as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"DDEV error: {e}",
            )
        return receipt_from_result(self.name, context.action.id, result, operation=operation)

    def _query(self, ctx: ExecutionContext, argv: list[str]) -> Receipt:
        """Run a JSON-producing ddev command; payload goes to metadata['raw']."""
        try:
            result = run_tool(["ddev", *argv], cwd=ctx.working_dir)
        except FileNotFoundError:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error="ddev is not installed or not on PATH",
            )
        except Exception as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"DDEV error: {e}",
            )

        receipt = receipt_from_result(self.name, ctx.action.id, result, operation=argv[0])
        if receipt.ok:
            receipt.metadata["raw"] = parse_ddev_json(result.stdout)
        return receipt
