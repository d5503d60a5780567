"""
Composer adapter — dependency management inside the DDEV web container.

Composer is never run on the host: every call goes through
``ddev composer`` so the container's PHP version and extensions apply.
"""

from __future__ import annotations

import logging
import shutil

from eddev.adapters.base import Adapter, ExecutionContext
from eddev.adapters.shell.command import receipt_from_result, run_tool
from eddev.core.models.action import Receipt

logger = logging.getLogger(__name__)


class ComposerAdapter(Adapter):
    """Run composer commands through DDEV.

    Action params:
        command (list[str]): Composer argv, starting with the sub-command
                             ('create', 'install', 'require').
    """

    _SUBCOMMANDS = {"create", "install", "require"}

    @property
    def name(self) -> str:
        return "composer"

    def is_available(self) -> bool:
        return shutil.which("ddev") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        command = context.action.params.get("command") or []
        if not command:
            return False, "Missing required param: 'command'"
        if command[0] not in self._SUBCOMMANDS:
            return False, f"Unsupported composer command '{command[0]}'"
        if command[0] == "require" and len(command) < 2:
            return False, "composer require needs a package"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        command = list(context.action.params["command"])
        try:
            result = run_tool(
                ["ddev", "composer", *command],
                cwd=context.working_dir,
                stream=context.stream,
            )
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
                error=f"Composer error: {e}",
            )
        return receipt_from_result(self.name, context.action.id, result, subcommand=command[0])
