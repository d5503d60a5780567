"""
Git adapter — remote management and branch checkout in a working copy.

Covers the handful of git operations eddev needs: adding, renaming and
reading remotes, fetching, and checking out a remote branch as a local
tracking branch. Uses the git CLI — never a library binding.
"""

from __future__ import annotations

import logging
import shutil

from eddev.adapters.base import Adapter, ExecutionContext
from eddev.adapters.shell.command import receipt_from_result, run_tool
from eddev.core.models.action import Receipt

logger = logging.getLogger(__name__)


class GitAdapter(Adapter):
    """Git operations on the repository at ``context.working_dir``.

    Action params:
        operation (str): One of 'remote_add', 'remote_rename',
                         'remote_get_url', 'fetch', 'checkout_track'.
        remote (str): Remote name.
        url (str): Remote URL (for 'remote_add').
        new_name (str): Target name (for 'remote_rename').
        ref (str): ``<remote>/<branch>`` (for 'checkout_track').
        all (bool): Fetch every remote (for 'fetch').
    """

    _REQUIRED: dict[str, tuple[str, ...]] = {
        "remote_add": ("remote", "url"),
        "remote_rename": ("remote", "new_name"),
        "remote_get_url": ("remote",),
        "fetch": (),
        "checkout_track": ("ref",),
    }

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        operation = params.get("operation", "")
        if not operation:
            return False, "Missing required param: 'operation'"
        if operation not in self._REQUIRED:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(self._REQUIRED))}"
        for key in self._REQUIRED[operation]:
            if not params.get(key):
                return False, f"Missing required param: '{key}' for {operation} operation"
        if operation == "fetch" and not (params.get("remote") or params.get("all")):
            return False, "fetch needs 'remote' or 'all'"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        operation = params["operation"]

        if operation == "remote_add":
            args = ["remote", "add", params["remote"], params["url"]]
        elif operation == "remote_rename":
            args = ["remote", "rename", params["remote"], params["new_name"]]
        elif operation == "remote_get_url":
            args = ["remote", "get-url", params["remote"]]
        elif operation == "fetch":
            args = ["fetch", "--all"] if params.get("all") else ["fetch", params["remote"]]
        else:
            # --no-guess: never fall back to a same-named branch on another remote
            args = ["checkout", params["ref"], "--track", "--no-guess"]

        try:
            result = run_tool(["git", *args], cwd=context.working_dir)
        except FileNotFoundError:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error="git is not installed or not on PATH",
            )
        except Exception as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Git error: {e}",
            )
        return receipt_from_result(self.name, context.action.id, result, operation=operation)
