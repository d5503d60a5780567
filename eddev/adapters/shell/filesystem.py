"""
Filesystem adapter — directory preparation and template overlays.

Provides a receipt-returning interface for the filesystem steps of the
pipeline so they fail the same way tool invocations do.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from eddev.adapters.base import Adapter, ExecutionContext
from eddev.core.models.action import Receipt

logger = logging.getLogger(__name__)


class FilesystemAdapter(Adapter):
    """File and directory operations with receipts.

    Action params:
        operation (str): One of 'mkdir', 'mirror', 'write', 'remove'.
        path (str): Target path (relative to working_dir or absolute).
        source (str): Source directory (for 'mirror').
        content (str): Content to write (for 'write').
    """

    _OPERATIONS = {"mkdir", "mirror", "write", "remove"}

    @property
    def name(self) -> str:
        return "filesystem"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.action.params.get("operation", "")
        if not operation:
            return False, "Missing required param: 'operation'"

        if operation not in self._OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(self._OPERATIONS))}"

        if not context.action.params.get("path"):
            return False, "Missing required param: 'path'"

        if operation == "mirror" and not context.action.params.get("source"):
            return False, "Missing required param: 'source' for mirror operation"

        if operation == "write" and "content" not in context.action.params:
            return False, "Missing required param: 'content' for write operation"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.action.params["operation"]
        target = Path(context.action.params["path"])
        if not target.is_absolute():
            target = Path(context.working_dir) / target

        try:
            if operation == "mkdir":
                return self._mkdir(context, target)
            elif operation == "mirror":
                return self._mirror(context, target)
            elif operation == "write":
                return self._write(context, target)
            else:
                return self._remove(context, target)
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Filesystem error: {e}",
                metadata={"operation": operation, "path": str(target)},
            )

    def _mkdir(self, ctx: ExecutionContext, target: Path) -> Receipt:
        target.mkdir(parents=True, exist_ok=True)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Directory created: {target}",
            metadata={"path": str(target)},
        )

    def _mirror(self, ctx: ExecutionContext, target: Path) -> Receipt:
        """Copy a directory tree onto ``target``, overriding existing files."""
        source = Path(ctx.action.params["source"])
        if not source.is_dir():
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"Template directory not found: {source}",
            )
        copied: list[str] = []
        for item in sorted(source.rglob("*")):
            relative = item.relative_to(source)
            destination = target / relative
            if item.is_dir():
                destination.mkdir(parents=True, exist_ok=True)
                continue
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(item, destination)
            copied.append(str(relative))
        logger.debug("Mirrored %d file(s) from %s to %s", len(copied), source, target)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Copied {len(copied)} file(s) to {target}",
            metadata={"path": str(target), "files": copied},
        )

    def _write(self, ctx: ExecutionContext, target: Path) -> Receipt:
        content = ctx.action.params["content"]
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Written {len(content)} bytes to {target}",
            metadata={"path": str(target), "size": len(content)},
        )

    def _remove(self, ctx: ExecutionContext, target: Path) -> Receipt:
        if target.is_dir():
            shutil.rmtree(target)
        elif target.exists():
            target.unlink()
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Removed {target}",
            metadata={"path": str(target)},
        )
