"""
Composer invocation model.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ComposerPhase = Literal["create", "install", "require"]


class ComposerInvocation(BaseModel):
    """One call into composer, fully resolved."""

    model_config = ConfigDict(frozen=True)

    phase: ComposerPhase
    args: list[str] = Field(default_factory=list)
    package: str | None = None
    is_dev_dependency: bool = False

    @property
    def command(self) -> list[str]:
        """The argv handed to ``ddev composer``.

        ``create`` is DDEV's wrapper around ``composer create-project`` which
        installs into the project root even though ``.ddev/`` already exists.
        """
        if self.phase == "create":
            cmd = ["create", *self.args]
            if self.package:
                cmd.append(self.package)
            return cmd
        if self.phase == "require":
            cmd = ["require"]
            if self.package:
                cmd.append(self.package)
            cmd.extend(self.args)
            if self.is_dev_dependency:
                cmd.append("--dev")
            return cmd
        return ["install", *self.args]
