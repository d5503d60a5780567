"""
Stage and batch result models — how pipeline steps report their outcome.

Each pipeline stage returns a StageResult instead of raising or flipping
a shared flag. The orchestrator folds them with a fixed rule: the first
``fatal`` stops the pipeline, ``advisory`` warnings accumulate.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

StageStatus = Literal["success", "advisory", "fatal", "skipped"]


class StageResult(BaseModel):
    """Outcome of one pipeline stage."""

    stage: str
    status: StageStatus = "success"
    message: str = ""
    warnings: list[str] = Field(default_factory=list)

    @property
    def is_fatal(self) -> bool:
        return self.status == "fatal"

    @classmethod
    def success(cls, stage: str, message: str = "", warnings: list[str] | None = None) -> StageResult:
        """A successful stage. Warnings downgrade it to advisory."""
        warnings = list(warnings or [])
        return cls(
            stage=stage,
            status="advisory" if warnings else "success",
            message=message,
            warnings=warnings,
        )

    @classmethod
    def advisory(cls, stage: str, message: str, warnings: list[str] | None = None) -> StageResult:
        return cls(stage=stage, status="advisory", message=message, warnings=list(warnings or [message]))

    @classmethod
    def fatal(cls, stage: str, message: str, warnings: list[str] | None = None) -> StageResult:
        return cls(stage=stage, status="fatal", message=message, warnings=list(warnings or []))

    @classmethod
    def skipped(cls, stage: str, message: str = "") -> StageResult:
        return cls(stage=stage, status="skipped", message=message)


class ItemOutcome(BaseModel):
    """Result for a single item of a batch (one PR, one module)."""

    key: str
    ok: bool
    error: str | None = None


class BatchResult(BaseModel):
    """Per-item outcomes of a batch where one failure never stops the rest."""

    items: list[ItemOutcome] = Field(default_factory=list)

    def record(self, key: str, ok: bool, error: str | None = None) -> None:
        self.items.append(ItemOutcome(key=key, ok=ok, error=error))

    @property
    def ok(self) -> bool:
        """Logical AND of every item outcome (True for an empty batch)."""
        return all(item.ok for item in self.items)

    @property
    def failed(self) -> list[ItemOutcome]:
        return [item for item in self.items if not item.ok]

    @property
    def succeeded(self) -> list[ItemOutcome]:
        return [item for item in self.items if item.ok]
