"""
Environment model — one scaffolded DDEV project.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

DatabaseEngine = Literal["mysql", "mariadb"]

DATABASE_ENGINES: tuple[str, ...] = ("mysql", "mariadb")


class Environment(BaseModel):
    """A DDEV environment about to be (or already) provisioned."""

    model_config = ConfigDict(frozen=True)

    name: str
    root_path: Path
    database_engine: DatabaseEngine = "mysql"
    database_version: str | None = None
    runtime_version: str

    @field_validator("root_path")
    @classmethod
    def _absolute(cls, value: Path) -> Path:
        if not value.is_absolute():
            raise ValueError(f"Environment root must be absolute, got {value}")
        return value

    @property
    def database_flag(self) -> str:
        """The ``ddev config`` flag selecting the database."""
        if self.database_version:
            return f"--database={self.database_engine}:{self.database_version}"
        return f"--db-image={self.database_engine}"

    def vendor_path(self, package: str) -> Path:
        """Where composer installs ``package`` inside this environment."""
        return self.root_path / "vendor" / package


class DdevProject(BaseModel):
    """A project record as reported by ``ddev list -j`` / ``ddev describe -j``."""

    name: str
    approot: str = ""
    primary_url: str = ""
    status: str = ""
