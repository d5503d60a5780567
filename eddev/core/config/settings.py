"""
Settings loader — reads EDDEV_* environment variables into one model.

Settings are resolved ONCE at startup. Components receive the model
(or the single value they need) instead of reading ``os.environ``
themselves, so which variables are required for which command is
visible in one place.

Precedence (highest first):
    process environment  >  ./.env  >  ~/.config/eddev/.env
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values
from pydantic import BaseModel, ValidationError

from eddev.core.errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "EDDEV_"

# Searched in order; earlier files win over later ones.
DEFAULT_ENV_FILES: tuple[Path, ...] = (
    Path(".env"),
    Path("~/.config/eddev/.env"),
)


class EddevSettings(BaseModel):
    """Validated EDDEV_* configuration."""

    default_projects_path: Path | None = None
    github_token: str | None = None
    clone_dir: Path | None = None
    log_level: str | None = None
    log_file: str | None = None
    log_file_level: str | None = None

    def projects_path(self) -> Path:
        """Directory new environments are created in (required for ``create``)."""
        if self.default_projects_path is None:
            raise ConfigError(
                f"Environment value '{ENV_PREFIX}DEFAULT_PROJECTS_PATH' must be defined "
                "in the environment or a .env file."
            )
        return self.default_projects_path.expanduser().resolve()

    def require_github_token(self) -> str:
        """GitHub API token (required only when pull requests are requested)."""
        if not self.github_token:
            raise ConfigError(
                f"Environment value '{ENV_PREFIX}GITHUB_TOKEN' must be defined "
                "to check out pull requests."
            )
        return self.github_token


def _read_env_files(env_files: tuple[Path, ...]) -> dict[str, str]:
    merged: dict[str, str] = {}
    # Walk lowest precedence first so earlier files overwrite later ones.
    for env_file in reversed(env_files):
        path = env_file.expanduser()
        if not path.is_file():
            continue
        logger.debug("Loading settings from %s", path)
        values = dotenv_values(path)
        merged.update({k: v for k, v in values.items() if v is not None})
    return merged


def load_settings(
    environ: Mapping[str, str] | None = None,
    env_files: tuple[Path, ...] | None = DEFAULT_ENV_FILES,
) -> EddevSettings:
    """Build settings from ``.env`` files and the process environment.

    Args:
        environ: Environment mapping (default: ``os.environ``).
        env_files: ``.env`` files to consult, highest precedence first.
            ``None`` disables file loading.

    Returns:
        Validated EddevSettings.
    """
    values: dict[str, str] = _read_env_files(env_files) if env_files else {}
    values.update(os.environ if environ is None else environ)

    data: dict[str, str] = {}
    for field in EddevSettings.model_fields:
        raw = values.get(f"{ENV_PREFIX}{field.upper()}")
        if raw is not None and raw.strip():
            data[field] = raw.strip()

    try:
        return EddevSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid {ENV_PREFIX}* configuration: {e}") from e
