"""
Tests for configuration loading — EDDEV_* variables, .env files and
logging setup.
"""

import logging
from pathlib import Path

import pytest

from eddev.core.config.settings import EddevSettings, load_settings
from eddev.core.errors import ConfigError
from eddev.core.observability.logging_config import resolve_level, setup_logging


@pytest.fixture
def env_file(tmp_path: Path) -> Path:
    path = tmp_path / ".env"
    path.write_text(
        "EDDEV_DEFAULT_PROJECTS_PATH=/from/file\n"
        "EDDEV_GITHUB_TOKEN=file-token\n"
        "UNRELATED=1\n"
    )
    return path


class TestLoadSettings:
    def test_from_environ(self):
        settings = load_settings({"EDDEV_DEFAULT_PROJECTS_PATH": "/projects"}, env_files=None)
        assert settings.default_projects_path == Path("/projects")
        assert settings.github_token is None

    def test_blank_values_ignored(self):
        settings = load_settings({"EDDEV_GITHUB_TOKEN": "   "}, env_files=None)
        assert settings.github_token is None

    def test_env_file(self, env_file):
        settings = load_settings({}, env_files=(env_file,))
        assert settings.default_projects_path == Path("/from/file")
        assert settings.github_token == "file-token"

    def test_environ_beats_file(self, env_file):
        settings = load_settings({"EDDEV_GITHUB_TOKEN": "env-token"}, env_files=(env_file,))
        assert settings.github_token == "env-token"
        assert settings.default_projects_path == Path("/from/file")

    def test_earlier_file_wins(self, env_file, tmp_path):
        user_file = tmp_path / "user.env"
        user_file.write_text("EDDEV_GITHUB_TOKEN=user-token\nEDDEV_LOG_LEVEL=DEBUG\n")
        settings = load_settings({}, env_files=(env_file, user_file))
        assert settings.github_token == "file-token"
        assert settings.log_level == "DEBUG"

    def test_missing_files_skipped(self, tmp_path):
        settings = load_settings({}, env_files=(tmp_path / "absent.env",))
        assert settings == EddevSettings()


class TestRequiredSettings:
    def test_projects_path_required(self):
        with pytest.raises(ConfigError, match="EDDEV_DEFAULT_PROJECTS_PATH"):
            EddevSettings().projects_path()

    def test_projects_path_expanded(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        settings = EddevSettings(default_projects_path=Path("~/projects"))
        assert settings.projects_path() == (tmp_path / "projects").resolve()

    def test_token_required(self):
        with pytest.raises(ConfigError, match="EDDEV_GITHUB_TOKEN"):
            EddevSettings().require_github_token()
        assert EddevSettings(github_token="t").require_github_token() == "t"


class TestLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    @pytest.mark.parametrize(("flags", "expected"), [
        ({"debug": True, "quiet": True}, "DEBUG"),
        ({"verbose": True}, "INFO"),
        ({"quiet": True, "env_level": "DEBUG"}, "ERROR"),
        ({"env_level": "INFO"}, "INFO"),
        ({}, "WARNING"),
    ])
    def test_resolve_level(self, flags, expected):
        assert resolve_level(**flags) == expected

    def test_console_level(self):
        setup_logging("INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_only_root_configured(self):
        setup_logging("INFO")
        # library loggers inherit from root instead of being pinned
        assert logging.getLogger("eddev.adapters.registry").getEffectiveLevel() == logging.INFO
        assert logging.getLogger("urllib3").level == logging.NOTSET

    def test_unknown_level_falls_back(self):
        setup_logging("LOUD")
        assert logging.getLogger().level == logging.WARNING

    def test_log_file_gets_detail(self, tmp_path):
        log_file = tmp_path / "eddev.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        logging.getLogger("eddev.tools").debug("[composer] Installing")
        for handler in root.handlers:
            handler.flush()
        assert "[composer] Installing" in log_file.read_text()
        for handler in root.handlers:
            handler.close()
