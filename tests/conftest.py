"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from eddev.adapters.mock import MockAdapter
from eddev.adapters.registry import AdapterRegistry
from eddev.core.config.settings import EddevSettings
from eddev.core.errors import GitHubError, RecipeNotFound
from eddev.core.models.action import Receipt
from eddev.core.models.environment import Environment


class FakePackagist:
    """In-memory stand-in for PackagistClient."""

    def __init__(self, packages: dict[str, dict[str, dict]] | None = None):
        self.packages = packages or {}
        self.queries: list[str] = []

    def get_versions(self, package: str) -> dict[str, dict]:
        self.queries.append(package)
        if package not in self.packages:
            raise RecipeNotFound(package)
        return self.packages[package]


class FakeGitHub:
    """In-memory stand-in for GitHubClient.

    ``pulls`` maps ``(org, repo, number)`` to ``(ssh_url, branch)``;
    ``packages`` maps ``org/repo`` to the composer package name.
    """

    def __init__(self, pulls: dict | None = None, packages: dict | None = None):
        self.pulls = pulls or {}
        self.packages = packages or {}

    def get_pull(self, org: str, repo: str, number: int) -> dict:
        try:
            ssh_url, branch = self.pulls[(org, repo, number)]
        except KeyError:
            raise GitHubError(f"GitHub API returned HTTP 404 for /repos/{org}/{repo}/pulls/{number}") from None
        return {"number": number, "head": {"ref": branch, "repo": {"ssh_url": ssh_url}}}

    def get_package_name(self, org: str, repo: str) -> str:
        try:
            return self.packages[f"{org}/{repo}"]
        except KeyError:
            raise GitHubError(f"{org}/{repo} has no usable composer.json") from None


def ddev_project_receipt(name: str, approot: str = "") -> Receipt:
    """What ``ddev describe -j`` yields for an existing project."""
    return Receipt.success(
        adapter="mock",
        action_id=f"ddev:describe:{name}",
        metadata={"raw": {"name": name, "approot": approot, "primary_url": f"https://{name}.ddev.site"}},
    )


INSTALLER_VERSIONS = {
    "5.x-dev": {"require": {"php": "^8.1", "silverstripe/recipe-cms": "5.x-dev"}},
    "5.1.0": {"require": {"php": "^8.1"}},
    "5.2.0": {"require": {"php": "^8.1"}},
    "4.13.0": {"require": {"php": "^7.4 || ^8.0"}},
}

RECIPE_CMS_VERSIONS = {
    "5.1.0": {"require": {"php": "^8.1"}},
    "5.2.0": {"require": {"php": "^8.1"}},
    "5.2.3": {"require": {"php": "^8.1"}},
    "5.3.0-beta1": {"require": {"php": "^8.1"}},
    "6.0.0": {"require": {"php": "^8.3"}},
}


@pytest.fixture
def packagist() -> FakePackagist:
    return FakePackagist({
        "silverstripe/installer": dict(INSTALLER_VERSIONS),
        "silverstripe/recipe-cms": dict(RECIPE_CMS_VERSIONS),
        "silverstripe/recipe-kitchen-sink": {"5.x-dev": {"require": {"php": "^8.1"}}},
    })


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub(
        pulls={
            ("silverstripe", "silverstripe-framework", 123): (
                "git@github.com:creative-commoners/silverstripe-framework.git", "pulls/5/fix-thing",
            ),
            ("silverstripe", "silverstripe-framework", 456): (
                "git@github.com:silverstripe-security/silverstripe-framework.git", "patch/5/cve",
            ),
            ("silverstripe", "silverstripe-admin", 7): (
                "git@github.com:someone/silverstripe-admin.git", "feature-x",
            ),
        },
        packages={
            "silverstripe/silverstripe-framework": "silverstripe/framework",
            "silverstripe/silverstripe-admin": "silverstripe/admin",
        },
    )


@pytest.fixture
def mock_adapter() -> MockAdapter:
    return MockAdapter()


@pytest.fixture
def registry(mock_adapter: MockAdapter) -> AdapterRegistry:
    """Registry routing every tool call to ``mock_adapter``."""
    reg = AdapterRegistry()
    reg.set_mock_mode(True, mock_adapter)
    return reg


@pytest.fixture
def projects_dir(tmp_path: Path) -> Path:
    path = tmp_path / "projects"
    path.mkdir()
    return path


@pytest.fixture
def settings(projects_dir: Path) -> EddevSettings:
    return EddevSettings(default_projects_path=projects_dir, github_token="test-token")


@pytest.fixture
def environment(projects_dir: Path) -> Environment:
    return Environment(name="my-env", root_path=projects_dir / "my-env", runtime_version="8.1")
