"""
composer.json rewriting for PRs that bring their own dependencies.

Each PR fork is declared as a ``vcs`` repository and its branch becomes
the required version, so a single ``composer install`` resolves the PRs
together with everything they depend on.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from eddev.core.models.pull_request import PullRequestRef

logger = logging.getLogger(__name__)


class ComposerJson:
    """A project's composer.json, loaded for editing."""

    def __init__(self, project_root: str | Path):
        self.path = Path(project_root) / "composer.json"
        self.data: dict = json.loads(self.path.read_text(encoding="utf-8"))

    def add_forks(self, prs: Iterable[PullRequestRef]) -> None:
        """Declare each PR's fork as a vcs repository (once per URL)."""
        repositories = self.data.get("repositories")
        if isinstance(repositories, dict):
            # composer also accepts a name-keyed object
            repositories = list(repositories.values())
        repositories = list(repositories or [])
        known = {repo.get("url") for repo in repositories if isinstance(repo, dict)}
        for pr in prs:
            if pr.remote_url in known:
                continue
            repositories.append({"type": "vcs", "url": pr.remote_url})
            known.add(pr.remote_url)
        self.data["repositories"] = repositories

    def add_forked_deps(self, prs: Iterable[PullRequestRef]) -> None:
        """Require each PR's branch, moving it out of require-dev."""
        require = self.data.setdefault("require", {})
        require_dev = self.data.get("require-dev") or {}
        for pr in prs:
            require_dev.pop(pr.dependency_package_name, None)
            require[pr.dependency_package_name] = f"dev-{pr.branch_name}"
            logger.debug("composer.json: %s → dev-%s", pr.dependency_package_name, pr.branch_name)
        if "require-dev" in self.data:
            self.data["require-dev"] = require_dev

    def save(self) -> None:
        # matches composer's own JSON_PRETTY_PRINT | JSON_UNESCAPED_SLASHES
        self.path.write_text(json.dumps(self.data, indent=4, ensure_ascii=False) + "\n", encoding="utf-8")
