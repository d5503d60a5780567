"""
Pull request checkout — points vendor packages at PR branches.

For each PR: make sure the package is installed (from source, so it is a
git working copy), add the PR's remote, fetch it and check out the PR
branch as a tracking branch. Every PR is handled independently and a
failure only affects that PR.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from eddev.adapters.registry import AdapterRegistry
from eddev.core.models.environment import Environment
from eddev.core.models.pull_request import PullRequestRef
from eddev.core.models.stage import BatchResult
from eddev.core.services.composer_args import ComposerArgsBuilder

logger = logging.getLogger(__name__)

Reporter = Callable[[str], None]


def checkout_failure_message(package: str) -> str:
    return f"Could not check out PR for {package} - please check out that PR manually."


class PullRequestCheckoutEngine:
    """Checks PR branches out inside ``vendor/``."""

    def __init__(
        self,
        registry: AdapterRegistry,
        environment: Environment,
        composer_args: ComposerArgsBuilder,
        *,
        stream: bool = False,
        report: Reporter | None = None,
    ):
        self._registry = registry
        self._env = environment
        self._composer_args = composer_args
        self._stream = stream
        self._report = report or (lambda message: None)

    def checkout_all(self, prs: Iterable[PullRequestRef]) -> BatchResult:
        batch = BatchResult()
        for pr in prs:
            error = self.checkout(pr)
            batch.record(pr.dependency_package_name, error is None, error)
        return batch

    def checkout(self, pr: PullRequestRef) -> str | None:
        """Check out one PR. Returns None on success, else a warning message."""
        package = pr.dependency_package_name
        self._report(f"Setting up PR for {package}")
        self._report(
            f'Setting remote {pr.remote_url} as "{pr.remote_name}" and checking out branch {pr.branch_name}'
        )

        root = str(self._env.root_path)
        package_dir = self._env.vendor_path(package)
        if not package_dir.exists():
            self._report(f"{package} is not yet added as a dependency - requiring it.")
            invocation = self._composer_args.require(package, extra=["--prefer-source"])
            receipt = self._registry.run(
                f"composer:require-source:{package}",
                "composer",
                cwd=root,
                stream=self._stream,
                name=f"composer require {package}",
                command=invocation.command,
            )
            if not receipt.ok:
                logger.debug("Requiring %s failed: %s", package, receipt.error)
                return checkout_failure_message(package)

        steps = (
            ("remote-add", {"operation": "remote_add", "remote": pr.remote_name, "url": pr.remote_url}),
            ("fetch", {"operation": "fetch", "remote": pr.remote_name}),
            ("checkout", {"operation": "checkout_track", "ref": pr.tracking_ref}),
        )
        for step, params in steps:
            receipt = self._registry.run(
                f"git:{step}:{package}",
                "git",
                cwd=str(package_dir),
                name=f"git {step} ({package})",
                **params,
            )
            if not receipt.ok:
                logger.debug("git %s failed for %s: %s", step, package, receipt.error)
                return checkout_failure_message(package)
        return None
