"""
Pull request resolution via the GitHub REST API.

Turns ``--pr`` references into PullRequestRef objects: the clone URL and
branch of the PR head, the Composer package it modifies, and which
organisation the head lives in.

Accepted references:
    https://github.com/silverstripe/silverstripe-framework/pull/123
    silverstripe/silverstripe-framework#123
"""

from __future__ import annotations

import base64
import json
import logging
import re
import urllib.error
from dataclasses import dataclass
from typing import Any, Protocol

from eddev.core.errors import GitHubError, PullRequestNotFound
from eddev.core.models.pull_request import PullRequestRef, classify_remote
from eddev.core.services.http_json import get_json

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"

_URL_RE = re.compile(r"^https?://github\.com/([\w.-]+)/([\w.-]+)/pull/(\d+)(?:/[\w/-]*)?(?:[#?].*)?$")
_SHORTHAND_RE = re.compile(r"^([\w.-]+)/([\w.-]+)#(\d+)$")


@dataclass(frozen=True)
class PullRequestLocator:
    """Where a PR lives: ``org/repo`` and number."""

    org: str
    repo: str
    number: int


def parse_reference(reference: str) -> PullRequestLocator:
    """Parse a PR URL or ``org/repo#N`` shorthand.

    Raises:
        PullRequestNotFound: If the reference matches neither form.
    """
    text = reference.strip()
    m = _URL_RE.match(text) or _SHORTHAND_RE.match(text)
    if not m:
        raise PullRequestNotFound(
            reference, "expected 'https://github.com/<org>/<repo>/pull/<n>' or '<org>/<repo>#<n>'"
        )
    return PullRequestLocator(org=m.group(1), repo=m.group(2), number=int(m.group(3)))


class GitHubApi(Protocol):
    def get_pull(self, org: str, repo: str, number: int) -> dict[str, Any]: ...

    def get_package_name(self, org: str, repo: str) -> str: ...


class GitHubClient:
    """Thin GitHub REST client for the two calls PR resolution needs."""

    def __init__(self, token: str | None = None, base_url: str = GITHUB_API):
        self.token = token
        self.base_url = base_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get(self, path: str) -> Any:
        try:
            return get_json(f"{self.base_url}{path}", headers=self._headers())
        except urllib.error.HTTPError as e:
            raise GitHubError(f"GitHub API returned HTTP {e.code} for {path}") from e
        except urllib.error.URLError as e:
            raise GitHubError(f"Could not reach the GitHub API: {e.reason}") from e
        except ValueError as e:
            raise GitHubError(f"GitHub API sent an unreadable response for {path}") from e

    def get_pull(self, org: str, repo: str, number: int) -> dict[str, Any]:
        return self._get(f"/repos/{org}/{repo}/pulls/{number}")

    def get_package_name(self, org: str, repo: str) -> str:
        """The ``name`` declared in the repository's composer.json."""
        payload = self._get(f"/repos/{org}/{repo}/contents/composer.json")
        try:
            manifest = json.loads(base64.b64decode(payload["content"]).decode())
            return manifest["name"]
        except (KeyError, TypeError, ValueError) as e:
            raise GitHubError(f"{org}/{repo} has no usable composer.json") from e


class PullRequestResolver:
    """Resolves ``--pr`` references into a map keyed by package name."""

    def __init__(self, api: GitHubApi):
        self._api = api

    def resolve_one(self, reference: str) -> PullRequestRef:
        """Resolve a single reference.

        Raises:
            PullRequestNotFound: Malformed reference, or GitHub couldn't
                supply the PR or its package name.
        """
        locator = parse_reference(reference)
        try:
            pull = self._api.get_pull(locator.org, locator.repo, locator.number)
            head = pull.get("head") or {}
            head_repo = head.get("repo")
            if not head_repo:
                raise PullRequestNotFound(reference, "the PR's source repository no longer exists")
            package = self._api.get_package_name(locator.org, locator.repo)
        except GitHubError as e:
            raise PullRequestNotFound(reference, str(e)) from e

        remote_url = head_repo["ssh_url"]
        ref = PullRequestRef(
            dependency_package_name=package,
            remote_url=remote_url,
            branch_name=head["ref"],
            org_class=classify_remote(remote_url),
            reference=reference,
            number=locator.number,
        )
        logger.debug("PR %s → %s %s (%s)", reference, package, ref.tracking_ref, remote_url)
        return ref

    def resolve(self, references: list[str]) -> dict[str, PullRequestRef]:
        """Resolve every reference; one failure aborts the batch.

        Two references for the same package: the later one wins and the
        overwrite is logged.
        """
        resolved: dict[str, PullRequestRef] = {}
        for reference in references:
            pr = self.resolve_one(reference)
            previous = resolved.get(pr.dependency_package_name)
            if previous is not None:
                logger.warning(
                    "PR %s replaces %s for %s (only one PR per package is checked out)",
                    reference,
                    previous.reference,
                    pr.dependency_package_name,
                )
            resolved[pr.dependency_package_name] = pr
        return resolved
