"""
Set-remotes use case — add the fork remote to a Silverstripe module checkout.

The fork remote points at the same repository name under the community
fork (``cc``) or security (``security``) organisation.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field

from eddev.adapters.registry import AdapterRegistry
from eddev.core.models.pull_request import (
    COMMUNITY_FORK_ACCOUNT,
    REMOTE_NAMES,
    SECURITY_FORK_ACCOUNT,
)

logger = logging.getLogger(__name__)

# host plus organisation part of a GitHub URL, ssh or https
_ORG_PREFIX_RE = re.compile(r"^(?:git@github\.com:|https://github\.com/)[^/]*/")

ORIGIN = "origin"
RENAMED_ORIGIN = "orig"

EventHandler = Callable[[str, str], None]


@dataclass
class RemotesResult:
    added: dict[str, str] = field(default_factory=dict)
    renamed_origin: bool = False
    fetched: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def fork_url(origin_url: str, security: bool = False) -> str:
    """Origin URL rewritten onto the fork organisation.

    Raises:
        ValueError: The origin is not a GitHub URL.
    """
    if not _ORG_PREFIX_RE.match(origin_url):
        raise ValueError(f"Origin {origin_url} does not appear to be valid")
    account = SECURITY_FORK_ACCOUNT if security else COMMUNITY_FORK_ACCOUNT
    return _ORG_PREFIX_RE.sub(account, origin_url, count=1)


def set_remotes(
    directory: str,
    registry: AdapterRegistry,
    *,
    security: bool = False,
    rename_origin: bool = True,
    fetch: bool = False,
    on_event: EventHandler | None = None,
) -> RemotesResult:
    emit = on_event or (lambda kind, message: None)
    result = RemotesResult()

    receipt = registry.run("git:remote-get-url:origin", "git", cwd=directory, operation="remote_get_url", remote=ORIGIN)
    if not receipt.ok:
        result.error = f"Could not read the origin remote: {receipt.error}"
        return result
    try:
        url = fork_url(receipt.output.strip(), security=security)
    except ValueError as e:
        result.error = str(e)
        return result

    remote = REMOTE_NAMES["security_fork" if security else "community_fork"]
    emit("step", "Adding the security remote" if security else "Adding the creative-commoners remote")
    receipt = registry.run(f"git:remote-add:{remote}", "git", cwd=directory, operation="remote_add", remote=remote, url=url)
    if not receipt.ok:
        result.error = f"Could not add the {remote} remote: {receipt.error}"
        return result
    result.added[remote] = url

    if rename_origin:
        emit("step", "Renaming the origin remote")
        receipt = registry.run(
            "git:remote-rename:origin", "git", cwd=directory,
            operation="remote_rename", remote=ORIGIN, new_name=RENAMED_ORIGIN,
        )
        if not receipt.ok:
            result.error = f"Could not rename the origin remote: {receipt.error}"
            return result
        result.renamed_origin = True

    if fetch:
        emit("step", "Fetching all remotes")
        receipt = registry.run("git:fetch-all", "git", cwd=directory, operation="fetch", all=True)
        if not receipt.ok:
            result.error = f"Could not fetch remotes: {receipt.error}"
            return result
        result.fetched = True

    return result
