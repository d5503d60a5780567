"""
Pull request reference model — a PR to be checked out in a vendor package.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

OrgClass = Literal["standard", "community_fork", "security_fork"]

# Clone URL prefixes of the organisations that get their own remote alias.
COMMUNITY_FORK_ACCOUNT = "git@github.com:creative-commoners/"
SECURITY_FORK_ACCOUNT = "git@github.com:silverstripe-security/"

REMOTE_NAMES: dict[str, str] = {
    "standard": "pr",
    "community_fork": "cc",
    "security_fork": "security",
}


def classify_remote(remote_url: str) -> OrgClass:
    """Classify a clone URL by the organisation that owns it."""
    if remote_url.startswith(COMMUNITY_FORK_ACCOUNT):
        return "community_fork"
    if remote_url.startswith(SECURITY_FORK_ACCOUNT):
        return "security_fork"
    return "standard"


class PullRequestRef(BaseModel):
    """A resolved pull request.

    ``remote_name`` is the local git remote alias used when checking out
    the branch. The same alias can be reused for several PRs because each
    one lives in a different vendor directory.
    """

    model_config = ConfigDict(frozen=True)

    dependency_package_name: str
    remote_url: str
    branch_name: str
    org_class: OrgClass = "standard"
    reference: str = ""
    number: int | None = None

    @property
    def remote_name(self) -> str:
        return REMOTE_NAMES[self.org_class]

    @property
    def tracking_ref(self) -> str:
        """``<remote>/<branch>`` as handed to ``git checkout --track``."""
        return f"{self.remote_name}/{self.branch_name}"
