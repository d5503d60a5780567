"""
Environment name resolution.

A name is valid when it is non-empty, contains none of the characters
DDEV/hostnames/shells choke on, and does not collide with an existing
DDEV project. An invalid (or missing) name is replaced by asking the user,
offering a default derived from the recipe and constraint.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from eddev.core.errors import InvalidEnvironment

logger = logging.getLogger(__name__)

FORBIDDEN_CHARS = " !@#$%^&*()\"',.<>/?:;\\"

_FORBIDDEN_RE = re.compile("[" + re.escape(FORBIDDEN_CHARS) + "]")
# version dots are kept in the default so "~5.2" reads as "5.2"
_FORBIDDEN_IN_VERSION_RE = re.compile("[" + re.escape(FORBIDDEN_CHARS.replace(".", "")) + "]")
_STABILITY_MARKERS_RE = re.compile(r"^(dev-|v(?=\d))|-dev|[#@].*?$")

PR_SUFFIX = "with-prs"

Prompt = Callable[[str, str], str]
ProjectExists = Callable[[str], bool]


def has_forbidden_chars(name: str) -> bool:
    return bool(_FORBIDDEN_RE.search(name))


def derive_default_name(recipe: str, constraint: str, has_prs: bool = False) -> str:
    """Default environment name, e.g. ``recipe-cms_5.2`` or ``installer_5.x_with-prs``."""
    recipe_part = _FORBIDDEN_RE.sub("-", recipe.rsplit("/", 1)[-1])
    version = _STABILITY_MARKERS_RE.sub("", constraint).strip("~^")
    version_part = _FORBIDDEN_IN_VERSION_RE.sub("-", version)
    name = f"{recipe_part}_{version_part}"
    if has_prs:
        name += f"_{PR_SUFFIX}"
    return name


class EnvironmentNameResolver:
    """Validates a requested name or asks the user for one.

    Args:
        project_exists: Predicate telling whether DDEV already has a
            project with the given name.
        prompt: ``prompt(question, default) -> answer``; injected so the
            CLI can use click and tests can script answers.
        max_attempts: Give up after this many rejected answers. None
            keeps asking until a valid name is given.
    """

    def __init__(
        self,
        project_exists: ProjectExists,
        prompt: Prompt | None = None,
        max_attempts: int | None = None,
    ):
        self._project_exists = project_exists
        self._prompt = prompt
        self._max_attempts = max_attempts

    def problem(self, name: str) -> str | None:
        """Why ``name`` can't be used, or None if it can."""
        if not name:
            return "The environment name must not be empty"
        if has_forbidden_chars(name):
            return f"The environment name must not contain any of: {FORBIDDEN_CHARS}"
        if self._project_exists(name):
            return f"A DDEV project named '{name}' already exists"
        return None

    def validate(self, name: str) -> bool:
        return self.problem(name) is None

    def resolve(
        self,
        name: str | None,
        recipe: str,
        constraint: str,
        has_prs: bool = False,
    ) -> str:
        """Return a usable environment name.

        Raises:
            InvalidEnvironment: The name is invalid and no valid answer was
                obtained (no prompt available, or attempts exhausted).
        """
        name = name or ""
        issue = self.problem(name)
        if issue is None:
            return name
        if name:
            logger.warning("%s", issue)

        if self._prompt is None:
            raise InvalidEnvironment(issue)

        default = derive_default_name(recipe, constraint, has_prs)
        attempts = 0
        while self._max_attempts is None or attempts < self._max_attempts:
            attempts += 1
            answer = (self._prompt("Name this environment", default) or "").strip()
            issue = self.problem(answer)
            if issue is None:
                return answer
            if answer == default and "." in default:
                issue += "; replace the dots in the suggested name (e.g. '5.2' becomes '5-2')"
            logger.warning("%s", issue)
        raise InvalidEnvironment(f"No valid environment name after {attempts} attempt(s): {issue}")
