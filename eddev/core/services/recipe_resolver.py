"""
Recipe resolution — shortcut expansion, Packagist lookup and PHP version
selection.

Given ``--recipe`` and ``--constraint``, picks the concrete published
version the environment will be built from, then derives the PHP version
to configure DDEV with from that version's ``php`` requirement.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from eddev.core.errors import InvalidOption, NoMatchingVersion, UndeterminedRuntimeVersion
from eddev.core.models.recipe import RECIPE_SHORTCUTS, Recipe
from eddev.core.services import composer_semver

logger = logging.getLogger(__name__)

# Package name pattern from the Composer JSON schema.
PACKAGE_NAME_RE = re.compile(r"^[a-z0-9]([_.-]?[a-z0-9]+)*/[a-z0-9](([_.]?|-{0,2})[a-z0-9]+)*$")


class VersionSource(Protocol):
    def get_versions(self, package: str) -> dict[str, dict]: ...


def expand_recipe(recipe: str) -> str:
    """Replace a shortcut (``installer``, ``cms``...) with its package name.

    Canonical names map to themselves, so applying this twice is a no-op.
    """
    return RECIPE_SHORTCUTS.get(recipe, recipe)


def validate_package_name(name: str) -> None:
    if not PACKAGE_NAME_RE.match(name):
        raise InvalidOption(f"'{name}' is not a valid Composer package name")


def select_version(versions: dict[str, dict], constraint: str) -> str | None:
    """Version key to use for ``constraint``, or None if nothing matches.

    An exact key match (``5.x-dev``, ``5.2.0``) wins; otherwise the
    highest published version satisfying the constraint.

    Raises:
        ValueError: If the constraint is malformed.
    """
    if constraint in versions:
        return constraint
    candidates = composer_semver.satisfied_by(versions.keys(), constraint)
    if not candidates:
        return None
    return composer_semver.rsort(candidates)[0]


def resolve_recipe(recipe: str, constraint: str, source: VersionSource) -> Recipe:
    """Resolve a recipe/constraint pair against the registry.

    Raises:
        InvalidOption: The recipe is not a valid package name, or the
            constraint cannot be parsed.
        RecipeNotFound: The registry has no such package.
        NoMatchingVersion: No published version satisfies the constraint.
    """
    name = expand_recipe(recipe)
    validate_package_name(name)

    versions = source.get_versions(name)
    try:
        resolved = select_version(versions, constraint)
    except ValueError as e:
        raise InvalidOption(f"Invalid version constraint '{constraint}': {e}") from e
    if resolved is None:
        raise NoMatchingVersion(name, constraint)

    details = versions[resolved] or {}
    require = dict(details.get("require") or {})
    logger.info("Resolved %s %s → %s", name, constraint, resolved)
    return Recipe(
        name=name,
        version_constraint=constraint,
        resolved_version=resolved,
        runtime_dependency_constraint=require.get("php"),
        require=require,
    )


def select_runtime_version(recipe: Recipe, explicit: str | None = None) -> str:
    """PHP version for the environment.

    ``explicit`` (``--php-version``) is returned untouched. Otherwise the
    lower bound of the recipe's ``php`` constraint, as ``major.minor``:
    ``^8.1`` gives ``8.1`` even though ``8.3`` also satisfies it, since
    the floor is the one version guaranteed to exist.

    Raises:
        UndeterminedRuntimeVersion: No direct ``php`` requirement, or one
            without a lower bound.
    """
    if explicit:
        return explicit

    php = recipe.runtime_dependency_constraint
    if not php:
        raise UndeterminedRuntimeVersion(
            "Unable to detect appropriate PHP version, as the chosen recipe has no direct constraint for PHP"
        )
    try:
        floor = composer_semver.parse_constraint(php).lower_bound()
    except ValueError as e:
        raise UndeterminedRuntimeVersion(f"Unable to parse the recipe's PHP constraint '{php}'") from e

    if floor is None or composer_semver.is_branch(floor):
        raise UndeterminedRuntimeVersion(f"The recipe's PHP constraint '{php}' has no lower bound")

    major, minor = floor.split("-", 1)[0].split(".")[:2]
    if (major, minor) == ("0", "0"):
        raise UndeterminedRuntimeVersion(f"The recipe's PHP constraint '{php}' has no lower bound")
    runtime = f"{major}.{minor}"
    logger.debug("PHP constraint %s → lower bound %s → %s", php, floor, runtime)
    return runtime
