"""
Error taxonomy.

Validation errors are raised before any provisioning starts and stop the
command with a non-zero exit code. Everything that can go wrong once the
pipeline is running is reported through StageResult / Receipt instead.
"""

from __future__ import annotations


class EddevError(Exception):
    """Base class for all eddev errors."""


class ConfigError(EddevError):
    """A required setting (environment variable) is missing or invalid."""


class ValidationError(EddevError):
    """User input cannot be turned into a valid environment."""


class InvalidOption(ValidationError):
    """A command option has an invalid value or combination."""


class InvalidEnvironment(ValidationError):
    """The environment name or root directory is unusable."""


class RecipeNotFound(ValidationError):
    """The recipe does not exist on Packagist."""

    def __init__(self, recipe: str):
        super().__init__(f"The recipe '{recipe}' doesn't exist in packagist")
        self.recipe = recipe


class NoMatchingVersion(ValidationError):
    """No published version of the recipe satisfies the constraint."""

    def __init__(self, recipe: str, constraint: str):
        super().__init__(
            f"The recipe '{recipe}' has no versions compatible with the constraint '{constraint}'"
        )
        self.recipe = recipe
        self.constraint = constraint


class UndeterminedRuntimeVersion(ValidationError):
    """The PHP version could not be derived from the recipe."""


class PullRequestNotFound(ValidationError):
    """A ``--pr`` reference is malformed or could not be resolved."""

    def __init__(self, reference: str, reason: str = ""):
        message = f"Could not resolve pull request '{reference}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.reference = reference


class RegistryError(EddevError):
    """Packagist could not be queried."""


class GitHubError(EddevError):
    """The GitHub API could not be queried."""
