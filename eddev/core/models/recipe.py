"""
Recipe model — the versioned Silverstripe distribution being scaffolded.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Short names accepted by ``--recipe`` for common recipes.
RECIPE_SHORTCUTS: dict[str, str] = {
    "installer": "silverstripe/installer",
    "sink": "silverstripe/recipe-kitchen-sink",
    "core": "silverstripe/recipe-core",
    "cms": "silverstripe/recipe-cms",
}

# Recipe which already pulls in silverstripe/developer-docs.
KITCHEN_SINK = "silverstripe/recipe-kitchen-sink"


class Recipe(BaseModel):
    """A recipe resolved against Packagist.

    Created once per invocation by the recipe resolver and never
    mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version_constraint: str
    resolved_version: str
    runtime_dependency_constraint: str | None = None
    require: dict[str, str] = Field(default_factory=dict)

    @property
    def package_spec(self) -> str:
        """``vendor/name:constraint`` as passed to ``ddev composer create``."""
        return f"{self.name}:{self.version_constraint}"

    @property
    def bundles_docs(self) -> bool:
        """Whether the recipe already depends on the developer docs."""
        return self.name == KITCHEN_SINK
