"""
Domain models — Pydantic types for eddev.

All models are re-exported here for convenient access:

    from eddev.core.models import Recipe, Environment, PullRequestRef, Receipt
"""

from eddev.core.models.action import Action, Receipt
from eddev.core.models.composer import ComposerInvocation, ComposerPhase
from eddev.core.models.environment import (
    DATABASE_ENGINES,
    DatabaseEngine,
    DdevProject,
    Environment,
)
from eddev.core.models.pull_request import OrgClass, PullRequestRef, classify_remote
from eddev.core.models.recipe import RECIPE_SHORTCUTS, Recipe
from eddev.core.models.stage import BatchResult, ItemOutcome, StageResult, StageStatus

__all__ = [
    # action.py
    "Action",
    "Receipt",
    # composer.py
    "ComposerInvocation",
    "ComposerPhase",
    # environment.py
    "DATABASE_ENGINES",
    "DatabaseEngine",
    "DdevProject",
    "Environment",
    # pull_request.py
    "OrgClass",
    "PullRequestRef",
    "classify_remote",
    # recipe.py
    "RECIPE_SHORTCUTS",
    "Recipe",
    # stage.py
    "BatchResult",
    "ItemOutcome",
    "StageResult",
    "StageStatus",
]
