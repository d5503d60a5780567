"""
Create use case — validate the request, then run the provisioning pipeline.

Everything that can be checked before touching the disk is checked first
(recipe, PHP version, database, name, root directory, pull requests), so
a bad request fails without leaving anything behind.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field

from eddev.adapters.registry import AdapterRegistry, default_registry
from eddev.core.config.settings import EddevSettings
from eddev.core.engine.pipeline import EventHandler, PipelineOptions, PipelineReport, ProvisioningPipeline
from eddev.core.errors import EddevError, InvalidEnvironment, InvalidOption
from eddev.core.models.environment import DATABASE_ENGINES, Environment
from eddev.core.models.pull_request import PullRequestRef
from eddev.core.models.recipe import Recipe
from eddev.core.services.composer_args import DEFAULT_COMPOSER_OPTIONS
from eddev.core.services.ddev_projects import DdevProjects
from eddev.core.services.env_name import EnvironmentNameResolver, Prompt
from eddev.core.services.github import GitHubApi, GitHubClient, PullRequestResolver
from eddev.core.services.packagist import PackagistClient
from eddev.core.services.recipe_resolver import VersionSource, resolve_recipe, select_runtime_version

logger = logging.getLogger(__name__)

DEFAULT_RECIPE = "installer"
DEFAULT_CONSTRAINT = "5.x-dev"


class CreateRequest(BaseModel):
    """Raw options of ``eddev create``."""

    env_name: str | None = None
    recipe: str = DEFAULT_RECIPE
    constraint: str = DEFAULT_CONSTRAINT
    extra_modules: list[str] = Field(default_factory=list)
    composer_options: list[str] = Field(default_factory=lambda: list(DEFAULT_COMPOSER_OPTIONS))
    php_version: str | None = None
    db: str = "mysql"
    db_version: str | None = None
    prs: list[str] = Field(default_factory=list)
    pr_has_deps: bool = False
    include_dynamodb: bool = False
    include_frameworktest: bool = True
    include_recipe_testing: bool = True


@dataclass
class CreatePlan:
    """A validated request, ready to provision."""

    environment: Environment
    recipe: Recipe
    prs: dict[str, PullRequestRef] = field(default_factory=dict)
    options: PipelineOptions = field(default_factory=PipelineOptions)
    warnings: list[str] = field(default_factory=list)


@dataclass
class CreateResult:
    """Result of ``eddev create``."""

    plan: CreatePlan | None = None
    report: PipelineReport | None = None
    error: str | None = None

    @property
    def exit_code(self) -> int:
        if self.error or self.report is None:
            return 1
        return self.report.exit_code

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        result: dict = {}
        if self.plan:
            result["environment"] = self.plan.environment.model_dump(mode="json")
            result["recipe"] = self.plan.recipe.model_dump(exclude={"require"})
            result["prs"] = sorted(self.plan.prs)
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def check_root_path(root: Path) -> None:
    """The environment root must be absent or an empty directory.

    Raises:
        InvalidEnvironment: It is a file or a non-empty directory.
    """
    if root.is_file():
        raise InvalidEnvironment(f"Project root path must not be a file: {root}")
    if root.is_dir() and any(root.iterdir()):
        raise InvalidEnvironment(f"Project root path must be empty: {root}")


def plan_create(
    request: CreateRequest,
    settings: EddevSettings,
    registry: AdapterRegistry,
    *,
    packagist: VersionSource | None = None,
    github: GitHubApi | None = None,
    prompt: Prompt | None = None,
    max_name_attempts: int | None = None,
) -> CreatePlan:
    """Validate a create request.

    Raises:
        EddevError: Any validation or configuration problem.
    """
    projects_path = settings.projects_path()
    warnings: list[str] = []

    # ── Recipe and PHP version ──────────────────────────────────
    recipe = resolve_recipe(request.recipe, request.constraint, packagist or PackagistClient())
    runtime_version = select_runtime_version(recipe, request.php_version)

    if request.db not in DATABASE_ENGINES:
        raise InvalidOption(f"--db must be one of: {', '.join(DATABASE_ENGINES)}")

    # ── Environment name and root ───────────────────────────────
    names = EnvironmentNameResolver(DdevProjects(registry).exists, prompt, max_name_attempts)
    name = names.resolve(request.env_name, recipe.name, request.constraint, has_prs=bool(request.prs))
    root = projects_path / name
    check_root_path(root)

    # ── Pull requests ───────────────────────────────────────────
    prs: dict[str, PullRequestRef] = {}
    if request.prs and "--no-install" in request.composer_options:
        warnings.append("Composer --no-install has been set. Cannot checkout PRs.")
    elif request.prs:
        api = github or GitHubClient(settings.require_github_token())
        prs = PullRequestResolver(api).resolve(request.prs)

    environment = Environment(
        name=name,
        root_path=root,
        database_engine=request.db,
        database_version=request.db_version,
        runtime_version=runtime_version,
    )
    options = PipelineOptions(
        composer_options=request.composer_options,
        extra_modules=request.extra_modules,
        include_dynamodb=request.include_dynamodb,
        include_frameworktest=request.include_frameworktest,
        include_recipe_testing=request.include_recipe_testing,
        pr_has_deps=request.pr_has_deps,
    )
    logger.info(
        "Creating %s at %s from %s (%s), PHP %s, %d PR(s)",
        name, root, recipe.name, recipe.resolved_version, runtime_version, len(prs),
    )
    return CreatePlan(environment=environment, recipe=recipe, prs=prs, options=options, warnings=warnings)


def create_environment(
    request: CreateRequest,
    settings: EddevSettings,
    registry: AdapterRegistry | None = None,
    *,
    packagist: VersionSource | None = None,
    github: GitHubApi | None = None,
    prompt: Prompt | None = None,
    on_event: EventHandler | None = None,
    stream: bool = False,
) -> CreateResult:
    """Validate ``request`` and provision the environment.

    Validation problems come back in ``result.error``; stage outcomes
    in ``result.report``.
    """
    result = CreateResult()
    if registry is None:
        registry = default_registry()
    emit: Callable[[str, str], None] = on_event or (lambda kind, message: None)

    missing = registry.missing_tools("ddev")
    if missing:
        result.error = f"Required tool(s) not installed: {', '.join(missing)}"
        return result

    try:
        plan = plan_create(request, settings, registry, packagist=packagist, github=github, prompt=prompt)
    except EddevError as e:
        result.error = str(e)
        return result
    result.plan = plan

    for warning in plan.warnings:
        emit("warning", warning)

    options = plan.options.model_copy(update={"stream": stream})
    pipeline = ProvisioningPipeline(registry, plan.environment, plan.recipe, plan.prs, options, on_event=emit)
    result.report = pipeline.run()
    return result
