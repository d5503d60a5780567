"""
Provisioning pipeline — the stages of ``eddev create``.

Stages run strictly in order, each returning a StageResult:

    RootPrepared → DdevConfigured → ComposerProjectCreated →
    OptionalModulesInstalled → PRsIntegrated → FilesOverlaid → BuildAttempted

The first ``fatal`` result stops the run; nothing already done is rolled
back. ``advisory`` results add warnings and the run continues. Every
external call goes through the AdapterRegistry with a stable action ID
(``ddev:config``, ``composer:create``, ``composer:require:<pkg>``...).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field

from eddev.adapters.registry import AdapterRegistry
from eddev.core.models.action import Receipt
from eddev.core.models.environment import Environment
from eddev.core.models.pull_request import PullRequestRef
from eddev.core.models.recipe import Recipe
from eddev.core.models.stage import StageResult
from eddev.core.services import project_files
from eddev.core.services.composer_args import DEFAULT_COMPOSER_OPTIONS, ComposerArgsBuilder
from eddev.core.services.composer_json import ComposerJson
from eddev.core.services.pr_checkout import PullRequestCheckoutEngine

logger = logging.getLogger(__name__)

ROOT_PREPARED = "RootPrepared"
DDEV_CONFIGURED = "DdevConfigured"
COMPOSER_PROJECT_CREATED = "ComposerProjectCreated"
OPTIONAL_MODULES_INSTALLED = "OptionalModulesInstalled"
PRS_INTEGRATED = "PRsIntegrated"
FILES_OVERLAID = "FilesOverlaid"
BUILD_ATTEMPTED = "BuildAttempted"

STAGES: tuple[str, ...] = (
    ROOT_PREPARED,
    DDEV_CONFIGURED,
    COMPOSER_PROJECT_CREATED,
    OPTIONAL_MODULES_INSTALLED,
    PRS_INTEGRATED,
    FILES_OVERLAID,
    BUILD_ATTEMPTED,
)

DDEV_ADDONS: tuple[str, ...] = (
    "ddev/ddev-selenium-standalone-chrome",
    "ddev/ddev-phpmyadmin",
)

TIMEZONE = "Pacific/Auckland"
DOCROOT = "public"
BUILD_COMMAND: tuple[str, ...] = ("sake", "dev/build")

# receives (kind, message); kind is one of step, substep, warning, error, success
EventHandler = Callable[[str, str], None]


class PipelineOptions(BaseModel):
    """Flags of ``eddev create`` that steer the pipeline."""

    composer_options: list[str] = Field(default_factory=lambda: list(DEFAULT_COMPOSER_OPTIONS))
    extra_modules: list[str] = Field(default_factory=list)
    include_dynamodb: bool = False
    include_frameworktest: bool = True
    include_recipe_testing: bool = True
    pr_has_deps: bool = False
    stream: bool = False


def optional_modules(recipe: Recipe, options: PipelineOptions) -> list[tuple[str, bool]]:
    """Modules required after project creation, as (package, is_dev), in order."""
    modules: list[tuple[str, bool]] = []
    if options.include_dynamodb:
        modules.append((f"silverstripe/dynamodb:{recipe.version_constraint}", False))
    modules.append(("behat/mink-selenium2-driver", True))
    if options.include_frameworktest:
        modules.append(("silverstripe/frameworktest", True))
    if options.include_recipe_testing:
        modules.append(("silverstripe/recipe-testing", True))
    if not recipe.bundles_docs:
        modules.append(("silverstripe/developer-docs", False))
    modules.extend((module, False) for module in options.extra_modules)
    return modules


@dataclass
class PipelineReport:
    """Everything that happened during one pipeline run."""

    environment: str = ""
    results: list[StageResult] = field(default_factory=list)

    def add(self, result: StageResult) -> None:
        self.results.append(result)

    def result_for(self, stage: str) -> StageResult | None:
        for result in self.results:
            if result.stage == stage:
                return result
        return None

    @property
    def warnings(self) -> list[str]:
        return [warning for result in self.results for warning in result.warnings]

    @property
    def fatal(self) -> StageResult | None:
        for result in self.results:
            if result.is_fatal:
                return result
        return None

    @property
    def completed(self) -> bool:
        """Every stage ran (none was cut short by a fatal result)."""
        return self.fatal is None and len(self.results) == len(STAGES)

    @property
    def build_ok(self) -> bool:
        result = self.result_for(BUILD_ATTEMPTED)
        return result is not None and result.status == "success"

    @property
    def status(self) -> str:
        if self.fatal is not None:
            return "fatal"
        if self.warnings:
            return "advisory"
        return "success"

    @property
    def exit_code(self) -> int:
        """0 when the environment is usable.

        Advisory failures don't count, except the database build: it is
        the last step and an unbuilt database means the site won't load.
        """
        if self.fatal is not None:
            return 1
        return 0 if self.build_ok else 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "environment": self.environment,
            "status": self.status,
            "exit_code": self.exit_code,
            "warnings": self.warnings,
            "stages": [result.model_dump() for result in self.results],
        }


class ProvisioningPipeline:
    """Builds one environment.

    Args:
        registry: Dispatches every tool call.
        environment: Validated target environment.
        recipe: Resolved recipe.
        prs: Resolved pull requests keyed by package name.
        options: Steering flags.
        on_event: Receives ``(kind, message)`` progress events.
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        environment: Environment,
        recipe: Recipe,
        prs: dict[str, PullRequestRef] | None = None,
        options: PipelineOptions | None = None,
        on_event: EventHandler | None = None,
    ):
        self._registry = registry
        self.environment = environment
        self.recipe = recipe
        self.prs = dict(prs or {})
        self.options = options or PipelineOptions()
        self._on_event = on_event or (lambda kind, message: None)
        self.composer_args = ComposerArgsBuilder(
            self.options.composer_options,
            defer_install=self.options.pr_has_deps and bool(self.prs),
        )

    # ── Orchestration ───────────────────────────────────────────

    def run(self) -> PipelineReport:
        report = PipelineReport(environment=self.environment.name)
        stages: list[tuple[str, Callable[[], StageResult]]] = [
            (ROOT_PREPARED, self.prepare_root),
            (DDEV_CONFIGURED, self.configure_ddev),
            (COMPOSER_PROJECT_CREATED, self.create_project),
            (OPTIONAL_MODULES_INSTALLED, self.install_optional_modules),
            (PRS_INTEGRATED, self.integrate_prs),
            (FILES_OVERLAID, self.overlay_files),
            (BUILD_ATTEMPTED, self.build),
        ]
        for name, stage in stages:
            result = stage()
            report.add(result)
            logger.debug("Stage %s → %s", name, result.status)
            for warning in result.warnings:
                self._emit("warning", warning)
            if result.is_fatal:
                self._emit("error", result.message)
                logger.error("Stage %s failed: %s", name, result.message)
                break
        return report

    def _emit(self, kind: str, message: str) -> None:
        self._on_event(kind, message)

    def _run(self, action_id: str, adapter: str, cwd: str | None = None, **params: Any) -> Receipt:
        return self._registry.run(
            action_id,
            adapter,
            cwd=cwd or str(self.environment.root_path),
            stream=self.options.stream,
            **params,
        )

    def _composer(self, action_id: str, command: list[str]) -> Receipt:
        return self._run(action_id, "composer", name=f"composer {' '.join(command)}", command=command)

    # ── Stages ──────────────────────────────────────────────────

    def prepare_root(self) -> StageResult:
        self._emit("step", "Preparing project directory")
        root = self.environment.root_path
        if root.is_dir():
            return StageResult.success(ROOT_PREPARED, f"Using existing empty directory {root}")
        receipt = self._run("fs:mkdir-root", "filesystem", cwd=str(root.parent), operation="mkdir", path=str(root))
        if not receipt.ok:
            return StageResult.fatal(ROOT_PREPARED, f"Couldn't create environment directory: {receipt.error}")
        return StageResult.success(ROOT_PREPARED, f"Created {root}")

    def ddev_config_args(self) -> list[str]:
        env = self.environment
        return [
            env.database_flag,
            "--webserver-type=apache-fpm",
            "--project-type=php",
            f"--php-version={env.runtime_version}",
            f"--project-name={env.name}",
            f"--timezone={TIMEZONE}",
            f"--docroot={DOCROOT}",
            "--create-docroot",
        ]

    def configure_ddev(self) -> StageResult:
        self._emit("step", "Configuring DDEV project")
        receipt = self._run("ddev:config", "ddev", operation="config", args=self.ddev_config_args())
        if not receipt.ok:
            return StageResult.fatal(DDEV_CONFIGURED, f"Couldn't configure DDEV project: {receipt.error}")

        warnings: list[str] = []
        for addon in DDEV_ADDONS:
            self._emit("substep", f"Adding DDEV addon {addon}")
            if not self._run(f"ddev:get:{addon}", "ddev", operation="get", addon=addon).ok:
                warnings.append(f'Could not add DDEV addon "{addon}" - add that manually.')

        ddev_dir = str(self.environment.root_path / ".ddev")
        receipt = self._run(
            "fs:mirror-ddev", "filesystem",
            operation="mirror", source=str(project_files.DDEV_TEMPLATE), path=ddev_dir,
        )
        if not receipt.ok:
            warnings.append(f"Couldn't copy DDEV config files: {receipt.error}")

        if self.options.include_dynamodb:
            receipt = self._run(
                "fs:write-dynamodb-compose", "filesystem",
                operation="write",
                path=str(self.environment.root_path / ".ddev" / project_files.DYNAMODB_COMPOSE_FILE),
                content=project_files.dynamodb_compose(),
            )
            if not receipt.ok:
                warnings.append(f"Couldn't add the DynamoDB service: {receipt.error}")

        self._emit("substep", "Starting DDEV project")
        if not self._run("ddev:start", "ddev", operation="start").ok:
            warnings.append("Couldn't start DDEV project - run `ddev start` in the project directory.")

        return StageResult.success(DDEV_CONFIGURED, "DDEV project configured", warnings)

    def create_project(self) -> StageResult:
        self._emit("step", f"Creating composer project from {self.recipe.package_spec}")
        invocation = self.composer_args.create(self.recipe.package_spec)
        if not self._composer("composer:create", invocation.command).ok:
            return StageResult.fatal(COMPOSER_PROJECT_CREATED, "Couldn't create composer project.")
        return StageResult.success(COMPOSER_PROJECT_CREATED, f"Created project from {self.recipe.package_spec}")

    def install_optional_modules(self) -> StageResult:
        warnings: list[str] = []
        for module, is_dev in optional_modules(self.recipe, self.options):
            self._emit("step", f"Adding optional module {module}")
            invocation = self.composer_args.require(module, dev=is_dev)
            if not self._composer(f"composer:require:{module}", invocation.command).ok:
                warnings.append(f"Couldn't require '{module}' - add that dependency manually.")
        return StageResult.success(OPTIONAL_MODULES_INSTALLED, "Optional modules processed", warnings)

    def integrate_prs(self) -> StageResult:
        if not self.prs:
            return StageResult.skipped(PRS_INTEGRATED, "No pull requests requested")
        if self.options.pr_has_deps:
            return self._integrate_prs_with_deps()

        engine = PullRequestCheckoutEngine(
            self._registry,
            self.environment,
            self.composer_args,
            stream=self.options.stream,
            report=lambda message: self._emit("step", message),
        )
        batch = engine.checkout_all(self.prs.values())
        warnings = [item.error or f"Could not check out PR for {item.key}" for item in batch.failed]
        message = f"Checked out {len(batch.succeeded)} of {len(batch.items)} pull request(s)"
        return StageResult.success(PRS_INTEGRATED, message, warnings)

    def _integrate_prs_with_deps(self) -> StageResult:
        self._emit("step", "Adding PRs to composer.json")
        try:
            manifest = ComposerJson(self.environment.root_path)
            manifest.add_forks(self.prs.values())
            manifest.add_forked_deps(self.prs.values())
            manifest.save()
        except (OSError, ValueError) as e:
            return StageResult.advisory(PRS_INTEGRATED, f"Couldn't add PRs to composer.json: {e}")

        self._emit("step", "Running composer install now that dependencies have been defined")
        invocation = self.composer_args.install()
        if not self._composer("composer:install", invocation.command).ok:
            return StageResult.advisory(PRS_INTEGRATED, "Couldn't run composer install.")
        return StageResult.success(PRS_INTEGRATED, f"Installed {len(self.prs)} pull request(s) via composer")

    def overlay_files(self) -> StageResult:
        self._emit("step", "Copying project files")
        root = str(self.environment.root_path)
        receipt = self._run(
            "fs:mirror-project", "filesystem",
            operation="mirror", source=str(project_files.PROJECT_TEMPLATE), path=root,
        )
        if not receipt.ok:
            return StageResult.fatal(FILES_OVERLAID, f"Couldn't copy project files: {receipt.error}")

        if self.options.include_dynamodb:
            try:
                content = project_files.project_env(include_dynamodb=True)
            except OSError as e:
                return StageResult.fatal(FILES_OVERLAID, f"Couldn't read the .env template: {e}")
            receipt = self._run("fs:write-env", "filesystem", operation="write", path=".env", content=content)
            if not receipt.ok:
                return StageResult.fatal(FILES_OVERLAID, f"Couldn't write .env: {receipt.error}")
        return StageResult.success(FILES_OVERLAID, "Project files copied")

    def build(self) -> StageResult:
        self._emit("step", "Building database")
        receipt = self._run("ddev:build", "ddev", operation="exec", args=list(BUILD_COMMAND))
        if not receipt.ok:
            return StageResult.advisory(
                BUILD_ATTEMPTED,
                f"Couldn't build database - run `ddev exec {' '.join(BUILD_COMMAND)}`",
            )
        return StageResult.success(BUILD_ATTEMPTED, "Database built")
