"""
CLI command: eddev create.

Thin wrapper over ``eddev.core.use_cases.create``.
"""

from __future__ import annotations

import json
import sys

import click

from eddev.core.models.environment import DATABASE_ENGINES
from eddev.core.services.composer_args import DEFAULT_COMPOSER_OPTIONS
from eddev.core.use_cases.create import DEFAULT_CONSTRAINT, DEFAULT_RECIPE
from eddev.ui.cli._output import ask, fail, handle_interrupt, make_reporter


@click.command()
@click.argument("env_name", required=False)
@click.option("--recipe", "-r", default=DEFAULT_RECIPE, show_default=True,
              help="Recipe to install: a package name or installer, sink, core, cms.")
@click.option("--constraint", "-c", default=DEFAULT_CONSTRAINT, show_default=True,
              help="Version constraint for the recipe.")
@click.option("--extra-module", "-m", "extra_modules", multiple=True,
              help="Additional module to require (repeatable).")
@click.option("--composer-option", "-o", "composer_options", multiple=True,
              help=f"Option passed to every composer command (repeatable). Default: {' '.join(DEFAULT_COMPOSER_OPTIONS)}")
@click.option("--php-version", "-P", default=None,
              help="PHP version (default: the lowest the recipe allows).")
@click.option("--db", type=click.Choice(DATABASE_ENGINES), default="mysql", show_default=True,
              help="Database engine.")
@click.option("--db-version", default=None, help="Database version (default: DDEV's default).")
@click.option("--pr", "prs", multiple=True,
              help='Pull request to check out, e.g. "silverstripe/silverstripe-framework#123" (repeatable).')
@click.option("--pr-has-deps", is_flag=True,
              help="The PRs have dependencies which must be part of the first composer install.")
@click.option("--include-dynamodb/--no-include-dynamodb", default=False, show_default=True,
              help="Store sessions in a local DynamoDB container and install silverstripe/dynamodb.")
@click.option("--include-frameworktest/--no-include-frameworktest", default=True, show_default=True,
              help="Install silverstripe/frameworktest.")
@click.option("--include-recipe-testing/--no-include-recipe-testing", default=True, show_default=True,
              help="Install silverstripe/recipe-testing.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print the final report as JSON.")
@click.pass_context
@handle_interrupt
def create(
    ctx: click.Context,
    env_name: str | None,
    recipe: str,
    constraint: str,
    extra_modules: tuple[str, ...],
    composer_options: tuple[str, ...],
    php_version: str | None,
    db: str,
    db_version: str | None,
    prs: tuple[str, ...],
    pr_has_deps: bool,
    include_dynamodb: bool,
    include_frameworktest: bool,
    include_recipe_testing: bool,
    as_json: bool,
) -> None:
    """Install an opinionated Silverstripe CMS environment in the projects directory."""
    from eddev.core.use_cases.create import CreateRequest, create_environment

    request = CreateRequest(
        env_name=env_name,
        recipe=recipe,
        constraint=constraint,
        extra_modules=list(extra_modules),
        composer_options=list(composer_options) or list(DEFAULT_COMPOSER_OPTIONS),
        php_version=php_version,
        db=db,
        db_version=db_version,
        prs=list(prs),
        pr_has_deps=pr_has_deps,
        include_dynamodb=include_dynamodb,
        include_frameworktest=include_frameworktest,
        include_recipe_testing=include_recipe_testing,
    )
    report = make_reporter(quiet=ctx.obj.get("quiet", False) or as_json)
    result = create_environment(
        request,
        ctx.obj["settings"],
        ctx.obj.get("registry"),
        packagist=ctx.obj.get("packagist"),
        github=ctx.obj.get("github"),
        prompt=ask,
        on_event=report,
        stream=ctx.obj.get("verbose", False),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if result.error:
        fail(result.error)

    assert result.report is not None and result.plan is not None
    env = result.plan.environment
    if result.report.fatal is not None:
        sys.exit(result.report.exit_code)

    warnings = result.report.warnings
    if result.exit_code == 0:
        suffix = f" with {len(warnings)} warning(s)" if warnings else ""
        report("success", f"Environment {env.name} created at {env.root_path}{suffix}")
    else:
        click.secho(f"⚠️  Environment {env.name} created, but it needs attention:", fg="yellow", err=True)
    for warning in warnings:
        click.secho(f"   • {warning}", fg="yellow", err=True)
    sys.exit(result.exit_code)
