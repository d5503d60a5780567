"""
eddev — CLI entrypoint.

Usage:
    eddev --help
    eddev create my-env -r cms -c ^5
    eddev destroy my-env
    eddev git-set-remotes vendor/silverstripe/framework --fetch
"""

from __future__ import annotations

import sys

import click

from eddev import __version__
from eddev.core.config.settings import load_settings
from eddev.core.errors import ConfigError
from eddev.core.observability.logging_config import resolve_level, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="eddev")
@click.option("--verbose", "-v", is_flag=True, help="Show tool output as it runs.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, debug: bool) -> None:
    """Opinionated DDEV environments for Silverstripe CMS development."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug

    try:
        settings = ctx.obj.get("settings") or load_settings()
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)
    ctx.obj["settings"] = settings

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet, env_level=settings.log_level),
        log_file=settings.log_file,
        log_file_level=settings.log_file_level,
    )

    if ctx.obj.get("registry") is None:
        from eddev.adapters.registry import default_registry

        ctx.obj["registry"] = default_registry()


from eddev.ui.cli.create import create  # noqa: E402
from eddev.ui.cli.destroy import destroy  # noqa: E402
from eddev.ui.cli.remotes import git_set_remotes  # noqa: E402

cli.add_command(create)
cli.add_command(destroy)
cli.add_command(git_set_remotes)
cli.add_command(git_set_remotes, name="remotes")


if __name__ == "__main__":
    cli()
