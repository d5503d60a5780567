"""
CLI command: eddev git-set-remotes.
"""

from __future__ import annotations

from pathlib import Path

import click

from eddev.ui.cli._output import fail, make_reporter


@click.command("git-set-remotes")
@click.argument("directory", required=False, default="./", type=click.Path(file_okay=False))
@click.option("--rename-origin/--no-rename-origin", "-r", default=True, show_default=True,
              help='Rename the "origin" remote to "orig".')
@click.option("--security", "-s", is_flag=True,
              help="Add the security remote instead of the creative-commoners remote.")
@click.option("--fetch", "-f", is_flag=True, help="Run git fetch after defining remotes.")
@click.pass_context
def git_set_remotes(ctx: click.Context, directory: str, rename_origin: bool, security: bool, fetch: bool) -> None:
    """Set the development remotes in a git checkout (default: current directory)."""
    from eddev.core.use_cases.remotes import set_remotes

    report = make_reporter(quiet=ctx.obj.get("quiet", False))
    result = set_remotes(
        str(Path(directory).resolve()),
        ctx.obj.get("registry"),
        security=security,
        rename_origin=rename_origin,
        fetch=fetch,
        on_event=report,
    )
    if result.error:
        fail(result.error)
    report("success", "Remotes added and fetched" if result.fetched else "Remotes added")
