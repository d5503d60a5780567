"""
CLI command: eddev destroy.
"""

from __future__ import annotations

import click

from eddev.ui.cli._output import ask, fail, handle_interrupt, make_reporter


@click.command()
@click.argument("project_name", required=False)
@click.pass_context
@handle_interrupt
def destroy(ctx: click.Context, project_name: str | None) -> None:
    """Tear down a project: containers, volumes and its directory.

    Use `ddev list` if you aren't sure of the name.
    """
    from eddev.core.use_cases.destroy import destroy_project

    report = make_reporter(quiet=ctx.obj.get("quiet", False))
    result = destroy_project(
        project_name,
        ctx.obj.get("registry"),
        prompt=ask,
        on_event=report,
        stream=ctx.obj.get("verbose", False),
    )
    if result.error:
        fail(result.error)
    assert result.project is not None
    report("success", f"Project {result.project.name} destroyed")
