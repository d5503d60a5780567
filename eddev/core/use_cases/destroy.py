"""
Destroy use case — remove a DDEV project and its directory.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from eddev.adapters.registry import AdapterRegistry
from eddev.core.errors import InvalidEnvironment
from eddev.core.models.environment import DdevProject
from eddev.core.services.ddev_projects import DdevProjects

logger = logging.getLogger(__name__)

Prompt = Callable[[str], str]
EventHandler = Callable[[str, str], None]


@dataclass
class DestroyResult:
    project: DdevProject | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def select_project(
    requested: str | None,
    projects: list[DdevProject],
    prompt: Prompt | None = None,
    max_attempts: int | None = None,
) -> DdevProject:
    """Pick the project to destroy, asking until a known name is given.

    Raises:
        InvalidEnvironment: No projects exist, or no valid name was given.
    """
    if not projects:
        raise InvalidEnvironment("There are no current DDEV projects to destroy")
    by_name = {project.name: project for project in projects}
    if requested in by_name:
        return by_name[requested]
    if prompt is None:
        raise InvalidEnvironment(f"No DDEV project named '{requested}'")

    attempts = 0
    while max_attempts is None or attempts < max_attempts:
        attempts += 1
        answer = (prompt("Which project do you want to destroy?") or "").strip()
        if answer in by_name:
            return by_name[answer]
        logger.warning("You must provide a valid project name.")
    raise InvalidEnvironment(f"No valid project name after {attempts} attempt(s)")


def destroy_project(
    name: str | None,
    registry: AdapterRegistry,
    *,
    prompt: Prompt | None = None,
    on_event: EventHandler | None = None,
    stream: bool = False,
) -> DestroyResult:
    """Delete the DDEV project (containers, volumes) and its directory."""
    emit = on_event or (lambda kind, message: None)
    result = DestroyResult()

    try:
        project = select_project(name, DdevProjects(registry).list_projects(), prompt)
    except InvalidEnvironment as e:
        result.error = str(e)
        return result
    result.project = project

    emit("step", f"Destroying project {project.name}")
    if not project.approot:
        result.error = f"DDEV reports no directory for project {project.name}"
        return result

    emit("step", "Shutting down DDEV project")
    receipt = registry.run(
        "ddev:delete", "ddev", cwd=project.approot, stream=stream,
        operation="delete", args=["-O", "-y", project.name],
    )
    if not receipt.ok:
        result.error = f"Could not shut down DDEV project: {receipt.error}"
        return result

    emit("step", "Deleting project directory")
    receipt = registry.run(
        "fs:remove-root", "filesystem", cwd=project.approot,
        operation="remove", path=project.approot,
    )
    if not receipt.ok:
        result.error = f"Could not delete project directory: {receipt.error}"
    return result
