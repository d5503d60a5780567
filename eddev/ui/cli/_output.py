"""
Shared CLI output helpers — progress events, prompts and interrupts.
"""

from __future__ import annotations

import functools
import sys
from collections.abc import Callable
from typing import Any

import click

# kind → (prefix, colour, to stderr)
_EVENT_STYLES: dict[str, tuple[str, str | None, bool]] = {
    "step": ("▶ ", "cyan", False),
    "substep": ("  · ", None, False),
    "warning": ("⚠️  ", "yellow", True),
    "error": ("❌ ", "red", True),
    "success": ("✅ ", "green", False),
}

EXIT_INTERRUPTED = 130


def make_reporter(quiet: bool = False) -> Callable[[str, str], None]:
    """Event handler printing pipeline progress with click."""

    def report(kind: str, message: str) -> None:
        prefix, colour, to_err = _EVENT_STYLES.get(kind, ("", None, False))
        if quiet and not to_err:
            return
        click.secho(f"{prefix}{message}", fg=colour, err=to_err)

    return report


def ask(question: str, default: str | None = None) -> str:
    return click.prompt(question, default=default, show_default=default is not None)


def fail(message: str, code: int = 1) -> None:
    click.secho(f"❌ {message}", fg="red", err=True)
    sys.exit(code)


def handle_interrupt(func: Callable[..., Any]) -> Callable[..., Any]:
    """Exit with 130 on Ctrl-C instead of click's generic abort."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (KeyboardInterrupt, click.exceptions.Abort):
            click.secho("\n⚠️  Interrupted — nothing is rolled back, clean up manually if needed.", fg="yellow", err=True)
            sys.exit(EXIT_INTERRUPTED)

    return wrapper
