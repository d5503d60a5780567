"""
Composer argument assembly for the create, install and require phases.
"""

from __future__ import annotations

from eddev.core.models.composer import ComposerInvocation, ComposerPhase

DEFAULT_COMPOSER_OPTIONS: tuple[str, ...] = ("--prefer-source",)


def dedupe(args: list[str]) -> list[str]:
    """Drop repeated arguments, keeping the first occurrence."""
    return list(dict.fromkeys(args))


class ComposerArgsBuilder:
    """Builds the flags for every composer call of one pipeline run.

    Args:
        options: Passthrough options from ``-o/--composer-option``.
        defer_install: True when PRs bring their own dependencies, so
            ``create`` must not install before composer.json is rewritten.
    """

    def __init__(self, options: list[str] | tuple[str, ...] = DEFAULT_COMPOSER_OPTIONS, defer_install: bool = False):
        self._options = list(options)
        self._defer_install = defer_install
        self._base: list[str] | None = None

    @property
    def base_args(self) -> list[str]:
        """``--no-interaction`` plus passthrough options, computed once."""
        if self._base is None:
            self._base = ["--no-interaction", *self._options]
        return list(self._base)

    def args_for(self, phase: ComposerPhase) -> list[str]:
        args = self.base_args
        if phase == "create" and self._defer_install:
            args.append("--no-install")
        # composer install rejects --no-audit
        if phase != "install":
            args.append("--no-audit")
        return dedupe(args)

    def create(self, package_spec: str) -> ComposerInvocation:
        return ComposerInvocation(phase="create", args=self.args_for("create"), package=package_spec)

    def install(self) -> ComposerInvocation:
        return ComposerInvocation(phase="install", args=self.args_for("install"))

    def require(self, package: str, dev: bool = False, extra: list[str] | None = None) -> ComposerInvocation:
        args = dedupe([*self.args_for("require"), *(extra or [])])
        return ComposerInvocation(phase="require", args=args, package=package, is_dev_dependency=dev)
