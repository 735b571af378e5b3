# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Helpers shared by the CLI commands."""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Final

import typer
from rich.console import Console

from ..adapters import adapters_for
from ..config import DoctorConfig
from ..config_loader import ConfigLoader
from ..console import get_console_manager
from ..detection import DetectedProject, default_start, detect_projects
from ..errors import DoctorError, NoProjectDetectedError, ToolInvocationError
from ..execution import CommandRunner
from ..logging import fail, indented, warn

OUTPUT_EXCERPT_LINES: Final[int] = 40


class OutputFormat(str, Enum):
    """Rendering choices for report commands."""

    TABLE = "table"
    JSON = "json"


@dataclass(slots=True)
class CLIContext:
    """Resolved project root plus its effective configuration."""

    root: Path
    config: DoctorConfig

    @property
    def use_emoji(self) -> bool:
        return self.config.output.emoji

    @property
    def use_color(self) -> bool:
        return self.config.output.color

    def stdout(self) -> Console:
        """Return the console used for human-readable reports on stdout."""

        return get_console_manager().get(color=self.use_color, emoji=self.use_emoji)

    def runner(self, cwd: Path) -> CommandRunner:
        return CommandRunner(cwd, timeout=self.config.execution.timeout_seconds)


def resolve_root(directory: Path | None) -> Path:
    """Return ``directory`` resolved, defaulting to the enclosing git root."""

    return directory.expanduser().resolve() if directory is not None else default_start()


def load_cli_context(directory: Path | None) -> CLIContext:
    """Return the CLI context for ``directory``.

    Raises:
        ConfigError: If a configuration source is invalid.
    """

    root = resolve_root(directory)
    return CLIContext(root=root, config=ConfigLoader.for_root(root).load())


def _output_excerpt(output: str) -> list[str]:
    return output.rstrip().splitlines()[-OUTPUT_EXCERPT_LINES:]


@contextmanager
def cli_errors(*, use_emoji: bool = True) -> Iterator[None]:
    """Turn :class:`DoctorError` into a red stderr message and exit status 1."""

    try:
        yield
    except ToolInvocationError as exc:
        fail(str(exc), use_emoji=use_emoji)
        if exc.output.strip():
            indented(_output_excerpt(exc.output))
        raise typer.Exit(code=1) from exc
    except DoctorError as exc:
        fail(str(exc), use_emoji=use_emoji)
        raise typer.Exit(code=1) from exc


def emit_json(payload: Any) -> None:
    """Write ``payload`` to stdout as indented JSON."""

    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def select_project(ctx: CLIContext, *, tests: bool, walk_up: bool | None = None) -> DetectedProject:
    """Return the first project detected under ``ctx.root``.

    Raises:
        NoProjectDetectedError: If no registered adapter matches.
    """

    adapters = adapters_for("test" if tests else "build", ctx.config)
    detection = ctx.config.detection
    detected = detect_projects(
        ctx.root,
        adapters=adapters,
        walk_up=detection.walk_up if walk_up is None else walk_up,
        max_depth=detection.max_depth,
    )
    if not detected:
        raise NoProjectDetectedError(str(ctx.root), [adapter.name for adapter in adapters])
    primary = detected[0]
    if len(detected) > 1:
        warn(
            f"Multiple frameworks detected, using {primary.adapter.display_name} at {primary.project_root}",
            use_emoji=ctx.use_emoji,
        )
    return primary


__all__ = [
    "CLIContext",
    "OutputFormat",
    "cli_errors",
    "emit_json",
    "load_cli_context",
    "resolve_root",
    "select_project",
]
