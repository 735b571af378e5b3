# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Project detection and effective configuration commands."""

from __future__ import annotations

from pathlib import Path

import typer

from ...adapters import adapters_for
from ...config_loader import ConfigLoader
from ...detection import describe, detect_projects
from ...errors import NoProjectDetectedError
from ...logging import info
from ..shared import cli_errors, emit_json, load_cli_context, resolve_root
from ..typer_ext import SortedTyper


def detect_command(
    directory: Path | None = typer.Argument(None, metavar="[DIR]", help="Directory to search (default: git root)."),
    walk_up: bool = typer.Option(False, "--walk-up", help="Search parent directories when nothing is found."),
    tests: bool = typer.Option(False, "--tests", help="Detect test frameworks instead of build frameworks."),
) -> None:
    """Print a JSON array describing every detected project."""

    with cli_errors():
        ctx = load_cli_context(directory)
        adapters = adapters_for("test" if tests else "build", ctx.config)
        detected = detect_projects(
            ctx.root,
            adapters=adapters,
            walk_up=walk_up or ctx.config.detection.walk_up,
            max_depth=ctx.config.detection.max_depth,
        )
        if not detected:
            raise NoProjectDetectedError(str(ctx.root), [adapter.name for adapter in adapters])
        results = describe(detected)
        for result in results:
            info(f"Detected {result.display_name} at {result.project_root}", use_emoji=ctx.use_emoji)
        emit_json([result.to_payload() for result in results])


def config_command(
    directory: Path | None = typer.Argument(None, metavar="[DIR]", help="Project root (default: git root)."),
    trace: bool = typer.Option(False, "--trace", help="Include the source of every override."),
    strict: bool = typer.Option(False, "--strict", help="Treat unknown keys as errors."),
) -> None:
    """Print the effective configuration as JSON."""

    with cli_errors():
        result = ConfigLoader.for_root(resolve_root(directory)).load_with_trace(strict=strict)
        payload: dict[str, object] = {"config": result.config.model_dump(mode="json")}
        if trace:
            payload["updates"] = [update.model_dump(mode="json") for update in result.updates]
        if result.warnings:
            payload["warnings"] = list(result.warnings)
        emit_json(payload)


def register(app: SortedTyper) -> None:
    app.command(name="detect")(detect_command)
    app.command(name="config")(config_command)


__all__ = ["config_command", "detect_command", "register"]
