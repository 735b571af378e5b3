# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Execution of adapter commands and capture of their output.

Runs are split into a validation pass (quality gates such as formatters,
linters and type checkers) and a primary pass (build or test commands). Both
write banner-delimited transcripts that :mod:`qadoctor.aggregate` can parse
later.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

from .adapters.base import FrameworkAdapter
from .aggregate import section_banner
from .errors import ToolInvocationError
from .frameworks import FrameworkConfig
from .models import ExcludedWarning, ParseResult
from .process import CommandOptions, run_command, split_command

LOGGER = logging.getLogger(__name__)

FINAL_OUTPUT_NAME: Final[str] = "build-output-final.txt"


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured streams and exit status of one command line."""

    command: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def output(self) -> str:
        return self.stdout + self.stderr

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


Runner = Callable[[str], CommandResult]


class CommandRunner:
    """Run declared command lines without a shell from a fixed directory."""

    def __init__(
        self,
        cwd: Path,
        *,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> None:
        self._options = CommandOptions(cwd=cwd, env=env, timeout=timeout)

    @property
    def cwd(self) -> Path | None:
        return self._options.cwd

    def __call__(self, command: str) -> CommandResult:
        """Execute ``command`` and capture its output.

        Raises:
            ToolNotFoundError: If the command's executable is not on ``PATH``.
        """

        completed = run_command(split_command(command), options=self._options)
        return CommandResult(
            command=command,
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


@dataclass(slots=True)
class StepOutcome:
    """Result of one validation or primary command."""

    name: str
    result: CommandResult
    parsed: ParseResult
    optional: bool = False

    @property
    def passed(self) -> bool:
        return self.result.succeeded

    @property
    def blocking(self) -> bool:
        """Return ``True`` when this step should fail the run."""

        return not self.passed and not self.optional

    def invocation_error(self) -> ToolInvocationError | None:
        """Return a tool failure when the command failed but nothing was parsed.

        Such output usually means the tool itself could not run, so the raw
        output is kept on the error for inspection.
        """

        if self.passed or self.parsed.has_errors:
            return None
        return ToolInvocationError(self.result.command, self.result.exit_code, self.result.output)


@dataclass(slots=True)
class PassReport:
    """Steps of a pass plus the transcript written for later parsing."""

    steps: list[StepOutcome] = field(default_factory=list)
    transcript: str = ""

    @property
    def failed(self) -> bool:
        return any(step.blocking for step in self.steps)

    @property
    def parsed(self) -> ParseResult:
        result = ParseResult()
        for step in self.steps:
            result = result.merge(step.parsed)
        return result

    def write(self, path: Path) -> Path:
        path.write_text(self.transcript, encoding="utf-8")
        return path


def run_validation(
    adapter: FrameworkAdapter[Any],
    config: FrameworkConfig,
    runner: Runner,
) -> PassReport:
    """Run every validation command in order, never stopping early."""

    report = PassReport()
    chunks: list[str] = []
    for command in adapter.get_validation_commands(config):
        LOGGER.debug("validation step %s: %s", command.name, command.command)
        result = runner(command.command)
        chunks.append(section_banner(command.name) + result.output)
        parsed = ParseResult() if result.succeeded else adapter.parse_validation_output(result.output, command.name)
        report.steps.append(StepOutcome(command.name, result, parsed, optional=command.optional))
    report.transcript = "".join(chunks)
    return report


def _run_primary(adapter: FrameworkAdapter[Any], commands: Sequence[str], runner: Runner) -> PassReport:
    report = PassReport()
    chunks: list[str] = []
    for command in commands:
        result = runner(command)
        chunks.append(section_banner(command) + result.output)
        report.steps.append(StepOutcome(command, result, adapter.parse_primary_output(result.output)))
        if not result.succeeded:
            LOGGER.debug("stopping after failed step: %s (exit %d)", command, result.exit_code)
            break
    report.transcript = "".join(chunks)
    return report


def run_build(adapter: FrameworkAdapter[Any], config: FrameworkConfig, runner: Runner) -> PassReport:
    """Run the build or test commands, stopping at the first failing one.

    Raises:
        BuildTargetNotFoundError: If the adapter cannot locate its target.
    """

    return _run_primary(adapter, adapter.primary_commands(config), runner)


@dataclass(slots=True)
class FinalOutcome:
    """Summary of the closing whole-project pass."""

    validation: PassReport
    build: PassReport
    removed_files: list[Path] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.validation.parsed.errors) + len(self.build.parsed.errors)

    @property
    def excluded_warnings(self) -> list[ExcludedWarning]:
        return [*self.validation.parsed.excluded_warnings, *self.build.parsed.excluded_warnings]

    @property
    def invocation_errors(self) -> list[ToolInvocationError]:
        steps = [*self.validation.steps, *self.build.steps]
        return [error for step in steps if not step.optional and (error := step.invocation_error()) is not None]

    @property
    def passed(self) -> bool:
        return self.error_count == 0 and not self.build.failed and not self.invocation_errors


def remove_scratch_files(project_root: Path, names: Iterable[str]) -> list[Path]:
    """Delete transcripts left by earlier passes and return the paths removed."""

    removed: list[Path] = []
    for name in names:
        path = project_root / name
        if path.is_file():
            path.unlink()
            removed.append(path)
    return removed


def run_final_validation(
    adapter: FrameworkAdapter[Any],
    config: FrameworkConfig,
    runner: Runner,
    *,
    scratch_files: Sequence[str] = (),
) -> FinalOutcome:
    """Run validation and the final build, then remove scratch transcripts.

    Excluded warnings are collected from every primary step, including steps
    that succeeded.
    """

    validation = run_validation(adapter, config, runner)
    build = _run_primary(adapter, adapter.final_commands(config), runner)
    removed = remove_scratch_files(Path(config.project_root), scratch_files)
    return FinalOutcome(validation=validation, build=build, removed_files=removed)


__all__ = [
    "FINAL_OUTPUT_NAME",
    "CommandResult",
    "CommandRunner",
    "FinalOutcome",
    "PassReport",
    "Runner",
    "StepOutcome",
    "remove_scratch_files",
    "run_build",
    "run_final_validation",
    "run_validation",
]
