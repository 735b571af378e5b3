# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import logging
import shlex
import shutil

# Commands are pre-declared toolchain invocations passed as argument lists;
# ``shell=True`` is never used.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

from .errors import ToolNotFoundError

LOGGER = logging.getLogger(__name__)

TIMEOUT_EXIT_CODE: Final[int] = 124


@dataclass(slots=True, frozen=True)
class CommandOptions:
    """Immutable command execution options."""

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    timeout: float | None = None

    def __post_init__(self) -> None:
        if self.timeout is not None and self.timeout < 0:
            raise ValueError("timeout must be non-negative")


def split_command(command: str) -> list[str]:
    """Split a declared command line into arguments using POSIX quoting rules.

    Raises:
        ValueError: If ``command`` is empty or has unbalanced quotes.
    """

    args = shlex.split(command)
    if not args:
        raise ValueError("command line must not be empty")
    return args


def _ensure_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return value.decode("utf-8", errors="replace")


def _normalize_args(args: Sequence[str]) -> list[str]:
    """Resolve the executable of ``args`` against ``PATH``.

    Raises:
        ValueError: If no arguments are provided.
        ToolNotFoundError: If the executable cannot be resolved.
    """

    if not args:
        raise ValueError("subprocess command requires at least one argument")

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        raise ToolNotFoundError(head)
    return [resolved, *rest]


def run_command(args: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
    """Execute ``args`` and capture its output as text.

    Output is decoded as UTF-8 with undecodable bytes replaced, so garbled
    tool output still reaches the parsers. Non-zero exit statuses are
    returned, not raised. A timeout is reported as exit status ``124`` with
    a note appended to stderr.

    Args:
        args: Command and argument sequence to execute.
        options: Working directory, environment and timeout settings.

    Returns:
        CompletedProcess: Subprocess execution metadata with text streams.

    Raises:
        ToolNotFoundError: If the executable cannot be resolved on ``PATH``.
    """

    normalized = _normalize_args(args)
    resolved_options = options or CommandOptions()
    LOGGER.debug("running %s (cwd=%s)", shlex.join(normalized), resolved_options.cwd)
    try:
        return subprocess.run(  # nosec B603
            normalized,
            cwd=str(resolved_options.cwd) if resolved_options.cwd is not None else None,
            env=dict(resolved_options.env) if resolved_options.env is not None else None,
            check=False,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=resolved_options.timeout,
            stdin=subprocess.DEVNULL,
        )
    except subprocess.TimeoutExpired as exc:
        stderr = _ensure_text(exc.stderr)
        timeout_msg = f"Command timed out after {resolved_options.timeout:.1f}s"
        return subprocess.CompletedProcess(
            args=normalized,
            returncode=TIMEOUT_EXIT_CODE,
            stdout=_ensure_text(exc.stdout),
            stderr=f"{stderr}\n{timeout_msg}" if stderr else timeout_msg,
        )


def find_git_root(path: Path) -> Path | None:
    """Return the top level of the git work tree containing ``path``.

    Returns ``None`` outside a repository or when ``git`` is unavailable.
    """

    try:
        completed = run_command(
            ["git", "rev-parse", "--show-toplevel"],
            options=CommandOptions(cwd=path),
        )
    except OSError as exc:
        LOGGER.debug("git root lookup failed for %s: %s", path, exc)
        return None
    if completed.returncode != 0:
        return None
    top = completed.stdout.strip()
    return Path(top) if top else None


__all__ = [
    "TIMEOUT_EXIT_CODE",
    "CommandOptions",
    "find_git_root",
    "run_command",
    "split_command",
]
