# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy separating configuration faults from tool failures."""

from __future__ import annotations

from collections.abc import Sequence


class DoctorError(Exception):
    """Base class for errors surfaced to the command line."""


class ConfigError(DoctorError):
    """Raised when configuration input is invalid."""


class BuildTargetNotFoundError(DoctorError):
    """Raised when an adapter cannot locate the solution or project it must build.

    This is a configuration problem for the adapter/project pair, not a sign
    that the code under test is broken.
    """

    def __init__(self, framework: str, message: str) -> None:
        super().__init__(message)
        self.framework = framework


class NoProjectDetectedError(DoctorError):
    """Raised when no registered adapter recognises the target directory."""

    def __init__(self, start: str, supported: Sequence[str]) -> None:
        names = ", ".join(supported)
        super().__init__(f"Could not detect any supported framework under {start} (supported: {names})")
        self.start = start
        self.supported = tuple(supported)


class MemoryReserveError(DoctorError, ValueError):
    """Raised when a memory reserve specification cannot be interpreted."""


class ToolNotFoundError(DoctorError, FileNotFoundError):
    """Raised when a toolchain binary is missing from ``PATH``."""

    def __init__(self, executable: str) -> None:
        super().__init__(f"Executable '{executable}' was not found on PATH")
        self.executable = executable


class ToolInvocationError(DoctorError):
    """Raised when a tool exits non-zero without producing any parseable issue."""

    def __init__(self, command: str, returncode: int, output: str) -> None:
        super().__init__(f"Command '{command}' exited with status {returncode} and no parseable issues")
        self.command = command
        self.returncode = returncode
        self.output = output


__all__ = [
    "BuildTargetNotFoundError",
    "ConfigError",
    "DoctorError",
    "MemoryReserveError",
    "NoProjectDetectedError",
    "ToolInvocationError",
    "ToolNotFoundError",
]
