# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Adapter contract shared by every build and test framework."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, ClassVar, Generic, Literal, TypeVar

from ..context import DetectionContext
from ..frameworks import FrameworkConfig
from ..models import ParallelStrategy, ParseResult, ValidationCommand
from ..parsers.base import ExclusionPolicy, LineRule, parse_lines

AdapterKind = Literal["build", "test"]
ConfigT = TypeVar("ConfigT", bound=FrameworkConfig)


class FrameworkAdapter(ABC, Generic[ConfigT]):
    """Framework-specific strategy for detection, commands and output parsing.

    Adapters hold no per-run state. Everything derived from a project lives in
    the frozen config returned by :meth:`resolve_config`, and the exclusion
    allow-list is fixed at construction.
    """

    name: ClassVar[str]
    display_name: ClassVar[str]
    kind: ClassVar[AdapterKind]
    config_type: ClassVar[type[FrameworkConfig]]

    def __init__(self, excluded_warnings: Iterable[str] = ()) -> None:
        self._policy = ExclusionPolicy.of(excluded_warnings)

    @property
    def excluded_warnings(self) -> frozenset[str]:
        """Return the warning codes reported without blocking success."""

        return self._policy.excluded_rules

    @property
    def policy(self) -> ExclusionPolicy:
        """Return the exclusion policy applied while parsing."""

        return self._policy

    # Detection -----------------------------------------------------------

    @abstractmethod
    def can_detect(self, context: DetectionContext) -> bool:
        """Return ``True`` when ``context`` carries this framework's fingerprints."""

    @abstractmethod
    def detect_config(self, context: DetectionContext) -> Mapping[str, Any]:
        """Return settings derived from ``context`` that override the defaults.

        Never raises for missing configuration; absent values stay ``None``.
        """

    def default_config(self, project_root: Path | str) -> ConfigT:
        """Return the baseline configuration for ``project_root``."""

        return self.config_type(project_root=str(project_root))  # type: ignore[return-value]

    def resolve_config(self, context: DetectionContext) -> ConfigT:
        """Return defaults merged with :meth:`detect_config` overrides."""

        return self.default_config(context.project_root).merged(self.detect_config(context))

    def get_display_name(self, config: ConfigT) -> str:
        """Return a human-readable label for ``config``."""

        return self.display_name

    # Commands ------------------------------------------------------------

    @abstractmethod
    def primary_commands(self, config: ConfigT) -> list[str]:
        """Return the build or test commands run after validation."""

    def final_commands(self, config: ConfigT) -> list[str]:
        """Return the commands used for the closing whole-project pass."""

        return self.primary_commands(config)

    def get_validation_commands(self, config: ConfigT) -> list[ValidationCommand]:
        """Return ordered quality gates run before the primary commands."""

        return []

    def get_verify_command(self, config: ConfigT) -> str | None:
        """Return a single-file verification command.

        ``None`` means the framework cannot check one file in isolation and
        verification is deferred to the next whole-project pass.
        """

        return None

    # Parsing -------------------------------------------------------------

    def validation_rules(self, validator_name: str) -> Sequence[LineRule]:
        """Return the line rules understanding ``validator_name`` output."""

        return ()

    def parse_validation_output(self, text: str, validator_name: str) -> ParseResult:
        """Parse output captured from the validation command ``validator_name``."""

        return parse_lines(text, self.validation_rules(validator_name), policy=self._policy)

    @abstractmethod
    def parse_primary_output(self, text: str) -> ParseResult:
        """Parse output captured from :meth:`primary_commands`."""

    # Resource hints ------------------------------------------------------

    @abstractmethod
    def get_resource_multiplier(self) -> float:
        """Return the memory weight of one worker relative to the base budget."""

    @abstractmethod
    def get_parallel_execution_strategy(self, cpu_cores: int) -> ParallelStrategy:
        """Return the static worker hint for a machine with ``cpu_cores`` cores."""

    # File patterns -------------------------------------------------------

    def get_source_file_patterns(self) -> list[str]:
        return []

    def get_test_file_patterns(self) -> list[str]:
        return []

    def get_skip_patterns(self) -> list[str]:
        return []

    def get_focus_patterns(self) -> list[str]:
        return []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(excluded_warnings={sorted(self.excluded_warnings)!r})"


class BuildAdapter(FrameworkAdapter[ConfigT]):
    """Adapter driving a compile or bundle step."""

    kind: ClassVar[AdapterKind] = "build"

    @abstractmethod
    def get_build_command(self, config: ConfigT) -> list[str]:
        """Return the build command lines, run in order.

        Raises:
            BuildTargetNotFoundError: If no build target can be located.
        """

    def get_final_build_command(self, config: ConfigT) -> list[str]:
        """Return the build command lines for the final pass."""

        return self.get_build_command(config)

    @abstractmethod
    def build_rules(self) -> Sequence[LineRule]:
        """Return the line rules understanding build output."""

    def parse_build_output(self, text: str) -> ParseResult:
        """Parse build output, routing allow-listed warnings aside."""

        return parse_lines(text, self.build_rules(), policy=self._policy)

    def primary_commands(self, config: ConfigT) -> list[str]:
        return self.get_build_command(config)

    def final_commands(self, config: ConfigT) -> list[str]:
        return self.get_final_build_command(config)

    def parse_primary_output(self, text: str) -> ParseResult:
        return self.parse_build_output(text)


class SuiteAdapter(FrameworkAdapter[ConfigT]):
    """Adapter driving a test runner."""

    kind: ClassVar[AdapterKind] = "test"

    @abstractmethod
    def get_test_command(self, config: ConfigT) -> str:
        """Return the test runner command line."""

    @abstractmethod
    def test_rules(self) -> Sequence[LineRule]:
        """Return the line rules understanding test reporter output."""

    def parse_test_output(self, text: str) -> ParseResult:
        """Parse test runner output into failures."""

        return parse_lines(text, self.test_rules(), policy=self._policy)

    def primary_commands(self, config: ConfigT) -> list[str]:
        return [self.get_test_command(config)]

    def parse_primary_output(self, text: str) -> ParseResult:
        return self.parse_test_output(text)


__all__ = [
    "AdapterKind",
    "BuildAdapter",
    "FrameworkAdapter",
    "SuiteAdapter",
]
