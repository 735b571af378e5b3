# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Single-file verification after a fix attempt."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .adapters.base import FrameworkAdapter, SuiteAdapter
from .execution import Runner
from .frameworks import FrameworkConfig
from .models import Issue


class VerificationResult(BaseModel):
    """Whether one file is clean after a fix attempt.

    ``deferred_verification`` marks files the framework cannot check in
    isolation. They count as fixed until the next whole-project pass says
    otherwise.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    file: str
    fixed: bool
    error_count: int = 0
    errors: list[Issue] = Field(default_factory=list)
    deferred_verification: bool = False

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def _target_config(adapter: FrameworkAdapter[Any], config: FrameworkConfig, file: str) -> FrameworkConfig:
    if isinstance(adapter, SuiteAdapter):
        return config.with_target(test_file=file)
    return config.with_target(file=file)


def verify_file(
    file: str,
    adapter: FrameworkAdapter[Any],
    config: FrameworkConfig,
    *,
    runner: Runner,
) -> VerificationResult:
    """Re-check ``file`` with the adapter's validators and verify command.

    Validation issues are kept only when they name ``file``. Issues from the
    verify command are also kept when they carry no file, since a narrowed
    command only reports on the target.

    Raises:
        ToolNotFoundError: If a required toolchain binary is missing.
    """

    verify_command = adapter.get_verify_command(_target_config(adapter, config, file))
    if verify_command is None:
        return VerificationResult(file=file, fixed=True, deferred_verification=True)

    issues: list[Issue] = []
    for command in adapter.get_validation_commands(config):
        result = runner(command.command)
        if result.succeeded:
            continue
        parsed = adapter.parse_validation_output(result.output, command.name)
        issues.extend(parsed.for_file(file).errors)

    result = runner(verify_command)
    if not result.succeeded:
        parsed = adapter.parse_primary_output(result.output)
        issues.extend(parsed.for_file(file).errors)
        issues.extend(issue for issue in parsed.errors if not issue.file)

    return VerificationResult(file=file, fixed=not issues, error_count=len(issues), errors=issues)


__all__ = ["VerificationResult", "verify_file"]
