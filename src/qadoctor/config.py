# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for qadoctor."""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ConfigError, MemoryReserveError
from .resources import DEFAULT_MEM_PER_WORKER_GB, DEFAULT_MEM_RESERVE, parse_mem_reserve
from .severity import DEFAULT_DOTNET_EXCLUSIONS, DEFAULT_SECURITY_PREFIXES, is_security_code

BUILD_OUTPUT_NAME: Final[str] = "build-output.txt"
VALIDATE_OUTPUT_NAME: Final[str] = "validate-output.txt"
# Any total works for a syntax check of the reserve expression.
_PROBE_TOTAL_GB: Final[float] = 100.0


class ExclusionSettings(BaseModel):
    """Warning codes reported without blocking a run."""

    model_config = ConfigDict(validate_assignment=True)

    dotnet_excluded_warnings: list[str] = Field(default_factory=lambda: list(DEFAULT_DOTNET_EXCLUSIONS))
    typescript_excluded_warnings: list[str] = Field(default_factory=list)
    security_prefixes: list[str] = Field(default_factory=lambda: list(DEFAULT_SECURITY_PREFIXES))


class ResourceSettings(BaseModel):
    """Memory budget used when sizing the worker pool."""

    model_config = ConfigDict(validate_assignment=True)

    mem_per_worker_gb: float = Field(default=DEFAULT_MEM_PER_WORKER_GB, gt=0)
    mem_reserve: str = DEFAULT_MEM_RESERVE

    @field_validator("mem_reserve", mode="before")
    @classmethod
    def _check_reserve(cls, value: Any) -> str:
        text = str(value).strip()
        try:
            parse_mem_reserve(text, _PROBE_TOTAL_GB)
        except MemoryReserveError as exc:
            raise ValueError(str(exc)) from exc
        return text

    def reserve_gb(self, total_mem_gb: float) -> float:
        """Return the configured reserve in gigabytes for ``total_mem_gb``."""

        return parse_mem_reserve(self.mem_reserve, total_mem_gb)


class DetectionSettings(BaseModel):
    """Directory walk limits for project detection."""

    model_config = ConfigDict(validate_assignment=True)

    max_depth: int = Field(default=2, ge=0)
    walk_up: bool = False


class OutputSettings(BaseModel):
    """Console rendering and scratch file names."""

    model_config = ConfigDict(validate_assignment=True)

    color: bool = True
    emoji: bool = True
    build_output_name: str = BUILD_OUTPUT_NAME
    validate_output_name: str = VALIDATE_OUTPUT_NAME


class ExecutionSettings(BaseModel):
    """Subprocess limits applied to every toolchain command."""

    model_config = ConfigDict(validate_assignment=True)

    timeout_seconds: float | None = Field(default=None, gt=0)


class DoctorConfig(BaseModel):
    """Top-level configuration assembled by :class:`qadoctor.config_loader.ConfigLoader`."""

    model_config = ConfigDict(validate_assignment=True)

    exclusions: ExclusionSettings = Field(default_factory=ExclusionSettings)
    resources: ResourceSettings = Field(default_factory=ResourceSettings)
    detection: DetectionSettings = Field(default_factory=DetectionSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)

    def to_dict(self) -> dict[str, Any]:
        """Return a plain mapping suitable for merging and display."""

        return self.model_dump(mode="python")

    def is_security_code(self, rule: str | None) -> bool:
        """Return ``True`` when ``rule`` belongs to the advisory namespace."""

        return is_security_code(rule, self.exclusions.security_prefixes)


__all__ = [
    "BUILD_OUTPUT_NAME",
    "ConfigError",
    "DetectionSettings",
    "DoctorConfig",
    "ExclusionSettings",
    "ExecutionSettings",
    "OutputSettings",
    "ResourceSettings",
    "VALIDATE_OUTPUT_NAME",
]
