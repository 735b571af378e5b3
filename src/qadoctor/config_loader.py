# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Config loading with layered precedence and traceability.

Sources are applied in increasing precedence: built-in defaults,
``~/.qadoctor.toml``, ``[tool.qadoctor]`` in ``pyproject.toml`` and finally
``<root>/.qadoctor.toml``.
"""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, Final, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import DoctorConfig
from .errors import ConfigError

CONFIG_FILE_NAME: Final[str] = ".qadoctor.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "qadoctor"
DEFAULT_INCLUDE_KEY: Final[str] = "include"

_ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$(\w+)|\$\{([^}]+)\}")


class ConfigSource(Protocol):
    """Producer of one configuration fragment."""

    name: str

    def load(self) -> Mapping[str, Any]:
        """Return the raw fragment; an empty mapping when the source is absent."""
        ...

    def describe(self) -> str:
        """Return a human-readable description of the source."""
        ...


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _expand_env_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):

        def _replace(match: re.Match[str]) -> str:
            key = match.group(1) or match.group(2)
            return env.get(key, match.group(0))

        return _ENV_VAR_PATTERN.sub(_replace, value)
    if isinstance(value, Mapping):
        return {key: _expand_env_value(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env_value(item, env) for item in value]
    return value


class DefaultConfigSource:
    """Return the built-in defaults as a configuration fragment."""

    name = "defaults"

    def load(self) -> Mapping[str, Any]:
        return DoctorConfig().to_dict()

    def describe(self) -> str:
        return "Built-in defaults"


class TomlConfigSource:
    """Load configuration data from a TOML document with include support."""

    def __init__(
        self,
        path: Path,
        *,
        name: str | None = None,
        include_key: str = DEFAULT_INCLUDE_KEY,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._root_path = path
        self.name = name or str(path)
        self._include_key = include_key
        self._env = env if env is not None else os.environ

    def load(self) -> Mapping[str, Any]:
        return self._load(self._root_path, ())

    def _load(self, path: Path, stack: tuple[Path, ...]) -> dict[str, Any]:
        if not path.is_file():
            return {}
        resolved = path.resolve()
        if resolved in stack:
            chain = " -> ".join(str(entry) for entry in (*stack, resolved))
            raise ConfigError(f"Circular include detected: {chain}")
        try:
            with resolved.open("rb") as handle:
                document = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"Unable to read {path}: {exc}") from exc
        includes = document.pop(self._include_key, None)
        merged: dict[str, Any] = {}
        for include_path in self._coerce_includes(includes, resolved.parent):
            merged = _deep_merge(merged, self._load(include_path, (*stack, resolved)))
        merged = _deep_merge(merged, document)
        return _expand_env_value(merged, self._env)

    def _coerce_includes(self, raw: Any, base_dir: Path) -> Iterable[Path]:
        if raw is None:
            return []
        if isinstance(raw, str):
            return [self._resolve_path(Path(raw), base_dir)]
        if isinstance(raw, list):
            return [self._resolve_path(Path(str(item)), base_dir) for item in raw]
        raise ConfigError(f"Unsupported include declaration: {raw!r}")

    @staticmethod
    def _resolve_path(path: Path, base_dir: Path) -> Path:
        return path if path.is_absolute() else base_dir / path

    def describe(self) -> str:
        return f"TOML configuration at {self.name}"


class PyProjectConfigSource(TomlConfigSource):
    """Read configuration from ``[tool.qadoctor]`` within ``pyproject.toml``."""

    def __init__(self, path: Path) -> None:
        super().__init__(path, name=str(path))

    def load(self) -> Mapping[str, Any]:
        data = super().load()
        tool_section = data.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if not isinstance(section, Mapping):
            return {}
        return dict(section)

    def describe(self) -> str:
        return f"pyproject.toml ({self.name})"


class FieldUpdate(BaseModel):
    """Description of a single configuration field mutation."""

    model_config = ConfigDict(validate_assignment=True)

    section: str
    field: str
    source: str
    value: Any


class ConfigLoadResult(BaseModel):
    """Container bundling a resolved config with provenance metadata."""

    model_config = ConfigDict(validate_assignment=True)

    config: DoctorConfig
    updates: list[FieldUpdate] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ConfigLoader:
    """Apply layered configuration sources with predictable precedence."""

    def __init__(self, *, project_root: Path, sources: Sequence[ConfigSource]) -> None:
        if not sources:
            raise ValueError("at least one configuration source is required")
        self._sources = list(sources)
        self._project_root = project_root.resolve()

    @property
    def project_root(self) -> Path:
        return self._project_root

    @property
    def sources(self) -> tuple[ConfigSource, ...]:
        return tuple(self._sources)

    @classmethod
    def for_root(
        cls,
        project_root: Path,
        *,
        user_config: Path | None = None,
        project_config: Path | None = None,
    ) -> ConfigLoader:
        """Build a loader that respects user, project and default sources.

        Args:
            project_root: Workspace root used to discover configuration files.
            user_config: Optional path to a user-level override.
            project_config: Optional project-level override path.

        Returns:
            ConfigLoader: Loader configured with default precedence ordering.
        """

        root = project_root.resolve()
        home_config = user_config if user_config is not None else Path.home() / CONFIG_FILE_NAME
        project_file = project_config if project_config is not None else root / CONFIG_FILE_NAME
        sources: list[ConfigSource] = [
            DefaultConfigSource(),
            TomlConfigSource(home_config, name=str(home_config)),
        ]
        pyproject = root / "pyproject.toml"
        if pyproject.is_file():
            sources.append(PyProjectConfigSource(pyproject))
        sources.append(TomlConfigSource(project_file, name=str(project_file)))
        return cls(project_root=root, sources=sources)

    def load(self, *, strict: bool = False) -> DoctorConfig:
        """Return the resolved configuration without provenance metadata."""

        return self.load_with_trace(strict=strict).config

    def load_with_trace(self, *, strict: bool = False) -> ConfigLoadResult:
        """Return the resolved configuration with trace metadata.

        Args:
            strict: When ``True`` unknown sections or keys raise instead of
                being reported as warnings.

        Returns:
            ConfigLoadResult: Resolved configuration and provenance details.

        Raises:
            ConfigError: If a source is malformed or a value fails validation.
        """

        merged: dict[str, Any] = {}
        updates: list[FieldUpdate] = []
        warnings: list[str] = []
        for source in self._sources:
            if not (fragment := source.load()):
                continue
            known = self._known_fragment(fragment, source.name, warnings)
            if source.name != DefaultConfigSource.name:
                updates.extend(
                    FieldUpdate(section=section, field=field, source=source.name, value=value)
                    for section, values in known.items()
                    for field, value in values.items()
                )
            merged = _deep_merge(merged, known)
        if strict and warnings:
            raise ConfigError("; ".join(warnings))
        try:
            config = DoctorConfig.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc
        return ConfigLoadResult(config=config, updates=updates, warnings=warnings)

    @staticmethod
    def _known_fragment(fragment: Mapping[str, Any], source: str, warnings: list[str]) -> dict[str, dict[str, Any]]:
        known: dict[str, dict[str, Any]] = {}
        for section, values in fragment.items():
            model = DoctorConfig.model_fields.get(section)
            if model is None:
                warnings.append(f"{source}: unknown section '{section}'")
                continue
            if not isinstance(values, Mapping):
                raise ConfigError(f"{source}: section '{section}' must be a table")
            section_type = model.annotation
            allowed = set(section_type.model_fields) if isinstance(section_type, type) else set()
            kept: dict[str, Any] = {}
            for field, value in values.items():
                if field not in allowed:
                    warnings.append(f"{source}: unknown key '{section}.{field}'")
                    continue
                kept[field] = value
            known[section] = kept
        return known


def load_config(project_root: Path) -> DoctorConfig:
    """Load configuration for ``project_root`` using the default tiered sources."""

    return ConfigLoader.for_root(project_root).load()


__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigLoadResult",
    "ConfigLoader",
    "ConfigSource",
    "DefaultConfigSource",
    "FieldUpdate",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "load_config",
]
