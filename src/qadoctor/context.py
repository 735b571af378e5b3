# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Read-only project views handed to adapters during framework detection."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from fnmatch import fnmatchcase
from functools import cached_property
from pathlib import Path, PurePosixPath
from typing import Final

LOGGER = logging.getLogger(__name__)

PACKAGE_JSON: Final[str] = "package.json"

# Directories whose contents never influence detection.
GLOB_EXCLUDE_DIRS: Final[frozenset[str]] = frozenset({"node_modules", "bin", "obj", "dist", "build"})


def _globstar_variants(pattern: str) -> set[str]:
    """Return ``pattern`` with every ``**/`` segment optionally collapsed."""

    variants = {pattern}
    pending = [pattern]
    while pending:
        current = pending.pop()
        index = current.find("**/")
        while index != -1:
            collapsed = current[:index] + current[index + 3 :]
            if collapsed not in variants:
                variants.add(collapsed)
                pending.append(collapsed)
            index = current.find("**/", index + 3)
    return variants


def glob_match(relative_path: str, pattern: str) -> bool:
    """Return ``True`` when ``relative_path`` satisfies the glob ``pattern``.

    ``**/`` matches zero or more directories; ``*`` may cross separators as in
    :func:`fnmatch.fnmatchcase`.
    """

    return any(fnmatchcase(relative_path, variant) for variant in _globstar_variants(pattern))


def _is_excluded(relative_path: str) -> bool:
    return any(part in GLOB_EXCLUDE_DIRS for part in PurePosixPath(relative_path).parts[:-1])


class DetectionContext(ABC):
    """Immutable view of a candidate project root.

    Adapters only ever see a project through this interface, which keeps
    ``can_detect`` and ``detect_config`` free of direct filesystem access.
    """

    def __init__(self, project_root: Path) -> None:
        self._project_root = project_root

    @classmethod
    def for_root(cls, project_root: Path) -> DetectionContext:
        """Return the filesystem-backed context for ``project_root``."""

        return context_for_root(project_root)

    @classmethod
    def from_files(cls, project_root: Path | str, files: Mapping[str, str]) -> DetectionContext:
        """Return an in-memory context over ``files`` keyed by relative path."""

        return context_from_files(project_root, files)

    @property
    def project_root(self) -> Path:
        """Return the absolute root directory being inspected."""

        return self._project_root

    @abstractmethod
    def file_exists(self, relative_path: str) -> bool:
        """Return ``True`` when ``relative_path`` exists below the root."""

    @abstractmethod
    def read_file(self, relative_path: str) -> str:
        """Return the text of ``relative_path``.

        Raises:
            OSError: If the file cannot be read.
        """

    @abstractmethod
    def _iter_files(self) -> Iterator[str]:
        """Yield every candidate file as a POSIX path relative to the root."""

    def glob(self, pattern: str) -> list[str]:
        """Return sorted relative paths matching ``pattern``.

        Files below build output and dependency directories are never returned.
        """

        return sorted(path for path in self._iter_files() if not _is_excluded(path) and glob_match(path, pattern))

    def try_read(self, relative_path: str) -> str | None:
        """Return file text or ``None`` when the file is missing or unreadable."""

        if not self.file_exists(relative_path):
            return None
        try:
            return self.read_file(relative_path)
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.debug("unable to read %s under %s: %s", relative_path, self.project_root, exc)
            return None

    @cached_property
    def package_json(self) -> str | None:
        """Return the raw ``package.json`` text, if present."""

        return self.try_read(PACKAGE_JSON)


class FilesystemContext(DetectionContext):
    """Detection context backed by the real filesystem."""

    def file_exists(self, relative_path: str) -> bool:
        return (self.project_root / relative_path).exists()

    def read_file(self, relative_path: str) -> str:
        return (self.project_root / relative_path).read_text(encoding="utf-8")

    def _iter_files(self) -> Iterator[str]:
        root = self.project_root

        def _on_error(exc: OSError) -> None:
            LOGGER.debug("skipping unreadable directory: %s", exc)

        for current, dirnames, filenames in os.walk(root, onerror=_on_error):
            dirnames[:] = sorted(name for name in dirnames if name not in GLOB_EXCLUDE_DIRS)
            base = Path(current).relative_to(root)
            for filename in filenames:
                yield (base / filename).as_posix()


class MemoryContext(DetectionContext):
    """Detection context over an in-memory mapping of relative paths to text."""

    def __init__(self, project_root: Path, files: Mapping[str, str]) -> None:
        super().__init__(project_root)
        self._files = {PurePosixPath(path).as_posix(): text for path, text in files.items()}

    def file_exists(self, relative_path: str) -> bool:
        key = PurePosixPath(relative_path).as_posix()
        if key in self._files:
            return True
        prefix = f"{key.rstrip('/')}/"
        return any(path.startswith(prefix) for path in self._files)

    def read_file(self, relative_path: str) -> str:
        key = PurePosixPath(relative_path).as_posix()
        try:
            return self._files[key]
        except KeyError as exc:
            raise FileNotFoundError(key) from exc

    def _iter_files(self) -> Iterator[str]:
        yield from self._files


def context_for_root(project_root: Path) -> FilesystemContext:
    """Return a filesystem context for ``project_root`` resolved to an absolute path."""

    return FilesystemContext(project_root.resolve())


def context_from_files(project_root: Path | str, files: Mapping[str, str] | Iterable[tuple[str, str]]) -> MemoryContext:
    """Return an in-memory context, primarily for tests and dry runs."""

    mapping = dict(files.items()) if isinstance(files, Mapping) else dict(files)
    return MemoryContext(Path(project_root), mapping)


__all__ = [
    "GLOB_EXCLUDE_DIRS",
    "DetectionContext",
    "FilesystemContext",
    "MemoryContext",
    "context_for_root",
    "context_from_files",
    "glob_match",
]
