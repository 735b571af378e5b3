# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path

import pytest

from qadoctor.execution import CommandResult


class ScriptedRunner:
    """Stand-in command runner answering from a table of canned results.

    Commands missing from the table succeed with empty output. Every call is
    recorded so tests can assert on ordering and short-circuiting.
    """

    def __init__(self, responses: Mapping[str, tuple[int, str]] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[str] = []

    def __call__(self, command: str) -> CommandResult:
        self.calls.append(command)
        exit_code, output = self.responses.get(command, (0, ""))
        return CommandResult(command=command, exit_code=exit_code, stdout=output)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``Path.home`` at an empty directory so user config never leaks in."""

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    return home


@pytest.fixture
def make_runner() -> Callable[..., ScriptedRunner]:
    return ScriptedRunner


@pytest.fixture
def write_tree(tmp_path: Path) -> Callable[[Mapping[str, str]], Path]:
    """Return a helper writing ``{relative path: text}`` below a fresh project root."""

    root = tmp_path / "project"
    root.mkdir()

    def _write(files: Mapping[str, str]) -> Path:
        for relative, text in files.items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        return root

    return _write
