# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for running validation, build and final passes."""

from __future__ import annotations

import json
import shlex
import sys
from pathlib import Path

import pytest

from qadoctor.adapters import DotNetAdapter, TypeScriptAdapter
from qadoctor.aggregate import split_validation_sections
from qadoctor.context import DetectionContext
from qadoctor.errors import ToolNotFoundError
from qadoctor.execution import CommandRunner, remove_scratch_files, run_build, run_final_validation, run_validation
from qadoctor.process import TIMEOUT_EXIT_CODE

TS_MANIFEST = json.dumps({"devDependencies": {"typescript": "^5", "eslint": "^9", "prettier": "^3"}})
PRETTIER = 'npm exec prettier --check "**/*.{ts,tsx,js,jsx}"'
ESLINT = "npm exec eslint . --max-warnings=0"
TSC = "npm exec tsc --noEmit"
RESTORE = 'dotnet restore "App.sln"'
DEBUG = 'dotnet build "App.sln" --no-restore --configuration Debug'
RELEASE = 'dotnet build "App.sln" --no-restore --configuration Release'


def _typescript():
    adapter = TypeScriptAdapter()
    config = adapter.resolve_config(DetectionContext.from_files("/work/web", {"package.json": TS_MANIFEST}))
    return adapter, config


def _dotnet(root: Path):
    (root / "App.sln").write_text("", encoding="utf-8")
    adapter = DotNetAdapter()
    return adapter, adapter.resolve_config(DetectionContext.for_root(root))


def test_validation_runs_every_gate_and_writes_banners(make_runner) -> None:
    adapter, config = _typescript()
    runner = make_runner(
        {
            PRETTIER: (1, "[warn] src/app.ts\n"),
            TSC: (2, "src/app.ts(3,1): error TS2304: Cannot find name 'x'.\n"),
        }
    )

    report = run_validation(adapter, config, runner)

    assert runner.calls == [PRETTIER, ESLINT, TSC]
    assert [(step.name, step.passed, step.blocking) for step in report.steps] == [
        ("prettier", False, False),
        ("eslint", True, False),
        ("tsc", False, True),
    ]
    assert report.failed
    assert [name for name, _body in split_validation_sections(report.transcript)] == ["prettier", "eslint", "tsc"]
    assert [issue.file for issue in report.parsed.errors] == ["src/app.ts", "src/app.ts"]


def test_optional_failures_do_not_fail_the_pass(make_runner) -> None:
    adapter, config = _typescript()

    report = run_validation(adapter, config, make_runner({PRETTIER: (1, "[warn] src/app.ts\n")}))

    assert not report.failed
    assert len(report.parsed.errors) == 1


def test_build_stops_at_first_failure(tmp_path: Path, make_runner) -> None:
    adapter, config = _dotnet(tmp_path)
    runner = make_runner({RESTORE: (1, "error NU1101: Unable to find package Foo. [App.sln]\n")})

    report = run_build(adapter, config, runner)

    assert runner.calls == [RESTORE]
    assert report.failed
    assert report.parsed.errors == []
    error = report.steps[0].invocation_error()
    assert error is not None
    assert error.returncode == 1
    assert "NU1101" in error.output


def test_final_validation_blocks_on_warnings_and_cleans_up(tmp_path: Path, make_runner) -> None:
    adapter, config = _dotnet(tmp_path)
    for name in ("build-output.txt", "validate-output.txt"):
        (tmp_path / name).write_text("old", encoding="utf-8")
    release_output = (
        "src/App/Service.cs(7,13): warning CS0168: The variable 'e' is declared but never used [App.csproj]\n"
        "App.csproj : warning NU1902: Package 'Foo' 1.0.0 has a known moderate severity vulnerability [App.sln]\n"
    )
    runner = make_runner({RELEASE: (0, release_output)})

    outcome = run_final_validation(
        adapter,
        config,
        runner,
        scratch_files=("build-output.txt", "validate-output.txt", "build-output-final.txt"),
    )

    assert runner.calls == [RESTORE, DEBUG, RELEASE]
    assert outcome.error_count == 1
    assert [warning.rule for warning in outcome.excluded_warnings] == ["NU1902"]
    assert not outcome.passed
    assert sorted(path.name for path in outcome.removed_files) == ["build-output.txt", "validate-output.txt"]
    assert not (tmp_path / "build-output.txt").exists()


def test_final_validation_passes_when_clean(tmp_path: Path, make_runner) -> None:
    adapter, config = _dotnet(tmp_path)

    outcome = run_final_validation(adapter, config, make_runner())

    assert outcome.passed
    assert outcome.error_count == 0
    assert outcome.invocation_errors == []


def test_final_validation_reports_unparseable_failures(tmp_path: Path, make_runner) -> None:
    adapter, config = _dotnet(tmp_path)

    outcome = run_final_validation(adapter, config, make_runner({DEBUG: (137, "Killed\n")}))

    assert not outcome.passed
    assert [error.returncode for error in outcome.invocation_errors] == [137]


def test_remove_scratch_files_ignores_missing(tmp_path: Path) -> None:
    (tmp_path / "a.txt").write_text("", encoding="utf-8")

    assert remove_scratch_files(tmp_path, ["a.txt", "b.txt"]) == [tmp_path / "a.txt"]


def test_command_runner_reports_missing_tools(tmp_path: Path) -> None:
    runner = CommandRunner(tmp_path)

    with pytest.raises(ToolNotFoundError):
        runner("qadoctor-definitely-missing-tool --version")


def _python_command(tmp_path: Path, source: str) -> str:
    (tmp_path / "tool.py").write_text(source, encoding="utf-8")
    return f"{shlex.quote(sys.executable)} tool.py"


def test_command_runner_tolerates_undecodable_output(tmp_path: Path) -> None:
    command = _python_command(
        tmp_path,
        "import sys\n"
        "sys.stdout.buffer.write(b\"src/a.ts(1,2): error TS2304: bad \\xff\\xfe\\n\")\n"
        "sys.exit(2)\n",
    )

    result = CommandRunner(tmp_path)(command)
    parsed = TypeScriptAdapter().parse_build_output(result.output)

    assert result.exit_code == 2
    assert "�" in result.stdout
    assert [(issue.file, issue.line, issue.rule) for issue in parsed.errors] == [("src/a.ts", 1, "TS2304")]


def test_command_runner_reports_timeouts(tmp_path: Path) -> None:
    command = _python_command(tmp_path, "import time\ntime.sleep(10)\n")

    result = CommandRunner(tmp_path, timeout=0.1)(command)

    assert result.exit_code == TIMEOUT_EXIT_CODE
    assert "timed out after 0.1s" in result.stderr
