# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""End-to-end tests for the ``qadoctor`` command line."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from pathlib import Path

import click
import pytest
import typer
from typer.testing import CliRunner

from qadoctor.cli import app
from qadoctor.cli.commands import parallelism
from qadoctor.cli.shared import CLIContext
from qadoctor.resources import ResourceSnapshot

WriteTree = Callable[[Mapping[str, str]], Path]

TS_ERRORS = (
    "src/a.ts(1,1): error TS2304: Cannot find name 'x'.\n"
    "src/b.ts(2,2): error TS2304: Cannot find name 'y'.\n"
    "src/b.ts(3,3): error TS2322: Type 'string' is not assignable to type 'number'.\n"
)


@pytest.fixture
def cli() -> CliRunner:
    return CliRunner()


def _use_runner(monkeypatch: pytest.MonkeyPatch, runner: object) -> None:
    monkeypatch.setattr(CLIContext, "runner", lambda self, cwd: runner)


def test_detect_prints_json_array(cli: CliRunner, write_tree: WriteTree) -> None:
    root = write_tree({"tsconfig.json": "{}", "package.json": '{"devDependencies": {"vitest": "^1"}}'})

    result = cli.invoke(app, ["detect", str(root)])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert [entry["framework"] for entry in payload] == ["typescript"]

    tests = json.loads(cli.invoke(app, ["detect", str(root), "--tests"]).stdout)
    assert [(entry["framework"], entry["testType"]) for entry in tests] == [("vitest", "unit")]


def test_detect_without_project_fails(cli: CliRunner, write_tree: WriteTree) -> None:
    root = write_tree({"README.md": "# nothing here"})

    result = cli.invoke(app, ["detect", str(root)])

    assert result.exit_code == 1
    assert "Could not detect any supported framework" in result.stderr


def test_config_command_traces_overrides(cli: CliRunner, write_tree: WriteTree) -> None:
    root = write_tree({".qadoctor.toml": "[detection]\nmax_depth = 4\n\n[mystery]\nkey = 1\n"})

    result = cli.invoke(app, ["config", str(root), "--trace"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["config"]["detection"]["max_depth"] == 4
    assert payload["updates"][0]["field"] == "max_depth"
    assert len(payload["warnings"]) == 1
    assert cli.invoke(app, ["config", str(root), "--strict"]).exit_code == 1


def test_parse_groups_saved_output(cli: CliRunner, write_tree: WriteTree) -> None:
    root = write_tree({"build-output.txt": TS_ERRORS})

    result = cli.invoke(app, ["parse", str(root), "--format", "json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert [(entry["file"], entry["errorCount"]) for entry in payload] == [("src/b.ts", 2), ("src/a.ts", 1)]
    assert payload[0]["errors"][0]["rule"] == "TS2304"


def test_parse_table_reports_excluded_warnings(cli: CliRunner, write_tree: WriteTree) -> None:
    build = (
        "src/App/Program.cs(3,1): error CS1002: ; expected [App.csproj]\n"
        "App.csproj : warning NU1902: Package 'Foo' has a known vulnerability [App.sln]\n"
    )
    root = write_tree({"build-output.txt": build})

    result = cli.invoke(app, ["parse", str(root), "--framework", "dotnet"])

    assert result.exit_code == 0, result.output
    assert "src/App/Program.cs" in result.stdout
    assert "NU1902" in result.stderr
    assert "SECURITY WARNING" in result.stderr


def test_parse_requires_saved_output(cli: CliRunner, write_tree: WriteTree) -> None:
    root = write_tree({})

    result = cli.invoke(app, ["parse", str(root)])

    assert result.exit_code == 1
    assert "qadoctor run" in result.stderr


def test_parse_rejects_unknown_framework(cli: CliRunner, write_tree: WriteTree) -> None:
    root = write_tree({"build-output.txt": TS_ERRORS})

    assert cli.invoke(app, ["parse", str(root), "--framework", "gradle"]).exit_code == 2


def test_tally_ranks_files_by_impact(cli: CliRunner, write_tree: WriteTree) -> None:
    output = (
        " ❌ src/a.test.ts > adds\n"
        " ❌ src/b.test.ts > subtracts\n"
        " ❌ src/b.test.ts > divides\n"
        "\n========== tsc ==========\n"
        "src/b.test.ts(4,2): error TS2345: Argument of type 'string' is not assignable.\n"
    )
    root = write_tree({"test-output.txt": output})

    result = cli.invoke(app, ["tally", str(root / "test-output.txt"), "--format", "json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == [
        {"file": "src/b.test.ts", "total": 3, "test": 2, "type": 1, "lint": 0},
        {"file": "src/a.test.ts", "total": 1, "test": 1, "type": 0, "lint": 0},
    ]


def test_tally_reads_stdin(cli: CliRunner) -> None:
    result = cli.invoke(app, ["tally", "--format", "json"], input=" ❌ src/a.test.ts > adds\n")

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)[0]["file"] == "src/a.test.ts"


def test_progress_exit_codes(cli: CliRunner, tmp_path: Path) -> None:
    initial = tmp_path / "initial.txt"
    fixed = tmp_path / "fixed.txt"
    initial.write_text("src/a.ts\nsrc/b.ts\n", encoding="utf-8")
    fixed.write_text("src/a.ts\n", encoding="utf-8")

    partial = cli.invoke(app, ["progress", str(initial), str(fixed), "--json"])

    assert partial.exit_code == 1
    assert json.loads(partial.stdout)["remaining"] == ["src/b.ts"]

    fixed.write_text("src/a.ts\nsrc/b.ts\n", encoding="utf-8")
    done = cli.invoke(app, ["progress", str(initial), str(fixed)])
    assert done.exit_code == 0
    assert "All files have been processed" in done.stderr


def test_parallelism_prints_bare_count(cli: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    snapshot = ResourceSnapshot(total_mem_gb=128, available_mem_gb=100, cpu_cores=32, cpu_load=40)
    monkeypatch.setattr(parallelism, "detect_resources", lambda: snapshot)

    result = cli.invoke(app, ["parallelism", "--mem-per-agent", "3", "--mem-reserve", "0"])

    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == "6"
    assert "saturated" in result.stderr

    payload = json.loads(cli.invoke(app, ["parallelism", "--json", "--mem-reserve", "0"]).stdout)
    assert payload["max_parallel"] == 6
    assert payload["load_status"] == "saturated"


def test_parallelism_rejects_bad_inputs(cli: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    snapshot = ResourceSnapshot(total_mem_gb=16, available_mem_gb=8, cpu_cores=4, cpu_load=0)
    monkeypatch.setattr(parallelism, "detect_resources", lambda: snapshot)

    assert cli.invoke(app, ["parallelism", "--mem-per-agent", "0"]).exit_code == 2
    assert cli.invoke(app, ["parallelism", "--mem-reserve", "120%"]).exit_code == 1
    assert cli.invoke(app, ["parallelism", "--framework", "gradle"]).exit_code == 2


def test_skipped_json_report(cli: CliRunner, write_tree: WriteTree) -> None:
    root = write_tree(
        {
            "package.json": '{"devDependencies": {"vitest": "^1"}}',
            "src/a.test.ts": "// needs a real browser, mocking is too brittle\nit.skip('opens modal', () => {})\n",
        }
    )

    result = cli.invoke(app, ["skipped", str(root), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["total"] == 1
    assert payload["categories"][0]["category"] == "Test environment limitations"


def test_skipped_reports_clean_suites(cli: CliRunner, write_tree: WriteTree) -> None:
    root = write_tree({"package.json": '{"devDependencies": {"vitest": "^1"}}'})

    result = cli.invoke(app, ["skipped", str(root)])

    assert result.exit_code == 0, result.output
    assert "No skipped tests found" in result.stderr


def test_verify_defers_dotnet_files(cli: CliRunner, write_tree: WriteTree) -> None:
    root = write_tree({"App.sln": "", "src/App/App.csproj": "<Project/>"})

    result = cli.invoke(app, ["verify", "src/App/Program.cs", str(root), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["deferredVerification"] is True
    assert payload["fixed"] is True


def test_verify_fails_when_file_still_broken(
    cli: CliRunner, write_tree: WriteTree, monkeypatch: pytest.MonkeyPatch, make_runner
) -> None:
    root = write_tree({"tsconfig.json": "{}"})
    _use_runner(monkeypatch, make_runner({"npm exec tsc --noEmit": (2, TS_ERRORS)}))

    result = cli.invoke(app, ["verify", "src/b.ts", str(root)])

    assert result.exit_code == 1
    assert "src/b.ts:2:2" in result.stdout


def test_run_writes_output_files(
    cli: CliRunner, write_tree: WriteTree, monkeypatch: pytest.MonkeyPatch, make_runner
) -> None:
    root = write_tree({"tsconfig.json": "{}"})
    runner = make_runner({"npm run build": (2, TS_ERRORS)})
    _use_runner(monkeypatch, runner)

    result = cli.invoke(app, ["run", str(root)])

    assert result.exit_code == 0, result.output
    assert runner.calls == ["npm exec tsc --noEmit", "npm run build"]
    assert "TS2322" in (root / "build-output.txt").read_text(encoding="utf-8")
    assert (root / "validate-output.txt").read_text(encoding="utf-8").startswith("\n========== tsc ==========")
    assert "Build failed" in result.stderr


def test_final_cleans_up_and_reports_status(
    cli: CliRunner, write_tree: WriteTree, monkeypatch: pytest.MonkeyPatch, make_runner
) -> None:
    root = write_tree({"App.sln": "", "build-output.txt": "old", "validate-output.txt": "old"})
    _use_runner(monkeypatch, make_runner())

    result = cli.invoke(app, ["final", str(root)])

    assert result.exit_code == 0, result.output
    assert not (root / "build-output.txt").exists()
    assert not (root / "validate-output.txt").exists()
    assert "Final validation passed" in result.stderr


def test_final_fails_on_remaining_errors(
    cli: CliRunner, write_tree: WriteTree, monkeypatch: pytest.MonkeyPatch, make_runner
) -> None:
    root = write_tree({"App.sln": ""})
    release = 'dotnet build "App.sln" --no-restore --configuration Release'
    output = "src/App/Service.cs(7,13): warning CS0168: The variable 'e' is declared but never used [App.csproj]\n"
    _use_runner(monkeypatch, make_runner({release: (0, output)}))

    result = cli.invoke(app, ["final", str(root)])

    assert result.exit_code == 1
    assert "Final validation failed (1 errors)" in result.stderr


def test_help_lists_every_command(cli: CliRunner) -> None:
    result = cli.invoke(app, ["--help"])

    assert result.exit_code == 0
    for name in ("config", "detect", "final", "parallelism", "parse", "progress", "run", "skipped", "tally", "verify"):
        assert name in result.stdout


def test_commands_list_arguments_then_sorted_options() -> None:
    group = typer.main.get_command(app)
    verify = group.commands["verify"]
    parallelism_cmd = group.commands["parallelism"]

    assert [param.name for param in verify.get_params(click.Context(verify))] == [
        "file",
        "directory",
        "help",
        "as_json",
        "tests",
    ]
    assert [param.name for param in parallelism_cmd.get_params(click.Context(parallelism_cmd))] == [
        "framework",
        "help",
        "as_json",
        "mem_per_agent",
        "mem_reserve",
    ]


def test_final_honours_configured_exclusions(
    cli: CliRunner, write_tree: WriteTree, monkeypatch: pytest.MonkeyPatch, make_runner
) -> None:
    root = write_tree({"App.sln": "", ".qadoctor.toml": '[exclusions]\ndotnet_excluded_warnings = ["CS0168"]\n'})
    release = 'dotnet build "App.sln" --no-restore --configuration Release'
    output = "src/App/Service.cs(7,13): warning CS0168: The variable 'e' is declared but never used [App.csproj]\n"
    _use_runner(monkeypatch, make_runner({release: (0, output)}))

    result = cli.invoke(app, ["final", str(root)])

    assert result.exit_code == 0, result.output
    assert "CS0168 (1 occurrence) - WARNING" in result.stderr
