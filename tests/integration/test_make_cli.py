"""
Integration tests for the make.py command-line script.

Tests: typer CLI -> config -> parse/plan/run -> rendered output and exit codes.
"""

import importlib.util
from pathlib import Path

import pytest
from loguru import logger
from typer.testing import CliRunner

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "make.py"

runner = CliRunner()


@pytest.fixture(scope="module")
def make_cli():
    """Load scripts/make.py as a module (scripts/ is not a package)."""
    module_spec = importlib.util.spec_from_file_location("make_cli", SCRIPT_PATH)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


@pytest.fixture(autouse=True)
def isolated_cli(make_config):
    """Default config for every invocation; drop the console sink bound to the captured stream."""
    yield
    logger.remove()


def _invoke(make_cli, directory: Path, *args: str):
    return runner.invoke(make_cli.app, ["-C", str(directory), *args])


@pytest.mark.integration
def test_runs_default_target(make_cli, tmp_path, write_makefile):
    write_makefile("out.txt:\n\techo hi > out.txt\n")

    result = _invoke(make_cli, tmp_path)

    assert result.exit_code == 0
    assert "echo hi > out.txt" in result.output
    assert (tmp_path / "out.txt").read_text() == "hi\n"


@pytest.mark.integration
def test_dry_run_shows_plan_without_running(make_cli, tmp_path, write_makefile):
    (tmp_path / "in.txt").write_text("x\n")
    write_makefile("out.txt: in.txt\n\tcp $< $@\n")

    result = _invoke(make_cli, tmp_path, "-n")

    assert result.exit_code == 0
    assert "Plan for: out.txt" in result.output
    assert "cp in.txt out.txt" in result.output
    assert "target file missing" in result.output
    assert not (tmp_path / "out.txt").exists()


@pytest.mark.integration
def test_help_targets_runs_command_substitutions(make_cli, tmp_path, write_makefile):
    write_makefile(
        "NOW := $(echo today)\n"
        "\n"
        ".PHONY: all\n"
        "\n"
        "all: ## Build as of ${NOW}\n"
        "\techo ${NOW}\n"
    )

    result = _invoke(make_cli, tmp_path, "--help-targets")

    assert result.exit_code == 0
    assert "Build as of today" in result.output
    assert "yes" in result.output


@pytest.mark.integration
def test_var_and_param_options(make_cli, tmp_path, write_makefile):
    write_makefile("NAME := file\n\nall:\n\techo ${NAME} ${PARAM1} > result.txt\n")

    result = _invoke(make_cli, tmp_path, "-v", "NAME=cli", "-p", "extra")

    assert result.exit_code == 0
    assert (tmp_path / "result.txt").read_text() == "cli extra\n"


@pytest.mark.integration
def test_command_failure_exits_1(make_cli, tmp_path, write_makefile):
    write_makefile("all:\n\texit 3\n")

    result = _invoke(make_cli, tmp_path)

    assert result.exit_code == 1
    assert "exit 3" in result.output


@pytest.mark.integration
def test_failures_under_continue_exit_1(make_cli, tmp_path, write_makefile):
    write_makefile("all: bad good\n\nbad:\n\tfalse\n\ngood:\n\ttouch good\n")

    result = _invoke(make_cli, tmp_path, "-e", "continue")

    assert result.exit_code == 1
    assert "1 target(s) failed" in result.output
    assert (tmp_path / "good").exists()


@pytest.mark.integration
def test_unknown_target_exits_2(make_cli, tmp_path, write_makefile):
    write_makefile("all:\n\techo hi\n")

    result = _invoke(make_cli, tmp_path, "nope")

    assert result.exit_code == 2
    assert "nope" in result.output


@pytest.mark.integration
def test_malformed_override_exits_2(make_cli, tmp_path, write_makefile):
    write_makefile("all:\n\techo hi\n")

    result = _invoke(make_cli, tmp_path, "-v", "NOEQUALS")

    assert result.exit_code == 2


@pytest.mark.integration
def test_invalid_error_action_exits_2(make_cli, tmp_path, write_makefile):
    write_makefile("all:\n\techo hi\n")

    result = _invoke(make_cli, tmp_path, "-e", "explode")

    assert result.exit_code == 2
    assert "error_action" in result.output
