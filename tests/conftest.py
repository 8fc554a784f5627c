"""Shared fixtures: a recording command runner and a Makefile writer."""

from pathlib import Path

import pytest

from makeshift.contexts.execution.runner import CommandResult
from makeshift.utils.config import MakeConfig


class RecordingRunner:
    """Runner substitute that records commands instead of running them."""

    def __init__(self, failing=(), outputs=None):
        self.commands = []
        self.captured = []
        self.failing = set(failing)
        self.outputs = dict(outputs or {})

    def run(self, command, cwd, silent=False):
        self.commands.append(command)
        if command in self.failing:
            return CommandResult(success=False, returncode=1, error="exited with status 1")
        return CommandResult(success=True, returncode=0)

    def capture(self, command, cwd):
        self.captured.append(command)
        if command in self.outputs:
            return CommandResult(success=True, returncode=0, output=self.outputs[command])
        return CommandResult(success=False, returncode=127, error="command not found")


@pytest.fixture
def recording_runner():
    return RecordingRunner()


@pytest.fixture
def make_config(monkeypatch):
    """Default config, isolated from MAKESHIFT_* environment variables."""
    monkeypatch.delenv("MAKESHIFT_CONFIG_PATH", raising=False)
    monkeypatch.delenv("MAKESHIFT_LOGS_PATH", raising=False)
    return MakeConfig()


@pytest.fixture
def write_makefile(tmp_path):
    """Write text to tmp_path/<name> and return the path."""

    def _write(text: str, name: str = "Makefile") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def runner_factory():
    """Build RecordingRunners with failing commands or canned outputs."""
    return RecordingRunner
