"""
Command Runner

The narrow capability through which makeshift executes command text. The
scheduler only sees CommandRunner, so tests can substitute a recording runner
for the real shell.
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol


@dataclass
class CommandResult:
    """
    Outcome of one command.

    Attributes:
        success: Whether the command exited with status 0
        returncode: Exit status (None if the command could not be started)
        output: Captured stdout (capture() only)
        error: Error detail on failure
    """

    success: bool
    returncode: Optional[int] = None
    output: str = ""
    error: Optional[str] = None


class CommandRunner(Protocol):
    """Anything that can run command text in a directory."""

    def run(self, command: str, cwd: Path, silent: bool = False) -> CommandResult:
        """Run command, letting its output go to the console."""
        ...

    def capture(self, command: str, cwd: Path) -> CommandResult:
        """Run command and return its stdout in CommandResult.output."""
        ...


class ShellRunner:
    """Runs commands through a POSIX shell with subprocess."""

    def __init__(self, shell: str = "/bin/sh"):
        self.shell = shell

    def run(self, command: str, cwd: Path, silent: bool = False) -> CommandResult:
        # silent only affects echoing, which the executor handles
        try:
            completed = subprocess.run(command, shell=True, executable=self.shell, cwd=cwd)
        except OSError as e:
            return CommandResult(success=False, error=str(e))

        if completed.returncode != 0:
            return CommandResult(
                success=False,
                returncode=completed.returncode,
                error=f"exited with status {completed.returncode}",
            )
        return CommandResult(success=True, returncode=0)

    def capture(self, command: str, cwd: Path) -> CommandResult:
        try:
            completed = subprocess.run(
                command,
                shell=True,
                executable=self.shell,
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",  # Replace invalid UTF-8 bytes instead of crashing
            )
        except OSError as e:
            return CommandResult(success=False, error=str(e))

        if completed.returncode != 0:
            return CommandResult(
                success=False,
                returncode=completed.returncode,
                output=completed.stdout,
                error=completed.stderr.strip() or f"exited with status {completed.returncode}",
            )
        return CommandResult(success=True, returncode=0, output=completed.stdout)
