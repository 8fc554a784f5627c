"""Exceptions raised while parsing a Makefile and running its targets."""

from pathlib import Path
from typing import List, Optional


class MakeError(Exception):
    """Base class for every fatal makeshift error."""


class MakefileParseError(MakeError):
    """
    Exception raised when a Makefile line has none of the expected shapes.

    Attributes:
        message: Error description
        line: The offending (preprocessed) line
        makefile: Path to the Makefile being parsed
    """

    def __init__(
        self,
        message: str,
        line: Optional[str] = None,
        makefile: Optional[Path] = None,
    ):
        self.message = message
        self.line = line
        self.makefile = makefile

        parts = [message]

        if makefile:
            parts.append(f"Makefile: {makefile}")

        if line is not None:
            # Truncate snippet if too long
            snippet = line[:200] + "..." if len(line) > 200 else line
            parts.append(f"Line: {snippet!r}")

        super().__init__("\n".join(parts))


class MakefileNotFoundError(MakeError, FileNotFoundError):
    """Raised when the Makefile or one of its includes does not exist."""

    def __init__(self, path: Path, included_from: Optional[Path] = None):
        self.path = path
        self.included_from = included_from

        message = f"Makefile not found: {path}"
        if included_from:
            message += f" (included from {included_from})"
        super().__init__(message)


class OverrideSyntaxError(MakeError, ValueError):
    """Raised when a caller-supplied override is not of the form name=value."""

    def __init__(self, override: str):
        self.override = override
        super().__init__(f"Invalid variable override {override!r}: expected name=value")


class ReservedVariableError(MakeError):
    """Raised when a Makefile or override assigns a reserved variable name."""

    def __init__(self, name: str, line: Optional[str] = None):
        self.name = name
        self.line = line

        message = f"Variable name {name!r} is reserved and cannot be redefined"
        if line:
            message += f"\nLine: {line!r}"
        super().__init__(message)


class ShellSubstitutionError(MakeError):
    """
    Raised when a $(...) command substitution in an immediate variable fails.

    Attributes:
        command: The shell command inside $(...)
        variable: Name of the variable being defined
        detail: Error detail reported by the runner
    """

    def __init__(self, command: str, variable: str, detail: Optional[str] = None):
        self.command = command
        self.variable = variable
        self.detail = detail

        message = f"Command substitution $({command}) failed while defining {variable!r}"
        if detail:
            message += f"\nDetail: {detail}"
        super().__init__(message)


class UnknownTargetError(MakeError):
    """Raised when the requested target is not defined in the Makefile."""

    def __init__(self, target: str, available: Optional[List[str]] = None):
        self.target = target
        self.available = available or []

        message = f"No rule to make target {target!r}"
        if self.available:
            message += f". Available targets: {', '.join(self.available)}"
        super().__init__(message)


class MissingDependencyError(MakeError):
    """Raised when a file without a rule to produce it does not exist."""

    def __init__(self, target: str, needed_by: Optional[str] = None):
        self.target = target
        self.needed_by = needed_by

        message = f"No rule to make target {target!r}"
        if needed_by:
            message += f", needed by {needed_by!r}"
        super().__init__(message)


class DependencyCycleError(MakeError):
    """Raised when the dependency graph contains a cycle."""

    def __init__(self, cycle: List[str]):
        self.cycle = cycle
        super().__init__(f"Circular dependency detected: {' -> '.join(cycle)}")


class CommandFailedError(MakeError):
    """
    Raised when a target command fails under the 'stop' error action.

    Attributes:
        target: Target whose command failed
        command: The substituted command line
        returncode: Exit status reported by the runner (None if it never started)
        detail: Error detail reported by the runner
    """

    def __init__(
        self,
        target: str,
        command: str,
        returncode: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        self.target = target
        self.command = command
        self.returncode = returncode
        self.detail = detail

        parts = [f"Command for target {target!r} failed"]
        if returncode is not None:
            parts[0] += f" (exit status {returncode})"
        parts.append(f"Command: {command}")
        if detail:
            parts.append(f"Detail: {detail}")

        super().__init__("\n".join(parts))
