"""
Command Executor

Substitutes automatic variables into a target's command lines and runs them
one at a time through a CommandRunner.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from makeshift.contexts.execution.logger import _log_debug, _log_warning
from makeshift.contexts.execution.runner import CommandRunner
from makeshift.contexts.parsing.makefile_patterns import (
    AutomaticVariables,
    substitute_makefile_dir,
)
from makeshift.exceptions import CommandFailedError

SILENT_PREFIX = "@"
# '@{...}' and '@(...)' are expressions, not the silent marker
EXPRESSION_PREFIXES = ("@{", "@(")


@dataclass(frozen=True)
class Command:
    """
    A command line ready to run.

    Attributes:
        raw: Command line as written in the rule
        text: Literal text to execute (automatic variables substituted, '@' removed)
        silent: Whether the line is run without being echoed
    """

    raw: str
    text: str
    silent: bool = False


def substitute_automatic_variables(
    command: str,
    target: str,
    dependencies: Sequence[str],
    makefile_dir: str,
    delimiter: str = " ",
) -> str:
    """
    Replace $@, $<, $^ and the Makefile-directory variable in a command line.

    $@ is the first file of the target name, $< the first dependency, $^ all
    dependencies joined with delimiter.

    Examples:
        >>> substitute_automatic_variables("cat $< > $@", "out.txt", ["in.txt"], "/src")
        'cat in.txt > out.txt'
    """
    first_target = target.split()[0] if target.split() else target
    first_dependency = dependencies[0] if dependencies else ""

    text = substitute_makefile_dir(command, makefile_dir)
    text = text.replace(AutomaticVariables.TARGET, first_target)
    text = text.replace(AutomaticVariables.FIRST_DEPENDENCY, first_dependency)
    text = text.replace(AutomaticVariables.ALL_DEPENDENCIES, delimiter.join(dependencies))
    return text


def prepare_command(
    raw: str,
    target: str,
    dependencies: Sequence[str],
    makefile_dir: str,
    delimiter: str = " ",
) -> Command:
    """Build the Command for one raw command line of target."""
    text = substitute_automatic_variables(raw, target, dependencies, makefile_dir, delimiter)

    silent = text.startswith(SILENT_PREFIX) and not text.startswith(EXPRESSION_PREFIXES)
    if silent:
        text = text[len(SILENT_PREFIX) :]

    return Command(raw=raw, text=text, silent=silent)


@dataclass
class CommandExecutor:
    """
    Runs target commands and applies the error action.

    Attributes:
        runner: Command runner used for every line
        error_action: "stop" raises on the first failure, "continue" warns and
            skips the rest of the failing target
        echo: Called with each non-silent command before it runs
        executed: Every command text run so far, in order
        failures: One message per failed target
    """

    runner: CommandRunner
    error_action: str = "stop"
    echo: Callable[[str], None] = print
    executed: List[str] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    def run_target(self, target: str, commands: Sequence[Command], cwd: Optional[Path] = None) -> bool:
        """
        Run a target's commands in order.

        Returns:
            True if every command succeeded, False if one failed under "continue"

        Raises:
            CommandFailedError: If a command fails under "stop"
        """
        cwd = cwd if cwd is not None else Path.cwd()

        for command in commands:
            if not command.silent:
                self.echo(command.text)
            _log_debug(f"{target}: running {command.text!r}")

            self.executed.append(command.text)
            result = self.runner.run(command.text, cwd=cwd, silent=command.silent)
            if result.success:
                continue

            if self.error_action == "stop":
                raise CommandFailedError(target, command.text, result.returncode, result.error)

            message = f"{target}: {command.text!r} failed ({result.error or 'unknown error'})"
            _log_warning(f"{message}; continuing with next target")
            self.failures.append(message)
            return False

        return True
