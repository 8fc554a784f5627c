"""
Variable Resolver

Resolves the Variable Block into a VariableTable and substitutes it into the
Command Block.

Two definition forms are supported:
- Immediate (`name := expr`): ${refs} are substituted from the table as it
  stands, then every $(command) is replaced by the command's output.
- Recursive (`name = expr`): ${refs} are substituted once from the table as
  it stands; $(...) is kept as literal text.

Both forms are expanded exactly once, at definition time. Redefining a
variable later never changes values that were already resolved from it.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from makeshift.contexts.parsing.logger import log_variable
from makeshift.contexts.parsing.makefile_patterns import (
    LinePatterns,
    ReservedNames,
    VariablePatterns,
    substitute_makefile_dir,
)
from makeshift.exceptions import MakefileParseError, ReservedVariableError, ShellSubstitutionError


class ExpansionMode(Enum):
    """How a variable's value was produced."""

    IMMEDIATE = "immediate"
    RECURSIVE = "recursive"
    OVERRIDE = "override"


@dataclass(frozen=True)
class Variable:
    """A resolved variable. Immutable once resolved."""

    name: str
    mode: ExpansionMode
    value: str


class VariableTable:
    """
    Ordered name -> Variable mapping built by resolve_variables().

    Later definitions replace earlier ones under the same name; values that
    were already substituted elsewhere are unaffected.
    """

    def __init__(self):
        self._variables: Dict[str, Variable] = {}

    def define(self, variable: Variable) -> None:
        self._variables[variable.name] = variable

    def get(self, name: str) -> Optional[Variable]:
        return self._variables.get(name)

    def values(self) -> Dict[str, str]:
        """Return a plain name -> value dict."""
        return {name: variable.value for name, variable in self._variables.items()}

    def substitute(self, text: str) -> str:
        """Replace every ${name} whose name is defined; unknown references are kept."""

        def replace(match):
            variable = self._variables.get(match.group("name"))
            return variable.value if variable is not None else match.group(0)

        return VariablePatterns.REFERENCE.sub(replace, text)

    def __contains__(self, name: str) -> bool:
        return name in self._variables

    def __getitem__(self, name: str) -> Variable:
        return self._variables[name]

    def __iter__(self) -> Iterator[Variable]:
        return iter(self._variables.values())

    def __len__(self) -> int:
        return len(self._variables)


def _expand_shell_substitutions(text: str, variable: str, runner) -> str:
    """Replace each $(command) with the command's stdout, lines joined by spaces."""

    def replace(match):
        command = match.group("command").strip()
        if runner is None:
            raise ShellSubstitutionError(command, variable, "no command runner available")

        result = runner.capture(command, cwd=Path.cwd())
        if not result.success:
            raise ShellSubstitutionError(command, variable, result.error)
        return " ".join(result.output.split("\n")).strip()

    return VariablePatterns.SHELL_SUBSTITUTION.sub(replace, text)


def parse_definition(line: str):
    """
    Split a definition line into (name, mode, raw value).

    ':=' is scanned before '=' so immediate definitions are never misread.
    A value continued over several lines is joined with single spaces.

    Raises:
        MakefileParseError: If the line is not a variable definition
    """
    match = LinePatterns.IMMEDIATE_DEFINITION.match(line)
    mode = ExpansionMode.IMMEDIATE
    if not match:
        match = LinePatterns.RECURSIVE_DEFINITION.match(line)
        mode = ExpansionMode.RECURSIVE
    if not match:
        raise MakefileParseError("Not a variable definition", line=line)

    value = VariablePatterns.LINE_JOIN.sub(" ", match.group("value").strip())
    return match.group("name"), mode, value


def resolve_variables(
    variable_lines: Sequence[str],
    makefile_dir: str,
    runner=None,
    overrides: Optional[Dict[str, str]] = None,
) -> VariableTable:
    """
    Resolve the Variable Block into a VariableTable.

    Args:
        variable_lines: Definition lines in file order
        makefile_dir: Resolved Makefile-directory value
        runner: Command runner used for $(...) in immediate definitions
        overrides: Caller overrides; definitions of these names are ignored

    Returns:
        VariableTable with overrides first, then definitions in file order

    Raises:
        ReservedVariableError: If a reserved name is defined
        ShellSubstitutionError: If a $(...) command fails
    """
    overrides = overrides or {}
    table = VariableTable()

    for name, value in overrides.items():
        table.define(Variable(name, ExpansionMode.OVERRIDE, value))
        log_variable(name, ExpansionMode.OVERRIDE.value, value)

    for line in variable_lines:
        name, mode, raw_value = parse_definition(line)

        if name in ReservedNames.all():
            raise ReservedVariableError(name, line)
        if name in overrides:
            continue

        value = substitute_makefile_dir(raw_value, makefile_dir)
        value = table.substitute(value)
        if mode is ExpansionMode.IMMEDIATE:
            value = _expand_shell_substitutions(value, name, runner)

        table.define(Variable(name, mode, value))
        log_variable(name, mode.value, value)

    return table


def substitute_variables(
    command_lines: Sequence[str],
    table: VariableTable,
    makefile_dir: Optional[str] = None,
) -> List[str]:
    """
    Substitute the resolved table once into every Command Block line.

    When makefile_dir is given, the Makefile-directory forms are resolved
    too, so target and dependency names written with them name real paths.
    """
    if makefile_dir is not None:
        command_lines = [substitute_makefile_dir(line, makefile_dir) for line in command_lines]
    return [table.substitute(line) for line in command_lines]
