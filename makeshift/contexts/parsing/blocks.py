"""
Block Separator

Splits preprocessed lines into the Variable Block (definitions before the
first target line) and the Command Block (target lines, their command lines
and the blank lines separating rules).
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from makeshift.contexts.parsing.makefile_patterns import (
    LinePatterns,
    ReservedNames,
    VariablePatterns,
    is_target_line,
    is_variable_line,
)
from makeshift.exceptions import MakeError, MakefileParseError, OverrideSyntaxError, ReservedVariableError


@dataclass
class MakefileBlocks:
    """
    The two halves of a Makefile.

    Attributes:
        variable_lines: 'name := value' / 'name = value' lines, in file order
        command_lines: Everything from the first target line on. '.PHONY'
            lines found above the first target are moved to the front.
    """

    variable_lines: List[str] = field(default_factory=list)
    command_lines: List[str] = field(default_factory=list)


def parse_overrides(overrides: Iterable[str]) -> Dict[str, str]:
    """
    Parse caller-supplied 'name=value' overrides.

    Args:
        overrides: Strings such as "CC=clang"

    Returns:
        Dict mapping variable names to override values, in the given order

    Raises:
        OverrideSyntaxError: If an override has no '=' or an empty name
        ReservedVariableError: If an override targets a reserved name
    """
    parsed = {}
    for override in overrides:
        name, sep, value = override.partition("=")
        name = name.strip()
        if not sep or not name:
            raise OverrideSyntaxError(override)
        if name in ReservedNames.all():
            raise ReservedVariableError(name)
        parsed[name] = value

    return parsed


def apply_overrides(
    lines: Sequence[str],
    overrides: Optional[Dict[str, str]] = None,
    params: Sequence[str] = (),
) -> List[str]:
    """
    Replace ${name} references with override and positional parameter values.

    Runs before block separation so overrides win over any definition in the
    Makefile. Positional parameters fill ${PARAM1} through ${PARAM9}.

    Raises:
        MakeError: If more positional parameters are given than placeholders exist
    """
    if len(params) > ReservedNames.MAX_PARAMS:
        raise MakeError(
            f"At most {ReservedNames.MAX_PARAMS} positional parameters are supported, "
            f"got {len(params)}"
        )

    replacements = dict(overrides or {})
    for index, value in enumerate(params, start=1):
        replacements[f"{ReservedNames.PARAM_PREFIX}{index}"] = value

    if not replacements:
        return list(lines)

    def replace(match):
        name = match.group("name")
        return replacements[name] if name in replacements else match.group(0)

    return [VariablePatterns.REFERENCE.sub(replace, line) for line in lines]


def separate_blocks(lines: Sequence[str], makefile: Optional[Path] = None) -> MakefileBlocks:
    """
    Split logical lines at the first target line.

    Args:
        lines: Preprocessed lines (overrides already applied)
        makefile: Path used in error messages

    Returns:
        MakefileBlocks

    Raises:
        MakefileParseError: If a line before the first target is neither blank,
            a variable definition, nor a '.PHONY' declaration
    """
    blocks = MakefileBlocks()
    leading_phony = []

    for index, line in enumerate(lines):
        if LinePatterns.BLANK.match(line):
            continue
        if LinePatterns.PHONY.match(line):
            leading_phony.append(line)
            continue
        if is_target_line(line):
            separator = [""] if leading_phony else []
            blocks.command_lines = leading_phony + separator + list(lines[index:])
            return blocks
        if is_variable_line(line):
            blocks.variable_lines.append(line)
            continue

        raise MakefileParseError(
            "Expected a variable definition before the first target", line=line, makefile=makefile
        )

    blocks.command_lines = leading_phony
    return blocks
