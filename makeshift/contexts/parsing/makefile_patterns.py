"""
Makefile Pattern Constants

Centralized regexes and reserved names used while parsing Makefiles.
Organized into frozen dataclasses by category for immutability and clear grouping.
"""

import re
from dataclasses import dataclass
from typing import FrozenSet, Pattern


@dataclass(frozen=True)
class LinePatterns:
    """
    Whole-line shapes recognized by the preprocessor and block separator.
    """

    FULL_COMMENT: Pattern = re.compile(r"^#")
    BLANK: Pattern = re.compile(r"^\s*$")
    INCLUDE: Pattern = re.compile(r"^include\s+(?P<path>\S.*?)\s*$")
    COMMAND: Pattern = re.compile(r"^[ \t]+\S")

    # Scanned ':=' first so "a := b" is never read as "a :" + "= b"
    IMMEDIATE_DEFINITION: Pattern = re.compile(
        r"^(?P<name>[A-Za-z_.][\w.\-]*)\s*:=\s*(?P<value>.*)$",
        re.DOTALL,
    )
    RECURSIVE_DEFINITION: Pattern = re.compile(
        r"^(?P<name>[A-Za-z_.][\w.\-]*)\s*=\s*(?P<value>.*)$",
        re.DOTALL,
    )

    # name[ name...]: [dep dep...][ # comment]; a '##' comment is help text
    TARGET: Pattern = re.compile(
        r"^(?P<targets>@?[^\s:=#][^:=#]*?)\s*:(?!=)\s*(?P<deps>[^#]*?)\s*(?P<comment>#.*)?$"
    )
    PHONY: Pattern = re.compile(r"^\.PHONY\s*:(?P<names>.*)$")


@dataclass(frozen=True)
class CommentPatterns:
    """
    Trailing comment handling.

    A trailing comment starts at a '#' preceded by whitespace. Comments whose
    last non-whitespace character is an unescaped quote are left in place,
    because the '#' is most likely inside a quoted string.
    """

    TRAILING: Pattern = re.compile(r"\s+#.*$")
    HELP_PREFIX: str = "##"
    QUOTE_ENDING: Pattern = re.compile(r"(?<!\\)['\"]\s*$")


@dataclass(frozen=True)
class ContinuationPatterns:
    """Line endings that merge a line with the next one."""

    NEWLINE_JOIN: Pattern = re.compile(r"[\\`]\s*$")
    PIPE_JOIN: Pattern = re.compile(r"\s*(?<!\|)\|\s*$")
    PIPE_SEPARATOR: str = " |\n"


@dataclass(frozen=True)
class VariablePatterns:
    """Variable references and substitutions."""

    # ${name}
    REFERENCE: Pattern = re.compile(r"\$\{(?P<name>[A-Za-z_.][\w.\-]*)\}")
    # $(command), one level of nested parentheses allowed
    SHELL_SUBSTITUTION: Pattern = re.compile(
        r"\$\((?P<command>[^()]*(?:\([^()]*\)[^()]*)*)\)"
    )
    # Join point left in a continued definition, with surrounding indentation
    LINE_JOIN: Pattern = re.compile(r"\s*\n\s*")


@dataclass(frozen=True)
class AutomaticVariables:
    """Per-command substitutions derived from the current target."""

    TARGET: str = "$@"
    FIRST_DEPENDENCY: str = "$<"
    ALL_DEPENDENCIES: str = "$^"


@dataclass(frozen=True)
class ReservedNames:
    """
    Variable names owned by makeshift.

    MAKEFILE_DIR always holds the directory of the file being parsed.
    PARAM1..PARAM9 are filled from positional parameters.
    """

    MAKEFILE_DIR: str = "MAKEFILE_DIR"
    PARAM_PREFIX: str = "PARAM"
    MAX_PARAMS: int = 9

    @classmethod
    def all(cls) -> FrozenSet[str]:
        """Return every reserved variable name."""
        params = {f"{cls.PARAM_PREFIX}{i}" for i in range(1, cls.MAX_PARAMS + 1)}
        return frozenset({cls.MAKEFILE_DIR, *params})


# Written forms of the Makefile-directory variable: ${MAKEFILE_DIR}, $(MAKEFILE_DIR), $MAKEFILE_DIR
MAKEFILE_DIR_FORMS: Pattern = re.compile(
    r"\$\{MAKEFILE_DIR\}|\$\(MAKEFILE_DIR\)|\$MAKEFILE_DIR\b"
)

PLACEHOLDER = "%."


def substitute_makefile_dir(text: str, makefile_dir: str) -> str:
    """Replace every written form of the Makefile-directory variable."""
    return MAKEFILE_DIR_FORMS.sub(lambda _: makefile_dir, text)


def is_target_line(line: str) -> bool:
    """Return True for an unindented 'name: deps' line that is not a ':=' definition."""
    if not line or line[0] in " \t" or LinePatterns.IMMEDIATE_DEFINITION.match(line):
        return False
    return LinePatterns.TARGET.match(line) is not None


def is_variable_line(line: str) -> bool:
    """Return True for a 'name := value' or 'name = value' definition."""
    if not line or line[0] in " \t":
        return False
    return bool(
        LinePatterns.IMMEDIATE_DEFINITION.match(line)
        or LinePatterns.RECURSIVE_DEFINITION.match(line)
    )
