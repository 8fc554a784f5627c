"""
Phony & Placeholder Extraction

Collects phony target names from '.PHONY:' lines and '@target:' rule lines,
and rewrites the single '%.' placeholder once the requested target is known.
"""

import re
from dataclasses import dataclass, field
from typing import List, Sequence, Set

from makeshift.contexts.parsing.logger import _log_debug
from makeshift.contexts.parsing.makefile_patterns import (
    PLACEHOLDER,
    LinePatterns,
    is_target_line,
)

# Names in a .PHONY line may be separated by whitespace or commas
PHONY_DELIMITER = re.compile(r"[\s,]+")
TRAILING_EXTENSION = re.compile(r"\.[^./\\]*$")


@dataclass
class PhonyDeclarations:
    """
    Result of phony extraction.

    Attributes:
        names: Every phony target name
        lines: Command Block with '.PHONY' lines removed and '@' prefixes stripped
    """

    names: Set[str] = field(default_factory=set)
    lines: List[str] = field(default_factory=list)


def extract_phony(command_lines: Sequence[str]) -> PhonyDeclarations:
    """
    Collect phony declarations from the Command Block.

    Multiple '.PHONY' lines accumulate. A rule line whose target starts with
    '@' declares that target phony and loses the '@' before graph building.
    """
    declarations = PhonyDeclarations()

    for line in command_lines:
        match = LinePatterns.PHONY.match(line)
        if match:
            names = [name for name in PHONY_DELIMITER.split(match.group("names")) if name]
            declarations.names.update(names)
            continue

        if line.startswith("@") and is_target_line(line):
            line = line[1:]
            target = LinePatterns.TARGET.match(line).group("targets")
            declarations.names.add(" ".join(target.split()))

        declarations.lines.append(line)

    _log_debug(f"Phony targets: {sorted(declarations.names)}")
    return declarations


def placeholder_prefix(requested_target: str) -> str:
    """
    Compute the '%.' replacement for a requested target.

    Removes the shortest trailing '.extension' and appends '.'.

    Examples:
        >>> placeholder_prefix("main.o")
        'main.'
        >>> placeholder_prefix("archive.tar.gz")
        'archive.tar.'
        >>> placeholder_prefix("README")
        'README.'
    """
    return TRAILING_EXTENSION.sub("", requested_target) + "."


def apply_placeholder(command_lines: Sequence[str], requested_target: str) -> List[str]:
    """
    Rewrite '%.' in the rule that produces the requested target.

    A rule is rewritten when its target line contains '%.' and, after
    replacement, names the requested target. Its target line and every
    command line belonging to it get every '%.' replaced by the prefix.
    Other placeholder rules are left untouched.
    """
    prefix = placeholder_prefix(requested_target)
    rewritten = []
    in_matching_rule = False

    for line in command_lines:
        if is_target_line(line):
            in_matching_rule = False
            if PLACEHOLDER in line:
                candidate = line.replace(PLACEHOLDER, prefix)
                match = LinePatterns.TARGET.match(candidate)
                if match and requested_target in match.group("targets").split():
                    _log_debug(f"Placeholder rule {line!r} -> {candidate!r}")
                    in_matching_rule = True
                    line = candidate
        elif in_matching_rule and line[:1] in (" ", "\t"):
            line = line.replace(PLACEHOLDER, prefix)

        rewritten.append(line)

    return rewritten
