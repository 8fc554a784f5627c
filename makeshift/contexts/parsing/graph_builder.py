"""
Target Graph Builder

Parses the cleaned Command Block into target -> dependencies and
target -> commands maps.

The Command Block is a sequence of rules:

    name[ name...]: [dep dep...][ ## help text]
        command
        command

    next: rule
        command
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set

from makeshift.contexts.parsing.logger import _log_warning
from makeshift.contexts.parsing.makefile_patterns import (
    CommentPatterns,
    LinePatterns,
    is_target_line,
)
from makeshift.exceptions import MakefileParseError


@dataclass
class TargetGraph:
    """
    Dependency graph of a Makefile. Built once, read-only afterwards.

    Attributes:
        target_lines: Raw target-definition lines in file order
        dependencies: Target name -> ordered dependency names
        commands: Target name -> ordered command lines (indentation removed)
        default_target: First target defined in the file
        synopses: Target name -> '## help text' from its definition line
    """

    target_lines: List[str] = field(default_factory=list)
    dependencies: Dict[str, List[str]] = field(default_factory=dict)
    commands: Dict[str, List[str]] = field(default_factory=dict)
    default_target: Optional[str] = None
    synopses: Dict[str, str] = field(default_factory=dict)

    @property
    def targets(self) -> List[str]:
        """Target names in definition order."""
        return list(self.dependencies)

    def find_target(self, name: str) -> Optional[str]:
        """
        Return the key of the rule producing name.

        Exact keys win; otherwise a multi-file target whose names include
        name is returned.
        """
        if name in self.dependencies:
            return name
        for target in self.dependencies:
            if name in target.split():
                return target
        return None


def build_target_graph(command_lines: Sequence[str], makefile: Optional[Path] = None) -> TargetGraph:
    """
    Build the TargetGraph from Command Block lines.

    A target defined twice keeps the union of its dependencies; a later
    recipe replaces an earlier one.

    Args:
        command_lines: Command Block with variables substituted and phony
            declarations removed
        makefile: Path used in error messages

    Returns:
        TargetGraph

    Raises:
        MakefileParseError: If a line is neither blank, a target line, nor an
            indented command line, or a command line precedes every target
    """
    graph = TargetGraph()
    current = None
    redefined: Set[str] = set()

    for line in command_lines:
        if LinePatterns.BLANK.match(line):
            continue

        if LinePatterns.COMMAND.match(line):
            if current is None:
                raise MakefileParseError(
                    "Command line appears before any target", line=line, makefile=makefile
                )
            if current in redefined:
                _log_warning(f"Overriding recipe for target {current!r}")
                graph.commands[current] = []
                redefined.discard(current)
            graph.commands[current].append(line.strip())
            continue

        match = LinePatterns.TARGET.match(line) if is_target_line(line) else None
        if not match:
            raise MakefileParseError(
                "Expected a target definition, an indented command line or a blank line",
                line=line,
                makefile=makefile,
            )

        name = " ".join(match.group("targets").split())
        dependencies = (match.group("deps") or "").split()
        comment = match.group("comment") or ""

        if name in graph.dependencies:
            known = graph.dependencies[name]
            known.extend(dep for dep in dependencies if dep not in known)
            redefined.add(name)
        else:
            graph.dependencies[name] = dependencies
            graph.commands[name] = []

        if comment.startswith(CommentPatterns.HELP_PREFIX):
            graph.synopses[name] = comment[len(CommentPatterns.HELP_PREFIX) :].strip()

        if graph.default_target is None:
            graph.default_target = name

        graph.target_lines.append(line)
        current = name

    return graph
