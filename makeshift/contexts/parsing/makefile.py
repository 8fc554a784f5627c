"""
Makefile Parsing Pipeline

Runs the parsing stages in order and returns a Makefile object holding the
resolved variable table, phony set and target graph:

    preprocess -> apply overrides -> separate blocks -> resolve variables
    -> substitute into Command Block -> extract phony -> placeholder -> graph
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Set

from makeshift.contexts.parsing.blocks import apply_overrides, parse_overrides, separate_blocks
from makeshift.contexts.parsing.graph_builder import TargetGraph, build_target_graph
from makeshift.contexts.parsing.logger import log_parse_summary
from makeshift.contexts.parsing.phony import apply_placeholder, extract_phony
from makeshift.contexts.parsing.preprocessor import preprocess_makefile
from makeshift.contexts.parsing.variables import (
    VariableTable,
    resolve_variables,
    substitute_variables,
)
from makeshift.exceptions import MakefileParseError, UnknownTargetError
from makeshift.utils.config import MakeConfig, load_make_config


@dataclass
class Makefile:
    """
    Everything a run needs, parsed from one Makefile.

    Attributes:
        path: Absolute path of the root Makefile
        makefile_dir: Forward-slash absolute directory of path
        variables: Resolved variable table (overrides included)
        phony: Phony target names
        graph: Target graph
        target: Requested target, or the default target when none was requested
    """

    path: Path
    makefile_dir: str
    variables: VariableTable
    phony: Set[str] = field(default_factory=set)
    graph: TargetGraph = field(default_factory=TargetGraph)
    target: Optional[str] = None

    def is_phony(self, name: str) -> bool:
        return name in self.phony


@dataclass(frozen=True)
class HelpEntry:
    """One row of the target help table."""

    target: str
    phony: bool
    synopsis: str


def parse_makefile(
    path: Optional[Path] = None,
    target: Optional[str] = None,
    overrides: Sequence[str] = (),
    params: Sequence[str] = (),
    config: Optional[MakeConfig] = None,
    runner=None,
) -> Makefile:
    """
    Parse a Makefile into variables, phony names and a target graph.

    Args:
        path: Makefile to parse (default: config.makefile in the current directory)
        target: Requested target (default: first target in the file)
        overrides: 'name=value' strings that take precedence over file definitions
        params: Positional parameters for ${PARAM1}..${PARAM9}
        config: Run configuration (default: load_make_config())
        runner: Command runner for $(...) substitutions in ':=' definitions

    Returns:
        Makefile

    Raises:
        MakeError: Any parsing failure (see makeshift.exceptions)
    """
    if config is None:
        config = load_make_config()
    path = Path(path) if path is not None else Path(config.makefile)

    preprocessed = preprocess_makefile(path, delete_command_comments=config.delete_command_comments)

    parsed_overrides = parse_overrides(overrides)
    lines = apply_overrides(preprocessed.lines, parsed_overrides, params)

    blocks = separate_blocks(lines, makefile=preprocessed.root_file)
    variables = resolve_variables(
        blocks.variable_lines,
        preprocessed.makefile_dir,
        runner=runner,
        overrides=parsed_overrides,
    )
    command_lines = substitute_variables(blocks.command_lines, variables, preprocessed.makefile_dir)

    phony = extract_phony(command_lines)
    command_lines = phony.lines
    if target:
        command_lines = apply_placeholder(command_lines, target)

    graph = build_target_graph(command_lines, makefile=preprocessed.root_file)

    if target:
        resolved_target = graph.find_target(target)
        if resolved_target is None:
            raise UnknownTargetError(target, graph.targets)
    elif graph.default_target is None:
        raise MakefileParseError("No targets defined", makefile=preprocessed.root_file)
    else:
        resolved_target = graph.default_target

    log_parse_summary(preprocessed.root_file, len(variables), len(graph.targets), len(phony.names))

    return Makefile(
        path=preprocessed.root_file,
        makefile_dir=preprocessed.makefile_dir,
        variables=variables,
        phony=phony.names,
        graph=graph,
        target=resolved_target,
    )


def help_entries(makefile: Makefile) -> List[HelpEntry]:
    """
    Rows for the target help table, in definition order.

    Each row carries the target name, whether it is phony, and the '## text'
    written after its definition line (empty when there is none).
    """
    return [
        HelpEntry(
            target=target,
            phony=makefile.is_phony(target),
            synopsis=makefile.graph.synopses.get(target, ""),
        )
        for target in makefile.graph.targets
    ]
