"""
Make Engine

Orchestrates a run: parse the Makefile, sort the requested target's
dependencies, then walk the order and run every stale target's commands.
The whole parse/sort pipeline completes before the first command runs, and
commands run one at a time.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from makeshift.contexts.execution.executor import Command, CommandExecutor, prepare_command
from makeshift.contexts.execution.logger import (
    _log_debug,
    log_run_result,
    log_run_start,
    setup_execution_logger,
)
from makeshift.contexts.execution.runner import CommandRunner, ShellRunner
from makeshift.contexts.execution.sorter import topological_sort
from makeshift.contexts.execution.staleness import TargetDecision, evaluate_staleness
from makeshift.contexts.parsing.makefile import Makefile, parse_makefile
from makeshift.utils.config import MakeConfig, load_make_config
from makeshift.utils.paths import working_directory
from makeshift.utils.timestamp import now


@dataclass
class ExecutionPlan:
    """
    Dependency-first order for a target with per-target decisions.

    Attributes:
        target: Requested (or default) target
        order: Target names, dependencies first, ending with target
        decisions: Staleness decision for each name in order
        commands: Prepared commands for each target selected to run
    """

    target: str
    order: List[str] = field(default_factory=list)
    decisions: List[TargetDecision] = field(default_factory=list)
    commands: Dict[str, List[Command]] = field(default_factory=dict)

    @property
    def scheduled(self) -> List[str]:
        """Targets selected to run, in order."""
        return [decision.target for decision in self.decisions if decision.run]

    @property
    def up_to_date(self) -> bool:
        """True when no selected target has a command to run."""
        return not any(self.commands.get(target) for target in self.scheduled)


@dataclass
class MakeResult:
    """
    Result of a make run.

    Attributes:
        success: Whether every executed command succeeded
        target: Requested (or default) target
        order: Execution order that was walked
        executed_commands: Command texts that were run, in order
        failures: Failure messages collected under the "continue" error action
        up_to_date: True when nothing had to be run
    """

    success: bool
    target: str
    order: List[str] = field(default_factory=list)
    executed_commands: List[str] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)
    up_to_date: bool = False


def _needed_by(makefile: Makefile, name: str, order: Sequence[str]) -> Optional[str]:
    """Return the first target in order that lists name as a dependency."""
    for candidate in order:
        if name in makefile.graph.dependencies.get(candidate, ()):
            return candidate
    return None


def _decide(makefile: Makefile, name: str, order: Sequence[str], remade) -> TargetDecision:
    return evaluate_staleness(
        name,
        makefile.graph.dependencies.get(name, []),
        makefile.phony,
        has_rule=name in makefile.graph.dependencies,
        has_commands=bool(makefile.graph.commands.get(name)),
        remade=remade,
        needed_by=_needed_by(makefile, name, order),
    )


def _prepare_commands(makefile: Makefile, name: str, delimiter: str) -> List[Command]:
    dependencies = makefile.graph.dependencies.get(name, [])
    return [
        prepare_command(raw, name, dependencies, makefile.makefile_dir, delimiter)
        for raw in makefile.graph.commands.get(name, [])
    ]


def build_plan(makefile: Makefile, delimiter: str = " ") -> ExecutionPlan:
    """
    Compute the execution plan without running anything.

    A target counts as remade for its dependents as soon as it is selected,
    so the plan matches what a real run would do.
    """
    order = topological_sort(makefile.graph.dependencies, makefile.target)
    plan = ExecutionPlan(target=makefile.target, order=order)

    remade = set()
    for name in order:
        decision = _decide(makefile, name, order, remade)
        plan.decisions.append(decision)
        if decision.run:
            remade.add(name)
            plan.commands[name] = _prepare_commands(makefile, name, delimiter)

    return plan


def plan_make(
    path: Optional[Path] = None,
    target: Optional[str] = None,
    overrides: Sequence[str] = (),
    params: Sequence[str] = (),
    config: Optional[MakeConfig] = None,
    runner: Optional[CommandRunner] = None,
    directory: Optional[Path] = None,
) -> ExecutionPlan:
    """
    Dry run: parse the Makefile and return the execution plan.

    Arguments match run_make(). Only $(...) substitutions in ':=' variables
    are executed, since they are part of parsing.
    """
    if config is None:
        config = load_make_config()
    if runner is None:
        runner = ShellRunner(config.shell)

    with working_directory(directory):
        makefile = parse_makefile(path, target, overrides, params, config=config, runner=runner)
        return build_plan(makefile, delimiter=config.delimiter)


def run_make(
    path: Optional[Path] = None,
    target: Optional[str] = None,
    overrides: Sequence[str] = (),
    params: Sequence[str] = (),
    config: Optional[MakeConfig] = None,
    runner: Optional[CommandRunner] = None,
    directory: Optional[Path] = None,
    echo: Callable[[str], None] = print,
) -> MakeResult:
    """
    Make a target: run the commands of every stale target in dependency order.

    Staleness is checked just before each target runs, so files written by
    earlier targets are seen by later ones.

    Args:
        path: Makefile to read (default: config.makefile)
        target: Target to make (default: first target in the Makefile)
        overrides: 'name=value' variable overrides
        params: Positional parameters for ${PARAM1}..${PARAM9}
        config: Run configuration (default: load_make_config())
        runner: Command runner (default: ShellRunner(config.shell))
        directory: Change into this directory for the duration of the run
        echo: Receives each non-silent command line and the up-to-date notice

    Returns:
        MakeResult

    Raises:
        MakeError: On parse errors, unknown targets, missing files without a
            rule, cycles, and command failures under the "stop" error action
    """
    if config is None:
        config = load_make_config()
    if runner is None:
        runner = ShellRunner(config.shell)

    if config.logs_path:
        setup_execution_logger(
            Path(config.logs_path) / f"make_{now()}", makefile=path, level=config.log_level
        )

    with working_directory(directory) as cwd:
        start_time = time.time()

        makefile = parse_makefile(path, target, overrides, params, config=config, runner=runner)
        order = topological_sort(makefile.graph.dependencies, makefile.target)
        log_run_start(makefile.target, makefile.path, order, cwd)

        executor = CommandExecutor(runner=runner, error_action=config.error_action, echo=echo)
        remade = set()

        for name in order:
            decision = _decide(makefile, name, order, remade)
            if not decision.run:
                _log_debug(f"Skipping {name!r}: {decision.reason.value}")
                continue

            _log_debug(f"Making {name!r}: {decision.reason.value} {decision.detail}".rstrip())
            commands = _prepare_commands(makefile, name, config.delimiter)
            if executor.run_target(name, commands, cwd=cwd):
                remade.add(name)

        up_to_date = not executor.executed
        if up_to_date:
            echo(f"makeshift: '{makefile.target}' is up to date.")

        result = MakeResult(
            success=not executor.failures,
            target=makefile.target,
            order=order,
            executed_commands=list(executor.executed),
            failures=list(executor.failures),
            up_to_date=up_to_date,
        )
        log_run_result(result, time.time() - start_time)

    return result
