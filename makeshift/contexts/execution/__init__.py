"""
Execution Context

Responsibilities:
- Orders targets dependencies-first
- Decides which targets are stale
- Substitutes automatic variables and runs command lines
- Applies the error action to failed commands

Owns: Execution plan, command running, run results
Never: Reads Makefile text directly (uses the parsing context)
"""

from makeshift.contexts.execution.engine import (
    ExecutionPlan,
    MakeResult,
    build_plan,
    plan_make,
    run_make,
)
from makeshift.contexts.execution.runner import CommandResult, CommandRunner, ShellRunner

__all__ = [
    "CommandResult",
    "CommandRunner",
    "ExecutionPlan",
    "MakeResult",
    "ShellRunner",
    "build_plan",
    "plan_make",
    "run_make",
]
