"""
Staleness Evaluator

Decides, per target, whether its commands must run. Rules in order:

1. Phony targets always run.
2. Targets with no rule are plain files: they must exist and never run.
   A rule with no dependencies and no commands is the same existence
   assertion.
3. A target whose own file(s) are missing runs.
4. A target with a phony, missing or remade dependency runs.
5. Otherwise the target runs when its oldest file is strictly older than
   its newest dependency file.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Collection, List, Optional, Sequence

from makeshift.exceptions import MissingDependencyError


class Reason(Enum):
    """Why a target was (or was not) selected."""

    PHONY = "phony target"
    MISSING = "target file missing"
    PHONY_DEPENDENCY = "phony dependency"
    MISSING_DEPENDENCY = "dependency file missing"
    REMADE_DEPENDENCY = "dependency remade"
    OLDER = "older than dependency"
    UP_TO_DATE = "up to date"
    SOURCE_FILE = "existing file without rule"


@dataclass(frozen=True)
class TargetDecision:
    """Whether a target runs, and why."""

    target: str
    run: bool
    reason: Reason
    detail: str = ""


def target_files(name: str) -> List[Path]:
    """A target name may list several files separated by spaces."""
    return [Path(token) for token in name.split()]


def _mtime(path: Path) -> Optional[int]:
    try:
        return os.stat(path).st_mtime_ns
    except FileNotFoundError:
        return None


def evaluate_staleness(
    target: str,
    dependencies: Sequence[str],
    phony: Collection[str],
    has_rule: bool = True,
    has_commands: bool = True,
    remade: Collection[str] = (),
    needed_by: Optional[str] = None,
) -> TargetDecision:
    """
    Decide whether target's commands must run.

    Args:
        target: Target name (possibly several space-separated files)
        dependencies: The target's dependency names
        phony: Phony target names
        has_rule: False for names that only appear as dependencies
        has_commands: False for rules without command lines
        remade: Targets already selected to run earlier in this run
        needed_by: Target depending on this one, for error messages

    Returns:
        TargetDecision

    Raises:
        MissingDependencyError: If target has no rule, or a rule with neither
            dependencies nor commands, and its file does not exist
    """
    if target in phony:
        return TargetDecision(target, True, Reason.PHONY)

    files = target_files(target)
    mtimes = [_mtime(path) for path in files]

    if not has_rule or not (has_commands or dependencies):
        if any(mtime is None for mtime in mtimes):
            raise MissingDependencyError(target, needed_by)
        return TargetDecision(target, False, Reason.SOURCE_FILE)

    missing = [str(path) for path, mtime in zip(files, mtimes) if mtime is None]
    if missing:
        return TargetDecision(target, True, Reason.MISSING, ", ".join(missing))

    dependency_mtimes = []
    for dependency in dependencies:
        if dependency in phony:
            return TargetDecision(target, True, Reason.PHONY_DEPENDENCY, dependency)
        if dependency in remade:
            return TargetDecision(target, True, Reason.REMADE_DEPENDENCY, dependency)

        for path in target_files(dependency):
            mtime = _mtime(path)
            if mtime is None:
                return TargetDecision(target, True, Reason.MISSING_DEPENDENCY, str(path))
            dependency_mtimes.append(mtime)

    if dependency_mtimes and min(mtimes) < max(dependency_mtimes):
        return TargetDecision(target, True, Reason.OLDER)

    return TargetDecision(target, False, Reason.UP_TO_DATE)
