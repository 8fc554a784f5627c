"""
Execution context logger.

Provides logging interface for execution context with automatic [make] prefix.
All execution modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from makeshift.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[make]"


def setup_execution_logger(
    log_dir: Optional[Path], makefile: Optional[Path] = None, level: str = "INFO"
) -> Optional[Path]:
    """
    Setup logger for execution context.

    Args:
        log_dir: Directory for this run's log file (None for console only)
        makefile: Makefile path recorded in the provenance header
        level: Minimum console level

    Returns:
        Path to log file, or None

    Example:
        from makeshift.contexts.execution.logger import setup_execution_logger, _log_debug

        log_file = setup_execution_logger(log_dir, makefile=Path("Makefile"))
        _log_debug("Starting run...")
    """
    return _setup_logger(
        context_name="make",
        log_dir=log_dir,
        extra_provenance={"Makefile": makefile},
        level=level,
    )


# Wrapper functions with automatic [make] prefix


def _log_error(message: str) -> None:
    """Log error message with [make] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [make] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [make] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level execution-specific logging helpers


def log_run_start(target: str, makefile: Path, order: list, working_dir: Path) -> None:
    """Log start of a run with its execution order."""
    _log_debug(f"Making {target!r} from {makefile}")
    _log_debug(f"  Working directory: {working_dir}")
    _log_debug(f"  Execution order: {' -> '.join(order)}")


def log_run_result(result, elapsed_time: float) -> None:  # MakeResult
    """
    Log the outcome of a run.

    Args:
        result: MakeResult from run_make()
        elapsed_time: Time taken
    """
    if result.success:
        _log_debug(
            f"{result.target}: {len(result.executed_commands)} commands ({elapsed_time:.2f}s)"
        )
    else:
        _log_error(
            f"{result.target}: {len(result.failures)} failed targets ({elapsed_time:.2f}s)"
        )
        for failure in result.failures:
            _log_error(f"  {failure}")
