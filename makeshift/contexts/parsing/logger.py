"""
Parsing context logger.

Provides logging interface for parsing context with automatic [parse] prefix.
All parsing modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

CONTEXT_PREFIX = "[parse]"


# Wrapper functions with automatic [parse] prefix


def _log_warning(message: str) -> None:
    """Log warning message with [parse] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [parse] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level parsing-specific logging helpers


def log_include(path: Path, included_from: Path) -> None:
    """Log an inlined include file."""
    _log_debug(f"Including {path} (from {included_from})")


def log_variable(name: str, mode: str, value: str) -> None:
    """Log a resolved variable definition."""
    _log_debug(f"  {name} ({mode}) = {value!r}")


def log_parse_summary(makefile: Path, num_variables: int, num_targets: int, num_phony: int) -> None:
    """Log what a parse produced."""
    _log_debug(
        f"Parsed {makefile}: {num_variables} variables, {num_targets} targets, {num_phony} phony"
    )
