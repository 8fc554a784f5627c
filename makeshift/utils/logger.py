"""
Generic logger setup utilities.

Provides reusable loguru configuration with provenance tracking.
Context-specific wrappers should be defined in contexts/{context}/logger.py.
"""

import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

# Default level colors for console output
LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}


def setup_logger(
    context_name: str,
    log_dir: Optional[Path] = None,
    extra_provenance: dict = None,
    level: str = "INFO",
    level_colors: dict = {},
) -> Optional[Path]:
    """
    Configure loguru for a context with provenance tracking.

    Sets up console output on stderr (stdout is reserved for echoed command
    lines) and, when log_dir is given, a DEBUG-level log file.

    Args:
        context_name: Context identifier (e.g., "make", "parse")
        log_dir: Directory for this logging session (None for console only)
        extra_provenance: Additional key-value pairs for provenance header
        level: Minimum console level
        level_colors: Override default level colors (e.g., {"INFO": "<cyan>"})

    Returns:
        Path to log file, or None when logging to the console only

    Example:
        from makeshift.utils.logger import setup_logger

        log_file = setup_logger(
            context_name="make",
            log_dir=Path("outs/logs/make_20251114_123456"),
            extra_provenance={"Makefile": "Makefile"}
        )
    """
    # Remove default logger
    logger.remove()

    # Apply level colors (defaults + overrides)
    colors = {**LEVEL_COLORS, **level_colors}
    for level_name, color in colors.items():
        logger.level(level_name, color=color)

    log_file = None
    if log_dir is not None:
        log_dir.mkdir(exist_ok=True, parents=True)
        log_file = log_dir / f"{context_name}.log"

        # File handler captures everything (DEBUG level)
        logger.add(
            log_file, format="{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}", level="DEBUG"
        )

    # Console handler, colorized by level
    logger.add(
        sys.stderr,
        format="<level>{level: <7}</level> | <level>{message}</level>",
        level=level,
        colorize=True,
    )

    if log_file is not None:
        log_provenance(extra_provenance)

    return log_file


def log_provenance(extra_context: dict = None) -> None:
    """
    Log execution provenance to current logger.

    Logs standard context (script, command, working directory, Python version)
    plus any additional context provided. Written at DEBUG level so it lands in
    the log file without cluttering the console.

    Args:
        extra_context: Additional key-value pairs to log
    """
    logger.debug("=" * 80)
    logger.debug(f"Script: {sys.argv[0]}")
    logger.debug(f"Command: {' '.join(sys.argv)}")
    logger.debug(f"Working directory: {Path.cwd()}")
    logger.debug(f"Python: {sys.version.split()[0]}")

    if extra_context:
        for key, value in extra_context.items():
            logger.debug(f"{key}: {value}")

    logger.debug("=" * 80)
