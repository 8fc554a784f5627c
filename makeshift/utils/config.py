"""
Run Configuration

Loads makeshift defaults from an optional YAML file and merges caller
overrides on top. Later sources win: dataclass defaults, then the YAML file,
then keyword overrides.

Examples:
    >>> config = load_make_config()
    >>> config.error_action
    'stop'

    >>> config = load_make_config(error_action="continue", delimiter=",")
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()

ERROR_ACTIONS = ("stop", "continue")


@dataclass
class MakeConfig:
    """
    Settings shared by every stage of a run.

    Attributes:
        makefile: File parsed when no path is given
        delimiter: Separator used when expanding $^
        error_action: "stop" aborts on the first failed command, "continue" warns and moves on
        shell: Shell used to evaluate command lines and $(...) substitutions
        delete_command_comments: Strip trailing # comments from command lines too
        log_level: Minimum console log level
        logs_path: Directory for per-run log files (None for console only)
    """

    makefile: str = "Makefile"
    delimiter: str = " "
    error_action: str = "stop"
    shell: str = "/bin/sh"
    delete_command_comments: bool = False
    log_level: str = "INFO"
    logs_path: Optional[str] = None


def _default_config_path() -> Optional[Path]:
    env_path = os.getenv("MAKESHIFT_CONFIG_PATH")
    return Path(env_path) if env_path else None


def load_make_config(config_path: Path = None, **overrides) -> MakeConfig:
    """
    Build a MakeConfig from defaults, an optional YAML file and overrides.

    Args:
        config_path: YAML file with MakeConfig keys (defaults to MAKESHIFT_CONFIG_PATH env variable)
        **overrides: Individual settings that take precedence over the file;
            None values are ignored so CLI options can be passed straight through

    Returns:
        Validated MakeConfig

    Raises:
        ValueError: If error_action is not one of "stop" or "continue"
        FileNotFoundError: If an explicit config_path does not exist
    """
    schema = OmegaConf.structured(MakeConfig)
    sources = [schema]

    if config_path is None:
        config_path = _default_config_path()
        if config_path is not None and not config_path.exists():
            # Environment default is optional
            config_path = None
    elif not Path(config_path).exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    if config_path is not None:
        sources.append(OmegaConf.load(config_path))

    given = {key: value for key, value in overrides.items() if value is not None}
    if given:
        sources.append(OmegaConf.create(given))

    merged = OmegaConf.merge(*sources)
    config = OmegaConf.to_object(merged)

    if config.error_action not in ERROR_ACTIONS:
        raise ValueError(
            f"error_action must be one of {ERROR_ACTIONS}, got: {config.error_action!r}"
        )

    if os.getenv("MAKESHIFT_LOGS_PATH") and config.logs_path is None:
        config.logs_path = os.getenv("MAKESHIFT_LOGS_PATH")

    return config
