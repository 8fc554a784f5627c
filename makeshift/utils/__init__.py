"""
Shared utilities for makeshift.

Common functionality used across contexts:
- Configuration loading
- Logger setup
- Working-directory scoping
- Timestamps for log directories
"""

from makeshift.utils.config import MakeConfig, load_make_config
from makeshift.utils.paths import normalize_dir, working_directory
from makeshift.utils.timestamp import now

__all__ = ["MakeConfig", "load_make_config", "normalize_dir", "working_directory", "now"]
