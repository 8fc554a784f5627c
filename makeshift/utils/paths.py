"""Filesystem helpers shared by the parsing and execution contexts."""

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union


def normalize_dir(path: Union[str, Path]) -> str:
    """Return the absolute, forward-slash form of a directory path."""
    return Path(path).resolve().as_posix()


@contextmanager
def working_directory(path: Optional[Union[str, Path]]) -> Iterator[Path]:
    """
    Temporarily change the current working directory.

    The previous directory is restored on every exit path, including
    exceptions raised inside the block. Passing None leaves the current
    directory untouched.

    Example:
        with working_directory("build"):
            run_make(...)
    """
    previous = Path.cwd()
    if path is None:
        yield previous
        return

    os.chdir(path)
    try:
        yield Path.cwd()
    finally:
        os.chdir(previous)
