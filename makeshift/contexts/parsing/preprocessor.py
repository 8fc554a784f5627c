"""
Makefile Preprocessor

Turns the Makefile on disk into the list of logical lines the later stages
work on:

1. Inline `include <file>` directives (paths relative to the including file)
2. Drop full-line comments and strip trailing comments
3. Merge continuation lines ending in a backslash, a backtick or a pipe
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from makeshift.contexts.parsing.logger import log_include
from makeshift.contexts.parsing.makefile_patterns import (
    CommentPatterns,
    ContinuationPatterns,
    LinePatterns,
    is_variable_line,
    substitute_makefile_dir,
)
from makeshift.exceptions import MakefileNotFoundError, MakefileParseError
from makeshift.utils.paths import normalize_dir


@dataclass
class PreprocessedMakefile:
    """
    Logical lines of a Makefile after includes, comments and continuations.

    Attributes:
        root_file: Absolute path of the Makefile that was read
        makefile_dir: Forward-slash absolute directory of root_file
        lines: Logical lines, includes inlined
    """

    root_file: Path
    makefile_dir: str
    lines: List[str] = field(default_factory=list)


def read_makefile_lines(
    path: Path,
    included_from: Optional[Path] = None,
    _stack: Optional[List[Path]] = None,
) -> List[str]:
    """
    Read a Makefile and recursively inline its include directives.

    Each included file is followed by a blank line so its last rule stays a
    separate unit. Inside an included file, every form of the
    Makefile-directory variable is resolved to that file's own directory.

    Args:
        path: File to read
        included_from: File containing the include directive (None for the root)

    Returns:
        Raw physical lines with includes inlined

    Raises:
        MakefileNotFoundError: If path or any included file does not exist
        MakefileParseError: If a file includes itself, directly or indirectly
    """
    path = Path(path).resolve()
    stack = list(_stack or [])

    if path in stack:
        chain = " -> ".join(str(p) for p in stack + [path])
        raise MakefileParseError(f"Recursive include: {chain}", makefile=included_from)
    if not path.is_file():
        raise MakefileNotFoundError(path, included_from)

    stack.append(path)
    own_dir = normalize_dir(path.parent)
    is_included = included_from is not None

    lines = []
    for line in path.read_text(encoding="utf-8-sig").splitlines():
        match = LinePatterns.INCLUDE.match(line)
        if match:
            include_path = path.parent / match.group("path")
            log_include(include_path, path)
            lines.extend(read_makefile_lines(include_path, included_from=path, _stack=stack))
            lines.append("")
            continue

        if is_included:
            line = substitute_makefile_dir(line, own_dir)
        lines.append(line)

    return lines


def strip_trailing_comment(line: str, keep_help: bool = False) -> str:
    """
    Remove a trailing '# comment' from a line.

    The line is returned unchanged when the comment ends in an unescaped
    quote, since the '#' is then most likely part of a quoted string.

    Args:
        line: Line to clean
        keep_help: Keep a '## help text' comment (used on target lines)

    Examples:
        >>> strip_trailing_comment("CC := gcc  # compiler")
        'CC := gcc'
        >>> strip_trailing_comment('MSG := "a # b"')
        'MSG := "a # b"'
    """
    match = CommentPatterns.TRAILING.search(line)
    if not match:
        return line

    comment = match.group(0).strip()
    if CommentPatterns.QUOTE_ENDING.search(comment):
        return line
    if keep_help and comment.startswith(CommentPatterns.HELP_PREFIX):
        return line

    return line[: match.start()]


def strip_comments(lines: List[str], delete_command_comments: bool = False) -> List[str]:
    """
    Drop full-line comments and strip trailing comments.

    Variable and target lines lose their trailing comments (target lines keep
    '## help' text). Command lines keep theirs unless delete_command_comments
    is set, because '#' is often meaningful to the command itself.
    """
    cleaned = []
    for line in lines:
        if LinePatterns.FULL_COMMENT.match(line):
            continue

        if LinePatterns.COMMAND.match(line):
            if delete_command_comments:
                line = strip_trailing_comment(line)
        elif is_variable_line(line):
            line = strip_trailing_comment(line)
        else:
            line = strip_trailing_comment(line, keep_help=True)

        cleaned.append(line.rstrip())

    return cleaned


def merge_continuations(lines: List[str]) -> List[str]:
    """
    Join multi-line statements into single logical lines.

    A line ending in a backslash or backtick is joined to the next with a
    newline at the join point. On variable and target lines the continuation
    character is dropped; on command lines it stays, so the shell still sees
    one command. A line ending in '|' is joined with " |\\n" so the pipeline
    survives the join.

    Examples:
        >>> merge_continuations(["\\tcat a |", "\\t  sort"])
        ['\\tcat a |\\n\\t  sort']
        >>> merge_continuations(["all: a.txt \\\\", "    b.txt"])
        ['all: a.txt\\n    b.txt']
    """
    merged = []
    pending = None

    for line in lines:
        text = line if pending is None else pending + line

        if ContinuationPatterns.PIPE_JOIN.search(text):
            pending = ContinuationPatterns.PIPE_JOIN.sub("", text) + ContinuationPatterns.PIPE_SEPARATOR
            continue
        if ContinuationPatterns.NEWLINE_JOIN.search(text):
            if not LinePatterns.COMMAND.match(text):
                text = ContinuationPatterns.NEWLINE_JOIN.sub("", text)
            pending = text.rstrip() + "\n"
            continue

        merged.append(text)
        pending = None

    if pending is not None:
        # File ended on a continuation
        merged.append(pending.rstrip("\n"))

    return merged


def preprocess_makefile(path: Path, delete_command_comments: bool = False) -> PreprocessedMakefile:
    """
    Read a Makefile and return its logical lines.

    Args:
        path: Makefile to read
        delete_command_comments: Strip trailing comments from command lines too

    Returns:
        PreprocessedMakefile with includes inlined, comments removed and
        continuation lines merged
    """
    root_file = Path(path).resolve()
    lines = read_makefile_lines(root_file)
    lines = strip_comments(lines, delete_command_comments=delete_command_comments)
    lines = merge_continuations(lines)

    return PreprocessedMakefile(
        root_file=root_file,
        makefile_dir=normalize_dir(root_file.parent),
        lines=lines,
    )
