"""Input file-set resolution with Ant-style include/exclude patterns.

Patterns are matched against the ``/``-separated path of each file relative
to the base directory:

* ``**`` matches zero or more whole directory levels
* ``*`` and ``?`` match within a single path segment
* a trailing ``/`` is shorthand for ``/**``

A pattern without any ``/`` only matches at the top level, so ``*.json``
selects ``a.json`` but not ``sub/a.json``; use ``**/*.json`` for the latter.
"""

from __future__ import annotations

import logging
from fnmatch import fnmatchcase
from pathlib import PurePosixPath

from ..core.models import FileSet

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDES = (
    "**/*~",
    "**/#*#",
    "**/.#*",
    "**/%*%",
    "**/._*",
    "**/CVS/**",
    "**/.cvsignore",
    "**/.svn/**",
    "**/.git/**",
    "**/.gitignore",
    "**/.gitattributes",
    "**/.hg/**",
    "**/.DS_Store",
)


def _split_pattern(pattern: str) -> tuple[str, ...]:
    normalized = pattern.strip().replace("\\", "/")
    if normalized.endswith("/"):
        normalized += "**"
    segments: list[str] = []
    for segment in normalized.split("/"):
        if not segment or segment == ".":
            continue
        # Consecutive ** segments are equivalent to a single one
        if segment == "**" and segments and segments[-1] == "**":
            continue
        segments.append(segment)
    return tuple(segments)


def _match_segments(pattern: tuple[str, ...], parts: tuple[str, ...]) -> bool:
    if not pattern:
        return not parts
    head, rest = pattern[0], pattern[1:]
    if head == "**":
        return any(_match_segments(rest, parts[i:]) for i in range(len(parts) + 1))
    if not parts:
        return False
    return fnmatchcase(parts[0], head) and _match_segments(rest, parts[1:])


def match_pattern(pattern: str, relative_path: PurePosixPath | str) -> bool:
    """Return True when ``relative_path`` matches the Ant-style ``pattern``."""
    return _match_segments(_split_pattern(pattern), PurePosixPath(relative_path).parts)


def resolve_file_set(file_set: FileSet) -> list[PurePosixPath]:
    """List the regular files selected by a file set.

    The listing is taken once and sorted, so the batch order does not depend
    on directory iteration order.

    Args:
        file_set: Base directory and patterns

    Returns:
        Included file paths relative to the base directory

    Raises:
        NotADirectoryError: The base directory does not exist or is not a
            directory
    """
    base_dir = file_set.directory
    if not base_dir.is_dir():
        raise NotADirectoryError(f"Input directory not found: {base_dir}")

    includes = [_split_pattern(p) for p in file_set.effective_includes]
    excludes = [_split_pattern(p) for p in file_set.excludes]
    if file_set.use_default_excludes:
        excludes.extend(_split_pattern(p) for p in DEFAULT_EXCLUDES)

    selected: list[PurePosixPath] = []
    for candidate in base_dir.rglob("*"):
        if not candidate.is_file():
            continue
        relative = PurePosixPath(candidate.relative_to(base_dir).as_posix())
        parts = relative.parts
        if not any(_match_segments(p, parts) for p in includes):
            continue
        if any(_match_segments(p, parts) for p in excludes):
            logger.debug(f"Excluded {relative}")
            continue
        selected.append(relative)

    selected.sort()
    logger.debug(f"Resolved {len(selected)} input file(s) under {base_dir}")
    return selected
