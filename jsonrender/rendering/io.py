"""File I/O operations for rendering."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

from ..files.paths import ensure_parent


@contextmanager
def atomic_sink(
    path: Path, encoding: str = "utf-8", mode: int = 0o644
) -> Iterator[TextIO]:
    """Open a text sink that replaces ``path`` only when the block succeeds.

    Text is written to a temporary file next to the destination. On normal
    exit it is flushed, synced and renamed over ``path``; if the block raises
    the temporary file is removed and ``path`` is left untouched.

    Args:
        path: Destination file path
        encoding: Output text encoding
        mode: File permissions (octal)
    """
    ensure_parent(path)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as tmp:
            yield tmp
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
        os.chmod(path, mode)
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)

