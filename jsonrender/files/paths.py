"""Output path derivation."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path, PurePath, PurePosixPath


class OutputCollisionError(ValueError):
    """Raised when distinct inputs derive the same output path."""


class UnsafePathError(ValueError):
    """Raised when an input path would place its output outside the output root."""


def check_relative(path: PurePath) -> PurePosixPath:
    """Return ``path`` as a POSIX path, rejecting absolute paths and ``..``."""
    if path.is_absolute() or path.anchor:
        raise UnsafePathError(f"Input path must be relative: {path}")
    posix = PurePosixPath(path.as_posix())
    if ".." in posix.parts:
        raise UnsafePathError(f"Input path must not contain '..': {path}")
    return posix


def relative_subdirectory(child: Path, parent: Path) -> PurePosixPath | None:
    """Return ``child`` relative to ``parent`` when it lies strictly beneath it."""
    try:
        relative = child.resolve().relative_to(parent.resolve())
    except ValueError:
        return None
    if not relative.parts:
        return None
    return PurePosixPath(relative.as_posix())


def derive_output_path(relative_input: PurePath, output_extension: str) -> PurePosixPath:
    """Swap the extension of an input path, keeping its directories.

    Everything from the last ``.`` of the file name onward is replaced by
    ``.<output_extension>``; a name without a dot keeps its whole name.
    ``a/b/.json`` therefore becomes ``a/b/.<ext>``.

    Args:
        relative_input: Input path relative to the input base directory
        output_extension: Extension without the leading dot

    Returns:
        Output path relative to the output directory
    """
    relative_input = PurePosixPath(relative_input)
    name = relative_input.name
    separator = name.rfind(".")
    base_name = name[:separator] if separator >= 0 else name
    return relative_input.parent / f"{base_name}.{output_extension}"


def ensure_parent(path: Path) -> None:
    """Ensure parent directories exist for the given path.

    Args:
        path: Path whose parent directories should be created
    """
    path.parent.mkdir(parents=True, exist_ok=True)


def find_collisions(
    mapping: Iterable[tuple[PurePosixPath, PurePosixPath]],
) -> dict[PurePosixPath, list[PurePosixPath]]:
    """Return output paths claimed by more than one input.

    Args:
        mapping: ``(input, output)`` pairs in batch order

    Returns:
        Colliding output path mapped to its inputs, in batch order
    """
    claimed: dict[PurePosixPath, list[PurePosixPath]] = {}
    for input_path, output_path in mapping:
        claimed.setdefault(output_path, []).append(input_path)
    return {out: inputs for out, inputs in claimed.items() if len(inputs) > 1}


def display_path(path: Path, base_dir: Path) -> str:
    """Render ``path`` relative to ``base_dir`` when it lies beneath it."""
    absolute = path.absolute()
    try:
        return str(absolute.relative_to(base_dir.absolute()))
    except ValueError:
        return str(absolute)
