"""CLI argument parsers and validators."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
import yaml


def parse_file_mode(value: str | int) -> int:
    """Parse octal file mode string."""
    if isinstance(value, int):
        return value
    try:
        return int(value, 8)
    except ValueError as e:
        raise typer.BadParameter(f"Invalid octal mode: {value!r}") from e


def parse_extension(value: str) -> str:
    """Accept ``txt`` or ``.txt`` and return the extension without the dot."""
    extension = value.strip()
    if extension.startswith("."):
        extension = extension[1:]
    if not extension:
        raise typer.BadParameter(f"Empty output extension: {value!r}")
    return extension


def _resolve_against(base: Path, value: Any) -> Any:
    if value in (None, ""):
        return value
    path = Path(value).expanduser()
    return path if path.is_absolute() else base / path


def load_config_file(path: Path) -> dict[str, Any]:
    """Load a YAML batch configuration file.

    Keys mirror ``RenderConfig``. Relative paths are resolved against the
    directory holding the file, which also becomes the default project
    base directory.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as e:
        raise typer.BadParameter(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise typer.BadParameter(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise typer.BadParameter(f"Config file {path} must contain a mapping")

    base = path.parent.absolute()
    for key in ("template_directory", "output_directory", "project_base_dir"):
        if key in data:
            data[key] = _resolve_against(base, data[key])

    input_files = data.get("input_files")
    if input_files is not None:
        if not isinstance(input_files, dict):
            raise typer.BadParameter("'input_files' must be a mapping")
        if "directory" in input_files:
            input_files["directory"] = _resolve_against(base, input_files["directory"])

    if "file_mode" in data:
        data["file_mode"] = parse_file_mode(data["file_mode"])
    data.setdefault("project_base_dir", base)
    return data
