from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment defaults, overridden by a config file and CLI flags."""

    model_config = SettingsConfigDict(env_prefix="JSONRENDER_", case_sensitive=False)

    template_directory: Path = Path("templates")
    project_base_dir: Path | None = None
    output_extension: str | None = None
    file_mode: str = "0644"
    use_default_excludes: bool = True
    strict_undefined: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True
    keep_trailing_newline: bool = True
    template_encoding: str = "utf-8"
