"""Domain models for batch rendering configuration."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_INCLUDES = ("**",)


class FileSet(BaseModel):
    """A base directory plus include/exclude patterns selecting input files."""

    model_config = ConfigDict(frozen=True)

    directory: Path = Field(..., description="Input base directory")
    includes: tuple[str, ...] = Field(
        default=(), description="Include patterns (all files when empty)"
    )
    excludes: tuple[str, ...] = Field(default=(), description="Exclude patterns")
    use_default_excludes: bool = Field(
        default=True, description="Skip VCS metadata and editor backup files"
    )

    @property
    def effective_includes(self) -> tuple[str, ...]:
        return self.includes or DEFAULT_INCLUDES


class EngineOptions(BaseModel):
    """Jinja2 environment settings shared by every render in a batch."""

    model_config = ConfigDict(frozen=True)

    strict_undefined: bool = Field(
        default=True, description="Treat undefined template variables as errors"
    )
    trim_blocks: bool = True
    lstrip_blocks: bool = True
    keep_trailing_newline: bool = True
    template_encoding: str = Field(
        default="utf-8", description="Encoding of template source files"
    )


class RenderConfig(BaseModel):
    """Immutable configuration for one batch invocation."""

    model_config = ConfigDict(frozen=True)

    template_directory: Path = Field(..., description="Template root directory")
    template_name: str = Field(
        ..., min_length=1, description="Template file name relative to the root"
    )
    input_files: FileSet = Field(..., description="Selected JSON input documents")
    output_directory: Path = Field(..., description="Output root directory")
    output_extension: str = Field(
        ..., description="Extension of every output file, without the dot"
    )
    project_base_dir: Path = Field(
        default_factory=Path.cwd, description="Base directory for logged paths"
    )
    file_mode: int = Field(default=0o644, description="File permissions (octal)")
    engine: EngineOptions = Field(default_factory=EngineOptions)

    @field_validator("output_extension")
    @classmethod
    def _check_extension(cls, value: str) -> str:
        if not value:
            raise ValueError("output extension must not be empty")
        if value.startswith("."):
            raise ValueError(
                f"output extension must be given without the leading dot: {value!r}"
            )
        if "/" in value or "\\" in value:
            raise ValueError(f"output extension must not contain a path separator: {value!r}")
        return value

    @field_validator("file_mode")
    @classmethod
    def _check_file_mode(cls, value: int) -> int:
        if not 0 <= value <= 0o7777:
            raise ValueError(f"invalid file mode: {oct(value)}")
        return value
