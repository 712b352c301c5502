"""Main CLI application."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from typing_extensions import Annotated

from ..core.models import RenderConfig
from ..core.results import BatchError, ErrorKind
from ..core.settings import Settings
from ..rendering import batch
from .parsers import load_config_file, parse_extension, parse_file_mode

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="jsonrender",
    help="Render one Jinja2 template per JSON input file.",
    no_args_is_help=True,
)

ConfigOpt = Annotated[
    str,
    typer.Option(
        "--config",
        "-c",
        help="YAML file with batch settings; flags override its values.",
        metavar="FILE",
    ),
]
TemplateDirOpt = Annotated[
    str,
    typer.Option(
        "--template-dir",
        help="Directory templates are loaded from (default: ./templates).",
        metavar="DIR",
    ),
]
TemplateOpt = Annotated[
    str,
    typer.Option(
        "--template",
        "-t",
        help="Template file name relative to the template directory.",
        metavar="NAME",
    ),
]
InputDirOpt = Annotated[
    str,
    typer.Option(
        "--input-dir",
        "-i",
        help="Base directory of the JSON input files.",
        metavar="DIR",
    ),
]
IncludeOpt = Annotated[
    list[str],
    typer.Option(
        "--include",
        help="Include pattern such as '**/*.json' (default: all files). Repeatable.",
        metavar="PATTERN",
    ),
]
ExcludeOpt = Annotated[
    list[str],
    typer.Option(
        "--exclude",
        help="Exclude pattern. Repeatable.",
        metavar="PATTERN",
    ),
]
NoDefaultExcludesOpt = Annotated[
    bool,
    typer.Option(
        "--no-default-excludes",
        help="Also select VCS metadata and editor backup files.",
    ),
]
OutputDirOpt = Annotated[
    str,
    typer.Option(
        "--output-dir",
        "-o",
        help="Directory the rendered files are written to.",
        metavar="DIR",
    ),
]
ExtensionOpt = Annotated[
    str,
    typer.Option(
        "--extension",
        "-e",
        help="Extension of every output file, without the dot.",
        metavar="EXT",
    ),
]
ProjectDirOpt = Annotated[
    str,
    typer.Option(
        "--project-dir",
        help="Base directory used to shorten logged paths (default: cwd).",
        metavar="DIR",
    ),
]
VerboseOpt = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Enable verbose logging.",
    ),
]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _settings_defaults(settings: Settings) -> dict[str, Any]:
    defaults: dict[str, Any] = {
        "template_directory": settings.template_directory,
        "file_mode": parse_file_mode(settings.file_mode),
        "input_files": {"use_default_excludes": settings.use_default_excludes},
        "engine": {
            "strict_undefined": settings.strict_undefined,
            "trim_blocks": settings.trim_blocks,
            "lstrip_blocks": settings.lstrip_blocks,
            "keep_trailing_newline": settings.keep_trailing_newline,
            "template_encoding": settings.template_encoding,
        },
    }
    if settings.project_base_dir is not None:
        defaults["project_base_dir"] = settings.project_base_dir
    if settings.output_extension:
        defaults["output_extension"] = parse_extension(settings.output_extension)
    return defaults


def build_config(
    config_file: str = "",
    template_dir: str = "",
    template: str = "",
    input_dir: str = "",
    includes: list[str] | None = None,
    excludes: list[str] | None = None,
    no_default_excludes: bool = False,
    output_dir: str = "",
    extension: str = "",
    file_mode: str = "",
    project_dir: str = "",
    lenient: bool = False,
) -> RenderConfig:
    """Combine environment settings, the config file and CLI flags.

    Raises:
        pydantic.ValidationError: The combined values are incomplete or invalid
        typer.BadParameter: A flag or the config file cannot be parsed
    """
    data = _settings_defaults(Settings())
    if config_file:
        data = _merge(data, load_config_file(Path(config_file)))

    overrides: dict[str, Any] = {}
    input_overrides: dict[str, Any] = {}
    if template_dir:
        overrides["template_directory"] = Path(template_dir)
    if template:
        overrides["template_name"] = template
    if output_dir:
        overrides["output_directory"] = Path(output_dir)
    if extension:
        overrides["output_extension"] = parse_extension(extension)
    if file_mode:
        overrides["file_mode"] = parse_file_mode(file_mode)
    if project_dir:
        overrides["project_base_dir"] = Path(project_dir)
    if lenient:
        overrides["engine"] = {"strict_undefined": False}
    if input_dir:
        input_overrides["directory"] = Path(input_dir)
    if includes:
        input_overrides["includes"] = list(includes)
    if excludes:
        input_overrides["excludes"] = list(excludes)
    if no_default_excludes:
        input_overrides["use_default_excludes"] = False
    if input_overrides:
        overrides["input_files"] = input_overrides

    return RenderConfig.model_validate(_merge(data, overrides))


def _load_or_exit(**kwargs: Any) -> RenderConfig:
    try:
        return build_config(**kwargs)
    except ValidationError as e:
        logger.error(f"Invalid configuration:\n{e}")
        raise typer.Exit(code=ErrorKind.CONFIGURATION.exit_code) from e


@app.command()
def render(
    config_file: ConfigOpt = "",
    template_dir: TemplateDirOpt = "",
    template: TemplateOpt = "",
    input_dir: InputDirOpt = "",
    includes: IncludeOpt = [],
    excludes: ExcludeOpt = [],
    no_default_excludes: NoDefaultExcludesOpt = False,
    output_dir: OutputDirOpt = "",
    extension: ExtensionOpt = "",
    file_mode: Annotated[
        str,
        typer.Option(
            "--mode",
            help="File permissions of the output files in octal (default: 0644).",
            metavar="OCTAL",
        ),
    ] = "",
    project_dir: ProjectDirOpt = "",
    lenient: Annotated[
        bool,
        typer.Option(
            "--lenient",
            help="Render undefined template variables as empty instead of failing.",
        ),
    ] = False,
    verbose: VerboseOpt = False,
) -> None:
    """Render the template once for every selected JSON input file."""
    _configure_logging(verbose)
    logger.debug("Starting jsonrender")

    config = _load_or_exit(
        config_file=config_file,
        template_dir=template_dir,
        template=template,
        input_dir=input_dir,
        includes=includes,
        excludes=excludes,
        no_default_excludes=no_default_excludes,
        output_dir=output_dir,
        extension=extension,
        file_mode=file_mode,
        project_dir=project_dir,
        lenient=lenient,
    )
    logger.debug(f"Config: {config.model_dump_json()}")

    result = batch.run_batch(config)
    if result.error is not None:
        raise typer.Exit(code=result.error.kind.exit_code)

    logger.debug(f"Completed: {len(result.rendered)} file(s) rendered")


@app.command()
def plan(
    config_file: ConfigOpt = "",
    template_dir: TemplateDirOpt = "",
    template: TemplateOpt = "",
    input_dir: InputDirOpt = "",
    includes: IncludeOpt = [],
    excludes: ExcludeOpt = [],
    no_default_excludes: NoDefaultExcludesOpt = False,
    output_dir: OutputDirOpt = "",
    extension: ExtensionOpt = "",
    verbose: VerboseOpt = False,
) -> None:
    """Show which output file each selected input would produce."""
    _configure_logging(verbose)

    config = _load_or_exit(
        config_file=config_file,
        template_dir=template_dir,
        template=template,
        input_dir=input_dir,
        includes=includes,
        excludes=excludes,
        no_default_excludes=no_default_excludes,
        output_dir=output_dir,
        extension=extension,
    )

    planned = batch.plan_batch(config)
    if isinstance(planned, BatchError):
        raise typer.Exit(code=planned.kind.exit_code)

    for outcome in planned:
        typer.echo(f"{outcome.input_path} -> {outcome.output_path}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
