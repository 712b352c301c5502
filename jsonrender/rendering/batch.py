"""Batch orchestration: one template rendered once per JSON input file."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import PurePath, PurePosixPath

from jinja2 import Template, TemplateError, TemplateNotFound

from ..core.models import RenderConfig
from ..core.results import BatchError, BatchResult, ErrorKind, FileOutcome
from ..files.fileset import resolve_file_set
from ..files.paths import (
    OutputCollisionError,
    UnsafePathError,
    check_relative,
    derive_output_path,
    display_path,
    ensure_parent,
    find_collisions,
    relative_subdirectory,
)
from ..model.convert import to_model
from ..model.tree import JsonDocumentError, UnknownJsonKindError, parse_json
from .engine import load_template, render_model
from .io import atomic_sink

logger = logging.getLogger(__name__)


def _failure(
    kind: ErrorKind,
    message: str,
    input_path: PurePosixPath | None = None,
    cause: BaseException | None = None,
) -> BatchError:
    error = BatchError(kind=kind, message=message, input_path=input_path, cause=cause)
    logger.error(str(error))
    return error


def _check_collisions(outcomes: list[FileOutcome]) -> None:
    collisions = find_collisions((o.input_path, o.output_path) for o in outcomes)
    if collisions:
        details = "; ".join(
            f"{out} <- {', '.join(str(i) for i in inputs)}"
            for out, inputs in collisions.items()
        )
        raise OutputCollisionError(f"Several inputs map to the same output: {details}")


def _skip_output_tree(
    config: RenderConfig, included: list[PurePosixPath]
) -> list[PurePosixPath]:
    output_subdir = relative_subdirectory(
        config.output_directory, config.input_files.directory
    )
    if output_subdir is None:
        return included
    prefix = output_subdir.parts
    kept: list[PurePosixPath] = []
    for path in included:
        if path.parts[: len(prefix)] == prefix:
            logger.debug(f"Skipping {path}: inside the output directory")
            continue
        kept.append(path)
    return kept


def _resolve(
    config: RenderConfig, included: Sequence[PurePath] | None
) -> list[FileOutcome] | BatchError:
    if included is None:
        try:
            resolved = resolve_file_set(config.input_files)
        except OSError as exc:
            return _failure(
                ErrorKind.CONFIGURATION, "Cannot resolve input files", cause=exc
            )
        # Outputs written below the input base must not become inputs on a rerun
        inputs = _skip_output_tree(config, resolved)
    else:
        inputs = []
        for path in included:
            try:
                inputs.append(check_relative(PurePath(path)))
            except UnsafePathError as exc:
                return _failure(ErrorKind.CONFIGURATION, str(exc), cause=exc)

    outcomes = [
        FileOutcome(
            input_path=path,
            output_path=derive_output_path(path, config.output_extension),
        )
        for path in inputs
    ]
    try:
        _check_collisions(outcomes)
    except OutputCollisionError as exc:
        return _failure(ErrorKind.CONFIGURATION, str(exc), cause=exc)
    return outcomes


def _process_file(
    config: RenderConfig, template: Template, outcome: FileOutcome
) -> BatchError | None:
    base = config.project_base_dir
    input_file = config.input_files.directory / outcome.input_path
    output_file = config.output_directory / outcome.output_path

    # read JSON model
    logger.info(f"Input:    {display_path(input_file, base)}")
    try:
        document = parse_json(input_file.read_bytes())
        model = to_model(document)
    except (OSError, JsonDocumentError) as exc:
        return _failure(
            ErrorKind.INPUT, "Cannot read JSON input", outcome.input_path, exc
        )
    except UnknownJsonKindError as exc:
        return _failure(
            ErrorKind.INTERNAL, "JSON conversion failed", outcome.input_path, exc
        )

    # prepare output directory
    try:
        ensure_parent(output_file)
    except OSError as exc:
        return _failure(
            ErrorKind.CONFIGURATION,
            f"Cannot create output directory {output_file.parent}",
            outcome.input_path,
            exc,
        )

    # run the template and write the output file
    logger.info(f"Output:   {display_path(output_file, base)}")
    try:
        with atomic_sink(output_file, mode=config.file_mode) as sink:
            render_model(template, model, sink)
    except TemplateError as exc:
        return _failure(
            ErrorKind.RENDERING, "Template processing failed", outcome.input_path, exc
        )
    except OSError as exc:
        return _failure(
            ErrorKind.CONFIGURATION,
            f"Cannot write output file {output_file}",
            outcome.input_path,
            exc,
        )
    except Exception as exc:
        # Runtime errors raised from template expressions, e.g. Decimal + str
        return _failure(
            ErrorKind.RENDERING, "Template processing failed", outcome.input_path, exc
        )
    return None


def plan_batch(
    config: RenderConfig, included: Sequence[PurePath] | None = None
) -> list[FileOutcome] | BatchError:
    """Resolve inputs and derive their outputs without rendering anything.

    Args:
        config: Batch configuration
        included: Input paths relative to the input directory; resolved from
            ``config.input_files`` when omitted

    Returns:
        The input/output mapping in batch order, or the configuration error
        that prevents the batch from starting
    """
    return _resolve(config, included)


def run_batch(
    config: RenderConfig, included: Sequence[PurePath] | None = None
) -> BatchResult:
    """Render the configured template once per input file.

    The template is compiled once and the input list is taken once, before
    any file is processed. Processing stops at the first failure: outputs
    written for earlier files stay on disk, the failing file leaves no output
    behind, and later files are not touched.

    Args:
        config: Batch configuration
        included: Input paths relative to the input directory; resolved from
            ``config.input_files`` when omitted

    Returns:
        Outcome listing the files written and the error that stopped the
        batch, if any
    """
    template_path = config.template_directory / config.template_name
    try:
        template = load_template(
            config.template_directory, config.template_name, config.engine
        )
    except (OSError, TemplateNotFound) as exc:
        return BatchResult(
            error=_failure(ErrorKind.CONFIGURATION, "Template not found", cause=exc)
        )
    except TemplateError as exc:
        return BatchResult(
            error=_failure(
                ErrorKind.CONFIGURATION, "Template does not compile", cause=exc
            )
        )
    logger.info(f"Template: {display_path(template_path, config.project_base_dir)}")

    planned = _resolve(config, included)
    if isinstance(planned, BatchError):
        return BatchResult(error=planned)

    logger.info(f"Rendering {len(planned)} file(s)")
    rendered: list[FileOutcome] = []
    for outcome in planned:
        error = _process_file(config, template, outcome)
        if error is not None:
            return BatchResult(rendered=rendered, error=error)
        rendered.append(outcome)

    logger.info(f"Successfully rendered {len(rendered)} file(s)")
    return BatchResult(rendered=rendered)
