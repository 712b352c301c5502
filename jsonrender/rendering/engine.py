"""Template rendering engine."""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, TextIO

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    Undefined,
)

from ..core.models import EngineOptions

logger = logging.getLogger(__name__)


def to_decimal(value: Any) -> Decimal:
    """Convert a template value to ``Decimal`` for exact arithmetic.

    JSON fractions reach templates as ``Decimal`` while Jinja float literals
    are ``float``; the two do not mix, so literals go through this filter:
    ``{{ price * "1.5"|decimal }}``. Floats are converted via their shortest
    repr, so ``1.5|decimal`` is ``Decimal("1.5")``.
    """
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def build_environment(template_directory: Path, options: EngineOptions) -> Environment:
    """Create the Jinja2 environment shared by one batch.

    Args:
        template_directory: Loader search path
        options: Engine settings

    Returns:
        Configured environment
    """
    loader = FileSystemLoader(
        str(template_directory), encoding=options.template_encoding
    )
    env = Environment(
        loader=loader,
        undefined=StrictUndefined if options.strict_undefined else Undefined,
        autoescape=False,
        trim_blocks=options.trim_blocks,
        lstrip_blocks=options.lstrip_blocks,
        keep_trailing_newline=options.keep_trailing_newline,
    )
    env.filters["decimal"] = to_decimal
    env.globals["Decimal"] = Decimal
    return env


def load_template(
    template_directory: Path, template_name: str, options: EngineOptions
) -> Template:
    """Load and compile a Jinja2 template from the template directory.

    Args:
        template_directory: Template root directory
        template_name: Template file name relative to the root
        options: Engine settings

    Returns:
        Compiled Jinja2 template

    Raises:
        FileNotFoundError: The template directory does not exist
        jinja2.TemplateNotFound: No such template under the directory
        jinja2.TemplateSyntaxError: The template does not compile
    """
    if not template_directory.is_dir():
        raise FileNotFoundError(f"Template directory not found: {template_directory}")

    env = build_environment(template_directory, options)
    return env.get_template(template_name)


def render_model(template: Template, model: dict[str, Any], sink: TextIO) -> None:
    """Render one data model into an open text sink.

    Engine errors propagate unchanged.
    """
    logger.debug(f"Rendering template: {template.name}")
    template.stream(model).dump(sink)
