"""jsonrender - Batch template renderer for JSON documents.

Renders one Jinja2 template once per JSON input file, mirroring the input
tree's layout under the output directory.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Re-export main entry points
from .cli import main
from .core.models import EngineOptions, FileSet, RenderConfig
from .core.results import BatchError, BatchResult, ErrorKind, FileOutcome
from .rendering.batch import plan_batch, run_batch

__all__ = [
    "BatchError",
    "BatchResult",
    "EngineOptions",
    "ErrorKind",
    "FileOutcome",
    "FileSet",
    "RenderConfig",
    "main",
    "plan_batch",
    "run_batch",
]
