"""Batch outcome values.

A batch never raises for data or template problems. Every failure is
reported as a :class:`BatchError` inside the returned :class:`BatchResult`,
tagged with an :class:`ErrorKind` so callers can tell a broken setup from
broken input or a template/data mismatch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath


class ErrorKind(str, Enum):
    """Category of a batch failure."""

    CONFIGURATION = "configuration"
    INPUT = "input"
    RENDERING = "rendering"
    INTERNAL = "internal"

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self]


_EXIT_CODES = {
    ErrorKind.CONFIGURATION: 2,
    ErrorKind.INPUT: 3,
    ErrorKind.RENDERING: 4,
    ErrorKind.INTERNAL: 5,
}


@dataclass(frozen=True)
class FileOutcome:
    input_path: PurePosixPath
    output_path: PurePosixPath


@dataclass(frozen=True)
class BatchError:
    kind: ErrorKind
    message: str
    input_path: PurePosixPath | None = None
    cause: BaseException | None = None

    def __str__(self) -> str:
        text = f"{self.kind.value} error: {self.message}"
        if self.input_path is not None:
            text = f"{text} (input: {self.input_path})"
        if self.cause is not None:
            text = f"{text}: {self.cause}"
        return text


@dataclass(frozen=True)
class BatchResult:
    rendered: list[FileOutcome] = field(default_factory=list)
    error: BatchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
