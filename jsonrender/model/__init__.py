"""JSON value tree and conversion into the template data model."""

from .convert import ModelValue, convert, to_model
from .tree import (
    MAX_NESTING_DEPTH,
    JsonDocumentError,
    JsonKind,
    JsonValue,
    UnknownJsonKindError,
    parse_json,
)

__all__ = [
    "MAX_NESTING_DEPTH",
    "JsonDocumentError",
    "JsonKind",
    "JsonValue",
    "ModelValue",
    "UnknownJsonKindError",
    "convert",
    "parse_json",
    "to_model",
]
