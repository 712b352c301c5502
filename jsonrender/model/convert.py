"""Conversion of tagged JSON trees into the template data model."""

from __future__ import annotations

from decimal import Decimal
from typing import Union

from .tree import JsonDocumentError, JsonKind, JsonValue, UnknownJsonKindError

ModelValue = Union[
    dict[str, "ModelValue"], list["ModelValue"], str, int, Decimal, bool, None
]


def convert(value: JsonValue) -> ModelValue:
    """Convert one JSON node into plain Python containers and scalars.

    Objects become insertion-ordered ``dict``, arrays ``list``, numbers stay
    ``int`` or ``Decimal`` so no float rounding reaches the template.
    Recursion depth equals document nesting depth, which ``parse_json``
    bounds to ``MAX_NESTING_DEPTH``.

    Raises:
        UnknownJsonKindError: The node carries a kind outside ``JsonKind``
    """
    kind = value.kind
    if kind is JsonKind.OBJECT:
        mapping: dict[str, ModelValue] = {}
        for name, member in value.payload:
            mapping[name] = convert(member)
        return mapping
    if kind is JsonKind.ARRAY:
        sequence: list[ModelValue] = []
        for item in value.payload:
            sequence.append(convert(item))
        return sequence
    if kind is JsonKind.STRING:
        return value.payload
    if kind is JsonKind.NUMBER:
        return value.payload
    if kind is JsonKind.BOOLEAN:
        return bool(value.payload)
    if kind is JsonKind.NULL:
        return None
    raise UnknownJsonKindError(f"Unknown JSON value type {kind!r}")


def to_model(document: JsonValue) -> dict[str, ModelValue]:
    """Convert a whole document; its top level must be a JSON object."""
    if document.kind is not JsonKind.OBJECT:
        raise JsonDocumentError(
            f"Expected a JSON object at the top level, got {document.kind.value}"
        )
    return convert(document)  # type: ignore[return-value]
