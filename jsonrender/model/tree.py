"""Tagged JSON value tree.

Parsing goes through the standard library ``json`` module with exact number
handling, then the raw Python values are tagged with a :class:`JsonKind` so
the converter can dispatch over an explicit, closed set of kinds.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Union

# Objects and arrays nested deeper than this are rejected, never truncated.
MAX_NESTING_DEPTH = 256


class JsonDocumentError(ValueError):
    """Raised when an input document is not acceptable JSON."""


class UnknownJsonKindError(RuntimeError):
    """Raised when a value outside the JSON kinds reaches the tree or converter."""


class JsonKind(Enum):
    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"


Number = Union[int, Decimal]


@dataclass(frozen=True)
class JsonValue:
    """One node of a parsed JSON document.

    ``payload`` depends on ``kind``: a tuple of ``(key, JsonValue)`` pairs for
    objects, a tuple of ``JsonValue`` for arrays, ``str`` for strings,
    ``int`` or ``Decimal`` for numbers, ``bool`` for booleans and ``None``
    for null.
    """

    kind: JsonKind
    payload: Any = None

    @classmethod
    def object(cls, members: dict[str, JsonValue]) -> JsonValue:
        return cls(JsonKind.OBJECT, tuple(members.items()))

    @classmethod
    def array(cls, items: list[JsonValue]) -> JsonValue:
        return cls(JsonKind.ARRAY, tuple(items))

    @classmethod
    def string(cls, text: str) -> JsonValue:
        return cls(JsonKind.STRING, text)

    @classmethod
    def number(cls, value: Number) -> JsonValue:
        return cls(JsonKind.NUMBER, value)

    @classmethod
    def boolean(cls, value: bool) -> JsonValue:
        return cls(JsonKind.BOOLEAN, value)

    @classmethod
    def null(cls) -> JsonValue:
        return cls(JsonKind.NULL, None)


def _parse_int(text: str) -> Number:
    try:
        return int(text)
    except ValueError:
        # Beyond the interpreter's int digit limit; Decimal is still exact.
        return Decimal(text)


def _reject_constant(name: str) -> Any:
    raise JsonDocumentError(f"Non-standard JSON constant not allowed: {name}")


def _tag(raw: Any, depth: int) -> JsonValue:
    if isinstance(raw, dict):
        if depth >= MAX_NESTING_DEPTH:
            raise JsonDocumentError(
                f"JSON document nests deeper than {MAX_NESTING_DEPTH} levels"
            )
        members = []
        for key, value in raw.items():
            members.append((key, _tag(value, depth + 1)))
        return JsonValue(JsonKind.OBJECT, tuple(members))
    if isinstance(raw, list):
        if depth >= MAX_NESTING_DEPTH:
            raise JsonDocumentError(
                f"JSON document nests deeper than {MAX_NESTING_DEPTH} levels"
            )
        items = []
        for item in raw:
            items.append(_tag(item, depth + 1))
        return JsonValue(JsonKind.ARRAY, tuple(items))
    if isinstance(raw, str):
        return JsonValue(JsonKind.STRING, raw)
    # bool is a subclass of int and must be checked first
    if isinstance(raw, bool):
        return JsonValue(JsonKind.BOOLEAN, raw)
    if isinstance(raw, (int, Decimal)):
        return JsonValue(JsonKind.NUMBER, raw)
    if raw is None:
        return JsonValue(JsonKind.NULL, None)
    raise UnknownJsonKindError(f"Unknown JSON value type {type(raw).__name__}")


def parse_json(data: bytes | str) -> JsonValue:
    """Parse a JSON document into a tagged value tree.

    Args:
        data: Raw UTF-8 bytes (a leading BOM is accepted) or decoded text

    Returns:
        Root node of the document

    Raises:
        JsonDocumentError: The document is not valid UTF-8 or not valid JSON,
            or it nests deeper than ``MAX_NESTING_DEPTH``
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise JsonDocumentError(f"Input is not valid UTF-8: {exc}") from exc
    else:
        text = data

    try:
        raw = json.loads(
            text,
            parse_float=Decimal,
            parse_int=_parse_int,
            parse_constant=_reject_constant,
        )
    except JsonDocumentError:
        raise
    except RecursionError as exc:
        raise JsonDocumentError(
            f"JSON document nests deeper than {MAX_NESTING_DEPTH} levels"
        ) from exc
    except ValueError as exc:
        raise JsonDocumentError(f"Malformed JSON: {exc}") from exc

    return _tag(raw, 0)
