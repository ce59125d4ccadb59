"""Conversion between Python values and nGQL literal text.

Encoding turns an application value into the literal embedded in a statement;
decoding turns a cell of a result string table back into a typed value. Both
directions dispatch on the declared field type, parsed from the first token of
a schema declaration such as ``"string NOT NULL"`` or ``"int64 DEFAULT 0"``.

Besides the engine's native types, two composite pseudo-types are supported.
They are stored as JSON text in ``string`` properties:

    LIST    a JSON array, decoded to ``list``
    DICT    a JSON object, decoded to ``dict``
"""

from __future__ import annotations

import json
import math
import re
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple, Union

from ..errors import ContractViolation, DecodeError, TypeMismatch, UnsupportedType

Value = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

NULL_CELL = "__NULL__"
UNKNOWN_PROP_CELL = "UNKNOWN_PROP"
NULL_LITERAL = "NULL"

# Text form the engine uses for datetime cells, and the form handed to callers.
ENGINE_DATETIME_FORMATS = ("%Y-%m-%dT%H:%M:%S.%f", "%Y-%m-%dT%H:%M:%S")
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class FieldType(str, Enum):
    """Field types understood by the codec."""

    INT = "INT"
    INT64 = "INT64"
    INT32 = "INT32"
    INT16 = "INT16"
    INT8 = "INT8"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    BOOL = "BOOL"
    STRING = "STRING"
    DATE = "DATE"
    TIME = "TIME"
    DATETIME = "DATETIME"
    TIMESTAMP = "TIMESTAMP"
    LIST = "LIST"
    DICT = "DICT"

    @classmethod
    def parse(cls, declaration: str, field: Optional[str] = None) -> "FieldType":
        """Parse the type keyword out of a field declaration.

        Raises:
            UnsupportedType: If the first token is not a known keyword.
        """
        tokens = (declaration or "").split()
        written = tokens[0] if tokens else ""
        try:
            return cls(written.upper())
        except ValueError:
            raise UnsupportedType(
                f"data type '{written or declaration}'{_for_field(field)} "
                "not supported by this nebula client"
            ) from None


NUMBER_TYPES: FrozenSet[FieldType] = frozenset(
    {
        FieldType.INT,
        FieldType.INT64,
        FieldType.INT32,
        FieldType.INT16,
        FieldType.INT8,
        FieldType.FLOAT,
        FieldType.DOUBLE,
        FieldType.BOOL,
        FieldType.TIMESTAMP,
    }
)
TIME_TYPES: FrozenSet[FieldType] = frozenset(
    {FieldType.DATE, FieldType.TIME, FieldType.DATETIME}
)
COMPOSITE_TYPES: FrozenSet[FieldType] = frozenset({FieldType.LIST, FieldType.DICT})
SEARCHABLE_TYPES: FrozenSet[FieldType] = frozenset(
    {FieldType.STRING, FieldType.LIST, FieldType.DICT}
)

# Signed bit ranges used when decoding integers.
_INT_BITS: Dict[FieldType, int] = {
    FieldType.INT: 64,
    FieldType.INT64: 64,
    FieldType.INT32: 32,
    FieldType.INT16: 16,
    FieldType.INT8: 8,
    FieldType.TIMESTAMP: 64,
}

# Literal forms the engine parses; int() and float() are more lenient.
_INT_LITERAL = re.compile(r"[+-]?[0-9]+")
_FLOAT_LITERAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

_TRUE_TEXT = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_TEXT = {"0", "f", "F", "FALSE", "false", "False"}


def _for_field(field: Optional[str]) -> str:
    return f" of field '{field}'" if field else ""


def storage_declaration(declaration: str) -> str:
    """Return the declaration as written into a CREATE/ALTER statement.

    Composite pseudo-types are stored as strings, so their keyword is
    rewritten to ``string`` while storage modifiers are kept.
    """
    tokens = declaration.strip().split(" ")
    if tokens[0].lower() in ("list", "dict"):
        tokens[0] = "string"
    return " ".join(tokens)


def quote_string(text: str) -> str:
    """Render text as a double-quoted nGQL string literal."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def strip_quotes(text: str) -> str:
    """Strip one layer of surrounding double quotes."""
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text


# =============================================================================
# Encoding
# =============================================================================


def _encode_number(ftype: FieldType, value: Any, field: Optional[str]) -> str:
    if isinstance(value, bool):
        raise TypeMismatch(
            f"expected a number{_for_field(field)} declared '{ftype.value}', got bool"
        )
    integral = ftype not in (FieldType.FLOAT, FieldType.DOUBLE)
    if isinstance(value, str):
        text = value.strip()
        pattern = _INT_LITERAL if integral else _FLOAT_LITERAL
        if not pattern.fullmatch(text):
            raise TypeMismatch(
                f"'{value}' is not a valid {ftype.value} value{_for_field(field)}"
            )
        return text
    if isinstance(value, float) and not math.isfinite(value):
        raise TypeMismatch(f"{value!r} is not a valid {ftype.value} value{_for_field(field)}")
    if isinstance(value, Decimal) and not value.is_finite():
        raise TypeMismatch(f"{value!r} is not a valid {ftype.value} value{_for_field(field)}")
    if isinstance(value, (int, Decimal)) or (not integral and isinstance(value, float)):
        return str(value)
    raise TypeMismatch(
        f"expected a number{_for_field(field)} declared '{ftype.value}', "
        f"got {type(value).__name__}"
    )


def _encode_bool(ftype: FieldType, value: Any, field: Optional[str]) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower()
    raise TypeMismatch(f"expected a bool value{_for_field(field)}, got {value!r}")


def _encode_string(ftype: FieldType, value: Any, field: Optional[str]) -> str:
    return quote_string("" if value is None else str(value))


def _encode_time(ftype: FieldType, value: Any, field: Optional[str]) -> str:
    if value is None:
        return NULL_LITERAL
    if not isinstance(value, str):
        raise TypeMismatch(f"expected a string value{_for_field(field)}, got {value!r}")
    text = value.strip()
    if not text:
        return NULL_LITERAL
    return f"{ftype.value.lower()}({quote_string(text)})"


def _encode_timestamp(ftype: FieldType, value: Any, field: Optional[str]) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, Decimal) and value == value.to_integral_value():
        return str(int(value))
    raise TypeMismatch(f"invalid timestamp value{_for_field(field)}: {value!r}")


def _dump_json(ftype: FieldType, value: Any, field: Optional[str]) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise TypeMismatch(
            f"illegal '{ftype.value.lower()}' value{_for_field(field)} {value!r}. {e}"
        ) from e


def _encode_list(ftype: FieldType, value: Any, field: Optional[str]) -> str:
    if value is None or (isinstance(value, (list, tuple)) and not value):
        return "'[]'"
    text = _dump_json(ftype, value, field)
    escaped = text.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _encode_dict(ftype: FieldType, value: Any, field: Optional[str]) -> str:
    if value is None or (isinstance(value, dict) and not value):
        return "'{}'"
    return quote_string(_dump_json(ftype, value, field))


_Encoder = Callable[[FieldType, Any, Optional[str]], str]

_ENCODERS: Dict[FieldType, _Encoder] = {
    FieldType.INT: _encode_number,
    FieldType.INT64: _encode_number,
    FieldType.INT32: _encode_number,
    FieldType.INT16: _encode_number,
    FieldType.INT8: _encode_number,
    FieldType.FLOAT: _encode_number,
    FieldType.DOUBLE: _encode_number,
    FieldType.BOOL: _encode_bool,
    FieldType.STRING: _encode_string,
    FieldType.DATE: _encode_time,
    FieldType.TIME: _encode_time,
    FieldType.DATETIME: _encode_time,
    FieldType.TIMESTAMP: _encode_timestamp,
    FieldType.LIST: _encode_list,
    FieldType.DICT: _encode_dict,
}


def encode_value(declaration: str, value: Any, field: Optional[str] = None) -> str:
    """Translate a Python value into the nGQL literal for its declared type.

    Args:
        declaration: Field type declaration, e.g. ``"string"`` or ``"int64 NOT NULL"``.
        value: Value to encode.
        field: Field name, only used in error messages.

    Returns:
        Literal text ready to embed into a statement.

    Raises:
        UnsupportedType: The declaration does not name a supported type.
        TypeMismatch: The value cannot be represented as the declared type.
    """
    ftype = FieldType.parse(declaration, field)
    return _ENCODERS[ftype](ftype, value, field)


# =============================================================================
# Decoding
# =============================================================================

_ZERO_VALUES: Dict[FieldType, Callable[[], Value]] = {
    FieldType.INT: int,
    FieldType.INT64: int,
    FieldType.INT32: int,
    FieldType.INT16: int,
    FieldType.INT8: int,
    FieldType.TIMESTAMP: int,
    FieldType.FLOAT: float,
    FieldType.DOUBLE: float,
    FieldType.BOOL: bool,
    FieldType.STRING: str,
    FieldType.DATE: str,
    FieldType.TIME: str,
    FieldType.DATETIME: str,
    FieldType.LIST: list,
    FieldType.DICT: dict,
}


def _decode_int(ftype: FieldType, cell: str, field: Optional[str]) -> Value:
    if not _INT_LITERAL.fullmatch(cell):
        raise DecodeError(f"'{cell}' is not a valid {ftype.value} value{_for_field(field)}")
    number = int(cell)
    bits = _INT_BITS[ftype]
    if not -(1 << (bits - 1)) <= number < (1 << (bits - 1)):
        raise DecodeError(f"value {cell}{_for_field(field)} out of range for {ftype.value}")
    return number


def _decode_float(ftype: FieldType, cell: str, field: Optional[str]) -> Value:
    try:
        return float(cell)
    except ValueError:
        raise DecodeError(
            f"'{cell}' is not a valid {ftype.value} value{_for_field(field)}"
        ) from None


def _decode_bool(ftype: FieldType, cell: str, field: Optional[str]) -> Value:
    if cell in _TRUE_TEXT:
        return True
    if cell in _FALSE_TEXT:
        return False
    raise DecodeError(f"'{cell}' is not a valid BOOL value{_for_field(field)}")


def _decode_text(ftype: FieldType, cell: str, field: Optional[str]) -> Value:
    return strip_quotes(cell)


def _decode_datetime(ftype: FieldType, cell: str, field: Optional[str]) -> Value:
    raw = strip_quotes(cell)
    for fmt in ENGINE_DATETIME_FORMATS:
        try:
            return datetime.strptime(raw, fmt).strftime(DATETIME_FORMAT)
        except ValueError:
            continue
    raise ContractViolation(
        "nebula datetime format changed",
        detail=f"cannot parse '{raw}'{_for_field(field)}",
    )


def _decode_json(ftype: FieldType, cell: str, field: Optional[str]) -> Value:
    expected: Tuple[type, str] = (list, "list") if ftype is FieldType.LIST else (dict, "dict")
    try:
        value = json.loads(strip_quotes(cell))
    except ValueError as e:
        raise DecodeError(
            f"data in nebula is not a {expected[1]}{_for_field(field)}, "
            f"field type '{ftype.value}'. {e}"
        ) from e
    if not isinstance(value, expected[0]):
        raise DecodeError(
            f"data in nebula is not a {expected[1]}{_for_field(field)}, "
            f"field type '{ftype.value}'"
        )
    return value


_Decoder = Callable[[FieldType, str, Optional[str]], Value]

_DECODERS: Dict[FieldType, _Decoder] = {
    FieldType.INT: _decode_int,
    FieldType.INT64: _decode_int,
    FieldType.INT32: _decode_int,
    FieldType.INT16: _decode_int,
    FieldType.INT8: _decode_int,
    FieldType.TIMESTAMP: _decode_int,
    FieldType.FLOAT: _decode_float,
    FieldType.DOUBLE: _decode_float,
    FieldType.BOOL: _decode_bool,
    FieldType.STRING: _decode_text,
    FieldType.DATE: _decode_text,
    FieldType.TIME: _decode_text,
    FieldType.DATETIME: _decode_datetime,
    FieldType.LIST: _decode_json,
    FieldType.DICT: _decode_json,
}


def decode_value(declaration: str, cell: str, field: Optional[str] = None) -> Value:
    """Translate a result table cell back into a typed Python value.

    Undefined properties (``UNKNOWN_PROP``) and nulls decode to the zero value
    of the declared type.

    Raises:
        UnsupportedType: The declaration does not name a supported type.
        DecodeError: The cell does not hold a value of the declared type.
        ContractViolation: A datetime cell is not in the engine's format.
    """
    ftype = FieldType.parse(declaration, field)
    if cell == UNKNOWN_PROP_CELL:
        cell = NULL_CELL
    if cell == NULL_CELL:
        return _ZERO_VALUES[ftype]()
    return _DECODERS[ftype](ftype, cell, field)


def is_number_type(declaration: str) -> bool:
    return FieldType.parse(declaration) in NUMBER_TYPES


def is_search_eligible(declaration: str) -> bool:
    """Whether a field may be used in a search clause (numbers and strings)."""
    try:
        ftype = FieldType.parse(declaration)
    except UnsupportedType:
        return False
    return ftype in NUMBER_TYPES or ftype in SEARCHABLE_TYPES


def codec_declaration(engine_declaration: str) -> str:
    """Map a declaration read back from the engine onto a codec keyword.

    ``fixed_string(N)`` and any other type the codec has no keyword for are
    read as plain strings.
    """
    keyword = engine_declaration.strip().split("(")[0].split(" ")[0]
    try:
        return FieldType.parse(keyword).value.lower()
    except UnsupportedType:
        return "string"
