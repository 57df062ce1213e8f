from __future__ import annotations

from typing import Any, Callable

from .primitives import (
    ParseError,
    parse_binary,
    parse_bool_lenient,
    parse_double,
    parse_float32,
    parse_int8,
    parse_int16,
    parse_int32,
    parse_int64,
    parse_string,
    parse_unixtime_micros,
)
from .types import CoerceResult, Coerced, CoercionFailed, ColumnType, Unsupported

# Typing:
# Coercer takes a raw token and the configured encoding.
Coercer = Callable[[str, str], Any]


# one coercer per supported `ColumnType`. `unknown` is deliberately absent.
_COERCERS: dict[ColumnType, Coercer] = {
    ColumnType.int8: lambda t, _enc: parse_int8(t),
    ColumnType.int16: lambda t, _enc: parse_int16(t),
    ColumnType.int32: lambda t, _enc: parse_int32(t),
    ColumnType.int64: lambda t, _enc: parse_int64(t),
    ColumnType.bool: lambda t, _enc: parse_bool_lenient(t),
    ColumnType.float: lambda t, _enc: parse_float32(t),
    ColumnType.double: lambda t, _enc: parse_double(t),
    ColumnType.string: lambda t, _enc: parse_string(t),
    ColumnType.binary: lambda t, enc: parse_binary(t, encoding=enc),
    ColumnType.unixtime_micros: lambda t, _enc: parse_unixtime_micros(t),
}


def supported_types() -> frozenset[ColumnType]:
    """Column types `coerce` can produce a value for."""
    return frozenset(_COERCERS)


def coerce(token: str, column_type: ColumnType, *, encoding: str = "utf-8") -> CoerceResult:
    """
    Convert `token` into a value of `column_type`.

    Pure: the same `(token, column_type, encoding)` always gives an equal result.
    Returns:
    - `Coerced` on success,
    - `CoercionFailed` when the token does not parse,
    - `Unsupported` when the type has no coercer.
    """
    fn = _COERCERS.get(column_type)
    if fn is None:
        return Unsupported(column_type)
    try:
        return Coerced(fn(token, encoding))
    except ParseError as e:
        return CoercionFailed(code=e.code, detail=e.detail)
