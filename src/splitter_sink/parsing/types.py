from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class ColumnType(str, Enum):
    """Typed column classifications a table store can declare."""
    int8 = "int8"
    int16 = "int16"
    int32 = "int32"
    int64 = "int64"
    bool = "bool"
    float = "float"                     # 32-bit
    double = "double"                   # 64-bit
    string = "string"
    binary = "binary"
    unixtime_micros = "unixtime_micros"
    unknown = "unknown"                 # catch-all, never coerced


class ParseCode(str, Enum):
    """Typed parse failure classifications."""
    invalid_int = "invalid_int"         # also used for out of range ints and timestamps
    invalid_float = "invalid_float"
    invalid_binary = "invalid_binary"


@dataclass(frozen=True, slots=True)
class ColumnSchema:
    """
    One (name, type) pair from table metadata.

    `tz_aware` only matters for `unixtime_micros`: False when the store keeps
    wall-clock timestamps without a zone (written as naive UTC).
    """
    name: str
    type: ColumnType
    tz_aware: bool = True


@dataclass(frozen=True, slots=True)
class TableSchema:
    """
    A target table's structure, in column order.

    `key_columns` is only needed for upserts (the conflict target).
    """
    table_name: str
    columns: tuple[ColumnSchema, ...]
    key_columns: tuple[str, ...] = ()

    def get(self, name: str) -> ColumnSchema | None:
        for c in self.columns:
            if c.name == name:
                return c
        return None


## -- coercion results (closed set of variants)

@dataclass(frozen=True, slots=True)
class Coerced:
    """Token successfully converted to its column's type."""
    value: Any


@dataclass(frozen=True, slots=True)
class CoercionFailed:
    """Token could not be converted."""
    code: ParseCode
    detail: str


@dataclass(frozen=True, slots=True)
class Unsupported:
    """Declared type has no coercion; the column is left unset."""
    column_type: ColumnType


CoerceResult = Union[Coerced, CoercionFailed, Unsupported]
