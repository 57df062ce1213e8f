from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class OperationKind(str, Enum):
    """Which write a mapped record turns into."""
    insert = "insert"
    upsert = "upsert"


@dataclass(slots=True)
class Operation:
    """
    A single pending write against `table_name`.

    `row` only holds the columns that were set; anything absent is left to the
    table store (default value on insert, untouched on upsert).
    Submitting it is the caller's job, see `splitter_sink.db.operation_writers`.
    """
    kind: OperationKind
    table_name: str
    row: dict[str, Any] = field(default_factory=dict)

    def set_value(self, column: str, value: Any) -> None:
        self.row[column] = value

    def is_set(self, column: str) -> bool:
        return column in self.row

    def to_mapping(self) -> Mapping[str, Any]:
        """Column -> value assignments, in the order they were set."""
        return self.row


def new_operation(kind: OperationKind, *, table_name: str) -> Operation:
    """Allocate an empty operation of `kind`."""
    return Operation(kind=kind, table_name=table_name)
