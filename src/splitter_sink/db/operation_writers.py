from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Sequence

from psycopg import Connection, sql

from splitter_sink.mapping.operations import Operation, OperationKind
from splitter_sink.parsing.types import ColumnSchema, ColumnType, TableSchema


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def micros_to_datetime(micros: int) -> datetime:
    """Epoch microseconds -> aware UTC `datetime` (exact, no float rounding)."""
    try:
        return _EPOCH + timedelta(microseconds=micros)
    except OverflowError as e:
        raise ValueError(f"timestamp out of range: {micros} microseconds since epoch") from e


def adapt_value(col: ColumnSchema | None, value: Any) -> Any:
    """
    Adapt mapped python values to DB types.

    Epoch micros become an aware UTC `datetime` (dumped as `timestamptz`), or a
    naive UTC one for zoneless columns so the session `TimeZone` never shifts it.
    """
    if col is None or col.type is not ColumnType.unixtime_micros or value is None:
        return value
    dt = micros_to_datetime(int(value))
    return dt if col.tz_aware else dt.replace(tzinfo=None)


def build_operation_statement(op: Operation, schema: TableSchema) -> tuple[sql.Composed, tuple[Any, ...]]:
    """
    Compose the SQL and params for one operation.

    - insert: `INSERT INTO t (cols) VALUES (...)`
    - upsert: the same, plus `ON CONFLICT (key_columns) DO UPDATE SET` for every
      set non-key column (`DO NOTHING` if only key columns are set).

    Only the columns set on `op` are written. Identifiers are taken from `schema`
    and the operation's own keys, then quoted by `psycopg.sql`; values are always parameters.
    """
    if op.table_name != schema.table_name:
        raise ValueError(f"operation targets {op.table_name!r}, schema describes {schema.table_name!r}")

    cols: tuple[str, ...] = tuple(op.row.keys())
    unknown = [c for c in cols if schema.get(c) is None]
    if unknown:
        raise ValueError(f"operation sets columns missing from {schema.table_name}: {unknown}")

    params = tuple(adapt_value(schema.get(c), op.row[c]) for c in cols)
    tbl = sql.Identifier(schema.table_name)

    if not cols:
        insert = sql.SQL("INSERT INTO {tbl} DEFAULT VALUES").format(tbl=tbl)
    else:
        insert = sql.SQL("INSERT INTO {tbl} ({cols}) VALUES ({vals})").format(
            tbl=tbl,
            cols=sql.SQL(", ").join(sql.Identifier(c) for c in cols),
            vals=sql.SQL(", ").join(sql.Placeholder() for _ in cols),
        )

    if op.kind is OperationKind.insert:
        return insert, params

    if not schema.key_columns:
        raise ValueError(f"upsert needs a primary key, {schema.table_name} has none")

    updates = [c for c in cols if c not in schema.key_columns]
    if updates:
        action = sql.SQL("DO UPDATE SET {assignments}").format(
            assignments=sql.SQL(", ").join(
                sql.SQL("{col} = EXCLUDED.{col}").format(col=sql.Identifier(c)) for c in updates
            )
        )
    else:
        action = sql.SQL("DO NOTHING")

    upsert = sql.SQL("{insert} ON CONFLICT ({keys}) {action}").format(
        insert=insert,
        keys=sql.SQL(", ").join(sql.Identifier(k) for k in schema.key_columns),
        action=action,
    )
    return upsert, params


def apply_operations(conn: Connection, *, operations: Sequence[Operation], schema: TableSchema) -> int:
    """
    Submit mapped operations, one statement each. Returns the number submitted.

    Does not commit: the caller owns the transaction boundary.
    """
    if not operations:
        return 0
    with conn.cursor() as cur:
        for op in operations:
            query, params = build_operation_statement(op, schema)
            cur.execute(query, params)
    return len(operations)
