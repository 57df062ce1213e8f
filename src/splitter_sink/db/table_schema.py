from __future__ import annotations

from psycopg import Connection

from splitter_sink.parsing.types import ColumnSchema, ColumnType, TableSchema


# Postgres `information_schema.columns.data_type` -> column type.
# Anything not listed maps to `ColumnType.unknown` (left unset by the mapper).
_PG_TYPES: dict[str, ColumnType] = {
    "smallint": ColumnType.int16,
    "integer": ColumnType.int32,
    "bigint": ColumnType.int64,
    "boolean": ColumnType.bool,
    "real": ColumnType.float,
    "double precision": ColumnType.double,
    "text": ColumnType.string,
    "character varying": ColumnType.string,
    "character": ColumnType.string,
    "bytea": ColumnType.binary,
    "timestamp with time zone": ColumnType.unixtime_micros,
    "timestamp without time zone": ColumnType.unixtime_micros,
}


def column_type_for(pg_data_type: str) -> ColumnType:
    """Classify a Postgres `data_type` name."""
    return _PG_TYPES.get(pg_data_type.strip().lower(), ColumnType.unknown)


def column_schema_for(name: str, pg_data_type: str) -> ColumnSchema:
    """`timestamp without time zone` columns are flagged naive, everything else is aware."""
    tz_aware = pg_data_type.strip().lower() != "timestamp without time zone"
    return ColumnSchema(name=name, type=column_type_for(pg_data_type), tz_aware=tz_aware)


def fetch_table_schema(conn: Connection, *, table_name: str, schema_name: str = "public") -> TableSchema:
    """
    Read a table's columns (in ordinal order) and primary key from Postgres metadata.

    Raises `LookupError` if the table does not exist or has no columns.
    Read-only: table creation/alteration is not this function's concern.
    """
    cols = conn.execute(
        """
        SELECT column_name, data_type
        FROM information_schema.columns
        WHERE table_schema = %s AND table_name = %s
        ORDER BY ordinal_position
        """,
        (schema_name, table_name),
    ).fetchall()
    if not cols:
        raise LookupError(f"table not found or has no columns: {schema_name}.{table_name}")

    keys = conn.execute(
        """
        SELECT kcu.column_name
        FROM information_schema.table_constraints tc
        JOIN information_schema.key_column_usage kcu
          ON tc.constraint_name = kcu.constraint_name
         AND tc.table_schema = kcu.table_schema
         AND tc.table_name = kcu.table_name
        WHERE tc.constraint_type = 'PRIMARY KEY'
          AND tc.table_schema = %s
          AND tc.table_name = %s
        ORDER BY kcu.ordinal_position
        """,
        (schema_name, table_name),
    ).fetchall()

    return TableSchema(
        table_name=table_name,
        columns=tuple(column_schema_for(str(name), str(dt)) for name, dt in cols),
        key_columns=tuple(str(k[0]) for k in keys),
    )
