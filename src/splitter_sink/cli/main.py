from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from splitter_sink.cli.loader import load_file
from splitter_sink.config import configure
from splitter_sink.db.connect import connect
from splitter_sink.db.table_schema import fetch_table_schema
from splitter_sink.ingest.readers import stream_line_records
from splitter_sink.mapping.errors import ConfigError, RecordMappingError
from splitter_sink.mapping.mapper import RecordMapper
from splitter_sink.mapping.operations import Operation
from splitter_sink.parsing.types import ColumnSchema, ColumnType, TableSchema


def _parse_options(pairs: list[str]) -> dict[str, str]:
    """`["fields=id,name", "operation=insert"]` -> option map. Only the first `=` splits."""
    out: dict[str, str] = {}
    for p in pairs:
        key, sep, value = p.partition("=")
        if not sep or not key.strip():
            raise ConfigError(f"option must look like key=value, got {p!r}")
        out[key.strip()] = value
    return out


def _parse_column(text: str) -> ColumnSchema:
    """`"age:int32"` -> `ColumnSchema("age", ColumnType.int32)`."""
    name, sep, type_name = text.rpartition(":")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"column must look like name:type, got {text!r}")
    try:
        return ColumnSchema(name=name, type=ColumnType(type_name.strip().lower()))
    except ValueError:
        choices = ", ".join(t.value for t in ColumnType)
        raise argparse.ArgumentTypeError(f"unknown column type {type_name!r} (expected one of: {choices})")


def _json_default(v: Any) -> Any:
    if isinstance(v, bytes):
        return v.hex()
    raise TypeError(f"not JSON serializable: {type(v).__name__}")


def render_operation(op: Operation) -> str:
    """One JSON line per operation."""
    return json.dumps(
        {"operation": op.kind.value, "table": op.table_name, "row": dict(op.to_mapping())},
        default=_json_default,
    )


def main(argv: list[str] | None = None) -> int:
    """
    A CLI for mapping delimited records into typed insert/upsert operations.

    The `cmd` options are:
    ## map:
    Maps each line of `--input` against an explicit column list and prints the
    resulting operations as JSON lines. No database needed.
    - `--column name:type` once per column, in table order.

    ## load:
    Maps each line of `--input` against a Postgres table's schema and writes
    the operations in a single transaction. Prints a one line summary.

    ## schema:
    Prints the column schema read from a Postgres table.

    Mapper options are passed as `-o key=value` (`fields`, `delimited`, `encoding`,
    `operation`, `skipMissingColumn`, `skipBadColumnValue`).

    ### Example usage:
    - `splitter map --input people.csv --table people --column id:int32 --column name:string -o fields=id,name`
    - `splitter load --input people.csv --table people -o fields=id,name -o operation=insert`
    """
    p = argparse.ArgumentParser(prog="splitter")
    sub = p.add_subparsers(dest="cmd", required=True)

    def _add_mapping_args(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--input", required=True, help="Path to a file with one delimited record per line.")
        sp.add_argument("--table", required=True, help="Target table name.")
        sp.add_argument("-o", "--option", action="append", default=[], metavar="KEY=VALUE", help="Mapper option.")

    # map cmd
    map_p = sub.add_parser("map", help="Map records against an explicit schema and print the operations.")
    _add_mapping_args(map_p)
    map_p.add_argument("--column", action="append", required=True, type=_parse_column, metavar="NAME:TYPE")

    # load cmd
    load_p = sub.add_parser("load", help="Map records and write them into a Postgres table.")
    _add_mapping_args(load_p)

    # schema cmd
    schema_p = sub.add_parser("schema", help="Show the column schema of a Postgres table.")
    schema_p.add_argument("--table", required=True)

    args = p.parse_args(argv)

    if args.cmd == "schema":
        with connect() as conn:
            schema = fetch_table_schema(conn, table_name=args.table)
        for c in schema.columns:
            key = " (key)" if c.name in schema.key_columns else ""
            print(f"{c.name}: {c.type.value}{key}")
        return 0

    try:
        config = configure(_parse_options(args.option))
    except ConfigError as e:
        print(f"invalid configuration: {e}", file=sys.stderr)
        return 2

    input_path = Path(args.input)

    if args.cmd == "map":
        schema = TableSchema(table_name=args.table, columns=tuple(args.column))
        mapper = RecordMapper(config)
        for line_no, record in stream_line_records(input_path):
            try:
                ops = mapper.map(record, schema)
            except RecordMappingError as e:
                logger.error("{}:{} could not be mapped: {}", input_path, line_no, e)
                return 1
            for op in ops:
                print(render_operation(op))
        return 0

    if args.cmd == "load":
        try:
            with connect() as conn:
                summary = load_file(conn, input_path=input_path, table_name=args.table, config=config)
        except RecordMappingError:
            return 1
        print(summary.render_one_line())
        return 0

    return 2

