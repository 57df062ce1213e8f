from __future__ import annotations

from pathlib import Path

from loguru import logger
from psycopg import Connection

from splitter_sink.config import MapperConfig
from splitter_sink.db.operation_writers import apply_operations
from splitter_sink.db.table_schema import fetch_table_schema
from splitter_sink.ingest.readers import stream_line_records
from splitter_sink.ingest.summary import LoadSummary
from splitter_sink.mapping.errors import RecordMappingError
from splitter_sink.mapping.mapper import RecordMapper


def load_file(conn: Connection, *, input_path: Path, table_name: str, config: MapperConfig) -> LoadSummary:
    """
    File loading harness around the mapper:
      - Read the target table's column schema,
      - Stream one record per line,
      - Map each record into its operation and submit it,
      - Commit once every record has been submitted.

    Any record that fails mapping (under the configured skip policy) or any DB error
    rolls back the whole file and re-raises.
    """
    schema = fetch_table_schema(conn, table_name=table_name)
    mapper = RecordMapper(config)

    total = applied = 0
    try:
        for line_no, record in stream_line_records(input_path):
            total += 1
            try:
                ops = mapper.map(record, schema)
            except RecordMappingError as e:
                logger.error("{}:{} could not be mapped: {}", input_path, line_no, e)
                raise
            applied += apply_operations(conn, operations=ops, schema=schema)

        conn.commit()
    except Exception:
        conn.rollback()
        raise

    summary = LoadSummary(
        table_name=table_name,
        input_path=str(input_path),
        operation=config.operation.value,
        total=total,
        applied=applied,
    )
    logger.info("load complete: {}", summary.render_one_line())
    return summary
