from __future__ import annotations

from loguru import logger

from splitter_sink.config import MapperConfig
from splitter_sink.parsing.coercion import coerce
from splitter_sink.parsing.primitives import split_record
from splitter_sink.parsing.types import ColumnSchema, Coerced, CoercionFailed, TableSchema, Unsupported

from .errors import MappingFailure, RecordMappingError
from .operations import Operation, new_operation


def apply_policy(skip: bool, error: RecordMappingError) -> None:
    """
    Shared skip policy.

    - `skip` is `True`: log `error` as a warning, the caller carries on with the next column.
    - `skip` is `False`: raise `error`, aborting the record.
    """
    if skip:
        logger.warning("{} ({})", error.message, error.detail)
        return
    raise error


class RecordMapper:
    """
    Maps one delimited byte record into exactly one insert/upsert `Operation`.

    Column order is the table schema's, not the configured field order.
    Holds no per-record state: one instance can map any number of records.
    """

    def __init__(self, config: MapperConfig):
        self._config = config

    @property
    def config(self) -> MapperConfig:
        return self._config

    def map(self, raw: bytes, schema: TableSchema) -> list[Operation]:
        """
        Decode, split, and coerce `raw` into a single-element list of operations.

        Raises `RecordMappingError` when a failure is not covered by the skip policy,
        or on any unexpected failure while building the operation.
        """
        cfg = self._config
        # malformed byte sequences become U+FFFD rather than failing the record
        text = raw.decode(cfg.encoding, errors="replace")
        tokens = split_record(text, cfg.delimiter)

        op = new_operation(cfg.operation, table_name=schema.table_name)
        for col in schema.columns:
            try:
                self._map_column(op, col, tokens, text)
            except RecordMappingError:
                raise
            except Exception as e:
                raise RecordMappingError(
                    MappingFailure.unexpected,
                    "Failed to create operation",
                    detail=f"column '{col.name}': {e}",
                ) from e

        return [op]

    def _map_column(self, op: Operation, col: ColumnSchema, tokens: list[str], text: str) -> None:
        """Set one column on `op`, applying the skip policy on failures."""
        cfg = self._config

        index = cfg.field_index(col.name)
        if index is None:
            apply_policy(
                cfg.skip_missing_column,
                RecordMappingError(
                    MappingFailure.missing_column,
                    f"Column '{col.name}' has no matching field in '{text}'",
                    detail="column not listed in configured fields",
                ),
            )
            return

        if index >= len(tokens):
            apply_policy(
                cfg.skip_missing_column,
                RecordMappingError(
                    MappingFailure.missing_column,
                    f"Column '{col.name}' has no matching group in '{text}'",
                    detail=f"field index {index} out of range for {len(tokens)} tokens",
                ),
            )
            return

        token = tokens[index]
        res = coerce(token, col.type, encoding=cfg.encoding)

        if isinstance(res, Coerced):
            op.set_value(col.name, res.value)
        elif isinstance(res, CoercionFailed):
            apply_policy(
                cfg.skip_bad_column_value,
                RecordMappingError(
                    MappingFailure.bad_column_value,
                    f"Raw value '{token}' couldn't be parsed to type {col.type.value} for column '{col.name}'",
                    detail=res.detail,
                ),
            )
        elif isinstance(res, Unsupported):
            # neither policy applies: schemas may carry columns irrelevant to this mapping
            logger.warning("got unknown type {} for column '{}' -- ignoring this column", res.column_type.value, col.name)
