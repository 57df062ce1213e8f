from __future__ import annotations

import codecs
from dataclasses import dataclass
from typing import Any, Mapping

from loguru import logger

from splitter_sink.mapping.errors import ConfigError
from splitter_sink.mapping.operations import OperationKind


# recognized option keys, as a host pipeline passes them in.
FIELDS_PROP = "fields"
DELIMIT_PROP = "delimited"
ENCODING_PROP = "encoding"
OPERATION_PROP = "operation"
SKIP_MISSING_COLUMN_PROP = "skipMissingColumn"
SKIP_BAD_COLUMN_VALUE_PROP = "skipBadColumnValue"

DEFAULT_DELIMITER = ","
DEFAULT_ENCODING = "utf-8"
DEFAULT_OPERATION = OperationKind.upsert
DEFAULT_SKIP_MISSING_COLUMN = False
DEFAULT_SKIP_BAD_COLUMN_VALUE = False


@dataclass(frozen=True, slots=True)
class MapperConfig:
    """
    Validated, immutable mapper settings. Build with `configure`.

    Safe to share read-only across mapper instances.
    """
    fields: tuple[str, ...]             # lower cased, field i <-> split token i
    delimiter: str = DEFAULT_DELIMITER
    encoding: str = DEFAULT_ENCODING    # canonical python codec name
    operation: OperationKind = DEFAULT_OPERATION
    skip_missing_column: bool = DEFAULT_SKIP_MISSING_COLUMN
    skip_bad_column_value: bool = DEFAULT_SKIP_BAD_COLUMN_VALUE

    def field_index(self, column: str) -> int | None:
        """Position of `column` within `fields`, or `None` if not configured."""
        try:
            return self.fields.index(column)
        except ValueError:
            return None


def parse_field_names(raw: str) -> tuple[str, ...]:
    """
    `"Id, Name,AGE"` -> `("id", "name", "age")`.

    Trailing empty names (`"id,name,"`) are dropped, inner empty names are kept
    so later positions stay aligned with the record's tokens.
    """
    names = [n.strip() for n in raw.strip().lower().split(",")]
    while names and names[-1] == "":
        names.pop()
    return tuple(names)


def _resolve_encoding(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ConfigError(f"Invalid or unsupported charset {name!r}")
    try:
        canonical = codecs.lookup(name.strip()).name
        # rejects codecs that are not bytes <-> str (ex: `rot13`, `base64`)
        b"".decode(canonical)
        "".encode(canonical)
        return canonical
    except LookupError as e:
        raise ConfigError(f"Invalid or unsupported charset {name!r}") from e


def _resolve_operation(value: Any) -> OperationKind:
    s = str(value).strip().lower()
    try:
        return OperationKind(s)
    except ValueError:
        raise ConfigError(f"Unrecognized operation '{s}'") from None


def _resolve_flag(context: Mapping[str, Any], key: str, default: bool) -> bool:
    v = context.get(key)
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s == "true":
        return True
    if s == "false":
        return False
    raise ConfigError(f"Parameter {key} must be 'true' or 'false', got {v!r}")


def configure(context: Mapping[str, Any]) -> MapperConfig:
    """
    Validate a raw option map into a `MapperConfig`.

    Fails fast with `ConfigError` on:
    - missing/blank `fields`,
    - null or empty `delimited`,
    - an `encoding` python has no codec for,
    - an `operation` other than insert/upsert (any casing),
    - skip flags that are not booleans.
    """
    fieldprop = context.get(FIELDS_PROP)
    logger.info("fields: {}", fieldprop)
    if fieldprop is None or not str(fieldprop).strip():
        raise ConfigError(f"Required parameter {FIELDS_PROP} is not specified")
    fields = parse_field_names(str(fieldprop))
    logger.info("fields length: {}", len(fields))

    # an explicit `None` is not replaced by the default
    delimiter = context.get(DELIMIT_PROP, DEFAULT_DELIMITER)
    logger.info("delimited: {!r}", delimiter)
    if delimiter is None:
        raise ConfigError(f"Required parameter {DELIMIT_PROP} is not specified")
    if not isinstance(delimiter, str) or delimiter == "":
        raise ConfigError(f"Parameter {DELIMIT_PROP} must be a non-empty string")

    encoding = _resolve_encoding(context.get(ENCODING_PROP, DEFAULT_ENCODING))
    operation = _resolve_operation(context.get(OPERATION_PROP, DEFAULT_OPERATION.value))

    return MapperConfig(
        fields=fields,
        delimiter=delimiter,
        encoding=encoding,
        operation=operation,
        skip_missing_column=_resolve_flag(context, SKIP_MISSING_COLUMN_PROP, DEFAULT_SKIP_MISSING_COLUMN),
        skip_bad_column_value=_resolve_flag(context, SKIP_BAD_COLUMN_VALUE_PROP, DEFAULT_SKIP_BAD_COLUMN_VALUE),
    )
