from __future__ import annotations

from enum import Enum


class MappingFailure(str, Enum):
    """Typed record mapping failure classifications."""
    missing_column = "missing_column"       # governed by `skip_missing_column`
    bad_column_value = "bad_column_value"   # governed by `skip_bad_column_value`
    unexpected = "unexpected"               # always fatal


class ConfigError(ValueError):
    """Invalid mapper configuration. Only raised before any record is processed."""


class RecordMappingError(Exception):
    """
    A record could not be mapped into an operation.

    `detail` describes the underlying cause (a parse failure, an out of range
    field index, ...). The originating exception, if any, is chained as `__cause__`.
    """

    def __init__(self, code: MappingFailure, message: str, *, detail: str | None = None) -> None:
        self.code = code
        self.message = message
        self.detail = detail
        super().__init__(message if detail is None else f"{message}: {detail}")
