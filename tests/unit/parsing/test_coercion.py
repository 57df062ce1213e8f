from __future__ import annotations

import pytest

from splitter_sink.parsing.coercion import coerce, supported_types
from splitter_sink.parsing.types import Coerced, CoercionFailed, ColumnType, ParseCode, Unsupported


def test_every_known_type_but_unknown_is_supported() -> None:
    """`unknown` is the only type without a coercer."""
    assert supported_types() == frozenset(ColumnType) - {ColumnType.unknown}


@pytest.mark.parametrize(
    "token,column_type,expected",
    [
        ("12", ColumnType.int8, 12),
        ("-300", ColumnType.int16, -300),
        ("30", ColumnType.int32, 30),
        ("9000000000", ColumnType.int64, 9000000000),
        ("TRUE", ColumnType.bool, True),
        ("nope", ColumnType.bool, False),
        ("2.5", ColumnType.float, 2.5),
        ("3.4028235E38", ColumnType.float, 3.4028234663852886e38),
        ("2.25", ColumnType.double, 2.25),
        ("alice", ColumnType.string, "alice"),
        ("abc", ColumnType.binary, b"abc"),
        ("1700000000000001", ColumnType.unixtime_micros, 1700000000000001),
    ],
)
def test_coerce_success_per_type(token: str, column_type: ColumnType, expected: object) -> None:
    res = coerce(token, column_type)
    assert res == Coerced(expected)


@pytest.mark.parametrize("token", ["", " padded ", "a,b", "ünïcödé"])
def test_string_round_trips_verbatim(token: str) -> None:
    """Including the empty string, no trimming."""
    assert coerce(token, ColumnType.string) == Coerced(token)


def test_binary_uses_given_encoding() -> None:
    assert coerce("é", ColumnType.binary, encoding="latin-1") == Coerced(b"\xe9")
    assert coerce("é", ColumnType.binary, encoding="utf-8") == Coerced(b"\xc3\xa9")


def test_failure_is_a_result_not_an_exception() -> None:
    res = coerce("abc", ColumnType.int32)
    assert isinstance(res, CoercionFailed)
    assert res.code == ParseCode.invalid_int
    assert "abc" in res.detail


def test_int8_overflow_is_a_failure() -> None:
    assert coerce("127", ColumnType.int8) == Coerced(127)
    assert isinstance(coerce("128", ColumnType.int8), CoercionFailed)


def test_unknown_type_is_unsupported() -> None:
    assert coerce("anything", ColumnType.unknown) == Unsupported(ColumnType.unknown)


@pytest.mark.parametrize(
    "token,column_type",
    [
        ("42", ColumnType.int32),
        ("abc", ColumnType.int32),
        ("1.5", ColumnType.float),
        ("x", ColumnType.double),
        ("True", ColumnType.bool),
        ("", ColumnType.string),
        ("raw", ColumnType.binary),
        ("1", ColumnType.unknown),
    ],
)
def test_coerce_is_pure(token: str, column_type: ColumnType) -> None:
    """Same (token, type) pair, same result every time."""
    first = coerce(token, column_type)
    assert all(coerce(token, column_type) == first for _ in range(3))
