from __future__ import annotations

import re
import struct
from dataclasses import dataclass

from .types import ParseCode


@dataclass(frozen=True, slots=True)
class ParseError(Exception):
    """Raised by the parse functions below, with the failing detail."""
    code: ParseCode             # used to classify the failure encountered
    detail: str                 # human readable reason


# base-10 signed ints only: "1_000", " 7", "1e3" and "1.0" are all rejected
_INT_RE = re.compile(r"[+-]?[0-9]+")

# (min, max) per signed width
_INT_BOUNDS: dict[int, tuple[int, int]] = {
    bits: (-(1 << (bits - 1)), (1 << (bits - 1)) - 1) for bits in (8, 16, 32, 64)
}


## -- records

def split_record(text: str, delimiter: str) -> list[str]:
    """
    Split `text` on the literal `delimiter`.

    Empty trailing tokens are kept: `"a,b,"` -> `["a", "b", ""]`.
    """
    if not delimiter:
        raise ValueError("delimiter must be a non-empty string")
    return text.split(delimiter)


## -- integer fields

def parse_signed_int(token: str, *, bits: int) -> int:
    """Parse a base-10 signed int that must fit in `bits`. Raise on overflow or non-numeric text."""
    if _INT_RE.fullmatch(token) is None:
        raise ParseError(ParseCode.invalid_int, f"invalid int{bits} value {token!r}")
    v = int(token)
    lo, hi = _INT_BOUNDS[bits]
    if v < lo or v > hi:
        raise ParseError(ParseCode.invalid_int, f"int{bits} value out of range [{lo}, {hi}]: {token!r}")
    return v


def parse_int8(token: str) -> int:
    return parse_signed_int(token, bits=8)

def parse_int16(token: str) -> int:
    return parse_signed_int(token, bits=16)

def parse_int32(token: str) -> int:
    return parse_signed_int(token, bits=32)

def parse_int64(token: str) -> int:
    return parse_signed_int(token, bits=64)


def parse_unixtime_micros(token: str) -> int:
    """
    Epoch microseconds, as a signed 64-bit int.
    No date-string parsing: callers supply already converted text.
    """
    return parse_signed_int(token, bits=64)


## -- bool fields

def parse_bool_lenient(token: str) -> bool:
    """
    `"true"` in any casing is `True`; every other text is `False`.

    Never raises. Unrecognized text (ex: `"yes"`, `"1"`) quietly becomes `False`.
    """
    return token.lower() == "true"


## -- float fields

def _parse_float_text(token: str, *, kind: str) -> float:
    s = token.strip()
    # `float()` accepts digit grouping, a table store should not
    if s == "" or "_" in s:
        raise ParseError(ParseCode.invalid_float, f"invalid {kind} value {token!r}")
    try:
        return float(s)
    except ValueError:
        raise ParseError(ParseCode.invalid_float, f"invalid {kind} value {token!r}")


def parse_double(token: str) -> float:
    """Parse a 64-bit float. Raise on malformed text."""
    return _parse_float_text(token, kind="double")


def parse_float32(token: str) -> float:
    """
    Parse a 32-bit float, rounded to single precision.
    Raise on malformed text or a finite value that rounds past the float32 range.
    """
    v = _parse_float_text(token, kind="float")
    try:
        packed = struct.pack("<f", v)
    except OverflowError:
        # finite input rounding to infinity
        raise ParseError(ParseCode.invalid_float, f"float value out of range: {token!r}")
    return struct.unpack("<f", packed)[0]


## -- text / binary fields

def parse_string(token: str) -> str:
    """Verbatim."""
    return token


def parse_binary(token: str, *, encoding: str) -> bytes:
    """Re-encode `token` to bytes with `encoding`. Raise on unencodable characters."""
    try:
        return token.encode(encoding)
    except UnicodeEncodeError as e:
        raise ParseError(ParseCode.invalid_binary, f"value not encodable as {encoding}: {e.reason}")
