"""Field value decoding.

Every rule reads only the slice of the record owned by the field. Recoverable
absence (blank or ``?``-filled numbers) decodes to ``None``; only malformed
literals and unsupported memo widths raise.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from dbfscan.bytepattern import contains, parse_int, read_le_int32, trim_trailing_spaces
from dbfscan.errors import ParseError, UnsupportedMemoModeError
from dbfscan.header import FieldDescriptor, FieldType, Header
from dbfscan.values import DateValue, Value

Record = bytes | bytearray | memoryview

UNPARSABLE_FILL = ord("?")
TRUE_BYTES = frozenset(b"YyTt")
DECIMAL_RE = re.compile(rb"\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*")
SHORT_MEMO_LENGTH = 4
LONG_MEMO_LENGTH = 10


def decode_character(field: FieldDescriptor, record: Record) -> bytes:
    """Return the raw span untrimmed; text decoding is left to the caller."""
    return bytes(record[field.offset : field.end])


def decode_date(field: FieldDescriptor, record: Record) -> DateValue:
    # YYYYMMDD; header parsing rejects date fields of any other width
    start = field.offset
    return DateValue(
        year=parse_int(record, start, start + 4),
        month=parse_int(record, start + 4, start + 6),
        day=parse_int(record, start + 6, start + 8),
    )


def _parse_decimal(field: FieldDescriptor, record: Record) -> float | None:
    raw = trim_trailing_spaces(record, field.offset, field.length)
    if not raw or contains(raw, UNPARSABLE_FILL):
        return None
    if DECIMAL_RE.fullmatch(raw) is None:
        raise ParseError(field.name, raw)
    return float(raw.decode("ascii"))


def decode_float(field: FieldDescriptor, record: Record) -> float | None:
    return _parse_decimal(field, record)


def decode_numeric(field: FieldDescriptor, record: Record) -> float | None:
    return _parse_decimal(field, record)


def decode_logical(field: FieldDescriptor, record: Record) -> bool:
    # '?' (unset) collapses to False along with 'N'/'F'
    return record[field.offset] in TRUE_BYTES


def decode_memo(field: FieldDescriptor, record: Record) -> int | None:
    if field.length == SHORT_MEMO_LENGTH:
        return read_le_int32(record, field.offset)
    if field.length == LONG_MEMO_LENGTH:
        value = _parse_decimal(field, record)
        if value is None:
            return None
        if not value.is_integer():
            raise ParseError(field.name, trim_trailing_spaces(record, field.offset, field.length))
        return int(value)
    raise UnsupportedMemoModeError(field.name, field.length)


def decode_unknown(field: FieldDescriptor, record: Record) -> None:
    return None


DECODERS: dict[FieldType, Callable[[FieldDescriptor, Record], Value]] = {
    FieldType.CHARACTER: decode_character,
    FieldType.DATE: decode_date,
    FieldType.FLOAT: decode_float,
    FieldType.NUMERIC: decode_numeric,
    FieldType.LOGICAL: decode_logical,
    FieldType.MEMO: decode_memo,
    FieldType.UNKNOWN: decode_unknown,
}


def decode_field(field: FieldDescriptor, record: Record) -> Value:
    """Decode one field from a record buffer (deletion flag excluded)."""
    return DECODERS[field.type](field, record)


def decode_record(header: Header, record: Record) -> tuple[Value, ...]:
    """Decode every field in header order."""
    return tuple(decode_field(fd, record) for fd in header.fields)
