import pytest

from dbfscan.bytepattern import (
    contains,
    parse_int,
    read_le_int16,
    read_le_int32,
    trim_trailing_spaces,
    trimmed_length,
)


def test_read_le_int32_assembles_little_endian():
    assert read_le_int32(b"\x01\x02\x00\x00") == 0x0201
    assert read_le_int32(b"xx\x10\x00\x00\x00", offset=2) == 16
    assert read_le_int32(b"\xff\xff\xff\xff") == -1


def test_read_le_int_requires_full_width():
    with pytest.raises(ValueError):
        read_le_int32(b"\x01\x02")
    assert read_le_int16(b"\x41\x01") == 321


def test_parse_int_stops_at_space():
    assert parse_int(b"0425") == 425
    assert parse_int(b"12 34") == 12
    assert parse_int(b"20240517", 4, 6) == 5
    assert parse_int(b"        ") == 0


def test_trim_is_idempotent_and_keeps_leading_spaces():
    raw = b"  ALICE   "
    assert trimmed_length(raw) == 7
    once = trim_trailing_spaces(raw)
    assert once == b"  ALICE"
    assert trim_trailing_spaces(once) == once
    assert trim_trailing_spaces(b"     ") == b""


def test_trim_respects_span_bounds():
    data = b"XXAB  YY"
    assert trimmed_length(data, 2, 4) == 2
    assert trim_trailing_spaces(data, 2, 4) == b"AB"


def test_contains_sentinel():
    assert contains(b"1?3", ord("?"))
    assert not contains(b"123", ord("?"))
    assert contains(memoryview(b"??"), ord("?"))
