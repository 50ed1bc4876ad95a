import io
from datetime import date
from decimal import Decimal

import pytest

from dbf_fixtures import active, build_dbf
from dbfscan.errors import FieldNotFoundError, IndexOutOfRangeError
from dbfscan.reader import DbfReader

FIELDS = [
    ("NAME", "C", 8, 0),
    ("BORN", "D", 8, 0),
    ("SALARY", "N", 8, 2),
    ("ACTIVE", "L", 1, 0),
    ("NOTES", "M", 10, 0),
]


def _row(*cells: bytes, encoding: str = "latin-1"):
    raw = build_dbf(FIELDS, [active(*cells)])
    return DbfReader(io.BytesIO(raw), encoding=encoding).decode_row()


def test_typed_getters():
    row = _row(b"J\xf6rg    ", b"19840708", b" 1234.50", b"T", b"         3")
    assert row.get_string("NAME") == "Jörg"
    assert row.get_date("BORN") == date(1984, 7, 8)
    assert row.get_float("SALARY") == 1234.5
    assert row.get_int("SALARY") == 1234
    assert row.get_decimal("SALARY") == Decimal("1234.5")
    assert row.get_bool("ACTIVE") is True
    assert row.get_int("NOTES") == 3


def test_absent_numbers_default_to_zero_only_in_getters():
    row = _row(b"X       ", b"        ", b"        ", b"N", b"          ")
    assert row.get("SALARY") is None
    assert row.get_int("SALARY") == 0
    assert row.get_float("SALARY") == 0.0
    assert row.get_decimal("SALARY") is None
    assert row.get_bool("ACTIVE") is False
    assert row.as_dict()["BORN"] is None


def test_invalid_stored_date_raises_on_conversion():
    row = _row(b"X       ", b"20241340", b"       1", b"N", b"          ")
    with pytest.raises(ValueError):
        row.get_date("BORN")


def test_lookup_by_index_name_and_descriptor():
    row = _row(b"ALICE   ", b"20000101", b"       1", b"Y", b"          ")
    field = row.header.field_by_name("ACTIVE")
    assert row[3] is True
    assert row["ACTIVE"] is True
    assert row[field] is True
    assert row[:2] == (b"ALICE   ", (2000, 1, 1))
    assert len(row) == 5


def test_lookup_errors():
    row = _row(b"ALICE   ", b"20000101", b"       1", b"Y", b"          ")
    with pytest.raises(FieldNotFoundError):
        row.get("MISSING")
    with pytest.raises(IndexOutOfRangeError):
        row.get(9)
    with pytest.raises(TypeError):
        row.get_string("SALARY")
    with pytest.raises(TypeError):
        row.get_int("NAME")
    with pytest.raises(TypeError):
        row.get_decimal("NAME")


def test_string_encoding_override():
    row = _row(b"\x8e\xa0\xe1     ", b"20000101", b"       1", b"Y", b"          ", encoding="cp866")
    assert row.get_string("NAME") == "Оас"
    assert row.get_string("NAME", encoding="latin-1") == "\x8e\xa0\xe1"
