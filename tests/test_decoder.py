import pytest

from dbfscan.decoder import decode_field, decode_record
from dbfscan.errors import ParseError, UnsupportedMemoModeError
from dbfscan.header import FieldDescriptor, FieldType, Header
from dbfscan.values import DateValue


def _field(ftype: FieldType, length: int, offset: int = 0, name: str = "F") -> FieldDescriptor:
    return FieldDescriptor(name=name, type=ftype, offset=offset, length=length)


def test_character_returns_raw_span_untrimmed():
    record = b"ALICE     025"
    value = decode_field(_field(FieldType.CHARACTER, 10), record)
    assert value == b"ALICE     "
    assert isinstance(value, bytes)


def test_date_is_parsed_without_calendar_validation():
    fd = _field(FieldType.DATE, 8, offset=2)
    assert decode_field(fd, b"xx20240517") == DateValue(2024, 5, 17)
    bogus = decode_field(fd, b"xx20241340")
    assert bogus == DateValue(2024, 13, 40)
    assert not bogus.is_valid()
    assert decode_field(fd, b"xx        ") == DateValue(0, 0, 0)


@pytest.mark.parametrize("ftype", [FieldType.NUMERIC, FieldType.FLOAT])
def test_numbers_parse_with_padding(ftype):
    assert decode_field(_field(ftype, 6), b"  12.5") == 12.5
    assert decode_field(_field(ftype, 6), b"-3    ") == -3.0
    assert decode_field(_field(ftype, 6), b"1.5E+2") == 150.0


@pytest.mark.parametrize("ftype", [FieldType.NUMERIC, FieldType.FLOAT])
@pytest.mark.parametrize("raw", [b"      ", b"??????", b"  1?  "])
def test_blank_or_question_fill_is_absent_not_zero(ftype, raw):
    assert decode_field(_field(ftype, 6), raw) is None


@pytest.mark.parametrize("ftype", [FieldType.NUMERIC, FieldType.FLOAT])
@pytest.mark.parametrize("raw", [b"12,5  ", b"abc   ", b"inf   ", b"1_000 ", b"\xb912   "])
def test_invalid_number_raises_parse_error(ftype, raw):
    with pytest.raises(ParseError) as excinfo:
        decode_field(_field(ftype, 6, name="AMOUNT"), raw)
    assert excinfo.value.field_name == "AMOUNT"
    assert isinstance(excinfo.value, ValueError)


@pytest.mark.parametrize(
    "byte,expected",
    [
        (b"T", True),
        (b"t", True),
        (b"Y", True),
        (b"y", True),
        (b"N", False),
        (b"F", False),
        (b"?", False),
        (b" ", False),
    ],
)
def test_logical_is_two_state(byte, expected):
    assert decode_field(_field(FieldType.LOGICAL, 1), byte) is expected


def test_memo_short_form_is_little_endian_int():
    assert decode_field(_field(FieldType.MEMO, 4), b"\x2a\x01\x00\x00") == 298


def test_memo_long_form_is_ascii_digits():
    assert decode_field(_field(FieldType.MEMO, 10), b"        17") == 17
    assert decode_field(_field(FieldType.MEMO, 10), b"          ") is None


@pytest.mark.parametrize("raw", [b"     1e400", b"      17.5"])
def test_memo_long_form_rejects_non_integral_block(raw):
    with pytest.raises(ParseError) as excinfo:
        decode_field(_field(FieldType.MEMO, 10, name="NOTES"), raw)
    assert excinfo.value.field_name == "NOTES"


def test_memo_other_width_is_unsupported():
    with pytest.raises(UnsupportedMemoModeError) as excinfo:
        decode_field(_field(FieldType.MEMO, 8), b"00000000")
    assert excinfo.value.length == 8


def test_unknown_type_decodes_to_none():
    assert decode_field(_field(FieldType.UNKNOWN, 3), b"xyz") is None


def test_decode_record_follows_header_order():
    header = Header(
        version=3,
        last_update=DateValue(2024, 1, 1),
        record_count=1,
        header_length=97,
        record_length=14,
        fields=(
            FieldDescriptor("NAME", FieldType.CHARACTER, 0, 10, index=0),
            FieldDescriptor("AGE", FieldType.NUMERIC, 10, 3, index=1),
        ),
    )
    assert decode_record(header, memoryview(b"ALICE     025")) == (b"ALICE     ", 25.0)
