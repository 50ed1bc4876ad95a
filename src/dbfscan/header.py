"""DBF header and field-descriptor table.

Layout (all multi-byte integers little-endian):
- 32-byte prefix: version (0), last update YY MM DD (1-3), record count u32 (4),
  header length u16 (8), record length u16 (10), reserved up to 32.
- Repeating 32-byte descriptors: name (11, NUL/space padded), type code (1),
  reserved/address (4), length (1), decimal count (1), reserved (14).
- The table ends at a 0x0D byte or when the declared header length is reached.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO

from dbfscan.bytepattern import read_le_int16
from dbfscan.errors import FieldNotFoundError, FormatError, IndexOutOfRangeError
from dbfscan.values import DateValue

HEADER_PREFIX_SIZE = 32
DESCRIPTOR_SIZE = 32
HEADER_TERMINATOR = 0x0D
NAME_SIZE = 11
DATE_LENGTH = 8


class FieldType(Enum):
    CHARACTER = "C"
    DATE = "D"
    FLOAT = "F"
    LOGICAL = "L"
    NUMERIC = "N"
    MEMO = "M"
    UNKNOWN = "?"

    @classmethod
    def from_code(cls, code: str) -> FieldType:
        """Map a type code to a FieldType; codes from other dialects become UNKNOWN."""
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    type: FieldType
    offset: int
    length: int
    decimal_count: int = 0
    index: int = 0
    code: str = ""

    @property
    def end(self) -> int:
        return self.offset + self.length


@dataclass(frozen=True)
class Header:
    version: int
    last_update: DateValue
    record_count: int
    header_length: int
    record_length: int
    fields: tuple[FieldDescriptor, ...]
    table_end: int = 0
    _by_name: dict[str, int] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.record_length < 1:
            raise FormatError(f"Record length must be at least 1, got {self.record_length}")
        expected_offset = 0
        for idx, fd in enumerate(self.fields):
            if fd.offset != expected_offset:
                raise FormatError(
                    f"Field {fd.name!r} starts at {fd.offset}, expected {expected_offset}"
                )
            if fd.length < 1:
                raise FormatError(f"Field {fd.name!r} has zero length")
            if fd.type is FieldType.DATE and fd.length != DATE_LENGTH:
                raise FormatError(
                    f"Date field {fd.name!r} must be {DATE_LENGTH} bytes, got {fd.length}"
                )
            if fd.name in self._by_name:
                raise FormatError(f"Duplicate field name {fd.name!r}")
            self._by_name[fd.name] = idx
            expected_offset = fd.end
        if expected_offset + 1 > self.record_length:
            raise FormatError(
                f"Fields span {expected_offset} bytes (+1 deletion flag) "
                f"but record length is {self.record_length}"
            )

    @property
    def field_count(self) -> int:
        return len(self.fields)

    @property
    def field_names(self) -> list[str]:
        return [fd.name for fd in self.fields]

    @property
    def data_start_gap(self) -> int:
        """Bytes between the end of the parsed table and the first record."""
        return max(self.header_length - self.table_end, 0)

    def field(self, index: int) -> FieldDescriptor:
        if not 0 <= index < len(self.fields):
            raise IndexOutOfRangeError(
                f"Field index out of range [0, {len(self.fields)}): {index}"
            )
        return self.fields[index]

    def field_index(self, name: str) -> int:
        try:
            return self._by_name[name]
        except KeyError:
            raise FieldNotFoundError(name) from None

    def field_by_name(self, name: str) -> FieldDescriptor:
        return self.fields[self.field_index(name)]

    def has_field(self, name: str) -> bool:
        return name in self._by_name


def _read_exact(source: BinaryIO, size: int, what: str) -> bytes:
    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        chunk = source.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    data = b"".join(chunks)
    if len(data) != size:
        raise FormatError(f"Unexpected end of stream reading {what}: {len(data)}/{size} bytes")
    return data


def _parse_descriptor(entry: bytes, index: int, offset: int) -> FieldDescriptor:
    name = entry[:NAME_SIZE].split(b"\x00", 1)[0].rstrip(b" ").decode("latin-1")
    code = chr(entry[NAME_SIZE])
    # bytes 12-15 hold an on-disk address that writers fill inconsistently; offsets are derived
    return FieldDescriptor(
        name=name,
        type=FieldType.from_code(code),
        offset=offset,
        length=entry[16],
        decimal_count=entry[17],
        index=index,
        code=code,
    )


def parse_header(source: BinaryIO) -> Header:
    """Read the header prefix and field-descriptor table from the current position."""
    prefix = _read_exact(source, HEADER_PREFIX_SIZE, "header prefix")
    record_count = int.from_bytes(prefix[4:8], "little")
    header_length = read_le_int16(prefix, 8)
    record_length = read_le_int16(prefix, 10)
    if header_length < HEADER_PREFIX_SIZE:
        raise FormatError(f"Header length {header_length} shorter than the fixed prefix")

    fields: list[FieldDescriptor] = []
    position = HEADER_PREFIX_SIZE
    offset = 0
    while position < header_length:
        first = _read_exact(source, 1, "field descriptor table")
        position += 1
        if first[0] == HEADER_TERMINATOR:
            break
        if position - 1 + DESCRIPTOR_SIZE > header_length:
            # not enough room for another entry; remaining bytes are padding
            break
        entry = first + _read_exact(source, DESCRIPTOR_SIZE - 1, "field descriptor")
        position += DESCRIPTOR_SIZE - 1
        descriptor = _parse_descriptor(entry, index=len(fields), offset=offset)
        fields.append(descriptor)
        offset += descriptor.length

    return Header(
        version=prefix[0],
        last_update=DateValue(1900 + prefix[1], prefix[2], prefix[3]),
        record_count=record_count,
        header_length=header_length,
        record_length=record_length,
        fields=tuple(fields),
        table_end=position,
    )
