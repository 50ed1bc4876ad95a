"""Primitive byte-pattern helpers shared by the header parser and field decoder.

DBF stores numbers as left-padded ASCII digits, while the few binary integers
in the format (header counts, short memo links) are little-endian.
"""

from __future__ import annotations

SPACE = 0x20
ZERO = 0x30


def read_le_int32(data: bytes | bytearray | memoryview, offset: int = 0) -> int:
    """Assemble a signed 32-bit little-endian integer from 4 bytes."""
    chunk = bytes(data[offset : offset + 4])
    if len(chunk) != 4:
        raise ValueError(f"Need 4 bytes at offset {offset}, got {len(chunk)}")
    return int.from_bytes(chunk, "little", signed=True)


def read_le_int16(data: bytes | bytearray | memoryview, offset: int = 0) -> int:
    chunk = bytes(data[offset : offset + 2])
    if len(chunk) != 2:
        raise ValueError(f"Need 2 bytes at offset {offset}, got {len(chunk)}")
    return int.from_bytes(chunk, "little")


def parse_int(data: bytes | bytearray | memoryview, start: int = 0, end: int | None = None) -> int:
    """Parse a run of ASCII digits as a positive magnitude.

    Stops at the first space or at ``end``. There is no sign handling and no
    validation: any other byte contributes ``byte - ord("0")``, matching the
    legacy readers.
    """
    stop = len(data) if end is None else min(end, len(data))
    result = 0
    for i in range(start, stop):
        byte = data[i]
        if byte == SPACE:
            break
        result = result * 10 + (byte - ZERO)
    return result


def trimmed_length(
    data: bytes | bytearray | memoryview, start: int = 0, length: int | None = None
) -> int:
    """Count the bytes left in ``data[start:start+length]`` after dropping trailing spaces."""
    if length is None:
        length = len(data) - start
    end = start + length
    while end > start and data[end - 1] == SPACE:
        end -= 1
    return end - start


def trim_trailing_spaces(
    data: bytes | bytearray | memoryview, start: int = 0, length: int | None = None
) -> bytes:
    """Copy out the span with trailing spaces removed."""
    size = trimmed_length(data, start, length)
    return bytes(data[start : start + size])


def contains(data: bytes | bytearray | memoryview, value: int) -> bool:
    return value in data
