"""Exception hierarchy for DBF decoding."""

from __future__ import annotations


class DbfError(Exception):
    """Base class for all dbfscan errors."""


class FormatError(DbfError):
    """Header or field-descriptor table is malformed or truncated."""


class ParseError(DbfError, ValueError):
    """A Float, Numeric or long-form Memo cell does not hold a valid number."""

    def __init__(self, field_name: str, raw: bytes) -> None:
        super().__init__(f"Failed to parse number from field {field_name!r}: {raw!r}")
        self.field_name = field_name
        self.raw = raw


class UnsupportedMemoModeError(DbfError):
    def __init__(self, field_name: str, length: int) -> None:
        super().__init__(f"Unknown memo mode for field {field_name!r}: length {length}")
        self.field_name = field_name
        self.length = length


class FieldNotFoundError(DbfError, KeyError):
    def __init__(self, field_name: str) -> None:
        super().__init__(f"Field {field_name!r} does not exist")
        self.field_name = field_name

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class IndexOutOfRangeError(DbfError, IndexError):
    """Record or field index outside the valid range."""


class UnsupportedOperationError(DbfError):
    """Operation needs a capability the source lacks (e.g. seeking)."""


class ClosedError(DbfError):
    """Reader was used after close()."""


class TruncatedRecordError(DbfError):
    """Input ended in the middle of a record."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Record truncated: expected {expected} bytes, got {actual}")
        self.expected = expected
        self.actual = actual
