"""Name-based accessors over a decoded row.

The core yields plain value tuples; :class:`DbfRow` adds lookups by field name
and typed getters. Numeric getters default absent values to zero here, never
in the decoder.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from datetime import date
from decimal import Decimal
from typing import Any, Union, overload

from dbfscan.bytepattern import trim_trailing_spaces
from dbfscan.errors import IndexOutOfRangeError
from dbfscan.header import FieldDescriptor, FieldType, Header
from dbfscan.values import DateValue, Value

FieldKey = Union[int, str, FieldDescriptor]


class DbfRow(Sequence):
    """Immutable snapshot of one decoded record."""

    __slots__ = ("_header", "_values", "_encoding")

    def __init__(self, header: Header, values: Sequence[Value], encoding: str = "latin-1"):
        if len(values) != header.field_count:
            raise ValueError(f"Expected {header.field_count} values, got {len(values)}")
        self._header = header
        self._values = tuple(values)
        self._encoding = encoding

    @property
    def header(self) -> Header:
        return self._header

    @property
    def values(self) -> tuple[Value, ...]:
        return self._values

    @property
    def encoding(self) -> str:
        return self._encoding

    def __len__(self) -> int:
        return len(self._values)

    @overload
    def __getitem__(self, key: int | str | FieldDescriptor) -> Value: ...

    @overload
    def __getitem__(self, key: slice) -> tuple[Value, ...]: ...

    def __getitem__(self, key):
        if isinstance(key, slice):
            return self._values[key]
        return self._values[self._index(key)]

    def __iter__(self) -> Iterator[Value]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DbfRow):
            return self._values == other._values and self._header == other._header
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._values)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{fd.name}={v!r}" for fd, v in zip(self._header.fields, self._values))
        return f"DbfRow({pairs})"

    def _index(self, key: FieldKey) -> int:
        if isinstance(key, FieldDescriptor):
            key = key.index
        if isinstance(key, str):
            return self._header.field_index(key)
        if isinstance(key, bool) or not isinstance(key, int):
            raise TypeError(f"Field key must be int, str or FieldDescriptor, not {type(key)!r}")
        if not 0 <= key < len(self._values):
            raise IndexOutOfRangeError(f"Field index out of range [0, {len(self._values)}): {key}")
        return key

    def get(self, key: FieldKey) -> Value:
        return self._values[self._index(key)]

    def get_string(self, key: FieldKey, encoding: str | None = None) -> str | None:
        value = self.get(key)
        if value is None:
            return None
        if not isinstance(value, bytes):
            raise TypeError(f"Field {key!r} does not hold character data")
        return trim_trailing_spaces(value).decode(encoding or self._encoding)

    def get_bool(self, key: FieldKey) -> bool:
        value = self.get(key)
        return bool(value) if value is not None else False

    def _number(self, key: FieldKey) -> float | int:
        value = self.get(key)
        if value is None:
            return 0
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"Field {key!r} does not hold a number")
        return value

    def get_int(self, key: FieldKey) -> int:
        return int(self._number(key))

    def get_float(self, key: FieldKey) -> float:
        return float(self._number(key))

    def get_decimal(self, key: FieldKey) -> Decimal | None:
        value = self.get(key)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"Field {key!r} does not hold a number")
        return Decimal(str(value))

    def get_date(self, key: FieldKey) -> date | None:
        value = self.get(key)
        if value is None:
            return None
        if not isinstance(value, DateValue):
            raise TypeError(f"Field {key!r} does not hold a date")
        return value.to_date()

    def as_dict(self, decode_text: bool = True) -> dict[str, Any]:
        """Map field names to values, optionally rendering text and ISO dates."""
        out: dict[str, Any] = {}
        for fd, value in zip(self._header.fields, self._values):
            if decode_text and fd.type is FieldType.CHARACTER and isinstance(value, bytes):
                out[fd.name] = trim_trailing_spaces(value).decode(self._encoding, errors="replace")
            elif decode_text and isinstance(value, DateValue):
                out[fd.name] = value.isoformat() if value.is_valid() else None
            else:
                out[fd.name] = value
        return out
