"""Value types produced by the field decoder."""

from __future__ import annotations

from datetime import date
from typing import NamedTuple, Union


class DateValue(NamedTuple):
    """Calendar date as stored on disk.

    Not validated: a blank or garbled cell may produce month 0 or day 40. Use
    :meth:`is_valid` or :meth:`to_date` when a real ``datetime.date`` is needed.
    """

    year: int
    month: int
    day: int

    def is_valid(self) -> bool:
        try:
            self.to_date()
        except ValueError:
            return False
        return True

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


# bytes: Character, DateValue: Date, float: Float/Numeric, bool: Logical, int: Memo
Value = Union[bytes, DateValue, float, bool, int, None]
