"""Per-table profiling over a reader.

Purpose:
- Give a quick picture of a table before it is loaded anywhere: how many rows
  survive deletion, which columns are mostly empty, which cells fail to parse.
- Produce a summary that can be logged across runs (see ``dbfscan.profile.report``).
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from dbfscan.decoder import decode_field
from dbfscan.errors import DbfError
from dbfscan.reader import DbfReader
from dbfscan.row import DbfRow
from dbfscan.values import Value


@dataclass
class TableSummary:
    records: int
    declared_records: int
    null_counts: dict[str, int]
    parse_errors: dict[str, int]
    samples: list[dict[str, Any]] = field(default_factory=list)
    notes: str = ""

    @property
    def skipped_records(self) -> int:
        return max(self.declared_records - self.records, 0)


def _is_blank(value: Value) -> bool:
    if value is None:
        return True
    if isinstance(value, bytes):
        return not value.strip(b" \x00")
    return False


def profile_table(
    reader: DbfReader, sample_limit: int = 3, max_records: int | None = None
) -> TableSummary:
    """Scan the remaining records and count blanks and decode failures per field."""
    header = reader.header
    nulls: Counter[str] = Counter()
    errors: Counter[str] = Counter()
    samples: list[dict[str, Any]] = []
    records = 0

    while max_records is None or records < max_records:
        if not reader.advance():
            break
        record = reader.record_view()
        values: list[Value] = []
        for fd in header.fields:
            try:
                value = decode_field(fd, record)
            except DbfError:
                errors[fd.name] += 1
                value = None
            if _is_blank(value):
                nulls[fd.name] += 1
            values.append(value)
        records += 1
        if len(samples) < sample_limit:
            samples.append(DbfRow(header, values, encoding=reader.encoding).as_dict())

    return TableSummary(
        records=records,
        declared_records=header.record_count,
        null_counts={fd.name: nulls[fd.name] for fd in header.fields},
        parse_errors=dict(errors),
        samples=samples,
        notes="capped scan" if max_records is not None else "full scan",
    )
