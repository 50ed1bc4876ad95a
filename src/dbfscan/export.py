"""Write decoded rows to JSONL, Arrow IPC, or a pandas DataFrame."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import orjson
import pandas as pd
import pyarrow as pa

from dbfscan.bytepattern import trim_trailing_spaces
from dbfscan.header import FieldType, Header
from dbfscan.row import DbfRow
from dbfscan.values import DateValue

ARROW_TYPES: dict[FieldType, pa.DataType] = {
    FieldType.CHARACTER: pa.string(),
    FieldType.DATE: pa.date32(),
    FieldType.FLOAT: pa.float64(),
    FieldType.NUMERIC: pa.float64(),
    FieldType.LOGICAL: pa.bool_(),
    FieldType.MEMO: pa.int64(),
    FieldType.UNKNOWN: pa.null(),
}


def rows_to_jsonl(rows: Iterable[DbfRow], path: Path, gzip_output: bool = False) -> int:
    """Write rows as JSONL (text decoded, dates ISO). Returns the row count."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if gzip_output:
        import gzip as gzip_lib

        handle = gzip_lib.open(path, "wb")
    else:
        handle = path.open("wb")

    count = 0
    with handle as f:
        for row in rows:
            f.write(orjson.dumps(row.as_dict()) + b"\n")
            count += 1
    return count


def arrow_schema(header: Header) -> pa.Schema:
    return pa.schema([pa.field(fd.name, ARROW_TYPES[fd.type]) for fd in header.fields])


def _arrow_value(value: Any, encoding: str) -> Any:
    if isinstance(value, bytes):
        return trim_trailing_spaces(value).decode(encoding, errors="replace")
    if isinstance(value, DateValue):
        return value.to_date() if value.is_valid() else None
    return value


def rows_to_table(rows: Iterable[DbfRow], header: Header) -> pa.Table:
    """Collect rows into a typed Arrow table, one column per field."""
    columns: list[list[Any]] = [[] for _ in header.fields]
    for row in rows:
        for idx, value in enumerate(row):
            columns[idx].append(_arrow_value(value, row.encoding))
    schema = arrow_schema(header)
    arrays = [pa.array(col, type=schema.field(i).type) for i, col in enumerate(columns)]
    return pa.Table.from_arrays(arrays, schema=schema)


def rows_to_arrow(rows: Iterable[DbfRow], header: Header, path: Path) -> int:
    """Write rows to Arrow IPC for analytics-friendly consumption."""
    path.parent.mkdir(parents=True, exist_ok=True)
    table = rows_to_table(rows, header)
    with pa.OSFile(str(path), "wb") as sink:
        with pa.ipc.new_file(sink, table.schema) as writer:
            writer.write_table(table)
    return table.num_rows


def rows_to_dataframe(rows: Iterable[DbfRow], header: Header) -> pd.DataFrame:
    return pd.DataFrame.from_records(
        [row.as_dict() for row in rows], columns=header.field_names
    )
