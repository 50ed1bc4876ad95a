"""Helpers to log table profiles for trend tracking."""

from __future__ import annotations

import csv
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, cast

import orjson

from dbfscan.profile.summary import TableSummary
from dbfscan.values import DateValue


def summary_to_row(
    summary: TableSummary | Mapping[str, object], source: str, tag: str | None = None
) -> dict:
    """Flatten a TableSummary into a CSV/JSONL-friendly row."""
    if isinstance(summary, Mapping):
        records = int(cast(Any, summary.get("records", 0)) or 0)
        declared = int(cast(Any, summary.get("declared_records", 0)) or 0)
        nulls_obj: Any = summary.get("null_counts", {})
        errors_obj: Any = summary.get("parse_errors", {})
        null_counts = dict(nulls_obj) if isinstance(nulls_obj, Mapping) else {}
        parse_errors = dict(errors_obj) if isinstance(errors_obj, Mapping) else {}
        notes = str(summary.get("notes", ""))
    else:
        records = summary.records
        declared = summary.declared_records
        null_counts = summary.null_counts
        parse_errors = summary.parse_errors
        notes = summary.notes
    return {
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "source": source,
        "tag": tag or "",
        "records": records,
        "declared_records": declared,
        "null_counts": orjson.dumps(null_counts).decode(),
        "parse_errors": orjson.dumps(parse_errors).decode(),
        "notes": notes,
    }


def _default(obj: object) -> object:
    # orjson handles dataclasses natively; bytes and stored dates need a hint
    if isinstance(obj, DateValue):
        return obj.isoformat()
    if isinstance(obj, bytes):
        return obj.decode("latin-1")
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def append_csv(path: Path, row: dict) -> None:
    """Append a row to a CSV file, writing headers when the file is new."""
    path.parent.mkdir(parents=True, exist_ok=True)
    is_new = not path.exists()
    with path.open("a", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(row.keys()))
        if is_new:
            writer.writeheader()
        writer.writerow(row)


def append_jsonl(path: Path, payload: dict) -> None:
    """Append a JSON line (UTF-8) to a log file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("ab") as f:
        f.write(orjson.dumps(payload, default=_default) + b"\n")
