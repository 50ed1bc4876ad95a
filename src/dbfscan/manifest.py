from __future__ import annotations

import hashlib
from dataclasses import dataclass
from html import escape
from pathlib import Path
from typing import Any

import orjson
import yaml

from dbfscan.errors import DbfError, FormatError, ParseError
from dbfscan.reader import DEFAULT_ENCODING, open_dbf


@dataclass
class Manifest:
    name: str
    path: Path
    encoding: str = DEFAULT_ENCODING
    hash: str | None = None
    notes: str | None = None
    checks: dict[str, Any] | None = None

    @staticmethod
    def from_mapping(payload: dict[str, Any]) -> Manifest:
        return Manifest(
            name=str(payload["name"]),
            path=Path(payload["path"]),
            encoding=str(payload.get("encoding") or DEFAULT_ENCODING),
            hash=payload.get("hash"),
            notes=payload.get("notes"),
            checks=payload.get("checks"),
        )


def _hash_file(path: Path, algo: str = "sha256") -> str:
    h = hashlib.new(algo)
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return f"{algo}:{h.hexdigest()}"


def validate_manifest(manifest: Manifest) -> dict[str, Any]:
    """Open the table a manifest points at and report header facts plus check warnings."""
    path = manifest.path
    checks = manifest.checks or {}
    result: dict[str, Any] = {
        "name": manifest.name,
        "path": str(path),
        "exists": path.exists(),
        "size_bytes": path.stat().st_size if path.exists() else 0,
        "encoding": manifest.encoding,
        "hash_expected": manifest.hash,
        "hash_actual": None,
        "hash_match": None,
        "header": None,
        "declared_records": 0,
        "records": 0,
        "skipped_records": 0,
        "parse_errors": 0,
        "missing_fields": [],
        "warnings": [],
    }
    if not path.exists():
        result["warnings"].append("file_missing")
        return result

    if manifest.hash:
        algo, _hex = (
            manifest.hash.split(":", 1) if ":" in manifest.hash else ("sha256", manifest.hash)
        )
        actual = _hash_file(path, algo=algo)
        result["hash_actual"] = actual
        result["hash_match"] = actual == manifest.hash
        if not result["hash_match"]:
            result["warnings"].append("hash_mismatch")

    try:
        reader = open_dbf(path, encoding=manifest.encoding)
    except FormatError as exc:
        result["warnings"].append("bad_header")
        result["error"] = str(exc)
        return result

    with reader:
        header = reader.header
        result["header"] = {
            "version": header.version,
            "last_update": header.last_update.isoformat(),
            "header_length": header.header_length,
            "record_length": header.record_length,
            "fields": [
                {"name": fd.name, "type": fd.type.name, "length": fd.length}
                for fd in header.fields
            ],
        }
        result["declared_records"] = header.record_count

        max_records = int(checks["max_records"]) if checks.get("max_records") else None
        records = 0
        parse_errors = 0
        while max_records is None or records < max_records:
            try:
                values = reader.next_values()
            except ParseError:
                parse_errors += 1
                records += 1
                continue
            except DbfError as exc:
                result["error"] = str(exc)
                break
            if values is None:
                break
            records += 1
        result["records"] = records
        result["parse_errors"] = parse_errors
        if max_records is not None:
            result["records_capped"] = max_records
        else:
            result["skipped_records"] = max(header.record_count - records, 0)

        required = [str(name) for name in checks.get("required_fields") or []]
        result["missing_fields"] = [name for name in required if not header.has_field(name)]

    if result["missing_fields"]:
        result["warnings"].append("missing_fields")
    expected = checks.get("expected_records")
    if expected is not None and int(expected) != result["declared_records"]:
        result["warnings"].append("record_count_mismatch")
    max_skipped = checks.get("max_skipped_ratio")
    if max_skipped is not None and result["declared_records"]:
        ratio = result["skipped_records"] / result["declared_records"]
        result["skipped_ratio"] = round(ratio, 4)
        if ratio > float(max_skipped):
            result["warnings"].append("high_skipped_ratio")
    if parse_errors:
        result["warnings"].append("parse_errors")
    return result


def load_manifest(path: Path) -> Manifest:
    """Load a YAML or JSON manifest; a relative table path is taken from the manifest's folder."""
    text = path.read_text()
    if path.suffix.lower() in {".yml", ".yaml"}:
        payload = yaml.safe_load(text)
    else:
        payload = orjson.loads(text)
    if not isinstance(payload, dict):
        raise ValueError(f"Manifest {path} must hold a mapping, got {type(payload).__name__}")
    manifest = Manifest.from_mapping(payload)
    if not manifest.path.is_absolute():
        manifest.path = path.parent / manifest.path
    return manifest


def sample_manifest() -> dict[str, Any]:
    return {
        "name": "customers",
        "path": "data/customers.dbf",
        "encoding": "cp1252",
        "hash": "sha256:<hex>",
        "notes": "edit with real details",
        "checks": {
            "max_records": None,
            "expected_records": 1200,
            "required_fields": ["CUSTID", "NAME"],
            "max_skipped_ratio": 0.1,
        },
    }


COUNT_KEYS = ("declared_records", "records", "skipped_records", "parse_errors", "records_capped")


def _table(pairs: list[tuple[str, Any]]) -> str:
    rows = "".join(
        f"<tr><th>{escape(str(k))}</th><td>{escape(str(v))}</td></tr>" for k, v in pairs
    )
    return f'<table border="1" cellpadding="4" cellspacing="0">{rows}</table>'


def render_validation_html(result: dict[str, Any], output: Path) -> None:
    """Render an HTML report: record counts, header geometry, fields, then the rest."""
    output.parent.mkdir(parents=True, exist_ok=True)
    warnings = result.get("warnings", [])
    header = result.get("header") or {}
    counts = [(k, result[k]) for k in COUNT_KEYS if k in result]
    geometry = [(k, v) for k, v in header.items() if k != "fields"]
    other = [
        (k, v)
        for k, v in result.items()
        if k not in {"name", "warnings", "header", *COUNT_KEYS}
    ]
    field_rows = "".join(
        f"<tr><td>{escape(fd['name'])}</td><td>{fd['type']}</td><td>{fd['length']}</td></tr>"
        for fd in header.get("fields", [])
    )
    html = f"""<!DOCTYPE html>
<html><head><title>dbfscan Manifest Validation</title></head>
<body>
<h1>dbfscan Manifest Validation Report</h1>
<p><strong>Name:</strong> {escape(str(result.get("name")))}</p>
<p><strong>Warnings:</strong> {escape(", ".join(warnings)) if warnings else "None"}</p>
<h3>Records</h3>
{_table(counts)}
<h3>Header</h3>
{_table(geometry) if geometry else "<p>Header not readable.</p>"}
<h3>Fields</h3>
<table border="1" cellpadding="4" cellspacing="0">
<tr><th>Name</th><th>Type</th><th>Length</th></tr>{field_rows}
</table>
<h3>File</h3>
{_table(other)}
</body></html>
"""
    output.write_text(html)
