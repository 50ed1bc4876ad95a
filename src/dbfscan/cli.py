import logging
from pathlib import Path

import orjson
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from dbfscan.errors import DbfError
from dbfscan.export import rows_to_arrow, rows_to_jsonl
from dbfscan.manifest import (
    load_manifest,
    render_validation_html,
    sample_manifest,
    validate_manifest,
)
from dbfscan.profile.report import append_csv, append_jsonl, summary_to_row
from dbfscan.profile.summary import profile_table
from dbfscan.reader import DEFAULT_ENCODING, DbfReader, open_dbf

app = typer.Typer(help="Inspect and decode xBase/DBF tables.")
manifest_app = typer.Typer(help="Dataset manifest helpers (validation, templates).")
console = Console()
SUPPORTED_FORMATS = {"json", "jsonl", "arrow"}

app.add_typer(manifest_app, name="manifest")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _open(path: Path, encoding: str) -> DbfReader:
    if not path.is_file():
        raise typer.BadParameter(f"Input file not found: {path}")
    try:
        return open_dbf(path, encoding=encoding)
    except DbfError as exc:
        raise typer.BadParameter(f"Cannot read DBF {path}: {exc}") from exc


def _iter_limited(reader: DbfReader, limit: int | None):
    for idx, row in enumerate(reader):
        if limit is not None and idx >= limit:
            break
        yield row


@app.command()
def header(
    input: Path = typer.Argument(..., help="DBF file to inspect."),
) -> None:
    """Print header geometry and the field-descriptor table."""
    with _open(input, DEFAULT_ENCODING) as reader:
        hdr = reader.header
    console.print(
        f"[bold]version[/] 0x{hdr.version:02X}  [bold]updated[/] {hdr.last_update.isoformat()}  "
        f"[bold]records[/] {hdr.record_count}  [bold]header[/] {hdr.header_length}B  "
        f"[bold]record[/] {hdr.record_length}B"
    )
    table = Table(title=str(input))
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Offset", justify="right")
    table.add_column("Length", justify="right")
    table.add_column("Decimals", justify="right")
    for fd in hdr.fields:
        table.add_row(
            str(fd.index),
            fd.name,
            f"{fd.type.name} ({fd.code})",
            str(fd.offset),
            str(fd.length),
            str(fd.decimal_count),
        )
    console.print(table)


@app.command()
def dump(
    input: Path = typer.Argument(..., help="DBF file to decode."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Optional path to write decoded rows."
    ),
    format: str = typer.Option(
        "json", "--format", "-f", help="Output format: json | jsonl | arrow."
    ),
    encoding: str = typer.Option(
        DEFAULT_ENCODING, "--encoding", "-e", help="Charset for character fields."
    ),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Stop after this many rows."),
) -> None:
    """Decode active records and emit them as JSON, JSONL, or Arrow IPC."""
    fmt = format.lower()
    if fmt not in SUPPORTED_FORMATS:
        raise typer.BadParameter(f"Unsupported format '{format}'. Choose from {SUPPORTED_FORMATS}.")
    if fmt != "json" and output is None:
        raise typer.BadParameter(f"--output is required for format '{fmt}'.")

    with _open(input, encoding) as reader:
        rows = _iter_limited(reader, limit)
        try:
            if fmt == "jsonl":
                count = rows_to_jsonl(rows, output)
            elif fmt == "arrow":
                count = rows_to_arrow(rows, reader.header, output)
            else:
                payload = [row.as_dict() for row in rows]
                count = len(payload)
                if output:
                    output.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
                else:
                    console.print(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())
        except DbfError as exc:
            raise typer.BadParameter(f"Cannot decode {input}: {exc}") from exc
    if output:
        console.print(f"[bold green]Wrote[/] {count} rows to {output}")


@app.command()
def profile(
    input: Path = typer.Argument(..., help="DBF file to profile."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Optional path to write the profile JSON."
    ),
    encoding: str = typer.Option(
        DEFAULT_ENCODING, "--encoding", "-e", help="Charset for character fields."
    ),
    samples: int = typer.Option(3, "--samples", help="Decoded rows to keep as samples."),
    max_records: int | None = typer.Option(None, "--max-records", help="Cap the scan."),
    log_csv: Path | None = typer.Option(
        None, "--log-csv", help="Append summary as a CSV row for trend tracking."
    ),
    log_jsonl: Path | None = typer.Option(
        None, "--log-jsonl", help="Append full payload as JSONL for trend tracking."
    ),
    tag: str | None = typer.Option(None, "--tag", help="Optional tag to mark this run."),
) -> None:
    """Count active/skipped records, blank cells and parse failures per field."""
    with _open(input, encoding) as reader:
        summary = profile_table(reader, sample_limit=samples, max_records=max_records)
    payload = {"source": str(input), "profile": summary, "tag": tag}

    if log_csv:
        append_csv(log_csv, summary_to_row(summary, source=str(input), tag=tag))
        console.print(f"[bold green]Appended CSV log[/] to {log_csv}")
    if log_jsonl:
        append_jsonl(log_jsonl, payload)
        console.print(f"[bold green]Appended JSONL log[/] to {log_jsonl}")

    if output:
        output.write_bytes(orjson.dumps(payload))
        console.print(f"[bold green]Wrote profile[/] to {output}")
    else:
        console.print(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())


@manifest_app.command("validate")
def manifest_validate(
    manifest: Path = typer.Argument(..., help="Manifest file (json/yaml)."),
    html: Path | None = typer.Option(None, "--html", help="Optional HTML report path."),
) -> None:
    """Validate the table a manifest describes and report warnings."""
    if not manifest.is_file():
        raise typer.BadParameter(f"Manifest not found: {manifest}")
    try:
        loaded = load_manifest(manifest)
    except (ValueError, KeyError) as exc:
        raise typer.BadParameter(f"Invalid manifest {manifest}: {exc}") from exc
    result = validate_manifest(loaded)
    console.print(orjson.dumps(result, option=orjson.OPT_INDENT_2).decode())
    if html:
        render_validation_html(result, html)
        console.print(f"[bold green]Wrote HTML report[/] to {html}")
    if result["warnings"]:
        raise typer.Exit(code=1)


@manifest_app.command("sample")
def manifest_sample() -> None:
    """Print a manifest template to edit."""
    console.print(orjson.dumps(sample_manifest(), option=orjson.OPT_INDENT_2).decode())


if __name__ == "__main__":
    app()
