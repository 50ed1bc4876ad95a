import json
from pathlib import Path

from typer.testing import CliRunner

from dbf_fixtures import PEOPLE_FIELDS, active, build_dbf, people_dbf
from dbfscan.cli import app
from dbfscan.errors import ParseError

runner = CliRunner()


def _write_people(tmp_path: Path) -> Path:
    path = tmp_path / "people.dbf"
    path.write_bytes(people_dbf())
    return path


def test_header_command_lists_fields(tmp_path: Path) -> None:
    result = runner.invoke(app, ["header", str(_write_people(tmp_path))])
    assert result.exit_code == 0
    assert "NAME" in result.output
    assert "NUMERIC" in result.output


def test_dump_json_to_file(tmp_path: Path) -> None:
    out = tmp_path / "rows.json"
    result = runner.invoke(
        app, ["dump", str(_write_people(tmp_path)), "-o", str(out), "--limit", "2"]
    )
    assert result.exit_code == 0
    assert json.loads(out.read_text()) == [
        {"NAME": "ALICE", "AGE": 25.0},
        {"NAME": "BOB", "AGE": 31.0},
    ]


def test_dump_rejects_unknown_format(tmp_path: Path) -> None:
    result = runner.invoke(app, ["dump", str(_write_people(tmp_path)), "--format", "xml"])
    assert result.exit_code != 0


def test_dump_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["dump", str(tmp_path / "nope.dbf")])
    assert result.exit_code != 0


def test_dump_reports_bad_cell_as_usage_error(tmp_path: Path) -> None:
    path = tmp_path / "bad.dbf"
    path.write_bytes(build_dbf(PEOPLE_FIELDS, [active(b"ALICE     ", b"x25")]))
    result = runner.invoke(app, ["dump", str(path)])
    assert result.exit_code == 2
    assert not isinstance(result.exception, ParseError)
    assert "AGE" in result.output


def test_profile_writes_output_and_logs(tmp_path: Path) -> None:
    out = tmp_path / "profile.json"
    log_csv = tmp_path / "logs" / "profile.csv"
    result = runner.invoke(
        app,
        ["profile", str(_write_people(tmp_path)), "-o", str(out), "--log-csv", str(log_csv)],
    )
    assert result.exit_code == 0
    payload = json.loads(out.read_text())
    assert payload["profile"]["records"] == 3
    assert log_csv.exists()


def test_manifest_validate_exit_code(tmp_path: Path) -> None:
    data = _write_people(tmp_path)
    manifest = tmp_path / "people.json"
    manifest.write_text(json.dumps({"name": "people", "path": str(data)}))
    ok = runner.invoke(app, ["manifest", "validate", str(manifest)])
    assert ok.exit_code == 0

    manifest.write_text(
        json.dumps({"name": "people", "path": str(data), "checks": {"expected_records": 9}})
    )
    failing = runner.invoke(app, ["manifest", "validate", str(manifest)])
    assert failing.exit_code == 1
