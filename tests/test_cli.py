from __future__ import annotations

import json
import plistlib
from pathlib import Path

from typer.testing import CliRunner

from plistkit import cli

runner = CliRunner()


def _write_xml(tmp_path: Path, value: object, sort_keys: bool = True) -> Path:
    path = tmp_path / "input.plist"
    path.write_bytes(plistlib.dumps(value, fmt=plistlib.FMT_XML, sort_keys=sort_keys))
    return path


def test_convert_writes_output_file(tmp_path: Path) -> None:
    source = _write_xml(tmp_path, {"a": 1, "b": [True, "x"]})
    target = tmp_path / "out.plist"
    result = runner.invoke(
        cli.app, ["convert", str(source), "--format", "binary", "-o", str(target)]
    )
    assert result.exit_code == 0, result.output
    data = target.read_bytes()
    assert data.startswith(b"bplist")
    assert plistlib.loads(data) == {"a": 1, "b": [True, "x"]}


def test_convert_to_stdout_in_openstep(tmp_path: Path) -> None:
    source = _write_xml(tmp_path, {"b": "2", "a": "1"})
    result = runner.invoke(cli.app, ["convert", str(source), "-f", "openstep"])
    assert result.exit_code == 0, result.output
    assert result.stdout == "{\n\ta = 1;\n\tb = 2;\n}\n"


def test_convert_reads_stdin() -> None:
    result = runner.invoke(
        cli.app, ["convert", "-", "--format", "xml"], input="{ key = value; }"
    )
    assert result.exit_code == 0, result.output
    assert plistlib.loads(result.stdout_bytes) == {"key": "value"}


def test_convert_uses_config_defaults(tmp_path: Path) -> None:
    config = tmp_path / "plistkit.toml"
    config.write_text('[codec]\nformat = "openstep"\nsort_keys = false\n', encoding="utf-8")
    source = _write_xml(tmp_path, {"b": "2", "a": "1"}, sort_keys=False)
    result = runner.invoke(cli.app, ["convert", str(source), "--config", str(config)])
    assert result.exit_code == 0, result.output
    assert result.stdout == "{\n\tb = 2;\n\ta = 1;\n}\n"

    result = runner.invoke(
        cli.app, ["convert", str(source), "--config", str(config), "--sort-keys"]
    )
    assert result.exit_code == 0, result.output
    assert result.stdout == "{\n\ta = 1;\n\tb = 2;\n}\n"


def test_convert_reports_codec_errors(tmp_path: Path) -> None:
    source = _write_xml(tmp_path, {"count": 3})
    result = runner.invoke(cli.app, ["convert", str(source), "--format", "openstep"])
    assert result.exit_code == 1
    assert "Property list invalid for format" in result.output


def test_convert_rejects_unknown_format(tmp_path: Path) -> None:
    source = _write_xml(tmp_path, {})
    result = runner.invoke(cli.app, ["convert", str(source), "--format", "yaml"])
    assert result.exit_code == 2
    assert "unknown property list format" in result.output


def test_inspect_prints_json(tmp_path: Path) -> None:
    source = _write_xml(tmp_path, {"b": b"\x00", "a": 1})
    result = runner.invoke(cli.app, ["inspect", str(source)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {
        "format": "xml",
        "format_description": "XML format version 1.0",
        "kind": "Dictionary",
        "value": {"a": 1, "b": "AA=="},
    }


def test_inspect_rejects_corrupt_input(tmp_path: Path) -> None:
    source = tmp_path / "broken.plist"
    source.write_bytes(b"{ unterminated = ")
    result = runner.invoke(cli.app, ["inspect", str(source)])
    assert result.exit_code == 1
    assert "isn't in the correct format" in result.output


def test_missing_input_is_a_usage_error(tmp_path: Path) -> None:
    missing = tmp_path / "absent.plist"
    for command in ("convert", "inspect"):
        result = runner.invoke(cli.app, [command, str(missing)])
        assert result.exit_code == 2
        assert "cannot read" in result.output
        assert not isinstance(result.exception, FileNotFoundError)
