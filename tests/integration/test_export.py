"""Integration tests: phpscope export (text, JSON envelopes, output file)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from phpscope.commands.export import run as export_run


def _args(path: Path, **overrides):
    fields = {"path": path, "format": None, "builtins": None, "output": None}
    fields.update(overrides)
    return type("Args", (), fields)()


def test_export_text(php_fixtures: Path, capsys: pytest.CaptureFixture) -> None:
    export_run(_args(php_fixtures / "shapes.php"))
    out = capsys.readouterr().out
    assert out.startswith(f"File [ {php_fixtures / 'shapes.php'} ] {{")
    assert "- Classes [2] {" in out
    assert "Method [ <inherited from Geometry\\Shape> abstract public method area ] {" in out


def test_export_json_envelope(php_fixtures: Path, capsys: pytest.CaptureFixture) -> None:
    export_run(_args(php_fixtures / "status.php", format="json"))
    data = json.loads(capsys.readouterr().out)
    assert data["status"] == "ok"
    (status,) = data["report"]["classes"]
    assert status["name"] == "Status"
    assert status["modifiers"] == ["final"]
    assert status["constants"]["Active"]["value"] == "active"


def test_export_json_error_envelope(php_fixtures: Path, capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as exc_info:
        export_run(_args(php_fixtures / "broken.php", format="json"))
    assert exc_info.value.code == 1
    data = json.loads(capsys.readouterr().out)
    assert data["status"] == "error"
    assert "syntax error" in data["message"]


def test_export_text_error_goes_to_stderr(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as exc_info:
        export_run(_args(tmp_path / "missing.php"))
    assert exc_info.value.code == 1
    out, err = capsys.readouterr()
    assert out == ""
    assert err.startswith("Error: Cannot load")


def test_export_redeclared_builtin(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    php_file = tmp_path / "exception.php"
    php_file.write_text("<?php class Exception {}", encoding="utf-8")
    with pytest.raises(SystemExit):
        export_run(_args(php_file))
    assert "Cannot redeclare class Exception" in capsys.readouterr().err

    export_run(_args(php_file, builtins=False, format="json"))
    data = json.loads(capsys.readouterr().out)
    assert [c["name"] for c in data["report"]["classes"]] == ["Exception"]


def test_export_to_file(php_fixtures: Path, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    out_file = tmp_path / "report.json"
    export_run(_args(php_fixtures / "undocumented.php", format="json", output=out_file))
    assert capsys.readouterr().out == ""
    data = json.loads(out_file.read_text(encoding="utf-8"))
    assert [f["name"] for f in data["report"]["functions"]] == ["greet"]


def test_export_format_from_project_config(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    (tmp_path / ".phpscope.json").write_text(json.dumps({"output": {"format": "json", "indent": 0}}))
    php_file = tmp_path / "lib.php"
    php_file.write_text("<?php const ANSWER = 42;", encoding="utf-8")
    export_run(_args(php_file))
    data = json.loads(capsys.readouterr().out)
    assert data["report"]["constants"][0]["value"] == 42
