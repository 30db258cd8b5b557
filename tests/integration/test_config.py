"""Integration tests: phpscope config --show and --set."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from phpscope.commands.config_cmd import run as config_run
from phpscope.config import global_config_path


def _args(path: Path, show: bool = False, set_key=None, global_: bool = False):
    return type(
        "Args", (), {"path": path, "show": show, "set_key": set_key, "global_": global_}
    )()


def _shown_config(out: str) -> dict:
    # Output is "# Config: ..." then JSON; parse from first {
    start = out.find("{")
    assert start >= 0, "Expected JSON in config output"
    return json.loads(out[start:])


def test_config_show_defaults(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    config_run(_args(tmp_path, show=True))
    out = capsys.readouterr().out
    assert out.startswith("# Config: defaults + global\n")
    data = _shown_config(out)
    assert data["output"]["format"] == "text"
    assert data["scan"]["builtins"] is True


def test_config_set_project_then_show(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    config_run(_args(tmp_path, set_key="output.format=json"))
    assert "Set output.format = \"json\" in project" in capsys.readouterr().out
    saved = json.loads((tmp_path / ".phpscope.json").read_text(encoding="utf-8"))
    assert saved == {"output": {"format": "json"}}

    config_run(_args(tmp_path / "sub.php", show=True))
    out = capsys.readouterr().out
    assert f"+ project ({tmp_path.resolve().as_posix()})" in out
    assert _shown_config(out)["output"] == {"format": "json", "indent": 2}


def test_config_set_global(tmp_path: Path, isolated_home: Path, capsys: pytest.CaptureFixture) -> None:
    config_run(_args(tmp_path, set_key="scan.builtins=false", global_=True))
    assert "in global config" in capsys.readouterr().out
    assert global_config_path() == isolated_home / "config.json"
    assert json.loads(global_config_path().read_text()) == {"scan": {"builtins": False}}
    assert not (tmp_path / ".phpscope.json").exists()


def test_config_requires_an_action(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as exc_info:
        config_run(_args(tmp_path))
    assert exc_info.value.code == 1
    assert "specify --show or --set" in capsys.readouterr().err


def test_config_set_requires_key_value(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit):
        config_run(_args(tmp_path, set_key="output.format"))
    assert "KEY=VALUE" in capsys.readouterr().err
