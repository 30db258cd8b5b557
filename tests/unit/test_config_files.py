"""Unit tests for config (default_config, find_project_root, load_config, resolve_path)."""

from __future__ import annotations

import json
from pathlib import Path


from phpscope.config import (
    PROJECT_CONFIG_FILENAME,
    _deep_merge,
    default_config,
    find_project_root,
    global_config_path,
    load_config,
    project_config_path,
    resolve_path,
    save_config,
)


def test_default_config() -> None:
    cfg = default_config()
    assert cfg["output"] == {"format": "text", "indent": 2}
    assert cfg["scan"]["builtins"] is True
    assert cfg["logging"]["level"] == "WARNING"


def test_resolve_path(tmp_path: Path) -> None:
    p = tmp_path / "sub" / ".." / "sub"
    assert resolve_path(p) == (tmp_path / "sub").resolve()


def test_find_project_root_not_found(tmp_path: Path) -> None:
    (tmp_path / "a" / "b").mkdir(parents=True)
    assert find_project_root(tmp_path / "a" / "b") is None


def test_find_project_root_walks_up_from_file(tmp_path: Path) -> None:
    (tmp_path / PROJECT_CONFIG_FILENAME).write_text("{}")
    src = tmp_path / "src"
    src.mkdir()
    php_file = src / "index.php"
    php_file.write_text("<?php")
    assert find_project_root(php_file) == tmp_path.resolve()
    assert project_config_path(tmp_path) == tmp_path / ".phpscope.json"


def test_deep_merge_keeps_unset_keys() -> None:
    merged = _deep_merge(default_config(), {"output": {"format": "json"}, "extra": 1})
    assert merged["output"] == {"format": "json", "indent": 2}
    assert merged["extra"] == 1


def test_load_config_layers(tmp_path: Path, isolated_home: Path) -> None:
    save_config(global_config_path(), {"output": {"indent": 4}, "scan": {"builtins": False}})
    project = tmp_path / "project"
    project.mkdir()
    (project / PROJECT_CONFIG_FILENAME).write_text(json.dumps({"output": {"format": "json"}}))

    assert global_config_path() == isolated_home / "config.json"
    assert load_config()["output"] == {"format": "text", "indent": 4}
    merged = load_config(project)
    assert merged["output"] == {"format": "json", "indent": 4}
    assert merged["scan"]["builtins"] is False


def test_invalid_config_files_are_ignored(tmp_path: Path) -> None:
    global_config_path().parent.mkdir(parents=True)
    global_config_path().write_text("not json")
    (tmp_path / PROJECT_CONFIG_FILENAME).write_text("[1, 2]")
    assert load_config(tmp_path) == default_config()
