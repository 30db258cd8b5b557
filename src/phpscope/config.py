"""Configuration: defaults, global config and per-project overrides."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "config.json"
PROJECT_CONFIG_FILENAME = ".phpscope.json"


def _global_config_dir() -> Path:
    return Path.home() / ".phpscope"


def global_config_path() -> Path:
    """Path to global config file (~/.phpscope/config.json)."""
    return _global_config_dir() / CONFIG_FILENAME


def default_config() -> dict[str, Any]:
    """Built-in defaults; config files only override what they set."""
    return {
        "output": {
            "format": "text",
            "indent": 2,
        },
        "scan": {
            "builtins": True,
        },
        "logging": {
            "level": "WARNING",
            "file": None,
        },
    }


def _load_json(path: Path) -> dict[str, Any] | None:
    """Load a JSON object from path; return None if file missing or invalid."""
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return None
    return data if isinstance(data, dict) else None


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into base recursively. Mutates base; returns base."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def load_global_config() -> dict[str, Any]:
    """Load global config from ~/.phpscope/config.json. Returns defaults if missing."""
    data = _load_json(global_config_path())
    if data is None:
        return default_config()
    return _deep_merge(default_config(), data)


def project_config_path(project_root: Path) -> Path:
    """Path to project-local config (<project>/.phpscope.json)."""
    return project_root / PROJECT_CONFIG_FILENAME


def find_project_root(path: Path) -> Path | None:
    """
    Walk upward from path looking for a directory that contains .phpscope.json.
    Returns that directory if found, else None.
    """
    resolved = path.resolve()
    if resolved.is_file():
        resolved = resolved.parent
    current: Path | None = resolved
    while current is not None:
        if project_config_path(current).is_file():
            return current
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def load_config(path: Path | None = None) -> dict[str, Any]:
    """
    Load merged configuration: defaults + global (~/.phpscope/config.json) + project overrides.

    If path is None, only global config (and defaults) are used. Otherwise the
    nearest .phpscope.json at or above path overrides the global settings.
    """
    merged = load_global_config()
    if path is not None:
        project_root = find_project_root(path)
        if project_root is not None:
            project_data = _load_json(project_config_path(project_root))
            if project_data is not None:
                _deep_merge(merged, project_data)
    return merged


def save_config(path: Path, data: dict[str, Any]) -> None:
    """Write a config dict as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def resolve_path(path: Path) -> Path:
    """Resolve path to absolute, normalized."""
    return path.resolve()
