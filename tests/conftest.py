"""Shared fixtures: keep tests away from the real ~/.phpscope."""

from __future__ import annotations

from pathlib import Path

import pytest

from phpscope import config as config_module

PHP_FIXTURES = Path(__file__).resolve().parent.parent / "testing_grounds" / "php"


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the global config directory into tmp_path."""
    home = tmp_path / "home"
    monkeypatch.setattr(config_module, "_global_config_dir", lambda: home)
    return home


@pytest.fixture
def php_fixtures() -> Path:
    if not PHP_FIXTURES.is_dir():
        pytest.skip("testing_grounds/php not found")
    return PHP_FIXTURES
