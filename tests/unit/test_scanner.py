"""Unit tests for file scanning: baseline diffing and table ownership."""

from __future__ import annotations

import math
from pathlib import Path

import pytest

from phpscope.analysis import SymbolTable
from phpscope.analysis.declarations import SymbolCategory
from phpscope.errors import DuplicateDeclarationError, SourceLoadError
from phpscope.reflection.scanner import Scanner, diff_names, scan

PHP_FIXTURES = Path(__file__).resolve().parent.parent.parent / "testing_grounds" / "php"


def test_diff_names_keeps_post_order() -> None:
    assert diff_names(["a", "b"], ["a", "c", "b", "d"]) == ["c", "d"]
    assert diff_names([], ["x"]) == ["x"]


def test_scan_reports_each_category_in_order() -> None:
    report = scan(PHP_FIXTURES / "shapes.php")
    assert report.path == str(PHP_FIXTURES / "shapes.php")
    assert [c.name for c in report.constants] == ["Geometry\\PRECISION", "Geometry\\UNIT"]
    assert report.constants[0].value == 2
    assert report.constants[0].type == "int"
    assert report.constants[0].description == "Default precision for computed areas."
    assert report.constants[1].value == "cm"
    assert [f.name for f in report.functions] == ["Geometry\\round_to"]
    assert [i.name for i in report.interfaces] == ["Geometry\\Shape"]
    assert [t.name for t in report.traits] == ["Geometry\\Named"]
    assert [c.name for c in report.classes] == ["Geometry\\Polygon", "Geometry\\Square"]


def test_empty_categories_are_empty_tuples(tmp_path: Path) -> None:
    path = tmp_path / "only_class.php"
    path.write_text("<?php class Lonely {}", encoding="utf-8")
    report = scan(path)
    assert report.constants == ()
    assert report.functions == ()
    assert report.interfaces == ()
    assert report.traits == ()
    assert len(report.entries(SymbolCategory.CLASS)) == 1


def test_baseline_names_are_not_reported(tmp_path: Path) -> None:
    path = tmp_path / "eol.php"
    path.write_text("<?php const PHP_EOL = 'x'; const OWN = PHP_EOL;", encoding="utf-8")
    report = scan(path)
    assert [c.name for c in report.constants] == ["OWN"]
    assert report.constants[0].value == "\n"


def test_scanning_same_file_twice_reports_nothing_new() -> None:
    scanner = Scanner()
    first = scanner.scan(PHP_FIXTURES / "shapes.php")
    second = scanner.scan(PHP_FIXTURES / "shapes.php")
    assert len(first.classes) == 2
    assert all(second.entries(category) == () for category in SymbolCategory)


def test_separate_scanners_do_not_share_symbols() -> None:
    first = Scanner().scan(PHP_FIXTURES / "shapes.php")
    second = Scanner().scan(PHP_FIXTURES / "shapes.php")
    assert first == second


def test_shared_table_sees_earlier_files(tmp_path: Path) -> None:
    base = tmp_path / "base.php"
    base.write_text("<?php class Base { const LIMIT = 3; }", encoding="utf-8")
    child = tmp_path / "child.php"
    child.write_text("<?php class Child extends Base {}", encoding="utf-8")
    table = SymbolTable()
    scan(base, table)
    report = scan(child, table)
    (record,) = report.classes
    assert record.parent == "Base"
    assert record.constants["LIMIT"].owner == "Base"


def test_scan_errors_propagate() -> None:
    with pytest.raises(SourceLoadError, match="syntax error"):
        scan(PHP_FIXTURES / "broken.php")
    with pytest.raises(SourceLoadError, match="no such file"):
        scan(PHP_FIXTURES / "missing.php")


def test_redeclaration_aborts_scan(tmp_path: Path) -> None:
    path = tmp_path / "exc.php"
    path.write_text("<?php class Exception {}", encoding="utf-8")
    with pytest.raises(DuplicateDeclarationError):
        scan(path)
    assert Scanner(SymbolTable(builtins=False)).scan(path).classes[0].name == "Exception"


def test_float_builtin_constants_have_float_type(tmp_path: Path) -> None:
    path = tmp_path / "floats.php"
    path.write_text(
        "<?php const RATIO = NAN; const CEILING = -INF; const TOP = PHP_FLOAT_MAX;",
        encoding="utf-8",
    )
    report = scan(path)
    assert [c.type for c in report.constants] == ["float", "float", "float"]
    ratio, ceiling, top = (c.value for c in report.constants)
    assert math.isnan(ratio)
    assert ceiling == -math.inf
    assert top == 1.7976931348623157e308
