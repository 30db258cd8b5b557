"""Unit tests for entity building: members, inheritance, types and defaults."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from phpscope.analysis import SymbolTable
from phpscope.analysis.declarations import SymbolCategory
from phpscope.reflection.builder import EntityBuilder
from phpscope.reflection.models import SELF_OWNER

PHP_FIXTURES = Path(__file__).resolve().parent.parent.parent / "testing_grounds" / "php"


def _builder(tmp_path: Path, code: str) -> EntityBuilder:
    path = tmp_path / "code.php"
    path.write_text(code, encoding="utf-8")
    table = SymbolTable()
    table.load(str(path))
    return EntityBuilder(table)


@pytest.fixture
def shapes() -> EntityBuilder:
    table = SymbolTable()
    table.load(str(PHP_FIXTURES / "shapes.php"))
    return EntityBuilder(table)


def test_inherited_constant_is_overridden(tmp_path: Path) -> None:
    builder = _builder(
        tmp_path,
        "<?php class A { const X = 1; const Y = 'a'; } class B extends A { const X = 2; }",
    )
    b = builder.build("B", SymbolCategory.CLASS)
    assert list(b.constants) == ["X", "Y"]
    assert b.constants["X"].value == 2
    assert b.constants["X"].owner == SELF_OWNER
    assert b.constants["Y"].owner == "A"
    assert b.constants["Y"].type == "string"
    assert b.constants["X"].modifiers == ("public",)


def test_square_members_and_owners(shapes: EntityBuilder) -> None:
    square = shapes.build("Geometry\\Square", SymbolCategory.CLASS)
    assert square.modifiers == ("final",)
    assert square.parent == "Geometry\\Polygon"
    assert square.interfaces == ("Geometry\\Shape",)
    assert square.traits == ()
    # private SECRET is not inherited
    assert list(square.constants) == ["SIDES"]
    assert square.constants["SIDES"].value == 4

    assert list(square.properties) == ["count", "side", "sides", "name"]
    assert square.properties["count"].modifiers == ("public", "static")
    assert square.properties["side"].type == "float"
    assert square.properties["sides"].owner == "Geometry\\Polygon"
    assert square.properties["name"].owner == "Geometry\\Polygon"

    assert list(square.methods) == ["__construct", "area", "perimeter", "name"]
    assert square.methods["area"].owner == SELF_OWNER
    assert square.methods["name"].owner == "Geometry\\Polygon"


def test_trait_members_belong_to_using_class(shapes: EntityBuilder) -> None:
    polygon = shapes.build("Geometry\\Polygon", SymbolCategory.CLASS)
    assert polygon.modifiers == ("abstract",)
    assert polygon.traits == ("Geometry\\Named",)
    assert polygon.description == "Base class for polygons."
    assert list(polygon.constants) == ["SIDES", "SECRET"]
    assert polygon.constants["SECRET"].modifiers == ("private",)

    name = polygon.properties["name"]
    assert name.owner == SELF_OWNER
    assert name.type == "string"
    assert name.default == "shape"
    assert name.modifiers == ("protected",)
    assert name.description == "Display name."

    assert list(polygon.methods) == ["__construct", "perimeter", "name", "area"]
    assert polygon.methods["name"].owner == SELF_OWNER
    area = polygon.methods["area"]
    assert area.owner == "Geometry\\Shape"
    assert area.modifiers == ("abstract", "public")
    assert area.description == "Area of the shape."


def test_constructor_default_uses_declaring_class(shapes: EntityBuilder) -> None:
    polygon = shapes.build("Geometry\\Polygon", SymbolCategory.CLASS)
    (sides,) = polygon.methods["__construct"].parameters
    assert sides.type == "int"
    assert sides.default == "const self::SIDES"
    assert sides.optional
    assert sides.promoted
    assert sides.description == "Number of sides."
    assert polygon.methods["__construct"].return_type == "void"


def test_function_parameters_from_doc_tags(shapes: EntityBuilder) -> None:
    round_to = shapes.build("Geometry\\round_to", SymbolCategory.FUNCTION)
    value, digits = round_to.parameters
    assert (value.type, value.optional, value.has_default) == ("float", False, False)
    assert value.description == "Raw value."
    assert digits.type == "int"
    assert digits.default == "const Geometry\\PRECISION"
    assert digits.optional
    assert round_to.return_type == "float"
    assert round_to.description == "Round a value to the configured precision."
    assert round_to.modifiers == ()


def test_interface_has_no_properties_or_traits(shapes: EntityBuilder) -> None:
    shape = shapes.build("Geometry\\Shape", SymbolCategory.INTERFACE)
    assert shape.kind is SymbolCategory.INTERFACE
    assert shape.properties == {}
    assert shape.traits == ()
    assert shape.constants["SIDES"].value == 0


def test_types_resolve_site_then_tag_then_default(tmp_path: Path) -> None:
    builder = _builder(
        tmp_path,
        """<?php
/**
 * @param boolean $flag
 * @param integer|string $id
 * @return Foo[]
 */
function pick(int $count, $flag, $id, $limit = 10, $name = null, $rest = []) {}
""",
    )
    record = builder.build("pick", SymbolCategory.FUNCTION)
    types = [p.type for p in record.parameters]
    assert types == ["int", "bool", "int|string", "int", "", "array"]
    assert record.parameters[4].has_default
    assert record.return_type == "Foo[]"


def test_optional_only_when_no_required_parameter_follows(tmp_path: Path) -> None:
    builder = _builder(tmp_path, "<?php function f($a = 1, $b, $c = 2, ...$d) {}")
    record = builder.build("f", SymbolCategory.FUNCTION)
    assert [p.optional for p in record.parameters] == [False, False, True, True]
    assert record.parameters[0].has_default
    assert record.parameters[3].variadic


def test_unknown_types_stay_unknown(tmp_path: Path) -> None:
    builder = _builder(tmp_path, "<?php class C { public $x; function m($a) {} }")
    c = builder.build("C", SymbolCategory.CLASS)
    assert c.properties["x"].type == ""
    assert c.properties["x"].has_default is False
    assert c.methods["m"].parameters[0].type == ""
    assert c.methods["m"].return_type == "void"


def test_enum_is_a_final_class_with_case_constants() -> None:
    builder = EntityBuilder(SymbolTable())
    builder.table.load(str(PHP_FIXTURES / "status.php"))
    status = builder.build("Status", SymbolCategory.CLASS)
    assert status.kind is SymbolCategory.CLASS
    assert status.modifiers == ("final",)
    assert {name: c.value for name, c in status.constants.items()} == {
        "Active": "active",
        "Archived": "archived",
    }
    assert status.constants["Active"].modifiers == ("public",)
    assert list(status.methods) == ["label"]


def test_malformed_doc_comment_only_affects_its_symbol(tmp_path: Path, caplog) -> None:
    builder = _builder(
        tmp_path,
        """<?php
class Docs
{
    /**
     * Broken.
     * @param array{int $a
     */
    public function broken($a) {}

    /**
     * Fine.
     * @param int $a
     */
    public function fine($a) {}
}
""",
    )
    with caplog.at_level(logging.WARNING, logger="phpscope"):
        docs = builder.build("Docs", SymbolCategory.CLASS)
    assert docs.methods["broken"].description == ""
    assert docs.methods["broken"].parameters[0].type == ""
    assert docs.methods["fine"].description == "Fine."
    assert docs.methods["fine"].parameters[0].type == "int"
    assert "Docs::broken()" in caplog.text


def test_constants_have_no_builder(shapes: EntityBuilder) -> None:
    with pytest.raises(ValueError):
        shapes.build("Geometry\\PRECISION", SymbolCategory.CONSTANT)


def test_unknown_function_raises_key_error(shapes: EntityBuilder) -> None:
    with pytest.raises(KeyError):
        shapes.build("nope", SymbolCategory.FUNCTION)


def test_null_defaults_do_not_type_members(tmp_path: Path) -> None:
    builder = _builder(
        tmp_path,
        "<?php class N { const NONE = null; public $slot = null; function m($a = null) {} }",
    )
    n = builder.build("N", SymbolCategory.CLASS)
    assert n.constants["NONE"].type == "null"
    assert n.properties["slot"].type == ""
    assert n.properties["slot"].has_default
    assert n.methods["m"].parameters[0].type == ""
