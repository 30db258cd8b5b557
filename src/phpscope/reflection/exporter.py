"""Render FileReports as a reflection-style text tree or as JSON."""

from __future__ import annotations

import json
import math
from typing import Any, Callable, Dict, List

from ..analysis.declarations import SymbolCategory
from ..analysis.values import Unevaluated
from .models import (
    SELF_OWNER,
    ConstantRecord,
    EntityRecord,
    FileReport,
    FunctionRecord,
    ParameterRecord,
    PropertyRecord,
)

FORMATS = ("text", "json")
INDENT = "  "


def format_value(value: Any) -> str:
    """PHP literal for an evaluated value, like var_export on one line."""
    if isinstance(value, Unevaluated):
        return value.source
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NAN"
        if math.isinf(value):
            return "INF" if value > 0 else "-INF"
        return repr(value)
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"
    if isinstance(value, list):
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    if isinstance(value, dict):
        items = (f"{format_value(k)} => {format_value(v)}" for k, v in value.items())
        return "[" + ", ".join(items) + "]"
    return str(value)


def _indent(lines: List[str]) -> List[str]:
    return [INDENT + line if line else line for line in lines]


def _section(title: str, body: List[str], count: int) -> List[str]:
    return [f"- {title} [{count}] {{", *_indent(body), "}"]


def _inherited(owner: str) -> str:
    return "" if owner == SELF_OWNER else f"<inherited from {owner}> "


def _description(text: str) -> List[str]:
    if not text:
        return []
    return ["- Description {", *_indent(text.splitlines()), "}"]


def _render_constant(record: ConstantRecord) -> List[str]:
    head = " ".join(p for p in (*record.modifiers, record.type, record.name) if p)
    lines = [
        f"Constant [ {_inherited(record.owner)}{head} ] {{ {format_value(record.value)} }}"
    ]
    if record.description:
        lines.extend(_indent(_description(record.description)))
    return lines


def _render_property(record: PropertyRecord) -> List[str]:
    head = " ".join(p for p in (*record.modifiers, record.type, f"${record.name}") if p)
    if record.has_default:
        head += f" = {format_value(record.default)}"
    lines = [f"Property [ {_inherited(record.owner)}{head} ]"]
    if record.description:
        lines.extend(_indent(_description(record.description)))
    return lines


def _render_parameter(index: int, record: ParameterRecord) -> str:
    name = (
        ("&" if record.by_reference else "")
        + ("..." if record.variadic else "")
        + f"${record.name}"
    )
    parts = ["<optional>" if record.optional else "<required>", record.type, name]
    text = " ".join(p for p in parts if p)
    if record.has_default:
        text += f" = {format_value(record.default)}"
    return f"Parameter #{index} [ {text} ]"


def _render_function(record: FunctionRecord, label: str = "Function") -> List[str]:
    keyword = "method" if label == "Method" else "function"
    head = " ".join((*record.modifiers, keyword, record.name))
    body = [f"@@ lines {record.lineno}-{record.end_lineno}"]
    body.extend(_description(record.description))
    body.extend(
        _section(
            "Parameters",
            [_render_parameter(i, p) for i, p in enumerate(record.parameters)],
            len(record.parameters),
        )
    )
    body.append(f"- Return [ {record.return_type} ]")
    return [f"{label} [ {_inherited(record.owner)}{head} ] {{", *_indent(body), "}"]


def _render_entity(record: EntityRecord) -> List[str]:
    keyword = record.kind.value
    head = " ".join((*record.modifiers, keyword, record.name))
    if record.parent:
        head += f" extends {record.parent}"
    if record.interfaces:
        relation = "extends" if record.kind is SymbolCategory.INTERFACE else "implements"
        head += f" {relation} " + ", ".join(record.interfaces)

    body = [f"@@ lines {record.lineno}-{record.end_lineno}"]
    body.extend(_description(record.description))
    if record.kind is not SymbolCategory.INTERFACE:
        body.extend(_section("Traits", list(record.traits), len(record.traits)))
    constants: List[str] = []
    for constant in record.constants.values():
        constants.extend(_render_constant(constant))
    body.extend(_section("Constants", constants, len(record.constants)))
    if record.kind is not SymbolCategory.INTERFACE:
        properties: List[str] = []
        for prop in record.properties.values():
            properties.extend(_render_property(prop))
        body.extend(_section("Properties", properties, len(record.properties)))
    methods: List[str] = []
    for method in record.methods.values():
        methods.extend(_render_function(method, label="Method"))
    body.extend(_section("Methods", methods, len(record.methods)))
    return [f"{keyword.capitalize()} [ {head} ] {{", *_indent(body), "}"]


# Every SymbolCategory must have a renderer
_RENDERERS: Dict[SymbolCategory, Callable[[Any], List[str]]] = {
    SymbolCategory.CONSTANT: _render_constant,
    SymbolCategory.FUNCTION: _render_function,
    SymbolCategory.INTERFACE: _render_entity,
    SymbolCategory.TRAIT: _render_entity,
    SymbolCategory.CLASS: _render_entity,
}


def render_text(report: FileReport) -> str:
    lines = [f"File [ {report.path} ] {{"]
    for position, category in enumerate(SymbolCategory):
        renderer = _RENDERERS[category]
        entries = report.entries(category)
        body: List[str] = []
        for record in entries:
            body.extend(renderer(record))
        if position:
            lines.append("")
        lines.extend(_indent(_section(category.label.capitalize(), body, len(entries))))
    lines.append("}")
    return "\n".join(lines) + "\n"


def render_json(report: FileReport, indent: int = 2) -> str:
    return json.dumps(report.to_dict(), indent=indent, ensure_ascii=False)


def render(report: FileReport, fmt: str = "text", indent: int = 2) -> str:
    """
    Render a report.

    Args:
        report: The scanned file.
        fmt: "text" or "json".
        indent: JSON indentation.

    Raises:
        ValueError: If fmt is not a known format.
    """
    if fmt == "text":
        return render_text(report)
    if fmt == "json":
        return render_json(report, indent=indent)
    raise ValueError(f"Unknown format {fmt!r} (expected one of {', '.join(FORMATS)})")
