"""Doctor command: documentation and type coverage of the symbols a PHP file declares."""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from phpscope.analysis import SymbolTable
from phpscope.config import load_config
from phpscope.errors import ScanError
from phpscope.reflection import Scanner
from phpscope.reflection.models import SELF_OWNER, EntityRecord, FileReport, FunctionRecord
from phpscope.reflection.types import UNKNOWN_TYPE


@dataclass
class DocQualityResult:
    """Documentation quality assessment for one symbol."""

    qualified_name: str
    kind: str
    lineno: int
    has_description: bool
    has_types: bool
    priority_score: int
    parameters_count: int
    lines: int
    is_public: bool


def _is_public_api(modifiers: tuple[str, ...]) -> bool:
    """Free functions, classes and public members are part of the public API."""
    return "private" not in modifiers and "protected" not in modifiers


def _compute_priority_score(parameters_count: int, lines: int, is_public: bool) -> int:
    """
    Priority = arity × complexity × public API factor.
    Bounded to keep scores manageable.
    """
    arity = 1 + min(parameters_count, 9)  # 1-10
    complexity = 1 + min(max(lines, 0) // 5, 9)  # 1-10, every 5 lines
    public_factor = 2 if is_public else 1
    return arity * complexity * public_factor


def _function_result(name: str, kind: str, record: FunctionRecord) -> DocQualityResult:
    lines = max(0, record.end_lineno - record.lineno + 1)
    is_public = _is_public_api(record.modifiers)
    params = len(record.parameters)
    return DocQualityResult(
        qualified_name=name,
        kind=kind,
        lineno=record.lineno,
        has_description=bool(record.description.strip()),
        has_types=all(p.type != UNKNOWN_TYPE for p in record.parameters),
        priority_score=_compute_priority_score(params, lines, is_public),
        parameters_count=params,
        lines=lines,
        is_public=is_public,
    )


def _entity_results(entity: EntityRecord) -> Iterator[DocQualityResult]:
    lines = max(0, entity.end_lineno - entity.lineno + 1)
    yield DocQualityResult(
        qualified_name=entity.name,
        kind=entity.kind.value,
        lineno=entity.lineno,
        has_description=bool(entity.description.strip()),
        has_types=True,
        priority_score=_compute_priority_score(len(entity.methods), lines, True),
        parameters_count=0,
        lines=lines,
        is_public=True,
    )
    for prop in entity.properties.values():
        if prop.owner != SELF_OWNER:
            continue
        is_public = _is_public_api(prop.modifiers)
        yield DocQualityResult(
            qualified_name=f"{entity.name}::${prop.name}",
            kind="property",
            lineno=entity.lineno,
            has_description=bool(prop.description.strip()),
            has_types=prop.type != UNKNOWN_TYPE,
            priority_score=_compute_priority_score(0, 1, is_public),
            parameters_count=0,
            lines=1,
            is_public=is_public,
        )
    for method in entity.methods.values():
        if method.owner != SELF_OWNER:
            continue
        yield _function_result(f"{entity.name}::{method.name}()", "method", method)


def _scan_report(report: FileReport) -> list[DocQualityResult]:
    """Assess every function, class-like and own member of the report."""
    results: list[DocQualityResult] = []
    for function in report.functions:
        results.append(_function_result(f"{function.name}()", "function", function))
    for entities in (report.interfaces, report.traits, report.classes):
        for entity in entities:
            results.extend(_entity_results(entity))
    return results


def _result_to_dict(r: DocQualityResult) -> dict:
    """Convert result to JSON-serializable dict."""
    return {
        "qualified_name": r.qualified_name,
        "kind": r.kind,
        "lineno": r.lineno,
        "has_description": r.has_description,
        "has_types": r.has_types,
        "priority_score": r.priority_score,
        "parameters_count": r.parameters_count,
        "lines": r.lines,
        "is_public": r.is_public,
    }


def _sorted_results(results: list[DocQualityResult], top_n: int | None) -> list[DocQualityResult]:
    ordered = sorted(results, key=lambda r: r.priority_score, reverse=True)
    if top_n is not None:
        ordered = ordered[:top_n]
    return ordered


def _print_report(path: Path, results: list[DocQualityResult], top_n: int | None) -> None:
    """Print human-readable report to stdout."""
    sorted_results = _sorted_results(results, top_n)
    if not sorted_results:
        print(f"No functions or classes declared in {path}.")
        return

    missing_doc = [r for r in sorted_results if not r.has_description]
    missing_types = [r for r in sorted_results if not r.has_types]

    print("Documentation quality report")
    print()
    print(f"  Symbols scanned: {len(results)}")
    if top_n is not None:
        print(f"  Showing top {top_n} by priority")
    print()

    if missing_doc:
        print("  Missing descriptions (by priority):")
        for r in missing_doc[:20]:
            print(f"    [{r.priority_score:4d}] {r.qualified_name}  ({path.name}:{r.lineno})")
        if len(missing_doc) > 20:
            print(f"    ... and {len(missing_doc) - 20} more")
        print()

    if missing_types:
        print("  Unknown types (by priority):")
        for r in missing_types[:10]:
            print(f"    [{r.priority_score:4d}] {r.qualified_name}  ({path.name}:{r.lineno})")
        if len(missing_types) > 10:
            print(f"    ... and {len(missing_types) - 10} more")
        print()

    print("  Top items by priority (need attention):")
    for r in sorted_results[:15]:
        issues: list[str] = []
        if not r.has_description:
            issues.append("no description")
        if not r.has_types:
            issues.append("unknown types")
        issue_str = "; ".join(issues) if issues else "OK"
        print(f"    [{r.priority_score:4d}] {r.qualified_name}  ({path.name}:{r.lineno})  [{issue_str}]")


def run(args: Namespace) -> None:
    """Run the doctor command."""
    path: Path = getattr(args, "path")
    top_n = getattr(args, "top", None)
    fmt = getattr(args, "format", "text")
    config = load_config(path)
    builtins = bool((config.get("scan") or {}).get("builtins", True))

    try:
        report = Scanner(SymbolTable(builtins=builtins)).scan(path)
    except ScanError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    results = _scan_report(report)
    if fmt == "json":
        data = [_result_to_dict(r) for r in _sorted_results(results, top_n)]
        json.dump(data, sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        _print_report(path, results, top_n)
