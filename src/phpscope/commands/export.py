"""Export the symbol report of a PHP file as text or JSON."""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path
from typing import Any

from phpscope.analysis import SymbolTable
from phpscope.config import load_config
from phpscope.errors import ScanError
from phpscope.reflection import Scanner, render
from phpscope.reflection.exporter import FORMATS

logger = logging.getLogger(__name__)


def _envelope(status: str, indent: int, **fields: Any) -> str:
    """JSON envelope: {"status": "ok", "report": ...} or {"status": "error", "message": ...}."""
    return json.dumps({"status": status, **fields}, indent=indent, ensure_ascii=False)


def _write(text: str, output: Path | None) -> None:
    if not text.endswith("\n"):
        text += "\n"
    if output is None:
        sys.stdout.write(text)
        return
    output.write_text(text, encoding="utf-8")
    logger.info("Wrote report to %s", output)


def run(args: Namespace) -> None:
    """Run the export command."""
    path: Path = getattr(args, "path")
    config = load_config(path)
    output_cfg = config.get("output") or {}
    fmt = getattr(args, "format", None) or output_cfg.get("format") or "text"
    indent = output_cfg.get("indent", 2)
    builtins = getattr(args, "builtins", None)
    if builtins is None:
        builtins = bool((config.get("scan") or {}).get("builtins", True))
    output: Path | None = getattr(args, "output", None)

    if fmt not in FORMATS:
        print(f"Error: unknown output format {fmt!r} (expected text or json).", file=sys.stderr)
        sys.exit(1)

    try:
        report = Scanner(SymbolTable(builtins=builtins)).scan(path)
    except ScanError as e:
        logger.debug("Scan of %s failed", path, exc_info=True)
        if fmt == "json":
            sys.stdout.write(_envelope("error", indent, message=str(e)) + "\n")
        else:
            print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if fmt == "json":
        text = _envelope("ok", indent, report=report.to_dict())
    else:
        text = render(report, fmt="text")
    try:
        _write(text, output)
    except OSError as e:
        print(f"Error: cannot write {output}: {e}", file=sys.stderr)
        sys.exit(1)
