"""File scanner: the symbols one PHP file adds to a symbol table."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..analysis.declarations import SymbolCategory
from ..analysis.docblock import DocParser
from ..analysis.symbols import SymbolTable
from .builder import EntityBuilder
from .doc_comments import DocCommentResolver
from .exporter import render
from .members import extract_global_constant
from .models import FileReport

logger = logging.getLogger(__name__)


def diff_names(baseline: Sequence[str], post: Sequence[str]) -> List[str]:
    """Names in post that are not in baseline, in post's order."""
    known = set(baseline)
    return [name for name in post if name not in known]


class Scanner:
    """
    Scan PHP files into FileReports.

    The names known before loading the file are snapshotted; everything the
    load adds is the file's own. A Scanner created without a table gets a
    private one seeded with the PHP built-ins.
    """

    def __init__(
        self, table: Optional[SymbolTable] = None, doc_parser: Optional[DocParser] = None
    ) -> None:
        self.table = table if table is not None else SymbolTable()
        self._doc_parser = doc_parser

    def scan(self, path: Union[str, Path]) -> FileReport:
        """
        Load path into the table and report what it declares.

        Raises:
            SourceLoadError: If the file is missing, unreadable or does not parse.
            DuplicateDeclarationError: If it redeclares a known function or class-like.
        """
        logger.info("Scanning %s", path)
        baseline = self.table.snapshot()
        self.table.load(str(path))
        post = self.table.snapshot()

        builder = EntityBuilder(self.table, DocCommentResolver(self._doc_parser))
        sections: Dict[SymbolCategory, Tuple] = {}
        for category in SymbolCategory:
            names = diff_names(baseline[category], post[category])
            if category is SymbolCategory.CONSTANT:
                records = [
                    extract_global_constant(self.table, builder.docs, name) for name in names
                ]
            else:
                records = [builder.build(name, category) for name in names]
            sections[category] = tuple(records)
            logger.debug("%s: %d new %s", path, len(records), category.label)

        return FileReport(
            path=str(path),
            constants=sections[SymbolCategory.CONSTANT],
            functions=sections[SymbolCategory.FUNCTION],
            interfaces=sections[SymbolCategory.INTERFACE],
            traits=sections[SymbolCategory.TRAIT],
            classes=sections[SymbolCategory.CLASS],
        )


def scan(path: Union[str, Path], table: Optional[SymbolTable] = None) -> FileReport:
    """Scan one file (see Scanner.scan)."""
    return Scanner(table).scan(path)


def export_file(
    path: Union[str, Path],
    fmt: str = "text",
    table: Optional[SymbolTable] = None,
    indent: int = 2,
) -> str:
    """Scan one file and render its report as text or JSON."""
    return render(scan(path, table), fmt=fmt, indent=indent)
