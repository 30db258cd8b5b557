"""phpscope: report the constants, functions and classes a PHP file declares."""

__version__ = "0.1.0"

from .analysis import SymbolTable
from .errors import (
    DocParseError,
    DuplicateDeclarationError,
    PhpScopeError,
    ScanError,
    SourceLoadError,
)
from .reflection import FileReport, Scanner, export_file, scan

__all__ = [
    "DocParseError",
    "DuplicateDeclarationError",
    "FileReport",
    "PhpScopeError",
    "ScanError",
    "Scanner",
    "SourceLoadError",
    "SymbolTable",
    "__version__",
    "export_file",
    "scan",
]
