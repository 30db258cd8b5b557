"""Exception taxonomy for scanning PHP files."""

from __future__ import annotations


class PhpScopeError(Exception):
    """Base class for all phpscope errors."""


class ScanError(PhpScopeError):
    """A fatal error: the scan is aborted and no report is produced."""


class SourceLoadError(ScanError):
    """The file is missing, unreadable, or could not be parsed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot load {path}: {reason}")
        self.path = path
        self.reason = reason


class DuplicateDeclarationError(ScanError):
    """The file declares a name that already exists in the symbol table."""

    def __init__(self, path: str, kind: str, name: str) -> None:
        super().__init__(f"Cannot redeclare {kind} {name} (in {path})")
        self.path = path
        self.kind = kind
        self.name = name


class DocParseError(PhpScopeError):
    """A documentation comment is malformed. Recovered per symbol."""
