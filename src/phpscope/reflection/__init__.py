"""Symbol reports for PHP files: scanning, record building and rendering."""

from .builder import EntityBuilder
from .doc_comments import DocCommentResolver
from .exporter import render
from .models import (
    ConstantRecord,
    EntityRecord,
    FileReport,
    FunctionRecord,
    ParameterRecord,
    PropertyRecord,
)
from .scanner import Scanner, diff_names, export_file, scan
from .types import UNKNOWN_TYPE, VOID_TYPE, constant_type, resolve_return_type, resolve_type

__all__ = [
    "ConstantRecord",
    "DocCommentResolver",
    "EntityBuilder",
    "EntityRecord",
    "FileReport",
    "FunctionRecord",
    "ParameterRecord",
    "PropertyRecord",
    "Scanner",
    "UNKNOWN_TYPE",
    "VOID_TYPE",
    "constant_type",
    "diff_names",
    "export_file",
    "render",
    "resolve_return_type",
    "resolve_type",
    "scan",
]
