"""Reflection provider: PHP parsing, constant evaluation and the symbol table."""

from .declarations import SymbolCategory
from .docblock import DocBlock, DocBlockParser, DocTag, EMPTY_DOCBLOCK
from .hierarchy import ClassReflection, Member
from .php_parser import PhpParser
from .symbols import SymbolTable

__all__ = [
    "ClassReflection",
    "DocBlock",
    "DocBlockParser",
    "DocTag",
    "EMPTY_DOCBLOCK",
    "Member",
    "PhpParser",
    "SymbolCategory",
    "SymbolTable",
]
