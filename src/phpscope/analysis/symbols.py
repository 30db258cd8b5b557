"""Symbol table: the names known to a scan, per category, and their declarations."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Set

from ..errors import DuplicateDeclarationError
from .declarations import (
    ClassDecl,
    ConstantDecl,
    FileDeclarations,
    FunctionDecl,
    SymbolCategory,
)
from .hierarchy import ClassReflection
from .php_parser import PhpParser
from .values import Expr, evaluate

logger = logging.getLogger(__name__)


class _ScopedLookup:
    """Constant lookup as seen from code inside class_name (or global code)."""

    def __init__(self, table: SymbolTable, class_name: Optional[str]) -> None:
        self._table = table
        self._class_name = class_name

    def _resolve_scope(self, scope: str) -> str:
        if scope in ("self", "static"):
            if self._class_name is None:
                raise LookupError(f"{scope} used outside of a class")
            return self._class_name
        if scope == "parent":
            decl = self._table.get_class(self._class_name) if self._class_name else None
            if decl is None or not decl.parent:
                raise LookupError("parent used in a class without a parent")
            return decl.parent
        return scope

    def constant(self, name: str) -> Any:
        return self._table.constant_value(name)

    def class_constant(self, scope: str, name: str) -> Any:
        return self._table.class_constant_value(self._resolve_scope(scope), name)

    def class_name(self, scope: str) -> str:
        resolved = self._resolve_scope(scope)
        decl = self._table.get_class(resolved)
        return decl.name if decl is not None else resolved


class SymbolTable:
    """
    Known constants, functions and class-likes, in registration order.

    Function and class names are case-insensitive, constant names are not.
    A table is owned by its caller: two scans only see each other's symbols
    when they are given the same table.
    """

    def __init__(self, parser: Optional[PhpParser] = None, builtins: bool = True) -> None:
        self._parser = parser
        self._constants: Dict[str, ConstantDecl] = {}
        self._functions: Dict[str, FunctionDecl] = {}
        self._classes: Dict[str, ClassDecl] = {}
        self._loaded: Set[str] = set()
        self._values: Dict[str, Any] = {}
        self._evaluating: Set[str] = set()
        if builtins:
            from .builtins import builtin_declarations

            self.register(builtin_declarations())

    @property
    def parser(self) -> PhpParser:
        if self._parser is None:
            self._parser = PhpParser()
        return self._parser

    def names(self, category: SymbolCategory) -> List[str]:
        """Names known in one category, in registration order."""
        if category is SymbolCategory.CONSTANT:
            return list(self._constants)
        if category is SymbolCategory.FUNCTION:
            return [decl.name for decl in self._functions.values()]
        return [decl.name for decl in self._classes.values() if decl.kind is category]

    def snapshot(self) -> Dict[SymbolCategory, List[str]]:
        return {category: self.names(category) for category in SymbolCategory}

    def load(self, path: str) -> None:
        """
        Parse a PHP file and register its declarations.

        Loading a file that was already loaded into this table does nothing,
        like require_once.

        Raises:
            SourceLoadError: If the file cannot be read or parsed.
            DuplicateDeclarationError: If the file redeclares a known function
                or class-like. Nothing from the file is registered then.
        """
        real_path = os.path.realpath(path)
        if real_path in self._loaded:
            logger.info("%s is already loaded, skipping", path)
            return
        declarations = self.parser.parse_file(str(path))
        self.register(declarations)
        self._loaded.add(real_path)

    def register(self, declarations: FileDeclarations) -> None:
        """Register parsed declarations; all of them or none."""
        self._check_duplicates(declarations)

        for const in declarations.constants:
            if const.name in self._constants:
                logger.warning(
                    "Constant %s already defined, ignoring the one on line %d of %s",
                    const.name,
                    const.lineno,
                    declarations.path,
                )
                continue
            self._constants[const.name] = const
        for func in declarations.functions:
            self._functions[func.name.lower()] = func
        for class_decl in declarations.classes:
            self._classes[class_decl.name.lower()] = class_decl
        self._values.clear()
        logger.debug("Registered declarations of %s", declarations.path)

    def _check_duplicates(self, declarations: FileDeclarations) -> None:
        seen: Set[str] = set()
        for func in declarations.functions:
            key = func.name.lower()
            if key in self._functions or key in seen:
                raise DuplicateDeclarationError(declarations.path, "function", func.name)
            seen.add(key)
        seen.clear()
        for class_decl in declarations.classes:
            key = class_decl.name.lower()
            if key in self._classes or key in seen:
                raise DuplicateDeclarationError(
                    declarations.path, class_decl.kind.value, class_decl.name
                )
            seen.add(key)

    def get_constant(self, name: str) -> Optional[ConstantDecl]:
        return self._constants.get(name.lstrip("\\"))

    def get_function(self, name: str) -> Optional[FunctionDecl]:
        return self._functions.get(name.lstrip("\\").lower())

    def get_class(self, name: str) -> Optional[ClassDecl]:
        return self._classes.get(name.lstrip("\\").lower())

    def reflect(self, name: str) -> ClassReflection:
        decl = self.get_class(name)
        if decl is None:
            raise KeyError(f"Unknown class-like {name}")
        return ClassReflection(self, decl)

    def evaluate(self, expr: Expr, class_name: Optional[str] = None) -> Any:
        """Evaluate an expression written inside class_name (None for global code)."""
        return evaluate(expr, _ScopedLookup(self, class_name))

    def constant_value(self, name: str) -> Any:
        """Value of a global constant; raises LookupError when it is unknown."""
        decl = self.get_constant(name)
        if decl is None:
            raise LookupError(f"Undefined constant {name}")
        return self._cached_value(decl.name, decl.value, None)

    def class_constant_value(self, class_name: str, name: str) -> Any:
        """Value of a class constant, looked up through the hierarchy."""
        member = self.reflect(class_name).find_constant(name)
        if member is None:
            raise LookupError(f"Undefined constant {class_name}::{name}")
        key = f"{member.declaring_class.lower()}::{name}"
        return self._cached_value(key, member.decl.value, member.declaring_class)

    def _cached_value(self, key: str, expr: Expr, class_name: Optional[str]) -> Any:
        if key in self._values:
            return self._values[key]
        if key in self._evaluating:
            raise LookupError(f"Cyclic reference to constant {key}")
        self._evaluating.add(key)
        try:
            value = self.evaluate(expr, class_name)
        finally:
            self._evaluating.discard(key)
        self._values[key] = value
        return value
