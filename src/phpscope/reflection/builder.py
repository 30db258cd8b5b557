"""Entity builder: the full record of one function or class-like symbol."""

from __future__ import annotations

import logging
from typing import Optional, Union

from ..analysis.declarations import SymbolCategory
from ..analysis.symbols import SymbolTable
from .doc_comments import DocCommentResolver, class_identity, function_identity
from .members import extract_constants, extract_function, extract_methods, extract_properties
from .models import EntityRecord, FunctionRecord

logger = logging.getLogger(__name__)


class EntityBuilder:
    """Build records for symbols registered in a SymbolTable."""

    def __init__(self, table: SymbolTable, docs: Optional[DocCommentResolver] = None) -> None:
        self.table = table
        self.docs = docs if docs is not None else DocCommentResolver()

    def build(self, name: str, category: SymbolCategory) -> Union[EntityRecord, FunctionRecord]:
        """
        Build the record of a function, interface, trait or class.

        Raises:
            KeyError: If name is not registered in the table.
            ValueError: For the constant category (constants need no builder).
        """
        if category is SymbolCategory.FUNCTION:
            return self.build_function(name)
        if category.is_class_like:
            return self.build_entity(name)
        raise ValueError(f"No builder for {category.value} symbols")

    def build_function(self, name: str) -> FunctionRecord:
        decl = self.table.get_function(name)
        if decl is None:
            raise KeyError(f"Unknown function {name}")
        logger.debug("Building function %s", decl.name)
        return extract_function(self.table, self.docs, decl, function_identity(decl.name))

    def build_entity(self, name: str) -> EntityRecord:
        reflection = self.table.reflect(name)
        decl = reflection.decl
        logger.debug("Building %s %s", decl.kind.value, decl.name)
        block = self.docs.describe(class_identity(decl.name), decl.doc_comment)
        return EntityRecord(
            name=decl.name,
            kind=decl.kind,
            parent=reflection.parent_name,
            interfaces=tuple(reflection.interface_names()),
            traits=tuple(reflection.trait_names()),
            modifiers=decl.modifier_names(),
            description=block.description,
            constants=extract_constants(reflection, self.docs),
            properties=extract_properties(reflection, self.docs),
            methods=extract_methods(reflection, self.docs),
            lineno=decl.lineno,
            end_lineno=decl.end_lineno,
        )
