"""Class hierarchy view: parent chain, interfaces, traits and inherited members."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, FrozenSet, Generic, List, Optional, TypeVar

from .declarations import ClassDecl, ConstantDecl, FunctionDecl, PropertyDecl, SymbolCategory

if TYPE_CHECKING:
    from .symbols import SymbolTable

logger = logging.getLogger(__name__)

D = TypeVar("D")


@dataclass(frozen=True)
class Member(Generic[D]):
    """A member as seen from a class, with the class that declares it."""

    decl: D
    declaring_class: str


class ClassReflection:
    """
    Reflection over one class-like declaration registered in a SymbolTable.

    Member lists follow PHP reflection: own members first, then members
    imported from traits (attributed to the using class), then inherited ones.
    Names that cannot be resolved in the table are kept verbatim and
    contribute nothing.
    """

    def __init__(
        self, table: SymbolTable, decl: ClassDecl, _seen: FrozenSet[str] = frozenset()
    ) -> None:
        self.table = table
        self.decl = decl
        self._seen = _seen | {decl.name.lower()}

    @property
    def name(self) -> str:
        return self.decl.name

    @property
    def kind(self) -> SymbolCategory:
        return self.decl.kind

    @property
    def parent_name(self) -> str:
        """Parent class name ('' if none); the declared name if it is unknown."""
        if not self.decl.parent:
            return ""
        parent = self.table.get_class(self.decl.parent)
        return parent.name if parent is not None else self.decl.parent

    def _related(self, name: str, relation: str) -> Optional[ClassReflection]:
        decl = self.table.get_class(name)
        if decl is None:
            logger.debug("%s: %s %s is not known, no members inherited", self.name, relation, name)
            return None
        if decl.name.lower() in self._seen:
            logger.debug("%s: circular %s %s ignored", self.name, relation, name)
            return None
        return ClassReflection(self.table, decl, self._seen)

    def parent(self) -> Optional[ClassReflection]:
        if not self.decl.parent:
            return None
        return self._related(self.decl.parent, "parent")

    def _interfaces(self) -> List[ClassReflection]:
        found = (self._related(name, "interface") for name in self.decl.interfaces)
        return [r for r in found if r is not None]

    def _traits(self) -> List[ClassReflection]:
        found = (self._related(name, "trait") for name in self.decl.traits)
        return [r for r in found if r is not None]

    def interface_names(self) -> List[str]:
        """Implemented interfaces, inherited ones included; parent's first, no duplicates."""
        names: Dict[str, str] = {}
        parent = self.parent()
        if parent is not None and self.kind is not SymbolCategory.INTERFACE:
            for name in parent.interface_names():
                names.setdefault(name.lower(), name)
        for declared in self.decl.interfaces:
            iface = self._related(declared, "interface")
            names.setdefault(declared.lower(), iface.name if iface else declared)
            if iface is not None:
                for name in iface.interface_names():
                    names.setdefault(name.lower(), name)
        return list(names.values())

    def trait_names(self) -> List[str]:
        """Traits used directly by this class (empty for interfaces)."""
        if self.kind is SymbolCategory.INTERFACE:
            return []
        names: Dict[str, str] = {}
        for declared in self.decl.traits:
            trait = self.table.get_class(declared)
            names.setdefault(declared.lower(), trait.name if trait else declared)
        return list(names.values())

    def constants(self) -> List[Member[ConstantDecl]]:
        found: Dict[str, Member[ConstantDecl]] = {}
        for const in self.decl.constants:
            found.setdefault(const.name, Member(const, self.name))
        for trait in self._traits():
            for member in trait.constants():
                found.setdefault(member.decl.name, Member(member.decl, self.name))
        parent = self.parent()
        if parent is not None:
            for member in parent.constants():
                if "private" not in member.decl.keywords:
                    found.setdefault(member.decl.name, member)
        for iface in self._interfaces():
            for member in iface.constants():
                found.setdefault(member.decl.name, member)
        return list(found.values())

    def properties(self) -> List[Member[PropertyDecl]]:
        if self.kind is SymbolCategory.INTERFACE:
            return []
        found: Dict[str, Member[PropertyDecl]] = {}
        for prop in self.decl.properties:
            found.setdefault(prop.name, Member(prop, self.name))
        for trait in self._traits():
            for member in trait.properties():
                found.setdefault(member.decl.name, Member(member.decl, self.name))
        parent = self.parent()
        if parent is not None:
            for member in parent.properties():
                if "private" not in member.decl.keywords:
                    found.setdefault(member.decl.name, member)
        return list(found.values())

    def methods(self) -> List[Member[FunctionDecl]]:
        # Method names are case-insensitive
        found: Dict[str, Member[FunctionDecl]] = {}
        for method in self.decl.methods:
            found.setdefault(method.name.lower(), Member(method, self.name))
        for trait in self._traits():
            for member in trait.methods():
                found.setdefault(member.decl.name.lower(), Member(member.decl, self.name))
        parent = self.parent()
        if parent is not None:
            for member in parent.methods():
                found.setdefault(member.decl.name.lower(), member)
        for iface in self._interfaces():
            for member in iface.methods():
                found.setdefault(member.decl.name.lower(), member)
        return list(found.values())

    def find_constant(self, name: str) -> Optional[Member[ConstantDecl]]:
        for member in self.constants():
            if member.decl.name == name:
                return member
        return None
