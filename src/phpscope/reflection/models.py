"""Report records: the immutable result of scanning one file."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

from ..analysis.declarations import SymbolCategory
from ..analysis.values import to_plain

SELF_OWNER = "self"


@dataclass(frozen=True)
class ConstantRecord:
    name: str
    type: str
    value: Any
    modifiers: Tuple[str, ...] = ()
    description: str = ""
    owner: str = SELF_OWNER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "value": to_plain(self.value),
            "modifiers": list(self.modifiers),
            "description": self.description,
            "owner": self.owner,
        }


@dataclass(frozen=True)
class PropertyRecord:
    name: str
    type: str
    default: Any = None
    has_default: bool = False  # False is distinct from a null default
    modifiers: Tuple[str, ...] = ()
    description: str = ""
    owner: str = SELF_OWNER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "default": to_plain(self.default),
            "has_default": self.has_default,
            "modifiers": list(self.modifiers),
            "description": self.description,
            "owner": self.owner,
        }


@dataclass(frozen=True)
class ParameterRecord:
    name: str  # without '$'
    type: str
    default: Any = None
    has_default: bool = False
    description: str = ""
    optional: bool = False
    variadic: bool = False
    by_reference: bool = False
    promoted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "default": to_plain(self.default),
            "has_default": self.has_default,
            "description": self.description,
            "optional": self.optional,
            "variadic": self.variadic,
            "by_reference": self.by_reference,
            "promoted": self.promoted,
        }


@dataclass(frozen=True)
class FunctionRecord:
    """A free function, or a method nested in an EntityRecord."""

    name: str
    parameters: Tuple[ParameterRecord, ...] = ()
    return_type: str = ""
    modifiers: Tuple[str, ...] = ()
    description: str = ""
    owner: str = SELF_OWNER
    lineno: int = 0
    end_lineno: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "parameters": [p.to_dict() for p in self.parameters],
            "return_type": self.return_type,
            "modifiers": list(self.modifiers),
            "description": self.description,
            "owner": self.owner,
            "lineno": self.lineno,
            "end_lineno": self.end_lineno,
        }


@dataclass(frozen=True)
class EntityRecord:
    """An interface, trait or class."""

    name: str
    kind: SymbolCategory
    parent: str = ""
    interfaces: Tuple[str, ...] = ()
    traits: Tuple[str, ...] = ()
    modifiers: Tuple[str, ...] = ()
    description: str = ""
    constants: Mapping[str, ConstantRecord] = field(default_factory=dict)
    properties: Mapping[str, PropertyRecord] = field(default_factory=dict)
    methods: Mapping[str, FunctionRecord] = field(default_factory=dict)
    lineno: int = 0
    end_lineno: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "parent": self.parent,
            "interfaces": list(self.interfaces),
            "traits": list(self.traits),
            "modifiers": list(self.modifiers),
            "description": self.description,
            "constants": {k: v.to_dict() for k, v in self.constants.items()},
            "properties": {k: v.to_dict() for k, v in self.properties.items()},
            "methods": {k: v.to_dict() for k, v in self.methods.items()},
            "lineno": self.lineno,
            "end_lineno": self.end_lineno,
        }


@dataclass(frozen=True)
class FileReport:
    """Everything one file declares, per category, in declaration order."""

    path: str
    constants: Tuple[ConstantRecord, ...] = ()
    functions: Tuple[FunctionRecord, ...] = ()
    interfaces: Tuple[EntityRecord, ...] = ()
    traits: Tuple[EntityRecord, ...] = ()
    classes: Tuple[EntityRecord, ...] = ()

    def entries(self, category: SymbolCategory) -> Tuple[Any, ...]:
        return getattr(self, category.label)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"path": self.path}
        for category in SymbolCategory:
            data[category.label] = [record.to_dict() for record in self.entries(category)]
        return data
