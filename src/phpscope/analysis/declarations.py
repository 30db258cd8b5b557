"""Declaration data models produced by the PHP parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .values import Expr


class SymbolCategory(Enum):
    """Categories of top-level symbols a PHP file can declare."""

    CONSTANT = "constant"
    FUNCTION = "function"
    INTERFACE = "interface"
    TRAIT = "trait"
    CLASS = "class"

    @property
    def label(self) -> str:
        """Plural name used for report sections ('constants', 'classes', ...)."""
        return "classes" if self is SymbolCategory.CLASS else f"{self.value}s"

    @property
    def is_class_like(self) -> bool:
        return self in CLASS_LIKE_CATEGORIES


CLASS_LIKE_CATEGORIES = frozenset(
    {SymbolCategory.INTERFACE, SymbolCategory.TRAIT, SymbolCategory.CLASS}
)

# Same order as PHP's Reflection::getModifierNames()
MODIFIER_ORDER = ("abstract", "final", "public", "protected", "private", "static", "readonly")
VISIBILITIES = frozenset({"public", "protected", "private"})


def ordered_modifiers(
    keywords: Iterable[str], default_visibility: Optional[str] = "public"
) -> Tuple[str, ...]:
    """Normalize modifier keywords ('var' means public) into PHP's canonical order."""
    present = {"public" if k == "var" else k for k in keywords}
    if default_visibility and not present & VISIBILITIES:
        present.add(default_visibility)
    return tuple(m for m in MODIFIER_ORDER if m in present)


@dataclass
class ParameterDecl:
    """One entry of a formal parameter list."""

    name: str  # without the leading '$'
    type: Optional[str] = None
    default: Optional[Expr] = None
    variadic: bool = False
    by_reference: bool = False
    promoted: bool = False


@dataclass
class FunctionDecl:
    """A free function or a method."""

    name: str
    parameters: List[ParameterDecl] = field(default_factory=list)
    return_type: Optional[str] = None
    doc_comment: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    is_method: bool = False
    lineno: int = 0
    end_lineno: int = 0

    def modifier_names(self) -> Tuple[str, ...]:
        if not self.is_method:
            return ()
        return ordered_modifiers(self.keywords)


@dataclass
class ConstantDecl:
    """A global constant (const / define()) or a class constant."""

    name: str
    value: Expr
    type: Optional[str] = None
    doc_comment: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    is_member: bool = False
    lineno: int = 0

    def modifier_names(self) -> Tuple[str, ...]:
        if not self.is_member:
            return ()
        return ordered_modifiers(self.keywords)


@dataclass
class PropertyDecl:
    """A class or trait property (declared or promoted from a constructor)."""

    name: str  # without the leading '$'
    type: Optional[str] = None
    default: Optional[Expr] = None
    doc_comment: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    lineno: int = 0

    def modifier_names(self) -> Tuple[str, ...]:
        return ordered_modifiers(self.keywords)


@dataclass
class ClassDecl:
    """An interface, trait, class or enum with its own (not inherited) members."""

    name: str  # fully qualified, no leading backslash
    kind: SymbolCategory
    parent: Optional[str] = None
    interfaces: List[str] = field(default_factory=list)
    traits: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    doc_comment: Optional[str] = None
    constants: List[ConstantDecl] = field(default_factory=list)
    properties: List[PropertyDecl] = field(default_factory=list)
    methods: List[FunctionDecl] = field(default_factory=list)
    is_enum: bool = False
    lineno: int = 0
    end_lineno: int = 0

    def modifier_names(self) -> Tuple[str, ...]:
        return ordered_modifiers(self.keywords, default_visibility=None)


@dataclass
class FileDeclarations:
    """Everything a single PHP file declares at top level, in source order."""

    path: str
    constants: List[ConstantDecl] = field(default_factory=list)
    functions: List[FunctionDecl] = field(default_factory=list)
    classes: List[ClassDecl] = field(default_factory=list)
