"""Member extraction: constants, properties, methods and parameters of class-likes."""

from __future__ import annotations

from typing import Dict, List, Optional

from ..analysis.declarations import ConstantDecl, FunctionDecl, SymbolCategory
from ..analysis.hierarchy import ClassReflection
from ..analysis.symbols import SymbolTable
from ..analysis.values import ClassConstFetch, ConstFetch, Expr, is_constant_reference
from .doc_comments import (
    DocCommentResolver,
    constant_identity,
    method_identity,
    property_identity,
)
from .models import SELF_OWNER, ConstantRecord, FunctionRecord, ParameterRecord, PropertyRecord
from .types import NO_SAMPLE, constant_type, resolve_return_type, resolve_type

CONSTANT_MARKER = "const "


def owner_of(declaring: str, current: str) -> str:
    """'self' when the member is declared by current, else the declaring class name."""
    if declaring.lower() == current.lower():
        return SELF_OWNER
    return declaring


def _constant_name(expr: Expr) -> str:
    if isinstance(expr, ClassConstFetch):
        return f"{expr.scope}::{expr.name}"
    if isinstance(expr, ConstFetch):
        return expr.name
    return expr.source


def extract_global_constant(
    table: SymbolTable, docs: DocCommentResolver, name: str
) -> ConstantRecord:
    """Record of a top-level constant registered in the table."""
    decl: Optional[ConstantDecl] = table.get_constant(name)
    if decl is None:
        raise KeyError(f"Unknown constant {name}")
    value = table.constant_value(decl.name)
    block = docs.describe(constant_identity(decl.name), decl.doc_comment)
    return ConstantRecord(
        name=decl.name,
        type=constant_type(decl.type, value),
        value=value,
        modifiers=decl.modifier_names(),
        description=block.description,
    )


def extract_constants(
    reflection: ClassReflection, docs: DocCommentResolver
) -> Dict[str, ConstantRecord]:
    records: Dict[str, ConstantRecord] = {}
    for member in reflection.constants():
        decl = member.decl
        value = reflection.table.class_constant_value(member.declaring_class, decl.name)
        block = docs.describe(
            constant_identity(decl.name, member.declaring_class), decl.doc_comment
        )
        records[decl.name] = ConstantRecord(
            name=decl.name,
            type=constant_type(decl.type, value),
            value=value,
            modifiers=decl.modifier_names(),
            description=block.description,
            owner=owner_of(member.declaring_class, reflection.name),
        )
    return records


def extract_properties(
    reflection: ClassReflection, docs: DocCommentResolver
) -> Dict[str, PropertyRecord]:
    """Property records; interfaces have none."""
    if reflection.kind is SymbolCategory.INTERFACE:
        return {}
    records: Dict[str, PropertyRecord] = {}
    for member in reflection.properties():
        decl = member.decl
        identity = property_identity(member.declaring_class, decl.name)
        block = docs.describe(identity, decl.doc_comment)
        var_tags = docs.tags_named(identity, decl.doc_comment, "var")
        tag = var_tags[0] if var_tags else None

        has_default = decl.default is not None
        default = (
            reflection.table.evaluate(decl.default, member.declaring_class)
            if decl.default is not None
            else None
        )
        records[decl.name] = PropertyRecord(
            name=decl.name,
            type=resolve_type(
                decl.type,
                tag.type if tag else None,
                default if has_default else NO_SAMPLE,
            ),
            default=default,
            has_default=has_default,
            modifiers=decl.modifier_names(),
            description=block.description or (tag.description if tag else ""),
            owner=owner_of(member.declaring_class, reflection.name),
        )
    return records


def extract_methods(
    reflection: ClassReflection, docs: DocCommentResolver
) -> Dict[str, FunctionRecord]:
    records: Dict[str, FunctionRecord] = {}
    for member in reflection.methods():
        decl = member.decl
        records[decl.name] = extract_function(
            reflection.table,
            docs,
            decl,
            identity=method_identity(member.declaring_class, decl.name),
            owner=owner_of(member.declaring_class, reflection.name),
            class_name=member.declaring_class,
        )
    return records


def extract_function(
    table: SymbolTable,
    docs: DocCommentResolver,
    decl: FunctionDecl,
    identity: str,
    owner: str = SELF_OWNER,
    class_name: Optional[str] = None,
) -> FunctionRecord:
    """Record of a free function or a method; class_name scopes self:: in defaults."""
    block = docs.describe(identity, decl.doc_comment)
    return FunctionRecord(
        name=decl.name,
        parameters=tuple(extract_parameters(table, docs, decl, identity, class_name)),
        return_type=resolve_return_type(
            decl.return_type, docs.tags_named(identity, decl.doc_comment, "return")
        ),
        modifiers=decl.modifier_names(),
        description=block.description,
        owner=owner,
        lineno=decl.lineno,
        end_lineno=decl.end_lineno,
    )


def extract_parameters(
    table: SymbolTable,
    docs: DocCommentResolver,
    decl: FunctionDecl,
    identity: str,
    class_name: Optional[str] = None,
) -> List[ParameterRecord]:
    """
    Parameter records in declaration order.

    @param tags are matched by variable name. A default that names a constant
    is recorded as "const NAME"; its type falls back to the constant's value.
    A parameter is optional when it has a default (or is variadic) and no
    required parameter follows it.
    """
    tags = {}
    for tag in docs.tags_named(identity, decl.doc_comment, "param"):
        if tag.variable:
            tags.setdefault(tag.variable, tag)

    params = decl.parameters
    records: List[ParameterRecord] = []
    for index, param in enumerate(params):
        tag = tags.get(param.name)
        has_default = param.default is not None
        sample = NO_SAMPLE
        default = None
        if param.default is not None:
            sample = table.evaluate(param.default, class_name)
            if is_constant_reference(param.default):
                default = CONSTANT_MARKER + _constant_name(param.default)
            else:
                default = sample

        optional = (has_default or param.variadic) and all(
            p.default is not None or p.variadic for p in params[index + 1 :]
        )
        records.append(
            ParameterRecord(
                name=param.name,
                type=resolve_type(param.type, tag.type if tag else None, sample),
                default=default,
                has_default=has_default,
                description=tag.description if tag else "",
                optional=optional,
                variadic=param.variadic,
                by_reference=param.by_reference,
                promoted=param.promoted,
            )
        )
    return records
