"""PHP parser using tree-sitter."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import tree_sitter_php as tsphp
from tree_sitter import Language, Node, Parser

from ..errors import SourceLoadError
from .declarations import (
    ClassDecl,
    ConstantDecl,
    FileDeclarations,
    FunctionDecl,
    ParameterDecl,
    PropertyDecl,
    SymbolCategory,
)
from .values import (
    ArrayExpr,
    BinaryOp,
    ClassConstFetch,
    ClassNameFetch,
    ConstFetch,
    Expr,
    Literal,
    UnaryOp,
    Unsupported,
    php_int,
)

logger = logging.getLogger(__name__)

_CLASS_LIKE_NODES: Dict[str, SymbolCategory] = {
    "interface_declaration": SymbolCategory.INTERFACE,
    "trait_declaration": SymbolCategory.TRAIT,
    "class_declaration": SymbolCategory.CLASS,
    "enum_declaration": SymbolCategory.CLASS,
}

_MODIFIER_NODES = frozenset(
    {
        "visibility_modifier",
        "static_modifier",
        "abstract_modifier",
        "final_modifier",
        "readonly_modifier",
        "var_modifier",
    }
)

_PARAMETER_NODES = frozenset(
    {"simple_parameter", "variadic_parameter", "property_promotion_parameter"}
)

_RELATIVE_SCOPES = frozenset({"self", "static", "parent"})

# Type names that are never resolved against the current namespace
_RESERVED_TYPES = frozenset(
    {
        "array", "bool", "callable", "false", "float", "int", "iterable", "mixed",
        "never", "null", "object", "parent", "self", "static", "string", "true", "void",
    }
)

_STRING_PARTS = frozenset({"string_content", "string_value", "escape_sequence"})

_ESCAPES = {
    "n": "\n", "t": "\t", "r": "\r", "v": "\v", "e": "\x1b", "f": "\f",
    "\\": "\\", "$": "$", '"': '"',
}
_DOUBLE_QUOTED_ESCAPE = re.compile(
    r"\\(?:([ntrvef\\$\"])|([0-7]{1,3})|x([0-9A-Fa-f]{1,2})|u\{([0-9A-Fa-f]+)\})"
)
_SINGLE_QUOTED_ESCAPE = re.compile(r"\\([\\'])")


def _get_text(node: Node, source_code: bytes) -> str:
    """Get text content of a node."""
    return source_code[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _doc_comment(node: Node, source_code: bytes) -> Optional[str]:
    """Return the closest /** */ comment directly preceding a declaration."""
    prev = node.prev_sibling
    while prev is not None and prev.type == "comment":
        text = _get_text(prev, source_code)
        if text.startswith("/**"):
            return text
        prev = prev.prev_sibling
    return None


def _find_first(node: Node, node_type: str) -> Optional[Node]:
    """Breadth-first search for the first descendant of the given type."""
    queue = list(node.children)
    while queue:
        current = queue.pop(0)
        if current.type == node_type:
            return current
        queue.extend(current.children)
    return None


def _first_error_line(node: Node) -> int:
    """Line (1-based) of the first syntax error below node."""
    if node.type == "ERROR" or node.is_missing:
        return node.start_point[0] + 1
    for child in node.children:
        if child.has_error or child.is_missing:
            return _first_error_line(child)
    return node.start_point[0] + 1


def _keywords(node: Node, source_code: bytes) -> List[str]:
    """Modifier keywords written on a declaration, lower-cased."""
    return [
        _get_text(child, source_code).lower()
        for child in node.children
        if child.type in _MODIFIER_NODES
    ]


def _parse_int(text: str) -> int:
    digits = text.replace("_", "").lower()
    if digits.startswith(("0x", "0b", "0o")):
        return int(digits, 0)
    if len(digits) > 1 and digits.startswith("0"):
        return int(digits, 8)
    return int(digits)


def _single_quoted(text: str) -> str:
    if text[:1] in ("b", "B"):
        text = text[1:]
    return _SINGLE_QUOTED_ESCAPE.sub(r"\1", text[1:-1])


def _double_quoted(text: str) -> str:
    if text[:1] in ("b", "B"):
        text = text[1:]

    def replace(match: re.Match) -> str:
        simple, octal, hexa, unicode = match.groups()
        if simple:
            return _ESCAPES[simple]
        if octal:
            return chr(int(octal, 8) & 0xFF)
        if hexa:
            return chr(int(hexa, 16))
        return chr(int(unicode, 16))

    return _DOUBLE_QUOTED_ESCAPE.sub(replace, text[1:-1])


@dataclass
class _Scope:
    """Namespace and `use` imports in effect at some point of the file."""

    namespace: str = ""
    classes: Dict[str, str] = field(default_factory=dict)  # lower-cased alias -> name
    functions: Dict[str, str] = field(default_factory=dict)
    constants: Dict[str, str] = field(default_factory=dict)

    def qualify(self, name: str) -> str:
        return f"{self.namespace}\\{name}" if self.namespace else name

    def resolve_class(self, name: str) -> str:
        if name.lower() in _RELATIVE_SCOPES:
            return name.lower()
        if name.startswith("\\"):
            return name[1:]
        if name.lower().startswith("namespace\\"):
            return self.qualify(name[len("namespace\\"):])
        first, sep, rest = name.partition("\\")
        imported = self.classes.get(first.lower())
        if imported:
            return f"{imported}\\{rest}" if sep else imported
        return self.qualify(name)

    def resolve_constant(self, name: str) -> Tuple[str, Optional[str]]:
        """Resolved constant name plus the global fallback PHP tries at runtime."""
        if name.startswith("\\"):
            return name[1:], None
        if "\\" in name:
            return self.resolve_class(name), None
        if name in self.constants:
            return self.constants[name], None
        if self.namespace:
            return self.qualify(name), name
        return name, None


class PhpParser:
    """Parse PHP files into the declarations they make at top level."""

    def __init__(self) -> None:
        self._language = Language(tsphp.language_php())
        self._parser = Parser(self._language)

    def parse_file(self, file_path: str) -> FileDeclarations:
        """
        Parse a PHP file and collect its top-level declarations.

        Args:
            file_path: Path to the PHP file.

        Returns:
            FileDeclarations in source order.

        Raises:
            SourceLoadError: If the file is missing, unreadable or has syntax errors.
        """
        path = Path(file_path)
        if not path.is_file():
            raise SourceLoadError(file_path, "no such file")
        try:
            source_code = path.read_bytes()
        except OSError as e:
            raise SourceLoadError(file_path, str(e)) from e
        return self.parse_source(source_code, file_path)

    def parse_source(self, source_code: bytes, file_path: str = "<string>") -> FileDeclarations:
        """Parse PHP source bytes (see parse_file)."""
        try:
            source_code.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SourceLoadError(file_path, f"not valid UTF-8 ({e.reason})") from e

        tree = self._parser.parse(source_code)
        root = tree.root_node
        if root.has_error:
            line = _first_error_line(root)
            raise SourceLoadError(file_path, f"syntax error on line {line}")

        result = FileDeclarations(path=file_path)
        self._visit(root.children, source_code, _Scope(), result)
        logger.debug(
            "Parsed %s: %d constant(s), %d function(s), %d class-like(s)",
            file_path,
            len(result.constants),
            len(result.functions),
            len(result.classes),
        )
        return result

    def _visit(
        self, nodes: List[Node], source_code: bytes, scope: _Scope, result: FileDeclarations
    ) -> None:
        """Collect declarations from a list of top-level statements."""
        for child in nodes:
            if child.type == "namespace_definition":
                name_node = child.child_by_field_name("name") or next(
                    (c for c in child.named_children if c.type == "namespace_name"), None
                )
                namespace = _get_text(name_node, source_code) if name_node else ""
                body = child.child_by_field_name("body")
                if body is not None:
                    self._visit(body.children, source_code, _Scope(namespace=namespace), result)
                else:
                    # `namespace Foo;` applies to the statements that follow
                    scope = _Scope(namespace=namespace)
            elif child.type == "namespace_use_declaration":
                self._extract_uses(child, source_code, scope)
            elif child.type == "const_declaration":
                result.constants.extend(
                    self._extract_constants(child, source_code, scope, is_member=False)
                )
            elif child.type == "expression_statement":
                constant = self._extract_define(child, source_code, scope)
                if constant is not None:
                    result.constants.append(constant)
            elif child.type == "function_definition":
                result.functions.append(
                    self._extract_function(child, source_code, scope, is_method=False)
                )
            elif child.type in _CLASS_LIKE_NODES:
                class_decl = self._extract_class_like(child, source_code, scope)
                if class_decl is not None:
                    result.classes.append(class_decl)

    def _extract_uses(self, node: Node, source_code: bytes, scope: _Scope) -> None:
        """Record `use` imports (classes, functions and constants, including groups)."""
        kind = "class"
        for child in node.children:
            if not child.is_named and child.type in ("function", "const"):
                kind = child.type
        group = next((c for c in node.named_children if c.type == "namespace_use_group"), None)
        prefix = ""
        if group is not None:
            prefix_node = next(
                (c for c in node.named_children if c.type in ("namespace_name", "qualified_name")),
                None,
            )
            if prefix_node is not None:
                prefix = _get_text(prefix_node, source_code).strip("\\") + "\\"
        clauses = group.named_children if group is not None else node.named_children
        for clause in clauses:
            if clause.type not in ("namespace_use_clause", "namespace_use_group_clause"):
                continue
            clause_kind = kind
            for c in clause.children:
                if not c.is_named and c.type in ("function", "const"):
                    clause_kind = c.type
            names = [
                c for c in clause.named_children
                if c.type in ("name", "qualified_name", "namespace_name")
            ]
            if not names:
                continue
            target = (prefix + _get_text(names[0], source_code)).lstrip("\\")
            alias_node = clause.child_by_field_name("alias")
            aliasing = next(
                (c for c in clause.named_children if c.type == "namespace_aliasing_clause"), None
            )
            if alias_node is None and aliasing is not None:
                alias_node = next((c for c in aliasing.named_children if c.type == "name"), None)
            if alias_node is None and len(names) > 1:
                alias_node = names[1]
            alias = (
                _get_text(alias_node, source_code) if alias_node else target.rsplit("\\", 1)[-1]
            )
            if clause_kind == "function":
                scope.functions[alias.lower()] = target
            elif clause_kind == "const":
                scope.constants[alias] = target
            else:
                scope.classes[alias.lower()] = target

    def _extract_define(
        self, node: Node, source_code: bytes, scope: _Scope
    ) -> Optional[ConstantDecl]:
        """Extract define('NAME', value) as a global constant."""
        call = node.named_children[0] if node.named_children else None
        if call is None or call.type != "function_call_expression":
            return None
        func = call.child_by_field_name("function")
        if func is None or _get_text(func, source_code).lstrip("\\").lower() != "define":
            return None
        args_node = call.child_by_field_name("arguments")
        args = [a for a in args_node.named_children if a.type == "argument"] if args_node else []
        if len(args) < 2 or not args[0].named_children or not args[1].named_children:
            return None
        name_expr = self._expression(args[0].named_children[-1], source_code, scope)
        if not (isinstance(name_expr, Literal) and isinstance(name_expr.value, str)):
            logger.debug("Skipping define() with a dynamic name on line %d", node.start_point[0] + 1)
            return None
        return ConstantDecl(
            name=name_expr.value.lstrip("\\"),
            value=self._expression(args[1].named_children[-1], source_code, scope),
            doc_comment=_doc_comment(node, source_code),
            lineno=node.start_point[0] + 1,
        )

    def _extract_constants(
        self, node: Node, source_code: bytes, scope: _Scope, is_member: bool
    ) -> List[ConstantDecl]:
        """Extract each element of a `const A = 1, B = 2;` declaration."""
        keywords = _keywords(node, source_code)
        type_node = node.child_by_field_name("type")
        const_type = self._type_text(type_node, source_code, scope) if type_node else None
        doc_comment = _doc_comment(node, source_code)
        constants: List[ConstantDecl] = []
        for element in node.named_children:
            if element.type != "const_element":
                continue
            name_node = next((c for c in element.named_children if c.type == "name"), None)
            value_node = element.child_by_field_name("value")
            if value_node is None and len(element.named_children) > 1:
                value_node = element.named_children[-1]
            if name_node is None or value_node is None:
                continue
            name = _get_text(name_node, source_code)
            constants.append(
                ConstantDecl(
                    name=name if is_member else scope.qualify(name),
                    value=self._expression(value_node, source_code, scope),
                    type=const_type,
                    doc_comment=doc_comment,
                    keywords=keywords,
                    is_member=is_member,
                    lineno=element.start_point[0] + 1,
                )
            )
        return constants

    def _extract_class_like(
        self, node: Node, source_code: bytes, scope: _Scope
    ) -> Optional[ClassDecl]:
        """Extract an interface, trait, class or enum with its own members."""
        name_node = node.child_by_field_name("name")
        if not name_node:
            return None
        kind = _CLASS_LIKE_NODES[node.type]
        decl = ClassDecl(
            name=scope.qualify(_get_text(name_node, source_code)),
            kind=kind,
            doc_comment=_doc_comment(node, source_code),
            is_enum=node.type == "enum_declaration",
            lineno=node.start_point[0] + 1,
            end_lineno=node.end_point[0] + 1,
        )
        if decl.is_enum:
            decl.keywords.append("final")

        for child in node.children:
            if child.type in ("abstract_modifier", "final_modifier", "readonly_modifier"):
                decl.keywords.append(_get_text(child, source_code).lower())
            elif child.type == "base_clause":
                names = self._clause_names(child, source_code, scope)
                if kind is SymbolCategory.INTERFACE:
                    decl.interfaces.extend(names)
                elif names:
                    decl.parent = names[0]
            elif child.type == "class_interface_clause":
                decl.interfaces.extend(self._clause_names(child, source_code, scope))

        body = node.child_by_field_name("body")
        if body is not None:
            self._extract_members(body, decl, source_code, scope)
        return decl

    def _clause_names(self, node: Node, source_code: bytes, scope: _Scope) -> List[str]:
        return [
            scope.resolve_class(_get_text(c, source_code))
            for c in node.named_children
            if c.type in ("name", "qualified_name")
        ]

    def _extract_members(
        self, body: Node, decl: ClassDecl, source_code: bytes, scope: _Scope
    ) -> None:
        for member in body.children:
            if member.type == "const_declaration":
                decl.constants.extend(
                    self._extract_constants(member, source_code, scope, is_member=True)
                )
            elif member.type == "property_declaration":
                decl.properties.extend(self._extract_properties(member, source_code, scope))
            elif member.type == "method_declaration":
                method = self._extract_function(member, source_code, scope, is_method=True)
                if decl.kind is SymbolCategory.INTERFACE and "abstract" not in method.keywords:
                    method.keywords.append("abstract")
                decl.methods.append(method)
                if method.name.lower() == "__construct":
                    decl.properties.extend(
                        self._extract_promoted_properties(member, method, source_code)
                    )
            elif member.type == "use_declaration":
                decl.traits.extend(self._clause_names(member, source_code, scope))
            elif member.type == "enum_case":
                case = self._extract_enum_case(member, decl, source_code, scope)
                if case is not None:
                    decl.constants.append(case)

    def _extract_properties(
        self, node: Node, source_code: bytes, scope: _Scope
    ) -> List[PropertyDecl]:
        """Extract each element of a property declaration (`public $a = 1, $b;`)."""
        keywords = _keywords(node, source_code)
        type_node = node.child_by_field_name("type")
        prop_type = self._type_text(type_node, source_code, scope) if type_node else None
        doc_comment = _doc_comment(node, source_code)
        properties: List[PropertyDecl] = []
        for element in node.named_children:
            if element.type != "property_element":
                continue
            var_node = element.child_by_field_name("name") or _find_first(element, "variable_name")
            if var_node is None:
                continue
            default_node = element.child_by_field_name("default_value")
            if default_node is None:
                initializer = next(
                    (c for c in element.named_children if c.type == "property_initializer"), None
                )
                if initializer is not None and initializer.named_children:
                    default_node = initializer.named_children[0]
            properties.append(
                PropertyDecl(
                    name=_get_text(var_node, source_code).lstrip("$"),
                    type=prop_type,
                    default=(
                        self._expression(default_node, source_code, scope)
                        if default_node is not None
                        else None
                    ),
                    doc_comment=doc_comment,
                    keywords=keywords,
                    lineno=element.start_point[0] + 1,
                )
            )
        return properties

    def _extract_promoted_properties(
        self, node: Node, constructor: FunctionDecl, source_code: bytes
    ) -> List[PropertyDecl]:
        """Constructor parameters with a visibility modifier are also properties."""
        params_node = node.child_by_field_name("parameters")
        if params_node is None:
            return []
        by_name = {p.name: p for p in constructor.parameters}
        properties: List[PropertyDecl] = []
        for param_node in params_node.named_children:
            if param_node.type != "property_promotion_parameter":
                continue
            var_node = _find_first(param_node, "variable_name")
            if var_node is None:
                continue
            param = by_name.get(_get_text(var_node, source_code).lstrip("$"))
            if param is None:
                continue
            properties.append(
                PropertyDecl(
                    name=param.name,
                    type=param.type,
                    doc_comment=None,
                    keywords=_keywords(param_node, source_code),
                    lineno=param_node.start_point[0] + 1,
                )
            )
        return properties

    def _extract_enum_case(
        self, node: Node, decl: ClassDecl, source_code: bytes, scope: _Scope
    ) -> Optional[ConstantDecl]:
        """Enum cases are reported as public constants (backed cases keep their value)."""
        name_node = node.child_by_field_name("name") or next(
            (c for c in node.named_children if c.type == "name"), None
        )
        if name_node is None:
            return None
        name = _get_text(name_node, source_code)
        value_node = node.child_by_field_name("value")
        if value_node is None:
            rest = [
                c for c in node.named_children
                if c.type not in ("name", "attribute_list", "comment")
            ]
            value_node = rest[-1] if rest else None
        value: Expr
        if value_node is not None:
            value = self._expression(value_node, source_code, scope)
        else:
            value = Unsupported(f"{decl.name}::{name}")
        return ConstantDecl(
            name=name,
            value=value,
            doc_comment=_doc_comment(node, source_code),
            keywords=["public"],
            is_member=True,
            lineno=node.start_point[0] + 1,
        )

    def _extract_function(
        self, node: Node, source_code: bytes, scope: _Scope, is_method: bool
    ) -> FunctionDecl:
        """Extract a function definition or a method declaration."""
        name_node = node.child_by_field_name("name")
        name = _get_text(name_node, source_code) if name_node else "<anonymous>"
        params_node = node.child_by_field_name("parameters")
        return_node = node.child_by_field_name("return_type")
        return FunctionDecl(
            name=name if is_method else scope.qualify(name),
            parameters=(
                self._extract_parameters(params_node, source_code, scope) if params_node else []
            ),
            return_type=(
                self._type_text(return_node, source_code, scope) if return_node else None
            ),
            doc_comment=_doc_comment(node, source_code),
            keywords=_keywords(node, source_code) if is_method else [],
            is_method=is_method,
            lineno=node.start_point[0] + 1,
            end_lineno=node.end_point[0] + 1,
        )

    def _extract_parameters(
        self, params_node: Node, source_code: bytes, scope: _Scope
    ) -> List[ParameterDecl]:
        parameters: List[ParameterDecl] = []
        for param_node in params_node.named_children:
            if param_node.type not in _PARAMETER_NODES:
                continue
            var_node = _find_first(param_node, "variable_name")
            if var_node is None:
                continue
            type_node = param_node.child_by_field_name("type")
            default_node = param_node.child_by_field_name("default_value")
            parameters.append(
                ParameterDecl(
                    name=_get_text(var_node, source_code).lstrip("$"),
                    type=self._type_text(type_node, source_code, scope) if type_node else None,
                    default=(
                        self._expression(default_node, source_code, scope)
                        if default_node is not None
                        else None
                    ),
                    variadic=param_node.type == "variadic_parameter",
                    by_reference=(
                        _find_first(param_node, "reference_modifier") is not None
                        or _find_first(param_node, "by_ref") is not None
                    ),
                    promoted=param_node.type == "property_promotion_parameter",
                )
            )
        return parameters

    def _type_text(self, node: Node, source_code: bytes, scope: _Scope) -> str:
        """Render a declared type; class names are resolved, unions joined with '|'."""
        if node.type == "union_type":
            return "|".join(self._type_text(c, source_code, scope) for c in node.named_children)
        if node.type == "intersection_type":
            return "&".join(self._type_text(c, source_code, scope) for c in node.named_children)
        if node.type == "disjunctive_normal_form_type":
            parts = []
            for c in node.named_children:
                text = self._type_text(c, source_code, scope)
                parts.append(f"({text})" if c.type == "intersection_type" else text)
            return "|".join(parts)
        if node.type == "optional_type":
            inner = node.named_children
            return "?" + (self._type_text(inner[0], source_code, scope) if inner else "")
        if node.type in ("named_type", "name", "qualified_name"):
            text = _get_text(node, source_code).strip()
            if text.lower() in _RESERVED_TYPES:
                return text
            return scope.resolve_class(text)
        return re.sub(r"\s+", "", _get_text(node, source_code))

    def _expression(self, node: Node, source_code: bytes, scope: _Scope) -> Expr:
        """Convert a constant expression node into an expression tree."""
        source = _get_text(node, source_code)
        kind = node.type
        if kind == "parenthesized_expression":
            inner = node.named_children
            return self._expression(inner[0], source_code, scope) if inner else Unsupported(source)
        if kind == "integer":
            return Literal(source, php_int(_parse_int(source)))
        if kind == "float":
            return Literal(source, float(source.replace("_", "")))
        if kind == "boolean":
            return Literal(source, source.lower() == "true")
        if kind == "null":
            return Literal(source, None)
        if kind == "string":
            return Literal(source, _single_quoted(source))
        if kind == "encapsed_string":
            if any(c.type not in _STRING_PARTS for c in node.named_children):
                return Unsupported(source)
            return Literal(source, _double_quoted(source))
        if kind in ("name", "qualified_name"):
            lowered = source.lower()
            if lowered in ("true", "false"):
                return Literal(source, lowered == "true")
            if lowered == "null":
                return Literal(source, None)
            name, fallback = scope.resolve_constant(source)
            return ConstFetch(source, name, fallback)
        if kind == "class_constant_access_expression":
            parts = node.named_children
            if len(parts) != 2:
                return Unsupported(source)
            class_scope = scope.resolve_class(_get_text(parts[0], source_code))
            member = _get_text(parts[1], source_code)
            if member.lower() == "class":
                return ClassNameFetch(source, class_scope)
            return ClassConstFetch(source, class_scope, member)
        if kind == "array_creation_expression":
            return self._array_expression(node, source, source_code, scope)
        if kind == "unary_op_expression":
            operand = node.named_children[-1] if node.named_children else None
            op_node = node.child_by_field_name("operator") or next(
                (c for c in node.children if not c.is_named), None
            )
            if operand is None or op_node is None:
                return Unsupported(source)
            return UnaryOp(
                source,
                _get_text(op_node, source_code),
                self._expression(operand, source_code, scope),
            )
        if kind == "binary_expression":
            left = node.child_by_field_name("left")
            right = node.child_by_field_name("right")
            op_node = node.child_by_field_name("operator")
            if left is None or right is None or op_node is None:
                return Unsupported(source)
            return BinaryOp(
                source,
                _get_text(op_node, source_code).lower(),
                self._expression(left, source_code, scope),
                self._expression(right, source_code, scope),
            )
        return Unsupported(source)

    def _array_expression(
        self, node: Node, source: str, source_code: bytes, scope: _Scope
    ) -> Expr:
        items = []
        for element in node.named_children:
            if element.type != "array_element_initializer":
                continue
            parts = [c for c in element.named_children if c.type != "comment"]
            if any(c.type in ("variadic_unpacking", "by_ref") for c in parts):
                return Unsupported(source)
            if len(parts) == 2:
                items.append(
                    (
                        self._expression(parts[0], source_code, scope),
                        self._expression(parts[1], source_code, scope),
                    )
                )
            elif len(parts) == 1:
                items.append((None, self._expression(parts[0], source_code, scope)))
            else:
                return Unsupported(source)
        return ArrayExpr(source, tuple(items))
