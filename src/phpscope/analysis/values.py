"""PHP constant expressions and their evaluation.

Default values and constant initializers are kept as a small expression tree
(built by the parser from tree-sitter nodes) and evaluated lazily against the
symbol table, because they may refer to constants declared later in the file
or inherited from another class.

Evaluated values use plain Python objects: str, int, float, bool, None,
list (PHP list-like arrays) and dict (PHP arrays with explicit keys).
Anything that cannot be evaluated statically becomes :class:`Unevaluated`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Tuple

PHP_INT_MAX = 2**63 - 1
PHP_INT_MIN = -(2**63)
_UINT64_MASK = 2**64 - 1


@dataclass(frozen=True)
class Expr:
    """Base class of expression nodes; ``source`` is the PHP text."""

    source: str


@dataclass(frozen=True)
class Literal(Expr):
    value: Any


@dataclass(frozen=True)
class ArrayExpr(Expr):
    items: Tuple[Tuple[Optional[Expr], Expr], ...]  # (key or None, value)


@dataclass(frozen=True)
class ConstFetch(Expr):
    """Reference to a global constant, e.g. ``PHP_EOL`` or ``App\\VERSION``."""

    name: str
    fallback: Optional[str] = None  # global name tried when the namespaced one is unknown


@dataclass(frozen=True)
class ClassConstFetch(Expr):
    """Reference to a class constant, e.g. ``self::LIMIT`` or ``Foo::BAR``."""

    scope: str  # resolved class name, or self / static / parent
    name: str


@dataclass(frozen=True)
class ClassNameFetch(Expr):
    """``Foo::class``."""

    scope: str


@dataclass(frozen=True)
class UnaryOp(Expr):
    op: str
    operand: Expr


@dataclass(frozen=True)
class BinaryOp(Expr):
    op: str
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Unsupported(Expr):
    """An expression the evaluator does not handle (new, closures, heredoc, ...)."""


@dataclass(frozen=True)
class Unevaluated:
    """Value of an expression that could not be evaluated statically."""

    source: str


class ConstantLookup(Protocol):
    """Where evaluation finds the values of referenced constants."""

    def constant(self, name: str) -> Any:
        """Value of a global constant; raises LookupError if unknown."""

    def class_constant(self, scope: str, name: str) -> Any:
        """Value of a class constant; raises LookupError if unknown."""

    def class_name(self, scope: str) -> str:
        """Resolved class name for ``scope::class``; raises LookupError if unknown."""


def is_constant_reference(expr: Optional[Expr]) -> bool:
    """True when the expression is a bare constant fetch (not a literal)."""
    return isinstance(expr, (ConstFetch, ClassConstFetch))


def evaluate(expr: Expr, lookup: ConstantLookup) -> Any:
    """Evaluate ``expr``; returns :class:`Unevaluated` when that is not possible."""
    try:
        return _evaluate(expr, lookup)
    except (LookupError, TypeError, ValueError, ZeroDivisionError, OverflowError, _NotConstant):
        return Unevaluated(expr.source)


class _NotConstant(Exception):
    pass


def _evaluate(expr: Expr, lookup: ConstantLookup) -> Any:
    if isinstance(expr, Literal):
        return expr.value
    if isinstance(expr, ArrayExpr):
        return _build_array(expr, lookup)
    if isinstance(expr, ConstFetch):
        try:
            return _checked(lookup.constant(expr.name))
        except LookupError:
            if expr.fallback is None:
                raise
            return _checked(lookup.constant(expr.fallback))
    if isinstance(expr, ClassConstFetch):
        return _checked(lookup.class_constant(expr.scope, expr.name))
    if isinstance(expr, ClassNameFetch):
        return lookup.class_name(expr.scope)
    if isinstance(expr, UnaryOp):
        return _unary(expr.op, _evaluate(expr.operand, lookup))
    if isinstance(expr, BinaryOp):
        if expr.op == "??":
            left = _evaluate(expr.left, lookup)
            return _evaluate(expr.right, lookup) if left is None else left
        return _binary(expr.op, _evaluate(expr.left, lookup), _evaluate(expr.right, lookup))
    raise _NotConstant(expr.source)


def _checked(value: Any) -> Any:
    if isinstance(value, Unevaluated):
        raise _NotConstant(value.source)
    return value


def _build_array(expr: ArrayExpr, lookup: ConstantLookup) -> Any:
    result: dict = {}
    next_index = 0
    for key_expr, value_expr in expr.items:
        value = _evaluate(value_expr, lookup)
        if key_expr is None:
            key: Any = next_index
        else:
            key = _array_key(_evaluate(key_expr, lookup))
        result[key] = value
        if isinstance(key, int) and key >= next_index:
            next_index = key + 1
    if list(result) == list(range(len(result))):
        return list(result.values())
    return result


def _array_key(key: Any) -> Any:
    # PHP casts bools, floats and numeric strings to int keys
    if isinstance(key, bool):
        return int(key)
    if isinstance(key, float):
        return int(key)
    if key is None:
        return ""
    if isinstance(key, str) and key.lstrip("-").isdigit() and not key.startswith(("0", "-0")):
        return int(key)
    if isinstance(key, (int, str)):
        return key
    raise TypeError("Illegal offset type")


def _to_string(value: Any) -> str:
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    if isinstance(value, float):
        if math.isnan(value):
            return "NAN"
        if math.isinf(value):
            return "INF" if value > 0 else "-INF"
        if value.is_integer() and abs(value) < 1e15:
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, dict)):
        return "Array"
    return str(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value not in ("", "0")
    return bool(value)


def _number(value: Any) -> Any:
    if isinstance(value, bool) or value is None:
        return int(bool(value))
    if isinstance(value, (int, float)):
        return value
    raise TypeError(f"Unsupported operand {value!r}")


def php_int(value: Any) -> Any:
    """An int outside PHP's 64-bit range becomes a float, as PHP does on overflow."""
    if isinstance(value, bool) or not isinstance(value, int):
        return value
    if PHP_INT_MIN <= value <= PHP_INT_MAX:
        return value
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def _unary(op: str, value: Any) -> Any:
    if op == "-":
        return php_int(-_number(value))
    if op == "+":
        return _number(value)
    if op == "!":
        return not _to_bool(value)
    if op == "~":
        return ~int(_number(value))
    raise _NotConstant(op)


def _binary(op: str, left: Any, right: Any) -> Any:
    if op == ".":
        return _to_string(left) + _to_string(right)
    if op in ("&&", "and"):
        return _to_bool(left) and _to_bool(right)
    if op in ("||", "or"):
        return _to_bool(left) or _to_bool(right)
    if op == "xor":
        return _to_bool(left) != _to_bool(right)
    if op == "===":
        return type(left) is type(right) and left == right
    if op == "!==":
        return not (type(left) is type(right) and left == right)
    if op in ("==", "!=", "<>", "<", ">", "<=", ">="):
        return _compare(op, left, right)
    if op == "+" and isinstance(left, (list, dict)) and isinstance(right, (list, dict)):
        merged = dict(enumerate(left)) if isinstance(left, list) else dict(left)
        for key, value in (enumerate(right) if isinstance(right, list) else right.items()):
            merged.setdefault(key, value)
        return list(merged.values()) if list(merged) == list(range(len(merged))) else merged
    a, b = _number(left), _number(right)
    if op == "+":
        return php_int(a + b)
    if op == "-":
        return php_int(a - b)
    if op == "*":
        return php_int(a * b)
    if op == "/":
        if isinstance(a, int) and isinstance(b, int) and b != 0 and a % b == 0:
            return php_int(a // b)
        return a / b
    if op == "%":
        a, b = int(a), int(b)
        result = abs(a) % abs(b)
        return -result if a < 0 else result
    if op == "**":
        return _power(a, b)
    if op in ("|", "&", "^"):
        a, b = int(a), int(b)
        return {"|": a | b, "&": a & b, "^": a ^ b}[op]
    if op in ("<<", ">>"):
        return _shift(op, int(a), int(b))
    raise _NotConstant(op)


def _power(a: Any, b: Any) -> Any:
    if isinstance(a, int) and isinstance(b, int) and b >= 0 and (abs(a) <= 1 or b < 64):
        return php_int(a**b)
    try:
        result = float(a) ** b
    except OverflowError:
        negative = a < 0 and isinstance(b, int) and b % 2 == 1
        return -math.inf if negative else math.inf
    # a negative base with a fractional exponent
    return math.nan if isinstance(result, complex) else result


def _shift(op: str, a: int, b: int) -> int:
    # Shifts wrap around in 64 bits instead of overflowing to float
    if b < 0:
        raise ValueError("Bit shift by negative number")
    if op == ">>":
        return a >> min(b, 63)
    if b >= 64:
        return 0
    result = (a << b) & _UINT64_MASK
    return result - (1 << 64) if result > PHP_INT_MAX else result


def _compare(op: str, left: Any, right: Any) -> bool:
    if op in ("==", "!=", "<>"):
        equal = left == right
        return equal if op == "==" else not equal
    if not (isinstance(left, (int, float)) and isinstance(right, (int, float))):
        if not (isinstance(left, str) and isinstance(right, str)):
            raise TypeError("Unsupported comparison")
    return {"<": left < right, ">": left > right, "<=": left <= right, ">=": left >= right}[op]


def to_plain(value: Any) -> Any:
    """JSON-compatible form of an evaluated value (unevaluated ones become their source)."""
    if isinstance(value, Unevaluated):
        return value.source
    if isinstance(value, list):
        return [to_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items()}
    return value
