"""Type resolution: declared type, then doc tag, then the value's type."""

from __future__ import annotations

import re
from typing import Any, Iterable, Optional

from ..analysis.docblock import DocTag

UNKNOWN_TYPE = ""
VOID_TYPE = "void"

# The only place where long type names are mapped to PHP's short ones
TYPE_ALIASES = {
    "boolean": "bool",
    "integer": "int",
    "double": "float",
    "real": "float",
}

_TYPE_WORD = re.compile(r"[A-Za-z_\\][\w\\]*")


class _NoSample:
    def __repr__(self) -> str:
        return "NO_SAMPLE"


NO_SAMPLE: Any = _NoSample()


def normalize_type(name: Optional[str]) -> str:
    """Apply TYPE_ALIASES to every word of a type (unions, ?T and generics included)."""
    if not name or not name.strip():
        return UNKNOWN_TYPE
    return _TYPE_WORD.sub(
        lambda m: TYPE_ALIASES.get(m.group(0).lower(), m.group(0)), name.strip()
    )


def type_of(value: Any) -> str:
    """PHP type name of an evaluated value; UNKNOWN_TYPE if it is not a PHP value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, dict)):
        return "array"
    return UNKNOWN_TYPE


def resolve_type(
    site: Optional[str] = None, tag: Optional[str] = None, sample: Any = NO_SAMPLE
) -> str:
    """
    Resolve one type name; the first available source wins.

    Args:
        site: Type declared in the code (parameter or property).
        tag: Type from the matching doc tag (@param, @var).
        sample: Default value; NO_SAMPLE when there is none. A null default
            says nothing about the type and is skipped like a missing one.

    Returns:
        Normalized type name, or UNKNOWN_TYPE.
    """
    if site:
        return normalize_type(site)
    if tag:
        return normalize_type(tag)
    if sample is not NO_SAMPLE and sample is not None:
        return type_of(sample)
    return UNKNOWN_TYPE


def constant_type(site: Optional[str], value: Any) -> str:
    """Declared type of a constant, else the type of its value (null included)."""
    if site:
        return normalize_type(site)
    return type_of(value)


def resolve_return_type(site: Optional[str], tags: Iterable[DocTag]) -> str:
    """Declared return type, else the @return tag types joined with '|', else 'void'."""
    if site:
        return normalize_type(site)
    tagged = [normalize_type(tag.type) for tag in tags if tag.type]
    if tagged:
        return "|".join(tagged)
    return VOID_TYPE
