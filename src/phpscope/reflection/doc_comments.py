"""Doc comment resolution with a per-symbol cache."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..analysis.docblock import EMPTY_DOCBLOCK, DocBlock, DocBlockParser, DocParser, DocTag
from ..errors import DocParseError

logger = logging.getLogger(__name__)


def class_identity(name: str) -> str:
    return name


def constant_identity(name: str, owner: Optional[str] = None) -> str:
    """'Owner::NAME' for class constants, '::NAME' for global ones."""
    return f"{owner or ''}::{name}"


def function_identity(name: str) -> str:
    return f"{name}()"


def property_identity(owner: str, name: str) -> str:
    return f"{owner}::${name}"


def method_identity(owner: str, name: str) -> str:
    return f"{owner}::{name}()"


class DocCommentResolver:
    """
    Parse doc comments at most once per symbol identity.

    A malformed comment is logged and treated as an empty one, so only the
    symbol it belongs to loses its documentation.
    """

    def __init__(self, parser: Optional[DocParser] = None) -> None:
        self._parser = parser if parser is not None else DocBlockParser()
        self._cache: Dict[str, DocBlock] = {}

    def describe(self, identity: str, raw: Optional[str]) -> DocBlock:
        cached = self._cache.get(identity)
        if cached is not None:
            return cached
        block = EMPTY_DOCBLOCK
        if raw:
            try:
                block = self._parser.parse(raw)
            except DocParseError as e:
                logger.warning("Ignoring malformed doc comment of %s: %s", identity, e)
        self._cache[identity] = block
        return block

    def tags_named(self, identity: str, raw: Optional[str], name: str) -> List[DocTag]:
        """Tags called name (without '@'), in comment order; [] when there are none."""
        return self.describe(identity, raw).tags_named(name)
