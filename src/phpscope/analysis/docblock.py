"""PHPDoc comment parser: description plus tags (@param, @var, @return, ...)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

from ..errors import DocParseError

# Tags that carry an optional type and an optional $variable before their text
VARIABLE_TAGS = frozenset({"param", "var", "property", "property-read", "property-write"})
# Tags that carry a type before their text
TYPED_TAGS = frozenset({"return", "throws"})

_TAG_NAME = re.compile(r"[A-Za-z_\\][\w\\:-]*")
_VARIABLE = re.compile(r"&?(?:\.\.\.)?\$(\w+)(?=\s|$)")
_GUTTER = re.compile(r"^\s*\*(?!/) ?")
_BRACKETS = {"<": ">", "(": ")", "{": "}", "[": "]"}
_CLOSERS = frozenset(_BRACKETS.values())


@dataclass(frozen=True)
class DocTag:
    """One @tag of a doc comment."""

    name: str
    type: Optional[str] = None
    variable: Optional[str] = None  # without '$'
    description: str = ""


@dataclass(frozen=True)
class DocBlock:
    summary: str = ""
    body: str = ""
    tags: Tuple[DocTag, ...] = ()

    @property
    def description(self) -> str:
        """Summary and body separated by a blank line."""
        if self.summary and self.body:
            return f"{self.summary}\n\n{self.body}"
        return self.summary or self.body

    def tags_named(self, name: str) -> List[DocTag]:
        return [tag for tag in self.tags if tag.name == name]


EMPTY_DOCBLOCK = DocBlock()


class DocParser(Protocol):
    """Anything that turns a raw doc comment into a DocBlock."""

    def parse(self, raw: str) -> DocBlock:
        ...


def _strip_gutter(line: str) -> str:
    match = _GUTTER.match(line)
    if match:
        return line[match.end():].rstrip()
    return line.strip()


def _trim_blank(lines: List[str]) -> List[str]:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def split_type(text: str) -> Tuple[str, str]:
    """
    Split a leading type expression off text.

    Brackets must balance; whitespace inside brackets, around '|' and after a
    trailing ':' (callable return types) does not end the type.

    Returns:
        (type, remaining text). Whitespace around '|' is removed from the type.

    Raises:
        DocParseError: If the brackets of the type do not balance.
    """
    stack: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in _BRACKETS:
            stack.append(_BRACKETS[ch])
        elif ch in _CLOSERS:
            if not stack or stack.pop() != ch:
                raise DocParseError(f"Unbalanced brackets in type {text.split()[0]!r}")
        elif ch.isspace() and not stack:
            k = i
            while k < n and text[k].isspace():
                k += 1
            prev = text[i - 1] if i > 0 else ""
            nxt = text[k] if k < n else ""
            if nxt and (prev in ("|", ":") or nxt == "|"):
                i = k
                continue
            break
        i += 1
    if stack:
        raise DocParseError(f"Unbalanced brackets in type {text[:i]!r}")
    type_text = re.sub(r"\s*\|\s*", "|", text[:i])
    return type_text, text[i:].strip()


class DocBlockParser:
    """Parse /** ... */ comments into a DocBlock."""

    def parse(self, raw: str) -> DocBlock:
        text = raw.strip()
        if len(text) < 5 or not text.startswith("/**") or not text.endswith("*/"):
            raise DocParseError("Doc comment must start with '/**' and end with '*/'")

        lines = [_strip_gutter(line) for line in text[3:-2].splitlines()]
        description_lines: List[str] = []
        tag_chunks: List[List[str]] = []
        for line in lines:
            if line.startswith("@"):
                tag_chunks.append([line])
            elif tag_chunks:
                tag_chunks[-1].append(line)
            else:
                description_lines.append(line)

        summary, body = self._split_description(_trim_blank(description_lines))
        tags = tuple(self._parse_tag("\n".join(_trim_blank(chunk))) for chunk in tag_chunks)
        return DocBlock(summary=summary, body=body, tags=tags)

    def _split_description(self, lines: List[str]) -> Tuple[str, str]:
        """Summary runs up to the first blank line or the first line ending with '.'."""
        for index, line in enumerate(lines):
            if not line.strip():
                return "\n".join(lines[:index]), "\n".join(_trim_blank(lines[index + 1:]))
            if line.rstrip().endswith("."):
                return (
                    "\n".join(lines[: index + 1]),
                    "\n".join(_trim_blank(lines[index + 1:])),
                )
        return "\n".join(lines), ""

    def _parse_tag(self, text: str) -> DocTag:
        match = _TAG_NAME.match(text, 1)
        if not match:
            raise DocParseError(f"Invalid tag name in {text.split()[0]!r}")
        name = match.group(0)
        rest = text[match.end():]
        if rest and not (rest[0].isspace() or rest[0] == "("):
            raise DocParseError(f"Invalid tag name in {text.split()[0]!r}")
        rest = rest.strip()

        if name in VARIABLE_TAGS:
            tag_type = None
            if rest and not _VARIABLE.match(rest):
                tag_type, rest = split_type(rest)
            variable = None
            var_match = _VARIABLE.match(rest)
            if var_match:
                variable = var_match.group(1)
                rest = rest[var_match.end():].strip()
            return DocTag(name, tag_type or None, variable, rest)

        if name in TYPED_TAGS:
            tag_type, rest = split_type(rest) if rest else ("", "")
            return DocTag(name, tag_type or None, None, rest)

        return DocTag(name, None, None, rest)
