"""
Type-string grammar.

Schema type strings are tokenised by a small lexer and parsed by recursive
descent into a syntax node. The resolver then dispatches on the node class,
so there is exactly one way to read every string and no overlap between
shapes (`str[4]` can never be mistaken for an array, `(u8, bool)` for a
call, ...).

    type    := "(" ")"                            Unit
             | "(" type ("," type)* ")"           TupleSyntax
             | "[" type ";" NUMBER "]"            ArraySyntax
             | "str" "[" NUMBER "]"               StrSyntax
             | ("struct" | "enum") PATH           CustomSyntax
             | "generic" IDENT                    GenericSyntax
             | "raw" "untyped" "ptr"              KeywordSyntax("raw untyped ptr")
             | IDENT                              KeywordSyntax

    PATH    := IDENT ("::" IDENT)*

Custom type names are identifier paths; names containing brackets,
parentheses or other punctuation are rejected.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..errors import InvalidType

__all__ = [
    "Syntax",
    "KeywordSyntax",
    "StrSyntax",
    "ArraySyntax",
    "TupleSyntax",
    "CustomSyntax",
    "GenericSyntax",
    "tokenize",
    "parse_type_field",
]


# ──────────────────────────────────────────────────────────────────────────────
# Syntax nodes
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Syntax:
    pass


@dataclass(frozen=True)
class KeywordSyntax(Syntax):
    """A bare keyword: a primitive (`u64`, `()`) or an unsupported one (`u128`)."""

    word: str


@dataclass(frozen=True)
class StrSyntax(Syntax):
    length: int


@dataclass(frozen=True)
class ArraySyntax(Syntax):
    element: Syntax
    length: int


@dataclass(frozen=True)
class TupleSyntax(Syntax):
    elements: Tuple[Syntax, ...]


@dataclass(frozen=True)
class CustomSyntax(Syntax):
    kind: str  # "struct" | "enum"
    name: str


@dataclass(frozen=True)
class GenericSyntax(Syntax):
    name: str


# ──────────────────────────────────────────────────────────────────────────────
# Lexer
# ──────────────────────────────────────────────────────────────────────────────

_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"
_LEXEME_RE = re.compile(
    rf"(?P<num>\d+)|(?P<path>{_IDENT}(?:::{_IDENT})*)|(?P<punct>[\[\]();,])|(?P<ws>\s+)"
)


@dataclass(frozen=True)
class Lexeme:
    kind: str  # "num" | "path" | "punct"
    text: str
    pos: int


def tokenize(type_field: str) -> List[Lexeme]:
    out: List[Lexeme] = []
    pos = 0
    while pos < len(type_field):
        m = _LEXEME_RE.match(type_field, pos)
        if m is None:
            raise InvalidType(
                f"Invalid type `{type_field}`: unexpected character "
                f"{type_field[pos]!r} at position {pos}"
            )
        if m.lastgroup != "ws":
            out.append(Lexeme(m.lastgroup or "", m.group(), pos))
        pos = m.end()
    return out


# ──────────────────────────────────────────────────────────────────────────────
# Parser
# ──────────────────────────────────────────────────────────────────────────────


class _Parser:
    def __init__(self, type_field: str) -> None:
        self.src = type_field
        self.lexemes = tokenize(type_field)
        self.i = 0

    def fail(self, reason: str) -> InvalidType:
        return InvalidType(f"Invalid type `{self.src}`: {reason}")

    def peek(self) -> Optional[Lexeme]:
        return self.lexemes[self.i] if self.i < len(self.lexemes) else None

    def next(self) -> Lexeme:
        lx = self.peek()
        if lx is None:
            raise self.fail("unexpected end of input")
        self.i += 1
        return lx

    def expect(self, text: str) -> None:
        lx = self.next()
        if lx.text != text:
            raise self.fail(f"expected `{text}` at position {lx.pos}, found `{lx.text}`")

    def expect_kind(self, kind: str) -> Lexeme:
        lx = self.next()
        if lx.kind != kind:
            raise self.fail(f"expected {kind} at position {lx.pos}, found `{lx.text}`")
        return lx

    def accept(self, text: str) -> bool:
        lx = self.peek()
        if lx is not None and lx.text == text:
            self.i += 1
            return True
        return False

    def parse(self) -> Syntax:
        node = self.parse_type()
        lx = self.peek()
        if lx is not None:
            raise self.fail(f"trailing input `{lx.text}` at position {lx.pos}")
        return node

    def parse_type(self) -> Syntax:
        lx = self.next()
        if lx.text == "(":
            if self.accept(")"):
                return KeywordSyntax("()")
            elements = [self.parse_type()]
            while self.accept(","):
                elements.append(self.parse_type())
            self.expect(")")
            return TupleSyntax(tuple(elements))
        if lx.text == "[":
            element = self.parse_type()
            self.expect(";")
            n = int(self.expect_kind("num").text)
            self.expect("]")
            return ArraySyntax(element, n)
        if lx.kind != "path":
            raise self.fail(f"unexpected `{lx.text}` at position {lx.pos}")

        word = lx.text
        if word == "str" and self.accept("["):
            n = int(self.expect_kind("num").text)
            self.expect("]")
            return StrSyntax(n)
        if word in ("struct", "enum"):
            return CustomSyntax(word, self.expect_kind("path").text)
        if word == "generic":
            return GenericSyntax(self.expect_kind("path").text)
        if word == "raw":
            self.expect("untyped")
            self.expect("ptr")
            return KeywordSyntax("raw untyped ptr")
        return KeywordSyntax(word)


def parse_type_field(type_field: str) -> Syntax:
    """Parse a schema type string; InvalidType on malformed syntax."""
    if not isinstance(type_field, str) or not type_field.strip():
        raise InvalidType(f"Invalid type `{type_field}`: empty type string")
    return _Parser(type_field).parse()
