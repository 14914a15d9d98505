"""
Token — tagged runtime value mirroring ParamType.

Tokens are the encoder's input and the decoder's output. They are plain
immutable data; range checks happen when a token is encoded, and a
StringToken is only validated when it is consumed (encoded or converted to
`str`), not when it is built.

    Token.u32(42)
    Token.struct([Token.array([Token.u8(10), Token.u8(2)]), Token.string("fuel", 4)])
    Token.enum(0, Token.u32(42), variants)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterable, NamedTuple, Tuple

from ..errors import InvalidData
from .param_types import EnumVariants

__all__ = ["TokenKind", "Token", "StringToken", "EnumSelector"]


class TokenKind(enum.Enum):
    UNIT = "Unit"
    BOOL = "Bool"
    U8 = "U8"
    U16 = "U16"
    U32 = "U32"
    U64 = "U64"
    BYTE = "Byte"
    B256 = "B256"
    ARRAY = "Array"
    VECTOR = "Vector"
    STRING = "String"
    STRUCT = "Struct"
    ENUM = "Enum"
    TUPLE = "Tuple"


@dataclass(frozen=True)
class StringToken:
    """Raw string data plus the length its `str[n]` type requires."""

    data: str
    expected_len: int

    def validate(self) -> None:
        if not self.data.isascii():
            raise InvalidData("String data can only have ascii values")
        if len(self.data) != self.expected_len:
            raise InvalidData(
                f"String data has len {len(self.data)}, but the expected len is {self.expected_len}"
            )

    def get_encodable_str(self) -> str:
        self.validate()
        return self.data

    def to_str(self) -> str:
        return self.get_encodable_str()


class EnumSelector(NamedTuple):
    discriminant: int
    token: "Token"
    variants: EnumVariants


_COMPOSITES = (TokenKind.ARRAY, TokenKind.VECTOR, TokenKind.STRUCT, TokenKind.TUPLE)


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: Any = None

    # --- constructors --------------------------------------------------------

    @classmethod
    def unit(cls) -> "Token":
        return cls(TokenKind.UNIT)

    @classmethod
    def bool(cls, value: bool) -> "Token":
        return cls(TokenKind.BOOL, value)

    @classmethod
    def u8(cls, value: int) -> "Token":
        return cls(TokenKind.U8, value)

    @classmethod
    def u16(cls, value: int) -> "Token":
        return cls(TokenKind.U16, value)

    @classmethod
    def u32(cls, value: int) -> "Token":
        return cls(TokenKind.U32, value)

    @classmethod
    def u64(cls, value: int) -> "Token":
        return cls(TokenKind.U64, value)

    @classmethod
    def byte(cls, value: int) -> "Token":
        return cls(TokenKind.BYTE, value)

    @classmethod
    def b256(cls, value: bytes) -> "Token":
        return cls(TokenKind.B256, bytes(value))

    @classmethod
    def string(cls, data: str, expected_len: int) -> "Token":
        return cls(TokenKind.STRING, StringToken(data, expected_len))

    @classmethod
    def array(cls, tokens: Iterable["Token"]) -> "Token":
        return cls(TokenKind.ARRAY, tuple(tokens))

    @classmethod
    def vector(cls, tokens: Iterable["Token"]) -> "Token":
        return cls(TokenKind.VECTOR, tuple(tokens))

    @classmethod
    def tuple(cls, tokens: Iterable["Token"]) -> "Token":
        return cls(TokenKind.TUPLE, tuple(tokens))

    @classmethod
    def struct(cls, tokens: Iterable["Token"]) -> "Token":
        return cls(TokenKind.STRUCT, tuple(tokens))

    @classmethod
    def enum(cls, discriminant: int, token: "Token", variants: EnumVariants) -> "Token":
        return cls(TokenKind.ENUM, EnumSelector(discriminant, token, variants))

    # --- accessors -----------------------------------------------------------

    @property
    def children(self) -> Tuple["Token", ...]:
        """Element tokens of an Array/Vector/Struct/Tuple token."""
        if self.kind not in _COMPOSITES:
            raise InvalidData(f"{self.kind.value} token has no elements")
        return self.value

    @property
    def selector(self) -> EnumSelector:
        if self.kind is not TokenKind.ENUM:
            raise InvalidData(f"{self.kind.value} token is not an enum")
        return self.value

    def __str__(self) -> str:
        if self.kind is TokenKind.UNIT:
            return "Unit"
        if self.kind in _COMPOSITES:
            return f"{self.kind.value}([{', '.join(str(t) for t in self.value)}])"
        if self.kind is TokenKind.ENUM:
            sel = self.value
            return f"Enum({sel.discriminant}, {sel.token})"
        if self.kind is TokenKind.STRING:
            return f"String({self.value.data!r})"
        if self.kind is TokenKind.B256:
            return f"B256(0x{self.value.hex()})"
        return f"{self.kind.value}({self.value})"
