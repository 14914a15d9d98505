"""
Encoder for the 8-byte word VM layout.

Layout
------
Statically sized values are written inline into the *head*:

- u8/u16/u32/u64/byte/bool: one big-endian word, value right-aligned
- unit:                     one zero word
- b256:                     32 raw bytes
- str[n]:                   n ascii bytes, zero-padded to the word boundary
- array/tuple/struct:       concatenation of the element encodings
- enum:                     discriminant word || payload || zero fill up to
                            the widest variant (fixed width for every variant)

A vector is dynamically sized, so its head is three words
(pointer, capacity, length) and its elements go to the *dynamic* region. The
pointer is unknown until the caller decides where the argument blob lives in
VM memory, so encoding is two-phase:

    buf = encode(tokens)          # UnresolvedBytes: chunks + placeholders
    raw = buf.resolve(base)       # every pointer patched to base + tail position

Nested vectors resolve depth-first; every pointer is an absolute address
relative to the start of the resolved buffer (plus `base`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..config import load_config
from ..errors import InvalidData, Unsupported
from .param_types import ParamType
from .tokens import Token, TokenKind
from .words import WORD_SIZE, pad_bytes, pad_word

__all__ = [
    "Inline",
    "Dynamic",
    "UnresolvedBytes",
    "ABIEncoder",
    "encode",
    "resolve",
]

log = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Unresolved byte chunks
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Inline:
    """Bytes written verbatim into the head."""

    data: bytes

    def head_size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Dynamic:
    """Data placed in the dynamic region; the head keeps a pointer word."""

    chunks: Tuple["Data", ...]

    def head_size(self) -> int:
        return WORD_SIZE


Data = Union[Inline, Dynamic]


def _head_size(chunks: Sequence[Data]) -> int:
    return sum(c.head_size() for c in chunks)


def _resolve_chunks(chunks: Sequence[Data], start_addr: int) -> bytes:
    inline = bytearray()
    dynamic = bytearray()
    next_dynamic_addr = start_addr + _head_size(chunks)
    for chunk in chunks:
        if isinstance(chunk, Inline):
            inline += chunk.data
            continue
        inline += pad_word(next_dynamic_addr)
        resolved = _resolve_chunks(chunk.chunks, next_dynamic_addr)
        next_dynamic_addr += len(resolved)
        dynamic += resolved
    return bytes(inline + dynamic)


@dataclass(frozen=True)
class UnresolvedBytes:
    """Encoder output whose vector pointers are not yet bound to an address."""

    chunks: Tuple[Data, ...] = ()

    def head_size(self) -> int:
        return _head_size(self.chunks)

    def resolve(self, start_addr: int = 0) -> bytes:
        """
        Lay out head then dynamic data, patching each pointer with
        `start_addr + position`. Resolving twice with the same address yields
        identical bytes.
        """
        if start_addr < 0:
            raise InvalidData("start address must be non-negative")
        return _resolve_chunks(self.chunks, start_addr)

    def __add__(self, other: "UnresolvedBytes") -> "UnresolvedBytes":
        return UnresolvedBytes(self.chunks + other.chunks)

    def __bool__(self) -> bool:
        return bool(self.chunks)


# ──────────────────────────────────────────────────────────────────────────────
# Encoder
# ──────────────────────────────────────────────────────────────────────────────

_UINT_BITS = {
    TokenKind.U8: 8,
    TokenKind.U16: 16,
    TokenKind.U32: 32,
    TokenKind.U64: 64,
    TokenKind.BYTE: 8,
}


class ABIEncoder:
    """Turns Tokens into UnresolvedBytes."""

    def __init__(self, *, max_depth: Optional[int] = None) -> None:
        self.max_depth = max_depth if max_depth is not None else load_config().max_depth
        self._dispatch: Dict[TokenKind, Callable[[Token, int], List[Data]]] = {
            TokenKind.UNIT: self._encode_unit,
            TokenKind.BOOL: self._encode_bool,
            TokenKind.U8: self._encode_uint,
            TokenKind.U16: self._encode_uint,
            TokenKind.U32: self._encode_uint,
            TokenKind.U64: self._encode_uint,
            TokenKind.BYTE: self._encode_uint,
            TokenKind.B256: self._encode_b256,
            TokenKind.STRING: self._encode_string,
            TokenKind.ARRAY: self._encode_sequence,
            TokenKind.STRUCT: self._encode_sequence,
            TokenKind.TUPLE: self._encode_sequence,
            TokenKind.VECTOR: self._encode_vector,
            TokenKind.ENUM: self._encode_enum,
        }

    def encode(self, tokens: Sequence[Token]) -> UnresolvedBytes:
        chunks = self._encode_tokens(tokens, 0)
        log.debug("encoded %d tokens into %d head bytes", len(tokens), _head_size(chunks))
        return UnresolvedBytes(tuple(chunks))

    # --- dispatch ------------------------------------------------------------

    def _encode_tokens(self, tokens: Sequence[Token], depth: int) -> List[Data]:
        out: List[Data] = []
        for token in tokens:
            out.extend(self._encode_token(token, depth))
        return out

    def _encode_token(self, token: Token, depth: int) -> List[Data]:
        if depth > self.max_depth:
            raise Unsupported(
                f"token nesting exceeds max depth {self.max_depth}",
                context={"depth": depth},
            )
        if not isinstance(token, Token):
            raise InvalidData(f"expected a Token, got {type(token).__name__}")
        return self._dispatch[token.kind](token, depth)

    # --- primitives ----------------------------------------------------------

    @staticmethod
    def _encode_unit(token: Token, depth: int) -> List[Data]:
        return [Inline(pad_word(0))]

    @staticmethod
    def _encode_bool(token: Token, depth: int) -> List[Data]:
        if not isinstance(token.value, bool):
            raise InvalidData(f"Bool token must hold a bool, got {token.value!r}")
        return [Inline(pad_word(int(token.value)))]

    @staticmethod
    def _encode_uint(token: Token, depth: int) -> List[Data]:
        v = token.value
        bits = _UINT_BITS[token.kind]
        if isinstance(v, bool) or not isinstance(v, int):
            raise InvalidData(f"{token.kind.value} token must hold an int, got {v!r}")
        if v < 0 or v >= (1 << bits):
            raise InvalidData(
                f"{token.kind.value} value {v} out of range [0, {(1 << bits) - 1}]",
                context={"kind": token.kind.value, "value": v},
            )
        return [Inline(pad_word(v))]

    @staticmethod
    def _encode_b256(token: Token, depth: int) -> List[Data]:
        v = token.value
        if not isinstance(v, (bytes, bytearray)) or len(v) != 32:
            raise InvalidData("B256 token must hold exactly 32 bytes")
        return [Inline(bytes(v))]

    @staticmethod
    def _encode_string(token: Token, depth: int) -> List[Data]:
        s = token.value.get_encodable_str()
        return [Inline(pad_bytes(s.encode("ascii")))]

    # --- composites ----------------------------------------------------------

    def _encode_sequence(self, token: Token, depth: int) -> List[Data]:
        return self._encode_tokens(token.value, depth + 1)

    def _encode_vector(self, token: Token, depth: int) -> List[Data]:
        elements = self._encode_tokens(token.value, depth + 1)
        n = len(token.value)
        # pointer, capacity, length
        return [Dynamic(tuple(elements)), Inline(pad_word(n)), Inline(pad_word(n))]

    def _encode_enum(self, token: Token, depth: int) -> List[Data]:
        discriminant, inner, variants = token.value
        variant_type: ParamType = variants.param_type_of(discriminant)
        payload = self._encode_token(inner, depth + 1)

        width = _head_size(payload)
        if width != variant_type.static_size():
            raise InvalidData(
                f"enum variant {discriminant} expects {variant_type} "
                f"({variant_type.static_size()} bytes), token encodes to {width} bytes",
                context={"discriminant": discriminant},
            )
        padding = variants.max_variant_width() - width
        out: List[Data] = [Inline(pad_word(discriminant))]
        out.extend(payload)
        if padding:
            out.append(Inline(b"\x00" * padding))
        return out


def encode(tokens: Sequence[Token]) -> UnresolvedBytes:
    """Encode an ordered sequence of tokens."""
    return ABIEncoder().encode(tokens)


def resolve(buffer: UnresolvedBytes, base_offset: int = 0) -> bytes:
    """Bind the dynamic-region pointers of `buffer` relative to `base_offset`."""
    return buffer.resolve(base_offset)
