"""
Inverse of vm_abi.codec.encoding, driven by the ParamType tree.

Decoding is a single cursor pass: each type consumes exactly its
`static_size()` head bytes, mirroring the encoder layout.

- primitives read the low-order bytes of their word
- bool accepts 0/1 only (unless `strict_bool` is off, then any non-zero is True)
- str[n] reads n ascii bytes and skips the word padding
- enum reads the discriminant, decodes the payload from the start of the
  fixed-width slot and skips the whole slot
- vector reads (pointer, capacity, length) and decodes `length` elements at
  `pointer - base_offset` in the same buffer

Short or malformed input raises InvalidData with the type and byte offset in
the error context.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..config import load_config
from ..errors import InvalidData, Unsupported
from .param_types import (
    ArrayType,
    B256Type,
    BoolType,
    ByteType,
    EnumType,
    ParamType,
    StringType,
    StructType,
    TupleType,
    U8Type,
    U16Type,
    U32Type,
    U64Type,
    UnitType,
    VectorType,
)
from .tokens import Token
from .words import WORD_SIZE, read_word

__all__ = ["ABIDecoder", "decode", "decode_single"]

log = logging.getLogger(__name__)

_UINT_CTORS = {
    U8Type: (Token.u8, 1),
    U16Type: (Token.u16, 2),
    U32Type: (Token.u32, 4),
    U64Type: (Token.u64, 8),
    ByteType: (Token.byte, 1),
}


class ABIDecoder:
    """
    Decode tokens from `data`.

    `base_offset` is the VM address the buffer was resolved against; vector
    pointers are translated back into buffer positions with it.
    """

    def __init__(
        self,
        data: bytes,
        *,
        base_offset: int = 0,
        max_depth: Optional[int] = None,
        strict_bool: Optional[bool] = None,
    ) -> None:
        cfg = load_config()
        if len(data) > cfg.max_payload_bytes:
            raise InvalidData(
                f"payload of {len(data)} bytes exceeds limit {cfg.max_payload_bytes}",
                context={"len": len(data)},
            )
        self.data = bytes(data)
        self.base_offset = base_offset
        self.max_depth = max_depth if max_depth is not None else cfg.max_depth
        self.strict_bool = cfg.strict_bool if strict_bool is None else strict_bool
        self.max_elements = cfg.max_payload_bytes
        self._dispatch: Dict[type, Callable[[ParamType, int, int], Tuple[Token, int]]] = {
            UnitType: self._decode_unit,
            BoolType: self._decode_bool,
            U8Type: self._decode_uint,
            U16Type: self._decode_uint,
            U32Type: self._decode_uint,
            U64Type: self._decode_uint,
            ByteType: self._decode_uint,
            B256Type: self._decode_b256,
            StringType: self._decode_string,
            ArrayType: self._decode_array,
            VectorType: self._decode_vector,
            TupleType: self._decode_tuple,
            StructType: self._decode_struct,
            EnumType: self._decode_enum,
        }

    def decode(self, param_types: Sequence[ParamType], offset: int = 0) -> List[Token]:
        tokens, end = self._decode_many(param_types, offset, 0)
        log.debug("decoded %d tokens from %d bytes", len(tokens), end - offset)
        return tokens

    # --- cursor helpers ------------------------------------------------------

    def _take(self, param_type: ParamType, offset: int, n: int) -> bytes:
        end = offset + n
        if offset < 0 or end > len(self.data):
            raise InvalidData(
                f"not enough bytes to decode {param_type}: need {n} at offset {offset}, "
                f"buffer has {len(self.data)}",
                context={"type": str(param_type), "offset": offset, "len": len(self.data)},
            )
        return self.data[offset:end]

    def _check_count(self, p: ParamType, offset: int, count: int) -> None:
        # zero-width elements consume no bytes, so the buffer cannot bound them
        if p.element.static_size() == 0 and count > self.max_elements:
            raise InvalidData(
                f"{p} holds {count} zero-width elements, limit is {self.max_elements}",
                context={"type": str(p), "offset": offset, "length": count},
            )

    def _decode_repeated(
        self, element: ParamType, count: int, offset: int, depth: int
    ) -> Tuple[List[Token], int]:
        out: List[Token] = []
        for _ in range(count):
            token, offset = self._decode_one(element, offset, depth)
            out.append(token)
        return out, offset

    def _decode_many(
        self, param_types: Sequence[ParamType], offset: int, depth: int
    ) -> Tuple[List[Token], int]:
        out: List[Token] = []
        for p in param_types:
            token, offset = self._decode_one(p, offset, depth)
            out.append(token)
        return out, offset

    def _decode_one(self, param_type: ParamType, offset: int, depth: int) -> Tuple[Token, int]:
        if depth > self.max_depth:
            raise Unsupported(
                f"type nesting exceeds max depth {self.max_depth}",
                context={"type": str(param_type), "depth": depth},
            )
        handler = self._dispatch.get(type(param_type))
        if handler is None:
            raise InvalidData(f"cannot decode {param_type!r}")
        return handler(param_type, offset, depth)

    # --- primitives ----------------------------------------------------------

    def _decode_unit(self, p: ParamType, offset: int, depth: int) -> Tuple[Token, int]:
        self._take(p, offset, WORD_SIZE)
        return Token.unit(), offset + WORD_SIZE

    def _decode_bool(self, p: ParamType, offset: int, depth: int) -> Tuple[Token, int]:
        word = self._take(p, offset, WORD_SIZE)
        b = word[-1]
        if self.strict_bool and (b > 1 or any(word[:-1])):
            raise InvalidData(
                f"bool word must be 0 or 1, got 0x{word.hex()}",
                context={"type": "bool", "offset": offset},
            )
        return Token.bool(b != 0), offset + WORD_SIZE

    def _decode_uint(self, p: ParamType, offset: int, depth: int) -> Tuple[Token, int]:
        ctor, width = _UINT_CTORS[type(p)]
        word = self._take(p, offset, WORD_SIZE)
        return ctor(int.from_bytes(word[WORD_SIZE - width :], "big")), offset + WORD_SIZE

    def _decode_b256(self, p: ParamType, offset: int, depth: int) -> Tuple[Token, int]:
        return Token.b256(self._take(p, offset, 32)), offset + 32

    def _decode_string(self, p: StringType, offset: int, depth: int) -> Tuple[Token, int]:
        raw = self._take(p, offset, p.static_size())[: p.length]
        try:
            text = raw.decode("ascii")
        except UnicodeDecodeError:
            raise InvalidData(
                f"{p} data is not ascii",
                context={"type": str(p), "offset": offset},
            ) from None
        return Token.string(text, p.length), offset + p.static_size()

    # --- composites ----------------------------------------------------------

    def _decode_array(self, p: ArrayType, offset: int, depth: int) -> Tuple[Token, int]:
        self._take(p, offset, p.static_size())
        self._check_count(p, offset, p.length)
        tokens, offset = self._decode_repeated(p.element, p.length, offset, depth + 1)
        return Token.array(tokens), offset

    def _decode_tuple(self, p: TupleType, offset: int, depth: int) -> Tuple[Token, int]:
        tokens, offset = self._decode_many(p.elements, offset, depth + 1)
        return Token.tuple(tokens), offset

    def _decode_struct(self, p: StructType, offset: int, depth: int) -> Tuple[Token, int]:
        tokens, offset = self._decode_many(p.fields, offset, depth + 1)
        return Token.struct(tokens), offset

    def _decode_vector(self, p: VectorType, offset: int, depth: int) -> Tuple[Token, int]:
        head = self._take(p, offset, 3 * WORD_SIZE)
        ptr, _cap, length = (read_word(head, i * WORD_SIZE) for i in range(3))
        position = ptr - self.base_offset
        self._check_count(p, offset, length)
        needed = length * p.element.static_size()
        if position < 0 or position + needed > len(self.data):
            raise InvalidData(
                f"vector data at address {ptr} ({length} x {p.element}) lies outside the buffer",
                context={"type": str(p), "offset": offset, "pointer": ptr, "length": length},
            )
        tokens, _ = self._decode_repeated(p.element, length, position, depth + 1)
        return Token.vector(tokens), offset + 3 * WORD_SIZE

    def _decode_enum(self, p: EnumType, offset: int, depth: int) -> Tuple[Token, int]:
        width = p.static_size()
        self._take(p, offset, width)
        discriminant = read_word(self.data, offset)
        try:
            variant_type = p.variants.param_type_of(discriminant)
        except InvalidData as e:
            e.context.update({"type": str(p), "offset": offset})
            raise
        inner, _ = self._decode_one(variant_type, offset + WORD_SIZE, depth + 1)
        return Token.enum(discriminant, inner, p.variants), offset + width


def decode(
    param_types: Sequence[ParamType], data: bytes, *, base_offset: int = 0
) -> List[Token]:
    """Decode one token per entry of `param_types` from `data`."""
    return ABIDecoder(data, base_offset=base_offset).decode(param_types)


def decode_single(param_type: ParamType, data: bytes, *, base_offset: int = 0) -> Token:
    return decode([param_type], data, base_offset=base_offset)[0]
