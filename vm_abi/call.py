"""
Contract call data.

    call data   = selector (8)
                  || [args address word]   only when an argument is passed by reference
                  || encoded args (head || resolved dynamic region)

    script data = contract id (32) || call data

Single-word primitives are passed in registers by value; any other argument
(b256, strings, arrays, tuples, structs, enums, vectors) makes the VM read the
arguments through a pointer, so the blob carries the address the argument
region starts at.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .codec.encoding import ABIEncoder, UnresolvedBytes
from .codec.selector import SELECTOR_LEN
from .codec.tokens import Token, TokenKind
from .codec.words import WORD_SIZE, pad_word
from .errors import InvalidData

__all__ = ["CONTRACT_ID_LEN", "CallData", "encode_call", "needs_extra_offset_word"]

log = logging.getLogger(__name__)

CONTRACT_ID_LEN = 32

_BY_VALUE = frozenset(
    {TokenKind.UNIT, TokenKind.BOOL, TokenKind.U8, TokenKind.U16, TokenKind.U32, TokenKind.U64, TokenKind.BYTE}
)


def needs_extra_offset_word(tokens: Sequence[Token]) -> bool:
    return any(t.kind not in _BY_VALUE for t in tokens)


@dataclass(frozen=True)
class CallData:
    selector: bytes
    encoded_args: UnresolvedBytes
    needs_extra_offset_word: bool

    def args_address(self, base_offset: int = 0) -> int:
        """VM address of the first argument byte when the call data sits at `base_offset`."""
        extra = WORD_SIZE if self.needs_extra_offset_word else 0
        return base_offset + SELECTOR_LEN + extra

    def to_bytes(self, base_offset: int = 0) -> bytes:
        addr = self.args_address(base_offset)
        out = bytearray(self.selector)
        if self.needs_extra_offset_word:
            out += pad_word(addr)
        out += self.encoded_args.resolve(addr)
        return bytes(out)

    def script_data(self, contract_id: bytes, script_data_offset: int) -> bytes:
        """Contract id followed by the call data, laid out at `script_data_offset`."""
        if len(contract_id) != CONTRACT_ID_LEN:
            raise InvalidData(f"contract id must be {CONTRACT_ID_LEN} bytes, got {len(contract_id)}")
        return bytes(contract_id) + self.to_bytes(script_data_offset + CONTRACT_ID_LEN)


def encode_call(selector: bytes, tokens: Sequence[Token]) -> CallData:
    if len(selector) != SELECTOR_LEN:
        raise InvalidData(f"selector must be {SELECTOR_LEN} bytes, got {len(selector)}")
    encoded = ABIEncoder().encode(tokens)
    extra = needs_extra_offset_word(tokens)
    log.debug("call 0x%s: %d args, offset word=%s", selector.hex(), len(tokens), extra)
    return CallData(bytes(selector), encoded, extra)
