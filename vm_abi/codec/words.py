"""
Word-level helpers for the 8-byte big-endian VM layout.

Every static value occupies a whole number of words. Integers are
right-aligned in their word (high-order bytes zero-filled); byte strings are
left-aligned and zero-padded up to the next word boundary.
"""

from __future__ import annotations

from ..errors import InvalidData

WORD_SIZE = 8

_MAX_WORD = (1 << (8 * WORD_SIZE)) - 1


def padded_len(n: int) -> int:
    """Round a byte length up to the next multiple of WORD_SIZE."""
    return (n + WORD_SIZE - 1) // WORD_SIZE * WORD_SIZE


def pad_word(value: int) -> bytes:
    """Encode a non-negative integer as one right-aligned big-endian word."""
    if value < 0 or value > _MAX_WORD:
        raise InvalidData(
            f"value {value} does not fit in a {WORD_SIZE}-byte word", context={"value": value}
        )
    return value.to_bytes(WORD_SIZE, "big")


def pad_bytes(data: bytes) -> bytes:
    """Left-align data and zero-fill up to the word boundary."""
    return bytes(data) + b"\x00" * (padded_len(len(data)) - len(data))


def read_word(data: bytes, offset: int = 0) -> int:
    """Read the word at `offset` as an unsigned big-endian integer."""
    return int.from_bytes(data[offset : offset + WORD_SIZE], "big")


__all__ = ["WORD_SIZE", "padded_len", "pad_word", "pad_bytes", "read_word"]
