"""
Native Python values <-> Tokens.

`tokenize(value, param_type)` accepts the shapes a caller naturally writes:

    ()/None               Unit
    bool                  Bool
    int                   U8/U16/U32/U64/Byte (range checked by the encoder)
    bytes | "0x…" (32B)   B256
    str                   str[n] (validated lazily, when encoded)
    list/tuple            Array, Vector, Tuple, Struct (positional)
    dict                  Struct by field name
    {"Variant": payload}  Enum by variant name
    (discriminant, value) Enum by index
    "Variant"             Enum variant whose payload is Unit

A Token passed in is returned unchanged. `detokenize(token, param_type)`
is the inverse; with a ParamType, structs come back as dicts keyed by field
name and enums as `{variant_name: value}`.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from .codec.param_types import (
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
from .codec.tokens import Token, TokenKind
from .errors import InvalidData

__all__ = ["tokenize", "tokenize_all", "detokenize"]

_UINT_CTORS = {
    U8Type: Token.u8,
    U16Type: Token.u16,
    U32Type: Token.u32,
    U64Type: Token.u64,
    ByteType: Token.byte,
}


def _hex_to_bytes(s: str) -> bytes:
    h = s[2:] if s[:2] in ("0x", "0X") else s
    try:
        return bytes.fromhex(h)
    except ValueError:
        raise InvalidData(f"invalid hex string {s!r}") from None


def _sequence(value: Any, p: ParamType, length: Optional[int] = None) -> Sequence[Any]:
    if isinstance(value, (str, bytes, bytearray)) or not isinstance(value, Sequence):
        raise InvalidData(f"{p} expects a sequence, got {type(value).__name__}")
    if length is not None and len(value) != length:
        raise InvalidData(f"{p} expects {length} elements, got {len(value)}")
    return value


def _tokenize_struct(value: Any, p: StructType) -> Token:
    if isinstance(value, Mapping):
        if not p.field_names:
            raise InvalidData(f"{p} has no field names; pass its fields positionally")
        missing = [n for n in p.field_names if n not in value]
        extra = [k for k in value if k not in p.field_names]
        if missing or extra:
            raise InvalidData(
                f"{p} fields mismatch: missing={missing} unexpected={extra}",
                context={"type": str(p)},
            )
        items: Sequence[Any] = [value[n] for n in p.field_names]
    else:
        items = _sequence(value, p, len(p.fields))
    return Token.struct(tokenize(v, t) for v, t in zip(items, p.fields))


def _tokenize_enum(value: Any, p: EnumType) -> Token:
    variants = p.variants
    if isinstance(value, str):
        discriminant, payload = variants.discriminant_of(value), None
    elif isinstance(value, Mapping):
        if len(value) != 1:
            raise InvalidData(f"{p} expects exactly one variant, got {sorted(value)}")
        ((name, payload),) = value.items()
        discriminant = variants.discriminant_of(name)
    else:
        seq = _sequence(value, p, 2)
        head, payload = seq[0], seq[1]
        discriminant = variants.discriminant_of(head) if isinstance(head, str) else int(head)
    variant_type = variants.param_type_of(discriminant)
    return Token.enum(discriminant, tokenize(payload, variant_type), variants)


def tokenize(value: Any, param_type: ParamType) -> Token:
    """Build the Token for `value` shaped by `param_type`."""
    if isinstance(value, Token):
        return value
    p = param_type
    if isinstance(p, UnitType):
        if value not in (None, ()):
            raise InvalidData(f"() expects None, got {value!r}")
        return Token.unit()
    if isinstance(p, BoolType):
        if not isinstance(value, bool):
            raise InvalidData(f"bool expects True/False, got {value!r}")
        return Token.bool(value)
    ctor = _UINT_CTORS.get(type(p))
    if ctor is not None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidData(f"{p} expects an int, got {value!r}")
        return ctor(value)
    if isinstance(p, B256Type):
        raw = _hex_to_bytes(value) if isinstance(value, str) else value
        if not isinstance(raw, (bytes, bytearray)) or len(raw) != 32:
            raise InvalidData("b256 expects 32 bytes")
        return Token.b256(bytes(raw))
    if isinstance(p, StringType):
        if not isinstance(value, str):
            raise InvalidData(f"{p} expects a str, got {type(value).__name__}")
        return Token.string(value, p.length)
    if isinstance(p, ArrayType):
        items = _sequence(value, p, p.length)
        return Token.array(tokenize(v, p.element) for v in items)
    if isinstance(p, VectorType):
        return Token.vector(tokenize(v, p.element) for v in _sequence(value, p))
    if isinstance(p, TupleType):
        items = _sequence(value, p, len(p.elements))
        return Token.tuple(tokenize(v, t) for v, t in zip(items, p.elements))
    if isinstance(p, StructType):
        return _tokenize_struct(value, p)
    if isinstance(p, EnumType):
        return _tokenize_enum(value, p)
    raise InvalidData(f"cannot tokenize a value for {p!r}")


def tokenize_all(values: Sequence[Any], param_types: Sequence[ParamType]) -> List[Token]:
    if len(values) != len(param_types):
        raise InvalidData(f"expected {len(param_types)} arguments, got {len(values)}")
    return [tokenize(v, p) for v, p in zip(values, param_types)]


def detokenize(token: Token, param_type: Optional[ParamType] = None) -> Any:
    """Native value of `token`; `param_type` adds struct field and enum variant names."""
    kind = token.kind
    if kind is TokenKind.UNIT:
        return None
    if kind is TokenKind.STRING:
        return token.value.to_str()
    if kind is TokenKind.ENUM:
        sel = token.selector
        inner_type = sel.variants.param_type_of(sel.discriminant)
        inner = detokenize(sel.token, inner_type)
        name = sel.variants.name_of(sel.discriminant)
        if name is None:
            return (sel.discriminant, inner)
        return {name: inner}
    if kind is TokenKind.STRUCT:
        if isinstance(param_type, StructType):
            values = [detokenize(t, f) for t, f in zip(token.value, param_type.fields)]
            if param_type.field_names:
                return dict(zip(param_type.field_names, values))
            return values
        return [detokenize(t) for t in token.value]
    if kind is TokenKind.TUPLE:
        types: Sequence[Optional[ParamType]] = (
            param_type.elements if isinstance(param_type, TupleType) else [None] * len(token.value)
        )
        return tuple(detokenize(t, e) for t, e in zip(token.value, types))
    if kind in (TokenKind.ARRAY, TokenKind.VECTOR):
        element = param_type.element if isinstance(param_type, (ArrayType, VectorType)) else None
        return [detokenize(t, element) for t in token.value]
    return token.value