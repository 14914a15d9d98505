"""
Function selectors.

    signature = name "(" arg ["," arg]* ")"
    selector  = 0x00000000 || sha256(signature)[:4]

Argument rendering:

    primitives        u8, u16, u32, u64, bool, byte, b256, ()
    str[n]            str[n]
    [T; n]            a[T;n]
    (T1, T2)          (T1,T2)
    struct            s(F1,F2)      or  s<G1,G2>(F1,F2) when generic
    enum              e(V1,V2)      or  e<G1>(V1,V2)    when generic
    Vec<T>            s<T>(s<T>(rawptr,u64),u64)

Generic parameters are rendered with their concrete substituted types.
"""

from __future__ import annotations

import hashlib
from typing import Sequence

from ..errors import Unsupported
from .param_types import (
    ArrayType,
    EnumType,
    ParamType,
    StringType,
    StructType,
    TupleType,
    VectorType,
    _Primitive,
)
from .words import WORD_SIZE

__all__ = ["SELECTOR_LEN", "resolve_arg", "fn_signature", "compute_selector"]

SELECTOR_LEN = WORD_SIZE


def _generics(generics: Sequence[ParamType]) -> str:
    if not generics:
        return ""
    return "<" + ",".join(resolve_arg(g) for g in generics) + ">"


def _args(types: Sequence[ParamType]) -> str:
    return ",".join(resolve_arg(t) for t in types)


def resolve_arg(param_type: ParamType) -> str:
    """Canonical signature rendering of one parameter type."""
    if isinstance(param_type, _Primitive):
        return param_type.keyword
    if isinstance(param_type, StringType):
        return f"str[{param_type.length}]"
    if isinstance(param_type, ArrayType):
        return f"a[{resolve_arg(param_type.element)};{param_type.length}]"
    if isinstance(param_type, VectorType):
        inner = resolve_arg(param_type.element)
        return f"s<{inner}>(s<{inner}>(rawptr,u64),u64)"
    if isinstance(param_type, TupleType):
        return f"({_args(param_type.elements)})"
    if isinstance(param_type, StructType):
        return f"s{_generics(param_type.generics)}({_args(param_type.fields)})"
    if isinstance(param_type, EnumType):
        return f"e{_generics(param_type.generics)}({_args(param_type.variants.types)})"
    raise Unsupported(f"no signature rendering for {param_type!r}")


def fn_signature(name: str, param_types: Sequence[ParamType]) -> str:
    return f"{name}({_args(param_types)})"


def compute_selector(name: str, param_types: Sequence[ParamType]) -> bytes:
    """Return the 8-byte selector of function `name` taking `param_types`."""
    digest = hashlib.sha256(fn_signature(name, param_types).encode("utf-8")).digest()
    return b"\x00" * (SELECTOR_LEN - 4) + digest[:4]
