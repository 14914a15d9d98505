"""
ParamType — the resolved, schema-independent shape of a VM value.

The variant set is closed:

    Unit, Bool, U8, U16, U32, U64, Byte, B256,
    String(n), Array(T, n), Vector(T), Tuple([T]), Struct([T]), Enum(EnumVariants)

All types are frozen dataclasses: hashable, compared by value, safe to share
between threads and to use as memoisation keys. Struct and Enum carry their
declared name and member names for display and native conversion; those are
excluded from equality so two instantiations of the same shape compare equal.

`static_size()` is the number of head bytes a value of the type occupies in
the encoded layout (always a whole number of words).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, Iterator, Optional, Sequence, Tuple

from ..errors import InvalidData, InvalidType
from .words import WORD_SIZE, padded_len

__all__ = [
    "ParamType",
    "UnitType",
    "BoolType",
    "U8Type",
    "U16Type",
    "U32Type",
    "U64Type",
    "ByteType",
    "B256Type",
    "StringType",
    "ArrayType",
    "VectorType",
    "TupleType",
    "StructType",
    "EnumType",
    "EnumVariants",
    "UNIT",
    "BOOL",
    "U8",
    "U16",
    "U32",
    "U64",
    "BYTE",
    "B256",
    "PRIMITIVES",
    "static_size",
    "total_static_size",
    "VECTOR_HEAD_SIZE",
]

# Head words of a vector: pointer, capacity, length.
VECTOR_HEAD_SIZE = 3 * WORD_SIZE


@dataclass(frozen=True)
class ParamType:
    """Base class of every resolved type."""

    def static_size(self) -> int:
        raise NotImplementedError

    def uses_vectors(self) -> bool:
        return False

    @property
    def type_name(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.type_name


# ──────────────────────────────────────────────────────────────────────────────
# Primitives
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class _Primitive(ParamType):
    keyword: ClassVar[str] = ""

    def static_size(self) -> int:
        return WORD_SIZE

    @property
    def type_name(self) -> str:
        return self.keyword


@dataclass(frozen=True)
class UnitType(_Primitive):
    keyword: ClassVar[str] = "()"


@dataclass(frozen=True)
class BoolType(_Primitive):
    keyword: ClassVar[str] = "bool"


@dataclass(frozen=True)
class _UIntType(_Primitive):
    bits: ClassVar[int] = 64

    @property
    def max_value(self) -> int:
        return (1 << self.bits) - 1


@dataclass(frozen=True)
class U8Type(_UIntType):
    keyword: ClassVar[str] = "u8"
    bits: ClassVar[int] = 8


@dataclass(frozen=True)
class U16Type(_UIntType):
    keyword: ClassVar[str] = "u16"
    bits: ClassVar[int] = 16


@dataclass(frozen=True)
class U32Type(_UIntType):
    keyword: ClassVar[str] = "u32"
    bits: ClassVar[int] = 32


@dataclass(frozen=True)
class U64Type(_UIntType):
    keyword: ClassVar[str] = "u64"
    bits: ClassVar[int] = 64


@dataclass(frozen=True)
class ByteType(_Primitive):
    keyword: ClassVar[str] = "byte"


@dataclass(frozen=True)
class B256Type(_Primitive):
    keyword: ClassVar[str] = "b256"

    def static_size(self) -> int:
        return 32


UNIT = UnitType()
BOOL = BoolType()
U8 = U8Type()
U16 = U16Type()
U32 = U32Type()
U64 = U64Type()
BYTE = ByteType()
B256 = B256Type()

PRIMITIVES: Dict[str, ParamType] = {
    p.type_name: p for p in (UNIT, BOOL, U8, U16, U32, U64, BYTE, B256)
}


# ──────────────────────────────────────────────────────────────────────────────
# Composites
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class StringType(ParamType):
    """Fixed-length ascii string `str[n]`."""

    length: int

    def static_size(self) -> int:
        return padded_len(self.length)

    @property
    def type_name(self) -> str:
        return f"str[{self.length}]"


@dataclass(frozen=True)
class ArrayType(ParamType):
    element: ParamType
    length: int

    def static_size(self) -> int:
        return self.length * self.element.static_size()

    def uses_vectors(self) -> bool:
        return self.element.uses_vectors()

    @property
    def type_name(self) -> str:
        return f"[{self.element.type_name}; {self.length}]"


@dataclass(frozen=True)
class VectorType(ParamType):
    element: ParamType

    def static_size(self) -> int:
        return VECTOR_HEAD_SIZE

    def uses_vectors(self) -> bool:
        return True

    @property
    def type_name(self) -> str:
        return f"Vec<{self.element.type_name}>"


@dataclass(frozen=True)
class TupleType(ParamType):
    elements: Tuple[ParamType, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "elements", tuple(self.elements))

    def static_size(self) -> int:
        return sum(e.static_size() for e in self.elements)

    def uses_vectors(self) -> bool:
        return any(e.uses_vectors() for e in self.elements)

    @property
    def type_name(self) -> str:
        return "(" + ", ".join(e.type_name for e in self.elements) + ")"


@dataclass(frozen=True)
class StructType(ParamType):
    fields: Tuple[ParamType, ...]
    generics: Tuple[ParamType, ...] = ()
    name: str = field(default="", compare=False)
    field_names: Tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "generics", tuple(self.generics))
        object.__setattr__(self, "field_names", tuple(self.field_names))

    def static_size(self) -> int:
        return sum(f.static_size() for f in self.fields)

    def uses_vectors(self) -> bool:
        return any(f.uses_vectors() for f in self.fields)

    @property
    def type_name(self) -> str:
        return f"struct {self.name}" if self.name else "struct"


@dataclass(frozen=True)
class EnumVariants:
    """
    Ordered enum variants. The discriminant of a variant is its index.

    The encoded width of an enum value is one discriminant word plus the
    widest variant, whichever variant is active.
    """

    types: Tuple[ParamType, ...]
    names: Tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "types", tuple(self.types))
        object.__setattr__(self, "names", tuple(self.names))
        if not self.types:
            raise InvalidType("enum must have at least one variant")
        if self.names and len(self.names) != len(self.types):
            raise InvalidType(
                f"enum has {len(self.types)} variants but {len(self.names)} names"
            )

    def __len__(self) -> int:
        return len(self.types)

    def __iter__(self) -> Iterator[Tuple[int, ParamType]]:
        return iter(enumerate(self.types))

    def param_type_of(self, discriminant: int) -> ParamType:
        if not 0 <= discriminant < len(self.types):
            raise InvalidData(
                f"discriminant {discriminant} doesn't point to any variant "
                f"(enum has {len(self.types)})",
                context={"discriminant": discriminant},
            )
        return self.types[discriminant]

    def name_of(self, discriminant: int) -> Optional[str]:
        if self.names and 0 <= discriminant < len(self.names):
            return self.names[discriminant]
        return None

    def discriminant_of(self, name: str) -> int:
        try:
            return self.names.index(name)
        except ValueError:
            raise InvalidData(f"enum has no variant named {name!r}") from None

    def max_variant_width(self) -> int:
        # Ties between differently shaped variants are broken by raw width only.
        return max(t.static_size() for t in self.types)

    def encoding_width(self) -> int:
        return WORD_SIZE + self.max_variant_width()


@dataclass(frozen=True)
class EnumType(ParamType):
    variants: EnumVariants
    generics: Tuple[ParamType, ...] = ()
    name: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "generics", tuple(self.generics))

    def static_size(self) -> int:
        return self.variants.encoding_width()

    def uses_vectors(self) -> bool:
        return any(t.uses_vectors() for t in self.variants.types)

    @property
    def type_name(self) -> str:
        return f"enum {self.name}" if self.name else "enum"


def static_size(param_type: ParamType) -> int:
    return param_type.static_size()


def total_static_size(param_types: Sequence[ParamType]) -> int:
    return sum(p.static_size() for p in param_types)
