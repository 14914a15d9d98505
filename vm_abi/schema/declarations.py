"""
Schema records consumed by the resolver.

Two shapes are supported:

- Property: an inline tree, each node carrying its own type string and
  already-nested components (generic parameters named, arguments inline).
- TypeDeclaration / TypeApplication: the flat program ABI, where types are
  declared once by `typeId` and referenced by id with optional type
  arguments.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple


def _opt_tuple(v: Any) -> Optional[tuple]:
    return None if v is None else tuple(v)


@dataclass(frozen=True)
class Property:
    name: str
    type_field: str
    components: Optional[Tuple["Property", ...]] = None
    type_arguments: Optional[Tuple["Property", ...]] = None
    type_parameters: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "components", _opt_tuple(self.components))
        object.__setattr__(self, "type_arguments", _opt_tuple(self.type_arguments))
        object.__setattr__(self, "type_parameters", _opt_tuple(self.type_parameters))

    def is_struct_type(self) -> bool:
        return self.type_field.startswith("struct ")

    def is_enum_type(self) -> bool:
        return self.type_field.startswith("enum ")

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Property":
        def many(key: str) -> Optional[Tuple["Property", ...]]:
            raw = d.get(key)
            return None if raw is None else tuple(cls.from_dict(c) for c in raw)

        return cls(
            name=d.get("name", ""),
            type_field=d["type"],
            components=many("components"),
            type_arguments=many("typeArguments"),
            type_parameters=_opt_tuple(d.get("typeParameters")),
        )


@dataclass(frozen=True)
class TypeApplication:
    name: str
    type_id: int
    type_arguments: Optional[Tuple["TypeApplication", ...]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type_arguments", _opt_tuple(self.type_arguments))

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "TypeApplication":
        args = d.get("typeArguments")
        return cls(
            name=d.get("name", ""),
            type_id=int(d["type"]),
            type_arguments=None if args is None else tuple(cls.from_dict(a) for a in args),
        )


@dataclass(frozen=True)
class TypeDeclaration:
    type_id: int
    type_field: str
    components: Optional[Tuple[TypeApplication, ...]] = None
    type_parameters: Optional[Tuple[int, ...]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "components", _opt_tuple(self.components))
        object.__setattr__(self, "type_parameters", _opt_tuple(self.type_parameters))

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "TypeDeclaration":
        comps = d.get("components")
        params = d.get("typeParameters")
        return cls(
            type_id=int(d["typeId"]),
            type_field=d["type"],
            components=None if comps is None else tuple(TypeApplication.from_dict(c) for c in comps),
            type_parameters=None if params is None else tuple(int(p) for p in params),
        )


__all__ = ["Property", "TypeApplication", "TypeDeclaration"]
