"""
Schema → ParamType resolution.

Every type string is parsed by `grammar.parse_type_field` and the resulting
syntax node is dispatched through `_HANDLERS`, one entry per node class:

    KeywordSyntax   primitive keyword, else Unsupported / InvalidType
    StrSyntax       String(n)
    ArraySyntax     Array(T, n), T from the single component when present
    TupleSyntax     Tuple of the resolved components (arity must match)
    CustomSyntax    Struct / Enum of the resolved components,
                    `struct Vec` with one type argument → Vector(T)
    GenericSyntax   substituted by the enclosing type arguments

Two front ends share that dispatch:

- `PropertyResolver` walks inline `Property` trees;
- `AbiResolver` walks the flat program ABI (declarations referenced by id).

Both memoise one ParamType per (type identity, concrete arguments) and keep
the set of in-progress keys; meeting an in-progress key again is a cycle and
raises InvalidType.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from ..codec.param_types import (
    PRIMITIVES,
    ArrayType,
    EnumType,
    EnumVariants,
    ParamType,
    StringType,
    StructType,
    TupleType,
    VectorType,
)
from ..config import load_config
from ..errors import InvalidType, InvariantViolation, Unsupported
from .declarations import Property, TypeApplication, TypeDeclaration
from .grammar import (
    ArraySyntax,
    CustomSyntax,
    GenericSyntax,
    KeywordSyntax,
    StrSyntax,
    Syntax,
    TupleSyntax,
    parse_type_field,
)

__all__ = [
    "UNSUPPORTED_KEYWORDS",
    "PropertyResolver",
    "AbiResolver",
    "resolve",
    "resolve_all",
    "parse_string_param",
    "parse_array_param",
    "parse_custom_type_param",
]

log = logging.getLogger(__name__)

# Keywords the VM knows about that this codec cannot encode.
UNSUPPORTED_KEYWORDS = frozenset({"u128", "u256", "str", "raw untyped ptr", "raw_ptr", "raw_slice"})


# ──────────────────────────────────────────────────────────────────────────────
# Dispatch (shared by both front ends)
# ──────────────────────────────────────────────────────────────────────────────


@dataclass
class _Site:
    """One schema node being resolved, independent of the schema shape."""

    type_field: str
    components: Optional[Sequence[Any]]
    resolve_component: Callable[[Any], ParamType]
    component_name: Callable[[Any], str]
    generics: Tuple[ParamType, ...]
    substitute: Callable[[str], ParamType]


def _keyword(node: KeywordSyntax, site: _Site) -> ParamType:
    p = PRIMITIVES.get(node.word)
    if p is not None:
        return p
    if node.word in UNSUPPORTED_KEYWORDS:
        raise Unsupported(f"Type `{site.type_field}` is not supported", context={"type": site.type_field})
    raise InvalidType(f"Invalid type `{site.type_field}`: unknown keyword `{node.word}`")


def _string(node: StrSyntax, site: _Site) -> ParamType:
    return StringType(node.length)


def _standalone(node: Syntax, site: _Site) -> ParamType:
    """Resolve an element written out in full inside its parent's type string."""
    if isinstance(node, KeywordSyntax):
        return _keyword(node, site)
    if isinstance(node, StrSyntax):
        return StringType(node.length)
    if isinstance(node, ArraySyntax):
        return ArrayType(_standalone(node.element, site), node.length)
    if isinstance(node, GenericSyntax):
        return site.substitute(node.name)
    raise InvariantViolation(f"array should have components: `{site.type_field}`")


def _array(node: ArraySyntax, site: _Site) -> ParamType:
    if site.components:
        if len(site.components) != 1:
            raise InvalidType(
                f"Invalid type `{site.type_field}`: array needs exactly one component, "
                f"got {len(site.components)}"
            )
        element = site.resolve_component(site.components[0])
    else:
        element = _standalone(node.element, site)
    return ArrayType(element, node.length)


def _tuple(node: TupleSyntax, site: _Site) -> ParamType:
    if site.components is None:
        raise InvariantViolation(f"tuples should have components: `{site.type_field}`")
    if len(site.components) != len(node.elements):
        raise InvalidType(
            f"Invalid type `{site.type_field}`: tuple of {len(node.elements)} elements "
            f"has {len(site.components)} components"
        )
    return TupleType(tuple(site.resolve_component(c) for c in site.components))


def _custom(node: CustomSyntax, site: _Site) -> ParamType:
    if node.kind == "struct" and node.name.split("::")[-1] == "Vec" and len(site.generics) == 1:
        return VectorType(site.generics[0])
    if not site.components:
        raise InvalidType(f"cannot parse custom type with no components: `{site.type_field}`")

    types = tuple(site.resolve_component(c) for c in site.components)
    names = tuple(site.component_name(c) for c in site.components)
    if node.kind == "struct":
        return StructType(types, site.generics, name=node.name, field_names=names)
    return EnumType(EnumVariants(types, names), site.generics, name=node.name)


def _generic(node: GenericSyntax, site: _Site) -> ParamType:
    return site.substitute(node.name)


_HANDLERS: Dict[type, Callable[[Any, _Site], ParamType]] = {
    KeywordSyntax: _keyword,
    StrSyntax: _string,
    ArraySyntax: _array,
    TupleSyntax: _tuple,
    CustomSyntax: _custom,
    GenericSyntax: _generic,
}


def _dispatch(node: Syntax, site: _Site) -> ParamType:
    return _HANDLERS[type(node)](node, site)


def _frozen(bindings: Mapping[Any, ParamType]) -> Tuple[Tuple[Any, ParamType], ...]:
    return tuple(sorted(bindings.items(), key=lambda kv: str(kv[0])))


class _Guard:
    """Memo table, in-progress set and depth bound for one resolver."""

    def __init__(self, max_depth: Optional[int]) -> None:
        self.max_depth = max_depth if max_depth is not None else load_config().max_depth
        self.memo: Dict[Any, ParamType] = {}
        self.in_progress: Set[Any] = set()
        self.hits = 0

    def run(self, key: Any, label: str, build: Callable[[], ParamType]) -> ParamType:
        cached = self.memo.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        if key in self.in_progress:
            raise InvalidType(f"Type `{label}` is recursive", context={"type": label})
        if len(self.in_progress) >= self.max_depth:
            raise Unsupported(
                f"type nesting exceeds max depth {self.max_depth}",
                context={"type": label},
            )
        self.in_progress.add(key)
        try:
            result = build()
        finally:
            self.in_progress.discard(key)
        self.memo[key] = result
        log.debug("resolved %s -> %s", label, result)
        return result


# ──────────────────────────────────────────────────────────────────────────────
# Inline Property trees
# ──────────────────────────────────────────────────────────────────────────────


class PropertyResolver:
    """Resolve inline `Property` trees; one instance may serve many lookups."""

    def __init__(self, *, max_depth: Optional[int] = None) -> None:
        self._guard = _Guard(max_depth)

    @property
    def cache_hits(self) -> int:
        return self._guard.hits

    def resolve(self, prop: Property, bindings: Optional[Mapping[str, ParamType]] = None) -> ParamType:
        bindings = dict(bindings or {})
        syntax = parse_type_field(prop.type_field)
        if isinstance(syntax, GenericSyntax):
            return self._lookup(prop.type_field, syntax.name, bindings)

        args = tuple(self.resolve(a, bindings) for a in prop.type_arguments or ())
        params = prop.type_parameters or ()
        if params and len(params) != len(args):
            raise InvalidType(
                f"Type `{prop.type_field}` expects {len(params)} type arguments, got {len(args)}"
            )
        inner = dict(bindings)
        inner.update(zip(params, args))

        site = _Site(
            type_field=prop.type_field,
            components=prop.components,
            resolve_component=lambda c: self.resolve(c, inner),
            component_name=lambda c: c.name,
            generics=args,
            substitute=lambda name: self._lookup(prop.type_field, name, inner),
        )
        # Identity of an inline type is its own subtree (names of the
        # referencing field excluded) under the bound arguments.
        key = (prop.type_field, prop.components, prop.type_parameters, args, _frozen(inner))
        return self._guard.run(key, prop.type_field, lambda: _dispatch(syntax, site))

    @staticmethod
    def _lookup(type_field: str, name: str, bindings: Mapping[str, ParamType]) -> ParamType:
        try:
            return bindings[name]
        except KeyError:
            raise InvalidType(f"Invalid type `{type_field}`: unbound generic parameter `{name}`") from None


def resolve(prop: Property) -> ParamType:
    """Resolve one inline schema property into its ParamType."""
    return PropertyResolver().resolve(prop)


def resolve_all(props: Sequence[Property]) -> List[ParamType]:
    r = PropertyResolver()
    return [r.resolve(p) for p in props]


def _branch(prop: Property, expected: str, accepted: type) -> ParamType:
    try:
        syntax = parse_type_field(prop.type_field)
    except InvalidType:
        syntax = None
    if not isinstance(syntax, accepted):
        raise InvalidType(
            f"Expected parameter type `{expected}`, found `{prop.type_field}`",
            context={"type": prop.type_field},
        )
    return resolve(prop)


def parse_string_param(prop: Property) -> ParamType:
    return _branch(prop, "str[n]", StrSyntax)


def parse_array_param(prop: Property) -> ParamType:
    return _branch(prop, "[T; n]", ArraySyntax)


def parse_custom_type_param(prop: Property) -> ParamType:
    return _branch(prop, "struct T` or `enum T", CustomSyntax)


# ──────────────────────────────────────────────────────────────────────────────
# Flat program ABI
# ──────────────────────────────────────────────────────────────────────────────


class AbiResolver:
    """
    Resolve type applications against the declaration table of a program ABI.

    A generic parameter is itself a declaration (`generic T`); it is bound by
    its type id when the enclosing declaration is applied with arguments.
    """

    def __init__(
        self, declarations: Sequence[TypeDeclaration], *, max_depth: Optional[int] = None
    ) -> None:
        self.declarations: Dict[int, TypeDeclaration] = {d.type_id: d for d in declarations}
        self._guard = _Guard(max_depth)

    @property
    def cache_hits(self) -> int:
        return self._guard.hits

    def declaration(self, type_id: int) -> TypeDeclaration:
        try:
            return self.declarations[type_id]
        except KeyError:
            raise InvalidType(f"Unknown type id {type_id}", context={"type_id": type_id}) from None

    def resolve(
        self, app: TypeApplication, bindings: Optional[Mapping[int, ParamType]] = None
    ) -> ParamType:
        bindings = bindings or {}
        decl = self.declaration(app.type_id)
        syntax = parse_type_field(decl.type_field)
        if isinstance(syntax, GenericSyntax):
            if decl.type_id not in bindings:
                raise InvalidType(
                    f"Invalid type `{decl.type_field}`: unbound generic parameter (type id {decl.type_id})"
                )
            return bindings[decl.type_id]

        args = tuple(self.resolve(a, bindings) for a in app.type_arguments or ())
        params = decl.type_parameters or ()
        if len(params) != len(args):
            raise InvalidType(
                f"Type `{decl.type_field}` expects {len(params)} type arguments, got {len(args)}",
                context={"type_id": decl.type_id},
            )
        inner = dict(bindings)
        inner.update(zip(params, args))

        def substitute(name: str) -> ParamType:
            for type_id in inner:
                p = self.declaration(type_id)
                if p.type_field == f"generic {name}":
                    return inner[type_id]
            raise InvalidType(f"Invalid type `{decl.type_field}`: unbound generic parameter `{name}`")

        site = _Site(
            type_field=decl.type_field,
            components=decl.components,
            resolve_component=lambda c: self.resolve(c, inner),
            component_name=lambda c: c.name,
            generics=args,
            substitute=substitute,
        )
        key = (decl.type_id, args, _frozen(inner))
        return self._guard.run(key, decl.type_field, lambda: _dispatch(syntax, site))

    def resolve_all(self, apps: Sequence[TypeApplication]) -> List[ParamType]:
        return [self.resolve(a) for a in apps]
