from __future__ import annotations

import pytest

from vm_abi.codec.param_types import (
    B256,
    BOOL,
    U8,
    U16,
    U32,
    U64,
    UNIT,
    ArrayType,
    EnumType,
    EnumVariants,
    StringType,
    StructType,
    TupleType,
    VectorType,
)
from vm_abi.errors import InvalidType, InvariantViolation, Unsupported
from vm_abi.schema.declarations import Property, TypeApplication, TypeDeclaration
from vm_abi.schema.resolver import (
    AbiResolver,
    PropertyResolver,
    parse_array_param,
    parse_custom_type_param,
    parse_string_param,
    resolve,
    resolve_all,
)


def prop(type_field, components=None, name="", **kw) -> Property:
    return Property(name=name, type_field=type_field, components=components, **kw)


# ---------------------------------------------------------------------------
# Inline properties
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "type_field, expected",
    [("u8", U8), ("u16", U16), ("u32", U32), ("u64", U64), ("bool", BOOL), ("b256", B256), ("()", UNIT)],
)
def test_primitive_keywords(type_field, expected):
    assert resolve(prop(type_field)) == expected


def test_string():
    assert resolve(prop("str[12]")) == StringType(12)


def test_array_from_type_string():
    assert resolve(prop("[u16; 3]")) == ArrayType(U16, 3)
    assert resolve(prop("[[u8; 2]; 2]")) == ArrayType(ArrayType(U8, 2), 2)


def test_array_of_custom_uses_component():
    element = prop("struct Point", [prop("u64", name="x"), prop("u64", name="y")], name="__array_element")
    p = resolve(prop("[struct Point; 2]", [element]))
    assert p == ArrayType(StructType((U64, U64)), 2)
    assert p.element.field_names == ("x", "y")


def test_array_of_custom_without_component_is_invariant_violation():
    with pytest.raises(InvariantViolation):
        resolve(prop("[struct Point; 2]"))


def test_array_with_two_components():
    with pytest.raises(InvalidType):
        resolve(prop("[u8; 2]", [prop("u8"), prop("u8")]))


def test_tuple():
    p = resolve(prop("(u8, bool)", [prop("u8"), prop("bool")]))
    assert p == TupleType((U8, BOOL))


def test_tuple_without_components_is_invariant_violation():
    with pytest.raises(InvariantViolation):
        resolve(prop("(u8, bool)"))


def test_tuple_arity_mismatch():
    with pytest.raises(InvalidType):
        resolve(prop("(_, _)", [prop("u8")]))


def test_struct_from_scenario():
    s = resolve(
        prop(
            "struct MyStruct",
            [prop("[u8; 2]", name="foo"), prop("str[4]", name="bar")],
        )
    )
    assert s == StructType((ArrayType(U8, 2), StringType(4)))
    assert s.name == "MyStruct"
    assert s.field_names == ("foo", "bar")


def test_enum_variants_get_implicit_discriminants():
    e = resolve(prop("enum MyEnum", [prop("u32", name="X"), prop("bool", name="Y")]))
    assert isinstance(e, EnumType)
    assert list(e.variants) == [(0, U32), (1, BOOL)]
    assert e.variants.names == ("X", "Y")
    assert e.static_size() == 16


def test_custom_without_components():
    with pytest.raises(InvalidType) as ei:
        resolve(prop("struct Empty"))
    assert "struct Empty" in str(ei.value)
    with pytest.raises(InvalidType):
        resolve(prop("enum Empty", []))


@pytest.mark.parametrize("keyword", ["u128", "u256", "str", "raw untyped ptr"])
def test_unsupported_keywords(keyword):
    with pytest.raises(Unsupported):
        resolve(prop(keyword))


@pytest.mark.parametrize("type_field", ["u7", "struct Foo[2]", "Vec<u8>", "string"])
def test_unknown_shapes_are_invalid(type_field):
    with pytest.raises(InvalidType) as ei:
        resolve(prop(type_field, [prop("u8")]))
    assert type_field in str(ei.value)


def test_generic_struct_substitution():
    wrapper = prop(
        "struct Wrapper",
        [prop("generic T", name="inner"), prop("bool", name="flag")],
        type_parameters=("T",),
        type_arguments=(prop("u64"),),
    )
    assert resolve(wrapper) == StructType((U64, BOOL), (U64,))


def test_generic_array_element():
    p = prop("[generic T; 2]", type_parameters=None)
    with pytest.raises(InvalidType):
        resolve(p)
    outer = prop(
        "struct Pair",
        [prop("[generic T; 2]", name="items")],
        type_parameters=("T",),
        type_arguments=(prop("u8"),),
    )
    assert resolve(outer) == StructType((ArrayType(U8, 2),), (U8,))


def test_vec_struct_resolves_to_vector():
    vec = prop(
        "struct Vec",
        [prop("struct RawVec", [prop("raw untyped ptr"), prop("u64")], name="buf"), prop("u64", name="len")],
        type_parameters=("T",),
        type_arguments=(prop("u32"),),
    )
    assert resolve(vec) == VectorType(U32)


def test_type_argument_count_mismatch():
    p = prop(
        "struct Wrapper",
        [prop("generic T")],
        type_parameters=("T",),
        type_arguments=(prop("u8"), prop("u16")),
    )
    with pytest.raises(InvalidType):
        resolve(p)


def test_property_resolver_memoises_instantiations():
    point = prop("struct Point", [prop("u64", name="x"), prop("u64", name="y")])
    r = PropertyResolver()
    first = r.resolve(point)
    second = r.resolve(Property("other_name", point.type_field, point.components))
    assert first is second
    assert r.cache_hits >= 1


def test_resolve_all():
    assert resolve_all([prop("u8"), prop("str[2]")]) == [U8, StringType(2)]


def test_property_from_dict():
    p = Property.from_dict(
        {
            "name": "arg",
            "type": "struct Foo",
            "components": [{"name": "a", "type": "u8"}],
            "typeArguments": None,
        }
    )
    assert p.components == (Property("a", "u8"),)
    assert p.is_struct_type() and not p.is_enum_type()


# ---------------------------------------------------------------------------
# Branch parsers
# ---------------------------------------------------------------------------


def test_array_parser_rejects_string_type():
    with pytest.raises(InvalidType) as ei:
        parse_array_param(prop("str[5]"))
    assert str(ei.value) == "Expected parameter type `[T; n]`, found `str[5]`"


def test_string_parser_rejects_array_type():
    with pytest.raises(InvalidType) as ei:
        parse_string_param(prop("[u8; 5]"))
    assert str(ei.value) == "Expected parameter type `str[n]`, found `[u8; 5]`"


def test_branch_parsers_accept_their_shape():
    assert parse_array_param(prop("[u8; 5]")) == ArrayType(U8, 5)
    assert parse_string_param(prop("str[5]")) == StringType(5)
    assert parse_custom_type_param(prop("enum E", [prop("u8")])) == EnumType(EnumVariants((U8,)))


def test_branch_parser_on_garbage():
    with pytest.raises(InvalidType) as ei:
        parse_array_param(prop("[u8;"))
    assert "Expected parameter type `[T; n]`" in str(ei.value)


# ---------------------------------------------------------------------------
# Flat program ABI
# ---------------------------------------------------------------------------


def _decl(type_id, type_field, components=None, params=None) -> TypeDeclaration:
    return TypeDeclaration(type_id, type_field, components, params)


def _app(type_id, args=None, name="") -> TypeApplication:
    return TypeApplication(name, type_id, args)


def test_flat_generic_instantiations_are_memoised():
    r = AbiResolver(
        [
            _decl(0, "u64"),
            _decl(1, "bool"),
            _decl(2, "generic T"),
            _decl(3, "struct Wrapper", [_app(2, name="inner")], [2]),
        ]
    )
    a = r.resolve(_app(3, [_app(0)]))
    b = r.resolve(_app(3, [_app(0)]))
    c = r.resolve(_app(3, [_app(1)]))
    assert a is b
    assert a == StructType((U64,), (U64,))
    assert c == StructType((BOOL,), (BOOL,))
    assert r.cache_hits >= 1


def test_flat_generic_array_inherits_bindings():
    r = AbiResolver(
        [
            _decl(0, "u8"),
            _decl(1, "generic T"),
            _decl(2, "[_; 2]", [_app(1, name="__array_element")]),
            _decl(3, "struct Pair", [_app(2, name="items")], [1]),
        ]
    )
    assert r.resolve(_app(3, [_app(0)])) == StructType((ArrayType(U8, 2),), (U8,))


def test_flat_cycle_detected():
    r = AbiResolver(
        [
            _decl(0, "struct A", [_app(1, name="b")]),
            _decl(1, "struct B", [_app(0, name="a")]),
        ]
    )
    with pytest.raises(InvalidType) as ei:
        r.resolve(_app(0))
    assert "recursive" in str(ei.value)


def test_flat_self_reference_detected():
    r = AbiResolver([_decl(0, "enum List", [_app(1, name="Nil"), _app(0, name="Cons")]), _decl(1, "()")])
    with pytest.raises(InvalidType):
        r.resolve(_app(0))


def test_flat_unknown_type_id():
    with pytest.raises(InvalidType):
        AbiResolver([_decl(0, "u8")]).resolve(_app(9))


def test_flat_unbound_generic():
    with pytest.raises(InvalidType):
        AbiResolver([_decl(0, "generic T")]).resolve(_app(0))


def test_flat_missing_type_arguments():
    r = AbiResolver([_decl(0, "generic T"), _decl(1, "struct W", [_app(0)], [0])])
    with pytest.raises(InvalidType):
        r.resolve(_app(1))


def test_flat_depth_limit():
    decls = [_decl(i, f"struct S{i}", [_app(i + 1, name="next")]) for i in range(20)]
    decls.append(_decl(20, "u8"))
    with pytest.raises(Unsupported):
        AbiResolver(decls, max_depth=8).resolve(_app(0))
    assert AbiResolver(decls, max_depth=64).resolve(_app(0)).static_size() == 8
