from __future__ import annotations

import copy
from typing import Any, Dict, Iterator

import pytest

from vm_abi.config import load_config

# Flat program ABI covering every type shape the loader supports.
#
#   0  u64                 7  generic T
#   1  bool                8  struct Wrapper<T> { inner: T, flag: bool }
#   2  u32                 9  struct Vec<T> { buf: struct RawVec<T>, len: u64 }
#   3  [_; 2] of u8       10  struct RawVec<T> { ptr: raw untyped ptr, cap: u64 }
#   4  str[4]             11  raw untyped ptr
#   5  struct MyStruct    12  ()
#   6  enum MyEnum        13  b256
#  14  u8                 15  enum Option<T> { None: (), Some: T }
SAMPLE_ABI: Dict[str, Any] = {
    "types": [
        {"typeId": 0, "type": "u64", "components": None, "typeParameters": None},
        {"typeId": 1, "type": "bool", "components": None, "typeParameters": None},
        {"typeId": 2, "type": "u32", "components": None, "typeParameters": None},
        {
            "typeId": 3,
            "type": "[_; 2]",
            "components": [{"name": "__array_element", "type": 14, "typeArguments": None}],
            "typeParameters": None,
        },
        {"typeId": 4, "type": "str[4]", "components": None, "typeParameters": None},
        {
            "typeId": 5,
            "type": "struct MyStruct",
            "components": [
                {"name": "foo", "type": 3, "typeArguments": None},
                {"name": "bar", "type": 4, "typeArguments": None},
            ],
            "typeParameters": None,
        },
        {
            "typeId": 6,
            "type": "enum MyEnum",
            "components": [
                {"name": "X", "type": 2, "typeArguments": None},
                {"name": "Y", "type": 1, "typeArguments": None},
            ],
            "typeParameters": None,
        },
        {"typeId": 7, "type": "generic T", "components": None, "typeParameters": None},
        {
            "typeId": 8,
            "type": "struct Wrapper",
            "components": [
                {"name": "inner", "type": 7, "typeArguments": None},
                {"name": "flag", "type": 1, "typeArguments": None},
            ],
            "typeParameters": [7],
        },
        {
            "typeId": 9,
            "type": "struct Vec",
            "components": [
                {"name": "buf", "type": 10, "typeArguments": [{"name": "", "type": 7, "typeArguments": None}]},
                {"name": "len", "type": 0, "typeArguments": None},
            ],
            "typeParameters": [7],
        },
        {
            "typeId": 10,
            "type": "struct RawVec",
            "components": [
                {"name": "ptr", "type": 11, "typeArguments": None},
                {"name": "cap", "type": 0, "typeArguments": None},
            ],
            "typeParameters": [7],
        },
        {"typeId": 11, "type": "raw untyped ptr", "components": None, "typeParameters": None},
        {"typeId": 12, "type": "()", "components": [], "typeParameters": None},
        {"typeId": 13, "type": "b256", "components": None, "typeParameters": None},
        {"typeId": 14, "type": "u8", "components": None, "typeParameters": None},
        {
            "typeId": 15,
            "type": "enum Option",
            "components": [
                {"name": "None", "type": 12, "typeArguments": None},
                {"name": "Some", "type": 7, "typeArguments": None},
            ],
            "typeParameters": [7],
        },
    ],
    "functions": [
        {
            "name": "takes_ints_returns_bool",
            "inputs": [{"name": "x", "type": 2, "typeArguments": None}],
            "output": {"name": "", "type": 1, "typeArguments": None},
        },
        {
            "name": "takes_struct",
            "inputs": [{"name": "s", "type": 5, "typeArguments": None}],
            "output": {"name": "", "type": 12, "typeArguments": None},
        },
        {
            "name": "takes_enum",
            "inputs": [{"name": "e", "type": 6, "typeArguments": None}],
            "output": {"name": "", "type": 6, "typeArguments": None},
        },
        {
            "name": "takes_generic",
            "inputs": [
                {"name": "w", "type": 8, "typeArguments": [{"name": "", "type": 0, "typeArguments": None}]}
            ],
            "output": {"name": "", "type": 0, "typeArguments": None},
        },
        {
            "name": "takes_vec",
            "inputs": [
                {"name": "v", "type": 9, "typeArguments": [{"name": "", "type": 2, "typeArguments": None}]}
            ],
            "output": {"name": "", "type": 9, "typeArguments": [{"name": "", "type": 2, "typeArguments": None}]},
        },
        {
            "name": "takes_option",
            "inputs": [
                {"name": "o", "type": 15, "typeArguments": [{"name": "", "type": 0, "typeArguments": None}]}
            ],
            "output": {"name": "", "type": 12, "typeArguments": None},
        },
    ],
    "loggedTypes": [
        {"logId": 0, "loggedType": {"name": "", "type": 0, "typeArguments": None}},
        {"logId": 1, "loggedType": {"name": "", "type": 5, "typeArguments": None}},
        {"logId": 2, "loggedType": {"name": "", "type": 0, "typeArguments": None}},
        {"logId": 3, "loggedType": {"name": "", "type": 6, "typeArguments": None}},
    ],
    "configurables": [
        {"name": "FEE", "configurableType": {"name": "", "type": 0, "typeArguments": None}, "offset": 8},
        {"name": "OWNER", "configurableType": {"name": "", "type": 13, "typeArguments": None}, "offset": 16},
        {
            "name": "ITEMS",
            "configurableType": {
                "name": "",
                "type": 9,
                "typeArguments": [{"name": "", "type": 0, "typeArguments": None}],
            },
            "offset": 48,
        },
    ],
}


@pytest.fixture(autouse=True)
def _fresh_config() -> Iterator[None]:
    """Each test sees configuration built from its own environment."""
    load_config.cache_clear()
    yield
    load_config.cache_clear()


@pytest.fixture
def sample_abi_dict() -> Dict[str, Any]:
    return copy.deepcopy(SAMPLE_ABI)
