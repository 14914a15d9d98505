"""
vm_abi.schema
-------------

Schema side of the ABI: the type-string grammar, the resolver that turns
schema records into ParamType trees, and the program ABI document loader.
"""

from __future__ import annotations

from .declarations import Property, TypeApplication, TypeDeclaration
from .grammar import parse_type_field
from .program_abi import ABIFunction, Configurable, LoggedType, ProgramABI
from .resolver import (
    AbiResolver,
    PropertyResolver,
    parse_array_param,
    parse_custom_type_param,
    parse_string_param,
    resolve,
    resolve_all,
)

__all__ = [
    "Property",
    "TypeApplication",
    "TypeDeclaration",
    "parse_type_field",
    "ABIFunction",
    "Configurable",
    "LoggedType",
    "ProgramABI",
    "AbiResolver",
    "PropertyResolver",
    "parse_array_param",
    "parse_custom_type_param",
    "parse_string_param",
    "resolve",
    "resolve_all",
]
