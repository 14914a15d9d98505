"""
vm-abi — binary ABI codec for an 8-byte word, big-endian VM.

Façade over the codec and schema layers:

- ParamType / Token          the type tree and runtime values
- encode(tokens).resolve(b)  head + dynamic region, pointers bound to base b
- decode(types, data)        cursor decoder
- compute_selector(name, types)
- ProgramABI.from_json(doc)  resolve a program ABI and build/parse call data
- LogDecoder                 filter and decode log receipts by type

Submodules are importable on their own; this module only re-exports.
"""

from __future__ import annotations

from .call import CallData, encode_call
from .codec import (
    ABIDecoder,
    ABIEncoder,
    EnumVariants,
    ParamType,
    Token,
    TokenKind,
    UnresolvedBytes,
    compute_selector,
    decode,
    decode_single,
    encode,
    resolve,
)
from .config import CodecConfig, load_config
from .configurables import Configurables
from .convert import detokenize, tokenize
from .errors import CodecError, InvalidData, InvalidType, InvariantViolation, Unsupported
from .receipts import Log, LogData, LogDecoder, Return, ReturnData, decode_return
from .schema import Property, ProgramABI
from .schema import resolve as resolve_property
from .version import __version__


def version() -> str:
    """Return the vm_abi version string."""
    return __version__


__all__ = [
    "ABIDecoder",
    "ABIEncoder",
    "CallData",
    "CodecConfig",
    "CodecError",
    "Configurables",
    "EnumVariants",
    "InvalidData",
    "InvalidType",
    "InvariantViolation",
    "Log",
    "LogData",
    "LogDecoder",
    "ParamType",
    "ProgramABI",
    "Property",
    "Return",
    "ReturnData",
    "Token",
    "TokenKind",
    "UnresolvedBytes",
    "Unsupported",
    "compute_selector",
    "decode",
    "decode_return",
    "decode_single",
    "detokenize",
    "encode",
    "encode_call",
    "load_config",
    "resolve",
    "resolve_property",
    "tokenize",
    "version",
    "__version__",
]
