"""
vm_abi.codec
============

Word-level codec for the 8-byte, big-endian VM ABI.

This package provides:
  • ParamType, the resolved shape of a value, and Token, the runtime value.
  • ABIEncoder / ABIDecoder with two-phase (encode, then resolve) vector layout.
  • Function selector computation.

Everything here is pure-Python and deterministic; nothing touches a schema
document (see vm_abi.schema for that).
"""

from __future__ import annotations

from .decoding import *  # noqa: F401,F403
from .decoding import __all__ as _all_decoding
from .encoding import *  # noqa: F401,F403
from .encoding import __all__ as _all_encoding
from .param_types import *  # noqa: F401,F403
from .param_types import __all__ as _all_types
from .selector import *  # noqa: F401,F403
from .selector import __all__ as _all_selector
from .tokens import *  # noqa: F401,F403
from .tokens import __all__ as _all_tokens
from .words import WORD_SIZE, pad_bytes, pad_word, padded_len, read_word

__all__ = tuple(
    dict.fromkeys(  # preserve order, dedupe
        (
            *_all_types,
            *_all_tokens,
            *_all_encoding,
            *_all_decoding,
            *_all_selector,
            "WORD_SIZE",
            "pad_bytes",
            "pad_word",
            "padded_len",
            "read_word",
        )
    )
)
