"""
vm_abi.config — numeric caps and strictness flags for the codec.

Configuration precedence:
  1) Environment variables (VM_ABI_*)
  2) Hardcoded safe defaults below

Key env vars (case-insensitive where boolean):
  - VM_ABI_MAX_DEPTH           (int)   default: 64
  - VM_ABI_MAX_PAYLOAD_BYTES   (int)   default: 8_388_608  (8 MiB)
  - VM_ABI_STRICT_BOOL         (bool)  default: true

Usage:
    from vm_abi.config import load_config
    CFG = load_config()
    if CFG.strict_bool: ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict


# ----------------------------- helpers ---------------------------------------


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    return val in ("1", "true", "t", "yes", "y", "on")


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class CodecConfig:
    # Nesting limit shared by the resolver, encoder and decoder
    max_depth: int
    # Largest byte payload the decoder accepts
    max_payload_bytes: int
    # Reject bool words other than 0/1 when decoding
    strict_bool: bool

    def as_dict(self) -> Dict[str, Any]:
        return {
            "max_depth": self.max_depth,
            "max_payload_bytes": self.max_payload_bytes,
            "strict_bool": self.strict_bool,
        }


@lru_cache(maxsize=1)
def load_config() -> CodecConfig:
    """
    Build and cache a CodecConfig from environment + safe defaults.
    """
    return CodecConfig(
        max_depth=_env_int("VM_ABI_MAX_DEPTH", 64, min_v=4, max_v=512),
        max_payload_bytes=_env_int(
            "VM_ABI_MAX_PAYLOAD_BYTES", 8_388_608, min_v=1_024, max_v=268_435_456
        ),
        strict_bool=_env_bool("VM_ABI_STRICT_BOOL", True),
    )


__all__ = ["CodecConfig", "load_config"]
