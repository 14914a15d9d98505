"""
vm_abi.errors — error taxonomy for the codec.

Recoverable errors (bad schema or bad user data) derive from CodecError:

    InvalidType   the schema cannot be resolved into a ParamType
    InvalidData   a value violates its type at encode/decode time
    Unsupported   a structurally valid construct this codec cannot encode

InvariantViolation is raised when input that the compiler toolchain is
trusted to produce breaks an internal assumption. It is a RuntimeError and
NOT a CodecError, so `except CodecError` never hides it.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class CodecError(Exception):
    """
    Structured codec error.

    Attributes:
        code: short machine-readable code string
        message: human-readable message
        context: optional extra fields for diagnostics (type, offset, ...)
    """

    code = "codec_error"

    def __init__(self, message: str, *, context: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = str(message)
        self.context: Dict[str, Any] = dict(context or {})

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }


class InvalidType(CodecError):
    """Raised when a schema type cannot be resolved."""

    code = "invalid_type"


class InvalidData(CodecError):
    """Raised when a value does not conform to its type."""

    code = "invalid_data"


class Unsupported(CodecError):
    """Raised for well-formed constructs the codec does not handle."""

    code = "unsupported"


class InvariantViolation(RuntimeError):
    """A trusted-toolchain invariant was broken (programming error)."""


__all__ = [
    "CodecError",
    "InvalidType",
    "InvalidData",
    "Unsupported",
    "InvariantViolation",
]
