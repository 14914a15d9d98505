"""
vm_abi.logging
--------------

Console logging for the vm-abi tool. Library modules only do

    log = logging.getLogger(__name__)

and emit debug records; whoever embeds the codec (or the CLI) calls
`setup_logging()` once.

Fields passed through `extra=` are rendered after the logger name, as
`k=v` pairs in text mode or as top-level keys in JSON mode. Codec values are
made readable on the way: bytes become 0x-hex, ParamTypes and Tokens their
type string, and CodecErrors their `to_dict()`.

VM_ABI_LOG_FORMAT=json|text overrides the `fmt` argument.
"""

from __future__ import annotations

import datetime as _dt
import io
import json
import logging
import os
import sys
from typing import Any, Dict, Optional

# Attribute names every LogRecord carries; anything else came from `extra=`.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


def _field(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (bytes, bytearray)):
        return "0x" + bytes(v).hex()
    if hasattr(v, "to_dict"):
        return v.to_dict()
    if isinstance(v, (list, tuple)):
        return [_field(x) for x in v]
    return str(v)


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: _field(v)
        for k, v in record.__dict__.items()
        if k not in _RECORD_ATTRS and not k.startswith("_")
    }


def _timestamp(record: logging.LogRecord) -> str:
    ts = _dt.datetime.fromtimestamp(record.created, _dt.timezone.utc)
    return ts.isoformat(timespec="milliseconds")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        doc: Dict[str, Any] = {
            "ts": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k, v in _extras(record).items():
            doc.setdefault(k, v)
        if record.exc_info:
            doc["exc"] = self.formatException(record.exc_info)
        return json.dumps(doc, default=str, separators=(",", ":"))


class TextFormatter(logging.Formatter):
    """`<ts> | LEVEL | logger | k=v ... | message`"""

    def format(self, record: logging.LogRecord) -> str:
        parts = [_timestamp(record), f"{record.levelname:<5}", record.name]
        extras = _extras(record)
        if extras:
            parts.append(" ".join(f"{k}={v}" for k, v in extras.items()))
        parts.append(record.getMessage())
        line = " | ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.WARNING


def _use_json(fmt: str) -> bool:
    env = os.environ.get("VM_ABI_LOG_FORMAT", "").strip().lower()
    if env in ("json", "text"):
        return env == "json"
    return fmt.strip().lower() == "json"


def setup_logging(
    *,
    level: str | int = "WARNING",
    fmt: str = "text",
    stream: Optional[io.TextIOBase] = None,
) -> None:
    """Replace the root logger's handlers with one console handler."""
    root = logging.getLogger()
    root.setLevel(_level(level))
    for h in list(root.handlers):
        root.removeHandler(h)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JSONFormatter() if _use_json(fmt) else TextFormatter())
    root.addHandler(handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or "vm_abi")


__all__ = ["JSONFormatter", "TextFormatter", "setup_logging", "get_logger"]
