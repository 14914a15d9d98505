"""
Receipts emitted by a VM call and the decoders that read them.

Only the receipt kinds that carry ABI-encoded values are modelled:

- Log(log_id, value)        one register word
- LogData(log_id, data)     an encoded blob
- Return(value)             one register word
- ReturnData(data)          an encoded blob

`LogDecoder` maps each log id declared by the program ABI to its ParamType
and decodes matching receipts in order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .codec.decoding import decode_single
from .codec.param_types import ParamType
from .codec.tokens import Token
from .codec.words import pad_word
from .convert import detokenize
from .errors import InvalidData

__all__ = [
    "Log",
    "LogData",
    "Return",
    "ReturnData",
    "Receipt",
    "LogDecoder",
    "decode_return",
    "receipt_from_dict",
]

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Log:
    log_id: int
    value: int

    def payload(self) -> bytes:
        return pad_word(self.value)


@dataclass(frozen=True)
class LogData:
    log_id: int
    data: bytes

    def payload(self) -> bytes:
        return self.data


@dataclass(frozen=True)
class Return:
    value: int

    def payload(self) -> bytes:
        return pad_word(self.value)


@dataclass(frozen=True)
class ReturnData:
    data: bytes

    def payload(self) -> bytes:
        return self.data


Receipt = Union[Log, LogData, Return, ReturnData]


def receipt_from_dict(d: Mapping[str, Any]) -> Receipt:
    """
    Build a receipt from its JSON form:

        {"type": "Log", "logId": 1, "value": 42}
        {"type": "LogData", "logId": 1, "data": "0x…"}
        {"type": "Return", "value": 0}
        {"type": "ReturnData", "data": "0x…"}
    """
    if not isinstance(d, Mapping):
        raise InvalidData(f"receipt must be a JSON object, got {type(d).__name__}")
    kind = d.get("type")
    try:
        if kind == "Log":
            return Log(int(d["logId"]), int(d["value"]))
        if kind == "LogData":
            return LogData(int(d["logId"]), _hex(d["data"]))
        if kind == "Return":
            return Return(int(d["value"]))
        if kind == "ReturnData":
            return ReturnData(_hex(d["data"]))
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidData(f"malformed {kind} receipt: {e}", context={"receipt": dict(d)}) from e
    raise InvalidData(f"unknown receipt type {kind!r}")


def _hex(s: str) -> bytes:
    return bytes.fromhex(s[2:] if s.startswith(("0x", "0X")) else s)


class LogDecoder:
    """Decode log receipts by the type declared for their log id."""

    def __init__(self, logged_types: Mapping[int, ParamType]) -> None:
        self.logged_types: Dict[int, ParamType] = dict(logged_types)

    def _logs(self, receipts: Iterable[Receipt]) -> Iterable[Union[Log, LogData]]:
        return (r for r in receipts if isinstance(r, (Log, LogData)))

    def logs_with_type(self, receipts: Iterable[Receipt], param_type: ParamType) -> List[Token]:
        """Decode, in receipt order, every log whose declared type equals `param_type`."""
        out: List[Token] = []
        for r in self._logs(receipts):
            declared = self.logged_types.get(r.log_id)
            if declared is None or declared != param_type:
                continue
            out.append(decode_single(param_type, r.payload()))
        return out

    def fetch_logs(self, receipts: Iterable[Receipt]) -> List[str]:
        """Decode every log with a known id and render it for display."""
        out: List[str] = []
        for r in self._logs(receipts):
            declared = self.logged_types.get(r.log_id)
            if declared is None:
                log.debug("skipping log with undeclared id %d", r.log_id)
                continue
            token = decode_single(declared, r.payload())
            out.append(repr(detokenize(token, declared)))
        return out


def decode_return(receipts: Iterable[Receipt], output_type: ParamType) -> Token:
    """
    Decode the first Return / ReturnData receipt as `output_type`. With no
    return receipt the value decodes from zeroed bytes.
    """
    payload: Optional[bytes] = None
    for r in receipts:
        if isinstance(r, (Return, ReturnData)):
            payload = r.payload()
            break
    if payload is None:
        log.debug("no return receipt; decoding %s from zeros", output_type)
        payload = bytes(output_type.static_size())
    return decode_single(output_type, payload)
