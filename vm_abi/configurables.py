"""
Configurable constants.

A program ABI declares configurable constants by name, type and byte offset
into the compiled binary. Overriding one encodes the new value (resolved at
address 0) and splices it over the binary at that offset.

    cfg = abi.configurables().with_value("FEE", 10).with_value("OWNER", owner)
    patched = cfg.apply(binary)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from .codec.encoding import encode
from .codec.param_types import ParamType
from .convert import tokenize
from .errors import InvalidData, Unsupported

__all__ = ["ConfigurableSlot", "Configurables"]

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigurableSlot:
    name: str
    param_type: ParamType
    offset: int


class Configurables:
    """Immutable set of configurable overrides; `with_value` returns a new set."""

    def __init__(
        self,
        slots: Iterable[ConfigurableSlot],
        overrides: Tuple[Tuple[int, bytes], ...] = (),
    ) -> None:
        self._slots: Dict[str, ConfigurableSlot] = {s.name: s for s in slots}
        self.overrides = tuple(overrides)

    def names(self) -> List[str]:
        return list(self._slots)

    def slot(self, name: str) -> ConfigurableSlot:
        try:
            return self._slots[name]
        except KeyError:
            raise InvalidData(f"no configurable named {name!r}; known: {sorted(self._slots)}") from None

    def with_value(self, name: str, value: Any) -> "Configurables":
        slot = self.slot(name)
        if slot.param_type.uses_vectors():
            raise Unsupported(f"configurable {name!r} of type {slot.param_type} contains a vector")
        data = encode([tokenize(value, slot.param_type)]).resolve(0)
        return Configurables(self._slots.values(), self.overrides + ((slot.offset, data),))

    def apply(self, binary: bytes) -> bytes:
        """Return `binary` with every override written at its offset, in insertion order."""
        out = bytearray(binary)
        for offset, data in self.overrides:
            end = offset + len(data)
            if end > len(out):
                raise InvalidData(
                    f"configurable at offset {offset} ({len(data)} bytes) exceeds binary of {len(out)} bytes",
                    context={"offset": offset, "len": len(out)},
                )
            out[offset:end] = data
        log.debug("applied %d configurable overrides", len(self.overrides))
        return bytes(out)
