"""
Program ABI documents.

A program ABI is the JSON the compiler emits next to a binary:

    {
      "types":         [{"typeId": 0, "type": "u64", "components": null, "typeParameters": null}, ...],
      "functions":     [{"name": "foo", "inputs": [{"name": "x", "type": 0}], "output": {...}}],
      "loggedTypes":   [{"logId": 0, "loggedType": {"name": "", "type": 3}}],
      "configurables": [{"name": "FEE", "configurableType": {"name": "", "type": 0}, "offset": 48}]
    }

`ProgramABI.from_json` validates the document against the bundled JSON
Schema (`program_abi.schema.json`, Draft 2020-12) before anything is
resolved; a violation is InvalidType listing every failing path.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from jsonschema import Draft202012Validator

from ..call import CallData, encode_call
from ..codec.decoding import decode_single
from ..codec.param_types import ParamType
from ..codec.selector import compute_selector
from ..codec.tokens import Token
from ..configurables import ConfigurableSlot, Configurables
from ..convert import tokenize_all
from ..errors import InvalidType
from ..receipts import LogDecoder
from .declarations import TypeApplication, TypeDeclaration
from .resolver import AbiResolver

__all__ = [
    "ABIFunction",
    "LoggedType",
    "Configurable",
    "ProgramABI",
    "load_schema",
    "validate_document",
]

log = logging.getLogger(__name__)

SCHEMA_FILE = "program_abi.schema.json"


@lru_cache(maxsize=1)
def load_schema() -> Dict[str, Any]:
    return json.loads((files(__package__) / SCHEMA_FILE).read_text(encoding="utf-8"))


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    return Draft202012Validator(load_schema())


def validate_document(doc: Any) -> None:
    errors = sorted(_validator().iter_errors(doc), key=lambda e: [str(p) for p in e.path])
    if not errors:
        return
    msgs = []
    for err in errors:
        loc = "/".join(str(p) for p in err.path) or "(root)"
        msgs.append(f"{loc}: {err.message}")
    raise InvalidType(
        f"program ABI does not match schema: {msgs[0]}"
        + (f" (+{len(msgs) - 1} more)" if len(msgs) > 1 else ""),
        context={"errors": msgs},
    )


# ──────────────────────────────────────────────────────────────────────────────
# Records
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ABIFunction:
    name: str
    inputs: Tuple[TypeApplication, ...]
    output: TypeApplication

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ABIFunction":
        return cls(
            name=d["name"],
            inputs=tuple(TypeApplication.from_dict(i) for i in d["inputs"]),
            output=TypeApplication.from_dict(d["output"]),
        )


@dataclass(frozen=True)
class LoggedType:
    log_id: int
    application: TypeApplication

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "LoggedType":
        return cls(int(d["logId"]), TypeApplication.from_dict(d["loggedType"]))


@dataclass(frozen=True)
class Configurable:
    name: str
    application: TypeApplication
    offset: int

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Configurable":
        return cls(d["name"], TypeApplication.from_dict(d["configurableType"]), int(d["offset"]))


# ──────────────────────────────────────────────────────────────────────────────
# ProgramABI
# ──────────────────────────────────────────────────────────────────────────────


class ProgramABI:
    def __init__(
        self,
        types: Sequence[TypeDeclaration],
        functions: Sequence[ABIFunction],
        logged_types: Sequence[LoggedType] = (),
        configurables: Sequence[Configurable] = (),
        *,
        max_depth: Optional[int] = None,
    ) -> None:
        self.types = tuple(types)
        self.functions: Dict[str, ABIFunction] = {f.name: f for f in functions}
        self.logged_types = tuple(logged_types)
        self.configurable_decls = tuple(configurables)
        self.resolver = AbiResolver(self.types, max_depth=max_depth)

    # --- loading -------------------------------------------------------------

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any], *, max_depth: Optional[int] = None) -> "ProgramABI":
        validate_document(doc)
        abi = cls(
            types=[TypeDeclaration.from_dict(t) for t in doc["types"]],
            functions=[ABIFunction.from_dict(f) for f in doc["functions"]],
            logged_types=[LoggedType.from_dict(t) for t in doc.get("loggedTypes") or ()],
            configurables=[Configurable.from_dict(c) for c in doc.get("configurables") or ()],
            max_depth=max_depth,
        )
        log.debug(
            "loaded program ABI: %d types, %d functions, %d logged types",
            len(abi.types),
            len(abi.functions),
            len(abi.logged_types),
        )
        return abi

    @classmethod
    def from_json(cls, source: Union[str, bytes], *, max_depth: Optional[int] = None) -> "ProgramABI":
        try:
            doc = json.loads(source)
        except json.JSONDecodeError as e:
            raise InvalidType(f"program ABI is not valid JSON: {e}") from e
        return cls.from_dict(doc, max_depth=max_depth)

    @classmethod
    def load(cls, path: Union[str, Path], *, max_depth: Optional[int] = None) -> "ProgramABI":
        return cls.from_json(Path(path).read_text(encoding="utf-8"), max_depth=max_depth)

    # --- functions -----------------------------------------------------------

    def function(self, name: str) -> ABIFunction:
        try:
            return self.functions[name]
        except KeyError:
            raise InvalidType(
                f"program ABI has no function {name!r}", context={"known": sorted(self.functions)}
            ) from None

    def param_types(self, name: str) -> List[ParamType]:
        return self.resolver.resolve_all(self.function(name).inputs)

    def output_type(self, name: str) -> ParamType:
        return self.resolver.resolve(self.function(name).output)

    def selector(self, name: str) -> bytes:
        return compute_selector(name, self.param_types(name))

    def encode_call(self, name: str, args: Sequence[Any]) -> CallData:
        """Tokenize native `args` (or Tokens) against the inputs of `name` and encode."""
        types = self.param_types(name)
        return encode_call(compute_selector(name, types), tokenize_all(args, types))

    def decode_output(self, name: str, data: bytes, *, base_offset: int = 0) -> Token:
        return decode_single(self.output_type(name), data, base_offset=base_offset)

    # --- logs & configurables ------------------------------------------------

    def log_decoder(self) -> LogDecoder:
        return LogDecoder({t.log_id: self.resolver.resolve(t.application) for t in self.logged_types})

    def configurables(self) -> Configurables:
        return Configurables(
            ConfigurableSlot(c.name, self.resolver.resolve(c.application), c.offset)
            for c in self.configurable_decls
        )
