#!/usr/bin/env python3
"""
vm-abi

Inspect a program ABI and encode/decode values against it.

Examples:
  # List every function with its signature and selector
  vm-abi selectors out/program-abi.json

  # Build call data for foo(u32, str[4]) placed at VM address 10240
  vm-abi encode out/program-abi.json foo '[42, "fuel"]' --base-offset 10240

  # Decode a return value
  vm-abi decode out/program-abi.json foo 0x000000000000002a

  # Decode the logs of a call
  vm-abi logs out/program-abi.json receipts.json

Output is text by default, JSON with --format json. Codec errors and
malformed input (bad JSON, bad hex) print `error: <code>: <message>` to
stderr and exit with status 2.
"""
from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from ..codec.selector import fn_signature
from ..convert import detokenize
from ..errors import CodecError, InvalidData
from ..logging import setup_logging
from ..receipts import receipt_from_dict
from ..schema.program_abi import ProgramABI
from ..version import __version__

# ---------------------- argparse ---------------------- #


def parse_args(argv: List[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="vm-abi", description="Encode and decode VM ABI data.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--format", choices=("text", "json"), default="text", help="Output format (default: text)")
    p.add_argument("--log-level", default="WARNING", help="Log level for stderr diagnostics (default: WARNING)")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("selectors", help="List function signatures and selectors")
    s.add_argument("abi", help="Path to a program ABI JSON file")

    e = sub.add_parser("encode", help="Encode call data for a function")
    e.add_argument("abi", help="Path to a program ABI JSON file")
    e.add_argument("function", help="Function name")
    e.add_argument("args", help="JSON array of arguments")
    e.add_argument("--base-offset", type=int, default=0, help="VM address the call data is placed at")
    e.add_argument("--contract-id", help="Hex contract id; emit full script data instead of call data")

    d = sub.add_parser("decode", help="Decode a function's return value")
    d.add_argument("abi", help="Path to a program ABI JSON file")
    d.add_argument("function", help="Function name")
    d.add_argument("data", help="Hex-encoded return data")
    d.add_argument("--base-offset", type=int, default=0, help="VM address the data was resolved at")

    lg = sub.add_parser("logs", help="Decode log receipts")
    lg.add_argument("abi", help="Path to a program ABI JSON file")
    lg.add_argument("receipts", help="Path to a JSON array of receipts ('-' for stdin)")
    return p.parse_args(argv)


# ---------------------- small utils ---------------------- #


def _unhex(s: str) -> bytes:
    h = s[2:] if s.startswith(("0x", "0X")) else s
    try:
        return bytes.fromhex(h)
    except ValueError:
        raise InvalidData(f"not a hex string: {s!r}") from None


def _load_json(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidData(f"{what} is not valid JSON: {e}") from None


def _jsonable(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray)):
        return "0x" + bytes(obj).hex()
    if isinstance(obj, dict):
        return {str(k): _jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_jsonable(x) for x in obj]
    return obj


def _emit(args: argparse.Namespace, out: Dict[str, Any], lines: List[str]) -> None:
    if args.format == "json":
        print(json.dumps(_jsonable(out), indent=2))
    else:
        for line in lines:
            print(line)


# ---------------------- commands ---------------------- #


def cmd_selectors(args: argparse.Namespace) -> int:
    abi = ProgramABI.load(args.abi)
    rows = []
    for name in abi.functions:
        types = abi.param_types(name)
        rows.append(
            {
                "function": name,
                "signature": fn_signature(name, types),
                "selector": "0x" + abi.selector(name).hex(),
            }
        )
    _emit(args, {"functions": rows}, [f"{r['selector']}  {r['signature']}" for r in rows])
    return 0


def cmd_encode(args: argparse.Namespace) -> int:
    abi = ProgramABI.load(args.abi)
    values = _load_json(args.args, "ARGS")
    if not isinstance(values, list):
        raise InvalidData("ARGS must be a JSON array")
    call = abi.encode_call(args.function, values)
    if args.contract_id:
        blob = call.script_data(_unhex(args.contract_id), args.base_offset)
    else:
        blob = call.to_bytes(args.base_offset)
    out = {
        "function": args.function,
        "selector": call.selector,
        "offset_word": call.needs_extra_offset_word,
        "data": blob,
    }
    _emit(args, out, ["0x" + blob.hex()])
    return 0


def cmd_decode(args: argparse.Namespace) -> int:
    abi = ProgramABI.load(args.abi)
    token = abi.decode_output(args.function, _unhex(args.data), base_offset=args.base_offset)
    value = detokenize(token, abi.output_type(args.function))
    _emit(args, {"function": args.function, "value": value}, [repr(value)])
    return 0


def cmd_logs(args: argparse.Namespace) -> int:
    abi = ProgramABI.load(args.abi)
    if args.receipts == "-":
        text = sys.stdin.read()
    else:
        with open(args.receipts, "r", encoding="utf-8") as f:
            text = f.read()
    raw = _load_json(text, "receipts")
    if not isinstance(raw, list):
        raise InvalidData("receipts must be a JSON array")
    receipts = [receipt_from_dict(r) for r in raw]
    logs = abi.log_decoder().fetch_logs(receipts)
    _emit(args, {"logs": logs}, logs)
    return 0


_COMMANDS = {
    "selectors": cmd_selectors,
    "encode": cmd_encode,
    "decode": cmd_decode,
    "logs": cmd_logs,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging(level=args.log_level)
    try:
        return _COMMANDS[args.command](args)
    except CodecError as e:
        print(f"error: {e.code}: {e.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
