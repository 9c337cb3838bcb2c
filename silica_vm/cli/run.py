#!/usr/bin/env python3
"""
silica vm run

Run a single entry point of a bundled Chert contract against a JSON-persisted
store.

Examples:
  python -m silica_vm.cli.run --contract crc20 --state /tmp/cht.json --sender alice \
      --call initialize --args '{"name": "Chert Token", "symbol": "CHT", "decimals": 18, "initial_supply": 1000}'
  python -m silica_vm.cli.run --contract crc20 --state /tmp/cht.json --sender alice \
      --call balance_of --args '{"account": "alice"}'

Notes:
- The state file maps hex-encoded storage keys to hex-encoded values. It is
  created on first use and rewritten only when the call succeeds.
- Strings like "0x…" in --args stay strings unless --hex-as-bytes is given.
- No network access. This is a local runner for development.

Exit codes:
  0 on success, 1 when the entry point reports a failure, 2 on usage errors.
"""

from __future__ import annotations

import argparse
import importlib
import json
import os
import sys
from typing import Any, Dict, Mapping

from silica_vm import logging as slog
from silica_vm.errors import FatalError
from silica_vm.runtime.host import Host
from silica_vm.runtime.storage_api import MemoryBackend

CONTRACTS: Dict[str, str] = {
    "crc20": "chert_contracts.crc20.contract",
    "crc721": "chert_contracts.crc721.contract",
}

# ---------------------- small utils ---------------------- #


def _parse_args_json(s: str | None) -> Dict[str, Any]:
    if not s or not s.strip():
        return {}
    try:
        val = json.loads(s)
    except json.JSONDecodeError as e:
        raise SystemExit(f"--args is not valid JSON: {e}")
    if isinstance(val, dict):
        return val
    raise SystemExit("--args must be a JSON object, e.g. --args '{\"to\": \"bob\", \"amount\": 5}'")


def _maybe_hex_to_bytes(x: Any) -> Any:
    if isinstance(x, str) and x.startswith("0x") and len(x) > 3:
        try:
            return bytes.fromhex(x[2:])
        except ValueError:
            return x
    if isinstance(x, list):
        return [_maybe_hex_to_bytes(v) for v in x]
    if isinstance(x, dict):
        return {k: _maybe_hex_to_bytes(v) for k, v in x.items()}
    return x


def load_state(path: str) -> MemoryBackend:
    if not os.path.exists(path):
        return MemoryBackend()
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise SystemExit(f"state file {path} must hold a JSON object")
    return MemoryBackend({bytes.fromhex(k): bytes.fromhex(v) for k, v in raw.items()})


def save_state(path: str, backend: MemoryBackend) -> None:
    data = {k.hex(): v.hex() for k, v in backend.items()}
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True)
        f.write("\n")
    os.replace(tmp, path)


def _entry_points(contract: str) -> Mapping[str, Any]:
    mod = importlib.import_module(CONTRACTS[contract])
    return mod.ENTRY_POINTS


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="silica-vm-run", description="Run one Chert contract call on the Silica host.")
    p.add_argument("--contract", required=True, choices=sorted(CONTRACTS), help="Contract to invoke")
    p.add_argument("--state", required=True, help="Path to the JSON state file")
    p.add_argument("--sender", required=True, help="Caller address")
    p.add_argument("--call", "-c", required=True, help="Entry point name")
    p.add_argument("--args", help="JSON object of arguments")
    p.add_argument("--height", type=int, default=0, help="Block height exposed to the contract")
    p.add_argument("--timestamp", type=int, default=0, help="Block timestamp exposed to the contract")
    p.add_argument("--hex-as-bytes", action="store_true", help="Interpret '0x..' strings in --args as bytes")
    p.add_argument("--format", choices=("text", "json"), default="json", help="Output format")
    p.add_argument("--log-level", default=None, help="Log level (default: SILICA_LOG_LEVEL or INFO)")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    slog.configure(json=False, level=args.log_level)

    call_args = _parse_args_json(args.args)
    if args.hex_as_bytes:
        call_args = _maybe_hex_to_bytes(call_args)

    backend = load_state(args.state)
    host = Host(
        backend,
        contract=args.contract,
        block_height=args.height,
        block_timestamp=args.timestamp,
    )
    try:
        res = host.invoke(_entry_points(args.contract), args.call, args.sender, call_args)
    except FatalError as e:
        print(json.dumps({"ok": False, "error": e.to_dict()}, indent=2))
        return 1

    if res.ok:
        save_state(args.state, backend)

    out = res.to_dict()
    if args.format == "json":
        print(json.dumps(out, indent=2, default=str))
    else:
        print(f"OK: {res.ok}")
        print(f"Result: {res.value!r}")
        for e in out["events"]:
            print(f"  event {e['name']}: {e['fields']}")
        for line in res.logs:
            print(f"  log: {line}")
        if res.error:
            print(f"Error: {res.error['code']}: {res.error['message']}")
    return 0 if res.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
