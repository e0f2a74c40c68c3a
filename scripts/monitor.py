#!/usr/bin/env python3
"""Live tank monitor for the pybiogas serial gateway.

This script:
1) lists serial ports (``--list-ports``), or
2) opens the gateway on a port (``--port`` / ``PYBIOGAS_PORT``),
3) optionally switches relays and/or enables demo mode,
4) prints every state change as one JSON line until Ctrl+C or ``--duration``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pybiogas import BiogasGateway, EndpointUnavailableError, GatewayConfig, StateChange  # noqa: E402

_LOG = logging.getLogger("monitor")


def _parse_relay(value: str) -> tuple[int, bool]:
    relay, _, state = value.partition("=")
    if relay not in {"1", "2"} or state.lower() not in {"on", "off"}:
        raise argparse.ArgumentTypeError("expected 1=on, 1=off, 2=on or 2=off")
    return int(relay), state.lower() == "on"


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Monitor biogas tank telemetry over serial.",
    )
    parser.add_argument(
        "--list-ports",
        action="store_true",
        help="List available serial ports and exit.",
    )
    parser.add_argument(
        "--port",
        help="Serial device (defaults to PYBIOGAS_PORT or the first listed port).",
    )
    parser.add_argument(
        "--baudrate",
        type=int,
        default=None,
        help="Baud rate of the controller sketch (default 9600).",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Enable demo mode; without a port, telemetry is fully simulated.",
    )
    parser.add_argument(
        "--no-serial",
        action="store_true",
        help="Do not open a serial port (useful with --demo).",
    )
    parser.add_argument(
        "--relay",
        type=_parse_relay,
        action="append",
        default=[],
        help="Relay command to send after connecting, e.g. 1=on. May be repeated.",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


def _print_change(change: StateChange) -> None:
    print(json.dumps(change.model_dump(mode="json"), separators=(",", ":")), flush=True)


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, object] = {}
    if args.port:
        overrides["port"] = args.port
    if args.baudrate is not None:
        overrides["baudrate"] = args.baudrate
    config = GatewayConfig.from_env(**overrides)

    async with BiogasGateway(config) as gateway:
        gateway.subscribe(_print_change)

        if args.demo:
            await gateway.connect_demo()
            reading = await gateway.read_npk()
            if reading is not None:
                _LOG.info("NPK n=%d p=%d k=%d", reading.n, reading.p, reading.k)

        if not args.no_serial:
            try:
                if not await gateway.open():
                    return 1
            except EndpointUnavailableError as exc:
                print(f"[monitor] Connection failed: {exc}", file=sys.stderr)
                return 2

        for relay_id, on in args.relay:
            await gateway.toggle_relay(relay_id, on)

        if args.duration > 0:
            await asyncio.sleep(args.duration)
        else:
            await asyncio.Event().wait()
    return 0


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list_ports:
        for port in BiogasGateway.list_ports():
            print(f"{port.device}\t{port.description}")
        return 0

    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(_main())
