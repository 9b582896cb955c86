#!/usr/bin/env python3
"""Passive bridge monitor.

Connects a :class:`helmlink.TelemetryBridge` to the configured broker and
logs every bridge event (connectivity, origin, ownship, heading, contacts).
Use this to check that a vehicle's topics are flowing before attaching a
console.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from dataclasses import dataclass, field
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from helmlink import BridgeConfig, TelemetryBridge  # noqa: E402
from helmlink.exceptions import HelmLinkConfigError  # noqa: E402
from helmlink.state.events import BridgeEvent, EventKind  # noqa: E402

_LOG = logging.getLogger("bridge_monitor")


@dataclass
class MonitorStats:
    counts: dict[EventKind, int] = field(default_factory=dict)

    def on_event(self, event: BridgeEvent) -> None:
        self.counts[event.kind] = self.counts.get(event.kind, 0) + 1


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Log telemetry bridge events.")
    parser.add_argument("--host", help="Broker host (overrides HELMLINK_BROKER_HOST).")
    parser.add_argument("--port", type=int, help="Broker port (overrides HELMLINK_BROKER_PORT).")
    parser.add_argument("--namespace", help="Topic namespace (overrides HELMLINK_NAMESPACE).")
    parser.add_argument(
        "--duration",
        type=int,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args()


def _log_event(event: BridgeEvent) -> None:
    _LOG.info("%s %s", event.kind.value, event.model_dump_json(exclude={"kind", "observed_at"}))


async def _run(config: BridgeConfig, duration: int) -> MonitorStats:
    stats = MonitorStats()
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, stop.set)

    async with TelemetryBridge(config, on_event=_log_event) as bridge:
        bridge.add_listener(stats.on_event)
        try:
            await asyncio.wait_for(stop.wait(), timeout=duration or None)
        except TimeoutError:
            pass
    return stats


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    overrides = {}
    if args.host:
        overrides["broker_host"] = args.host
    if args.port:
        overrides["broker_port"] = args.port
    if args.namespace:
        overrides["namespace"] = args.namespace

    try:
        config = BridgeConfig.from_env(**overrides)
    except (HelmLinkConfigError, ValueError) as exc:
        print(f"[monitor] Invalid configuration: {exc}", file=sys.stderr)
        return 2

    print(f"[monitor] broker={config.broker_host}:{config.broker_port} namespace={config.namespace}")
    stats = asyncio.run(_run(config, args.duration))

    print("[monitor] Summary")
    for kind, count in sorted(stats.counts.items()):
        print(f"  {kind.value}: {count}")
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
