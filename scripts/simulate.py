#!/usr/bin/env python3
"""Replay the demo fleet in the terminal.

Starts a simulation session, lets the clock run for a while and prints
where every demo asset is once per real second.

Usage
-----
::

    python scripts/simulate.py                 # built-in fleet, 1x demo speed
    python scripts/simulate.py --rate 3 --seconds 20
    python scripts/simulate.py --fleet my_fleet.json --summary

Options::

    --rate N          Playback multiplier (demo: 0.1 0.25 0.5 1 1.5 2 3)
    --seconds N       Real seconds to run (default: 10)
    --fleet FILE      JSON fleet file instead of the built-in fleet
    --strict-order    Reject traces whose timestamps go backwards
    --summary         Print journey summaries before running
    --json            Print snapshots as JSON lines
    -v, --verbose     Enable DEBUG logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from trackdash import DashboardConfig, SimulationSession, format_duration  # noqa: E402


def _print_summaries(session: SimulationSession) -> None:
    for asset in session.assets:
        s = session.summary(asset.id)
        print(
            f"{asset.display_name:<22} {s.checkpoint_count:>3} checkpoints  "
            f"{s.total_distance_km:7.2f} km  {s.average_speed_kmh:6.1f} km/h  "
            f"{format_duration(s.duration_minutes):>8}  {s.journey_state}"
        )
    print()


def _print_snapshot(session: SimulationSession, *, as_json: bool) -> None:
    views = session.asset_views()
    if as_json:
        payload = {
            "time": session.current_time().isoformat(),
            "assets": [view.model_dump(mode="json") for view in views],
        }
        print(json.dumps(payload, ensure_ascii=False))
        return

    print(f"── {session.current_time().isoformat()} ({session.clock.mode}, {session.clock.rate}x)")
    for view in views:
        where = "-" if view.position is None else f"{view.position.lat:.5f}, {view.position.lng:.5f}"
        print(f"   {view.display_name:<22} {view.status.value:<10} {where}")


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, object] = {"mode": "demo", "default_rate": args.rate}
    if args.strict_order:
        overrides["strict_trace_order"] = True
    if args.fleet:
        overrides["fleet_file"] = args.fleet
    config = DashboardConfig.from_env(**overrides)
    async with SimulationSession(config) as session:
        if args.summary:
            _print_summaries(session)
        for _ in range(args.seconds):
            _print_snapshot(session, as_json=args.json)
            await asyncio.sleep(1.0)
        _print_snapshot(session, as_json=args.json)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Replay the trackdash demo fleet")
    parser.add_argument("--rate", type=float, default=1.0, help="Playback multiplier")
    parser.add_argument("--seconds", type=int, default=10, help="Real seconds to run")
    parser.add_argument("--fleet", default=None, help="JSON fleet file")
    parser.add_argument("--strict-order", action="store_true", help="Reject unordered traces")
    parser.add_argument("--summary", action="store_true", help="Print journey summaries first")
    parser.add_argument("--json", action="store_true", help="Print snapshots as JSON lines")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
