"""Command-line entrypoint for twilight_tracker."""

from __future__ import annotations

import argparse
import json
import logging
import threading
from collections.abc import Sequence
from datetime import UTC, datetime

from twilight_tracker.astro.solar import AstralTwilightCalculator, TwilightCalculationError
from twilight_tracker.contracts import Location, TwilightState
from twilight_tracker.ingest.location_providers import StaticLocationSource
from twilight_tracker.orchestrate.service import TwilightService
from twilight_tracker.state.evaluator import StateEvaluator
from twilight_tracker.time.clock import SystemClock, resolve_timezone, to_utc


def _parse_iso_datetime(value: str) -> datetime:
    """Parse ISO datetime string and normalize to aware UTC."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid datetime: {value}") from exc
    return to_utc(parsed)


class _PrintingListener:
    """Writes every published state to stdout as one JSON line."""

    def __init__(self, clock: SystemClock) -> None:
        self._clock = clock

    def on_twilight_state_changed(self, state: TwilightState | None) -> None:
        payload = None if state is None else state.to_dict(now=self._clock.now())
        print(json.dumps({"state": payload}, sort_keys=True), flush=True)


def build_parser() -> argparse.ArgumentParser:
    """Create and return the top-level CLI parser."""
    parser = argparse.ArgumentParser(
        prog="twilight_tracker",
        description="Twilight state tracker command-line interface.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )

    subparsers = parser.add_subparsers(dest="command")
    evaluate = subparsers.add_parser(
        "evaluate",
        help="Print the twilight state for one location and instant as JSON.",
    )
    evaluate.add_argument("--lat", type=float, required=True)
    evaluate.add_argument("--lon", type=float, required=True)
    evaluate.add_argument("--at", type=_parse_iso_datetime, default=None)
    evaluate.add_argument("--timezone", default=None)

    watch = subparsers.add_parser(
        "watch",
        help="Track a fixed location and print every twilight change until interrupted.",
    )
    watch.add_argument("--lat", type=float, required=True)
    watch.add_argument("--lon", type=float, required=True)
    watch.add_argument("--timezone", default=None)

    return parser


def _cmd_evaluate(args: argparse.Namespace) -> int:
    now = args.at or datetime.now(UTC)
    evaluator = StateEvaluator(AstralTwilightCalculator())
    try:
        state = evaluator.evaluate(
            Location(latitude=args.lat, longitude=args.lon, provider="cli"),
            now,
            resolve_timezone(args.timezone),
        )
    except TwilightCalculationError as exc:
        print(json.dumps({"state": None, "error": str(exc)}, sort_keys=True))
        return 1
    payload = None if state is None else state.to_dict(now=now)
    print(json.dumps({"state": payload}, sort_keys=True))
    return 0


def _cmd_watch(args: argparse.Namespace) -> int:
    clock = SystemClock(args.timezone)
    service = TwilightService(
        location_source=StaticLocationSource(args.lat, args.lon),
        clock=clock,
    )
    service.register_listener(_PrintingListener(clock))
    service.start()
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        pass
    finally:
        service.stop()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI application."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "evaluate":
        return _cmd_evaluate(args)
    if args.command == "watch":
        return _cmd_watch(args)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
