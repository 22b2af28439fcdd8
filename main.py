"""Command line entry point for the adaptive intersection signal scheduler."""

from __future__ import annotations

import argparse
from dataclasses import replace
import logging
import sys

from adaptive_signal import IntersectionSystem, RunConfig, SignalError, load_config
from adaptive_signal.metrics import MetricSnapshot

logger = logging.getLogger(__name__)

_TIMING_FLAGS = {
    "green_min": "green_min_seconds",
    "green_max": "green_max_seconds",
    "yellow": "yellow_seconds",
    "red_clearance": "red_clearance_seconds",
    "green_lock": "green_lock_seconds",
    "threshold": "switch_threshold",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config", help="JSON or YAML file with run/scheduler/fixed sections")
    parser.add_argument("--mode", choices=["adaptive", "fixed"])
    parser.add_argument("--source", choices=["simulation", "scenario"])
    parser.add_argument("--scenario", help="Scenario name used with --source scenario")
    parser.add_argument("--duration", type=float, help="Simulated seconds to run")
    parser.add_argument("--tick", type=float, help="Seconds per tick")
    parser.add_argument("--seed", type=int)
    parser.add_argument("--rate-ns", type=float, help="Arrivals per minute on north and south")
    parser.add_argument("--rate-we", type=float, help="Arrivals per minute on west and east")
    parser.add_argument("--green-min", type=float)
    parser.add_argument("--green-max", type=float)
    parser.add_argument("--yellow", type=float)
    parser.add_argument("--red-clearance", type=float)
    parser.add_argument("--green-lock", type=float)
    parser.add_argument("--threshold", type=float, help="Fairness/efficiency switch ratio")
    parser.add_argument(
        "--min-green-as-floor",
        action="store_true",
        help="Treat minimum green as a floor for the threshold instead of a switch trigger",
    )
    parser.add_argument(
        "--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"]
    )
    return parser


def build_config(args: argparse.Namespace) -> RunConfig:
    """Merge an optional config file with command line overrides."""

    config = load_config(args.config) if args.config else RunConfig()

    for flag, attr in (
        ("mode", "mode"),
        ("source", "source"),
        ("scenario", "scenario"),
        ("duration", "duration_seconds"),
        ("tick", "tick_seconds"),
        ("seed", "seed"),
    ):
        value = getattr(args, flag)
        if value is not None:
            setattr(config, attr, value)

    rates = dict(config.arrival_rates)
    if args.rate_ns is not None:
        rates.update(north=args.rate_ns, south=args.rate_ns)
    if args.rate_we is not None:
        rates.update(west=args.rate_we, east=args.rate_we)

    overrides = {
        attr: getattr(args, flag)
        for flag, attr in _TIMING_FLAGS.items()
        if getattr(args, flag) is not None
    }
    if args.min_green_as_floor:
        overrides["min_green_as_floor"] = True

    # rebuild so validation runs on the merged values
    return RunConfig(
        mode=config.mode,
        source=config.source,
        scenario=config.scenario,
        duration_seconds=config.duration_seconds,
        tick_seconds=config.tick_seconds,
        seed=config.seed,
        arrival_rates=rates,
        scheduler=replace(config.scheduler, **overrides),
        fixed=config.fixed,
    )


def report(summary: MetricSnapshot) -> None:
    logger.info("Simulated %.0fs in %d ticks", summary.elapsed_seconds, summary.ticks)
    logger.info("Pair switches: %d", summary.pair_switches)
    for reason, count in sorted(summary.transitions_by_reason.items()):
        logger.info("  %-18s %d", reason, count)
    for pair, seconds in summary.green_seconds.items():
        logger.info("Green time %s: %.1fs", pair, seconds)
    logger.info("All-red time: %.1fs", summary.all_red_seconds)
    logger.info("Average vehicles waiting: %.2f", summary.average_waiting)
    logger.info("Vehicles passed: %d", summary.vehicles_passed)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level)

    try:
        config = build_config(args)
        system = IntersectionSystem(config)
        summary = system.run()
    except SignalError as exc:
        logger.error("Invalid configuration or input: %s", exc)
        return 2
    except OSError as exc:
        logger.error("Could not read configuration: %s", exc)
        return 2

    report(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
