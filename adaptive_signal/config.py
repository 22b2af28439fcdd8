"""Configuration dataclasses for the intersection signal schedulers."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
import json
import math
import numbers
from pathlib import Path
from typing import Any, Literal, Mapping, Type, TypeVar

import yaml

from .errors import InvalidConfig


ModeLiteral = Literal["adaptive", "fixed"]
SourceLiteral = Literal["simulation", "scenario"]

_C = TypeVar("_C")

_DIRECTION_NAMES = ("north", "south", "east", "west")


def _require_positive(name: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidConfig(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise InvalidConfig(f"{name} must be a positive number of seconds, got {value!r}")


def _build(cls: Type[_C], mapping: Mapping[str, Any], section: str) -> _C:
    if not isinstance(mapping, Mapping):
        raise InvalidConfig(f"'{section}' section must be a mapping")
    known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
    unknown = sorted(set(mapping) - known)
    if unknown:
        raise InvalidConfig(f"Unknown {section} option(s): {', '.join(unknown)}")
    return cls(**mapping)


@dataclass(frozen=True, slots=True)
class SchedulerConfig:
    """Timing and scoring parameters for :class:`~adaptive_signal.scheduler.PhaseScheduler`.

    Parameters
    ----------
    green_min_seconds:
        Phase time after which a green is switched away from.
    green_max_seconds:
        Hard cap on a single green phase.
    yellow_seconds:
        Duration of the yellow change interval.
    red_clearance_seconds:
        All-red interval between yellow ending and the next green.
    green_lock_seconds:
        Window at the start of (and after every surviving evaluation of) a
        green phase during which no switch evaluation takes place.
    switch_threshold:
        Factor by which the waiting pair's fairness score must exceed the
        active pair's efficiency score to trigger a switch.
    min_green_as_floor:
        When ``True`` the minimum green only gates the threshold trigger
        instead of forcing a switch on its own.
    """

    green_min_seconds: float = 30.0
    green_max_seconds: float = 100.0
    yellow_seconds: float = 3.0
    red_clearance_seconds: float = 2.0
    green_lock_seconds: float = 5.0
    switch_threshold: float = 1.5
    min_green_as_floor: bool = False

    def __post_init__(self) -> None:
        _require_positive("green_min_seconds", self.green_min_seconds)
        _require_positive("green_max_seconds", self.green_max_seconds)
        _require_positive("yellow_seconds", self.yellow_seconds)
        _require_positive("red_clearance_seconds", self.red_clearance_seconds)
        _require_positive("green_lock_seconds", self.green_lock_seconds)
        if isinstance(self.switch_threshold, bool) or not isinstance(
            self.switch_threshold, numbers.Real
        ):
            raise InvalidConfig(f"switch_threshold must be a number, got {self.switch_threshold!r}")
        if not math.isfinite(self.switch_threshold) or self.switch_threshold <= 0:
            raise InvalidConfig(f"switch_threshold must be positive, got {self.switch_threshold!r}")
        if self.green_min_seconds >= self.green_max_seconds:
            raise InvalidConfig(
                "green_min_seconds must be lower than green_max_seconds "
                f"({self.green_min_seconds} >= {self.green_max_seconds})"
            )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SchedulerConfig":
        return _build(cls, mapping, "scheduler")


@dataclass(frozen=True, slots=True)
class FixedCycleConfig:
    """Durations for the legacy fixed-timer round-robin."""

    green_seconds: float = 30.0
    yellow_seconds: float = 3.0
    all_red_seconds: float = 3.0

    def __post_init__(self) -> None:
        _require_positive("green_seconds", self.green_seconds)
        _require_positive("yellow_seconds", self.yellow_seconds)
        _require_positive("all_red_seconds", self.all_red_seconds)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "FixedCycleConfig":
        return _build(cls, mapping, "fixed")


@dataclass(slots=True)
class RunConfig:
    """Runtime configuration for :class:`adaptive_signal.system.IntersectionSystem`.

    Parameters
    ----------
    mode:
        ``"adaptive"`` runs :class:`PhaseScheduler`, ``"fixed"`` the
        unconditional round-robin.
    source:
        ``"simulation"`` feeds the scheduler from the toy queueing world while
        ``"scenario"`` replays one of the predefined demand scripts.
    scenario:
        Name of the scripted scenario used when ``source == "scenario"``.
    duration_seconds, tick_seconds:
        Simulated run length and step size.
    seed:
        Seed for the simulation world's arrival process.
    arrival_rates:
        Expected arrivals per minute for each direction (``north`` ...).
    """

    mode: ModeLiteral = "adaptive"
    source: SourceLiteral = "simulation"
    scenario: str = "alternating-surges"
    duration_seconds: float = 600.0
    tick_seconds: float = 0.5
    seed: int | None = None
    arrival_rates: dict[str, float] = field(
        default_factory=lambda: {"north": 10.0, "south": 10.0, "east": 6.0, "west": 6.0}
    )
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    fixed: FixedCycleConfig = field(default_factory=FixedCycleConfig)

    def __post_init__(self) -> None:
        if self.mode not in ("adaptive", "fixed"):
            raise InvalidConfig(f"Unsupported mode: {self.mode!r}")
        if self.source not in ("simulation", "scenario"):
            raise InvalidConfig(f"Unsupported source: {self.source!r}")
        _require_positive("duration_seconds", self.duration_seconds)
        _require_positive("tick_seconds", self.tick_seconds)
        if self.seed is not None and (
            isinstance(self.seed, bool)
            or not isinstance(self.seed, numbers.Integral)
            or self.seed < 0
        ):
            raise InvalidConfig(f"seed must be a non-negative integer, got {self.seed!r}")
        for name, rate in self.arrival_rates.items():
            if name not in _DIRECTION_NAMES:
                raise InvalidConfig(f"Unknown direction in arrival_rates: {name!r}")
            if isinstance(rate, bool) or not isinstance(rate, numbers.Real) or rate < 0:
                raise InvalidConfig(f"arrival rate for {name!r} must be non-negative, got {rate!r}")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "RunConfig":
        """Build a configuration object from a dictionary-like source."""

        if not isinstance(mapping, Mapping):
            raise InvalidConfig("Configuration must be a mapping at the top level")
        unknown = sorted(set(mapping) - {"run", "scheduler", "fixed"})
        if unknown:
            raise InvalidConfig(f"Unknown configuration section(s): {', '.join(unknown)}")

        run_section = mapping.get("run") or {}
        if not isinstance(run_section, Mapping):
            raise InvalidConfig("'run' section must be a mapping")
        run = dict(run_section)
        for reserved in ("scheduler", "fixed"):
            if reserved in run:
                raise InvalidConfig(f"'{reserved}' must be a top-level section")
        scheduler = SchedulerConfig.from_mapping(mapping.get("scheduler") or {})
        fixed = FixedCycleConfig.from_mapping(mapping.get("fixed") or {})
        if "arrival_rates" in run:
            if not isinstance(run["arrival_rates"], Mapping):
                raise InvalidConfig("arrival_rates must be a mapping of direction to rate")
            run["arrival_rates"] = {**cls().arrival_rates, **run["arrival_rates"]}
        run_config: RunConfig = _build(cls, run, "run")
        run_config.scheduler = scheduler
        run_config.fixed = fixed
        return run_config


def load_config(path: str | Path) -> RunConfig:
    """Load a :class:`RunConfig` from a JSON or YAML file."""

    path = Path(path).expanduser()
    content = path.read_text()
    try:
        if path.suffix.lower() in {".yml", ".yaml"}:
            mapping = yaml.safe_load(content)
        else:
            mapping = json.loads(content)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise InvalidConfig(f"Could not parse {path}: {exc}") from exc

    if mapping is None:
        mapping = {}
    if not isinstance(mapping, Mapping):
        raise InvalidConfig("Configuration file must contain a mapping at the top level.")
    return RunConfig.from_mapping(mapping)
