"""Predefined demand scripts for replaying the scheduler deterministically."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Sequence, Tuple

from .model import Direction, EMPTY_SNAPSHOT, Pair, SensorReadings, SensorSnapshot


def pair_demand(
    ns: SensorSnapshot = EMPTY_SNAPSHOT, we: SensorSnapshot = EMPTY_SNAPSHOT
) -> SensorReadings:
    """Build readings where both directions of a pair report the same values."""

    readings: Dict[Direction, SensorSnapshot] = {}
    for pair, snapshot in ((Pair.NS, ns), (Pair.WE, we)):
        for direction in pair.directions:
            readings[direction] = snapshot
    return readings


@dataclass(frozen=True)
class TrafficScenario:
    """Describes a repeatable sequence of sensor readings for the intersection."""

    name: str
    description: str
    readings: Tuple[SensorReadings, ...]
    step_seconds: float = 5.0

    def __post_init__(self) -> None:  # type: ignore[override]
        if not self.readings:
            raise ValueError("A scenario must contain at least one step")
        if self.step_seconds <= 0:
            raise ValueError("step_seconds must be positive")

    def __len__(self) -> int:
        return len(self.readings)

    @property
    def duration(self) -> float:
        return len(self.readings) * self.step_seconds

    def steps(self) -> Iterator[SensorReadings]:
        """Yield the readings for each time step."""

        for readings in self.readings:
            yield dict(readings)


def _repeat(readings: SensorReadings, count: int) -> List[SensorReadings]:
    return [readings] * count


def _scenario(
    name: str, description: str, phases: Sequence[Tuple[SensorReadings, int]], step_seconds: float
) -> TrafficScenario:
    readings: List[SensorReadings] = []
    for step, count in phases:
        readings.extend(_repeat(step, count))
    return TrafficScenario(name, description, tuple(readings), step_seconds)


def load_predefined_scenarios() -> List[TrafficScenario]:
    """Return curated scenarios that cover common traffic patterns."""

    busy = SensorSnapshot(cars_waiting=4, cars_approaching=2, front_wait_seconds=6.0)
    flowing = SensorSnapshot(cars_approaching=3, cars_passed=5)
    trickle = SensorSnapshot(cars_waiting=1, front_wait_seconds=2.0)

    ns_heavy = _scenario(
        "ns-heavy",
        "A steady platoon keeps the north-south arterial busy while the side "
        "street only sees the odd vehicle.",
        [
            (pair_demand(ns=busy), 1),
            (pair_demand(ns=flowing, we=trickle), 30),
        ],
        step_seconds=2.0,
    )

    alternating = _scenario(
        "alternating-surges",
        "Demand alternates between the two pairs, useful for validating the "
        "full switching cycle.",
        [
            (pair_demand(ns=busy), 2),
            (pair_demand(we=busy), 20),
            (pair_demand(ns=busy), 20),
            (pair_demand(we=busy), 20),
        ],
        step_seconds=2.0,
    )

    we_only = _scenario(
        "we-only",
        "Only the east-west pair ever reports vehicles.",
        [(pair_demand(we=busy), 30)],
        step_seconds=2.0,
    )

    return [ns_heavy, alternating, we_only]


def get_scenario(name: str) -> TrafficScenario:
    for scenario in load_predefined_scenarios():
        if scenario.name == name:
            return scenario
    known = ", ".join(s.name for s in load_predefined_scenarios())
    raise KeyError(f"Unknown scenario {name!r}; expected one of: {known}")
