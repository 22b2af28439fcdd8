"""Core value types shared by the schedulers, sensors and simulation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
import numbers
from typing import Dict, Mapping, Optional, Tuple


class Direction(str, Enum):
    """One of the four approaches into the intersection."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def pair(self) -> "Pair":
        if self in (Direction.NORTH, Direction.SOUTH):
            return Pair.NS
        return Pair.WE


class Pair(str, Enum):
    """Two opposite directions that always show the same colour."""

    NS = "NS"
    WE = "WE"

    @property
    def directions(self) -> Tuple[Direction, Direction]:
        if self is Pair.NS:
            return Direction.NORTH, Direction.SOUTH
        return Direction.WEST, Direction.EAST

    @property
    def other(self) -> "Pair":
        return Pair.WE if self is Pair.NS else Pair.NS


class PhaseColor(str, Enum):
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


class Phase(str, Enum):
    """Sub-state of the active pair inside :class:`PhaseScheduler`."""

    IDLE = "idle"
    GREEN = "green"
    YELLOW = "yellow"
    RED_CLEARANCE = "red_clearance"

    @property
    def color(self) -> PhaseColor:
        if self is Phase.GREEN:
            return PhaseColor.GREEN
        if self is Phase.YELLOW:
            return PhaseColor.YELLOW
        return PhaseColor.RED


@dataclass(frozen=True, slots=True)
class SensorSnapshot:
    """Per-direction measurements supplied by the sensor layer each tick.

    Attributes
    ----------
    cars_waiting:
        Vehicles stopped inside the detection zone.
    cars_approaching:
        Vehicles inside the detection zone that are still moving.
    cars_passed:
        Vehicles that crossed the stop line since this direction's current
        green began.
    front_wait_seconds:
        Elapsed wait of the earliest-stopped vehicle, ``0.0`` if none.
    """

    cars_waiting: int = 0
    cars_approaching: int = 0
    cars_passed: int = 0
    front_wait_seconds: float = 0.0

    @property
    def queue_pressure(self) -> float:
        """Waiting count scaled by the front vehicle's wait."""

        return self.cars_waiting * self.front_wait_seconds

    @classmethod
    def coerce(cls, value: object) -> "SensorSnapshot":
        """Build a snapshot from loosely typed input.

        Anything that is not a :class:`SensorSnapshot` or a mapping of valid,
        non-negative numbers results in an all-zero snapshot.
        """

        if isinstance(value, SensorSnapshot):
            if _is_valid(value):
                return value
            return EMPTY_SNAPSHOT
        if not isinstance(value, Mapping):
            return EMPTY_SNAPSHOT
        try:
            snapshot = cls(
                cars_waiting=_as_count(value.get("cars_waiting", 0)),
                cars_approaching=_as_count(value.get("cars_approaching", 0)),
                cars_passed=_as_count(value.get("cars_passed", 0)),
                front_wait_seconds=_as_seconds(value.get("front_wait_seconds", 0.0)),
            )
        except (TypeError, ValueError):
            return EMPTY_SNAPSHOT
        return snapshot


EMPTY_SNAPSHOT = SensorSnapshot()


def _as_count(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise TypeError(f"count must be numeric, got {value!r}")
    if not math.isfinite(value) or value < 0 or int(value) != value:
        raise ValueError(f"count must be a non-negative integer, got {value!r}")
    return int(value)


def _as_seconds(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise TypeError(f"seconds must be numeric, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"seconds must be non-negative, got {value!r}")
    return float(value)


def _is_valid(snapshot: SensorSnapshot) -> bool:
    try:
        _as_count(snapshot.cars_waiting)
        _as_count(snapshot.cars_approaching)
        _as_count(snapshot.cars_passed)
        _as_seconds(snapshot.front_wait_seconds)
    except (TypeError, ValueError):
        return False
    return True


def _as_direction(key: object) -> Optional[Direction]:
    if isinstance(key, Direction):
        return key
    if isinstance(key, str):
        try:
            return Direction(key.lower())
        except ValueError:
            return None
    return None


SensorReadings = Dict[Direction, SensorSnapshot]


def normalise_readings(readings: Optional[Mapping[object, object]]) -> SensorReadings:
    """Return a complete ``Direction -> SensorSnapshot`` mapping.

    Keys may be :class:`Direction` members or their lowercase names.  Unknown
    keys are ignored and absent or malformed entries become all-zero
    snapshots, so the result always covers all four directions.
    """

    result: SensorReadings = {direction: EMPTY_SNAPSHOT for direction in Direction}
    if not isinstance(readings, Mapping):
        return result
    for key, value in readings.items():
        direction = _as_direction(key)
        if direction is None:
            continue
        result[direction] = SensorSnapshot.coerce(value)
    return result


@dataclass(frozen=True, slots=True)
class LightStateMap:
    """Colour shown to each direction for one tick."""

    north: PhaseColor = PhaseColor.RED
    south: PhaseColor = PhaseColor.RED
    east: PhaseColor = PhaseColor.RED
    west: PhaseColor = PhaseColor.RED

    def __getitem__(self, direction: Direction) -> PhaseColor:
        return getattr(self, direction.value)

    @classmethod
    def for_pair(cls, pair: Optional[Pair], color: PhaseColor) -> "LightStateMap":
        """Give ``pair`` the ``color`` and hold every other direction at red."""

        colors = {direction.value: PhaseColor.RED for direction in Direction}
        if pair is not None:
            for direction in pair.directions:
                colors[direction.value] = color
        return cls(**colors)

    def as_dict(self) -> Dict[Direction, PhaseColor]:
        return {direction: self[direction] for direction in Direction}

    def greens(self) -> Tuple[Direction, ...]:
        return tuple(d for d in Direction if self[d] is PhaseColor.GREEN)

    def all_red(self) -> bool:
        return all(self[d] is PhaseColor.RED for d in Direction)


ALL_RED = LightStateMap()
