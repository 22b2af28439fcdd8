"""Toy queueing world that feeds the schedulers in simulation mode."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

import numpy as np

from ..model import Direction, LightStateMap, PhaseColor


@dataclass(slots=True)
class SimVehicle:
    """Single vehicle on an approach; ``position`` is metres before the stop line."""

    position: float
    speed: float
    wait_time: float = 0.0
    stopped: bool = False

    @property
    def crossed(self) -> bool:
        return self.position < 0


@dataclass(slots=True)
class Approach:
    """Container describing a single approach in the simulation."""

    direction: Direction
    length: float = 220.0
    detection_length: float = 70.0
    arrival_rate_per_minute: float = 8.0
    max_speed: float = 12.0
    min_speed: float = 8.0
    min_gap: float = 7.0
    vehicles: List[SimVehicle] = field(default_factory=list)
    pending_arrivals: int = 0
    passed_since_green: int = 0
    total_passed: int = 0

    def expected_arrivals(self, dt: float) -> float:
        return (self.arrival_rate_per_minute / 60.0) * dt

    def spawn_waiting(self, rng: np.random.Generator) -> None:
        """Release queued arrivals once the entry point is free."""

        while self.pending_arrivals:
            if self.vehicles and self.vehicles[-1].position > self.length - self.min_gap:
                return
            speed = float(rng.uniform(self.min_speed, self.max_speed))
            self.vehicles.append(SimVehicle(position=self.length, speed=speed))
            self.pending_arrivals -= 1

    def advance(self, dt: float, may_cross: bool) -> None:
        """Move vehicles front to back, stopping at the line or behind a leader."""

        leader: Optional[SimVehicle] = None
        for vehicle in self.vehicles:
            limit = float("-inf")
            if leader is not None:
                limit = leader.position + self.min_gap
            if not may_cross and not vehicle.crossed:
                limit = max(limit, 0.0)

            target = max(vehicle.position - vehicle.speed * dt, limit)
            if target < vehicle.position:
                if vehicle.position >= 0 > target:
                    self.passed_since_green += 1
                    self.total_passed += 1
                vehicle.position = target
                vehicle.stopped = False
                vehicle.wait_time = 0.0
            else:
                vehicle.stopped = True
                vehicle.wait_time += dt
            leader = vehicle

        self.vehicles = [vehicle for vehicle in self.vehicles if vehicle.position > -20]

    def in_detection(self) -> List[SimVehicle]:
        return [v for v in self.vehicles if 0 <= v.position <= self.detection_length]

    def count_waiting(self) -> int:
        return sum(1 for vehicle in self.in_detection() if vehicle.stopped)

    def count_approaching(self) -> int:
        return sum(1 for vehicle in self.in_detection() if not vehicle.stopped)

    def front_wait(self) -> float:
        """Wait of the stopped vehicle nearest the stop line, ``0.0`` if none."""

        stopped = [vehicle for vehicle in self.in_detection() if vehicle.stopped]
        if not stopped:
            return 0.0
        return min(stopped, key=lambda vehicle: vehicle.position).wait_time


class SimulationWorld:
    """Encapsulates the toy traffic world with four approaches."""

    def __init__(self, approaches: Mapping[Direction, Approach], seed: int | None = None) -> None:
        missing = [d.value for d in Direction if d not in approaches]
        if missing:
            raise ValueError(f"Missing approaches for: {', '.join(missing)}")
        self.approaches: Dict[Direction, Approach] = dict(approaches)
        self.rng = np.random.default_rng(seed)
        self.elapsed = 0.0
        self._colors: Dict[Direction, PhaseColor] = {d: PhaseColor.RED for d in Direction}

    @classmethod
    def from_rates(cls, rates: Mapping[str, float], seed: int | None = None) -> "SimulationWorld":
        approaches = {
            d: Approach(direction=d, arrival_rate_per_minute=float(rates.get(d.value, 0.0)))
            for d in Direction
        }
        return cls(approaches, seed=seed)

    def update(self, dt: float, lights: LightStateMap) -> None:
        """Advance the world by ``dt`` seconds.

        Parameters
        ----------
        dt:
            Simulation time step in seconds.
        lights:
            Colours currently shown.  Red or yellow signals prevent vehicles
            from crossing the stop line.
        """

        self.elapsed += dt
        for direction, approach in self.approaches.items():
            color = lights[direction]
            if color is PhaseColor.GREEN and self._colors[direction] is not PhaseColor.GREEN:
                approach.passed_since_green = 0
            self._colors[direction] = color

            approach.pending_arrivals += int(self.rng.poisson(approach.expected_arrivals(dt)))
            approach.spawn_waiting(self.rng)
            approach.advance(dt, may_cross=color is PhaseColor.GREEN)

    def total_passed(self) -> int:
        return sum(approach.total_passed for approach in self.approaches.values())
