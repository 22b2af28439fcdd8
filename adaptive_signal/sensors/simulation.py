"""Sensor aggregator using the internal simulation state."""

from __future__ import annotations

from dataclasses import dataclass

from .base import SensorAggregator
from ..model import Direction, LightStateMap, SensorReadings, SensorSnapshot
from ..simulation.world import Approach, SimulationWorld


@dataclass(slots=True)
class WorldSensorConfig:
    """Configuration for :class:`WorldSensorAggregator`."""

    world: SimulationWorld


class WorldSensorAggregator(SensorAggregator):
    """Advance a :class:`SimulationWorld` and read its detection zones."""

    def __init__(self, config: WorldSensorConfig) -> None:
        self.config = config

    @property
    def world(self) -> SimulationWorld:
        return self.config.world

    @staticmethod
    def read(approach: Approach) -> SensorSnapshot:
        return SensorSnapshot(
            cars_waiting=approach.count_waiting(),
            cars_approaching=approach.count_approaching(),
            cars_passed=approach.passed_since_green,
            front_wait_seconds=approach.front_wait(),
        )

    def step(self, delta_time: float, lights: LightStateMap) -> SensorReadings:
        self.world.update(delta_time, lights)
        return {d: self.read(self.world.approaches[d]) for d in Direction}

    def close(self) -> None:  # pragma: no cover - nothing to release
        return None
