"""Sensor feed replaying a scripted :class:`TrafficScenario`."""

from __future__ import annotations

from dataclasses import dataclass

from .base import SensorAggregator
from ..model import LightStateMap, SensorReadings, normalise_readings
from ..scenarios import TrafficScenario


@dataclass(slots=True)
class ScriptedFeedConfig:
    """Configuration for :class:`ScriptedSensorFeed`."""

    scenario: TrafficScenario
    loop: bool = False


class ScriptedSensorFeed(SensorAggregator):
    """Emit one scenario step every ``scenario.step_seconds`` of simulated time.

    Once the script is exhausted the final step is repeated, or the script
    starts over when ``loop`` is set.
    """

    def __init__(self, config: ScriptedFeedConfig) -> None:
        self.config = config
        self._steps = list(config.scenario.steps())
        self._elapsed = 0.0

    @property
    def index(self) -> int:
        position = int(self._elapsed // self.config.scenario.step_seconds)
        if self.config.loop:
            return position % len(self._steps)
        return min(position, len(self._steps) - 1)

    def step(self, delta_time: float, lights: LightStateMap) -> SensorReadings:
        readings = normalise_readings(self._steps[self.index])
        self._elapsed += delta_time
        return readings

    def close(self) -> None:  # pragma: no cover - nothing to release
        return None
