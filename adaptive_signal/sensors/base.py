"""Sensor aggregation abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import LightStateMap, SensorReadings


class SensorAggregator(ABC):
    """Abstract interface for any component producing per-direction snapshots."""

    @abstractmethod
    def step(self, delta_time: float, lights: LightStateMap) -> SensorReadings:
        """Advance by one tick under ``lights`` and return the latest readings."""

    @abstractmethod
    def close(self) -> None:
        """Release any resources held by the aggregator."""
