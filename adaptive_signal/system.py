"""High level orchestration of the intersection signal scheduler."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from .base import SignalScheduler
from .config import RunConfig
from .errors import InvalidConfig
from .events import CompositeEventSink, EventSink, LoggingEventSink
from .fixed import FixedCycleScheduler
from .metrics import MetricsCollector, MetricSnapshot
from .model import LightStateMap
from .scenarios import get_scenario
from .scheduler import PhaseScheduler
from .sensors.base import SensorAggregator
from .sensors.scripted import ScriptedFeedConfig, ScriptedSensorFeed
from .sensors.simulation import WorldSensorAggregator, WorldSensorConfig
from .simulation.world import SimulationWorld

logger = logging.getLogger(__name__)


class SourceStrategy(ABC):
    """Strategy pattern implementation for the different sensor sources."""

    def __init__(self, aggregator: SensorAggregator) -> None:
        self.aggregator = aggregator

    @abstractmethod
    def passed_since_last(self) -> int:
        """Vehicles that crossed a stop line since the previous call."""

    def close(self) -> None:
        self.aggregator.close()


class SimulationSourceStrategy(SourceStrategy):
    """Sensor readings come from the toy queueing world."""

    def __init__(self, config: RunConfig) -> None:
        self.world = SimulationWorld.from_rates(config.arrival_rates, seed=config.seed)
        super().__init__(WorldSensorAggregator(WorldSensorConfig(world=self.world)))
        self._seen_passed = 0

    def passed_since_last(self) -> int:
        total = self.world.total_passed()
        delta, self._seen_passed = total - self._seen_passed, total
        return delta


class ScenarioSourceStrategy(SourceStrategy):
    """Sensor readings replay a predefined scenario."""

    def __init__(self, config: RunConfig) -> None:
        try:
            self.scenario = get_scenario(config.scenario)
        except KeyError as exc:
            raise InvalidConfig(exc.args[0]) from exc
        super().__init__(ScriptedSensorFeed(ScriptedFeedConfig(scenario=self.scenario)))

    def passed_since_last(self) -> int:
        return 0


def build_scheduler(config: RunConfig, event_sink: EventSink | None = None) -> SignalScheduler:
    if config.mode == "fixed":
        return FixedCycleScheduler(config.fixed, event_sink=event_sink)
    return PhaseScheduler(config.scheduler, event_sink=event_sink)


class IntersectionSystem:
    """Main entry point wiring sensors, scheduler and metrics together."""

    def __init__(self, config: RunConfig) -> None:
        self.config = config
        self.metrics = MetricsCollector()
        self.scheduler = build_scheduler(
            config, CompositeEventSink([LoggingEventSink(), self.metrics])
        )
        if config.source == "scenario":
            self.source: SourceStrategy = ScenarioSourceStrategy(config)
        else:
            self.source = SimulationSourceStrategy(config)
        self.lights: LightStateMap = self.scheduler.light_states

    def step(self) -> LightStateMap:
        """Run a single tick: sense under the current lights, then decide."""

        dt = self.config.tick_seconds
        readings = self.source.aggregator.step(dt, self.lights)
        self.lights = self.scheduler.tick(dt, readings)
        self.metrics.record_tick(dt, self.lights, readings)
        self.metrics.record_passed(self.source.passed_since_last())
        return self.lights

    def run(self) -> MetricSnapshot:
        """Run the configured duration and return the collected metrics."""

        ticks = int(round(self.config.duration_seconds / self.config.tick_seconds))
        logger.info(
            "Running %s scheduler on %s input for %.0fs (%d ticks)",
            self.config.mode,
            self.config.source,
            self.config.duration_seconds,
            ticks,
        )
        try:
            for _ in range(ticks):
                self.step()
        except KeyboardInterrupt:
            logger.info("Intersection run interrupted by user")
        finally:
            self.source.close()
        return self.metrics.snapshot()
