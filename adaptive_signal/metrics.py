"""Collects switching, green-time and queue metrics across ticks."""
from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass, field
from statistics import mean
from typing import Deque, Dict

from .events import EventSink, PhaseTransition, SchedulerEvent, SwitchReason
from .model import Direction, LightStateMap, Pair, PhaseColor, Phase, SensorReadings


@dataclass
class MetricSnapshot:
    """Roll-up of run metrics for reporting."""

    elapsed_seconds: float
    ticks: int
    pair_switches: int
    transitions_by_reason: Dict[str, int]
    green_seconds: Dict[str, float]
    all_red_seconds: float
    average_waiting: float
    max_front_wait: Dict[str, float]
    vehicles_passed: int


@dataclass
class MetricsCollector(EventSink):
    """Tracks scheduler transitions and per-tick sensor figures."""

    window: int = 240
    elapsed: float = 0.0
    ticks: int = 0
    vehicles_passed: int = 0
    all_red_seconds: float = 0.0
    reasons: Counter = field(default_factory=Counter)
    green_seconds: Dict[Pair, float] = field(default_factory=lambda: {p: 0.0 for p in Pair})
    max_front_wait: Dict[Direction, float] = field(
        default_factory=lambda: {d: 0.0 for d in Direction}
    )
    waiting_history: Deque[int] = field(default_factory=lambda: deque(maxlen=240))
    pair_switches: int = 0

    def __post_init__(self) -> None:
        self.waiting_history = deque(self.waiting_history, maxlen=self.window)

    def emit(self, event: SchedulerEvent) -> None:
        if not isinstance(event, PhaseTransition):
            return
        self.reasons[event.reason.value] += 1
        if event.to_phase is Phase.GREEN and event.reason is not SwitchReason.FIRST_DEMAND:
            self.pair_switches += 1

    def record_tick(
        self, delta_time: float, lights: LightStateMap, readings: SensorReadings
    ) -> None:
        self.ticks += 1
        self.elapsed += delta_time
        for pair in Pair:
            if lights[pair.directions[0]] is PhaseColor.GREEN:
                self.green_seconds[pair] += delta_time
        if lights.all_red():
            self.all_red_seconds += delta_time

        waiting = 0
        for direction, snapshot in readings.items():
            waiting += snapshot.cars_waiting
            if snapshot.front_wait_seconds > self.max_front_wait[direction]:
                self.max_front_wait[direction] = snapshot.front_wait_seconds
        self.waiting_history.append(waiting)

    def record_passed(self, count: int) -> None:
        self.vehicles_passed += count

    def _average_waiting(self) -> float:
        return mean(self.waiting_history) if self.waiting_history else 0.0

    def snapshot(self) -> MetricSnapshot:
        return MetricSnapshot(
            elapsed_seconds=self.elapsed,
            ticks=self.ticks,
            pair_switches=self.pair_switches,
            transitions_by_reason=dict(self.reasons),
            green_seconds={pair.value: seconds for pair, seconds in self.green_seconds.items()},
            all_red_seconds=self.all_red_seconds,
            average_waiting=self._average_waiting(),
            max_front_wait={d.value: wait for d, wait in self.max_front_wait.items()},
            vehicles_passed=self.vehicles_passed,
        )
