"""Fixed-timer round-robin used as a baseline against the adaptive scheduler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from .base import SignalScheduler, validate_delta
from .config import FixedCycleConfig
from .errors import InvalidConfig
from .events import EventSink, NullEventSink, PhaseTransition, SchedulerReset, SwitchReason
from .model import LightStateMap, Pair, Phase


@dataclass(frozen=True, slots=True)
class CycleStep:
    pair: Pair
    phase: Phase


# NS green, NS yellow, all red, WE green, WE yellow, all red
CYCLE: Tuple[CycleStep, ...] = (
    CycleStep(Pair.NS, Phase.GREEN),
    CycleStep(Pair.NS, Phase.YELLOW),
    CycleStep(Pair.NS, Phase.RED_CLEARANCE),
    CycleStep(Pair.WE, Phase.GREEN),
    CycleStep(Pair.WE, Phase.YELLOW),
    CycleStep(Pair.WE, Phase.RED_CLEARANCE),
)


class FixedCycleScheduler(SignalScheduler):
    """Cycle both pairs unconditionally, ignoring all sensor input."""

    def __init__(
        self,
        config: FixedCycleConfig | None = None,
        event_sink: EventSink | None = None,
    ) -> None:
        super().__init__()
        self.event_sink = event_sink or NullEventSink()
        self.config = self._checked(config or FixedCycleConfig())
        self.step_index = 0
        self.phase_timer = 0.0
        self.clock = 0.0
        self.initialize()

    @staticmethod
    def _checked(config: object) -> FixedCycleConfig:
        if not isinstance(config, FixedCycleConfig):
            raise InvalidConfig(f"expected FixedCycleConfig, got {type(config).__name__}")
        return config

    @property
    def current_step(self) -> CycleStep:
        return CYCLE[self.step_index]

    def _duration(self, phase: Phase) -> float:
        if phase is Phase.GREEN:
            return self.config.green_seconds
        if phase is Phase.YELLOW:
            return self.config.yellow_seconds
        return self.config.all_red_seconds

    def initialize(self, config: FixedCycleConfig | None = None) -> None:
        if config is not None:
            self.config = self._checked(config)
        self.step_index = 0
        self.phase_timer = 0.0
        self.clock = 0.0
        self._lights = self._lights_for(self.current_step)
        self.event_sink.emit(SchedulerReset())

    def tick(
        self, delta_time: float, snapshot: Optional[Mapping[object, object]] = None
    ) -> LightStateMap:
        delta = validate_delta(delta_time)
        self.phase_timer += delta
        self.clock += delta

        step = self.current_step
        if self.phase_timer >= self._duration(step.phase):
            self.step_index = (self.step_index + 1) % len(CYCLE)
            self.phase_timer = 0.0
            following = self.current_step
            self.event_sink.emit(
                PhaseTransition(
                    clock=self.clock,
                    pair=following.pair,
                    from_phase=step.phase,
                    to_phase=following.phase,
                    reason=SwitchReason.FIXED_TIMER,
                )
            )

        self._lights = self._lights_for(self.current_step)
        return self._lights

    @staticmethod
    def _lights_for(step: CycleStep) -> LightStateMap:
        return LightStateMap.for_pair(step.pair, step.phase.color)

    def debug_info(self) -> dict:
        return {
            "mode": "fixed",
            "step": self.step_index,
            "pair": self.current_step.pair.value,
            "phase": self.current_step.phase.value,
            "timer": round(self.phase_timer, 3),
            "clock": round(self.clock, 3),
        }
