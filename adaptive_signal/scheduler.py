"""Adaptive phase scheduler for a four-way, two-pair intersection."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from .base import SignalScheduler, validate_delta
from .config import SchedulerConfig
from .errors import InvalidConfig
from .events import (
    EventSink,
    NullEventSink,
    PhaseTransition,
    SchedulerReset,
    SwitchEvaluation,
    SwitchReason,
)
from .model import (
    Direction,
    LightStateMap,
    Pair,
    Phase,
    SensorReadings,
    normalise_readings,
)


def _zeros() -> Dict[Direction, float]:
    return {direction: 0 for direction in Direction}


@dataclass(slots=True)
class SchedulerState:
    """Internal state owned by a single :class:`PhaseScheduler`.

    ``passed`` and ``approaching`` hold the active pair's flow figures while
    ``waiting`` and ``front_wait`` hold the red pair's queue figures; both are
    refreshed from the sensor snapshot on every tick.
    """

    active_pair: Optional[Pair] = None
    phase: Phase = Phase.IDLE
    phase_timer: float = 0.0
    green_lock_remaining: float = 0.0
    last_switch_time: Optional[float] = None
    next_pair: Optional[Pair] = None
    clock: float = 0.0
    passed: Dict[Direction, float] = field(default_factory=_zeros)
    approaching: Dict[Direction, float] = field(default_factory=_zeros)
    waiting: Dict[Direction, float] = field(default_factory=_zeros)
    front_wait: Dict[Direction, float] = field(default_factory=_zeros)


def demand_score(readings: SensorReadings, pair: Pair) -> float:
    """Queue demand of ``pair``: waiting count times front wait, plus approaching."""

    return sum(readings[d].queue_pressure + readings[d].cars_approaching for d in pair.directions)


def select_first_pair(readings: SensorReadings) -> Optional[Pair]:
    """Pick the pair that should receive the very first green.

    Ties go to ``NS``; ``None`` means no demand has been observed yet.
    """

    ns_score = demand_score(readings, Pair.NS)
    we_score = demand_score(readings, Pair.WE)
    if ns_score > 0 and ns_score >= we_score:
        return Pair.NS
    if we_score > 0:
        return Pair.WE
    return None


def efficiency_score(state: SchedulerState, pair: Pair) -> float:
    return sum(state.passed[d] + state.approaching[d] for d in pair.directions)


def fairness_score(state: SchedulerState, pair: Pair) -> float:
    return sum(
        state.waiting[d] * state.front_wait[d] + state.approaching[d] for d in pair.directions
    )


def evaluate_switch(state: SchedulerState, config: SchedulerConfig) -> SwitchEvaluation:
    """Compare the active pair's efficiency with the red pair's fairness.

    The four triggers are OR-combined.  With ``config.min_green_as_floor``
    the minimum green no longer triggers on its own and instead gates the
    threshold trigger.
    """

    pair = state.active_pair
    if pair is None:
        raise ValueError("cannot evaluate a switch without an active pair")

    efficiency = efficiency_score(state, pair)
    fairness = fairness_score(state, pair.other)
    timer = state.phase_timer

    min_elapsed = timer >= config.green_min_seconds
    max_elapsed = timer >= config.green_max_seconds
    fast_track = efficiency == 0 and fairness > 0 and timer > config.green_lock_seconds
    threshold_exceeded = fairness > efficiency * config.switch_threshold

    if config.min_green_as_floor:
        triggers = (
            (max_elapsed, SwitchReason.MAX_GREEN),
            (fast_track, SwitchReason.FAST_TRACK),
            (min_elapsed and threshold_exceeded, SwitchReason.THRESHOLD),
        )
    else:
        triggers = (
            (max_elapsed, SwitchReason.MAX_GREEN),
            (min_elapsed, SwitchReason.MIN_GREEN),
            (fast_track, SwitchReason.FAST_TRACK),
            (threshold_exceeded, SwitchReason.THRESHOLD),
        )
    reason = next((why for fired, why in triggers if fired), None)

    return SwitchEvaluation(
        clock=state.clock,
        pair=pair,
        phase_timer=timer,
        efficiency_score=efficiency,
        fairness_score=fairness,
        min_elapsed=min_elapsed,
        max_elapsed=max_elapsed,
        fast_track=fast_track,
        threshold_exceeded=threshold_exceeded,
        should_switch=reason is not None,
        reason=reason,
    )


class PhaseScheduler(SignalScheduler):
    """Adaptive two-pair scheduler balancing throughput against fairness.

    The scheduler runs a small state machine driven only by the elapsed time
    handed to :meth:`tick`:

    * While idle, all directions stay red until either pair shows demand;
      the pair with the higher demand (``NS`` on ties) gets the first green.
    * Every green opens with a green lock during which no switch evaluation
      happens.  A green that survives an evaluation is locked again.
    * Outside the lock the active pair's efficiency score (passed plus
      approaching vehicles) is compared with the red pair's fairness score
      (waiting count times front wait, plus approaching vehicles).
    * A switch runs through yellow and an all-red clearance before the other
      pair receives green.
    """

    def __init__(
        self,
        config: SchedulerConfig | None = None,
        event_sink: EventSink | None = None,
    ) -> None:
        super().__init__()
        self.event_sink = event_sink or NullEventSink()
        self.config = self._checked(config or SchedulerConfig())
        self._state = SchedulerState()
        self._last_evaluation: Optional[SwitchEvaluation] = None
        self.initialize()

    @staticmethod
    def _checked(config: object) -> SchedulerConfig:
        if not isinstance(config, SchedulerConfig):
            raise InvalidConfig(f"expected SchedulerConfig, got {type(config).__name__}")
        return config

    @property
    def state(self) -> SchedulerState:
        """A copy of the internal state; mutating it has no effect."""

        return copy.deepcopy(self._state)

    @property
    def active_pair(self) -> Optional[Pair]:
        return self._state.active_pair

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def last_evaluation(self) -> Optional[SwitchEvaluation]:
        return self._last_evaluation

    def initialize(self, config: SchedulerConfig | None = None) -> None:
        if config is not None:
            self.config = self._checked(config)
        self._state = SchedulerState()
        self._last_evaluation = None
        self._lights = LightStateMap.for_pair(None, Phase.IDLE.color)
        self.event_sink.emit(SchedulerReset())

    def tick(
        self, delta_time: float, snapshot: Optional[Mapping[object, object]] = None
    ) -> LightStateMap:
        """Advance the state machine by ``delta_time`` seconds.

        Raises :class:`~adaptive_signal.errors.InvalidInput` for a negative
        or non-finite ``delta_time`` without modifying any state.
        """

        delta = validate_delta(delta_time)
        readings = normalise_readings(snapshot)
        state = self._state

        state.phase_timer += delta
        state.clock += delta
        self._ingest(readings)

        if state.active_pair is None:
            first = select_first_pair(readings)
            if first is not None:
                self._start_green(first, SwitchReason.FIRST_DEMAND)
        elif state.phase is Phase.GREEN:
            self._update_green(delta)
        elif state.phase is Phase.YELLOW:
            if state.phase_timer >= self.config.yellow_seconds:
                state.next_pair = state.active_pair.other
                self._enter(Phase.RED_CLEARANCE, SwitchReason.YELLOW_ELAPSED)
        elif state.phase is Phase.RED_CLEARANCE:
            if state.phase_timer >= self.config.red_clearance_seconds:
                self._start_green(
                    state.next_pair or state.active_pair.other,
                    SwitchReason.CLEARANCE_ELAPSED,
                )

        self._lights = LightStateMap.for_pair(state.active_pair, state.phase.color)
        return self._lights

    def _ingest(self, readings: SensorReadings) -> None:
        state = self._state
        if state.active_pair is None:
            red_directions = tuple(Direction)
        else:
            for d in state.active_pair.directions:
                state.passed[d] = readings[d].cars_passed
                state.approaching[d] = readings[d].cars_approaching
            red_directions = state.active_pair.other.directions
        for d in red_directions:
            state.waiting[d] = readings[d].cars_waiting
            state.front_wait[d] = readings[d].front_wait_seconds
            state.approaching[d] = readings[d].cars_approaching

    def _update_green(self, delta: float) -> None:
        state = self._state
        if state.green_lock_remaining > 0:
            state.green_lock_remaining = max(0.0, state.green_lock_remaining - delta)
            # the lock never holds a green past its hard cap
            if state.phase_timer < self.config.green_max_seconds:
                return

        evaluation = evaluate_switch(state, self.config)
        self._last_evaluation = evaluation
        self.event_sink.emit(evaluation)

        if evaluation.should_switch and evaluation.reason is not None:
            state.green_lock_remaining = 0.0
            self._enter(Phase.YELLOW, evaluation.reason)
        else:
            state.green_lock_remaining = self.config.green_lock_seconds

    def _start_green(self, pair: Pair, reason: SwitchReason) -> None:
        state = self._state
        state.active_pair = pair
        state.next_pair = None
        state.last_switch_time = state.clock
        state.green_lock_remaining = self.config.green_lock_seconds
        for d in pair.directions:
            state.passed[d] = 0
            state.approaching[d] = 0
        self._enter(Phase.GREEN, reason)

    def _enter(self, phase: Phase, reason: SwitchReason) -> None:
        state = self._state
        previous = state.phase
        state.phase = phase
        state.phase_timer = 0.0
        self.event_sink.emit(
            PhaseTransition(
                clock=state.clock,
                pair=state.active_pair,
                from_phase=previous,
                to_phase=phase,
                reason=reason,
            )
        )

    def debug_info(self) -> dict:
        state = self._state
        return {
            "mode": "adaptive",
            "pair": state.active_pair.value if state.active_pair else None,
            "phase": state.phase.value,
            "timer": round(state.phase_timer, 3),
            "green_lock": round(state.green_lock_remaining, 3),
            "next_pair": state.next_pair.value if state.next_pair else None,
            "clock": round(state.clock, 3),
            "passed": {d.value: state.passed[d] for d in Direction},
            "approaching": {d.value: state.approaching[d] for d in Direction},
            "waiting": {d.value: state.waiting[d] for d in Direction},
            "front_wait": {d.value: state.front_wait[d] for d in Direction},
        }
