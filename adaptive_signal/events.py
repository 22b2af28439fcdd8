"""Scheduler events and the sinks that consume them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Iterable, List, Optional, Union

from .model import Pair, Phase

logger = logging.getLogger(__name__)


class SwitchReason(str, Enum):
    """Why a transition happened, in reporting precedence order."""

    MAX_GREEN = "max_green"
    MIN_GREEN = "min_green"
    FAST_TRACK = "fast_track"
    THRESHOLD = "threshold"
    FIRST_DEMAND = "first_demand"
    YELLOW_ELAPSED = "yellow_elapsed"
    CLEARANCE_ELAPSED = "clearance_elapsed"
    FIXED_TIMER = "fixed_timer"


@dataclass(frozen=True, slots=True)
class SchedulerReset:
    clock: float = 0.0


@dataclass(frozen=True, slots=True)
class PhaseTransition:
    """A change of the active pair's phase."""

    clock: float
    pair: Optional[Pair]
    from_phase: Phase
    to_phase: Phase
    reason: SwitchReason


@dataclass(frozen=True, slots=True)
class SwitchEvaluation:
    """Outcome of one green-phase score comparison.

    All conditions that hold are reported; ``reason`` names the one with the
    highest precedence (max green, min green, fast-track, threshold).
    """

    clock: float
    pair: Pair
    phase_timer: float
    efficiency_score: float
    fairness_score: float
    min_elapsed: bool
    max_elapsed: bool
    fast_track: bool
    threshold_exceeded: bool
    should_switch: bool
    reason: Optional[SwitchReason]


SchedulerEvent = Union[SchedulerReset, PhaseTransition, SwitchEvaluation]


class EventSink(ABC):
    """Receives events from a scheduler without influencing its decisions."""

    @abstractmethod
    def emit(self, event: SchedulerEvent) -> None:
        """Handle a single scheduler event."""


class NullEventSink(EventSink):
    def emit(self, event: SchedulerEvent) -> None:
        return None


class RecordingEventSink(EventSink):
    """Keep every event in memory, mostly useful for tests and replays."""

    def __init__(self) -> None:
        self.events: List[SchedulerEvent] = []

    def emit(self, event: SchedulerEvent) -> None:
        self.events.append(event)

    def transitions(self) -> List[PhaseTransition]:
        return [event for event in self.events if isinstance(event, PhaseTransition)]

    def evaluations(self) -> List[SwitchEvaluation]:
        return [event for event in self.events if isinstance(event, SwitchEvaluation)]


class LoggingEventSink(EventSink):
    """Forward events to :mod:`logging`.

    Transitions are logged at ``INFO``; score evaluations at ``DEBUG`` since
    they happen on every tick outside the green lock.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    def emit(self, event: SchedulerEvent) -> None:
        if isinstance(event, PhaseTransition):
            self.log.info(
                "t=%.1fs %s: %s -> %s (%s)",
                event.clock,
                event.pair.value if event.pair is not None else "-",
                event.from_phase.value,
                event.to_phase.value,
                event.reason.value,
            )
        elif isinstance(event, SwitchEvaluation):
            self.log.debug(
                "t=%.1fs score check %s: efficiency=%.1f fairness=%.1f phase=%.1fs "
                "min=%s max=%s fast_track=%s threshold=%s switch=%s",
                event.clock,
                event.pair.value,
                event.efficiency_score,
                event.fairness_score,
                event.phase_timer,
                event.min_elapsed,
                event.max_elapsed,
                event.fast_track,
                event.threshold_exceeded,
                event.should_switch,
            )
        elif isinstance(event, SchedulerReset):
            self.log.info("Scheduler reset - all directions red")


class CompositeEventSink(EventSink):
    """Fan a single event stream out to several sinks."""

    def __init__(self, sinks: Iterable[EventSink]) -> None:
        self.sinks = list(sinks)

    def emit(self, event: SchedulerEvent) -> None:
        for sink in self.sinks:
            sink.emit(event)
