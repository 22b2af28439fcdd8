"""Common interface for anything that turns ticks into light states."""

from __future__ import annotations

from abc import ABC, abstractmethod
import math
import numbers
from typing import Mapping, Optional

from .errors import InvalidInput
from .model import ALL_RED, LightStateMap


def validate_delta(delta_time: object) -> float:
    """Return ``delta_time`` as a float or raise :class:`InvalidInput`."""

    if isinstance(delta_time, bool) or not isinstance(delta_time, numbers.Real):
        raise InvalidInput(f"delta_time must be a number of seconds, got {delta_time!r}")
    if not math.isfinite(delta_time):
        raise InvalidInput(f"delta_time must be finite, got {delta_time!r}")
    if delta_time < 0:
        raise InvalidInput(f"delta_time must not be negative, got {delta_time!r}")
    return float(delta_time)


class SignalScheduler(ABC):
    """Tick-driven controller emitting one :class:`LightStateMap` per tick."""

    def __init__(self) -> None:
        self._lights: LightStateMap = ALL_RED

    @property
    def light_states(self) -> LightStateMap:
        """Light map emitted by the most recent tick (all red before any)."""

        return self._lights

    @abstractmethod
    def initialize(self, config: object = None) -> None:
        """Reset the scheduler to its initial all-red state."""

    @abstractmethod
    def tick(
        self, delta_time: float, snapshot: Optional[Mapping[object, object]] = None
    ) -> LightStateMap:
        """Advance by ``delta_time`` seconds and return the resulting lights."""

    def reset(self) -> None:
        self.initialize()

    @abstractmethod
    def debug_info(self) -> dict:
        """Return a plain summary of the internal state for display."""
