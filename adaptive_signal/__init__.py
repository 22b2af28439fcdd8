"""Adaptive four-way intersection signal scheduler package."""

from .config import FixedCycleConfig, RunConfig, SchedulerConfig, load_config
from .errors import InvalidConfig, InvalidInput, SignalError
from .fixed import FixedCycleScheduler
from .model import Direction, LightStateMap, Pair, Phase, PhaseColor, SensorSnapshot
from .scheduler import PhaseScheduler, SchedulerState
from .system import IntersectionSystem

__all__ = [
    "Direction",
    "FixedCycleConfig",
    "FixedCycleScheduler",
    "IntersectionSystem",
    "InvalidConfig",
    "InvalidInput",
    "LightStateMap",
    "Pair",
    "Phase",
    "PhaseColor",
    "PhaseScheduler",
    "RunConfig",
    "SchedulerConfig",
    "SchedulerState",
    "SensorSnapshot",
    "SignalError",
    "load_config",
]
