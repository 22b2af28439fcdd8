from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from adaptive_signal.config import FixedCycleConfig
from adaptive_signal.errors import InvalidConfig, InvalidInput
from adaptive_signal.events import RecordingEventSink, SwitchReason
from adaptive_signal.fixed import FixedCycleScheduler
from adaptive_signal.model import Pair, Phase, PhaseColor


def test_fixed_cycle_walks_through_all_six_steps():
    config = FixedCycleConfig(green_seconds=10, yellow_seconds=2, all_red_seconds=1)
    scheduler = FixedCycleScheduler(config)

    assert scheduler.light_states.north is PhaseColor.GREEN
    assert scheduler.light_states.west is PhaseColor.RED

    lights = scheduler.tick(9.5)
    assert lights.north is PhaseColor.GREEN
    lights = scheduler.tick(0.5)
    assert lights.north is PhaseColor.YELLOW
    lights = scheduler.tick(2.0)
    assert lights.all_red()
    lights = scheduler.tick(1.0)
    assert lights.west is PhaseColor.GREEN
    assert lights.east is PhaseColor.GREEN
    assert lights.north is PhaseColor.RED
    lights = scheduler.tick(10.0)
    assert lights.west is PhaseColor.YELLOW
    lights = scheduler.tick(2.0)
    assert lights.all_red()
    lights = scheduler.tick(1.0)
    assert lights.north is PhaseColor.GREEN
    assert scheduler.current_step.pair is Pair.NS
    assert scheduler.current_step.phase is Phase.GREEN


def test_fixed_cycle_ignores_sensor_input():
    scheduler = FixedCycleScheduler()

    lights = scheduler.tick(1.0, {"west": {"cars_waiting": 50, "front_wait_seconds": 300.0}})

    assert lights.north is PhaseColor.GREEN
    assert lights.west is PhaseColor.RED


def test_fixed_cycle_reports_timer_transitions():
    sink = RecordingEventSink()
    scheduler = FixedCycleScheduler(event_sink=sink)

    scheduler.tick(30.0)

    transitions = sink.transitions()
    assert len(transitions) == 1
    assert transitions[0].reason is SwitchReason.FIXED_TIMER
    assert transitions[0].to_phase is Phase.YELLOW


def test_fixed_cycle_rejects_negative_delta():
    scheduler = FixedCycleScheduler()

    with pytest.raises(InvalidInput):
        scheduler.tick(-1.0)
    assert scheduler.debug_info()["timer"] == 0


def test_fixed_cycle_reset_returns_to_ns_green():
    scheduler = FixedCycleScheduler()
    scheduler.tick(30.0)
    scheduler.tick(3.0)

    scheduler.reset()

    assert scheduler.step_index == 0
    assert scheduler.light_states.north is PhaseColor.GREEN


def test_fixed_cycle_config_validation():
    with pytest.raises(InvalidConfig):
        FixedCycleConfig(green_seconds=0)
    with pytest.raises(InvalidConfig):
        FixedCycleScheduler(config="fast")  # type: ignore[arg-type]
