from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from adaptive_signal.model import (
    ALL_RED,
    Direction,
    LightStateMap,
    Pair,
    PhaseColor,
    SensorSnapshot,
)
from adaptive_signal.scenarios import (
    TrafficScenario,
    get_scenario,
    load_predefined_scenarios,
    pair_demand,
)
from adaptive_signal.sensors.scripted import ScriptedFeedConfig, ScriptedSensorFeed
from adaptive_signal.sensors.simulation import WorldSensorAggregator, WorldSensorConfig
from adaptive_signal.simulation.world import Approach, SimulationWorld, SimVehicle


NS_GREEN = LightStateMap.for_pair(Pair.NS, PhaseColor.GREEN)


def test_vehicle_stops_at_red_line_and_accumulates_wait():
    approach = Approach(direction=Direction.NORTH)
    approach.vehicles.append(SimVehicle(position=5.0, speed=10.0))

    approach.advance(1.0, may_cross=False)
    assert approach.vehicles[0].position == 0.0
    assert not approach.vehicles[0].stopped

    approach.advance(1.0, may_cross=False)
    approach.advance(1.0, may_cross=False)
    assert approach.vehicles[0].stopped
    assert approach.count_waiting() == 1
    assert approach.front_wait() == pytest.approx(2.0)


def test_front_wait_only_reflects_the_vehicle_at_the_line():
    approach = Approach(direction=Direction.EAST)
    approach.vehicles.extend(
        [
            SimVehicle(position=0.0, speed=10.0, wait_time=4.0, stopped=True),
            SimVehicle(position=7.0, speed=10.0, wait_time=9.0, stopped=True),
            SimVehicle(position=14.0, speed=10.0, wait_time=1.0, stopped=True),
        ]
    )

    assert approach.count_waiting() == 3
    assert approach.front_wait() == pytest.approx(4.0)


def test_queued_vehicles_keep_their_gap():
    approach = Approach(direction=Direction.SOUTH, min_gap=7.0)
    approach.vehicles.extend(
        [SimVehicle(position=0.0, speed=10.0), SimVehicle(position=12.0, speed=10.0)]
    )

    approach.advance(1.0, may_cross=False)

    assert approach.vehicles[1].position == pytest.approx(7.0)


def test_green_lets_vehicles_cross_and_counts_them():
    approach = Approach(direction=Direction.NORTH)
    approach.vehicles.append(SimVehicle(position=3.0, speed=10.0))

    approach.advance(1.0, may_cross=True)

    assert approach.passed_since_green == 1
    assert approach.total_passed == 1
    assert approach.count_waiting() == 0


def test_world_resets_passed_counter_when_direction_turns_green():
    world = SimulationWorld.from_rates({}, seed=1)
    north = world.approaches[Direction.NORTH]
    north.passed_since_green = 7

    world.update(1.0, ALL_RED)
    assert north.passed_since_green == 7
    world.update(1.0, NS_GREEN)
    assert north.passed_since_green == 0


def test_world_arrivals_are_reproducible_for_a_seed():
    rates = {"north": 30.0, "south": 30.0, "east": 30.0, "west": 30.0}

    def positions(seed):
        world = SimulationWorld.from_rates(rates, seed=seed)
        for _ in range(60):
            world.update(1.0, NS_GREEN)
        return [
            (d, round(v.position, 6)) for d in Direction for v in world.approaches[d].vehicles
        ]

    assert positions(11) == positions(11)
    assert positions(11)


def test_world_requires_all_four_approaches():
    with pytest.raises(ValueError):
        SimulationWorld({Direction.NORTH: Approach(direction=Direction.NORTH)})


def test_world_aggregator_reports_snapshot_per_direction():
    world = SimulationWorld.from_rates({}, seed=0)
    world.approaches[Direction.WEST].vehicles.extend(
        [
            SimVehicle(position=0.0, speed=10.0, wait_time=3.0, stopped=True),
            SimVehicle(position=60.0, speed=10.0),
        ]
    )
    aggregator = WorldSensorAggregator(WorldSensorConfig(world=world))

    readings = aggregator.step(1.0, NS_GREEN)

    west = readings[Direction.WEST]
    assert west.cars_waiting == 1
    assert west.cars_approaching == 1
    assert west.front_wait_seconds == pytest.approx(4.0)
    assert readings[Direction.NORTH] == SensorSnapshot()
    assert set(readings) == set(Direction)


def test_scripted_feed_steps_through_scenario_and_holds_last_step():
    first = pair_demand(ns=SensorSnapshot(cars_approaching=1))
    last = pair_demand(we=SensorSnapshot(cars_approaching=2))
    scenario = TrafficScenario("two-step", "test", (first, last), step_seconds=2.0)
    feed = ScriptedSensorFeed(ScriptedFeedConfig(scenario=scenario))

    seen = [feed.step(1.0, ALL_RED) for _ in range(6)]

    assert [r[Direction.NORTH].cars_approaching for r in seen] == [1, 1, 0, 0, 0, 0]
    assert [r[Direction.WEST].cars_approaching for r in seen] == [0, 0, 2, 2, 2, 2]


def test_scripted_feed_can_loop():
    first = pair_demand(ns=SensorSnapshot(cars_approaching=1))
    last = pair_demand(we=SensorSnapshot(cars_approaching=2))
    scenario = TrafficScenario("two-step", "test", (first, last), step_seconds=1.0)
    feed = ScriptedSensorFeed(ScriptedFeedConfig(scenario=scenario, loop=True))

    seen = [feed.step(1.0, ALL_RED)[Direction.NORTH].cars_approaching for _ in range(4)]

    assert seen == [1, 0, 1, 0]


def test_scenario_validation_and_lookup():
    with pytest.raises(ValueError):
        TrafficScenario(name="invalid", description="empty", readings=())
    with pytest.raises(ValueError):
        TrafficScenario("invalid", "bad step", (pair_demand(),), step_seconds=0)

    scenarios = load_predefined_scenarios()
    assert len(scenarios) >= 3
    assert get_scenario("we-only").name == "we-only"
    with pytest.raises(KeyError):
        get_scenario("gridlock")


def test_predefined_scenarios_cover_all_directions():
    for scenario in load_predefined_scenarios():
        assert scenario.duration == pytest.approx(len(scenario) * scenario.step_seconds)
        for readings in scenario.steps():
            assert set(readings) == set(Direction)
