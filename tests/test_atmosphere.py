import dataclasses

import numpy as np
import pytest

from simulation.atmosphere import apply_humidity, evaporate, precipitate, redistribute_humidity
from simulation.surface import analyse_neighbour_heights
from utils import sigmoid
from world.terrain import TileType as T

CENTER = (0, 0)
RING = [(1, 0), (1, -1), (0, -1), (-1, 0), (-1, 1), (0, 1)]


def test_precipitation_on_land_only(build_state):
    state = build_state()
    state.humidity[:] = 2.0
    state.water[:] = 0.5
    ocean = state.index_of[(1, 0)]
    mountain = state.index_of[(0, 1)]
    state.tile_type[ocean] = int(T.OCEAN)
    state.tile_type[mountain] = int(T.MOUNTAIN)

    total = precipitate(state)

    factor = state.attributes.precipitation_factor
    expected_grass = sigmoid(2.0) * 2.0 * 0.1 * factor
    expected_mountain = sigmoid(2.0) * 2.0 * 0.7 * factor
    center = state.index_of[CENTER]
    assert state.water[center] == pytest.approx(0.5 + expected_grass)
    assert state.water[mountain] == pytest.approx(0.5 + expected_mountain)
    assert state.water[ocean] == 0.5
    assert state.precipitation[ocean] > 0
    assert total == pytest.approx(5 * expected_grass + expected_mountain)
    assert state.ledger.precipitated == pytest.approx(total)


def test_precipitation_leaves_humidity(build_state):
    state = build_state()
    state.humidity[:] = 1.0
    precipitate(state)
    assert (state.humidity == 1.0).all()


def test_evaporation(build_state):
    state = build_state()
    base = state.attributes.base_temperature
    state.temperature[:] = base
    state.water[:] = 1.0
    ocean = state.index_of[(1, 0)]
    state.tile_type[ocean] = int(T.OCEAN)

    evaporate(state)

    e = state.attributes.evaporation_factor
    center = state.index_of[CENTER]
    assert state.humidity[center] == pytest.approx(e)
    assert state.water[center] == pytest.approx(1.0 - e)
    # Oceans evaporate double and keep their water
    assert state.humidity[ocean] == pytest.approx(2 * e)
    assert state.water[ocean] == 1.0
    assert state.ledger.evaporated == pytest.approx(6 * e + 2 * e)


def test_evaporation_scales_with_temperature(build_state):
    state = build_state()
    state.water[:] = 1.0
    state.temperature[:] = state.attributes.base_temperature / 2
    state.temperature[state.index_of[(1, 0)]] = -5.0
    evaporate(state)
    e = state.attributes.evaporation_factor
    assert state.evaporation[state.index_of[CENTER]] == pytest.approx(0.5 * e)
    assert state.evaporation[state.index_of[(1, 0)]] == 0.0


def test_evaporation_never_drains_below_zero(build_state):
    state = build_state()
    state.attributes = dataclasses.replace(state.attributes, evaporation_factor=3.0)
    state.temperature[:] = state.attributes.base_temperature
    state.water[:] = 0.2
    evaporate(state)
    assert (state.water >= 0).all()
    assert state.humidity.sum() == pytest.approx(0.2 * 7)


def test_humidity_escapes_evenly_to_higher_neighbours(build_state):
    state = build_state(bedrock={c: 1.0 for c in RING}, humidity={CENTER: 2.0})
    analyse_neighbour_heights(state)

    sent = redistribute_humidity(state)

    escape = 2.0 * sigmoid(2.0) * state.attributes.humidity_escape_factor
    center = state.index_of[CENTER]
    assert sent == pytest.approx(escape)
    assert state.humidity[center] == pytest.approx(2.0 - escape)
    for coord in RING:
        assert state.pending_humidity[state.index_of[coord]] == pytest.approx(escape / 6)
    assert state.pending_humidity[center] == 0.0


def test_humidity_stays_without_higher_neighbours(build_state):
    state = build_state(bedrock={CENTER: 5.0}, humidity={CENTER: 2.0})
    analyse_neighbour_heights(state)
    redistribute_humidity(state)
    center = state.index_of[CENTER]
    assert state.humidity[center] == 2.0
    assert state.humidity_sent[center] == 0.0


def test_humidity_redistribution_conserves(build_state):
    rng = np.random.default_rng(8)
    state = build_state(radius=3)
    state.bedrock[:] = rng.random(state.tile_count) * 3
    state.humidity[:] = rng.random(state.tile_count) * 2
    before = state.humidity.sum()
    analyse_neighbour_heights(state)
    redistribute_humidity(state)
    assert state.humidity.sum() + state.pending_humidity.sum() == pytest.approx(before)
    apply_humidity(state)
    assert state.humidity.sum() == pytest.approx(before)
    assert (state.pending_humidity == 0).all()


def test_zero_escape_is_a_no_op(build_state):
    state = build_state(radius=2)
    state.attributes = dataclasses.replace(state.attributes, humidity_escape_factor=0.0)
    rng = np.random.default_rng(2)
    state.bedrock[:] = rng.random(state.tile_count)
    state.humidity[:] = rng.random(state.tile_count)
    before = state.humidity.copy()
    analyse_neighbour_heights(state)
    redistribute_humidity(state)
    apply_humidity(state)
    np.testing.assert_array_equal(state.humidity, before)


def test_apply_humidity_records_and_clears(build_state):
    state = build_state()
    state.pending_humidity[:] = 0.25
    apply_humidity(state)
    assert (state.humidity == 0.25).all()
    assert (state.humidity_received == 0.25).all()
    assert (state.pending_humidity == 0).all()
