import dataclasses

import numpy as np
import pytest

from simulation.erosion import eroded_bedrock, erosion_fraction
from simulation.surface import (
    analyse_neighbour_heights,
    apply_overflow,
    pick_lowest_neighbours,
    redistribute_overflow,
)
from utils import sigmoid
from world.terrain import TileType as T

CENTER = (0, 0)
RING = [(1, 0), (1, -1), (0, -1), (-1, 0), (-1, 1), (0, 1)]


@pytest.fixture
def no_erosion(attributes):
    return dataclasses.replace(attributes, overflow_factor=1.0, erosion_factor=0.0)


def peak_state(build_state, attrs, seed=0):
    """Centre bedrock 5 with 2 water above six bare neighbours."""
    state = build_state(seed=seed, bedrock={CENTER: 5.0}, water={CENTER: 2.0})
    state.attributes = attrs
    return state


# =============================================================================
# Neighbour analysis
# =============================================================================

def test_neighbour_partition_ties_go_higher(build_state):
    state = build_state(bedrock={CENTER: 1.0, (1, 0): 1.0, (0, 1): 2.0}, soil={(1, -1): 0.5})
    analyse_neighbour_heights(state)
    center = state.index_of[CENTER]
    lower = {state.coords[i] for i, _ in state.lower_neighbours(center)}
    higher = {state.coords[i] for i, _ in state.higher_neighbours(center)}
    assert lower == {(0, -1), (-1, 0), (-1, 1), (1, -1)}
    assert higher == {(1, 0), (0, 1)}
    heights = dict(state.higher_neighbours(center))
    assert heights[state.index_of[(0, 1)]] == pytest.approx(2.0)


def test_edge_tiles_have_fewer_neighbours(build_state):
    state = build_state()
    analyse_neighbour_heights(state)
    edge = state.index_of[(1, 0)]
    assert len(state.neighbours(edge)) == 3
    assert len(state.higher_neighbours(edge)) == 3
    assert state.lower_neighbours(edge) == []


# =============================================================================
# Overflow
# =============================================================================

def test_single_recipient_scenario(build_state, no_erosion):
    state = peak_state(build_state, no_erosion)
    analyse_neighbour_heights(state)

    sent = redistribute_overflow(state)

    expected = 2.0 * 1.0 * sigmoid(2.0)
    center = state.index_of[CENTER]
    assert sent == pytest.approx(expected)
    assert state.water[center] == pytest.approx(2.0 - expected)
    receivers = np.flatnonzero(state.incoming_water)
    assert len(receivers) == 1
    assert state.coords[receivers[0]] in RING
    assert state.incoming_water[receivers[0]] == pytest.approx(expected)
    assert state.bedrock[center] == 5.0
    assert state.incoming_soil.sum() == 0.0


def test_tie_break_is_random_among_equal_neighbours(build_state, no_erosion):
    recipients = set()
    for seed in range(40):
        state = peak_state(build_state, no_erosion, seed=seed)
        analyse_neighbour_heights(state)
        redistribute_overflow(state)
        recipients.add(int(np.flatnonzero(state.incoming_water)[0]))
    assert len(recipients) > 1


def test_lowest_neighbour_wins(build_state, no_erosion):
    bedrock = {CENTER: 5.0, **{c: 1.0 for c in RING}}
    bedrock[(-1, 1)] = 0.5
    state = build_state(bedrock=bedrock, water={CENTER: 2.0})
    state.attributes = no_erosion
    analyse_neighbour_heights(state)
    redistribute_overflow(state)
    assert np.flatnonzero(state.incoming_water).tolist() == [state.index_of[(-1, 1)]]


def test_pick_lowest_neighbours_empty(build_state):
    state = build_state()
    assert pick_lowest_neighbours(state, np.array([], dtype=np.int64)).size == 0


def test_water_held_by_soil_does_not_overflow(build_state, no_erosion):
    state = build_state(bedrock={CENTER: 5.0}, water={CENTER: 0.4}, soil={CENTER: 0.5})
    state.attributes = no_erosion
    analyse_neighbour_heights(state)
    assert redistribute_overflow(state) == 0.0
    assert state.incoming_water.sum() == 0.0


def test_tile_without_lower_neighbours_is_skipped(build_state, no_erosion):
    state = build_state(water={CENTER: 3.0})
    state.attributes = no_erosion
    state.bedrock[:] = 1.0
    state.bedrock[state.index_of[CENTER]] = 0.0
    state.water[:] = 3.0
    analyse_neighbour_heights(state)
    redistribute_overflow(state)
    center = state.index_of[CENTER]
    assert state.water[center] == 3.0
    assert state.overflow_water[center] == 0.0


def test_ocean_never_overflows(build_state, no_erosion):
    state = peak_state(build_state, no_erosion)
    state.tile_type[state.index_of[CENTER]] = int(T.OCEAN)
    analyse_neighbour_heights(state)
    assert redistribute_overflow(state) == 0.0
    assert state.water[state.index_of[CENTER]] == 2.0


def test_erosion_uses_previous_overflow(build_state, attributes):
    attrs = dataclasses.replace(attributes, overflow_factor=1.0, erosion_factor=0.5)
    state = build_state(bedrock={CENTER: 4.0}, water={CENTER: 2.0}, soil={CENTER: 0.5})
    state.attributes = attrs
    center = state.index_of[CENTER]
    state.overflow_water[center] = 1.0
    analyse_neighbour_heights(state)

    redistribute_overflow(state)

    eroded = min(0.5 * 1.0 * 0.5, 1.0) * 4.0
    assert state.bedrock[center] == pytest.approx(4.0 - eroded)
    assert state.incoming_soil.sum() == pytest.approx(eroded)
    assert state.overflow_soil[center] == pytest.approx(eroded)
    assert state.ledger.eroded_bedrock == pytest.approx(eroded)
    # This epoch's overflow feeds the next epoch's erosion
    assert state.overflow_water[center] == pytest.approx((2.0 - 0.5) * sigmoid(2.0))


def test_erosion_fraction_capped():
    assert erosion_fraction(10.0, 10.0, 1.0) == 1.0
    assert erosion_fraction(0.5, 0.5, 0.4) == pytest.approx(0.1)
    np.testing.assert_allclose(eroded_bedrock(np.array([10.0]), np.array([10.0]), np.array([3.0]), 1.0), [3.0])


def test_overflow_conserves_water(build_state):
    rng = np.random.default_rng(21)
    state = build_state(radius=3, seed=4)
    state.bedrock[:] = rng.random(state.tile_count) * 3
    state.water[:] = rng.random(state.tile_count) * 3
    state.soil[:] = rng.random(state.tile_count) * 0.5
    state.overflow_water[:] = rng.random(state.tile_count)
    water_before = state.water.sum()
    bedrock_before = state.bedrock.sum()

    analyse_neighbour_heights(state)
    redistribute_overflow(state)

    assert state.water.sum() + state.incoming_water.sum() == pytest.approx(water_before)
    assert state.bedrock.sum() + state.incoming_soil.sum() == pytest.approx(bedrock_before)
    # Every sender credits exactly one lower neighbour
    for i in np.flatnonzero(state.overflow_water):
        assert state.lower_mask[i].any()
    assert (state.water >= 0).all()
    assert (state.bedrock >= 0).all()


# =============================================================================
# Apply overflow
# =============================================================================

def test_apply_overflow_credits_land(build_state):
    state = build_state()
    target = state.index_of[(1, 0)]
    state.incoming_water[target] = 0.3
    state.incoming_soil[target] = 0.1
    delivered = apply_overflow(state)
    assert delivered == pytest.approx(0.3)
    assert state.water[target] == pytest.approx(0.3)
    assert state.soil[target] == pytest.approx(0.1)
    assert state.overflow_received_water[target] == pytest.approx(0.3)
    assert state.ledger.deposited_soil == pytest.approx(0.1)
    assert (state.incoming_water == 0).all()
    assert (state.incoming_soil == 0).all()


def test_ocean_swallows_overflow(build_state):
    state = build_state(water={(1, 0): 1.5})
    target = state.index_of[(1, 0)]
    state.tile_type[target] = int(T.OCEAN)
    state.incoming_water[target] = 0.3
    state.incoming_soil[target] = 0.1
    apply_overflow(state)
    assert state.water[target] == 1.5
    assert state.soil[target] == 0.0
    assert state.ledger.ocean_absorbed_water == pytest.approx(0.3)
    assert state.ledger.ocean_absorbed_soil == pytest.approx(0.1)
    assert (state.incoming_water == 0).all()
