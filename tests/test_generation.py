import dataclasses

import numpy as np
import pytest

import world.generation as generation
from grid_helpers import hex_distance, hexagon
from world.generation import (
    calculate_temperature,
    generate_altitude_map,
    generate_map,
    generate_temperature_map,
    get_distances_from_volcanos,
    pick_volcanoes,
    raise_probability,
    volcano_reach,
)


def test_raise_probability_decays_linearly():
    assert raise_probability(0, 4.0) == 1.0
    assert raise_probability(2, 4.0) == pytest.approx(0.5)
    assert raise_probability(4, 4.0) == 0.0
    assert raise_probability(6, 4.0) == 0.0
    np.testing.assert_allclose(raise_probability(np.array([0, 1]), 2.0), [1.0, 0.5])


def test_raise_probability_without_spread():
    assert raise_probability(0, 0.0) == 1.0
    assert raise_probability(1, 0.0) == 0.0


def test_pick_volcanoes_distinct(rng):
    volcanoes = pick_volcanoes(5, 19, rng)
    assert len(volcanoes) == 5
    assert len(set(volcanoes.tolist())) == 5
    assert all(0 <= v < 19 for v in volcanoes)


def test_pick_volcanoes_clamped_to_tile_count(rng, caplog):
    volcanoes = pick_volcanoes(50, 7, rng)
    assert sorted(volcanoes.tolist()) == list(range(7))
    assert "clamping" in caplog.text


def test_volcano_reach_clipped_to_map():
    coords = hexagon(1)
    index_of = {c: i for i, c in enumerate(coords)}
    corner = index_of[(1, 0)]
    ((ids, dists),) = volcano_reach(index_of, coords, np.array([corner]), 2)
    assert len(ids) == len(coords)
    for idx, d in zip(ids, dists):
        assert hex_distance(coords[idx], (1, 0)) == d


def test_generated_map_reaches_highest_elevation(attributes, rng):
    generated = generate_map(attributes, rng)
    assert len(generated.coords) == 3 * 4 * 5 + 1
    assert generated.altitude[generated.volcanoes].max() >= attributes.highest_elevation
    assert (generated.altitude >= 0).all()
    assert generated.passes <= np.ceil(attributes.highest_elevation / attributes.elevation_increment) + 1


def test_volcano_distances_recorded(attributes, rng):
    generated = generate_map(attributes, rng)
    for vid in generated.volcanoes:
        assert 0 in generated.volcano_distances[vid]
    for idx, dists in enumerate(generated.volcano_distances):
        assert all(0 <= d <= attributes.spread_rings for d in dists)
        assert len(dists) <= len(generated.volcanoes)


def test_overlapping_volcanoes_append_distances():
    coords = hexagon(2)
    index_of = {c: i for i, c in enumerate(coords)}
    volcanoes = np.array([index_of[(0, 0)], index_of[(1, 0)]])
    reach = volcano_reach(index_of, coords, volcanoes, 1)
    distances = get_distances_from_volcanos(reach, len(coords))
    assert sorted(distances[index_of[(0, 0)]]) == [0, 1]
    assert sorted(distances[index_of[(1, 0)]]) == [0, 1]
    # (1, -1) neighbours both volcanoes
    assert distances[index_of[(1, -1)]] == [1, 1]
    assert distances[index_of[(-2, 0)]] == []


def test_generation_is_reproducible(attributes):
    a = generate_map(attributes, np.random.default_rng(99))
    b = generate_map(attributes, np.random.default_rng(99))
    np.testing.assert_array_equal(a.altitude, b.altitude)
    np.testing.assert_array_equal(a.volcanoes, b.volcanoes)


def test_non_terminating_raise_is_runtime_error(attributes, rng, monkeypatch):
    monkeypatch.setattr(generation, "raise_probability", lambda d, s: np.zeros(len(d)))
    coords = hexagon(1)
    index_of = {c: i for i, c in enumerate(coords)}
    volcanoes = np.array([0])
    reach = volcano_reach(index_of, coords, volcanoes, 1)
    with pytest.raises(RuntimeError):
        generate_altitude_map(attributes, len(coords), volcanoes, reach, rng)


def test_calculate_temperature(attributes):
    base = attributes.base_temperature
    assert calculate_temperature(attributes, 0.0, 0) == pytest.approx(base)
    assert calculate_temperature(attributes, -1.0, 0) == pytest.approx(base)
    assert calculate_temperature(attributes, 2.0, 0) == pytest.approx(
        base - 2.0 * attributes.altitude_temperature_variation
    )
    pole = calculate_temperature(attributes, 0.0, -attributes.map_radius)
    assert pole == pytest.approx(base - attributes.latitude_temperature_variation)


def test_temperature_map_matches_scalar(attributes):
    coords = hexagon(attributes.map_radius)
    altitude = np.linspace(-1.0, 3.0, len(coords))
    temperature = generate_temperature_map(attributes, coords, altitude)
    for i in (0, 10, len(coords) - 1):
        assert temperature[i] == pytest.approx(
            calculate_temperature(attributes, altitude[i], coords[i][1])
        )


def test_zero_radius_map(attributes, rng):
    tiny = dataclasses.replace(attributes, map_radius=0, mountain_spread=0.0)
    generated = generate_map(tiny, rng)
    assert generated.coords == [(0, 0)]
    assert generated.altitude[0] >= tiny.highest_elevation
    assert generated.temperature[0] == pytest.approx(
        tiny.base_temperature - generated.altitude[0] * tiny.altitude_temperature_variation
    )
