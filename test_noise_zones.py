#!/usr/bin/env python3
"""
Noise, zone classification, perimeter and floor smoothing tests.
"""

import numpy as np
import pytest

from reefgen import GenerationConfig, Zone
from reefgen.procgen.modules.noise import (
    NoiseField, value_noise, ZONE_CHANNEL, PERIMETER_CHANNEL
)
from reefgen.procgen.modules.smoothing import HeightfieldSmoother
from reefgen.engine.feature_generators import ZoneClassifier, PerimeterBuilder, floor_detail
from reefgen.engine.feature_generators.perimeter import edge_distance


def test_noise_deterministic_and_bounded():
    a = NoiseField(123, scale=10.0, octaves=4).sample_grid(64, 48)
    b = NoiseField(123, scale=10.0, octaves=4).sample_grid(64, 48)

    assert a.shape == (64, 48)
    assert np.array_equal(a, b)
    assert a.min() >= 0.0 and a.max() <= 1.0
    assert a.std() > 0.0


def test_noise_seed_changes_output():
    a = NoiseField(1, scale=10.0).sample_grid(32, 32)
    b = NoiseField(2, scale=10.0).sample_grid(32, 32)
    assert not np.array_equal(a, b)


def test_channels_are_independent():
    zone = NoiseField.for_channel(42, ZONE_CHANNEL, 10.0).sample_grid(32, 32)
    perimeter = NoiseField.for_channel(42, PERIMETER_CHANNEL, 10.0).sample_grid(32, 32)
    assert not np.array_equal(zone, perimeter)


def test_scalar_sample_returns_float():
    field = NoiseField(5, scale=8.0)
    value = field.sample(3.5, 7.25)
    assert isinstance(value, float)
    assert 0.0 <= value <= 1.0


def test_value_noise_interpolates_lattice():
    # At integer points the noise equals the hashed lattice value
    xs = np.arange(5, dtype=float)
    values = value_noise(xs, np.zeros(5), seed=3)
    mids = value_noise(xs[:-1] + 0.5, np.zeros(4), seed=3)
    low = np.minimum(values[:-1], values[1:])
    high = np.maximum(values[:-1], values[1:])
    assert np.all((mids >= low - 1e-12) & (mids <= high + 1e-12))


@pytest.mark.parametrize("kwargs", [{"scale": 0.0}, {"scale": 1.0, "octaves": 0}])
def test_noise_rejects_bad_arguments(kwargs):
    with pytest.raises(ValueError):
        NoiseField(1, **kwargs)


def test_zone_thresholds():
    classifier = ZoneClassifier(GenerationConfig())
    zones = classifier.classify(np.array([0.1, 0.35, 0.5, 0.65, 0.9]))
    assert list(zones) == [Zone.DEEP, Zone.MID, Zone.MID, Zone.SHALLOW, Zone.SHALLOW]


def test_every_cell_gets_one_zone():
    values, zones = ZoneClassifier(GenerationConfig(seed=8)).run(50, 40)
    assert zones.shape == (50, 40)
    assert set(np.unique(zones)) <= {int(z) for z in Zone}


def test_zone_heights_monotonic():
    classifier = ZoneClassifier(GenerationConfig())
    heights = classifier.base_height(np.array([Zone.SHALLOW, Zone.MID, Zone.DEEP]))
    assert heights[0] >= heights[1] >= heights[2]


def test_zone_submesh_index():
    assert [zone.submesh for zone in Zone] == [1, 2, 3]


def test_floor_detail_disabled_and_bounded():
    assert not floor_detail(GenerationConfig(width=20, height=20, floor_detail_amount=0.0)).any()

    detail = floor_detail(GenerationConfig(width=20, height=20, floor_detail_amount=0.5))
    assert detail.shape == (20, 20)
    assert np.abs(detail).max() <= 0.5


def test_edge_distance():
    distance = edge_distance(5, 4)
    assert distance[0, 0] == 0
    assert distance[2, 1] == 1
    assert distance[4, 3] == 0


def test_perimeter_without_noise_is_exact_band():
    config = GenerationConfig(width=20, height=20, perimeter_thickness=3, perimeter_noise_amount=0)
    perimeter = PerimeterBuilder(config).build(20, 20)

    assert perimeter[:3, :].all() and perimeter[-3:, :].all()
    assert perimeter[:, :3].all() and perimeter[:, -3:].all()
    assert not perimeter[3:-3, 3:-3].any()


def test_perimeter_noise_stays_within_amount():
    config = GenerationConfig(width=60, height=60, perimeter_thickness=4, perimeter_noise_amount=2)
    perimeter = PerimeterBuilder(config).build(60, 60)
    distance = edge_distance(60, 60)

    assert perimeter[distance < 2].all()
    assert not perimeter[distance >= 6].any()


def test_smoothing_keeps_constant_field():
    heights = np.full((12, 9), -3.0)
    smoothed = HeightfieldSmoother(passes=5).smooth(heights, np.ones((12, 9), dtype=np.int8))
    assert np.allclose(smoothed, -3.0)
    assert smoothed is not heights


def test_smoothing_blends_less_across_zones():
    heights = np.zeros((10, 10))
    heights[5:, :] = -6.0
    zones = np.zeros((10, 10), dtype=np.int8)
    zones[5:, :] = Zone.DEEP

    penalised = HeightfieldSmoother(passes=1, zone_penalty=0.25).smooth(heights, zones)
    unpenalised = HeightfieldSmoother(passes=1, zone_penalty=1.0).smooth(heights, zones)

    # Shallow cell next to the boundary is pulled down less with the penalty
    assert unpenalised[4, 5] < penalised[4, 5] < 0.0
