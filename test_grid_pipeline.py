#!/usr/bin/env python3
"""
Grid assembly and full pipeline tests.
"""

import numpy as np
import pytest

from reefgen import (
    GenerationConfig, TerrainComposer, GridManager, Grid, Zone, generate
)
from reefgen.engine import GridAssembler
from reefgen.engine.feature_generators import FormationStrategy, FormationResult, ZoneClassifier

SMALL = dict(width=48, height=48, mesa_count=4, mesa_radius_max=6.0, mesa_min_spacing=8.0)


def deep_box_config(**changes):
    """Every cell Deep, a one-cell border band and no formations."""

    values = dict(
        width=10, height=10, deep_threshold=1.5, mid_threshold=1.75,
        perimeter_thickness=1, perimeter_noise_amount=0,
        floor_detail_amount=0.0, mesa_count=0,
    )
    values.update(changes)
    return GenerationConfig(**values)


def test_deep_box_grid():
    config = deep_box_config()
    grid = generate(config).grid

    border = np.ones((10, 10), dtype=bool)
    border[1:-1, 1:-1] = False

    assert np.array_equal(grid.is_wall, border)
    assert (grid.zone == Zone.DEEP).all()
    assert np.allclose(grid.floor_height[1:-1, 1:-1], config.deep_height)
    assert np.allclose(grid.floor_height[border], config.deep_height - 2)
    assert np.allclose(grid.wall_height[border], config.perimeter_wall_height + abs(config.deep_height) + 2)
    assert not grid.wall_height[~border].any()


def test_deep_box_mesh():
    result = generate(deep_box_config())
    assert len(result.meshes) == 1

    mesh = result.meshes[0]
    assert mesh.name == "Chunk_0_0"
    assert len(mesh.vertices) == 400
    assert mesh.triangle_count == 200
    # Only quads whose four corners avoid the border ring are floor
    assert len(mesh.submesh("deep")) == 72
    assert len(mesh.submesh("wall")) == 128
    assert len(mesh.submesh("shallow")) == 0

    floor = ~result.vertices.is_wall
    assert floor.sum() == 49
    assert np.allclose(result.vertices.heights[floor], -6.0)


def test_wall_heights_consistent():
    grid = generate(GenerationConfig(seed=11, **SMALL)).grid
    assert (grid.wall_height >= 0).all()
    assert np.array_equal(grid.wall_height > 0, grid.is_wall)


def test_corridor_grid_wall_heights_consistent():
    config = GenerationConfig(
        width=50, height=50, strategy="corridor", corridor_walkers=3, walker_steps=120, seed=4
    )
    grid = generate(config).grid
    assert (grid.wall_height >= 0).all()
    assert np.array_equal(grid.wall_height > 0, grid.is_wall)


def test_generation_is_deterministic():
    config = GenerationConfig(seed=21, **SMALL)
    a = generate(config)
    b = generate(config)

    assert a.grid == b.grid
    assert np.array_equal(a.vertices.heights, b.vertices.heights)
    assert a.placements == b.placements
    assert len(a.meshes) == len(b.meshes)
    for mesh_a, mesh_b in zip(a.meshes, b.meshes):
        assert np.array_equal(mesh_a.vertices, mesh_b.vertices)


def test_seed_changes_map():
    a = generate(GenerationConfig(seed=1, **SMALL))
    b = generate(GenerationConfig(seed=2, **SMALL))
    assert a.grid != b.grid


def test_generate_accepts_dict_and_overrides():
    result = generate({"width": 24, "height": 20}, seed=3)
    assert result.grid.shape == (24, 20)
    assert result.config.seed == 3


def test_result_arrays_are_read_only():
    result = generate(deep_box_config())
    with pytest.raises(ValueError):
        result.grid.is_wall[0, 0] = False
    with pytest.raises(ValueError):
        result.vertices.heights[0, 0] = 1.0


def test_stage_timings_reported():
    result = generate(deep_box_config())
    assert set(result.timings) == {
        "perimeter", "zones", "formations", "smoothing", "assembly", "vertices", "tessellation"
    }


def test_out_of_bounds_queries():
    grid = generate(deep_box_config()).grid

    assert grid.get(-1, 0) is None
    assert grid.get(10, 3) is None
    assert grid.is_solid(-1, 5)
    assert grid.is_solid(3, 10)
    assert not grid.is_solid(4, 4)

    cell = grid.get(4, 4)
    assert not cell.is_wall and cell.zone == Zone.DEEP and cell.wall_height == 0.0

    walls = grid.walls_at([-1, 0, 4, 10], [4, 4, 4, 4])
    assert list(walls) == [True, True, False, True]


def test_grid_rejects_mismatched_arrays():
    with pytest.raises(ValueError):
        Grid(np.zeros((3, 3), dtype=bool), np.zeros((3, 3)), np.zeros((3, 4)), np.zeros((3, 3)))


def test_assembler_priority():
    config = deep_box_config(width=6, height=6)
    assembler = GridAssembler(config)

    zones = np.full((6, 6), Zone.DEEP, dtype=np.int8)
    floor = np.full((6, 6), -6.0)
    formations = np.zeros((6, 6), dtype=bool)
    formations[0:3, 2] = True
    perimeter = np.zeros((6, 6), dtype=bool)
    perimeter[0, :] = True

    grid = assembler.assemble(zones, floor, formations, perimeter)
    perimeter_floor, perimeter_wall = assembler.perimeter_heights()

    # Perimeter wins over formation
    assert grid.wall_height[0, 2] == perimeter_wall
    assert grid.floor_height[0, 2] == perimeter_floor
    # Formation cells keep the smoothed floor
    assert grid.is_wall[1, 2] and grid.floor_height[1, 2] == -6.0
    assert config.mesa_height_min <= grid.wall_height[1, 2] <= config.mesa_height_max
    assert not grid.is_wall[3, 3] and grid.wall_height[3, 3] == 0.0


class SolidCentre(FormationStrategy):
    name = "solid-centre"

    def apply(self, shape, perimeter, config):
        occupancy = np.zeros(shape, dtype=bool)
        occupancy[shape[0] // 2, shape[1] // 2] = True
        return FormationResult(occupancy, [])


def test_registered_strategy_is_used():
    composer = TerrainComposer()
    composer.register_strategy(SolidCentre())
    composer.strategies["mesa"] = composer.strategies["solid-centre"]

    grid = composer.generate(deep_box_config()).grid
    assert grid.is_wall[5, 5]
    assert grid.is_wall.sum() == 37


def test_grid_manager_versions():
    manager = GridManager()
    assert manager.version == 0
    assert manager.current() is None

    first = manager.regenerate(deep_box_config())
    assert first.version == 1
    assert manager.current() is first
    assert manager.is_current(first)

    second = manager.regenerate(deep_box_config(seed=5))
    assert second.version == 2
    assert not manager.is_current(first)
    assert manager.is_current(second)

    # The old snapshot is untouched by the swap
    assert first.grid.shape == (10, 10)
    assert first.result.config.seed == 42


def test_walls_at_broadcasts_coordinates():
    grid = generate(deep_box_config()).grid

    assert grid.walls_at(0, [1, 2]).tolist() == [True, True]
    assert grid.walls_at([3, 4, 12], 4).tolist() == [False, False, True]
    assert grid.walls_at([[0], [4]], [4, 5]).tolist() == [[True, True], [False, False]]
    assert bool(grid.walls_at(4, 4)) is False


def test_zones_partition_generated_map():
    config = GenerationConfig(seed=17, **SMALL)
    result = generate(config)
    zones, noise = result.grid.zone, result.zone_noise

    assert np.array_equal(zones, ZoneClassifier(config).classify(noise))
    assert (noise[zones == Zone.DEEP] < config.deep_threshold).all()
    mid = zones == Zone.MID
    assert ((noise[mid] >= config.deep_threshold) & (noise[mid] < config.mid_threshold)).all()
    assert (noise[zones == Zone.SHALLOW] >= config.mid_threshold).all()
