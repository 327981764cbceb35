#!/usr/bin/env python3
"""
Vertex resolution and tessellation tests.
"""

import numpy as np

from reefgen import GenerationConfig, Grid, generate
from reefgen.engine import VertexGrid, VertexResolver, Tessellator
from reefgen.engine.vertex_resolver import gather_corners, WALL_SUBMESH
from reefgen.procgen.modules.smoothing import weighted_smooth_3x3, neighbour_minimum


def flat_grid(width, height, floor=0.0):
    return Grid(
        np.zeros((width, height), dtype=bool),
        np.full((width, height), floor),
        np.zeros((width, height)),
        np.zeros((width, height), dtype=np.int8),
    )


def pillar_grid():
    """6x6 open floor at height 0 with one wall cell of rise 10 at (2, 2)."""

    is_wall = np.zeros((6, 6), dtype=bool)
    is_wall[2, 2] = True
    wall_height = np.zeros((6, 6))
    wall_height[2, 2] = 10.0
    return Grid(is_wall, np.zeros((6, 6)), wall_height, np.zeros((6, 6), dtype=np.int8))


def test_corner_aggregation():
    corners = gather_corners(pillar_grid())

    assert corners.is_wall.shape == (7, 7)
    expected = np.zeros((7, 7), dtype=bool)
    expected[2:4, 2:4] = True
    assert np.array_equal(corners.is_wall, expected)
    assert (corners.wall_top[expected] == 10.0).all()
    assert (corners.submesh[expected] == WALL_SUBMESH).all()
    assert (corners.submesh[~expected] == 1).all()


def test_wall_heights_do_not_bleed_into_floor():
    config = GenerationConfig(wall_top_noise=0.0, wall_height_boost=0.0)
    vertices = VertexResolver(config).resolve(pillar_grid())

    floor = ~vertices.is_wall
    assert np.allclose(vertices.heights[floor], 0.0)
    assert (vertices.heights[vertices.is_wall] > 0.0).all()


def test_unsmoothed_wall_vertex_height():
    config = GenerationConfig(
        wall_top_noise=0.0, wall_height_boost=1.5, wall_smooth_passes=0, floor_smooth_passes=0
    )
    vertices = VertexResolver(config).resolve(pillar_grid())
    assert np.allclose(vertices.heights[2:4, 2:4], 11.5)


def test_wall_top_noise_bounded():
    config = GenerationConfig(wall_top_noise=2.0, wall_height_boost=0.0)
    offsets = VertexResolver(config).wall_noise_offsets((7, 7))
    assert offsets.min() >= 0.0 and offsets.max() <= 2.0


def test_floor_vertices_stay_within_floor_range():
    result = generate(GenerationConfig(width=48, height=48, seed=9, mesa_count=4,
                                       mesa_radius_max=6.0, mesa_min_spacing=8.0))
    grid, vertices = result.grid, result.vertices

    open_floor = grid.floor_height[~grid.is_wall]
    floor = ~vertices.is_wall
    assert vertices.heights[floor].min() >= open_floor.min() - 1e-9
    assert vertices.heights[floor].max() <= open_floor.max() + 1e-9


def test_floor_has_no_downward_spikes():
    result = generate(GenerationConfig(width=40, height=40, seed=13, mesa_count=3,
                                       mesa_radius_max=5.0, mesa_min_spacing=8.0))
    heights, is_wall = result.vertices.heights, result.vertices.is_wall

    minimum, found = neighbour_minimum(heights, ~is_wall)
    floor = ~is_wall & found
    assert (heights[floor] >= minimum[floor]).all()


def test_weighted_smoothing_respects_masks():
    values = np.zeros((5, 5))
    values[2, 2] = 9.0
    update = np.zeros((5, 5), dtype=bool)
    update[2, 1] = True

    smoothed = weighted_smooth_3x3(values, update, passes=1, center_weight=4.0)
    assert smoothed[2, 2] == 9.0
    assert 0.0 < smoothed[2, 1] < 9.0
    assert smoothed[0, 0] == 0.0

    excluded = np.ones((5, 5), dtype=bool)
    excluded[2, 2] = False
    isolated = weighted_smooth_3x3(values, update, passes=1, include=excluded)
    assert isolated[2, 1] == 0.0


def test_flat_quads_cover_cell_area():
    config = GenerationConfig(width=4, height=4, cell_size=2.0)
    grid = flat_grid(4, 4)
    vertices = VertexResolver(config).resolve(grid)
    meshes = Tessellator(config).build(grid, vertices)

    assert len(meshes) == 1
    mesh = meshes[0]
    assert mesh.triangle_count == 32
    assert len(mesh.submesh("shallow")) == 32
    assert np.isclose(mesh.surface_area(), 16 * config.cell_size ** 2)

    low, high = mesh.bounds()
    assert np.allclose(low, [0.0, 0.0, 0.0])
    assert np.allclose(high, [8.0, 0.0, 8.0])


def _single_quad(heights):
    config = GenerationConfig(width=1, height=1)
    vertices = VertexGrid(
        np.asarray(heights, dtype=float),
        np.zeros((2, 2), dtype=bool),
        np.ones((2, 2), dtype=np.int8),
    )
    return Tessellator(config).build_chunk(flat_grid(1, 1), vertices, 0, 0)


def test_diagonal_follows_smaller_height_difference():
    # heights[x, y]: h11 raised, so the 10-01 diagonal is flatter
    mesh = _single_quad([[0.0, 0.0], [0.0, 5.0]])
    assert mesh.submesh("shallow").tolist() == [[0, 2, 1], [1, 2, 3]]

    # h01 raised, so the 00-11 diagonal is flatter
    mesh = _single_quad([[0.0, 5.0], [0.0, 0.0]])
    assert mesh.submesh("shallow").tolist() == [[0, 3, 1], [0, 2, 3]]


def test_diagonal_tie_uses_main_diagonal():
    mesh = _single_quad([[1.0, 1.0], [1.0, 1.0]])
    assert mesh.submesh("shallow").tolist() == [[0, 3, 1], [0, 2, 3]]


def test_quad_uvs_are_grid_coordinates():
    mesh = _single_quad([[0.0, 0.0], [0.0, 0.0]])
    assert mesh.uvs.tolist() == [[0, 0], [1, 0], [0, 1], [1, 1]]


def test_chunk_layout():
    config = GenerationConfig(width=40, height=40, chunk_size=16)
    grid = flat_grid(40, 40)
    vertices = VertexResolver(config).resolve(grid)
    tessellator = Tessellator(config)
    meshes = tessellator.build(grid, vertices)

    assert tessellator.chunk_counts(grid) == (3, 3)
    assert [mesh.name for mesh in meshes][:2] == ["Chunk_0_0", "Chunk_0_1"]
    assert sum(mesh.triangle_count for mesh in meshes) == 2 * 40 * 40
    # Edge chunk covers the 8x8 remainder
    assert meshes[-1].triangle_count == 2 * 8 * 8


def test_wall_quads_go_to_wall_submesh():
    config = GenerationConfig(wall_top_noise=0.0)
    grid = pillar_grid()
    vertices = VertexResolver(config).resolve(grid)
    mesh = Tessellator(config).build(grid, vertices)[0]

    # Cells sharing a corner with the pillar: 3x3 cells
    assert len(mesh.submesh("wall")) == 2 * 9
    assert len(mesh.submesh("shallow")) == 2 * (36 - 9)
