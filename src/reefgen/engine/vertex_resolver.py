"""
Dual-grid vertex height resolution.

Every cell corner becomes a vertex influenced by up to four cells. Wall
and floor vertices are resolved and smoothed independently so that tall
walls never drag nearby floor upward and floor averaging never reaches
into wall heights. A final clamp removes downward floor spikes.
"""

import logging
import numpy as np
from typing import NamedTuple

from ..config import GenerationConfig
from ..procgen.modules.noise import NoiseField, WALL_TOP_CHANNEL
from ..procgen.modules.smoothing import weighted_smooth_3x3, neighbour_minimum
from .grid import Grid

log = logging.getLogger(__name__)

WALL_SUBMESH = 0

# Contributing cell offsets, in the order their zones are read
_CELL_OFFSETS = [(-1, -1), (-1, 0), (0, -1), (0, 0)]


class VertexGrid(NamedTuple):
    """Resolved corner grid of shape (width + 1, height + 1)."""

    heights: np.ndarray
    is_wall: np.ndarray
    submesh: np.ndarray

    @property
    def shape(self):
        return self.heights.shape


class CornerSamples(NamedTuple):
    """Raw per-vertex aggregates before smoothing."""

    is_wall: np.ndarray
    wall_top: np.ndarray
    floor_height: np.ndarray
    submesh: np.ndarray


def _cell_view(values: np.ndarray, dx: int, dy: int, fill) -> np.ndarray:
    """Value of cell (vx + dx, vy + dy) for every vertex (vx, vy)."""

    w, h = values.shape
    out = np.full((w + 1, h + 1), fill, dtype=np.result_type(values, np.asarray(fill)))
    # Vertex vx reads cell vx + dx, valid for vx in [-dx, w - dx)
    out[-dx:w - dx, -dy:h - dy] = values
    return out


def gather_corners(grid: Grid) -> CornerSamples:
    """Aggregate the up-to-four contributing cells of every vertex."""

    w, h = grid.shape
    shape = (w + 1, h + 1)

    wall_count = np.zeros(shape, dtype=np.int32)
    wall_top = np.full(shape, -np.inf)
    floor_sum = np.zeros(shape)
    floor_count = np.zeros(shape, dtype=np.int32)
    zone = np.zeros(shape, dtype=np.int8)

    tops = grid.top_height()
    for dx, dy in _CELL_OFFSETS:
        present = _cell_view(np.ones((w, h), dtype=bool), dx, dy, False)
        walls = _cell_view(grid.is_wall, dx, dy, False)
        floors = present & ~walls

        wall_count += walls
        wall_top = np.where(walls, np.maximum(wall_top, _cell_view(tops, dx, dy, -np.inf)), wall_top)

        floor_sum += np.where(floors, _cell_view(grid.floor_height, dx, dy, 0.0), 0.0)
        floor_count += floors
        zone = np.where(floors, _cell_view(grid.zone, dx, dy, 0), zone)

    is_wall = wall_count > 0
    floor_height = np.where(floor_count > 0, floor_sum / np.maximum(floor_count, 1), 0.0)
    submesh = np.where(is_wall, WALL_SUBMESH, 1 + zone.astype(np.int16)).astype(np.int8)

    return CornerSamples(is_wall, wall_top, floor_height, submesh)


class VertexResolver:
    """
    Resolves vertex heights from a cell grid.

    Steps, in order:
        1. wall vertices: tallest contributing wall top + noise + boost
           floor vertices: mean contributing floor height
        2. wall smoothing over wall vertices (all neighbours contribute)
        3. floor smoothing over floor vertices (floor neighbours only)
        4. floor clamp to the lowest floor neighbour
    """

    def __init__(self, config: GenerationConfig):
        self.config = config
        self.wall_noise = NoiseField.for_channel(
            config.seed, WALL_TOP_CHANNEL, config.wall_noise_scale,
            config.wall_noise_octaves, 0.5, 2.1
        )
        self.wall_center_weight = 4.0
        self.floor_center_weight = 4.0

    def wall_noise_offsets(self, shape) -> np.ndarray:
        """Wall top noise sampled at every vertex's world position."""

        gw, gh = shape
        cell = self.config.cell_size
        X, Y = np.meshgrid(np.arange(gw) * cell, np.arange(gh) * cell, indexing='ij')
        return self.config.wall_top_noise * self.wall_noise.sample(X, Y)

    def initial_heights(self, corners: CornerSamples) -> np.ndarray:
        """Unsmoothed heights: wall tops on wall vertices, floors elsewhere."""

        boost = self.wall_noise_offsets(corners.is_wall.shape) + self.config.wall_height_boost
        wall_top = np.where(corners.is_wall, corners.wall_top, 0.0)
        return np.where(corners.is_wall, wall_top + boost, corners.floor_height)

    def smooth_walls(self, heights: np.ndarray, is_wall: np.ndarray) -> np.ndarray:
        return weighted_smooth_3x3(
            heights, is_wall, self.config.wall_smooth_passes, self.wall_center_weight
        )

    def smooth_floor(self, heights: np.ndarray, is_wall: np.ndarray) -> np.ndarray:
        floor = ~is_wall
        return weighted_smooth_3x3(
            heights, floor, self.config.floor_smooth_passes, self.floor_center_weight, include=floor
        )

    @staticmethod
    def clamp_floor(heights: np.ndarray, is_wall: np.ndarray) -> np.ndarray:
        """Raise every floor vertex to at least its lowest floor neighbour."""

        floor = ~is_wall
        minimum, found = neighbour_minimum(heights, floor)
        clamp = floor & found
        return np.where(clamp, np.maximum(heights, minimum), heights)

    def resolve(self, grid: Grid) -> VertexGrid:
        """Produce the vertex grid for ``grid``."""

        corners = gather_corners(grid)
        heights = self.initial_heights(corners)

        wall_heights = self.smooth_walls(heights, corners.is_wall)
        floor_heights = self.smooth_floor(heights, corners.is_wall)
        floor_heights = self.clamp_floor(floor_heights, corners.is_wall)

        resolved = np.where(corners.is_wall, wall_heights, floor_heights)

        log.debug("Resolved %d vertices (%d wall)", resolved.size, int(corners.is_wall.sum()))

        for array in (resolved, corners.is_wall, corners.submesh):
            array.setflags(write=False)
        return VertexGrid(resolved, corners.is_wall, corners.submesh)
