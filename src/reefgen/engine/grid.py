"""
Cell grid data model and assembly.

The Grid stores one array per cell attribute, indexed ``[x, y]`` with
shape ``(width, height)``. Arrays are read-only once assembled; every
regeneration builds a new Grid.
"""

import numpy as np
from typing import NamedTuple, Optional

from ..config import GenerationConfig
from ..procgen.modules.noise import NoiseField, FORMATION_HEIGHT_CHANNEL
from .feature_generators.zones import Zone


class Cell(NamedTuple):
    is_wall: bool
    floor_height: float
    wall_height: float
    zone: Zone


def _freeze(array: np.ndarray) -> np.ndarray:
    array = np.ascontiguousarray(array)
    array.setflags(write=False)
    return array


class Grid:
    """
    Read-only cell grid.

    Attributes:
        is_wall: bool array, True for solid cells
        floor_height: world-space floor (sand) height, also under walls
        wall_height: rise above the floor for walls, 0 for open cells
        zone: int8 array of Zone labels
    """

    def __init__(
        self,
        is_wall: np.ndarray,
        floor_height: np.ndarray,
        wall_height: np.ndarray,
        zone: np.ndarray
    ):
        shape = is_wall.shape
        for name, array in (("floor_height", floor_height), ("wall_height", wall_height), ("zone", zone)):
            if array.shape != shape:
                raise ValueError(f"{name} shape {array.shape} does not match grid shape {shape}")

        self.width, self.height = shape
        self.is_wall = _freeze(is_wall.astype(bool))
        self.floor_height = _freeze(floor_height.astype(np.float64))
        self.wall_height = _freeze(wall_height.astype(np.float64))
        self.zone = _freeze(zone.astype(np.int8))

    @property
    def shape(self):
        return (self.width, self.height)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> Optional[Cell]:
        """Cell at (x, y), or None outside the grid."""

        if not self.in_bounds(x, y):
            return None
        return Cell(
            bool(self.is_wall[x, y]),
            float(self.floor_height[x, y]),
            float(self.wall_height[x, y]),
            Zone(int(self.zone[x, y])),
        )

    def is_solid(self, x: int, y: int) -> bool:
        """True for wall cells and for any position outside the grid."""

        cell = self.get(x, y)
        return cell is None or cell.is_wall

    def walls_at(self, xs, ys) -> np.ndarray:
        """Vectorised ``is_solid`` over coordinate arrays."""

        xs, ys = np.broadcast_arrays(np.asarray(xs, dtype=np.int64), np.asarray(ys, dtype=np.int64))
        inside = (xs >= 0) & (xs < self.width) & (ys >= 0) & (ys < self.height)

        result = np.ones(xs.shape, dtype=bool)
        result[inside] = self.is_wall[xs[inside], ys[inside]]
        return result

    def top_height(self) -> np.ndarray:
        """Surface height of every cell (floor plus wall rise)."""
        return self.floor_height + self.wall_height

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            self.shape == other.shape
            and np.array_equal(self.is_wall, other.is_wall)
            and np.array_equal(self.floor_height, other.floor_height)
            and np.array_equal(self.wall_height, other.wall_height)
            and np.array_equal(self.zone, other.zone)
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height}, walls={int(self.is_wall.sum())})"


class GridAssembler:
    """
    Combines zone floors, formation occupancy and the perimeter band.

    Priority per cell: perimeter, then formation, then open floor.
    """

    def __init__(self, config: GenerationConfig):
        self.config = config
        self.height_noise = NoiseField.for_channel(
            config.seed, FORMATION_HEIGHT_CHANNEL, config.mesa_height_scale, 2
        )

    def perimeter_heights(self):
        """(floor_height, wall_height) of every perimeter cell."""

        deep = self.config.deep_height
        return deep - 2.0, self.config.perimeter_wall_height + abs(deep) + 2.0

    def formation_heights(self, width: int, height: int) -> np.ndarray:
        """Formation wall rise, interpolated between the configured limits."""

        t = self.height_noise.sample_grid(width, height)
        low, high = self.config.mesa_height_min, self.config.mesa_height_max
        return low + (high - low) * t

    def assemble(
        self,
        zones: np.ndarray,
        floor_heights: np.ndarray,
        formations: np.ndarray,
        perimeter: np.ndarray
    ) -> Grid:
        """
        Build the Grid.

        Args:
            zones: Zone label per cell
            floor_heights: Smoothed floor heights per cell
            formations: True where a formation occupies the cell
            perimeter: True for border band cells
        """

        width, height = zones.shape
        perimeter_floor, perimeter_wall = self.perimeter_heights()

        formation_only = formations & ~perimeter
        is_wall = perimeter | formation_only

        floor = np.where(perimeter, perimeter_floor, floor_heights)

        wall = np.zeros((width, height))
        wall[formation_only] = self.formation_heights(width, height)[formation_only]
        wall[perimeter] = perimeter_wall

        return Grid(is_wall, floor, wall, zones)
