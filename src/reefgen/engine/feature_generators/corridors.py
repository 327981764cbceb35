"""
Corridor carving strategy.

Random walkers carve open corridors out of solid rock; the result is
cleaned up with cellular erosion and a flood fill so that every open
cell is reachable from the main cavity.
"""

import logging
import numpy as np
from typing import Tuple

from ...config import GenerationConfig
from ...procgen.modules import erosion
from .base import FormationStrategy, FormationResult

log = logging.getLogger(__name__)

# Cardinal step per direction roll
_STEPS = [(1, 0), (-1, 0), (0, 1), (0, -1)]


def brush_radius(step: int, total_steps: int, walker: int, min_brush: int, max_brush: int) -> int:
    """Brush radius oscillating smoothly between min and max over the walk."""

    t = step / total_steps if total_steps else 0.0
    blend = np.sin(t * np.pi * 6.0 + walker) * 0.5 + 0.5
    return int(np.rint(min_brush + (max_brush - min_brush) * blend))


def carve_disc(carved: np.ndarray, cx: int, cy: int, radius: int) -> None:
    """Open a disc, clamping its cells into the 1-cell interior margin."""

    w, h = carved.shape
    offsets = np.arange(-radius, radius + 1)
    dx, dy = np.meshgrid(offsets, offsets, indexing='ij')
    inside = dx * dx + dy * dy <= radius * radius

    xs = np.clip(cx + dx[inside], 1, w - 2)
    ys = np.clip(cy + dy[inside], 1, h - 2)
    carved[xs, ys] = True


class CorridorCarve(FormationStrategy):
    """Walker-carved corridors with erosion and isolation removal."""

    name = "corridor"

    def carve(self, shape: Tuple[int, int], config: GenerationConfig) -> np.ndarray:
        """Run every walker; returns the raw open-floor mask."""

        w, h = shape
        carved = np.zeros(shape, dtype=bool)
        if w < 5 or h < 5:
            log.debug("Grid %dx%d too small to carve corridors", w, h)
            return carved

        rng = np.random.RandomState(config.seed & 0xFFFFFFFF)
        steps = config.walker_steps

        for walker in range(config.corridor_walkers):
            cx = int(rng.randint(min(5, w // 2), max(w - 5, w // 2 + 1)))
            cy = int(rng.randint(min(5, h // 2), max(h - 5, h // 2 + 1)))

            for step in range(steps):
                radius = brush_radius(step, steps, walker, config.min_brush, config.max_brush)
                carve_disc(carved, cx, cy, radius)

                dx, dy = _STEPS[rng.randint(4)]
                cx = int(np.clip(cx + dx, 2, w - 3))
                cy = int(np.clip(cy + dy, 2, h - 3))

        return carved

    def apply(
        self,
        shape: Tuple[int, int],
        perimeter: np.ndarray,
        config: GenerationConfig
    ) -> FormationResult:

        floor = self.carve(shape, config) & ~perimeter
        carved_cells = int(floor.sum())

        floor = erosion.erode_walls(floor, config.erosion_passes, config.min_wall_neighbors, locked=perimeter)
        floor = erosion.remove_wall_spikes(floor, locked=perimeter)
        floor = erosion.fill_floor_nubs(floor)

        # Flood fill from the centre; unreachable pockets become rock
        floor = erosion.remove_isolated_floor(floor)

        # Closing pockets can expose new spikes
        floor = erosion.remove_wall_spikes(floor, locked=perimeter)

        log.debug("Corridor carve: %d cells carved, %d open after cleanup",
                  carved_cells, int(floor.sum()))

        return FormationResult(~floor, [])
