"""
Weighted neighbourhood smoothing for floor heightfields and vertex grids.

- HeightfieldSmoother: zone-aware inverse-distance smoothing of cell floors
- weighted_smooth_3x3: masked 3x3 smoothing used by vertex resolution
- neighbour_minimum: masked 3x3 minimum used by the floor clamp
"""

import numpy as np
from typing import Optional, Tuple

# 3x3 neighbour weights: cardinal 1.0, diagonal 0.5
KERNEL_3X3 = [
    (dx, dy, 1.0 if dx == 0 or dy == 0 else 0.5)
    for dx in (-1, 0, 1) for dy in (-1, 0, 1)
    if not (dx == 0 and dy == 0)
]


def shifted(values: np.ndarray, dx: int, dy: int, fill) -> np.ndarray:
    """
    Array whose ``[x, y]`` entry is ``values[x + dx, y + dy]``.

    Positions that fall outside the grid take ``fill``.
    """

    r = max(abs(dx), abs(dy))
    if r == 0:
        return values.copy()
    padded = np.pad(values, r, mode='constant', constant_values=fill)
    w, h = values.shape
    return padded[r + dx:r + dx + w, r + dy:r + dy + h]


class HeightfieldSmoother:
    """
    Iterative inverse-distance smoothing of per-cell floor heights.

    Each pass replaces every height with a weighted average over the
    (2r+1)x(2r+1) neighbourhood. The centre contributes ``self_weight``;
    a neighbour contributes ``1 / distance``, scaled by ``zone_penalty``
    when its zone differs from the centre's. Out-of-bounds neighbours
    are skipped.
    """

    def __init__(
        self,
        passes: int,
        radius: int = 2,
        self_weight: float = 2.0,
        zone_penalty: float = 0.25
    ):
        self.passes = passes
        self.radius = radius
        self.self_weight = self_weight
        self.zone_penalty = zone_penalty

        self.offsets = [
            (dx, dy, 1.0 / np.hypot(dx, dy))
            for dx in range(-radius, radius + 1)
            for dy in range(-radius, radius + 1)
            if not (dx == 0 and dy == 0)
        ]

    def smooth(self, heights: np.ndarray, zones: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Smooth a heightfield.

        Args:
            heights: Floor heights indexed [x, y]
            zones: Optional zone labels; without them no penalty applies

        Returns:
            New array; each pass reads only the previous pass's output
        """

        result = np.array(heights, dtype=np.float64)

        # Zone agreement does not change between passes
        factors = []
        for dx, dy, weight in self.offsets:
            inside = shifted(np.ones(result.shape, dtype=bool), dx, dy, False)
            factor = np.where(inside, weight, 0.0)
            if zones is not None:
                neighbour_zone = shifted(zones.astype(np.int16), dx, dy, -1)
                factor = np.where(neighbour_zone != zones, factor * self.zone_penalty, factor)
            factors.append(factor)

        total_weight = self.self_weight + sum(factors)

        for _ in range(self.passes):
            total = result * self.self_weight
            for (dx, dy, _), factor in zip(self.offsets, factors):
                total = total + shifted(result, dx, dy, 0.0) * factor
            result = total / total_weight

        return result


def weighted_smooth_3x3(
    values: np.ndarray,
    update: np.ndarray,
    passes: int,
    center_weight: float = 4.0,
    include: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Masked 3x3 weighted smoothing.

    Args:
        values: Heights indexed [x, y]
        update: Cells to recompute; all others pass through unchanged
        passes: Number of passes
        center_weight: Weight of the cell itself
        include: Cells allowed to contribute as neighbours (default: all)

    Returns:
        New array
    """

    result = np.asarray(values, dtype=np.float64).copy()
    if include is None:
        include = np.ones(result.shape, dtype=bool)

    factors = []
    for dx, dy, weight in KERNEL_3X3:
        contributes = shifted(include, dx, dy, False)
        factors.append((dx, dy, np.where(contributes, weight, 0.0)))

    total_weight = center_weight + sum(f for _, _, f in factors)

    for _ in range(passes):
        total = result * center_weight
        for dx, dy, factor in factors:
            total = total + shifted(result, dx, dy, 0.0) * factor
        result = np.where(update, total / total_weight, result)

    return result


def neighbour_minimum(values: np.ndarray, include: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Minimum over each cell's 3x3 neighbourhood (itself included).

    Only ``include`` cells take part.

    Returns:
        (minimum, found) where ``found`` is False for cells with no
        contributing neighbour
    """

    masked = np.where(include, values, np.inf)
    minimum = masked.copy()
    for dx, dy, _ in KERNEL_3X3:
        minimum = np.minimum(minimum, shifted(masked, dx, dy, np.inf))

    return minimum, np.isfinite(minimum)
