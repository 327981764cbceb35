"""
Mesa placement strategy.

Places non-overlapping rock formations by rejection sampling against a
minimum centre spacing, then paints one of five shape kinds for each.
"""

import logging
import math
import numpy as np
from typing import List, Sequence, Tuple

from ...config import GenerationConfig, FORMATION_KINDS
from .base import FormationStrategy, FormationResult, Placement

log = logging.getLogger(__name__)

ATTEMPTS_PER_FORMATION = 12


def roll_kind(roll: float, weights: Sequence[float], kinds: Sequence[str] = FORMATION_KINDS) -> str:
    """
    Pick a kind by cumulative probability.

    A roll past every cumulative bound (weights summing below 1.0) falls
    through to the last kind.
    """

    cumulative = 0.0
    for kind, weight in zip(kinds, weights):
        cumulative = min(1.0, cumulative + weight)
        if roll < cumulative:
            return kind
    return kinds[-1]


def _box(shape: Tuple[int, int], cx: float, cy: float, rx: float, ry: float):
    """
    Coordinates of the bounding box around a centre, clipped to the
    1-cell interior margin. None when the box is empty.
    """

    w, h = shape
    x0 = max(1, int(math.floor(cx - rx)))
    x1 = min(w - 2, int(math.ceil(cx + rx)))
    y0 = max(1, int(math.floor(cy - ry)))
    y1 = min(h - 2, int(math.ceil(cy + ry)))
    if x0 > x1 or y0 > y1:
        return None

    X, Y = np.meshgrid(np.arange(x0, x1 + 1), np.arange(y0, y1 + 1), indexing='ij')
    return X, Y, (slice(x0, x1 + 1), slice(y0, y1 + 1))


def _paint_disc(mask: np.ndarray, cx: float, cy: float, radius: float) -> None:
    box = _box(mask.shape, cx, cy, radius, radius)
    if box is None:
        return
    X, Y, region = box
    mask[region] |= (X - cx) ** 2 + (Y - cy) ** 2 <= radius ** 2


def _paint_rect(mask: np.ndarray, x0: float, x1: float, y0: float, y1: float) -> None:
    cx, cy = (x0 + x1) / 2.0, (y0 + y1) / 2.0
    box = _box(mask.shape, cx, cy, (x1 - x0) / 2.0, (y1 - y0) / 2.0)
    if box is None:
        return
    X, Y, region = box
    mask[region] |= (X >= x0) & (X <= x1) & (Y >= y0) & (Y <= y1)


def paint_round(mask, cx, cy, radius, rng, edge_noise=0.3) -> None:
    """Irregular disc: cells within ``radius + noise`` of the centre."""

    reach = radius * (1.0 + edge_noise)
    box = _box(mask.shape, cx, cy, reach, reach)
    if box is None:
        return
    X, Y, region = box

    if edge_noise > 0:
        noise = rng.uniform(-edge_noise * radius, edge_noise * radius, size=X.shape)
    else:
        noise = 0.0

    limit = np.maximum(radius + noise, 0.0)
    mask[region] |= (X - cx) ** 2 + (Y - cy) ** 2 <= limit ** 2


def paint_hourglass(mask, cx, cy, radius, rng, edge_noise=0.3) -> None:
    """Two lobes above and below the centre joined by a sine-pinched waist."""

    top = cy - radius / 2.0
    bottom = cy + radius / 2.0
    lobe = radius / 2.0
    _paint_disc(mask, cx, top, lobe)
    _paint_disc(mask, cx, bottom, lobe)

    box = _box(mask.shape, cx, cy, radius / 3.0, radius / 2.0)
    if box is None:
        return
    X, Y, region = box

    # Narrowest (radius / 6) halfway between the lobe centres
    t = (Y - top) / radius
    half_width = radius / 3.0 * (1.0 - 0.5 * np.sin(np.pi * np.clip(t, 0.0, 1.0)))
    mask[region] |= (t >= 0) & (t <= 1) & (np.abs(X - cx) <= half_width)


def paint_canyon(mask, cx, cy, radius, rng, edge_noise=0.3) -> None:
    """Walled band with a meandering open channel down the middle."""

    horizontal = rng.randint(2) == 0
    half_length = 2.0 * radius + rng.uniform(0.0, radius)
    gap_half = radius / 4.0
    wall_half = radius / 3.0
    amplitude = radius / 4.0
    phase = rng.uniform(0.0, 2.0 * np.pi)

    half_across = gap_half + 2.0 * wall_half + amplitude
    if horizontal:
        box = _box(mask.shape, cx, cy, half_length, half_across)
    else:
        box = _box(mask.shape, cx, cy, half_across, half_length)
    if box is None:
        return
    X, Y, region = box

    along, across = (X - cx, Y - cy) if horizontal else (Y - cy, X - cx)
    centreline = amplitude * np.sin(along * np.pi / radius + phase)
    offset = np.abs(across - centreline)

    band = (np.abs(along) <= half_length) & (offset > gap_half) & (offset <= gap_half + 2.0 * wall_half)
    mask[region] |= band


def paint_chunky(mask, cx, cy, radius, rng, edge_noise=0.3) -> None:
    """3-6 overlapping axis-aligned rectangles inside the bounding radius."""

    for _ in range(rng.randint(3, 7)):
        ox, oy = rng.uniform(-radius / 2.0, radius / 2.0, size=2)
        half_w, half_h = rng.uniform(radius / 4.0, radius / 2.0, size=2)
        x0 = max(cx - radius, cx + ox - half_w)
        x1 = min(cx + radius, cx + ox + half_w)
        y0 = max(cy - radius, cy + oy - half_h)
        y1 = min(cy + radius, cy + oy + half_h)
        _paint_rect(mask, x0, x1, y0, y1)


def paint_boulders(mask, cx, cy, radius, rng, edge_noise=0.3) -> None:
    """3-7 small filled circles scattered inside the bounding area."""

    for _ in range(rng.randint(3, 8)):
        boulder = rng.uniform(min(1.0, radius / 2.0), radius / 2.0)
        spread = max(0.0, radius - boulder)
        ox, oy = rng.uniform(-spread, spread, size=2)
        _paint_disc(mask, cx + ox, cy + oy, boulder)


SHAPES = {
    "round": paint_round,
    "hourglass": paint_hourglass,
    "canyon": paint_canyon,
    "chunky": paint_chunky,
    "boulders": paint_boulders,
}


def paint_formation(mask: np.ndarray, placement: Placement, rng, edge_noise: float = 0.3) -> None:
    """Paint one placed formation into ``mask`` in place."""
    SHAPES[placement.kind](mask, placement.cx, placement.cy, placement.radius, rng, edge_noise)


class MesaPlacement(FormationStrategy):
    """
    Rejection-sampled mesa placement.

    Stops after ``mesa_count`` accepted formations or
    ``12 * mesa_count`` attempts, whichever comes first; a shortfall is
    not an error.
    """

    name = "mesa"

    def apply(
        self,
        shape: Tuple[int, int],
        perimeter: np.ndarray,
        config: GenerationConfig
    ) -> FormationResult:

        rng = np.random.RandomState(config.seed & 0xFFFFFFFF)
        placements = self.place(shape, config, rng)

        occupancy = np.zeros(shape, dtype=bool)
        for placement in placements:
            paint_formation(occupancy, placement, rng, config.mesa_edge_noise)

        return FormationResult(occupancy, placements)

    def place(
        self,
        shape: Tuple[int, int],
        config: GenerationConfig,
        rng: np.random.RandomState
    ) -> List[Placement]:
        """Draw formation centres, radii and kinds."""

        w, h = shape
        margin = int(math.ceil(config.perimeter_thickness + config.mesa_radius_max))
        target = config.mesa_count
        max_attempts = ATTEMPTS_PER_FORMATION * target

        if margin >= w - margin or margin >= h - margin:
            if target:
                log.debug("Grid %dx%d too small for margin %d, no formations placed", w, h, margin)
            return []

        weights = config.shape_weights()
        placements: List[Placement] = []
        attempts = 0

        while len(placements) < target and attempts < max_attempts:
            attempts += 1
            cx = int(rng.randint(margin, w - margin))
            cy = int(rng.randint(margin, h - margin))

            if self._too_close(cx, cy, placements, config.mesa_min_spacing):
                continue

            radius = float(rng.uniform(config.mesa_radius_min, config.mesa_radius_max))
            kind = roll_kind(rng.random_sample(), weights)
            placements.append(Placement(cx, cy, radius, kind))

        if len(placements) < target:
            log.debug("Placed %d of %d formations in %d attempts",
                      len(placements), target, attempts)

        return placements

    @staticmethod
    def _too_close(cx: int, cy: int, placements: List[Placement], spacing: float) -> bool:
        for other in placements:
            if math.hypot(cx - other.cx, cy - other.cy) < spacing:
                return True
        return False
