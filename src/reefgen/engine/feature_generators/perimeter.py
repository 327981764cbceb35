"""
Noise-deformed border band.

A cell at edge distance ``d`` is perimeter when
``d < thickness + (noise - 0.5) * 2 * amount``.
"""

import numpy as np

from ...config import GenerationConfig
from ...procgen.modules.noise import NoiseField, PERIMETER_CHANNEL


def edge_distance(width: int, height: int) -> np.ndarray:
    """Distance in cells from each cell to the nearest grid edge."""

    x_coords, y_coords = np.ogrid[:width, :height]
    return np.minimum(
        np.minimum(x_coords, width - 1 - x_coords),
        np.minimum(y_coords, height - 1 - y_coords)
    )


class PerimeterBuilder:
    """Computes the permanently solid border band."""

    def __init__(self, config: GenerationConfig):
        self.thickness = config.perimeter_thickness
        self.amount = config.perimeter_noise_amount
        self.noise = NoiseField.for_channel(
            config.seed, PERIMETER_CHANNEL, config.perimeter_noise_scale,
            config.perimeter_noise_octaves
        )

    def build(self, width: int, height: int) -> np.ndarray:
        """Boolean mask of perimeter cells, indexed [x, y]."""

        distance = edge_distance(width, height)
        if self.amount == 0:
            return distance < self.thickness

        noise = self.noise.sample_grid(width, height)
        limit = self.thickness + (noise - 0.5) * 2.0 * self.amount
        return distance < limit
