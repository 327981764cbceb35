"""
Depth zone classification.

Turns broad-scale zone noise into Shallow/Mid/Deep labels and the base
floor height of each zone.
"""

import numpy as np
from enum import IntEnum
from typing import Tuple

from ...config import GenerationConfig
from ...procgen.modules.noise import NoiseField, ZONE_CHANNEL, FLOOR_DETAIL_CHANNEL


class Zone(IntEnum):
    SHALLOW = 0
    MID = 1
    DEEP = 2

    @property
    def submesh(self) -> int:
        """Floor submesh index (0 is reserved for walls)."""
        return 1 + int(self)


class ZoneClassifier:
    """Threshold classifier over the zone noise channel."""

    def __init__(self, config: GenerationConfig):
        self.deep_threshold = config.deep_threshold
        self.mid_threshold = config.mid_threshold
        self.base_heights = np.array(
            [config.shallow_height, config.mid_height, config.deep_height],
            dtype=np.float64
        )
        self.noise = NoiseField.for_channel(
            config.seed, ZONE_CHANNEL, config.zone_scale,
            config.zone_octaves, config.zone_persistence, config.zone_lacunarity
        )

    def classify(self, values: np.ndarray) -> np.ndarray:
        """Map noise values to Zone labels (int8 array)."""

        values = np.asarray(values)
        zones = np.full(values.shape, Zone.SHALLOW, dtype=np.int8)
        zones[values < self.mid_threshold] = Zone.MID
        zones[values < self.deep_threshold] = Zone.DEEP
        return zones

    def base_height(self, zones: np.ndarray) -> np.ndarray:
        """Configured floor height of each cell's zone."""
        return self.base_heights[zones]

    def run(self, width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Sample and classify every cell.

        Returns:
            (zone_noise, zones)
        """

        values = self.noise.sample_grid(width, height)
        return values, self.classify(values)


def floor_detail(config: GenerationConfig) -> np.ndarray:
    """Signed floor-detail offsets in ``[-amount, amount]`` (zeros when disabled)."""

    shape = (config.width, config.height)
    if config.floor_detail_amount == 0:
        return np.zeros(shape)

    field = NoiseField.for_channel(
        config.seed, FLOOR_DETAIL_CHANNEL, config.floor_detail_scale,
        config.floor_detail_octaves
    )
    detail = field.sample_grid(config.width, config.height)
    return (detail - 0.5) * 2.0 * config.floor_detail_amount
