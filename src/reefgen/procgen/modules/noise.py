"""
Noise functions for cave generation.

Seeded fractal value noise built from a hashed integer lattice:
- value_noise: single octave coherent noise in [0, 1]
- NoiseField: fractal sum of octaves with per-octave offsets
- channel seeds: independent offset streams per noise use
"""

import numpy as np
from typing import Union

ArrayLike = Union[float, np.ndarray]

# Distinct constants added to the run seed for each named noise use.
ZONE_CHANNEL = 0
FLOOR_DETAIL_CHANNEL = 1013
PERIMETER_CHANNEL = 2029
WALL_TOP_CHANNEL = 3041
FORMATION_HEIGHT_CHANNEL = 4057

_OFFSET_RANGE = 10000


def channel_seed(seed: int, channel: int) -> int:
    """Seed for one named noise channel, kept inside the RandomState range."""
    return (int(seed) + int(channel)) & 0xFFFFFFFF


def hash_coord(ix: np.ndarray, iy: np.ndarray, seed: int = 0) -> np.ndarray:
    """Hash integer lattice coordinates to values in [0, 1]."""

    seed_term = (int(seed) & 0x7FFFFFFF) * 1664525
    h = (ix * 374761393 + iy * 668265263 + seed_term) % 2147483647
    h = h ^ (h >> 13)
    h = (h * 1274126177) % 2147483647
    h = h ^ (h >> 16)
    return (h % 2147483647) / 2147483646.0


def smooth_step(t: np.ndarray) -> np.ndarray:
    """Smooth interpolation function (3t² - 2t³)."""
    return t * t * (3.0 - 2.0 * t)


def value_noise(x: ArrayLike, y: ArrayLike, seed: int = 0) -> np.ndarray:
    """
    Single octave value noise.

    Args:
        x, y: Coordinates (scalars or arrays of matching shape)
        seed: Lattice seed

    Returns:
        Noise values in range [0, 1]
    """

    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    # Grid coordinates
    x0 = np.floor(x).astype(np.int64)
    y0 = np.floor(y).astype(np.int64)
    x1 = x0 + 1
    y1 = y0 + 1

    # Smooth interpolation of the fractional parts
    u = smooth_step(x - x0)
    v = smooth_step(y - y0)

    c00 = hash_coord(x0, y0, seed)
    c10 = hash_coord(x1, y0, seed)
    c01 = hash_coord(x0, y1, seed)
    c11 = hash_coord(x1, y1, seed)

    top = c00 + u * (c10 - c00)
    bottom = c01 + u * (c11 - c01)

    return top + v * (bottom - top)


class NoiseField:
    """
    Seeded fractal value noise sampler.

    Each octave samples value noise at
    ``(x + offset_o) / scale * frequency`` where the offsets are drawn from
    a RandomState seeded with the field seed. Amplitude is multiplied by
    ``persistence`` and frequency by ``lacunarity`` per octave, and the sum
    is normalised by the total amplitude.
    """

    def __init__(
        self,
        seed: int,
        scale: float,
        octaves: int = 4,
        persistence: float = 0.5,
        lacunarity: float = 2.0,
    ):
        if scale <= 0:
            raise ValueError(f"Noise scale must be positive, got {scale}")
        if octaves < 1:
            raise ValueError(f"Noise needs at least one octave, got {octaves}")

        self.seed = int(seed)
        self.scale = float(scale)
        self.octaves = int(octaves)
        self.persistence = float(persistence)
        self.lacunarity = float(lacunarity)

        rng = np.random.RandomState(self.seed & 0xFFFFFFFF)
        self.offsets = rng.randint(-_OFFSET_RANGE, _OFFSET_RANGE, size=(self.octaves, 2)).astype(np.float64)

    @classmethod
    def for_channel(
        cls,
        seed: int,
        channel: int,
        scale: float,
        octaves: int = 4,
        persistence: float = 0.5,
        lacunarity: float = 2.0,
    ) -> "NoiseField":
        """Build the field for one named noise use."""
        return cls(channel_seed(seed, channel), scale, octaves, persistence, lacunarity)

    def sample(self, x: ArrayLike, y: ArrayLike) -> ArrayLike:
        """
        Sample the field.

        Args:
            x, y: Coordinates (scalars or arrays of matching shape)

        Returns:
            Values in [0, 1]; a float for scalar input
        """

        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)

        total = np.zeros(np.broadcast(x, y).shape)
        amplitude = 1.0
        frequency = 1.0
        max_value = 0.0

        for octave in range(self.octaves):
            ox, oy = self.offsets[octave]
            sx = (x + ox) / self.scale * frequency
            sy = (y + oy) / self.scale * frequency

            total += value_noise(sx, sy, self.seed + octave) * amplitude
            max_value += amplitude

            amplitude *= self.persistence
            frequency *= self.lacunarity

        if max_value > 0:
            total = total / max_value

        result = np.clip(total, 0.0, 1.0)
        if result.ndim == 0:
            return float(result)
        return result

    def sample_grid(self, width: int, height: int, step: float = 1.0) -> np.ndarray:
        """Sample every cell position; result is indexed ``[x, y]``."""

        xs = np.arange(width, dtype=np.float64) * step
        ys = np.arange(height, dtype=np.float64) * step
        X, Y = np.meshgrid(xs, ys, indexing='ij')
        return self.sample(X, Y)
