"""
Generation modules.

Each module provides one family of grid operations:
- noise: seeded fractal value noise
- erosion: cellular wall erosion and flood-fill connectivity repair
- smoothing: weighted neighbourhood smoothing of heights
"""

from . import noise
from . import erosion
from . import smoothing

__all__ = ["noise", "erosion", "smoothing"]
