"""
Low-level generation building blocks: noise, erosion and smoothing.
"""

from .modules.noise import NoiseField
from .modules.smoothing import HeightfieldSmoother

__all__ = ["NoiseField", "HeightfieldSmoother"]
