"""
Base formation strategy and common placement records.
"""

import numpy as np
from typing import List, NamedTuple, Tuple
from abc import ABC, abstractmethod

from ...config import GenerationConfig


class Placement(NamedTuple):
    """One accepted formation: centre, bounding radius and shape kind."""

    cx: int
    cy: int
    radius: float
    kind: str


class FormationResult(NamedTuple):
    """Output of a formation strategy."""

    occupancy: np.ndarray          # True where a formation (solid rock) sits
    placements: List[Placement]


class FormationStrategy(ABC):
    """
    Base class for formation/openness generators.

    A strategy decides which interior cells are solid rock. Perimeter
    cells are passed in so strategies can respect the border band; the
    assembler gives the perimeter priority either way.
    """

    name = "base"

    @abstractmethod
    def apply(
        self,
        shape: Tuple[int, int],
        perimeter: np.ndarray,
        config: GenerationConfig
    ) -> FormationResult:
        """Produce the formation occupancy mask for a grid of ``shape``."""
        pass
