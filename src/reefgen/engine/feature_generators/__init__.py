"""
Grid feature generators.

Zones, the perimeter band and the formation strategies that decide
where solid rock sits.
"""

from .base import FormationStrategy, FormationResult, Placement
from .zones import Zone, ZoneClassifier, floor_detail
from .perimeter import PerimeterBuilder
from .mesas import MesaPlacement
from .corridors import CorridorCarve

__all__ = [
    "FormationStrategy", "FormationResult", "Placement",
    "Zone", "ZoneClassifier", "floor_detail", "PerimeterBuilder",
    "MesaPlacement", "CorridorCarve"
]
