"""
Procedural underwater cave generation.

This package provides:
- Seeded noise, zone classification and formation placement
- Connectivity-preserving erosion for carved caves
- Floor/wall-aware vertex resolution and chunked tessellation
"""

from .config import GenerationConfig, ConfigurationError, load_config
from .engine import (
    TerrainComposer, GenerationResult, generate,
    Grid, Cell, Zone, VertexGrid, ChunkMesh,
    GridManager, Snapshot, HeightmapAnalyzer
)

__version__ = "0.1.0"

__all__ = [
    "GenerationConfig",
    "ConfigurationError",
    "load_config",
    "TerrainComposer",
    "GenerationResult",
    "generate",
    "Grid",
    "Cell",
    "Zone",
    "VertexGrid",
    "ChunkMesh",
    "GridManager",
    "Snapshot",
    "HeightmapAnalyzer",
]
