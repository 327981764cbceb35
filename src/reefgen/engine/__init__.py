"""
Cave map generation engine.

Assembles the cell grid, resolves corner vertices and tessellates chunk
meshes; publishes results through the GridManager.
"""

from .feature_generators import Zone
from .grid import Grid, Cell, GridAssembler
from .vertex_resolver import VertexGrid, VertexResolver
from .tessellator import ChunkMesh, Tessellator, SUBMESH_NAMES
from .terrain_composer import TerrainComposer, GenerationResult, generate
from .grid_manager import GridManager, Snapshot
from .heightmap_analyzer import HeightmapAnalyzer

__all__ = [
    "Zone", "Grid", "Cell", "GridAssembler",
    "VertexGrid", "VertexResolver",
    "ChunkMesh", "Tessellator", "SUBMESH_NAMES",
    "TerrainComposer", "GenerationResult", "generate",
    "GridManager", "Snapshot", "HeightmapAnalyzer"
]
