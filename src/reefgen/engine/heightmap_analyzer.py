"""
Generated map analysis.

Summarises a generation result for logs, manifests and sanity checks:
zone coverage, wall coverage, height statistics, floor connectivity and
mesh sizes.
"""

import numpy as np
from typing import Dict, Any, List
from scipy import ndimage

from .feature_generators import Zone
from .grid import Grid
from .terrain_composer import GenerationResult
from .vertex_resolver import VertexGrid
from .tessellator import ChunkMesh, SUBMESH_NAMES


class HeightmapAnalyzer:
    """
    Analyzes generated cave maps.

    Provides coverage and connectivity statistics used by the command line
    tools and the batch manifest.
    """

    def analyze(self, result: GenerationResult) -> Dict[str, Any]:
        """
        Comprehensive map analysis.

        Args:
            result: Output of a generation run

        Returns:
            Dictionary of statistics (JSON serialisable)
        """

        grid = result.grid
        return {
            "size": {"width": grid.width, "height": grid.height},
            "seed": result.config.seed,
            "strategy": result.config.strategy,
            "zones": self._zone_coverage(grid),
            "walls": self._wall_stats(grid),
            "floor": self._floor_stats(grid),
            "vertices": self._vertex_stats(result.vertices),
            "mesh": self._mesh_stats(result.meshes),
            "formations": self._formation_stats(result),
            "timings": {stage: round(seconds, 6) for stage, seconds in result.timings.items()},
        }

    def _zone_coverage(self, grid: Grid) -> Dict[str, float]:
        """Fraction of cells in each zone."""

        total = grid.zone.size
        return {
            zone.name.lower(): float(np.count_nonzero(grid.zone == zone)) / total
            for zone in Zone
        }

    def _wall_stats(self, grid: Grid) -> Dict[str, Any]:
        walls = grid.is_wall
        heights = grid.wall_height[walls]
        return {
            "fraction": float(walls.mean()),
            "count": int(walls.sum()),
            "max_height": float(heights.max()) if heights.size else 0.0,
            "mean_height": float(heights.mean()) if heights.size else 0.0,
        }

    def _floor_stats(self, grid: Grid) -> Dict[str, Any]:
        """Open floor statistics, including 4-connected region count."""

        floor = ~grid.is_wall
        heights = grid.floor_height[floor]
        labels, regions = ndimage.label(floor, structure=ndimage.generate_binary_structure(2, 1))

        largest = 0
        if regions:
            sizes = np.bincount(labels.ravel())[1:]
            largest = int(sizes.max())

        return {
            "count": int(floor.sum()),
            "regions": int(regions),
            "largest_region": largest,
            "min_height": float(heights.min()) if heights.size else 0.0,
            "max_height": float(heights.max()) if heights.size else 0.0,
            "mean_height": float(heights.mean()) if heights.size else 0.0,
        }

    def _vertex_stats(self, vertices: VertexGrid) -> Dict[str, Any]:
        return {
            "count": int(vertices.heights.size),
            "wall_count": int(vertices.is_wall.sum()),
            "min_height": float(vertices.heights.min()),
            "max_height": float(vertices.heights.max()),
        }

    def _mesh_stats(self, meshes: List[ChunkMesh]) -> Dict[str, Any]:
        triangles = {name: 0 for name in SUBMESH_NAMES}
        for mesh in meshes:
            for name, tris in zip(SUBMESH_NAMES, mesh.submeshes):
                triangles[name] += len(tris)

        return {
            "chunks": len(meshes),
            "vertices": int(sum(len(mesh.vertices) for mesh in meshes)),
            "triangles": triangles,
        }

    def _formation_stats(self, result: GenerationResult) -> Dict[str, Any]:
        kinds: Dict[str, int] = {}
        for placement in result.placements:
            kinds[placement.kind] = kinds.get(placement.kind, 0) + 1

        return {
            "placed": len(result.placements),
            "requested": result.config.mesa_count if result.config.strategy == "mesa" else 0,
            "kinds": kinds,
        }
