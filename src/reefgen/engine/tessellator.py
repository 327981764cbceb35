"""
Chunked triangle mesh construction.

Splits the grid into square chunks and emits one quad per cell, each
quad split along the diagonal with the smaller height difference.
"""

import math
import numpy as np
from typing import List, Optional, Tuple

from ..config import GenerationConfig
from .grid import Grid
from .vertex_resolver import VertexGrid, WALL_SUBMESH

SUBMESH_NAMES = ("wall", "shallow", "mid", "deep")

# Quad corner order: (0,0), (1,0), (0,1), (1,1)
_CORNERS = [(0, 0), (1, 0), (0, 1), (1, 1)]

# Split along the 00-11 diagonal / along the 10-01 diagonal
_TRIS_MAIN_DIAGONAL = np.array([[0, 3, 1], [0, 2, 3]], dtype=np.int64)
_TRIS_ANTI_DIAGONAL = np.array([[0, 2, 1], [1, 2, 3]], dtype=np.int64)


class ChunkMesh:
    """
    One chunk of terrain geometry.

    Attributes:
        chunk_x, chunk_y: chunk coordinates
        vertices: (N, 3) float array of (x, height, z) positions
        uvs: (N, 2) float array, equal to grid coordinates
        submeshes: four (M, 3) int arrays of triangle indices
            (wall, shallow, mid, deep)
    """

    def __init__(self, chunk_x: int, chunk_y: int, vertices: np.ndarray, uvs: np.ndarray, submeshes: List[np.ndarray]):
        self.chunk_x = chunk_x
        self.chunk_y = chunk_y
        self.vertices = vertices
        self.uvs = uvs
        self.submeshes = submeshes

    @property
    def name(self) -> str:
        return f"Chunk_{self.chunk_x}_{self.chunk_y}"

    @property
    def triangle_count(self) -> int:
        return sum(len(tris) for tris in self.submeshes)

    def submesh(self, name: str) -> np.ndarray:
        return self.submeshes[SUBMESH_NAMES.index(name)]

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        return self.vertices.min(axis=0), self.vertices.max(axis=0)

    def surface_area(self) -> float:
        """Total 3D area of every triangle in the chunk."""

        total = 0.0
        for tris in self.submeshes:
            if len(tris) == 0:
                continue
            a, b, c = (self.vertices[tris[:, i]] for i in range(3))
            total += float(0.5 * np.linalg.norm(np.cross(b - a, c - a), axis=1).sum())
        return total

    def __repr__(self) -> str:
        return f"ChunkMesh({self.name}, vertices={len(self.vertices)}, triangles={self.triangle_count})"


class Tessellator:
    """
    Builds chunk meshes from a grid and its resolved vertices.

    Each quad is split along whichever diagonal has the smaller absolute
    height difference; a tie takes the 00-11 diagonal. A quad touching
    any wall vertex goes to the wall submesh, otherwise to the submesh
    of its cell's zone.
    """

    def __init__(self, config: GenerationConfig):
        self.chunk_size = config.chunk_size
        self.cell_size = config.cell_size

    def chunk_counts(self, grid: Grid) -> Tuple[int, int]:
        return (
            math.ceil(grid.width / self.chunk_size),
            math.ceil(grid.height / self.chunk_size),
        )

    def build(self, grid: Grid, vertices: VertexGrid) -> List[ChunkMesh]:
        """Every non-empty chunk, in x-major chunk order."""

        meshes = []
        count_x, count_y = self.chunk_counts(grid)
        for chunk_x in range(count_x):
            for chunk_y in range(count_y):
                mesh = self.build_chunk(grid, vertices, chunk_x, chunk_y)
                if mesh is not None:
                    meshes.append(mesh)
        return meshes

    def build_chunk(self, grid: Grid, vertices: VertexGrid, chunk_x: int, chunk_y: int) -> Optional[ChunkMesh]:
        """Mesh for one chunk, or None when it covers no cells."""

        start_x = chunk_x * self.chunk_size
        start_y = chunk_y * self.chunk_size
        xs = np.arange(start_x, min(start_x + self.chunk_size, grid.width))
        ys = np.arange(start_y, min(start_y + self.chunk_size, grid.height))
        if len(xs) == 0 or len(ys) == 0:
            return None

        GX, GY = np.meshgrid(xs, ys, indexing='ij')
        gx = GX.ravel()
        gy = GY.ravel()
        cells = len(gx)

        heights = vertices.heights
        corner_x = np.stack([gx + dx for dx, _ in _CORNERS], axis=1)
        corner_y = np.stack([gy + dy for _, dy in _CORNERS], axis=1)
        corner_h = heights[corner_x, corner_y]

        positions = np.stack(
            [corner_x * self.cell_size, corner_h, corner_y * self.cell_size], axis=-1
        ).reshape(cells * 4, 3).astype(np.float64)
        uvs = np.stack([corner_x, corner_y], axis=-1).reshape(cells * 4, 2).astype(np.float64)

        h00, h10, h01, h11 = (corner_h[:, i] for i in range(4))
        main_diagonal = np.abs(h00 - h11) <= np.abs(h10 - h01)

        any_wall = (vertices.submesh[corner_x, corner_y] == WALL_SUBMESH).any(axis=1)
        submesh = np.where(any_wall, WALL_SUBMESH, 1 + grid.zone[gx, gy].astype(np.int64))

        base = (np.arange(cells) * 4)[:, None, None]
        local = np.where(main_diagonal[:, None, None], _TRIS_MAIN_DIAGONAL, _TRIS_ANTI_DIAGONAL)
        triangles = base + local

        submeshes = [
            triangles[submesh == index].reshape(-1, 3).astype(np.int32)
            for index in range(len(SUBMESH_NAMES))
        ]

        return ChunkMesh(chunk_x, chunk_y, positions, uvs, submeshes)
