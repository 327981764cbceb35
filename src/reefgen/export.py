"""
Export of generated maps.

- save_grid_npz / load_grid_npz: cell arrays plus resolved vertices
- save_obj: chunk meshes as Wavefront OBJ, one group per chunk submesh
- save_preview_png: top-down colour preview of zones and walls
"""

import logging
import numpy as np
from pathlib import Path
from typing import List, Union

from .engine.grid import Grid
from .engine.tessellator import ChunkMesh, SUBMESH_NAMES
from .engine.terrain_composer import GenerationResult

log = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Preview colours: wall, shallow, mid, deep
PREVIEW_COLOURS = np.array([
    [96, 84, 72],
    [222, 205, 150],
    [70, 150, 170],
    [20, 50, 110],
], dtype=np.float64)


def save_grid_npz(result: GenerationResult, output_path: PathLike) -> Path:
    """Save the grid and vertex arrays of a result to a compressed .npz."""

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    grid = result.grid
    np.savez_compressed(
        output_path,
        is_wall=grid.is_wall,
        floor_height=grid.floor_height,
        wall_height=grid.wall_height,
        zone=grid.zone,
        vertex_height=result.vertices.heights,
        vertex_is_wall=result.vertices.is_wall,
        vertex_submesh=result.vertices.submesh,
        seed=np.int64(result.config.seed),
    )
    log.debug("Saved grid arrays to %s", output_path)
    return output_path


def load_grid_npz(path: PathLike) -> Grid:
    """Load a Grid saved by ``save_grid_npz``."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Grid file not found: {path}")

    with np.load(path) as data:
        return Grid(data["is_wall"], data["floor_height"], data["wall_height"], data["zone"])


def save_obj(meshes: List[ChunkMesh], output_path: PathLike) -> Path:
    """
    Write chunk meshes to a Wavefront OBJ file.

    Every chunk submesh becomes a group named ``<chunk>_<submesh>`` with a
    matching ``usemtl`` so a renderer can bind one material per submesh.
    """

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    offset = 1
    with open(output_path, 'w') as f:
        f.write("# reefgen cave mesh\n")
        for mesh in meshes:
            for x, y, z in mesh.vertices:
                f.write(f"v {x:.6f} {y:.6f} {z:.6f}\n")
            for u, v in mesh.uvs:
                f.write(f"vt {u:.6f} {v:.6f}\n")

            for name, tris in zip(SUBMESH_NAMES, mesh.submeshes):
                if len(tris) == 0:
                    continue
                f.write(f"g {mesh.name}_{name}\nusemtl {name}\n")
                for a, b, c in tris + offset:
                    f.write(f"f {a}/{a} {b}/{b} {c}/{c}\n")

            offset += len(mesh.vertices)

    log.debug("Saved %d chunks to %s", len(meshes), output_path)
    return output_path


def preview_image(grid: Grid) -> np.ndarray:
    """RGB preview array of shape (height, width, 3), shaded by floor height."""

    index = np.where(grid.is_wall, 0, 1 + grid.zone.astype(np.int64))
    colours = PREVIEW_COLOURS[index]

    floor = grid.floor_height
    span = floor.max() - floor.min()
    shade = 0.75 + 0.25 * (floor - floor.min()) / span if span > 1e-8 else np.ones_like(floor)
    shade = np.where(grid.is_wall, 1.0, shade)

    rgb = np.clip(colours * shade[..., None], 0, 255).astype(np.uint8)
    # Image rows are y, columns are x
    return np.ascontiguousarray(rgb.transpose(1, 0, 2))


def save_preview_png(grid: Grid, output_path: PathLike, scale: int = 1) -> Path:
    """Save a top-down PNG preview of the grid."""

    from PIL import Image

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    image = Image.fromarray(preview_image(grid))
    if scale > 1:
        image = image.resize((grid.width * scale, grid.height * scale), Image.NEAREST)
    image.save(output_path)

    log.debug("Saved preview to %s", output_path)
    return output_path
