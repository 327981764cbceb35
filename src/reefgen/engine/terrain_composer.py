"""
Cave generation pipeline.

Runs every stage in order and returns a complete, read-only result:
noise -> zones / perimeter / formations -> floor smoothing -> grid
assembly -> vertex resolution -> tessellation.
"""

import logging
import time
import numpy as np
from typing import Dict, List, NamedTuple, Optional

from ..config import GenerationConfig, ConfigurationError, load_config
from ..procgen.modules.smoothing import HeightfieldSmoother
from .feature_generators import (
    FormationStrategy, MesaPlacement, CorridorCarve, Placement,
    ZoneClassifier, PerimeterBuilder, floor_detail
)
from .grid import Grid, GridAssembler
from .vertex_resolver import VertexGrid, VertexResolver
from .tessellator import ChunkMesh, Tessellator

log = logging.getLogger(__name__)


class GenerationResult(NamedTuple):
    """Everything one generation run produces."""

    config: GenerationConfig
    grid: Grid
    vertices: VertexGrid
    meshes: List[ChunkMesh]
    placements: List[Placement]
    zone_noise: np.ndarray
    timings: Dict[str, float]


class TerrainComposer:
    """
    Cave generation with pluggable formation strategies.

    Each stage is a pure transform over arrays; nothing is shared
    between runs.
    """

    def __init__(self):
        self.strategies: Dict[str, FormationStrategy] = {
            "mesa": MesaPlacement(),
            "corridor": CorridorCarve(),
        }

    def register_strategy(self, strategy: FormationStrategy):
        """Add or replace a formation strategy under its name."""
        self.strategies[strategy.name] = strategy

    def generate(self, config: Optional[GenerationConfig]) -> GenerationResult:
        """
        Generate a full cave map.

        Args:
            config: Generation configuration

        Returns:
            GenerationResult with the grid, vertex grid and chunk meshes

        Raises:
            ConfigurationError: if the config is missing or degenerate
        """

        if config is None:
            raise ConfigurationError(["configuration is missing"])
        config.validate()

        if config.strategy not in self.strategies:
            raise ConfigurationError([f"no strategy registered as {config.strategy!r}"])

        timings = {}
        width, height = config.width, config.height
        shape = (width, height)
        started = time.perf_counter()

        def mark(stage: str):
            nonlocal started
            now = time.perf_counter()
            timings[stage] = now - started
            started = now

        perimeter = PerimeterBuilder(config).build(width, height)
        mark("perimeter")

        classifier = ZoneClassifier(config)
        zone_noise, zones = classifier.run(width, height)
        base_floor = classifier.base_height(zones) + floor_detail(config)
        mark("zones")

        formation = self.strategies[config.strategy].apply(shape, perimeter, config)
        mark("formations")

        smoother = HeightfieldSmoother(config.height_smooth_passes, zone_penalty=config.zone_penalty)
        floor_heights = smoother.smooth(base_floor, zones)
        mark("smoothing")

        grid = GridAssembler(config).assemble(zones, floor_heights, formation.occupancy, perimeter)
        mark("assembly")

        vertices = VertexResolver(config).resolve(grid)
        mark("vertices")

        meshes = Tessellator(config).build(grid, vertices)
        mark("tessellation")

        log.info(
            "Generated %dx%d map (seed=%d, strategy=%s): %d formations, %d walls, %d chunks in %.3fs",
            width, height, config.seed, config.strategy, len(formation.placements),
            int(grid.is_wall.sum()), len(meshes), sum(timings.values())
        )

        zone_noise.setflags(write=False)
        return GenerationResult(config, grid, vertices, meshes, formation.placements, zone_noise, timings)


def generate(config, **overrides) -> GenerationResult:
    """
    Generate a map from a GenerationConfig, dict or JSON path.

    Keyword overrides are applied on top of ``config``. Use
    ``GenerationConfig()`` explicitly for the defaults.
    """

    if config is None:
        raise ConfigurationError(["configuration is missing"])
    return TerrainComposer().generate(load_config(config, **overrides))
