"""
Published map state.

Holds the most recent generation result and hands consumers versioned,
read-only snapshots. Regeneration builds a complete new result first and
then swaps the published snapshot in one step.
"""

import logging
import threading
from typing import NamedTuple, Optional

from ..config import GenerationConfig
from .grid import Grid
from .terrain_composer import GenerationResult, TerrainComposer

log = logging.getLogger(__name__)


class Snapshot(NamedTuple):
    """A published result and the version it was published under."""

    version: int
    result: GenerationResult

    @property
    def grid(self) -> Grid:
        return self.result.grid

    @property
    def meshes(self):
        return self.result.meshes


class GridManager:
    """
    Owner of the published map.

    Consumers call ``current()`` and keep the snapshot they got for as long
    as they read from it; a regeneration never mutates a published
    snapshot, it replaces it.
    """

    def __init__(self, composer: Optional[TerrainComposer] = None):
        self.composer = composer or TerrainComposer()
        self._snapshot: Optional[Snapshot] = None
        self._version = 0
        self._publish_lock = threading.Lock()
        self._generate_lock = threading.Lock()

    @property
    def version(self) -> int:
        """Version of the published snapshot (0 before the first publish)."""
        return self._version

    def current(self) -> Optional[Snapshot]:
        """The published snapshot, or None if nothing was generated yet."""
        return self._snapshot

    def is_current(self, snapshot: Snapshot) -> bool:
        """True while ``snapshot`` is still the published one."""
        return self._snapshot is not None and snapshot.version == self._snapshot.version

    def regenerate(self, config: GenerationConfig) -> Snapshot:
        """
        Run a full generation and publish it.

        Regenerations are serialised; the previous snapshot stays
        published until the new one is complete.
        """

        with self._generate_lock:
            result = self.composer.generate(config)
            return self.publish(result)

    def publish(self, result: GenerationResult) -> Snapshot:
        """Swap in an already generated result under a new version."""

        with self._publish_lock:
            self._version += 1
            snapshot = Snapshot(self._version, result)
            self._snapshot = snapshot

        log.debug("Published map version %d (%dx%d)",
                  snapshot.version, result.grid.width, result.grid.height)
        return snapshot
