"""
Cellular erosion and connectivity repair for carved cave masks.

Masks are boolean arrays indexed ``[x, y]`` where True marks open floor.
Every pass returns a new array; inputs are never modified.

Implements:
- erode_walls: Moore-neighbourhood wall erosion
- fill_floor_nubs: cardinal thinning of dead-end floor cells
- remove_wall_spikes: cardinal removal of one-cell wall spikes
- remove_isolated_floor: flood fill from the centre, unreachable floor -> wall
"""

import logging
import numpy as np
from typing import Optional, Tuple
from scipy import ndimage

log = logging.getLogger(__name__)

MOORE_OFFSETS = [(-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1)]
CARDINAL_OFFSETS = [(-1, 0), (1, 0), (0, -1), (0, 1)]

_FOUR_CONNECTED = ndimage.generate_binary_structure(2, 1)


def count_neighbours(mask: np.ndarray, offsets, pad_value: bool = False) -> np.ndarray:
    """Count True neighbours of every cell for the given offsets."""

    padded = np.pad(mask, 1, mode='constant', constant_values=pad_value)
    w, h = mask.shape
    count = np.zeros(mask.shape, dtype=np.int32)
    for dx, dy in offsets:
        count += padded[1 + dx:w + 1 + dx, 1 + dy:h + 1 + dy]
    return count


def interior_mask(shape: Tuple[int, int], margin: int = 1) -> np.ndarray:
    """True for cells at least ``margin`` cells away from every edge."""

    mask = np.zeros(shape, dtype=bool)
    w, h = shape
    if w > 2 * margin and h > 2 * margin:
        mask[margin:w - margin, margin:h - margin] = True
    return mask


def _editable(floor: np.ndarray, locked: Optional[np.ndarray]) -> np.ndarray:
    editable = interior_mask(floor.shape)
    if locked is not None:
        editable &= ~locked
    return editable


def erode_walls(
    floor: np.ndarray,
    passes: int,
    min_wall_neighbors: int,
    locked: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Open up thin walls.

    A wall cell becomes floor when fewer than ``min_wall_neighbors`` of its
    8 neighbours are walls. Only interior cells change; ``locked`` cells
    always stay walls.

    Args:
        floor: Open-floor mask
        passes: Number of passes, each reading the previous pass only
        min_wall_neighbors: Wall neighbour threshold
        locked: Optional mask of cells that must remain walls

    Returns:
        New floor mask
    """

    result = floor.copy()
    editable = _editable(floor, locked)

    for _ in range(passes):
        walls = ~result
        wall_neighbours = count_neighbours(walls, MOORE_OFFSETS, pad_value=True)
        opened = walls & editable & (wall_neighbours < min_wall_neighbors)
        if not opened.any():
            break
        result = result | opened

    return result


def fill_floor_nubs(floor: np.ndarray) -> np.ndarray:
    """
    Close dead-end floor cells.

    A floor cell with fewer than 2 floor cells among its 4 cardinal
    neighbours becomes wall. Repeats until nothing changes.
    """

    result = floor.copy()
    editable = interior_mask(floor.shape)

    while True:
        floor_neighbours = count_neighbours(result, CARDINAL_OFFSETS, pad_value=False)
        closed = result & editable & (floor_neighbours < 2)
        if not closed.any():
            return result
        result = result & ~closed


def remove_wall_spikes(floor: np.ndarray, locked: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Remove one-cell wall spikes.

    A wall cell with fewer than 2 walls among its 4 cardinal neighbours
    becomes floor. Repeats until nothing changes.
    """

    result = floor.copy()
    editable = _editable(floor, locked)

    while True:
        walls = ~result
        wall_neighbours = count_neighbours(walls, CARDINAL_OFFSETS, pad_value=True)
        opened = walls & editable & (wall_neighbours < 2)
        if not opened.any():
            return result
        result = result | opened


def find_seed_cell(floor: np.ndarray) -> Optional[Tuple[int, int]]:
    """
    Floor cell nearest the grid centre.

    Distance is Chebyshev distance from ``(width // 2, height // 2)``; ties
    go to the smaller x offset, then the smaller y offset.
    """

    cells = np.argwhere(floor)
    if len(cells) == 0:
        return None

    w, h = floor.shape
    dx = cells[:, 0] - w // 2
    dy = cells[:, 1] - h // 2
    ring = np.maximum(np.abs(dx), np.abs(dy))

    order = np.lexsort((dy, dx, ring))
    x, y = cells[order[0]]
    return int(x), int(y)


def remove_isolated_floor(floor: np.ndarray) -> np.ndarray:
    """
    Keep only the floor region 4-connected to the centre seed cell.

    Returns:
        New floor mask; unchanged copy if there is no floor at all
    """

    seed = find_seed_cell(floor)
    if seed is None:
        log.debug("No floor cell to flood fill from")
        return floor.copy()

    labels, num_regions = ndimage.label(floor, structure=_FOUR_CONNECTED)
    main = labels == labels[seed]

    removed = int(floor.sum() - main.sum())
    if removed:
        log.debug("Flood fill from %s closed %d cells in %d isolated regions",
                  seed, removed, num_regions - 1)

    return main


def is_connected(floor: np.ndarray) -> bool:
    """True when every floor cell lies in one 4-connected region."""

    if not floor.any():
        return True
    _, num_regions = ndimage.label(floor, structure=_FOUR_CONNECTED)
    return num_regions == 1
