"""Neighbourhood queries for ant walks.

Ants move on an 8-connected grid.  A neighbour is only offered if it is
inside the grid, not blocked, and not already visited in the current
walk, so an empty result means the walk has hit a dead end.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

    from dronewatch.world.terrain import Cell, TerrainGrid

from dronewatch.world.terrain import TerrainClass

# Compass offsets as (d_row, d_col), clockwise from north-west
COMPASS_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)


@dataclass(frozen=True)
class NeighbourhoodExplorer:
    """Finds the cells an ant may step into next.

    Attributes:
        terrain: The grid being explored.
    """

    terrain: TerrainGrid

    def neighbours(self, cell: Cell, visited: NDArray[np.bool_]) -> list[Cell]:
        """Return valid, unvisited 8-connected neighbours of ``cell``.

        Args:
            cell: Current ``(row, col)`` position.
            visited: Boolean mask of cells already on this walk.

        Returns:
            Candidate cells in compass order; empty at a dead end.
        """
        row, col = cell
        classes = self.terrain.classes
        result: list[Cell] = []
        for d_row, d_col in COMPASS_OFFSETS:
            nr, nc = row + d_row, col + d_col
            if not (0 <= nr < self.terrain.height and 0 <= nc < self.terrain.width):
                continue
            if classes[nr, nc] == TerrainClass.BLOCKED or visited[nr, nc]:
                continue
            result.append((nr, nc))
        return result
