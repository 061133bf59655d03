"""Per-iteration pheromone updates.

Ants never write to the shared field while a generation is running.
Each successful path is credited into a ``DepositBuffer`` and the buffer
is merged in one step after every walk has finished, so the result does
not depend on the order the ants ran in.  Separated from ``fields.py`` so
the update rule can be changed without touching the storage.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from dronewatch.pheromones.fields import PheromoneField
    from dronewatch.world.terrain import Cell

HOTSPOT_DEPOSIT_MULTIPLIER = 2.0


def path_deposit(deposit_strength: float, path_length: int) -> float:
    """Return the per-cell deposit ``Q / length`` for a completed path."""
    if path_length <= 0:
        msg = f"path length must be positive, got {path_length}"
        raise ValueError(msg)
    return deposit_strength / path_length


def elite_bonus(
    deposit_strength: float,
    best_length: int,
    elite_multiplier: float,
) -> float:
    """Return the per-cell elite bonus ``Q / best_length * multiplier``."""
    return path_deposit(deposit_strength, best_length) * elite_multiplier


@dataclass
class DepositBuffer:
    """Accumulates deposits for one iteration before they hit the field.

    Attributes:
        width: Grid columns.
        height: Grid rows.
        hotspots: Boolean mask of hotspot cells (extra credit).
        grid: Pending additions, indexed as ``grid[row, col]``.
    """

    width: int
    height: int
    hotspots: NDArray[np.bool_] | None = None
    grid: NDArray[np.float64] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Start with nothing pending."""
        self.grid = np.zeros((self.height, self.width), dtype=np.float64)

    def add_path(self, path: Sequence[Cell], deposit_strength: float) -> float:
        """Credit every cell of a successful path.

        Each cell receives ``Q / len(path)``.  Hotspot cells receive an
        additional ``2 * amount`` on top of the base deposit.

        Args:
            path: Cells from start to goal.
            deposit_strength: The constant ``Q``.

        Returns:
            The base per-cell amount that was credited.
        """
        amount = path_deposit(deposit_strength, len(path))
        for cell in path:
            self.grid[cell] += amount
            if self.hotspots is not None and self.hotspots[cell]:
                self.grid[cell] += amount * HOTSPOT_DEPOSIT_MULTIPLIER
        return amount

    def merge_into(self, pheromone: PheromoneField) -> None:
        """Apply all pending deposits to ``pheromone`` and clear the buffer."""
        pheromone.grid += self.grid
        self.grid.fill(0.0)

    @property
    def total(self) -> float:
        """Sum of all pending deposits."""
        return float(self.grid.sum())
