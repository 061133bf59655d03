"""PheromoneField — the colony's shared memory of good cells.

A single NumPy 2D array holds one concentration per grid cell.  The
field provides read/deposit primitives plus the two global updates the
planner applies every iteration: evaporation and elite reinforcement.
Batched, order-independent deposits live in ``updates.py``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from dronewatch.world.terrain import Cell

HOTSPOT_SEED_FACTOR = 5.0


@dataclass
class PheromoneField:
    """Per-cell pheromone concentrations.

    Attributes:
        width: Grid columns (must match the TerrainGrid).
        height: Grid rows (must match the TerrainGrid).
        grid: Concentration values (≥ 0) indexed as ``grid[row, col]``.
    """

    width: int
    height: int
    grid: NDArray[np.float64] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Start with an empty (all-zero) field."""
        self.grid = np.zeros((self.height, self.width), dtype=np.float64)

    @classmethod
    def seeded(
        cls,
        width: int,
        height: int,
        tau0: float,
        hotspots: Iterable[Cell] = (),
    ) -> PheromoneField:
        """Create a field initialised to ``tau0`` with boosted hotspots."""
        pheromone = cls(width=width, height=height)
        pheromone.seed(tau0, hotspots)
        return pheromone

    def seed(self, tau0: float, hotspots: Iterable[Cell] = ()) -> None:
        """Reset every cell to ``tau0`` and hotspot cells to ``5 * tau0``.

        Args:
            tau0: Base trail strength.
            hotspots: Cells pre-seeded with extra pheromone.
        """
        if tau0 < 0:
            msg = f"initial pheromone must be non-negative, got {tau0}"
            raise ValueError(msg)
        self.grid.fill(tau0)
        for cell in hotspots:
            self._check(cell)
            self.grid[cell] = HOTSPOT_SEED_FACTOR * tau0

    def value(self, cell: Cell) -> float:
        """Read the concentration at ``cell``.

        Raises:
            IndexError: If the cell is out of bounds.
        """
        self._check(cell)
        return float(self.grid[cell])

    def deposit(self, cell: Cell, amount: float) -> None:
        """Add pheromone at a single cell.

        Args:
            cell: ``(row, col)`` to reinforce.
            amount: Quantity to add (must be ≥ 0).

        Raises:
            ValueError: If ``amount`` is negative.
            IndexError: If the cell is out of bounds.
        """
        if amount < 0:
            msg = f"deposit amount must be non-negative, got {amount}"
            raise ValueError(msg)
        self._check(cell)
        self.grid[cell] += amount

    def evaporate(self, rate: float) -> None:
        """Decay the whole field in place: ``grid *= (1 - rate)``.

        Args:
            rate: Fraction lost, strictly between 0 and 1.

        Raises:
            ValueError: If ``rate`` is outside (0, 1).
        """
        if not 0.0 < rate < 1.0:
            msg = f"evaporation rate must be in (0, 1), got {rate}"
            raise ValueError(msg)
        self.grid *= 1.0 - rate

    def reinforce(self, path: Iterable[Cell], bonus_per_cell: float) -> None:
        """Elite update: add ``bonus_per_cell`` once to every cell of ``path``.

        Raises:
            ValueError: If ``bonus_per_cell`` is negative.
            IndexError: If any cell is out of bounds (nothing is applied).
        """
        cells = list(path)
        for cell in cells:
            self._check(cell)
        for cell in cells:
            self.deposit(cell, bonus_per_cell)

    def snapshot(self) -> NDArray[np.float64]:
        """Return a read-only copy of the concentrations."""
        view = self.grid.copy()
        view.flags.writeable = False
        return view

    def in_bounds(self, cell: Cell) -> bool:
        """Return True if ``cell`` lies inside the field."""
        row, col = cell
        return 0 <= row < self.height and 0 <= col < self.width

    def _check(self, cell: Cell) -> None:
        # Negative indices would wrap around in NumPy
        if not self.in_bounds(cell):
            msg = f"{cell} out of bounds for {self.width}x{self.height}"
            raise IndexError(msg)
