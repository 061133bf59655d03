"""TerrainGrid — terrain classification and heuristic desirability.

The grid is painted from rectangular regions (water bands, roads,
obstacles) and never changes afterwards.  The heuristic field is derived
once from the distance to the goal and scaled by terrain preference, so
ants are drawn toward the goal and along water and roads.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np
from numpy.typing import NDArray

from dronewatch.errors import InvalidConfiguration

Cell = tuple[int, int]

HEURISTIC_EPSILON = 1e-6


class TerrainClass(IntEnum):
    """Terrain categories.  Values double as the grid's integer codes."""

    BLOCKED = 0
    LAND = 1
    WATER = 2
    ROAD = 3


# Heuristic multiplier per terrain class
TERRAIN_PREFERENCE: dict[TerrainClass, float] = {
    TerrainClass.BLOCKED: 0.0,
    TerrainClass.LAND: 1.0,
    TerrainClass.WATER: 3.0,
    TerrainClass.ROAD: 2.0,
}


@dataclass(frozen=True)
class Region:
    """A half-open rectangle of cells.

    Attributes:
        row_start: First row (inclusive).
        row_stop: Last row (exclusive).
        col_start: First column (inclusive).
        col_stop: Last column (exclusive).
    """

    row_start: int
    row_stop: int
    col_start: int
    col_stop: int

    @classmethod
    def from_sequence(cls, values: Iterable[int]) -> Region:
        """Build a region from ``[row_start, row_stop, col_start, col_stop]``."""
        row_start, row_stop, col_start, col_stop = (int(v) for v in values)
        return cls(row_start, row_stop, col_start, col_stop)

    def as_slices(self) -> tuple[slice, slice]:
        """Return the region as NumPy index slices (clipped by NumPy)."""
        return (
            slice(max(self.row_start, 0), max(self.row_stop, 0)),
            slice(max(self.col_start, 0), max(self.col_stop, 0)),
        )


@dataclass
class TerrainGrid:
    """Terrain classes, hotspots and heuristic values for a grid.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        goal: Target cell the heuristic points toward.
        classes: Terrain codes indexed as ``classes[row, col]``.
        hotspots: Surveillance-priority cells.
        heuristic_field: Desirability values indexed as ``[row, col]``.
    """

    width: int
    height: int
    goal: Cell
    classes: NDArray[np.int8] = field(repr=False)
    hotspots: frozenset[Cell] = frozenset()
    heuristic_field: NDArray[np.float64] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate shape and hotspots, then derive the heuristic field.

        ``classes`` is copied and both arrays are frozen, so the grid
        cannot change after construction.
        """
        self.classes = np.array(self.classes, dtype=np.int8)
        if self.classes.shape != (self.height, self.width):
            msg = (
                f"terrain shape {self.classes.shape} does not match "
                f"{self.height}x{self.width}"
            )
            raise InvalidConfiguration(msg)
        if not self.in_bounds(self.goal):
            msg = f"goal {self.goal} out of bounds for {self.width}x{self.height}"
            raise InvalidConfiguration(msg)
        for cell in self.hotspots:
            if not self.in_bounds(cell):
                msg = f"hotspot {cell} out of bounds for {self.width}x{self.height}"
                raise InvalidConfiguration(msg)
        self.heuristic_field = self._compute_heuristic()
        self.classes.flags.writeable = False
        self.heuristic_field.flags.writeable = False

    @classmethod
    def build(
        cls,
        width: int,
        height: int,
        goal: Cell,
        *,
        water: Iterable[Region] = (),
        roads: Iterable[Region] = (),
        blocked: Iterable[Region] = (),
        hotspots: Iterable[Cell] = (),
    ) -> TerrainGrid:
        """Paint a grid from region definitions.

        Everything starts as land.  Water is painted first, then roads,
        then obstacles, so a later class overwrites an earlier one where
        regions overlap.

        Args:
            width: Number of columns.
            height: Number of rows.
            goal: Target cell for the heuristic.
            water: Water bands.
            roads: Road bands.
            blocked: Impassable areas.
            hotspots: Surveillance-priority cells.

        Returns:
            A fully initialised TerrainGrid.
        """
        if width <= 0 or height <= 0:
            msg = f"grid dimensions must be positive, got {width}x{height}"
            raise InvalidConfiguration(msg)

        classes = np.full((height, width), TerrainClass.LAND, dtype=np.int8)
        for regions, terrain in (
            (water, TerrainClass.WATER),
            (roads, TerrainClass.ROAD),
            (blocked, TerrainClass.BLOCKED),
        ):
            for region in regions:
                classes[region.as_slices()] = terrain

        return cls(
            width=width,
            height=height,
            goal=(int(goal[0]), int(goal[1])),
            classes=classes,
            hotspots=frozenset((int(r), int(c)) for r, c in hotspots),
        )

    def in_bounds(self, cell: Cell) -> bool:
        """Return True if ``cell`` lies inside the grid."""
        row, col = cell
        return 0 <= row < self.height and 0 <= col < self.width

    def classify(self, cell: Cell) -> TerrainClass:
        """Return the terrain class of ``cell``.

        Raises:
            IndexError: If the cell is out of bounds.
        """
        if not self.in_bounds(cell):
            msg = f"{cell} out of bounds for {self.width}x{self.height}"
            raise IndexError(msg)
        return TerrainClass(int(self.classes[cell]))

    def is_blocked(self, cell: Cell) -> bool:
        """Return True if ``cell`` cannot be entered."""
        return self.classify(cell) is TerrainClass.BLOCKED

    def is_hotspot(self, cell: Cell) -> bool:
        """Return True if ``cell`` is a registered hotspot."""
        return cell in self.hotspots

    def heuristic(self, cell: Cell) -> float:
        """Return the static desirability of ``cell``.

        Raises:
            IndexError: If the cell is out of bounds.
        """
        if not self.in_bounds(cell):
            msg = f"{cell} out of bounds for {self.width}x{self.height}"
            raise IndexError(msg)
        return float(self.heuristic_field[cell])

    def hotspot_mask(self) -> NDArray[np.bool_]:
        """Return a boolean array marking hotspot cells."""
        mask = np.zeros((self.height, self.width), dtype=bool)
        for cell in self.hotspots:
            mask[cell] = True
        return mask

    def _compute_heuristic(self) -> NDArray[np.float64]:
        """Inverse distance to the goal, scaled by terrain preference."""
        rows, cols = np.indices((self.height, self.width), dtype=np.float64)
        goal_row, goal_col = self.goal
        distance = np.hypot(rows - goal_row, cols - goal_col)
        heuristic = 1.0 / (distance + HEURISTIC_EPSILON)

        scale = np.zeros(len(TerrainClass), dtype=np.float64)
        for terrain, factor in TERRAIN_PREFERENCE.items():
            scale[terrain] = factor
        return heuristic * scale[self.classes]
