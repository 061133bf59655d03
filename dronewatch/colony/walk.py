"""AntWalk -- one drone's stochastic route from start to goal.

A walk is a tiny state machine:

- **WALKING**: look at the unvisited, passable 8-neighbours of the
  current cell, weight each by ``pheromone^alpha * heuristic^beta`` and
  sample one in proportion to its weight.
- **SUCCEEDED**: the goal was reached; the accumulated path is the result.
- **STUCK**: every neighbour is blocked or already visited.  The walk
  ends with no path.  This is normal for a random search and is never
  raised as an error.

The visited mask grows by one cell per step, so a walk can take at most
``width * height`` steps before it either succeeds or gets stuck.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.random import Generator
    from numpy.typing import NDArray

    from dronewatch.world.neighbourhood import NeighbourhoodExplorer
    from dronewatch.world.terrain import Cell

logger = logging.getLogger(__name__)


class WalkState(Enum):
    """Lifecycle of a single walk."""

    WALKING = auto()
    SUCCEEDED = auto()
    STUCK = auto()


@dataclass
class AntWalk:
    """A single ant's walk over a fixed pheromone snapshot.

    Attributes:
        start: Cell the walk starts from.
        goal: Cell the walk is trying to reach.
        explorer: Neighbourhood query for the terrain.
        pheromone: Read-only pheromone values for this iteration.
        heuristic: Static heuristic values.
        alpha: Effective pheromone exponent for this ant's class.
        beta: Effective heuristic exponent for this ant's class.
        state: Current walk state.
        position: Current cell.
        path: Cells visited so far, in order, starting with ``start``.
        visited: Boolean mask of cells on ``path``.
    """

    start: Cell
    goal: Cell
    explorer: NeighbourhoodExplorer
    pheromone: NDArray[np.float64] = field(repr=False)
    heuristic: NDArray[np.float64] = field(repr=False)
    alpha: float = 1.0
    beta: float = 1.0
    state: WalkState = field(init=False, default=WalkState.WALKING)
    position: Cell = field(init=False)
    path: list[Cell] = field(init=False, default_factory=list)
    visited: NDArray[np.bool_] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Place the ant on the start cell and mark it visited."""
        self.position = self.start
        self.path = [self.start]
        self.visited = np.zeros(self.pheromone.shape, dtype=bool)
        self.visited[self.start] = True
        if self.start == self.goal:
            self.state = WalkState.SUCCEEDED

    @property
    def finished(self) -> bool:
        """Return True once the walk has reached a terminal state."""
        return self.state is not WalkState.WALKING

    @property
    def max_steps(self) -> int:
        """Upper bound on the number of moves this walk can make."""
        return int(self.visited.size)

    def step(self, rng: Generator) -> WalkState:
        """Advance the walk by one move.

        Args:
            rng: Seeded random generator used for the weighted choice.

        Returns:
            The state after the move.
        """
        if self.finished:
            return self.state

        candidates = self.explorer.neighbours(self.position, self.visited)
        if not candidates:
            self.state = WalkState.STUCK
            return self.state

        nxt = candidates[self._choose(candidates, rng)]
        self.position = nxt
        self.path.append(nxt)
        self.visited[nxt] = True

        if nxt == self.goal:
            self.state = WalkState.SUCCEEDED
        return self.state

    def run(self, rng: Generator) -> list[Cell] | None:
        """Walk until the goal is reached or the ant gets stuck.

        Args:
            rng: Seeded random generator.

        Returns:
            The path from start to goal, or None if the walk got stuck.
        """
        for _ in range(self.max_steps):
            if self.step(rng) is not WalkState.WALKING:
                break

        if self.state is WalkState.SUCCEEDED:
            return self.path

        logger.debug(
            "Walk from %s stuck at %s after %d cells",
            self.start,
            self.position,
            len(self.path),
        )
        return None

    def move_probabilities(self, candidates: list[Cell]) -> NDArray[np.float64]:
        """Return the normalised move distribution over ``candidates``.

        Falls back to a uniform distribution if every weight underflows
        to zero (e.g. after many iterations of evaporation).
        """
        rows = [r for r, _ in candidates]
        cols = [c for _, c in candidates]
        weights = (
            self.pheromone[rows, cols] ** self.alpha
            * self.heuristic[rows, cols] ** self.beta
        )
        total = float(weights.sum())
        if not np.isfinite(total) or total <= 0.0:
            return np.full(len(candidates), 1.0 / len(candidates))
        return weights / total

    def _choose(self, candidates: list[Cell], rng: Generator) -> int:
        """Sample a candidate index in proportion to its weight."""
        if len(candidates) == 1:
            return 0
        probs = self.move_probabilities(candidates)
        return int(rng.choice(len(candidates), p=probs))
