"""ColonyIteration — one generation of the colony.

Order of operations for a generation:

1. Every ant walks against the same read-only pheromone snapshot.
2. Deposits for each successful path are buffered, then merged once.
3. The whole field evaporates exactly once.
4. If the shortest path of this generation beats the global best, that
   path receives the elite bonus and becomes the new best.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from dronewatch.colony.walk import AntWalk
from dronewatch.pheromones.updates import DepositBuffer, elite_bonus

if TYPE_CHECKING:
    from numpy.random import Generator

    from dronewatch.fleet.classes import AgentClassPolicy
    from dronewatch.pheromones.fields import PheromoneField
    from dronewatch.world.neighbourhood import NeighbourhoodExplorer
    from dronewatch.world.terrain import Cell, TerrainGrid

logger = logging.getLogger(__name__)


@dataclass
class BestPath:
    """The shortest route found so far.

    Attributes:
        path: Cells from start to goal inclusive.
        iteration: Zero-based iteration that produced it.
    """

    path: list[Cell]
    iteration: int = 0

    @property
    def length(self) -> int:
        """Number of cells on the path, both endpoints included."""
        return len(self.path)

    def distance_m(self, meters_per_unit: float) -> float:
        """Physical length using a fixed scale per grid cell."""
        return self.length * meters_per_unit


@dataclass
class IterationResult:
    """Summary of one generation.

    Attributes:
        index: Zero-based iteration number.
        paths: Successful paths, keyed by ant index.
        stuck: Number of ants that hit a dead end.
        min_length: Shortest successful path length, or None.
        new_best: True if this generation improved the global best.
    """

    index: int
    paths: dict[int, list[Cell]] = field(default_factory=dict)
    stuck: int = 0
    min_length: int | None = None
    new_best: bool = False

    @property
    def successes(self) -> int:
        """Number of ants that reached the goal."""
        return len(self.paths)


@dataclass
class ColonyIteration:
    """Runs one generation and applies the pheromone update.

    Attributes:
        terrain: Static terrain and heuristic values.
        explorer: Neighbourhood query for the terrain.
        policy: Per-class exponents and ant-to-class mapping.
        start: Walk start cell.
        evaporation_rate: Fraction of pheromone lost per generation.
        deposit_strength: The constant ``Q``.
        elite_multiplier: Extra weight given to a new best path.
    """

    terrain: TerrainGrid
    explorer: NeighbourhoodExplorer
    policy: AgentClassPolicy
    start: Cell
    evaporation_rate: float
    deposit_strength: float
    elite_multiplier: float = 3.0

    def run(
        self,
        index: int,
        pheromone: PheromoneField,
        best: BestPath | None,
        rng: Generator,
    ) -> tuple[IterationResult, BestPath | None]:
        """Run every ant once and update ``pheromone`` in place.

        Args:
            index: Zero-based iteration number.
            pheromone: Shared field carried across iterations.
            best: Global best before this generation, if any.
            rng: Seeded random generator shared by all walks.

        Returns:
            The iteration summary and the (possibly updated) global best.
        """
        result = IterationResult(index=index)
        snapshot = pheromone.snapshot()

        for ant in range(self.policy.population):
            alpha, beta = self.policy.exponents_for_ant(ant)
            walk = AntWalk(
                start=self.start,
                goal=self.terrain.goal,
                explorer=self.explorer,
                pheromone=snapshot,
                heuristic=self.terrain.heuristic_field,
                alpha=alpha,
                beta=beta,
            )
            path = walk.run(rng)
            if path is None:
                result.stuck += 1
            else:
                result.paths[ant] = path

        self.apply_deposits(pheromone, result.paths.values())
        pheromone.evaporate(self.evaporation_rate)

        if result.paths:
            # min() keeps the lowest ant index on ties
            shortest_ant = min(result.paths, key=lambda a: len(result.paths[a]))
            shortest = result.paths[shortest_ant]
            result.min_length = len(shortest)
            if best is None or result.min_length < best.length:
                best = BestPath(path=list(shortest), iteration=index)
                result.new_best = True
                pheromone.reinforce(
                    best.path,
                    elite_bonus(
                        self.deposit_strength,
                        best.length,
                        self.elite_multiplier,
                    ),
                )

        logger.debug(
            "Iteration %d: %d succeeded, %d stuck, shortest %s",
            index,
            result.successes,
            result.stuck,
            result.min_length,
        )
        return result, best

    def apply_deposits(
        self,
        pheromone: PheromoneField,
        paths: Iterable[Sequence[Cell]],
    ) -> None:
        """Buffer deposits for ``paths`` and merge them into ``pheromone``."""
        buffer = DepositBuffer(
            width=self.terrain.width,
            height=self.terrain.height,
            hotspots=self.terrain.hotspot_mask(),
        )
        for path in paths:
            buffer.add_path(path, self.deposit_strength)
        buffer.merge_into(pheromone)
