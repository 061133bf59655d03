"""ACOPlanner — the iteration loop.

Owns all planning state (terrain, pheromone field, fleet policy, RNG and
the best path so far) and advances it one colony generation at a time.
Generations run strictly in sequence because each one starts from the
pheromone left behind by the last.

Configuration is validated when the planner is built, so a bad start
cell or fleet split fails before any ant walks.  A run that never
reaches the goal is not an error: ``PlanResult.found`` is False and the
caller decides what to do about it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
from numpy.random import Generator

from dronewatch.colony.iteration import BestPath, ColonyIteration, IterationResult
from dronewatch.errors import InvalidConfiguration
from dronewatch.fleet.classes import AgentClassPolicy
from dronewatch.pheromones.fields import PheromoneField
from dronewatch.planning.config import PlannerConfig
from dronewatch.world.neighbourhood import NeighbourhoodExplorer
from dronewatch.world.terrain import Cell, TerrainGrid

logger = logging.getLogger(__name__)


@dataclass
class IterationStats:
    """Per-iteration record kept for reporting.

    Attributes:
        index: Zero-based iteration number.
        successes: Ants that reached the goal.
        min_length: Shortest path of the iteration, or None.
        best_length: Global best length after the iteration, or None.
    """

    index: int
    successes: int
    min_length: int | None
    best_length: int | None


@dataclass
class PlanResult:
    """Outcome of a planning run.

    Attributes:
        best_path: Shortest path found, or None if no ant ever succeeded.
        iterations: Number of iterations that ran.
        history: Per-iteration statistics, in order.
    """

    best_path: BestPath | None
    iterations: int
    history: list[IterationStats] = field(default_factory=list)

    @property
    def found(self) -> bool:
        """Return False for the "no path found" outcome."""
        return self.best_path is not None

    @property
    def total_successes(self) -> int:
        """Successful walks summed over every iteration."""
        return sum(stats.successes for stats in self.history)


@dataclass
class ACOPlanner:
    """Drives the colony forward generation by generation.

    Attributes:
        config: Loaded planner configuration.
        rng: Seeded random generator; built from ``config.seed`` if omitted.
        terrain: Static terrain and heuristic field.
        pheromone: Pheromone field carried across iterations.
        policy: Fleet class exponents and ant-to-class mapping.
        best: Best path found so far.
        history: Statistics for every completed iteration.
        iteration: Number of completed iterations.
    """

    config: PlannerConfig
    rng: Generator | None = None
    terrain: TerrainGrid = field(init=False)
    pheromone: PheromoneField = field(init=False)
    policy: AgentClassPolicy = field(init=False)
    best: BestPath | None = field(init=False, default=None)
    history: list[IterationStats] = field(init=False, default_factory=list)
    iteration: int = field(init=False, default=0)
    _generation: ColonyIteration = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate config, then build terrain, pheromone and fleet."""
        if self.rng is None:
            self.rng = np.random.default_rng(self.config.seed)

        self._validate_constants()
        self.terrain = self.config.build_terrain()
        self._validate_endpoint("start", self.config.start)
        self._validate_endpoint("goal", self.config.goal)
        self.policy = self.config.build_policy()

        colony = self.config.colony
        self.pheromone = PheromoneField.seeded(
            width=self.terrain.width,
            height=self.terrain.height,
            tau0=colony.initial_pheromone,
            hotspots=self.terrain.hotspots,
        )
        self._generation = ColonyIteration(
            terrain=self.terrain,
            explorer=NeighbourhoodExplorer(self.terrain),
            policy=self.policy,
            start=self.config.start,
            evaporation_rate=colony.evaporation_rate,
            deposit_strength=colony.deposit_strength,
            elite_multiplier=colony.elite_multiplier,
        )

    @property
    def done(self) -> bool:
        """Return True once the iteration budget is spent."""
        return self.iteration >= self.config.colony.max_iterations

    def step(self) -> IterationResult:
        """Run a single colony generation.

        Returns:
            The summary of the generation that just ran.
        """
        result, self.best = self._generation.run(
            self.iteration,
            self.pheromone,
            self.best,
            self.rng,
        )
        if result.new_best and self.best is not None:
            km = self.best.distance_m(self.config.report.meters_per_unit) / 1000.0
            logger.info(
                "Iter %d: best path = %d cells (%.2f km)",
                self.iteration + 1,
                self.best.length,
                km,
            )
        self.history.append(
            IterationStats(
                index=self.iteration,
                successes=result.successes,
                min_length=result.min_length,
                best_length=self.best.length if self.best else None,
            ),
        )
        self.iteration += 1
        return result

    def run(self, iterations: int) -> None:
        """Run a fixed number of generations, ignoring the budget.

        Args:
            iterations: Number of generations to advance.
        """
        for _ in range(iterations):
            self.step()

    def plan(self) -> PlanResult:
        """Run the remaining iteration budget and report the best path."""
        while not self.done:
            self.step()

        best = None
        if self.best is None:
            logger.debug("No path found after %d iterations", self.iteration)
        else:
            # Copy so later steps cannot alter a returned result
            best = BestPath(path=list(self.best.path), iteration=self.best.iteration)
        return PlanResult(
            best_path=best,
            iterations=self.iteration,
            history=list(self.history),
        )

    def _validate_constants(self) -> None:
        colony = self.config.colony
        if not 0.0 < colony.evaporation_rate < 1.0:
            msg = f"evaporation_rate must be in (0, 1), got {colony.evaporation_rate}"
            raise InvalidConfiguration(msg)
        for name in ("initial_pheromone", "deposit_strength", "elite_multiplier"):
            value = getattr(colony, name)
            if value < 0:
                msg = f"{name} must be non-negative, got {value}"
                raise InvalidConfiguration(msg)
        if colony.max_iterations < 0:
            msg = f"max_iterations must be non-negative, got {colony.max_iterations}"
            raise InvalidConfiguration(msg)

    def _validate_endpoint(self, name: str, cell: Cell) -> None:
        if not self.terrain.in_bounds(cell):
            msg = (
                f"{name} {cell} out of bounds for "
                f"{self.terrain.width}x{self.terrain.height}"
            )
            raise InvalidConfiguration(msg)
        if self.terrain.is_blocked(cell):
            msg = f"{name} {cell} lies on blocked terrain"
            raise InvalidConfiguration(msg)


def plan(config: PlannerConfig, rng: Generator | None = None) -> PlanResult:
    """Build a planner for ``config`` and run its full iteration budget."""
    return ACOPlanner(config=config, rng=rng).plan()
