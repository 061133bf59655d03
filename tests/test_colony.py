"""Tests for dronewatch.colony - ant walks and colony iterations."""

import numpy as np
import pytest
from numpy.random import Generator

from dronewatch.colony import iteration as iteration_module
from dronewatch.colony.iteration import BestPath, ColonyIteration
from dronewatch.colony.walk import AntWalk, WalkState
from dronewatch.fleet.classes import AgentClass, AgentClassPolicy
from dronewatch.pheromones.fields import PheromoneField
from dronewatch.world.neighbourhood import NeighbourhoodExplorer
from dronewatch.world.terrain import Region, TerrainClass, TerrainGrid


def _walk(
    terrain: TerrainGrid,
    start: tuple[int, int],
    pheromone: np.ndarray | None = None,
    alpha: float = 1.0,
    beta: float = 1.0,
) -> AntWalk:
    if pheromone is None:
        pheromone = np.ones((terrain.height, terrain.width))
    return AntWalk(
        start=start,
        goal=terrain.goal,
        explorer=NeighbourhoodExplorer(terrain),
        pheromone=pheromone,
        heuristic=terrain.heuristic_field,
        alpha=alpha,
        beta=beta,
    )


def _enclosed() -> TerrainGrid:
    """3x3 grid where (0, 0) is walled in by blocked cells."""
    return TerrainGrid.build(
        3,
        3,
        goal=(2, 2),
        blocked=[Region(0, 2, 1, 2), Region(1, 2, 0, 1)],
    )


class TestAntWalk:
    """Tests for the single-walk state machine."""

    def test_initial_state(self, small_terrain: TerrainGrid) -> None:
        walk = _walk(small_terrain, (0, 0))
        assert walk.state is WalkState.WALKING
        assert walk.path == [(0, 0)]
        assert walk.visited[0, 0]
        assert walk.visited.sum() == 1

    def test_corridor_is_deterministic(
        self,
        corridor: TerrainGrid,
        rng: Generator,
    ) -> None:
        walk = _walk(corridor, (0, 0))
        assert walk.run(rng) == [(0, 0), (0, 1), (0, 2)]
        assert walk.state is WalkState.SUCCEEDED

    def test_start_on_goal_succeeds_immediately(
        self,
        corridor: TerrainGrid,
        rng: Generator,
    ) -> None:
        walk = _walk(corridor, (0, 2))
        assert walk.finished
        assert walk.run(rng) == [(0, 2)]

    def test_dead_end_is_stuck_not_raised(self, rng: Generator) -> None:
        walk = _walk(_enclosed(), (0, 0))
        assert walk.run(rng) is None
        assert walk.state is WalkState.STUCK

    def test_step_after_finish_is_noop(self, rng: Generator) -> None:
        walk = _walk(_enclosed(), (0, 0))
        walk.run(rng)
        assert walk.step(rng) is WalkState.STUCK
        assert walk.path == [(0, 0)]

    def test_succeeded_path_is_connected(
        self,
        small_terrain: TerrainGrid,
        rng: Generator,
    ) -> None:
        for _ in range(20):
            walk = _walk(small_terrain, (0, 0))
            path = walk.run(rng)
            if path is None:
                continue
            assert path[0] == (0, 0)
            assert path[-1] == (7, 7)
            assert len(set(path)) == len(path)
            for (r0, c0), (r1, c1) in zip(path, path[1:], strict=False):
                assert max(abs(r1 - r0), abs(c1 - c0)) == 1

    def test_always_terminates_within_grid_size(self, rng: Generator) -> None:
        """Every walk ends SUCCEEDED or STUCK within width*height steps."""
        for _ in range(40):
            classes = np.where(
                rng.random((7, 7)) < 0.3,
                TerrainClass.BLOCKED,
                TerrainClass.LAND,
            ).astype(np.int8)
            classes[0, 0] = TerrainClass.LAND
            classes[6, 6] = TerrainClass.LAND
            terrain = TerrainGrid(width=7, height=7, goal=(6, 6), classes=classes)
            walk = _walk(terrain, (0, 0))

            steps = 0
            while walk.step(rng) is WalkState.WALKING:
                steps += 1
                assert steps <= walk.max_steps

            assert walk.state in (WalkState.SUCCEEDED, WalkState.STUCK)
            assert len(walk.path) <= 49
            for cell in walk.path:
                assert terrain.classify(cell) is not TerrainClass.BLOCKED

    def test_move_probabilities_normalised(self, small_terrain: TerrainGrid) -> None:
        walk = _walk(small_terrain, (3, 3), alpha=1.6, beta=2.5)
        candidates = walk.explorer.neighbours((3, 3), walk.visited)
        probs = walk.move_probabilities(candidates)
        assert probs.sum() == pytest.approx(1.0)
        assert np.all(probs > 0)
        # Heuristic pulls toward the goal at (7, 7)
        assert probs[candidates.index((4, 4))] == probs.max()

    def test_probabilities_follow_pheromone(self, small_terrain: TerrainGrid) -> None:
        pheromone = np.ones((8, 8))
        pheromone[2, 2] = 100.0
        walk = _walk(small_terrain, (3, 3), pheromone=pheromone, alpha=1.0, beta=0.0)
        candidates = walk.explorer.neighbours((3, 3), walk.visited)
        probs = walk.move_probabilities(candidates)
        assert probs[candidates.index((2, 2))] == pytest.approx(100 / 107)

    def test_underflow_falls_back_to_uniform(self, small_terrain: TerrainGrid) -> None:
        walk = _walk(small_terrain, (3, 3), pheromone=np.zeros((8, 8)))
        candidates = walk.explorer.neighbours((3, 3), walk.visited)
        probs = walk.move_probabilities(candidates)
        assert np.allclose(probs, 1 / 8)

    def test_same_seed_same_path(self, small_terrain: TerrainGrid) -> None:
        path_a = _walk(small_terrain, (0, 0)).run(np.random.default_rng(3))
        path_b = _walk(small_terrain, (0, 0)).run(np.random.default_rng(3))
        assert path_a == path_b


class TestColonyIteration:
    """Tests for one generation: deposits, evaporation, elite update."""

    def _iteration(
        self,
        terrain: TerrainGrid,
        policy: AgentClassPolicy,
        start: tuple[int, int] = (0, 0),
    ) -> ColonyIteration:
        return ColonyIteration(
            terrain=terrain,
            explorer=NeighbourhoodExplorer(terrain),
            policy=policy,
            start=start,
            evaporation_rate=0.5,
            deposit_strength=3.0,
            elite_multiplier=3.0,
        )

    def test_first_success_sets_best_and_reinforces(
        self,
        corridor: TerrainGrid,
        single_class_policy: AgentClassPolicy,
        rng: Generator,
    ) -> None:
        pheromone = PheromoneField.seeded(3, 1, tau0=0.5)
        result, best = self._iteration(corridor, single_class_policy).run(
            0,
            pheromone,
            None,
            rng,
        )
        assert result.successes == 4
        assert result.stuck == 0
        assert result.min_length == 3
        assert result.new_best
        assert best is not None
        assert best.path == [(0, 0), (0, 1), (0, 2)]
        # (0.5 + 4 ants * 3/3) * (1 - 0.5) + elite 3/3 * 3
        assert np.allclose(pheromone.grid, 5.25)

    def test_equal_length_does_not_fire_elite(
        self,
        corridor: TerrainGrid,
        single_class_policy: AgentClassPolicy,
        rng: Generator,
    ) -> None:
        pheromone = PheromoneField.seeded(3, 1, tau0=0.5)
        iteration = self._iteration(corridor, single_class_policy)
        _, best = iteration.run(0, pheromone, None, rng)
        before = pheromone.grid.copy()

        result, again = iteration.run(1, pheromone, best, rng)
        assert not result.new_best
        assert again is best
        assert again.iteration == 0
        assert np.allclose(pheromone.grid, (before + 4.0) * 0.5)

    def test_shorter_path_replaces_best(
        self,
        corridor: TerrainGrid,
        single_class_policy: AgentClassPolicy,
        rng: Generator,
    ) -> None:
        pheromone = PheromoneField.seeded(3, 1, tau0=0.5)
        stale = BestPath(path=[(0, 0)] * 10, iteration=0)
        result, best = self._iteration(corridor, single_class_policy).run(
            5,
            pheromone,
            stale,
            rng,
        )
        assert result.new_best
        assert best is not stale
        assert best.length == 3
        assert best.iteration == 5

    def test_zero_successes_still_evaporates(
        self,
        single_class_policy: AgentClassPolicy,
        rng: Generator,
    ) -> None:
        terrain = _enclosed()
        pheromone = PheromoneField.seeded(3, 3, tau0=1.0)
        previous = BestPath(path=[(0, 0), (1, 1), (2, 2)])
        result, best = self._iteration(terrain, single_class_policy).run(
            0,
            pheromone,
            previous,
            rng,
        )
        assert result.successes == 0
        assert result.stuck == 4
        assert result.min_length is None
        assert not result.new_best
        assert best is previous
        assert np.allclose(pheromone.grid, 0.5)

    def test_hotspot_on_path_gets_extra_deposit(
        self,
        single_class_policy: AgentClassPolicy,
        rng: Generator,
    ) -> None:
        terrain = TerrainGrid.build(3, 1, goal=(0, 2), hotspots=[(0, 1)])
        pheromone = PheromoneField.seeded(3, 1, tau0=0.0)
        iteration = self._iteration(terrain, single_class_policy)
        iteration.apply_deposits(pheromone, [[(0, 0), (0, 1), (0, 2)]])
        assert pheromone.value((0, 0)) == pytest.approx(1.0)
        assert pheromone.value((0, 1)) == pytest.approx(3.0)

    def test_ants_read_pre_iteration_snapshot(
        self,
        corridor: TerrainGrid,
        single_class_policy: AgentClassPolicy,
        rng: Generator,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Every ant sees the field as it was before anyone deposited."""
        seen: list[np.ndarray] = []

        class RecordingWalk(AntWalk):
            def __post_init__(self) -> None:
                seen.append(self.pheromone.copy())
                assert not self.pheromone.flags.writeable
                super().__post_init__()

        monkeypatch.setattr(iteration_module, "AntWalk", RecordingWalk)
        pheromone = PheromoneField.seeded(3, 1, tau0=0.5)
        before = pheromone.grid.copy()
        self._iteration(corridor, single_class_policy).run(0, pheromone, None, rng)

        assert len(seen) == 4
        for grid in seen:
            assert np.array_equal(grid, before)
        assert not np.array_equal(pheromone.grid, before)

    def test_mixed_classes_all_walk(self, rng: Generator) -> None:
        terrain = TerrainGrid.build(5, 5, goal=(4, 4))
        policy = AgentClassPolicy.from_counts(
            1.6,
            2.5,
            {
                AgentClass.LONG_RANGE: 3,
                AgentClass.WATER_SURVEY: 3,
                AgentClass.AGILE: 2,
            },
        )
        pheromone = PheromoneField.seeded(5, 5, tau0=0.15)
        result, _ = self._iteration(terrain, policy).run(0, pheromone, None, rng)
        assert result.successes + result.stuck == 8
        assert np.all(pheromone.grid >= 0)
