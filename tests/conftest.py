"""Shared fixtures for the DroneWatch test suite."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.random import Generator

from dronewatch.fleet.classes import AgentClass, AgentClassPolicy
from dronewatch.pheromones.fields import PheromoneField
from dronewatch.planning.config import PlannerConfig
from dronewatch.world.neighbourhood import NeighbourhoodExplorer
from dronewatch.world.terrain import TerrainGrid
from factories import make_config


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def small_terrain() -> TerrainGrid:
    """An 8x8 all-land grid with the goal in the far corner."""
    return TerrainGrid.build(8, 8, goal=(7, 7))


@pytest.fixture
def small_explorer(small_terrain: TerrainGrid) -> NeighbourhoodExplorer:
    """Neighbourhood queries over ``small_terrain``."""
    return NeighbourhoodExplorer(small_terrain)


@pytest.fixture
def corridor() -> TerrainGrid:
    """A 1x3 strip: the only route from (0, 0) to (0, 2) is straight on."""
    return TerrainGrid.build(3, 1, goal=(0, 2))


@pytest.fixture
def single_class_policy() -> AgentClassPolicy:
    """Four ants, all flying the long-range profile."""
    return AgentClassPolicy.from_counts(1.0, 1.0, {AgentClass.LONG_RANGE: 4})


@pytest.fixture
def small_pheromone_field() -> PheromoneField:
    """An 8x8 pheromone field seeded with 1.0."""
    return PheromoneField.seeded(width=8, height=8, tau0=1.0)


@pytest.fixture
def small_config() -> PlannerConfig:
    """A 5x5 open grid, six ants, ten iterations."""
    return make_config()
