"""Builders for small planner configs used across the test suite."""

from __future__ import annotations

from dronewatch.fleet.classes import DEFAULT_PROFILES, AgentClass, AntRange
from dronewatch.planning.config import (
    ColonyConfig,
    FleetClassConfig,
    PlannerConfig,
    TerrainConfig,
)
from dronewatch.world.terrain import Region


def make_fleet(*counts: int) -> list[FleetClassConfig]:
    """Lay out up to three classes back to back with the given sizes."""
    fleet = []
    start = 0
    for agent_class, count in zip(AgentClass, counts, strict=False):
        fleet.append(
            FleetClassConfig(
                agent_class=agent_class,
                ants=AntRange(start, start + count),
                profile=DEFAULT_PROFILES[agent_class],
            ),
        )
        start += count
    return fleet


def make_config(
    *,
    width: int = 5,
    height: int = 5,
    start: tuple[int, int] = (0, 0),
    goal: tuple[int, int] = (4, 4),
    blocked: list[Region] | None = None,
    hotspots: list[tuple[int, int]] | None = None,
    population: int = 6,
    max_iterations: int = 10,
    seed: int = 7,
) -> PlannerConfig:
    """Build a small, fully specified planner config."""
    third = population // 3
    counts = (third, third, population - 2 * third)
    return PlannerConfig(
        seed=seed,
        start=start,
        goal=goal,
        terrain=TerrainConfig(
            width=width,
            height=height,
            water=[],
            roads=[],
            blocked=blocked or [],
            hotspots=hotspots or [],
        ),
        colony=ColonyConfig(
            population=population,
            max_iterations=max_iterations,
            fleet=make_fleet(*counts),
        ),
    )
