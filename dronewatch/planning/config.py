"""Config — load planner parameters from YAML files.

Every tunable of a planning run (grid and terrain regions, hotspots,
colony constants, fleet split, reporting scale) lives in YAML and is
parsed into typed dataclasses here.  Missing keys fall back to the
defaults below, which describe the Lewiston-Queenston bridge survey.

Coordinates are zero-based ``(row, col)``.  Regions are half-open
``[row_start, row_stop, col_start, col_stop]`` rectangles.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from dronewatch.errors import InvalidConfiguration
from dronewatch.fleet.classes import (
    DEFAULT_PROFILES,
    AgentClass,
    AgentClassPolicy,
    AntRange,
    ClassProfile,
)
from dronewatch.world.terrain import Cell, Region, TerrainGrid


def _cell(value: Any, name: str) -> Cell:
    try:
        row, col = value
        return int(row), int(col)
    except (TypeError, ValueError) as exc:
        msg = f"{name} must be a [row, col] pair, got {value!r}"
        raise InvalidConfiguration(msg) from exc


def _regions(values: Any, name: str) -> list[Region]:
    regions: list[Region] = []
    for value in values or []:
        try:
            regions.append(Region.from_sequence(value))
        except (TypeError, ValueError) as exc:
            msg = (
                f"{name} entries must be [row_start, row_stop, col_start, "
                f"col_stop], got {value!r}"
            )
            raise InvalidConfiguration(msg) from exc
    return regions


def _default_water() -> list[Region]:
    return [Region(34, 65, 0, 100), Region(39, 60, 19, 30)]


def _default_roads() -> list[Region]:
    return [Region(19, 25, 14, 85)]


def _default_hotspots() -> list[Cell]:
    return [(59, 69), (39, 49)]


@dataclass
class TerrainConfig:
    """Grid size and region layout.

    Attributes:
        width: Number of grid columns.
        height: Number of grid rows.
        water: Water bands (heuristic x3).
        roads: Road bands (heuristic x2).
        blocked: Impassable areas.
        hotspots: Surveillance-priority cells.
    """

    width: int = 100
    height: int = 100
    water: list[Region] = field(default_factory=_default_water)
    roads: list[Region] = field(default_factory=_default_roads)
    blocked: list[Region] = field(default_factory=list)
    hotspots: list[Cell] = field(default_factory=_default_hotspots)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TerrainConfig:
        """Build from the ``terrain`` section of a config file."""
        defaults = cls()
        return cls(
            width=int(data.get("width", defaults.width)),
            height=int(data.get("height", defaults.height)),
            water=(
                _regions(data["water"], "water") if "water" in data else defaults.water
            ),
            roads=(
                _regions(data["roads"], "roads") if "roads" in data else defaults.roads
            ),
            blocked=_regions(data.get("blocked"), "blocked"),
            hotspots=(
                [_cell(h, "hotspot") for h in data["hotspots"] or []]
                if "hotspots" in data
                else defaults.hotspots
            ),
        )


@dataclass
class FleetClassConfig:
    """One fleet class and the slice of the colony that flies it.

    Attributes:
        agent_class: Which drone type.
        ants: Half-open ant index range ``[start, stop)``.
        profile: Exponent multipliers for this class.
    """

    agent_class: AgentClass
    ants: AntRange
    profile: ClassProfile

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> FleetClassConfig:
        """Build from one entry of the ``colony.fleet`` mapping."""
        try:
            agent_class = AgentClass(name)
        except ValueError as exc:
            known = ", ".join(c.value for c in AgentClass)
            msg = f"unknown fleet class {name!r} (expected one of: {known})"
            raise InvalidConfiguration(msg) from exc

        try:
            start, stop = (int(v) for v in data["ants"])
        except (KeyError, TypeError, ValueError) as exc:
            msg = f"fleet class {name!r} needs ants: [start, stop]"
            raise InvalidConfiguration(msg) from exc

        base = DEFAULT_PROFILES[agent_class]
        return cls(
            agent_class=agent_class,
            ants=AntRange(start, stop),
            profile=ClassProfile(
                alpha_scale=float(data.get("alpha_scale", base.alpha_scale)),
                beta_scale=float(data.get("beta_scale", base.beta_scale)),
            ),
        )


def _default_fleet() -> list[FleetClassConfig]:
    return [
        FleetClassConfig(
            AgentClass.LONG_RANGE,
            AntRange(0, 15),
            DEFAULT_PROFILES[AgentClass.LONG_RANGE],
        ),
        FleetClassConfig(
            AgentClass.WATER_SURVEY,
            AntRange(15, 30),
            DEFAULT_PROFILES[AgentClass.WATER_SURVEY],
        ),
        FleetClassConfig(
            AgentClass.AGILE,
            AntRange(30, 40),
            DEFAULT_PROFILES[AgentClass.AGILE],
        ),
    ]


@dataclass
class ColonyConfig:
    """ACO constants and fleet split.

    Attributes:
        population: Number of ants per iteration.
        max_iterations: Iteration budget.
        alpha: Global pheromone weight.
        beta: Global heuristic weight.
        evaporation_rate: Fraction of pheromone lost per iteration.
        deposit_strength: Deposit constant ``Q``.
        initial_pheromone: Base trail strength ``tau0``.
        elite_multiplier: Weight of the elite update on a new best path.
        fleet: Class ranges; must tile ``[0, population)`` exactly.
    """

    population: int = 40
    max_iterations: int = 200
    alpha: float = 1.6
    beta: float = 2.5
    evaporation_rate: float = 0.12
    deposit_strength: float = 4.0
    initial_pheromone: float = 0.15
    elite_multiplier: float = 3.0
    fleet: list[FleetClassConfig] = field(default_factory=_default_fleet)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ColonyConfig:
        """Build from the ``colony`` section of a config file."""
        defaults = cls()
        fleet = defaults.fleet
        if "fleet" in data:
            fleet = [
                FleetClassConfig.from_dict(name, entry or {})
                for name, entry in (data["fleet"] or {}).items()
            ]
        return cls(
            population=int(data.get("population", defaults.population)),
            max_iterations=int(data.get("max_iterations", defaults.max_iterations)),
            alpha=float(data.get("alpha", defaults.alpha)),
            beta=float(data.get("beta", defaults.beta)),
            evaporation_rate=float(
                data.get("evaporation_rate", defaults.evaporation_rate),
            ),
            deposit_strength=float(
                data.get("deposit_strength", defaults.deposit_strength),
            ),
            initial_pheromone=float(
                data.get("initial_pheromone", defaults.initial_pheromone),
            ),
            elite_multiplier=float(
                data.get("elite_multiplier", defaults.elite_multiplier),
            ),
            fleet=fleet,
        )


@dataclass
class ReportConfig:
    """Scale factors for turning a grid path into physical figures.

    Attributes:
        meters_per_unit: Metres covered by one grid cell.
        perimeter_m: Length of the surveyed perimeter.
        area_m2: Total surveillance area.
        max_distance_m: Distance from the control centre to the furthest
            point of the area.
        min_distance_m: Distance from the control centre to the closest
            point of the area.
    """

    meters_per_unit: float = 36.5
    perimeter_m: float = 5900.0
    area_m2: float = 365000.0
    max_distance_m: float = 1800.0
    min_distance_m: float = 650.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ReportConfig:
        """Build from the ``report`` section of a config file."""
        return cls(
            meters_per_unit=float(data.get("meters_per_unit", cls.meters_per_unit)),
            perimeter_m=float(data.get("perimeter_m", cls.perimeter_m)),
            area_m2=float(data.get("area_m2", cls.area_m2)),
            max_distance_m=float(data.get("max_distance_m", cls.max_distance_m)),
            min_distance_m=float(data.get("min_distance_m", cls.min_distance_m)),
        )


@dataclass
class PlannerConfig:
    """Top-level planning configuration.

    Attributes:
        seed: RNG seed for deterministic replay.
        start: Cell every walk starts from (the control centre).
        goal: Cell every walk tries to reach.
        terrain: Grid and region layout.
        colony: ACO constants and fleet split.
        report: Physical scale factors.
    """

    seed: int = 42
    start: Cell = (24, 19)
    goal: Cell = (64, 79)
    terrain: TerrainConfig = field(default_factory=TerrainConfig)
    colony: ColonyConfig = field(default_factory=ColonyConfig)
    report: ReportConfig = field(default_factory=ReportConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PlannerConfig:
        """Build a config from an already-parsed mapping."""
        return cls(
            seed=int(data.get("seed", cls.seed)),
            start=_cell(data["start"], "start") if "start" in data else cls.start,
            goal=_cell(data["goal"], "goal") if "goal" in data else cls.goal,
            terrain=TerrainConfig.from_dict(data.get("terrain") or {}),
            colony=ColonyConfig.from_dict(data.get("colony") or {}),
            report=ReportConfig.from_dict(data.get("report") or {}),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> PlannerConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated PlannerConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
            InvalidConfiguration: If a section cannot be parsed.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    def build_terrain(self) -> TerrainGrid:
        """Paint the terrain grid described by this config."""
        return TerrainGrid.build(
            self.terrain.width,
            self.terrain.height,
            self.goal,
            water=self.terrain.water,
            roads=self.terrain.roads,
            blocked=self.terrain.blocked,
            hotspots=self.terrain.hotspots,
        )

    def build_policy(self) -> AgentClassPolicy:
        """Create the per-class exponent policy for the colony."""
        return AgentClassPolicy(
            alpha=self.colony.alpha,
            beta=self.colony.beta,
            population=self.colony.population,
            ranges={entry.agent_class: entry.ants for entry in self.colony.fleet},
            profiles={entry.agent_class: entry.profile for entry in self.colony.fleet},
        )
