"""Fleet classes — per-drone-type search behaviour.

Each drone type flies the same ACO walk but weighs pheromone and
heuristic differently.  The multipliers live in one table here, and the
colony is split into contiguous index ranges, one per class, as given by
configuration.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from dronewatch.errors import InvalidConfiguration


class AgentClass(Enum):
    """Drone types in the survey fleet."""

    LONG_RANGE = "long_range"  # prefers roads and open areas
    WATER_SURVEY = "water_survey"  # strong water preference
    AGILE = "agile"  # responds quickly to hotspots


@dataclass(frozen=True)
class ClassProfile:
    """Exponent multipliers applied to the global alpha and beta.

    Attributes:
        alpha_scale: Multiplier on the pheromone weight.
        beta_scale: Multiplier on the heuristic weight.
    """

    alpha_scale: float = 1.0
    beta_scale: float = 1.0


DEFAULT_PROFILES: dict[AgentClass, ClassProfile] = {
    AgentClass.LONG_RANGE: ClassProfile(alpha_scale=1.0, beta_scale=0.9),
    AgentClass.WATER_SURVEY: ClassProfile(alpha_scale=0.7, beta_scale=1.8),
    AgentClass.AGILE: ClassProfile(alpha_scale=1.5, beta_scale=0.7),
}


@dataclass(frozen=True)
class AntRange:
    """Half-open range of ant indices ``[start, stop)``."""

    start: int
    stop: int

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.start <= index < self.stop

    def __len__(self) -> int:
        return max(0, self.stop - self.start)


@dataclass
class AgentClassPolicy:
    """Maps ants to classes and classes to effective exponents.

    Attributes:
        alpha: Global pheromone weight.
        beta: Global heuristic weight.
        population: Total colony size.
        ranges: Contiguous ant-index range owned by each class.
        profiles: Exponent multipliers per class.
    """

    alpha: float
    beta: float
    population: int
    ranges: Mapping[AgentClass, AntRange]
    profiles: Mapping[AgentClass, ClassProfile] = field(
        default_factory=lambda: dict(DEFAULT_PROFILES),
    )
    _lookup: list[AgentClass] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Check that the class ranges tile the colony exactly."""
        if self.population <= 0:
            msg = f"population must be positive, got {self.population}"
            raise InvalidConfiguration(msg)

        lookup: list[AgentClass | None] = [None] * self.population
        for agent_class, ants in self.ranges.items():
            if agent_class not in self.profiles:
                msg = f"no exponent profile for {agent_class.value}"
                raise InvalidConfiguration(msg)
            if ants.start < 0 or ants.stop > self.population or ants.start > ants.stop:
                msg = (
                    f"{agent_class.value} range [{ants.start}, {ants.stop}) "
                    f"does not fit a colony of {self.population}"
                )
                raise InvalidConfiguration(msg)
            for index in range(ants.start, ants.stop):
                if lookup[index] is not None:
                    msg = (
                        f"ant {index} assigned to both {lookup[index].value} "
                        f"and {agent_class.value}"
                    )
                    raise InvalidConfiguration(msg)
                lookup[index] = agent_class

        unassigned = [i for i, c in enumerate(lookup) if c is None]
        if unassigned:
            msg = f"ants {unassigned} are not assigned to any fleet class"
            raise InvalidConfiguration(msg)
        self._lookup = [c for c in lookup if c is not None]

    @classmethod
    def from_counts(
        cls,
        alpha: float,
        beta: float,
        counts: Mapping[AgentClass, int],
    ) -> AgentClassPolicy:
        """Lay classes out back to back in the order given by ``counts``."""
        ranges: dict[AgentClass, AntRange] = {}
        start = 0
        for agent_class, count in counts.items():
            ranges[agent_class] = AntRange(start, start + count)
            start += count
        return cls(alpha=alpha, beta=beta, population=start, ranges=ranges)

    def class_of(self, ant_index: int) -> AgentClass:
        """Return the class flown by the ant at ``ant_index``."""
        return self._lookup[ant_index]

    def exponents(self, agent_class: AgentClass) -> tuple[float, float]:
        """Return ``(alpha_eff, beta_eff)`` for ``agent_class``."""
        profile = self.profiles[agent_class]
        return self.alpha * profile.alpha_scale, self.beta * profile.beta_scale

    def exponents_for_ant(self, ant_index: int) -> tuple[float, float]:
        """Shortcut for ``exponents(class_of(ant_index))``."""
        return self.exponents(self.class_of(ant_index))
