"""Link simulation config — YAML-backed parameters for the packet-loss model.

Defaults describe the FalconEye fleet: eight long-range Autel drones,
seven Jouav water drones and one DJI, drifting over a 3.65 km square
with two interference zones (the bridge and the river).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from dronewatch.errors import InvalidConfiguration


@dataclass(frozen=True)
class DroneType:
    """One airframe in the link simulation.

    Attributes:
        name: Short identifier used in reports and excluded pairs.
        count: Number of drones of this type.
        base_loss: Packet loss (%) contributed by this end of a link.
    """

    name: str
    count: int
    base_loss: float


@dataclass(frozen=True)
class InterferenceZone:
    """A circular area that degrades every link touching it (metres)."""

    x: float
    y: float
    radius: float


def _default_types() -> list[DroneType]:
    return [
        DroneType("autel", 8, 1.5),
        DroneType("jouav", 7, 1.5),
        DroneType("dji", 1, 2.0),
    ]


def _default_zones() -> list[InterferenceZone]:
    return [InterferenceZone(1600, 1800, 500), InterferenceZone(800, 2500, 300)]


def _drone_types(values: Any) -> list[DroneType]:
    if not isinstance(values, Mapping):
        msg = f"drone_types must map names to {{count, base_loss}}, got {values!r}"
        raise InvalidConfiguration(msg)
    types: list[DroneType] = []
    for name, entry in values.items():
        try:
            types.append(
                DroneType(
                    name=str(name),
                    count=int(entry["count"]),
                    base_loss=float(entry["base_loss"]),
                ),
            )
        except (KeyError, TypeError, ValueError) as exc:
            msg = f"drone type {name!r} needs count and base_loss, got {entry!r}"
            raise InvalidConfiguration(msg) from exc
    return types


def _zones(values: Any) -> list[InterferenceZone]:
    zones: list[InterferenceZone] = []
    for value in values or []:
        try:
            x, y, radius = value
            zones.append(InterferenceZone(float(x), float(y), float(radius)))
        except (TypeError, ValueError) as exc:
            msg = f"interference zones must be [x, y, radius], got {value!r}"
            raise InvalidConfiguration(msg) from exc
    return zones


def _pair(value: Any, name: str) -> tuple[float, float]:
    try:
        a, b = value
        return float(a), float(b)
    except (TypeError, ValueError) as exc:
        msg = f"{name} must be a pair of numbers, got {value!r}"
        raise InvalidConfiguration(msg) from exc


def _names(values: Any) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for value in values or []:
        try:
            a, b = value
        except (TypeError, ValueError) as exc:
            msg = f"excluded_pairs entries must be [type, type], got {value!r}"
            raise InvalidConfiguration(msg) from exc
        pairs.append((str(a), str(b)))
    return pairs


@dataclass
class LinkSimConfig:
    """Top-level link simulation configuration.

    Attributes:
        seed: RNG seed for deterministic replay.
        drone_types: Fleet composition, laid out in order.
        area_m: Side of the square survey area.
        sim_time_s: Number of one-second updates.
        comms_range_m: Maximum link distance.
        distance_loss_factor: Extra loss (%) per metre of separation.
        interference_zones: Areas that multiply link loss.
        interference_penalty: Multiplier applied inside a zone.
        variation: ``(low, high)`` bounds of the random loss multiplier.
        loss_cap: Upper bound on loss (%), or None for no cap.
        excluded_pairs: Type-name pairs that never form a link.
        drift_std_m: Standard deviation of the per-second random walk.
        initial_positions: Fixed starting positions, or None to scatter.
        position_jitter_m: Noise added to fixed starting positions.
        threshold: Loss (%) a compliant link must stay under.
        report_interval_s: Seconds between progress log lines.
    """

    seed: int = 42
    drone_types: list[DroneType] = field(default_factory=_default_types)
    area_m: float = 3650.0
    sim_time_s: int = 3600
    comms_range_m: float = 1500.0
    distance_loss_factor: float = 0.0003
    interference_zones: list[InterferenceZone] = field(default_factory=_default_zones)
    interference_penalty: float = 1.2
    variation: tuple[float, float] = (0.95, 1.05)
    loss_cap: float | None = 4.0
    excluded_pairs: list[tuple[str, str]] = field(
        default_factory=lambda: [("dji", "dji")],
    )
    drift_std_m: float = 5.0
    initial_positions: list[tuple[float, float]] | None = None
    position_jitter_m: float = 0.0
    threshold: float = 4.0
    report_interval_s: int = 300

    def __post_init__(self) -> None:
        """Reject configurations the simulator cannot run."""
        for drone_type in self.drone_types:
            if drone_type.count < 0:
                msg = (
                    f"drone type {drone_type.name!r} count must be "
                    f"non-negative, got {drone_type.count}"
                )
                raise InvalidConfiguration(msg)
        if self.num_drones < 2:
            msg = f"need at least two drones, got {self.num_drones}"
            raise InvalidConfiguration(msg)
        if self.sim_time_s < 0:
            msg = f"sim_time_s must be non-negative, got {self.sim_time_s}"
            raise InvalidConfiguration(msg)
        low, high = self.variation
        if low < 0 or high < low:
            msg = f"variation must satisfy 0 <= low <= high, got {self.variation}"
            raise InvalidConfiguration(msg)
        names = {t.name for t in self.drone_types}
        for pair in self.excluded_pairs:
            unknown = set(pair) - names
            if unknown:
                msg = f"excluded pair {pair} names unknown drone types {sorted(unknown)}"
                raise InvalidConfiguration(msg)
        if (
            self.initial_positions is not None
            and len(self.initial_positions) != self.num_drones
        ):
            msg = (
                f"{len(self.initial_positions)} initial positions given for "
                f"{self.num_drones} drones"
            )
            raise InvalidConfiguration(msg)

    @property
    def num_drones(self) -> int:
        """Total fleet size."""
        return sum(t.count for t in self.drone_types)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LinkSimConfig:
        """Build a config from an already-parsed mapping."""
        defaults = cls()
        drone_types = defaults.drone_types
        if "drone_types" in data:
            drone_types = _drone_types(data["drone_types"])
        zones = defaults.interference_zones
        if "interference_zones" in data:
            zones = _zones(data["interference_zones"])
        # Default exclusions only make sense for the default fleet
        excluded = [] if "drone_types" in data else defaults.excluded_pairs
        positions = data.get("initial_positions")
        cap = data.get("loss_cap", defaults.loss_cap)
        return cls(
            seed=int(data.get("seed", defaults.seed)),
            drone_types=drone_types,
            area_m=float(data.get("area_m", defaults.area_m)),
            sim_time_s=int(data.get("sim_time_s", defaults.sim_time_s)),
            comms_range_m=float(data.get("comms_range_m", defaults.comms_range_m)),
            distance_loss_factor=float(
                data.get("distance_loss_factor", defaults.distance_loss_factor),
            ),
            interference_zones=zones,
            interference_penalty=float(
                data.get("interference_penalty", defaults.interference_penalty),
            ),
            variation=_pair(data.get("variation", defaults.variation), "variation"),
            loss_cap=None if cap is None else float(cap),
            excluded_pairs=_names(data.get("excluded_pairs", excluded)),
            drift_std_m=float(data.get("drift_std_m", defaults.drift_std_m)),
            initial_positions=(
                None
                if positions is None
                else [_pair(p, "initial position") for p in positions]
            ),
            position_jitter_m=float(
                data.get("position_jitter_m", defaults.position_jitter_m),
            ),
            threshold=float(data.get("threshold", defaults.threshold)),
            report_interval_s=int(
                data.get("report_interval_s", defaults.report_interval_s),
            ),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> LinkSimConfig:
        """Load configuration from a YAML file.

        Raises:
            FileNotFoundError: If the config file does not exist.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)
