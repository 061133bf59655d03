"""LinkLossSimulator — packet loss between drifting drones.

Every simulated second the drones take a Gaussian random-walk step
(clamped to the survey square) and each eligible pair within comms range
gets a fresh loss estimate:

    loss = base_i + base_j + distance * distance_loss_factor

multiplied by the interference penalty if either drone sits inside an
interference zone, then by a uniform random variation, then capped if a
cap is configured.  The most recent estimate per link is kept; a link
that drifts out of range keeps its last value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
from numpy.random import Generator
from numpy.typing import NDArray

from dronewatch.comms.config import LinkSimConfig

logger = logging.getLogger(__name__)


@dataclass
class LinkLossSimulator:
    """Owns drone positions and the per-link loss matrix.

    Attributes:
        config: Link simulation configuration.
        rng: Seeded random generator; built from ``config.seed`` if omitted.
        positions: Drone positions in metres, shape ``(n, 2)``.
        type_index: Index into ``config.drone_types`` for each drone.
        packet_loss: Latest loss (%) per link; upper triangle only.
        time_s: Seconds simulated so far.
    """

    config: LinkSimConfig
    rng: Generator | None = None
    positions: NDArray[np.float64] = field(init=False, repr=False)
    type_index: NDArray[np.int64] = field(init=False, repr=False)
    packet_loss: NDArray[np.float64] = field(init=False, repr=False)
    time_s: int = field(init=False, default=0)
    _eligible: NDArray[np.bool_] = field(init=False, repr=False)
    _base_loss: NDArray[np.float64] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Lay out the fleet, place drones, and precompute eligible pairs."""
        if self.rng is None:
            self.rng = np.random.default_rng(self.config.seed)

        cfg = self.config
        n = cfg.num_drones
        self.type_index = np.repeat(
            np.arange(len(cfg.drone_types)),
            [t.count for t in cfg.drone_types],
        )
        self._base_loss = np.array(
            [cfg.drone_types[i].base_loss for i in self.type_index],
            dtype=np.float64,
        )

        if cfg.initial_positions is None:
            self.positions = self.rng.random((n, 2)) * cfg.area_m
        else:
            self.positions = np.array(cfg.initial_positions, dtype=np.float64)
            if cfg.position_jitter_m > 0:
                self.positions += self.rng.normal(
                    0.0,
                    cfg.position_jitter_m,
                    self.positions.shape,
                )
        np.clip(self.positions, 0.0, cfg.area_m, out=self.positions)

        self.packet_loss = np.zeros((n, n), dtype=np.float64)
        self._eligible = self._eligible_pairs()

    @property
    def num_drones(self) -> int:
        """Fleet size."""
        return int(self.positions.shape[0])

    def type_name(self, drone: int) -> str:
        """Return the type name of drone ``drone``."""
        return self.config.drone_types[int(self.type_index[drone])].name

    def distances(self) -> NDArray[np.float64]:
        """Pairwise Euclidean distances between drones."""
        delta = self.positions[:, np.newaxis, :] - self.positions[np.newaxis, :, :]
        return np.hypot(delta[..., 0], delta[..., 1])

    def interference_mask(self) -> NDArray[np.bool_]:
        """Return True for each drone inside any interference zone."""
        inside = np.zeros(self.num_drones, dtype=bool)
        for zone in self.config.interference_zones:
            dist = np.hypot(
                self.positions[:, 0] - zone.x,
                self.positions[:, 1] - zone.y,
            )
            inside |= dist < zone.radius
        return inside

    def step(self) -> int:
        """Advance one second and refresh loss on every in-range link.

        Returns:
            Number of eligible links within comms range this second.
        """
        cfg = self.config
        self.positions += self.rng.normal(0.0, cfg.drift_std_m, self.positions.shape)
        np.clip(self.positions, 0.0, cfg.area_m, out=self.positions)

        distances = self.distances()
        in_range = self._eligible & (distances <= cfg.comms_range_m)

        loss = (
            self._base_loss[:, np.newaxis]
            + self._base_loss[np.newaxis, :]
            + distances * cfg.distance_loss_factor
        )
        interfered = self.interference_mask()
        either = interfered[:, np.newaxis] | interfered[np.newaxis, :]
        loss = np.where(either, loss * cfg.interference_penalty, loss)

        low, high = cfg.variation
        loss *= self.rng.uniform(low, high, loss.shape)
        if cfg.loss_cap is not None:
            np.minimum(loss, cfg.loss_cap, out=loss)

        self.packet_loss[in_range] = loss[in_range]
        self.time_s += 1
        return int(in_range.sum())

    def run(self) -> None:
        """Run the configured number of seconds, logging progress."""
        interval = self.config.report_interval_s
        for _ in range(self.config.sim_time_s):
            active = self.step()
            if interval > 0 and self.time_s % interval == 0:
                logger.info(
                    "Time: %d/%d sec | Active links: %d",
                    self.time_s,
                    self.config.sim_time_s,
                    active,
                )

    def active_links(self) -> list[tuple[int, int]]:
        """Return ``(i, j)`` pairs, ``i < j``, that have carried traffic."""
        rows, cols = np.nonzero(self.packet_loss > 0)
        return list(zip(rows.tolist(), cols.tolist(), strict=True))

    def _eligible_pairs(self) -> NDArray[np.bool_]:
        """Upper-triangle mask of pairs allowed to form a link."""
        n = self.num_drones
        eligible = np.triu(np.ones((n, n), dtype=bool), k=1)
        excluded = {frozenset(pair) for pair in self.config.excluded_pairs}
        if not excluded:
            return eligible
        names = [self.type_name(i) for i in range(n)]
        for i in range(n):
            for j in range(i + 1, n):
                if frozenset((names[i], names[j])) in excluded:
                    eligible[i, j] = False
        return eligible
