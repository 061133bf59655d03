"""Reliability report for a finished link simulation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from dronewatch.comms.link_loss import LinkLossSimulator

_HISTOGRAM_BINS = 20


@dataclass(frozen=True)
class LinkSummary:
    """One link picked out for the report (best or worst).

    Attributes:
        a: Index of the first drone.
        b: Index of the second drone.
        type_a: Type name of the first drone.
        type_b: Type name of the second drone.
        loss: Latest packet loss (%).
        pos_a: Final position of the first drone.
        pos_b: Final position of the second drone.
        distance_m: Final separation.
        interference: True if either drone ends inside a zone.
    """

    a: int
    b: int
    type_a: str
    type_b: str
    loss: float
    pos_a: tuple[float, float]
    pos_b: tuple[float, float]
    distance_m: float
    interference: bool


@dataclass
class LinkReport:
    """Aggregate reliability figures.

    Attributes:
        active_links: Links that carried traffic at least once.
        mean_loss: Mean of the latest loss values, or None.
        median_loss: Median of the latest loss values, or None.
        mode_range: Most populated histogram bin as ``(low, high)``.
        best: Lowest-loss link.
        worst: Highest-loss link.
        compliant: Links under the threshold.
        non_compliant: Links at or above the threshold.
        threshold: Compliance threshold (%).
        passed: True if both mean and median are under the threshold.
        recommendations: Suggested follow-up actions.
    """

    active_links: int
    mean_loss: float | None
    median_loss: float | None
    mode_range: tuple[float, float] | None
    best: LinkSummary | None
    worst: LinkSummary | None
    compliant: int
    non_compliant: int
    threshold: float
    passed: bool
    recommendations: list[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        return "PASS" if self.passed else "FAIL"


def _summarise(sim: LinkLossSimulator, a: int, b: int) -> LinkSummary:
    interfered = sim.interference_mask()
    pos_a = sim.positions[a]
    pos_b = sim.positions[b]
    return LinkSummary(
        a=a,
        b=b,
        type_a=sim.type_name(a),
        type_b=sim.type_name(b),
        loss=float(sim.packet_loss[a, b]),
        pos_a=(float(pos_a[0]), float(pos_a[1])),
        pos_b=(float(pos_b[0]), float(pos_b[1])),
        distance_m=float(np.hypot(*(pos_a - pos_b))),
        interference=bool(interfered[a] or interfered[b]),
    )


def build_report(sim: LinkLossSimulator) -> LinkReport:
    """Summarise the latest per-link loss values of ``sim``."""
    threshold = sim.config.threshold
    links = sim.active_links()
    if not links:
        return LinkReport(
            active_links=0,
            mean_loss=None,
            median_loss=None,
            mode_range=None,
            best=None,
            worst=None,
            compliant=0,
            non_compliant=0,
            threshold=threshold,
            passed=False,
            recommendations=[
                "No links established - reduce spacing or extend comms range",
            ],
        )

    losses = np.array([sim.packet_loss[a, b] for a, b in links])
    counts, edges = np.histogram(losses, bins=_HISTOGRAM_BINS)
    peak = int(np.argmax(counts))
    mean = float(losses.mean())
    median = float(np.median(losses))
    passed = mean < threshold and median < threshold

    best_a, best_b = links[int(np.argmin(losses))]
    worst_a, worst_b = links[int(np.argmax(losses))]

    recommendations: list[str] = []
    if passed:
        recommendations.append(
            "Design meets requirements - maintain current configuration",
        )
    else:
        types = sim.config.drone_types
        weakest = max(types, key=lambda t: t.base_loss)
        strongest = min(types, key=lambda t: t.base_loss)
        if weakest.base_loss > strongest.base_loss:
            recommendations.append(
                f"Upgrade {weakest.name} antennas to match "
                f"{strongest.name} performance",
            )
        if bool((losses > threshold).any()):
            recommendations.append(
                "Reposition worst-performing drones to reduce distances",
            )

    return LinkReport(
        active_links=len(links),
        mean_loss=mean,
        median_loss=median,
        mode_range=(float(edges[peak]), float(edges[peak + 1])),
        best=_summarise(sim, best_a, best_b),
        worst=_summarise(sim, worst_a, worst_b),
        compliant=int((losses < threshold).sum()),
        non_compliant=int((losses >= threshold).sum()),
        threshold=threshold,
        passed=passed,
        recommendations=recommendations,
    )


def _format_link(label: str, link: LinkSummary) -> list[str]:
    return [
        f"{label}: {link.loss:.2f}% loss",
        (
            f"   Between Drone {link.a + 1} ({link.type_a} at "
            f"[{link.pos_a[0]:.1f}, {link.pos_a[1]:.1f}]m) and Drone "
            f"{link.b + 1} ({link.type_b} at "
            f"[{link.pos_b[0]:.1f}, {link.pos_b[1]:.1f}]m)"
        ),
        f"   Distance: {link.distance_m:.1f}m | Interference: {link.interference}",
    ]


def format_report(report: LinkReport) -> str:
    """Render ``report`` as the plain-text reliability summary."""
    lines = [
        "=== RELIABILITY REPORT ===",
        f"Total Active Links: {report.active_links}",
    ]
    if report.active_links:
        total = report.active_links
        low, high = report.mode_range or (0.0, 0.0)
        lines += [
            "",
            "--- Network Performance ---",
            f"Mean Packet Loss: {report.mean_loss:.2f}%",
            f"Median Packet Loss: {report.median_loss:.2f}%",
            f"Most Common Loss Range: {low:.1f}%-{high:.1f}%",
            "",
            "--- Extremes ---",
        ]
        if report.best is not None:
            lines += _format_link("Best Link", report.best)
        if report.worst is not None:
            lines += _format_link("Worst Link", report.worst)
        lines += [
            "",
            "--- Compliance ---",
            (
                f"Links <{report.threshold:g}% Loss: {report.compliant} "
                f"({100 * report.compliant / total:.1f}%)"
            ),
            (
                f"Links >={report.threshold:g}% Loss: {report.non_compliant} "
                f"({100 * report.non_compliant / total:.1f}%)"
            ),
        ]
    lines += [
        f"Design Status: {report.status}",
        "",
        "--- Recommendations ---",
    ]
    lines += [f"* {item}" for item in report.recommendations]
    return "\n".join(lines)
