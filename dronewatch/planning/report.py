"""Plain-text summary of a planning run."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dronewatch.planning.config import PlannerConfig
    from dronewatch.planning.planner import PlanResult


def format_plan_report(result: PlanResult, config: PlannerConfig) -> str:
    """Render the survey metrics and the best path found.

    Args:
        result: Outcome of ``ACOPlanner.plan``.
        config: The configuration the run used (for physical scale).

    Returns:
        Multi-line report text.  Callers surface a missing path as a
        warning; this only describes what was found.
    """
    scale = config.report
    lines = [
        "=== SURVEILLANCE AREA METRICS ===",
        f"Total surveillance area: {scale.area_m2 / 1e6:.1f} km²",
        f"Perimeter length: {scale.perimeter_m / 1000:.1f} km",
        "",
        "=== CONTROL CENTER DISTANCES ===",
        f"Furthest point: {scale.max_distance_m / 1000:.1f} km",
        f"Closest point: {scale.min_distance_m / 1000:.1f} km",
        "",
        "=== OPTIMAL PATH RESULTS ===",
        f"Iterations run: {result.iterations}",
        f"Successful walks: {result.total_successes}",
    ]
    best = result.best_path
    if best is None:
        lines.append("No valid path found")
        return "\n".join(lines)

    meters = best.distance_m(scale.meters_per_unit)
    lines += [
        f"Found in iteration: {best.iteration + 1}",
        f"Path length: {best.length} cells",
        f"Path length: {meters:.1f} meters ({meters / 1000:.1f} km)",
    ]
    if scale.perimeter_m > 0:
        coverage = 100 * meters / scale.perimeter_m
        lines.append(f"Percentage of perimeter covered: {coverage:.1f}%")
    lines.append("Route: " + " -> ".join(f"({r},{c})" for r, c in best.path))
    return "\n".join(lines)
