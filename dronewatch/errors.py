"""Errors raised by DroneWatch.

Only genuine misconfiguration raises.  A walk that dead-ends or a planning
run that never reaches the goal is an expected outcome of a stochastic
search and is reported through return values instead.
"""

from __future__ import annotations


class InvalidConfiguration(ValueError):
    """The planner or simulator was given parameters it cannot run with.

    Raised before any iteration starts, e.g. when the start or goal cell
    lies on blocked terrain or the fleet classes do not partition the
    colony exactly.
    """
