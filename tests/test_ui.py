"""Smoke tests for the viewer and the command line (no display required)."""

from __future__ import annotations

from pathlib import Path

import pytest

from dronewatch.ui.pygame_client import PathRenderer

_SMALL_PLAN = """\
seed: 7
start: [0, 0]
goal: [4, 4]
terrain:
  width: 5
  height: 5
  water: []
  roads: []
  hotspots: []
colony:
  population: 6
  max_iterations: 10
  fleet:
    long_range: {ants: [0, 2]}
    water_survey: {ants: [2, 4]}
    agile: {ants: [4, 6]}
"""

_SMALL_LINKS = """\
sim_time_s: 5
report_interval_s: 0
drone_types:
  autel: {count: 2, base_loss: 1.5}
initial_positions: [[0, 0], [1000, 0]]
interference_zones: []
"""


def test_path_renderer_importable() -> None:
    """PathRenderer class is importable without initialising pygame."""
    assert PathRenderer is not None


def test_main_module_importable() -> None:
    """The __main__ module is importable and exposes main()."""
    from dronewatch.__main__ import main

    assert callable(main)


def test_plan_command(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    from dronewatch.__main__ import main

    config = tmp_path / "plan.yaml"
    config.write_text(_SMALL_PLAN)
    assert main(["plan", "-c", str(config)]) == 0
    assert "OPTIMAL PATH RESULTS" in capsys.readouterr().out


def test_plan_command_without_path(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    from dronewatch.__main__ import main

    config = tmp_path / "plan.yaml"
    config.write_text(_SMALL_PLAN)
    assert main(["plan", "-c", str(config), "--iterations", "0"]) == 1
    assert "No valid path found" in capsys.readouterr().out


def test_links_command(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    from dronewatch.__main__ import main

    config = tmp_path / "links.yaml"
    config.write_text(_SMALL_LINKS)
    assert main(["links", "-c", str(config)]) == 0
    out = capsys.readouterr().out
    assert "RELIABILITY REPORT" in out
    assert "Total Active Links: 1" in out
