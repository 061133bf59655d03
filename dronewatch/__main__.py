"""Entry point for ``python -m dronewatch``.

Two commands:

- ``plan``: load a planner YAML config, run the ACO planner and print
  the surveillance report.  ``--view`` opens a Pygame window that shows
  the colony converging instead of running headless.
- ``links``: run the packet-loss simulation and print the reliability
  report.
"""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys

from dronewatch.comms.config import LinkSimConfig
from dronewatch.comms.link_loss import LinkLossSimulator
from dronewatch.comms.report import build_report, format_report
from dronewatch.planning.config import PlannerConfig
from dronewatch.planning.planner import ACOPlanner
from dronewatch.planning.report import format_plan_report

logger = logging.getLogger("dronewatch")

_CONFIG_DIR = pathlib.Path(__file__).resolve().parent.parent / "config"
_DEFAULT_PLAN_CONFIG = _CONFIG_DIR / "default.yaml"
_DEFAULT_LINK_CONFIG = _CONFIG_DIR / "links.yaml"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dronewatch",
        description="DroneWatch - ACO patrol planning and link reliability",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log per-iteration detail (DEBUG level)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    plan = commands.add_parser("plan", help="Plan a patrol route with ACO")
    plan.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_PLAN_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    plan.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override the RNG seed from the config",
    )
    plan.add_argument(
        "--iterations",
        type=int,
        default=None,
        help="Override the iteration budget from the config",
    )
    plan.add_argument(
        "--view",
        action="store_true",
        help="Watch the colony in a Pygame window",
    )
    plan.add_argument(
        "--cell-size",
        type=int,
        default=6,
        help="Pixel size per grid cell in the viewer (default: 6)",
    )

    links = commands.add_parser("links", help="Simulate inter-drone packet loss")
    links.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_LINK_CONFIG,
        help="Path to YAML config file (default: config/links.yaml)",
    )
    links.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override the RNG seed from the config",
    )
    return parser


def run_plan(args: argparse.Namespace) -> int:
    """Run the planner and print its report.  Returns the exit status."""
    config = PlannerConfig.from_yaml(args.config)
    if args.seed is not None:
        config.seed = args.seed
    if args.iterations is not None:
        config.colony.max_iterations = args.iterations

    planner = ACOPlanner(config=config)
    if args.view:
        from dronewatch.ui.pygame_client import PathRenderer

        PathRenderer(planner=planner, cell_size=args.cell_size).run()

    result = planner.plan()
    print(format_plan_report(result, config))
    if not result.found:
        logger.warning("No valid path found!")
        return 1
    return 0


def run_links(args: argparse.Namespace) -> int:
    """Run the link simulation and print its report.  Returns the exit status."""
    config = LinkSimConfig.from_yaml(args.config)
    if args.seed is not None:
        config.seed = args.seed

    sim = LinkLossSimulator(config=config)
    sim.run()
    print(format_report(build_report(sim)))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse CLI args and dispatch to the chosen command."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.command == "plan":
        return run_plan(args)
    return run_links(args)


if __name__ == "__main__":
    sys.exit(main())
