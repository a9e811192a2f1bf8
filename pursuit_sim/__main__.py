"""
Main entry point when running the pursuit_sim module with python -m.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import (
    MIN_TURN_RADIUS,
    PURSUIT_DIST,
    ROBOT_SPEED,
    SIM_DT,
    SIM_MAX_TICKS,
    SIMPLIFY_TOLERANCE,
    SKIP_DIST,
)
from .errors import PathError
from .follower import PurePursuitFollower
from .path import demo_waypoints, load_waypoints
from .simulation import run_session, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Simulate a robot following a sketched path with pure pursuit"
    )
    parser.add_argument(
        "--waypoints",
        type=str,
        default=None,
        help="CSV file with x,y columns (default: generated S-shaped demo sketch)",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=SIMPLIFY_TOLERANCE,
        help=f"Simplification tolerance in inches (default: {SIMPLIFY_TOLERANCE})",
    )
    parser.add_argument(
        "--no-simplify", action="store_true", help="Follow every waypoint without simplifying"
    )
    parser.add_argument(
        "--speed", type=float, default=ROBOT_SPEED, help=f"Robot speed in in/s (default: {ROBOT_SPEED})"
    )
    parser.add_argument(
        "--dt", type=float, default=SIM_DT, help="Virtual clock time step in seconds (default: 1/60)"
    )
    parser.add_argument(
        "--pursuit-dist",
        type=float,
        default=PURSUIT_DIST,
        help=f"Lookahead arc length in inches (default: {PURSUIT_DIST})",
    )
    parser.add_argument(
        "--min-turn-radius",
        type=float,
        default=MIN_TURN_RADIUS,
        help=f"Minimum turn radius in inches (default: {MIN_TURN_RADIUS})",
    )
    parser.add_argument(
        "--skip-dist",
        type=float,
        default=SKIP_DIST,
        help=f"Corner skip threshold in inches (default: {SKIP_DIST})",
    )
    parser.add_argument(
        "--max-ticks",
        type=int,
        default=SIM_MAX_TICKS,
        help=f"Stop after this many ticks (default: {SIM_MAX_TICKS})",
    )
    parser.add_argument(
        "--output-dir", type=str, default=".", help="Base directory for run data (default: .)"
    )
    parser.add_argument("--no-save", action="store_true", help="Do not write run data to disk")
    parser.add_argument("--plot", action="store_true", help="Plot the run when it finishes")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging with timestamps"
    )
    return parser


def run(args: argparse.Namespace) -> int:
    """Run one simulated session for parsed command-line arguments.

    Returns:
        Process exit status.
    """
    try:
        if args.waypoints:
            raw = load_waypoints(args.waypoints)
            logging.info(f"Loaded {len(raw)} waypoints from {args.waypoints}")
        else:
            raw = demo_waypoints()

        follower = PurePursuitFollower(
            pursuit_dist=args.pursuit_dist,
            min_turn_radius=args.min_turn_radius,
            skip_dist=args.skip_dist,
        )
        result, waypoints, run_dir = run_session(
            raw,
            tolerance=None if args.no_simplify else args.tolerance,
            speed=args.speed,
            dt=args.dt,
            max_ticks=args.max_ticks,
            follower=follower,
            output_dir=None if args.no_save else args.output_dir,
        )
    except (PathError, FileNotFoundError, ValueError) as e:
        logging.error(f"Error: {e}")
        return 1

    if args.plot:
        import matplotlib.pyplot as plt

        from .visualization import plot_curvature, plot_simulation

        plot_simulation(
            result,
            waypoints,
            save_path=run_dir / "trajectory.png" if run_dir is not None else None,
        )
        plot_curvature(
            result.curvature_profile(),
            max_curvature=follower.max_curvature,
            save_path=run_dir / "curvature.png" if run_dir is not None else None,
        )
        plt.show()

    return 0 if result.completed else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for python -m pursuit_sim and the pursuit-sim script."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        return run(args)
    except KeyboardInterrupt:
        logging.info("\nExiting...")
        return 0


if __name__ == "__main__":
    sys.exit(main())
