#!/usr/bin/env python3
"""
Standalone script to visualize saved pure pursuit runs.

Loads waypoints.csv and ticks.csv from a run directory written by
DataCollector and plots the path, the robot trail and the commanded
curvature. Runs are picked by name, by their number in --list output, or
default to the most recent one.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import TERM_BLUE, TERM_RESET
from .visualization import plot_run_summary


def list_runs(results_dir: Path) -> List[Path]:
    """Run directories under results_dir, oldest first.

    Raises:
        FileNotFoundError: If the results directory does not exist.
    """
    if not results_dir.is_dir():
        raise FileNotFoundError(f"Results directory not found: {results_dir}")

    return sorted(d for d in results_dir.iterdir() if d.is_dir() and d.name.startswith("run_"))


def find_latest_run(results_dir: Path) -> Path:
    """Most recent run directory (timestamped names sort chronologically).

    Raises:
        FileNotFoundError: If there are no runs.
    """
    runs = list_runs(results_dir)
    if not runs:
        raise FileNotFoundError(f"No runs found in {results_dir}")
    return runs[-1]


def resolve_run(results_dir: Path, run: Optional[str]) -> Path:
    """Turn a --run argument into a run directory.

    Args:
        results_dir: Directory holding run_* directories.
        run: Directory name, 1-based number from --list, or None for the latest run.

    Raises:
        FileNotFoundError: If no matching run exists.
    """
    if run is None:
        return find_latest_run(results_dir)

    if run.isdigit():
        runs = list_runs(results_dir)
        number = int(run)
        if not 1 <= number <= len(runs):
            raise FileNotFoundError(f"Run number {number} out of range (1-{len(runs)})")
        return runs[number - 1]

    run_dir = results_dir / run
    if not run_dir.is_dir():
        raise FileNotFoundError(f"Run directory not found: {run_dir}")
    return run_dir


def count_ticks(run_dir: Path) -> Optional[int]:
    ticks_path = run_dir / "ticks.csv"
    if not ticks_path.exists():
        return None
    with open(ticks_path, newline="") as f:
        return max(sum(1 for _ in f) - 1, 0)


def log_runs(results_dir: Path) -> None:
    """Log the numbered list of runs with their tick counts."""
    runs = list_runs(results_dir)
    if not runs:
        logging.info(f"No runs found in {results_dir}")
        return

    logging.info(f"Runs in {results_dir}:")
    for number, run_dir in enumerate(runs, 1):
        ticks = count_ticks(run_dir)
        detail = f"{ticks} ticks" if ticks is not None else "no tick data"
        logging.info(f"  {number:>3}. {run_dir.name}  ({detail})")


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    parser = argparse.ArgumentParser(
        description="Plot saved pure pursuit simulation runs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Latest run
  python -m pursuit_sim.plot_results

  # By name, or by number from --list
  python -m pursuit_sim.plot_results --run run_20260101_120000
  python -m pursuit_sim.plot_results --run 3

  # Write trajectory.png and curvature.png into the run directory only
  python -m pursuit_sim.plot_results --save --no-show
        """,
    )
    parser.add_argument(
        "--run",
        type=str,
        default=None,
        help="Run directory name or number from --list (default: latest run)",
    )
    parser.add_argument(
        "--results-dir", type=str, default="results", help="Directory holding runs (default: results)"
    )
    parser.add_argument("--save", action="store_true", help="Write PNG files into the run directory")
    parser.add_argument("--no-show", action="store_true", help="Do not open plot windows")
    parser.add_argument("--list", action="store_true", help="List runs and exit")
    args = parser.parse_args(argv)

    results_dir = Path(args.results_dir)
    try:
        if args.list:
            log_runs(results_dir)
            return

        run_dir = resolve_run(results_dir, args.run)
        logging.info(f"{TERM_BLUE}Plotting {run_dir}{TERM_RESET}")
        plot_run_summary(run_dir=run_dir, save_plots=args.save, show_plots=not args.no_show)
    except FileNotFoundError as e:
        logging.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
