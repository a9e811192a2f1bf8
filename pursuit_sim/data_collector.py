"""Data collection and CSV logging for pure pursuit simulation runs.

This module provides CSV data logging for:
- Waypoints of the (simplified) path being followed
- Per-tick robot pose and controller output (closest point, target, curvature)
- Drive/turn instructions derived from the path
"""

import csv
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Optional, TextIO

from .config import TERM_BLUE, TERM_RESET
from .follower import PursuitResult
from .model import RobotPose
from .path import PointLike, as_waypoints

TICK_COLUMNS = [
    "t",
    "x",
    "y",
    "heading",
    "closest_x",
    "closest_y",
    "target_x",
    "target_y",
    "curvature",
    "clamped",
    "segment_index",
]


class DataCollector:
    """Manages CSV file creation and logging for simulation runs.

    Attributes:
        run_dir: Directory path for this run's output files.
        ticks_csv_file: File handle for the per-tick CSV.
        waypoints_output_path: Path of the waypoint CSV.
        commands_output_path: Path of the drive instructions text file.
    """

    def __init__(self, output_dir: str = ".", run_dir: Optional[str] = None) -> None:
        """Initialize the data collector.

        Args:
            output_dir: Base directory for output files (default: current directory).
            run_dir: Optional specific run directory. If None, creates timestamped
                directory. Can also be set via RUN_DIR environment variable.

        Raises:
            ValueError: If output_dir is not a valid directory.
        """
        output_path = Path(output_dir)
        if output_path.exists() and not output_path.is_dir():
            raise ValueError(f"Output path exists but is not a directory: {output_dir}")

        self.ticks_csv_file: Optional[TextIO] = None
        self.ticks_csv_writer: Any = None
        self.tick_count: int = 0

        if run_dir:
            self.run_dir: Path = Path(run_dir)
        elif env_run_dir := os.environ.get("RUN_DIR"):
            self.run_dir = Path(env_run_dir)
        else:
            # Timestamped directory: results/run_YYYYMMDD_HHMMSS/
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.run_dir = output_path / "results" / f"run_{timestamp}"

        self.run_dir.mkdir(parents=True, exist_ok=True)

        self.ticks_output_path: Path = self.run_dir / "ticks.csv"
        self.waypoints_output_path: Path = self.run_dir / "waypoints.csv"
        self.commands_output_path: Path = self.run_dir / "commands.txt"

    def setup(self) -> None:
        """Open the per-tick CSV and write its header. Must be called before log_tick."""
        self.ticks_csv_file = open(self.ticks_output_path, "w", newline="")
        self.ticks_csv_writer = csv.writer(self.ticks_csv_file)
        self.ticks_csv_writer.writerow(TICK_COLUMNS)
        self.ticks_csv_file.flush()
        self.tick_count = 0

        logging.debug(f"Initialized data collection in {self.run_dir}")

    def log_waypoints(self, waypoints: Iterable[PointLike]) -> None:
        """Write the path waypoints to waypoints.csv.

        Args:
            waypoints: Ordered waypoints of the path being followed.
        """
        with open(self.waypoints_output_path, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["x", "y"])
            for point in as_waypoints(waypoints):
                writer.writerow([point.x, point.y])

    def log_commands(self, commands: Iterable[str]) -> None:
        """Write drive/turn instructions to commands.txt, one per line."""
        with open(self.commands_output_path, "w", encoding="utf-8") as f:
            for line in commands:
                f.write(f"{line}\n")

    def log_tick(self, t: float, pose: RobotPose, result: PursuitResult) -> None:
        """Log one controller tick to CSV.

        Args:
            t: Simulation time at the start of the tick (seconds).
            pose: Pose the steering command was computed for.
            result: Controller output for this tick.
        """
        if self.ticks_csv_writer is None:
            raise RuntimeError("setup() must be called before logging ticks")

        self.ticks_csv_writer.writerow(
            [
                t,
                pose.x,
                pose.y,
                pose.heading,
                result.closest_point[0],
                result.closest_point[1],
                result.target[0],
                result.target[1],
                result.curvature,
                int(result.clamped),
                result.segment_index,
            ]
        )
        self.tick_count += 1
        if self.ticks_csv_file:
            self.ticks_csv_file.flush()

    def cleanup(self) -> None:
        """Close the CSV file and log final output location."""
        if self.ticks_csv_file:
            self.ticks_csv_file.close()
            self.ticks_csv_file = None
            self.ticks_csv_writer = None

        logging.info(f"{TERM_BLUE}✓ Saved {self.tick_count} ticks to {self.run_dir}{TERM_RESET}")

    def __enter__(self) -> "DataCollector":
        """Context manager entry point.

        Returns:
            Self reference for use in with statement.
        """
        self.setup()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit point - ensures cleanup is called."""
        self.cleanup()
