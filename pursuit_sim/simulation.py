"""
Simulation loop for pure pursuit path following.

This module steps the pure pursuit follower and the unicycle model once per
tick until the follower reports that the robot has passed the end of the
path. Two clocks are supported: a virtual clock with a fixed time step
(deterministic, used by the CLI and tests) and a wall clock driven from an
asyncio loop (irregular time steps, as from a display refresh callback).
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import numpy.typing as npt

from .config import (
    ROBOT_SPEED,
    SIM_DT,
    SIM_MAX_TICKS,
    SIM_TICK_INTERVAL,
    SIMPLIFY_HIGH_QUALITY,
    SIMPLIFY_TOLERANCE,
    TERM_BLUE,
    TERM_RESET,
)
from .data_collector import DataCollector
from .errors import EmptyPathError
from .follower import PathComplete, PurePursuitFollower, PursuitResult, StepResult
from .instructions import format_commands
from .model import RobotPose, integrate
from .path import PointLike, Segment, Waypoint, as_waypoints, build_segments, simplify


class CustomFormatter(logging.Formatter):
    """Custom logging formatter that removes timestamps from INFO messages.

    This formatter provides clean console output by showing INFO messages without
    timestamps while preserving full context for WARNING, ERROR, and DEBUG messages.
    """

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno == logging.INFO:
            return record.getMessage()
        return f"{self.formatTime(record, self.datefmt)} - {record.levelname} - {record.getMessage()}"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbose: If True, show all levels with timestamps. If False, show INFO
                 without timestamps and WARNING/ERROR with timestamps.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(CustomFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
        logger = logging.getLogger()
        logger.setLevel(logging.INFO)
        logger.addHandler(handler)


@dataclass
class SimulationResult:
    """Outcome of a simulation run.

    Attributes:
        poses: Pose history, starting with the initial pose (one more entry than results).
        results: Controller output for every tick that moved the robot.
        times: Simulation time of each pose (seconds).
        completed: True if the robot reached the end of the path.
    """

    poses: List[RobotPose] = field(default_factory=list)
    results: List[PursuitResult] = field(default_factory=list)
    times: List[float] = field(default_factory=list)
    completed: bool = False

    @property
    def ticks(self) -> int:
        return len(self.results)

    @property
    def elapsed(self) -> float:
        return self.times[-1] if self.times else 0.0

    @property
    def clamped_ticks(self) -> int:
        return sum(1 for r in self.results if r.clamped)

    @property
    def final_pose(self) -> Optional[RobotPose]:
        return self.poses[-1] if self.poses else None

    def trajectory(self) -> Dict[str, npt.NDArray[np.float64]]:
        """Pose history as numpy arrays with keys 't', 'x', 'y', 'heading'."""
        return {
            "t": np.array(self.times, dtype=float),
            "x": np.array([p.x for p in self.poses], dtype=float),
            "y": np.array([p.y for p in self.poses], dtype=float),
            "heading": np.array([p.heading for p in self.poses], dtype=float),
        }

    def curvature_profile(self) -> Dict[str, npt.NDArray[Any]]:
        """Commanded curvature per tick with keys 't', 'curvature', 'clamped'."""
        return {
            "t": np.array(self.times[: len(self.results)], dtype=float),
            "curvature": np.array([r.curvature for r in self.results], dtype=float),
            "clamped": np.array([r.clamped for r in self.results], dtype=bool),
        }


class SimulationLoop:
    """Drives a simulated robot along a path with pure pursuit.

    Each tick calls PurePursuitFollower.step() for the current pose and then,
    unless the path is complete, advances the pose with the unicycle model.

    Attributes:
        segments: Path segments (fixed for the lifetime of the loop).
        waypoints: Waypoints the segments were built from.
        speed: Forward speed of the robot (inches/second).
        follower: Pure pursuit controller.
        data_collector: Optional CSV logger for the run.
        pose: Current robot pose (None before start()).
        should_stop: Flag polled by the real-time loop.
    """

    def __init__(
        self,
        path: Sequence[Union[Segment, PointLike]],
        speed: float = ROBOT_SPEED,
        follower: Optional[PurePursuitFollower] = None,
        data_collector: Optional[DataCollector] = None,
        skip_degenerate: bool = False,
    ) -> None:
        """Initialize the simulation loop.

        Args:
            path: Either segments from build_segments() or ordered waypoints.
            speed: Forward speed (inches/second). Default: ROBOT_SPEED.
            follower: Controller to use. Default: PurePursuitFollower() with config values.
            data_collector: Optional logger; set up and cleaned up when the
                loop is used as a context manager.
            skip_degenerate: Merge coincident waypoints instead of raising
                when building segments.

        Raises:
            DegenerateSegmentError: If waypoints contain coincident neighbours
                and skip_degenerate is False.
        """
        if len(path) > 0 and all(isinstance(p, Segment) for p in path):
            self.segments: List[Segment] = list(path)
            self.waypoints: List[Waypoint] = [Waypoint(*self.segments[0].start)] + [
                Waypoint(*seg.end) for seg in self.segments
            ]
        else:
            self.waypoints = as_waypoints(path)
            self.segments = build_segments(self.waypoints, skip_degenerate=skip_degenerate)

        self.speed = speed
        self.follower = follower if follower is not None else PurePursuitFollower()
        self.data_collector = data_collector

        self.pose: Optional[RobotPose] = None
        self.elapsed: float = 0.0
        self.completed: bool = False
        self.should_stop: bool = False
        self.poses: List[RobotPose] = []
        self.results: List[PursuitResult] = []
        self.times: List[float] = []

    def default_pose(self) -> RobotPose:
        """Pose at the first waypoint, facing along the first segment.

        Raises:
            EmptyPathError: If the path has no segments.
        """
        if not self.segments:
            raise EmptyPathError("Cannot place the robot on a path with fewer than two waypoints")
        first = self.segments[0]
        return RobotPose(first.x1, first.y1, first.angle)

    def start(self, initial_pose: Optional[RobotPose] = None) -> None:
        """Start a new run.

        Args:
            initial_pose: Starting pose. Default: default_pose().

        Raises:
            EmptyPathError: If the path has fewer than two waypoints.
        """
        if initial_pose is None:
            initial_pose = self.default_pose()
        self.follower.start(self.segments, initial_pose)

        self.pose = initial_pose.copy()
        self.elapsed = 0.0
        self.completed = False
        self.should_stop = False
        self.poses = [self.pose]
        self.results = []
        self.times = [0.0]

        logging.info(
            f"{TERM_BLUE}✓ Running pure pursuit over {len(self.segments)} segments "
            f"from ({self.pose.x:.1f}, {self.pose.y:.1f}){TERM_RESET}"
        )
        logging.debug(f"Follower configuration: {self.follower.get_diagnostics()}")

    def tick(self, dt: float) -> StepResult:
        """Advance the simulation by one tick.

        Args:
            dt: Elapsed time since the previous tick (seconds), non-negative.

        Returns:
            The follower's result for this tick. Once it is PathComplete the
            pose no longer changes.

        Raises:
            ValueError: If dt is negative.
            RuntimeError: If start() has not been called.
        """
        if dt < 0:
            raise ValueError(f"Time step must be non-negative, got {dt}")
        if self.pose is None:
            raise RuntimeError("start() must be called before tick()")

        result = self.follower.step(self.pose)
        if isinstance(result, PathComplete):
            if not self.completed:
                self.completed = True
                logging.info(
                    f"{TERM_BLUE}✓ Path complete after {len(self.results)} ticks "
                    f"({self.elapsed:.2f}s, {self.follower.skip_count} corner skips){TERM_RESET}"
                )
            return result

        if self.data_collector is not None:
            self.data_collector.log_tick(self.elapsed, self.pose, result)

        self.pose = integrate(self.pose, self.speed, result.curvature, dt)
        self.elapsed += dt
        self.poses.append(self.pose)
        self.results.append(result)
        self.times.append(self.elapsed)
        return result

    def result(self) -> SimulationResult:
        """Snapshot of the run so far."""
        return SimulationResult(
            poses=list(self.poses),
            results=list(self.results),
            times=list(self.times),
            completed=self.completed,
        )

    def run(
        self,
        dt: float = SIM_DT,
        max_ticks: int = SIM_MAX_TICKS,
        initial_pose: Optional[RobotPose] = None,
    ) -> SimulationResult:
        """Run to completion on a virtual clock with a fixed time step.

        Args:
            dt: Time step (seconds). Default: SIM_DT.
            max_ticks: Give up after this many ticks. Default: SIM_MAX_TICKS.
            initial_pose: Starting pose. Default: default_pose().

        Returns:
            SimulationResult; completed is False if max_ticks was reached first.
        """
        self.start(initial_pose)
        for _ in range(max_ticks):
            if self.tick(dt).complete:
                break
        else:
            logging.warning(
                f"Stopped after {max_ticks} ticks without reaching the end of the path "
                f"(segment {self.follower.segment_index}/{len(self.segments)})"
            )

        clamped = sum(1 for r in self.results if r.clamped)
        if clamped:
            logging.info(f"Turn radius clamp fired on {clamped}/{len(self.results)} ticks")
        return self.result()

    async def run_realtime(
        self,
        tick_interval: float = SIM_TICK_INTERVAL,
        time_source: Callable[[], float] = time.monotonic,
        initial_pose: Optional[RobotPose] = None,
    ) -> SimulationResult:
        """Run against a wall clock, one tick per tick_interval.

        The time step of each tick is measured from time_source, so late or
        early wakeups are integrated with their actual duration. Call stop()
        to end the run early.

        Args:
            tick_interval: Sleep between ticks (seconds). Default: SIM_TICK_INTERVAL.
            time_source: Monotonic clock in seconds. Default: time.monotonic.
            initial_pose: Starting pose. Default: default_pose().

        Returns:
            SimulationResult for the run.
        """
        self.start(initial_pose)
        last_time = time_source()

        while not self.should_stop:
            await asyncio.sleep(tick_interval)
            now = time_source()
            dt = max(now - last_time, 0.0)
            last_time = now
            if self.tick(dt).complete:
                break

        return self.result()

    def stop(self) -> None:
        """Signal the real-time loop to stop."""
        self.should_stop = True

    def __enter__(self) -> "SimulationLoop":
        """Context manager entry point - prepares run logging.

        Returns:
            Self reference for use in with statement.
        """
        if self.data_collector is not None:
            self.data_collector.setup()
            self.data_collector.log_waypoints(self.waypoints)
            self.data_collector.log_commands(format_commands(self.segments))
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit point - ensures cleanup is called."""
        if self.data_collector is not None:
            self.data_collector.cleanup()


def run_session(
    raw_waypoints: Sequence[PointLike],
    tolerance: Optional[float] = SIMPLIFY_TOLERANCE,
    speed: float = ROBOT_SPEED,
    dt: float = SIM_DT,
    max_ticks: int = SIM_MAX_TICKS,
    follower: Optional[PurePursuitFollower] = None,
    output_dir: Optional[str] = ".",
) -> Tuple[SimulationResult, List[Waypoint], Optional[Path]]:
    """Simplify a sketched path, print its drive instructions and simulate it.

    Args:
        raw_waypoints: Dense sketch, in order.
        tolerance: Simplification tolerance, or None to keep every waypoint.
        speed: Robot speed (inches/second).
        dt: Virtual clock time step (seconds).
        max_ticks: Tick cap for the run.
        follower: Controller to use (default from config).
        output_dir: Base directory for run data, or None to skip saving.

    Returns:
        Tuple of (simulation result, simplified waypoints, run directory or None).

    Raises:
        EmptyPathError: If fewer than two distinct waypoints remain.
    """
    waypoints = as_waypoints(raw_waypoints)
    if tolerance is not None:
        waypoints = simplify(waypoints, tolerance, SIMPLIFY_HIGH_QUALITY)
        logging.info(f"Simplified {len(raw_waypoints)} sketch points to {len(waypoints)} waypoints")

    collector = DataCollector(output_dir=output_dir) if output_dir is not None else None
    with SimulationLoop(
        waypoints, speed=speed, follower=follower, data_collector=collector, skip_degenerate=True
    ) as loop:
        for line in format_commands(loop.segments):
            logging.info(line)
        result = loop.run(dt=dt, max_ticks=max_ticks)

    run_dir = collector.run_dir if collector is not None else None
    return result, loop.waypoints, run_dir
