"""
Visualization utilities for pure pursuit simulation runs.

This module draws the sketched path, the trail left by the robot, and the
controller's view of the last tick: the closest point on the path, the
pursuit target, and the arc the robot was commanded to drive (red where the
turn radius clamp fired). Runs can be plotted straight from a
SimulationResult or from the CSV files written by DataCollector.
"""

import math
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from .model import RobotPose, turn_center
from .path import PointLike, waypoint_arrays
from .plot_styles import (
    ARC_COLOR,
    CLAMPED_COLOR,
    CLOSEST_COLOR,
    PATH_COLOR,
    ROBOT_COLOR,
    TARGET_COLOR,
    TRAIL_COLOR,
    WAYPOINT_COLOR,
    create_figure,
    draw_field,
    load_csv_to_dict,
    save_figure,
    style_axis,
)
from .simulation import SimulationResult


def steering_arc(
    pose: RobotPose, target: Tuple[float, float], curvature: float, num_points: int = 50
) -> Tuple[np.ndarray, np.ndarray]:
    """Sample the commanded arc from the robot to the angle of the target.

    For zero curvature this is the straight line to the target. Otherwise the
    arc runs around turn_center() in the turning direction until it reaches
    the target's bearing from the centre.

    Returns:
        Tuple of (x, y) arrays.
    """
    center = turn_center(pose, curvature)
    if center is None:
        return np.array([pose.x, target[0]]), np.array([pose.y, target[1]])

    cx, cy = center
    start = math.atan2(pose.y - cy, pose.x - cx)
    end = math.atan2(target[1] - cy, target[0] - cx)
    if curvature > 0 and end < start:
        end += 2.0 * math.pi
    elif curvature < 0 and end > start:
        end -= 2.0 * math.pi

    angles = np.linspace(start, end, num_points)
    radius = abs(1.0 / curvature)
    return cx + radius * np.cos(angles), cy + radius * np.sin(angles)


def draw_path(ax: Axes, waypoints: Iterable[PointLike]) -> None:
    """Draw the path polyline and its waypoints."""
    arrays = waypoint_arrays(waypoints)
    ax.plot(arrays["x"], arrays["y"], "-", color=PATH_COLOR, linewidth=3, label="Path", zorder=2)
    ax.plot(arrays["x"], arrays["y"], "o", color=WAYPOINT_COLOR, markersize=6, zorder=3)


def draw_trail(ax: Axes, x: np.ndarray, y: np.ndarray) -> None:
    """Draw the trail driven by the robot."""
    ax.plot(x, y, "-", color=TRAIL_COLOR, linewidth=1.5, label="Robot trail", zorder=4)


def draw_steering(
    ax: Axes,
    pose: RobotPose,
    closest: Tuple[float, float],
    target: Tuple[float, float],
    curvature: float,
    clamped: bool,
) -> None:
    """Draw robot, closest point, pursuit target and commanded arc for one tick."""
    arc_x, arc_y = steering_arc(pose, target, curvature)
    ax.plot(arc_x, arc_y, "-", color=CLAMPED_COLOR if clamped else ARC_COLOR, linewidth=1, zorder=5)
    ax.plot(*target, "o", color=TARGET_COLOR, markersize=5, label="Pursuit target", zorder=6)
    ax.plot(*closest, "o", color=CLOSEST_COLOR, markersize=5, label="Closest point", zorder=6)
    ax.plot(pose.x, pose.y, "o", color=ROBOT_COLOR, markersize=12, label="Robot", zorder=7)


def plot_simulation(
    result: SimulationResult,
    waypoints: Iterable[PointLike],
    title: str = "Pure Pursuit Run",
    save_path: Optional[Path] = None,
) -> Figure:
    """Plot a run: field, path, trail, and the controller state at the last tick.

    Args:
        result: SimulationResult from SimulationLoop.
        waypoints: Waypoints of the followed path.
        title: Plot title.
        save_path: Optional path to save the figure.

    Returns:
        Matplotlib figure object.
    """
    fig, ax = create_figure()
    draw_field(ax)
    draw_path(ax, waypoints)

    trajectory = result.trajectory()
    draw_trail(ax, trajectory["x"], trajectory["y"])

    if result.results:
        last = result.results[-1]
        draw_steering(
            ax, result.poses[-2], last.closest_point, last.target, last.curvature, last.clamped
        )

    style_axis(ax, title=title, xlabel="X (in)", ylabel="Y (in)", grid=False)
    ax.legend(loc="upper right", fontsize=8)

    if save_path:
        save_figure(fig, save_path)

    return fig


def plot_curvature(
    profile: Dict[str, np.ndarray],
    max_curvature: Optional[float] = None,
    title: str = "Commanded Curvature",
    save_path: Optional[Path] = None,
) -> Figure:
    """Plot curvature over time, marking ticks where the clamp fired.

    Args:
        profile: Dictionary with 't', 'curvature' and 'clamped' arrays
            (SimulationResult.curvature_profile() or a ticks.csv load).
        max_curvature: Optional clamp limit to draw as dashed lines.
        title: Plot title.
        save_path: Optional path to save the figure.

    Returns:
        Matplotlib figure object.
    """
    fig, ax = create_figure(figsize=(12, 4))
    t = profile["t"]
    curvature = profile["curvature"]
    clamped = np.asarray(profile["clamped"], dtype=bool)

    ax.plot(t, curvature, "-", color=PATH_COLOR, linewidth=1.5, label="Curvature")
    if clamped.any():
        ax.plot(t[clamped], curvature[clamped], "o", color=CLAMPED_COLOR, markersize=3, label="Clamped")
    if max_curvature is not None:
        ax.axhline(max_curvature, color=CLAMPED_COLOR, linestyle="--", linewidth=0.8)
        ax.axhline(-max_curvature, color=CLAMPED_COLOR, linestyle="--", linewidth=0.8)

    style_axis(ax, title=title, xlabel="Time (s)", ylabel="Curvature (1/in)")
    ax.legend(loc="best")

    if save_path:
        save_figure(fig, save_path)

    return fig


def plot_run_summary(run_dir: Path, save_plots: bool = False, show_plots: bool = True) -> None:
    """Generate summary plots for a saved run.

    Args:
        run_dir: Directory containing waypoints.csv and ticks.csv.
        save_plots: If True, save plots to run directory.
        show_plots: If True, display plots interactively.

    Raises:
        FileNotFoundError: If required CSV files are not found.
    """
    waypoints = load_csv_to_dict(run_dir / "waypoints.csv")
    ticks = load_csv_to_dict(run_dir / "ticks.csv")

    fig, ax = create_figure()
    draw_field(ax)
    draw_path(ax, np.column_stack([waypoints["x"], waypoints["y"]]))
    draw_trail(ax, ticks["x"], ticks["y"])
    if len(ticks["t"]) > 0:
        pose = RobotPose(ticks["x"][-1], ticks["y"][-1], ticks["heading"][-1])
        draw_steering(
            ax,
            pose,
            (ticks["closest_x"][-1], ticks["closest_y"][-1]),
            (ticks["target_x"][-1], ticks["target_y"][-1]),
            float(ticks["curvature"][-1]),
            bool(ticks["clamped"][-1]),
        )
    style_axis(ax, title=f"Run {run_dir.name}", xlabel="X (in)", ylabel="Y (in)", grid=False)
    ax.legend(loc="upper right", fontsize=8)

    curvature_fig = plot_curvature(
        {"t": ticks["t"], "curvature": ticks["curvature"], "clamped": ticks["clamped"] > 0},
        title=f"Run {run_dir.name} - Curvature",
    )

    if save_plots:
        save_figure(fig, run_dir / "trajectory.png")
        save_figure(curvature_fig, run_dir / "curvature.png")

    if show_plots:
        plt.show()
    else:
        plt.close(fig)
        plt.close(curvature_fig)
