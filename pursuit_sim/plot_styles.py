"""Shared plotting utilities and styles for pure pursuit visualizations.

This module provides:
- Color scheme shared by all plots
- CSV data loading functions
- Common plot styling functions

All visualization modules should import from this module to ensure consistency.
"""

import csv
import logging
from pathlib import Path
from typing import Dict, List, Tuple

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.patches import Rectangle

from .config import (
    ARC_COLOR,
    CLAMPED_COLOR,
    CLOSEST_COLOR,
    FIELD_COLOR,
    FIELD_HEIGHT,
    FIELD_WIDTH,
    PATH_COLOR,
    ROBOT_COLOR,
    TARGET_COLOR,
    TRAIL_COLOR,
    WAYPOINT_COLOR,
)

__all__ = [
    "ARC_COLOR",
    "CLAMPED_COLOR",
    "CLOSEST_COLOR",
    "FIELD_COLOR",
    "PATH_COLOR",
    "ROBOT_COLOR",
    "TARGET_COLOR",
    "TRAIL_COLOR",
    "WAYPOINT_COLOR",
    "load_csv_data",
    "load_csv_to_dict",
    "style_axis",
    "draw_field",
    "create_figure",
    "save_figure",
]


# ============================================================================
# CSV Data Loading
# ============================================================================


def load_csv_data(filepath: Path) -> Tuple[List[str], List[List[str]]]:
    """Load CSV file and return headers and data rows.

    Args:
        filepath: Path to the CSV file.

    Returns:
        Tuple containing (headers, data_rows).

    Raises:
        FileNotFoundError: If the CSV file does not exist.
    """
    if not filepath.exists():
        raise FileNotFoundError(f"CSV file not found: {filepath}")

    with open(filepath, newline="") as f:
        reader = csv.reader(f)
        headers = next(reader)
        data_rows = list(reader)

    return headers, data_rows


def load_csv_to_dict(csv_path: Path) -> Dict[str, np.ndarray]:
    """Load CSV file into dictionary of numpy arrays.

    Numeric values become floats, anything else becomes NaN.

    Args:
        csv_path: Path to CSV file.

    Returns:
        Dictionary mapping column names to numpy arrays.

    Raises:
        FileNotFoundError: If the CSV file does not exist.

    Example:
        >>> data = load_csv_to_dict(Path("ticks.csv"))
        >>> data["curvature"].shape
        (412,)
    """
    headers, rows = load_csv_data(csv_path)
    data: Dict[str, List[float]] = {key: [] for key in headers}
    for row in rows:
        for key, value in zip(headers, row):
            try:
                data[key].append(float(value))
            except (ValueError, TypeError):
                data[key].append(np.nan)

    return {key: np.array(values) for key, values in data.items()}


# ============================================================================
# Plot Styling Functions
# ============================================================================


def style_axis(
    ax: Axes,
    title: str = "",
    xlabel: str = "",
    ylabel: str = "",
    grid: bool = True,
) -> None:
    """Apply consistent styling to a matplotlib axis.

    Args:
        ax: Matplotlib axis to style.
        title: Plot title (optional).
        xlabel: X-axis label (optional).
        ylabel: Y-axis label (optional).
        grid: Whether to show grid lines (default: True).
    """
    if title:
        ax.set_title(title, fontweight="bold")
    if xlabel:
        ax.set_xlabel(xlabel)
    if ylabel:
        ax.set_ylabel(ylabel)
    if grid:
        ax.grid(True, alpha=0.3, linestyle="--", linewidth=0.5)


def draw_field(ax: Axes, width: float = FIELD_WIDTH, height: float = FIELD_HEIGHT) -> None:
    """Draw the field background and fix the axis to field coordinates.

    The y axis points down, matching the screen the path was sketched on.
    """
    ax.add_patch(Rectangle((0.0, 0.0), width, height, facecolor=FIELD_COLOR, zorder=0))
    ax.set_xlim(0.0, width)
    ax.set_ylim(height, 0.0)
    ax.set_aspect("equal")


# ============================================================================
# Figure Creation Helpers
# ============================================================================


def create_figure(figsize: Tuple[float, float] = (12, 6), title: str = "") -> Tuple[Figure, Axes]:
    """Create a matplotlib figure with a single axis.

    Args:
        figsize: Figure size in inches (width, height).
        title: Optional main figure title.

    Returns:
        Tuple of (figure, axes).
    """
    fig, ax = plt.subplots(figsize=figsize)
    if title:
        fig.suptitle(title, fontsize=14, fontweight="bold")
    return fig, ax


def save_figure(fig: Figure, filepath: Path, dpi: int = 150, bbox_inches: str = "tight") -> None:
    """Save figure with consistent settings.

    Args:
        fig: Matplotlib figure to save.
        filepath: Path where to save the figure.
        dpi: Resolution in dots per inch (default: 150).
        bbox_inches: Bounding box setting (default: "tight").
    """
    fig.savefig(filepath, dpi=dpi, bbox_inches=bbox_inches)
    logging.info(f"Saved figure to {filepath}")
