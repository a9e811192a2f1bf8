"""Path representation for pure pursuit path following.

This module turns an operator-sketched sequence of waypoints into the
geometry the controller consumes:
- Douglas-Peucker simplification of dense sketches
- Line segments with precomputed direction, length and heading
- A demo sketch and CSV loading for standalone runs
"""

import collections.abc
import csv
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple, Union

import numpy as np
import numpy.typing as npt

from .config import DEGENERATE_LENGTH, FIELD_HEIGHT, FIELD_WIDTH, SIMPLIFY_HIGH_QUALITY
from .errors import DegenerateSegmentError


@dataclass(frozen=True)
class Waypoint:
    """A point on the sketched path in field coordinates (inches)."""

    x: float
    y: float


PointLike = Union[Waypoint, Tuple[float, float], Mapping[str, float]]


@dataclass(frozen=True)
class Segment:
    """Straight piece of the path between two consecutive waypoints.

    Invariants: length == hypot(dx, dy), (ndx, ndy) == (dx, dy) / length,
    angle == atan2(dy, dx).
    """

    x1: float
    y1: float
    x2: float
    y2: float
    dx: float
    dy: float
    ndx: float
    ndy: float
    length: float
    angle: float

    @classmethod
    def between(cls, start: Waypoint, end: Waypoint, index: int = 0) -> "Segment":
        """Build the segment from start to end.

        Args:
            start: First waypoint.
            end: Second waypoint.
            index: Position of the segment in its path, reported on error.

        Raises:
            DegenerateSegmentError: If start and end coincide.
        """
        dx = end.x - start.x
        dy = end.y - start.y
        length = math.hypot(dx, dy)
        if length <= DEGENERATE_LENGTH:
            raise DegenerateSegmentError(index)
        return cls(
            x1=start.x,
            y1=start.y,
            x2=end.x,
            y2=end.y,
            dx=dx,
            dy=dy,
            ndx=dx / length,
            ndy=dy / length,
            length=length,
            angle=math.atan2(dy, dx),
        )

    @property
    def start(self) -> Tuple[float, float]:
        return self.x1, self.y1

    @property
    def end(self) -> Tuple[float, float]:
        return self.x2, self.y2

    def project(self, x: float, y: float) -> float:
        """Scalar projection of (x, y) onto the segment, normalized by length.

        0.0 is the segment start and 1.0 the segment end. Not clamped.
        """
        return ((x - self.x1) * self.ndx + (y - self.y1) * self.ndy) / self.length

    def point_at(self, distance: float) -> Tuple[float, float]:
        """Point at the given distance along the segment from its start."""
        return self.x1 + distance * self.ndx, self.y1 + distance * self.ndy


def as_waypoints(points: Union[Iterable[PointLike], npt.NDArray[np.float64]]) -> List[Waypoint]:
    """Convert any supported point representation to a list of waypoints.

    Accepts Waypoint objects, (x, y) pairs, mappings with 'x' and 'y' keys,
    or an (N, 2) numpy array.

    Raises:
        ValueError: If an array does not have shape (N, 2).
    """
    if isinstance(points, np.ndarray):
        if points.size == 0:
            return []
        if points.ndim != 2 or points.shape[1] != 2:
            raise ValueError(f"Expected an (N, 2) array of points, got shape {points.shape}")
        return [Waypoint(float(x), float(y)) for x, y in points]

    waypoints = []
    for point in points:
        if isinstance(point, Waypoint):
            waypoints.append(point)
        elif isinstance(point, collections.abc.Mapping):
            waypoints.append(Waypoint(float(point["x"]), float(point["y"])))
        else:
            x, y = point
            waypoints.append(Waypoint(float(x), float(y)))
    return waypoints


def waypoint_arrays(points: Iterable[PointLike]) -> Dict[str, npt.NDArray[np.float64]]:
    """Split waypoints into 'x' and 'y' numpy arrays (for plotting and logging)."""
    waypoints = as_waypoints(points)
    return {
        "x": np.array([p.x for p in waypoints], dtype=float),
        "y": np.array([p.y for p in waypoints], dtype=float),
    }


# ============================================================================
# Simplification
# ============================================================================


def _radial_pass(waypoints: List[Waypoint], sq_tolerance: float) -> List[Waypoint]:
    """Drop points closer than the tolerance to the last kept point."""
    kept = [waypoints[0]]
    last_index = 0
    for index in range(1, len(waypoints)):
        prev = waypoints[last_index]
        point = waypoints[index]
        if (point.x - prev.x) ** 2 + (point.y - prev.y) ** 2 > sq_tolerance:
            kept.append(point)
            last_index = index
    if last_index != len(waypoints) - 1:
        kept.append(waypoints[-1])
    return kept


def _chord_sq_distances(
    xy: npt.NDArray[np.float64], first: int, last: int
) -> npt.NDArray[np.float64]:
    """Squared distances of points strictly between first and last to the chord segment."""
    a = xy[first]
    chord = xy[last] - a
    interior = xy[first + 1 : last]
    chord_sq = float(chord @ chord)
    if chord_sq > 0.0:
        # Projection clamped to the chord endpoints
        t = np.clip(((interior - a) @ chord) / chord_sq, 0.0, 1.0)
        nearest = a + t[:, None] * chord
    else:
        nearest = a
    diff = interior - nearest
    return np.einsum("ij,ij->i", diff, diff)


def _douglas_peucker(waypoints: List[Waypoint], sq_tolerance: float) -> List[Waypoint]:
    xy = np.array([[p.x, p.y] for p in waypoints], dtype=float)
    keep = np.zeros(len(waypoints), dtype=bool)
    keep[0] = keep[-1] = True

    stack = [(0, len(waypoints) - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue
        sq_distances = _chord_sq_distances(xy, first, last)
        farthest = int(np.argmax(sq_distances))
        if sq_distances[farthest] > sq_tolerance:
            index = first + 1 + farthest
            keep[index] = True
            stack.append((first, index))
            stack.append((index, last))

    return [p for p, k in zip(waypoints, keep) if k]


def simplify(
    points: Iterable[PointLike],
    tolerance: float = 1.0,
    high_quality: bool = SIMPLIFY_HIGH_QUALITY,
) -> List[Waypoint]:
    """Simplify a polyline with the Ramer-Douglas-Peucker algorithm.

    The first and last points are always kept and the result is a subsequence
    of the input. In high quality mode larger tolerances never keep more
    points than smaller ones. The radial pre-pass of the low quality mode
    depends on the tolerance, so there a larger tolerance can occasionally
    keep more points.

    Args:
        points: Ordered waypoints of the sketched path.
        tolerance: Maximum allowed deviation of a dropped point from the
            simplified polyline (same units as the points).
        high_quality: If True, run Douglas-Peucker on every point. If False,
            first drop points within tolerance of their predecessor
            (faster, slightly coarser). Default: SIMPLIFY_HIGH_QUALITY.

    Returns:
        Simplified list of waypoints. Inputs with fewer than 3 points are
        returned unchanged.

    Raises:
        ValueError: If tolerance is negative.
    """
    if tolerance < 0:
        raise ValueError(f"Simplification tolerance must be non-negative, got {tolerance}")

    waypoints = as_waypoints(points)
    if len(waypoints) <= 2:
        return waypoints

    sq_tolerance = tolerance * tolerance
    if not high_quality:
        waypoints = _radial_pass(waypoints, sq_tolerance)
    return _douglas_peucker(waypoints, sq_tolerance)


# ============================================================================
# Segments
# ============================================================================


def build_segments(points: Iterable[PointLike], skip_degenerate: bool = False) -> List[Segment]:
    """Convert ordered waypoints into line segments.

    One segment per consecutive pair; fewer than two waypoints give an empty
    list. Segments must be rebuilt whenever the waypoints change.

    Args:
        points: Ordered waypoints.
        skip_degenerate: If True, coincident consecutive waypoints are merged
            instead of raising.

    Returns:
        List of segments in path order.

    Raises:
        DegenerateSegmentError: If two consecutive waypoints coincide and
            skip_degenerate is False.
    """
    waypoints = as_waypoints(points)
    segments: List[Segment] = []
    if len(waypoints) < 2:
        return segments

    skipped = 0
    anchor = waypoints[0]
    for index, point in enumerate(waypoints[1:]):
        try:
            segments.append(Segment.between(anchor, point, index))
        except DegenerateSegmentError:
            if not skip_degenerate:
                raise
            skipped += 1
            continue
        anchor = point

    if skipped:
        logging.warning(f"Skipped {skipped} zero-length segment(s) while building path")
    return segments


def path_length(segments: Sequence[Segment]) -> float:
    """Total arc length of the path."""
    return float(sum(seg.length for seg in segments))


def normalize_angle(angle: float) -> float:
    """Wrap an angle to (-pi, pi]."""
    wrapped = math.fmod(angle + math.pi, 2.0 * math.pi)
    if wrapped <= 0.0:
        wrapped += 2.0 * math.pi
    return wrapped - math.pi


# ============================================================================
# Path Sources
# ============================================================================


def demo_waypoints(num_points: int = 200, margin: float = 60.0) -> List[Waypoint]:
    """Generate a dense S-shaped sketch across the field.

    Stands in for a freehand stroke: one full sine wave from the left margin
    to the right margin, centred vertically.

    Args:
        num_points: Number of sketch samples.
        margin: Distance kept from the left and right field edges (inches).

    Returns:
        List of waypoints in sketch order.
    """
    x = np.linspace(margin, FIELD_WIDTH - margin, num_points)
    span = FIELD_WIDTH - 2.0 * margin
    y = FIELD_HEIGHT / 2.0 + 0.3 * FIELD_HEIGHT * np.sin(2.0 * np.pi * (x - margin) / span)
    return as_waypoints(np.column_stack([x, y]))


def load_waypoints(csv_path: Union[str, Path]) -> List[Waypoint]:
    """Load waypoints from a CSV file with 'x' and 'y' columns.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
        ValueError: If the file lacks 'x' or 'y' columns or holds non-numeric values.
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Waypoint file not found: {csv_path}")

    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        fields = reader.fieldnames or []
        if "x" not in fields or "y" not in fields:
            raise ValueError(f"Waypoint CSV must have 'x' and 'y' columns, got {fields}")
        return [Waypoint(float(row["x"]), float(row["y"])) for row in reader]
