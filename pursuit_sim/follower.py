"""Pure Pursuit Path Follower for sketched polyline paths.

This module implements a pure pursuit path following algorithm that:
- Projects the robot onto the path, never moving backwards along it
- Walks a fixed arc length ahead of that projection to find the target point
- Skips ahead past tight corners that fold the target back onto the robot
- Computes the signed curvature of the arc from the robot to the target
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .config import MIN_TURN_RADIUS, PURSUIT_DIST, SKIP_DIST
from .errors import EmptyPathError
from .model import RobotPose
from .path import Segment, normalize_angle


class FollowerState(Enum):
    """Lifecycle of a pure pursuit run."""

    IDLE = "idle"  # No run started yet
    TRACKING = "tracking"  # Path remains ahead of the robot
    DONE = "done"  # Robot has passed the end of the path (terminal)


@dataclass(frozen=True)
class PursuitResult:
    """Steering output for one tick while tracking.

    Attributes:
        closest_point: Projection of the robot onto the path.
        target: Pursuit point, PURSUIT_DIST of arc length past closest_point
            (or the final waypoint if the path ends sooner).
        curvature: Signed curvature to steer (1/inches), positive = left turn.
        clamped: True if the curvature was limited to 1/MIN_TURN_RADIUS.
        segment_index: Controller progress after this tick.
        target_segment_index: Segment holding the pursuit point.
        distance: Straight-line distance from robot to target.
        alpha: Bearing of the target relative to the robot heading, in (-pi, pi].
    """

    closest_point: Tuple[float, float]
    target: Tuple[float, float]
    curvature: float
    clamped: bool
    segment_index: int
    target_segment_index: int
    distance: float
    alpha: float
    complete: bool = field(default=False, init=False)


@dataclass(frozen=True)
class PathComplete:
    """Returned once the robot has passed the end of the path, and on every step after."""

    segment_index: int
    complete: bool = field(default=True, init=False)


StepResult = Union[PursuitResult, PathComplete]


class PurePursuitFollower:
    """Pure Pursuit follower over a list of path segments.

    The only state carried between ticks is the index of the segment the
    robot is currently on. It never decreases during a run, so the robot
    cannot be captured by an earlier part of a self-crossing path.
    """

    def __init__(
        self,
        pursuit_dist: float = PURSUIT_DIST,
        min_turn_radius: float = MIN_TURN_RADIUS,
        skip_dist: float = SKIP_DIST,
    ):
        """Initialize the pure pursuit controller.

        Args:
            pursuit_dist: Lookahead arc length (inches). Default: PURSUIT_DIST.
            min_turn_radius: Smallest turn radius the robot can drive (inches).
                Curvature is clamped to 1/min_turn_radius. Default: MIN_TURN_RADIUS.
            skip_dist: Corner skip-ahead threshold (inches), must be smaller
                than pursuit_dist. Default: SKIP_DIST.

        Raises:
            ValueError: If the distances are not positive or skip_dist >= pursuit_dist.
        """
        if pursuit_dist <= 0:
            raise ValueError(f"pursuit_dist must be positive, got {pursuit_dist}")
        if min_turn_radius <= 0:
            raise ValueError(f"min_turn_radius must be positive, got {min_turn_radius}")
        if not 0 <= skip_dist < pursuit_dist:
            raise ValueError(
                f"skip_dist must be in [0, pursuit_dist={pursuit_dist}), got {skip_dist}"
            )

        self.pursuit_dist = pursuit_dist
        self.min_turn_radius = min_turn_radius
        self.skip_dist = skip_dist

        self.segments: List[Segment] = []
        self.segment_index: int = 0
        self.state: FollowerState = FollowerState.IDLE
        self.skip_count: int = 0  # Corner skip-aheads in the current run

    @property
    def max_curvature(self) -> float:
        return 1.0 / self.min_turn_radius

    @property
    def is_complete(self) -> bool:
        return self.state is FollowerState.DONE

    def start(self, segments: Sequence[Segment], initial_pose: Optional[RobotPose] = None) -> None:
        """Begin tracking a new path.

        Args:
            segments: Path segments from build_segments(). Not modified.
            initial_pose: Pose at the start of the run (logged only; the pose
                is owned by the caller).

        Raises:
            EmptyPathError: If there are no segments. The follower is left unchanged.
        """
        if not segments:
            raise EmptyPathError("Cannot start a run on a path with fewer than two waypoints")

        self.segments = list(segments)
        self.segment_index = 0
        self.skip_count = 0
        self.state = FollowerState.TRACKING

        if initial_pose is not None:
            logging.debug(
                f"Pure pursuit started: {len(self.segments)} segments, "
                f"pose=({initial_pose.x:.1f}, {initial_pose.y:.1f}, {initial_pose.heading:.3f})"
            )

    def reset(self) -> None:
        """Drop the current path and return to IDLE."""
        self.segments = []
        self.segment_index = 0
        self.skip_count = 0
        self.state = FollowerState.IDLE

    def find_closest_point(self, x: float, y: float) -> Optional[Tuple[float, Tuple[float, float]]]:
        """Project the robot onto the path, advancing past segments it has cleared.

        Starting at the current segment, a segment whose normalized projection
        is below 1.0 holds the closest point. Projections before the segment
        start are clamped to it.

        Args:
            x: Robot x position
            y: Robot y position

        Returns:
            Tuple of (distance along current segment, closest point), or None
            if the robot is past the end of every remaining segment.
        """
        while self.segment_index < len(self.segments):
            seg = self.segments[self.segment_index]
            fraction = seg.project(x, y)
            if fraction < 1.0:
                along = max(fraction, 0.0) * seg.length
                return along, seg.point_at(along)
            self.segment_index += 1
        return None

    def find_lookahead_point(self, along: float) -> Tuple[int, Tuple[float, float]]:
        """Find the point pursuit_dist of arc length past the closest point.

        Args:
            along: Distance of the closest point from the start of the current segment.

        Returns:
            Tuple of (segment index, target point). Capped at the final waypoint.
        """
        # Arc length from the closest point to the start of segment i
        travelled = -along
        for i in range(self.segment_index, len(self.segments)):
            seg = self.segments[i]
            if travelled + seg.length > self.pursuit_dist:
                return i, seg.point_at(self.pursuit_dist - travelled)
            travelled += seg.length

        last = len(self.segments) - 1
        return last, self.segments[last].end

    def compute_curvature(
        self, pose: RobotPose, target: Tuple[float, float]
    ) -> Tuple[float, float, bool]:
        """Curvature of the arc tangent to the robot heading through the target.

        kappa = 2 * sin(alpha) / L, where L is the distance to the target and
        alpha its bearing relative to the heading. Targets behind the robot
        (|alpha| > pi/2) and arcs tighter than the minimum turn radius are
        clamped to +/- 1/min_turn_radius.

        Returns:
            Tuple of (curvature, alpha, clamped)
        """
        dx = target[0] - pose.x
        dy = target[1] - pose.y
        distance = math.hypot(dx, dy)
        if distance == 0.0:
            return 0.0, 0.0, False

        alpha = normalize_angle(math.atan2(dy, dx) - pose.heading)
        curvature = 2.0 * math.sin(alpha) / distance

        if abs(alpha) > math.pi / 2.0 or abs(curvature) > self.max_curvature:
            return float(np.sign(curvature)) * self.max_curvature, alpha, True
        return curvature, alpha, False

    def step(self, pose: RobotPose) -> StepResult:
        """Compute the steering command for the current pose.

        Args:
            pose: Current robot pose

        Returns:
            PursuitResult while tracking, PathComplete once the robot has passed
            the end of the path (and on every call after that).

        Raises:
            RuntimeError: If no run has been started.
        """
        if self.state is FollowerState.IDLE:
            raise RuntimeError("start() must be called before step()")
        if self.state is FollowerState.DONE:
            return PathComplete(segment_index=self.segment_index)

        while True:
            closest = self.find_closest_point(pose.x, pose.y)
            if closest is None:
                self.state = FollowerState.DONE
                logging.debug(f"End of path reached after {self.skip_count} corner skip(s)")
                return PathComplete(segment_index=self.segment_index)

            along, closest_point = closest
            target_index, target = self.find_lookahead_point(along)
            distance = math.hypot(target[0] - pose.x, target[1] - pose.y)

            # Tight corner: the target folded back close to the robot
            if distance < self.skip_dist and target_index != self.segment_index:
                logging.debug(
                    f"Corner skip: segment {self.segment_index} -> {target_index} "
                    f"(target {distance:.1f} away)"
                )
                self.segment_index = target_index
                self.skip_count += 1
                continue
            break

        curvature, alpha, clamped = self.compute_curvature(pose, target)
        return PursuitResult(
            closest_point=closest_point,
            target=target,
            curvature=curvature,
            clamped=clamped,
            segment_index=self.segment_index,
            target_segment_index=target_index,
            distance=distance,
            alpha=alpha,
        )

    def get_diagnostics(self) -> Dict[str, Union[float, int, str]]:
        """Get controller diagnostics for logging.

        Returns:
            Dictionary with current progress and configuration
        """
        return {
            "segment_index": self.segment_index,
            "num_segments": len(self.segments),
            "state": self.state.value,
            "skip_count": self.skip_count,
            "pursuit_dist": self.pursuit_dist,
            "min_turn_radius": self.min_turn_radius,
            "skip_dist": self.skip_dist,
        }
