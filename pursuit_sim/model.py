"""
Unicycle kinematic model for the simulated robot.

This module advances the robot pose given a forward speed and a path
curvature (reciprocal of the turn radius) over an elapsed time step.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass
class RobotPose:
    """Robot pose in field coordinates."""

    x: float  # inches
    y: float  # inches
    heading: float  # radians, counter-clockwise from +x, not wrapped between ticks

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

    def copy(self) -> "RobotPose":
        return RobotPose(self.x, self.y, self.heading)


def integrate(pose: RobotPose, speed: float, curvature: float, dt: float) -> RobotPose:
    """
    Advance the pose by one time step.

    First-order unicycle update. The heading is updated first and the
    position then moves along the *updated* heading:
        d = speed * dt
        heading' = heading + d * curvature
        x' = x + d * cos(heading')
        y' = y + d * sin(heading')

    Args:
        pose: Current pose (not modified)
        speed: Forward speed (inches/second)
        curvature: Signed path curvature (1/inches), positive turns counter-clockwise
        dt: Elapsed time (seconds), non-negative

    Returns:
        RobotPose: New pose after dt

    Example:
        >>> integrate(RobotPose(0.0, 0.0, 0.0), 180.0, 0.0, 0.5)
        RobotPose(x=90.0, y=0.0, heading=0.0)
    """
    drive_dist = speed * dt
    heading = pose.heading + drive_dist * curvature
    return RobotPose(
        x=pose.x + drive_dist * math.cos(heading),
        y=pose.y + drive_dist * math.sin(heading),
        heading=heading,
    )


def turn_center(pose: RobotPose, curvature: float) -> Optional[Tuple[float, float]]:
    """
    Centre of the circle the robot drives around at the given curvature.

    Returns:
        (cx, cy), or None when the curvature is zero (straight line)
    """
    if curvature == 0.0:
        return None
    radius = 1.0 / curvature
    return (
        pose.x - radius * math.sin(pose.heading),
        pose.y + radius * math.cos(pose.heading),
    )
