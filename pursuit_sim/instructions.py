"""Drive/turn instructions derived from path segments.

A sketched path becomes a list of commands a simple robot can execute
without pure pursuit: drive the first segment, turn by the joint angle,
drive the next segment, and so on.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence

from .path import Segment

TURN = "TurnAngle"
DRIVE = "DriveDist"


@dataclass(frozen=True)
class DriveCommand:
    """One instruction: a turn in degrees (positive = counter-clockwise) or a drive in inches."""

    kind: str
    value: float

    def __str__(self) -> str:
        if self.kind == TURN:
            return f"{TURN} {self.value:.0f}°"
        return f"{DRIVE} {self.value:.0f} in."


def joint_angle(seg1: Segment, seg2: Segment) -> float:
    """Signed heading change from seg1 to seg2, wrapped to [-pi, pi] (radians)."""
    angle = seg2.angle - seg1.angle
    if angle > math.pi:
        angle -= 2.0 * math.pi
    if angle < -math.pi:
        angle += 2.0 * math.pi
    return angle


def drive_commands(segments: Sequence[Segment]) -> List[DriveCommand]:
    """Convert segments to alternating turn and drive commands.

    Every segment yields a drive command; every segment after the first is
    preceded by the turn from the previous segment's heading.
    """
    commands: List[DriveCommand] = []
    for i, seg in enumerate(segments):
        if i != 0:
            commands.append(DriveCommand(TURN, math.degrees(joint_angle(segments[i - 1], seg))))
        commands.append(DriveCommand(DRIVE, seg.length))
    return commands


def format_commands(segments: Sequence[Segment]) -> List[str]:
    return [str(command) for command in drive_commands(segments)]
