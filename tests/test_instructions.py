"""
Unit tests for turn/drive instructions.

Tests joint angle wrapping and the command list derived from segments.
"""

import math

import pytest

from pursuit_sim.instructions import DRIVE, TURN, DriveCommand, drive_commands, format_commands, joint_angle
from pursuit_sim.path import Segment, Waypoint, build_segments


class TestInstructions:
    """Test suite for drive instructions"""

    def test_left_turn_path(self) -> None:
        segments = build_segments([(0, 0), (100, 0), (100, 100)])
        assert format_commands(segments) == ["DriveDist 100 in.", "TurnAngle 90°", "DriveDist 100 in."]

    def test_right_turn_is_negative(self) -> None:
        segments = build_segments([(0, 0), (100, 0), (100, -50)])
        commands = drive_commands(segments)

        assert commands[1] == DriveCommand(TURN, -90.0)
        assert str(commands[1]) == "TurnAngle -90°"
        assert str(commands[2]) == "DriveDist 50 in."

    def test_joint_angle_wraps_across_pi(self) -> None:
        """Test that headings of +170 and -170 degrees give a 20 degree turn"""
        a = math.radians(170.0)
        b = math.radians(-170.0)
        seg1 = Segment.between(Waypoint(0.0, 0.0), Waypoint(math.cos(a), math.sin(a)))
        seg2 = Segment.between(Waypoint(0.0, 0.0), Waypoint(math.cos(b), math.sin(b)))

        assert math.degrees(joint_angle(seg1, seg2)) == pytest.approx(20.0)
        assert math.degrees(joint_angle(seg2, seg1)) == pytest.approx(-20.0)

    def test_single_segment_has_no_turn(self) -> None:
        commands = drive_commands(build_segments([(0, 0), (3, 4)]))
        assert commands == [DriveCommand(DRIVE, 5.0)]

    def test_no_segments(self) -> None:
        assert format_commands([]) == []

    def test_drive_rounded_to_whole_inches(self) -> None:
        assert str(DriveCommand(DRIVE, 12.6)) == "DriveDist 13 in."
