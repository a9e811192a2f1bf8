"""Configuration parameters for the pure pursuit simulator.

This module centralizes all configuration parameters including:
- Pure pursuit controller tuning
- Robot motion parameters
- Path simplification settings
- Simulation clock settings
- Visualization settings

All distances are field units (inches) and all times are seconds.
"""

# ============================================================================
# Field Geometry
# ============================================================================

FIELD_WIDTH = 652.0
"""Width of the field (inches). Used by the demo path and plot limits."""

FIELD_HEIGHT = 324.0
"""Height of the field (inches). Used by the demo path and plot limits."""


# ============================================================================
# Pure Pursuit Parameters
# ============================================================================

PURSUIT_DIST = 70.0
"""Lookahead distance along the path (inches).

The pursuit target is the point this far ahead of the robot's projection
onto the path, measured along the polyline (arc length, not chord).

Tuning rationale:
- Roughly 4x the robot's footprint gives smooth tracking of sketched paths
- Too small = oscillation around the path
- Too large = cuts corners on tight sketches
"""

MIN_TURN_RADIUS = 50.0
"""Minimum turn radius the robot can follow (inches).

Commanded curvature is clamped to 1/MIN_TURN_RADIUS. Ticks where the clamp
fires are reported so the operator can see where the sketch asks for more
than the robot can do.
"""

SKIP_DIST = 40.0
"""Corner skip-ahead threshold (inches). Must be less than PURSUIT_DIST.

When the straight-line distance from the robot to the pursuit target falls
below this value and the target already sits on a later segment, the
controller advances its segment index to the target's segment. Sharp corners
fold the lookahead back toward the robot; without the skip the robot keeps
aiming at a point next to itself and never rounds the corner.
"""


# ============================================================================
# Robot Motion Parameters
# ============================================================================

ROBOT_SPEED = 180.0
"""Constant forward speed of the simulated robot (inches/second)."""


# ============================================================================
# Path Simplification
# ============================================================================

SIMPLIFY_TOLERANCE = 10.0
"""Douglas-Peucker tolerance applied after each sketch stroke (inches).

Points deviating less than this from the simplified chord are dropped.
"""

SIMPLIFY_HIGH_QUALITY = True
"""Skip the radial-distance pre-pass and run Douglas-Peucker on every point."""

DEGENERATE_LENGTH = 1e-9
"""Segments at or below this length are treated as degenerate (inches)."""


# ============================================================================
# Simulation Clock
# ============================================================================

SIM_DT = 1.0 / 60.0
"""Virtual clock time step (seconds). Matches a 60 Hz display refresh."""

SIM_MAX_TICKS = 10000
"""Safety cap on virtual clock ticks.

A robot that cannot meet the path (e.g. a path demanding turns tighter than
MIN_TURN_RADIUS) can circle forever; the cap ends such runs.
"""

SIM_TICK_INTERVAL = 1.0 / 60.0
"""Period of the wall-clock tick source used by the real-time loop (seconds)."""


# ============================================================================
# Visualization Colors
# ============================================================================

FIELD_COLOR = "#dddddd"
"""Field background."""

PATH_COLOR = "#000099"
"""Sketched path polyline."""

WAYPOINT_COLOR = "#0000ff"
"""Waypoint markers."""

TRAIL_COLOR = "gray"
"""Trail left behind by the robot."""

TARGET_COLOR = "green"
"""Pursuit (lookahead) target marker."""

CLOSEST_COLOR = "orange"
"""Closest point on path marker."""

ROBOT_COLOR = "#333333"
"""Robot body marker."""

ARC_COLOR = "black"
"""Commanded steering arc."""

CLAMPED_COLOR = "red"
"""Steering arc and curvature samples where the turn radius clamp fired."""

# Terminal color codes (ANSI escape sequences)
TERM_BLUE = "\033[38;2;35;116;247m"
"""Terminal color code for blue (RGB: 35, 116, 247)."""

TERM_RESET = "\033[0m"
"""Terminal color reset code."""
