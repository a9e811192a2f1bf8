"""Pursuit Sim - Pure Pursuit Path Following for Sketched Paths

Drives a simulated point robot along an operator-sketched path using the
pure pursuit path tracking algorithm.

## Architecture Overview

A sketch flows through a short pipeline, then the simulation loop repeats
one controller step and one integration step per tick:

### Stage 1: Simplification (path.py)
Reduces a dense sketch to a sparse polyline with Ramer-Douglas-Peucker.
- First and last points always kept
- Output is a subsequence of the input

### Stage 2: Segment Building (path.py)
Turns consecutive waypoint pairs into segments with precomputed direction,
length and heading. Coincident waypoints are rejected or skipped.

### Stage 3: Pure Pursuit (follower.py)
Projects the robot onto the path, walks PURSUIT_DIST of arc length ahead to
find the target, skips ahead at tight corners and computes the signed
curvature of the arc to the target.
- Progress along the path never moves backwards
- Curvature clamped to 1/MIN_TURN_RADIUS (reported, never fatal)
- Terminal PathComplete result once the robot passes the end

### Stage 4: Kinematics (model.py)
Unicycle model: heading is advanced first, then position along the new heading.

## Modules

- `config.py` - Centralized configuration parameters with documentation
- `errors.py` - Path input errors
- `path.py` - Waypoints, simplification and segments
- `follower.py` - Pure Pursuit controller
- `model.py` - Unicycle kinematics
- `simulation.py` - Simulation loop (virtual clock and asyncio wall clock)
- `instructions.py` - Turn/drive instructions for a path
- `data_collector.py` - CSV data logging for runs
- `plot_styles.py`, `visualization.py`, `plot_results.py` - Plotting

## Quick Start

```python
from pursuit_sim import SimulationLoop, demo_waypoints, simplify

waypoints = simplify(demo_waypoints(), tolerance=10.0, high_quality=True)
result = SimulationLoop(waypoints).run()
print(result.completed, result.ticks)
```

Or use the command-line interface:
```bash
python -m pursuit_sim --plot
```
"""

__version__ = "0.1.0"

from .data_collector import DataCollector
from .errors import DegenerateSegmentError, EmptyPathError, PathError
from .follower import FollowerState, PathComplete, PurePursuitFollower, PursuitResult
from .instructions import DriveCommand, drive_commands, format_commands
from .model import RobotPose, integrate
from .path import Segment, Waypoint, build_segments, demo_waypoints, load_waypoints, simplify
from .simulation import SimulationLoop, SimulationResult, run_session

__all__ = [
    "DataCollector",
    "DegenerateSegmentError",
    "DriveCommand",
    "EmptyPathError",
    "FollowerState",
    "PathComplete",
    "PathError",
    "PurePursuitFollower",
    "PursuitResult",
    "RobotPose",
    "Segment",
    "SimulationLoop",
    "SimulationResult",
    "Waypoint",
    "build_segments",
    "demo_waypoints",
    "drive_commands",
    "format_commands",
    "integrate",
    "load_waypoints",
    "run_session",
    "simplify",
]
