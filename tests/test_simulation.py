"""
Unit tests for the simulation loop.

Tests fixed-step and wall-clock runs, termination, and full sessions from
a sketch to saved run data.
"""

import asyncio
import csv
import itertools
from pathlib import Path
from typing import Callable

import numpy as np
import pytest

from pursuit_sim.data_collector import DataCollector
from pursuit_sim.errors import EmptyPathError
from pursuit_sim.follower import PurePursuitFollower
from pursuit_sim.model import RobotPose
from pursuit_sim.path import Waypoint, build_segments, demo_waypoints
from pursuit_sim.simulation import SimulationLoop, run_session


def fake_clock(step: float) -> Callable[[], float]:
    """Clock that advances by step on every read"""
    counter = itertools.count()
    return lambda: next(counter) * step


class TestSimulationLoop:
    """Test suite for running the loop"""

    @pytest.fixture
    def straight_loop(self) -> SimulationLoop:
        """Loop over a 100 inch straight path at 180 in/s"""
        return SimulationLoop([(0, 0), (100, 0)], speed=180.0)

    def test_straight_run(self, straight_loop: SimulationLoop) -> None:
        """Test that a straight path is driven with zero curvature and stops past the end"""
        result = straight_loop.run(dt=1.0 / 60.0)
        trajectory = result.trajectory()

        assert result.completed
        assert np.all(trajectory["y"] == 0.0)
        assert all(r.curvature == 0.0 for r in result.results)
        assert result.clamped_ticks == 0
        # Stops within one tick (3 inches) past the end
        assert 100.0 <= result.final_pose.x < 103.0

    def test_default_pose_is_first_waypoint(self) -> None:
        loop = SimulationLoop([(10, 10), (10, 110)])
        pose = loop.default_pose()

        assert (pose.x, pose.y) == (10.0, 10.0)
        assert pose.heading == pytest.approx(np.pi / 2)

    def test_history_lengths(self, straight_loop: SimulationLoop) -> None:
        result = straight_loop.run(dt=1.0 / 60.0)

        assert len(result.poses) == result.ticks + 1
        assert len(result.times) == result.ticks + 1
        assert result.elapsed == pytest.approx(result.ticks / 60.0)
        assert len(result.curvature_profile()["t"]) == result.ticks

    def test_variable_time_step(self, straight_loop: SimulationLoop) -> None:
        """Test that irregular tick intervals integrate to the same distance"""
        straight_loop.start()
        for dt in itertools.cycle([1.0 / 30.0, 1.0 / 120.0, 0.0]):
            if straight_loop.tick(dt).complete:
                break

        result = straight_loop.result()
        assert result.completed
        assert all(p.y == 0.0 for p in result.poses)
        assert result.final_pose.x == pytest.approx(180.0 * result.elapsed)
        assert 100.0 <= result.final_pose.x < 106.0

    def test_complete_is_idempotent(self, straight_loop: SimulationLoop) -> None:
        result = straight_loop.run()
        final = straight_loop.pose

        assert straight_loop.tick(1.0 / 60.0).complete
        assert straight_loop.pose == final
        assert straight_loop.result().ticks == result.ticks

    def test_max_ticks_stops_run(
        self, straight_loop: SimulationLoop, caplog: pytest.LogCaptureFixture
    ) -> None:
        result = straight_loop.run(dt=1.0 / 60.0, max_ticks=5)

        assert not result.completed
        assert result.ticks == 5
        assert "without reaching the end" in caplog.text

    def test_custom_initial_pose(self, straight_loop: SimulationLoop) -> None:
        result = straight_loop.run(initial_pose=RobotPose(0.0, -20.0, 0.0))

        assert result.completed
        assert result.results[0].curvature > 0
        assert abs(result.final_pose.y) < 10.0

    def test_negative_dt_raises(self, straight_loop: SimulationLoop) -> None:
        straight_loop.start()
        with pytest.raises(ValueError, match="non-negative"):
            straight_loop.tick(-0.01)

    def test_tick_before_start_raises(self, straight_loop: SimulationLoop) -> None:
        with pytest.raises(RuntimeError, match="start"):
            straight_loop.tick(0.01)

    @pytest.mark.parametrize("path", [[], [(5.0, 5.0)]])
    def test_empty_path_raises(self, path: list) -> None:
        loop = SimulationLoop(path)
        with pytest.raises(EmptyPathError):
            loop.run()

    def test_accepts_segments(self) -> None:
        segments = build_segments([(0, 0), (100, 0), (100, 100)])
        loop = SimulationLoop(segments)

        assert loop.segments == segments
        assert loop.waypoints == [Waypoint(0.0, 0.0), Waypoint(100.0, 0.0), Waypoint(100.0, 100.0)]

    def test_demo_path_completes(self) -> None:
        result, waypoints, run_dir = run_session(demo_waypoints(), output_dir=None)

        assert result.completed
        assert run_dir is None
        assert 2 < len(waypoints) < 200
        last = waypoints[-1]
        assert np.hypot(result.final_pose.x - last.x, result.final_pose.y - last.y) < 15.0

    def test_custom_follower(self) -> None:
        follower = PurePursuitFollower(pursuit_dist=30.0, min_turn_radius=20.0, skip_dist=10.0)
        result = SimulationLoop([(0, 0), (100, 0), (100, 100)], follower=follower).run()

        assert result.completed
        assert follower.is_complete


class TestRealtimeLoop:
    """Test suite for the asyncio wall-clock loop"""

    def test_runs_to_completion(self) -> None:
        loop = SimulationLoop([(0, 0), (100, 0)])
        result = asyncio.run(loop.run_realtime(tick_interval=0.0, time_source=fake_clock(1.0 / 60.0)))

        assert result.completed
        assert all(p.y == 0.0 for p in result.poses)
        assert 100.0 <= result.final_pose.x < 103.0 + 1e-9

    def test_stop_ends_run(self) -> None:
        loop = SimulationLoop([(0, 0), (100, 0)])
        reads = itertools.count(1)

        def clock() -> float:
            n = next(reads)
            if n > 3:
                loop.stop()
            return n / 60.0

        result = asyncio.run(loop.run_realtime(tick_interval=0.0, time_source=clock))

        assert not result.completed
        assert result.ticks == 3


class TestRunSession:
    """Test suite for full sessions with saved run data"""

    def test_writes_run_files(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("RUN_DIR", raising=False)
        raw = [(0, 0), (50, 0.5), (100, 0), (100, 100)]
        result, waypoints, run_dir = run_session(raw, tolerance=1.0, output_dir=str(tmp_path))

        assert result.completed
        assert waypoints == [Waypoint(0.0, 0.0), Waypoint(100.0, 0.0), Waypoint(100.0, 100.0)]
        assert run_dir is not None
        assert run_dir.parent == tmp_path / "results"

        with open(run_dir / "ticks.csv", newline="") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == result.ticks
        assert float(rows[0]["x"]) == 0.0

        commands = (run_dir / "commands.txt").read_text(encoding="utf-8").splitlines()
        assert commands == ["DriveDist 100 in.", "TurnAngle 90°", "DriveDist 100 in."]

        with open(run_dir / "waypoints.csv", newline="") as f:
            assert len(list(csv.DictReader(f))) == 3

    def test_no_simplify_keeps_all_waypoints(self) -> None:
        raw = [(0, 0), (50, 0.5), (100, 0)]
        _, waypoints, _ = run_session(raw, tolerance=None, output_dir=None)
        assert len(waypoints) == 3

    def test_coincident_waypoints_skipped(self) -> None:
        result, _, _ = run_session([(0, 0), (0, 0), (100, 0)], tolerance=None, output_dir=None)
        assert result.completed

    def test_context_manager_logs_to_collector(self, tmp_path: Path) -> None:
        collector = DataCollector(run_dir=str(tmp_path / "run"))
        with SimulationLoop([(0, 0), (100, 0)], data_collector=collector) as loop:
            result = loop.run()

        assert collector.tick_count == result.ticks
        assert collector.ticks_csv_file is None
