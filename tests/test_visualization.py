"""
Unit tests for plotting and the command-line tools.

Figures are rendered with the non-interactive Agg backend and saved to a
temporary directory.
"""

import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pytest  # noqa: E402

from pursuit_sim.__main__ import main as sim_main  # noqa: E402
from pursuit_sim.model import RobotPose  # noqa: E402
from pursuit_sim.plot_results import find_latest_run, list_runs, log_runs, resolve_run  # noqa: E402
from pursuit_sim.plot_results import main as plot_main  # noqa: E402
from pursuit_sim.plot_styles import load_csv_to_dict  # noqa: E402
from pursuit_sim.simulation import SimulationResult, run_session  # noqa: E402
from pursuit_sim.visualization import (  # noqa: E402
    plot_curvature,
    plot_run_summary,
    plot_simulation,
    steering_arc,
)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def session(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Saved run of an L-shaped path"""
    monkeypatch.delenv("RUN_DIR", raising=False)
    return run_session([(0, 0), (100, 0), (100, 100)], output_dir=str(tmp_path))


class TestSteeringArc:
    """Test suite for the commanded arc geometry"""

    def test_straight_line_for_zero_curvature(self) -> None:
        x, y = steering_arc(RobotPose(0.0, 0.0, 0.0), (70.0, 0.0), 0.0)

        assert list(x) == [0.0, 70.0]
        assert list(y) == [0.0, 0.0]

    def test_quarter_circle_left(self) -> None:
        x, y = steering_arc(RobotPose(0.0, 0.0, 0.0), (50.0, 50.0), 1.0 / 50.0, num_points=20)

        assert len(x) == 20
        assert (x[0], y[0]) == pytest.approx((0.0, 0.0), abs=1e-9)
        assert (x[-1], y[-1]) == pytest.approx((50.0, 50.0))
        # Every sample lies on the turning circle around (0, 50)
        assert np.hypot(x, y - 50.0) == pytest.approx(np.full(20, 50.0))

    def test_right_turn_sweeps_clockwise(self) -> None:
        x, y = steering_arc(RobotPose(0.0, 0.0, 0.0), (50.0, -50.0), -1.0 / 50.0)

        assert (x[-1], y[-1]) == pytest.approx((50.0, -50.0))
        assert np.all(y <= 1e-9)


class TestPlots:
    """Test suite for figure generation"""

    def test_plot_simulation_saves_figure(self, session, tmp_path: Path) -> None:
        result, waypoints, _ = session
        save_path = tmp_path / "trajectory.png"

        fig = plot_simulation(result, waypoints, save_path=save_path)

        assert save_path.exists()
        assert len(fig.axes) == 1

    def test_plot_simulation_without_ticks(self) -> None:
        fig = plot_simulation(SimulationResult(), [(0, 0), (100, 0)])
        assert len(fig.axes) == 1

    def test_plot_curvature_marks_clamped(self, tmp_path: Path) -> None:
        profile = {
            "t": np.array([0.0, 0.1, 0.2]),
            "curvature": np.array([0.0, 0.02, 0.01]),
            "clamped": np.array([False, True, False]),
        }
        save_path = tmp_path / "curvature.png"

        fig = plot_curvature(profile, max_curvature=0.02, save_path=save_path)

        assert save_path.exists()
        labels = [line.get_label() for line in fig.axes[0].get_lines()]
        assert "Clamped" in labels

    def test_plot_run_summary_from_csv(self, session) -> None:
        _, _, run_dir = session
        plot_run_summary(run_dir, save_plots=True, show_plots=False)

        assert (run_dir / "trajectory.png").exists()
        assert (run_dir / "curvature.png").exists()

    def test_load_ticks_csv(self, session) -> None:
        result, _, run_dir = session
        ticks = load_csv_to_dict(run_dir / "ticks.csv")

        assert len(ticks["t"]) == result.ticks
        assert ticks["x"][0] == 0.0


class TestCommandLine:
    """Test suite for the simulation and plotting entry points"""

    def test_find_latest_run(self, tmp_path: Path) -> None:
        for name in ["run_20260101_120000", "run_20260102_090000", "notes"]:
            (tmp_path / name).mkdir()

        assert [d.name for d in list_runs(tmp_path)] == ["run_20260101_120000", "run_20260102_090000"]
        assert find_latest_run(tmp_path).name == "run_20260102_090000"

    def test_find_latest_run_empty(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            find_latest_run(tmp_path)

    def test_resolve_run_by_name_and_number(self, tmp_path: Path) -> None:
        for name in ["run_20260101_120000", "run_20260102_090000"]:
            (tmp_path / name).mkdir()

        assert resolve_run(tmp_path, None).name == "run_20260102_090000"
        assert resolve_run(tmp_path, "1").name == "run_20260101_120000"
        assert resolve_run(tmp_path, "run_20260102_090000").name == "run_20260102_090000"
        with pytest.raises(FileNotFoundError, match="out of range"):
            resolve_run(tmp_path, "3")

    def test_log_runs_reports_ticks(
        self, session, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        result, _, run_dir = session
        with caplog.at_level(logging.INFO):
            log_runs(tmp_path / "results")

        assert f"1. {run_dir.name}  ({result.ticks} ticks)" in caplog.text

    def test_plot_results_saves_latest(self, session, tmp_path: Path) -> None:
        _, _, run_dir = session
        plot_main(["--results-dir", str(tmp_path / "results"), "--save", "--no-show"])

        assert (run_dir / "trajectory.png").exists()

    def test_plot_results_unknown_run(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            plot_main(["--results-dir", str(tmp_path), "--run", "run_missing", "--no-show"])
        assert exc_info.value.code == 1

    def test_simulation_cli_demo(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            assert sim_main(["--no-save"]) == 0

        assert "Path complete" in caplog.text
        assert "DriveDist" in caplog.text

    def test_simulation_cli_saves_run(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("RUN_DIR", raising=False)
        csv_path = tmp_path / "sketch.csv"
        csv_path.write_text("x,y\n0,0\n100,0\n100,100\n")

        status = sim_main(["--waypoints", str(csv_path), "--output-dir", str(tmp_path)])

        assert status == 0
        assert len(list_runs(tmp_path / "results")) == 1

    def test_simulation_cli_ctrl_c_exits_cleanly(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that Ctrl-C during a run logs a message and exits with status 0"""

        def interrupted(*args, **kwargs):
            raise KeyboardInterrupt

        monkeypatch.setattr("pursuit_sim.__main__.run_session", interrupted)
        with caplog.at_level(logging.INFO):
            assert sim_main(["--no-save"]) == 0

        assert "Exiting..." in caplog.text

    def test_simulation_cli_missing_file(self, tmp_path: Path) -> None:
        assert sim_main(["--waypoints", str(tmp_path / "missing.csv"), "--no-save"]) == 1

    def test_simulation_cli_invalid_follower(self) -> None:
        assert sim_main(["--skip-dist", "80", "--no-save"]) == 1
