"""Tests of the run_orbit command line glue."""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "scripts"))

import run_orbit  # noqa: E402


def test_main_saves_trajectory(tmp_path):
    out = tmp_path / "out" / "binary.npz"
    code = run_orbit.main([
        "two_body_circular",
        "--periods", "0.25",
        "--integrator", "yoshida_1990_order_4",
        "--step", "0.01",
        "--save", str(out),
        "--log-level", "warning",
    ])
    assert code == 0
    with np.load(out) as data:
        assert data["positions"].shape[1:] == (2, 3)
        assert data["velocities"].shape == data["positions"].shape
        assert data["energy"].shape == data["t"].shape
        assert int(data["nsteps"]) == data["t"].shape[0] - 1


def test_run_multistep_with_plot(tmp_path):
    plot = tmp_path / "binary.png"
    result = run_orbit.run("two_body_circular", 0.25, "quinlan_tremaine_1990_order_12", 0.01, plot=str(plot))
    assert plot.is_file()
    assert result.velocities is None


def test_rejects_unknown_integrator():
    with pytest.raises(SystemExit):
        run_orbit.main(["two_body_circular", "--integrator", "leapfrog"])


def test_rejects_unknown_orbit():
    with pytest.raises(FileNotFoundError):
        run_orbit.run("no_such_orbit", 1.0, "velocity_verlet", 0.01)
