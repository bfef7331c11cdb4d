"""Smoke tests for the plotting helpers (headless backend)."""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from fixedstep.problems import load_orbit
from fixedstep.simulate import SimulationConfig, simulate_orbit
from fixedstep.visualize import PlotConfig, _extract_xy, plot_energy, plot_trajectories


@pytest.fixture(scope="module")
def figure_eight_result():
    orbit = load_orbit("figure_eight")
    return simulate_orbit(orbit, 0.1, config=SimulationConfig(integrator="yoshida_1990_order_4", step=1e-2))


@pytest.fixture(scope="module")
def multistep_result():
    orbit = load_orbit("figure_eight")
    return simulate_orbit(orbit, 0.1, config=SimulationConfig(step=1e-2))


def test_extract_xy():
    positions = np.arange(24, dtype=float).reshape(2, 4, 3)
    x, y = _extract_xy(positions)
    assert x.shape == (2, 4)
    np.testing.assert_array_equal(x[1], [12.0, 15.0, 18.0, 21.0])
    np.testing.assert_array_equal(y[0], [1.0, 4.0, 7.0, 10.0])


def test_extract_xy_rejects_flat_positions():
    with pytest.raises(ValueError):
        _extract_xy(np.zeros((5, 3)))
    with pytest.raises(ValueError):
        _extract_xy(np.zeros((5, 3, 1)))


def test_plot_trajectories_saves(figure_eight_result, tmp_path):
    out = tmp_path / "plots" / "figure_eight.png"
    fig = plot_trajectories(figure_eight_result, out_path=out, config=PlotConfig(dpi=50))
    try:
        assert out.is_file()
        assert len(fig.axes[0].lines) == 2 * 3
    finally:
        plt.close(fig)


def test_plot_trajectories_without_velocities(multistep_result):
    assert multistep_result.velocities is None
    fig = plot_trajectories(multistep_result)
    plt.close(fig)


def test_plot_energy(figure_eight_result, tmp_path):
    out = tmp_path / "energy.png"
    fig = plot_energy(figure_eight_result, out_path=out, config=PlotConfig(dpi=50))
    try:
        assert out.is_file()
    finally:
        plt.close(fig)


def test_plot_energy_requires_diagnostics(multistep_result):
    with pytest.raises(ValueError):
        plot_energy(multistep_result)
