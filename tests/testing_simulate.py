"""Tests for the simulation driver."""

import logging

import numpy as np
import pytest

from fixedstep.dynamics import energy
from fixedstep.fixed_step import Kind
from fixedstep.problems import OrbitDefinition, load_orbit
from fixedstep.simulate import SimulationConfig, simulate_fixed_step, simulate_orbit


def _oscillator_energy(q, v):
    return 0.5 * float(np.sum(q * q) + np.sum(v * v))


class TestSimulateFixedStep:

    def test_records_initial_and_published_states(self, oscillator_problem):
        result = simulate_fixed_step(oscillator_problem, 1.05, integrator="yoshida_1990_order_4", step=0.1)
        assert result.nsteps == 10
        assert result.t.shape == (11,)
        assert result.positions.shape == (11, 1, 1)
        assert result.velocities.shape == (11, 1, 1)
        assert result.t[0] == 0.0
        assert result.positions[0, 0, 0] == 1.0
        np.testing.assert_allclose(result.positions[:, 0, 0], np.cos(result.t), atol=1e-3)

    def test_multistep_records_positions_only(self, oscillator_problem):
        result = simulate_fixed_step(
            oscillator_problem, 1.005, integrator=Kind.QUINLAN_TREMAINE_1990_ORDER_8, step=0.01)
        # The startup steps are not published.
        assert result.nsteps == 100 - 7
        assert result.velocities is None
        assert result.energy is None
        np.testing.assert_allclose(result.positions[:, 0, 0], np.cos(result.t), atol=1e-10)

    def test_energy_needs_velocities(self, oscillator_problem, caplog):
        with caplog.at_level(logging.WARNING, logger="fixedstep.simulate"):
            result = simulate_fixed_step(
                oscillator_problem, 0.5, step=0.01, energy_fn=_oscillator_energy)
        assert result.energy is None
        assert result.energy_drift is None
        assert "does not compute velocities" in caplog.text

    def test_energy_drift(self, oscillator_problem):
        result = simulate_fixed_step(
            oscillator_problem, 10.0, integrator="yoshida_1990_order_6", step=0.02, energy_fn=_oscillator_energy)
        assert result.energy[0] == 0.5
        assert result.energy_drift[0] == 0.0
        assert np.max(np.abs(result.energy_drift)) < 1e-8

    @pytest.mark.parametrize("integrator", ["quinlan_tremaine_1990_order_10", "yoshida_1990_order_4"])
    def test_chunks_match_single_run(self, integrator, circular_orbit_problem):
        whole = simulate_fixed_step(circular_orbit_problem, 2.0, integrator=integrator, step=0.01)
        chunked = simulate_fixed_step(circular_orbit_problem, 2.0, integrator=integrator, step=0.01, chunks=7)
        np.testing.assert_array_equal(whole.t, chunked.t)
        np.testing.assert_array_equal(whole.positions, chunked.positions)

    def test_rejects_bad_chunks(self, oscillator_problem):
        with pytest.raises(ValueError):
            simulate_fixed_step(oscillator_problem, 1.0, step=0.1, chunks=0)

    def test_rejects_too_many_steps(self, oscillator_problem):
        with pytest.raises(RuntimeError, match="max_steps"):
            simulate_fixed_step(oscillator_problem, 1.0, step=1e-3, max_steps=100)

    def test_rejects_unknown_integrator(self, oscillator_problem):
        with pytest.raises(ValueError):
            simulate_fixed_step(oscillator_problem, 1.0, integrator="euler", step=0.1)


class TestSimulateOrbit:

    def test_default_config(self):
        config = SimulationConfig()
        assert config.integrator == "quinlan_tremaine_1990_order_8"
        assert config.step == 1e-3

    def test_two_body_period(self):
        orbit = load_orbit("two_body_circular")
        config = SimulationConfig(integrator="yoshida_1990_order_6", step=1e-2)
        result = simulate_orbit(orbit, 1.0, config=config)

        assert orbit.period - 1e-2 < result.t[-1] <= orbit.period
        # Within one step of the initial configuration.
        np.testing.assert_allclose(result.positions[-1], orbit.positions, atol=1e-2)
        e0 = energy(orbit.positions, orbit.velocities, params=orbit.params)
        assert np.max(np.abs(result.energy_drift / e0)) < 1e-8

    def test_multistep_matches_one_step_reference(self):
        orbit = load_orbit("two_body_circular")
        multistep = simulate_orbit(orbit, 0.5, config=SimulationConfig(step=1e-2))
        reference = simulate_orbit(orbit, 0.5, config=SimulationConfig(integrator="yoshida_1990_order_8", step=1e-2))

        np.testing.assert_array_equal(multistep.t, reference.t[[0] + list(range(8, len(reference.t)))])
        np.testing.assert_allclose(multistep.positions[-1], reference.positions[-1], atol=1e-9)

    def test_requires_period(self):
        orbit = OrbitDefinition(
            name="open",
            masses=np.array([1.0, 1.0]),
            positions=np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]]),
            velocities=np.zeros((2, 3)),
            period=None,
        )
        with pytest.raises(ValueError, match="no period"):
            simulate_orbit(orbit)
