"""
Pytest configuration and shared fixtures.
"""

import numpy as np
import pytest

from fixedstep.dynamics import harmonic_acceleration, kepler_acceleration
from fixedstep.ode import IntegrationProblem, SecondOrderODE, SystemState


@pytest.fixture
def oscillator_problem():
    """Unit harmonic oscillator, q(0) = 1, v(0) = 0, exact q(t) = cos t."""
    return IntegrationProblem(
        equation=SecondOrderODE(harmonic_acceleration),
        initial_state=SystemState.from_arrays(0.0, [[1.0]], [[0.0]]),
    )


@pytest.fixture
def circular_orbit_problem():
    """Unit circular orbit around a unit mass, period 2 pi."""
    return IntegrationProblem(
        equation=SecondOrderODE(kepler_acceleration),
        initial_state=SystemState.from_arrays(0.0, [[1.0, 0.0]], [[0.0, 1.0]]),
    )


@pytest.fixture
def rng():
    """Reproducible random number generator."""
    return np.random.default_rng(seed=42)
