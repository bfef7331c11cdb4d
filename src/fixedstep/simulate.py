"""Simulation driver for second-order IVPs with fixed-step integrators.

The driver knows nothing about the physics: the caller hands it an
IntegrationProblem, a catalog kind and a step, and it records the initial
state plus every state the integrator publishes, with energy diagnostics
when velocities are available.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from .fixed_step import Kind
from .integrators import integrator_for
from .ode import IntegrationProblem, SystemState

logger = logging.getLogger(__name__)

EnergyFn = Callable[[np.ndarray, np.ndarray], float]


@dataclass(frozen=True)
class SimulationConfig:
    """Configuration of a fixed-step run."""

    integrator: str = Kind.QUINLAN_TREMAINE_1990_ORDER_8.value
    step: float = 1e-3

    # Hard limit on the number of steps a single run may take.
    max_steps: int = 10_000_000


@dataclass(frozen=True)
class SimulationResult:
    t: np.ndarray
    positions: np.ndarray
    velocities: Optional[np.ndarray]
    nsteps: int
    energy: Optional[np.ndarray]
    energy_drift: Optional[np.ndarray]


def simulate_fixed_step(
    problem: IntegrationProblem,
    t_final: float,
    *,
    integrator: Kind | str = Kind.QUINLAN_TREMAINE_1990_ORDER_8,
    step: float,
    energy_fn: EnergyFn | None = None,
    chunks: int = 1,
    max_steps: int = 10_000_000,
) -> SimulationResult:
    """Integrate q'' = f(t, q) from the problem's initial time to t_final.

    Args:
        problem: Equation and initial state.
        t_final: End time; the last recorded state is within one step of it.
        integrator: Catalog kind.
        step: Fixed step size.
        energy_fn: Optional energy function E(q, v) for diagnostics, only
            evaluated when the integrator publishes velocities.
        chunks: Number of successive `solve` calls the run is split into.
        max_steps: Hard limit on recorded steps.

    Returns:
        SimulationResult with the recorded trajectory, initial state first.
    """
    if chunks < 1:
        raise ValueError("chunks must be at least 1")

    fixed_step_integrator = integrator_for(integrator)
    t0 = float(problem.initial_state.time.value)
    expected_steps = (float(t_final) - t0) / float(step)
    if expected_steps > max_steps:
        raise RuntimeError(f"Run needs about {expected_steps:.0f} steps, exceeds max_steps={max_steps}")

    states: List[SystemState] = [problem.initial_state.copy()]
    instance = fixed_step_integrator.new_instance(problem, states.append, step)

    logger.info("Integrating with %s, h=%g, t0=%g, t_final=%g",
                fixed_step_integrator.kind.value, step, t0, t_final)
    for t_chunk in np.linspace(t0, float(t_final), chunks + 1)[1:]:
        fixed_step_integrator.solve(float(t_chunk), instance)
    logger.info("Recorded %d states, last t=%r", len(states), states[-1].time.value)

    t_arr = np.array([s.time.value for s in states], dtype=float)
    q_arr = np.stack([np.asarray(s.positions.value, dtype=float) for s in states])

    v_arr = None
    if all(s.velocities is not None for s in states):
        v_arr = np.stack([np.asarray(s.velocities.value, dtype=float) for s in states])

    energy_arr = None
    drift_arr = None
    if energy_fn is not None:
        if v_arr is None:
            logger.warning("%s does not compute velocities; energy not recorded", fixed_step_integrator.kind.value)
        else:
            energy_arr = np.array([float(energy_fn(q, v)) for q, v in zip(q_arr, v_arr)], dtype=float)
            drift_arr = energy_arr - float(energy_arr[0])

    return SimulationResult(
        t=t_arr,
        positions=q_arr,
        velocities=v_arr,
        nsteps=len(states) - 1,
        energy=energy_arr,
        energy_drift=drift_arr,
    )


def simulate_orbit(
    orbit,
    periods: float = 1.0,
    *,
    config: SimulationConfig = SimulationConfig(),
) -> SimulationResult:
    """Convenience wrapper to simulate an `OrbitDefinition` for a number of periods.

    Entry point for scripts, which never touch the integrators directly.
    """
    # Local import keeps the driver physics-agnostic.
    from .dynamics import energy as _energy

    if orbit.period is None:
        raise ValueError(f"Orbit '{orbit.name}' has no period")

    params = orbit.params

    def E(q: np.ndarray, v: np.ndarray) -> float:
        return float(_energy(q, v, params=params))

    return simulate_fixed_step(
        orbit.to_integration_problem(),
        float(orbit.period) * float(periods),
        integrator=config.integrator,
        step=float(config.step),
        energy_fn=E,
        max_steps=int(config.max_steps),
    )
