"""Contract shared by all fixed-step integrators.

An integrator is an immutable configuration. It creates mutable, resumable
instances with `new_instance` and advances them with `solve`:

    instance = integrator.new_instance(problem, append_state, step)
    integrator.solve(t1, instance)
    integrator.solve(t2, instance)  # continues where t1 left off

Each integrator family only accepts its own instance type; handing it another
family's instance raises TypeError.
"""

from __future__ import annotations

import enum
import math
from typing import Any, Protocol

from .compensated import CompensatedValue
from .ode import AppendState, IntegrationProblem, SystemState


class Kind(enum.Enum):
    """Tags of the integrators in the catalog."""

    # Symplectic Runge-Kutta-Nystrom (self-starting).
    VELOCITY_VERLET = "velocity_verlet"
    YOSHIDA_1990_ORDER_4 = "yoshida_1990_order_4"
    YOSHIDA_1990_ORDER_6 = "yoshida_1990_order_6"
    YOSHIDA_1990_ORDER_8 = "yoshida_1990_order_8"
    # Symmetric linear multistep.
    QUINLAN_1999_ORDER_8A = "quinlan_1999_order_8a"
    QUINLAN_1999_ORDER_8B = "quinlan_1999_order_8b"
    QUINLAN_TREMAINE_1990_ORDER_8 = "quinlan_tremaine_1990_order_8"
    QUINLAN_TREMAINE_1990_ORDER_10 = "quinlan_tremaine_1990_order_10"
    QUINLAN_TREMAINE_1990_ORDER_12 = "quinlan_tremaine_1990_order_12"
    QUINLAN_TREMAINE_1990_ORDER_14 = "quinlan_tremaine_1990_order_14"


class FixedStepSizeIntegrator(Protocol):
    """Interface implemented by every integrator family."""

    kind: Kind

    def new_instance(self, problem: IntegrationProblem, append_state: AppendState, step: float) -> Any:
        ...

    def solve(self, t_final: float, instance: Any) -> None:
        ...


def check_step(step: float) -> float:
    step = float(step)
    if not (math.isfinite(step) and step > 0.0):
        raise ValueError(f"step must be finite and positive, got {step}")
    return step


def check_dimensions(state: SystemState) -> None:
    """A problem must have one velocity per position."""
    if state.velocities is None:
        raise ValueError("initial state must have velocities")
    q_shape = state.positions.value.shape
    v_shape = state.velocities.value.shape
    if q_shape != v_shape:
        raise ValueError(f"positions and velocities differ in shape: {q_shape} != {v_shape}")
    if len(q_shape) == 0 or q_shape[0] == 0:
        raise ValueError("problem must have at least one degree of freedom")


def steps_remaining(step: float, t_final: float, time: CompensatedValue) -> bool:
    """Whether a full step still fits before t_final.

    Uses both terms of the compensated time so that the last step is neither
    dropped nor duplicated when t_final is a multiple of the step.
    """
    return step <= (t_final - time.value) - time.error
