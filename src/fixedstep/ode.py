"""Second-order ODE description and the state handed to integrators.

Equation convention:
    q'' = f(t, q)

`q` is a numpy array whose leading axis indexes the degrees of freedom, e.g.
shape (n_bodies, 3) for an N-body problem. The acceleration function must
return an array of the same shape and be a pure function of its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from .compensated import CompensatedValue

# Define type for acceleration function f(t, q) -> q''
AccelerationFunction = Callable[[float, np.ndarray], np.ndarray]


@dataclass(frozen=True)
class SecondOrderODE:
    """Caller-supplied equations of motion."""

    compute_acceleration: AccelerationFunction


@dataclass
class SystemState:
    """Time, positions and velocities, each with its compensation term.

    `velocities` is None when the integrator that produced the state does not
    compute them (the symmetric multistep family).
    """

    time: CompensatedValue
    positions: CompensatedValue
    velocities: Optional[CompensatedValue]

    @classmethod
    def from_arrays(cls, t: float, positions, velocities=None) -> "SystemState":
        positions = np.array(positions, dtype=float)
        if velocities is not None:
            velocities = np.array(velocities, dtype=float)
            velocities = CompensatedValue(velocities, np.zeros_like(velocities))
        return cls(
            time=CompensatedValue(float(t), 0.0),
            positions=CompensatedValue(positions, np.zeros_like(positions)),
            velocities=velocities,
        )

    @property
    def dimension(self) -> int:
        return int(np.shape(self.positions.value)[0])

    def copy(self) -> "SystemState":
        return SystemState(
            time=self.time.copy(),
            positions=self.positions.copy(),
            velocities=None if self.velocities is None else self.velocities.copy(),
        )


@dataclass(frozen=True)
class IntegrationProblem:
    """Initial value problem: equation plus initial state."""

    equation: SecondOrderODE
    initial_state: SystemState


# Publication callback, invoked once per new step with a state it may keep.
AppendState = Callable[[SystemState], None]
