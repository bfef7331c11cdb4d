"""Symplectic Runge-Kutta-Nystrom integrators for q'' = f(t, q).

These one-step methods are self-starting, which is what the symmetric
multistep integrators need to fill their history before they can run. The
tableaus are splitting methods in drift/kick form,

    drift a_0, kick b_0, drift a_1, kick b_1, ..., kick b_{s-1}, drift a_s

and are evaluated in the equivalent Nystrom form

    Q_i     = q + c_i h v + h^2 sum_{j<i} b_j (c_i - c_j) g_j,   g_i = f(t + c_i h, Q_i)
    q_{n+1} = q + h v + h^2 sum_j b_j (1 - c_j) g_j
    v_{n+1} = v + h sum_j b_j g_j

with c_i = a_0 + ... + a_i. In this form a zero force field moves the position
by exactly h * v per step.

Higher orders come from Yoshida's triple-jump composition of the leapfrog
(H. Yoshida, "Construction of higher order symplectic integrators",
Phys. Lett. A 150 (1990) 262-268).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .fixed_step import Kind, check_dimensions, check_step, steps_remaining
from .ode import AccelerationFunction, AppendState, IntegrationProblem, SecondOrderODE, SystemState

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class SymplecticRKNTableau:
    """Drift/kick coefficients of a symplectic splitting method.

    Attributes:
        a: Drift coefficients, shape [s + 1].
        b: Kick coefficients, shape [s].
        order: Order of the method.
    """

    a: np.ndarray  # [s + 1,]
    b: np.ndarray  # [s,]
    order: int

    def __post_init__(self) -> None:
        a = np.array(self.a, dtype=float)
        b = np.array(self.b, dtype=float)
        if a.ndim != 1 or b.ndim != 1 or a.shape[0] != b.shape[0] + 1:
            raise ValueError(f"Expected a.shape == (s + 1,) and b.shape == (s,), got {a.shape} and {b.shape}")
        if not np.isclose(a.sum(), 1.0, rtol=0.0, atol=1e-12):
            raise ValueError(f"Drift coefficients must sum to 1, got {a.sum()!r}")
        if not np.isclose(b.sum(), 1.0, rtol=0.0, atol=1e-12):
            raise ValueError(f"Kick coefficients must sum to 1, got {b.sum()!r}")
        a.setflags(write=False)
        b.setflags(write=False)
        object.__setattr__(self, "a", a)
        object.__setattr__(self, "b", b)

    @property
    def n_stages(self) -> int:
        return int(self.b.shape[0])

    @property
    def c(self) -> np.ndarray:
        """Stage times as fractions of the step."""
        return np.cumsum(self.a)[:-1]

    @property
    def a_nystrom(self) -> np.ndarray:
        """Strictly lower triangular a_ij = b_j (c_i - c_j)."""
        c = self.c
        return np.tril(self.b[np.newaxis, :] * (c[:, np.newaxis] - c[np.newaxis, :]), k=-1)

    @property
    def b_bar(self) -> np.ndarray:
        return self.b * (1.0 - self.c)


def position_verlet() -> SymplecticRKNTableau:
    """Leapfrog in drift-kick-drift form, one force evaluation per step."""
    return SymplecticRKNTableau(a=np.array([0.5, 0.5]), b=np.array([1.0]), order=2)


def velocity_verlet() -> SymplecticRKNTableau:
    """Leapfrog in kick-drift-kick form."""
    return SymplecticRKNTableau(a=np.array([0.0, 1.0, 0.0]), b=np.array([0.5, 0.5]), order=2)


def triple_jump(tableau: SymplecticRKNTableau) -> SymplecticRKNTableau:
    """Compose a symmetric method of order 2n into one of order 2n + 2.

    The step is split into x1, x0, x1 with
        x1 = 1 / (2 - 2^(1/(2n+1))),  x0 = 1 - 2 x1
    and the trailing drift of each sub-step is merged with the leading drift of
    the next one.
    """
    if tableau.order % 2 != 0:
        raise ValueError("triple jump requires a symmetric method of even order")

    x1 = 1.0 / (2.0 - 2.0 ** (1.0 / (tableau.order + 1)))
    x0 = 1.0 - 2.0 * x1
    a = tableau.a
    b = tableau.b

    a_new = np.concatenate([
        x1 * a[:-1],
        [x1 * a[-1] + x0 * a[0]],
        x0 * a[1:-1],
        [x0 * a[-1] + x1 * a[0]],
        x1 * a[1:],
    ])
    b_new = np.concatenate([x1 * b, x0 * b, x1 * b])
    return SymplecticRKNTableau(a=a_new, b=b_new, order=tableau.order + 2)


def srkn_step(f: AccelerationFunction, t: float, q: np.ndarray, v: np.ndarray, h: float, tableau: SymplecticRKNTableau,
) -> Tuple[np.ndarray, np.ndarray, int]:
    """Take a single step with a symplectic Runge-Kutta-Nystrom method.

    Parameters:
        f: Acceleration function f(t, q) -> q''.
        t: Current time.
        q: Current positions.
        v: Current velocities.
        h: Step size.
        tableau: Method coefficients.

    Returns:
        dq: Position increment over the step.
        dv: Velocity increment over the step.
        nfev: Number of acceleration evaluations.
    """
    q = np.asarray(q, dtype=float)
    v = np.asarray(v, dtype=float)
    if q.shape != v.shape:
        raise ValueError(f"q and v must have the same shape, got {q.shape} and {v.shape}")

    c = tableau.c
    a = tableau.a_nystrom
    n_stages = tableau.n_stages

    # Build stages
    g = np.zeros((n_stages,) + q.shape, dtype=float)
    for ii in range(n_stages):
        q_stage = q + (c[ii] * h) * v
        for jj in range(ii):
            if a[ii, jj] != 0.0:
                q_stage = q_stage + (h * h * a[ii, jj]) * g[jj]
        g[ii] = f(t + c[ii] * h, q_stage)

    dq = h * v + (h * h) * np.tensordot(tableau.b_bar, g, axes=1)
    dv = h * np.tensordot(tableau.b, g, axes=1)
    return dq, dv, int(n_stages)


@dataclass(eq=False)
class SymplecticRKNInstance:
    """Resumable state of a symplectic Runge-Kutta-Nystrom integration."""

    equation: SecondOrderODE
    append_state: AppendState
    step: float
    state: SystemState


@dataclass(frozen=True, eq=False)
class SymplecticRungeKuttaNystromIntegrator:
    kind: Kind
    tableau: SymplecticRKNTableau

    @property
    def order(self) -> int:
        return self.tableau.order

    def new_instance(self, problem: IntegrationProblem, append_state: AppendState, step: float) -> SymplecticRKNInstance:
        step = check_step(step)
        check_dimensions(problem.initial_state)
        return SymplecticRKNInstance(
            equation=problem.equation,
            append_state=append_state,
            step=step,
            state=problem.initial_state.copy(),
        )

    def solve(self, t_final: float, instance: SymplecticRKNInstance) -> None:
        match instance:
            case SymplecticRKNInstance():
                pass
            case _:
                raise TypeError(f"{self.kind.value} cannot solve a {type(instance).__name__}")

        f = instance.equation.compute_acceleration
        h = instance.step
        state = instance.state

        n_steps = 0
        while steps_remaining(h, t_final, state.time):
            dq, dv, _ = srkn_step(f, state.time.value, state.positions.value, state.velocities.value, h, self.tableau)
            state.positions.increment(dq)
            state.velocities.increment(dv)
            state.time.increment(h)
            instance.append_state(state.copy())
            n_steps += 1

        logger.debug("%s: %d steps, t=%r", self.kind.value, n_steps, state.time.value)


_VELOCITY_VERLET = SymplecticRungeKuttaNystromIntegrator(Kind.VELOCITY_VERLET, velocity_verlet())
_YOSHIDA_1990_ORDER_4 = SymplecticRungeKuttaNystromIntegrator(
    Kind.YOSHIDA_1990_ORDER_4, triple_jump(position_verlet()))
_YOSHIDA_1990_ORDER_6 = SymplecticRungeKuttaNystromIntegrator(
    Kind.YOSHIDA_1990_ORDER_6, triple_jump(_YOSHIDA_1990_ORDER_4.tableau))
_YOSHIDA_1990_ORDER_8 = SymplecticRungeKuttaNystromIntegrator(
    Kind.YOSHIDA_1990_ORDER_8, triple_jump(_YOSHIDA_1990_ORDER_6.tableau))


def velocity_verlet_integrator() -> SymplecticRungeKuttaNystromIntegrator:
    """Second order, two force evaluations per step (no first-same-as-last reuse)."""
    return _VELOCITY_VERLET


def yoshida1990_order4() -> SymplecticRungeKuttaNystromIntegrator:
    """Fourth order, 3 stages (Forest-Ruth / Yoshida triple jump of the leapfrog)."""
    return _YOSHIDA_1990_ORDER_4


def yoshida1990_order6() -> SymplecticRungeKuttaNystromIntegrator:
    """Sixth order, 9 stages."""
    return _YOSHIDA_1990_ORDER_6


def yoshida1990_order8() -> SymplecticRungeKuttaNystromIntegrator:
    """Eighth order, 27 stages."""
    return _YOSHIDA_1990_ORDER_8
