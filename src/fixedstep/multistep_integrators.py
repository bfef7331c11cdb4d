"""Symmetric linear multistep integrators for q'' = f(t, q).

A k-step method (k = order, even) computes the next position from the k
previous ones,

    sum_{j=0}^{k} alpha_j q_{n+j} = h^2 sum_{j=0}^{k} beta_j f(t_{n+j}, q_{n+j})

with symmetric tables alpha_j = alpha_{k-j}, beta_j = beta_{k-j}, alpha_k = 1
and beta_k = 0 (explicit). Only the first half of each table (j = 0..k/2) is
stored, and beta is stored as numerators over a common denominator.

The method is not self-starting: until k steps are known, a one-step startup
integrator fills the history. The velocities are not computed by this family;
published states carry `velocities=None`.

References:
    G. D. Quinlan, S. Tremaine, "Symmetric multistep methods for the numerical
    integration of planetary orbits", Astron. J. 100 (1990) 1694-1700.
    G. D. Quinlan, "Resonances and instabilities in symmetric multistep
    methods", arXiv:astro-ph/9901136 (1999).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional

import numpy as np

from .compensated import CompensatedValue, two_sum
from .fixed_step import FixedStepSizeIntegrator, Kind, check_dimensions, check_step, steps_remaining
from .ode import AppendState, IntegrationProblem, SecondOrderODE, SystemState
from .runge_kutta_nystrom_integrators import yoshida1990_order6, yoshida1990_order8

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Step:
    """One sample of the history.

    Use `Step.frozen` to build steps that enter a window: it copies the arrays
    and marks them read-only.
    """

    time: CompensatedValue
    displacements: CompensatedValue
    accelerations: np.ndarray

    @classmethod
    def frozen(cls, time: CompensatedValue, displacements: CompensatedValue, accelerations) -> "Step":
        value = _read_only(displacements.value)
        error = _read_only(np.broadcast_to(displacements.error, value.shape))
        return cls(
            time=time.copy(),
            displacements=CompensatedValue(value, error),
            accelerations=_read_only(accelerations),
        )


def _read_only(x) -> np.ndarray:
    arr = np.array(x, dtype=float, copy=True)
    arr.setflags(write=False)
    return arr


class StepWindow:
    """Fixed-capacity ring buffer of steps, oldest first.

    `window[j]` counts from the oldest step and `window[-j]` from the newest,
    so a symmetric stencil can be walked from both ends in O(1) per access.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._steps: List[Optional[Step]] = [None] * capacity
        self._head = 0
        self._size = 0

    @property
    def capacity(self) -> int:
        return len(self._steps)

    @property
    def full(self) -> bool:
        return self._size == len(self._steps)

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, j: int) -> Step:
        if not -self._size <= j < self._size:
            raise IndexError(f"window index {j} out of range for {self._size} steps")
        if j < 0:
            j += self._size
        return self._steps[(self._head + j) % len(self._steps)]

    def __iter__(self) -> Iterator[Step]:
        for j in range(self._size):
            yield self[j]

    def front(self) -> Step:
        return self[0]

    def back(self) -> Step:
        return self[-1]

    def push(self, step: Step) -> Optional[Step]:
        """Append a step, evicting and returning the oldest one when full."""
        capacity = len(self._steps)
        if self._size < capacity:
            self._steps[(self._head + self._size) % capacity] = step
            self._size += 1
            return None
        evicted = self._steps[self._head]
        self._steps[self._head] = step
        self._head = (self._head + 1) % capacity
        return evicted


@dataclass(eq=False)
class SymmetricLinearMultistepInstance:
    """Resumable state of a symmetric multistep integration.

    Attributes:
        equation: Equations of motion.
        append_state: Publication callback, called once per new step.
        step: Fixed step size.
        window: The last `order` steps.
        initial_state: Problem's initial state, seeds the startup integrator.
        startup_instance: Startup integrator instance while the window fills.
    """

    equation: SecondOrderODE
    append_state: AppendState
    step: float
    window: StepWindow
    initial_state: SystemState
    startup_instance: Any = None


@dataclass(frozen=True, eq=False)
class SymmetricLinearMultistepIntegrator:
    """Symmetric linear multistep method with its startup integrator.

    Attributes:
        kind: Catalog tag.
        startup_integrator: Self-starting method used to fill the history.
        alpha: alpha_0 .. alpha_{k/2}, alpha_0 == 1.
        beta_numerator: Numerators of beta_0 .. beta_{k/2}, beta_0 == 0.
        beta_denominator: Common denominator of beta.
    """

    kind: Kind
    startup_integrator: FixedStepSizeIntegrator
    alpha: np.ndarray
    beta_numerator: np.ndarray
    beta_denominator: float

    def __post_init__(self) -> None:
        alpha = np.array(self.alpha, dtype=float)
        beta = np.array(self.beta_numerator, dtype=float)
        denominator = float(self.beta_denominator)

        if alpha.ndim != 1 or alpha.shape != beta.shape:
            raise ValueError(f"alpha and beta_numerator must be 1D of equal length, got {alpha.shape} and {beta.shape}")
        if alpha.shape[0] < 2:
            raise ValueError("order must be at least 2")
        if alpha[0] != 1.0:
            raise ValueError(f"alpha[0] must be normalized to 1.0, got {alpha[0]!r}")
        if beta[0] != 0.0:
            raise ValueError(f"beta_numerator[0] must be 0 for an explicit method, got {beta[0]!r}")
        if not denominator > 0.0:
            raise ValueError(f"beta_denominator must be positive, got {denominator!r}")

        alpha.setflags(write=False)
        beta.setflags(write=False)
        object.__setattr__(self, "alpha", alpha)
        object.__setattr__(self, "beta_numerator", beta)
        object.__setattr__(self, "beta_denominator", denominator)

        # Consistency: exact for constants and (by symmetry) linear functions,
        # and for q = t^2: sum alpha_j j^2 = 2 sum beta_j.
        full_alpha = self.full_alpha()
        full_beta = self.full_beta()
        j = np.arange(self.order + 1, dtype=float)
        if not np.isclose(full_alpha.sum(), 0.0, rtol=0.0, atol=1e-12):
            raise ValueError(f"{self.kind.value}: alpha must sum to 0, got {full_alpha.sum()!r}")
        if not np.isclose(0.5 * np.sum(j * j * full_alpha), full_beta.sum(), rtol=1e-12, atol=0.0):
            raise ValueError(f"{self.kind.value}: coefficients are not consistent")

    @property
    def order(self) -> int:
        return 2 * (self.alpha.shape[0] - 1)

    def full_alpha(self) -> np.ndarray:
        """alpha_0 .. alpha_k, expanded by symmetry."""
        return np.concatenate([self.alpha, self.alpha[-2::-1]])

    def full_beta(self) -> np.ndarray:
        """beta_0 .. beta_k, expanded by symmetry and divided by the denominator."""
        return np.concatenate([self.beta_numerator, self.beta_numerator[-2::-1]]) / self.beta_denominator

    def new_instance(self, problem: IntegrationProblem, append_state: AppendState, step: float,
    ) -> SymmetricLinearMultistepInstance:
        """Create an instance whose window holds the initial state only."""
        step = check_step(step)
        initial_state = problem.initial_state
        check_dimensions(initial_state)

        positions = np.array(initial_state.positions.value, dtype=float)
        accelerations = np.asarray(
            problem.equation.compute_acceleration(initial_state.time.value, positions), dtype=float)
        if accelerations.shape != positions.shape:
            raise ValueError(f"Expected accelerations of shape {positions.shape}, got {accelerations.shape}")

        window = StepWindow(self.order)
        window.push(Step.frozen(initial_state.time, initial_state.positions, accelerations))
        return SymmetricLinearMultistepInstance(
            equation=problem.equation,
            append_state=append_state,
            step=step,
            window=window,
            initial_state=initial_state.copy(),
        )

    def solve(self, t_final: float, instance: SymmetricLinearMultistepInstance) -> None:
        """Advance the instance by whole steps while a step fits before t_final."""
        match instance:
            case SymmetricLinearMultistepInstance():
                pass
            case _:
                raise TypeError(f"{self.kind.value} cannot solve a {type(instance).__name__}")

        window = instance.window
        if not window.full:
            self._startup_solve(t_final, instance)
            if not window.full:
                # t_final came before the end of the startup; resumed next call.
                return

        f = instance.equation.compute_acceleration
        h = check_step(instance.step)
        alpha = self.alpha
        beta = self.beta_numerator
        half_order = self.order // 2

        n_steps = 0
        while steps_remaining(h, t_final, window.back().time):
            # alpha_0 and beta_0 pair with the step being computed.
            oldest = window.front()
            total = -alpha[0] * oldest.displacements.value
            error = -alpha[0] * oldest.displacements.error
            sum_beta_a = beta[0] * oldest.accelerations

            # Walk the window from both ends: window[j] and window[-j] are
            # steps j and k - j and share coefficient j. Catalog alphas are 0 or
            # powers of two, so each -alpha_j q_j term is exact and two_sum
            # keeps the sum of values error-free.
            for j in range(1, half_order + 1):
                stencil = (window[j],) if j == half_order else (window[j], window[-j])
                for sample in stencil:
                    total, rounding = two_sum(total, -alpha[j] * sample.displacements.value)
                    error = error + rounding - alpha[j] * sample.displacements.error
                    sum_beta_a = sum_beta_a + beta[j] * sample.accelerations

            # No division by alpha_k, it is 1.
            total, rounding = two_sum(total, h * h * sum_beta_a / self.beta_denominator)
            value, error = two_sum(total, error + rounding)
            position = CompensatedValue(value, error)

            time = window.back().time.copy()
            time.increment(h)

            accelerations = np.asarray(f(time.value, np.array(value)), dtype=float)
            window.push(Step.frozen(time, position, accelerations))

            instance.append_state(SystemState(time=time, positions=position, velocities=None))
            n_steps += 1

        logger.debug("%s: %d steps, t=%r", self.kind.value, n_steps, window.back().time.value)

    def _startup_solve(self, t_final: float, instance: SymmetricLinearMultistepInstance) -> None:
        """Fill the window with the startup integrator.

        The startup instance is kept on the instance, so a startup cut short by
        t_final resumes on the next call. Its states are not published.
        """
        window = instance.window
        h = instance.step
        f = instance.equation.compute_acceleration
        if len(window) == 0:
            raise RuntimeError("window must hold the initial step")

        if instance.startup_instance is None:
            def startup_append_state(state: SystemState) -> None:
                if window.full:
                    raise RuntimeError(f"{self.kind.value}: startup produced more steps than the window holds")
                previous = window.back()
                positions = np.array(state.positions.value, dtype=float)
                expected_shape = previous.displacements.value.shape
                if positions.shape != expected_shape:
                    raise RuntimeError(
                        f"{self.kind.value}: startup state has shape {positions.shape}, expected {expected_shape}")
                elapsed = (state.time.value - previous.time.value) + (state.time.error - previous.time.error)
                if not np.isclose(elapsed, h, rtol=1e-9, atol=0.0):
                    raise RuntimeError(f"{self.kind.value}: startup step {elapsed!r} differs from {h!r}")

                accelerations = np.asarray(f(state.time.value, positions), dtype=float)
                window.push(Step.frozen(state.time, state.positions, accelerations))

            instance.startup_instance = self.startup_integrator.new_instance(
                IntegrationProblem(equation=instance.equation, initial_state=instance.initial_state),
                startup_append_state,
                h,
            )

        missing = window.capacity - len(window)
        # Half a step of slack so rounding cannot drop the last startup step.
        target = window.back().time.value + (missing + 0.5) * h
        self.startup_integrator.solve(min(target, t_final), instance.startup_instance)

        if window.full:
            instance.startup_instance = None
            logger.debug("%s: startup with %s complete, %d steps in window",
                         self.kind.value, self.startup_integrator.kind.value, len(window))
        elif t_final >= target:
            raise RuntimeError(
                f"{self.kind.value}: startup left {len(window)} steps, expected {window.capacity}")


_QUINLAN_1999_ORDER_8A = SymmetricLinearMultistepIntegrator(
    kind=Kind.QUINLAN_1999_ORDER_8A,
    startup_integrator=yoshida1990_order6(),
    alpha=np.array([1.0, -2.0, 2.0, -2.0, 2.0]),
    beta_numerator=np.array([0.0, 22081.0, -29418.0, 75183.0, -75212.0]),
    beta_denominator=15120.0,
)

_QUINLAN_1999_ORDER_8B = SymmetricLinearMultistepIntegrator(
    kind=Kind.QUINLAN_1999_ORDER_8B,
    startup_integrator=yoshida1990_order6(),
    alpha=np.array([1.0, 0.0, 0.0, -1.0 / 2.0, -1.0]),
    beta_numerator=np.array([0.0, 192481.0, 6582.0, 816783.0, -156812.0]),
    beta_denominator=120960.0,
)

_QUINLAN_TREMAINE_1990_ORDER_8 = SymmetricLinearMultistepIntegrator(
    kind=Kind.QUINLAN_TREMAINE_1990_ORDER_8,
    startup_integrator=yoshida1990_order6(),
    alpha=np.array([1.0, -2.0, 2.0, -1.0, 0.0]),
    beta_numerator=np.array([0.0, 17671.0, -23622.0, 61449.0, -50516.0]),
    beta_denominator=12096.0,
)

_QUINLAN_TREMAINE_1990_ORDER_10 = SymmetricLinearMultistepIntegrator(
    kind=Kind.QUINLAN_TREMAINE_1990_ORDER_10,
    startup_integrator=yoshida1990_order6(),
    alpha=np.array([1.0, -1.0, 1.0, -1.0, 1.0, -2.0]),
    beta_numerator=np.array([0.0, 399187.0, -485156.0, 2391436.0, -2816732.0, 4651330.0]),
    beta_denominator=241920.0,
)

_QUINLAN_TREMAINE_1990_ORDER_12 = SymmetricLinearMultistepIntegrator(
    kind=Kind.QUINLAN_TREMAINE_1990_ORDER_12,
    startup_integrator=yoshida1990_order8(),
    alpha=np.array([1.0, -2.0, 2.0, -1.0, 0.0, 0.0, 0.0]),
    beta_numerator=np.array([
        0.0,
        90987349.0,
        -229596838.0,
        812627169.0,
        -1628539944.0,
        2714971338.0,
        -3041896548.0,
    ]),
    beta_denominator=53222400.0,
)

_QUINLAN_TREMAINE_1990_ORDER_14 = SymmetricLinearMultistepIntegrator(
    kind=Kind.QUINLAN_TREMAINE_1990_ORDER_14,
    startup_integrator=yoshida1990_order8(),
    alpha=np.array([1.0, -2.0, 2.0, -1.0, 0.0, 0.0, 0.0, 0.0]),
    beta_numerator=np.array([
        0.0,
        433489274083.0,
        -1364031998256.0,
        5583113380398.0,
        -14154444148720.0,
        28630585332045.0,
        -42056933842656.0,
        48471792742212.0,
    ]),
    beta_denominator=237758976000.0,
)


def quinlan1999_order8a() -> SymmetricLinearMultistepIntegrator:
    return _QUINLAN_1999_ORDER_8A


def quinlan1999_order8b() -> SymmetricLinearMultistepIntegrator:
    return _QUINLAN_1999_ORDER_8B


def quinlan_tremaine1990_order8() -> SymmetricLinearMultistepIntegrator:
    return _QUINLAN_TREMAINE_1990_ORDER_8


def quinlan_tremaine1990_order10() -> SymmetricLinearMultistepIntegrator:
    return _QUINLAN_TREMAINE_1990_ORDER_10


def quinlan_tremaine1990_order12() -> SymmetricLinearMultistepIntegrator:
    return _QUINLAN_TREMAINE_1990_ORDER_12


def quinlan_tremaine1990_order14() -> SymmetricLinearMultistepIntegrator:
    return _QUINLAN_TREMAINE_1990_ORDER_14
