"""Acceleration laws q'' = f(t, q) used by the examples and tests.

Position array convention: shape (n, d), one row per degree of freedom
(a body, or a test particle), d spatial components.

N-body gravity follows Newton's law of gravitation F = G m1 m2 / r^2.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .ode import SecondOrderODE


def zero_acceleration(t: float, q: np.ndarray) -> np.ndarray:
    """Free motion."""
    return np.zeros_like(np.asarray(q, dtype=float))


def harmonic_acceleration(t: float, q: np.ndarray) -> np.ndarray:
    """Unit harmonic oscillator a = -q, exact solution q(t) = q0 cos t + v0 sin t."""
    return -np.asarray(q, dtype=float)


def kepler_acceleration(t: float, q: np.ndarray) -> np.ndarray:
    """Test particles around a fixed unit mass at the origin, a = -q / |q|^3 (G = 1)."""
    q = np.asarray(q, dtype=float)
    r2 = np.sum(q * q, axis=-1, keepdims=True)
    if np.any(r2 <= 0.0):
        raise FloatingPointError("Particle at the attracting centre")
    return -q * r2 ** (-1.5)


@dataclass(frozen=True)
class GravityParams:
    """Parameters for the N-body problem."""

    G: float = 1.0
    softening: float = 0.0
    masses: np.ndarray = field(default_factory=lambda: np.array([1.0, 1.0, 1.0], dtype=float))


def gravitational_accelerations(r: np.ndarray, *, params: GravityParams | None = None) -> np.ndarray:
    """Compute gravitational accelerations for each body.

    Args:
        r: Positions of each body, shape (n, d)
        params: Gravity parameters (masses, G, optional softening).

    Returns:
        a: Accelerations, shape (n, d)
    Notes:
        The acceleration on body i is:
            a_i = G * sum_{j!=i} m_j * (r_j - r_i) / (|r_j - r_i|^2 + eps^2)^(3/2)

        softening=0.0 gives the true Newtonian force.
    """
    if params is None:
        params = GravityParams()

    masses = np.asarray(params.masses, dtype=float)
    r = np.asarray(r, dtype=float)
    if r.ndim != 2:
        raise ValueError(f"Expected r of shape (n, d), got {r.shape}")
    n_bodies = r.shape[0]
    if masses.shape != (n_bodies,):
        raise ValueError(f"Expected masses.shape == ({n_bodies},), got {masses.shape}")

    a = np.zeros_like(r)
    eps2 = float(params.softening) ** 2
    G = float(params.G)

    # Explicit pairwise sum; each pair is visited once and applied to both bodies.
    for i in range(n_bodies):
        for j in range(i + 1, n_bodies):
            dr = r[j] - r[i]
            dist2 = float(np.dot(dr, dr)) + eps2
            if dist2 <= 0.0:
                raise FloatingPointError("Non-positive pair distance squared encountered")
            g = G * dr * dist2 ** (-1.5)
            a[i] += masses[j] * g
            a[j] -= masses[i] * g

    return a


def gravity_equation(params: GravityParams | None = None) -> SecondOrderODE:
    """Equations of motion of the N-body problem."""
    if params is None:
        params = GravityParams()

    def compute_acceleration(t: float, r: np.ndarray) -> np.ndarray:
        return gravitational_accelerations(r, params=params)

    return SecondOrderODE(compute_acceleration=compute_acceleration)


def energy(r: np.ndarray, v: np.ndarray, *, params: GravityParams | None = None) -> float:
    """Compute total (kinetic + potential) energy of the N-body state.

    Notes:
        For masses m_i, the total energy is:
            T = 1/2 * sum_i m_i * ||v_i||^2
            U = -G * sum_{i<j} m_i * m_j / sqrt(||r_i-r_j||^2 + eps^2)
    """
    if params is None:
        params = GravityParams()

    r = np.asarray(r, dtype=float)
    v = np.asarray(v, dtype=float)
    if r.shape != v.shape:
        raise ValueError(f"r and v must have the same shape, got {r.shape} and {v.shape}")
    G = float(params.G)
    eps2 = float(params.softening) ** 2
    masses = np.asarray(params.masses, dtype=float)

    kinetic = 0.5 * float(np.sum(masses * np.sum(v * v, axis=1)))

    potential = 0.0
    for i in range(r.shape[0]):
        for j in range(i + 1, r.shape[0]):
            dr = r[j] - r[i]
            dist2 = float(np.dot(dr, dr)) + eps2
            if dist2 <= 0.0:
                raise FloatingPointError("Non-positive pair distance squared encountered")
            potential += -G * masses[i] * masses[j] / np.sqrt(dist2)

    return kinetic + float(potential)
