"""Integrator facade.

This module re-exports the integration algorithms from submodules so the rest
of the project can depend on a stable import path:

    from fixedstep import integrators

    integrator = integrators.integrator_for("quinlan_tremaine_1990_order_8")
    instance = integrator.new_instance(problem, append_state, step)
    integrator.solve(t_final, instance)

Selecting a catalog entry by its kind is the whole configuration surface.
"""

from __future__ import annotations

from typing import Callable, Dict, List

from .fixed_step import FixedStepSizeIntegrator, Kind

from .runge_kutta_nystrom_integrators import (
    SymplecticRKNInstance,
    SymplecticRKNTableau,
    SymplecticRungeKuttaNystromIntegrator,
    position_verlet,
    srkn_step,
    triple_jump,
    velocity_verlet,
    velocity_verlet_integrator,
    yoshida1990_order4,
    yoshida1990_order6,
    yoshida1990_order8,
)

from .multistep_integrators import (
    Step,
    StepWindow,
    SymmetricLinearMultistepInstance,
    SymmetricLinearMultistepIntegrator,
    quinlan1999_order8a,
    quinlan1999_order8b,
    quinlan_tremaine1990_order8,
    quinlan_tremaine1990_order10,
    quinlan_tremaine1990_order12,
    quinlan_tremaine1990_order14,
)

_CATALOG: Dict[Kind, Callable[[], FixedStepSizeIntegrator]] = {
    Kind.VELOCITY_VERLET: velocity_verlet_integrator,
    Kind.YOSHIDA_1990_ORDER_4: yoshida1990_order4,
    Kind.YOSHIDA_1990_ORDER_6: yoshida1990_order6,
    Kind.YOSHIDA_1990_ORDER_8: yoshida1990_order8,
    Kind.QUINLAN_1999_ORDER_8A: quinlan1999_order8a,
    Kind.QUINLAN_1999_ORDER_8B: quinlan1999_order8b,
    Kind.QUINLAN_TREMAINE_1990_ORDER_8: quinlan_tremaine1990_order8,
    Kind.QUINLAN_TREMAINE_1990_ORDER_10: quinlan_tremaine1990_order10,
    Kind.QUINLAN_TREMAINE_1990_ORDER_12: quinlan_tremaine1990_order12,
    Kind.QUINLAN_TREMAINE_1990_ORDER_14: quinlan_tremaine1990_order14,
}


def integrator_for(kind: Kind | str) -> FixedStepSizeIntegrator:
    """Return the catalog integrator for a kind or its string value."""
    try:
        kind = Kind(kind)
    except ValueError as e:
        available = ", ".join(available_integrators())
        raise ValueError(f"Unknown integrator '{kind}'. Available: {available}") from e
    return _CATALOG[kind]()


def available_integrators() -> List[str]:
    return [kind.value for kind in Kind]


__all__ = [
    "FixedStepSizeIntegrator",
    "Kind",
    "integrator_for",
    "available_integrators",
    "SymplecticRKNTableau",
    "SymplecticRKNInstance",
    "SymplecticRungeKuttaNystromIntegrator",
    "position_verlet",
    "velocity_verlet",
    "triple_jump",
    "srkn_step",
    "velocity_verlet_integrator",
    "yoshida1990_order4",
    "yoshida1990_order6",
    "yoshida1990_order8",
    "Step",
    "StepWindow",
    "SymmetricLinearMultistepInstance",
    "SymmetricLinearMultistepIntegrator",
    "quinlan1999_order8a",
    "quinlan1999_order8b",
    "quinlan_tremaine1990_order8",
    "quinlan_tremaine1990_order10",
    "quinlan_tremaine1990_order12",
    "quinlan_tremaine1990_order14",
]
