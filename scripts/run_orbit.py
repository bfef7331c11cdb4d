"""Command line entry point: integrate one named orbit.

Example:
  python scripts/run_orbit.py figure_eight --periods 1.0 --integrator quinlan_tremaine_1990_order_8 --step 1e-3 --plot out/figure8.png --save out/figure8.npz

The numerics live in the fixedstep package; this script only handles
arguments and output files.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

# Importable without installing the package.
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

import numpy as np

from fixedstep.integrators import available_integrators
from fixedstep.problems import load_problem
from fixedstep.simulate import SimulationConfig, simulate_orbit

logger = logging.getLogger("run_orbit")


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run a single N-body orbit with a fixed-step integrator")
    p.add_argument("orbit_name", help="Orbit key (JSON filename stem)")
    p.add_argument("--periods", type=float, default=1.0, help="Multiple of orbit period (default: 1.0)")
    p.add_argument("--integrator", choices=available_integrators(), default=SimulationConfig.integrator,
                   help=f"Integrator kind (default: {SimulationConfig.integrator})")
    p.add_argument("--step", type=float, default=SimulationConfig.step, help="Step size (default: 1e-3)")
    p.add_argument("--save", type=str, default=None, help="Save trajectory to .npz")
    p.add_argument("--plot", type=str, default=None, help="Save trajectory plot to an image file")
    p.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    return p.parse_args(argv)


def run(
    problem_name: str,
    periods: float,
    integrator: str,
    step: float,
    save=None,
    plot=None,
):
    orbit = load_problem(problem_name)
    if orbit.period is None:
        raise SystemExit(f"Orbit '{orbit.name}' has no period; cannot use --periods")

    config = SimulationConfig(integrator=integrator, step=float(step))
    result = simulate_orbit(orbit, periods, config=config)

    logger.info("Initial positions: %s", result.positions[0].tolist())
    logger.info("Final positions (t=%.6f): %s", result.t[-1], result.positions[-1].tolist())
    if result.energy_drift is not None:
        logger.info("Energy drift: %.3e", result.energy_drift[-1])

    if save is not None:
        out = Path(save)
        out.parent.mkdir(parents=True, exist_ok=True)
        np.savez(
            out,
            t=result.t,
            positions=result.positions,
            velocities=(result.velocities if result.velocities is not None else np.array([])),
            energy=(result.energy if result.energy is not None else np.array([])),
            nsteps=result.nsteps,
        )
        logger.info("Saved: %s", out)

    if plot is not None:
        import matplotlib
        matplotlib.use("Agg")
        from fixedstep.visualize import plot_trajectories

        plot_trajectories(result, out_path=plot)
        logger.info("Plotted: %s", plot)

    return result


def main(argv=None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    run(
        problem_name=args.orbit_name,
        periods=args.periods,
        integrator=args.integrator,
        step=args.step,
        save=args.save,
        plot=args.plot,
    )

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
