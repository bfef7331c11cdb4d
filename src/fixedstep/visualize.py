"""Static plots of simulation results.

Requirements:
- Matplotlib only, imported lazily so the numerics never depend on it
- One colored x-y trace per degree of freedom, markers at the final state
- Optional energy drift panel
- Headless friendly: pass `out_path` to save instead of showing

This module is intentionally small and avoids framework-style abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

from .simulate import SimulationResult


def _extract_xy(positions: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Extract planar (x, y) positions for each degree of freedom over time.

    Returns:
        x: (n_samples, n_dof)
        y: (n_samples, n_dof)
    """
    positions = np.asarray(positions, dtype=float)
    if positions.ndim != 3 or positions.shape[2] < 2:
        raise ValueError(f"positions must have shape (n, dof, d >= 2), got {positions.shape}")
    return positions[:, :, 0], positions[:, :, 1]


@dataclass(frozen=True)
class PlotConfig:
    line_width: float = 1.0
    marker_size: float = 6.0
    dpi: int = 150
    figsize: Tuple[float, float] = (6.0, 6.0)


def _finish(fig, out_path: Optional[str | Path], dpi: int):
    if out_path is not None:
        out = Path(out_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(out, dpi=dpi)
    return fig


def plot_trajectories(result: SimulationResult, *, out_path: Optional[str | Path] = None, config: PlotConfig = PlotConfig()):
    """Plot the x-y trace of every degree of freedom. Returns the figure."""
    import matplotlib.pyplot as plt

    x, y = _extract_xy(result.positions)
    fig, ax = plt.subplots(figsize=config.figsize)
    for dof in range(x.shape[1]):
        line, = ax.plot(x[:, dof], y[:, dof], lw=config.line_width, label=f"body {dof}")
        ax.plot(x[-1, dof], y[-1, dof], "o", ms=config.marker_size, color=line.get_color())

    ax.set_aspect("equal", adjustable="datalim")
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_title(f"t = {result.t[-1]:.4g}, {result.nsteps} steps")
    ax.legend(loc="upper right", fontsize="small")
    return _finish(fig, out_path, config.dpi)


def plot_energy(result: SimulationResult, *, out_path: Optional[str | Path] = None, config: PlotConfig = PlotConfig()):
    """Plot the relative energy drift. Returns the figure."""
    if result.energy is None or result.energy_drift is None:
        raise ValueError("result has no energy diagnostics")
    import matplotlib.pyplot as plt

    e0 = float(result.energy[0])
    scale = abs(e0) if e0 != 0.0 else 1.0
    fig, ax = plt.subplots(figsize=(config.figsize[0], config.figsize[1] / 2))
    ax.plot(result.t, result.energy_drift / scale, lw=config.line_width)
    ax.set_xlabel("t")
    ax.set_ylabel("(E - E0) / |E0|")
    ax.grid(True, which="both", ls="-", alpha=0.3)
    fig.tight_layout()
    return _finish(fig, out_path, config.dpi)
