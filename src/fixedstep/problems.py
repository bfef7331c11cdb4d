"""Named N-body initial value problems.

Every `data/orbit_definitions/<name>.json` file describes one problem:

{
  "name": "two_body_circular",
  "G": 1.0,
  "masses": [1.0, 1.0],
  "positions": [[0.5, 0.0, 0.0], [-0.5, 0.0, 0.0]],
  "velocities": [[0.0, 0.7071, 0.0], [0.0, -0.7071, 0.0]],
  "period": 4.4429,
  "description": "...",
  "reference": "..."
}

`name` falls back to the file stem. `G` (default 1.0), `period`,
`description` and `reference` may be missing or null. Rows of `positions`
and `velocities` are per body; planar rows are padded with z = 0.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from .dynamics import GravityParams, gravity_equation
from .ode import IntegrationProblem, SystemState


@dataclass(frozen=True)
class OrbitDefinition:
    """Masses and initial conditions of a named orbit."""

    name: str
    masses: np.ndarray
    positions: np.ndarray
    velocities: np.ndarray
    period: Optional[float]
    G: float = 1.0
    description: Optional[str] = None
    reference: Optional[str] = None

    @property
    def params(self) -> GravityParams:
        return GravityParams(G=self.G, masses=self.masses)

    def to_integration_problem(self, t0: float = 0.0) -> IntegrationProblem:
        """Gravity equation and initial state, starting at t0."""
        return IntegrationProblem(
            equation=gravity_equation(self.params),
            initial_state=SystemState.from_arrays(t0, self.positions, self.velocities),
        )


def orbits_dir() -> Path:
    # src/fixedstep/problems.py -> <repo>/data/orbit_definitions
    return Path(__file__).resolve().parents[2] / "data" / "orbit_definitions"


def list_orbits() -> List[str]:
    """Names of the orbit files, sorted."""
    directory = orbits_dir()
    if not directory.is_dir():
        return []
    return sorted(path.stem for path in directory.glob("*.json") if path.is_file())


def _as_float_array(x: Any, *, name: str, ndim: int) -> np.ndarray:
    try:
        arr = np.asarray(x, dtype=float)
    except (TypeError, ValueError) as e:
        raise ValueError(f"'{name}' must contain numbers only") from e
    if arr.ndim != ndim:
        raise ValueError(f"'{name}' must be {ndim}D, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"'{name}' must be finite")
    return arr


def _optional_float(d: Dict[str, Any], key: str, default: Optional[float]) -> Optional[float]:
    raw = d.get(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except (TypeError, ValueError) as e:
        raise ValueError(f"'{key}' must be a number or null, got {raw!r}") from e


def _optional_str(d: Dict[str, Any], key: str) -> Optional[str]:
    raw = d.get(key)
    return None if raw is None else str(raw)


def _pad_to_3d(rows: np.ndarray) -> np.ndarray:
    """(n, 2) planar rows -> (n, 3) with z = 0."""
    return np.hstack([rows, np.zeros((rows.shape[0], 1))])


def _parse_problem_dict(d: Dict[str, Any], *, fallback_name: str) -> OrbitDefinition:
    if not isinstance(d, dict):
        raise ValueError(f"Orbit '{fallback_name}' must be a JSON object")

    name = d.get("name", fallback_name)
    if not isinstance(name, str) or not name:
        raise ValueError(f"Orbit '{fallback_name}': 'name' must be a non-empty string")

    masses = _as_float_array(d.get("masses"), name="masses", ndim=1)
    if masses.size == 0 or np.any(masses <= 0.0):
        raise ValueError(f"Orbit '{name}': masses must be a non-empty list of positive numbers")

    positions = _as_float_array(d.get("positions"), name="positions", ndim=2)
    velocities = _as_float_array(d.get("velocities"), name="velocities", ndim=2)
    expected_rows = masses.shape[0]
    for label, rows in (("positions", positions), ("velocities", velocities)):
        if rows.shape[0] != expected_rows:
            raise ValueError(f"Orbit '{name}': expected {expected_rows} {label} rows, got {rows.shape[0]}")
        if rows.shape[1] not in (2, 3):
            raise ValueError(f"Orbit '{name}': {label} rows must have 2 or 3 components, got {rows.shape[1]}")
    if positions.shape != velocities.shape:
        raise ValueError(f"Orbit '{name}': positions {positions.shape} and velocities {velocities.shape} differ")

    if positions.shape[1] == 2:
        positions = _pad_to_3d(positions)
        velocities = _pad_to_3d(velocities)

    return OrbitDefinition(
        name=name,
        masses=masses,
        positions=positions,
        velocities=velocities,
        period=_optional_float(d, "period", None),
        G=_optional_float(d, "G", 1.0),
        description=_optional_str(d, "description"),
        reference=_optional_str(d, "reference"),
    )


def _read_orbit_file(path: Path) -> OrbitDefinition:
    with path.open(encoding="utf-8") as f:
        return _parse_problem_dict(json.load(f), fallback_name=path.stem)


def load_orbit(name: str) -> OrbitDefinition:
    """Load `data/orbit_definitions/<name>.json`."""
    if not isinstance(name, str) or not name:
        raise ValueError("Orbit name must be a non-empty string")

    path = orbits_dir() / f"{name}.json"
    if not path.is_file():
        raise FileNotFoundError(f"No orbit '{name}' in {orbits_dir()}. Available: {', '.join(list_orbits()) or '(none)'}")
    return _read_orbit_file(path)


# Name used by the CLI.
load_problem = load_orbit


def load_all_orbits() -> List[OrbitDefinition]:
    return [_read_orbit_file(orbits_dir() / f"{name}.json") for name in list_orbits()]
