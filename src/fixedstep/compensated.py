"""Compensated (double-word) accumulation.

Long fixed-step integrations add a small step to a large running total
millions of times. Naive accumulation loses the low-order bits of every
increment, so time and position drift linearly with the number of steps.
`CompensatedValue` carries the rounding remainder alongside the value, so that
`value + error` tracks the exact accumulated total well beyond a single float.

The increment is Kahan's compensated summation (Higham, "Accuracy and
Stability of Numerical Algorithms", Algorithm 4.2) with the error term
recovered by Knuth's branch-free TwoSum, which is exact regardless of the
relative magnitudes of the operands.

Everything here works element-wise on numpy arrays as well as on floats.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

import numpy as np


def two_sum(a: Any, b: Any) -> Tuple[Any, Any]:
    """Knuth's TwoSum.

    Returns:
        s: fl(a + b)
        e: the rounding error, such that s + e == a + b exactly.
    """
    s = a + b
    b_virtual = s - a
    a_virtual = s - b_virtual
    e = (a - a_virtual) + (b - b_virtual)
    return s, e


def _copy(x: Any) -> Any:
    return np.array(x, copy=True) if np.ndim(x) else x


@dataclass
class CompensatedValue:
    """A value with the running error of its last compensated increment.

    Attributes:
        value: The total rounded to a float (or float array).
        error: Rounding remainder; `value + error` is the best estimate.
    """

    value: Any
    error: Any = 0.0

    @classmethod
    def zeros_like(cls, x: Any) -> "CompensatedValue":
        zero = np.zeros_like(x, dtype=float) if np.ndim(x) else 0.0
        return cls(value=zero, error=zero)

    def increment(self, delta: Any) -> None:
        # Attributes are rebound, never updated in place.
        y = delta + self.error
        self.value, self.error = two_sum(self.value, y)

    def estimate(self) -> Any:
        return self.value + self.error

    def copy(self) -> "CompensatedValue":
        """Independent copy; arrays are duplicated."""
        return CompensatedValue(value=_copy(self.value), error=_copy(self.error))
