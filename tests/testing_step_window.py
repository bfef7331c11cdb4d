"""Unit tests for the step history ring buffer."""

import numpy as np
import pytest

from fixedstep.compensated import CompensatedValue
from fixedstep.multistep_integrators import Step, StepWindow


def _step(t):
    return Step.frozen(CompensatedValue(float(t)), CompensatedValue(np.array([[float(t)]])), np.array([[-float(t)]]))


class TestStepWindow:

    def test_fills_then_evicts_oldest(self):
        window = StepWindow(3)
        assert len(window) == 0
        assert not window.full
        for t in range(3):
            assert window.push(_step(t)) is None
        assert window.full

        evicted = window.push(_step(3))
        assert evicted.time.value == 0.0
        assert len(window) == 3
        assert [s.time.value for s in window] == [1.0, 2.0, 3.0]

    def test_symmetric_indexing(self):
        window = StepWindow(4)
        for t in range(10):
            window.push(_step(t))
        # Holds 6, 7, 8, 9 after wrapping around.
        assert window.front().time.value == 6.0
        assert window.back().time.value == 9.0
        for j in range(4):
            assert window[j].time.value == 6.0 + j
            assert window[-1 - j].time.value == 9.0 - j

    def test_partial_window_indexing(self):
        window = StepWindow(5)
        window.push(_step(0))
        window.push(_step(1))
        assert window[-1].time.value == 1.0
        assert window[-2].time.value == 0.0
        with pytest.raises(IndexError):
            window[2]
        with pytest.raises(IndexError):
            window[-3]

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            StepWindow(0)


class TestFrozenStep:

    def test_arrays_are_copied_and_read_only(self):
        positions = np.array([[1.0, 2.0]])
        accelerations = np.array([[0.5, 0.5]])
        step = Step.frozen(CompensatedValue(0.0), CompensatedValue(positions), accelerations)

        positions[0, 0] = 99.0
        accelerations[0, 0] = 99.0
        np.testing.assert_array_equal(step.displacements.value, [[1.0, 2.0]])
        np.testing.assert_array_equal(step.accelerations, [[0.5, 0.5]])

        with pytest.raises(ValueError):
            step.displacements.value[0, 0] = 3.0
        with pytest.raises(ValueError):
            step.displacements.error[0, 0] = 3.0
        with pytest.raises(ValueError):
            step.accelerations[0, 0] = 3.0

    def test_scalar_error_is_broadcast(self):
        step = Step.frozen(CompensatedValue(0.0), CompensatedValue(np.zeros((2, 3))), np.zeros((2, 3)))
        assert step.displacements.error.shape == (2, 3)
        np.testing.assert_array_equal(step.displacements.error, 0.0)
