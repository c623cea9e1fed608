# Copyright (C) 2025 Gil Benezer
# AGPL-3.0 License

"""
Unit Tests for LTVSystem
========================

Test Coverage
------------
1. Construction and step compatibility checks
2. 1-based indexed read/write and bounds
3. Step-wise propagation (next_x, simulate)
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from ilqdyn.exceptions import DimensionMismatchError, PreconditionError
from ilqdyn.systems.base.control_system import LinearizationStyle
from ilqdyn.systems.linear.linear_system import LinearSystem
from ilqdyn.systems.linear.ltv_system import LTVSystem


# ============================================================================
# Fixtures
# ============================================================================


def make_step(k: int, dt: float = 0.1) -> LinearSystem:
    """Distinct sampled system for step k."""
    A = np.array([[1.0, dt * k], [0.0, 1.0]])
    B = np.array([[0.0], [dt * (k + 1)]])
    return LinearSystem(A, B, sampling_period=dt)


@pytest.fixture
def steps():
    return [make_step(k) for k in range(1, 6)]


@pytest.fixture
def ltv(steps):
    return LTVSystem(steps)


# ============================================================================
# Construction
# ============================================================================


class TestConstruction:
    def test_horizon_and_dimensions(self, ltv):
        assert ltv.horizon == 5
        assert len(ltv) == 5
        assert ltv.nx == 2
        assert ltv.nu == 1
        assert ltv.sampling_period == 0.1
        assert ltv.is_sampled

    def test_linearization_style(self, ltv):
        assert ltv.linearization_style is LinearizationStyle.TRIVIAL

    def test_empty_sequence_raises(self):
        with pytest.raises(PreconditionError, match="at least one"):
            LTVSystem([])

    def test_continuous_step_raises(self, steps):
        steps[2] = LinearSystem(np.eye(2), np.ones((2, 1)))
        with pytest.raises(PreconditionError, match="sampled"):
            LTVSystem(steps)

    def test_sampling_period_mismatch_raises(self, steps):
        steps[4] = make_step(5, dt=0.2)
        with pytest.raises(DimensionMismatchError, match="Step 5"):
            LTVSystem(steps)

    def test_input_count_mismatch_raises(self, steps):
        steps[1] = LinearSystem(np.eye(2), np.ones((2, 2)), sampling_period=0.1)
        with pytest.raises(DimensionMismatchError):
            LTVSystem(steps)

    def test_non_linear_system_element_raises(self, steps):
        steps[0] = "not a system"
        with pytest.raises(TypeError):
            LTVSystem(steps)

    def test_accepts_any_iterable(self):
        ltv = LTVSystem(make_step(k) for k in range(3))
        assert ltv.horizon == 3

    def test_construction_copies_sequence(self, steps):
        ltv = LTVSystem(steps)
        steps.append(make_step(6))
        assert ltv.horizon == 5


# ============================================================================
# Indexed Access
# ============================================================================


class TestIndexing:
    def test_read_returns_constructed_instance(self, ltv, steps):
        for k in range(1, 6):
            assert ltv[k] is steps[k - 1]

    @pytest.mark.parametrize("k", [0, 6, -1, 100])
    def test_out_of_range_read_raises(self, ltv, k):
        with pytest.raises(IndexError):
            ltv[k]

    def test_numpy_integer_index(self, ltv, steps):
        assert ltv[np.int64(2)] is steps[1]

    @pytest.mark.parametrize("k", [1.0, "1", slice(1, 3)])
    def test_non_integer_index_raises(self, ltv, k):
        with pytest.raises(TypeError):
            ltv[k]

    @pytest.mark.parametrize("k", [True, False, np.bool_(True)])
    def test_boolean_index_raises(self, ltv, k):
        with pytest.raises(TypeError, match="integers"):
            ltv[k]

    def test_boolean_index_write_raises(self, ltv):
        with pytest.raises(TypeError):
            ltv[True] = make_step(1)

    def test_overwrite(self, ltv):
        replacement = make_step(42)
        ltv[3] = replacement

        assert ltv[3] is replacement
        assert ltv.horizon == 5

    def test_overwrite_leaves_other_steps(self, ltv, steps):
        ltv[3] = make_step(42)
        for k in [1, 2, 4, 5]:
            assert ltv[k] is steps[k - 1]

    @pytest.mark.parametrize("k", [0, 6])
    def test_out_of_range_write_raises(self, ltv, k):
        with pytest.raises(IndexError):
            ltv[k] = make_step(1)

    def test_write_dimension_mismatch_raises(self, ltv):
        with pytest.raises(DimensionMismatchError):
            ltv[2] = make_step(2, dt=0.05)

    def test_write_continuous_raises(self, ltv):
        with pytest.raises(PreconditionError):
            ltv[2] = LinearSystem(np.eye(2), np.ones((2, 1)))

    def test_iteration_order(self, ltv, steps):
        assert list(ltv) == steps


# ============================================================================
# Propagation
# ============================================================================


class TestPropagation:
    def test_next_x_delegates_to_step(self, ltv, steps):
        x = np.array([1.0, 2.0])
        u = np.array([0.5])

        for k in range(1, 6):
            assert_allclose(ltv.next_x(x, u, k), steps[k - 1].next_x(x, u))

    def test_next_x_out_of_range(self, ltv):
        with pytest.raises(IndexError):
            ltv.next_x(np.zeros(2), np.zeros(1), 6)

    def test_linearize_returns_step(self, ltv, steps):
        assert ltv.linearize(np.zeros(2), np.zeros(1), 4) is steps[3]

    def test_simulate(self, ltv, steps):
        x0 = np.array([1.0, 0.0])
        us = np.array([[1.0], [0.0], [-1.0]])

        states = ltv.simulate(x0, us)

        assert states.shape == (4, 2)
        x = x0
        for k, u in enumerate(us, start=1):
            x = steps[k - 1].next_x(x, u)
            assert_allclose(states[k], x)

    def test_simulate_full_horizon(self, ltv):
        states = ltv.simulate([0.0, 0.0], [[1.0]] * 5)
        assert states.shape == (6, 2)

    def test_simulate_beyond_horizon_raises(self, ltv):
        with pytest.raises(DimensionMismatchError):
            ltv.simulate(np.zeros(2), np.zeros((6, 1)))

    def test_repr(self, ltv):
        assert repr(ltv) == "LTVSystem(h=5, nx=2, nu=1, dt=0.1)"
