# Copyright (C) 2025 Gil Benezer
# AGPL-3.0 License

"""
Unit Tests for LTISystem
========================

Test Coverage
------------
1. Construction and index-set validation
2. xyindex / xindex accessors
3. Time-invariant indexed access
4. Propagation
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from ilqdyn.exceptions import PreconditionError
from ilqdyn.systems.base.control_system import LinearizationStyle
from ilqdyn.systems.discretization.discretizer import discretize
from ilqdyn.systems.linear.linear_system import LinearSystem
from ilqdyn.systems.linear.lti_system import LTISystem


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def planar_double_integrator():
    """Continuous planar double integrator with state (vx, px, py, vy)."""
    A = np.zeros((4, 4))
    A[1, 0] = 1.0
    A[2, 3] = 1.0
    B = np.zeros((4, 2))
    B[0, 0] = 1.0
    B[3, 1] = 1.0
    return LinearSystem(A, B)


@pytest.fixture
def sampled(planar_double_integrator):
    return discretize(planar_double_integrator, 0.1, method="exp")


@pytest.fixture
def lti(sampled):
    return LTISystem(sampled, xyids=(1, 2))


# ============================================================================
# Construction
# ============================================================================


class TestConstruction:
    def test_dimensions_follow_wrapped_system(self, lti):
        assert lti.nx == 4
        assert lti.nu == 2
        assert lti.sampling_period == 0.1
        assert lti.linearization_style is LinearizationStyle.TRIVIAL

    def test_continuous_system_raises(self, planar_double_integrator):
        with pytest.raises(PreconditionError, match="sampled"):
            LTISystem(planar_double_integrator, xyids=(1, 2))

    def test_non_linear_system_raises(self):
        with pytest.raises(TypeError):
            LTISystem(np.eye(2), xyids=(0, 1))

    @pytest.mark.parametrize("xyids", [(0,), (0, 1, 2), ()])
    def test_xyids_must_have_two_entries(self, sampled, xyids):
        with pytest.raises(ValueError, match="exactly 2"):
            LTISystem(sampled, xyids=xyids)

    @pytest.mark.parametrize("xyids", [(0, 4), (-1, 0)])
    def test_xyids_out_of_range(self, sampled, xyids):
        with pytest.raises(ValueError, match="not a valid index"):
            LTISystem(sampled, xyids=xyids)

    def test_xyids_non_integer(self, sampled):
        with pytest.raises(ValueError, match="integers"):
            LTISystem(sampled, xyids=(0.5, 1))

    def test_xyids_boolean_raises(self, sampled):
        with pytest.raises(ValueError, match="integers"):
            LTISystem(sampled, xyids=(False, True))

    def test_xids_boolean_raises(self, sampled):
        with pytest.raises(ValueError, match="xids"):
            LTISystem(sampled, xyids=(1, 2), xids=[np.bool_(True)])

    def test_xyids_generator(self, sampled):
        lti = LTISystem(sampled, xyids=(i for i in (1, 2)))
        assert lti.xyindex() == (1, 2)

    def test_xids_out_of_range(self, sampled):
        with pytest.raises(ValueError, match="xids"):
            LTISystem(sampled, xyids=(1, 2), xids=(0, 7))


# ============================================================================
# Accessors
# ============================================================================


class TestAccessors:
    def test_xyindex_unchanged(self, lti):
        assert lti.xyindex() == (1, 2)

    def test_xindex_defaults_to_none(self, lti):
        assert lti.xindex() is None

    def test_xindex(self, sampled):
        lti = LTISystem(sampled, xyids=[1, 2], xids=[0, 3])
        assert lti.xindex() == (0, 3)
        assert lti.xyindex() == (1, 2)

    def test_numpy_indices(self, sampled):
        lti = LTISystem(sampled, xyids=np.array([1, 2]))
        assert lti.xyindex() == (1, 2)

    def test_position_extraction(self, lti):
        x = np.array([0.0, 3.0, 4.0, 0.0])
        ix, iy = lti.xyindex()
        assert (x[ix], x[iy]) == (3.0, 4.0)

    @pytest.mark.parametrize("k", [0, 1, 5, 1000, -3])
    def test_every_step_is_the_wrapped_system(self, lti, sampled, k):
        assert lti[k] is sampled

    def test_steps_have_identical_dynamics(self, lti):
        assert_allclose(lti[1].A, lti[50].A)
        assert_allclose(lti[1].B, lti[50].B)

    def test_linearize_returns_wrapped_system(self, lti, sampled):
        assert lti.linearize(np.zeros(4), np.zeros(2), 3.0) is sampled


# ============================================================================
# Propagation
# ============================================================================


class TestPropagation:
    def test_next_x_ignores_time(self, lti, sampled):
        x = np.array([1.0, 0.0, 0.0, -1.0])
        u = np.array([0.5, 0.5])

        expected = sampled.next_x(x, u)
        assert_allclose(lti.next_x(x, u, 0.0), expected)
        assert_allclose(lti.next_x(x, u, 7.5), expected)

    def test_constant_velocity(self, lti):
        # vx = 1, vy = -1 with zero input moves the position by dt per step
        x = np.array([1.0, 0.0, 0.0, -1.0])
        x_next = lti.next_x(x, np.zeros(2), 0.0)
        assert_allclose(x_next, [1.0, 0.1, -0.1, -1.0], atol=1e-12)

    def test_simulate(self, lti):
        states = lti.simulate(np.array([1.0, 0.0, 0.0, 0.0]), np.zeros((10, 2)))
        assert states.shape == (11, 4)
        assert_allclose(states[-1], [1.0, 1.0, 0.0, 0.0], atol=1e-12)

    def test_repr(self, lti):
        assert "xyids=(1, 2)" in repr(lti)
