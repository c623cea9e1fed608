# Copyright (C) 2025 Gil Benezer
# AGPL-3.0 License

"""
Unit Tests for LinearSystem
===========================

Test Coverage
------------
1. Construction and dimension validation
2. Continuous-only dx and sampled-only next_x
3. Trivial linearization
4. Immutability and value semantics
5. Backend conversion
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from ilqdyn.exceptions import DimensionMismatchError, PreconditionError
from ilqdyn.systems.base.control_system import LinearizationStyle
from ilqdyn.systems.linear.linear_system import LinearSystem
from ilqdyn.types.core import SystemDimensions

torch_available = True
try:
    import torch
except ImportError:
    torch_available = False


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def A():
    return np.array([[0.0, 1.0], [-2.0, -0.5]])


@pytest.fixture
def B():
    return np.array([[0.0], [1.0]])


@pytest.fixture
def continuous_system(A, B):
    return LinearSystem(A, B)


@pytest.fixture
def sampled_system(A, B):
    return LinearSystem(np.eye(2) + 0.1 * A, 0.1 * B, sampling_period=0.1)


# ============================================================================
# Construction
# ============================================================================


class TestConstruction:
    """Test dimension inference and validation."""

    def test_dimensions(self, continuous_system):
        assert continuous_system.nx == 2
        assert continuous_system.nu == 1
        assert continuous_system.sampling_period == 0.0
        assert continuous_system.dimensions == SystemDimensions(2, 1, 0.0)

    def test_sampled_flag(self, continuous_system, sampled_system):
        assert not continuous_system.is_sampled
        assert continuous_system.is_continuous
        assert sampled_system.is_sampled
        assert sampled_system.sampling_period == 0.1

    def test_non_square_A_raises(self, B):
        with pytest.raises(DimensionMismatchError, match="square"):
            LinearSystem(np.ones((2, 3)), B)

    def test_B_row_mismatch_raises(self, A):
        with pytest.raises(DimensionMismatchError, match="rows"):
            LinearSystem(A, np.ones((3, 1)))

    def test_one_dimensional_B_is_a_column(self, A):
        system = LinearSystem(A, np.array([0.0, 1.0]))
        assert system.B.shape == (2, 1)
        assert system.nu == 1

    def test_list_input(self):
        system = LinearSystem([[1.0, 0.0], [0.0, 1.0]], [[1.0], [0.0]], sampling_period=0.5)
        assert isinstance(system.A, np.ndarray)
        assert system.nx == 2

    def test_autonomous_system(self, A):
        system = LinearSystem(A, np.zeros((2, 0)))
        assert system.nu == 0
        assert_allclose(system.dx(np.array([1.0, 0.0]), None), A @ np.array([1.0, 0.0]))

    @pytest.mark.parametrize("dt", [-0.1, np.inf, np.nan])
    def test_invalid_sampling_period_raises(self, A, B, dt):
        with pytest.raises(PreconditionError, match="sampling period"):
            LinearSystem(A, B, sampling_period=dt)

    def test_integer_matrices_are_promoted(self):
        system = LinearSystem(np.array([[1, 0], [0, 1]]), np.array([[1], [0]]), sampling_period=1.0)
        assert system.A.dtype == np.float64


# ============================================================================
# Dynamics
# ============================================================================


class TestDynamics:
    """Test time-domain preconditions of dx and next_x."""

    def test_dx(self, continuous_system, A, B):
        x = np.array([1.0, -1.0])
        u = np.array([0.5])
        assert_allclose(continuous_system.dx(x, u, 0.0), A @ x + B @ u)

    def test_dx_ignores_time(self, continuous_system):
        x = np.array([1.0, 2.0])
        u = np.array([3.0])
        assert_array_equal(continuous_system.dx(x, u, 0.0), continuous_system.dx(x, u, 42.0))

    def test_next_x(self, sampled_system):
        x = np.array([1.0, -1.0])
        u = np.array([0.5])
        expected = sampled_system.A @ x + sampled_system.B @ u
        assert_allclose(sampled_system.next_x(x, u), expected)

    def test_dx_on_sampled_system_raises(self, sampled_system):
        with pytest.raises(PreconditionError, match="continuous"):
            sampled_system.dx(np.zeros(2), np.zeros(1), 0.0)

    def test_next_x_on_continuous_system_raises(self, continuous_system):
        with pytest.raises(PreconditionError, match="sampled"):
            continuous_system.next_x(np.zeros(2), np.zeros(1))

    def test_dx_missing_input_raises(self, continuous_system):
        with pytest.raises(DimensionMismatchError, match="nu=1"):
            continuous_system.dx(np.array([1.0, 2.0]), None)

    def test_next_x_missing_input_raises(self):
        system = LinearSystem(np.eye(2), [[0.0], [1.0]], sampling_period=0.1)
        with pytest.raises(DimensionMismatchError, match="Input u is required"):
            system.next_x(np.array([1.0, 2.0]), None)


# ============================================================================
# Linearization
# ============================================================================


class TestLinearization:
    def test_linearize_returns_self(self, continuous_system, sampled_system):
        x, u = np.array([3.0, 4.0]), np.array([1.0])
        assert continuous_system.linearize(x, u, 0.0) is continuous_system
        assert sampled_system.linearize(x, u, 1.0) is sampled_system

    def test_linearization_style(self, continuous_system):
        assert continuous_system.linearization_style is LinearizationStyle.TRIVIAL


# ============================================================================
# Value Semantics
# ============================================================================


class TestValueSemantics:
    """Matrices are copied and frozen at construction."""

    def test_source_mutation_does_not_leak(self, A, B):
        system = LinearSystem(A, B)
        A[0, 0] = 100.0
        assert system.A[0, 0] == 0.0

    def test_stored_matrices_are_read_only(self, continuous_system):
        with pytest.raises(ValueError):
            continuous_system.A[0, 0] = 1.0

    def test_equality(self, A, B):
        assert LinearSystem(A, B) == LinearSystem(A.copy(), B.copy())
        assert LinearSystem(A, B) != LinearSystem(A, B, sampling_period=0.1)
        assert LinearSystem(A, B) != LinearSystem(A, 2 * B)

    def test_unhashable(self, continuous_system):
        with pytest.raises(TypeError):
            hash(continuous_system)

    def test_repr(self, sampled_system):
        assert "sampled" in repr(sampled_system)
        assert "nx=2" in repr(sampled_system)


# ============================================================================
# Backends
# ============================================================================


class TestBackends:
    def test_numpy_backend(self, continuous_system):
        assert continuous_system.backend == "numpy"
        assert continuous_system.to_numpy() is continuous_system

    @pytest.mark.skipif(not torch_available, reason="PyTorch not installed")
    def test_torch_round_trip(self, sampled_system):
        sys_torch = sampled_system.to_backend("torch")
        assert sys_torch.backend == "torch"
        assert isinstance(sys_torch.A, torch.Tensor)
        assert sys_torch == sampled_system

        x = torch.tensor([1.0, 2.0], dtype=torch.float64)
        u = torch.tensor([0.5], dtype=torch.float64)
        expected = sampled_system.next_x(np.array([1.0, 2.0]), np.array([0.5]))
        assert_allclose(sys_torch.next_x(x, u).numpy(), expected)

    @pytest.mark.skipif(not torch_available, reason="PyTorch not installed")
    def test_numpy_B_follows_torch_A(self):
        A = torch.eye(2, dtype=torch.float64)
        system = LinearSystem(A, np.array([[1.0], [0.0]]), sampling_period=0.1)
        assert isinstance(system.B, torch.Tensor)
        assert system.B.dtype == torch.float64
