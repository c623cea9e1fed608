# Copyright (C) 2025 Gil Benezer
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Linear System
=============

A single linear model tagged with its sampling period:

    continuous (ΔT == 0):  dx/dt  = A x + B u
    sampled    (ΔT > 0):   x[k+1] = A x[k] + B u[k]

The same two matrices serve both forms; the sampling period decides which
operations are legal. Instances are immutable values.
"""

from typing import Optional

import numpy as np

from ilqdyn.exceptions import DimensionMismatchError
from ilqdyn.systems.base.control_system import ControlSystem, LinearizationStyle
from ilqdyn.systems.base.utils.backend_manager import default_backend_manager
from ilqdyn.types.backends import Backend
from ilqdyn.types.core import (
    ArrayLike,
    ControlVector,
    InputMatrix,
    StateMatrix,
    StateVector,
    SystemDimensions,
)


class LinearSystem(ControlSystem):
    """
    Linear control system (A, B) with a fixed sampling period.

    Parameters
    ----------
    A : StateMatrix
        State transition matrix, shape (nx, nx)
    B : InputMatrix
        Control input matrix, shape (nx, nu). A 1-D array of length nx is
        read as a single input column.
    sampling_period : float, default=0.0
        Sampling period in seconds; 0.0 means continuous time

    Raises
    ------
    DimensionMismatchError
        If A is not square or B does not have nx rows
    PreconditionError
        If sampling_period is negative or not finite

    Examples
    --------
    >>> # Continuous double integrator
    >>> ct = LinearSystem(np.array([[0., 1.], [0., 0.]]), np.array([[0.], [1.]]))
    >>> ct.dx(np.array([0., 1.]), np.array([2.]))
    array([1., 2.])
    >>>
    >>> # Sampled system
    >>> dt = LinearSystem(np.eye(2), np.array([[0.], [0.1]]), sampling_period=0.1)
    >>> dt.next_x(np.zeros(2), np.array([1.]))
    array([0. , 0.1])
    """

    def __init__(self, A: StateMatrix, B: InputMatrix, sampling_period: float = 0.0):
        mgr = default_backend_manager

        if isinstance(A, (list, tuple)) or np.isscalar(A):
            A = np.atleast_2d(np.asarray(A, dtype=float))
        backend = mgr.detect(A)
        B = mgr.convert(B, backend)
        if backend == "torch":
            B = B.to(dtype=A.dtype, device=A.device)

        if len(A.shape) != 2 or A.shape[0] != A.shape[1]:
            raise DimensionMismatchError(f"A must be a square (nx, nx) matrix, got shape {tuple(A.shape)}")
        nx = A.shape[0]

        if len(B.shape) == 1 and B.shape[0] == nx:
            B = B.reshape(nx, 1)
        if len(B.shape) != 2 or B.shape[0] != nx:
            raise DimensionMismatchError(
                f"B must be an (nx, nu) matrix with nx={nx} rows, got shape {tuple(B.shape)}"
            )

        self._dimensions = SystemDimensions(nx=nx, nu=B.shape[1], sampling_period=sampling_period)
        self._A = mgr.frozen_copy(A)
        self._B = mgr.frozen_copy(B)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def A(self) -> StateMatrix:
        """State transition matrix (read-only)."""
        return self._A

    @property
    def B(self) -> InputMatrix:
        """Control input matrix (read-only)."""
        return self._B

    @property
    def dimensions(self) -> SystemDimensions:
        return self._dimensions

    @property
    def backend(self) -> Backend:
        """Backend the matrices are stored in."""
        return default_backend_manager.detect(self._A)

    @property
    def linearization_style(self) -> LinearizationStyle:
        return LinearizationStyle.TRIVIAL

    # =========================================================================
    # Dynamics
    # =========================================================================

    def dx(self, x: StateVector, u: ControlVector, t: Optional[float] = None) -> StateVector:
        """
        State derivative A x + B u.

        t is accepted for interface uniformity and ignored.

        Raises
        ------
        PreconditionError
            If the system is sampled
        """
        self._require_continuous("dx")
        return self._apply(x, u)

    def next_x(self, x: StateVector, u: ControlVector, t=None) -> StateVector:
        """
        Next state A x + B u.

        Raises
        ------
        PreconditionError
            If the system is continuous
        """
        self._require_sampled("next_x")
        return self._apply(x, u)

    def linearize(self, x: StateVector, u: ControlVector, t=None) -> "LinearSystem":
        """A linear system is its own linearization at every point."""
        return self

    def _apply(self, x: StateVector, u: Optional[ControlVector]) -> StateVector:
        if u is None:
            if self.nu > 0:
                raise DimensionMismatchError(
                    f"Input u is required for a system with nu={self.nu}, got None"
                )
            return self._A @ x
        if self.nu == 0:
            return self._A @ x
        return self._A @ x + self._B @ u

    # =========================================================================
    # Conversion
    # =========================================================================

    def to_backend(self, backend: Backend) -> "LinearSystem":
        """
        Same system with matrices on another backend.

        Examples
        --------
        >>> sys_torch = sys.to_backend('torch')
        >>> type(sys_torch.A)
        <class 'torch.Tensor'>
        """
        if backend == self.backend:
            return self
        mgr = default_backend_manager
        return LinearSystem(
            mgr.convert(self._A, backend),
            mgr.convert(self._B, backend),
            sampling_period=self.sampling_period,
        )

    def to_numpy(self) -> "LinearSystem":
        return self.to_backend("numpy")

    # =========================================================================
    # Value Semantics
    # =========================================================================

    def __eq__(self, other) -> bool:
        if not isinstance(other, LinearSystem):
            return NotImplemented
        if self._dimensions != other._dimensions:
            return False
        mgr = default_backend_manager
        return bool(
            np.array_equal(mgr.to_numpy(self._A), mgr.to_numpy(other._A))
            and np.array_equal(mgr.to_numpy(self._B), mgr.to_numpy(other._B))
        )

    __hash__ = None

    def __repr__(self) -> str:
        domain = "sampled" if self.is_sampled else "continuous"
        return (
            f"LinearSystem(nx={self.nx}, nu={self.nu}, "
            f"dt={self.sampling_period}, {domain}, backend={self.backend})"
        )


def as_array(x: ArrayLike, like: ArrayLike) -> ArrayLike:
    """Convert x to the backend of like (lists and tuples become NumPy first)."""
    mgr = default_backend_manager
    return mgr.convert(x, mgr.detect(like))


__all__ = ["LinearSystem"]
