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
Core Types

Basic array, vector and matrix aliases shared by every system class, plus
the value-level dimension record used to check compatibility when systems
are composed.

Mathematical Form
-----------------
Continuous:  dx/dt  = A x + B u
Discrete:    x[k+1] = Φ x[k] + Γ u[k]

Where:
    x ∈ ℝ^nx  (StateVector)
    u ∈ ℝ^nu  (ControlVector)
    A, Φ      (StateMatrix, nx × nx)
    B, Γ      (InputMatrix, nx × nu)
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence, Tuple, Union

import numpy as np

from ilqdyn.exceptions import PreconditionError

if TYPE_CHECKING:
    import jax.numpy as jnp
    import torch


# ============================================================================
# Arrays
# ============================================================================

ArrayLike = Union[np.ndarray, "torch.Tensor", "jnp.ndarray"]
"""
Array from any supported backend (NumPy, PyTorch, JAX).

Backend-specific code dispatches on the detected backend; everything else
only relies on ``.shape`` and the ``@`` operator.
"""

ScalarLike = Union[float, int, np.number]

StateVector = ArrayLike
"""State vector x, shape (nx,)."""

ControlVector = ArrayLike
"""Control vector u, shape (nu,)."""

StateMatrix = ArrayLike
"""State matrix A (continuous) or Φ (discrete), shape (nx, nx)."""

InputMatrix = ArrayLike
"""Input matrix B (continuous) or Γ (discrete), shape (nx, nu)."""

StateTrajectory = ArrayLike
"""Sequence of states, shape (n_steps + 1, nx)."""

ControlSequence = Union[ArrayLike, Sequence[ControlVector]]
"""Sequence of controls, shape (n_steps, nu)."""

TimeSequence = Optional[Sequence[float]]

# ============================================================================
# Index Sets
# ============================================================================

PositionIndex = Tuple[int, int]
"""
Indices of the planar position (px, py) inside the state vector.

Consumers such as plotting or tracking use it to read
``(x[xyids[0]], x[xyids[1]])`` without knowing the full state layout.
"""

StateIndex = Optional[Tuple[int, ...]]
"""Optional named subset of state indices (None when not provided)."""


# ============================================================================
# Dimensions
# ============================================================================


@dataclass(frozen=True)
class SystemDimensions:
    """
    Static dimensions and sampling period of a control system.

    Attributes
    ----------
    nx : int
        Number of states (at least 1)
    nu : int
        Number of inputs (0 for autonomous systems)
    sampling_period : float
        Sampling period in seconds; 0.0 denotes continuous time

    Examples
    --------
    >>> dims = SystemDimensions(nx=4, nu=2, sampling_period=0.1)
    >>> dims.is_sampled
    True
    >>> SystemDimensions(2, 1).is_sampled
    False
    """

    nx: int
    nu: int
    sampling_period: float = 0.0

    def __post_init__(self):
        if isinstance(self.nx, bool) or not isinstance(self.nx, (int, np.integer)) or self.nx < 1:
            raise PreconditionError(f"nx must be a positive integer, got {self.nx!r}")
        if isinstance(self.nu, bool) or not isinstance(self.nu, (int, np.integer)) or self.nu < 0:
            raise PreconditionError(f"nu must be a non-negative integer, got {self.nu!r}")

        dt = float(self.sampling_period)
        if not math.isfinite(dt) or dt < 0:
            raise PreconditionError(
                f"sampling period must be finite and non-negative, got {self.sampling_period!r}"
            )

        # Normalize to plain Python scalars so records compare by value
        object.__setattr__(self, "nx", int(self.nx))
        object.__setattr__(self, "nu", int(self.nu))
        object.__setattr__(self, "sampling_period", dt)

    @property
    def is_sampled(self) -> bool:
        return self.sampling_period > 0

    def __str__(self) -> str:
        return f"(nx={self.nx}, nu={self.nu}, dt={self.sampling_period})"


__all__ = [
    "ArrayLike",
    "ScalarLike",
    "StateVector",
    "ControlVector",
    "StateMatrix",
    "InputMatrix",
    "StateTrajectory",
    "ControlSequence",
    "TimeSequence",
    "PositionIndex",
    "StateIndex",
    "SystemDimensions",
]
