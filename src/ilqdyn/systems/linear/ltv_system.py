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
Linear Time-Varying System
==========================

Fixed-horizon sequence of sampled linear systems, one per time step:

    x[k+1] = Φ_k x[k] + Γ_k u[k],    k = 1, ..., h

Steps are numbered 1..h. The horizon is fixed at construction; a solver
that re-linearizes around an updated trajectory overwrites steps in place.
One owner writes at a time; distinct steps are independent slots.
"""

import operator
from typing import Iterator, List, Sequence

import numpy as np

from ilqdyn.exceptions import DimensionMismatchError, PreconditionError
from ilqdyn.systems.base.control_system import ControlSystem, LinearizationStyle
from ilqdyn.systems.base.utils.backend_manager import default_backend_manager
from ilqdyn.systems.linear.linear_system import LinearSystem, as_array
from ilqdyn.types.core import ControlSequence, ControlVector, StateTrajectory, StateVector, SystemDimensions


class LTVSystem(ControlSystem):
    """
    Ordered, fixed-length sequence of sampled LinearSystem steps.

    Parameters
    ----------
    dynamics : Sequence[LinearSystem]
        One sampled system per step. All must share
        (sampling_period, nx, nu).

    Raises
    ------
    PreconditionError
        If the sequence is empty or any step is continuous
    DimensionMismatchError
        If steps disagree in sampling period or dimensions
    TypeError
        If any element is not a LinearSystem

    Examples
    --------
    >>> steps = [LinearSystem(np.eye(2), np.ones((2, 1)), sampling_period=0.1)] * 5
    >>> ltv = LTVSystem(steps)
    >>> ltv.horizon
    5
    >>> ltv[1] is steps[0]
    True
    >>> ltv[0]  # IndexError: steps are numbered 1..5
    """

    def __init__(self, dynamics: Sequence[LinearSystem]):
        dynamics = list(dynamics)
        if len(dynamics) == 0:
            raise PreconditionError("LTVSystem requires at least one step")

        for system in dynamics:
            self._check_step(system)

        self._dimensions = dynamics[0].dimensions
        for k, system in enumerate(dynamics, start=1):
            if system.dimensions != self._dimensions:
                raise DimensionMismatchError(
                    f"Step {k} has dimensions {system.dimensions}, "
                    f"expected {self._dimensions} (from step 1)"
                )

        # Storage is allocated once; its length never changes
        self._dynamics: List[LinearSystem] = dynamics

    @staticmethod
    def _check_step(system):
        if not isinstance(system, LinearSystem):
            raise TypeError(f"LTVSystem steps must be LinearSystem instances, got {type(system).__name__}")
        if not system.is_sampled:
            raise PreconditionError("LTVSystem requires finite discretization steps (sampled systems)")

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def dimensions(self) -> SystemDimensions:
        return self._dimensions

    @property
    def horizon(self) -> int:
        """Number of steps h."""
        return len(self._dynamics)

    @property
    def linearization_style(self) -> LinearizationStyle:
        return LinearizationStyle.TRIVIAL

    # =========================================================================
    # Indexed Access
    # =========================================================================

    def _slot(self, k) -> int:
        if isinstance(k, (bool, np.bool_)):
            raise TypeError(f"LTVSystem steps are indexed by integers, got {type(k).__name__}")
        try:
            k = operator.index(k)
        except TypeError:
            raise TypeError(f"LTVSystem steps are indexed by integers, got {type(k).__name__}") from None

        if not 1 <= k <= self.horizon:
            raise IndexError(f"Step {k} out of range [1, {self.horizon}]")
        return k - 1

    def __getitem__(self, k) -> LinearSystem:
        """Dynamics of step k (1 ≤ k ≤ h)."""
        return self._dynamics[self._slot(k)]

    def __setitem__(self, k, system: LinearSystem):
        """
        Overwrite the dynamics of step k (1 ≤ k ≤ h).

        Raises
        ------
        IndexError
            If k is outside [1, h]
        PreconditionError
            If system is continuous
        DimensionMismatchError
            If system does not match the stored dimensions
        """
        slot = self._slot(k)
        self._check_step(system)
        if system.dimensions != self._dimensions:
            raise DimensionMismatchError(
                f"Cannot write {system.dimensions} into step {k} of an LTVSystem with {self._dimensions}"
            )
        self._dynamics[slot] = system

    def __len__(self) -> int:
        return len(self._dynamics)

    def __iter__(self) -> Iterator[LinearSystem]:
        return iter(list(self._dynamics))

    # =========================================================================
    # Dynamics
    # =========================================================================

    def next_x(self, x: StateVector, u: ControlVector, k: int) -> StateVector:
        """Next state using the dynamics of step k."""
        return self[k].next_x(x, u)

    def linearize(self, x: StateVector, u: ControlVector, k: int) -> LinearSystem:
        """The dynamics of step k (already linear)."""
        return self[k]

    def simulate(self, x0: StateVector, us: ControlSequence) -> StateTrajectory:
        """
        Propagate x0 through consecutive steps starting at step 1.

        Parameters
        ----------
        x0 : StateVector
            Initial state, shape (nx,)
        us : ControlSequence
            Inputs for steps 1..n, n ≤ h

        Returns
        -------
        StateTrajectory
            States x[1..n+1], shape (n + 1, nx), on the backend of the
            step matrices

        Raises
        ------
        DimensionMismatchError
            If more inputs than steps are given
        """
        if len(us) > self.horizon:
            raise DimensionMismatchError(f"{len(us)} inputs given for a horizon of {self.horizon}")

        x = as_array(x0, self._dynamics[0].A)
        states = [x]
        for k, u in enumerate(us, start=1):
            x = self.next_x(x, as_array(u, x), k)
            states.append(x)

        return default_backend_manager.stack(states)

    def __repr__(self) -> str:
        dims = self._dimensions
        return f"LTVSystem(h={self.horizon}, nx={dims.nx}, nu={dims.nu}, dt={dims.sampling_period})"


__all__ = ["LTVSystem"]
