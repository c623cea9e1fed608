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
Linear Time-Invariant System
============================

One sampled LinearSystem used at every step, annotated with the state
indices that hold the planar position.
"""

import operator
from typing import Optional, Sequence

import numpy as np

from ilqdyn.exceptions import PreconditionError
from ilqdyn.systems.base.control_system import ControlSystem, LinearizationStyle
from ilqdyn.systems.base.utils.backend_manager import default_backend_manager
from ilqdyn.systems.linear.linear_system import LinearSystem, as_array
from ilqdyn.types.core import (
    ControlSequence,
    ControlVector,
    PositionIndex,
    StateIndex,
    StateTrajectory,
    StateVector,
    SystemDimensions,
)


class LTISystem(ControlSystem):
    """
    Sampled linear time-invariant system with position indices.

    Parameters
    ----------
    dynamics : LinearSystem
        Sampled system used at every step
    xyids : Sequence[int]
        Exactly two state indices holding (px, py)
    xids : Optional[Sequence[int]]
        Optional named subset of state indices

    Raises
    ------
    PreconditionError
        If dynamics is continuous
    ValueError
        If xyids does not hold exactly two valid state indices, or xids
        holds an invalid index

    Examples
    --------
    >>> # Planar double integrator, state (px, py, vx, vy)
    >>> lti = LTISystem(discretize(ct, 0.1, method='exp'), xyids=(0, 1))
    >>> lti.xyindex()
    (0, 1)
    >>> lti[3] is lti[100]
    True
    """

    def __init__(self, dynamics: LinearSystem, xyids: Sequence[int], xids: Optional[Sequence[int]] = None):
        if not isinstance(dynamics, LinearSystem):
            raise TypeError(f"LTISystem wraps a LinearSystem, got {type(dynamics).__name__}")
        if not dynamics.is_sampled:
            raise PreconditionError("LTISystem requires a sampled LinearSystem")

        self._dynamics = dynamics
        self._xyids = self._validate_indices(xyids, "xyids")
        if len(self._xyids) != 2:
            raise ValueError(f"xyids must contain exactly 2 indices, got {len(self._xyids)}")
        self._xids = None if xids is None else self._validate_indices(xids, "xids")

    def _validate_indices(self, ids, name: str):
        try:
            ids = tuple(ids)
            if any(isinstance(i, (bool, np.bool_)) for i in ids):
                raise TypeError(f"{name} entries must not be booleans")
            ids = tuple(operator.index(i) for i in ids)
        except TypeError:
            raise ValueError(f"{name} must be a sequence of integers, got {ids!r}") from None

        nx = self._dynamics.nx
        for i in ids:
            if not 0 <= i < nx:
                raise ValueError(f"{name} index {i} is not a valid index into a state of size {nx}")
        return ids

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def dynamics(self) -> LinearSystem:
        return self._dynamics

    @property
    def dimensions(self) -> SystemDimensions:
        return self._dynamics.dimensions

    @property
    def linearization_style(self) -> LinearizationStyle:
        return LinearizationStyle.TRIVIAL

    def xyindex(self) -> PositionIndex:
        return self._xyids

    def xindex(self) -> StateIndex:
        return self._xids

    def __getitem__(self, k) -> LinearSystem:
        # Every step has the same dynamics
        return self._dynamics

    # =========================================================================
    # Dynamics
    # =========================================================================

    def next_x(self, x: StateVector, u: ControlVector, t=None) -> StateVector:
        return self._dynamics.next_x(x, u)

    def linearize(self, x: StateVector, u: ControlVector, t=None) -> LinearSystem:
        return self._dynamics

    def simulate(self, x0: StateVector, us: ControlSequence) -> StateTrajectory:
        """
        Propagate x0 through len(us) steps.

        Returns
        -------
        StateTrajectory
            Shape (len(us) + 1, nx)
        """
        x = as_array(x0, self._dynamics.A)
        states = [x]
        for u in us:
            x = self.next_x(x, as_array(u, x))
            states.append(x)
        return default_backend_manager.stack(states)

    def __repr__(self) -> str:
        return f"LTISystem({self._dynamics!r}, xyids={self._xyids}, xids={self._xids})"


__all__ = ["LTISystem"]
