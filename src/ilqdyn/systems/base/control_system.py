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
Control System Base Class
=========================

Abstract capability contract shared by every dynamics model that an
iterative LQ game solver can consume, linear or nonlinear.

A control system is tagged with a sampling period ΔT:
    ΔT == 0:  continuous time,  dx/dt  = f(x, u, t)   (dx)
    ΔT > 0:   sampled,          x[k+1] = f_d(x[k], u[k], k)   (next_x)

and can produce a linear model valid around a point (linearize).
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Optional

from ilqdyn.exceptions import PreconditionError
from ilqdyn.types.core import ControlVector, PositionIndex, StateIndex, StateVector, SystemDimensions

if TYPE_CHECKING:
    from ilqdyn.systems.linear.linear_system import LinearSystem


class LinearizationStyle(Enum):
    """
    How a solver obtains a local linear model from a system.

    TRIVIAL:  the system is already linear; linearize() returns stored dynamics
    JACOBIAN: linearize() evaluates the Jacobians of nonlinear dynamics
    """

    TRIVIAL = "trivial"
    JACOBIAN = "jacobian"


class ControlSystem(ABC):
    """
    Abstract base class for all control systems.

    Subclasses must implement:
    1. dimensions (property): SystemDimensions(nx, nu, sampling_period)
    2. next_x(x, u, t): discrete state update
    3. linearize(x, u, t): local LinearSystem

    Continuous-time models additionally override dx(x, u, t). Models with a
    planar position override xyindex().

    Examples
    --------
    >>> class Drift(ControlSystem):
    ...     dimensions = SystemDimensions(nx=1, nu=1, sampling_period=0.1)
    ...
    ...     def next_x(self, x, u, t=None):
    ...         return x + 0.1 * u
    ...
    ...     def linearize(self, x, u, t=None):
    ...         return LinearSystem(np.eye(1), 0.1 * np.eye(1), sampling_period=0.1)
    """

    # =========================================================================
    # Dimensions
    # =========================================================================

    @property
    @abstractmethod
    def dimensions(self) -> SystemDimensions:
        """Static dimensions and sampling period."""
        pass

    @property
    def nx(self) -> int:
        """Number of states."""
        return self.dimensions.nx

    @property
    def nu(self) -> int:
        """Number of inputs."""
        return self.dimensions.nu

    @property
    def sampling_period(self) -> float:
        """Sampling period in seconds (0.0 for continuous-time systems)."""
        return self.dimensions.sampling_period

    @property
    def is_sampled(self) -> bool:
        return self.dimensions.is_sampled

    @property
    def is_continuous(self) -> bool:
        return not self.dimensions.is_sampled

    @property
    def linearization_style(self) -> LinearizationStyle:
        return LinearizationStyle.JACOBIAN

    # =========================================================================
    # Dynamics
    # =========================================================================

    def dx(self, x: StateVector, u: ControlVector, t: Optional[float] = None) -> StateVector:
        """
        Continuous-time state derivative dx/dt = f(x, u, t).

        Raises
        ------
        NotImplementedError
            If the system has no continuous-time form
        """
        raise NotImplementedError(f"{self.__class__.__name__} does not define continuous dynamics")

    @abstractmethod
    def next_x(self, x: StateVector, u: ControlVector, t=None) -> StateVector:
        """
        Discrete-time state update x[k+1] = f_d(x[k], u[k], t).

        Only defined for sampled systems.
        """
        pass

    @abstractmethod
    def linearize(self, x: StateVector, u: ControlVector, t=None) -> "LinearSystem":
        """
        Local linear model valid at (x, u, t).

        The result has the same sampling period as the system it came from
        unless the model is continuous, in which case the caller discretizes.
        """
        pass

    # =========================================================================
    # Index Accessors
    # =========================================================================

    def xyindex(self) -> PositionIndex:
        """Indices of (px, py) in the state vector."""
        raise NotImplementedError(f"{self.__class__.__name__} does not declare position indices")

    def xindex(self) -> StateIndex:
        """Optional named subset of state indices."""
        return None

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_continuous(self, operation: str):
        if self.is_sampled:
            raise PreconditionError(
                f"{operation} requires a continuous-time system, but "
                f"{self.__class__.__name__} is sampled with period {self.sampling_period}"
            )

    def _require_sampled(self, operation: str):
        if not self.is_sampled:
            raise PreconditionError(
                f"{operation} requires a sampled system, but "
                f"{self.__class__.__name__} is continuous (sampling period 0)"
            )

    def __repr__(self) -> str:
        dims = self.dimensions
        return f"{self.__class__.__name__}(nx={dims.nx}, nu={dims.nu}, dt={dims.sampling_period})"


__all__ = ["ControlSystem", "LinearizationStyle"]
