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
ilqdyn - Linear and Linear Time-Varying Dynamics for Iterative LQ Games

Provides the local dynamics model consumed by an iterative LQ game solver:

- LinearSystem: continuous or sampled (A, B) with a sampling period
- discretize / Discretizer: continuous → discrete conversion
  ('euler' default, 'exp' and 'inv' exact)
- LTVSystem: fixed-horizon sequence of per-step linearizations
- LTISystem: time-invariant system with position indices
- SymbolicControlSystem, Unicycle: nonlinear models with symbolic Jacobians

Examples
--------
>>> import numpy as np
>>> from ilqdyn import LinearSystem, discretize
>>>
>>> ct = LinearSystem(np.array([[0., 1.], [0., 0.]]), np.array([[0.], [1.]]))
>>> dt = discretize(ct, 0.1, method='exp')
>>> dt.next_x(np.zeros(2), np.array([1.0]))
array([0.005, 0.1  ])
"""

from .exceptions import DimensionMismatchError, NumericalDegeneracyError, PreconditionError, ValidationError
from .systems import (
    ControlSystem,
    Discretizer,
    LinearizationStyle,
    LinearSystem,
    LTISystem,
    LTVSystem,
    SymbolicControlSystem,
    Unicycle,
    discretize,
    discretize_euler,
    discretize_exp,
    discretize_inv,
)
from .types import DEFAULT_DISCRETIZATION_METHOD, DiscretizationConfig, SystemDimensions

__version__ = "0.1.0"

__all__ = [
    "ControlSystem",
    "LinearizationStyle",
    "SymbolicControlSystem",
    "LinearSystem",
    "LTVSystem",
    "LTISystem",
    "Discretizer",
    "discretize",
    "discretize_euler",
    "discretize_exp",
    "discretize_inv",
    "Unicycle",
    "SystemDimensions",
    "DiscretizationConfig",
    "DEFAULT_DISCRETIZATION_METHOD",
    "PreconditionError",
    "DimensionMismatchError",
    "NumericalDegeneracyError",
    "ValidationError",
]
