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
Types Module - Type Definitions for ilqdyn

Central import point for all type definitions.

Module Organization
------------------
- core: Arrays, vectors, matrices, index sets, SystemDimensions
- backends: Backend and discretization method types, DiscretizationConfig
- utilities: Type guards and converters
"""

from .backends import (
    DEFAULT_BACKEND,
    DEFAULT_DISCRETIZATION_METHOD,
    VALID_BACKENDS,
    VALID_DISCRETIZATION_METHODS,
    Backend,
    DiscretizationConfig,
    DiscretizationMethod,
    validate_backend,
    validate_discretization_method,
)
from .core import (
    ArrayLike,
    ControlSequence,
    ControlVector,
    InputMatrix,
    PositionIndex,
    ScalarLike,
    StateIndex,
    StateMatrix,
    StateTrajectory,
    StateVector,
    SystemDimensions,
    TimeSequence,
)
from .utilities import ensure_numpy, get_backend, is_jax, is_numpy, is_torch

__all__ = [
    # core
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
    # backends
    "Backend",
    "VALID_BACKENDS",
    "DEFAULT_BACKEND",
    "DiscretizationMethod",
    "VALID_DISCRETIZATION_METHODS",
    "DEFAULT_DISCRETIZATION_METHOD",
    "DiscretizationConfig",
    "validate_backend",
    "validate_discretization_method",
    # utilities
    "is_numpy",
    "is_torch",
    "is_jax",
    "get_backend",
    "ensure_numpy",
]
