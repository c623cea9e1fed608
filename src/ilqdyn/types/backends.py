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
Backend and Configuration Types

Defines types for:
- Computational backends (NumPy, PyTorch, JAX)
- Continuous → discrete conversion methods
- Discretizer configuration dictionaries

Usage
-----
>>> from ilqdyn.types.backends import Backend, DiscretizationConfig
>>>
>>> config: DiscretizationConfig = {'method': 'exp', 'backend': 'numpy'}
>>> discretizer = Discretizer(dt=0.1, config=config)
"""

from typing import Literal, Optional, Tuple

from typing_extensions import TypedDict


# ============================================================================
# Backend Types
# ============================================================================

Backend = Literal["numpy", "torch", "jax"]
"""
Backend identifier for numerical computation.

Valid values:
- 'numpy': NumPy arrays with SciPy linear algebra (default)
- 'torch': PyTorch tensors
- 'jax': JAX arrays
"""

VALID_BACKENDS: Tuple[str, ...] = ("numpy", "torch", "jax")

DEFAULT_BACKEND: Backend = "numpy"


# ============================================================================
# Discretization Methods
# ============================================================================

DiscretizationMethod = Literal["euler", "exp", "inv"]
"""
Continuous → discrete conversion method for linear systems.

- 'euler': First order, Φ = I + dt·A, Γ = dt·B. O(dt) error, no
  matrix exponential. Cheapest; suited to repeated re-linearization.
- 'exp':   Zero-order hold through the exponential of the augmented
  matrix [[A, B], [0, 0]]. Exact, defined for singular A.
- 'inv':   Zero-order hold through Φ = exp(A·dt), Γ = A⁻¹(Φ - I)B.
  Exact, undefined for singular A.
"""

VALID_DISCRETIZATION_METHODS: Tuple[str, ...] = ("euler", "exp", "inv")

DEFAULT_DISCRETIZATION_METHOD: DiscretizationMethod = "euler"
"""
Method used when none is requested.

Euler trades exactness for speed: it skips the matrix exponential, which
matters when every step of a long horizon is re-discretized on every solver
iteration. Pass method='exp' (or 'inv' for invertible A) when the O(dt)
error is not acceptable.
"""


class DiscretizationConfig(TypedDict, total=False):
    """
    Discretizer configuration dictionary.

    Attributes
    ----------
    method : DiscretizationMethod
        Conversion algorithm (default: DEFAULT_DISCRETIZATION_METHOD)
    backend : Optional[Backend]
        Backend of the produced matrices. None keeps the backend of A.
    check_finite : bool
        Raise NumericalDegeneracyError on NaN/Inf entries (default True).
        When False, a UserWarning is emitted instead.

    Examples
    --------
    >>> # Exact conversion for a one-off model
    >>> config: DiscretizationConfig = {'method': 'exp'}
    >>>
    >>> # Fast conversion inside a solver loop, on PyTorch
    >>> config: DiscretizationConfig = {
    ...     'method': 'euler',
    ...     'backend': 'torch',
    ...     'check_finite': False,
    ... }
    """

    method: DiscretizationMethod
    backend: Optional[Backend]
    check_finite: bool


# ============================================================================
# Validation
# ============================================================================


def validate_backend(backend: str) -> Backend:
    """
    Validate and normalize backend string.

    Raises
    ------
    ValueError
        If backend is not valid

    Examples
    --------
    >>> validate_backend('numpy')
    'numpy'
    >>> validate_backend('pytorch')  # ValueError
    """
    if backend not in VALID_BACKENDS:
        raise ValueError(f"Invalid backend '{backend}'. " f"Choose from: {VALID_BACKENDS}")
    return backend


def validate_discretization_method(method: str) -> DiscretizationMethod:
    """
    Validate discretization method name.

    Raises
    ------
    ValueError
        If method is unknown

    Examples
    --------
    >>> validate_discretization_method('exp')
    'exp'
    >>> validate_discretization_method('tustin')  # ValueError
    """
    if method not in VALID_DISCRETIZATION_METHODS:
        raise ValueError(
            f"Unknown discretization method '{method}'. "
            f"Choose from: {VALID_DISCRETIZATION_METHODS}"
        )
    return method


__all__ = [
    "Backend",
    "VALID_BACKENDS",
    "DEFAULT_BACKEND",
    "DiscretizationMethod",
    "VALID_DISCRETIZATION_METHODS",
    "DEFAULT_DISCRETIZATION_METHOD",
    "DiscretizationConfig",
    "validate_backend",
    "validate_discretization_method",
]
