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
Type Guards and Converters

Backend detection and conversion helpers used across the framework.
PyTorch and JAX are optional; guards return False when they are missing.
"""

import numpy as np

from .backends import Backend
from .core import ArrayLike


def is_numpy(x: ArrayLike) -> bool:
    """
    Check if array is NumPy ndarray.

    Examples
    --------
    >>> is_numpy(np.array([1, 2, 3]))
    True
    """
    return isinstance(x, np.ndarray)


def is_torch(x: ArrayLike) -> bool:
    """
    Check if array is PyTorch tensor.

    Examples
    --------
    >>> import torch
    >>> is_torch(torch.tensor([1, 2, 3]))
    True
    >>> is_torch(np.array([1, 2, 3]))
    False
    """
    try:
        import torch

        return isinstance(x, torch.Tensor)
    except ImportError:
        return False


def is_jax(x: ArrayLike) -> bool:
    """
    Check if array is JAX array.

    Examples
    --------
    >>> import jax.numpy as jnp
    >>> is_jax(jnp.array([1, 2, 3]))
    True
    """
    try:
        import jax.numpy as jnp

        return isinstance(x, jnp.ndarray)
    except ImportError:
        return False


def get_backend(x: ArrayLike) -> Backend:
    """
    Detect backend from array type.

    Raises
    ------
    TypeError
        If backend cannot be determined

    Examples
    --------
    >>> get_backend(np.array([1, 2, 3]))
    'numpy'
    """
    if is_numpy(x):
        return "numpy"
    elif is_torch(x):
        return "torch"
    elif is_jax(x):
        return "jax"
    else:
        raise TypeError(f"Unknown backend for type {type(x)}")


def ensure_numpy(x: ArrayLike) -> np.ndarray:
    """
    Convert to NumPy array regardless of backend.

    Examples
    --------
    >>> import torch
    >>> ensure_numpy(torch.tensor([1.0, 2.0]))
    array([1., 2.])
    """
    if is_torch(x):
        return x.detach().cpu().numpy()
    return np.asarray(x)


__all__ = [
    "is_numpy",
    "is_torch",
    "is_jax",
    "get_backend",
    "ensure_numpy",
]
