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
Backend Manager for Multi-Backend Matrix Handling

Handles:
- Backend detection from array types
- Backend availability checking
- Array conversion between backends
- Frozen copies for immutable system matrices

Linear systems store their matrices in whichever backend they were built
with; this class is what keeps A and B on the same backend and lets the
discretizer return Φ, Γ on a requested backend.
"""

from typing import List

import numpy as np

from ilqdyn.types.backends import Backend, validate_backend
from ilqdyn.types.core import ArrayLike
from ilqdyn.types.utilities import ensure_numpy, is_jax, is_numpy, is_torch


class BackendManager:
    """
    Detects, validates and converts array backends.

    Supports NumPy, PyTorch, and JAX backends. NumPy is always available;
    the others are detected at construction.

    Example:
        >>> mgr = BackendManager()
        >>> mgr.detect(np.eye(2))
        'numpy'
        >>>
        >>> # Convert between backends
        >>> A_torch = mgr.convert(np.eye(2), 'torch')
        >>>
        >>> # Read-only copy for storage inside a LinearSystem
        >>> A = mgr.frozen_copy(np.eye(2))
        >>> A.flags.writeable
        False
    """

    def __init__(self):
        self._available_backends = self._detect_available_backends()

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def available_backends(self) -> List[Backend]:
        """Get list of available backends"""
        return self._available_backends.copy()

    # ========================================================================
    # Backend Detection
    # ========================================================================

    def _detect_available_backends(self) -> List[Backend]:
        available: List[Backend] = ["numpy"]

        try:
            import torch  # noqa: F401

            available.append("torch")
        except ImportError:
            pass

        try:
            import jax  # noqa: F401

            available.append("jax")
        except ImportError:
            pass

        return available

    def detect(self, array: ArrayLike) -> Backend:
        """
        Detect backend from array type.

        Raises:
            TypeError: If array type is not recognized

        Example:
            >>> mgr = BackendManager()
            >>> mgr.detect(np.array([1.0]))
            'numpy'
        """
        if is_torch(array):
            return "torch"
        elif is_jax(array):
            return "jax"
        elif is_numpy(array):
            return "numpy"
        else:
            raise TypeError(
                f"Unknown input type: {type(array)}. "
                f"Expected np.ndarray, torch.Tensor, or jax.numpy.ndarray"
            )

    def check_available(self, backend: Backend) -> bool:
        """Check if a backend is available."""
        return backend in self._available_backends

    def require_backend(self, backend: Backend):
        """
        Raise error if backend is not available.

        Raises:
            RuntimeError: If backend is not available
        """
        if not self.check_available(backend):
            if backend == "torch":
                msg = "PyTorch backend not available. Install with: pip install torch"
            elif backend == "jax":
                msg = "JAX backend not available. Install with: pip install jax jaxlib"
            else:
                msg = f"Backend '{backend}' not available"

            raise RuntimeError(msg)

    # ========================================================================
    # Array Conversion
    # ========================================================================

    def convert(self, array: ArrayLike, target_backend: Backend) -> ArrayLike:
        """
        Convert array to target backend.

        Lists and scalars are accepted and treated as NumPy input.
        Floating point precision is kept at float64 for NumPy sources so that
        discretization results do not silently lose accuracy.

        Raises:
            RuntimeError: If target backend is not available
            ValueError: If target backend is invalid
        """
        target_backend = validate_backend(target_backend)
        self.require_backend(target_backend)

        if not (is_numpy(array) or is_torch(array) or is_jax(array)):
            array = np.asarray(array, dtype=float)

        source_backend = self.detect(array)
        if source_backend == target_backend:
            return array

        array_np = ensure_numpy(array)

        if target_backend == "numpy":
            return array_np
        elif target_backend == "torch":
            import torch

            dtype = torch.float32 if array_np.dtype == np.float32 else torch.float64
            return torch.as_tensor(array_np, dtype=dtype)
        elif target_backend == "jax":
            import jax.numpy as jnp

            return jnp.asarray(array_np)
        else:
            raise RuntimeError(f"Unhandled target backend: {target_backend}")

    def frozen_copy(self, array: ArrayLike) -> ArrayLike:
        """
        Return a copy of array that later writes to the source cannot reach.

        NumPy copies are also marked read-only. PyTorch tensors are cloned
        and detached; JAX arrays are immutable and returned as-is.
        """
        backend = self.detect(array)

        if backend == "numpy":
            copy = np.array(array, dtype=np.result_type(array.dtype, np.float64), copy=True)
            copy.flags.writeable = False
            return copy
        elif backend == "torch":
            return array.detach().clone()
        return array

    def stack(self, arrays: List[ArrayLike]) -> ArrayLike:
        """Stack same-backend arrays along a new leading axis."""
        backend = self.detect(arrays[0])

        if backend == "numpy":
            return np.stack(arrays)
        elif backend == "torch":
            import torch

            return torch.stack(arrays)
        elif backend == "jax":
            import jax.numpy as jnp

            return jnp.stack(arrays)

    def to_numpy(self, array: ArrayLike) -> np.ndarray:
        """Convert any backend array to NumPy."""
        return ensure_numpy(array)

    def __repr__(self) -> str:
        return f"BackendManager(available={self._available_backends})"


# Shared instance: availability only depends on the environment
default_backend_manager = BackendManager()


__all__ = ["BackendManager", "default_backend_manager"]
