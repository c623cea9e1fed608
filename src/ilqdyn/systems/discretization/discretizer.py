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
Discretizer - Converts Continuous-Time Linear Systems to Discrete-Time

Mathematical Form
-----------------
Continuous system: dx/dt  = A x + B u
Discrete system:   x[k+1] = Φ x[k] + Γ u[k]

with the input held constant over each step of length dt (zero-order hold).

Methods
-------
1. **Euler** ('euler') - first order approximation
   Φ = I + dt·A
   Γ = dt·B

   Pros: no matrix exponential, cheapest per call
   Cons: O(dt) error

2. **Augmented exponential** ('exp') - exact
   E = expm([[A, B], [0, 0]]·dt)
   Φ = E[:nx, :nx]
   Γ = E[:nx, nx:]

   Pros: exact, defined for singular A
   Cons: exponential of an (nx+nu) × (nx+nu) matrix

3. **Inverse** ('inv') - exact for invertible A
   Φ = expm(A·dt)
   Γ = A⁻¹(Φ - I)B

   Pros: exact, exponential of an nx × nx matrix only
   Cons: undefined for singular A (raises NumericalDegeneracyError)

Euler is the default (DEFAULT_DISCRETIZATION_METHOD). It is the right choice
when every step of a long horizon is re-discretized on every solver
iteration; pick 'exp' when accuracy matters more than speed.

Examples
--------
>>> ct = LinearSystem(np.array([[0., 1.], [0., 0.]]), np.array([[0.], [1.]]))
>>> dt_sys = discretize(ct, 0.1, method='exp')
>>> dt_sys.A
array([[1. , 0.1],
       [0. , 1. ]])
>>>
>>> # Configured converter used inside a solver loop
>>> discretizer = Discretizer(dt=0.1, method='euler')
>>> ltv = discretizer.linearize_trajectory(unicycle, xs, us)
"""

import logging
import math
import warnings
from typing import Any, Dict, Optional

import numpy as np
from scipy.linalg import expm

from ilqdyn.exceptions import DimensionMismatchError, NumericalDegeneracyError, PreconditionError
from ilqdyn.systems.base.control_system import ControlSystem
from ilqdyn.systems.base.utils.backend_manager import default_backend_manager
from ilqdyn.systems.linear.linear_system import LinearSystem
from ilqdyn.systems.linear.ltv_system import LTVSystem
from ilqdyn.types.backends import (
    DEFAULT_DISCRETIZATION_METHOD,
    Backend,
    DiscretizationConfig,
    DiscretizationMethod,
    validate_backend,
    validate_discretization_method,
)
from ilqdyn.types.core import ArrayLike, ControlSequence, ControlVector, StateVector, TimeSequence

logger = logging.getLogger(__name__)


# ============================================================================
# Validation
# ============================================================================


def _validate_step(dt) -> float:
    try:
        step = float(dt)
    except (TypeError, ValueError):
        raise PreconditionError(f"sampling period must be a real number, got {dt!r}") from None

    if not math.isfinite(step) or step <= 0:
        raise PreconditionError(f"sampling period must be positive and finite, got {dt!r}")
    return step


def _check_discretizable(system: LinearSystem, dt) -> float:
    if not isinstance(system, LinearSystem):
        raise TypeError(f"Expected a LinearSystem, got {type(system).__name__}")
    if system.is_sampled:
        raise PreconditionError(
            f"cannot discretize an already-discrete system (sampling period {system.sampling_period})"
        )
    return _validate_step(dt)


# ============================================================================
# Backend Primitives
# ============================================================================


def _eye(n: int, like: ArrayLike, backend: Backend) -> ArrayLike:
    if backend == "numpy":
        return np.eye(n, dtype=like.dtype)
    elif backend == "torch":
        import torch

        return torch.eye(n, dtype=like.dtype, device=like.device)
    elif backend == "jax":
        import jax.numpy as jnp

        return jnp.eye(n, dtype=like.dtype)


def _expm(M: ArrayLike, backend: Backend) -> ArrayLike:
    if backend == "numpy":
        return expm(M)
    elif backend == "torch":
        import torch

        return torch.linalg.matrix_exp(M)
    elif backend == "jax":
        from jax.scipy.linalg import expm as jax_expm

        return jax_expm(M)


def _augmented(A: ArrayLike, B: ArrayLike, backend: Backend) -> ArrayLike:
    """Block matrix [[A, B], [0, 0]] of size (nx+nu) × (nx+nu)."""
    nx, nu = A.shape[0], B.shape[1]

    if backend == "numpy":
        return np.block([[A, B], [np.zeros((nu, nx + nu), dtype=A.dtype)]])
    elif backend == "torch":
        import torch

        top = torch.cat([A, B], dim=1)
        bottom = torch.zeros((nu, nx + nu), dtype=A.dtype, device=A.device)
        return torch.cat([top, bottom], dim=0)
    elif backend == "jax":
        import jax.numpy as jnp

        return jnp.block([[A, B], [jnp.zeros((nu, nx + nu), dtype=A.dtype)]])


def _is_singular(A: ArrayLike, backend: Backend) -> bool:
    if backend == "numpy":
        return np.linalg.matrix_rank(A) < A.shape[0]
    elif backend == "torch":
        import torch

        return int(torch.linalg.matrix_rank(A)) < A.shape[0]
    elif backend == "jax":
        import jax.numpy as jnp

        return int(jnp.linalg.matrix_rank(A)) < A.shape[0]


def _solve(A: ArrayLike, rhs: ArrayLike, backend: Backend) -> ArrayLike:
    if backend == "numpy":
        return np.linalg.solve(A, rhs)
    elif backend == "torch":
        import torch

        return torch.linalg.solve(A, rhs)
    elif backend == "jax":
        import jax.numpy as jnp

        return jnp.linalg.solve(A, rhs)


def _all_finite(M: ArrayLike, backend: Backend) -> bool:
    if backend == "numpy":
        return bool(np.all(np.isfinite(M)))
    elif backend == "torch":
        import torch

        return bool(torch.isfinite(M).all())
    elif backend == "jax":
        import jax.numpy as jnp

        return bool(jnp.isfinite(M).all())


def _finish(Phi: ArrayLike, Gamma: ArrayLike, dt: float, backend: Backend, method: str, check_finite: bool) -> LinearSystem:
    if not (_all_finite(Phi, backend) and _all_finite(Gamma, backend)):
        msg = f"'{method}' discretization with dt={dt} produced non-finite entries"
        if check_finite:
            raise NumericalDegeneracyError(msg)
        warnings.warn(msg, UserWarning, stacklevel=3)
    return LinearSystem(Phi, Gamma, sampling_period=dt)


# ============================================================================
# Discretization Methods
# ============================================================================


def discretize_inv(system: LinearSystem, dt: float, check_finite: bool = True) -> LinearSystem:
    """
    Zero-order-hold discretization through the inverse of A.

    Φ = expm(A·dt)
    Γ = A⁻¹(Φ - I)B

    Raises
    ------
    PreconditionError
        If system is already sampled or dt is not positive
    NumericalDegeneracyError
        If A is singular (use discretize_exp instead)
    """
    dt = _check_discretizable(system, dt)
    A, B = system.A, system.B
    backend = system.backend

    if _is_singular(A, backend):
        raise NumericalDegeneracyError(
            "A is singular; the inverse discretization is undefined. Use method='exp' instead."
        )

    Phi = _expm(A * dt, backend)
    try:
        Gamma = _solve(A, (Phi - _eye(system.nx, A, backend)) @ B, backend)
    except np.linalg.LinAlgError as e:
        raise NumericalDegeneracyError(f"A could not be inverted: {e}") from e

    return _finish(Phi, Gamma, dt, backend, "inv", check_finite)


def discretize_exp(system: LinearSystem, dt: float, check_finite: bool = True) -> LinearSystem:
    """
    Zero-order-hold discretization through the augmented matrix exponential.

    E = expm([[A, B], [0, 0]]·dt),  Φ = E[:nx, :nx],  Γ = E[:nx, nx:]

    Well-defined for singular A.

    Raises
    ------
    PreconditionError
        If system is already sampled or dt is not positive
    """
    dt = _check_discretizable(system, dt)
    backend = system.backend
    nx = system.nx

    E = _expm(_augmented(system.A, system.B, backend) * dt, backend)
    Phi = E[:nx, :nx]
    Gamma = E[:nx, nx:]

    return _finish(Phi, Gamma, dt, backend, "exp", check_finite)


def discretize_euler(system: LinearSystem, dt: float, check_finite: bool = True) -> LinearSystem:
    """
    First-order (forward Euler) discretization.

    Φ = I + dt·A
    Γ = dt·B

    Raises
    ------
    PreconditionError
        If system is already sampled or dt is not positive
    """
    dt = _check_discretizable(system, dt)
    backend = system.backend

    Phi = _eye(system.nx, system.A, backend) + dt * system.A
    Gamma = dt * system.B

    return _finish(Phi, Gamma, dt, backend, "euler", check_finite)


_METHODS = {
    "euler": discretize_euler,
    "exp": discretize_exp,
    "inv": discretize_inv,
}


def discretize(
    system: LinearSystem,
    dt: float,
    method: DiscretizationMethod = DEFAULT_DISCRETIZATION_METHOD,
    check_finite: bool = True,
) -> LinearSystem:
    """
    Convert a continuous LinearSystem to a sampled one with period dt.

    Parameters
    ----------
    system : LinearSystem
        Continuous-time system (sampling period 0)
    dt : float
        Sampling period, finite and positive
    method : DiscretizationMethod
        'euler' (default), 'exp' or 'inv'. The default favors speed over
        exactness, see the module documentation.
    check_finite : bool
        Raise NumericalDegeneracyError on non-finite results

    Returns
    -------
    LinearSystem
        Sampled system with sampling_period == dt

    Raises
    ------
    PreconditionError
        "cannot discretize an already-discrete system" or
        "sampling period must be positive"
    ValueError
        If method is unknown
    NumericalDegeneracyError
        If method='inv' and A is singular

    Examples
    --------
    >>> discretize(ct, 0.1)              # Euler
    >>> discretize(ct, 0.1, method='exp')  # exact
    """
    method = validate_discretization_method(method)
    return _METHODS[method](system, dt, check_finite=check_finite)


# ============================================================================
# Discretizer
# ============================================================================


class Discretizer:
    """
    Configured continuous → discrete converter for a fixed time step.

    Holds the time step, method and output backend so that the outer solver
    makes the speed/accuracy choice once, explicitly, and then converts every
    per-step linearization the same way.

    Attributes
    ----------
    dt : float
        Time step for discretization
    method : DiscretizationMethod
        Conversion algorithm
    backend : Optional[Backend]
        Backend of produced matrices (None keeps the backend of A)
    check_finite : bool
        Raise on non-finite results (warn when False)

    Examples
    --------
    >>> discretizer = Discretizer(dt=0.1, method='exp')
    >>> sys_d = discretizer(sys_c)
    >>>
    >>> # From a configuration dictionary
    >>> discretizer = Discretizer(dt=0.1, config={'method': 'euler', 'backend': 'torch'})
    >>>
    >>> # Linearize a nonlinear model along a trajectory
    >>> ltv = discretizer.linearize_trajectory(unicycle, xs, us)
    >>> discretizer.relinearize(ltv, unicycle, xs_new, us_new)
    """

    def __init__(
        self,
        dt: float,
        method: Optional[DiscretizationMethod] = None,
        backend: Optional[Backend] = None,
        config: Optional[DiscretizationConfig] = None,
    ):
        """
        Initialize discretizer.

        Explicit keyword arguments take precedence over config entries.

        Raises
        ------
        PreconditionError
            If dt is not positive and finite
        ValueError
            If method or backend is unknown
        RuntimeError
            If backend is not installed
        """
        config = config or {}

        self.dt = _validate_step(dt)
        self.method = validate_discretization_method(
            method or config.get("method", DEFAULT_DISCRETIZATION_METHOD)
        )

        backend = backend or config.get("backend")
        if backend is not None:
            backend = validate_backend(backend)
            default_backend_manager.require_backend(backend)
        self.backend = backend

        self.check_finite = config.get("check_finite", True)

    # ========================================================================
    # Primary Interface
    # ========================================================================

    def discretize(self, system: LinearSystem) -> LinearSystem:
        """Convert one continuous LinearSystem with the configured dt and method."""
        if self.backend is not None and isinstance(system, LinearSystem):
            system = system.to_backend(self.backend)

        logger.debug("Discretizing %r with method=%s, dt=%s", system, self.method, self.dt)
        return discretize(system, self.dt, method=self.method, check_finite=self.check_finite)

    def __call__(self, system: LinearSystem) -> LinearSystem:
        return self.discretize(system)

    # ========================================================================
    # Linearization
    # ========================================================================

    def linearize(
        self,
        system: ControlSystem,
        x: StateVector,
        u: ControlVector,
        t: Optional[float] = None,
    ) -> LinearSystem:
        """
        Discrete-time linear model of system at (x, u, t).

        Continuous linearizations are discretized; sampled ones must already
        use this discretizer's dt and are returned unchanged.

        Raises
        ------
        PreconditionError
            If system is an LTVSystem, or its linearization is sampled
            with a different period
        """
        if isinstance(system, LTVSystem):
            raise PreconditionError(
                "LTVSystem is already a discrete per-step model; index its steps "
                "directly instead of linearizing it in time"
            )
        local = system.linearize(x, u, t)

        if local.is_continuous:
            return self.discretize(local)

        if not math.isclose(local.sampling_period, self.dt, rel_tol=1e-12, abs_tol=0.0):
            raise PreconditionError(
                f"{system.__class__.__name__} is sampled with period {local.sampling_period}, "
                f"which does not match the discretizer dt={self.dt}"
            )
        if self.backend is not None:
            local = local.to_backend(self.backend)
        return local

    def linearize_trajectory(
        self,
        system: ControlSystem,
        xs: ArrayLike,
        us: ControlSequence,
        ts: TimeSequence = None,
    ) -> LTVSystem:
        """
        Linearize and discretize system at every step of a trajectory.

        Parameters
        ----------
        system : ControlSystem
            Model to linearize
        xs : ArrayLike
            States, shape (h, nx) or (h + 1, nx); only the first h are used
        us : ControlSequence
            Inputs, shape (h, nu); h is the horizon of the result
        ts : TimeSequence
            Time of each step (default: k·dt for k = 0..h-1)

        Returns
        -------
        LTVSystem
            One discrete system per step, steps numbered 1..h
        """
        steps = [self.linearize(system, x, u, t) for x, u, t in self._points(xs, us, ts)]
        return LTVSystem(steps)

    def relinearize(
        self,
        ltv: LTVSystem,
        system: ControlSystem,
        xs: ArrayLike,
        us: ControlSequence,
        ts: TimeSequence = None,
    ) -> LTVSystem:
        """
        Overwrite every step of ltv in place with linearizations along a new trajectory.

        Raises
        ------
        DimensionMismatchError
            If len(us) differs from the horizon of ltv
        """
        if len(us) != ltv.horizon:
            raise DimensionMismatchError(
                f"Trajectory has {len(us)} inputs but the LTVSystem horizon is {ltv.horizon}"
            )

        for k, (x, u, t) in enumerate(self._points(xs, us, ts), start=1):
            ltv[k] = self.linearize(system, x, u, t)

        logger.debug("Relinearized %d steps of %r", ltv.horizon, ltv)
        return ltv

    def _points(self, xs: ArrayLike, us: ControlSequence, ts: TimeSequence):
        h = len(us)
        if h == 0:
            raise PreconditionError("Trajectory must contain at least one input")
        if len(xs) < h:
            raise DimensionMismatchError(f"Trajectory has {len(xs)} states for {h} inputs")
        if ts is None:
            ts = [k * self.dt for k in range(h)]
        elif len(ts) < h:
            raise DimensionMismatchError(f"Trajectory has {len(ts)} times for {h} inputs")

        return [(xs[k], us[k], ts[k]) for k in range(h)]

    # ========================================================================
    # Utility Methods
    # ========================================================================

    def set_dt(self, new_dt: float):
        """
        Change the time step.

        Raises
        ------
        PreconditionError
            If new_dt is not positive and finite
        """
        new_dt = _validate_step(new_dt)
        logger.debug("Time step changed: %.6f -> %.6f", self.dt, new_dt)
        self.dt = new_dt

    def get_info(self) -> Dict[str, Any]:
        """
        Get discretizer configuration.

        Examples
        --------
        >>> Discretizer(dt=0.1).get_info()['method']
        'euler'
        """
        return {
            "dt": self.dt,
            "method": self.method,
            "backend": self.backend,
            "check_finite": self.check_finite,
            "exact": self.method != "euler",
        }

    def __repr__(self) -> str:
        return f"Discretizer(dt={self.dt}, method={self.method}, backend={self.backend})"


__all__ = [
    "discretize",
    "discretize_euler",
    "discretize_exp",
    "discretize_inv",
    "Discretizer",
]
