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
Symbolic Control System
=======================

Nonlinear continuous-time model dx/dt = f(x, u) defined with SymPy.

The Jacobians A = ∂f/∂x and B = ∂f/∂u are derived symbolically once at
construction and compiled with lambdify, so linearize() at each step of a
trajectory only evaluates NumPy functions.

Subclasses implement define_system() and never override __init__:

>>> class Pendulum(SymbolicControlSystem):
...     def define_system(self, g=9.81, l=1.0):
...         theta, omega = sp.symbols("theta omega", real=True)
...         tau = sp.symbols("tau", real=True)
...         g_sym, l_sym = sp.symbols("g l", positive=True)
...
...         self.state_vars = [theta, omega]
...         self.control_vars = [tau]
...         self.parameters = {g_sym: g, l_sym: l}
...         self._f_sym = sp.Matrix([omega, -g_sym / l_sym * sp.sin(theta) + tau])
>>>
>>> pendulum = Pendulum(l=0.5, sampling_period=0.05)
"""

from typing import Callable, Dict, List, Optional

import numpy as np
import sympy as sp

from ilqdyn.exceptions import PreconditionError, ValidationError
from ilqdyn.systems.base.control_system import ControlSystem
from ilqdyn.systems.linear.linear_system import LinearSystem
from ilqdyn.types.core import ControlVector, StateVector, SystemDimensions


class SymbolicControlSystem(ControlSystem):
    """
    Continuous-time nonlinear system defined by SymPy expressions.

    Parameters
    ----------
    *args, **kwargs
        Passed to define_system()
    sampling_period : float, default=0.0
        Period used by next_x(). 0.0 leaves the model purely continuous.
    n_substeps : int, default=1
        RK4 substeps per sampling period in next_x()

    Raises
    ------
    ValidationError
        If define_system() leaves an inconsistent definition
    """

    def __init__(self, *args, sampling_period: float = 0.0, n_substeps: int = 1, **kwargs):
        self.state_vars: List[sp.Symbol] = []
        self.control_vars: List[sp.Symbol] = []
        self.parameters: Dict[sp.Symbol, float] = {}
        self._f_sym: Optional[sp.Matrix] = None

        self.define_system(*args, **kwargs)
        self._validate()

        if n_substeps < 1:
            raise PreconditionError(f"n_substeps must be at least 1, got {n_substeps}")
        self.n_substeps = int(n_substeps)

        self._dimensions = SystemDimensions(
            nx=len(self.state_vars),
            nu=len(self.control_vars),
            sampling_period=sampling_period,
        )
        self._compile()

    def define_system(self, *args, **kwargs):
        """Populate state_vars, control_vars, parameters and _f_sym."""
        raise NotImplementedError(f"{self.__class__.__name__} must implement define_system()")

    # =========================================================================
    # Validation and Code Generation
    # =========================================================================

    def _validate(self):
        name = self.__class__.__name__
        errors = []

        if not self.state_vars:
            errors.append("state_vars is empty")
        for var in list(self.state_vars) + list(self.control_vars):
            if not isinstance(var, sp.Symbol):
                errors.append(f"{var!r} is not a sympy Symbol")

        if not isinstance(self._f_sym, sp.MatrixBase):
            errors.append("_f_sym must be a sympy Matrix")
        elif self._f_sym.shape != (len(self.state_vars), 1):
            errors.append(
                f"_f_sym has shape {self._f_sym.shape}, expected ({len(self.state_vars)}, 1)"
            )
        else:
            known = set(self.state_vars) | set(self.control_vars) | set(self.parameters)
            unknown = self._f_sym.free_symbols - known
            if unknown:
                errors.append(f"_f_sym uses undefined symbols {sorted(map(str, unknown))}")

        for symbol, value in self.parameters.items():
            try:
                float(value)
            except (TypeError, ValueError):
                errors.append(f"parameter {symbol} has non-numeric value {value!r}")

        if errors:
            raise ValidationError(f"Validation failed for {name}:\n  " + "\n  ".join(errors))

    def _compile(self):
        f = self._f_sym.subs(self.parameters)
        args = [self.state_vars, self.control_vars]

        self._f_func: Callable = sp.lambdify(args, f, modules="numpy")
        self._A_func: Callable = sp.lambdify(args, f.jacobian(self.state_vars), modules="numpy")
        self._B_func: Optional[Callable] = None
        if self.control_vars:
            self._B_func = sp.lambdify(args, f.jacobian(self.control_vars), modules="numpy")

    # =========================================================================
    # ControlSystem Interface
    # =========================================================================

    @property
    def dimensions(self) -> SystemDimensions:
        return self._dimensions

    def _inputs(self, u: Optional[ControlVector]):
        if self.nu == 0:
            return []
        return np.asarray(u, dtype=float).reshape(-1)

    def dx(self, x: StateVector, u: ControlVector, t: Optional[float] = None) -> StateVector:
        """Evaluate dx/dt = f(x, u). Time-invariant models ignore t."""
        x = np.asarray(x, dtype=float).reshape(-1)
        return np.asarray(self._f_func(x, self._inputs(u)), dtype=float).reshape(-1)

    def next_x(self, x: StateVector, u: ControlVector, t=None) -> StateVector:
        """
        Integrate dx over one sampling period with fixed-step RK4, input held constant.

        Raises
        ------
        PreconditionError
            If the system has no sampling period
        """
        self._require_sampled("next_x")

        h = self.sampling_period / self.n_substeps
        x = np.asarray(x, dtype=float).reshape(-1)
        for _ in range(self.n_substeps):
            k1 = self.dx(x, u)
            k2 = self.dx(x + 0.5 * h * k1, u)
            k3 = self.dx(x + 0.5 * h * k2, u)
            k4 = self.dx(x + h * k3, u)
            x = x + (h / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)
        return x

    def linearize(self, x: StateVector, u: ControlVector, t=None) -> LinearSystem:
        """
        Continuous-time Jacobians at (x, u) as a LinearSystem.

        The result is always continuous; discretize it with a Discretizer.
        """
        x = np.asarray(x, dtype=float).reshape(-1)
        u = self._inputs(u)

        A = np.asarray(self._A_func(x, u), dtype=float).reshape(self.nx, self.nx)
        if self._B_func is None:
            B = np.zeros((self.nx, 0))
        else:
            B = np.asarray(self._B_func(x, u), dtype=float).reshape(self.nx, self.nu)
        return LinearSystem(A, B)

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: dx/dt = {list(self._f_sym)}"


__all__ = ["SymbolicControlSystem"]
