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

import sympy as sp

from ilqdyn.systems.base.symbolic_control_system import SymbolicControlSystem
from ilqdyn.types.core import PositionIndex


class Unicycle(SymbolicControlSystem):
    """
    Unicycle with speed as a state.

    State Space:
    -----------
    State: x = [px, py, phi, v]
        - px, py: Planar position [m]
        - phi: Heading angle [rad]
        - v: Forward speed [m/s]

    Control: u = [omega, a]
        - omega: Turn rate [rad/s]
        - a: Forward acceleration [m/s²]

    Dynamics:
    --------
        ṗx = v·cos(phi)
        ṗy = v·sin(phi)
        φ̇  = omega
        v̇  = a

    Examples
    --------
    >>> unicycle = Unicycle()                 # sampled at 0.1 s
    >>> unicycle.xyindex()
    (0, 1)
    >>> ct = unicycle.linearize(np.array([1., 1., 0., 0.5]), np.zeros(2))
    >>> ct.A[0, 3]                            # ∂ṗx/∂v = cos(phi)
    1.0
    """

    def __init__(self, sampling_period: float = 0.1, n_substeps: int = 1):
        super().__init__(sampling_period=sampling_period, n_substeps=n_substeps)

    def define_system(self):
        px, py, phi, v = sp.symbols("px py phi v", real=True)
        omega, a = sp.symbols("omega a", real=True)

        self.parameters = {}
        self.state_vars = [px, py, phi, v]
        self.control_vars = [omega, a]

        self._f_sym = sp.Matrix([v * sp.cos(phi), v * sp.sin(phi), omega, a])

    def xyindex(self) -> PositionIndex:
        return (0, 1)


__all__ = ["Unicycle"]
