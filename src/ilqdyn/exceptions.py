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
Exceptions raised by ilqdyn.

Out-of-range LTVSystem steps raise the builtin IndexError.
"""

import numpy as np


class PreconditionError(ValueError):
    """Raised when an operation is called on a system in the wrong time domain or with invalid arguments"""
    pass


class DimensionMismatchError(PreconditionError):
    """Raised when systems or matrices with incompatible dimensions are composed"""
    pass


class NumericalDegeneracyError(np.linalg.LinAlgError):
    """Raised when a discretization is undefined (singular A) or produces non-finite values"""
    pass


class ValidationError(ValueError):
    """Raised when a symbolic system definition is malformed"""
    pass


__all__ = [
    "PreconditionError",
    "DimensionMismatchError",
    "NumericalDegeneracyError",
    "ValidationError",
]
