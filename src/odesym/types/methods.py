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
Numerical Method Types

Result types for method introspection and step-size diagnostics.
"""

from typing import List

from typing_extensions import TypedDict


class MethodInfo(TypedDict):
    """
    Display information about a numerical method.

    Attributes
    ----------
    name : str
        Display name (e.g. "Runge-Kutta 4th Order")
    key : str
        Registry key ('euler', 'heun', 'rk4')
    description : str
        One-line human description
    order : int
        Convergence order (1, 2 or 4)
    """

    name: str
    key: str
    description: str
    order: int


class StepSizeAdvice(TypedDict, total=False):
    """
    Outcome of a step-size advisory check.

    Attributes
    ----------
    valid : bool
        Whether the step size is acceptable
    suggested : float
        Recommended step size (present when the advisory has one)
    warning : str
        Human-readable explanation (present when invalid or questionable)

    Examples
    --------
    >>> validate_step_size(1.0, (0.0, 1.0))
    {'valid': False, 'suggested': 0.05, 'warning': 'Step size too large. ...'}
    """

    valid: bool
    suggested: float
    warning: str


class SupportedMath(TypedDict):
    """Allow-listed function and constant names, sorted"""

    functions: List[str]
    constants: List[str]


__all__ = [
    "MethodInfo",
    "StepSizeAdvice",
    "SupportedMath",
]
