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
Core Types

Basic scalar, state and right-hand-side function types shared across
odesym.

Mathematical Context
-------------------
Single equation:   dy/dt = f(t, y),        y ∈ ℝ
Coupled system:    dy/dt = F(t, y),        y ∈ ℝⁿ, F: ℝ × ℝⁿ → ℝⁿ

Usage
-----
>>> from odesym.types.core import ODEFunction, CoupledODEFunction
>>>
>>> f: ODEFunction = lambda t, y: t + y
>>> F: CoupledODEFunction = lambda t, y: np.array([y[1], -y[0]])
"""

from typing import Callable, Sequence, Tuple, Union

import numpy as np

ScalarLike = Union[float, int, np.number]
"""
Scalar numeric value.

Accepted anywhere a time, a step size or a scalar state is expected.
Results handed back to callers are always plain ``float``.
"""

StateVector = np.ndarray
"""
State of a coupled system, shape (n,).

Internally the coupled methods operate on float64 arrays; solution points
store the state as a plain list so that results serialize cleanly.
"""

StateLike = Union[Sequence[float], np.ndarray]
"""Anything convertible to a StateVector (list, tuple or array)."""

TimeSpan = Tuple[float, float]
"""
Integration domain (t0, t_end).

t_end may be smaller than t0, in which case integration runs backward.
"""

ValueRange = Tuple[float, float]
"""Closed interval (min, max) of values attained by a state component."""

ODEFunction = Callable[[float, float], float]
"""
Right-hand side of a single first-order ODE: (t, y) → dy/dt.
"""

CoupledODEFunction = Callable[[float, StateVector], StateLike]
"""
Right-hand side of a coupled system: (t, y) → dy/dt.

Must return a vector with the same length as ``y``.
"""

ScalarStepFunction = Callable[[ODEFunction, float, float, float], Tuple[float, float]]
"""One step of a scalar method: (f, t, y, h) → (t + h, y_next)."""

VectorStepFunction = Callable[
    [CoupledODEFunction, float, StateVector, float], Tuple[float, StateVector]
]
"""One step of a coupled method: (f, t, y, h) → (t + h, y_next)."""


__all__ = [
    "ScalarLike",
    "StateVector",
    "StateLike",
    "TimeSpan",
    "ValueRange",
    "ODEFunction",
    "CoupledODEFunction",
    "ScalarStepFunction",
    "VectorStepFunction",
]
