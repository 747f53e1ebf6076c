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
Fixed-Step Methods

Implements the classic explicit single-step formulas:
- Explicit Euler (1st order)
- Heun / improved Euler (2nd order)
- RK4 (4th order)

Each formula exists twice with identical control structure:
- Scalar form for dy/dt = f(t, y), y a float
- Vector form for coupled systems, y a NumPy array

Methods are stateless records (NumericalMethod / CoupledNumericalMethod)
holding display metadata and a step function
``step(f, t, y, h) -> (t + h, y_next)``. The step size h carries the
direction of integration (negative h integrates backward).

Examples
--------
>>> f = lambda t, y: t + y
>>> euler_step(f, 0.0, 1.0, 0.1)
(0.1, 1.1)
>>> round(rk4_step(f, 0.0, 1.0, 0.1)[1], 6)
1.110342
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from odesym.types.core import (
    CoupledODEFunction,
    ODEFunction,
    ScalarStepFunction,
    StateVector,
    VectorStepFunction,
)

# ============================================================================
# Method Records
# ============================================================================


@dataclass(frozen=True)
class NumericalMethod:
    """
    Named fixed-step method for a single ODE.

    Attributes
    ----------
    key : str
        Registry key ('euler', 'heun', 'rk4')
    name : str
        Display name
    description : str
        One-line human description
    order : int
        Order of accuracy
    step : ScalarStepFunction
        (f, t, y, h) → (t + h, y_next)
    """

    key: str
    name: str
    description: str
    order: int
    step: ScalarStepFunction


@dataclass(frozen=True)
class CoupledNumericalMethod:
    """
    Named fixed-step method for a coupled system.

    Same fields as NumericalMethod; ``step`` operates on NumPy state vectors.
    """

    key: str
    name: str
    description: str
    order: int
    step: VectorStepFunction


# ============================================================================
# Scalar Step Functions
# ============================================================================


def euler_step(f: ODEFunction, t: float, y: float, h: float) -> Tuple[float, float]:
    """
    Take one Euler step: y_{k+1} = y_k + h * f(t_k, y_k).

    Parameters
    ----------
    f : ODEFunction
        Right-hand side (t, y) → dy/dt
    t : float
        Current time
    y : float
        Current value
    h : float
        Signed step size

    Returns
    -------
    Tuple[float, float]
        (t + h, y_next)
    """
    return t + h, y + h * f(t, y)


def heun_step(f: ODEFunction, t: float, y: float, h: float) -> Tuple[float, float]:
    """
    Take one Heun step (predictor-corrector).

    Algorithm:
        k1 = f(t, y)
        y* = y + h * k1
        k2 = f(t + h, y*)
        y_{k+1} = y + (h/2) * (k1 + k2)
    """
    k1 = f(t, y)
    y_predicted = y + h * k1
    k2 = f(t + h, y_predicted)
    return t + h, y + (h / 2.0) * (k1 + k2)


def rk4_step(f: ODEFunction, t: float, y: float, h: float) -> Tuple[float, float]:
    """
    Take one classic RK4 step.

    Algorithm:
        k1 = f(t, y)
        k2 = f(t + h/2, y + h/2*k1)
        k3 = f(t + h/2, y + h/2*k2)
        k4 = f(t + h, y + h*k3)
        y_{k+1} = y + (h/6) * (k1 + 2*k2 + 2*k3 + k4)
    """
    half_h = 0.5 * h
    k1 = f(t, y)
    k2 = f(t + half_h, y + half_h * k1)
    k3 = f(t + half_h, y + half_h * k2)
    k4 = f(t + h, y + h * k3)
    return t + h, y + (h / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)


# ============================================================================
# Vector Step Functions
# ============================================================================


def _rhs(f: CoupledODEFunction, t: float, y: StateVector) -> StateVector:
    return np.asarray(f(t, y), dtype=float)


def euler_step_vector(
    f: CoupledODEFunction, t: float, y: StateVector, h: float
) -> Tuple[float, StateVector]:
    """Vector form of euler_step"""
    return t + h, y + h * _rhs(f, t, y)


def heun_step_vector(
    f: CoupledODEFunction, t: float, y: StateVector, h: float
) -> Tuple[float, StateVector]:
    """Vector form of heun_step"""
    k1 = _rhs(f, t, y)
    y_predicted = y + h * k1
    k2 = _rhs(f, t + h, y_predicted)
    return t + h, y + (h / 2.0) * (k1 + k2)


def rk4_step_vector(
    f: CoupledODEFunction, t: float, y: StateVector, h: float
) -> Tuple[float, StateVector]:
    """Vector form of rk4_step"""
    half_h = 0.5 * h
    k1 = _rhs(f, t, y)
    k2 = _rhs(f, t + half_h, y + half_h * k1)
    k3 = _rhs(f, t + half_h, y + half_h * k2)
    k4 = _rhs(f, t + h, y + h * k3)
    return t + h, y + (h / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)


# ============================================================================
# Method Instances
# ============================================================================

EULER = NumericalMethod(
    key="euler",
    name="Euler's Method",
    description="First-order method, simple but less accurate",
    order=1,
    step=euler_step,
)

HEUN = NumericalMethod(
    key="heun",
    name="Heun's Method",
    description="Second-order method, improved Euler with better accuracy",
    order=2,
    step=heun_step,
)

RK4 = NumericalMethod(
    key="rk4",
    name="Runge-Kutta 4th Order",
    description="Fourth-order method, highly accurate and widely used",
    order=4,
    step=rk4_step,
)

COUPLED_EULER = CoupledNumericalMethod(
    key="euler",
    name="Euler's Method (Coupled)",
    description="First-order method for coupled systems",
    order=1,
    step=euler_step_vector,
)

COUPLED_HEUN = CoupledNumericalMethod(
    key="heun",
    name="Heun's Method (Coupled)",
    description="Second-order method for coupled systems",
    order=2,
    step=heun_step_vector,
)

COUPLED_RK4 = CoupledNumericalMethod(
    key="rk4",
    name="Runge-Kutta 4th Order (Coupled)",
    description="Fourth-order method for coupled systems",
    order=4,
    step=rk4_step_vector,
)


# ============================================================================
# Module Exports
# ============================================================================

__all__ = [
    "NumericalMethod",
    "CoupledNumericalMethod",
    "euler_step",
    "heun_step",
    "rk4_step",
    "euler_step_vector",
    "heun_step_vector",
    "rk4_step_vector",
    "EULER",
    "HEUN",
    "RK4",
    "COUPLED_EULER",
    "COUPLED_HEUN",
    "COUPLED_RK4",
]
