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
Numerical Method Registry and Step-Size Diagnostics
===================================================

Single source of truth for the fixed-step methods available to the solvers,
plus heuristics that judge or propose a step size for a given problem.

Registry
--------
Methods are looked up by lowercase key ('euler', 'heun', 'rk4'). Lookup is
case-insensitive and returns None for unknown keys, leaving the caller to
decide how to report the miss.

>>> get_method('RK4').name
'Runge-Kutta 4th Order'
>>> get_method('dopri5') is None
True
>>> get_method_names()
['euler', 'heun', 'rk4']

Step-Size Advisory
------------------
Single equations are judged by the implied number of steps:

    steps < 10          → invalid, suggest range/20
    steps > 100,000     → invalid, suggest range/10,000
    steps > 50,000      → valid, with a warning

Coupled systems are judged by the step relative to the domain:

    h <= 0              → invalid, suggest min(0.1, range/100)
    h > range           → invalid, suggest range/10
    h > range/10        → valid, with a warning, suggest range/50
    h < range/100,000   → valid, with a warning, suggest range/1,000

>>> validate_step_size(0.1, (0.0, 1.0))
{'valid': True}
>>> validate_step_size(0.5, (0.0, 1.0))['valid']
False

Step-Size Estimation
--------------------
``estimate_step_size`` samples |f| on a uniform grid over the domain with y
held at its initial value and proposes h = sqrt(2 * tol / max|f|), clamped
to a band of step counts.
"""

import math
from enum import Enum
from typing import Dict, List, Optional

import numpy as np

from odesym.integration.fixed_step_methods import (
    COUPLED_EULER,
    COUPLED_HEUN,
    COUPLED_RK4,
    EULER,
    HEUN,
    RK4,
    CoupledNumericalMethod,
    NumericalMethod,
)
from odesym.types.core import CoupledODEFunction, ODEFunction, StateLike, TimeSpan
from odesym.types.methods import MethodInfo, StepSizeAdvice

# ============================================================================
# Method Keys and Registries
# ============================================================================


class MethodKey(str, Enum):
    """
    Closed set of method identifiers.

    Members compare equal to their string value, so ``MethodKey.RK4 == 'rk4'``.
    """

    EULER = "euler"
    HEUN = "heun"
    RK4 = "rk4"


FIXED_STEP_METHODS = frozenset(key.value for key in MethodKey)

METHODS: Dict[str, NumericalMethod] = {
    MethodKey.EULER.value: EULER,
    MethodKey.HEUN.value: HEUN,
    MethodKey.RK4.value: RK4,
}

COUPLED_METHODS: Dict[str, CoupledNumericalMethod] = {
    MethodKey.EULER.value: COUPLED_EULER,
    MethodKey.HEUN.value: COUPLED_HEUN,
    MethodKey.RK4.value: COUPLED_RK4,
}

# Advisory bounds (number of steps across the domain)
MIN_STEPS = 10
MAX_STEPS = 100_000
WARN_STEPS = 50_000

# Estimation parameters
ESTIMATION_SAMPLES = 5
SMALL_DERIVATIVE = 1e-6
SCALAR_TOLERANCE = 1e-3
COUPLED_TOLERANCE = 1e-4


def _normalize_key(name) -> Optional[str]:
    if isinstance(name, MethodKey):
        return name.value
    if not isinstance(name, str):
        return None
    return name.strip().lower()


# ============================================================================
# Lookup
# ============================================================================


def get_method(name: str) -> Optional[NumericalMethod]:
    """
    Look up a scalar method by key.

    Parameters
    ----------
    name : str
        Method key, any letter case ('euler', 'Heun', 'RK4', ...)

    Returns
    -------
    Optional[NumericalMethod]
        The method, or None if the key is unknown

    Examples
    --------
    >>> get_method('heun').order
    2
    """
    return METHODS.get(_normalize_key(name))


def get_coupled_method(name: str) -> Optional[CoupledNumericalMethod]:
    """Look up a coupled method by key (see get_method)"""
    return COUPLED_METHODS.get(_normalize_key(name))


def method_info(method) -> MethodInfo:
    """Display record for a NumericalMethod or CoupledNumericalMethod"""
    return {
        "name": method.name,
        "key": method.key,
        "description": method.description,
        "order": method.order,
    }


def get_all_methods() -> List[MethodInfo]:
    """
    Display records for every scalar method, in registry order.

    Examples
    --------
    >>> [m['order'] for m in get_all_methods()]
    [1, 2, 4]
    """
    return [method_info(method) for method in METHODS.values()]


def get_all_coupled_methods() -> List[MethodInfo]:
    """Display records for every coupled method, in registry order"""
    return [method_info(method) for method in COUPLED_METHODS.values()]


def get_method_names() -> List[str]:
    """Registered scalar method keys"""
    return list(METHODS.keys())


def get_coupled_method_names() -> List[str]:
    """Registered coupled method keys"""
    return list(COUPLED_METHODS.keys())


# ============================================================================
# Step-Size Advisory
# ============================================================================


def _format_step(value: float) -> str:
    # three significant digits, trailing zeros kept
    return f"{value:#.3g}"


def validate_step_size(step_size: float, domain: TimeSpan) -> StepSizeAdvice:
    """
    Judge a step size for a single equation by the implied step count.

    Parameters
    ----------
    step_size : float
        Proposed step size
    domain : TimeSpan
        (t0, t_end)

    Returns
    -------
    StepSizeAdvice
        ``valid`` plus, where applicable, ``suggested`` and ``warning``

    Examples
    --------
    >>> validate_step_size(1.0, (0.0, 1.0))
    {'valid': False, 'suggested': 0.05, 'warning': 'Step size too large. Consider using h ≤ 0.0500 for better accuracy.'}
    >>> validate_step_size(1.5e-5, (0.0, 1.0))['warning']
    'Large number of steps (66667). Computation may take some time.'
    """
    t0, t_end = domain
    total_range = abs(t_end - t0)
    if step_size == 0:
        num_steps = math.inf if total_range > 0 else math.nan
    else:
        num_steps = total_range / step_size

    if num_steps < MIN_STEPS:
        suggested = total_range / 20
        return {
            "valid": False,
            "suggested": suggested,
            "warning": (
                f"Step size too large. Consider using h ≤ {_format_step(suggested)} "
                f"for better accuracy."
            ),
        }

    if num_steps > MAX_STEPS:
        suggested = total_range / 10000
        return {
            "valid": False,
            "suggested": suggested,
            "warning": (
                f"Step size too small. Consider using h ≥ {_format_step(suggested)} "
                f"for faster computation."
            ),
        }

    if num_steps > WARN_STEPS:
        return {
            "valid": True,
            "warning": (
                f"Large number of steps ({int(math.floor(num_steps + 0.5))}). "
                f"Computation may take some time."
            ),
        }

    return {"valid": True}


def validate_coupled_step_size(step_size: float, domain: TimeSpan) -> StepSizeAdvice:
    """
    Judge a step size for a coupled system relative to the domain length.

    Coupled systems get a stability margin: steps above a tenth of the
    domain are accepted with a warning.

    Examples
    --------
    >>> validate_coupled_step_size(0.01, (0.0, 1.0))
    {'valid': True}
    >>> validate_coupled_step_size(2.0, (0.0, 1.0))['suggested']
    0.1
    """
    t0, t_end = domain
    total_range = abs(t_end - t0)

    if step_size <= 0:
        return {
            "valid": False,
            "warning": "Step size must be positive",
            "suggested": min(0.1, total_range / 100),
        }

    if step_size > total_range:
        return {
            "valid": False,
            "warning": "Step size larger than domain range",
            "suggested": total_range / 10,
        }

    if step_size > total_range / 10:
        return {
            "valid": True,
            "warning": "Step size might be too large for coupled systems, consider smaller values",
            "suggested": total_range / 50,
        }

    if step_size < total_range / 100000:
        return {
            "valid": True,
            "warning": "Very small step size may lead to slow computation",
            "suggested": total_range / 1000,
        }

    return {"valid": True}


# ============================================================================
# Step-Size Estimation
# ============================================================================


def _sample_times(t0: float, t_end: float) -> List[float]:
    return [t0 + (t_end - t0) * i / ESTIMATION_SAMPLES for i in range(ESTIMATION_SAMPLES + 1)]


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def estimate_step_size(f: ODEFunction, t0: float, y0: float, domain: TimeSpan) -> float:
    """
    Propose a step size for a single equation from the derivative magnitude.

    Parameters
    ----------
    f : ODEFunction
        Right-hand side (t, y) → dy/dt
    t0 : float
        Initial time
    y0 : float
        Initial value, held fixed while sampling
    domain : TimeSpan
        (t0, t_end); only t_end is read

    Returns
    -------
    float
        sqrt(2e-3 / max|f|) clamped to [range/10000, range/20], or
        min(0.1, range/100) when sampling fails or |f| stays below 1e-6

    Examples
    --------
    >>> estimate_step_size(lambda t, y: 0.0, 0.0, 1.0, (0.0, 1.0))
    0.01
    >>> estimate_step_size(lambda t, y: 0.5, 0.0, 1.0, (0.0, 1.0))
    0.05
    """
    _, t_end = domain
    total_range = abs(t_end - t0)
    fallback = min(0.1, total_range / 100)

    try:
        max_derivative = 0.0
        for t in _sample_times(t0, t_end):
            magnitude = abs(float(f(t, y0)))
            if math.isfinite(magnitude):
                max_derivative = max(max_derivative, magnitude)

        if max_derivative < SMALL_DERIVATIVE:
            return fallback

        suggested = math.sqrt(2 * SCALAR_TOLERANCE / max_derivative)
        return _clamp(suggested, total_range / 10000, total_range / 20)
    except Exception:
        return fallback


def estimate_coupled_step_size(
    f: CoupledODEFunction, t0: float, y0: StateLike, domain: TimeSpan
) -> float:
    """
    Propose a step size for a coupled system (see estimate_step_size).

    Takes the largest finite component of |F| over the samples and uses the
    tighter tolerance 1e-4, clamped to [range/50000, range/50]. Falls back to
    min(0.01, range/1000).
    """
    _, t_end = domain
    total_range = abs(t_end - t0)
    fallback = min(0.01, total_range / 1000)

    try:
        state = np.asarray(y0, dtype=float)
        max_derivative = 0.0
        for t in _sample_times(t0, t_end):
            derivatives = np.abs(np.asarray(f(t, state.copy()), dtype=float)).ravel()
            finite = derivatives[np.isfinite(derivatives)]
            if finite.size:
                max_derivative = max(max_derivative, float(finite.max()))

        if max_derivative < SMALL_DERIVATIVE:
            return fallback

        suggested = math.sqrt(2 * COUPLED_TOLERANCE / max_derivative)
        return _clamp(suggested, total_range / 50000, total_range / 50)
    except Exception:
        return fallback


# ============================================================================
# Module Exports
# ============================================================================

__all__ = [
    "MethodKey",
    "FIXED_STEP_METHODS",
    "METHODS",
    "COUPLED_METHODS",
    "get_method",
    "get_coupled_method",
    "method_info",
    "get_all_methods",
    "get_all_coupled_methods",
    "get_method_names",
    "get_coupled_method_names",
    "validate_step_size",
    "validate_coupled_step_size",
    "estimate_step_size",
    "estimate_coupled_step_size",
]
