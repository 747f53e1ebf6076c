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
Solver Options and Configuration

Two levels of configuration:

- Per-call options (ODEOptions / CoupledODEOptions): the initial value
  problem itself plus the method and iteration cap.
- Per-solver configuration (SolverConfig): safety limits and validation
  policy, passed as keyword options to the solver constructor.

Defaults
--------
DEFAULT_METHOD           'rk4'
DEFAULT_MAX_ITERATIONS   1,000,000
MAX_DOMAIN_LENGTH        1000      (|t_end - t0|)
MAX_INITIAL_MAGNITUDE    1e6       (|y0| or |y0[i]|)
DIVERGENCE_THRESHOLD     1e10      (|y| that counts as blow-up)
"""

from typing import List, Literal, Union

from typing_extensions import TypedDict

# ============================================================================
# Method Names
# ============================================================================

MethodName = Literal["euler", "heun", "rk4"]
"""
Fixed-step method identifiers.

- 'euler': Explicit Euler (order 1)
- 'heun': Heun predictor-corrector / improved Euler (order 2)
- 'rk4': Classic 4th-order Runge-Kutta (order 4)
"""

# ============================================================================
# Defaults
# ============================================================================

DEFAULT_METHOD: MethodName = "rk4"
DEFAULT_MAX_ITERATIONS: int = 1_000_000
MAX_DOMAIN_LENGTH: float = 1000.0
MAX_INITIAL_MAGNITUDE: float = 1e6
DIVERGENCE_THRESHOLD: float = 1e10


# ============================================================================
# Per-call Options
# ============================================================================


class _BaseOptions(TypedDict, total=False):
    method: MethodName
    max_iterations: int


class ODEOptions(_BaseOptions):
    """
    Options for solving a single ODE dy/dt = f(t, y).

    Attributes
    ----------
    t0 : float
        Initial time
    y0 : float
        Initial value y(t0)
    t_end : float
        Final time (may be less than t0 for backward integration)
    step_size : float
        Positive step magnitude; its sign is chosen from the direction
    method : MethodName, optional
        'euler', 'heun' or 'rk4' (default 'rk4')
    max_iterations : int, optional
        Safety cap on loop iterations (default 1,000,000)

    Examples
    --------
    >>> options: ODEOptions = {
    ...     't0': 0.0,
    ...     'y0': 1.0,
    ...     't_end': 1.0,
    ...     'step_size': 0.1,
    ...     'method': 'rk4',
    ... }
    """

    t0: float
    y0: float
    t_end: float
    step_size: float


class CoupledODEOptions(_BaseOptions):
    """
    Options for solving a coupled system dy/dt = F(t, y), y ∈ ℝⁿ.

    Same fields as ODEOptions except that ``y0`` is a non-empty list of
    initial values [y1(t0), ..., yn(t0)].

    Examples
    --------
    >>> options: CoupledODEOptions = {
    ...     't0': 0.0,
    ...     'y0': [1.0, 0.0],
    ...     't_end': 6.283185307179586,
    ...     'step_size': 0.01,
    ... }
    """

    t0: float
    y0: List[float]
    t_end: float
    step_size: float


AnyODEOptions = Union[ODEOptions, CoupledODEOptions]


# ============================================================================
# Per-solver Configuration
# ============================================================================


class SolverConfig(TypedDict, total=False):
    """
    Configuration accepted as keyword options by the solver constructors.

    Attributes
    ----------
    max_domain_length : float
        Largest accepted |t_end - t0| (default 1000)
    max_initial_magnitude : float
        Largest accepted |y0| / |y0[i]| (default 1e6)
    divergence_threshold : float
        Magnitude above which a state counts as divergent (default 1e10)
    strict_step_size : bool
        Treat an invalid step-size advisory as a validation failure
        (default True)
    warn_on_step_size : bool
        Issue a StepSizeWarning when the advisory accepts a step size but
        attaches a warning (default True)

    Examples
    --------
    >>> solver = ODESolver(divergence_threshold=1e6, warn_on_step_size=False)
    """

    max_domain_length: float
    max_initial_magnitude: float
    divergence_threshold: float
    strict_step_size: bool
    warn_on_step_size: bool


DEFAULT_SOLVER_CONFIG: SolverConfig = {
    "max_domain_length": MAX_DOMAIN_LENGTH,
    "max_initial_magnitude": MAX_INITIAL_MAGNITUDE,
    "divergence_threshold": DIVERGENCE_THRESHOLD,
    "strict_step_size": True,
    "warn_on_step_size": True,
}


__all__ = [
    "MethodName",
    "DEFAULT_METHOD",
    "DEFAULT_MAX_ITERATIONS",
    "MAX_DOMAIN_LENGTH",
    "MAX_INITIAL_MAGNITUDE",
    "DIVERGENCE_THRESHOLD",
    "ODEOptions",
    "CoupledODEOptions",
    "AnyODEOptions",
    "SolverConfig",
    "DEFAULT_SOLVER_CONFIG",
]
