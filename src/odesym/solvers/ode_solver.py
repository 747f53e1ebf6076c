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
Single-Equation Solver

Solves dy/dt = f(t, y), y(t0) = y0 for scalar y with a fixed-step method.

Examples
--------
>>> solver = ODESolver()
>>> solution = solver.solve('t + y', {
...     't0': 0.0,
...     'y0': 1.0,
...     't_end': 1.0,
...     'step_size': 0.1,
...     'method': 'rk4',
... })
>>> solution['success']
True
>>> len(solution['points'])
11
>>> solution['method']
'Runge-Kutta 4th Order'
>>>
>>> # Python callables skip parsing
>>> solution = solver.solve_with_function(lambda t, y: -y, options)
"""

import math
from collections.abc import Mapping
from typing import List

from odesym.integration.method_registry import (
    METHODS,
    estimate_step_size,
    get_method,
    validate_step_size,
)
from odesym.solvers.solver_base import SolverBase, format_limit, is_finite_number
from odesym.types.core import ODEFunction
from odesym.types.options import ODEOptions
from odesym.types.parsing import ExpressionCheck, ParsedEquation
from odesym.types.trajectories import ODESolution, SolutionMetadata, SolutionPoint


class ODESolver(SolverBase):
    """
    Fixed-step solver for a single first-order ODE.

    Parameters
    ----------
    **options : SolverConfig
        See SolverBase

    Examples
    --------
    >>> solver = ODESolver()
    >>> solver.validate_equation('t + z')
    {'valid': False, 'error': "Invalid variables found: z. Only 't' and 'y' are allowed."}
    >>>
    >>> # Looser policy: invalid step-size advice becomes a warning
    >>> lenient = ODESolver(strict_step_size=False)
    """

    def solve(self, expression: str, options: ODEOptions) -> ODESolution:
        """
        Parse ``expression`` as f(t, y) and integrate it.

        Parameters
        ----------
        expression : str
            Right-hand side in t and y
        options : ODEOptions
            t0, y0, t_end, step_size, optional method and max_iterations

        Returns
        -------
        ODESolution
            ``success`` is the sole failure signal; on failure ``error`` is
            set and ``points`` is empty
        """
        return super().solve(expression, options)

    def solve_with_function(self, f: ODEFunction, options: ODEOptions) -> ODESolution:
        """
        Integrate a Python callable f(t, y) → dy/dt.

        Runs option validation, method lookup and the integration loop;
        never raises. ``computation_time`` is wall-clock seconds.
        """
        return super().solve_with_function(f, options)

    def validate_options(self, options: ODEOptions) -> ExpressionCheck:
        """
        Check options in order, returning the first failure.

        1. t0, y0, t_end, step_size are finite numbers
        2. step_size > 0
        3. step_size <= |t_end - t0|
        4. t0 != t_end
        5. |t_end - t0| <= 1000
        6. |y0| <= 1e6
        7. max_iterations, when given, is a positive integer
        8. The step-size advisory accepts the step (strict policy); an
           accepted step with an advisory warning issues a StepSizeWarning

        Examples
        --------
        >>> ODESolver().validate_options({'t0': 0, 'y0': 1, 't_end': 0, 'step_size': 0.1})
        {'valid': False, 'error': 'Step size cannot be larger than the integration domain'}
        """
        if not isinstance(options, Mapping) or not all(
            is_finite_number(options.get(key)) for key in ("t0", "y0", "t_end", "step_size")
        ):
            return {"valid": False, "error": "All parameters must be finite numbers"}

        error = self._check_common_bounds(options)
        if error:
            return {"valid": False, "error": error}

        if abs(options["y0"]) > self.config["max_initial_magnitude"]:
            return {
                "valid": False,
                "error": (
                    f"Initial y value too large "
                    f"(|y0| > {format_limit(self.config['max_initial_magnitude'])})"
                ),
            }

        error = self._check_max_iterations(options)
        if error:
            return {"valid": False, "error": error}

        advice = validate_step_size(options["step_size"], self._domain(options))
        error = self._apply_step_size_advice(advice)
        if error:
            return {"valid": False, "error": error}

        return {"valid": True}

    def validate_equation(self, expression: str) -> ExpressionCheck:
        """Dry-run parse of a single expression"""
        parsed = self.parser.parse(expression)
        if parsed.valid:
            return {"valid": True}
        return {"valid": False, "error": parsed.error}

    def suggest_step_size(self, f: ODEFunction, options: ODEOptions) -> float:
        """
        Propose a step size for ``f`` over the options' domain.

        See ``estimate_step_size``.
        """
        return estimate_step_size(
            f, float(options["t0"]), float(options["y0"]), self._domain(options)
        )

    # ========================================================================
    # Hooks
    # ========================================================================

    def _parse(self, expression: str) -> ParsedEquation:
        return self.parser.parse(expression)

    def _methods(self) -> List:
        return list(METHODS.values())

    def _resolve_method(self, key):
        return get_method(key)

    def _initial_state(self, y0) -> float:
        return float(y0)

    def _all_finite(self, value) -> bool:
        return math.isfinite(value)

    def _max_magnitude(self, value) -> float:
        return abs(value)

    def _make_point(self, t: float, y: float, dydt: float) -> SolutionPoint:
        return {"t": float(t), "y": float(y), "dydt": float(dydt)}

    def _metadata(self, points: List[SolutionPoint], options: ODEOptions) -> SolutionMetadata:
        ys = [point["y"] for point in points]
        return {
            "total_points": len(points),
            "step_size": options["step_size"],
            "domain": self._domain(options),
            "range": (min(ys), max(ys)),
        }

    def _empty_metadata(self, options: ODEOptions) -> SolutionMetadata:
        return {
            "total_points": 0,
            "step_size": options.get("step_size", 0) if isinstance(options, Mapping) else 0,
            "domain": self._domain(options),
            "range": (0.0, 0.0),
        }


__all__ = ["ODESolver"]
