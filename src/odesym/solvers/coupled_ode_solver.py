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
Coupled-System Solver

Solves dy/dt = F(t, y), y(t0) = y0 for a state vector y ∈ ℝⁿ, with
n = len(y0). Equation k of the system gives dy_k/dt and refers to the
state components as y1, ..., yn.

Examples
--------
>>> solver = CoupledODESolver()
>>> solution = solver.solve(['y2', '-y1'], {
...     't0': 0.0,
...     'y0': [1.0, 0.0],
...     't_end': 2 * np.pi,
...     'step_size': 0.01,
... })
>>> np.allclose(solution['points'][-1]['y'], [1.0, 0.0], atol=1e-6)
True
>>> len(solution['metadata']['ranges'])
2
"""

from collections.abc import Mapping
from typing import Callable, List, Sequence

import numpy as np

from odesym.exceptions import EvaluationError
from odesym.integration.method_registry import (
    COUPLED_METHODS,
    estimate_coupled_step_size,
    get_coupled_method,
    validate_coupled_step_size,
)
from odesym.solvers.solver_base import SolverBase, format_limit, is_finite_number
from odesym.types.core import CoupledODEFunction, StateVector
from odesym.types.options import CoupledODEOptions
from odesym.types.parsing import ExpressionCheck, ParsedCoupledEquations
from odesym.types.trajectories import (
    CoupledODESolution,
    CoupledSolutionMetadata,
    CoupledSolutionPoint,
)


def _is_state_sequence(value) -> bool:
    return isinstance(value, (list, tuple, np.ndarray)) and np.ndim(value) == 1


class CoupledODESolver(SolverBase):
    """
    Fixed-step solver for coupled systems of first-order ODEs.

    Same orchestration as ODESolver with vector state: every new state and
    derivative must be entirely finite and componentwise bounded by the
    divergence threshold, and the right-hand side must return exactly
    len(y0) values.

    Parameters
    ----------
    **options : SolverConfig
        See SolverBase

    Examples
    --------
    >>> solver = CoupledODESolver()
    >>> solver.validate_equations(['y2', '-y1'])
    {'valid': True}
    >>> solver.validate_equations(['y2', '-z'])['error']
    "Invalid variable 'z'. Expected format: t, y1, y2, y3, etc."
    """

    def solve(self, expressions: Sequence[str], options: CoupledODEOptions) -> CoupledODESolution:
        """
        Parse ``expressions`` (one per state component) and integrate them.

        Parameters
        ----------
        expressions : Sequence[str]
            Right-hand sides in t, y1, ..., yn
        options : CoupledODEOptions
            t0, y0 (list), t_end, step_size, optional method and
            max_iterations

        Returns
        -------
        CoupledODESolution
            Every point's ``y`` and ``dydt`` have length len(y0)
        """
        return super().solve(expressions, options)

    def solve_with_function(
        self, f: CoupledODEFunction, options: CoupledODEOptions
    ) -> CoupledODESolution:
        """Integrate a Python callable F(t, y) → dy/dt with vector state"""
        return super().solve_with_function(f, options)

    def validate_options(self, options: CoupledODEOptions) -> ExpressionCheck:
        """
        Check options in order, returning the first failure.

        1. t0, t_end, step_size are finite numbers
        2. y0 is a non-empty one-dimensional sequence
        3. every y0[i] is a finite number
        4. step_size > 0, step_size <= |t_end - t0|, t0 != t_end,
           |t_end - t0| <= 1000
        5. every |y0[i]| <= 1e6
        6. max_iterations, when given, is a positive integer
        7. the coupled step-size advisory accepts the step (strict policy);
           an accepted step with an advisory warning issues a
           StepSizeWarning
        """
        if not isinstance(options, Mapping) or not all(
            is_finite_number(options.get(key)) for key in ("t0", "t_end", "step_size")
        ):
            return {"valid": False, "error": "t0, t_end, and step_size must be finite numbers"}

        y0 = options.get("y0")
        if not _is_state_sequence(y0) or len(y0) == 0:
            return {"valid": False, "error": "y0 must be a non-empty array"}
        if not all(is_finite_number(value) for value in y0):
            return {"valid": False, "error": "All initial y values must be finite numbers"}

        error = self._check_common_bounds(options)
        if error:
            return {"valid": False, "error": error}

        limit = self.config["max_initial_magnitude"]
        if any(abs(value) > limit for value in y0):
            return {
                "valid": False,
                "error": f"Initial y values too large (|y0[i]| > {format_limit(limit)})",
            }

        error = self._check_max_iterations(options)
        if error:
            return {"valid": False, "error": error}

        advice = validate_coupled_step_size(options["step_size"], self._domain(options))
        error = self._apply_step_size_advice(advice)
        if error:
            return {"valid": False, "error": error}

        return {"valid": True}

    def validate_equations(self, expressions: Sequence[str]) -> ExpressionCheck:
        """Dry-run parse of a system of expressions"""
        parsed = self.parser.parse_coupled(expressions)
        if parsed.valid:
            return {"valid": True}
        return {"valid": False, "error": parsed.error}

    def suggest_step_size(self, f: CoupledODEFunction, options: CoupledODEOptions) -> float:
        """
        Propose a step size for ``f`` over the options' domain.

        See ``estimate_coupled_step_size``.
        """
        return estimate_coupled_step_size(
            f, float(options["t0"]), options["y0"], self._domain(options)
        )

    # ========================================================================
    # Hooks
    # ========================================================================

    def _parse(self, expressions: Sequence[str]) -> ParsedCoupledEquations:
        return self.parser.parse_coupled(expressions)

    def _methods(self) -> List:
        return list(COUPLED_METHODS.values())

    def _resolve_method(self, key):
        return get_coupled_method(key)

    def _initial_state(self, y0) -> StateVector:
        return np.array(y0, dtype=float)

    def _wrap_rhs(self, f: CoupledODEFunction, y0: StateVector) -> Callable:
        n_states = y0.size

        def rhs(t: float, y: StateVector) -> StateVector:
            dydt = np.asarray(f(t, y), dtype=float).ravel()
            if dydt.size != n_states:
                raise EvaluationError(
                    f"Derivative function returned {dydt.size} values, expected {n_states}"
                )
            return dydt

        return rhs

    def _all_finite(self, value) -> bool:
        return bool(np.all(np.isfinite(value)))

    def _max_magnitude(self, value) -> float:
        return float(np.max(np.abs(value)))

    def _make_point(self, t: float, y: StateVector, dydt: StateVector) -> CoupledSolutionPoint:
        return {"t": float(t), "y": y.tolist(), "dydt": dydt.tolist()}

    def _metadata(
        self, points: List[CoupledSolutionPoint], options: CoupledODEOptions
    ) -> CoupledSolutionMetadata:
        states = np.array([point["y"] for point in points], dtype=float)
        return {
            "total_points": len(points),
            "step_size": options["step_size"],
            "domain": self._domain(options),
            "ranges": [
                (float(low), float(high))
                for low, high in zip(states.min(axis=0), states.max(axis=0))
            ],
        }

    def _empty_metadata(self, options: CoupledODEOptions) -> CoupledSolutionMetadata:
        y0 = options.get("y0") if isinstance(options, Mapping) else None
        n_states = len(y0) if _is_state_sequence(y0) else 0
        return {
            "total_points": 0,
            "step_size": options.get("step_size", 0) if isinstance(options, Mapping) else 0,
            "domain": self._domain(options),
            "ranges": [(0.0, 0.0)] * n_states,
        }


__all__ = ["CoupledODESolver"]
