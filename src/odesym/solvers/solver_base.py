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
Solver Base - Shared Orchestration for Fixed-Step ODE Solvers

Provides the template shared by the single-equation and coupled-system
solvers:

    parse → validate options → resolve method → integrate → package result

Every solve call owns a fresh IntegrationRun, a small state machine that
records where the call is in that pipeline:

    UNVALIDATED ──► VALIDATED ──► INTEGRATING ──► CONVERGED
         │               │            │  ▲
         │               │            └──┘ (one loop per accepted step)
         └───────────────┴────────────┴──────► FAILED

CONVERGED and FAILED are terminal. Illegal transitions raise RuntimeError.

Subclasses supply the state-specific pieces (parsing, option validation,
method lookup, finiteness checks, point and metadata construction); the
integration loop itself lives here and is identical for scalar and vector
state.

Error Handling
--------------
``solve`` and ``solve_with_function`` never raise. Every failure becomes a
solution with ``success=False``, an empty trajectory and an ``error``
message:

- parse errors carry the parser's message
- validation errors carry the first failed rule
- integration errors read "Integration failed at step k: ..." (or report
  the exhausted iteration cap)
- anything else reads "Computation error: ..." / "Solver error: ..."
"""

import math
import numbers
import time
import warnings
from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from odesym.exceptions import (
    EvaluationError,
    IntegrationError,
    StepSizeWarning,
    ValidationError,
)
from odesym.integration.method_registry import method_info
from odesym.parsing.equation_parser import EquationParser
from odesym.types.core import TimeSpan
from odesym.types.methods import MethodInfo, StepSizeAdvice, SupportedMath
from odesym.types.options import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_METHOD,
    DEFAULT_SOLVER_CONFIG,
    SolverConfig,
)

# Relative slack (in units of |h|) for deciding that t_end has been reached
END_TOLERANCE = 1e-9


# ============================================================================
# State Machine
# ============================================================================


class SolverState(Enum):
    """
    Lifecycle of a single solve call.

    Attributes
    ----------
    UNVALIDATED : str
        Options not yet checked
    VALIDATED : str
        Options passed all checks
    INTEGRATING : str
        Method resolved, stepping in progress
    CONVERGED : str
        t_end reached (terminal)
    FAILED : str
        Parse, validation or integration failure (terminal)
    """

    UNVALIDATED = "unvalidated"
    VALIDATED = "validated"
    INTEGRATING = "integrating"
    CONVERGED = "converged"
    FAILED = "failed"


_TRANSITIONS = {
    SolverState.UNVALIDATED: frozenset([SolverState.VALIDATED, SolverState.FAILED]),
    SolverState.VALIDATED: frozenset([SolverState.INTEGRATING, SolverState.FAILED]),
    SolverState.INTEGRATING: frozenset(
        [SolverState.INTEGRATING, SolverState.CONVERGED, SolverState.FAILED]
    ),
    SolverState.CONVERGED: frozenset(),
    SolverState.FAILED: frozenset(),
}


class IntegrationRun:
    """
    State machine for one solve call.

    Examples
    --------
    >>> run = IntegrationRun()
    >>> run.validated()
    >>> run.start()
    >>> run.record_step()
    >>> run.converge()
    >>> run.state
    <SolverState.CONVERGED: 'converged'>
    >>> run.start()
    Traceback (most recent call last):
        ...
    RuntimeError: Illegal solver state transition: CONVERGED → INTEGRATING
    """

    def __init__(self):
        self.state = SolverState.UNVALIDATED
        self.steps = 0
        self.error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in (SolverState.CONVERGED, SolverState.FAILED)

    def transition(self, new_state: SolverState):
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Illegal solver state transition: {self.state.name} → {new_state.name}"
            )
        self.state = new_state

    def validated(self):
        self.transition(SolverState.VALIDATED)

    def start(self):
        self.transition(SolverState.INTEGRATING)

    def record_step(self):
        self.transition(SolverState.INTEGRATING)
        self.steps += 1

    def converge(self):
        self.transition(SolverState.CONVERGED)

    def fail(self, error: str):
        self.transition(SolverState.FAILED)
        self.error = error


# ============================================================================
# Helpers
# ============================================================================


def is_finite_number(value: Any) -> bool:
    """True for finite real numbers (bool excluded)"""
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def format_limit(value: float) -> str:
    """
    Compact text for a numeric limit in messages.

    Examples
    --------
    >>> format_limit(1e10), format_limit(1e6), format_limit(1000.0)
    ('1e10', '1e6', '1000')
    """
    text = f"{value:g}"
    mantissa, _, exponent = text.partition("e")
    if not exponent:
        return text
    return f"{mantissa}e{int(exponent)}"


def _option(options: Any, key: str, default: Any = None) -> Any:
    if isinstance(options, Mapping):
        return options.get(key, default)
    return default


# ============================================================================
# Solver Base
# ============================================================================


class SolverBase(ABC):
    """
    Abstract base class for fixed-step ODE solvers.

    Subclasses must implement:
    - _parse(): Compile expression text into a parse result
    - validate_options(): Check an options record
    - _resolve_method(): Look up a method by key
    - _initial_state(): Convert y0 into the internal state type
    - _all_finite() / _max_magnitude(): Checks on states and derivatives
    - _make_point(): Build one solution point
    - _metadata() / _empty_metadata(): Build solution metadata

    Parameters
    ----------
    **options : SolverConfig
        Solver configuration:
        - max_domain_length : float (default 1000)
        - max_initial_magnitude : float (default 1e6)
        - divergence_threshold : float (default 1e10)
        - strict_step_size : bool (default True)
        - warn_on_step_size : bool (default True)

    Raises
    ------
    ValidationError
        If an option is unknown or out of range (a ValueError subclass)
    """

    def __init__(self, **options):
        unknown = sorted(set(options) - set(DEFAULT_SOLVER_CONFIG))
        if unknown:
            raise ValidationError(
                f"Unknown solver option(s) {unknown}. "
                f"Valid options: {sorted(DEFAULT_SOLVER_CONFIG)}"
            )

        config: SolverConfig = dict(DEFAULT_SOLVER_CONFIG)
        config.update(options)
        for key in ("max_domain_length", "max_initial_magnitude", "divergence_threshold"):
            value = config[key]
            if not (isinstance(value, numbers.Real) and not isinstance(value, bool) and value > 0):
                raise ValidationError(f"{key} must be a positive number, got {value!r}")

        self.config = config
        self.parser = EquationParser()

    # ========================================================================
    # Public API
    # ========================================================================

    def solve(self, expression, options):
        """
        Parse ``expression`` and integrate it with ``options``.

        Returns a solution record; never raises.
        """
        start_time = time.time()
        run = IntegrationRun()
        try:
            parsed = self._parse(expression)
            if not parsed.valid:
                return self._failure(run, parsed.error, options, start_time)
            return self._execute(parsed.evaluate, options, run, start_time)
        except Exception as e:
            return self._failure(run, f"Solver error: {e}", options, start_time)

    def solve_with_function(self, f: Callable, options):
        """
        Integrate an already-compiled right-hand side with ``options``.

        Returns a solution record; never raises.
        """
        return self._execute(f, options, IntegrationRun(), time.time())

    def get_available_methods(self) -> List[MethodInfo]:
        """Display records for every method this solver can use"""
        return [method_info(method) for method in self._methods()]

    def get_supported_math(self) -> SupportedMath:
        """Allow-listed function and constant names accepted in expressions"""
        return {
            "functions": self.parser.get_supported_functions(),
            "constants": self.parser.get_supported_constants(),
        }

    def get_parser(self) -> EquationParser:
        return self.parser

    # ========================================================================
    # Orchestration
    # ========================================================================

    def _execute(self, f: Callable, options, run: IntegrationRun, start_time: float):
        method_key = _option(options, "method", DEFAULT_METHOD)
        try:
            check = self.validate_options(options)
            if not check["valid"]:
                return self._failure(run, check["error"], options, start_time)
            run.validated()

            method = self._resolve_method(method_key)
            if method is None:
                return self._failure(
                    run, f"Unknown numerical method: {method_key}", options, start_time
                )
            run.start()

            points = self._integrate(f, options, method, run)
            run.converge()

            return {
                "points": points,
                "method": method.name,
                "computation_time": time.time() - start_time,
                "success": True,
                "metadata": self._metadata(points, options),
            }
        except IntegrationError as e:
            return self._failure(run, str(e), options, start_time)
        except Exception as e:
            return self._failure(run, f"Computation error: {e}", options, start_time)

    def _integrate(self, f: Callable, options, method, run: IntegrationRun) -> List[Dict]:
        """
        Fixed-step integration loop from t0 to t_end.

        The step is signed by the direction of integration. The last step is
        shortened so that the final point lands exactly on t_end. Interior
        points sit on the grid t0 + k*h (not a running sum of h).
        """
        t0 = float(options["t0"])
        t_end = float(options["t_end"])
        max_iterations = int(_option(options, "max_iterations", DEFAULT_MAX_ITERATIONS))
        direction = 1.0 if t_end > t0 else -1.0
        h = direction * abs(float(options["step_size"]))
        tolerance = END_TOLERANCE * abs(h)

        t = t0
        y = self._initial_state(options["y0"])
        rhs = self._wrap_rhs(f, y)

        try:
            dydt = self._derivative(rhs, t, y)
        except Exception as e:
            raise IntegrationError(f"Integration failed at step 0: {e}", step=0) from e
        points = [self._make_point(t, y, dydt)]

        iteration = 0
        while direction * (t_end - t) > tolerance:
            if iteration >= max_iterations:
                raise IntegrationError(
                    f"Maximum iterations ({max_iterations}) reached without convergence",
                    step=iteration,
                )
            iteration += 1

            remaining = t_end - t
            lands_on_end = direction * (remaining - h) <= tolerance
            current_h = remaining if lands_on_end else h

            try:
                _, y_new = method.step(rhs, t, y, current_h)
                t_new = t_end if lands_on_end else t0 + iteration * h
                self._check_state(t_new, y_new)
                dydt = self._derivative(rhs, t_new, y_new)
            except Exception as e:
                raise IntegrationError(
                    f"Integration failed at step {iteration}: {e}", step=iteration
                ) from e

            t, y = t_new, y_new
            points.append(self._make_point(t, y, dydt))
            run.record_step()

        return points

    def _check_state(self, t: float, y):
        if not (math.isfinite(t) and self._all_finite(y)):
            raise EvaluationError(f"Non-finite values encountered at t={t}")
        threshold = self.config["divergence_threshold"]
        if self._max_magnitude(y) > threshold:
            raise EvaluationError(
                f"Solution became unstable (|y| > {format_limit(threshold)}) at t={t}"
            )

    def _derivative(self, rhs: Callable, t: float, y):
        dydt = rhs(t, y)
        if not self._all_finite(dydt):
            raise EvaluationError(f"Derivative became non-finite at t={t}")
        return dydt

    def _failure(self, run: IntegrationRun, error: str, options, start_time: float):
        if not run.is_terminal:
            run.fail(error)
        return {
            "points": [],
            "method": _option(options, "method", DEFAULT_METHOD),
            "computation_time": time.time() - start_time,
            "success": False,
            "error": error,
            "metadata": self._empty_metadata(options),
        }

    # ========================================================================
    # Validation Helpers
    # ========================================================================

    def _check_common_bounds(self, options) -> Optional[str]:
        """Step-size and domain rules shared by both solvers (first failure or None)"""
        t0 = options["t0"]
        t_end = options["t_end"]
        step_size = options["step_size"]
        domain_length = abs(t_end - t0)

        if step_size <= 0:
            return "Step size must be positive"
        if step_size > domain_length:
            return "Step size cannot be larger than the integration domain"
        if t0 == t_end:
            return "Start and end t values cannot be equal"
        if domain_length > self.config["max_domain_length"]:
            return (
                f"Integration domain too large "
                f"(|t_end - t0| > {format_limit(self.config['max_domain_length'])})"
            )
        return None

    @staticmethod
    def _check_max_iterations(options) -> Optional[str]:
        max_iterations = options.get("max_iterations", DEFAULT_MAX_ITERATIONS)
        if not (
            isinstance(max_iterations, numbers.Integral)
            and not isinstance(max_iterations, bool)
            and max_iterations > 0
        ):
            return "max_iterations must be a positive integer"
        return None

    def _apply_step_size_advice(self, advice: StepSizeAdvice) -> Optional[str]:
        """
        Apply the validation policy to a step-size advisory.

        Returns the error text when the advisory rejects the step under the
        strict policy; otherwise issues any advisory warning as a
        StepSizeWarning and returns None.
        """
        warning = advice.get("warning")
        if not advice["valid"] and self.config["strict_step_size"]:
            return warning or "Invalid step size"
        if warning and self.config["warn_on_step_size"]:
            warnings.warn(f"Step size advisory: {warning}", StepSizeWarning)
        return None

    @staticmethod
    def _domain(options) -> TimeSpan:
        return (_option(options, "t0", 0), _option(options, "t_end", 0))

    # ========================================================================
    # Subclass Hooks
    # ========================================================================

    def _wrap_rhs(self, f: Callable, y0) -> Callable:
        return f

    @abstractmethod
    def _parse(self, expression):
        pass

    @abstractmethod
    def validate_options(self, options):
        """Check an options record; returns {'valid': bool, 'error'?: str}"""
        pass

    @abstractmethod
    def _methods(self) -> List:
        pass

    @abstractmethod
    def _resolve_method(self, key):
        pass

    @abstractmethod
    def _initial_state(self, y0):
        pass

    @abstractmethod
    def _all_finite(self, value) -> bool:
        pass

    @abstractmethod
    def _max_magnitude(self, value) -> float:
        pass

    @abstractmethod
    def _make_point(self, t: float, y, dydt) -> Dict:
        pass

    @abstractmethod
    def _metadata(self, points: List[Dict], options) -> Dict:
        pass

    @abstractmethod
    def _empty_metadata(self, options) -> Dict:
        pass


__all__ = [
    "SolverState",
    "IntegrationRun",
    "SolverBase",
    "is_finite_number",
    "format_limit",
    "END_TOLERANCE",
]
