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
Parsing Result Types

Containers returned by EquationParser.

A parse result is built once per parse call and never mutated afterwards.
When ``valid`` is False its ``evaluate`` is a stub that always raises
EvaluationError, so an invalid result can never be evaluated by accident.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

import numpy as np
from typing_extensions import TypedDict

from odesym.exceptions import EvaluationError


class ExpressionCheck(TypedDict, total=False):
    """
    Outcome of a dry-run check (expression safety, equation or option
    validation).

    Attributes
    ----------
    valid : bool
        True if the check passed
    error : str
        Reason for failure (present only when valid is False)
    """

    valid: bool
    error: str


def invalid_evaluator(reason: str) -> Callable:
    """
    Build an evaluator stub for invalid parse results.

    Examples
    --------
    >>> stub = invalid_evaluator('Invalid variables')
    >>> stub(0.0, 1.0)
    Traceback (most recent call last):
        ...
    EvaluationError: Invalid variables
    """

    def evaluate(*args, **kwargs):
        raise EvaluationError(reason)

    return evaluate


@dataclass(frozen=True)
class ParsedEquation:
    """
    Result of parsing a single right-hand side dy/dt = f(t, y).

    Attributes
    ----------
    original : str
        Expression as supplied by the caller
    evaluate : Callable[[float, float], float]
        Compiled evaluator (t, y) → dy/dt
    variables : List[str]
        Sorted identifiers referenced by the expression (excluding
        allow-listed functions and constants)
    valid : bool
        True if the expression parsed, passed the variable whitelist and
        evaluated to a finite number at (t=1, y=1)
    error : Optional[str]
        Diagnostic when valid is False
    normalized : str
        Expression text after normalization
    """

    original: str
    evaluate: Callable[[float, float], float]
    variables: List[str] = field(default_factory=list)
    valid: bool = False
    error: Optional[str] = None
    normalized: str = ""


@dataclass(frozen=True)
class ParsedCoupledEquations:
    """
    Result of parsing the right-hand sides of a coupled system.

    Attributes
    ----------
    original : List[str]
        Expressions as supplied, one per equation
    evaluate : Callable[[float, Sequence[float]], np.ndarray]
        Compiled evaluator (t, [y1..yn]) → [dy1/dt..dyn/dt]
    variables : List[str]
        Sorted union of identifiers referenced by all equations
    valid : bool
        True if every equation parsed and passed the whitelist
    error : Optional[str]
        Diagnostic when valid is False
    normalized : List[str]
        Expression texts after normalization
    """

    original: List[str]
    evaluate: Callable[[float, Sequence[float]], np.ndarray]
    variables: List[str] = field(default_factory=list)
    valid: bool = False
    error: Optional[str] = None
    normalized: List[str] = field(default_factory=list)

    @property
    def n_equations(self) -> int:
        """Number of equations in the system"""
        return len(self.original)


__all__ = [
    "ExpressionCheck",
    "ParsedEquation",
    "ParsedCoupledEquations",
    "invalid_evaluator",
]
