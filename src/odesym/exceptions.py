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
Exceptions for odesym

Error taxonomy:
- ExpressionParseError: expression text could not be turned into a function
- EvaluationError: a compiled right-hand side failed at evaluation time
- ValidationError: solver options are out of contract
- IntegrationError: stepping produced non-finite or divergent values,
  or ran out of iterations

Parse, validation and integration errors are normally reported as structured results
(``valid=False`` / ``success=False``) rather than raised across the public
API. The exception classes exist so that the layers below the solvers can
signal precisely what went wrong.
"""

from typing import Optional


class OdesymError(Exception):
    """Base class for all odesym errors"""

    pass


class ExpressionParseError(OdesymError, ValueError):
    """Raised when an expression cannot be parsed or compiled"""

    pass


class EvaluationError(OdesymError, ArithmeticError):
    """Raised when a compiled expression fails during evaluation"""

    pass


class ValidationError(OdesymError, ValueError):
    """Raised when solver configuration or options fail validation"""

    pass


class IntegrationError(OdesymError, RuntimeError):
    """
    Raised when the integration loop cannot continue.

    Attributes
    ----------
    step : int or None
        Index of the step at which the failure occurred (0 for the initial
        point, the iteration count on cap exhaustion), or None when raised
        outside the stepping loop.
    """

    def __init__(self, message: str, step: Optional[int] = None):
        super().__init__(message)
        self.step = step


class StepSizeWarning(UserWarning):
    """Issued when a step size is accepted but likely to be slow or inaccurate"""

    pass


__all__ = [
    "OdesymError",
    "ExpressionParseError",
    "EvaluationError",
    "ValidationError",
    "IntegrationError",
    "StepSizeWarning",
]
