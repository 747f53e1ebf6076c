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
Expression Parsing
==================

Compiles restricted mathematical expressions into numeric right-hand-side
functions for the solvers.

>>> from odesym.parsing import EquationParser
>>>
>>> parser = EquationParser()
>>> parsed = parser.parse("sin(t) * y")
>>> parsed.valid
True
>>> system = parser.parse_coupled(["y2", "-y1"])
>>> system.n_equations
2

Grammar
-------
- Infix ``+ - * /``, powers as ``^`` or ``**``
- Implicit multiplication: ``2(t)``, ``(t)(y)``, ``(t + 1)y``
- Functions and constants listed by ``EquationParser.get_supported_functions()``
  and ``EquationParser.get_supported_constants()``
- Variables: ``t`` and ``y`` (single equation) or ``t`` and ``y1, y2, ...``
  (coupled system)
"""

from .equation_parser import (
    COUPLED_VARIABLE_PATTERN,
    DANGEROUS_PATTERNS,
    VARIABLE_PATTERN,
    EquationParser,
)
from .function_table import (
    ALLOWED_CONSTANTS,
    ALLOWED_FUNCTIONS,
    SYMPY_NAMESPACE,
    SYMPY_TO_NUMPY_LAMBDIFY,
    get_sympy_namespace,
)

__all__ = [
    "EquationParser",
    "VARIABLE_PATTERN",
    "COUPLED_VARIABLE_PATTERN",
    "DANGEROUS_PATTERNS",
    "ALLOWED_FUNCTIONS",
    "ALLOWED_CONSTANTS",
    "SYMPY_NAMESPACE",
    "SYMPY_TO_NUMPY_LAMBDIFY",
    "get_sympy_namespace",
]
