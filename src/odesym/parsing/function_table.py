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
Function and constant tables for expression compilation.

Two tables drive the SymPy → NumPy pipeline:

- SYMPY_NAMESPACE: what each allow-listed name means while parsing
  (``parse_expr`` local namespace). Anything not in this table and not a
  declared variable never reaches the parser.
- SYMPY_TO_NUMPY_LAMBDIFY: NumPy implementations for functions the NumPy
  printer does not know (sec, csc, cot, cbrt, round, random) and for
  variadic Min/Max.

Semantics follow the usual calculator conventions:
- log(x) is the natural log, log(x, b) takes an explicit base
- round() rounds half away from zero
- cbrt() is the real cube root (cbrt(-8) = -2)
- random() draws from U[0, 1) on every evaluation
"""

from typing import Callable, Dict, FrozenSet

import numpy as np
import sympy as sp

# ============================================================================
# Allow-lists
# ============================================================================

ALLOWED_FUNCTIONS: FrozenSet[str] = frozenset([
    # Trigonometric
    "sin", "cos", "tan", "sec", "csc", "cot",
    "asin", "acos", "atan", "atan2",
    # Hyperbolic
    "sinh", "cosh", "tanh",
    # Exponential/Logarithmic
    "exp", "log", "log10", "log2",
    # Powers and roots
    "sqrt", "cbrt", "pow", "abs",
    # Rounding
    "floor", "ceil", "round", "sign",
    # Other
    "max", "min", "random",
])

ALLOWED_CONSTANTS: FrozenSet[str] = frozenset(["pi", "PI", "e", "E", "i"])


# ============================================================================
# Undefined functions (resolved by name at lambdify time)
# ============================================================================

_cbrt = sp.Function("cbrt")
_round = sp.Function("round")
_random = sp.Function("random")


def _log(x, base=None):
    if base is None:
        return sp.log(x)
    return sp.log(x, base)


SYMPY_NAMESPACE: Dict[str, object] = {
    # Trigonometric
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "sec": sp.sec,
    "csc": sp.csc,
    "cot": sp.cot,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "atan2": sp.atan2,
    # Hyperbolic
    "sinh": sp.sinh,
    "cosh": sp.cosh,
    "tanh": sp.tanh,
    # Exponential/Logarithmic
    "exp": sp.exp,
    "log": _log,
    "log10": lambda x: sp.log(x, 10),
    "log2": lambda x: sp.log(x, 2),
    # Powers and roots
    "sqrt": sp.sqrt,
    "cbrt": _cbrt,
    "pow": sp.Pow,
    "abs": sp.Abs,
    # Rounding
    "floor": sp.floor,
    "ceil": sp.ceiling,
    "round": _round,
    "sign": sp.sign,
    # Other
    "max": sp.Max,
    "min": sp.Min,
    "random": _random,
    # Constants
    "pi": sp.pi,
    "PI": sp.pi,
    "e": sp.E,
    "E": sp.E,
    "i": sp.I,
}


# ============================================================================
# NumPy helpers
# ============================================================================


def _numpy_min(*args):
    """
    Handle SymPy Min for NumPy backend.

    SymPy's Min can take arbitrary number of arguments: Min(x, y, z)
    NumPy's np.minimum only takes 2 arguments.
    """
    if len(args) == 0:
        raise ValueError("Min requires at least one argument")
    result = args[0]
    for arg in args[1:]:
        result = np.minimum(result, arg)
    return result


def _numpy_max(*args):
    """Handle SymPy Max for NumPy backend (see _numpy_min)"""
    if len(args) == 0:
        raise ValueError("Max requires at least one argument")
    result = args[0]
    for arg in args[1:]:
        result = np.maximum(result, arg)
    return result


def _numpy_round(x):
    # half away from zero, not numpy's half-to-even
    return np.sign(x) * np.floor(np.abs(x) + 0.5)


def _numpy_random():
    return np.random.random()


SYMPY_TO_NUMPY_LAMBDIFY: Dict[str, Callable] = {
    # Reciprocal trigonometric
    "sec": lambda x: 1.0 / np.cos(x),
    "csc": lambda x: 1.0 / np.sin(x),
    "cot": lambda x: 1.0 / np.tan(x),
    # Roots and rounding
    "cbrt": np.cbrt,
    "round": _numpy_round,
    "Abs": np.abs,
    # Min/Max handling
    "Min": _numpy_min,
    "Max": _numpy_max,
    # Random
    "random": _numpy_random,
}


def get_sympy_namespace() -> Dict[str, object]:
    """Fresh copy of the parsing namespace (callers add variable symbols)"""
    return dict(SYMPY_NAMESPACE)


__all__ = [
    "ALLOWED_FUNCTIONS",
    "ALLOWED_CONSTANTS",
    "SYMPY_NAMESPACE",
    "SYMPY_TO_NUMPY_LAMBDIFY",
    "get_sympy_namespace",
]
