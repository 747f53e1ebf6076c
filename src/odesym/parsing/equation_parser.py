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
Equation Parser for ODE right-hand sides

Turns restricted mathematical expressions into callable numeric functions.

Pipeline (per expression):
1. Denylist check - reject text associated with code injection
2. Normalization - power rewriting, implicit multiplication, spacing
3. Identifier extraction - every name that is not an allow-listed
   function or constant
4. Variable whitelist - only t, y (single) or t, y1..yN (coupled)
5. Compilation - SymPy parse_expr in a closed namespace, then lambdify
   to NumPy
6. Self-test (single equations) - evaluate at (t=1, y=1)

Steps 1-4 run on the raw text before anything is handed to SymPy, so the
parser never evaluates an identifier it has not explicitly allowed.

Examples
--------
>>> parser = EquationParser()
>>> parsed = parser.parse("t^2 + y^3")
>>> parsed.valid
True
>>> parsed.evaluate(2, 3)
31.0
>>>
>>> system = parser.parse_coupled(["y2", "-y1"])
>>> system.evaluate(0, [1, 0])
array([ 0., -1.])
"""

import math
import re
from typing import Callable, Dict, List, Sequence, Tuple

import numpy as np
import sympy as sp
from sympy.parsing.sympy_parser import auto_number, auto_symbol, parse_expr

from odesym.exceptions import EvaluationError, ExpressionParseError
from odesym.parsing.function_table import (
    ALLOWED_CONSTANTS,
    ALLOWED_FUNCTIONS,
    SYMPY_TO_NUMPY_LAMBDIFY,
    get_sympy_namespace,
)
from odesym.types.parsing import (
    ExpressionCheck,
    ParsedCoupledEquations,
    ParsedEquation,
    invalid_evaluator,
)

# ============================================================================
# Patterns
# ============================================================================

VARIABLE_PATTERN = re.compile(r"\b([a-zA-Z_][a-zA-Z0-9_]*)\b")
COUPLED_VARIABLE_PATTERN = re.compile(r"^(t|y[1-9]\d*)$")
SCALAR_VARIABLES: Tuple[str, ...] = ("t", "y")

# Fragments rejected outright. parse_expr ultimately evaluates Python source,
# so this list guards the evaluator in addition to the variable whitelist.
DANGEROUS_PATTERNS: Tuple[re.Pattern, ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"import",
        r"require",
        r"eval",
        r"exec",
        r"function",
        r"lambda",
        r"while",
        r"for",
        r"if",
        r"var",
        r"let",
        r"const",
        r"=>",
        r"\.\.",
        r"__",
        r"prototype",
        r"['\"`;\\]",
    )
)

# A power operand: function call, identifier, number or flat parenthesized group
_OPERAND = (
    r"(?:[A-Za-z_]\w*\s*\([^()]*\)"
    r"|[A-Za-z_]\w*"
    r"|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
    r"|\([^()]*\))"
)
# Exponent may not be followed by another power (right associativity)
_POWER_PATTERN = re.compile(
    rf"(?<![\w.)])({_OPERAND})\s*(?:\^|\*\*)\s*(-?{_OPERAND})(?![\w.(]|\s*(?:\^|\*\*))"
)
_NAME_BEFORE_PAREN = re.compile(r"\b([A-Za-z_]\w*)\s*\(")
_NUMBER_BEFORE_PAREN = re.compile(r"(?<![\w.])((?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*\(")
_PAREN_BEFORE_TERM = re.compile(r"\)\s*(?=[A-Za-z_\d.(])")
_BINARY_OPERATOR = re.compile(r"(?<!\d[eE])([+\-*/])")
# Adjacent multiplicative operators left after power rewriting: "* *", "//", "* /"
_DOUBLED_OPERATOR = re.compile(r"[*/]\s*[*/]")

_PARSE_TRANSFORMATIONS = (auto_symbol, auto_number)
_PARSE_GLOBALS = {
    "Integer": sp.Integer,
    "Float": sp.Float,
    "Rational": sp.Rational,
    "Symbol": sp.Symbol,
    "Function": sp.Function,
}

# Sample point for the single-equation self-test
SELF_TEST_POINT: Tuple[float, float] = (1.0, 1.0)


def _to_real(value) -> float:
    """Convert an evaluator result to a real float (raise on complex)"""
    if isinstance(value, (complex, np.complexfloating)):
        if value.imag != 0:
            raise TypeError(f"expression produced a complex value {value}")
        value = value.real
    if isinstance(value, np.ndarray):
        if value.size != 1:
            raise TypeError(f"expression produced an array of shape {value.shape}")
        return _to_real(value.reshape(()).item())
    return float(value)


class EquationParser:
    """
    Parses and compiles mathematical expressions for ODE solving.

    The parser is stateless; one instance can be shared freely.

    Examples
    --------
    >>> parser = EquationParser()
    >>> parsed = parser.parse("sin(t) * y")
    >>> if parsed.valid:
    ...     dydt = parsed.evaluate(0.5, 2.0)
    >>>
    >>> parser.parse("t + z").error
    "Invalid variables found: z. Only 't' and 'y' are allowed."
    """

    ALLOWED_FUNCTIONS = ALLOWED_FUNCTIONS
    ALLOWED_CONSTANTS = ALLOWED_CONSTANTS

    # ========================================================================
    # Public API
    # ========================================================================

    def parse(self, expression: str) -> ParsedEquation:
        """
        Parse a single right-hand side dy/dt = f(t, y).

        Parameters
        ----------
        expression : str
            Expression in t and y (e.g. "t + y", "sin(t) * y", "t^2")

        Returns
        -------
        ParsedEquation
            Always returned, never raised. Check ``valid`` before calling
            ``evaluate``.

        Examples
        --------
        >>> parsed = EquationParser().parse("exp(t) - y")
        >>> parsed.variables
        ['t', 'y']
        >>> parsed.evaluate(0, 0)
        1.0
        """
        try:
            self._check_safety(expression)
            normalized = self.normalize_expression(expression)
            if not normalized:
                raise ExpressionParseError("expression is empty")

            variables = self.extract_variables(normalized)
            invalid_vars = [v for v in variables if v not in SCALAR_VARIABLES]
            if invalid_vars:
                return ParsedEquation(
                    original=expression,
                    evaluate=invalid_evaluator("Invalid variables"),
                    variables=variables,
                    valid=False,
                    error=(
                        f"Invalid variables found: {', '.join(invalid_vars)}. "
                        f"Only 't' and 'y' are allowed."
                    ),
                    normalized=normalized,
                )

            symbols = [sp.Symbol("t"), sp.Symbol("y")]
            expr = self._to_sympy(normalized, {s.name: s for s in symbols})
            evaluate = self._compile_scalar(expr, symbols)
        except Exception as e:
            return ParsedEquation(
                original=expression,
                evaluate=invalid_evaluator("Parse error"),
                variables=[],
                valid=False,
                error=f"Parse error: {e}",
            )

        # Catch domain problems before they surface inside an integration loop
        try:
            test_value = evaluate(*SELF_TEST_POINT)
            if not math.isfinite(test_value):
                raise EvaluationError("Function produces non-finite values")
        except EvaluationError as e:
            return ParsedEquation(
                original=expression,
                evaluate=invalid_evaluator("Function test failed"),
                variables=variables,
                valid=False,
                error=f"Function test failed: {e}",
                normalized=normalized,
            )

        return ParsedEquation(
            original=expression,
            evaluate=evaluate,
            variables=variables,
            valid=True,
            normalized=normalized,
        )

    def parse_coupled(self, expressions: Sequence[str]) -> ParsedCoupledEquations:
        """
        Parse the right-hand sides of a coupled system.

        Equation k gives dy_k/dt. Variables are t and y1, y2, ... where
        y_k is the k-th component of the state vector.

        Parameters
        ----------
        expressions : Sequence[str]
            One expression per equation

        Returns
        -------
        ParsedCoupledEquations
            Always returned, never raised.

        Examples
        --------
        >>> system = EquationParser().parse_coupled(["y2", "-y1"])
        >>> system.variables
        ['y1', 'y2']
        >>> system.evaluate(0, [1, 0]).tolist()
        [0.0, -1.0]
        """
        if isinstance(expressions, str):
            return ParsedCoupledEquations(
                original=[expressions],
                evaluate=invalid_evaluator("Parse error"),
                valid=False,
                error="Parse error: expected a list of expressions, got a single string",
            )
        original = list(expressions) if expressions is not None else []
        try:
            if not original:
                return ParsedCoupledEquations(
                    original=[],
                    evaluate=invalid_evaluator("No equations"),
                    valid=False,
                    error="No equations provided",
                )

            normalized: List[str] = []
            all_variables = set()
            for expression in original:
                self._check_safety(expression)
                clean = self.normalize_expression(expression)
                if not clean:
                    raise ExpressionParseError("expression is empty")
                normalized.append(clean)
                all_variables.update(self.extract_variables(clean))

            variables = sorted(all_variables)
            for variable in variables:
                if not COUPLED_VARIABLE_PATTERN.match(variable):
                    return ParsedCoupledEquations(
                        original=original,
                        evaluate=invalid_evaluator("Invalid variables"),
                        variables=variables,
                        valid=False,
                        error=(
                            f"Invalid variable '{variable}'. "
                            f"Expected format: t, y1, y2, y3, etc."
                        ),
                        normalized=normalized,
                    )

            n_state = max((int(v[1:]) for v in variables if v != "t"), default=0)
            symbols = [sp.Symbol("t")] + [sp.Symbol(f"y{k}") for k in range(1, n_state + 1)]
            namespace = {s.name: s for s in symbols}
            exprs = [self._to_sympy(clean, namespace) for clean in normalized]
            evaluate = self._compile_coupled(exprs, symbols, n_state)
        except Exception as e:
            return ParsedCoupledEquations(
                original=original,
                evaluate=invalid_evaluator("Parse error"),
                valid=False,
                error=f"Parse error: {e}",
            )

        return ParsedCoupledEquations(
            original=original,
            evaluate=evaluate,
            variables=variables,
            valid=True,
            normalized=normalized,
        )

    def validate_expression(self, expression: str) -> ExpressionCheck:
        """
        Textual safety filter, independent of compilation.

        Rejects expressions containing fragments associated with code
        injection or control-flow smuggling.

        Examples
        --------
        >>> EquationParser().validate_expression('eval("x")')
        {'valid': False, 'error': 'Potentially unsafe expression detected: eval'}
        """
        if not isinstance(expression, str):
            return {
                "valid": False,
                "error": f"Validation error: expected str, got {type(expression).__name__}",
            }
        for pattern in DANGEROUS_PATTERNS:
            if pattern.search(expression):
                return {
                    "valid": False,
                    "error": f"Potentially unsafe expression detected: {pattern.pattern}",
                }
        return {"valid": True}

    @staticmethod
    def get_supported_functions() -> List[str]:
        """Sorted list of allow-listed function names"""
        return sorted(ALLOWED_FUNCTIONS)

    @staticmethod
    def get_supported_constants() -> List[str]:
        """Sorted list of allow-listed constant names"""
        return sorted(ALLOWED_CONSTANTS)

    # ========================================================================
    # Normalization and Extraction
    # ========================================================================

    @staticmethod
    def normalize_expression(expression: str) -> str:
        """
        Normalize expression text for consistent parsing.

        - ``a^b`` / ``a**b`` with simple operands → ``pow(a, b)``
        - ``2(t)``, ``t(y + 1)``, ``(t)(y)``, ``(t + 1)y`` → explicit ``*``
        - ``pi`` / ``e`` in any letter case → lowercase
        - single spaces around binary ``+ - * /``

        Raises
        ------
        ExpressionParseError
            If multiplicative operators are doubled (``t * * y``, ``t // y``)

        Examples
        --------
        >>> EquationParser.normalize_expression("t^2+2(y)")
        'pow(t, 2) + 2 * (y)'
        """
        normalized = expression.strip()

        # Powers, innermost/rightmost first
        while True:
            normalized, count = _POWER_PATTERN.subn(r"pow(\1, \2)", normalized)
            if count == 0:
                break
        normalized = normalized.replace("**", "^")
        doubled = _DOUBLED_OPERATOR.search(normalized)
        if doubled:
            raise ExpressionParseError(f"malformed operator '{doubled.group(0)}'")

        # Implicit multiplication
        normalized = _NAME_BEFORE_PAREN.sub(
            lambda m: m.group(0) if m.group(1) in ALLOWED_FUNCTIONS else f"{m.group(1)}*(",
            normalized,
        )
        normalized = _NUMBER_BEFORE_PAREN.sub(r"\1*(", normalized)
        normalized = _PAREN_BEFORE_TERM.sub(")*", normalized)

        # Constants
        normalized = re.sub(r"\bpi\b", "pi", normalized, flags=re.IGNORECASE)
        normalized = re.sub(r"\be\b(?!\w)", "e", normalized, flags=re.IGNORECASE)

        # Spacing
        normalized = _BINARY_OPERATOR.sub(r" \1 ", normalized)
        normalized = re.sub(r"\s*\^\s*", " ** ", normalized)
        normalized = re.sub(r"\s+", " ", normalized).strip()

        return normalized

    @staticmethod
    def extract_variables(expression: str) -> List[str]:
        """
        Extract identifiers that are neither allowed functions nor constants.

        Examples
        --------
        >>> EquationParser.extract_variables("sin(t) * y + pi")
        ['t', 'y']
        """
        variables = set()
        for match in VARIABLE_PATTERN.finditer(expression):
            name = match.group(1)
            if name in ALLOWED_FUNCTIONS or name in ALLOWED_CONSTANTS:
                continue
            variables.add(name)
        return sorted(variables)

    # ========================================================================
    # Compilation
    # ========================================================================

    def _check_safety(self, expression: str):
        check = self.validate_expression(expression)
        if not check["valid"]:
            raise ExpressionParseError(check["error"])

    @staticmethod
    def _to_sympy(normalized: str, variables: Dict[str, sp.Symbol]) -> sp.Expr:
        """
        Parse normalized text into a SymPy expression.

        Only allow-listed names and the given variable symbols are visible;
        builtins are removed from the evaluation namespace.
        """
        local_dict = get_sympy_namespace()
        local_dict.update(variables)
        global_dict = {"__builtins__": {}}
        global_dict.update(_PARSE_GLOBALS)

        expr = parse_expr(
            normalized,
            local_dict=local_dict,
            global_dict=global_dict,
            transformations=_PARSE_TRANSFORMATIONS,
        )
        if isinstance(expr, (int, float)):
            expr = sp.sympify(expr)
        if not isinstance(expr, sp.Expr):
            raise ExpressionParseError(
                f"expression does not describe a numeric value (got {type(expr).__name__})"
            )
        return expr

    @staticmethod
    def _lambdify(symbols: List[sp.Symbol], expr: sp.Expr) -> Callable:
        return sp.lambdify(symbols, expr, modules=[SYMPY_TO_NUMPY_LAMBDIFY, "numpy"])

    def _compile_scalar(self, expr: sp.Expr, symbols: List[sp.Symbol]) -> Callable[[float, float], float]:
        func = self._lambdify(symbols, expr)

        def evaluate(t: float, y: float) -> float:
            try:
                with np.errstate(all="ignore"):
                    value = func(np.float64(t), np.float64(y))
                return _to_real(value)
            except Exception as e:
                raise EvaluationError(f"Evaluation error: {e}") from e

        return evaluate

    def _compile_coupled(
        self, exprs: List[sp.Expr], symbols: List[sp.Symbol], n_state: int
    ) -> Callable[[float, Sequence[float]], np.ndarray]:
        funcs = [self._lambdify(symbols, expr) for expr in exprs]

        def evaluate(t: float, y: Sequence[float]) -> np.ndarray:
            state = np.asarray(y, dtype=float).ravel()
            if state.size < n_state:
                raise EvaluationError(
                    f"Evaluation failed: undefined symbol y{n_state} "
                    f"(state has {state.size} components)"
                )
            args = [np.float64(t)] + [state[k] for k in range(n_state)]

            result = np.empty(len(funcs), dtype=float)
            for k, func in enumerate(funcs):
                try:
                    with np.errstate(all="ignore"):
                        value = _to_real(func(*args))
                    if not math.isfinite(value):
                        raise ValueError("Non-numeric result")
                except Exception as e:
                    raise EvaluationError(
                        f"Evaluation failed for equation {k + 1}: {e}"
                    ) from e
                result[k] = value
            return result

        return evaluate


__all__ = [
    "EquationParser",
    "VARIABLE_PATTERN",
    "COUPLED_VARIABLE_PATTERN",
    "DANGEROUS_PATTERNS",
]
