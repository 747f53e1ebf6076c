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
odesym - Fixed-Step ODE Solving from Text Expressions
=====================================================

Solve single first-order ODEs dy/dt = f(t, y) and coupled systems
dy_k/dt = f_k(t, y1, ..., yn) written as plain mathematical text, with
explicit Euler, Heun or classic RK4.

>>> from odesym import ODESolver, CoupledODESolver
>>>
>>> solution = ODESolver().solve('t + y', {
...     't0': 0.0, 'y0': 1.0, 't_end': 1.0, 'step_size': 0.1, 'method': 'rk4',
... })
>>> solution['points'][-1]['t']
1.0
>>>
>>> solution = CoupledODESolver().solve(['y2', '-y1'], {
...     't0': 0.0, 'y0': [1.0, 0.0], 't_end': 6.283185307179586, 'step_size': 0.01,
... })

Subpackages
-----------
- parsing: expression normalization, whitelisting and compilation
- integration: Euler/Heun/RK4 and step-size diagnostics
- solvers: validation and integration orchestration
- builtin: ready-made example problems
- types: TypedDict/dataclass records used across the package

Authors
-------
Gil Benezer

License
-------
GNU Affero General Public License v3.0
"""

from .builtin import ExampleProblem, get_example, list_examples
from .exceptions import (
    EvaluationError,
    ExpressionParseError,
    IntegrationError,
    OdesymError,
    StepSizeWarning,
    ValidationError,
)
from .integration import (
    MethodKey,
    estimate_coupled_step_size,
    estimate_step_size,
    get_all_coupled_methods,
    get_all_methods,
    get_coupled_method,
    get_method,
    get_method_names,
    validate_coupled_step_size,
    validate_step_size,
)
from .parsing import EquationParser
from .solvers import CoupledODESolver, IntegrationRun, ODESolver, SolverState

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Solvers
    "ODESolver",
    "CoupledODESolver",
    "SolverState",
    "IntegrationRun",
    # Parsing
    "EquationParser",
    # Methods
    "MethodKey",
    "get_method",
    "get_coupled_method",
    "get_all_methods",
    "get_all_coupled_methods",
    "get_method_names",
    "validate_step_size",
    "validate_coupled_step_size",
    "estimate_step_size",
    "estimate_coupled_step_size",
    # Examples
    "ExampleProblem",
    "list_examples",
    "get_example",
    # Exceptions
    "OdesymError",
    "ExpressionParseError",
    "EvaluationError",
    "ValidationError",
    "IntegrationError",
    "StepSizeWarning",
]
