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
Types Module - Type Definitions for odesym

Central import point for all type definitions. Organized into
domain-specific modules but re-exported here for convenience.

Usage
-----
>>> from odesym.types import (
...     ODEOptions,
...     ODESolution,
...     ParsedEquation,
...     StepSizeAdvice,
... )

Module Organization
------------------
- core: Scalars, state vectors, right-hand-side function types
- options: Per-call options, solver configuration and defaults
- parsing: Parse results and dry-run check results
- methods: Method info and step-size advisory results
- trajectories: Solution points, metadata and solution results
"""

from .core import (
    CoupledODEFunction,
    ODEFunction,
    ScalarLike,
    ScalarStepFunction,
    StateLike,
    StateVector,
    TimeSpan,
    ValueRange,
    VectorStepFunction,
)
from .methods import MethodInfo, StepSizeAdvice, SupportedMath
from .options import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_METHOD,
    DEFAULT_SOLVER_CONFIG,
    DIVERGENCE_THRESHOLD,
    MAX_DOMAIN_LENGTH,
    MAX_INITIAL_MAGNITUDE,
    AnyODEOptions,
    CoupledODEOptions,
    MethodName,
    ODEOptions,
    SolverConfig,
)
from .parsing import (
    ExpressionCheck,
    ParsedCoupledEquations,
    ParsedEquation,
    invalid_evaluator,
)
from .trajectories import (
    CoupledODESolution,
    CoupledSolutionMetadata,
    CoupledSolutionPoint,
    ODESolution,
    SolutionMetadata,
    SolutionPoint,
)

__all__ = [
    # Core
    "ScalarLike",
    "StateVector",
    "StateLike",
    "TimeSpan",
    "ValueRange",
    "ODEFunction",
    "CoupledODEFunction",
    "ScalarStepFunction",
    "VectorStepFunction",
    # Methods
    "MethodInfo",
    "StepSizeAdvice",
    "SupportedMath",
    # Options
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
    # Parsing
    "ExpressionCheck",
    "ParsedEquation",
    "ParsedCoupledEquations",
    "invalid_evaluator",
    # Trajectories
    "SolutionPoint",
    "CoupledSolutionPoint",
    "SolutionMetadata",
    "CoupledSolutionMetadata",
    "ODESolution",
    "CoupledODESolution",
]
