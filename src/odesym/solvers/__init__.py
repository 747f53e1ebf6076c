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
Solvers
=======

Orchestration of parsing, validation and fixed-step integration.

>>> from odesym.solvers import ODESolver, CoupledODESolver
>>>
>>> ODESolver().solve('t + y', {'t0': 0, 'y0': 1, 't_end': 1, 'step_size': 0.1})
>>> CoupledODESolver().solve(['y2', '-y1'], {'t0': 0, 'y0': [1, 0], 't_end': 1, 'step_size': 0.01})
"""

from .coupled_ode_solver import CoupledODESolver
from .ode_solver import ODESolver
from .solver_base import (
    END_TOLERANCE,
    IntegrationRun,
    SolverBase,
    SolverState,
    format_limit,
    is_finite_number,
)

__all__ = [
    "SolverBase",
    "SolverState",
    "IntegrationRun",
    "ODESolver",
    "CoupledODESolver",
    "is_finite_number",
    "format_limit",
    "END_TOLERANCE",
]
