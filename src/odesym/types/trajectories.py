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
Trajectory and Solution Types

Defines the records produced by the solvers:
- Solution points (one sample of the trajectory)
- Solution metadata (counts, domain, attained ranges)
- Solution results (the sole artifact handed back to callers)

All result types are TypedDicts holding plain Python floats and lists, so a
solution can be passed to ``json.dumps`` without conversion.

Shape Convention
----------------
Points are stored time-major, in integration order:

- Scalar:  points[k] = {'t': t_k, 'y': y_k, 'dydt': f(t_k, y_k)}
- Coupled: points[k] = {'t': t_k, 'y': [y1, ..., yn], 'dydt': [...]}

Usage
-----
>>> solution = ODESolver().solve('t + y', options)
>>> if solution['success']:
...     ts = [p['t'] for p in solution['points']]
...     ys = [p['y'] for p in solution['points']]
... else:
...     print(solution['error'])
"""

from typing import List, Tuple

from typing_extensions import TypedDict

from .core import ValueRange

# ============================================================================
# Solution Points
# ============================================================================


class SolutionPoint(TypedDict):
    """
    One sample of a scalar solution.

    Attributes
    ----------
    t : float
        Independent variable
    y : float
        Solution value y(t)
    dydt : float
        Derivative f(t, y) at this point
    """

    t: float
    y: float
    dydt: float


class CoupledSolutionPoint(TypedDict):
    """
    One sample of a coupled solution.

    Attributes
    ----------
    t : float
        Independent variable
    y : List[float]
        State [y1(t), ..., yn(t)]
    dydt : List[float]
        Derivatives [dy1/dt, ..., dyn/dt] at this point
    """

    t: float
    y: List[float]
    dydt: List[float]


# ============================================================================
# Metadata
# ============================================================================


class SolutionMetadata(TypedDict):
    """
    Metadata of a scalar solution.

    Attributes
    ----------
    total_points : int
        Number of points in the trajectory (0 on failure)
    step_size : float
        Step size as requested
    domain : Tuple[float, float]
        (t0, t_end) as requested
    range : Tuple[float, float]
        (min y, max y) over the trajectory ((0, 0) on failure)
    """

    total_points: int
    step_size: float
    domain: Tuple[float, float]
    range: ValueRange


class CoupledSolutionMetadata(TypedDict):
    """
    Metadata of a coupled solution.

    Same as SolutionMetadata with one (min, max) range per state component
    in ``ranges``.
    """

    total_points: int
    step_size: float
    domain: Tuple[float, float]
    ranges: List[ValueRange]


# ============================================================================
# Solutions
# ============================================================================


class ODESolution(TypedDict, total=False):
    """
    Result of solving a single ODE.

    Attributes
    ----------
    points : List[SolutionPoint]
        Full trajectory on success, empty on failure
    method : str
        Display name of the method used (requested key on failure)
    computation_time : float
        Wall-clock time in seconds
    success : bool
        Sole failure signal for callers
    error : str
        Present only when success is False
    metadata : SolutionMetadata
        Counts, domain and attained range

    Examples
    --------
    >>> solution: ODESolution = solver.solve('t + y', options)
    >>> solution['success']
    True
    >>> solution['metadata']['total_points'] == len(solution['points'])
    True
    """

    points: List[SolutionPoint]
    method: str
    computation_time: float
    success: bool
    error: str
    metadata: SolutionMetadata


class CoupledODESolution(TypedDict, total=False):
    """
    Result of solving a coupled system.

    Same fields as ODESolution with CoupledSolutionPoint points and
    CoupledSolutionMetadata metadata.
    """

    points: List[CoupledSolutionPoint]
    method: str
    computation_time: float
    success: bool
    error: str
    metadata: CoupledSolutionMetadata


__all__ = [
    "SolutionPoint",
    "CoupledSolutionPoint",
    "SolutionMetadata",
    "CoupledSolutionMetadata",
    "ODESolution",
    "CoupledODESolution",
]
