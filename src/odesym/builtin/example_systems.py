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
Example Problems

Ready-made initial value problems for demonstrations and smoke tests.

Single equations:
- exponential_growth: dy/dt = y
- logistic_growth:    dy/dt = y(1 - y)
- forced_decay:       dy/dt = sin(t) - y

Coupled systems:
- harmonic_oscillator: y1' = y2, y2' = -y1 (mass-spring, period 2π)
- predator_prey:       Lotka-Volterra style prey/predator populations
- lorenz:              Lorenz attractor with σ=10, ρ=28, β=8/3

Examples
--------
>>> from odesym.builtin import get_example, list_examples
>>>
>>> [example.key for example in list_examples(coupled=True)]
['harmonic_oscillator', 'predator_prey', 'lorenz']
>>>
>>> problem = get_example('lorenz')
>>> solution = problem.solve()
>>> len(solution['points'][0]['y'])
3
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from odesym.solvers.coupled_ode_solver import CoupledODESolver
from odesym.solvers.ode_solver import ODESolver
from odesym.types.options import DEFAULT_METHOD, AnyODEOptions, MethodName


@dataclass(frozen=True)
class ExampleProblem:
    """
    A named initial value problem.

    Attributes
    ----------
    key : str
        Catalog key
    title : str
        Display title
    description : str
        One-line description of the model
    expressions : Tuple[str, ...]
        Right-hand sides (one for a single equation)
    t0 : float
        Initial time
    y0 : float or Tuple[float, ...]
        Initial value (tuple for coupled systems)
    t_end : float
        Final time
    step_size : float
        Recommended step size
    method : MethodName
        Recommended method
    """

    key: str
    title: str
    description: str
    expressions: Tuple[str, ...]
    t0: float
    y0: Union[float, Tuple[float, ...]]
    t_end: float
    step_size: float
    method: MethodName = DEFAULT_METHOD

    @property
    def coupled(self) -> bool:
        return isinstance(self.y0, tuple)

    def options(self) -> AnyODEOptions:
        """Options record matching this problem"""
        return {
            "t0": self.t0,
            "y0": list(self.y0) if self.coupled else self.y0,
            "t_end": self.t_end,
            "step_size": self.step_size,
            "method": self.method,
        }

    def solve(self, solver=None):
        """
        Solve the problem with its recommended settings.

        Parameters
        ----------
        solver : ODESolver or CoupledODESolver, optional
            Solver to use; a default one matching the problem type is
            created when omitted
        """
        if solver is None:
            solver = CoupledODESolver() if self.coupled else ODESolver()
        if self.coupled:
            return solver.solve(list(self.expressions), self.options())
        return solver.solve(self.expressions[0], self.options())


# ============================================================================
# Catalog
# ============================================================================

_EXAMPLES: Tuple[ExampleProblem, ...] = (
    ExampleProblem(
        key="exponential_growth",
        title="Exponential Growth",
        description="Unbounded growth proportional to size, y(t) = e^t",
        expressions=("y",),
        t0=0.0,
        y0=1.0,
        t_end=2.0,
        step_size=0.1,
    ),
    ExampleProblem(
        key="logistic_growth",
        title="Logistic Growth",
        description="Growth saturating at carrying capacity 1",
        expressions=("y*(1 - y)",),
        t0=0.0,
        y0=0.1,
        t_end=10.0,
        step_size=0.1,
    ),
    ExampleProblem(
        key="forced_decay",
        title="Forced Decay",
        description="First-order lag driven by a sinusoid",
        expressions=("sin(t) - y",),
        t0=0.0,
        y0=0.0,
        t_end=10.0,
        step_size=0.05,
    ),
    ExampleProblem(
        key="harmonic_oscillator",
        title="Simple Harmonic Oscillator",
        description="Mass-spring system, y1 = position, y2 = velocity",
        expressions=("y2", "-y1"),
        t0=0.0,
        y0=(1.0, 0.0),
        t_end=2 * math.pi,
        step_size=0.01,
    ),
    ExampleProblem(
        key="predator_prey",
        title="Predator-Prey",
        description="Prey y1 with predation pressure, predator y2 fed by prey",
        expressions=("0.1*y1*(1 - y2/50)", "-0.05*y2*(1 - y1/25)"),
        t0=0.0,
        y0=(40.0, 9.0),
        t_end=50.0,
        step_size=0.1,
    ),
    ExampleProblem(
        key="lorenz",
        title="Lorenz System",
        description="Chaotic convection model with σ=10, ρ=28, β=8/3",
        expressions=("10*(y2 - y1)", "y1*(28 - y3) - y2", "y1*y2 - (8/3)*y3"),
        t0=0.0,
        y0=(1.0, 1.0, 1.0),
        t_end=25.0,
        step_size=0.01,
    ),
)

EXAMPLES: Dict[str, ExampleProblem] = {example.key: example for example in _EXAMPLES}


def list_examples(coupled: Optional[bool] = None) -> List[ExampleProblem]:
    """
    Catalog entries in catalog order.

    Parameters
    ----------
    coupled : bool, optional
        True for coupled systems only, False for single equations only,
        None for everything
    """
    return [
        example for example in _EXAMPLES if coupled is None or example.coupled == coupled
    ]


def get_example(key: str) -> ExampleProblem:
    """
    Look up an example by key.

    Raises
    ------
    KeyError
        If the key is unknown; the message lists the available keys
    """
    if key not in EXAMPLES:
        raise KeyError(f"Unknown example '{key}'. Available: {sorted(EXAMPLES)}")
    return EXAMPLES[key]


__all__ = [
    "ExampleProblem",
    "EXAMPLES",
    "list_examples",
    "get_example",
]
