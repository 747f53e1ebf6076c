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
Numerical Integration
=====================

Fixed-step explicit methods (Euler, Heun, RK4) for single equations and
coupled systems, with a registry and step-size diagnostics.

>>> from odesym.integration import get_method, get_coupled_method
>>>
>>> method = get_method('rk4')
>>> t_next, y_next = method.step(lambda t, y: t + y, 0.0, 1.0, 0.1)
>>>
>>> coupled = get_coupled_method('euler')
>>> t_next, state = coupled.step(lambda t, y: [y[1], -y[0]], 0.0, np.array([1.0, 0.0]), 0.1)

Methods
-------
- euler: Explicit Euler, order 1
- heun: Heun predictor-corrector, order 2
- rk4: Classic Runge-Kutta, order 4
"""

from .fixed_step_methods import (
    COUPLED_EULER,
    COUPLED_HEUN,
    COUPLED_RK4,
    EULER,
    HEUN,
    RK4,
    CoupledNumericalMethod,
    NumericalMethod,
    euler_step,
    euler_step_vector,
    heun_step,
    heun_step_vector,
    rk4_step,
    rk4_step_vector,
)
from .method_registry import (
    COUPLED_METHODS,
    FIXED_STEP_METHODS,
    METHODS,
    MethodKey,
    estimate_coupled_step_size,
    estimate_step_size,
    get_all_coupled_methods,
    get_all_methods,
    get_coupled_method,
    get_coupled_method_names,
    get_method,
    get_method_names,
    method_info,
    validate_coupled_step_size,
    validate_step_size,
)

__all__ = [
    # Method records
    "NumericalMethod",
    "CoupledNumericalMethod",
    "EULER",
    "HEUN",
    "RK4",
    "COUPLED_EULER",
    "COUPLED_HEUN",
    "COUPLED_RK4",
    # Step functions
    "euler_step",
    "heun_step",
    "rk4_step",
    "euler_step_vector",
    "heun_step_vector",
    "rk4_step_vector",
    # Registry
    "MethodKey",
    "FIXED_STEP_METHODS",
    "METHODS",
    "COUPLED_METHODS",
    "get_method",
    "get_coupled_method",
    "method_info",
    "get_all_methods",
    "get_all_coupled_methods",
    "get_method_names",
    "get_coupled_method_names",
    # Step-size diagnostics
    "validate_step_size",
    "validate_coupled_step_size",
    "estimate_step_size",
    "estimate_coupled_step_size",
]
