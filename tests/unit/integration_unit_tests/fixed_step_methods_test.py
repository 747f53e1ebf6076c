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
Unit tests for fixed-step methods

Tests cover:
1. Single steps of Euler, Heun and RK4 against hand-computed values
2. Backward (negative h) steps
3. Vector forms on the harmonic oscillator
4. Convergence order verification against analytical solutions
5. Method records (metadata, immutability)
"""

import dataclasses

import numpy as np
import pytest

from odesym.integration.fixed_step_methods import (
    COUPLED_EULER,
    COUPLED_HEUN,
    COUPLED_RK4,
    EULER,
    HEUN,
    RK4,
    euler_step,
    euler_step_vector,
    heun_step,
    heun_step_vector,
    rk4_step,
    rk4_step_vector,
)

# ============================================================================
# Test Problems with Analytical Solutions
# ============================================================================


def linear_rhs(t, y):
    """dy/dt = t + y, y(0) = 1 → y(t) = 2e^t - t - 1"""
    return t + y


def linear_solution(t):
    return 2 * np.exp(t) - t - 1


def decay_rhs(t, y):
    """dy/dt = -2y"""
    return -2.0 * y


def harmonic_rhs(t, y):
    """y1' = y2, y2' = -y1"""
    return np.array([y[1], -y[0]])


def integrate(step, f, y0, t_final, n_steps):
    t, y = 0.0, y0
    h = t_final / n_steps
    for _ in range(n_steps):
        t, y = step(f, t, y, h)
    return t, y


# ============================================================================
# Test Class 1: Scalar Single Steps
# ============================================================================


class TestScalarSteps:
    """Test single scalar steps against hand-computed values"""

    def test_euler_single_step(self):
        """Euler on t + y from (0, 1) with h = 0.1 gives exactly 1.1"""
        t_next, y_next = euler_step(linear_rhs, 0.0, 1.0, 0.1)

        assert t_next == pytest.approx(0.1)
        assert y_next == pytest.approx(1.1)

    def test_heun_single_step(self):
        """Heun on t + y from (0, 1) with h = 0.1 gives 1.11"""
        # k1 = 1, y* = 1.1, k2 = 0.1 + 1.1 = 1.2, y = 1 + 0.05 * 2.2
        _, y_next = heun_step(linear_rhs, 0.0, 1.0, 0.1)

        assert y_next == pytest.approx(1.11)

    def test_rk4_single_step(self):
        """RK4 on t + y from (0, 1) with h = 0.1 gives ≈ 1.1103"""
        _, y_next = rk4_step(linear_rhs, 0.0, 1.0, 0.1)

        assert 1.1 < y_next < 1.12
        assert y_next == pytest.approx(1.1103416666666667, rel=1e-12)

    def test_heun_decay(self):
        """Heun on decay: k1 = -2, y* = 0.8, k2 = -1.6 → 0.82"""
        _, y_next = heun_step(decay_rhs, 0.0, 1.0, 0.1)

        assert y_next == pytest.approx(0.82)

    def test_rk4_closer_than_euler(self):
        """RK4 is strictly more accurate than Euler for a smooth equation"""
        exact = linear_solution(0.1)
        _, y_euler = euler_step(linear_rhs, 0.0, 1.0, 0.1)
        _, y_heun = heun_step(linear_rhs, 0.0, 1.0, 0.1)
        _, y_rk4 = rk4_step(linear_rhs, 0.0, 1.0, 0.1)

        assert abs(y_rk4 - exact) < abs(y_heun - exact) < abs(y_euler - exact)

    def test_backward_step(self):
        """A negative step moves time backward"""
        t_next, y_next = euler_step(lambda t, y: 1.0, 1.0, 0.0, -0.1)

        assert t_next == pytest.approx(0.9)
        assert y_next == pytest.approx(-0.1)

    def test_steps_do_not_mutate_inputs(self):
        """Steps are pure functions of their arguments"""
        for step in (euler_step, heun_step, rk4_step):
            assert step(linear_rhs, 0.0, 1.0, 0.1) == step(linear_rhs, 0.0, 1.0, 0.1)


# ============================================================================
# Test Class 2: Vector Single Steps
# ============================================================================


class TestVectorSteps:
    """Test vector steps on coupled systems"""

    def test_euler_harmonic_single_step(self):
        """Euler on the harmonic oscillator from [1, 0] gives [1, -0.1]"""
        t_next, y_next = euler_step_vector(harmonic_rhs, 0.0, np.array([1.0, 0.0]), 0.1)

        assert t_next == pytest.approx(0.1)
        assert np.allclose(y_next, [1.0, -0.1])

    def test_input_state_not_mutated(self):
        """The caller's state vector is left untouched"""
        y = np.array([1.0, 0.0])
        for step in (euler_step_vector, heun_step_vector, rk4_step_vector):
            step(harmonic_rhs, 0.0, y, 0.1)

        assert np.array_equal(y, [1.0, 0.0])

    def test_list_returning_rhs(self):
        """Right-hand sides may return plain lists"""
        _, y_next = rk4_step_vector(lambda t, y: [y[1], -y[0]], 0.0, np.array([1.0, 0.0]), 0.1)

        assert isinstance(y_next, np.ndarray)
        assert y_next.shape == (2,)

    @pytest.mark.parametrize(
        "scalar_step, vector_step",
        [
            (euler_step, euler_step_vector),
            (heun_step, heun_step_vector),
            (rk4_step, rk4_step_vector),
        ],
    )
    def test_vector_matches_scalar_for_decoupled_system(self, scalar_step, vector_step):
        """Vector form agrees with scalar form componentwise"""
        f_vector = lambda t, y: t + y
        _, y_vector = vector_step(f_vector, 0.0, np.array([1.0, 2.0]), 0.1)
        _, y1 = scalar_step(linear_rhs, 0.0, 1.0, 0.1)
        _, y2 = scalar_step(linear_rhs, 0.0, 2.0, 0.1)

        assert np.allclose(y_vector, [y1, y2])

    def test_rk4_harmonic_period(self):
        """RK4 returns to the start after one period"""
        _, y_final = integrate(
            rk4_step_vector, harmonic_rhs, np.array([1.0, 0.0]), 2 * np.pi, 628
        )

        assert np.allclose(y_final, [1.0, 0.0], atol=1e-6)


# ============================================================================
# Test Class 3: Convergence Order
# ============================================================================


class TestConvergenceOrder:
    """Verify observed convergence orders"""

    def _errors(self, step, n_values):
        exact = linear_solution(1.0)
        return [abs(integrate(step, linear_rhs, 1.0, 1.0, n)[1] - exact) for n in n_values]

    def test_euler_order_1(self):
        """Halving h roughly halves the Euler error"""
        errors = self._errors(euler_step, [100, 200])

        assert 1.8 < errors[0] / errors[1] < 2.2

    def test_heun_order_2(self):
        """Halving h divides the Heun error by about 4"""
        errors = self._errors(heun_step, [20, 40, 80])

        assert 3.0 < errors[0] / errors[1] < 5.0
        assert 3.0 < errors[1] / errors[2] < 5.0

    def test_rk4_order_4(self):
        """Halving h divides the RK4 error by about 16"""
        errors = self._errors(rk4_step, [10, 20, 40])

        assert 10.0 < errors[0] / errors[1] < 20.0
        assert 10.0 < errors[1] / errors[2] < 20.0


# ============================================================================
# Test Class 4: Method Records
# ============================================================================


class TestMethodRecords:
    """Test method metadata"""

    def test_orders(self):
        """Orders are 1, 2 and 4"""
        assert (EULER.order, HEUN.order, RK4.order) == (1, 2, 4)
        assert (COUPLED_EULER.order, COUPLED_HEUN.order, COUPLED_RK4.order) == (1, 2, 4)

    def test_display_names(self):
        """Display names"""
        assert EULER.name == "Euler's Method"
        assert HEUN.name == "Heun's Method"
        assert RK4.name == "Runge-Kutta 4th Order"
        assert COUPLED_RK4.name == "Runge-Kutta 4th Order (Coupled)"

    def test_records_are_immutable(self):
        """Method records are frozen"""
        with pytest.raises(dataclasses.FrozenInstanceError):
            RK4.order = 5

    def test_record_step_is_the_formula(self):
        """Record step delegates to the matching formula"""
        assert RK4.step(linear_rhs, 0.0, 1.0, 0.1) == rk4_step(linear_rhs, 0.0, 1.0, 0.1)
        assert COUPLED_EULER.step is euler_step_vector
