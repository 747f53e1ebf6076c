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
Unit tests for CoupledODESolver

Tests cover:
1. Harmonic oscillator and Lorenz solves
2. Backward integration
3. Option validation
4. Failures (dimension mismatch, divergence, unknown method, parse errors)
5. Auxiliary queries
"""

import json

import numpy as np
import pytest

from odesym.exceptions import StepSizeWarning
from odesym.solvers.coupled_ode_solver import CoupledODESolver

HARMONIC = ["y2", "-y1"]


@pytest.fixture
def solver():
    return CoupledODESolver()


@pytest.fixture
def options():
    return {"t0": 0.0, "y0": [1.0, 0.0], "t_end": 2 * np.pi, "step_size": 0.01, "method": "rk4"}


# ============================================================================
# Test Class 1: Successful Solves
# ============================================================================


class TestSolve:
    """Test successful coupled solves"""

    def test_harmonic_full_period(self, solver, options):
        """RK4 returns the oscillator to its initial state after 2π"""
        solution = solver.solve(HARMONIC, options)

        assert solution["success"] is True
        assert solution["points"][0]["y"] == [1.0, 0.0]
        assert solution["points"][-1]["t"] == 2 * np.pi
        np.testing.assert_allclose(solution["points"][-1]["y"], [1.0, 0.0], atol=1e-6)

    def test_component_lengths(self, solver, options):
        """Every point has len(y0) state and derivative components"""
        solution = solver.solve(HARMONIC, options)

        for point in solution["points"]:
            assert len(point["y"]) == 2
            assert len(point["dydt"]) == 2

    def test_derivatives_match_system(self, solver, options):
        """dydt equals F(t, y) at every point"""
        solution = solver.solve(HARMONIC, options)

        for point in solution["points"][::50]:
            y1, y2 = point["y"]
            np.testing.assert_allclose(point["dydt"], [y2, -y1])

    def test_energy_conserved(self, solver, options):
        """y1² + y2² stays at 1 along an RK4 trajectory"""
        solution = solver.solve(HARMONIC, options)
        energy = [y1**2 + y2**2 for y1, y2 in (p["y"] for p in solution["points"])]

        np.testing.assert_allclose(energy, 1.0, atol=1e-6)

    def test_metadata_ranges(self, solver, options):
        """Per-component ranges span the oscillation"""
        solution = solver.solve(HARMONIC, options)
        metadata = solution["metadata"]

        assert metadata["total_points"] == len(solution["points"])
        assert metadata["domain"] == (0.0, 2 * np.pi)
        assert len(metadata["ranges"]) == 2
        for low, high in metadata["ranges"]:
            assert low == pytest.approx(-1.0, abs=1e-3)
            assert high == pytest.approx(1.0, abs=1e-3)

    def test_single_euler_step(self, solver):
        """One Euler step across the whole domain (with advisory warning)"""
        with pytest.warns(StepSizeWarning, match="too large for coupled systems"):
            solution = solver.solve(
                HARMONIC,
                {"t0": 0.0, "y0": [1.0, 0.0], "t_end": 0.1, "step_size": 0.1, "method": "euler"},
            )

        assert solution["success"] is True
        assert len(solution["points"]) == 2
        np.testing.assert_allclose(solution["points"][-1]["y"], [1.0, -0.1])

    def test_method_names(self, solver, options):
        """Coupled methods report '(Coupled)' display names"""
        for key, name in [
            ("euler", "Euler's Method (Coupled)"),
            ("heun", "Heun's Method (Coupled)"),
            ("RK4", "Runge-Kutta 4th Order (Coupled)"),
        ]:
            assert solver.solve(HARMONIC, {**options, "method": key})["method"] == name

    def test_lorenz(self, solver):
        """Three-component system stays bounded"""
        solution = solver.solve(
            ["10*(y2 - y1)", "y1*(28 - y3) - y2", "y1*y2 - (8/3)*y3"],
            {"t0": 0.0, "y0": [1.0, 1.0, 1.0], "t_end": 5.0, "step_size": 0.01},
        )

        assert solution["success"] is True
        assert len(solution["points"][-1]["y"]) == 3
        assert len(solution["metadata"]["ranges"]) == 3
        assert solution["points"][0]["dydt"] == pytest.approx([0.0, 26.0, 1.0 - 8.0 / 3.0])

    def test_time_dependent_system(self, solver):
        """Equations may reference t"""
        solution = solver.solve(
            ["cos(t)", "-sin(t)"],
            {"t0": 0.0, "y0": [0.0, 1.0], "t_end": 1.0, "step_size": 0.01},
        )

        np.testing.assert_allclose(
            solution["points"][-1]["y"], [np.sin(1.0), np.cos(1.0)], atol=1e-8
        )

    def test_tuple_and_array_initial_state(self, solver, options):
        """y0 may be a tuple or a NumPy array"""
        for y0 in [(1.0, 0.0), np.array([1.0, 0.0])]:
            assert solver.solve(HARMONIC, {**options, "y0": y0})["success"] is True

    def test_solve_with_function(self, solver, options):
        """Python callables may return lists"""
        solution = solver.solve_with_function(lambda t, y: [y[1], -y[0]], options)

        assert solution["success"] is True
        np.testing.assert_allclose(solution["points"][-1]["y"], [1.0, 0.0], atol=1e-6)

    def test_solution_is_json_serializable(self, solver, options):
        """Points and metadata hold plain Python values"""
        json.dumps(solver.solve(HARMONIC, {**options, "t_end": 1.0}))


# ============================================================================
# Test Class 2: Backward Integration
# ============================================================================


class TestBackwardIntegration:
    """Test integration with t_end < t0"""

    def test_backward_harmonic(self, solver):
        """Integrating back a quarter period"""
        solution = solver.solve(
            HARMONIC,
            {"t0": np.pi / 2, "y0": [0.0, -1.0], "t_end": 0.0, "step_size": 0.01},
        )
        ts = [p["t"] for p in solution["points"]]

        assert solution["success"] is True
        assert ts[0] == np.pi / 2
        assert ts[-1] == 0.0
        assert all(a > b for a, b in zip(ts, ts[1:]))
        np.testing.assert_allclose(solution["points"][-1]["y"], [1.0, 0.0], atol=1e-6)


# ============================================================================
# Test Class 3: Option Validation
# ============================================================================


class TestValidateOptions:
    """Test coupled option validation rules"""

    @pytest.mark.parametrize("override", [{"t0": np.nan}, {"t_end": None}, {"step_size": "0.1"}])
    def test_non_finite_scalars(self, solver, options, override):
        """t0, t_end and step_size must be finite"""
        assert solver.validate_options({**options, **override})["error"] == (
            "t0, t_end, and step_size must be finite numbers"
        )

    @pytest.mark.parametrize("y0", [[], 1.0, None, [[1.0, 0.0]], "10"])
    def test_bad_initial_state_shape(self, solver, options, y0):
        """y0 must be a non-empty one-dimensional sequence"""
        assert solver.validate_options({**options, "y0": y0})["error"] == (
            "y0 must be a non-empty array"
        )

    @pytest.mark.parametrize("y0", [[1.0, np.nan], [np.inf, 0.0], [1.0, "2"]])
    def test_non_finite_initial_values(self, solver, options, y0):
        """Every component must be finite"""
        assert solver.validate_options({**options, "y0": y0})["error"] == (
            "All initial y values must be finite numbers"
        )

    def test_common_bounds(self, solver, options):
        """Step-size and domain rules are shared with the scalar solver"""
        assert solver.validate_options({**options, "step_size": 0.0})["error"] == (
            "Step size must be positive"
        )
        assert solver.validate_options({**options, "step_size": 10.0})["error"] == (
            "Step size cannot be larger than the integration domain"
        )
        assert solver.validate_options({**options, "t_end": 1500.0})["error"] == (
            "Integration domain too large (|t_end - t0| > 1000)"
        )

    def test_initial_values_too_large(self, solver, options):
        """Any |y0[i]| above 1e6 is rejected"""
        assert solver.validate_options({**options, "y0": [1.0, 5e6]})["error"] == (
            "Initial y values too large (|y0[i]| > 1e6)"
        )

    def test_max_iterations(self, solver, options):
        """max_iterations must be a positive integer"""
        assert solver.validate_options({**options, "max_iterations": 0})["error"] == (
            "max_iterations must be a positive integer"
        )

    def test_tiny_step_warns(self, solver):
        """Very small steps are accepted with a StepSizeWarning"""
        with pytest.warns(StepSizeWarning, match="Very small step size"):
            check = solver.validate_options(
                {"t0": 0.0, "y0": [1.0], "t_end": 1.0, "step_size": 5e-6}
            )

        assert check == {"valid": True}

    def test_valid(self, solver, options):
        """A reasonable problem passes"""
        assert solver.validate_options(options) == {"valid": True}


# ============================================================================
# Test Class 4: Failures
# ============================================================================


class TestFailures:
    """Test coupled failure reporting"""

    def test_dimension_mismatch(self, solver, options):
        """More equations than state components fails at step 0"""
        solution = solver.solve(["y2", "-y1", "y1"], options)

        assert solution["success"] is False
        assert solution["error"] == (
            "Integration failed at step 0: Derivative function returned 3 values, expected 2"
        )

    def test_reference_beyond_state(self, solver, options):
        """Referencing y3 with a 2-component state fails"""
        solution = solver.solve(["y3", "y1"], options)

        assert solution["success"] is False
        assert solution["error"].startswith("Integration failed at step 0")

    def test_divergence(self, solver):
        """Exponential blow-up is detected"""
        solution = solver.solve(
            ["y1*y2", "y2"],
            {"t0": 0.0, "y0": [1.0, 1.0], "t_end": 10.0, "step_size": 0.1},
        )

        assert solution["success"] is False
        assert solution["error"].startswith("Integration failed at step")
        assert solution["points"] == []

    def test_unknown_method(self, solver, options):
        """Unknown keys fail with per-component zero ranges"""
        solution = solver.solve(HARMONIC, {**options, "method": "leapfrog"})

        assert solution["success"] is False
        assert solution["error"] == "Unknown numerical method: leapfrog"
        assert solution["metadata"]["ranges"] == [(0.0, 0.0), (0.0, 0.0)]

    def test_parse_failure(self, solver, options):
        """Parser errors pass through"""
        solution = solver.solve(["y2", "-x"], options)

        assert solution["success"] is False
        assert solution["error"] == "Invalid variable 'x'. Expected format: t, y1, y2, y3, etc."
        assert solution["points"] == []

    def test_single_string_rejected(self, solver, options):
        """A bare string is reported, not split into characters"""
        solution = solver.solve("y2", options)

        assert solution["success"] is False
        assert solution["error"] == (
            "Parse error: expected a list of expressions, got a single string"
        )

    def test_no_equations(self, solver, options):
        """An empty system fails"""
        assert solver.solve([], options)["error"] == "No equations provided"

    def test_iteration_cap(self, solver, options):
        """The iteration cap applies to coupled systems too"""
        solution = solver.solve(HARMONIC, {**options, "max_iterations": 100})

        assert solution["error"] == "Maximum iterations (100) reached without convergence"


# ============================================================================
# Test Class 5: Auxiliary Queries
# ============================================================================


class TestAuxiliary:
    """Test auxiliary queries"""

    def test_available_methods(self, solver):
        """Three coupled methods"""
        methods = solver.get_available_methods()

        assert [m["key"] for m in methods] == ["euler", "heun", "rk4"]
        assert all(m["name"].endswith("(Coupled)") for m in methods)

    def test_validate_equations(self, solver):
        """Dry-run parsing of systems"""
        assert solver.validate_equations(HARMONIC) == {"valid": True}
        assert solver.validate_equations(["y0"])["valid"] is False

    def test_suggest_step_size_fallback(self, solver, options):
        """Tiny derivatives fall back to min(0.01, range/1000)"""
        h = solver.suggest_step_size(lambda t, y: [0.0, 0.0], {**options, "t_end": 1.0})

        assert h == pytest.approx(0.001)
