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
Unit tests for parse result and options types
"""

import dataclasses

import pytest

from odesym.exceptions import EvaluationError
from odesym.types.options import DEFAULT_SOLVER_CONFIG
from odesym.types.parsing import ParsedCoupledEquations, ParsedEquation, invalid_evaluator


class TestInvalidEvaluator:
    def test_always_raises(self):
        stub = invalid_evaluator("Invalid variables")

        with pytest.raises(EvaluationError, match="Invalid variables"):
            stub(0.0, 1.0)

    def test_accepts_any_arguments(self):
        stub = invalid_evaluator("Parse error")

        with pytest.raises(EvaluationError):
            stub(0.0, [1.0, 2.0], extra=True)


class TestParsedEquation:
    def test_defaults(self):
        parsed = ParsedEquation(original="t", evaluate=invalid_evaluator("x"))

        assert parsed.valid is False
        assert parsed.error is None
        assert parsed.variables == []
        assert parsed.normalized == ""

    def test_frozen(self):
        parsed = ParsedEquation(original="t", evaluate=lambda t, y: t, valid=True)

        with pytest.raises(dataclasses.FrozenInstanceError):
            parsed.valid = False


class TestParsedCoupledEquations:
    def test_n_equations(self):
        parsed = ParsedCoupledEquations(
            original=["y2", "-y1"], evaluate=lambda t, y: y, valid=True
        )

        assert parsed.n_equations == 2

    def test_independent_default_lists(self):
        a = ParsedCoupledEquations(original=[], evaluate=invalid_evaluator("x"))
        b = ParsedCoupledEquations(original=[], evaluate=invalid_evaluator("x"))

        assert a.variables is not b.variables


class TestSolverConfigDefaults:
    def test_keys(self):
        assert set(DEFAULT_SOLVER_CONFIG) == {
            "max_domain_length",
            "max_initial_magnitude",
            "divergence_threshold",
            "strict_step_size",
            "warn_on_step_size",
        }
