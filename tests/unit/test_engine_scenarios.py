"""End-to-end tests for the solve pipeline (build -> solve -> diagnose -> suggest).

Scenarios:
- two salts without a filler: both used, targets overshot, advice produced.
- an exactly reachable blend: good fit, no advice.
- invalid mass, no relevant ingredient, missing source beside a solvable target.
- determinism: identical inputs give bit-identical outputs.
- percent-suffixed form values; advice returned as an immutable tuple.
Failures come back as outcomes, never as raised exceptions.
"""

from __future__ import annotations

import numpy as np
import pytest

from fertiblend_engine.core.blend.diagnostics import FitTier
from fertiblend_engine.core.blend.engine import solve, solve_request
from fertiblend_engine.core.blend.errors import (
    DegenerateSolutionError,
    InvalidMassError,
    NoRelevantIngredientsError,
)
from fertiblend_engine.core.blend.presets import example_request
from fertiblend_engine.core.blend.problem import Ingredient, Problem
from fertiblend_engine.core.models.blend import BlendRequest, IngredientRow, SolverConfig
from fertiblend_engine.core.nutrients import Nutrient


def _two_salts() -> Problem:
    return Problem(
        ingredients=(
            Ingredient("Ingredient-1", {"N": 15.5, "Ca": 19}),
            Ingredient("Ingredient-2", {"P2O5": 52, "K2O": 34}),
        ),
        targets={"N": 3, "P2O5": 5, "K2O": 3},
        total_mass=1000.0,
        regularize=False,
    )


def test_two_salts_without_filler():
    outcome = solve(_two_salts())
    assert outcome.ok and outcome.error is None
    sol, diag = outcome.solution, outcome.diagnostics

    # unconstrained optimum of the normal equations is interior here
    A = np.array([[0.155, 0.0], [0.0, 0.52], [0.0, 0.34]])
    b = np.array([30.0, 50.0, 30.0])
    H = A.T @ A + np.ones((2, 2))
    c = A.T @ b + 1000.0
    expected = np.linalg.solve(H, c)

    assert all(a > 0 for a in sol.amounts)
    assert np.allclose(sol.amounts, expected, atol=1e-3)
    assert sol.mass_achieved == sum(sol.amounts)
    assert 980.0 < sol.mass_achieved < 990.0
    # Ca rides along with the nitrate and is reported though untargeted
    assert Nutrient.CA in sol.achieved_pct and Nutrient.CA not in sol.errors
    assert sol.errors[Nutrient.N] > 10.0
    assert diag.tier is FitTier.NOT_ACHIEVABLE
    assert not diag.mass_on_target
    assert outcome.suggestions[0].startswith("N is high by")


def test_reachable_blend_is_good_fit():
    problem = Problem(
        ingredients=(Ingredient("NK", {"N": 10, "K2O": 5}), Ingredient("P", {"P2O5": 10})),
        targets={"N": 4, "K2O": 2, "P2O5": 6},
        total_mass=1000.0,
        regularize=False,
    )
    outcome = solve(problem)
    assert outcome.ok
    assert np.allclose(outcome.solution.amounts, [400.0, 600.0], atol=1e-2)
    assert outcome.diagnostics.tier is FitTier.GOOD
    assert outcome.diagnostics.mass_on_target
    assert outcome.suggestions == ()


def test_zero_total_mass_is_invalid():
    req = BlendRequest(
        rows=[IngredientRow(name="Urea", analysis={"N": "46"})],
        targets={"N": "3"},
        total="0",
    )
    outcome = solve_request(req)
    assert not outcome.ok
    assert isinstance(outcome.error, InvalidMassError)
    assert outcome.solution is None and outcome.diagnostics is None and outcome.suggestions == ()


def test_direct_problem_with_bad_mass_is_rejected():
    problem = Problem(ingredients=(Ingredient("Urea", {"N": 46}),), targets={"N": 3}, total_mass=float("nan"))
    outcome = solve(problem)
    assert not outcome.ok and outcome.error.code == "INVALID_MASS"


def test_only_target_without_source_is_not_relevant():
    req = BlendRequest(
        rows=[IngredientRow(name="Gypsum", analysis={"Ca": "19"})],
        targets={"N": "3"},
        total="1000",
    )
    outcome = solve_request(req)
    assert not outcome.ok
    assert isinstance(outcome.error, NoRelevantIngredientsError)


def test_missing_source_beside_solvable_target_is_advised():
    problem = Problem(ingredients=(Ingredient("N10", {"N": 10}),), targets={"N": 5, "Mg": 2}, total_mass=1000.0)
    outcome = solve(problem)
    assert outcome.ok
    assert outcome.solution.amounts[0] == pytest.approx(1005.0 / 1.01, abs=1e-2)
    assert "Mg: none of your listed fertilizers contain Mg. Add a Mg source or remove this target." in outcome.suggestions


def test_degenerate_solution_is_reported_not_raised():
    problem = Problem(
        ingredients=(Ingredient("A", {"N": 100}), Ingredient("B", {"N": 100})),
        targets={"N": 0},
        total_mass=1000.0,
        regularize=False,
    )
    outcome = solve(problem, SolverConfig(lambda_mass=0.0))
    assert not outcome.ok
    assert isinstance(outcome.error, DegenerateSolutionError)


def test_solving_twice_is_bit_identical():
    first = solve_request(example_request())
    second = solve_request(example_request())
    assert first.ok and second.ok
    assert first.solution.amounts == second.solution.amounts
    assert dict(first.solution.achieved_pct) == dict(second.solution.achieved_pct)
    assert dict(first.solution.errors) == dict(second.solution.errors)
    assert first.solution.iterations == second.solution.iterations
    assert first.diagnostics == second.diagnostics
    assert first.suggestions == second.suggestions


def test_example_request_invariants():
    outcome = solve_request(example_request())
    sol = outcome.solution
    assert all(a >= 0.0 for a in sol.amounts)
    assert sol.mass_achieved == sum(sol.amounts)
    grams_n = sum(a * ing.pct(Nutrient.N) / 100.0 for a, ing in zip(sol.amounts, outcome.problem.ingredients))
    assert sol.achieved_pct[Nutrient.N] == pytest.approx(grams_n / sol.mass_achieved * 100.0)


def test_percent_suffixed_form_values_solve():
    req = BlendRequest(
        rows=[IngredientRow(name="Urea", analysis={"N": "46%"})],
        targets={"N": "3%"},
        total="1000",
    )
    outcome = solve_request(req)
    assert outcome.ok
    assert outcome.problem.target(Nutrient.N) == 3.0
    assert outcome.solution.amounts[0] > 0.0


def test_outcome_suggestions_are_immutable():
    outcome = solve(_two_salts())
    assert isinstance(outcome.suggestions, tuple) and outcome.suggestions
    with pytest.raises(AttributeError):
        outcome.suggestions.append("more")
