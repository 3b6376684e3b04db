from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Sequence, Tuple

from ..nutrients import NUTRIENT_ORDER, Nutrient
from .problem import Problem

GOOD_MAE = 0.25
OK_MAE = 1.0
NONZERO_GRAMS = 1e-6


class FitTier(str, Enum):
    GOOD = "good"
    OK = "ok"
    NOT_ACHIEVABLE = "not_achievable"

    @property
    def label(self) -> str:
        return _TIER_LABELS[self]

    @property
    def note(self) -> str:
        return _TIER_NOTES[self]


_TIER_LABELS = {
    FitTier.GOOD: "Good fit",
    FitTier.OK: "OK fit",
    FitTier.NOT_ACHIEVABLE: "Not possible (as listed)",
}
_TIER_NOTES = {
    FitTier.GOOD: "Fit: good match with the current ingredients.",
    FitTier.OK: "Fit: OK, but not tight. You can probably improve it.",
    FitTier.NOT_ACHIEVABLE: "Fit: not tight. With the current ingredient list, this target likely isn't achievable.",
}


def classify_fit(mae: float) -> FitTier:
    if mae <= GOOD_MAE:
        return FitTier.GOOD
    if mae <= OK_MAE:
        return FitTier.OK
    return FitTier.NOT_ACHIEVABLE


@dataclass(frozen=True)
class Solution:
    amounts: Tuple[float, ...]
    mass_achieved: float
    achieved_pct: Mapping[Nutrient, float]
    errors: Mapping[Nutrient, float]
    rmse: float
    mae: float
    iterations: int = 0
    converged: bool = True

    def nonzero_amounts(self) -> Tuple[Tuple[int, float], ...]:
        return tuple((i, g) for i, g in enumerate(self.amounts) if g > NONZERO_GRAMS)


@dataclass(frozen=True)
class FitDiagnostics:
    tier: FitTier
    mass_target: float
    mass_error: float
    mass_on_target: bool
    rmse: float
    mae: float
    worst: Tuple[Nutrient, ...]


def reported_nutrients(problem: Problem) -> Tuple[Nutrient, ...]:
    """Constrained nutrients plus every selected nutrient any ingredient declares."""
    declared = set(problem.constrained)
    for ing in problem.ingredients:
        declared.update(n for n in ing.profile if n in problem.nutrients)
    return tuple(sorted(declared, key=NUTRIENT_ORDER.__getitem__))


def measure_blend(
    problem: Problem,
    amounts: Sequence[float],
    iterations: int = 0,
    converged: bool = True,
) -> Solution:
    amounts = tuple(float(a) for a in amounts)
    if len(amounts) != len(problem.ingredients):
        raise ValueError("amounts must have one entry per ingredient")
    mass = sum(amounts)

    achieved: Dict[Nutrient, float] = {}
    for n in reported_nutrients(problem):
        grams = sum(a * ing.pct(n) / 100.0 for a, ing in zip(amounts, problem.ingredients))
        achieved[n] = grams / mass * 100.0 if mass > 0 else 0.0

    errors = {n: achieved[n] - problem.target(n) for n in problem.constrained}
    k = len(errors)
    rmse = math.sqrt(sum(e * e for e in errors.values()) / k) if k else 0.0
    mae = sum(abs(e) for e in errors.values()) / k if k else 0.0

    return Solution(
        amounts=amounts,
        mass_achieved=mass,
        achieved_pct=MappingProxyType(achieved),
        errors=MappingProxyType(errors),
        rmse=rmse,
        mae=mae,
        iterations=iterations,
        converged=converged,
    )


def worst_nutrients(errors: Mapping[Nutrient, float]) -> Tuple[Nutrient, ...]:
    ordered = sorted(errors, key=NUTRIENT_ORDER.__getitem__)
    # sorted() is stable, so equal misses keep nutrient order
    return tuple(sorted(ordered, key=lambda n: -abs(errors[n])))


def diagnose(solution: Solution, problem: Problem) -> FitDiagnostics:
    M = float(problem.total_mass)
    mass_error = solution.mass_achieved - M
    return FitDiagnostics(
        tier=classify_fit(solution.mae),
        mass_target=M,
        mass_error=mass_error,
        mass_on_target=abs(mass_error) <= max(1e-3, 0.001 * M),
        rmse=solution.rmse,
        mae=solution.mae,
        worst=worst_nutrients(solution.errors),
    )
