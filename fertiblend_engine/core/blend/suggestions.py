"""Advice on why a blend misses its targets and which ingredient change helps.

Only the worst misses are discussed. Ranking is stable so ties resolve by
input order, and the same solve always yields the same advice.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..nutrients import Nutrient
from .diagnostics import NONZERO_GRAMS, FitDiagnostics, FitTier, Solution
from .problem import Problem

MAX_DISCUSSED = 3
CLOSE_POINTS = 0.15
BOTTLENECK_PCT = 10.0
TOP_SOURCES = 2

GENERAL_GUIDANCE = (
    "Add a more concentrated single-purpose ingredient (especially for the biggest miss).",
    "Constrain fewer nutrients (leave targets blank for anything you don't care about).",
    "Add more candidate fertilizers (more options = easier fit).",
)


@dataclass(frozen=True)
class RankedSource:
    index: int
    name: str
    pct: float
    used_g: float = 0.0

    @property
    def delivered_g(self) -> float:
        return self.used_g * self.pct / 100.0


def _fmt_pct(pct: float) -> str:
    return f"{pct:g}%"


def rank_sources(problem: Problem, nutrient: Nutrient) -> List[RankedSource]:
    ranked = [RankedSource(i, ing.name, ing.pct(nutrient)) for i, ing in enumerate(problem.ingredients)]
    ranked.sort(key=lambda s: -s.pct)
    return ranked


def rank_contributors(problem: Problem, solution: Solution, nutrient: Nutrient) -> List[RankedSource]:
    used = [
        RankedSource(i, ing.name, ing.pct(nutrient), solution.amounts[i])
        for i, ing in enumerate(problem.ingredients)
        if solution.amounts[i] > NONZERO_GRAMS and ing.pct(nutrient) > 0
    ]
    used.sort(key=lambda s: -s.delivered_g)
    return used


def _listed(sources: List[RankedSource]) -> str:
    return ", ".join(f"{s.name} {_fmt_pct(s.pct)}" for s in sources)


def advise_nutrient(problem: Problem, solution: Solution, nutrient: Nutrient) -> List[str]:
    nut = nutrient.value
    err = solution.errors[nutrient]
    top = [s for s in rank_sources(problem, nutrient) if s.pct > 0][:TOP_SOURCES]

    if not top:
        return [f"{nut}: none of your listed fertilizers contain {nut}. Add a {nut} source or remove this target."]

    if err < -CLOSE_POINTS:
        lines = [
            f"{nut} is low by {abs(err):.2f} points. Add/increase a stronger {nut} source "
            f"(best listed: {_listed(top)})."
        ]
        if top[0].pct < BOTTLENECK_PCT:
            lines.append(
                f"Bottleneck: your strongest {nut} source is only {_fmt_pct(top[0].pct)}. "
                "That often makes a tight target impossible."
            )
        return lines

    if err > CLOSE_POINTS:
        contributors = rank_contributors(problem, solution, nutrient)[:TOP_SOURCES]
        if contributors:
            named = ", ".join(
                f"{s.name} (~{s.used_g:.1f} g, delivering ~{s.delivered_g:.2f} g {nut})" for s in contributors
            )
            return [f"{nut} is high by {err:.2f} points. Reduce: {named}."]
        return [f"{nut} is high by {err:.2f} points. Reduce a {nut}-rich ingredient (best listed: {_listed(top)})."]

    return [f"{nut}: already close."]


def suggest(solution: Solution, diagnostics: FitDiagnostics, problem: Problem) -> List[str]:
    if diagnostics.tier is FitTier.GOOD:
        return []
    lines: List[str] = []
    for nutrient in diagnostics.worst[:MAX_DISCUSSED]:
        lines.extend(advise_nutrient(problem, solution, nutrient))
    lines.extend(GENERAL_GUIDANCE)
    return lines
