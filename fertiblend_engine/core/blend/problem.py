"""Problem assembly: raw form rows -> validated Problem -> least-squares system.

The matrix rows are the constrained nutrients in canonical nutrient order and
the columns are the active ingredients in input order, so the same inputs always
produce the same system.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple

import numpy as np

from ..models.blend import BlendRequest
from ..nutrients import (
    NUTRIENT_ORDER,
    Nutrient,
    parse_concentration,
    parse_target,
    selected_nutrients,
    to_grams,
)
from .errors import (
    InvalidMassError,
    NoIngredientsError,
    NoRelevantIngredientsError,
    NoTargetsError,
)


def _canonical(keys) -> list:
    return sorted((Nutrient(k) for k in keys), key=NUTRIENT_ORDER.__getitem__)


def _is_quantity(value) -> bool:
    return isinstance(value, (numbers.Real, Decimal)) and not isinstance(value, bool)


@dataclass(frozen=True)
class Ingredient:
    name: str
    profile: Mapping[Nutrient, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        raw = {Nutrient(k): v for k, v in dict(self.profile).items()}
        profile = {}
        for n in _canonical(raw):
            pct = parse_concentration(raw[n])
            if pct > 0.0:
                profile[n] = pct
        object.__setattr__(self, "profile", MappingProxyType(profile))

    def __hash__(self) -> int:
        return hash((self.name, tuple(self.profile.items())))

    def pct(self, nutrient: Nutrient) -> float:
        return self.profile.get(nutrient, 0.0)


@dataclass(frozen=True)
class Problem:
    ingredients: Tuple[Ingredient, ...]
    targets: Mapping[Nutrient, Optional[float]]
    total_mass: float
    regularize: bool = True
    nutrients: Tuple[Nutrient, ...] = tuple(Nutrient)

    def __post_init__(self) -> None:
        object.__setattr__(self, "ingredients", tuple(self.ingredients))
        nutrients = tuple(_canonical(self.nutrients))
        object.__setattr__(self, "nutrients", nutrients)
        raw = {Nutrient(k): v for k, v in dict(self.targets).items()}
        targets = {n: parse_target(raw[n]) for n in _canonical(raw) if n in nutrients}
        object.__setattr__(self, "targets", MappingProxyType(targets))
        if _is_quantity(self.total_mass):
            object.__setattr__(self, "total_mass", float(self.total_mass))

    def __hash__(self) -> int:
        return hash((self.ingredients, tuple(self.targets.items()), self.total_mass, self.regularize, self.nutrients))

    @property
    def constrained(self) -> Tuple[Nutrient, ...]:
        return tuple(n for n in self.nutrients if self.targets.get(n) is not None)

    def target(self, nutrient: Nutrient) -> float:
        t = self.targets.get(nutrient)
        if t is None:
            raise KeyError(f"{nutrient.value} is not constrained")
        return t

    def active_indices(self) -> Tuple[int, ...]:
        constrained = self.constrained
        return tuple(
            i for i, ing in enumerate(self.ingredients)
            if any(ing.pct(n) > 0.0 for n in constrained)
        )


@dataclass(frozen=True)
class BlendSystem:
    """Least-squares system ``A x ~ b`` over the active ingredients."""

    nutrients: Tuple[Nutrient, ...]
    active: Tuple[int, ...]
    A: np.ndarray
    b: np.ndarray
    total_mass: float
    regularize: bool
    n_ingredients: int


def check_problem(problem: Problem) -> Tuple[int, ...]:
    """Validate a Problem; returns the active ingredient indices."""
    M = problem.total_mass
    if not (_is_quantity(M) and math.isfinite(M) and M > 0):
        raise InvalidMassError()
    if not problem.constrained:
        raise NoTargetsError()
    if not problem.ingredients:
        raise NoIngredientsError()
    active = problem.active_indices()
    if not active:
        raise NoRelevantIngredientsError()
    return active


def assemble_system(problem: Problem) -> BlendSystem:
    active = check_problem(problem)
    constrained = problem.constrained
    M = float(problem.total_mass)

    A = np.zeros((len(constrained), len(active)), dtype=float)
    b = np.zeros(len(constrained), dtype=float)
    for row, n in enumerate(constrained):
        b[row] = problem.target(n) / 100.0 * M
        for col, i in enumerate(active):
            A[row, col] = problem.ingredients[i].pct(n) / 100.0
    A.setflags(write=False)
    b.setflags(write=False)

    return BlendSystem(
        nutrients=constrained,
        active=active,
        A=A,
        b=b,
        total_mass=M,
        regularize=bool(problem.regularize),
        n_ingredients=len(problem.ingredients),
    )


def display_name(name: str, index: int) -> str:
    return name.strip() or f"Fertilizer {index + 1}"


def build_problem(request: BlendRequest, nutrients: Optional[Sequence[Nutrient]] = None) -> Problem:
    """Normalize raw form input into a validated Problem.

    Values for nutrients outside the selected columns are ignored. Raises a
    BlendError subclass for unusable input.
    """
    columns = list(nutrients) if nutrients is not None else selected_nutrients(request.include_micros)
    known = {n.value: n for n in columns}

    M = to_grams(request.total, request.total_unit)
    if M is None or not M > 0:
        raise InvalidMassError()

    ingredients = []
    for i, row in enumerate(request.rows):
        profile = {known[k]: parse_concentration(v) for k, v in row.analysis.items() if k in known}
        ingredients.append(Ingredient(name=display_name(row.name, i), profile=profile))

    targets = {known[k]: parse_target(v) for k, v in request.targets.items() if k in known}

    problem = Problem(
        ingredients=tuple(ingredients),
        targets=targets,
        total_mass=M,
        regularize=request.regularize,
        nutrients=tuple(columns),
    )
    check_problem(problem)
    return problem
