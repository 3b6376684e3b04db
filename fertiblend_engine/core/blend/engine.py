from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import structlog

from ..models.blend import BlendRequest, SolverConfig
from .diagnostics import FitDiagnostics, Solution, diagnose, measure_blend
from .errors import BlendError
from .problem import Problem, assemble_system, build_problem
from .solver import run_projected_gradient
from .suggestions import suggest

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SolveOutcome:
    """Either ``solution`` + ``diagnostics`` (ok) or ``error`` (not ok), never both."""

    ok: bool
    problem: Optional[Problem] = None
    solution: Optional[Solution] = None
    diagnostics: Optional[FitDiagnostics] = None
    error: Optional[BlendError] = None
    suggestions: Tuple[str, ...] = ()

    @classmethod
    def failure(cls, error: BlendError, problem: Optional[Problem] = None) -> "SolveOutcome":
        return cls(ok=False, problem=problem, error=error)


def solve(problem: Problem, config: Optional[SolverConfig] = None) -> SolveOutcome:
    config = config or SolverConfig()
    try:
        system = assemble_system(problem)
        result = run_projected_gradient(system, config)
    except BlendError as e:
        log.info("blend_rejected", code=e.code, reason=e.message)
        return SolveOutcome.failure(e, problem)

    solution = measure_blend(problem, result.amounts, iterations=result.iterations, converged=result.converged)
    diagnostics = diagnose(solution, problem)
    advice = suggest(solution, diagnostics, problem)
    log.info(
        "blend_solved",
        active=len(system.active),
        constrained=[n.value for n in system.nutrients],
        iterations=result.iterations,
        converged=result.converged,
        tier=diagnostics.tier.value,
        mae=round(solution.mae, 4),
    )
    return SolveOutcome(ok=True, problem=problem, solution=solution, diagnostics=diagnostics, suggestions=tuple(advice))


def solve_request(request: BlendRequest, config: Optional[SolverConfig] = None) -> SolveOutcome:
    try:
        problem = build_problem(request)
    except BlendError as e:
        log.info("blend_rejected", code=e.code, reason=e.message)
        return SolveOutcome.failure(e)
    return solve(problem, config)
