from __future__ import annotations

from fastapi import APIRouter, Depends

from ...core.blend.engine import SolveOutcome, solve_request
from ...core.blend.presets import example_request
from ...core.models.blend import (
    BlendAmount,
    BlendRequest,
    DiagnosticsOut,
    ErrorResponse,
    SolveResponse,
    SuggestResponse,
)
from ...security.api_keys import get_api_key
from ...settings import Settings, get_settings
from ..errors import blend_error_response


router = APIRouter()

_errors = {422: {"model": ErrorResponse}}


def _to_response(outcome: SolveOutcome) -> SolveResponse:
    problem, solution, diag = outcome.problem, outcome.solution, outcome.diagnostics
    names = [ing.name for ing in problem.ingredients]
    amounts = [BlendAmount(index=i, name=names[i], grams=g) for i, g in enumerate(solution.amounts)]
    return SolveResponse(
        amounts=amounts,
        nonzero=[amounts[i] for i, _ in solution.nonzero_amounts()],
        achieved_pct={n.value: v for n, v in solution.achieved_pct.items()},
        targets={n.value: problem.target(n) for n in problem.constrained},
        errors={n.value: v for n, v in solution.errors.items()},
        diagnostics=DiagnosticsOut(
            tier=diag.tier.value,
            label=diag.tier.label,
            note=diag.tier.note,
            rmse=diag.rmse,
            mae=diag.mae,
            mass_target=diag.mass_target,
            mass_achieved=solution.mass_achieved,
            mass_error=diag.mass_error,
            mass_on_target=diag.mass_on_target,
            iterations=solution.iterations,
            converged=solution.converged,
        ),
        suggestions=outcome.suggestions,
    )


@router.post("/blend/solve", response_model=SolveResponse, responses=_errors)
def solve_blend(
    payload: BlendRequest,
    api_key: str = Depends(get_api_key),
    settings: Settings = Depends(get_settings),
):
    outcome = solve_request(payload, settings.solver_config())
    if not outcome.ok:
        return blend_error_response(outcome.error)
    return _to_response(outcome)


@router.post("/blend/suggest", response_model=SuggestResponse, responses=_errors)
def suggest_blend(
    payload: BlendRequest,
    api_key: str = Depends(get_api_key),
    settings: Settings = Depends(get_settings),
):
    outcome = solve_request(payload, settings.solver_config())
    if not outcome.ok:
        return blend_error_response(outcome.error)
    return SuggestResponse(tier=outcome.diagnostics.tier.value, suggestions=outcome.suggestions)


@router.get("/blend/example", response_model=BlendRequest)
def get_example() -> BlendRequest:
    return example_request()
