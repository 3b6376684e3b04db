from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..nutrients import MassUnit

FormValue = Union[str, float, None]


class SolverConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_iter: int = Field(4000, ge=0)
    tol: float = Field(1e-7, gt=0)
    lambda_mass: float = Field(1.0, ge=0)
    lambda_reg: float = Field(1e-6, ge=0)  # only used when the problem asks for regularization
    fallback_step: float = Field(1e-3, gt=0)


class IngredientRow(BaseModel):
    name: str = ""
    analysis: Dict[str, FormValue] = Field(default_factory=dict)  # {"N": "15.5", "Ca": "19"}


class BlendRequest(BaseModel):
    rows: List[IngredientRow] = Field(default_factory=list)
    targets: Dict[str, FormValue] = Field(default_factory=dict)  # blank -> don't care
    total: FormValue = None
    total_unit: MassUnit = MassUnit.G
    regularize: bool = True
    include_micros: bool = False


class BlendAmount(BaseModel):
    index: int
    name: str
    grams: float


class DiagnosticsOut(BaseModel):
    tier: str
    label: str
    note: str
    rmse: float
    mae: float
    mass_target: float
    mass_achieved: float
    mass_error: float
    mass_on_target: bool
    iterations: int
    converged: bool


class SolveResponse(BaseModel):
    amounts: List[BlendAmount]
    nonzero: List[BlendAmount]
    achieved_pct: Dict[str, float]
    targets: Dict[str, float]
    errors: Dict[str, float]
    diagnostics: DiagnosticsOut
    suggestions: List[str]


class SuggestResponse(BaseModel):
    tier: str
    suggestions: List[str]


class ErrorResponse(BaseModel):
    code: str
    message: str
    detail: Optional[Dict[str, str]] = None
