"""Projected gradient solver for the nonnegative blend least-squares problem.

minimize  ||A x - b||^2 + l_mass * (sum(x) - M)^2 + l_reg * ||x||^2   s.t. x >= 0

The mass term is always active; the ridge term only when the problem asks for
regularization. Worst-case cost is bounded by ``SolverConfig.max_iter``.

The step is 1 / (2 * max diag(ATA)). The all-ones mass block pushes the top
eigenvalue of ATA up to about n_active, so with many weak ingredients that step
would overshoot and the objective would oscillate. Only in that case is it
reduced to 1 / (Gershgorin bound of ATA); small active sets keep the plain step.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from ..models.blend import SolverConfig
from .errors import DegenerateSolutionError
from .problem import BlendSystem


@dataclass(frozen=True)
class SolverResult:
    x: np.ndarray  # active ingredients only
    amounts: Tuple[float, ...]  # full ingredient order, inert = 0.0
    iterations: int
    converged: bool
    step: float
    objective_trace: Tuple[float, ...] = ()


def _ridge(system: BlendSystem, config: SolverConfig) -> float:
    return config.lambda_reg if system.regularize else 0.0


def normal_equations(system: BlendSystem, config: SolverConfig) -> Tuple[np.ndarray, np.ndarray]:
    A, b = system.A, system.b
    m = A.shape[1]
    M = system.total_mass
    # ones-matrix term is the expansion of l_mass * (sum(x) - M)^2
    ATA = A.T @ A + config.lambda_mass * np.ones((m, m)) + _ridge(system, config) * np.eye(m)
    ATb = A.T @ b + config.lambda_mass * M * np.ones(m)
    return ATA, ATb


def step_size(ATA: np.ndarray, config: SolverConfig) -> float:
    diag_max = float(np.max(np.diag(ATA))) if ATA.size else 0.0
    if not diag_max > 0:
        return config.fallback_step
    alpha = 1.0 / (2.0 * diag_max)
    # Gershgorin bound on the top eigenvalue; descent needs alpha * L < 2
    bound = float(np.max(np.sum(np.abs(ATA), axis=1)))
    if alpha * bound >= 2.0:
        alpha = 1.0 / bound
    return alpha


def objective(system: BlendSystem, x: np.ndarray, config: Optional[SolverConfig] = None) -> float:
    config = config or SolverConfig()
    r = system.A @ x - system.b
    mass = float(np.sum(x)) - system.total_mass
    return float(r @ r + config.lambda_mass * mass * mass + _ridge(system, config) * float(x @ x))


def run_projected_gradient(
    system: BlendSystem,
    config: Optional[SolverConfig] = None,
    record_objective: bool = False,
) -> SolverResult:
    config = config or SolverConfig()
    m = len(system.active)
    ATA, ATb = normal_equations(system, config)
    alpha = step_size(ATA, config)

    x = np.full(m, system.total_mass / m, dtype=float)
    trace: List[float] = [objective(system, x, config)] if record_objective else []

    iterations = 0
    converged = False
    for _ in range(config.max_iter):
        g = ATA @ x - ATb
        x_next = np.maximum(0.0, x - alpha * g)
        max_change = float(np.max(np.abs(x_next - x)))
        x = x_next
        iterations += 1
        if record_objective:
            trace.append(objective(system, x, config))
        if max_change < config.tol:
            converged = True
            break

    amounts = [0.0] * system.n_ingredients
    for col, i in enumerate(system.active):
        amounts[i] = float(x[col])
    total = sum(amounts)
    if not total > 0:
        raise DegenerateSolutionError()

    x.setflags(write=False)
    return SolverResult(
        x=x,
        amounts=tuple(amounts),
        iterations=iterations,
        converged=converged,
        step=alpha,
        objective_trace=tuple(trace),
    )
