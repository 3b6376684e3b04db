from __future__ import annotations


class BlendError(Exception):
    """Base class for terminal solve failures. ``code`` is stable across releases."""

    code = "BLEND_ERROR"
    default_message = "Blend could not be solved"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidMassError(BlendError):
    code = "INVALID_MASS"
    default_message = "Enter a total blend mass > 0."


class NoTargetsError(BlendError):
    code = "NO_TARGETS"
    default_message = "Set at least one target nutrient (e.g., N, P2O5, K2O)."


class NoIngredientsError(BlendError):
    code = "NO_INGREDIENTS"
    default_message = "Add at least one fertilizer row."


class NoRelevantIngredientsError(BlendError):
    code = "NO_RELEVANT_INGREDIENTS"
    default_message = "None of your fertilizers contain the nutrients you targeted."


class DegenerateSolutionError(BlendError):
    code = "DEGENERATE_SOLUTION"
    default_message = "Solver returned zero mass. Check inputs."
