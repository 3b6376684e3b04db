from __future__ import annotations

from ..models.blend import BlendRequest, IngredientRow
from ..nutrients import MassUnit


def example_request() -> BlendRequest:
    """Hydroponic starter: four common salts aimed at 3-5-3 in a 1 kg batch."""
    return BlendRequest(
        rows=[
            IngredientRow(name="Calcium Nitrate", analysis={"N": "15.5", "Ca": "19"}),
            IngredientRow(name="MKP", analysis={"P2O5": "52", "K2O": "34"}),
            IngredientRow(name="K2SO4 (SOP)", analysis={"K2O": "50", "S": "18"}),
            IngredientRow(name="Urea", analysis={"N": "46"}),
        ],
        targets={"N": "3", "P2O5": "5", "K2O": "3"},
        total="1000",
        total_unit=MassUnit.G,
        regularize=True,
        include_micros=False,
    )
