"""Nutrient catalogue, mass units and lenient parsing of form values."""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any, List, Optional


class Nutrient(str, Enum):
    # Core set
    N = "N"
    P2O5 = "P2O5"
    K2O = "K2O"
    CA = "Ca"
    MG = "Mg"
    S = "S"
    FE = "Fe"
    SI = "Si"
    # Extended micro set
    MN = "Mn"
    ZN = "Zn"
    CU = "Cu"
    B = "B"
    MO = "Mo"
    CL = "Cl"
    NI = "Ni"


CORE_NUTRIENTS = (
    Nutrient.N, Nutrient.P2O5, Nutrient.K2O, Nutrient.CA,
    Nutrient.MG, Nutrient.S, Nutrient.FE, Nutrient.SI,
)
MICRO_NUTRIENTS = (
    Nutrient.MN, Nutrient.ZN, Nutrient.CU, Nutrient.B,
    Nutrient.MO, Nutrient.CL, Nutrient.NI,
)

# Canonical position, used wherever nutrients need a stable order
NUTRIENT_ORDER = {n: i for i, n in enumerate(Nutrient)}


def selected_nutrients(include_micros: bool = False) -> List[Nutrient]:
    return list(CORE_NUTRIENTS + MICRO_NUTRIENTS) if include_micros else list(CORE_NUTRIENTS)


class MassUnit(str, Enum):
    G = "g"
    KG = "kg"
    OZ = "oz"
    LB = "lb"


UNIT_TO_G = {
    MassUnit.G: 1.0,
    MassUnit.KG: 1000.0,
    MassUnit.OZ: 28.349523125,
    MassUnit.LB: 453.59237,
}


_LEADING_NUMBER = re.compile(r"\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def parse_number(value: Any) -> Optional[float]:
    """Parse a form value into a finite float.

    Text is read up to the end of its leading number, so "3%" and "46 %N" both
    parse. Returns None for blanks, text without a leading number, booleans and
    non-finite values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        m = _LEADING_NUMBER.match(value)
        if m is None:
            return None
        value = m.group(0)
    try:
        x = float(value)
    except (TypeError, ValueError):
        return None
    return x if math.isfinite(x) else None


def clamp_pct(x: float) -> float:
    return max(0.0, min(100.0, x))


def parse_concentration(value: Any) -> float:
    """Declared ingredient percentage; unreadable entries count as 0%."""
    x = parse_number(value)
    return 0.0 if x is None else clamp_pct(x)


def parse_target(value: Any) -> Optional[float]:
    """Target percentage; unreadable entries mean the nutrient is unconstrained."""
    x = parse_number(value)
    return None if x is None else clamp_pct(x)


def to_grams(amount: Any, unit: MassUnit = MassUnit.G) -> Optional[float]:
    x = parse_number(amount)
    if x is None:
        return None
    grams = x * UNIT_TO_G[MassUnit(unit)]
    return grams if math.isfinite(grams) else None
