"""
BMI Engine.

Single source of truth for Body Mass Index values and category labels.
Every place that needs a BMI label (vitals entry, listings, patient detail,
assessment eligibility) goes through classify_bmi.
"""

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from enum import Enum
from typing import Any, Optional


UNDERWEIGHT_BELOW = 18.5
OVERWEIGHT_FROM = 25.0


class BmiCategory(str, Enum):
    """BMI category labels."""

    UNDERWEIGHT = "Underweight"
    NORMAL = "Normal"
    OVERWEIGHT = "Overweight"


@dataclass(frozen=True)
class BmiResult:
    """Rounded BMI value and its category.

    category is None when the inputs did not produce a finite value.
    """

    value: float
    category: Optional[BmiCategory]

    @property
    def is_valid(self) -> bool:
        return self.category is not None


def classify_bmi(value: float) -> BmiCategory:
    """Map a BMI value onto its category.

    Boundaries: < 18.5 Underweight, 18.5 <= bmi < 25 Normal, >= 25 Overweight.
    """
    if value < UNDERWEIGHT_BELOW:
        return BmiCategory.UNDERWEIGHT
    if value < OVERWEIGHT_FROM:
        return BmiCategory.NORMAL
    return BmiCategory.OVERWEIGHT


def round_one_decimal(value: float) -> float:
    """Round half away from zero, on the exact binary value of the float."""
    try:
        return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return value


def _divide(numerator: float, denominator: float) -> float:
    # IEEE semantics instead of ZeroDivisionError
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def compute_bmi(height_cm: float, weight_kg: float) -> BmiResult:
    """
    Compute BMI from height in centimetres and weight in kilograms.

    Inputs are not validated here. Non-positive or non-finite inputs can give
    a non-finite value, which is reported with category None and must be
    treated by callers as invalid input.

    Args:
        height_cm: Height in centimetres
        weight_kg: Weight in kilograms

    Returns:
        BmiResult with the value rounded to one decimal place
    """
    height_m = height_cm / 100
    raw = _divide(weight_kg, height_m * height_m)

    if not math.isfinite(raw):
        return BmiResult(value=raw, category=None)

    value = round_one_decimal(raw)
    return BmiResult(value=value, category=classify_bmi(value))


def parse_bmi(raw: Any) -> Optional[float]:
    """Parse a BMI value as returned by the backend (number or numeric string)."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None
