from __future__ import annotations

import math
from typing import List

from .exceptions import DomainError

EFFECTIVE = "effective"
NOMINAL = "nominal"
COMPOUNDING_CONVENTIONS = (EFFECTIVE, NOMINAL)


def annual_to_monthly(annual_rate: float) -> float:
    """
    Convert an annual rate to the monthly rate that compounds back to it.

    ``(1 + monthly) ** 12 - 1 == annual_rate``. Negative rates (depreciation,
    deflation) are accepted down to -100%.
    """
    if not math.isfinite(annual_rate):
        raise DomainError(f"annual rate must be finite, got {annual_rate!r}")
    if annual_rate < -1:
        raise DomainError("annual rate must be greater than or equal to -100%")
    return (1 + annual_rate) ** (1 / 12.0) - 1


def nominal_to_monthly(annual_rate: float) -> float:
    """APR-style conversion: the quoted annual rate split evenly over 12 months."""
    if not math.isfinite(annual_rate):
        raise DomainError(f"annual rate must be finite, got {annual_rate!r}")
    return annual_rate / 12.0


def mortgage_monthly_rate(annual_rate: float, compounding: str = EFFECTIVE) -> float:
    if compounding == EFFECTIVE:
        return annual_to_monthly(annual_rate)
    if compounding == NOMINAL:
        return nominal_to_monthly(annual_rate)
    raise DomainError(
        f"unknown compounding convention {compounding!r}; "
        f"expected one of {', '.join(COMPOUNDING_CONVENTIONS)}"
    )


def discount_factor(monthly_rate: float, period: int) -> float:
    # period 0 is always exactly 1
    if period == 0:
        return 1.0
    return 1 / (1 + monthly_rate) ** period


def discount_factors(monthly_rate: float, months: int) -> List[float]:
    return [discount_factor(monthly_rate, period) for period in range(months + 1)]
