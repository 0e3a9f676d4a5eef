from __future__ import annotations

from typing import List


def project_growth(initial: float, monthly_rate: float, months: int) -> List[float]:
    """Exponential growth sequence ``initial * (1 + r) ** i`` for ``i`` in ``0..months``."""
    return [initial * (1 + monthly_rate) ** month for month in range(months + 1)]


def home_values(home_price: float, monthly_appreciation: float, months: int) -> List[float]:
    return project_growth(home_price, monthly_appreciation, months)


def rent_payments(initial_rent: float, monthly_inflation: float, months: int) -> List[float]:
    return project_growth(initial_rent, monthly_inflation, months)
