from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Tuple

from .exceptions import DomainError
from .rates import COMPOUNDING_CONVENTIONS, EFFECTIVE


@dataclass(frozen=True)
class ModelInputs:
    """
    Economic assumptions for one run. Every rate is an annual fraction
    (0.05 for 5%), never a times-100 percentage.
    """

    # Global
    analysis_years: int = 30
    discount_rate_annual: float = 0.05
    start_date: Optional[date] = None

    # Buy scenario
    home_price: float = 500_000.0
    down_payment_fraction: float = 0.20
    mortgage_rate_annual: float = 0.06
    mortgage_term_years: int = 30
    hoa_monthly: float = 0.0
    property_tax_rate_annual: float = 0.01
    insurance_annual: float = 2_000.0
    maintenance_rate_annual: float = 0.01
    home_appreciation_rate_annual: float = 0.03
    closing_costs: float = 0.0
    loan_fees: float = 0.0
    selling_cost_fraction: float = 0.06
    sell_after_years: Optional[int] = None
    mortgage_compounding: str = EFFECTIVE

    # Rent scenario
    initial_monthly_rent: float = 2_000.0
    rent_inflation_rate_annual: float = 0.03
    renter_insurance_monthly: float = 0.0
    other_rent_costs_monthly: float = 0.0

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        for field in dataclasses.fields(self):
            value = getattr(self, field.name)
            if isinstance(value, float) and not math.isfinite(value):
                raise DomainError(f"{field.name} must be finite, got {value!r}")

        _require_whole_number("analysis_years", self.analysis_years)
        _require_whole_number("mortgage_term_years", self.mortgage_term_years)
        if self.analysis_years < 0:
            raise DomainError("analysis_years must not be negative")

        for name in (
            "home_price",
            "hoa_monthly",
            "insurance_annual",
            "closing_costs",
            "loan_fees",
            "initial_monthly_rent",
            "renter_insurance_monthly",
            "other_rent_costs_monthly",
        ):
            if getattr(self, name) < 0:
                raise DomainError(f"{name} must not be negative")

        if not 0 <= self.down_payment_fraction <= 1:
            raise DomainError("down_payment_fraction must be between 0 and 1")
        if not 0 <= self.selling_cost_fraction <= 1:
            raise DomainError("selling_cost_fraction must be between 0 and 1")

        if self.discount_rate_annual <= -1:
            raise DomainError("discount_rate_annual must be greater than -100%")
        if self.mortgage_rate_annual <= -1:
            raise DomainError("mortgage_rate_annual must be greater than -100%")
        for name in ("home_appreciation_rate_annual", "rent_inflation_rate_annual"):
            if getattr(self, name) < -1:
                raise DomainError(f"{name} must be at least -100%")

        if self.mortgage_compounding not in COMPOUNDING_CONVENTIONS:
            raise DomainError(
                f"mortgage_compounding must be one of {', '.join(COMPOUNDING_CONVENTIONS)}"
            )

        if self.loan_amount > 0 and self.mortgage_term_years <= 0:
            raise DomainError("mortgage_term_years must be positive when a loan is taken")

        if self.sell_after_years is not None:
            _require_whole_number("sell_after_years", self.sell_after_years)
            if not 1 <= self.sell_after_years <= self.analysis_years:
                raise DomainError("sell_after_years must fall within the analysis period")

    @property
    def months(self) -> int:
        return int(self.analysis_years) * 12

    @property
    def mortgage_term_months(self) -> int:
        return int(self.mortgage_term_years) * 12

    @property
    def sell_month_index(self) -> Optional[int]:
        if self.sell_after_years is None:
            return None
        return int(self.sell_after_years) * 12

    @property
    def down_payment(self) -> float:
        return self.home_price * self.down_payment_fraction

    @property
    def loan_amount(self) -> float:
        return self.home_price - self.down_payment

    def replace(self, **changes: Any) -> "ModelInputs":
        return dataclasses.replace(self, **changes)


def _require_whole_number(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DomainError(f"{name} must be a whole number of years")
    if isinstance(value, float) and not value.is_integer():
        raise DomainError(f"{name} must be a whole number of years")


@dataclass(frozen=True)
class MonthRecord:
    month_index: int
    rent_payment: float
    rent_cash_flow: float
    rent_discounted_cash_flow: float
    rent_cumulative_npv: float
    mortgage_payment: float
    mortgage_interest: float
    mortgage_principal: float
    mortgage_balance: float
    property_tax: float
    maintenance: float
    insurance: float
    hoa: float
    home_value: float
    percentage_paid_off: float
    equity: float
    buy_cash_flow: float
    buy_discounted_cash_flow: float
    buy_cumulative_npv: float
    discount_factor: float
    sale_proceeds: float = 0.0
    date: Optional[str] = None

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class Summary:
    months: int
    buy_total_npv: float
    rent_total_npv: float
    npv_difference: float  # rent - buy; negative when buying comes out ahead
    break_even_month_index: Optional[int] = None
    break_even_years: Optional[float] = None
    sell_month_index: Optional[int] = None

    @property
    def better_option(self) -> str:
        if self.buy_total_npv > self.rent_total_npv:
            return "buying"
        if self.rent_total_npv > self.buy_total_npv:
            return "renting"
        return "tie"


@dataclass(frozen=True)
class ModelResult:
    inputs: ModelInputs
    monthly: Tuple[MonthRecord, ...]
    summary: Summary


@dataclass
class LocationProfile:
    """Holds CBSA-level housing figures assembled from ACS + HMDA."""

    cbsa: str
    name: str
    median_rent: float
    property_value: float
    loan_amount: float
    interest_rate_pct: float  # annual percentage as published by HMDA, e.g., 6.25
    annual_property_taxes: float = 0.0
    annual_home_insurance: float = 0.0

    @property
    def down_payment_fraction(self) -> float:
        if self.property_value <= 0:
            return 1.0
        return min(max(1 - self.loan_amount / self.property_value, 0.0), 1.0)

    @property
    def property_tax_rate(self) -> float:
        if self.property_value <= 0:
            return 0.0
        return self.annual_property_taxes / self.property_value

    @property
    def mortgage_rate(self) -> float:
        return self.interest_rate_pct / 100.0

    def to_inputs(self, base: Optional[ModelInputs] = None) -> ModelInputs:
        base = base or ModelInputs()
        return base.replace(
            home_price=self.property_value,
            down_payment_fraction=self.down_payment_fraction,
            mortgage_rate_annual=self.mortgage_rate,
            property_tax_rate_annual=self.property_tax_rate,
            insurance_annual=self.annual_home_insurance,
            initial_monthly_rent=self.median_rent,
        )
