from __future__ import annotations

import logging
import math
from datetime import date
from typing import List, Optional, Sequence, Tuple

from .amortization import amortization_schedule, equity, mortgage_payment, percentage_paid_off
from .exceptions import DomainError
from .projections import home_values, rent_payments
from .rates import annual_to_monthly, discount_factors, mortgage_monthly_rate
from .schemas import ModelInputs, ModelResult, MonthRecord, Summary

logger = logging.getLogger(__name__)


def run_model(inputs: Optional[ModelInputs] = None) -> ModelResult:
    """
    Build the month-by-month buy and rent ledgers and summarise them.

    Each buy record's cumulative NPV is the running sum of discounted cash
    outflows plus the discounted equity held that month, i.e. what the owner
    would net by walking away with the property's current net value. Rent
    records carry the running discounted sum only.

    Inputs whose projections overflow raise ``DomainError`` before any month
    is built.
    """
    inputs = inputs or ModelInputs()

    sell_month = inputs.sell_month_index
    months = sell_month if sell_month is not None else inputs.months

    discount_monthly = annual_to_monthly(inputs.discount_rate_annual)
    mortgage_monthly = mortgage_monthly_rate(
        inputs.mortgage_rate_annual, inputs.mortgage_compounding
    )
    appreciation_monthly = annual_to_monthly(inputs.home_appreciation_rate_annual)
    rent_inflation_monthly = annual_to_monthly(inputs.rent_inflation_rate_annual)

    property_tax_rate_monthly = inputs.property_tax_rate_annual / 12.0
    maintenance_rate_monthly = inputs.maintenance_rate_annual / 12.0
    insurance_monthly = inputs.insurance_annual / 12.0

    loan_amount = inputs.loan_amount
    term_months = inputs.mortgage_term_months
    payment = 0.0
    try:
        if loan_amount > 0 and term_months > 0:
            payment = mortgage_payment(loan_amount, mortgage_monthly, term_months)
        values = home_values(inputs.home_price, appreciation_monthly, months)
        rents = rent_payments(inputs.initial_monthly_rent, rent_inflation_monthly, months)
        factors = discount_factors(discount_monthly, months)
    except (OverflowError, ZeroDivisionError) as exc:
        raise DomainError("inputs overflow the monthly projections") from exc

    if not math.isfinite(payment):
        raise DomainError("mortgage inputs produce a non-finite monthly payment")

    # every discounted figure, running sum and equity term is bounded by this
    peak_value = max(abs(value) for value in values)
    peak_rent = max(abs(rent) for rent in rents)
    peak_factor = max(factors)
    monthly_bound = (
        payment
        + peak_value * (property_tax_rate_monthly + maintenance_rate_monthly + 1)
        + insurance_monthly
        + inputs.hoa_monthly
        + peak_rent
        + inputs.renter_insurance_monthly
        + inputs.other_rent_costs_monthly
    )
    one_time = inputs.home_price + inputs.closing_costs + inputs.loan_fees
    total_bound = ((months + 1) * monthly_bound + one_time) * peak_factor
    if not math.isfinite(total_bound):
        raise DomainError("inputs produce non-finite home values, rents or cash flows")

    schedule = (
        list(amortization_schedule(loan_amount, payment, mortgage_monthly, term_months))
        if loan_amount > 0 and term_months > 0
        else []
    )

    logger.debug(
        "Running model: %d months, loan %.2f, payment %.2f, sell month %s",
        months,
        loan_amount,
        payment,
        sell_month,
    )

    # Month 0: one-time outflows, no mortgage activity yet
    buy_cf = -(inputs.down_payment + inputs.closing_costs + inputs.loan_fees)
    rent_cf = 0.0
    balance = loan_amount
    buy_running = buy_cf * factors[0]
    rent_running = rent_cf * factors[0]
    equity_0 = equity(values[0], balance)

    records: List[MonthRecord] = [
        MonthRecord(
            month_index=0,
            date=_month_label(inputs.start_date, 0),
            rent_payment=rents[0],
            rent_cash_flow=rent_cf,
            rent_discounted_cash_flow=rent_cf * factors[0],
            rent_cumulative_npv=rent_running,
            mortgage_payment=0.0,
            mortgage_interest=0.0,
            mortgage_principal=0.0,
            mortgage_balance=balance,
            property_tax=0.0,
            maintenance=0.0,
            insurance=0.0,
            hoa=0.0,
            home_value=values[0],
            percentage_paid_off=percentage_paid_off(loan_amount, balance),
            equity=equity_0,
            buy_cash_flow=buy_cf,
            buy_discounted_cash_flow=buy_cf * factors[0],
            buy_cumulative_npv=buy_running + equity_0 * factors[0],
            discount_factor=factors[0],
        )
    ]

    for month in range(1, months + 1):
        if month <= len(schedule):
            step = schedule[month - 1]
            interest, principal = step.interest, step.principal
            month_payment = step.payment
            balance = step.new_balance
        else:
            interest = principal = month_payment = 0.0
            balance = 0.0

        home_value = values[month]
        property_tax = home_value * property_tax_rate_monthly
        maintenance = home_value * maintenance_rate_monthly

        # cash actually paid out; equity is never folded in here
        buy_cf = -(
            month_payment + property_tax + maintenance + insurance_monthly + inputs.hoa_monthly
        )
        rent_cf = -(
            rents[month] + inputs.renter_insurance_monthly + inputs.other_rent_costs_monthly
        )

        month_equity = equity(home_value, balance)
        sale_proceeds = 0.0
        if month == sell_month:
            sale_proceeds = home_value * (1 - inputs.selling_cost_fraction) - balance
            buy_cf += sale_proceeds

        factor = factors[month]
        buy_running += buy_cf * factor
        rent_running += rent_cf * factor

        if month == sell_month:
            # equity realised through the sale proceeds above
            buy_npv = buy_running
        else:
            buy_npv = buy_running + month_equity * factor

        records.append(
            MonthRecord(
                month_index=month,
                date=_month_label(inputs.start_date, month),
                rent_payment=rents[month],
                rent_cash_flow=rent_cf,
                rent_discounted_cash_flow=rent_cf * factor,
                rent_cumulative_npv=rent_running,
                mortgage_payment=month_payment,
                mortgage_interest=interest,
                mortgage_principal=principal,
                mortgage_balance=balance,
                property_tax=property_tax,
                maintenance=maintenance,
                insurance=insurance_monthly,
                hoa=inputs.hoa_monthly,
                home_value=home_value,
                percentage_paid_off=percentage_paid_off(loan_amount, balance),
                equity=month_equity,
                sale_proceeds=sale_proceeds,
                buy_cash_flow=buy_cf,
                buy_discounted_cash_flow=buy_cf * factor,
                buy_cumulative_npv=buy_npv,
                discount_factor=factor,
            )
        )

    final = records[-1]
    if not (math.isfinite(final.buy_cumulative_npv) and math.isfinite(final.rent_cumulative_npv)):
        raise DomainError("inputs produce a non-finite net present value")

    summary = summarize(records, sell_month_index=sell_month)
    return ModelResult(inputs=inputs, monthly=tuple(records), summary=summary)


def find_break_even(records: Sequence[MonthRecord]) -> Optional[int]:
    """First month at which buying is at least as good as renting, if any."""
    for record in records:
        if record.buy_cumulative_npv >= record.rent_cumulative_npv:
            return record.month_index
    return None


def summarize(
    records: Sequence[MonthRecord], *, sell_month_index: Optional[int] = None
) -> Summary:
    final = records[-1]
    break_even = find_break_even(records)
    if break_even is None:
        logger.debug("No break-even within %d months", final.month_index)
    else:
        logger.debug("Break-even at month %d", break_even)

    return Summary(
        months=final.month_index,
        buy_total_npv=final.buy_cumulative_npv,
        rent_total_npv=final.rent_cumulative_npv,
        npv_difference=final.rent_cumulative_npv - final.buy_cumulative_npv,
        break_even_month_index=break_even,
        break_even_years=break_even / 12 if break_even is not None else None,
        sell_month_index=sell_month_index,
    )


def _month_label(start: Optional[date], offset: int) -> Optional[str]:
    if start is None:
        return None
    year, month = _add_months(start.year, start.month, offset)
    return date(year, month, 1).isoformat()


def _add_months(year: int, month: int, offset: int) -> Tuple[int, int]:
    total = year * 12 + (month - 1) + offset
    return total // 12, total % 12 + 1
