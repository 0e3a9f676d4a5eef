from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .exceptions import DomainError


@dataclass(frozen=True)
class AmortizationStep:
    interest: float
    principal: float
    new_balance: float

    @property
    def payment(self) -> float:
        return self.interest + self.principal


def mortgage_payment(principal: float, monthly_rate: float, num_payments: int) -> float:
    """
    Level payment that retires ``principal`` over ``num_payments`` months:

      M = P * r(1+r)^n / ((1+r)^n - 1)

    With a zero rate the loan is repaid straight-line.
    """
    if num_payments <= 0:
        raise DomainError("number of payments must be positive")
    if monthly_rate == 0:
        return principal / num_payments
    growth = (1 + monthly_rate) ** num_payments
    return principal * monthly_rate * growth / (growth - 1)


def amortization_step(balance: float, payment: float, monthly_rate: float) -> AmortizationStep:
    if balance <= 0:
        return AmortizationStep(interest=0.0, principal=0.0, new_balance=0.0)

    interest = balance * monthly_rate
    # the final payment only covers what is left
    principal = min(payment - interest, balance)
    new_balance = max(0.0, balance - principal)
    return AmortizationStep(interest=interest, principal=principal, new_balance=new_balance)


def amortization_schedule(
    principal: float, payment: float, monthly_rate: float, num_payments: int
) -> Iterator[AmortizationStep]:
    """Steps for at most ``num_payments`` months, stopping once the loan is retired."""
    balance = principal
    for _ in range(num_payments):
        if balance <= 0:
            break
        step = amortization_step(balance, payment, monthly_rate)
        balance = step.new_balance
        yield step


def equity(home_value: float, loan_balance: float) -> float:
    """
    Owner's net position in the property.

    The owner holds the whole asset from day one and the loan is a liability
    against it, so appreciation and paydown both land here. This is a stock:
    evaluate it each month, never accumulate it.
    """
    return home_value - loan_balance


def percentage_paid_off(loan_amount: float, balance: float) -> float:
    if loan_amount <= 0:
        return 1.0
    return min(max((loan_amount - balance) / loan_amount, 0.0), 1.0)
