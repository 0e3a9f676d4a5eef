"""
Rent vs. Buy comparison toolkit.

This package projects a home purchase and a rental side by side, month by
month, discounts both streams of cash flows to today's dollars, and reports
which scenario comes out ahead and when buying breaks even. Optional helpers
seed the assumptions from American Community Survey (ACS) and HMDA data.
"""

from .exceptions import DomainError
from .schemas import (
    LocationProfile,
    ModelInputs,
    ModelResult,
    MonthRecord,
    Summary,
)
from .model import run_model

__all__ = [
    "DomainError",
    "LocationProfile",
    "ModelInputs",
    "ModelResult",
    "MonthRecord",
    "Summary",
    "run_model",
]
