from typing import Any, Dict, List

import pytest

from .fakes import ACS_HEADER


@pytest.fixture
def acs_payload() -> List[List[str]]:
    return [
        ACS_HEADER,
        ["Los Angeles-Long Beach-Anaheim, CA Metro Area", "1800", "750000", "6000", "1500", "31080"],
    ]


@pytest.fixture
def hmda_rows() -> List[Dict[str, Any]]:
    return [
        {
            "msa": "31080",
            "msa_name": "Los Angeles-Long Beach-Anaheim, CA",
            "purchase_price": 800_000.0,
            "purchase_loan": 640_000.0,
            "purchase_rate_pct": 6.5,
        }
    ]
