from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from google.cloud import bigquery

from .schemas import LocationProfile

logger = logging.getLogger(__name__)


class CensusACSClient:
    """Thin wrapper around the Census API for ACS pulls."""

    BASE_URL = "https://api.census.gov/data"
    GEO_KEY = "metropolitan statistical area/micropolitan statistical area"

    ACS_METRICS: Dict[str, str] = {
        "median_rent": "B25064_001E",  # monthly
        "median_home_value": "B25077_001E",
        "real_estate_taxes": "B25103_001E",  # annual
        "home_insurance": "B25141_001E",  # annual
    }

    def __init__(
        self,
        api_key: Optional[str],
        dataset: str = "acs/acs5",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.dataset = dataset
        self.session = session or requests.Session()

    def fetch_housing_metrics(self, cbsa: str, *, year: int = 2023) -> Dict[str, Any]:
        columns = ["NAME"] + sorted(self.ACS_METRICS.values())
        params = {
            "get": ",".join(columns),
            "for": f"{self.GEO_KEY}:{cbsa}",
        }
        if self.api_key:
            params["key"] = self.api_key

        url = f"{self.BASE_URL}/{year}/{self.dataset}"
        logger.info("Querying ACS %s for CBSA %s", year, cbsa)
        response = self.session.get(url, params=params, timeout=30)
        response.raise_for_status()
        data = response.json()
        if len(data) < 2:
            logger.warning("ACS returned no rows for CBSA %s", cbsa)
            raise RuntimeError(f"ACS query returned no rows for CBSA {cbsa}")

        row = dict(zip(data[0], data[1]))

        metrics: Dict[str, Any] = {"name": row.get("NAME", f"CBSA {cbsa}")}
        for key, column in self.ACS_METRICS.items():
            value = _to_float(row.get(column))
            metrics[key] = value if value is not None else 0.0
        return metrics


class HMDAClient:
    """Pull median property / loan metrics from the public HMDA BigQuery tables."""

    # originated, owner-occupied, first-lien home purchases only
    QUERY = """
        SELECT
          CAST(derived_msa_md AS STRING) AS msa,
          ANY_VALUE(derived_msa_md_name) AS msa_name,
          APPROX_QUANTILES(SAFE_CAST(property_value AS FLOAT64), 100)[OFFSET(50)] AS purchase_price,
          APPROX_QUANTILES(SAFE_CAST(loan_amount AS FLOAT64), 100)[OFFSET(50)] AS purchase_loan,
          APPROX_QUANTILES(SAFE_CAST(interest_rate AS FLOAT64), 100)[OFFSET(50)] AS purchase_rate_pct
        FROM `{table}`
        WHERE as_of_year = @year
          AND CAST(derived_msa_md AS STRING) = @cbsa
          AND action_taken = 1
          AND loan_purpose = 1
          AND occupancy_type = 1
          AND lien_status = 1
          AND SAFE_CAST(interest_rate AS FLOAT64) IS NOT NULL
          AND SAFE_CAST(property_value AS FLOAT64) > 0
        GROUP BY msa
    """

    def __init__(
        self,
        *,
        table: str,
        client: Optional[bigquery.Client] = None,
        project: Optional[str] = None,
    ) -> None:
        self.client = client if client is not None else bigquery.Client(project=project)
        self.table = table

    def fetch_cbsa_summary(self, cbsa: str, *, year: int = 2023) -> Dict[str, Any]:
        job_config = bigquery.QueryJobConfig(
            query_parameters=[
                bigquery.ScalarQueryParameter("year", "INT64", year),
                bigquery.ScalarQueryParameter("cbsa", "STRING", cbsa),
            ]
        )
        logger.info("Querying HMDA table %s for CBSA %s (%s)", self.table, cbsa, year)
        query_job = self.client.query(self.QUERY.format(table=self.table), job_config=job_config)
        result = list(query_job.result())
        if not result:
            logger.warning("HMDA returned no rows for CBSA %s", cbsa)
            raise RuntimeError(f"No HMDA results for CBSA {cbsa} in {self.table}")
        row = result[0]
        return {
            "cbsa": row["msa"],
            "name": row["msa_name"],
            "property_value": row["purchase_price"] or 0.0,
            "loan_amount": row["purchase_loan"] or 0.0,
            "interest_rate": row["purchase_rate_pct"] or 0.0,
        }


@dataclass
class LocationDataAssembler:
    """Combine ACS and HMDA pulls into a single location profile."""

    acs_client: CensusACSClient
    hmda_client: HMDAClient

    def build_profile(
        self,
        cbsa: str,
        *,
        acs_year: int = 2023,
        hmda_year: int = 2023,
    ) -> LocationProfile:
        acs_metrics = self.acs_client.fetch_housing_metrics(cbsa, year=acs_year)
        hmda_metrics = self.hmda_client.fetch_cbsa_summary(cbsa, year=hmda_year)

        name = hmda_metrics.get("name") or acs_metrics.get("name") or f"CBSA {cbsa}"
        # HMDA reports the financed property; fall back to the ACS median value
        property_value = hmda_metrics.get("property_value") or acs_metrics.get(
            "median_home_value", 0.0
        )

        return LocationProfile(
            cbsa=cbsa,
            name=name,
            median_rent=acs_metrics.get("median_rent", 0.0),
            property_value=property_value,
            loan_amount=hmda_metrics.get("loan_amount", 0.0),
            interest_rate_pct=hmda_metrics.get("interest_rate", 0.0),
            annual_property_taxes=acs_metrics.get("real_estate_taxes", 0.0),
            annual_home_insurance=acs_metrics.get("home_insurance", 0.0),
        )


def _to_float(value: Optional[str]) -> Optional[float]:
    if value in (None, "", "null"):
        return None
    try:
        number = float(value)
    except ValueError as exc:
        raise ValueError(f"Could not convert ACS value '{value}' to float") from exc
    # ACS annotates suppressed estimates with large negative sentinels
    return None if number < 0 else number
