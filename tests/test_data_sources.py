import pytest

from rent_vs_buy.data_sources import CensusACSClient, HMDAClient, LocationDataAssembler
from rent_vs_buy.schemas import LocationProfile, ModelInputs

from .fakes import ACS_HEADER, FakeBigQueryClient, FakeSession


def test_acs_metrics_are_parsed(acs_payload):
    session = FakeSession(acs_payload)
    client = CensusACSClient(api_key="secret", session=session)

    metrics = client.fetch_housing_metrics("31080", year=2022)

    assert metrics["name"].startswith("Los Angeles")
    assert metrics["median_rent"] == 1800.0
    assert metrics["median_home_value"] == 750_000.0
    assert metrics["real_estate_taxes"] == 6000.0
    assert metrics["home_insurance"] == 1500.0

    call = session.calls[0]
    assert call["url"] == "https://api.census.gov/data/2022/acs/acs5"
    assert call["params"]["key"] == "secret"
    assert call["params"]["for"].endswith(":31080")


def test_acs_without_api_key_omits_key_param(acs_payload):
    session = FakeSession(acs_payload)
    CensusACSClient(api_key=None, session=session).fetch_housing_metrics("31080")
    assert "key" not in session.calls[0]["params"]


def test_acs_missing_values_default_to_zero():
    payload = [ACS_HEADER, ["Somewhere", "", "null", "1200", "900", "99999"]]
    metrics = CensusACSClient(api_key=None, session=FakeSession(payload)).fetch_housing_metrics(
        "99999"
    )
    assert metrics["median_rent"] == 0.0
    assert metrics["median_home_value"] == 0.0


def test_acs_requests_each_metric_column_once(acs_payload):
    session = FakeSession(acs_payload)
    CensusACSClient(api_key=None, session=session).fetch_housing_metrics("31080")
    assert session.calls[0]["params"]["get"].split(",") == ACS_HEADER[:5]


def test_acs_suppressed_estimates_default_to_zero():
    payload = [ACS_HEADER, ["Somewhere", "-666666666", "500000", "-999999999", "900", "99999"]]
    metrics = CensusACSClient(api_key=None, session=FakeSession(payload)).fetch_housing_metrics(
        "99999"
    )
    assert metrics["median_rent"] == 0.0
    assert metrics["median_home_value"] == 500_000.0
    assert metrics["real_estate_taxes"] == 0.0
    assert metrics["home_insurance"] == 900.0


def test_acs_empty_result_raises():
    client = CensusACSClient(api_key=None, session=FakeSession([ACS_HEADER]))
    with pytest.raises(RuntimeError):
        client.fetch_housing_metrics("00000")


def test_acs_garbage_value_raises():
    payload = [ACS_HEADER, ["Somewhere", "abc", "1", "1", "1", "99999"]]
    client = CensusACSClient(api_key=None, session=FakeSession(payload))
    with pytest.raises(ValueError, match="abc"):
        client.fetch_housing_metrics("99999")


def test_hmda_summary(hmda_rows):
    bq = FakeBigQueryClient(hmda_rows)
    client = HMDAClient(table="project.dataset.hmda", client=bq)

    summary = client.fetch_cbsa_summary("31080", year=2023)

    assert summary["property_value"] == 800_000.0
    assert summary["loan_amount"] == 640_000.0
    assert summary["interest_rate"] == 6.5
    assert "`project.dataset.hmda`" in bq.queries[0]
    assert "loan_purpose = 1" in bq.queries[0]


def test_hmda_empty_result_raises():
    client = HMDAClient(table="t", client=FakeBigQueryClient([]))
    with pytest.raises(RuntimeError):
        client.fetch_cbsa_summary("31080")


def test_assembler_builds_profile(acs_payload, hmda_rows):
    assembler = LocationDataAssembler(
        acs_client=CensusACSClient(api_key=None, session=FakeSession(acs_payload)),
        hmda_client=HMDAClient(table="t", client=FakeBigQueryClient(hmda_rows)),
    )

    profile = assembler.build_profile("31080")

    assert profile.name == "Los Angeles-Long Beach-Anaheim, CA"
    assert profile.property_value == 800_000.0
    assert profile.down_payment_fraction == pytest.approx(0.2)
    assert profile.mortgage_rate == pytest.approx(0.065)
    assert profile.property_tax_rate == pytest.approx(6000 / 800_000)


def test_assembler_falls_back_to_acs_home_value(acs_payload, hmda_rows):
    hmda_rows[0]["purchase_price"] = None
    assembler = LocationDataAssembler(
        acs_client=CensusACSClient(api_key=None, session=FakeSession(acs_payload)),
        hmda_client=HMDAClient(table="t", client=FakeBigQueryClient(hmda_rows)),
    )
    assert assembler.build_profile("31080").property_value == 750_000.0


def test_profile_overlays_model_inputs():
    profile = LocationProfile(
        cbsa="31080",
        name="LA",
        median_rent=2_500.0,
        property_value=900_000.0,
        loan_amount=720_000.0,
        interest_rate_pct=6.0,
        annual_property_taxes=9_000.0,
        annual_home_insurance=1_800.0,
    )
    inputs = profile.to_inputs(ModelInputs(analysis_years=15))

    assert inputs.analysis_years == 15
    assert inputs.home_price == 900_000.0
    assert inputs.loan_amount == pytest.approx(720_000.0)
    assert inputs.mortgage_rate_annual == pytest.approx(0.06)
    assert inputs.property_tax_rate_annual == pytest.approx(0.01)
    assert inputs.insurance_annual == 1_800.0
    assert inputs.initial_monthly_rent == 2_500.0


def test_profile_without_property_value_means_no_loan():
    profile = LocationProfile(
        cbsa="1", name="x", median_rent=0.0, property_value=0.0, loan_amount=0.0,
        interest_rate_pct=0.0,
    )
    assert profile.down_payment_fraction == 1.0
    assert profile.property_tax_rate == 0.0
