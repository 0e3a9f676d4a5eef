from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import NoReturn, Optional

import typer

from .data_sources import CensusACSClient, HMDAClient, LocationDataAssembler
from .exceptions import DomainError
from .model import run_model
from .schemas import ModelInputs, ModelResult

app = typer.Typer(help="Compare the net present value of buying versus renting a home.")

DEFAULTS = ModelInputs()


def _default_census_key() -> Optional[str]:
    return os.environ.get("CENSUS_API_KEY")


def _default_hmda_table() -> str:
    return os.environ.get("HMDA_TABLE", "bigquery-public-data.hmda.hmda_2023")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def run(
    analysis_years: int = typer.Option(DEFAULTS.analysis_years, help="Analysis horizon in years."),
    discount_rate: float = typer.Option(
        DEFAULTS.discount_rate_annual, help="Annual discount rate (e.g., 0.05 for 5%)."
    ),
    start_date: Optional[datetime] = typer.Option(
        None, formats=["%Y-%m-%d"], help="Label months starting from this date."
    ),
    home_price: float = typer.Option(DEFAULTS.home_price, help="Purchase price."),
    down_payment: float = typer.Option(
        DEFAULTS.down_payment_fraction, help="Down payment as a fraction of the price."
    ),
    mortgage_rate: float = typer.Option(
        DEFAULTS.mortgage_rate_annual, help="Annual mortgage rate (e.g., 0.06 for 6%)."
    ),
    mortgage_term_years: int = typer.Option(
        DEFAULTS.mortgage_term_years, help="Mortgage term in years."
    ),
    mortgage_compounding: str = typer.Option(
        DEFAULTS.mortgage_compounding,
        help="How the mortgage rate converts to monthly: 'effective' or 'nominal' (APR/12).",
    ),
    hoa_monthly: float = typer.Option(DEFAULTS.hoa_monthly, help="Monthly HOA dues."),
    property_tax_rate: float = typer.Option(
        DEFAULTS.property_tax_rate_annual, help="Annual property tax as a fraction of value."
    ),
    insurance_annual: float = typer.Option(
        DEFAULTS.insurance_annual, help="Annual homeowner's insurance."
    ),
    maintenance_rate: float = typer.Option(
        DEFAULTS.maintenance_rate_annual, help="Annual maintenance as a fraction of value."
    ),
    appreciation_rate: float = typer.Option(
        DEFAULTS.home_appreciation_rate_annual, help="Annual home price appreciation."
    ),
    closing_costs: float = typer.Option(DEFAULTS.closing_costs, help="One-time closing costs."),
    loan_fees: float = typer.Option(DEFAULTS.loan_fees, help="One-time loan fees."),
    selling_cost: float = typer.Option(
        DEFAULTS.selling_cost_fraction, help="Selling costs as a fraction of the sale price."
    ),
    sell_after_years: Optional[int] = typer.Option(
        None, help="Sell the home after this many years instead of holding it."
    ),
    rent: float = typer.Option(DEFAULTS.initial_monthly_rent, help="Initial monthly rent."),
    rent_inflation: float = typer.Option(
        DEFAULTS.rent_inflation_rate_annual, help="Annual rent inflation."
    ),
    renter_insurance: float = typer.Option(
        DEFAULTS.renter_insurance_monthly, help="Monthly renter's insurance."
    ),
    other_rent_costs: float = typer.Option(
        DEFAULTS.other_rent_costs_monthly, help="Other monthly rent costs."
    ),
    show_timeline: bool = typer.Option(
        False, help="If set, dump the monthly records as JSON."
    ),
) -> None:
    """
    Run the model on explicit assumptions.
    """
    try:
        inputs = ModelInputs(
            analysis_years=analysis_years,
            discount_rate_annual=discount_rate,
            start_date=start_date.date() if start_date else None,
            home_price=home_price,
            down_payment_fraction=down_payment,
            mortgage_rate_annual=mortgage_rate,
            mortgage_term_years=mortgage_term_years,
            mortgage_compounding=mortgage_compounding,
            hoa_monthly=hoa_monthly,
            property_tax_rate_annual=property_tax_rate,
            insurance_annual=insurance_annual,
            maintenance_rate_annual=maintenance_rate,
            home_appreciation_rate_annual=appreciation_rate,
            closing_costs=closing_costs,
            loan_fees=loan_fees,
            selling_cost_fraction=selling_cost,
            sell_after_years=sell_after_years,
            initial_monthly_rent=rent,
            rent_inflation_rate_annual=rent_inflation,
            renter_insurance_monthly=renter_insurance,
            other_rent_costs_monthly=other_rent_costs,
        )
        result = run_model(inputs)
    except DomainError as exc:
        _fail(exc)

    _report(result, show_timeline=show_timeline)


@app.command("from-cbsa")
def from_cbsa(
    cbsa: str = typer.Argument(..., help="CBSA code, e.g., 31080 for Los Angeles."),
    acs_year: int = typer.Option(2023, help="ACS vintage to query."),
    hmda_year: int = typer.Option(2023, help="HMDA filing year to query."),
    census_api_key: Optional[str] = typer.Option(
        default_factory=_default_census_key,
        help="Census API key (env CENSUS_API_KEY if omitted).",
    ),
    hmda_table: str = typer.Option(
        default_factory=_default_hmda_table,
        help="Fully-qualified HMDA BigQuery table.",
    ),
    gcp_project: Optional[str] = typer.Option(
        None, help="GCP project for the BigQuery client (defaults to env)."
    ),
    analysis_years: int = typer.Option(DEFAULTS.analysis_years, help="Analysis horizon in years."),
    discount_rate: float = typer.Option(
        DEFAULTS.discount_rate_annual, help="Annual discount rate (e.g., 0.05 for 5%)."
    ),
    mortgage_term_years: int = typer.Option(
        DEFAULTS.mortgage_term_years, help="Mortgage term in years."
    ),
    appreciation_rate: float = typer.Option(
        DEFAULTS.home_appreciation_rate_annual, help="Annual home price appreciation."
    ),
    rent_inflation: float = typer.Option(
        DEFAULTS.rent_inflation_rate_annual, help="Annual rent inflation."
    ),
    show_timeline: bool = typer.Option(
        False, help="If set, dump the monthly records as JSON."
    ),
) -> None:
    """
    Seed price, financing, taxes, insurance and rent from ACS + HMDA data for
    the CBSA, then run the model.
    """
    acs_client = CensusACSClient(api_key=census_api_key)
    hmda_client = HMDAClient(table=hmda_table, project=gcp_project)
    assembler = LocationDataAssembler(acs_client=acs_client, hmda_client=hmda_client)
    profile = assembler.build_profile(cbsa, acs_year=acs_year, hmda_year=hmda_year)

    try:
        inputs = profile.to_inputs(
            ModelInputs(
                analysis_years=analysis_years,
                discount_rate_annual=discount_rate,
                mortgage_term_years=mortgage_term_years,
                home_appreciation_rate_annual=appreciation_rate,
                rent_inflation_rate_annual=rent_inflation,
            )
        )
        result = run_model(inputs)
    except DomainError as exc:
        _fail(exc)

    typer.echo(f"Location: {profile.name} (CBSA {profile.cbsa})")
    typer.echo(f"Median rent: ${profile.median_rent:,.0f}")
    typer.echo(f"Median property value: ${profile.property_value:,.0f}")
    typer.echo(f"Median loan amount: ${profile.loan_amount:,.0f}")
    typer.echo(f"Mortgage rate: {profile.interest_rate_pct:.2f}%")
    typer.echo("")
    _report(result, show_timeline=show_timeline)


def _report(result: ModelResult, *, show_timeline: bool) -> None:
    summary = result.summary
    first_payment = result.monthly[1].mortgage_payment if len(result.monthly) > 1 else 0.0

    typer.echo(f"Months analysed: {summary.months}")
    typer.echo(f"Monthly mortgage payment: ${first_payment:,.2f}")
    typer.echo(f"Buy NPV: ${summary.buy_total_npv:,.0f}")
    typer.echo(f"Rent NPV: ${summary.rent_total_npv:,.0f}")
    typer.echo(f"NPV difference (rent - buy): ${summary.npv_difference:,.0f}")
    typer.echo(f"Better outcome: {summary.better_option}")
    if summary.sell_month_index is not None:
        typer.echo(f"Home sold at month {summary.sell_month_index}")
    if summary.break_even_month_index is not None:
        typer.echo(
            f"Break-even month: {summary.break_even_month_index} "
            f"(~{summary.break_even_years:.1f} years)"
        )
    else:
        typer.echo("Break-even: not reached within the horizon")

    if show_timeline:
        payload = [record.to_dict() for record in result.monthly]
        typer.echo(json.dumps(payload, indent=2))


def _fail(exc: Exception) -> NoReturn:
    typer.secho(f"Invalid inputs: {exc}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
