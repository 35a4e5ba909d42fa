# src/propkpi/analysis/valuation.py
from __future__ import annotations

from dataclasses import dataclass, replace

from propkpi.analysis.cashflow import CashFlowResult
from propkpi.domain.financials import EngineDefaults
from propkpi.domain.property import PRE_STABILIZATION, Property


@dataclass(frozen=True)
class InvestmentMetrics:
    cap_rate: float
    arv: float
    arv_basis: str   # "sale_price" | "income_cap" | "stored_appraisal" | "cost_appreciation"
    current_equity_value: float
    all_in_cost: float
    equity_multiple: float
    cash_on_cash_return: float
    dscr: float
    break_even_occupancy: float


def safe_div(numerator: float, denominator: float | None) -> float:
    """numerator / denominator, or 0.0 when the denominator is zero or missing."""
    if not denominator:
        return 0.0
    return numerator / denominator


def gate_cash_flow(status: str, cf: CashFlowResult) -> CashFlowResult:
    """
    Status decides which cash flow we report.

    UnderContract / Rehabbing are pre-stabilization and report 0 whatever
    the raw inputs say. Sold properties no longer produce cash flow.
    NOI is left alone; it describes the asset, not our holding of it.
    """
    if status in PRE_STABILIZATION or status == "Sold":
        return replace(cf, monthly_cash_flow=0.0, annual_cash_flow=0.0)
    return cf


def estimate_arv(
    prop: Property,
    noi: float,
    exit_cap_rate: float | None,
    rehab_costs: float,
    appreciation_factor: float,
) -> tuple[float, str]:
    """
    ARV, first match wins:
      1) sale price, once Sold
      2) income capitalization NOI / exit cap, when both are positive
      3) stored appraisal (arv_at_time_purchased)
      4) (acquisition + rehab) x appreciation factor
    """
    if prop.is_sold and prop.sale_price:
        return float(prop.sale_price), "sale_price"

    if noi > 0 and exit_cap_rate and exit_cap_rate > 0:
        return noi / exit_cap_rate, "income_cap"

    if prop.arv_at_time_purchased and prop.arv_at_time_purchased > 0:
        return float(prop.arv_at_time_purchased), "stored_appraisal"

    base = (prop.acquisition_price or 0.0) + rehab_costs
    return base * appreciation_factor, "cost_appreciation"


def all_in_cost(prop: Property, rehab_costs: float, defaults: EngineDefaults) -> float:
    price = prop.acquisition_price or 0.0
    closing = prop.closing_costs if prop.closing_costs is not None else price * defaults.closing_cost_rate
    holding = prop.holding_costs if prop.holding_costs is not None else price * defaults.holding_cost_rate
    return price + rehab_costs + closing + holding


def equity_multiple(prop: Property, arv: float, cost: float) -> float:
    """
    Two conventions:
      Sold   -> realized profit / capital in
      active -> (ARV - all-in cost) / capital in
    """
    capital = prop.initial_capital_required
    if prop.is_sold:
        return safe_div(prop.total_profits or 0.0, capital)
    return safe_div(arv - cost, capital)


def calculate_investment_metrics(
    prop: Property,
    *,
    noi: float,
    cash_flow: CashFlowResult,
    gross_rental_income: float,
    annual_expenses: float,
    annual_debt_service: float,
    current_debt: float,
    rehab_costs: float,
    exit_cap_rate: float | None,
    defaults: EngineDefaults,
) -> InvestmentMetrics:
    # Cap rate is against what we paid, never against ARV.
    cap_rate = safe_div(noi, prop.acquisition_price)

    arv, arv_basis = estimate_arv(prop, noi, exit_cap_rate, rehab_costs, defaults.appreciation_factor)
    cost = all_in_cost(prop, rehab_costs, defaults)

    return InvestmentMetrics(
        cap_rate=cap_rate,
        arv=arv,
        arv_basis=arv_basis,
        current_equity_value=arv - current_debt,
        all_in_cost=cost,
        equity_multiple=equity_multiple(prop, arv, cost),
        cash_on_cash_return=safe_div(cash_flow.annual_cash_flow, prop.initial_capital_required),
        dscr=safe_div(noi, annual_debt_service),
        break_even_occupancy=safe_div(annual_expenses + annual_debt_service, gross_rental_income),
    )
