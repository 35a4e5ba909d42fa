# src/propkpi/services/presentation.py
"""
Presentation boundary.

Everything inside the engine is raw numbers with rates as fractions. This is
the one place they become display strings (currency with no cents,
percentages x100 with 1-2 decimals) or get reshaped for older consumers.
"""
from __future__ import annotations

from dataclasses import asdict
from typing import Any, Iterable

import pandas as pd

from propkpi.domain.financials import Financials
from propkpi.domain.metrics import PortfolioMetrics

# Fields that hold fractions (0.131 == 13.1%).
PERCENT_FIELDS = frozenset({"cap_rate", "cash_on_cash_return", "break_even_occupancy"})

# Plain ratios, shown as "1.35x".
RATIO_FIELDS = frozenset({"dscr", "equity_multiple"})

CURRENCY_FIELDS = frozenset(
    {
        "monthly_gross_rent",
        "gross_rental_income",
        "vacancy_loss",
        "other_income",
        "effective_gross_income",
        "monthly_expenses",
        "annual_expenses",
        "monthly_management_fee",
        "monthly_noi",
        "noi",
        "monthly_debt_service",
        "annual_debt_service",
        "current_debt",
        "monthly_cash_flow",
        "annual_cash_flow",
        "arv",
        "current_equity_value",
        "all_in_cost",
        "rehab_costs",
        "initial_capital_required",
    }
)


def format_currency(value: float) -> str:
    """$1,234 style, no cents. Negatives as -$1,234."""
    rounded = round(value)
    if rounded < 0:
        return f"-${abs(rounded):,.0f}"
    return f"${rounded:,.0f}"


def format_percent(fraction: float, decimals: int = 1) -> str:
    if decimals not in (1, 2):
        raise ValueError("percentages render with 1 or 2 decimals")
    return f"{fraction * 100:.{decimals}f}%"


def format_ratio(value: float, decimals: int = 2) -> str:
    return f"{value:.{decimals}f}x"


def to_display(fin: Financials, *, percent_decimals: int = 1) -> dict[str, str]:
    out: dict[str, str] = {}
    for name, value in asdict(fin).items():
        if name in CURRENCY_FIELDS:
            out[name] = format_currency(value)
        elif name in PERCENT_FIELDS:
            out[name] = format_percent(value, percent_decimals)
        elif name in RATIO_FIELDS:
            out[name] = format_ratio(value)
    return out


def to_legacy_fields(fin: Financials) -> dict[str, Any]:
    """
    Map a Financials onto the camelCase shape older dashboard screens read.

    A pure renaming; no calculation happens here beyond the x100 for the
    two *Percent fields those screens expect.
    """
    return {
        "monthlyGrossRent": fin.monthly_gross_rent,
        "annualGrossRent": fin.gross_rental_income,
        "grossRentalIncome": fin.gross_rental_income,
        "vacancyLoss": fin.vacancy_loss,
        "otherIncome": fin.other_income,
        "effectiveGrossIncome": fin.effective_gross_income,
        "monthlyOperatingExpenses": fin.monthly_expenses,
        "annualOperatingExpenses": fin.annual_expenses,
        "totalOperatingExpenses": fin.annual_expenses,
        "managementFee": fin.monthly_management_fee * 12.0,
        "monthlyNOI": fin.monthly_noi,
        "annualNOI": fin.noi,
        "netOperatingIncome": fin.noi,
        "noiMonthly": fin.monthly_noi,
        "noiAnnual": fin.noi,
        "monthlyDebtService": fin.monthly_debt_service,
        "annualDebtService": fin.annual_debt_service,
        "monthlyCashFlow": fin.monthly_cash_flow,
        "annualCashFlow": fin.annual_cash_flow,
        "beforeTaxCashFlow": fin.annual_cash_flow,
        "capRate": fin.cap_rate,
        "capRatePercent": fin.cap_rate * 100.0,
        "cashOnCashReturn": fin.cash_on_cash_return,
        "cashOnCashReturnPercent": fin.cash_on_cash_return * 100.0,
        "dscr": fin.dscr,
        "breakEvenOccupancy": fin.break_even_occupancy,
        "currentARV": fin.arv,
        "currentArv": fin.arv,
        "currentDebt": fin.current_debt,
        "currentEquity": fin.current_equity_value,
        "currentEquityValue": fin.current_equity_value,
        "equityMultiple": fin.equity_multiple,
        "allInCost": fin.all_in_cost,
        "totalRehab": fin.rehab_costs,
        "totalInvestedCapital": fin.initial_capital_required,
        "expenseBreakdown": dict(fin.expense_breakdown),
    }


def portfolio_to_legacy_fields(metrics: PortfolioMetrics) -> dict[str, Any]:
    return {
        "totalAUM": metrics.total_aum,
        "totalUnits": metrics.total_units,
        "totalEquity": metrics.total_equity,
        "totalDebt": metrics.total_debt,
        "currentMonthlyIncome": metrics.monthly_cash_flow,
        "pricePerUnit": metrics.price_per_unit,
        "avgEquityMultiple": metrics.avg_equity_multiple,
        "avgCoCReturn": metrics.avg_cash_on_cash_return,
    }


def financials_frame(rows: Iterable[tuple[Any, str, Financials]]) -> pd.DataFrame:
    """
    One row per property with raw (unformatted) KPIs, for export.

    rows: (property_id, status, financials)
    """
    records = []
    for property_id, status, fin in rows:
        rec = {"property_id": property_id, "status": status}
        for name, value in asdict(fin).items():
            if name in CURRENCY_FIELDS or name in PERCENT_FIELDS or name in RATIO_FIELDS:
                rec[name] = value
        rec["degraded"] = fin.degraded
        rec["n_warnings"] = len(fin.warnings)
        records.append(rec)
    return pd.DataFrame.from_records(records)
