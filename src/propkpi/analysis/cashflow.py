# src/propkpi/analysis/cashflow.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CashFlowResult:
    monthly_noi: float
    noi: float
    monthly_cash_flow: float
    annual_cash_flow: float


def aggregate_cash_flow(
    effective_gross_income: float,
    monthly_expenses: float,
    monthly_debt_service: float,
) -> CashFlowResult:
    # NOI is income after vacancy + operating expenses, BEFORE debt.
    monthly_noi = effective_gross_income / 12.0 - monthly_expenses
    monthly_cash_flow = monthly_noi - monthly_debt_service
    return CashFlowResult(
        monthly_noi=monthly_noi,
        noi=monthly_noi * 12.0,
        monthly_cash_flow=monthly_cash_flow,
        annual_cash_flow=monthly_cash_flow * 12.0,
    )
