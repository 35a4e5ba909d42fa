from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from propkpi.domain.financials import Financials
from propkpi.domain.property import Property


@dataclass(frozen=True)
class PortfolioMetrics:
    """
    Totals and averages across a batch of properties.

    This is the 'reduction' result of a map-style per-property computation.
    Sold properties are outside the AUM population; cash flow only counts
    properties that are actually Cashflowing.
    """
    n_properties: int
    n_active: int
    n_degraded: int
    total_aum: float
    total_units: int
    total_debt: float
    total_equity: float
    annual_cash_flow: float
    monthly_cash_flow: float
    avg_equity_multiple: float
    avg_cash_on_cash_return: float
    price_per_unit: float


def _positive_mean(values: np.ndarray) -> float:
    """
    Mean over strictly positive entries only. Zeros from guarded divisions
    are missing data, not 0-valued outliers.
    """
    positive = values[values > 0.0]
    if positive.size == 0:
        return 0.0
    return float(np.mean(positive))


def summarize_portfolio(items: Sequence[tuple[Property, Financials]]) -> PortfolioMetrics:
    """
    Reduction step: collapse per-property (property, financials) pairs into
    portfolio totals.
    """
    n = len(items)
    if n == 0:
        # Degenerate case: empty portfolio.
        return PortfolioMetrics(
            n_properties=0,
            n_active=0,
            n_degraded=0,
            total_aum=0.0,
            total_units=0,
            total_debt=0.0,
            total_equity=0.0,
            annual_cash_flow=0.0,
            monthly_cash_flow=0.0,
            avg_equity_multiple=0.0,
            avg_cash_on_cash_return=0.0,
            price_per_unit=0.0,
        )

    status = np.array([p.status for p, _ in items])
    active = status != "Sold"
    cashflowing = status == "Cashflowing"

    arv = np.array([f.arv for _, f in items], dtype=float)
    debt = np.array([f.current_debt for _, f in items], dtype=float)
    equity = np.array([f.current_equity_value for _, f in items], dtype=float)
    units = np.array([p.apartments or 0 for p, _ in items], dtype=int)
    annual_cf = np.array([f.annual_cash_flow for _, f in items], dtype=float)
    monthly_cf = np.array([f.monthly_cash_flow for _, f in items], dtype=float)
    em = np.array([f.equity_multiple for _, f in items], dtype=float)
    coc = np.array([f.cash_on_cash_return for _, f in items], dtype=float)

    total_aum = float(arv[active].sum())
    total_units = int(units[active].sum())

    return PortfolioMetrics(
        n_properties=n,
        n_active=int(active.sum()),
        n_degraded=sum(1 for _, f in items if f.degraded),
        total_aum=total_aum,
        total_units=total_units,
        total_debt=float(debt[active].sum()),
        total_equity=float(equity[active].sum()),
        annual_cash_flow=float(annual_cf[cashflowing].sum()),
        monthly_cash_flow=float(monthly_cf[cashflowing].sum()),
        avg_equity_multiple=_positive_mean(em[active]),
        avg_cash_on_cash_return=_positive_mean(coc[active]),
        price_per_unit=total_aum / total_units if total_units > 0 else 0.0,
    )
