# src/propkpi/domain/financials.py
from __future__ import annotations

from dataclasses import dataclass, field

from propkpi.domain.errors import ResolutionWarning
from propkpi.domain.records import Assumptions

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "taxes",
    "insurance",
    "utilities",
    "maintenance",
    "management",
    "other",
)


@dataclass(frozen=True)
class EngineDefaults:
    """
    Market-standard fallbacks, the "default" source of the priority chain.

    `assumptions` backs every assumption field no live/normalized/deal-model
    bundle provides. The remaining knobs only feed estimates that have no
    bundle of their own.
    """
    assumptions: Assumptions = field(
        default_factory=lambda: Assumptions(
            vacancy_rate=0.05,
            management_fee_rate=0.08,
            exit_cap_rate=0.055,
            expense_ratio=0.0,
            loan_percentage=0.0,
            interest_rate=0.07,
            loan_term_years=30,
        )
    )
    appreciation_factor: float = 1.0   # applied to acquisition + rehab as the last-resort ARV
    closing_cost_rate: float = 0.02    # of acquisition price, when closing costs aren't stored
    holding_cost_rate: float = 0.01    # of acquisition price, when holding costs aren't stored


@dataclass(frozen=True)
class Financials:
    """
    Every KPI for one property. No identity, never persisted; recomputed
    on demand from the current inputs.

    Rates and returns are decimal fractions (0.131 means 13.1%).
    Money is in dollars; `*_monthly`-less names are annual.
    """
    # Income
    monthly_gross_rent: float
    gross_rental_income: float
    vacancy_loss: float
    other_income: float
    effective_gross_income: float

    # Expenses
    monthly_expenses: float
    annual_expenses: float
    monthly_management_fee: float

    # NOI & cash flow
    monthly_noi: float
    noi: float
    monthly_debt_service: float
    annual_debt_service: float
    current_debt: float
    monthly_cash_flow: float
    annual_cash_flow: float

    # Returns & ratios
    cap_rate: float
    cash_on_cash_return: float
    dscr: float
    break_even_occupancy: float

    # Valuation
    arv: float
    current_equity_value: float
    equity_multiple: float
    all_in_cost: float
    rehab_costs: float
    initial_capital_required: float

    # Breakdowns (annual dollars)
    expense_breakdown: dict[str, float] = field(default_factory=dict)
    rehab_breakdown: dict[str, float] = field(default_factory=dict)

    # Diagnostics
    provenance: dict[str, str] = field(default_factory=dict)
    warnings: tuple[ResolutionWarning, ...] = ()
    degraded: bool = False


def zero_financials(*, degraded: bool = True, reason: str | None = None) -> Financials:
    """All-zero result substituted when a property's computation blows up."""
    warnings: tuple[ResolutionWarning, ...] = ()
    if reason:
        warnings = (ResolutionWarning(field="financials", message=reason),)
    return Financials(
        monthly_gross_rent=0.0,
        gross_rental_income=0.0,
        vacancy_loss=0.0,
        other_income=0.0,
        effective_gross_income=0.0,
        monthly_expenses=0.0,
        annual_expenses=0.0,
        monthly_management_fee=0.0,
        monthly_noi=0.0,
        noi=0.0,
        monthly_debt_service=0.0,
        annual_debt_service=0.0,
        current_debt=0.0,
        monthly_cash_flow=0.0,
        annual_cash_flow=0.0,
        cap_rate=0.0,
        cash_on_cash_return=0.0,
        dscr=0.0,
        break_even_occupancy=0.0,
        arv=0.0,
        current_equity_value=0.0,
        equity_multiple=0.0,
        all_in_cost=0.0,
        rehab_costs=0.0,
        initial_capital_required=0.0,
        expense_breakdown={c: 0.0 for c in EXPENSE_CATEGORIES},
        warnings=warnings,
        degraded=degraded,
    )
