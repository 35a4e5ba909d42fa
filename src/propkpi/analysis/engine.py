# src/propkpi/analysis/engine.py
from __future__ import annotations

from typing import Any, Mapping

from propkpi.analysis.cashflow import aggregate_cash_flow
from propkpi.analysis.debt import calculate_debt_service
from propkpi.analysis.expenses import calculate_expenses
from propkpi.analysis.income import calculate_income
from propkpi.analysis.resolver import resolve, resolve_assumption
from propkpi.analysis.valuation import calculate_investment_metrics, gate_cash_flow
from propkpi.domain.bundles import PropertyBundles
from propkpi.domain.errors import ResolutionWarning
from propkpi.domain.financials import EngineDefaults, Financials
from propkpi.domain.property import Property
from propkpi.domain.records import ExpenseItem

_DEFAULTS = EngineDefaults()


def _rehab(prop: Property, bundles: PropertyBundles, provenance: dict[str, str]) -> tuple[float, dict[str, float]]:
    """
    Total rehab and its per-category breakdown.

    The property's own rehab_costs figure wins; the itemized rehab bundle
    only supplies the total when that figure is missing.
    """
    breakdown: dict[str, float] = {}
    res = resolve("rehab", bundles)
    if res.found:
        provenance["rehab"] = res.source
        for item in res.records:
            key = (item.category or "other").lower()
            breakdown[key] = breakdown.get(key, 0.0) + (item.total_cost or 0.0)

    if prop.rehab_costs is not None and prop.rehab_costs > 0:
        return float(prop.rehab_costs), breakdown
    return sum(breakdown.values()), breakdown


def _required_field_warnings(prop: Property) -> list[ResolutionWarning]:
    warnings: list[ResolutionWarning] = []
    if not prop.acquisition_price:
        warnings.append(
            ResolutionWarning(
                field="acquisition_price",
                message="acquisition price missing; cap rate and cost basis resolved to 0",
            )
        )
    if not prop.initial_capital_required:
        warnings.append(
            ResolutionWarning(
                field="initial_capital_required",
                message="initial capital missing; cash-on-cash and equity multiple resolved to 0",
            )
        )
    if prop.is_sold and prop.total_profits is None:
        warnings.append(
            ResolutionWarning(
                field="total_profits",
                message="sold property has no realized profit recorded",
            )
        )
    return warnings


def calculate(
    prop: Property,
    bundles: PropertyBundles,
    *,
    expense_overrides: list[ExpenseItem] | Mapping[str, Any] | None = None,
    defaults: EngineDefaults | None = None,
) -> Financials:
    """
    Core underwriting brain: one property in, every KPI out.

    Pure and synchronous. No I/O, no shared state, nothing mutated, so two
    calls with the same inputs give identical results and properties can be
    computed concurrently in any order.

    Pipeline: resolve sources -> income -> expenses -> debt service
    -> NOI / cash flow -> investment metrics.
    """
    defaults = defaults or _DEFAULTS
    assumptions = defaults.assumptions
    bundles = bundles.with_expense_overrides(expense_overrides)

    provenance: dict[str, str] = {}
    warnings: list[ResolutionWarning] = _required_field_warnings(prop)

    # --- income ---
    income = calculate_income(bundles, assumptions)
    provenance.update(income.provenance)
    warnings.extend(income.warnings)

    # --- operating expenses ---
    expenses = calculate_expenses(income.effective_gross_income, bundles, assumptions)
    provenance.update(expenses.provenance)

    # --- debt service ---
    debt = calculate_debt_service(prop.acquisition_price or 0.0, bundles, assumptions)
    provenance.update(debt.provenance)

    # --- NOI / cash flow ---
    raw_cash_flow = aggregate_cash_flow(
        income.effective_gross_income,
        expenses.monthly_expenses,
        debt.monthly_debt_service,
    )
    cash_flow = gate_cash_flow(prop.status, raw_cash_flow)

    # --- investment metrics ---
    rehab_costs, rehab_breakdown = _rehab(prop, bundles, provenance)
    exit_cap_rate, exit_src = resolve_assumption("exit_cap_rate", bundles, assumptions)
    if exit_src:
        provenance["exit_cap_rate"] = exit_src

    metrics = calculate_investment_metrics(
        prop,
        noi=cash_flow.noi,
        cash_flow=cash_flow,
        gross_rental_income=income.gross_rental_income,
        annual_expenses=expenses.annual_expenses,
        annual_debt_service=debt.annual_debt_service,
        current_debt=debt.current_debt,
        rehab_costs=rehab_costs,
        exit_cap_rate=exit_cap_rate,
        defaults=defaults,
    )
    provenance["arv"] = metrics.arv_basis
    provenance["debt_service"] = debt.basis

    return Financials(
        monthly_gross_rent=income.monthly_gross_rent,
        gross_rental_income=income.gross_rental_income,
        vacancy_loss=income.vacancy_loss,
        other_income=income.other_income,
        effective_gross_income=income.effective_gross_income,
        monthly_expenses=expenses.monthly_expenses,
        annual_expenses=expenses.annual_expenses,
        monthly_management_fee=expenses.monthly_management_fee,
        monthly_noi=cash_flow.monthly_noi,
        noi=cash_flow.noi,
        monthly_debt_service=debt.monthly_debt_service,
        annual_debt_service=debt.annual_debt_service,
        current_debt=debt.current_debt,
        monthly_cash_flow=cash_flow.monthly_cash_flow,
        annual_cash_flow=cash_flow.annual_cash_flow,
        cap_rate=metrics.cap_rate,
        cash_on_cash_return=metrics.cash_on_cash_return,
        dscr=metrics.dscr,
        break_even_occupancy=metrics.break_even_occupancy,
        arv=metrics.arv,
        current_equity_value=metrics.current_equity_value,
        equity_multiple=metrics.equity_multiple,
        all_in_cost=metrics.all_in_cost,
        rehab_costs=rehab_costs,
        initial_capital_required=prop.initial_capital_required or 0.0,
        expense_breakdown=expenses.breakdown,
        rehab_breakdown=rehab_breakdown,
        provenance=provenance,
        warnings=tuple(warnings),
    )
