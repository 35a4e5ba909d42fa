# src/propkpi/analysis/expenses.py
from __future__ import annotations

from dataclasses import dataclass, field

from propkpi.analysis.resolver import resolve, resolve_assumption
from propkpi.domain.bundles import PropertyBundles
from propkpi.domain.financials import EXPENSE_CATEGORIES
from propkpi.domain.records import Assumptions, ExpenseItem

# Reporting buckets only; never used to pick a formula.
_CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("taxes", ("tax",)),
    ("insurance", ("insurance",)),
    ("utilities", ("utilit", "water", "electric", "gas", "sewer", "trash")),
    ("maintenance", ("maintenance", "repair", "landscap", "turnover")),
    ("management", ("management", "mgmt")),
)


@dataclass(frozen=True)
class ExpenseResult:
    monthly_fixed: float
    monthly_percentage: float
    monthly_blended: float
    management_fee_rate: float
    monthly_management_fee: float
    monthly_expenses: float
    annual_expenses: float
    breakdown: dict[str, float] = field(default_factory=dict)   # annual
    provenance: dict[str, str] = field(default_factory=dict)


def categorize_expense(item: ExpenseItem) -> str:
    label = " ".join(filter(None, (item.category, item.name))).lower()
    for bucket, keywords in _CATEGORY_KEYWORDS:
        if any(k in label for k in keywords):
            return bucket
    return "other"


def monthly_amount(item: ExpenseItem, egi_monthly: float) -> float:
    """Monthly dollars for one item: a share of EGI, or a fixed amount."""
    if item.is_percent_of_egi:
        return (item.percentage or 0.0) * egi_monthly
    if item.monthly_amount is not None:
        return item.monthly_amount
    if item.annual_amount is not None:
        return item.annual_amount / 12.0
    return 0.0


def calculate_expenses(
    effective_gross_income: float,
    bundles: PropertyBundles,
    defaults: Assumptions,
) -> ExpenseResult:
    """
    Operating expenses, monthly and annual. Debt service is NOT an
    operating expense.

    monthly = fixed items + percentage items + management fee
    The management fee is always charged on top of whatever is itemized.
    With no expense bundle anywhere, a blended expense ratio of EGI stands
    in for the itemized lines.
    """
    egi_monthly = effective_gross_income / 12.0
    provenance: dict[str, str] = {}
    breakdown = {c: 0.0 for c in EXPENSE_CATEGORIES}

    fixed = 0.0
    pct = 0.0
    blended = 0.0

    res = resolve("expenses", bundles)
    if res.found:
        provenance["expenses"] = res.source
        for item in res.records:
            amount = monthly_amount(item, egi_monthly)
            if item.is_percent_of_egi:
                pct += amount
            else:
                fixed += amount
            breakdown[categorize_expense(item)] += amount * 12.0
    else:
        ratio, ratio_src = resolve_assumption("expense_ratio", bundles, defaults)
        if ratio_src:
            provenance["expense_ratio"] = ratio_src
        blended = (ratio or 0.0) * egi_monthly
        breakdown["other"] += blended * 12.0

    mgmt_rate, mgmt_src = resolve_assumption("management_fee_rate", bundles, defaults)
    mgmt_rate = mgmt_rate or 0.0
    if mgmt_src:
        provenance["management_fee_rate"] = mgmt_src
    mgmt_fee = mgmt_rate * egi_monthly
    breakdown["management"] += mgmt_fee * 12.0

    monthly_total = fixed + pct + blended + mgmt_fee

    return ExpenseResult(
        monthly_fixed=fixed,
        monthly_percentage=pct,
        monthly_blended=blended,
        management_fee_rate=mgmt_rate,
        monthly_management_fee=mgmt_fee,
        monthly_expenses=monthly_total,
        annual_expenses=monthly_total * 12.0,
        breakdown=breakdown,
        provenance=provenance,
    )
