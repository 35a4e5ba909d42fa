# src/propkpi/domain/synonyms.py
from __future__ import annotations

from typing import Any, Mapping

# ---------------------------------------------------------------------
# Canonical field name -> every upstream spelling we have seen for it.
#
# Uploads, the normalized store and old deal-model blobs all disagree on
# naming (camelCase, snake_case, older column names). This table is the
# only place those spellings live; records are canonicalized once, when
# they are built, and nothing downstream looks at raw keys again.
# ---------------------------------------------------------------------

FIELD_SYNONYMS: dict[str, dict[str, tuple[str, ...]]] = {
    "property": {
        "id": ("id", "propertyId", "property_id"),
        "address": ("address", "propertyAddress", "property_address"),
        "status": ("status", "propertyStatus", "property_status"),
        "apartments": ("apartments", "units", "unitCount", "unit_count"),
        "acquisition_price": ("acquisition_price", "acquisitionPrice", "purchasePrice", "purchase_price"),
        "rehab_costs": ("rehab_costs", "rehabCosts", "totalRehab", "total_rehab"),
        "arv_at_time_purchased": ("arv_at_time_purchased", "arvAtTimePurchased", "arv"),
        "sale_price": ("sale_price", "salePrice"),
        "initial_capital_required": ("initial_capital_required", "initialCapitalRequired", "capitalRequired"),
        "total_profits": ("total_profits", "totalProfits"),
        "closing_costs": ("closing_costs", "closingCosts", "totalClosingCosts"),
        "holding_costs": ("holding_costs", "holdingCosts", "totalHoldingCosts"),
        "recorded_monthly_cash_flow": ("recorded_monthly_cash_flow", "cashFlow", "cash_flow"),
        "recorded_cash_on_cash_return": ("recorded_cash_on_cash_return",),
        # legacy column, stored in percentage points (8.44 == 8.44%)
        "recorded_cash_on_cash_percent": ("recorded_cash_on_cash_percent", "cashOnCashReturn", "cash_on_cash_return"),
    },
    "rent_roll": {
        "unit_number": ("unit_number", "unitNumber", "unit", "unitId"),
        "current_rent": ("current_rent", "currentRent"),
        "market_rent": ("market_rent", "marketRent"),
        "pro_forma_rent": ("pro_forma_rent", "proFormaRent", "proforma_rent", "proformaRent"),
        "rent": ("rent", "monthlyRent", "monthly_rent"),
        "is_vacant": ("is_vacant", "isVacant", "vacant"),
        "tenant_name": ("tenant_name", "tenantName", "tenant"),
        "lease_start": ("lease_start", "leaseStart", "leaseStartDate"),
        "lease_end": ("lease_end", "leaseEnd", "leaseEndDate"),
    },
    "unit_types": {
        "name": ("name", "unitType", "unit_type", "type"),
        "units": ("units", "count", "unitCount", "unit_count"),
        "market_rent": ("market_rent", "marketRent", "rent", "averageRent", "average_rent"),
    },
    "loans": {
        "name": ("name", "loanName", "lender", "loanType"),
        "principal": ("principal", "originalAmount", "original_amount", "loanAmount", "loan_amount", "amount"),
        "current_balance": ("current_balance", "currentBalance", "balance"),
        "principal_balance": ("principal_balance", "principalBalance"),
        "interest_rate": ("interest_rate", "interestRate", "rate"),
        "term_years": ("term_years", "termYears", "amortizationYears", "amortization_years", "loanTermYears"),
        "monthly_payment": ("monthly_payment", "monthlyPayment", "payment"),
        "is_active": ("is_active", "isActive", "active"),
    },
    "expenses": {
        "name": ("name", "expenseName", "expense_name", "expenseType", "expense_type", "description"),
        "category": ("category", "expenseCategory"),
        "monthly_amount": ("monthly_amount", "monthlyAmount", "amount"),
        "annual_amount": ("annual_amount", "annualAmount"),
        "percentage": ("percentage", "percent", "percentOfEgi"),
        "is_percentage": ("is_percentage", "isPercentage", "isPercentOfRent"),
    },
    "other_income": {
        "name": ("name", "incomeName", "incomeType", "description"),
        "monthly_amount": ("monthly_amount", "monthlyAmount"),
        "annual_amount": ("annual_amount", "annualAmount"),
    },
    "rehab": {
        "category": ("category", "rehabCategory", "section"),
        "description": ("description", "item", "name"),
        "total_cost": ("total_cost", "totalCost", "cost", "amount"),
    },
    "assumptions": {
        "vacancy_rate": ("vacancy_rate", "vacancyRate", "vacancy"),
        "management_fee_rate": ("management_fee_rate", "managementFeeRate", "managementFee", "management_fee"),
        "exit_cap_rate": ("exit_cap_rate", "exitCapRate", "marketCapRate", "market_cap_rate"),
        "expense_ratio": ("expense_ratio", "expenseRatio"),
        "loan_percentage": ("loan_percentage", "loanPercentage", "ltv"),
        "interest_rate": ("interest_rate", "interestRate"),
        "loan_term_years": ("loan_term_years", "loanTermYears", "amortizationYears"),
    },
}


def canonicalize(table: str, raw: Mapping[str, Any]) -> dict[str, Any]:
    """
    Rename the keys of one raw record to their canonical names.

    The first spelling that is present (and not None) wins; unknown keys are
    dropped. Keys that are already canonical pass straight through.
    """
    synonyms = FIELD_SYNONYMS[table]
    out: dict[str, Any] = {}
    for canonical, spellings in synonyms.items():
        for key in spellings:
            if key in raw and raw[key] is not None:
                out[canonical] = raw[key]
                break
    return out
