# src/propkpi/analysis/debt.py
from __future__ import annotations

from dataclasses import dataclass, field

from propkpi.analysis.resolver import BALANCE_FIELDS, first_positive, resolve, resolve_assumption, select_loan
from propkpi.domain.bundles import PropertyBundles
from propkpi.domain.records import Assumptions


@dataclass(frozen=True)
class DebtResult:
    monthly_debt_service: float
    annual_debt_service: float
    current_debt: float
    basis: str   # "stated_payment" | "amortized_loan" | "assumed_loan" | "none"
    provenance: dict[str, str] = field(default_factory=dict)


def monthly_payment(principal: float, annual_rate: float, years: int) -> float:
    """
    Standard fixed-rate amortization formula:
    M = P * [ r(1+r)^n / ((1+r)^n - 1) ]
    P = loan principal
    r = monthly interest rate
    n = number of payments (months)
    """
    n = years * 12
    if principal <= 0 or n <= 0:
        return 0.0

    r = annual_rate / 12.0
    if r == 0:
        return principal / n

    growth = (1 + r) ** n
    return principal * (r * growth) / (growth - 1)


def calculate_debt_service(
    acquisition_price: float,
    bundles: PropertyBundles,
    defaults: Assumptions,
) -> DebtResult:
    """
    Monthly debt service for the property's one active loan.

    1) the loan's stated monthly payment, when present and > 0
    2) otherwise an amortized payment from principal / rate / term, with
       missing rate or term taken from the resolved assumptions
    3) no loan bundle at all: an assumed loan of loan_percentage x price
    """
    provenance: dict[str, str] = {}

    rate, rate_src = resolve_assumption("interest_rate", bundles, defaults)
    term, term_src = resolve_assumption("loan_term_years", bundles, defaults)

    res = resolve("loans", bundles)
    loan = select_loan(res.bundle)

    if loan is not None:
        provenance["loans"] = res.source
        current_debt = first_positive(loan, BALANCE_FIELDS)

        if loan.monthly_payment is not None and loan.monthly_payment > 0:
            payment = float(loan.monthly_payment)
            basis = "stated_payment"
        else:
            loan_rate = loan.interest_rate
            if loan_rate is None:
                loan_rate = rate or 0.0
                if rate_src:
                    provenance["interest_rate"] = rate_src
            loan_term = loan.term_years
            if loan_term is None:
                loan_term = term or 0
                if term_src:
                    provenance["loan_term_years"] = term_src
            principal = first_positive(loan, ("principal", "current_balance", "principal_balance"))
            payment = monthly_payment(principal, loan_rate, loan_term)
            basis = "amortized_loan"

        return DebtResult(
            monthly_debt_service=payment,
            annual_debt_service=payment * 12.0,
            current_debt=current_debt,
            basis=basis,
            provenance=provenance,
        )

    ltv, ltv_src = resolve_assumption("loan_percentage", bundles, defaults)
    loan_amount = (acquisition_price or 0.0) * (ltv or 0.0)
    if loan_amount <= 0:
        return DebtResult(
            monthly_debt_service=0.0,
            annual_debt_service=0.0,
            current_debt=0.0,
            basis="none",
            provenance=provenance,
        )

    for name, src in (("loan_percentage", ltv_src), ("interest_rate", rate_src), ("loan_term_years", term_src)):
        if src:
            provenance[name] = src
    payment = monthly_payment(loan_amount, rate or 0.0, term or 0)
    return DebtResult(
        monthly_debt_service=payment,
        annual_debt_service=payment * 12.0,
        current_debt=loan_amount,
        basis="assumed_loan",
        provenance=provenance,
    )
