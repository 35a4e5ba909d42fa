# src/propkpi/analysis/income.py
from __future__ import annotations

from dataclasses import dataclass, field

from propkpi.analysis.resolver import monthly_rent, resolve, resolve_assumption
from propkpi.domain.bundles import PropertyBundles
from propkpi.domain.errors import ResolutionWarning
from propkpi.domain.records import Assumptions


@dataclass(frozen=True)
class IncomeResult:
    monthly_gross_rent: float
    gross_rental_income: float
    vacancy_rate: float
    vacancy_loss: float
    other_income: float
    effective_gross_income: float
    provenance: dict[str, str] = field(default_factory=dict)
    warnings: tuple[ResolutionWarning, ...] = ()


def _rent_roll_monthly(
    bundles: PropertyBundles,
    provenance: dict[str, str],
    warnings: list[ResolutionWarning],
) -> float | None:
    res = resolve("rent_roll", bundles)
    if not res.found:
        return None
    provenance["rent_roll"] = res.source
    total = 0.0
    for i, row in enumerate(res.records, start=1):
        rent = monthly_rent(row)
        if rent <= 0:
            warnings.append(
                ResolutionWarning(
                    field="monthly_rent",
                    message=f"unit {row.unit_number or i}: no positive rent in any rent field; counted as 0",
                )
            )
        total += rent
    return total


def _unit_types_monthly(bundles: PropertyBundles, provenance: dict[str, str]) -> float | None:
    """
    unitCount x average rent per unit type. A unit type with no count is a
    single unit.
    """
    res = resolve("unit_types", bundles)
    if not res.found:
        return None
    provenance["unit_types"] = res.source
    total = 0.0
    for ut in res.records:
        units = ut.units if ut.units is not None else 1
        total += units * (ut.market_rent or 0.0)
    return total


def _other_income_annual(bundles: PropertyBundles, provenance: dict[str, str]) -> float:
    res = resolve("other_income", bundles)
    if not res.found:
        return 0.0
    provenance["other_income"] = res.source
    total = 0.0
    for item in res.records:
        if item.annual_amount is not None:
            total += item.annual_amount
        elif item.monthly_amount is not None:
            total += item.monthly_amount * 12.0
    return total


def calculate_income(bundles: PropertyBundles, defaults: Assumptions) -> IncomeResult:
    """
    Gross rent -> vacancy -> other income -> EGI, all annual.

    Rent comes from the resolved rent roll; when no rent roll exists at all
    we fall back to unit types.
    """
    provenance: dict[str, str] = {}
    warnings: list[ResolutionWarning] = []

    monthly_gross = _rent_roll_monthly(bundles, provenance, warnings)
    if monthly_gross is None:
        monthly_gross = _unit_types_monthly(bundles, provenance)
    if monthly_gross is None:
        warnings.append(
            ResolutionWarning(
                field="gross_rental_income",
                message="no rent roll or unit types in any source; gross rent resolved to 0",
            )
        )
        monthly_gross = 0.0

    gross_rental_income = monthly_gross * 12.0

    vacancy_rate, vacancy_src = resolve_assumption("vacancy_rate", bundles, defaults)
    vacancy_rate = vacancy_rate or 0.0
    if vacancy_src:
        provenance["vacancy_rate"] = vacancy_src
    vacancy_loss = gross_rental_income * vacancy_rate

    other_income = _other_income_annual(bundles, provenance)

    egi = gross_rental_income - vacancy_loss + other_income

    return IncomeResult(
        monthly_gross_rent=monthly_gross,
        gross_rental_income=gross_rental_income,
        vacancy_rate=vacancy_rate,
        vacancy_loss=vacancy_loss,
        other_income=other_income,
        effective_gross_income=egi,
        provenance=provenance,
        warnings=tuple(warnings),
    )
