# src/propkpi/analysis/resolver.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from propkpi.domain.bundles import Bundle, Category, PropertyBundles, SourceTag
from propkpi.domain.records import Assumptions, Loan, RentRollRow

# Per-row rent fallback. A unit that only has a pro-forma figure still counts.
RENT_FIELDS: tuple[str, ...] = ("current_rent", "market_rent", "pro_forma_rent", "rent")

# currentDebt fallback on the selected loan.
BALANCE_FIELDS: tuple[str, ...] = ("current_balance", "principal_balance", "principal")


@dataclass(frozen=True)
class Resolution:
    bundle: Bundle | None
    source: SourceTag | None

    @property
    def records(self) -> tuple[Any, ...]:
        if self.bundle is None:
            return ()
        return self.bundle.records

    @property
    def found(self) -> bool:
        return self.bundle is not None


def resolve(category: Category, bundles: PropertyBundles) -> Resolution:
    """
    Pick the highest-priority non-empty bundle for a category.

    Priority is live > normalized > deal_model > default. Empty bundles are
    skipped; bundles are never merged.
    """
    for bundle in bundles.for_category(category):
        if not bundle.is_empty:
            return Resolution(bundle=bundle, source=bundle.source)
    return Resolution(bundle=None, source=None)


def first_positive(record: Any, fields: tuple[str, ...]) -> float:
    for name in fields:
        v = getattr(record, name, None)
        if v is not None and v > 0:
            return float(v)
    return 0.0


def monthly_rent(row: RentRollRow) -> float:
    return first_positive(row, RENT_FIELDS)


def resolve_assumption(
    field: str,
    bundles: PropertyBundles,
    defaults: Assumptions,
) -> tuple[float | None, SourceTag | None]:
    """
    Resolve one assumption field through the source priority.

    Unlike whole bundles, assumptions fall back field by field: a live
    bundle that only states a vacancy rate does not hide the deal model's
    exit cap rate.
    """
    for bundle in bundles.for_category("assumptions"):
        for record in bundle.records:
            v = getattr(record, field, None)
            if v is not None:
                return v, bundle.source
    v = getattr(defaults, field, None)
    if v is not None:
        return v, "default"
    return None, None


def select_loan(bundle: Bundle | None) -> Loan | None:
    """Active loan if one is flagged, else the first loan. Never an average."""
    if bundle is None or bundle.is_empty:
        return None
    for loan in bundle.records:
        if loan.is_active:
            return loan
    return bundle.records[0]
