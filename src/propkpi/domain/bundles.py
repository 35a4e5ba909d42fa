# src/propkpi/domain/bundles.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

from propkpi.domain.records import CanonicalRecord, ExpenseItem, records_from_raw

SourceTag = Literal["live", "normalized", "deal_model", "default"]

# Highest priority first. Fixed and total: no two sources ever tie.
SOURCE_PRIORITY: tuple[SourceTag, ...] = ("live", "normalized", "deal_model", "default")

Category = Literal[
    "rent_roll",
    "unit_types",
    "loans",
    "expenses",
    "other_income",
    "rehab",
    "assumptions",
]

CATEGORIES: tuple[Category, ...] = (
    "rent_roll",
    "unit_types",
    "loans",
    "expenses",
    "other_income",
    "rehab",
    "assumptions",
)


@dataclass(frozen=True)
class Bundle:
    """A set of records for one category, tagged with where it came from."""
    category: Category
    source: SourceTag
    records: tuple[CanonicalRecord, ...] = ()

    def __post_init__(self) -> None:
        if self.source not in SOURCE_PRIORITY:
            raise ValueError(f"unknown source tag: {self.source}")
        if self.category not in CATEGORIES:
            raise ValueError(f"unknown bundle category: {self.category}")

    @property
    def is_empty(self) -> bool:
        return len(self.records) == 0

    @classmethod
    def from_raw(cls, category: Category, source: SourceTag, rows: Any) -> "Bundle":
        return cls(category=category, source=source, records=records_from_raw(category, rows))


@dataclass(frozen=True)
class PropertyBundles:
    """
    Every bundle known for one property, across all categories and sources.

    Order inside the same source is preserved, which is what "first loan in
    the chosen bundle" and "overrides ahead of stored expenses" rely on.
    """
    bundles: tuple[Bundle, ...] = field(default_factory=tuple)

    def for_category(self, category: Category) -> list[Bundle]:
        ranked = [b for b in self.bundles if b.category == category]
        ranked.sort(key=lambda b: SOURCE_PRIORITY.index(b.source))
        return ranked

    def with_bundles(self, *extra: Bundle, first: bool = False) -> "PropertyBundles":
        if first:
            return PropertyBundles(bundles=tuple(extra) + self.bundles)
        return PropertyBundles(bundles=self.bundles + tuple(extra))

    def with_expense_overrides(
        self,
        overrides: list[ExpenseItem | Mapping[str, Any]] | Mapping[str, Any] | None,
    ) -> "PropertyBundles":
        """User-edited expenses win over every stored expense bundle."""
        if not overrides:
            return self
        return self.with_bundles(
            Bundle.from_raw("expenses", "live", overrides),
            first=True,
        )

    @classmethod
    def from_sources(
        cls,
        *,
        live: Mapping[str, Any] | None = None,
        normalized: Mapping[str, Any] | None = None,
        deal_model: Any = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> "PropertyBundles":
        """
        Assemble bundles from per-source category maps, e.g.

            PropertyBundles.from_sources(
                live={"rent_roll": [...], "loans": [...]},
                normalized={"expenses": [...]},
                deal_model=parse_deal_model(blob),
            )

        `deal_model` is an already-parsed DealModel or None.
        """
        out: list[Bundle] = []
        for source, data in (("live", live), ("normalized", normalized), ("default", defaults)):
            for category, rows in (data or {}).items():
                out.append(Bundle.from_raw(category, source, rows))
        if deal_model is not None:
            out.extend(deal_model.to_bundles())
        return cls(bundles=tuple(out))
