# src/propkpi/domain/property.py
from typing import Any, ClassVar, Literal

from pydantic import Field, field_validator

from propkpi.domain.records import CanonicalRecord, Count, Label, Money

# Lifecycle states. Transitions are driven by the management system;
# the engine only reads the current one.
PropertyStatus = Literal[
    "UnderContract",
    "Rehabbing",
    "Cashflowing",
    "Sold",
]

PRE_STABILIZATION: frozenset[str] = frozenset({"UnderContract", "Rehabbing"})

_STATUS_SPELLINGS = {
    "undercontract": "UnderContract",
    "under contract": "UnderContract",
    "under_contract": "UnderContract",
    "rehabbing": "Rehabbing",
    "rehab": "Rehabbing",
    "cashflowing": "Cashflowing",
    "cash flowing": "Cashflowing",
    "stabilized": "Cashflowing",
    "sold": "Sold",
}


class Property(CanonicalRecord):
    synonym_table: ClassVar[str] = "property"

    id: int | str
    address: Label = None
    status: PropertyStatus = "Cashflowing"
    apartments: Count = Field(default=None, description="Unit count")

    acquisition_price: Money = Field(default=None, description="Purchase price; cap rate is always against this")
    rehab_costs: Money = None
    arv_at_time_purchased: Money = Field(default=None, description="Stored appraisal / ARV")
    sale_price: Money = None
    initial_capital_required: Money = Field(default=None, description="Equity actually put into the deal")
    total_profits: Money = Field(default=None, description="Realized profit, only meaningful once Sold")
    closing_costs: Money = None
    holding_costs: Money = None

    # Persisted legacy values, only compared against fresh results.
    recorded_monthly_cash_flow: Money = None
    recorded_cash_on_cash_return: Money = Field(default=None, description="Fraction, 0.0844 == 8.44%")
    recorded_cash_on_cash_percent: Money = Field(default=None, description="Legacy column in percentage points")

    @field_validator("status", mode="before")
    @classmethod
    def _status_spelling(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _STATUS_SPELLINGS.get(v.strip().lower(), v)
        return v

    @property
    def recorded_coc_fraction(self) -> float | None:
        """Persisted cash-on-cash as a fraction, whichever column it was stored in."""
        if self.recorded_cash_on_cash_return is not None:
            return self.recorded_cash_on_cash_return
        if self.recorded_cash_on_cash_percent is not None:
            return self.recorded_cash_on_cash_percent / 100.0
        return None

    @property
    def is_sold(self) -> bool:
        return self.status == "Sold"
