# src/propkpi/domain/deal_model.py
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from propkpi.domain.bundles import Bundle
from propkpi.domain.records import (
    Assumptions,
    ExpenseItem,
    Loan,
    OtherIncomeItem,
    RehabItem,
    RentRollRow,
    UnitType,
    expense_rows,
)

CURRENT_SCHEMA_VERSION = 1


class DealModel(BaseModel):
    """
    Versioned schema for the "deal model" blob saved by the deal analyzer.

    Older blobs carry no version at all; those are read as version 1.
    Expenses may come as a list of items or, in the oldest blobs, as a
    mapping of expense name -> monthly amount.
    """
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    schema_version: Literal[1] = Field(default=CURRENT_SCHEMA_VERSION, alias="schemaVersion")

    assumptions: Assumptions | None = None
    rent_roll: list[RentRollRow] = Field(default_factory=list, alias="rentRoll")
    unit_types: list[UnitType] = Field(default_factory=list, alias="unitTypes")
    expenses: list[ExpenseItem] = Field(default_factory=list)
    loans: list[Loan] = Field(default_factory=list)
    other_income: list[OtherIncomeItem] = Field(default_factory=list, alias="otherIncome")
    rehab: list[RehabItem] = Field(default_factory=list, alias="rehabBudget")

    @field_validator("expenses", mode="before")
    @classmethod
    def _legacy_expense_mapping(cls, v: Any) -> Any:
        return expense_rows(v)

    def to_bundles(self) -> list[Bundle]:
        out = [
            Bundle("rent_roll", "deal_model", tuple(self.rent_roll)),
            Bundle("unit_types", "deal_model", tuple(self.unit_types)),
            Bundle("expenses", "deal_model", tuple(self.expenses)),
            Bundle("loans", "deal_model", tuple(self.loans)),
            Bundle("other_income", "deal_model", tuple(self.other_income)),
            Bundle("rehab", "deal_model", tuple(self.rehab)),
        ]
        if self.assumptions is not None:
            out.append(Bundle("assumptions", "deal_model", (self.assumptions,)))
        return out
