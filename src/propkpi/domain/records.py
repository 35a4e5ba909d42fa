# src/propkpi/domain/records.py
from __future__ import annotations

import math
import re
from datetime import date
from decimal import Decimal
from typing import Annotated, Any, ClassVar, Mapping

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator

from propkpi.domain.synonyms import canonicalize

_NUMERIC_JUNK = re.compile(r"[^0-9.\-]")


def parse_number(value: Any) -> float | None:
    """
    Lenient numeric coercion for upstream values.

    Accepts 1800, 1800.0, "1800", "$1,800.00". Returns None when the value is
    missing or unparseable so that synonym fallback can move on to the next
    field instead of treating garbage as a real zero.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        f = float(value)
        if math.isnan(f) or math.isinf(f):
            return None
        return f
    if isinstance(value, str):
        s = _NUMERIC_JUNK.sub("", value.strip())
        if not s:
            return None
        try:
            return float(s)
        except ValueError:
            return None
    return None


def parse_rate(value: Any) -> float | None:
    """
    Coerce a rate to a decimal fraction.

    "6.5%", 6.5 and 0.065 all become 0.065. Anything above 1.0 is read as a
    whole percentage.
    """
    explicit_percent = isinstance(value, str) and value.strip().endswith("%")
    f = parse_number(value)
    if f is None:
        return None
    if explicit_percent or f > 1.0:
        f = f / 100.0
    if f < 0:
        raise ValueError("rate must be non-negative")
    return f


def parse_count(value: Any) -> int | None:
    f = parse_number(value)
    if f is None:
        return None
    return int(round(f))


def parse_label(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


Money = Annotated[float | None, BeforeValidator(parse_number)]
Rate = Annotated[float | None, BeforeValidator(parse_rate)]
Count = Annotated[int | None, BeforeValidator(parse_count)]
Label = Annotated[str | None, BeforeValidator(parse_label)]


class CanonicalRecord(BaseModel):
    """
    Base for every ingested record.

    Raw dicts are run through the synonym table exactly once, here, so the
    calculators only ever see canonical field names.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    synonym_table: ClassVar[str] = ""

    @model_validator(mode="before")
    @classmethod
    def _canonical_fields(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return canonicalize(cls.synonym_table, data)
        return data


class RentRollRow(CanonicalRecord):
    synonym_table: ClassVar[str] = "rent_roll"

    unit_number: Label = None
    current_rent: Money = None
    market_rent: Money = None
    pro_forma_rent: Money = None
    rent: Money = None
    is_vacant: bool = False
    tenant_name: Label = None
    lease_start: date | str | None = None
    lease_end: date | str | None = None


class UnitType(CanonicalRecord):
    synonym_table: ClassVar[str] = "unit_types"

    name: Label = None
    units: Count = None
    market_rent: Money = None


class Loan(CanonicalRecord):
    synonym_table: ClassVar[str] = "loans"

    name: Label = None
    principal: Money = None
    current_balance: Money = None
    principal_balance: Money = None
    interest_rate: Rate = None      # annual, e.g. 0.065
    term_years: Count = None
    monthly_payment: Money = None   # as stated by the servicer, if known
    is_active: bool = False


class ExpenseItem(CanonicalRecord):
    synonym_table: ClassVar[str] = "expenses"

    name: Label = None
    category: Label = None     # reporting only
    monthly_amount: Money = None
    annual_amount: Money = None
    percentage: Rate = None         # fraction of EGI
    is_percentage: bool | None = None

    @property
    def is_percent_of_egi(self) -> bool:
        if self.is_percentage is not None:
            return self.is_percentage
        return (
            self.percentage is not None
            and self.monthly_amount is None
            and self.annual_amount is None
        )


class OtherIncomeItem(CanonicalRecord):
    synonym_table: ClassVar[str] = "other_income"

    name: Label = None
    monthly_amount: Money = None
    annual_amount: Money = None


class RehabItem(CanonicalRecord):
    synonym_table: ClassVar[str] = "rehab"

    category: Label = None
    description: Label = None
    total_cost: Money = None


class Assumptions(CanonicalRecord):
    """
    Underwriting assumptions. Every field is optional: each one falls back
    on its own through the source priority down to the global defaults.
    """
    synonym_table: ClassVar[str] = "assumptions"

    vacancy_rate: Rate = None
    management_fee_rate: Rate = None
    exit_cap_rate: Rate = None
    expense_ratio: Rate = None
    loan_percentage: Rate = None
    interest_rate: Rate = None
    loan_term_years: Count = None


RECORD_TYPES: dict[str, type[CanonicalRecord]] = {
    "rent_roll": RentRollRow,
    "unit_types": UnitType,
    "loans": Loan,
    "expenses": ExpenseItem,
    "other_income": OtherIncomeItem,
    "rehab": RehabItem,
    "assumptions": Assumptions,
}


def expense_rows(raw: Any) -> Any:
    """
    Flatten a category-keyed expense mapping into a list of expense rows.

        {"taxes": {"monthlyAmount": 500}, "insurance": 200}
        -> [{"name": "taxes", "category": "taxes", "monthlyAmount": 500},
            {"name": "insurance", "category": "insurance", "monthly_amount": 200}]

    Lists (and anything else) pass through unchanged.
    """
    if not isinstance(raw, Mapping):
        return raw
    rows = []
    for name, value in raw.items():
        if isinstance(value, Mapping):
            rows.append({"name": name, "category": name, **value})
        else:
            rows.append({"name": name, "category": name, "monthly_amount": value})
    return rows


def records_from_raw(category: str, rows: Any) -> tuple[CanonicalRecord, ...]:
    """
    Build typed records for one category from already-deserialized rows.

    Assumptions usually arrive as a single mapping rather than a list.
    Expenses given as a mapping are keyed by category, never a single item.
    Rows that are already records of the right type are kept as-is.
    """
    model = RECORD_TYPES[category]
    if rows is None:
        return ()
    if category == "expenses":
        rows = expense_rows(rows)
    if isinstance(rows, (Mapping, CanonicalRecord)):
        rows = [rows]

    out: list[CanonicalRecord] = []
    for row in rows:
        if isinstance(row, model):
            out.append(row)
        else:
            out.append(model.model_validate(row))
    return tuple(out)
