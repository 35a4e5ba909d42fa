# tests/test_deal_model.py
import json

import pytest

from propkpi.adapters.ingest import decode_deal_model, parse_deal_model
from propkpi.domain.bundles import PropertyBundles
from propkpi.domain.errors import DealModelParseError


BLOB = {
    "schemaVersion": 1,
    "assumptions": {"vacancyRate": "7%", "exitCapRate": 0.06},
    "rentRoll": [{"unitNumber": 101, "marketRent": "$1,250"}, {"unit": "102", "proFormaRent": 1300}],
    "loans": [{"loanAmount": 300000, "interestRate": 6.0, "amortizationYears": 25}],
    "rehabBudget": [{"category": "Kitchen", "totalCost": 12000}],
    "someFieldNobodyUses": True,
}


def test_parses_text_and_mapping_alike():
    assert parse_deal_model(json.dumps(BLOB)) == parse_deal_model(BLOB)


def test_fields_are_canonical_after_parse():
    dm = parse_deal_model(BLOB)

    assert dm.assumptions.vacancy_rate == pytest.approx(0.07)
    assert dm.rent_roll[0].unit_number == "101"
    assert dm.rent_roll[0].market_rent == pytest.approx(1250.0)
    assert dm.loans[0].principal == pytest.approx(300_000.0)
    assert dm.loans[0].interest_rate == pytest.approx(0.06)
    assert dm.loans[0].term_years == 25
    assert dm.rehab[0].total_cost == pytest.approx(12_000.0)


def test_legacy_expense_mapping():
    dm = parse_deal_model({"expenses": {"Taxes": 500, "Insurance": "120"}})
    by_name = {e.name: e.monthly_amount for e in dm.expenses}
    assert by_name == {"Taxes": 500.0, "Insurance": 120.0}


def test_unversioned_blob_reads_as_v1():
    assert parse_deal_model({"loans": []}).schema_version == 1


@pytest.mark.parametrize(
    "raw",
    ["{not json", "[1, 2]", json.dumps({"schemaVersion": 2}), b"\xff\xfe", 42],
)
def test_unusable_blob_is_absent(raw):
    assert parse_deal_model(raw, property_id=9) is None


def test_decode_is_strict():
    with pytest.raises(DealModelParseError):
        decode_deal_model("{not json")
    with pytest.raises(DealModelParseError):
        decode_deal_model({"schemaVersion": 2})


def test_empty_blob_is_absent():
    assert parse_deal_model(None) is None
    assert parse_deal_model("") is None
    assert parse_deal_model({}) is None


def test_to_bundles_tags_deal_model():
    bundles = PropertyBundles.from_sources(deal_model=parse_deal_model(BLOB))
    sources = {b.source for b in bundles.bundles}
    assert sources == {"deal_model"}

    rent = bundles.for_category("rent_roll")
    assert len(rent) == 1 and len(rent[0].records) == 2
    assert bundles.for_category("assumptions")[0].records[0].exit_cap_rate == pytest.approx(0.06)
