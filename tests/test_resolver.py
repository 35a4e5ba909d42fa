# tests/test_resolver.py
import pytest

from propkpi.analysis.resolver import monthly_rent, resolve, resolve_assumption, select_loan
from propkpi.domain.bundles import Bundle, PropertyBundles
from propkpi.domain.records import Assumptions, Loan, RentRollRow


def _bundles(*items):
    return PropertyBundles(bundles=tuple(Bundle.from_raw(cat, src, rows) for cat, src, rows in items))


def test_priority_live_over_everything():
    bundles = _bundles(
        ("rent_roll", "default", [{"rent": 1}]),
        ("rent_roll", "deal_model", [{"rent": 2}]),
        ("rent_roll", "normalized", [{"rent": 3}]),
        ("rent_roll", "live", [{"rent": 4}]),
    )
    res = resolve("rent_roll", bundles)
    assert res.source == "live"
    assert res.records[0].rent == 4


def test_empty_bundles_are_skipped_not_merged():
    bundles = _bundles(
        ("loans", "live", []),
        ("loans", "normalized", []),
        ("loans", "deal_model", [{"principal": 100_000}]),
        ("loans", "default", [{"principal": 1}]),
    )
    res = resolve("loans", bundles)
    assert res.source == "deal_model"
    assert len(res.records) == 1


def test_nothing_found():
    res = resolve("rent_roll", PropertyBundles())
    assert not res.found
    assert res.source is None
    assert res.records == ()


@pytest.mark.parametrize(
    "row, expected",
    [
        ({"currentRent": 2000, "marketRent": 2200, "proFormaRent": 2400}, 2000.0),
        ({"marketRent": 2200, "proFormaRent": 2400}, 2200.0),
        ({"proFormaRent": 1800}, 1800.0),
        ({"rent": 950}, 950.0),
        ({"currentRent": 0, "proFormaRent": 1800}, 1800.0),
        ({"currentRent": "n/a", "marketRent": "$1,750"}, 1750.0),
        ({}, 0.0),
    ],
)
def test_monthly_rent_falls_back_per_field(row, expected):
    assert monthly_rent(RentRollRow.model_validate(row)) == expected


def test_assumptions_fall_back_field_by_field():
    bundles = _bundles(
        ("assumptions", "live", {"vacancyRate": 0.07}),
        ("assumptions", "deal_model", {"vacancyRate": 0.10, "exitCapRate": 0.06}),
    )
    defaults = Assumptions(vacancy_rate=0.05, exit_cap_rate=0.055, interest_rate=0.07)

    assert resolve_assumption("vacancy_rate", bundles, defaults) == (0.07, "live")
    assert resolve_assumption("exit_cap_rate", bundles, defaults) == (0.06, "deal_model")
    assert resolve_assumption("interest_rate", bundles, defaults) == (0.07, "default")
    assert resolve_assumption("loan_percentage", bundles, defaults) == (None, None)


def test_select_loan_prefers_active():
    bundle = Bundle(
        "loans",
        "live",
        (
            Loan(principal=100_000),
            Loan(principal=300_000, is_active=True),
            Loan(principal=200_000),
        ),
    )
    assert select_loan(bundle).principal == 300_000


def test_select_loan_first_when_none_active():
    bundle = Bundle("loans", "live", (Loan(principal=100_000), Loan(principal=300_000)))
    assert select_loan(bundle).principal == 100_000


def test_select_loan_empty():
    assert select_loan(None) is None
    assert select_loan(Bundle("loans", "live", ())) is None


def test_unknown_source_tag_rejected():
    with pytest.raises(ValueError):
        Bundle("loans", "spreadsheet", ())
