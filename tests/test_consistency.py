# tests/test_consistency.py
from dataclasses import replace

import pytest

from propkpi.domain.financials import zero_financials
from propkpi.domain.property import Property
from propkpi.services.consistency import check_consistency


def _fin(cf, coc):
    return replace(zero_financials(degraded=False), monthly_cash_flow=cf, cash_on_cash_return=coc)


def test_nothing_recorded_nothing_flagged(property_factory):
    assert check_consistency(property_factory(), _fin(1_000.0, 0.08)) == []


def test_small_drift_within_tolerance(property_factory):
    prop = property_factory(recorded_monthly_cash_flow=1_030, recorded_cash_on_cash_return=0.085)
    assert check_consistency(prop, _fin(1_000.0, 0.08)) == []


def test_cash_flow_drift_is_relative(property_factory):
    prop = property_factory(recorded_monthly_cash_flow=1_100)
    flags = check_consistency(prop, _fin(1_000.0, 0.08))

    assert len(flags) == 1
    f = flags[0]
    assert f.code == "CASH_FLOW_DRIFT"
    assert f.recorded == pytest.approx(1_100.0)
    assert f.computed == pytest.approx(1_000.0)
    assert f.context["relative_drift"] == pytest.approx(100 / 1_100)


def test_coc_drift_is_absolute(property_factory):
    prop = property_factory(recorded_cash_on_cash_return=0.10)
    flags = check_consistency(prop, _fin(1_000.0, 0.08))
    assert [f.code for f in flags] == ["COC_DRIFT"]
    assert flags[0].context["absolute_drift"] == pytest.approx(0.02)


def test_custom_tolerance(property_factory):
    prop = property_factory(recorded_monthly_cash_flow=1_100)
    assert check_consistency(prop, _fin(1_000.0, 0.08), cash_flow_tolerance=0.2) == []


def test_both_zero_is_not_drift(property_factory):
    prop = property_factory(recorded_monthly_cash_flow=0)
    assert check_consistency(prop, _fin(0.0, 0.0)) == []


def test_legacy_percent_column_compared_as_fraction():
    prop = Property.model_validate({"id": 1, "cashOnCashReturn": 8.44})
    assert prop.recorded_coc_fraction == pytest.approx(0.0844)
    assert check_consistency(prop, _fin(0.0, 0.0844)) == []


def test_legacy_percent_column_still_flags_real_drift():
    prop = Property.model_validate({"id": 1, "cash_on_cash_return": "10.5"})
    flags = check_consistency(prop, _fin(0.0, 0.0844))
    assert [f.code for f in flags] == ["COC_DRIFT"]
    assert flags[0].recorded == pytest.approx(0.105)
