# tests/test_portfolio.py
from dataclasses import replace

import pytest

from propkpi.domain.financials import zero_financials
from propkpi.domain.metrics import summarize_portfolio


def _fin(**kw):
    return replace(zero_financials(degraded=False), **kw)


def test_empty_portfolio_is_all_zero():
    m = summarize_portfolio([])
    assert m.n_properties == 0
    assert m.total_aum == 0.0
    assert m.price_per_unit == 0.0
    assert m.avg_equity_multiple == 0.0


def test_sold_excluded_from_aum_and_averages(property_factory):
    items = [
        (
            property_factory(id=1, apartments=4),
            _fin(arv=800_000, current_debt=400_000, current_equity_value=400_000,
                 equity_multiple=1.2, cash_on_cash_return=0.08,
                 monthly_cash_flow=1_000, annual_cash_flow=12_000),
        ),
        (
            property_factory(id=2, apartments=6, status="Sold"),
            _fin(arv=1_000_000, equity_multiple=3.0, cash_on_cash_return=0.5),
        ),
    ]
    m = summarize_portfolio(items)

    assert m.n_properties == 2
    assert m.n_active == 1
    assert m.total_aum == pytest.approx(800_000.0)
    assert m.total_units == 4
    assert m.total_debt == pytest.approx(400_000.0)
    assert m.total_equity == pytest.approx(400_000.0)
    assert m.price_per_unit == pytest.approx(200_000.0)
    assert m.avg_equity_multiple == pytest.approx(1.2)
    assert m.avg_cash_on_cash_return == pytest.approx(0.08)


def test_cash_flow_only_from_cashflowing(property_factory):
    items = [
        (property_factory(id=1), _fin(monthly_cash_flow=1_000, annual_cash_flow=12_000)),
        (property_factory(id=2), _fin(monthly_cash_flow=-200, annual_cash_flow=-2_400)),
        # a rehab with a stray non-zero figure must still not count
        (property_factory(id=3, status="Rehabbing"), _fin(monthly_cash_flow=500, annual_cash_flow=6_000)),
    ]
    m = summarize_portfolio(items)
    assert m.monthly_cash_flow == pytest.approx(800.0)
    assert m.annual_cash_flow == pytest.approx(9_600.0)


def test_averages_skip_non_positive_values(property_factory):
    items = [
        (property_factory(id=1), _fin(equity_multiple=2.0, cash_on_cash_return=0.10)),
        (property_factory(id=2), _fin(equity_multiple=0.0, cash_on_cash_return=-0.05)),
        (property_factory(id=3), _fin(equity_multiple=1.0, cash_on_cash_return=0.0)),
    ]
    m = summarize_portfolio(items)
    assert m.avg_equity_multiple == pytest.approx(1.5)
    assert m.avg_cash_on_cash_return == pytest.approx(0.10)


def test_degraded_counted(property_factory):
    items = [
        (property_factory(id=1), zero_financials(degraded=True, reason="boom")),
        (property_factory(id=2), _fin()),
    ]
    m = summarize_portfolio(items)
    assert m.n_degraded == 1
