# tests/test_valuation.py
import pytest

from propkpi.analysis.cashflow import aggregate_cash_flow
from propkpi.analysis.engine import calculate
from propkpi.analysis.valuation import all_in_cost, estimate_arv, gate_cash_flow, safe_div
from propkpi.domain.financials import EngineDefaults


def test_safe_div_guards():
    assert safe_div(10.0, 0) == 0.0
    assert safe_div(10.0, None) == 0.0
    assert safe_div(10.0, 4.0) == 2.5


def test_arv_sale_price_first(property_factory):
    prop = property_factory(status="Sold", sale_price=700_000, arv_at_time_purchased=650_000)
    assert estimate_arv(prop, 40_000, 0.05, 50_000, 1.0) == (700_000.0, "sale_price")


def test_arv_income_cap_before_stored_appraisal(property_factory):
    prop = property_factory(arv_at_time_purchased=650_000)
    arv, basis = estimate_arv(prop, 40_000, 0.05, 50_000, 1.0)
    assert basis == "income_cap"
    assert arv == pytest.approx(800_000.0)


def test_arv_stored_appraisal_when_noi_not_positive(property_factory):
    prop = property_factory(arv_at_time_purchased=650_000)
    assert estimate_arv(prop, -1_000, 0.05, 50_000, 1.0) == (650_000.0, "stored_appraisal")


def test_arv_cost_appreciation_last(property_factory):
    prop = property_factory()
    arv, basis = estimate_arv(prop, 0.0, 0.05, 50_000, 1.1)
    assert basis == "cost_appreciation"
    assert arv == pytest.approx(550_000 * 1.1)


def test_all_in_cost_uses_stored_closing_and_holding(property_factory):
    defaults = EngineDefaults()
    stored = property_factory(closing_costs=7_000, holding_costs=0)
    estimated = property_factory()

    assert all_in_cost(stored, 50_000, defaults) == pytest.approx(557_000.0)
    assert all_in_cost(estimated, 50_000, defaults) == pytest.approx(565_000.0)


@pytest.mark.parametrize("status", ["UnderContract", "Rehabbing", "Sold"])
def test_cash_flow_gated_outside_cashflowing(status):
    cf = aggregate_cash_flow(60_000.0, 1_000.0, 2_000.0)
    gated = gate_cash_flow(status, cf)
    assert gated.monthly_cash_flow == 0.0
    assert gated.annual_cash_flow == 0.0
    assert gated.noi == cf.noi


def test_cashflowing_not_gated():
    cf = aggregate_cash_flow(60_000.0, 1_000.0, 2_000.0)
    assert gate_cash_flow("Cashflowing", cf) == cf
    assert cf.monthly_cash_flow == pytest.approx(2_000.0)


def test_rehabbing_property_reports_zero_cash_flow(property_factory, scenario_bundles):
    fin = calculate(property_factory(status="Rehabbing"), scenario_bundles)
    assert fin.monthly_cash_flow == 0.0
    assert fin.cash_on_cash_return == 0.0
    assert fin.noi > 0


def test_sold_equity_multiple_is_realized(property_factory, scenario_bundles):
    prop = property_factory(status="Sold", sale_price=720_000, total_profits=225_000)
    fin = calculate(prop, scenario_bundles)

    assert fin.arv == pytest.approx(720_000.0)
    assert fin.provenance["arv"] == "sale_price"
    assert fin.equity_multiple == pytest.approx(1.5)


def test_sold_without_profit_warns(property_factory, scenario_bundles):
    fin = calculate(property_factory(status="Sold", sale_price=720_000), scenario_bundles)
    assert fin.equity_multiple == 0.0
    assert any(w.field == "total_profits" for w in fin.warnings)


def test_cap_rate_ignores_arv_and_exit_cap(property_factory, scenario_bundles, bundles_factory):
    prop = property_factory(arv_at_time_purchased=900_000)
    base = calculate(prop, scenario_bundles)
    other_cap = calculate(
        prop,
        bundles_factory(
            rent_roll=[{"currentRent": 2000}, {"currentRent": 2100}],
            assumptions={"vacancyRate": 0.05, "managementFeeRate": 0.08, "exitCapRate": 0.07},
            loans=[{"principal": 400_000, "interestRate": 0.065, "termYears": 30}],
        ),
    )

    assert base.cap_rate == pytest.approx(other_cap.cap_rate)
    assert base.arv != pytest.approx(other_cap.arv)
