# tests/conftest.py
import pytest

from propkpi.adapters.config import AppConfig
from propkpi.adapters.memory_repo import (
    InMemoryBundleProvider,
    InMemoryExpenseOverrideStore,
    InMemoryPropertyRepository,
)
from propkpi.domain.bundles import Bundle, PropertyBundles
from propkpi.domain.financials import EngineDefaults
from propkpi.domain.property import Property
from propkpi.services.financials import FinancialsService


def make_property(**overrides) -> Property:
    fields = dict(
        id=1,
        address="12 Test Ave",
        status="Cashflowing",
        apartments=2,
        acquisition_price=500_000.0,
        rehab_costs=50_000.0,
        initial_capital_required=150_000.0,
    )
    fields.update(overrides)
    return Property(**fields)


def make_bundles(source="live", **categories) -> PropertyBundles:
    """make_bundles(rent_roll=[...], loans=[...]) -> every category under one source."""
    return PropertyBundles(
        bundles=tuple(Bundle.from_raw(cat, source, rows) for cat, rows in categories.items())
    )


@pytest.fixture
def defaults():
    return EngineDefaults()


@pytest.fixture
def scenario_property():
    """The reference deal: 500k purchase, 50k rehab, two units."""
    return make_property()


@pytest.fixture
def scenario_bundles():
    return make_bundles(
        rent_roll=[{"currentRent": 2000}, {"currentRent": 2100}],
        assumptions={"vacancyRate": 0.05, "managementFeeRate": 0.08, "exitCapRate": 0.055},
        loans=[{"principal": 400_000, "interestRate": 0.065, "termYears": 30}],
    )


@pytest.fixture
def settings():
    return AppConfig()


@pytest.fixture
def stores():
    return InMemoryPropertyRepository(), InMemoryBundleProvider(), InMemoryExpenseOverrideStore()


@pytest.fixture
def service(stores, settings):
    props, bundles, overrides = stores
    return FinancialsService(props, bundles, overrides, settings=settings)


@pytest.fixture
def property_factory():
    return make_property


@pytest.fixture
def bundles_factory():
    return make_bundles
