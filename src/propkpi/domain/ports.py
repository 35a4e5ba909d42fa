# src/propkpi/domain/ports.py
from __future__ import annotations

from typing import Any, Callable, Hashable, Protocol

from propkpi.domain.bundles import PropertyBundles
from propkpi.domain.property import Property
from propkpi.domain.records import ExpenseItem


# ----------------------------
# Property storage
# ----------------------------

class PropertyRepository(Protocol):
    def get(self, property_id: Hashable) -> Property:
        """Raise PropertyNotFoundError when the id is unknown."""
        ...

    def list_all(self) -> list[Property]:
        ...


# ----------------------------
# Source data per property (live uploads, normalized store, deal model)
# ----------------------------

class BundleProvider(Protocol):
    def bundles_for(self, property_id: Hashable) -> PropertyBundles:
        ...


# ----------------------------
# User-edited expense overrides
# ----------------------------

ExpenseOverrideListener = Callable[[Hashable, "list[ExpenseItem] | None"], Any]


class ExpenseOverrideStore(Protocol):
    def get(self, property_id: Hashable) -> list[ExpenseItem] | None:
        ...

    def set(self, property_id: Hashable, expenses: list[ExpenseItem]) -> None:
        ...

    def clear(self, property_id: Hashable) -> None:
        ...

    def subscribe(self, listener: ExpenseOverrideListener) -> Callable[[], None]:
        """Register a change listener; returns a function that unsubscribes it."""
        ...
