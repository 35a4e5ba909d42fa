from __future__ import annotations

from typing import Any, Callable, Hashable, Mapping

from propkpi.adapters.ingest import parse_deal_model, property_from_raw
from propkpi.adapters.logging_utils import ctx, get_logger
from propkpi.domain.bundles import PropertyBundles
from propkpi.domain.deal_model import DealModel
from propkpi.domain.errors import PropertyNotFoundError
from propkpi.domain.ports import (
    BundleProvider,
    ExpenseOverrideListener,
    ExpenseOverrideStore,
    PropertyRepository,
)
from propkpi.domain.property import Property
from propkpi.domain.records import ExpenseItem, records_from_raw

logger = get_logger(__name__)


class InMemoryPropertyRepository(PropertyRepository):
    def __init__(self, properties: list[Property | Mapping[str, Any]] | None = None) -> None:
        self._items: dict[Hashable, Property] = {}
        for p in properties or []:
            self.upsert(p)

    def upsert(self, prop: Property | Mapping[str, Any]) -> Property:
        rec = property_from_raw(prop)
        self._items[rec.id] = rec
        return rec

    def get(self, property_id: Hashable) -> Property:
        try:
            return self._items[property_id]
        except KeyError:
            raise PropertyNotFoundError(property_id) from None

    def list_all(self) -> list[Property]:
        return list(self._items.values())


class InMemoryBundleProvider(BundleProvider):
    """
    Holds the raw category data per property and source.

    Deal-model blobs are parsed when they are stored, not when they are read;
    a blob that fails to parse is stored as absent.
    """

    def __init__(self) -> None:
        self._live: dict[Hashable, dict[str, Any]] = {}
        self._normalized: dict[Hashable, dict[str, Any]] = {}
        self._deal_models: dict[Hashable, DealModel | None] = {}
        self._defaults: dict[str, Any] = {}

    def put_live(self, property_id: Hashable, category: str, rows: Any) -> None:
        self._live.setdefault(property_id, {})[category] = rows

    def put_normalized(self, property_id: Hashable, category: str, rows: Any) -> None:
        self._normalized.setdefault(property_id, {})[category] = rows

    def put_deal_model(self, property_id: Hashable, blob: Any) -> DealModel | None:
        model = parse_deal_model(blob, property_id=property_id)
        self._deal_models[property_id] = model
        return model

    def put_default(self, category: str, rows: Any) -> None:
        """Portfolio-wide fallback data, shared by every property."""
        self._defaults[category] = rows

    def bundles_for(self, property_id: Hashable) -> PropertyBundles:
        return PropertyBundles.from_sources(
            live=self._live.get(property_id),
            normalized=self._normalized.get(property_id),
            deal_model=self._deal_models.get(property_id),
            defaults=self._defaults,
        )


class InMemoryExpenseOverrideStore(ExpenseOverrideStore):
    """
    User-edited expenses keyed by property id.

    Last writer wins, no locking. Listeners hear about every set and clear,
    with None as the payload for a clear.
    """

    def __init__(self) -> None:
        self._items: dict[Hashable, tuple[ExpenseItem, ...]] = {}
        self._listeners: list[ExpenseOverrideListener] = []

    def get(self, property_id: Hashable) -> list[ExpenseItem] | None:
        items = self._items.get(property_id)
        return list(items) if items is not None else None

    def set(self, property_id: Hashable, expenses: list[ExpenseItem | Mapping[str, Any]] | Mapping[str, Any]) -> None:
        items = records_from_raw("expenses", expenses)
        self._items[property_id] = items
        logger.info("expense_overrides_saved", extra=ctx(property_id=property_id, n_items=len(items)))
        self._notify(property_id, list(items))

    def clear(self, property_id: Hashable) -> None:
        self._items.pop(property_id, None)
        logger.info("expense_overrides_cleared", extra=ctx(property_id=property_id))
        self._notify(property_id, None)

    def has_overrides(self, property_id: Hashable) -> bool:
        return property_id in self._items

    def subscribe(self, listener: ExpenseOverrideListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, property_id: Hashable, expenses: list[ExpenseItem] | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(property_id, expenses)
            except Exception as e:
                # a broken subscriber must not undo the write
                logger.warning("expense_override_listener_failed", extra=ctx(property_id=property_id, error=str(e)))
