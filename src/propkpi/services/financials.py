from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Iterable

from propkpi.adapters.config import AppConfig, config
from propkpi.adapters.logging_utils import ctx, get_logger
from propkpi.analysis.engine import calculate
from propkpi.domain.errors import ConsistencyWarning
from propkpi.domain.financials import Financials, zero_financials
from propkpi.domain.metrics import PortfolioMetrics, summarize_portfolio
from propkpi.domain.ports import BundleProvider, ExpenseOverrideStore, PropertyRepository
from propkpi.domain.property import Property
from propkpi.services.consistency import check_consistency

logger = get_logger(__name__)


@dataclass(frozen=True)
class PropertyReport:
    property: Property
    financials: Financials
    consistency: list[ConsistencyWarning] = field(default_factory=list)


@dataclass(frozen=True)
class PortfolioReport:
    metrics: PortfolioMetrics
    properties: list[PropertyReport]


class FinancialsService:
    """
    Wires the pure engine to its collaborators.

    Per calculation: load the property, gather its bundles, read the expense
    overrides once, run the engine, then compare against persisted legacy
    values. Nothing is cached; every call re-resolves every source because
    any of them may have changed since the last one.
    """

    def __init__(
        self,
        properties: PropertyRepository,
        bundles: BundleProvider,
        overrides: ExpenseOverrideStore | None = None,
        settings: AppConfig | None = None,
    ) -> None:
        self._properties = properties
        self._bundles = bundles
        self._overrides = overrides
        self._settings = settings or config
        self._defaults = self._settings.engine_defaults()

    def _compute(self, prop: Property) -> PropertyReport:
        bundles = self._bundles.bundles_for(prop.id)
        overrides = self._overrides.get(prop.id) if self._overrides is not None else None

        fin = calculate(prop, bundles, expense_overrides=overrides, defaults=self._defaults)

        for w in fin.warnings:
            logger.info("financials_resolution_warning", extra=ctx(property_id=prop.id, field=w.field, detail=w.message))

        consistency = check_consistency(
            prop,
            fin,
            cash_flow_tolerance=self._settings.CASH_FLOW_DRIFT_TOLERANCE,
            coc_tolerance=self._settings.COC_DRIFT_TOLERANCE,
        )
        return PropertyReport(property=prop, financials=fin, consistency=consistency)

    def property_report(self, property_id: Hashable) -> PropertyReport:
        # PropertyNotFoundError propagates: a bad id is the caller's problem.
        prop = self._properties.get(property_id)
        return self._compute(prop)

    def property_financials(self, property_id: Hashable) -> Financials:
        return self.property_report(property_id).financials

    def portfolio(self, property_ids: Iterable[Hashable] | None = None) -> PortfolioReport:
        """
        Recompute every property and reduce to portfolio metrics.

        One property failing never aborts the rest: it is logged and
        replaced by an all-zero result tagged as degraded.
        """
        if property_ids is None:
            props = self._properties.list_all()
        else:
            props = [self._properties.get(pid) for pid in property_ids]

        reports: list[PropertyReport] = []
        for prop in props:
            try:
                reports.append(self._compute(prop))
            except Exception as e:
                logger.exception("property_financials_failed", extra=ctx(property_id=prop.id, error=str(e)))
                reports.append(
                    PropertyReport(
                        property=prop,
                        financials=zero_financials(degraded=True, reason=f"calculation failed: {e}"),
                    )
                )

        metrics = summarize_portfolio([(r.property, r.financials) for r in reports])
        logger.info(
            "portfolio_computed",
            extra=ctx(
                n_properties=metrics.n_properties,
                n_degraded=metrics.n_degraded,
                total_aum=metrics.total_aum,
            ),
        )
        return PortfolioReport(metrics=metrics, properties=reports)

    def portfolio_metrics(self, property_ids: Iterable[Hashable] | None = None) -> PortfolioMetrics:
        return self.portfolio(property_ids).metrics
