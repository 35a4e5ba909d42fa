# entrypoints/cli/portfolio_report.py
from __future__ import annotations

import argparse
import json

from loguru import logger

from propkpi.adapters.memory_repo import (
    InMemoryBundleProvider,
    InMemoryExpenseOverrideStore,
    InMemoryPropertyRepository,
)
from propkpi.adapters.storage import read_portfolio_input, write_df
from propkpi.services.financials import FinancialsService
from propkpi.services.presentation import (
    financials_frame,
    format_currency,
    format_percent,
    portfolio_to_legacy_fields,
)


def load_snapshot(path: str) -> FinancialsService:
    """
    Build in-memory stores from a snapshot file. Each entry:

        {
          "property": {...},
          "live": {"rent_roll": [...], "loans": [...]},
          "normalized": {"expenses": [...]},
          "deal_model": {...} | "<json text>" | null,
          "expense_overrides": [...]
        }
    """
    props = InMemoryPropertyRepository()
    bundles = InMemoryBundleProvider()
    overrides = InMemoryExpenseOverrideStore()

    for entry in read_portfolio_input(path):
        prop = props.upsert(entry["property"])
        for category, rows in (entry.get("live") or {}).items():
            bundles.put_live(prop.id, category, rows)
        for category, rows in (entry.get("normalized") or {}).items():
            bundles.put_normalized(prop.id, category, rows)
        if entry.get("deal_model") is not None:
            bundles.put_deal_model(prop.id, entry["deal_model"])
        if entry.get("expense_overrides"):
            overrides.set(prop.id, entry["expense_overrides"])

    return FinancialsService(props, bundles, overrides)


def main() -> None:
    ap = argparse.ArgumentParser(description="Recompute per-property KPIs and portfolio totals.")
    ap.add_argument("--input", required=True, help="portfolio snapshot JSON")
    ap.add_argument("--output", default="data/reports/portfolio_financials.csv")
    args = ap.parse_args()

    logger.info("Loading portfolio snapshot", path=args.input)
    service = load_snapshot(args.input)

    report = service.portfolio()
    df = financials_frame((r.property.id, r.property.status, r.financials) for r in report.properties)
    write_df(df, args.output)

    m = report.metrics
    logger.info(
        "Portfolio report written",
        output=args.output,
        n_properties=m.n_properties,
        n_degraded=m.n_degraded,
        aum=format_currency(m.total_aum),
        avg_coc=format_percent(m.avg_cash_on_cash_return),
    )
    for r in report.properties:
        for w in r.consistency:
            logger.warning("Consistency drift", property_id=r.property.id, code=w.code, computed=w.computed, recorded=w.recorded)

    print(json.dumps(portfolio_to_legacy_fields(m), indent=2))


if __name__ == "__main__":
    main()
