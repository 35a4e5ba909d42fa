# src/propkpi/services/consistency.py
from __future__ import annotations

from typing import List

from propkpi.adapters.logging_utils import ctx, get_logger
from propkpi.domain.errors import ConsistencyWarning
from propkpi.domain.financials import Financials
from propkpi.domain.property import Property

logger = get_logger(__name__)


def check_consistency(
    prop: Property,
    fin: Financials,
    *,
    cash_flow_tolerance: float = 0.05,
    coc_tolerance: float = 0.01,
) -> List[ConsistencyWarning]:
    """
    Compare fresh results against values an older calculator persisted on
    the property record.

    Produces advisory warnings only. These never block or alter a result;
    they exist so an operator can spot where the old numbers were wrong.

      cash flow:       relative drift above `cash_flow_tolerance` (5%)
      cash-on-cash:    absolute drift above `coc_tolerance` (1 point)
    """
    flags: List[ConsistencyWarning] = []

    # ------------------------------------------------------------------
    # 1) Monthly cash flow
    # ------------------------------------------------------------------
    recorded_cf = prop.recorded_monthly_cash_flow
    if recorded_cf is not None:
        computed = fin.monthly_cash_flow
        base = max(abs(recorded_cf), abs(computed))
        drift = abs(computed - recorded_cf) / base if base > 0 else 0.0
        if drift > cash_flow_tolerance:
            flags.append(
                ConsistencyWarning(
                    code="CASH_FLOW_DRIFT",
                    metric="monthly_cash_flow",
                    computed=computed,
                    recorded=recorded_cf,
                    tolerance=cash_flow_tolerance,
                    message="Monthly cash flow differs from the persisted value by more than tolerance.",
                    context={"relative_drift": drift},
                )
            )

    # ------------------------------------------------------------------
    # 2) Cash-on-cash (both sides are fractions)
    # ------------------------------------------------------------------
    recorded_coc = prop.recorded_coc_fraction
    if recorded_coc is not None:
        computed = fin.cash_on_cash_return
        drift = abs(computed - recorded_coc)
        if drift > coc_tolerance:
            flags.append(
                ConsistencyWarning(
                    code="COC_DRIFT",
                    metric="cash_on_cash_return",
                    computed=computed,
                    recorded=recorded_coc,
                    tolerance=coc_tolerance,
                    message="Cash-on-cash return differs from the persisted value by more than tolerance.",
                    context={"absolute_drift": drift},
                )
            )

    if flags:
        logger.warning(
            "financials_consistency_drift",
            extra=ctx(
                property_id=prop.id,
                flags=[{"code": f.code, "computed": f.computed, "recorded": f.recorded} for f in flags],
            ),
        )

    return flags
