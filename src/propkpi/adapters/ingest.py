# src/propkpi/adapters/ingest.py
from __future__ import annotations

import json
from typing import Any, Hashable, Mapping

from pydantic import ValidationError

from propkpi.adapters.logging_utils import ctx, get_logger
from propkpi.domain.deal_model import DealModel
from propkpi.domain.errors import DealModelParseError
from propkpi.domain.property import Property

logger = get_logger(__name__)


def decode_deal_model(raw: Any) -> DealModel:
    """
    Strict decode of a deal-model blob (JSON text, bytes or an already
    decoded mapping). Raises DealModelParseError on anything unusable.
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as err:
            raise DealModelParseError(f"deal model is not valid JSON: {err.msg}") from err
    if not isinstance(raw, Mapping):
        raise DealModelParseError(f"deal model must be an object, got {type(raw).__name__}")
    try:
        return DealModel.model_validate(raw)
    except ValidationError as err:
        raise DealModelParseError(f"deal model failed validation: {err.error_count()} error(s)") from err


def parse_deal_model(raw: Any, *, property_id: Hashable | None = None) -> DealModel | None:
    """
    Parse a deal-model blob once, at ingestion.

    A blob that fails to parse is treated as absent: logged, never raised,
    never half-applied.
    """
    if raw is None or raw == "" or raw == {}:
        return None
    try:
        return decode_deal_model(raw)
    except DealModelParseError as err:
        logger.warning("deal_model_parse_failed", extra=ctx(property_id=property_id, error=str(err)))
        return None


def property_from_raw(raw: Mapping[str, Any] | Property) -> Property:
    if isinstance(raw, Property):
        return raw
    return Property.model_validate(raw)
