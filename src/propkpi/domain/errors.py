# src/propkpi/domain/errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class PropertyNotFoundError(LookupError):
    """The referenced property does not exist. Always propagated to the caller."""

    def __init__(self, property_id: Any) -> None:
        super().__init__(f"property not found: {property_id}")
        self.property_id = property_id


class DealModelParseError(ValueError):
    """A deal-model blob could not be decoded or validated."""


@dataclass(frozen=True)
class ResolutionWarning:
    """
    A required value had no source at all and was resolved to 0.

    Soft: recorded on the result, never raised.
    """
    field: str
    message: str


@dataclass(frozen=True)
class ConsistencyWarning:
    """
    A freshly computed value drifted from a persisted legacy value.

    Advisory only; logged for operator review.
    """
    code: str
    metric: str
    computed: float
    recorded: float
    tolerance: float
    message: str
    context: dict[str, Any] = field(default_factory=dict)
