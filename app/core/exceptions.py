"""Exception hierarchy for the quote engine."""
from typing import Any, Optional


class QuoteEngineError(Exception):
    """Base exception for quote engine errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RoutingUnavailableError(QuoteEngineError):
    """External routing lookup failed (timeout, transport error, bad payload).

    Never reaches the caller: the distance estimator falls through to the
    next strategy.
    """

    pass


class PricingInvariantError(QuoteEngineError):
    """A computed price broke an arithmetic invariant.

    Points at a pricing-table or configuration defect, so it is raised
    rather than clamped.
    """

    pass


class QuoteStoreUnavailableError(QuoteEngineError):
    """Quote snapshots cannot be read because Redis is down."""

    pass
