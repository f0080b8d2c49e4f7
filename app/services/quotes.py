import logging
from datetime import datetime
from typing import Optional

from app.core.enums import FloorAccess, UrgencyLevel, VanSize
from app.core.metrics import quotes_calculated
from app.core.pricing_rules import DEFAULT_RULES, PricingRules
from app.schemas.distance import DistanceEstimate
from app.schemas.quote import PriceBreakdown, QuoteRequest, QuoteResponse
from app.services.distance import DistanceEstimator
from app.services.pricing import build_breakdown, estimate_job_hours

logger = logging.getLogger(__name__)


def _explain(req: QuoteRequest, distance: DistanceEstimate, breakdown: PriceBreakdown) -> str:
    approx = "" if distance.exact else "about "
    return (
        f"{breakdown.price_string} including VAT for a {req.van_size} van over "
        f"{approx}{distance.distance_miles:g} miles, allowing {breakdown.estimated_time}."
    )


def _respond(kind: str, req: QuoteRequest, distance: DistanceEstimate, rules: PricingRules) -> QuoteResponse:
    breakdown = build_breakdown(req, distance, rules)
    quotes_calculated.labels(kind=kind, van_size=req.van_size.value).inc()
    logger.info(
        f"Calculated {kind} quote: {distance.distance_miles} miles ({distance.source}), "
        f"{req.van_size} van, total {breakdown.price_string}"
    )
    return QuoteResponse(
        distance=distance,
        breakdown=breakdown,
        explanation=_explain(req, distance, breakdown),
    )


async def calculate_quote(
    req: QuoteRequest,
    estimator: DistanceEstimator,
    rules: PricingRules = DEFAULT_RULES,
) -> QuoteResponse:
    distance = await estimator.estimate(req.pickup_address, req.delivery_address, departure=req.departure)
    return _respond("detailed", req, distance, rules)


async def calculate_simple_quote(
    pickup_address: str,
    delivery_address: str,
    van_size: VanSize,
    move_date: datetime,
    estimator: DistanceEstimator,
    rules: PricingRules = DEFAULT_RULES,
    distance: Optional[DistanceEstimate] = None,
) -> QuoteResponse:
    """Landing-page quote: no helpers, ground floor both ends, standard urgency."""
    if distance is None:
        distance = await estimator.estimate(pickup_address, delivery_address, departure=move_date)

    req = QuoteRequest(
        pickup_address=pickup_address,
        delivery_address=delivery_address,
        van_size=van_size,
        move_date=move_date,
        estimated_hours=estimate_job_hours(distance.distance_miles),
        helpers=0,
        pickup_floor=FloorAccess.GROUND,
        delivery_floor=FloorAccess.GROUND,
        urgency=UrgencyLevel.STANDARD,
    )
    return _respond("simple", req, distance, rules)
