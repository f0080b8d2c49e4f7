"""Quote endpoints with Redis snapshots"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas.quote import QuoteRequest, QuoteResponse, SimpleQuoteRequest
from app.services.distance import DistanceEstimator, get_estimator
from app.services.quotes import calculate_quote, calculate_simple_quote
from app.core.exceptions import QuoteStoreUnavailableError
from app.utils.quote_store import load_quote, save_quote

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("/calculate", response_model=QuoteResponse)
async def calculate(req: QuoteRequest, estimator: DistanceEstimator = Depends(get_estimator)):
    result = await calculate_quote(req, estimator)
    return await save_quote(result)


@router.post("/simple", response_model=QuoteResponse)
async def simple(req: SimpleQuoteRequest, estimator: DistanceEstimator = Depends(get_estimator)):
    result = await calculate_simple_quote(
        req.pickup_address,
        req.delivery_address,
        req.van_size,
        req.move_date,
        estimator,
    )
    return await save_quote(result)


@router.get("/{quote_id}", response_model=QuoteResponse)
async def get_quote(quote_id: str):
    try:
        quote = await load_quote(quote_id)
    except QuoteStoreUnavailableError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Quote storage unavailable"
        )

    if quote is None:
        logger.info(f"Quote {quote_id} not found or expired")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Quote not found or expired"
        )
    return quote
