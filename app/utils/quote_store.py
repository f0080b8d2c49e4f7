"""Quote snapshots in Redis.

Checkout reads the stored breakdown instead of recomputing, so the price a
customer saw is the price they pay.
"""
import logging
import uuid
from typing import Optional

from app.core.config import settings
from app.core.exceptions import QuoteStoreUnavailableError
from app.core.metrics import cache_hits, cache_misses
from app.core.redis import get_redis
from app.schemas.quote import QuoteResponse

logger = logging.getLogger(__name__)


def _key(quote_id: str) -> str:
    return f"quote:{quote_id}"


async def save_quote(quote: QuoteResponse) -> QuoteResponse:
    """Store a snapshot and return the quote with its id, or unchanged if Redis is down."""
    redis = get_redis()
    if redis is None:
        return quote

    stored = quote.model_copy(update={"quote_id": uuid.uuid4().hex})
    try:
        await redis.set(_key(stored.quote_id), stored.model_dump_json(), ex=settings.QUOTE_TTL)
    except Exception as e:
        logger.warning(f"Quote snapshot write failed: {e}")
        return quote
    return stored


async def load_quote(quote_id: str) -> Optional[QuoteResponse]:
    redis = get_redis()
    if redis is None:
        raise QuoteStoreUnavailableError("Redis not available")

    try:
        raw = await redis.get(_key(quote_id))
    except Exception as e:
        logger.warning(f"Quote snapshot read failed: {e}")
        raise QuoteStoreUnavailableError(str(e)) from e

    if not raw:
        cache_misses.labels(cache_key="quote").inc()
        return None
    cache_hits.labels(cache_key="quote").inc()
    return QuoteResponse.model_validate_json(raw)
