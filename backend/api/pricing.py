"""Card pricing API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.helpers import get_price_resolver, get_tcgdex_client
from database import get_db
from integrations.exceptions import ProviderError
from integrations.tcgdex_client import TcgdexClient
from models import Language, PriceSource
from schemas.pricing import (
    CardDetailsResponse,
    CardPriceResponse,
    PriceHistoryResponse,
    TrendPoint,
    TrendStats,
)
from services.price_history_service import MAX_HISTORY_DAYS, PriceHistoryService
from services.price_resolver import PriceResolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pricing", tags=["pricing"])
history_service = PriceHistoryService()


@router.get("/cards/{card_id}/details", response_model=CardDetailsResponse)
async def get_card_details(
    card_id: str,
    language: Language = Language.FR,
    client: TcgdexClient = Depends(get_tcgdex_client),
):
    """Card metadata and image URL from the primary provider.

    Raises:
        HTTPException: 404 if the card is unknown, 502 on provider failure
    """
    try:
        details = await client.fetch_card_details(card_id, language.value)
    except ProviderError as e:
        logger.warning("Card details lookup failed for %s: %s", card_id, e)
        raise HTTPException(status_code=502, detail=f"Price provider error: {e}")
    if details is None:
        raise HTTPException(status_code=404, detail="Card not found")
    return CardDetailsResponse(
        card_id=details.card_id,
        name=details.name,
        image=details.image,
        set_code=details.set_code,
        set_name=details.set_name,
    )


@router.get("/cards/{card_id}/price", response_model=CardPriceResponse)
async def get_card_price(
    card_id: str,
    language: Language,
    live: bool = False,
    db: Session = Depends(get_db),
    resolver: PriceResolver = Depends(get_price_resolver),
):
    """Resolve the current unit value of a card.

    Stored prices only unless ``live`` is set.

    Raises:
        HTTPException: 404 if no price could be resolved
    """
    resolution = await resolver.resolve(db, card_id, language, live=live)
    if resolution is None:
        raise HTTPException(status_code=404, detail="No price found for this card")
    return CardPriceResponse(
        card_id=card_id,
        language=language,
        unit_value_cents=resolution.unit_value_cents,
        source=resolution.source,
        resolution=resolution.resolution,
    )


@router.get("/cards/{card_id}/history", response_model=PriceHistoryResponse)
def get_price_history(
    card_id: str,
    language: Language,
    days: int = Query(default=30, ge=1, le=MAX_HISTORY_DAYS),
    source: PriceSource = PriceSource.TCGDEX,
    db: Session = Depends(get_db),
):
    """Daily stored price series for a card with summary stats."""
    history = history_service.trend_history(db, card_id, language, days=days, source=source)
    return PriceHistoryResponse(
        card_id=card_id,
        language=language,
        source=source,
        days=days,
        points=[
            TrendPoint(
                day=row.day,
                trend_cents=row.trend_cents,
                low_cents=row.low_cents,
                avg_cents=row.avg_cents,
                avg7_cents=row.avg7_cents,
                avg30_cents=row.avg30_cents,
            )
            for row in history.points
        ],
        stats=TrendStats(
            first_day=history.first_day,
            last_day=history.last_day,
            last_trend_cents=history.last_trend_cents,
            min_trend_cents=history.min_trend_cents,
            max_trend_cents=history.max_trend_cents,
        ),
    )
