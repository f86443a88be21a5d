"""Asked-price analytics endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models import Language
from schemas.analytics import AskedPricePoint, AskedPriceResponse, AskedPriceStats
from services.price_history_service import PriceHistoryService
from utils.dates import parse_range_days

router = APIRouter(prefix="/api/analytics", tags=["analytics"])
service = PriceHistoryService()


@router.get("/cards/{card_id}/asked-price", response_model=AskedPriceResponse)
def get_asked_price(
    card_id: str,
    language: Language,
    range: str = "30d",
    db: Session = Depends(get_db),
):
    """
    Daily asked-price series from published listings plus stats.

    ``range`` is a day count like ``"30d"`` (capped at 365; invalid values
    mean 30). Today's point is computed on first access.
    """
    days = parse_range_days(range)
    result = service.asked_price(db, card_id, language, days=days)
    return AskedPriceResponse(
        card_id=card_id,
        language=language,
        days=days,
        series=[
            AskedPricePoint(
                day=point.day,
                median_price_cents=point.median_price_cents,
                min_price_cents=point.min_price_cents,
                max_price_cents=point.max_price_cents,
                volume=point.volume,
            )
            for point in result.series
        ],
        stats=AskedPriceStats(
            min_price_cents=result.min_price_cents,
            median_price_cents=result.median_price_cents,
            max_price_cents=result.max_price_cents,
            total_volume=result.total_volume,
        ),
    )
