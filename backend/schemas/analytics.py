"""Pydantic schemas for asked-price analytics."""

from datetime import date
from typing import Optional

from pydantic import BaseModel

from models.enums import Language


class AskedPricePoint(BaseModel):
    """Asked-price aggregate for one day; price fields are None without data."""

    day: date
    median_price_cents: Optional[int] = None
    min_price_cents: Optional[int] = None
    max_price_cents: Optional[int] = None
    volume: Optional[int] = None


class AskedPriceStats(BaseModel):
    min_price_cents: Optional[int] = None
    median_price_cents: Optional[int] = None
    max_price_cents: Optional[int] = None
    total_volume: int = 0


class AskedPriceResponse(BaseModel):
    """Response for GET /api/analytics/cards/{card_id}/asked-price."""

    card_id: str
    language: Language
    days: int
    series: list[AskedPricePoint]
    stats: AskedPriceStats
