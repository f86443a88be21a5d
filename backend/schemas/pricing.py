"""Pydantic schemas for card pricing endpoints and stored payloads."""

from datetime import date
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from models.enums import Language, PriceSource

RAW_PAYLOAD_SCHEMA_VERSION = 1


class RawPricePayload(BaseModel):
    """Versioned debugging payload stored alongside each daily snapshot."""

    source: PriceSource
    schema_version: int = RAW_PAYLOAD_SCHEMA_VERSION
    provider: str  # Client that answered, e.g. "tcgdex" or "boutique"
    fetched_language: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)


class PriceFields(BaseModel):
    """Price columns of a daily snapshot, all in euro cents."""

    trend_cents: Optional[int] = None
    low_cents: Optional[int] = None
    avg_cents: Optional[int] = None
    high_cents: Optional[int] = None
    avg7_cents: Optional[int] = None
    avg30_cents: Optional[int] = None
    raw_payload: Optional[RawPricePayload] = None


class PriceResolution(BaseModel):
    """A resolved unit value and the source tag that answered."""

    unit_value_cents: int
    source: PriceSource
    resolution: Literal["reference", "snapshot", "live", "live_fallback"]


class CardPriceResponse(BaseModel):
    """Response for GET /api/pricing/cards/{card_id}/price."""

    card_id: str
    language: Language
    unit_value_cents: int
    source: PriceSource
    resolution: str


class CardDetailsResponse(BaseModel):
    """Response for GET /api/pricing/cards/{card_id}/details."""

    card_id: str
    name: Optional[str] = None
    image: Optional[str] = None
    set_code: Optional[str] = None
    set_name: Optional[str] = None


class TrendPoint(BaseModel):
    """One day of the stored trend series."""

    day: date
    trend_cents: Optional[int] = None
    low_cents: Optional[int] = None
    avg_cents: Optional[int] = None
    avg7_cents: Optional[int] = None
    avg30_cents: Optional[int] = None


class TrendStats(BaseModel):
    first_day: Optional[date] = None
    last_day: Optional[date] = None
    last_trend_cents: Optional[int] = None
    min_trend_cents: Optional[int] = None
    max_trend_cents: Optional[int] = None


class PriceHistoryResponse(BaseModel):
    """Response for GET /api/pricing/cards/{card_id}/history."""

    card_id: str
    language: Language
    source: PriceSource
    days: int
    points: list[TrendPoint]
    stats: TrendStats
