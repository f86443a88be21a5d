"""Pydantic schemas for price alert endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.enums import AlertDirection, Language


class PriceAlertCreate(BaseModel):
    """Schema for creating a price alert."""

    card_id: str = Field(min_length=1)
    language: Language
    threshold_cents: int = Field(ge=0)
    direction: AlertDirection

    @field_validator("card_id")
    @classmethod
    def strip_card_id(cls, v: str) -> str:
        """Reject whitespace-only card ids."""
        v = v.strip()
        if not v:
            raise ValueError("card_id must not be blank")
        return v


class PriceAlertUpdate(BaseModel):
    """Schema for updating a price alert. Only these fields are mutable."""

    active: Optional[bool] = None
    threshold_cents: Optional[int] = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")


class PriceAlertResponse(BaseModel):
    """Schema for PriceAlert API response."""

    id: str
    card_id: str
    language: Language
    threshold_cents: int
    direction: AlertDirection
    active: bool
    triggered_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PriceAlertPage(BaseModel):
    """A page of alerts plus the cursor for the next page."""

    items: list[PriceAlertResponse]
    next_cursor: Optional[str] = None
