"""Pydantic schemas for portfolio valuation endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from models.enums import Language, PriceSource


class PortfolioItem(BaseModel):
    """Valuation of one holding."""

    holding_id: str
    card_id: str
    language: Language
    condition: str
    quantity: int
    card_name: Optional[str] = None
    set_code: Optional[str] = None
    unit_value_cents: Optional[int] = None
    total_value_cents: Optional[int] = None
    unit_cost_cents: Optional[int] = None
    total_cost_cents: Optional[int] = None
    pnl_cents: Optional[int] = None
    roi_percent: Optional[float] = None
    source: Optional[PriceSource] = None


class PortfolioSummary(BaseModel):
    """Response for GET /api/portfolio."""

    total_value_cents: int
    total_cost_cents: int
    pnl_cents: int
    item_count: int
    valued_count: int
    missing_count: int
    breakdown: list[PortfolioItem]


class PortfolioSnapshotResponse(BaseModel):
    """A stored portfolio history point."""

    id: str
    total_value_cents: int
    total_cost_cents: int
    pnl_cents: int
    captured_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RecordSnapshotResponse(BaseModel):
    """Response for POST /api/portfolio/snapshot."""

    recorded: bool
    snapshot: Optional[PortfolioSnapshotResponse] = None


class PortfolioHistoryPage(BaseModel):
    """Response for GET /api/portfolio/history."""

    items: list[PortfolioSnapshotResponse]
    next_cursor: Optional[str] = None
