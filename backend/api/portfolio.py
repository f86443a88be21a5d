"""Portfolio API endpoints."""

import logging
from dataclasses import asdict
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.helpers import get_current_user_id, get_price_resolver
from database import get_db
from schemas.portfolio import (
    PortfolioHistoryPage,
    PortfolioItem,
    PortfolioSnapshotResponse,
    PortfolioSummary,
    RecordSnapshotResponse,
)
from services.portfolio_service import PortfolioService
from services.price_resolver import PriceResolver
from services.snapshot_store import SnapshotStore
from utils.pagination import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, InvalidCursorError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/portfolio", tags=["portfolio"])
store = SnapshotStore()


class HistoryRange(str, Enum):
    """Lookback window for portfolio history."""

    week = "7d"
    month = "30d"
    quarter = "90d"


RANGE_DAYS = {HistoryRange.week: 7, HistoryRange.month: 30, HistoryRange.quarter: 90}


def get_portfolio_service(
    resolver: PriceResolver = Depends(get_price_resolver),
) -> PortfolioService:
    """Get PortfolioService instance, allowing for test overrides."""
    return PortfolioService(resolver=resolver, store=store)


@router.get("", response_model=PortfolioSummary)
async def get_portfolio(
    live: bool = False,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """
    Current value of the user's holdings.

    Args:
        live: Fetch prices from upstream providers for pairs without stored prices

    Returns:
        Totals (value, cost, pnl, counts) and the per-holding breakdown
    """
    value = await service.compute_portfolio(db, user_id, live=live)
    return PortfolioSummary(
        total_value_cents=value.total_value_cents,
        total_cost_cents=value.total_cost_cents,
        pnl_cents=value.pnl_cents,
        item_count=value.item_count,
        valued_count=value.valued_count,
        missing_count=value.missing_count,
        breakdown=[PortfolioItem(**asdict(item)) for item in value.breakdown],
    )


@router.post("/snapshot", response_model=RecordSnapshotResponse)
async def record_portfolio_snapshot(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Record the current portfolio totals if they changed since the last snapshot."""
    snapshot = await service.record_snapshot(db, user_id)
    if snapshot is None:
        return RecordSnapshotResponse(recorded=False)
    return RecordSnapshotResponse(
        recorded=True,
        snapshot=PortfolioSnapshotResponse.model_validate(snapshot),
    )


@router.get("/history", response_model=PortfolioHistoryPage)
def get_portfolio_history(
    range: HistoryRange = HistoryRange.month,
    cursor: Optional[str] = None,
    limit: int = Query(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Paginated portfolio snapshots, newest first.

    Raises:
        HTTPException: 400 if the cursor is invalid
    """
    since = datetime.now(timezone.utc) - timedelta(days=RANGE_DAYS[range])
    try:
        page = store.portfolio_history(db, user_id, since=since, cursor=cursor, limit=limit)
    except InvalidCursorError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return PortfolioHistoryPage(
        items=[PortfolioSnapshotResponse.model_validate(row) for row in page.items],
        next_cursor=page.next_cursor,
    )
