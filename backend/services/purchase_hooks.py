"""Reactions to a completed purchase.

The payment webhook verifies the event and moves inventory; afterwards it
calls ``on_purchase_completed`` so both parties' portfolio history reflects
the trade.
"""

import logging

from sqlalchemy.orm import Session

from services.portfolio_service import PortfolioService
from utils.best_effort import best_effort_async

logger = logging.getLogger(__name__)


async def on_purchase_completed(
    db: Session,
    buyer_id: str,
    seller_id: str,
    portfolio_service: PortfolioService | None = None,
) -> None:
    """Record portfolio snapshots for buyer and seller.

    Failures are logged and swallowed; the purchase itself is already
    committed by the caller.
    """
    service = portfolio_service or PortfolioService()
    for user_id in dict.fromkeys((buyer_id, seller_id)):
        await best_effort_async(
            f"portfolio snapshot after purchase for user {user_id}",
            lambda uid=user_id: service.record_snapshot(db, uid),
            db=db,
            log=logger,
        )
