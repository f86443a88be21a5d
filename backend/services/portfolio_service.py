"""Portfolio service - values a user's holdings and records history points."""

import asyncio
import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from models import Holding, Language, PortfolioSnapshot, PriceSource
from services.price_resolver import PriceResolver
from services.snapshot_store import PortfolioTotals, SnapshotStore

logger = logging.getLogger(__name__)


@dataclass
class PortfolioItemValue:
    """Valuation of a single holding."""

    holding_id: str
    card_id: str
    language: Language
    condition: str
    quantity: int
    card_name: str | None
    set_code: str | None
    unit_value_cents: int | None
    total_value_cents: int | None
    unit_cost_cents: int | None
    total_cost_cents: int | None
    pnl_cents: int | None
    roi_percent: float | None
    source: PriceSource | None


@dataclass
class PortfolioValue:
    """Portfolio totals plus the sorted per-holding breakdown."""

    total_value_cents: int = 0
    total_cost_cents: int = 0
    pnl_cents: int = 0
    item_count: int = 0
    valued_count: int = 0
    missing_count: int = 0
    breakdown: list[PortfolioItemValue] = field(default_factory=list)

    @property
    def totals(self) -> PortfolioTotals:
        return PortfolioTotals(
            total_value_cents=self.total_value_cents,
            total_cost_cents=self.total_cost_cents,
            pnl_cents=self.pnl_cents,
        )


def roi_percent(pnl_cents: int | None, cost_cents: int | None) -> float | None:
    """Return ROI in percent with one decimal, or None without a positive cost."""
    if pnl_cents is None or cost_cents is None or cost_cents <= 0:
        return None
    return round(pnl_cents / cost_cents * 1000) / 10


def _breakdown_sort_key(item: PortfolioItemValue) -> tuple[float, float]:
    # Valued items first by value desc, then by cost desc; None sorts last.
    value = item.total_value_cents if item.total_value_cents is not None else float("-inf")
    cost = item.total_cost_cents if item.total_cost_cents is not None else float("-inf")
    return (-value, -cost)


class PortfolioService:
    """Computes portfolio value from holdings and stored or live prices.

    Accumulation rules:
    - total value sums only holdings whose price resolved
    - total cost sums every holding with an acquisition price, priced or not
    - pnl compares value and cost only over holdings that have both
    """

    def __init__(
        self,
        resolver: PriceResolver | None = None,
        store: SnapshotStore | None = None,
    ):
        self.store = store or SnapshotStore()
        self.resolver = resolver or PriceResolver(store=self.store)

    async def compute_portfolio(self, db: Session, user_id: str, live: bool = False) -> PortfolioValue:
        """Value every holding of a user.

        Each distinct (card_id, language) pair is resolved once and applied
        to all holdings sharing it.

        Args:
            db: Database session
            user_id: Owner of the holdings
            live: Allow live provider calls for pairs without stored prices

        Returns:
            PortfolioValue with totals and the sorted breakdown
        """
        holdings = await asyncio.to_thread(self._load_holdings, db, user_id)
        if not holdings:
            return PortfolioValue()

        pairs = [(h.card_id, Language(h.language)) for h in holdings]
        resolutions = await self.resolver.resolve_many(db, pairs, live=live)

        result = PortfolioValue(item_count=len(holdings))
        pnl_value_cents = 0
        pnl_cost_cents = 0

        for holding in holdings:
            resolution = resolutions.get((holding.card_id, Language(holding.language)))
            unit_value = resolution.unit_value_cents if resolution else None
            unit_cost = holding.acquisition_price_cents

            item_value = holding.quantity * unit_value if unit_value is not None else None
            item_cost = holding.quantity * unit_cost if unit_cost is not None else None
            item_pnl = (
                item_value - item_cost
                if item_value is not None and item_cost is not None
                else None
            )

            result.breakdown.append(
                PortfolioItemValue(
                    holding_id=holding.id,
                    card_id=holding.card_id,
                    language=Language(holding.language),
                    condition=holding.condition,
                    quantity=holding.quantity,
                    card_name=holding.card_name,
                    set_code=holding.set_code,
                    unit_value_cents=unit_value,
                    total_value_cents=item_value,
                    unit_cost_cents=unit_cost,
                    total_cost_cents=item_cost,
                    pnl_cents=item_pnl,
                    roi_percent=roi_percent(item_pnl, item_cost),
                    source=resolution.source if resolution else None,
                )
            )

            if item_value is not None:
                result.valued_count += 1
                result.total_value_cents += item_value
                if item_cost is not None:
                    result.total_cost_cents += item_cost
                    pnl_value_cents += item_value
                    pnl_cost_cents += item_cost
            else:
                result.missing_count += 1
                if item_cost is not None:
                    result.total_cost_cents += item_cost

        result.pnl_cents = pnl_value_cents - pnl_cost_cents
        result.breakdown.sort(key=_breakdown_sort_key)
        return result

    async def record_snapshot(self, db: Session, user_id: str) -> PortfolioSnapshot | None:
        """Append a portfolio snapshot if totals changed since the last one.

        Uses stored prices only.

        Returns:
            The new snapshot, or None when totals are unchanged.
        """
        value = await self.compute_portfolio(db, user_id, live=False)
        return await asyncio.to_thread(self._append_if_changed, db, user_id, value.totals)

    def _load_holdings(self, db: Session, user_id: str) -> list[Holding]:
        return db.query(Holding).filter(Holding.user_id == user_id).all()

    def _append_if_changed(
        self, db: Session, user_id: str, totals: PortfolioTotals
    ) -> PortfolioSnapshot | None:
        last = self.store.latest_portfolio_snapshot(db, user_id)
        if (
            last is not None
            and last.total_value_cents == totals.total_value_cents
            and last.total_cost_cents == totals.total_cost_cents
            and last.pnl_cents == totals.pnl_cents
        ):
            logger.debug("Portfolio unchanged for user %s, no snapshot recorded", user_id)
            return None

        snapshot = self.store.append_portfolio_snapshot(db, user_id, totals)
        logger.info(
            "Recorded portfolio snapshot for user %s: value=%d cost=%d pnl=%d",
            user_id, totals.total_value_cents, totals.total_cost_cents, totals.pnl_cents,
        )
        return snapshot
