"""Price history and asked-price analytics.

Trend history reads stored daily snapshots. Asked-price analytics read the
per-day aggregate of published listing prices, computing and upserting
today's point on first access.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta

from sqlalchemy.orm import Session

from database import dialect_insert
from models import Language, Listing, ListingPriceSnapshot, ListingStatus, PriceSource
from models.utils import generate_uuid
from services.snapshot_store import SnapshotStore
from utils.dates import day_range, utc_today

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_DAYS = 30
MAX_HISTORY_DAYS = 365


def median(values: list[int]) -> int:
    """Median of integer values; even-length lists average the middle pair, rounded.

    Returns 0 for an empty list.
    """
    if not values:
        return 0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    # Midpoint rounds half up
    return (ordered[mid - 1] + ordered[mid] + 1) // 2


@dataclass
class TrendHistory:
    points: list = field(default_factory=list)
    first_day: date | None = None
    last_day: date | None = None
    last_trend_cents: int | None = None
    min_trend_cents: int | None = None
    max_trend_cents: int | None = None


@dataclass
class AskedPoint:
    day: date
    median_price_cents: int | None = None
    min_price_cents: int | None = None
    max_price_cents: int | None = None
    volume: int | None = None


@dataclass
class AskedPriceAnalytics:
    series: list[AskedPoint]
    min_price_cents: int | None
    median_price_cents: int | None
    max_price_cents: int | None
    total_volume: int


class PriceHistoryService:
    """Builds daily price series and their summary stats."""

    def __init__(self, store: SnapshotStore | None = None):
        self.store = store or SnapshotStore()

    def trend_history(
        self,
        db: Session,
        card_id: str,
        language: Language,
        days: int = DEFAULT_HISTORY_DAYS,
        source: PriceSource = PriceSource.TCGDEX,
    ) -> TrendHistory:
        """Stored daily snapshots since ``today - days``, oldest first, with stats."""
        since = utc_today() - timedelta(days=days)
        rows = self.store.daily_series(db, card_id, language, source, since)

        history = TrendHistory(points=rows)
        if rows:
            history.first_day = rows[0].day
            history.last_day = rows[-1].day

        trends = [row.trend_cents for row in rows if row.trend_cents is not None]
        if trends:
            history.last_trend_cents = trends[-1]
            history.min_trend_cents = min(trends)
            history.max_trend_cents = max(trends)
        return history

    def _compute_listing_point(self, db: Session, card_id: str, language: Language, day: date) -> AskedPoint:
        prices = [
            price
            for (price,) in db.query(Listing.price_cents)
            .filter(
                Listing.status == ListingStatus.PUBLISHED,
                Listing.card_id == card_id,
                Listing.language == language,
            )
            .all()
        ]
        return AskedPoint(
            day=day,
            median_price_cents=median(prices),
            min_price_cents=min(prices) if prices else 0,
            max_price_cents=max(prices) if prices else 0,
            volume=len(prices),
        )

    def _upsert_listing_point(self, db: Session, card_id: str, language: Language, point: AskedPoint) -> None:
        insert = dialect_insert(db)
        stmt = insert(ListingPriceSnapshot).values(
            id=generate_uuid(),
            card_id=card_id,
            language=language,
            day=point.day,
            median_price_cents=point.median_price_cents,
            min_price_cents=point.min_price_cents,
            max_price_cents=point.max_price_cents,
            volume=point.volume,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["card_id", "language", "day"],
            set_={
                "median_price_cents": stmt.excluded.median_price_cents,
                "min_price_cents": stmt.excluded.min_price_cents,
                "max_price_cents": stmt.excluded.max_price_cents,
                "volume": stmt.excluded.volume,
            },
        )
        db.execute(stmt)
        db.commit()

    def asked_price(
        self,
        db: Session,
        card_id: str,
        language: Language,
        days: int = DEFAULT_HISTORY_DAYS,
    ) -> AskedPriceAnalytics:
        """Per-day asked-price series for the last ``days`` days plus stats.

        Days without a stored aggregate have None fields. Today's aggregate
        is computed from PUBLISHED listings and stored if missing.
        """
        language = Language(language)
        today = utc_today()
        days_in_range = day_range(today, days)

        existing = (
            db.query(ListingPriceSnapshot)
            .filter(
                ListingPriceSnapshot.card_id == card_id,
                ListingPriceSnapshot.language == language,
                ListingPriceSnapshot.day >= days_in_range[0],
                ListingPriceSnapshot.day <= days_in_range[-1],
            )
            .all()
        )
        by_day: dict[date, AskedPoint] = {
            row.day: AskedPoint(
                day=row.day,
                median_price_cents=row.median_price_cents,
                min_price_cents=row.min_price_cents,
                max_price_cents=row.max_price_cents,
                volume=row.volume,
            )
            for row in existing
        }

        if today not in by_day:
            point = self._compute_listing_point(db, card_id, language, today)
            self._upsert_listing_point(db, card_id, language, point)
            by_day[today] = point
            logger.debug(
                "Computed asked-price point for %s/%s: median=%d volume=%d",
                card_id, language.value, point.median_price_cents, point.volume,
            )

        series = [by_day.get(day, AskedPoint(day=day)) for day in days_in_range]

        points = list(by_day.values())
        medians = [p.median_price_cents for p in points if p.median_price_cents > 0]
        mins = [p.min_price_cents for p in points if p.min_price_cents > 0]
        maxs = [p.max_price_cents for p in points]

        return AskedPriceAnalytics(
            series=series,
            min_price_cents=min(mins) if mins else None,
            median_price_cents=median(medians) if medians else None,
            max_price_cents=max(maxs) if maxs else None,
            total_volume=sum(p.volume for p in points),
        )
