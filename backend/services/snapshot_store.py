"""Snapshot store - idempotent persistence of price and portfolio time series."""

import logging
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from database import dialect_insert
from models import (
    CardPriceSnapshot,
    DailyPriceSnapshot,
    ExternalProductRef,
    Language,
    PortfolioSnapshot,
    PriceSource,
)
from models.utils import generate_uuid, utc_now
from schemas.pricing import PriceFields
from utils.dates import to_utc_day
from utils.pagination import Page, paginate

logger = logging.getLogger(__name__)

Pair = tuple[str, Language]

DAILY_SNAPSHOT_KEY = ["card_id", "language", "source", "day"]
DAILY_SNAPSHOT_VALUE_COLUMNS = (
    "captured_at",
    "trend_cents",
    "low_cents",
    "avg_cents",
    "high_cents",
    "avg7_cents",
    "avg30_cents",
    "raw_payload",
)


@dataclass
class PortfolioTotals:
    """Portfolio totals in euro cents."""

    total_value_cents: int
    total_cost_cents: int
    pnl_cents: int


class SnapshotStore:
    """Reads and writes DailyPriceSnapshot and PortfolioSnapshot rows.

    Daily snapshot writes are upserts on (card_id, language, source, day),
    so concurrent writers for the same key both succeed and the last write
    wins. Writes commit immediately.
    """

    def upsert_daily_snapshot(
        self,
        db: Session,
        card_id: str,
        language: Language | str,
        source: PriceSource,
        day: date | datetime | str | None,
        fields: PriceFields,
    ) -> None:
        """Create or replace the snapshot row for one key.

        Args:
            db: Database session.
            card_id: Catalog card id.
            language: Card language.
            source: Source tag.
            day: Any date/datetime; normalized to its UTC calendar day.
            fields: Price columns; every value column is overwritten.
        """
        values = {
            "id": generate_uuid(),
            "card_id": card_id,
            "language": Language(language),
            "source": source,
            "day": to_utc_day(day),
            "captured_at": utc_now(),
            "trend_cents": fields.trend_cents,
            "low_cents": fields.low_cents,
            "avg_cents": fields.avg_cents,
            "high_cents": fields.high_cents,
            "avg7_cents": fields.avg7_cents,
            "avg30_cents": fields.avg30_cents,
            "raw_payload": (
                fields.raw_payload.model_dump(mode="json") if fields.raw_payload else None
            ),
        }

        insert = dialect_insert(db)
        stmt = insert(DailyPriceSnapshot).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=DAILY_SNAPSHOT_KEY,
            set_={col: stmt.excluded[col] for col in DAILY_SNAPSHOT_VALUE_COLUMNS},
        )
        db.execute(stmt)
        db.commit()
        logger.debug(
            "Upserted daily snapshot %s/%s/%s/%s trend=%s",
            card_id, values["language"].value, source.value, values["day"], fields.trend_cents,
        )

    def latest_daily_snapshot(
        self,
        db: Session,
        card_id: str,
        language: Language | str,
        source: PriceSource,
    ) -> DailyPriceSnapshot | None:
        """Return the most recent snapshot by day, or None."""
        return (
            db.query(DailyPriceSnapshot)
            .filter(
                DailyPriceSnapshot.card_id == card_id,
                DailyPriceSnapshot.language == Language(language),
                DailyPriceSnapshot.source == source,
            )
            .order_by(DailyPriceSnapshot.day.desc())
            .first()
        )

    def latest_batch(
        self,
        db: Session,
        pairs: list[Pair],
        source: PriceSource,
    ) -> dict[Pair, DailyPriceSnapshot]:
        """Return the latest snapshot per (card_id, language) pair in one query.

        Pairs without any snapshot are absent from the result.
        """
        wanted = {(card_id, Language(language)) for card_id, language in pairs}
        if not wanted:
            return {}

        card_ids = sorted({card_id for card_id, _ in wanted})
        languages = sorted({language for _, language in wanted}, key=lambda lang: lang.value)

        latest_day = (
            db.query(
                DailyPriceSnapshot.card_id.label("card_id"),
                DailyPriceSnapshot.language.label("language"),
                func.max(DailyPriceSnapshot.day).label("day"),
            )
            .filter(
                DailyPriceSnapshot.source == source,
                DailyPriceSnapshot.card_id.in_(card_ids),
                DailyPriceSnapshot.language.in_(languages),
            )
            .group_by(DailyPriceSnapshot.card_id, DailyPriceSnapshot.language)
            .subquery()
        )

        rows = (
            db.query(DailyPriceSnapshot)
            .join(
                latest_day,
                (DailyPriceSnapshot.card_id == latest_day.c.card_id)
                & (DailyPriceSnapshot.language == latest_day.c.language)
                & (DailyPriceSnapshot.day == latest_day.c.day),
            )
            .filter(DailyPriceSnapshot.source == source)
            .all()
        )

        result: dict[Pair, DailyPriceSnapshot] = {}
        for row in rows:
            key = (row.card_id, Language(row.language))
            if key in wanted:
                result[key] = row
        return result

    def daily_series(
        self,
        db: Session,
        card_id: str,
        language: Language | str,
        source: PriceSource,
        since: date,
    ) -> list[DailyPriceSnapshot]:
        """Return snapshots with day >= since, oldest first."""
        return (
            db.query(DailyPriceSnapshot)
            .filter(
                DailyPriceSnapshot.card_id == card_id,
                DailyPriceSnapshot.language == Language(language),
                DailyPriceSnapshot.source == source,
                DailyPriceSnapshot.day >= since,
            )
            .order_by(DailyPriceSnapshot.day.asc())
            .all()
        )

    def latest_card_price(
        self,
        db: Session,
        card_id: str,
        language: Language | str,
    ) -> CardPriceSnapshot | None:
        """Latest reference-source point price for a pair, via ExternalProductRef.

        A ref for the exact language wins over a language-agnostic ref.
        """
        pair = (card_id, Language(language))
        return self.latest_card_price_batch(db, [pair]).get(pair)

    def latest_card_price_batch(
        self,
        db: Session,
        pairs: list[Pair],
    ) -> dict[Pair, CardPriceSnapshot]:
        """Latest reference-source point price per pair in two queries.

        Refs for every requested card are loaded at once, then the newest
        CardPriceSnapshot per external product. Per pair, an exact-language
        ref with a snapshot wins over a language-agnostic one. Pairs without
        a priced ref are absent from the result.
        """
        wanted = list(dict.fromkeys((card_id, Language(language)) for card_id, language in pairs))
        if not wanted:
            return {}

        refs = (
            db.query(ExternalProductRef)
            .filter(
                ExternalProductRef.source == PriceSource.CARDMARKET,
                ExternalProductRef.card_id.in_(sorted({card_id for card_id, _ in wanted})),
            )
            .all()
        )
        if not refs:
            return {}

        latest_capture = (
            db.query(
                CardPriceSnapshot.external_product_id.label("external_product_id"),
                func.max(CardPriceSnapshot.captured_at).label("captured_at"),
            )
            .filter(
                CardPriceSnapshot.source == PriceSource.CARDMARKET,
                CardPriceSnapshot.external_product_id.in_(
                    sorted({ref.external_product_id for ref in refs})
                ),
            )
            .group_by(CardPriceSnapshot.external_product_id)
            .subquery()
        )
        snapshots: dict[str, CardPriceSnapshot] = {}
        rows = (
            db.query(CardPriceSnapshot)
            .join(
                latest_capture,
                (CardPriceSnapshot.external_product_id == latest_capture.c.external_product_id)
                & (CardPriceSnapshot.captured_at == latest_capture.c.captured_at),
            )
            .filter(CardPriceSnapshot.source == PriceSource.CARDMARKET)
            .all()
        )
        for row in rows:
            snapshots.setdefault(row.external_product_id, row)

        exact: dict[Pair, list[str]] = {}
        agnostic: dict[str, list[str]] = {}
        for ref in refs:
            if ref.language is None:
                agnostic.setdefault(ref.card_id, []).append(ref.external_product_id)
            else:
                exact.setdefault((ref.card_id, Language(ref.language)), []).append(ref.external_product_id)

        result: dict[Pair, CardPriceSnapshot] = {}
        for pair in wanted:
            candidates = exact.get(pair, []) + agnostic.get(pair[0], [])
            for external_product_id in candidates:
                snapshot = snapshots.get(external_product_id)
                if snapshot is not None:
                    result[pair] = snapshot
                    break
        return result

    def append_portfolio_snapshot(
        self, db: Session, user_id: str, totals: PortfolioTotals
    ) -> PortfolioSnapshot:
        """Append a portfolio history point. Never updates existing rows."""
        snapshot = PortfolioSnapshot(
            user_id=user_id,
            total_value_cents=totals.total_value_cents,
            total_cost_cents=totals.total_cost_cents,
            pnl_cents=totals.pnl_cents,
            captured_at=utc_now(),
        )
        db.add(snapshot)
        db.commit()
        db.refresh(snapshot)
        return snapshot

    def latest_portfolio_snapshot(self, db: Session, user_id: str) -> PortfolioSnapshot | None:
        """Most recent portfolio snapshot by capture time, or None."""
        return (
            db.query(PortfolioSnapshot)
            .filter(PortfolioSnapshot.user_id == user_id)
            .order_by(PortfolioSnapshot.captured_at.desc(), PortfolioSnapshot.id.desc())
            .first()
        )

    def portfolio_history(
        self,
        db: Session,
        user_id: str,
        since: datetime | None = None,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> Page[PortfolioSnapshot]:
        """Page through a user's portfolio snapshots, newest first.

        Raises:
            InvalidCursorError: If ``cursor`` is malformed.
        """
        query = db.query(PortfolioSnapshot).filter(PortfolioSnapshot.user_id == user_id)
        if since is not None:
            query = query.filter(PortfolioSnapshot.captured_at >= since)
        return paginate(
            query,
            PortfolioSnapshot.captured_at,
            PortfolioSnapshot.id,
            cursor,
            limit,
            sort_value=lambda row: row.captured_at,
        )
