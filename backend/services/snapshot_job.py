"""Daily price snapshot job.

Fetches the primary provider's price for every (card_id, language) pair
worth tracking and upserts today's TCGDEX DailyPriceSnapshot. Triggered by
the scheduler (startup catch-up + daily cron), the jobs API and the
``scripts.run_snapshot_job`` command.
"""

import asyncio
import logging

from sqlalchemy.orm import Session

from config import settings
from database import get_session_local
from integrations.price_provider_protocol import CardPriceProvider
from integrations.tcgdex_client import TcgdexClient
from models import ExternalProductRef, Holding, Language, Listing, ListingStatus, PriceSource
from schemas.job import SnapshotJobSummary
from services.price_resolver import quote_to_fields
from services.snapshot_store import Pair, SnapshotStore
from utils.dates import utc_today
from utils.single_flight import SingleFlight

logger = logging.getLogger(__name__)

PRICED_LISTING_STATUSES = (ListingStatus.PUBLISHED, ListingStatus.SOLD)


def collect_card_pairs(db: Session) -> list[Pair]:
    """Discover the pairs to snapshot, deduplicated, in discovery order.

    Holdings and published/sold listings are collected first; only when
    both yield nothing are all ExternalProductRef pairs used (language-less
    refs count as FR).
    """
    seen: set[Pair] = set()
    pairs: list[Pair] = []

    def add(card_id: str | None, language: Language | str | None) -> None:
        if not card_id:
            return
        key = (card_id, Language(language or Language.FR))
        if key in seen:
            return
        seen.add(key)
        pairs.append(key)

    for card_id, language in db.query(Holding.card_id, Holding.language).distinct().all():
        add(card_id, language)

    listing_rows = (
        db.query(Listing.card_id, Listing.language)
        .filter(Listing.status.in_(PRICED_LISTING_STATUSES), Listing.card_id.isnot(None))
        .distinct()
        .all()
    )
    for card_id, language in listing_rows:
        add(card_id, language)

    if not pairs:
        for card_id, language in db.query(ExternalProductRef.card_id, ExternalProductRef.language).all():
            add(card_id, language)

    return pairs


class SnapshotJobRunner:
    """Sequential, paced snapshot job with a per-instance single-flight guard."""

    def __init__(
        self,
        provider: CardPriceProvider | None = None,
        store: SnapshotStore | None = None,
        delay_seconds: float | None = None,
    ):
        self.provider = provider
        self.store = store or SnapshotStore()
        self.delay_seconds = (
            delay_seconds if delay_seconds is not None else settings.SNAPSHOT_JOB_DELAY_SECONDS
        )
        self._guard = SingleFlight("snapshot-job")

    @property
    def is_running(self) -> bool:
        return self._guard.is_running

    async def run(
        self,
        db: Session | None = None,
        log: logging.Logger | None = None,
    ) -> SnapshotJobSummary:
        """Run the job once.

        A call made while another run is in progress returns a zero summary
        immediately.

        Args:
            db: Session to use. When omitted the runner opens and closes its own.
            log: Logger for progress lines. Defaults to this module's logger.

        Returns:
            Success/skipped/failed/total counts.

        Raises:
            Exception: Pair discovery failures abort the run and propagate.
        """
        out = log or logger
        with self._guard.try_acquire() as acquired:
            if not acquired:
                out.info("Snapshot job already running, skipping concurrent execution")
                return SnapshotJobSummary()

            owns_session = db is None
            if owns_session:
                db = get_session_local()()
            provider = self.provider
            owns_provider = provider is None
            if owns_provider:
                provider = TcgdexClient()
            try:
                return await self._run(db, provider, out)
            finally:
                if owns_provider:
                    await provider.aclose()
                if owns_session:
                    db.close()

    async def _run(self, db: Session, provider: CardPriceProvider, out: logging.Logger) -> SnapshotJobSummary:
        day = utc_today()
        out.info("Starting daily price snapshot for %s", day.isoformat())

        try:
            pairs = await asyncio.to_thread(collect_card_pairs, db)
        except Exception:
            out.exception("Snapshot job failed to collect card pairs")
            raise

        summary = SnapshotJobSummary(total=len(pairs))
        out.info("%d card/language pairs to process", len(pairs), extra={"count": len(pairs)})
        if not pairs:
            out.info("No cards to process. Done.")
            return summary

        for index, (card_id, language) in enumerate(pairs):
            try:
                quote = await provider.fetch_card_price(card_id, language.value)
                if quote is None:
                    summary.skipped += 1
                else:
                    await asyncio.to_thread(
                        self.store.upsert_daily_snapshot,
                        db,
                        card_id,
                        language,
                        PriceSource.TCGDEX,
                        day,
                        quote_to_fields(quote, provider.provider_name, PriceSource.TCGDEX),
                    )
                    summary.success += 1
            except Exception as e:
                db.rollback()
                summary.failed += 1
                out.error(
                    "Snapshot failed for %s/%s: %s", card_id, language.value, e,
                    extra={"card_id": card_id, "language": language.value},
                )

            if index < len(pairs) - 1 and self.delay_seconds > 0:
                await asyncio.sleep(self.delay_seconds)

        out.info(
            "Done. success=%d skipped=%d failed=%d total=%d",
            summary.success, summary.skipped, summary.failed, summary.total,
            extra=summary.model_dump(),
        )
        return summary
