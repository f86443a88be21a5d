"""Price alert engine.

Evaluates every active PriceAlert against the latest stored TCGDEX daily
snapshot of its pair. A triggered alert is deactivated and a notification
is recorded; it is not re-armed automatically.
"""

import asyncio
import logging

from sqlalchemy.orm import Session

from database import get_session_local
from models import AlertDirection, Language, NotificationType, PriceAlert, PriceSource
from models.utils import utc_now
from schemas.job import AlertJobSummary
from services.notification_service import DatabaseNotificationSink, NotificationSink
from services.snapshot_store import SnapshotStore
from utils.single_flight import SingleFlight

logger = logging.getLogger(__name__)


def is_triggered(direction: AlertDirection, trend_cents: int, threshold_cents: int) -> bool:
    """DROP fires at or below the threshold, RISE at or above it."""
    if AlertDirection(direction) == AlertDirection.DROP:
        return trend_cents <= threshold_cents
    return trend_cents >= threshold_cents


def _format_euros(cents: int) -> str:
    return f"{cents / 100:.2f} EUR"


class AlertEngine:
    """Batch evaluator for price alerts with a per-instance single-flight guard."""

    def __init__(
        self,
        store: SnapshotStore | None = None,
        sink: NotificationSink | None = None,
    ):
        self.store = store or SnapshotStore()
        self.sink = sink or DatabaseNotificationSink()
        self._guard = SingleFlight("alert-engine")

    @property
    def is_running(self) -> bool:
        return self._guard.is_running

    async def run(
        self,
        db: Session | None = None,
        log: logging.Logger | None = None,
    ) -> AlertJobSummary:
        """Evaluate all active alerts once.

        A call made while another run is in progress returns a zero summary.

        Args:
            db: Session to use. When omitted the engine opens and closes its own.
            log: Logger for progress lines. Defaults to this module's logger.

        Returns:
            Triggered/skipped/no_data/total counts.

        Raises:
            Exception: Fatal failures (e.g. loading alerts) are logged and re-raised.
        """
        out = log or logger
        with self._guard.try_acquire() as acquired:
            if not acquired:
                out.info("Alert check already running, skipping")
                return AlertJobSummary()

            owns_session = db is None
            if owns_session:
                db = get_session_local()()
            try:
                return await asyncio.to_thread(self._evaluate, db, out)
            except Exception:
                db.rollback()
                out.exception("Alert check failed")
                raise
            finally:
                if owns_session:
                    db.close()

    def _evaluate(self, db: Session, out: logging.Logger) -> AlertJobSummary:
        alerts = db.query(PriceAlert).filter(PriceAlert.active.is_(True)).all()
        summary = AlertJobSummary(total=len(alerts))
        out.info("Alert check started: %d active alerts", len(alerts), extra={"total": len(alerts)})
        if not alerts:
            return summary

        pairs = list(dict.fromkeys((a.card_id, Language(a.language)) for a in alerts))
        latest = self.store.latest_batch(db, pairs, PriceSource.TCGDEX)

        for alert in alerts:
            snapshot = latest.get((alert.card_id, Language(alert.language)))
            if snapshot is None or snapshot.trend_cents is None:
                summary.no_data += 1
                continue

            trend_cents = snapshot.trend_cents
            if not is_triggered(alert.direction, trend_cents, alert.threshold_cents):
                summary.skipped += 1
                continue

            alert.active = False
            alert.triggered_at = utc_now()

            direction = AlertDirection(alert.direction)
            verb = "dropped" if direction == AlertDirection.DROP else "risen"
            language = Language(alert.language).value
            self.sink.notify(
                db,
                alert.user_id,
                NotificationType.PRICE_ALERT_TRIGGERED,
                "Price alert triggered",
                (
                    f"Card {alert.card_id} ({language}) has {verb} to "
                    f"{_format_euros(trend_cents)} (threshold: {_format_euros(alert.threshold_cents)})."
                ),
                {
                    "alert_id": alert.id,
                    "card_id": alert.card_id,
                    "language": language,
                    "direction": direction.value,
                    "trend_cents": trend_cents,
                    "threshold_cents": alert.threshold_cents,
                    "day": snapshot.day.isoformat(),
                },
            )
            db.commit()

            summary.triggered += 1
            out.info(
                "Alert %s triggered: %s/%s %s trend=%d threshold=%d",
                alert.id, alert.card_id, language, direction.value,
                trend_cents, alert.threshold_cents,
            )

        out.info(
            "Alert check completed: triggered=%d skipped=%d no_data=%d total=%d",
            summary.triggered, summary.skipped, summary.no_data, summary.total,
            extra=summary.model_dump(),
        )
        return summary
