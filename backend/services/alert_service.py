"""Service for price alert management (owner-scoped CRUD)."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from models import AlertDirection, Language, PriceAlert
from utils.pagination import Page, paginate

logger = logging.getLogger(__name__)


class AlertNotFoundError(Exception):
    """Raised when an alert id does not exist."""


class AlertForbiddenError(Exception):
    """Raised when an alert exists but belongs to another user."""


class AlertService:
    """CRUD for PriceAlert rows. Methods flush; callers commit."""

    def get_owned(self, db: Session, user_id: str, alert_id: str) -> PriceAlert:
        """Fetch an alert owned by user_id.

        Raises:
            AlertNotFoundError: No alert with that id.
            AlertForbiddenError: The alert belongs to someone else.
        """
        alert = db.query(PriceAlert).filter_by(id=alert_id).first()
        if alert is None:
            raise AlertNotFoundError(alert_id)
        if alert.user_id != user_id:
            raise AlertForbiddenError(alert_id)
        return alert

    def create(
        self,
        db: Session,
        user_id: str,
        card_id: str,
        language: Language,
        threshold_cents: int,
        direction: AlertDirection,
    ) -> PriceAlert:
        """Create an active alert for the user."""
        if threshold_cents < 0:
            raise ValueError("threshold_cents must be >= 0")
        alert = PriceAlert(
            user_id=user_id,
            card_id=card_id,
            language=Language(language),
            threshold_cents=threshold_cents,
            direction=AlertDirection(direction),
            active=True,
        )
        db.add(alert)
        db.flush()
        logger.info(
            "Created %s alert %s for user %s on %s/%s at %d",
            alert.direction.value, alert.id, user_id, card_id, alert.language.value, threshold_cents,
        )
        return alert

    def list_for_user(
        self,
        db: Session,
        user_id: str,
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
        active: Optional[bool] = None,
    ) -> Page[PriceAlert]:
        """Page through a user's alerts, newest first.

        Raises:
            InvalidCursorError: If ``cursor`` is malformed.
        """
        query = db.query(PriceAlert).filter(PriceAlert.user_id == user_id)
        if active is not None:
            query = query.filter(PriceAlert.active.is_(active))
        return paginate(
            query,
            PriceAlert.created_at,
            PriceAlert.id,
            cursor,
            limit,
            sort_value=lambda row: row.created_at,
        )

    def update(
        self,
        db: Session,
        user_id: str,
        alert_id: str,
        active: Optional[bool] = None,
        threshold_cents: Optional[int] = None,
    ) -> PriceAlert:
        """Update the mutable fields of an owned alert.

        Re-activating a triggered alert clears ``triggered_at`` so it can
        fire again.
        """
        alert = self.get_owned(db, user_id, alert_id)
        if threshold_cents is not None:
            if threshold_cents < 0:
                raise ValueError("threshold_cents must be >= 0")
            alert.threshold_cents = threshold_cents
        if active is not None:
            if active and not alert.active:
                alert.triggered_at = None
            alert.active = active
        db.flush()
        return alert

    def delete(self, db: Session, user_id: str, alert_id: str) -> None:
        """Delete an owned alert."""
        alert = self.get_owned(db, user_id, alert_id)
        db.delete(alert)
        db.flush()
        logger.info("Deleted alert %s for user %s", alert_id, user_id)
