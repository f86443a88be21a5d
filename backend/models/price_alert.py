"""PriceAlert model - user-defined stop-loss / take-profit thresholds."""

from sqlalchemy import Boolean, Column, DateTime, Enum, Index, Integer, String

from database import Base
from models.enums import AlertDirection, Language
from models.utils import generate_uuid, utc_now


class PriceAlert(Base):
    """A threshold on a card's trend price.

    Fires at most once: AlertEngine sets active=False and triggered_at when
    the threshold is crossed. Only the owner can re-arm it.
    """

    __tablename__ = "price_alerts"
    __table_args__ = (
        Index("ix_price_alerts_card_language", "card_id", "language"),
        Index("ix_price_alerts_active_direction", "active", "direction"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    card_id = Column(String, nullable=False)
    language = Column(Enum(Language, native_enum=False), nullable=False)
    threshold_cents = Column(Integer, nullable=False)
    direction = Column(Enum(AlertDirection, native_enum=False), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    triggered_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )
