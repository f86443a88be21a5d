"""DailyPriceSnapshot model - one price point per card/language/source/day."""

from sqlalchemy import JSON, Column, Date, DateTime, Enum, Index, Integer, String, UniqueConstraint

from database import Base
from models.enums import Language, PriceSource
from models.utils import generate_uuid, utc_now


class DailyPriceSnapshot(Base):
    """Daily market price for a (card, language) pair from one source.

    Exactly one row exists per (card_id, language, source, day). Writers
    must upsert on that key (see SnapshotStore.upsert_daily_snapshot).
    """

    __tablename__ = "daily_price_snapshots"
    __table_args__ = (
        UniqueConstraint(
            "card_id", "language", "source", "day",
            name="uix_daily_price_snapshot",
        ),
        Index("ix_daily_price_snapshots_card_language_day", "card_id", "language", "day"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    card_id = Column(String, nullable=False)
    language = Column(Enum(Language, native_enum=False), nullable=False)
    source = Column(Enum(PriceSource, native_enum=False), nullable=False)
    day = Column(Date, nullable=False)  # UTC calendar day
    captured_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    trend_cents = Column(Integer, nullable=True)
    low_cents = Column(Integer, nullable=True)
    avg_cents = Column(Integer, nullable=True)
    high_cents = Column(Integer, nullable=True)
    avg7_cents = Column(Integer, nullable=True)
    avg30_cents = Column(Integer, nullable=True)
    raw_payload = Column(JSON, nullable=True)  # Serialized RawPricePayload
