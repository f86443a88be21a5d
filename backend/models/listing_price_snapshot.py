"""ListingPriceSnapshot model - daily asked-price aggregate from listings."""

from sqlalchemy import Column, Date, DateTime, Enum, Integer, String, UniqueConstraint

from database import Base
from models.enums import Language
from models.utils import generate_uuid, utc_now


class ListingPriceSnapshot(Base):
    """Median/min/max asked price and volume of published listings for a day."""

    __tablename__ = "listing_price_snapshots"
    __table_args__ = (
        UniqueConstraint(
            "card_id", "language", "day", name="uix_listing_price_snapshot"
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    card_id = Column(String, nullable=False, index=True)
    language = Column(Enum(Language, native_enum=False), nullable=False)
    day = Column(Date, nullable=False)
    median_price_cents = Column(Integer, nullable=False)
    min_price_cents = Column(Integer, nullable=False)
    max_price_cents = Column(Integer, nullable=False)
    volume = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)
