"""CardPriceSnapshot model - point prices pulled for an external product."""

from sqlalchemy import Column, DateTime, Enum, Index, Integer, String

from database import Base
from models.enums import PriceSource
from models.utils import generate_uuid, utc_now


class CardPriceSnapshot(Base):
    """One observed price pull for an external product.

    Rows accumulate over time; readers take the latest by captured_at.
    """

    __tablename__ = "card_price_snapshots"
    __table_args__ = (
        Index("ix_card_price_snapshots_product_captured", "external_product_id", "captured_at"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    source = Column(Enum(PriceSource, native_enum=False), nullable=False)
    external_product_id = Column(String, nullable=False)
    currency = Column(String(3), nullable=False, default="EUR")
    trend_cents = Column(Integer, nullable=False)
    avg_cents = Column(Integer, nullable=True)
    low_cents = Column(Integer, nullable=True)
    captured_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
