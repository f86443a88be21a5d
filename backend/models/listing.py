"""Listing model - marketplace offers, read for pair discovery and asked prices."""

from sqlalchemy import Column, DateTime, Enum, Integer, String

from database import Base
from models.enums import Language, ListingStatus
from models.utils import generate_uuid, utc_now


class Listing(Base):
    """A marketplace listing.

    Managed by the marketplace domain. The pricing core only reads
    card_id/language/status/price_cents.
    """

    __tablename__ = "listings"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    title = Column(String, nullable=False, default="")
    card_id = Column(String, nullable=True, index=True)  # Free-form listings have no card
    language = Column(Enum(Language, native_enum=False), nullable=False)
    condition = Column(String, nullable=False, default="NM")
    quantity = Column(Integer, nullable=False, default=1)
    price_cents = Column(Integer, nullable=False)
    status = Column(
        Enum(ListingStatus, native_enum=False),
        nullable=False,
        default=ListingStatus.DRAFT,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), default=utc_now)
    sold_at = Column(DateTime(timezone=True), nullable=True)
