"""Holding model - a user's owned quantity of a card."""

from sqlalchemy import Column, DateTime, Enum, Integer, String, UniqueConstraint

from database import Base
from models.enums import Language
from models.utils import generate_uuid, utc_now


class Holding(Base):
    """A user's owned quantity of one (card, language, condition) triple.

    Written by collection management; read-only to the pricing core.
    """

    __tablename__ = "holdings"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "card_id", "language", "condition",
            name="uix_holding_user_card_language_condition",
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    card_id = Column(String, nullable=False)
    language = Column(Enum(Language, native_enum=False), nullable=False)
    condition = Column(String, nullable=False, default="NM")
    quantity = Column(Integer, nullable=False, default=0)
    acquisition_price_cents = Column(Integer, nullable=True)  # Per-unit cost
    acquisition_currency = Column(String(3), nullable=True, default="EUR")
    card_name = Column(String, nullable=True)
    set_code = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
