"""ExternalProductRef model - maps a card to a provider's product id."""

from sqlalchemy import Column, DateTime, Enum, Index, String, UniqueConstraint

from database import Base
from models.enums import Language, PriceSource
from models.utils import generate_uuid, utc_now


class ExternalProductRef(Base):
    """Maps (card_id, language) to (source, external_product_id).

    The combination of source + external_product_id is unique. Language is
    nullable because some catalog imports are language-agnostic.
    """

    __tablename__ = "external_product_refs"
    __table_args__ = (
        UniqueConstraint(
            "source", "external_product_id", name="uix_external_product_ref_source_product"
        ),
        Index("ix_external_product_refs_card_language", "card_id", "language"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    source = Column(Enum(PriceSource, native_enum=False), nullable=False)
    card_id = Column(String, nullable=False)
    language = Column(Enum(Language, native_enum=False), nullable=True)
    external_product_id = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)
