"""PortfolioSnapshot model - append-only history of portfolio totals."""

from sqlalchemy import Column, DateTime, Index, Integer, String

from database import Base
from models.utils import generate_uuid, utc_now


class PortfolioSnapshot(Base):
    """Portfolio totals for a user at a point in time. Never updated."""

    __tablename__ = "portfolio_snapshots"
    __table_args__ = (
        Index("ix_portfolio_snapshots_user_captured", "user_id", "captured_at"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), nullable=False)
    total_value_cents = Column(Integer, nullable=False)
    total_cost_cents = Column(Integer, nullable=False)
    pnl_cents = Column(Integer, nullable=False)
    captured_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
