"""Notification model - in-app notifications queued for delivery."""

from sqlalchemy import JSON, Column, DateTime, Enum, String, Text

from database import Base
from models.enums import NotificationType
from models.utils import generate_uuid, utc_now


class Notification(Base):
    """A notification addressed to a user. Delivery happens elsewhere."""

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    type = Column(Enum(NotificationType, native_enum=False), nullable=False)
    title = Column(String, nullable=False)
    body = Column(Text, nullable=False)
    data_json = Column(JSON, nullable=True)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
