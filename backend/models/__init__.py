"""SQLAlchemy ORM models."""

from .card_price_snapshot import CardPriceSnapshot
from .daily_price_snapshot import DailyPriceSnapshot
from .enums import AlertDirection, Language, ListingStatus, NotificationType, PriceSource
from .external_product_ref import ExternalProductRef
from .holding import Holding
from .listing import Listing
from .listing_price_snapshot import ListingPriceSnapshot
from .notification import Notification
from .portfolio_snapshot import PortfolioSnapshot
from .price_alert import PriceAlert
from .utils import generate_uuid

__all__ = ["AlertDirection", "CardPriceSnapshot", "DailyPriceSnapshot", "ExternalProductRef", "Holding", "Language", "Listing", "ListingPriceSnapshot", "ListingStatus", "Notification", "NotificationType", "PortfolioSnapshot", "PriceAlert", "PriceSource", "generate_uuid"]
