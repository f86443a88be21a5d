"""Enumerations shared by ORM models, schemas and services."""

import enum


class Language(str, enum.Enum):
    """Printed language of a card."""

    FR = "FR"
    EN = "EN"
    JP = "JP"
    DE = "DE"
    ES = "ES"
    IT = "IT"
    OTHER = "OTHER"


class PriceSource(str, enum.Enum):
    """Tag identifying where a stored price came from.

    CARDMARKET is the reference-priced source (external product refs +
    point snapshots). TCGDEX tags every daily snapshot written by the
    snapshot job or by live resolution.
    """

    CARDMARKET = "CARDMARKET"
    TCGPLAYER = "TCGPLAYER"
    TCGDEX = "TCGDEX"


class AlertDirection(str, enum.Enum):
    DROP = "DROP"
    RISE = "RISE"


class ListingStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    RESERVED = "RESERVED"
    SOLD = "SOLD"
    ARCHIVED = "ARCHIVED"


class NotificationType(str, enum.Enum):
    PRICE_ALERT_TRIGGERED = "PRICE_ALERT_TRIGGERED"
    PURCHASE_ORDER_COMPLETED = "PURCHASE_ORDER_COMPLETED"
    LISTING_SOLD = "LISTING_SOLD"
