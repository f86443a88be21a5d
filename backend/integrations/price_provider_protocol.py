"""Card price provider protocol definitions.

Defines the interface shared by the primary (TCGdex) and secondary
(Boutique) upstream price providers.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass
class CardPriceQuote:
    """Cardmarket prices for one card, converted to integer euro cents."""

    card_id: str
    language: str  # Internal language code the caller asked for (e.g. "FR")
    fetched_language: str  # Provider language code that answered (e.g. "en")
    trend_cents: int
    low_cents: int | None = None
    avg_cents: int | None = None
    high_cents: int | None = None
    avg7_cents: int | None = None
    avg30_cents: int | None = None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass
class CardDetails:
    """Card metadata used by the inventory selector."""

    card_id: str
    name: str | None
    image: str | None
    set_code: str | None
    set_name: str | None


class CardPriceProvider(Protocol):
    """Protocol for upstream card price providers.

    Implementations return ``None`` for any "no data" outcome (not found,
    timeout, payload without a trend price).
    """

    @property
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'tcgdex')."""
        ...

    async def fetch_card_price(self, card_id: str, language: str) -> CardPriceQuote | None:
        """Fetch current Cardmarket prices for a card.

        Args:
            card_id: Catalog card id (e.g. "sv03.5-151").
            language: Internal language code (FR, EN, JP, ...).

        Returns:
            A CardPriceQuote, or None when the provider has no usable price.
        """
        ...
