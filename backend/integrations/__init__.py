"""External API integrations.

This package contains:
- Price provider protocol: Common interface for upstream price providers
- TCGdex client: Primary provider (Cardmarket prices per card/language)
- Boutique client: Secondary provider, consulted only as a last resort
"""

from integrations.boutique_client import BoutiqueClient
from integrations.price_provider_protocol import CardDetails, CardPriceProvider, CardPriceQuote
from integrations.tcgdex_client import TcgdexClient

__all__ = [
    "BoutiqueClient",
    "CardDetails",
    "CardPriceProvider",
    "CardPriceQuote",
    "TcgdexClient",
]
