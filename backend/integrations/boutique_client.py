"""Boutique API client - the secondary card price provider.

The Boutique backend proxies TCGdex with richer Cardmarket coverage for
recent sets. It is only consulted when the primary provider has no price.
Endpoint: GET {base}/trade/cards/{cardId}?lang={lang}
"""

import logging
from urllib.parse import quote

import httpx

from config import settings
from integrations.parsing_utils import eur_to_cents, extract_boutique_cardmarket, to_provider_lang
from integrations.price_provider_protocol import CardPriceQuote

logger = logging.getLogger(__name__)


class BoutiqueClient:
    """Fallback price provider. Every failure mode is reported as no data."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.BOUTIQUE_API_URL,
            headers={"Accept": "application/json"},
            timeout=timeout if timeout is not None else settings.BOUTIQUE_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    @property
    def provider_name(self) -> str:
        return "boutique"

    async def fetch_card_price(self, card_id: str, language: str) -> CardPriceQuote | None:
        """Fetch Cardmarket prices for a card from the Boutique API.

        Args:
            card_id: Catalog card id.
            language: Internal language code (FR, EN, JP, ...).

        Returns:
            A CardPriceQuote, or None on any failure or missing trend price.
        """
        lang = to_provider_lang(language)
        try:
            response = await self._client.get(
                f"/trade/cards/{quote(card_id, safe='')}",
                params={"lang": lang},
            )
        except httpx.HTTPError:
            logger.debug("Boutique: request failed for %s (%s)", card_id, lang, exc_info=True)
            return None

        if not response.is_success:
            logger.debug("Boutique: HTTP %d for %s (%s)", response.status_code, card_id, lang)
            return None

        try:
            body = response.json()
        except ValueError:
            logger.debug("Boutique: malformed JSON for %s (%s)", card_id, lang)
            return None

        cm = extract_boutique_cardmarket(body)
        trend_cents = eur_to_cents(cm.get("trend")) if cm else None
        if trend_cents is None:
            return None

        return CardPriceQuote(
            card_id=card_id,
            language=language,
            fetched_language=lang,
            trend_cents=trend_cents,
            low_cents=eur_to_cents(cm.get("low")),
            avg_cents=eur_to_cents(cm.get("avg")),
            high_cents=None,
            avg7_cents=eur_to_cents(cm.get("avg7")),
            avg30_cents=eur_to_cents(cm.get("avg30")),
            raw=dict(cm),
        )
