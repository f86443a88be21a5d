"""TCGdex client - the primary card price provider.

API docs: https://tcgdex.dev
Card detail endpoint: GET {base}/{lang}/cards/{cardId}
"""

import logging
from urllib.parse import quote

import httpx

from config import settings
from integrations.exceptions import ProviderAPIError, ProviderConnectionError, ProviderDataError
from integrations.parsing_utils import eur_to_cents, extract_cardmarket, to_provider_lang
from integrations.price_provider_protocol import CardDetails, CardPriceQuote

logger = logging.getLogger(__name__)

FALLBACK_LANG = "en"


class TcgdexClient:
    """Fetches Cardmarket prices embedded in TCGdex card details.

    Cardmarket prices are EUR-denominated and language-agnostic, but TCGdex
    sometimes only indexes the Cardmarket product under the English
    endpoint (notably for recent sets). ``fetch_card_price`` therefore
    retries once against ``en`` when the card's own language has no price.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root. Defaults to settings.TCGDEX_BASE_URL.
            timeout: Per-call timeout in seconds. Defaults to
                     settings.TCGDEX_TIMEOUT_SECONDS.
            transport: Optional httpx transport (tests use MockTransport).
        """
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.TCGDEX_BASE_URL,
            headers={"Accept": "application/json"},
            timeout=timeout if timeout is not None else settings.TCGDEX_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    @property
    def provider_name(self) -> str:
        return "tcgdex"

    async def _get_card(self, card_id: str, lang: str) -> httpx.Response | None:
        """GET the card detail document. Returns None on timeout/network failure."""
        path = f"/{lang}/cards/{quote(card_id, safe='')}"
        try:
            return await self._client.get(path)
        except httpx.TimeoutException:
            logger.debug("TCGdex: timeout for %s (%s)", card_id, lang)
            return None
        except httpx.TransportError:
            logger.debug("TCGdex: network error for %s (%s)", card_id, lang, exc_info=True)
            return None

    async def _fetch_price_for_lang(
        self, card_id: str, lang: str, language: str
    ) -> CardPriceQuote | None:
        """Fetch prices for one provider language code.

        Returns None on 404, timeout, or a payload without a trend price.

        Raises:
            ProviderAPIError: Non-2xx response other than 404.
            ProviderDataError: Body is not valid JSON.
        """
        response = await self._get_card(card_id, lang)
        if response is None:
            return None

        if response.status_code == 404:
            logger.debug("TCGdex: card not found (404) %s (%s)", card_id, lang)
            return None
        if response.is_error:
            raise ProviderAPIError(
                f"TCGdex API error: {response.status_code} {response.reason_phrase}",
                provider_name=self.provider_name,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderDataError(
                f"TCGdex returned malformed JSON for {card_id} ({lang})",
                provider_name=self.provider_name,
            ) from e

        cm = extract_cardmarket(data)
        trend_cents = eur_to_cents(cm.get("trend")) if cm else None
        if trend_cents is None:
            logger.debug(
                "TCGdex: no cardmarket pricing for %s (%s), has_cardmarket=%s",
                card_id, lang, cm is not None,
            )
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

    async def fetch_card_price(self, card_id: str, language: str) -> CardPriceQuote | None:
        """Fetch a card's Cardmarket prices, falling back to the English endpoint.

        Args:
            card_id: Catalog card id.
            language: Internal language code (FR, EN, JP, ...).

        Returns:
            A CardPriceQuote, or None if no language has a usable price.
        """
        primary_lang = to_provider_lang(language)

        result = await self._fetch_price_for_lang(card_id, primary_lang, language)
        if result is not None or primary_lang == FALLBACK_LANG:
            return result

        fallback = await self._fetch_price_for_lang(card_id, FALLBACK_LANG, language)
        if fallback is not None:
            logger.debug(
                "TCGdex: pricing found via %s fallback for %s (primary %s)",
                FALLBACK_LANG, card_id, primary_lang,
            )
        return fallback

    async def fetch_card_details(self, card_id: str, language: str) -> CardDetails | None:
        """Fetch card metadata (name, image URL, set).

        Returns None if the card is not found.

        Raises:
            ProviderConnectionError: Timeout or network failure.
            ProviderAPIError: Non-2xx response other than 404.
            ProviderDataError: Body is not valid JSON.
        """
        lang = to_provider_lang(language)
        path = f"/{lang}/cards/{quote(card_id, safe='')}"
        try:
            response = await self._client.get(path)
        except httpx.TransportError as e:
            raise ProviderConnectionError(
                f"TCGdex request failed for {card_id} ({lang}): {e}",
                provider_name=self.provider_name,
            ) from e

        if response.status_code == 404:
            return None
        if response.is_error:
            raise ProviderAPIError(
                f"TCGdex API error: {response.status_code} {response.reason_phrase}",
                provider_name=self.provider_name,
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise ProviderDataError(
                f"TCGdex returned malformed JSON for {card_id} ({lang})",
                provider_name=self.provider_name,
            ) from e

        image_base = data.get("image") or None
        card_set = data.get("set") if isinstance(data.get("set"), dict) else {}
        return CardDetails(
            card_id=data.get("id", card_id),
            name=data.get("name"),
            image=f"{image_base}/low.webp" if image_base else None,
            set_code=card_set.get("id"),
            set_name=card_set.get("name"),
        )
