"""Price resolver - unit value for a (card, language) pair with source fallback.

Resolution order, first hit wins:

1. Reference price: CARDMARKET ExternalProductRef + latest CardPriceSnapshot.
2. Stored daily snapshot (TCGDEX tag).
3. Live primary provider fetch (TCGdex, with its English fallback).
4. Live secondary provider fetch (Boutique).

Steps 3 and 4 only run when ``live`` is requested. Any live hit is written
back as today's TCGDEX daily snapshot so later non-live reads find it.
"""

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from config import settings
from integrations.boutique_client import BoutiqueClient
from integrations.exceptions import ProviderError
from integrations.price_provider_protocol import CardPriceProvider, CardPriceQuote
from integrations.tcgdex_client import TcgdexClient
from models import Language, PriceSource
from schemas.pricing import PriceFields, PriceResolution, RawPricePayload
from services.snapshot_store import Pair, SnapshotStore
from utils.best_effort import best_effort
from utils.dates import utc_today

logger = logging.getLogger(__name__)


@dataclass
class _LiveHit:
    quote: CardPriceQuote
    provider_name: str
    resolution: str


def quote_to_fields(quote: CardPriceQuote, provider_name: str, source: PriceSource) -> PriceFields:
    """Convert a provider quote into daily snapshot columns."""
    return PriceFields(
        trend_cents=quote.trend_cents,
        low_cents=quote.low_cents,
        avg_cents=quote.avg_cents,
        high_cents=quote.high_cents,
        avg7_cents=quote.avg7_cents,
        avg30_cents=quote.avg30_cents,
        raw_payload=RawPricePayload(
            source=source,
            provider=provider_name,
            fetched_language=quote.fetched_language,
            data=quote.raw,
        ),
    )


class PriceResolver:
    """Resolves unit values from stored prices, optionally falling back to live providers."""

    def __init__(
        self,
        primary: CardPriceProvider | None = None,
        secondary: CardPriceProvider | None = None,
        store: SnapshotStore | None = None,
        max_live_calls: int | None = None,
    ):
        """Initialize with optional collaborators for dependency injection.

        Args:
            primary: Primary live provider. Defaults to a TcgdexClient.
            secondary: Secondary live provider. Defaults to a BoutiqueClient.
            store: Snapshot store. Defaults to a new SnapshotStore.
            max_live_calls: Cap on live lookups per resolve_many call.
                            Defaults to settings.MAX_LIVE_PRICE_CALLS.
        """
        self._owns_clients = primary is None and secondary is None
        self.primary = primary if primary is not None else TcgdexClient()
        self.secondary = secondary if secondary is not None else BoutiqueClient()
        self.store = store or SnapshotStore()
        self.max_live_calls = (
            max_live_calls if max_live_calls is not None else settings.MAX_LIVE_PRICE_CALLS
        )

    async def aclose(self) -> None:
        """Close provider clients created by this resolver."""
        if not self._owns_clients:
            return
        for client in (self.primary, self.secondary):
            close = getattr(client, "aclose", None)
            if close is not None:
                await close()

    def resolve_stored(self, db: Session, card_id: str, language: Language | str) -> PriceResolution | None:
        """Resolve from stored data only (steps 1 and 2)."""
        reference = self.store.latest_card_price(db, card_id, language)
        if reference is not None:
            return PriceResolution(
                unit_value_cents=reference.trend_cents,
                source=PriceSource.CARDMARKET,
                resolution="reference",
            )

        snapshot = self.store.latest_daily_snapshot(db, card_id, language, PriceSource.TCGDEX)
        if snapshot is not None and snapshot.trend_cents is not None:
            return PriceResolution(
                unit_value_cents=snapshot.trend_cents,
                source=PriceSource.TCGDEX,
                resolution="snapshot",
            )
        return None

    def resolve_stored_many(self, db: Session, pairs: list[Pair]) -> dict[Pair, PriceResolution | None]:
        """Steps 1 and 2 for many pairs with a fixed number of queries."""
        references = self.store.latest_card_price_batch(db, pairs)
        unresolved = [pair for pair in pairs if pair not in references]
        latest = self.store.latest_batch(db, unresolved, PriceSource.TCGDEX)

        results: dict[Pair, PriceResolution | None] = {}
        for pair in pairs:
            reference = references.get(pair)
            snapshot = latest.get(pair)
            if reference is not None:
                results[pair] = PriceResolution(
                    unit_value_cents=reference.trend_cents,
                    source=PriceSource.CARDMARKET,
                    resolution="reference",
                )
            elif snapshot is not None and snapshot.trend_cents is not None:
                results[pair] = PriceResolution(
                    unit_value_cents=snapshot.trend_cents,
                    source=PriceSource.TCGDEX,
                    resolution="snapshot",
                )
            else:
                results[pair] = None
        return results

    async def resolve(
        self,
        db: Session,
        card_id: str,
        language: Language | str,
        live: bool = False,
    ) -> PriceResolution | None:
        """Resolve a unit value for one pair.

        Upstream misses (timeouts, 404s, protocol errors) never raise; they
        fall through to the next step.

        Args:
            db: Database session.
            card_id: Catalog card id.
            language: Card language.
            live: Whether to call upstream providers when stored data misses.

        Returns:
            The resolution, or None if no step produced a price.
        """
        language = Language(language)
        stored = await asyncio.to_thread(self.resolve_stored, db, card_id, language)
        if stored is not None or not live:
            return stored

        hit = await self._fetch_live(card_id, language)
        if hit is None:
            return None
        await asyncio.to_thread(self._persist_live_hit, db, card_id, language, hit)
        return PriceResolution(
            unit_value_cents=hit.quote.trend_cents,
            source=PriceSource.TCGDEX,
            resolution=hit.resolution,
        )

    async def resolve_many(
        self,
        db: Session,
        pairs: list[Pair],
        live: bool = False,
    ) -> dict[Pair, PriceResolution | None]:
        """Resolve many pairs, each once.

        Stored data is read for every pair. When ``live`` is set, at most
        ``max_live_calls`` of the remaining pairs are fetched concurrently;
        the rest stay unresolved.

        Returns:
            Mapping of every distinct input pair to its resolution (or None).
        """
        distinct: list[Pair] = []
        for card_id, language in pairs:
            key = (card_id, Language(language))
            if key not in distinct:
                distinct.append(key)

        results = await asyncio.to_thread(self.resolve_stored_many, db, distinct)
        still_missing = [pair for pair, resolution in results.items() if resolution is None]

        if not live or not still_missing:
            return results

        to_fetch = still_missing[: self.max_live_calls]
        if len(still_missing) > len(to_fetch):
            logger.info(
                "Live pricing capped: %d of %d unpriced pairs fetched",
                len(to_fetch), len(still_missing),
            )

        hits = await asyncio.gather(
            *(self._fetch_live_safe(card_id, language) for card_id, language in to_fetch)
        )

        hit_count = 0
        for (card_id, language), hit in zip(to_fetch, hits):
            if hit is None:
                continue
            hit_count += 1
            await asyncio.to_thread(self._persist_live_hit, db, card_id, language, hit)
            results[(card_id, language)] = PriceResolution(
                unit_value_cents=hit.quote.trend_cents,
                source=PriceSource.TCGDEX,
                resolution=hit.resolution,
            )

        logger.info(
            "Live pricing: requested=%d hits=%d misses=%d",
            len(to_fetch), hit_count, len(to_fetch) - hit_count,
        )
        return results

    async def _fetch_from(
        self, provider: CardPriceProvider, card_id: str, language: Language
    ) -> CardPriceQuote | None:
        try:
            return await provider.fetch_card_price(card_id, language.value)
        except ProviderError as e:
            logger.warning(
                "Live price fetch from %s failed for %s (%s): %s",
                provider.provider_name, card_id, language.value, e,
            )
            return None

    async def _fetch_live(self, card_id: str, language: Language) -> _LiveHit | None:
        """Steps 3 and 4: primary provider, then secondary provider."""
        quote = await self._fetch_from(self.primary, card_id, language)
        if quote is not None:
            return _LiveHit(quote=quote, provider_name=self.primary.provider_name, resolution="live")

        quote = await self._fetch_from(self.secondary, card_id, language)
        if quote is not None:
            return _LiveHit(
                quote=quote, provider_name=self.secondary.provider_name, resolution="live_fallback"
            )
        return None

    async def _fetch_live_safe(self, card_id: str, language: Language) -> _LiveHit | None:
        """_fetch_live for batch use: any exception is a miss."""
        try:
            return await self._fetch_live(card_id, language)
        except Exception:
            logger.warning(
                "Live price lookup crashed for %s (%s)", card_id, language.value, exc_info=True
            )
            return None

    def _persist_live_hit(self, db: Session, card_id: str, language: Language, hit: _LiveHit) -> None:
        best_effort(
            f"persist live price {card_id}/{language.value}",
            lambda: self.store.upsert_daily_snapshot(
                db,
                card_id,
                language,
                PriceSource.TCGDEX,
                utc_today(),
                quote_to_fields(hit.quote, hit.provider_name, PriceSource.TCGDEX),
            ),
            db=db,
            log=logger,
        )
