"""Shared parsing utilities for price provider clients.

Centralises the payload handling both providers need: euro-to-cents
conversion, language code mapping and locating the Cardmarket block.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

# Internal language code -> provider language code
PROVIDER_LANG_MAP: dict[str, str] = {
    "FR": "fr",
    "EN": "en",
    "JP": "ja",
    "DE": "de",
    "ES": "es",
    "IT": "it",
}

DEFAULT_PROVIDER_LANG = "fr"


def to_provider_lang(language: str) -> str:
    """Map an internal language code to the providers' lowercase code.

    Unknown codes (including OTHER) map to French, the catalog's
    default language.
    """
    return PROVIDER_LANG_MAP.get(str(language).upper(), DEFAULT_PROVIDER_LANG)


def eur_to_cents(value: Any) -> int | None:
    """Convert a decimal euro amount to integer cents.

    Rounds half up. Returns None for missing, non-numeric or NaN values.

    Args:
        value: A number (or numeric string) in major currency units.

    Returns:
        The amount in cents, or None if the value is unusable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def extract_cardmarket(payload: Any) -> dict[str, Any] | None:
    """Locate the Cardmarket price block in a TCGdex card detail payload.

    Newer responses nest it under ``pricing.cardmarket``; older ones expose
    ``cardmarket`` at the top level.
    """
    if not isinstance(payload, dict):
        return None
    pricing = payload.get("pricing")
    cm = pricing.get("cardmarket") if isinstance(pricing, dict) else None
    if cm is None:
        cm = payload.get("cardmarket")
    if not isinstance(cm, dict):
        return None
    return cm


def extract_boutique_cardmarket(payload: Any) -> dict[str, Any] | None:
    """Locate ``data.marketPricing.sources.cardmarket.normal`` in a Boutique payload."""
    node = payload
    for key in ("data", "marketPricing", "sources", "cardmarket", "normal"):
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    if not isinstance(node, dict):
        return None
    return node
