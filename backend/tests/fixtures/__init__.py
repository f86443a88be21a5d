"""Test fixtures and sample data."""
from datetime import date, datetime, timezone

import pytest
from sqlalchemy.orm import Session

from models import (
    AlertDirection,
    CardPriceSnapshot,
    DailyPriceSnapshot,
    ExternalProductRef,
    Holding,
    Language,
    Listing,
    ListingStatus,
    PriceAlert,
    PriceSource,
)


def create_holding(
    db: Session,
    user_id: str,
    card_id: str,
    language: Language = Language.FR,
    quantity: int = 1,
    acquisition_price_cents: int | None = None,
    condition: str = "NM",
    card_name: str | None = None,
) -> Holding:
    """Create a Holding row (flushed, not committed)."""
    holding = Holding(
        user_id=user_id,
        card_id=card_id,
        language=language,
        condition=condition,
        quantity=quantity,
        acquisition_price_cents=acquisition_price_cents,
        card_name=card_name,
    )
    db.add(holding)
    db.flush()
    return holding


def create_daily_snapshot(
    db: Session,
    card_id: str,
    language: Language = Language.FR,
    day: date | None = None,
    trend_cents: int | None = 1000,
    source: PriceSource = PriceSource.TCGDEX,
    **price_fields,
) -> DailyPriceSnapshot:
    """Create a DailyPriceSnapshot row directly (bypassing the upsert)."""
    snapshot = DailyPriceSnapshot(
        card_id=card_id,
        language=language,
        source=source,
        day=day or datetime.now(timezone.utc).date(),
        trend_cents=trend_cents,
        **price_fields,
    )
    db.add(snapshot)
    db.flush()
    return snapshot


def create_reference_price(
    db: Session,
    card_id: str,
    language: Language | None = Language.FR,
    trend_cents: int = 1000,
    external_product_id: str | None = None,
    captured_at: datetime | None = None,
) -> CardPriceSnapshot:
    """Create a CARDMARKET ExternalProductRef (if needed) plus a point snapshot."""
    external_product_id = external_product_id or f"cm-{card_id}-{language.value if language else 'any'}"
    ref = (
        db.query(ExternalProductRef)
        .filter_by(source=PriceSource.CARDMARKET, external_product_id=external_product_id)
        .first()
    )
    if ref is None:
        db.add(
            ExternalProductRef(
                source=PriceSource.CARDMARKET,
                card_id=card_id,
                language=language,
                external_product_id=external_product_id,
            )
        )
    snapshot = CardPriceSnapshot(
        source=PriceSource.CARDMARKET,
        external_product_id=external_product_id,
        trend_cents=trend_cents,
        captured_at=captured_at or datetime.now(timezone.utc),
    )
    db.add(snapshot)
    db.flush()
    return snapshot


def create_listing(
    db: Session,
    card_id: str | None,
    price_cents: int,
    language: Language = Language.FR,
    status: ListingStatus = ListingStatus.PUBLISHED,
    user_id: str = "seller-1",
) -> Listing:
    """Create a marketplace Listing row."""
    listing = Listing(
        user_id=user_id,
        title=f"Listing {card_id}",
        card_id=card_id,
        language=language,
        price_cents=price_cents,
        status=status,
    )
    db.add(listing)
    db.flush()
    return listing


def create_alert(
    db: Session,
    user_id: str,
    card_id: str,
    threshold_cents: int,
    direction: AlertDirection = AlertDirection.DROP,
    language: Language = Language.FR,
    active: bool = True,
    created_at: datetime | None = None,
) -> PriceAlert:
    """Create a PriceAlert row."""
    alert = PriceAlert(
        user_id=user_id,
        card_id=card_id,
        language=language,
        threshold_cents=threshold_cents,
        direction=direction,
        active=active,
    )
    if created_at is not None:
        alert.created_at = created_at
    db.add(alert)
    db.flush()
    return alert


@pytest.fixture
def holding(db: Session) -> Holding:
    """A single priced-cost holding for user-1."""
    h = create_holding(db, "user-1", "sv03.5-151", quantity=2, acquisition_price_cents=300)
    db.commit()
    return h


@pytest.fixture
def price_alert(db: Session) -> PriceAlert:
    """An active DROP alert for user-1 at 5.00 EUR."""
    alert = create_alert(db, "user-1", "sv03.5-151", threshold_cents=500)
    db.commit()
    return alert
