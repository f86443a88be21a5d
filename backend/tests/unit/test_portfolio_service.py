"""Tests for PortfolioService."""

import asyncio
from datetime import date

import pytest

from models import Language, PortfolioSnapshot, PriceSource
from services.portfolio_service import PortfolioService, roi_percent
from tests.fixtures import create_daily_snapshot, create_holding, create_reference_price
from tests.fixtures.mocks import make_quote


@pytest.fixture
def service(resolver):
    return PortfolioService(resolver=resolver, store=resolver.store)


def _compute(service, db, user_id="user-1", live=False):
    return asyncio.run(service.compute_portfolio(db, user_id, live=live))


class TestRoiPercent:
    def test_one_decimal(self):
        assert roi_percent(400, 600) == 66.7
        assert roi_percent(-50, 300) == -16.7

    def test_no_cost(self):
        assert roi_percent(100, 0) is None
        assert roi_percent(100, None) is None
        assert roi_percent(None, 100) is None


class TestComputePortfolio:
    def test_empty(self, db, service):
        value = _compute(service, db)
        assert value.total_value_cents == 0
        assert value.total_cost_cents == 0
        assert value.pnl_cents == 0
        assert value.item_count == 0
        assert value.breakdown == []

    def test_unpriced_cost_counts_toward_cost_but_not_pnl(self, db, service):
        create_holding(db, "user-1", "priced", quantity=2, acquisition_price_cents=300)
        create_holding(db, "user-1", "unpriced", quantity=1, acquisition_price_cents=1000)
        create_daily_snapshot(db, "priced", trend_cents=500)
        db.commit()

        value = _compute(service, db)

        assert value.total_value_cents == 1000
        assert value.total_cost_cents == 1600
        assert value.pnl_cents == 400
        assert value.item_count == 2
        assert value.valued_count == 1
        assert value.missing_count == 1

    def test_priced_without_cost_adds_value_only(self, db, service):
        create_holding(db, "user-1", "gift", quantity=3, acquisition_price_cents=None)
        create_daily_snapshot(db, "gift", trend_cents=100)
        db.commit()

        value = _compute(service, db)

        assert value.total_value_cents == 300
        assert value.total_cost_cents == 0
        assert value.pnl_cents == 0
        item = value.breakdown[0]
        assert item.pnl_cents is None
        assert item.roi_percent is None

    def test_item_breakdown(self, db, service):
        create_holding(db, "user-1", "c1", quantity=2, acquisition_price_cents=300, card_name="Mew ex")
        create_reference_price(db, "c1", trend_cents=500)
        db.commit()

        item = _compute(service, db).breakdown[0]

        assert item.card_name == "Mew ex"
        assert item.unit_value_cents == 500
        assert item.total_value_cents == 1000
        assert item.unit_cost_cents == 300
        assert item.total_cost_cents == 600
        assert item.pnl_cents == 400
        assert item.roi_percent == 66.7
        assert item.source == PriceSource.CARDMARKET

    def test_breakdown_sorted(self, db, service):
        create_holding(db, "user-1", "cheap", acquisition_price_cents=10)
        create_holding(db, "user-1", "dear", acquisition_price_cents=10)
        create_holding(db, "user-1", "unpriced-small", acquisition_price_cents=50)
        create_holding(db, "user-1", "unpriced-big", acquisition_price_cents=5000)
        create_daily_snapshot(db, "cheap", trend_cents=100)
        create_daily_snapshot(db, "dear", trend_cents=900)
        db.commit()

        order = [item.card_id for item in _compute(service, db).breakdown]

        assert order == ["dear", "cheap", "unpriced-big", "unpriced-small"]

    def test_pair_resolved_once_for_many_holdings(self, db, service, primary_provider):
        create_holding(db, "user-1", "c1", condition="NM", quantity=1)
        create_holding(db, "user-1", "c1", condition="EX", quantity=2)
        db.commit()
        primary_provider.prices[("c1", "FR")] = make_quote("c1", trend_cents=100)

        value = _compute(service, db, live=True)

        assert primary_provider.calls == [("c1", "FR")]
        assert value.total_value_cents == 300

    def test_languages_priced_separately(self, db, service):
        create_holding(db, "user-1", "c1", language=Language.FR)
        create_holding(db, "user-1", "c1", language=Language.JP)
        create_daily_snapshot(db, "c1", Language.FR, trend_cents=100)
        create_daily_snapshot(db, "c1", Language.JP, trend_cents=700)
        db.commit()

        assert _compute(service, db).total_value_cents == 800

    def test_only_users_holdings(self, db, service):
        create_holding(db, "user-2", "c1", quantity=5)
        create_daily_snapshot(db, "c1", trend_cents=100)
        db.commit()

        assert _compute(service, db, "user-1").item_count == 0

    def test_stored_only_by_default(self, db, service, primary_provider):
        create_holding(db, "user-1", "c1")
        db.commit()
        primary_provider.prices[("c1", "FR")] = make_quote("c1")

        value = _compute(service, db)

        assert primary_provider.calls == []
        assert value.missing_count == 1


class TestRecordSnapshot:
    def test_first_snapshot_recorded(self, db, service, holding):
        create_daily_snapshot(db, holding.card_id, day=date(2026, 1, 1), trend_cents=500)
        db.commit()

        snapshot = asyncio.run(service.record_snapshot(db, "user-1"))

        assert snapshot is not None
        assert snapshot.total_value_cents == 1000
        assert snapshot.total_cost_cents == 600
        assert snapshot.pnl_cents == 400

    def test_unchanged_totals_not_recorded(self, db, service, holding):
        asyncio.run(service.record_snapshot(db, "user-1"))
        assert asyncio.run(service.record_snapshot(db, "user-1")) is None
        assert db.query(PortfolioSnapshot).count() == 1

    def test_changed_totals_recorded(self, db, service, holding):
        asyncio.run(service.record_snapshot(db, "user-1"))
        create_daily_snapshot(db, holding.card_id, trend_cents=800)
        db.commit()

        assert asyncio.run(service.record_snapshot(db, "user-1")) is not None
        assert db.query(PortfolioSnapshot).count() == 2

    def test_never_calls_providers(self, db, service, holding, primary_provider):
        primary_provider.prices[(holding.card_id, "FR")] = make_quote(holding.card_id)
        asyncio.run(service.record_snapshot(db, "user-1"))
        assert primary_provider.calls == []
