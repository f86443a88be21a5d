"""Integration tests for portfolio API endpoints."""

from datetime import datetime, timedelta, timezone

from models import PortfolioSnapshot
from tests.fixtures import create_daily_snapshot, create_holding
from tests.fixtures.mocks import make_quote


def test_portfolio_requires_user(client):
    response = client.get("/api/portfolio")
    assert response.status_code == 401


def test_portfolio_empty(client, user_headers):
    response = client.get("/api/portfolio", headers=user_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total_value_cents"] == 0
    assert data["item_count"] == 0
    assert data["breakdown"] == []


def test_portfolio_totals(client, db, user_headers):
    """Unpriced cost counts toward total cost but not toward pnl."""
    create_holding(db, "user-1", "priced", quantity=2, acquisition_price_cents=300)
    create_holding(db, "user-1", "unpriced", quantity=1, acquisition_price_cents=1000)
    create_daily_snapshot(db, "priced", trend_cents=500)
    db.commit()

    response = client.get("/api/portfolio", headers=user_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total_value_cents"] == 1000
    assert data["total_cost_cents"] == 1600
    assert data["pnl_cents"] == 400
    assert data["valued_count"] == 1
    assert data["missing_count"] == 1

    first, second = data["breakdown"]
    assert first["card_id"] == "priced"
    assert first["roi_percent"] == 66.7
    assert first["source"] == "TCGDEX"
    assert second["card_id"] == "unpriced"
    assert second["total_value_cents"] is None
    assert second["source"] is None


def test_portfolio_is_per_user(client, db, user_headers):
    create_holding(db, "user-2", "c1", quantity=3)
    db.commit()

    assert client.get("/api/portfolio", headers=user_headers).json()["item_count"] == 0


def test_portfolio_live(client, db, user_headers, primary_provider):
    create_holding(db, "user-1", "c1", quantity=2)
    db.commit()
    primary_provider.prices[("c1", "FR")] = make_quote("c1", trend_cents=150)

    stored = client.get("/api/portfolio", headers=user_headers).json()
    live = client.get("/api/portfolio", params={"live": "true"}, headers=user_headers).json()

    assert stored["total_value_cents"] == 0
    assert live["total_value_cents"] == 300


def test_get_portfolio_does_not_record(client, db, user_headers, holding):
    client.get("/api/portfolio", headers=user_headers)
    assert db.query(PortfolioSnapshot).count() == 0


def test_record_snapshot_only_when_changed(client, db, user_headers, holding):
    first = client.post("/api/portfolio/snapshot", headers=user_headers)
    assert first.status_code == 200
    assert first.json()["recorded"] is True
    assert first.json()["snapshot"]["total_cost_cents"] == 600

    second = client.post("/api/portfolio/snapshot", headers=user_headers)
    assert second.json() == {"recorded": False, "snapshot": None}

    create_daily_snapshot(db, holding.card_id, trend_cents=500)
    db.commit()
    third = client.post("/api/portfolio/snapshot", headers=user_headers)
    assert third.json()["recorded"] is True
    assert third.json()["snapshot"]["total_value_cents"] == 1000


def _seed_history(db, user_id, count, start):
    for i in range(count):
        db.add(
            PortfolioSnapshot(
                user_id=user_id,
                total_value_cents=i,
                total_cost_cents=0,
                pnl_cents=i,
                captured_at=start + timedelta(hours=i),
            )
        )
    db.commit()


def test_history_paginates_newest_first(client, db, user_headers):
    _seed_history(db, "user-1", 5, datetime.now(timezone.utc) - timedelta(days=1))

    first = client.get("/api/portfolio/history", params={"limit": 3}, headers=user_headers).json()
    assert [s["total_value_cents"] for s in first["items"]] == [4, 3, 2]
    assert first["next_cursor"] is not None

    second = client.get(
        "/api/portfolio/history",
        params={"limit": 3, "cursor": first["next_cursor"]},
        headers=user_headers,
    ).json()
    assert [s["total_value_cents"] for s in second["items"]] == [1, 0]
    assert second["next_cursor"] is None


def test_history_range(client, db, user_headers):
    now = datetime.now(timezone.utc)
    _seed_history(db, "user-1", 1, now - timedelta(days=20))
    _seed_history(db, "user-1", 1, now - timedelta(days=2))

    week = client.get("/api/portfolio/history", params={"range": "7d"}, headers=user_headers).json()
    month = client.get("/api/portfolio/history", params={"range": "30d"}, headers=user_headers).json()

    assert len(week["items"]) == 1
    assert len(month["items"]) == 2


def test_history_rejects_unknown_range(client, user_headers):
    response = client.get("/api/portfolio/history", params={"range": "2y"}, headers=user_headers)
    assert response.status_code == 422


def test_history_invalid_cursor(client, user_headers):
    response = client.get("/api/portfolio/history", params={"cursor": "garbage!"}, headers=user_headers)
    assert response.status_code == 400


def test_history_limit_capped(client, user_headers):
    response = client.get("/api/portfolio/history", params={"limit": 51}, headers=user_headers)
    assert response.status_code == 422
