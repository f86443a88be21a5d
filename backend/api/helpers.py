"""Shared API helpers and dependencies for route handlers."""

from typing import AsyncIterator

from fastapi import Header, HTTPException, Request

from integrations.tcgdex_client import TcgdexClient
from services.alert_engine import AlertEngine
from services.price_resolver import PriceResolver
from services.snapshot_job import SnapshotJobRunner


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Return the authenticated user's id.

    Authentication happens upstream (gateway/middleware), which forwards
    the user id in the ``X-User-Id`` header.

    Raises:
        HTTPException: 401 if the header is missing or blank.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_user_id.strip()


async def get_price_resolver() -> AsyncIterator[PriceResolver]:
    """Provide a PriceResolver for one request, closing its HTTP clients afterwards."""
    resolver = PriceResolver()
    try:
        yield resolver
    finally:
        await resolver.aclose()


async def get_tcgdex_client() -> AsyncIterator[TcgdexClient]:
    """Provide a TcgdexClient for one request."""
    client = TcgdexClient()
    try:
        yield client
    finally:
        await client.aclose()


def get_snapshot_runner(request: Request) -> SnapshotJobRunner:
    """The process-wide snapshot runner shared with the scheduler."""
    return request.app.state.snapshot_runner


def get_alert_engine(request: Request) -> AlertEngine:
    """The process-wide alert engine shared with the scheduler."""
    return request.app.state.alert_engine
