"""Unit tests for TcgdexClient (httpx.MockTransport)."""

import asyncio
import json

import httpx
import pytest

from integrations.exceptions import ProviderAPIError, ProviderConnectionError, ProviderDataError
from integrations.tcgdex_client import TcgdexClient

BASE_URL = "https://tcgdex.test/v2"


def _card_payload(trend=12.34, **extra) -> dict:
    pricing = {"cardmarket": {"trend": trend, "low": 10.0, "avg": 11.5, "avg7": 12.0, "avg30": 13.0}}
    return {"id": "sv03.5-151", "name": "Mew ex", "pricing": pricing, **extra}


def _client(handler) -> TcgdexClient:
    return TcgdexClient(base_url=BASE_URL, timeout=1.0, transport=httpx.MockTransport(handler))


def _run(coro):
    return asyncio.run(coro)


class Recorder:
    """MockTransport handler returning canned responses per path."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.paths: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.paths.append(request.url.path)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        return route


class TestProviderName:
    def test_provider_name(self):
        assert _client(Recorder({})).provider_name == "tcgdex"


class TestFetchCardPrice:
    def test_primary_language_hit(self):
        recorder = Recorder({"/v2/fr/cards/sv03.5-151": httpx.Response(200, json=_card_payload())})
        quote = _run(_client(recorder).fetch_card_price("sv03.5-151", "FR"))

        assert quote is not None
        assert quote.trend_cents == 1234
        assert quote.low_cents == 1000
        assert quote.avg_cents == 1150
        assert quote.avg7_cents == 1200
        assert quote.avg30_cents == 1300
        assert quote.high_cents is None
        assert quote.fetched_language == "fr"
        assert quote.language == "FR"
        assert recorder.paths == ["/v2/fr/cards/sv03.5-151"]

    def test_top_level_cardmarket_block(self):
        payload = {"id": "base1-4", "cardmarket": {"trend": 250.0}}
        recorder = Recorder({"/v2/fr/cards/base1-4": httpx.Response(200, json=payload)})
        quote = _run(_client(recorder).fetch_card_price("base1-4", "FR"))
        assert quote.trend_cents == 25000

    def test_falls_back_to_english_when_primary_has_no_trend(self):
        recorder = Recorder({
            "/v2/fr/cards/sv08-238": httpx.Response(200, json={"id": "sv08-238", "pricing": {}}),
            "/v2/en/cards/sv08-238": httpx.Response(200, json=_card_payload(trend=45.0)),
        })
        quote = _run(_client(recorder).fetch_card_price("sv08-238", "FR"))

        assert quote.trend_cents == 4500
        assert quote.fetched_language == "en"
        assert quote.language == "FR"
        assert recorder.paths == ["/v2/fr/cards/sv08-238", "/v2/en/cards/sv08-238"]

    def test_falls_back_to_english_on_404(self):
        recorder = Recorder({"/v2/en/cards/sv08-238": httpx.Response(200, json=_card_payload(trend=1.0))})
        quote = _run(_client(recorder).fetch_card_price("sv08-238", "JP"))
        assert quote.trend_cents == 100
        assert recorder.paths == ["/v2/ja/cards/sv08-238", "/v2/en/cards/sv08-238"]

    def test_english_card_does_not_retry(self):
        recorder = Recorder({})
        assert _run(_client(recorder).fetch_card_price("x-1", "EN")) is None
        assert recorder.paths == ["/v2/en/cards/x-1"]

    def test_not_found_everywhere_returns_none(self):
        recorder = Recorder({})
        assert _run(_client(recorder).fetch_card_price("missing-1", "FR")) is None

    def test_timeout_returns_none(self):
        def timeout(request):
            raise httpx.ReadTimeout("timed out", request=request)

        recorder = Recorder({"/v2/fr/cards/slow-1": timeout, "/v2/en/cards/slow-1": timeout})
        assert _run(_client(recorder).fetch_card_price("slow-1", "FR")) is None

    def test_network_error_returns_none(self):
        def refused(request):
            raise httpx.ConnectError("refused", request=request)

        recorder = Recorder({"/v2/fr/cards/x-1": refused, "/v2/en/cards/x-1": refused})
        assert _run(_client(recorder).fetch_card_price("x-1", "FR")) is None

    def test_server_error_raises_api_error(self):
        recorder = Recorder({"/v2/fr/cards/x-1": httpx.Response(503, text="down")})
        with pytest.raises(ProviderAPIError) as exc_info:
            _run(_client(recorder).fetch_card_price("x-1", "FR"))
        assert exc_info.value.status_code == 503
        assert exc_info.value.provider_name == "tcgdex"

    def test_malformed_json_raises_data_error(self):
        recorder = Recorder({"/v2/fr/cards/x-1": httpx.Response(200, content=b"<html>")})
        with pytest.raises(ProviderDataError):
            _run(_client(recorder).fetch_card_price("x-1", "FR"))

    def test_card_id_is_url_encoded(self):
        raw_paths = []

        def handler(request):
            raw_paths.append(request.url.raw_path)
            return httpx.Response(404)

        _run(_client(handler).fetch_card_price("swsh/1", "EN"))
        assert raw_paths == [b"/v2/en/cards/swsh%2F1"]

    def test_raw_payload_is_cardmarket_block(self):
        recorder = Recorder({"/v2/fr/cards/sv03.5-151": httpx.Response(200, json=_card_payload())})
        quote = _run(_client(recorder).fetch_card_price("sv03.5-151", "FR"))
        assert quote.raw["trend"] == 12.34
        json.dumps(quote.raw)


class TestFetchCardDetails:
    def test_details(self):
        payload = _card_payload(
            image="https://assets.tcgdex.net/fr/sv/sv03.5/151",
            set={"id": "sv03.5", "name": "151"},
        )
        recorder = Recorder({"/v2/fr/cards/sv03.5-151": httpx.Response(200, json=payload)})
        details = _run(_client(recorder).fetch_card_details("sv03.5-151", "FR"))

        assert details.card_id == "sv03.5-151"
        assert details.name == "Mew ex"
        assert details.image == "https://assets.tcgdex.net/fr/sv/sv03.5/151/low.webp"
        assert details.set_code == "sv03.5"
        assert details.set_name == "151"

    def test_details_without_image(self):
        recorder = Recorder({"/v2/fr/cards/x-1": httpx.Response(200, json={"id": "x-1", "name": "X"})})
        details = _run(_client(recorder).fetch_card_details("x-1", "FR"))
        assert details.image is None
        assert details.set_code is None

    def test_details_not_found(self):
        assert _run(_client(Recorder({})).fetch_card_details("x-1", "FR")) is None

    def test_details_timeout_raises_connection_error(self):
        def timeout(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        recorder = Recorder({"/v2/fr/cards/x-1": timeout})
        with pytest.raises(ProviderConnectionError):
            _run(_client(recorder).fetch_card_details("x-1", "FR"))
