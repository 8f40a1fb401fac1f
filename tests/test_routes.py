from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from folio.config import Settings
from folio.main import create_app
from folio.models import Quote
from tests.conftest import SAT_10AM, WED_MIDDAY, FakeClock, FakeQuoteSource


class StubPortfolio:
    def __init__(self, symbols: list[str]):
        self.symbols = symbols

    def held_symbols(self) -> list[str]:
        return list(self.symbols)


@pytest.fixture
def source() -> FakeQuoteSource:
    return FakeQuoteSource(price=20.5)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(WED_MIDDAY)


@pytest.fixture
def app(source, clock):
    return create_app(
        Settings(),
        source=source,
        portfolio=StubPortfolio(["JKH", "COMB"]),
        clock=clock,
        run_sweeper=False,
    )


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


class TestQuoteRoute:
    def test_live_quote(self, client, source) -> None:
        r = client.get("/api/v1/quotes/jkh")
        assert r.status_code == 200
        body = r.json()
        assert body["symbol"] == "JKH"
        assert body["value"]["last_traded_price"] == 20.5
        assert body["value"]["price"] == 20.5
        assert body["fetched_at"].startswith("2025-01-15T11:00:00")
        assert source.calls == ["JKH"]

    def test_unavailable_is_503_envelope(self, client, source) -> None:
        source.fail("http 502")
        r = client.get("/api/v1/quotes/JKH")
        assert r.status_code == 503
        err = r.json()["error"]
        assert err["code"] == "UPSTREAM_UNAVAILABLE"
        assert err["hint"] == "http 502"

    def test_stale_fallback_is_200(self, client, app, source, clock) -> None:
        app.state.cache.put("JKH", Quote("JKH", last_traded_price=19.0), clock.now)
        source.fail()
        r = client.get("/api/v1/quotes/JKH")
        assert r.status_code == 200
        assert r.json()["value"]["last_traded_price"] == 19.0

    def test_board_suffix_shares_bare_entry(self, client, app, source, clock) -> None:
        clock.now = SAT_10AM
        first = client.get("/api/v1/quotes/JKH").json()
        second = client.get("/api/v1/quotes/JKH.N0000").json()

        assert second["symbol"] == "JKH"
        assert second == first
        assert source.calls == ["JKH"]
        assert app.state.cache.size() == 1
        snap = client.get("/api/v1/quotes/cache").json()
        assert [e["symbol"] for e in snap["entries"]] == ["JKH"]

    def test_invalid_symbol(self, client, source) -> None:
        r = client.get("/api/v1/quotes/not a ticker!")
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "INVALID_SYMBOL"
        assert source.calls == []


class TestCacheRoutes:
    def test_snapshot_and_clear(self, client, clock) -> None:
        client.get("/api/v1/quotes/JKH")
        clock.now = SAT_10AM

        snap = client.get("/api/v1/quotes/cache").json()
        assert snap["is_market_open"] is False
        assert snap["total_entries"] == 1
        assert snap["entries"][0]["symbol"] == "JKH"
        assert snap["entries"][0]["value"]["price"] == 20.5

        r = client.delete("/api/v1/quotes/cache")
        assert r.json() == {"removed_count": 1}
        assert client.get("/api/v1/quotes/cache").json()["total_entries"] == 0


class TestPortfolioQuotes:
    def test_all_held_symbols(self, client, source) -> None:
        body = client.get("/api/v1/portfolio/quotes").json()
        assert sorted(q["symbol"] for q in body["quotes"]) == ["COMB", "JKH"]
        assert body["unavailable"] == []

    def test_unavailable_listed(self, client, app, source, clock) -> None:
        clock.now = SAT_10AM
        app.state.cache.put("JKH", Quote("JKH", last_traded_price=19.0), WED_MIDDAY)
        source.fail()
        body = client.get("/api/v1/portfolio/quotes").json()
        assert [q["symbol"] for q in body["quotes"]] == ["JKH"]
        assert body["unavailable"] == ["COMB"]


class TestUtilityRoutes:
    def test_health(self, client) -> None:
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["market_open"] is True
        assert body["cache_entries"] == 0

    def test_version(self, client) -> None:
        body = client.get("/version").json()
        assert body["service"].startswith("folio-quotes:")

    def test_metrics(self, client) -> None:
        client.get("/api/v1/quotes/JKH")
        r = client.get("/metrics")
        assert r.status_code == 200
        assert "folio_quote_resolutions_total" in r.text

    def test_unknown_route_uses_envelope(self, client) -> None:
        r = client.get("/nope")
        assert r.status_code == 404
        assert r.json()["error"]["code"] == "INTERNAL_ERROR"
