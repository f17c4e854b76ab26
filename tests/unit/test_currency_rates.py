from decimal import Decimal

import httpx
import pytest

from regional_checkout import config
from regional_checkout.currency import rates


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))

@pytest.mark.asyncio
async def test_fixed_rate_wins_without_network(monkeypatch):
    monkeypatch.setattr(config, "FIXED_CURRENCY_RATE", "49.5")

    def handler(request):
        raise AssertionError("aucun appel réseau attendu")

    async with _client(handler) as client:
        assert await rates.get_rate(client) == Decimal("49.5")

@pytest.mark.asyncio
async def test_rate_is_fetched_then_cached(clock):
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        assert str(request.url) == "https://rates.example.com/latest/USD"
        return httpx.Response(200, json={"rates": {"EGP": 48.7, "EUR": 0.9}})

    cache = rates.RateCache(clock=clock)
    async with _client(handler) as client:
        assert await rates.get_rate(client, cache=cache) == Decimal("48.7")
        assert await rates.get_rate(client, cache=cache) == Decimal("48.7")
        assert calls["n"] == 1
        clock.advance(3601)
        await rates.get_rate(client, cache=cache)
        assert calls["n"] == 2

@pytest.mark.asyncio
async def test_fallback_on_http_error():
    def handler(request):
        return httpx.Response(503, json={"error": "down"})

    async with _client(handler) as client:
        assert await rates.get_rate(client, cache=rates.RateCache()) == Decimal("50")

@pytest.mark.asyncio
async def test_fallback_on_missing_currency():
    def handler(request):
        return httpx.Response(200, json={"rates": {"EUR": 0.9}})

    async with _client(handler) as client:
        assert await rates.get_rate(client, cache=rates.RateCache()) == Decimal("50")

@pytest.mark.asyncio
async def test_fallback_on_timeout():
    def handler(request):
        raise httpx.ConnectTimeout("timeout", request=request)

    cache = rates.RateCache()
    async with _client(handler) as client:
        assert await rates.get_rate(client, cache=cache) == Decimal("50")
    # Le repli n'est pas mis en cache
    assert cache.get(3600) is None

def test_convert_rounds_half_up():
    assert rates.convert(Decimal("1.005"), Decimal("1")) == Decimal("1.01")
