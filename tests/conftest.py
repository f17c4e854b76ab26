import os

# Avant l'import de l'app: pas de Redis pour le rate limiting en tests
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient

from regional_checkout import config
from regional_checkout.app_setup.factory import create_app
from regional_checkout.currency import rates
from regional_checkout.sessions import InMemorySessionStore

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)
        elif "/functional/" in nodeid:
            item.add_marker(pytest.mark.functional)


class FakeClock:
    """Horloge manuelle pour les TTL (sessions, cache de taux)."""
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> InMemorySessionStore:
    return InMemorySessionStore(ttl_seconds=900, clock=clock)


# Configuration complète et déterministe pour chaque test
@pytest.fixture(autouse=True)
def checkout_config(monkeypatch):
    values = {
        "SHOPIFY_STORE_DOMAIN": "test-store.myshopify.com",
        "SHOPIFY_ADMIN_ACCESS_TOKEN": "shpat_test",
        "SHOPIFY_API_VERSION": "2025-01",
        "PAYMOB_BASE_URL": "https://accept.paymob.com",
        "PAYMOB_API_KEY": "paymob-key",
        "PAYMOB_HMAC_SECRET": "hmac-secret",
        "PAYMOB_CARD_INTEGRATION_ID": "111",
        "PAYMOB_CARD_IFRAME_ID": "222",
        "PAYMOB_WALLET_INTEGRATION_ID": "333",
        "PAYMOB_WALLET_IFRAME_ID": "444",
        "PAYMOB_CURRENCY": "EGP",
        "FRONTEND_URL": "https://shop.example.com",
        "PUBLIC_BASE_URL": "https://checkout.example.com",
        "SHIPPING_FEE": Decimal("100"),
        "SESSION_TTL_SECONDS": 900,
        "CURRENCY_CONVERSION_ENABLED": False,
        "STORE_CURRENCY": "USD",
        "FIXED_CURRENCY_RATE": "",
        "FALLBACK_CURRENCY_RATE": Decimal("50"),
        "CURRENCY_RATE_URL": "https://rates.example.com/latest/USD",
        "CURRENCY_RATE_TTL": 3600,
        "COD_ENABLED": True,
    }
    for name, value in values.items():
        monkeypatch.setattr(config, name, value, raising=True)
    rates._cache.clear()
    yield values
    rates._cache.clear()


@pytest.fixture
def app(store):
    application = create_app()
    application.state.session_store = store
    return application


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def upstream(monkeypatch):
    """Faux Shopify/Paymob qui enregistrent les appels dans l'ordre."""
    calls = []

    async def create_draft_order(items, customer, *, total, currency, shipping_fee, payment_method, client=None):
        calls.append(("shopify.create", {"total": total, "currency": currency, "method": payment_method}))
        return {"id": 1122, "total_price": str(total)}

    async def complete_draft_order(draft_order_id, *, payment_pending, client=None):
        calls.append(("shopify.complete", {"id": draft_order_id, "payment_pending": payment_pending}))
        return {"id": draft_order_id}

    async def authenticate(client=None):
        calls.append(("paymob.auth", {}))
        return "auth-tok"

    async def register_order(auth_token, *, amount_cents, merchant_order_id, order_items, client=None):
        calls.append(("paymob.order", {"amount_cents": amount_cents, "merchant_order_id": merchant_order_id}))
        return {"id": 987}

    async def get_payment_key(auth_token, *, order_id, amount_cents, billing_data, integration_id, client=None):
        calls.append(("paymob.key", {"amount_cents": amount_cents, "integration_id": integration_id, "billing": billing_data}))
        return "pay-key"

    monkeypatch.setattr("regional_checkout.shopify.create_draft_order", create_draft_order)
    monkeypatch.setattr("regional_checkout.shopify.complete_draft_order", complete_draft_order)
    monkeypatch.setattr("regional_checkout.paymob.authenticate", authenticate)
    monkeypatch.setattr("regional_checkout.paymob.register_order", register_order)
    monkeypatch.setattr("regional_checkout.paymob.get_payment_key", get_payment_key)
    return calls
