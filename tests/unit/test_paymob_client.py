import json
from decimal import Decimal

import httpx
import pytest

from regional_checkout import paymob
from regional_checkout.cart.models import CartItem
from regional_checkout.exceptions import UpstreamError


def test_build_billing_data_fills_defaults():
    data = paymob.build_billing_data({"first_name": "Mona", "city": "", "street": "  "})
    assert data["first_name"] == "Mona"
    assert data["city"] == "Cairo"
    assert data["street"] == "NA"
    assert data["country"] == "EG"
    assert data["shipping_method"] == "PKG"
    assert set(paymob.BILLING_DEFAULTS) <= set(data)

def test_order_items_sum_matches_total_with_shipping():
    items = [
        CartItem(name="A", unit_price=Decimal("19.99"), quantity=3),
        CartItem(name="B", unit_price=Decimal("0.01"), quantity=7),
    ]
    order_items = paymob.build_order_items(items, Decimal("100"))
    assert order_items[-1]["amount_cents"] == 10000
    assert paymob.amount_cents_of(order_items) == 1999 * 3 + 7 + 10000

def test_order_items_without_shipping_line():
    items = [CartItem(name="A", unit_price=Decimal("5"), quantity=1)]
    assert len(paymob.build_order_items(items, Decimal("0"))) == 1

def test_iframe_url():
    assert paymob.iframe_url("222", "tok") == "https://accept.paymob.com/api/acceptance/iframes/222?payment_token=tok"

@pytest.mark.asyncio
async def test_three_calls_send_expected_bodies():
    seen = []

    def handler(request):
        body = json.loads(request.content)
        seen.append((request.url.path, body))
        if request.url.path == "/api/auth/tokens":
            return httpx.Response(201, json={"token": "auth-tok"})
        if request.url.path == "/api/ecommerce/orders":
            return httpx.Response(201, json={"id": 987})
        return httpx.Response(201, json={"token": "pay-key"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        auth = await paymob.authenticate(client=client)
        order = await paymob.register_order(auth, amount_cents=30000, merchant_order_id="55", order_items=[], client=client)
        key = await paymob.get_payment_key(
            auth, order_id=order["id"], amount_cents=30000,
            billing_data=paymob.build_billing_data({}), integration_id="111", client=client,
        )

    assert key == "pay-key"
    assert seen[0][1] == {"api_key": "paymob-key"}
    assert seen[1][1]["amount_cents"] == 30000
    assert seen[1][1]["merchant_order_id"] == "55"
    assert seen[1][1]["currency"] == "EGP"
    assert seen[2][1]["integration_id"] == 111
    assert seen[2][1]["order_id"] == 987

@pytest.mark.asyncio
async def test_rejection_keeps_status_and_payload():
    def handler(request):
        return httpx.Response(403, json={"detail": "Incorrect credentials"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(UpstreamError) as e:
            await paymob.authenticate(client=client)
    assert e.value.service == "paymob"
    assert e.value.status_code == 403
    assert e.value.payload == {"detail": "Incorrect credentials"}

@pytest.mark.asyncio
async def test_missing_token_is_upstream_error():
    def handler(request):
        return httpx.Response(200, json={})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(UpstreamError):
            await paymob.authenticate(client=client)
