from fastapi.testclient import TestClient

from regional_checkout import config
from regional_checkout.exceptions import UpstreamError

CART_ITEMS = [{"id": "4455", "variantId": "4455", "name": "Tee", "price": "100.00", "quantity": 2}]
BILLING = {
    "first_name": "Mona", "last_name": "Adel", "email": "mona@example.com",
    "phone_number": "+201000000000", "street": "Tahrir", "city": "Cairo",
}

def _body(method="card", **extra):
    body = {
        "cartItems": CART_ITEMS,
        "customer": {"email": "mona@example.com", "first_name": "Mona", "last_name": "Adel"},
        "billingData": BILLING,
        "paymentMethod": method,
    }
    body.update(extra)
    return body


def test_submit_card_returns_payment_url(client, upstream):
    r = client.post("/api/checkout/egypt", json=_body())
    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "paymentUrl": "https://accept.paymob.com/api/acceptance/iframes/222?payment_token=pay-key",
        "orderIds": {"shopifyDraftOrderId": 1122, "paymobOrderId": 987},
    }
    by_name = dict(upstream)
    assert by_name["paymob.order"]["amount_cents"] == 30000
    assert by_name["paymob.key"]["amount_cents"] == 30000
    assert by_name["paymob.order"]["merchant_order_id"] == "1122"


def test_submit_cod_redirects_to_thank_you(client, upstream):
    r = client.post("/api/checkout/egypt", json=_body("cod"))
    assert r.status_code == 200
    assert r.json()["redirectUrl"] == "https://shop.example.com/thank-you?order=1122"
    assert [name for name, _ in upstream] == ["shopify.create", "shopify.complete"]


def test_submit_empty_cart(client, upstream):
    r = client.post("/api/checkout/egypt", json=_body(cartItems=[]))
    assert r.status_code == 400
    assert upstream == []


def test_submit_invalid_json(client, upstream):
    r = client.post("/api/checkout/egypt", content=b"[1, 2", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert client.post("/api/checkout/egypt", json=[1, 2]).status_code == 400


def test_submit_missing_configuration(client, upstream, monkeypatch):
    monkeypatch.setattr(config, "PAYMOB_API_KEY", "")
    monkeypatch.setattr(config, "SHOPIFY_ADMIN_ACCESS_TOKEN", "")
    r = client.post("/api/checkout/egypt", json=_body())
    assert r.status_code == 500
    data = r.json()
    assert data["success"] is False
    assert set(data["missing"]) == {"PAYMOB_API_KEY", "SHOPIFY_ADMIN_ACCESS_TOKEN"}
    assert upstream == []


def test_submit_upstream_status_is_propagated(client, upstream, monkeypatch):
    async def rejected(*args, **kwargs):
        raise UpstreamError("shopify", "HTTP 422", status_code=422, payload={"errors": {"line_items": ["invalid"]}})

    monkeypatch.setattr("regional_checkout.shopify.create_draft_order", rejected)
    r = client.post("/api/checkout/egypt", json=_body())
    assert r.status_code == 422
    data = r.json()
    assert data["success"] is False
    assert data["service"] == "shopify"
    assert data["details"] == {"errors": {"line_items": ["invalid"]}}


def test_submit_network_error_is_bad_gateway(client, upstream, monkeypatch):
    async def unreachable(*args, **kwargs):
        raise UpstreamError("paymob", "erreur réseau: timeout")

    monkeypatch.setattr("regional_checkout.paymob.authenticate", unreachable)
    r = client.post("/api/checkout/egypt", json=_body())
    assert r.status_code == 502
    assert r.json()["service"] == "paymob"


def test_unexpected_error_is_generic_500(app, upstream, monkeypatch):
    async def broken(*args, **kwargs):
        raise RuntimeError("secret interne")

    monkeypatch.setattr("regional_checkout.shopify.create_draft_order", broken)
    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.post("/api/checkout/egypt", json=_body())
    assert r.status_code == 500
    assert "secret interne" not in r.text


def test_success_redirects_to_frontend(client):
    r = client.get("/api/checkout/success", params={"order_id": "1122"}, follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "https://shop.example.com/thank-you?order=1122"


def test_health_endpoints(client):
    assert client.get("/health").json() == {"ok": True}
    data = client.get("/health/sessions").json()
    assert data["sessions"] == {"backend": "memory", "ttl_seconds": 900}
    assert data["rate_limit"]["enabled"] is False


def test_cors_preflight_from_storefront(client):
    r = client.options(
        "/api/checkout/render",
        headers={
            "Origin": "https://test-store.myshopify.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert r.status_code == 200
    assert "access-control-allow-origin" in r.headers


def test_submit_rejects_non_object_customer_or_billing(client, upstream):
    assert client.post("/api/checkout/egypt", json=_body(customer="mona@example.com")).status_code == 400
    assert client.post("/api/checkout/egypt", json=_body(billingData=["Tahrir", "Cairo"])).status_code == 400
    assert upstream == []
