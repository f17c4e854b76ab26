from regional_checkout.paymob import signature


def _payload(success=True):
    return {
        "type": "TRANSACTION",
        "obj": {
            "id": 555, "pending": False, "amount_cents": 30000, "success": success,
            "is_auth": False, "is_capture": False, "is_standalone_payment": True,
            "is_voided": False, "is_refunded": False, "is_3d_secure": True,
            "integration_id": 111, "has_parent_transaction": False,
            "created_at": "2024-05-10T12:00:00", "currency": "EGP", "error_occured": False,
            "owner": 1, "order": {"id": 987, "merchant_order_id": "1122"},
            "source_data": {"pan": "2346", "type": "card", "sub_type": "Visa"},
        },
    }

def _hmac(payload):
    return signature.compute_hmac(signature.flatten_transaction(payload), "hmac-secret")


def test_valid_success_completes_draft(client, upstream):
    payload = _payload()
    r = client.post("/api/paymob/callback", params={"hmac": _hmac(payload)}, json=payload)
    assert r.status_code == 200
    assert r.json() == {"received": True}
    assert upstream == [("shopify.complete", {"id": "1122", "payment_pending": False})]


def test_valid_failed_transaction_is_acknowledged(client, upstream):
    payload = _payload(success=False)
    r = client.post("/api/paymob/callback", params={"hmac": _hmac(payload)}, json=payload)
    assert r.status_code == 200
    assert r.json() == {"received": True}
    assert upstream == []


def test_invalid_hmac_is_rejected(client, upstream):
    r = client.post("/api/paymob/callback", params={"hmac": "0" * 128}, json=_payload())
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid HMAC signature"}
    assert upstream == []


def test_missing_hmac_is_rejected(client, upstream):
    r = client.post("/api/paymob/callback", json=_payload())
    assert r.status_code == 400
    assert upstream == []


def test_unreadable_payload(client, upstream):
    r = client.post("/api/paymob/callback", content=b"nope", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid payload"}


def test_shopify_failure_still_returns_200(client, monkeypatch):
    async def boom(*args, **kwargs):
        raise RuntimeError("Shopify indisponible")

    monkeypatch.setattr("regional_checkout.shopify.complete_draft_order", boom)
    payload = _payload()
    r = client.post("/api/paymob/callback", params={"hmac": _hmac(payload)}, json=payload)
    assert r.status_code == 200
    assert r.json() == {"received": True}
