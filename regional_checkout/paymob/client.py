"""
Adaptateur Paymob Accept: centralise les trois appels du flux « iframe ».
1) authenticate: api_key -> auth_token
2) register_order: commande Paymob (amount_cents + items)
3) get_payment_key: clé de paiement pour la même somme -> URL d'iframe
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx

from regional_checkout import config
from regional_checkout.cart.cart import to_cents
from regional_checkout.cart.models import CartItem
from regional_checkout.exceptions import UpstreamError
from regional_checkout.utils.http import request_json

logger = logging.getLogger(__name__)

SERVICE = "paymob"

# Valeurs par défaut exigées par Paymob quand le client ne les fournit pas
BILLING_DEFAULTS: Dict[str, str] = {
    "apartment": "NA",
    "email": "customer@example.com",
    "floor": "NA",
    "first_name": "Customer",
    "street": "NA",
    "building": "NA",
    "phone_number": "+20000000000",
    "postal_code": "00000",
    "city": "Cairo",
    "last_name": "Customer",
    "state": "Cairo",
}

# module regional_checkout.paymob.client
def build_billing_data(billing: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """
    Complète billing_data avec les valeurs par défaut.
    - Toute valeur vide est remplacée; country et shipping_method sont fixés.
    """
    billing = billing or {}
    data = {}
    for key, default in BILLING_DEFAULTS.items():
        value = billing.get(key)
        data[key] = str(value).strip() if value not in (None, "") and str(value).strip() else default
    data["shipping_method"] = "PKG"
    data["country"] = "EG"
    return data

def build_order_items(items: List[CartItem], shipping_fee: Decimal) -> List[Dict[str, Any]]:
    """
    Lignes Paymob en centimes, plus une ligne de livraison.
    - Chaque prix unitaire est arrondi une seule fois: la somme des lignes est le total payé.
    """
    order_items: List[Dict[str, Any]] = [
        {
            "name": it.name,
            "amount_cents": to_cents(it.unit_price),
            "description": it.description or it.name,
            "quantity": it.quantity,
        }
        for it in items
    ]
    if shipping_fee > 0:
        order_items.append({
            "name": config.SHIPPING_TITLE,
            "amount_cents": to_cents(shipping_fee),
            "description": config.SHIPPING_TITLE,
            "quantity": 1,
        })
    return order_items

def amount_cents_of(order_items: List[Dict[str, Any]]) -> int:
    return sum(int(i["amount_cents"]) * int(i["quantity"]) for i in order_items)

def iframe_url(iframe_id: str, payment_key: str) -> str:
    return f"{config.PAYMOB_BASE_URL}/api/acceptance/iframes/{iframe_id}?payment_token={payment_key}"

async def authenticate(client: Optional[httpx.AsyncClient] = None) -> str:
    data = await request_json(
        SERVICE, "POST", f"{config.PAYMOB_BASE_URL}/api/auth/tokens",
        json={"api_key": config.PAYMOB_API_KEY}, client=client,
    )
    token = (data or {}).get("token") if isinstance(data, dict) else None
    if not token:
        raise UpstreamError(SERVICE, "auth_token absent", payload=data)
    return token

async def register_order(
    auth_token: str,
    *,
    amount_cents: int,
    merchant_order_id: str,
    order_items: List[Dict[str, Any]],
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    data = await request_json(
        SERVICE, "POST", f"{config.PAYMOB_BASE_URL}/api/ecommerce/orders",
        json={
            "auth_token": auth_token,
            "delivery_needed": False,
            "amount_cents": amount_cents,
            "currency": config.PAYMOB_CURRENCY,
            "merchant_order_id": merchant_order_id,
            "items": order_items,
        },
        client=client,
    )
    if not isinstance(data, dict) or not data.get("id"):
        raise UpstreamError(SERVICE, "commande Paymob invalide", payload=data)
    logger.info("paymob.order registered id=%s merchant_order_id=%s amount_cents=%s", data.get("id"), merchant_order_id, amount_cents)
    return data

async def get_payment_key(
    auth_token: str,
    *,
    order_id: Any,
    amount_cents: int,
    billing_data: Dict[str, str],
    integration_id: str,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    data = await request_json(
        SERVICE, "POST", f"{config.PAYMOB_BASE_URL}/api/acceptance/payment_keys",
        json={
            "auth_token": auth_token,
            "amount_cents": amount_cents,
            "expiration": config.PAYMOB_PAYMENT_KEY_EXPIRATION,
            "order_id": order_id,
            "billing_data": billing_data,
            "currency": config.PAYMOB_CURRENCY,
            "integration_id": int(integration_id) if str(integration_id).isdigit() else integration_id,
        },
        client=client,
    )
    token = (data or {}).get("token") if isinstance(data, dict) else None
    if not token:
        raise UpstreamError(SERVICE, "payment_key absente", payload=data)
    return token
