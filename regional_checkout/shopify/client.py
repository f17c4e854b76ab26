"""
Adaptateur Shopify Admin API: draft orders.
- create_draft_order: commande provisoire taguée « paymob-pending », total calculé en note_attributes
- complete_draft_order: transforme la draft en commande (payée ou paiement en attente)
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx

from regional_checkout import config
from regional_checkout.cart.cart import format_amount
from regional_checkout.cart.models import CartItem
from regional_checkout.exceptions import UpstreamError
from regional_checkout.utils.http import request_json

logger = logging.getLogger(__name__)

SERVICE = "shopify"
PENDING_TAG = "paymob-pending"
PENDING_NOTE = "Paymob checkout pending"

# module regional_checkout.shopify.client
def admin_url(path: str) -> str:
    return f"https://{config.SHOPIFY_STORE_DOMAIN}/admin/api/{config.SHOPIFY_API_VERSION}/{path.lstrip('/')}"

def _headers() -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "X-Shopify-Access-Token": config.SHOPIFY_ADMIN_ACCESS_TOKEN,
    }

def to_line_items(items: List[CartItem]) -> List[Dict[str, Any]]:
    """
    Construit les line_items de la draft order.
    - variant_id connu: ligne liée au produit (prix Shopify)
    - sinon: ligne personnalisée title/price (prix du panier)
    """
    line_items: List[Dict[str, Any]] = []
    for it in items:
        if it.variant_id and it.variant_id.isdigit():
            line_items.append({"variant_id": int(it.variant_id), "quantity": it.quantity})
        else:
            line_items.append({
                "title": it.name,
                "price": format_amount(it.unit_price),
                "quantity": it.quantity,
            })
    return line_items

def build_draft_order(
    items: List[CartItem],
    customer: Dict[str, Any],
    *,
    total: Decimal,
    currency: str,
    shipping_fee: Decimal,
    payment_method: str,
) -> Dict[str, Any]:
    """
    Payload draft_order.
    - Le total attendu (devise locale) est recopié en note_attributes: la devise native
      de la boutique ne reflète pas forcément la devise payée.
    """
    draft: Dict[str, Any] = {
        "line_items": to_line_items(items),
        "note": PENDING_NOTE,
        "tags": PENDING_TAG,
        "use_customer_default_address": False,
        "shipping_line": {
            "title": config.SHIPPING_TITLE,
            "price": format_amount(shipping_fee),
            "custom": True,
        },
        "note_attributes": [
            {"name": "checkout_total", "value": format_amount(total)},
            {"name": "checkout_currency", "value": currency},
            {"name": "payment_method", "value": payment_method},
        ],
    }
    customer = {k: v for k, v in (customer or {}).items() if v not in (None, "")}
    if customer:
        draft["customer"] = customer
        if customer.get("email"):
            draft["email"] = customer["email"]
    return {"draft_order": draft}

async def create_draft_order(
    items: List[CartItem],
    customer: Dict[str, Any],
    *,
    total: Decimal,
    currency: str,
    shipping_fee: Decimal,
    payment_method: str,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    """Crée la draft order et renvoie l'objet draft_order (id, total_price, ...)."""
    body = build_draft_order(
        items, customer, total=total, currency=currency, shipping_fee=shipping_fee, payment_method=payment_method
    )
    data = await request_json(SERVICE, "POST", admin_url("draft_orders.json"), json=body, headers=_headers(), client=client)
    draft = (data or {}).get("draft_order") if isinstance(data, dict) else None
    if not draft or not draft.get("id"):
        raise UpstreamError(SERVICE, "réponse draft_order invalide", payload=data)
    logger.info("shopify.draft_order created id=%s total=%s %s", draft.get("id"), format_amount(total), currency)
    return draft

async def complete_draft_order(
    draft_order_id: str,
    *,
    payment_pending: bool,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    """
    Complète la draft order.
    - payment_pending=True: paiement à la livraison (commande créée, non payée)
    - payment_pending=False: paiement confirmé par Paymob
    """
    data = await request_json(
        SERVICE,
        "PUT",
        admin_url(f"draft_orders/{draft_order_id}/complete.json"),
        params={"payment_pending": "true" if payment_pending else "false"},
        headers=_headers(),
        client=client,
    )
    logger.info("shopify.draft_order completed id=%s payment_pending=%s", draft_order_id, payment_pending)
    if not isinstance(data, dict):
        return {}
    return data.get("draft_order") or {}
