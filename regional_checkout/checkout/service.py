"""
Cas d'usage 'checkout': orchestre Shopify (draft order) et Paymob (paiement hébergé).

Ordre des appels (aucun retry, aucun rollback):
1) configuration requise présente, sinon ConfigurationError (avant tout appel externe)
2) total = somme des lignes + frais de port
3) draft order Shopify (taguée paymob-pending, total en note_attributes)
4) paiement à la livraison: draft complétée (payment_pending) -> page de remerciement
5) sinon: auth Paymob -> commande Paymob -> clé de paiement -> URL d'iframe
Une erreur Paymob après l'étape 3 laisse la draft « paymob-pending » pour réconciliation manuelle.
"""
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from fastapi import HTTPException

from regional_checkout import config
from regional_checkout.cart import cart as cart_logic
from regional_checkout.exceptions import ConfigurationError
from regional_checkout import paymob
from regional_checkout import shopify

logger = logging.getLogger(__name__)

COD = "cod"
# moyen de paiement -> (clé integration_id, clé iframe_id)
GATEWAY_METHODS: Dict[str, tuple] = {
    "card": ("PAYMOB_CARD_INTEGRATION_ID", "PAYMOB_CARD_IFRAME_ID"),
    "wallet": ("PAYMOB_WALLET_INTEGRATION_ID", "PAYMOB_WALLET_IFRAME_ID"),
}
METHOD_ALIASES = {
    "cash_on_delivery": COD,
    "cash": COD,
    "paymob": "card",
    "credit_card": "card",
    "mobile_wallet": "wallet",
}
BASE_REQUIRED_KEYS = ("SHOPIFY_STORE_DOMAIN", "SHOPIFY_ADMIN_ACCESS_TOKEN", "FRONTEND_URL")

# module regional_checkout.checkout.service
def normalize_payment_method(value: Optional[str]) -> str:
    """
    Normalise le moyen de paiement ("card" par défaut).
    - Soulève HTTPException(400) si inconnu ou si la livraison contre paiement est désactivée.
    """
    method = str(value or "card").strip().lower()
    method = METHOD_ALIASES.get(method, method)
    if method == COD:
        if not config.COD_ENABLED:
            raise HTTPException(status_code=400, detail="Paiement à la livraison indisponible")
        return method
    if method not in GATEWAY_METHODS:
        raise HTTPException(status_code=400, detail=f"Moyen de paiement inconnu: {method}")
    return method

def required_keys(method: str) -> List[str]:
    keys = list(BASE_REQUIRED_KEYS)
    if method in GATEWAY_METHODS:
        keys.append("PAYMOB_API_KEY")
        keys.extend(GATEWAY_METHODS[method])
    return keys

def check_configuration(method: str) -> None:
    missing = config.missing_keys(required_keys(method))
    if missing:
        logger.error("checkout configuration incomplète method=%s missing=%s", method, missing)
        raise ConfigurationError(missing)

def thank_you_url(order_id: Any) -> str:
    return f"{config.FRONTEND_URL}/thank-you?order={quote(str(order_id), safe='')}"

def enabled_payment_methods() -> List[str]:
    """Moyens proposés sur la page: ceux dont l'intégration Paymob est configurée, + COD si actif."""
    methods = [m for m, (integration, iframe) in GATEWAY_METHODS.items() if not config.missing_keys([integration, iframe])]
    if config.COD_ENABLED:
        methods.append(COD)
    return methods

async def submit_checkout(
    *,
    cart_items: Any,
    customer: Optional[Dict[str, Any]] = None,
    billing_data: Optional[Dict[str, Any]] = None,
    payment_method: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    """
    Soumission du formulaire de checkout.
    Retour: {"success": True, "paymentUrl"|"redirectUrl": ..., "orderIds": {...}}
    """
    method = normalize_payment_method(payment_method)
    check_configuration(method)

    items = cart_logic.parse_items(cart_items)
    shipping_fee = config.SHIPPING_FEE
    total = cart_logic.grand_total(items, shipping_fee)
    customer = customer or {}
    billing_data = dict(billing_data or {})
    for key in ("email", "first_name", "last_name"):
        if not billing_data.get(key) and customer.get(key):
            billing_data[key] = customer[key]
    if not billing_data.get("phone_number") and customer.get("phone"):
        billing_data["phone_number"] = customer["phone"]

    draft = await shopify.create_draft_order(
        items,
        customer,
        total=total,
        currency=config.PAYMOB_CURRENCY,
        shipping_fee=shipping_fee,
        payment_method=method,
        client=client,
    )
    draft_id = str(draft["id"])
    order_ids: Dict[str, Any] = {"shopifyDraftOrderId": draft["id"]}

    if method == COD:
        await shopify.complete_draft_order(draft_id, payment_pending=True, client=client)
        logger.info("checkout.cod draft_order=%s total=%s", draft_id, cart_logic.format_amount(total))
        return {"success": True, "redirectUrl": thank_you_url(draft_id), "orderIds": order_ids}

    integration_key, iframe_key = GATEWAY_METHODS[method]
    # Total Paymob recalculé depuis les lignes arrondies: même entier pour commande et clé
    order_items = paymob.build_order_items(items, shipping_fee)
    amount_cents = paymob.amount_cents_of(order_items)

    auth_token = await paymob.authenticate(client=client)
    paymob_order = await paymob.register_order(
        auth_token,
        amount_cents=amount_cents,
        merchant_order_id=draft_id,
        order_items=order_items,
        client=client,
    )
    payment_key = await paymob.get_payment_key(
        auth_token,
        order_id=paymob_order["id"],
        amount_cents=amount_cents,
        billing_data=paymob.build_billing_data(billing_data),
        integration_id=getattr(config, integration_key),
        client=client,
    )
    order_ids["paymobOrderId"] = paymob_order["id"]
    logger.info(
        "checkout.%s draft_order=%s paymob_order=%s amount_cents=%s",
        method, draft_id, paymob_order["id"], amount_cents,
    )
    return {
        "success": True,
        "paymentUrl": paymob.iframe_url(getattr(config, iframe_key), payment_key),
        "orderIds": order_ids,
    }
