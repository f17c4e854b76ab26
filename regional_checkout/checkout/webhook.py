"""
Callback de transaction Paymob -> finalisation de la draft order Shopify.
- HMAC invalide: InvalidSignature (400), aucune action
- Transaction réussie: draft complétée (payment_pending=False)
- Transaction échouée: simple accusé de réception
Une fois la signature validée la réponse est toujours {"received": True}:
Paymob rejoue le callback tant qu'il ne reçoit pas 200.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import httpx

from regional_checkout import config
from regional_checkout import shopify
from regional_checkout.cart.cart import to_cents
from regional_checkout.exceptions import ConfigurationError, InvalidSignature
from regional_checkout.paymob import signature

logger = logging.getLogger(__name__)

# module regional_checkout.checkout.webhook
def _expected_cents(draft: Dict[str, Any]) -> Optional[int]:
    for attr in draft.get("note_attributes") or []:
        if isinstance(attr, dict) and attr.get("name") == "checkout_total":
            try:
                return to_cents(Decimal(str(attr.get("value"))))
            except (InvalidOperation, ValueError):
                return None
    return None

def check_paid_amount(draft: Dict[str, Any], flat: Dict[str, Any]) -> bool:
    """
    Compare le montant payé (amount_cents Paymob) au total calculé à la soumission
    (note_attributes.checkout_total de la draft). Écart: avertissement pour réconciliation.
    """
    expected = _expected_cents(draft if isinstance(draft, dict) else {})
    try:
        paid = int(flat.get("amount_cents"))
    except (TypeError, ValueError):
        paid = None
    if expected is None or paid is None:
        return True
    if expected != paid:
        logger.warning(
            "paymob.callback montant divergent draft_order=%s attendu=%s payé=%s (centimes)",
            draft.get("id"), expected, paid,
        )
        return False
    return True

async def handle_transaction_callback(
    payload: Dict[str, Any],
    received_hmac: Optional[str],
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    missing = config.missing_keys(["PAYMOB_HMAC_SECRET"])
    if missing:
        raise ConfigurationError(missing)

    flat = signature.flatten_transaction(payload if isinstance(payload, dict) else {})
    if not signature.verify_hmac(flat, received_hmac or "", config.PAYMOB_HMAC_SECRET):
        logger.warning("paymob.callback HMAC invalide transaction=%s order=%s", flat.get("id"), flat.get("order"))
        raise InvalidSignature("Invalid HMAC signature")

    if not signature.is_success(flat):
        logger.info("paymob.callback transaction=%s non réussie (pending=%s)", flat.get("id"), flat.get("pending"))
        return {"received": True}

    draft_order_id = flat.get("merchant_order_id")
    if not draft_order_id:
        logger.warning("paymob.callback transaction=%s sans merchant_order_id", flat.get("id"))
        return {"received": True}

    try:
        draft = await shopify.complete_draft_order(str(draft_order_id), payment_pending=False, client=client)
        logger.info("paymob.callback draft_order=%s payée (transaction=%s)", draft_order_id, flat.get("id"))
        check_paid_amount(draft, flat)
    except Exception:
        # Déjà payé côté Paymob: on accuse réception, la draft reste à réconcilier
        logger.exception("paymob.callback finalisation Shopify échouée draft_order=%s", draft_order_id)
    return {"received": True}
