"""
Prise en charge du panier de la boutique: parsing, conversion de devise optionnelle,
création de la session de checkout.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from regional_checkout import config
from regional_checkout.currency import rates
from regional_checkout.sessions import SessionStore
from . import cart as cart_logic
from .models import Cart

logger = logging.getLogger(__name__)

# module regional_checkout.cart.service
async def prepare_cart(payload: Dict[str, Any], client: Optional[httpx.AsyncClient] = None) -> Cart:
    """
    Panier brut -> Cart en devise locale.
    - Conversion désactivée: les prix sont supposés déjà en devise locale.
    - Conversion active: taux du module currency (fixe, cache, ou repli).
    """
    if not config.CURRENCY_CONVERSION_ENABLED:
        return cart_logic.parse_raw_cart(payload, currency=config.PAYMOB_CURRENCY)

    cart = cart_logic.parse_raw_cart(payload, currency=config.STORE_CURRENCY)
    rate = await rates.get_rate(client)
    return cart_logic.convert_cart(cart, rate, currency=config.PAYMOB_CURRENCY)

async def create_checkout_session(
    payload: Dict[str, Any],
    store: SessionStore,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Stocke le panier et renvoie le token de session."""
    cart = await prepare_cart(payload, client)
    token = await store.create(cart)
    logger.info(
        "cart.intake session créée items=%s total=%s %s backend=%s",
        len(cart.items), cart_logic.format_amount(cart.total), cart.currency, store.backend_name,
    )
    return token
