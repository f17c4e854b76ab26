from fastapi import Request

from regional_checkout import config
from regional_checkout.checkout.service import enabled_payment_methods
from regional_checkout.utils.templates import templates
from . import cart as cart_logic
from .models import Cart

# module regional_checkout.cart.page
def render_checkout_page(request: Request, cart: Cart):
    """
    Page de checkout (récapitulatif, adresse, moyen de paiement).
    Le panier est embarqué dans la page: le token est déjà consommé.
    """
    shipping_fee = config.SHIPPING_FEE
    context = {
        "cart": cart,
        "items_json": [
            {
                "id": it.id,
                "variantId": it.variant_id,
                "name": it.name,
                "description": it.description,
                "price": cart_logic.format_amount(it.unit_price),
                "quantity": it.quantity,
            }
            for it in cart.items
        ],
        "shipping_fee": shipping_fee,
        "grand_total": cart_logic.grand_total(cart.items, shipping_fee),
        "payment_methods": enabled_payment_methods(),
        "submit_url": str(request.url_for("submit_checkout")),
    }
    resp = templates.TemplateResponse(request, "checkout.html", context)
    resp.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
    resp.headers["Pragma"] = "no-cache"
    resp.headers["Expires"] = "0"
    return resp
