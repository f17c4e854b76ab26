import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.status import HTTP_303_SEE_OTHER

from regional_checkout import config
from regional_checkout.utils.rate_limit import optional_rate_limit
from . import service as checkout_service
from . import webhook as checkout_webhook

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Checkout API"])

# module regional_checkout.checkout.views
@router.post(
    "/api/checkout/egypt",
    name="submit_checkout",
    dependencies=[Depends(optional_rate_limit(times=config.SUBMIT_RATE_LIMIT, seconds=config.RATE_LIMIT_WINDOW_SECONDS))],
)
async def submit_checkout(request: Request):
    """
    Soumission du formulaire de checkout.
    - Entrée JSON: { "cartItems": [...], "customer": {...}, "billingData": {...}, "paymentMethod": "card"|"wallet"|"cod" }
    - Sortie: { "success": true, "paymentUrl" | "redirectUrl": "...", "orderIds": {...} }
    - Erreurs (handlers globaux): 500 configuration, statut amont si Shopify/Paymob refuse, 500 sinon
    """
    try:
        body: Dict[str, Any] = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="JSON invalide")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="JSON invalide")
    customer = body.get("customer") or {}
    billing_data = body.get("billingData") or {}
    if not isinstance(customer, dict) or not isinstance(billing_data, dict):
        raise HTTPException(status_code=400, detail="customer et billingData doivent être des objets")

    result = await checkout_service.submit_checkout(
        cart_items=body.get("cartItems"),
        customer=customer,
        billing_data=billing_data,
        payment_method=body.get("paymentMethod"),
    )
    return JSONResponse(result)

@router.post("/api/paymob/callback", include_in_schema=False)
async def paymob_callback(request: Request, hmac: str = ""):
    """
    Callback de transaction Paymob (HMAC en query ?hmac=...).
    - 400: signature invalide ou body illisible, aucune action
    - 200 {"received": true}: signature valide (succès ou non du paiement)
    """
    try:
        payload = await request.json()
    except ValueError:
        return JSONResponse({"error": "Invalid payload"}, status_code=400)
    if not isinstance(payload, dict):
        return JSONResponse({"error": "Invalid payload"}, status_code=400)
    result = await checkout_webhook.handle_transaction_callback(payload, hmac)
    return JSONResponse(result)

@router.get("/api/checkout/success", include_in_schema=False)
def checkout_success(order_id: str = ""):
    """Retour Paymob (redirection navigateur) vers la page de remerciement du front."""
    return RedirectResponse(url=checkout_service.thank_you_url(order_id), status_code=HTTP_303_SEE_OTHER)
