import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from regional_checkout import config
from regional_checkout.sessions import SessionExpired, SessionNotFound, SessionStore, get_session_store
from regional_checkout.utils.rate_limit import optional_rate_limit
from .page import render_checkout_page
from .service import create_checkout_session

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Cart"])

# module regional_checkout.cart.views
@router.post(
    "/api/checkout/render",
    dependencies=[Depends(optional_rate_limit(times=config.INTAKE_RATE_LIMIT, seconds=config.RATE_LIMIT_WINDOW_SECONDS))],
)
async def cart_intake(request: Request, store: SessionStore = Depends(get_session_store)):
    """
    Reçoit le panier de la boutique et renvoie l'URL de la page de checkout.
    - Entrée JSON: { "total": <num>, "items": [ {id, variantId, name, category, price, quantity}, ... ] }
    - Sortie: { "success": true, "redirectUrl": "<base>/checkout?token=..." }
    - Erreurs: 400 si body illisible ou panier vide
    """
    try:
        body: Dict[str, Any] = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="JSON invalide")

    token = await create_checkout_session(body, store)
    base = config.PUBLIC_BASE_URL or str(request.base_url).rstrip("/")
    redirect_url = f"{base}{request.app.url_path_for('checkout_page')}?token={token}"
    return JSONResponse({"success": True, "redirectUrl": redirect_url})

@router.get("/checkout", name="checkout_page")
async def checkout_page(request: Request, token: str = "", store: SessionStore = Depends(get_session_store)):
    """
    Consomme la session et affiche la page de checkout.
    - 400: token absent, 404: inconnu ou déjà utilisé, 410: expiré (texte brut)
    """
    token = (token or "").strip()
    if not token:
        return PlainTextResponse("Lien de checkout invalide (token manquant)", status_code=400)
    try:
        cart = await store.consume(token)
    except SessionNotFound:
        return PlainTextResponse("Session de checkout introuvable ou déjà utilisée", status_code=404)
    except SessionExpired:
        return PlainTextResponse("Session de checkout expirée, veuillez revenir au panier", status_code=410)
    return render_checkout_page(request, cart)
