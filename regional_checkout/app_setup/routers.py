"""
Registre central des routers.
- Panier: prise en charge du panier de la boutique, page de checkout
- Checkout API: soumission, callback Paymob, retour succès
- Health
"""
from fastapi import FastAPI
from regional_checkout.cart import views as cart_views
from regional_checkout.checkout import views as checkout_views
from regional_checkout.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l’application.
    - L’ordre n’a pas d’impact sauf conflits de chemins.
    """
    app.include_router(cart_views.router)
    app.include_router(checkout_views.router)
    # Health & monitoring
    app.include_router(health_router)
