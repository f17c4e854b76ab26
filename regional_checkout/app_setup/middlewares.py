from fastapi import Request, FastAPI
from fastapi.middleware.cors import CORSMiddleware
try:
    from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware
except ImportError:
    ProxyHeadersMiddleware = None
from regional_checkout.config import CORS_ORIGINS, FORWARDED_ALLOW_IPS, PAYMOB_BASE_URL

"""
Middlewares transverses de l’application.
- register_basic_middlewares: CORS (le script de la boutique appelle l'API depuis le domaine
  Shopify) et confiance en X-Forwarded-*.
- register_security_middleware: en-têtes de sécurité et CSP de la page de checkout.
Notes:
- Pas de CSRF: aucun cookie de session, le token de checkout est à usage unique.
"""
def register_basic_middlewares(app: FastAPI) -> None:
    """
    Ajoute les middlewares « de base »:
    - CORSMiddleware: autorise les origines définies (domaine de la boutique).
    - ProxyHeadersMiddleware (si dispo): en-têtes x-forwarded-* des proxys de confiance seulement.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    # En-têtes X-Forwarded-* crus uniquement depuis FORWARDED_ALLOW_IPS
    if ProxyHeadersMiddleware:
        app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=FORWARDED_ALLOW_IPS)

def register_security_middleware(app: FastAPI) -> None:
    """
    En-têtes de sécurité posés si absents:
    - X-Frame-Options, X-Content-Type-Options, Referrer-Policy, Permissions-Policy
    - CSP: scripts/styles inline de la page de checkout, connexion à l'API, navigation vers Paymob
    """
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        if "X-Frame-Options" not in response.headers:
            response.headers["X-Frame-Options"] = "DENY"
        if "X-Content-Type-Options" not in response.headers:
            response.headers["X-Content-Type-Options"] = "nosniff"
        if "Referrer-Policy" not in response.headers:
            response.headers["Referrer-Policy"] = "no-referrer"
        if "Permissions-Policy" not in response.headers:
            response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

        swagger_cdns = ["https://cdn.jsdelivr.net", "https://fastapi.tiangolo.com"]
        csp = (
            "default-src 'self'; "
            "base-uri 'self'; object-src 'none'; frame-ancestors 'none'; "
            f"img-src 'self' data: {' '.join(swagger_cdns)}; "
            f"style-src 'self' 'unsafe-inline' {' '.join(swagger_cdns)}; "
            f"script-src 'self' 'unsafe-inline' {' '.join(swagger_cdns)}; "
            "connect-src 'self'; "
            f"form-action 'self' {PAYMOB_BASE_URL}"
        )
        if "Content-Security-Policy" not in response.headers:
            response.headers["Content-Security-Policy"] = csp
        return response
