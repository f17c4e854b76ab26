"""
Gestionnaires d’exceptions (utilisés par la factory).
- Erreurs métier -> JSON {"success": false, "error": ...} avec le bon statut.
- HTTPException conserve la réponse JSON FastAPI standard ({"detail": ...}).
"""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from regional_checkout.exceptions import ConfigurationError, InvalidSignature, UpstreamError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre les handlers:
    - ConfigurationError: 500, liste des clés manquantes
    - UpstreamError: statut et payload du service tiers si disponibles, sinon 502
    - InvalidSignature: 400 {"error": ...}
    - Exception: 500 message générique (détail uniquement dans les logs)
    """
    @app.exception_handler(ConfigurationError)
    async def configuration_error(request: Request, exc: ConfigurationError):
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(exc), "missing": exc.missing},
        )

    @app.exception_handler(UpstreamError)
    async def upstream_error(request: Request, exc: UpstreamError):
        status = exc.status_code if exc.status_code and exc.status_code >= 400 else 502
        content = {"success": False, "error": str(exc), "service": exc.service}
        if exc.payload is not None:
            content["details"] = exc.payload
        return JSONResponse(status_code=status, content=content)

    @app.exception_handler(InvalidSignature)
    async def invalid_signature(request: Request, exc: InvalidSignature):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("Erreur inattendue sur %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"success": False, "error": "Erreur interne du serveur"})
