"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (ex: gunicorn/uvicorn-workers) importe `regional_checkout.asgi:app`.
- Toute la configuration de FastAPI est centralisée dans la factory (app_setup.factory),
  ce fichier ne fait qu’exposer l’instance `app`.
- Les sessions de checkout vivent en mémoire par défaut: un seul worker, ou SESSION_BACKEND=redis.
"""

from regional_checkout.app import app
