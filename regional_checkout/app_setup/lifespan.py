"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Construit le store des sessions de checkout (SESSION_BACKEND: memory | redis).
- Initialise FastAPILimiter (Redis) avec options de test (fakeredis).
- Variables d’environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l’init échoue
"""
import os
import logging
import redis.asyncio as aioredis
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from regional_checkout import config
from regional_checkout.sessions import build_session_store

async def init_rate_limiter(app: FastAPI, logger: logging.Logger) -> None:
    """
    Configure le rate limiting et gère les fallbacks.
    - En cas d’échec de Redis et sans fallback, le rate limiting est désactivé proprement.
    - Les logs indiquent l’état effectif (enabled/disabled) pour observabilité.
    """
    try:
        if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
            app.state.rate_limit_enabled = False
            logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
            return

        if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
            from fakeredis.aioredis import FakeRedis
            r = FakeRedis(decode_responses=True)
        else:
            redis_url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
            r = aioredis.from_url(redis_url, encoding="utf-8", decode_responses=True)

        await FastAPILimiter.init(r)
        app.state.limiter_initialized = True
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning(f"Rate limiting falling back to local in-memory due to init error: {e}")
        else:
            app.state.rate_limit_enabled = False
            logger.warning(f"Rate limiting disabled due to init error: {e}")

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("uvicorn.error")
    app.state.limiter_initialized = False
    # Un store injecté avant le démarrage (tests) est conservé
    owns_store = getattr(app.state, "session_store", None) is None
    if owns_store:
        app.state.session_store = build_session_store(
            config.SESSION_BACKEND, config.SESSION_TTL_SECONDS, config.SESSION_REDIS_URL
        )
    logger.info("Checkout sessions: backend=%s ttl=%ss", app.state.session_store.backend_name, config.SESSION_TTL_SECONDS)

    await init_rate_limiter(app, logger)
    yield
    if app.state.limiter_initialized:
        try:
            await FastAPILimiter.close()
        except Exception as e:
            logger.warning(f"FastAPILimiter.close failed: {e}")
    if owns_store:
        await app.state.session_store.close()
        app.state.session_store = None
