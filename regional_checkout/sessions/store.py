"""
Stockage des sessions de checkout: token opaque -> panier, durée de vie bornée, lecture unique.

Deux backends:
- InMemorySessionStore: dict protégé par un verrou (mono-process, perdu au redémarrage)
- RedisSessionStore: client redis.asyncio, lecture+suppression atomique via GETDEL

Les méthodes create/consume sont des coroutines: un backend réseau ne bloque pas la boucle.

consume() supprime toujours l'entrée trouvée, qu'elle soit valide ou expirée:
un token ne rend jamais deux fois son panier. L'expiration est vérifiée à la lecture.
"""
import json
import logging
import secrets
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

from regional_checkout.cart.models import Cart

logger = logging.getLogger(__name__)

TOKEN_BYTES = 24


class SessionNotFound(Exception):
    """Token inconnu ou déjà consommé."""


class SessionExpired(Exception):
    """Token trouvé mais plus vieux que le TTL (l'entrée a été supprimée)."""


class SessionStore(ABC):
    backend_name = "abstract"

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    @staticmethod
    def new_token() -> str:
        return secrets.token_urlsafe(TOKEN_BYTES)

    def _is_expired(self, created_at: float) -> bool:
        return self._clock() - created_at > self.ttl_seconds

    @abstractmethod
    async def create(self, cart: Cart) -> str:
        ...

    @abstractmethod
    async def consume(self, token: str) -> Cart:
        ...

    async def close(self) -> None:
        return None

    def describe(self) -> Dict[str, object]:
        return {"backend": self.backend_name, "ttl_seconds": self.ttl_seconds}


class InMemorySessionStore(SessionStore):
    backend_name = "memory"

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.time):
        super().__init__(ttl_seconds, clock)
        self._entries: Dict[str, Tuple[Cart, float]] = {}
        self._lock = threading.Lock()

    async def create(self, cart: Cart) -> str:
        token = self.new_token()
        with self._lock:
            self._entries[token] = (cart, self._clock())
        return token

    async def consume(self, token: str) -> Cart:
        with self._lock:
            entry = self._entries.pop(token, None)
        if entry is None:
            raise SessionNotFound(token)
        cart, created_at = entry
        if self._is_expired(created_at):
            raise SessionExpired(token)
        return cart

    def __len__(self) -> int:
        return len(self._entries)


class RedisSessionStore(SessionStore):
    """
    Backend Redis (partagé entre process).
    - La clé expire côté Redis après TTL + grace: au-delà, le token est « inconnu ».
    - Pendant la grâce, consume() distingue encore SessionExpired de SessionNotFound.
    """
    backend_name = "redis"
    KEY_PREFIX = "checkout:session:"

    def __init__(self, client, ttl_seconds: int, clock: Callable[[], float] = time.time, grace_seconds: Optional[int] = None):
        super().__init__(ttl_seconds, clock)
        self.client = client
        self.grace_seconds = ttl_seconds if grace_seconds is None else grace_seconds

    def _key(self, token: str) -> str:
        return f"{self.KEY_PREFIX}{token}"

    async def create(self, cart: Cart) -> str:
        token = self.new_token()
        value = json.dumps({"cart": cart.model_dump(mode="json"), "created_at": self._clock()})
        await self.client.set(self._key(token), value, ex=self.ttl_seconds + self.grace_seconds)
        return token

    async def consume(self, token: str) -> Cart:
        raw = await self.client.getdel(self._key(token))
        if raw is None:
            raise SessionNotFound(token)
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            data = json.loads(raw)
            created_at = float(data["created_at"])
            cart = Cart.model_validate(data["cart"])
        except (ValueError, KeyError, TypeError):
            logger.warning("sessions.redis entrée illisible token=%s...", token[:6])
            raise SessionNotFound(token)
        if self._is_expired(created_at):
            raise SessionExpired(token)
        return cart

    async def close(self) -> None:
        await self.client.aclose()


def build_session_store(backend: str, ttl_seconds: int, redis_url: str = "") -> SessionStore:
    """
    Construit le store selon SESSION_BACKEND ("memory" | "redis").
    - "redis" nécessite une URL valide; la connexion n'est pas testée ici.
    """
    if backend == "redis":
        import redis.asyncio as aioredis
        client = aioredis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        return RedisSessionStore(client, ttl_seconds)
    if backend != "memory":
        logger.warning("SESSION_BACKEND inconnu (%s), repli sur memory", backend)
    return InMemorySessionStore(ttl_seconds)
