"""
Taux de change boutique -> devise locale.
- FIXED_CURRENCY_RATE prioritaire (pas d'appel réseau)
- Sinon appel HTTP court (timeout explicite), mis en cache CURRENCY_RATE_TTL secondes
- En cas d'échec: FALLBACK_CURRENCY_RATE (jamais d'exception vers l'appelant)
"""
import logging
import time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Callable, Optional

import httpx

from regional_checkout import config

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# module regional_checkout.currency.rates
class RateCache:
    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._rate: Optional[Decimal] = None
        self._fetched_at: float = 0.0

    def get(self, ttl_seconds: int) -> Optional[Decimal]:
        if self._rate is None:
            return None
        if self._clock() - self._fetched_at > ttl_seconds:
            return None
        return self._rate

    def set(self, rate: Decimal) -> None:
        self._rate = rate
        self._fetched_at = self._clock()

    def clear(self) -> None:
        self._rate = None
        self._fetched_at = 0.0


_cache = RateCache()


def _fixed_rate() -> Optional[Decimal]:
    raw = (config.FIXED_CURRENCY_RATE or "").strip()
    if not raw:
        return None
    try:
        rate = Decimal(raw)
    except InvalidOperation:
        logger.warning("FIXED_CURRENCY_RATE invalide: %s", raw)
        return None
    return rate if rate > 0 else None


async def fetch_rate(client: Optional[httpx.AsyncClient] = None) -> Decimal:
    """
    Lit le taux courant sur CURRENCY_RATE_URL (format {"rates": {"EGP": 48.7, ...}}).
    Lève httpx.HTTPError / ValueError / KeyError en cas d'échec.
    """
    target = config.PAYMOB_CURRENCY
    if client is None:
        async with httpx.AsyncClient(timeout=config.CURRENCY_RATE_TIMEOUT) as own_client:
            resp = await own_client.get(config.CURRENCY_RATE_URL)
    else:
        resp = await client.get(config.CURRENCY_RATE_URL, timeout=config.CURRENCY_RATE_TIMEOUT)
    resp.raise_for_status()
    value = resp.json()["rates"][target]
    rate = Decimal(str(value))
    if rate <= 0:
        raise ValueError(f"taux non positif: {rate}")
    return rate


async def get_rate(client: Optional[httpx.AsyncClient] = None, cache: Optional[RateCache] = None) -> Decimal:
    fixed = _fixed_rate()
    if fixed is not None:
        return fixed

    cache = cache or _cache
    cached = cache.get(config.CURRENCY_RATE_TTL)
    if cached is not None:
        return cached

    try:
        rate = await fetch_rate(client)
    except (httpx.HTTPError, ValueError, KeyError, TypeError, InvalidOperation) as e:
        logger.warning("currency.get_rate échec (%s), taux de repli=%s", e, config.FALLBACK_CURRENCY_RATE)
        return config.FALLBACK_CURRENCY_RATE
    cache.set(rate)
    logger.info("currency.get_rate %s->%s=%s", config.STORE_CURRENCY, config.PAYMOB_CURRENCY, rate)
    return rate


def convert(amount: Decimal, rate: Decimal) -> Decimal:
    """Convertit et arrondit au centime (ROUND_HALF_UP)."""
    return (amount * rate).quantize(CENT, rounding=ROUND_HALF_UP)
