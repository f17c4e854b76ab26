# regional_checkout.config
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pathlib import Path
import logging
import os
import sys
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

PACKAGE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = PACKAGE_DIR / "public"
TEMPLATES_DIR = PACKAGE_DIR / "templates"

"""
Configuration centrale du service de checkout régional.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env) sans écraser l'environnement
- Expose les chemins utiles (PUBLIC_DIR, TEMPLATES_DIR)
- Normalise et expose les secrets/URLs (Shopify, Paymob), frais de port, TTL de session
- Les variantes historiques du flux (conversion de devise, paiement à la livraison)
  sont des drapeaux de configuration
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _flag(name: str, default: str = "false") -> bool:
    return _clean_env(os.getenv(name, default)).lower() in ("1", "true", "yes", "on")

def _decimal(name: str, default: str) -> Decimal:
    raw = _clean_env(os.getenv(name) or default)
    try:
        return Decimal(raw)
    except InvalidOperation:
        logging.getLogger(__name__).warning("Valeur invalide pour %s: %r (défaut %s)", name, raw, default)
        return Decimal(default)

def _money(name: str, default: str) -> Decimal:
    """
    Montant de configuration en devise locale:
    - arrondi au centime (ROUND_HALF_UP), négatif ramené au défaut
    """
    value = _decimal(name, default)
    if not value.is_finite() or value < 0:
        logging.getLogger(__name__).warning("Montant invalide pour %s: %s (défaut %s)", name, value, default)
        value = Decimal(default)
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

def _int(name: str, default: int) -> int:
    try:
        return int(_clean_env(os.getenv(name) or str(default)))
    except ValueError:
        return default

# Shopify (Admin API): domaine *.myshopify.com sans schéma
SHOPIFY_STORE_DOMAIN = _clean_env(os.getenv("SHOPIFY_STORE_DOMAIN") or "")
if SHOPIFY_STORE_DOMAIN.startswith("https://"):
    SHOPIFY_STORE_DOMAIN = SHOPIFY_STORE_DOMAIN[len("https://"):]
SHOPIFY_STORE_DOMAIN = SHOPIFY_STORE_DOMAIN.rstrip("/")
SHOPIFY_ADMIN_ACCESS_TOKEN = _clean_env(os.getenv("SHOPIFY_ADMIN_ACCESS_TOKEN") or "")
SHOPIFY_API_VERSION = _clean_env(os.getenv("SHOPIFY_API_VERSION") or "2025-01")

# Paymob Accept: clé API, secret HMAC du webhook, identifiants par moyen de paiement
PAYMOB_BASE_URL = _clean_env(os.getenv("PAYMOB_BASE_URL") or "https://accept.paymob.com").rstrip("/")
PAYMOB_API_KEY = _clean_env(os.getenv("PAYMOB_API_KEY") or "")
PAYMOB_HMAC_SECRET = _clean_env(os.getenv("PAYMOB_HMAC_SECRET") or os.getenv("PAYMOB_HMAC") or "")
# PAYMOB_INTEGRATION_ID / PAYMOB_IFRAME_ID: noms legacy, repris pour la carte
PAYMOB_CARD_INTEGRATION_ID = _clean_env(os.getenv("PAYMOB_CARD_INTEGRATION_ID") or os.getenv("PAYMOB_INTEGRATION_ID") or "")
PAYMOB_CARD_IFRAME_ID = _clean_env(os.getenv("PAYMOB_CARD_IFRAME_ID") or os.getenv("PAYMOB_IFRAME_ID") or "")
PAYMOB_WALLET_INTEGRATION_ID = _clean_env(os.getenv("PAYMOB_WALLET_INTEGRATION_ID") or "")
PAYMOB_WALLET_IFRAME_ID = _clean_env(os.getenv("PAYMOB_WALLET_IFRAME_ID") or "")
PAYMOB_CURRENCY = _clean_env(os.getenv("PAYMOB_CURRENCY") or "EGP")
PAYMOB_PAYMENT_KEY_EXPIRATION = _int("PAYMOB_PAYMENT_KEY_EXPIRATION", 3600)

# URLs: front (page de remerciement) et URL publique de ce service
# (lien de checkout; à défaut l'URL de la requête)
FRONTEND_URL = _clean_env(os.getenv("FRONTEND_URL") or "").rstrip("/")
PUBLIC_BASE_URL = _clean_env(os.getenv("PUBLIC_BASE_URL") or "").rstrip("/")

# Checkout: frais de port fixes (devise locale) et durée de vie des sessions
SHIPPING_FEE = _money("SHIPPING_FEE", "100")
SHIPPING_TITLE = os.getenv("SHIPPING_TITLE", "Shipping")
SESSION_TTL_SECONDS = _int("SESSION_TTL_SECONDS", 15 * 60)
SESSION_BACKEND = _clean_env(os.getenv("SESSION_BACKEND") or "memory").lower()
SESSION_REDIS_URL = _clean_env(os.getenv("SESSION_REDIS_URL") or "redis://127.0.0.1:6379/1")

# Devise: conversion optionnelle du panier (devise boutique -> devise locale)
CURRENCY_CONVERSION_ENABLED = _flag("CURRENCY_CONVERSION_ENABLED")
STORE_CURRENCY = _clean_env(os.getenv("STORE_CURRENCY") or "USD").upper()
FIXED_CURRENCY_RATE = _clean_env(os.getenv("FIXED_CURRENCY_RATE") or "")
FALLBACK_CURRENCY_RATE = _decimal("FALLBACK_CURRENCY_RATE", "50")
CURRENCY_RATE_URL = _clean_env(os.getenv("CURRENCY_RATE_URL") or f"https://open.er-api.com/v6/latest/{STORE_CURRENCY}")
CURRENCY_RATE_TTL = _int("CURRENCY_RATE_TTL", 60 * 60)
CURRENCY_RATE_TIMEOUT = float(_clean_env(os.getenv("CURRENCY_RATE_TIMEOUT") or "3"))

# Paiement à la livraison (pas d'appel Paymob)
COD_ENABLED = _flag("COD_ENABLED", "true")

# CORS: le script de la boutique appelle l'API depuis le domaine Shopify
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Proxys dont les en-têtes X-Forwarded-* sont crus (IP client du rate limiting)
FORWARDED_ALLOW_IPS = [h.strip() for h in os.getenv("FORWARDED_ALLOW_IPS", "127.0.0.1").split(",") if h.strip()]

# Rate limiting (fastapi-limiter)
INTAKE_RATE_LIMIT = _int("INTAKE_RATE_LIMIT", 30)
SUBMIT_RATE_LIMIT = _int("SUBMIT_RATE_LIMIT", 10)
RATE_LIMIT_WINDOW_SECONDS = _int("RATE_LIMIT_WINDOW_SECONDS", 60)


def missing_keys(names) -> list:
    """
    Retourne la liste des clés de configuration vides parmi `names`.
    - Lit la valeur courante du module (compatible monkeypatch en tests).
    """
    module = sys.modules[__name__]
    return [n for n in names if not str(getattr(module, n, "") or "").strip()]
