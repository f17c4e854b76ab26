"""
Exceptions métier du checkout.
- ConfigurationError: configuration incomplète, levée avant tout appel externe.
- UpstreamError: refus d'un service tiers (Shopify, Paymob), statut et payload conservés.
- InvalidSignature: HMAC du webhook invalide.
"""
from typing import Any, Iterable, Optional


class CheckoutError(Exception):
    """Racine des erreurs du service."""


class ConfigurationError(CheckoutError):
    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Configuration manquante: {', '.join(self.missing)}")


class UpstreamError(CheckoutError):
    def __init__(self, service: str, message: str, status_code: Optional[int] = None, payload: Any = None):
        self.service = service
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"{service}: {message}")


class InvalidSignature(CheckoutError):
    pass
