"""
Module 'paymob' (feature-first): client Accept (auth, commande, clé de paiement)
et vérification HMAC des callbacks.
"""

from .client import (
    BILLING_DEFAULTS,
    build_billing_data,
    build_order_items,
    amount_cents_of,
    iframe_url,
    authenticate,
    register_order,
    get_payment_key,
)
from .signature import HMAC_FIELDS, flatten_transaction, signed_string, compute_hmac, verify_hmac, is_success

__all__ = [
    # client
    "BILLING_DEFAULTS",
    "build_billing_data",
    "build_order_items",
    "amount_cents_of",
    "iframe_url",
    "authenticate",
    "register_order",
    "get_payment_key",
    # signature
    "HMAC_FIELDS",
    "flatten_transaction",
    "signed_string",
    "compute_hmac",
    "verify_hmac",
    "is_success",
]
