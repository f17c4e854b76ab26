"""
Module 'checkout': soumission du formulaire (Shopify + Paymob) et callback Paymob.
"""
from .service import (
    COD,
    GATEWAY_METHODS,
    normalize_payment_method,
    required_keys,
    check_configuration,
    thank_you_url,
    enabled_payment_methods,
    submit_checkout,
)
from .webhook import handle_transaction_callback

__all__ = [
    "COD",
    "GATEWAY_METHODS",
    "normalize_payment_method",
    "required_keys",
    "check_configuration",
    "thank_you_url",
    "enabled_payment_methods",
    "submit_checkout",
    "handle_transaction_callback",
]
