"""
Module 'cart' (feature-first): modèles de panier, parsing permissif, totaux,
prise en charge du panier de la boutique et page de checkout.
"""

from .models import Cart, CartItem
from .cart import (
    parse_item,
    parse_items,
    parse_raw_cart,
    convert_cart,
    grand_total,
    to_cents,
    format_amount,
)

__all__ = [
    # models
    "Cart",
    "CartItem",
    # cart
    "parse_item",
    "parse_items",
    "parse_raw_cart",
    "convert_cart",
    "grand_total",
    "to_cents",
    "format_amount",
]
