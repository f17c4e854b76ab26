"""
Logique panier pure (pas de HTTP, pas de store).
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from regional_checkout.currency.rates import convert
from .models import Cart, CartItem

CENT = Decimal("0.01")

# module regional_checkout.cart.cart
def _price(value: Any) -> Decimal:
    """
    Parse permissif d'un prix.
    - Accepte str|float|int|Decimal.
    - Retourne 0 si parsing impossible, négatif ou non fini.
    """
    try:
        price = Decimal(str(value if value is not None else 0).strip() or "0")
        if not price.is_finite() or price < 0:
            return Decimal("0")
        return price.quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return Decimal("0")

def _quantity(value: Any) -> int:
    try:
        qty = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 1
    return qty if qty >= 1 else 1

def _text(value: Any, default: str = "") -> str:
    text = str(value).strip() if value is not None else ""
    return text or default

def _variant_id(value: Any) -> Optional[str]:
    """Extrait l'identifiant numérique d'un variant (accepte les GID gid://shopify/ProductVariant/123)."""
    text = _text(value)
    if not text:
        return None
    return text.rsplit("/", 1)[-1] or None

def parse_item(raw: Dict[str, Any]) -> CartItem:
    """
    Construit une ligne à partir d'un article brut de la boutique.
    - Clés reconnues: id, variantId|variant_id, name|title, category, description, price, quantity
    - Prix/quantités invalides ramenés à 0/1 plutôt que rejetés
    """
    raw = raw if isinstance(raw, dict) else {}
    variant = raw.get("variantId") or raw.get("variant_id")
    return CartItem(
        id=_text(raw.get("id") or variant),
        variant_id=_variant_id(variant),
        name=_text(raw.get("name") or raw.get("title"), "Article"),
        category=_text(raw.get("category")),
        description=_text(raw.get("description")),
        unit_price=_price(raw.get("price")),
        quantity=_quantity(raw.get("quantity")),
    )

def parse_items(raw_items: Any) -> List[CartItem]:
    """
    Parse une liste d'articles bruts.
    - Soulève HTTPException(400) si la liste est absente ou vide.
    """
    if not isinstance(raw_items, list) or not raw_items:
        raise HTTPException(status_code=400, detail="Panier vide")
    return [parse_item(it) for it in raw_items]

def parse_raw_cart(payload: Dict[str, Any], currency: str) -> Cart:
    """
    Panier brut {total, items[]} -> Cart.
    - total absent/invalide: recalculé depuis les lignes
    """
    payload = payload if isinstance(payload, dict) else {}
    items = parse_items(payload.get("items"))
    total = _price(payload.get("total"))
    if total <= 0:
        total = sum((it.line_total for it in items), Decimal("0"))
    return Cart(total=total, currency=currency, items=items)

def convert_cart(cart: Cart, rate: Decimal, currency: str) -> Cart:
    """Applique le taux à chaque prix unitaire et au total (arrondi au centime)."""
    items = [it.model_copy(update={"unit_price": convert(it.unit_price, rate)}) for it in cart.items]
    return Cart(total=convert(cart.total, rate), currency=currency, items=items)

def grand_total(items: List[CartItem], shipping_fee: Decimal) -> Decimal:
    """Somme des sous-totaux de lignes + frais de port fixes."""
    return sum((it.line_total for it in items), Decimal("0")) + shipping_fee

def to_cents(amount: Decimal) -> int:
    """Montant -> unités mineures (entier), arrondi ROUND_HALF_UP."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def format_amount(amount: Decimal) -> str:
    return f"{Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP):.2f}"
