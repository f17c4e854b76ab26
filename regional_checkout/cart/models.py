from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

# module regional_checkout.cart.models
class CartItem(BaseModel):
    """Ligne de panier normalisée (prix unitaire dans la devise du panier)."""
    model_config = ConfigDict(frozen=True)

    id: str = ""
    variant_id: Optional[str] = None
    name: str = "Article"
    category: str = ""
    description: str = ""
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    quantity: int = Field(default=1, ge=1)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart(BaseModel):
    """
    Panier figé tel que stocké dans une session de checkout.
    - total: sous-total annoncé par la boutique (converti si besoin)
    - currency: devise des montants
    """
    model_config = ConfigDict(frozen=True)

    total: Decimal = Decimal("0")
    currency: str = "EGP"
    items: List[CartItem] = Field(default_factory=list)
