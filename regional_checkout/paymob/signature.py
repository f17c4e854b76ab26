"""
Vérification HMAC des callbacks de transaction Paymob.
La chaîne signée est la concaténation, dans l'ordre de HMAC_FIELDS, des valeurs
de la transaction aplatie (booléens en minuscules), signée en HMAC-SHA512 hex.
"""
import hashlib
import hmac
from typing import Any, Dict

HMAC_FIELDS = (
    "amount_cents",
    "created_at",
    "currency",
    "error_occured",
    "has_parent_transaction",
    "id",
    "integration_id",
    "is_3d_secure",
    "is_auth",
    "is_capture",
    "is_refunded",
    "is_standalone_payment",
    "is_voided",
    "order",
    "owner",
    "pending",
    "source_data_pan",
    "source_data_sub_type",
    "source_data_type",
    "success",
)

# module regional_checkout.paymob.signature
def flatten_transaction(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalise le body du callback en dict plat.
    - Enveloppe {"type": "TRANSACTION", "obj": {...}} ou objet déjà plat
    - order: {"id": ...} -> order=<id>, merchant_order_id
    - source_data: {"pan", "sub_type", "type"} -> source_data_pan, ...
    """
    obj = payload.get("obj") if isinstance(payload.get("obj"), dict) else payload
    flat: Dict[str, Any] = dict(obj)

    order = obj.get("order")
    if isinstance(order, dict):
        flat["order"] = order.get("id")
        flat["merchant_order_id"] = order.get("merchant_order_id")
    source = obj.get("source_data")
    if isinstance(source, dict):
        for key, value in source.items():
            flat[f"source_data_{key}"] = value
        flat.pop("source_data", None)
    return flat

def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)

def signed_string(flat: Dict[str, Any]) -> str:
    return "".join(_stringify(flat.get(name)) for name in HMAC_FIELDS)

def compute_hmac(flat: Dict[str, Any], secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), signed_string(flat).encode("utf-8"), hashlib.sha512).hexdigest()

def verify_hmac(flat: Dict[str, Any], received: str, secret: str) -> bool:
    if not received or not secret:
        return False
    return hmac.compare_digest(compute_hmac(flat, secret), received.strip().lower())

def is_success(flat: Dict[str, Any]) -> bool:
    value = flat.get("success")
    return value is True or str(value).lower() == "true"
