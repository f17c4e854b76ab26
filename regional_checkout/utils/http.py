"""
Helper HTTP commun aux adaptateurs Shopify/Paymob.
- Un seul point d'appel httpx (facile à mocker en tests via un client injecté)
- Toute réponse non 2xx ou erreur réseau devient UpstreamError(service, status, payload)
"""
import logging
from typing import Any, Dict, Optional

import httpx

from regional_checkout.exceptions import UpstreamError

logger = logging.getLogger(__name__)


def _payload(response: httpx.Response) -> Any:
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return response.text


async def request_json(
    service: str,
    method: str,
    url: str,
    *,
    json: Optional[Dict[str, Any]] = None,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Any:
    """Envoie une requête JSON et renvoie le body décodé (dict) si 2xx."""
    try:
        if client is None:
            async with httpx.AsyncClient() as own_client:
                response = await own_client.request(method, url, json=json, params=params, headers=headers)
        else:
            response = await client.request(method, url, json=json, params=params, headers=headers)
    except httpx.HTTPError as e:
        logger.error("%s %s %s erreur réseau: %s", service, method, url, e)
        raise UpstreamError(service, f"erreur réseau: {e}") from e

    data = _payload(response)
    if response.status_code >= 400:
        logger.error("%s %s %s status=%s payload=%s", service, method, url, response.status_code, data)
        raise UpstreamError(service, f"HTTP {response.status_code}", status_code=response.status_code, payload=data)
    return data
