"""OpenStreetMap Nominatim reverse geocoding client."""

from typing import Any, Dict, Optional

import requests

from place_resolver.core.context import RequestContext
from place_resolver.core.errors import ResolutionError

_DEFAULT_URL = "https://nominatim.openstreetmap.org/reverse"


class NominatimError(ResolutionError):
    """Raised when Nominatim cannot be reached or answers with an error."""


def reverse(
    session: requests.Session,
    latitude: float,
    longitude: float,
    *,
    context: RequestContext,
    user_agent: str,
    base_url: str = _DEFAULT_URL,
    accept_language: str = "ja",
) -> Dict[str, Any]:
    params = {
        "format": "json",
        "lat": f"{latitude:f}",
        "lon": f"{longitude:f}",
        "accept-language": accept_language,
    }
    # Nominatim's usage policy rejects requests without an identifying agent.
    headers = {"User-Agent": user_agent}
    try:
        response = session.get(base_url, params=params, headers=headers, timeout=context.timeout())
    except requests.RequestException as exc:
        raise NominatimError(f"Nominatim request failed: {exc}") from exc

    if response.status_code != 200:
        raise NominatimError(f"Nominatim returned status {response.status_code}")
    try:
        payload = response.json()
    except ValueError as exc:
        raise NominatimError("Nominatim returned a non-JSON body") from exc
    if isinstance(payload, dict) and payload.get("error"):
        raise NominatimError(str(payload["error"]))
    return payload if isinstance(payload, dict) else {}


def display_name(payload: Optional[Dict[str, Any]]) -> str:
    if not payload:
        return ""
    return (payload.get("display_name") or "").strip()
