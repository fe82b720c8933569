"""Last-resort address recovery from coordinates."""

import requests

from place_resolver.core.context import RequestContext
from place_resolver.models import Coordinates
from place_resolver.vendors import nominatim


def reverse_geocode(
    session: requests.Session,
    coordinates: Coordinates,
    *,
    context: RequestContext,
    user_agent: str,
    base_url: str,
    accept_language: str = "ja",
) -> str:
    """Display address for ``coordinates``, or "" when the service fails or knows nothing."""
    try:
        payload = nominatim.reverse(
            session,
            coordinates.latitude,
            coordinates.longitude,
            context=context,
            user_agent=user_agent,
            base_url=base_url,
            accept_language=accept_language,
        )
    except nominatim.NominatimError as exc:
        context.log.warning("Reverse geocoding failed for %s: %s", coordinates, exc)
        return ""
    return nominatim.display_name(payload)
