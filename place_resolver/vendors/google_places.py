"""Client utilities for the Google Places API (New)."""

import logging
from typing import Any, Dict, List, Optional

import requests

from place_resolver.core.context import RequestContext
from place_resolver.core.errors import ResolutionError
from place_resolver.models import Coordinates

logger = logging.getLogger(__name__)
_BASE_URL = "https://places.googleapis.com/v1"

SEARCH_FIELD_MASK = "places.id,places.displayName,places.location"
DETAILS_FIELD_MASK = "id,displayName,formattedAddress,location,websiteUri,regularOpeningHours"
LOCATION_FIELD_MASK = "id,location"


class GooglePlacesError(ResolutionError):
    """Raised when the Places API returns a non-successful response."""


class GooglePlacesClient:
    """Thin wrapper over the three Places endpoints the resolver needs.

    The session belongs to the caller so each resolution owns its own client.
    Nothing here retries; failures surface as ``GooglePlacesError``.
    """

    def __init__(
        self,
        session: requests.Session,
        api_key: str,
        *,
        language_code: str = "ja",
        context: Optional[RequestContext] = None,
    ) -> None:
        self.session = session
        self.api_key = api_key
        self.language_code = language_code
        self.context = context or RequestContext()

    def _headers(self, field_mask: str) -> Dict[str, str]:
        if not self.api_key:
            raise GooglePlacesError("GOOGLE_MAPS_API_KEY is required for Places requests")
        return {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": field_mask,
        }

    def _request(self, method: str, path: str, field_mask: str, **kwargs: Any) -> Dict[str, Any]:
        headers = self._headers(field_mask)
        timeout = self.context.timeout()
        try:
            response = self.session.request(method, f"{_BASE_URL}/{path}", headers=headers, timeout=timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise GooglePlacesError(f"Places request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.status_code != 200:
            error = payload.get("error") or {}
            logger.error(
                "%s %s failed: status=%s, error_message=%s",
                method,
                path,
                response.status_code,
                error.get("message"),
            )
            raise GooglePlacesError(error.get("message") or f"Places API returned status {response.status_code}")
        return payload

    def text_search(
        self,
        query: str,
        *,
        location_bias: Optional[Coordinates] = None,
        radius_meters: float = 1000.0,
        max_results: int = 5,
    ) -> List[Dict[str, Any]]:
        body: Dict[str, Any] = {
            "textQuery": query,
            "languageCode": self.language_code,
            "maxResultCount": max_results,
        }
        if location_bias is not None:
            body["locationBias"] = _circle(location_bias, radius_meters)
        payload = self._request("POST", "places:searchText", SEARCH_FIELD_MASK, json=body)
        return payload.get("places", [])

    def nearby_search(
        self,
        center: Coordinates,
        radius_meters: float,
        *,
        query: Optional[str] = None,
        rank_by_distance: bool = False,
        max_results: int = 20,
    ) -> List[Dict[str, Any]]:
        """Places around ``center``; with ``query`` this becomes a biased text search."""
        if query:
            return self.text_search(query, location_bias=center, radius_meters=radius_meters, max_results=max_results)

        body: Dict[str, Any] = {
            "languageCode": self.language_code,
            "maxResultCount": max_results,
            "locationRestriction": _circle(center, radius_meters),
        }
        if rank_by_distance:
            body["rankPreference"] = "DISTANCE"
        payload = self._request("POST", "places:searchNearby", SEARCH_FIELD_MASK, json=body)
        return payload.get("places", [])

    def place_details(self, place_id: str, *, field_mask: str = DETAILS_FIELD_MASK) -> Dict[str, Any]:
        params = {"languageCode": self.language_code}
        return self._request("GET", f"places/{place_id}", field_mask, params=params)


def _circle(center: Coordinates, radius_meters: float) -> Dict[str, Any]:
    return {
        "circle": {
            "center": {"latitude": center.latitude, "longitude": center.longitude},
            "radius": float(radius_meters),
        }
    }
