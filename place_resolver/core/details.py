"""Resolve a modern place id into authoritative place attributes."""

from typing import Dict

from place_resolver.core.errors import PlaceDetailsError
from place_resolver.etl.transform import to_place_details
from place_resolver.models import PlaceDetails
from place_resolver.vendors.google_places import GooglePlacesClient, GooglePlacesError


class PlaceDetailFetcher:
    """One details lookup per place id for the lifetime of a single request."""

    def __init__(self, client: GooglePlacesClient) -> None:
        self.client = client
        self._fetched: Dict[str, PlaceDetails] = {}

    def __call__(self, place_id: str) -> PlaceDetails:
        return self.fetch(place_id)

    def fetch(self, place_id: str) -> PlaceDetails:
        if place_id in self._fetched:
            return self._fetched[place_id]

        try:
            payload = self.client.place_details(place_id)
        except GooglePlacesError as exc:
            raise PlaceDetailsError(f"Places details lookup failed for {place_id}: {exc}") from exc

        details = to_place_details(payload, place_id)
        if not details.name and not details.address:
            raise PlaceDetailsError(f"Places API returned empty data for place id {place_id}")

        self._fetched[place_id] = details
        return details
