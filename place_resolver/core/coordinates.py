"""Recover latitude/longitude for a place from its URL, the details API, or the page."""

import logging
import re
from typing import Callable, Optional

from bs4 import BeautifulSoup

from place_resolver.core.page_scan import plausible_coordinates, scan_coordinates
from place_resolver.models import Coordinates, PlaceDetails

logger = logging.getLogger(__name__)

# The !3d/!4d pair marks the pin itself, @lat,lng only the viewport centre.
URL_COORDINATE_PATTERNS = (
    re.compile(r"!3d(-?\d+\.\d+)!4d(-?\d+\.\d+)"),
    re.compile(r"@(-?\d+\.\d+),(-?\d+\.\d+)"),
    re.compile(r"[?&]ll=(-?\d+\.\d+),(-?\d+\.\d+)"),
    re.compile(r"[?&]center=(-?\d+\.\d+),(-?\d+\.\d+)"),
    re.compile(r"[?&]q=(-?\d+\.\d+),\s*(-?\d+\.\d+)"),
)


def coordinates_from_url(url: str) -> Optional[Coordinates]:
    for pattern in URL_COORDINATE_PATTERNS:
        match = pattern.search(url or "")
        if match:
            coordinates = plausible_coordinates(match.group(1), match.group(2))
            if coordinates is not None:
                return coordinates
    return None


class CoordinateExtractor:
    """Tries the URL, then a known place id, then an already fetched page.

    ``details_lookup`` is the request's PlaceDetailFetcher; it memoizes, so
    asking it here costs nothing extra when the details are fetched later.
    """

    def __init__(self, details_lookup: Optional[Callable[[str], PlaceDetails]] = None) -> None:
        self.details_lookup = details_lookup

    def extract(
        self,
        url: str,
        *,
        place_id: Optional[str] = None,
        page: Optional[BeautifulSoup] = None,
    ) -> Optional[Coordinates]:
        coordinates = coordinates_from_url(url)
        if coordinates is not None:
            return coordinates

        if place_id and self.details_lookup is not None:
            coordinates = self.details_lookup(place_id).coordinates
            if coordinates is not None:
                return coordinates

        coordinates = scan_coordinates(page)
        if coordinates is not None:
            logger.debug("Recovered coordinates %s from page body", coordinates)
        return coordinates
