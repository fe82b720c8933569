"""Utilities for transforming Places API responses into domain records."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlparse

from place_resolver.models import CanonicalPlace, Coordinates, PlaceCandidate, PlaceDetails

logger = logging.getLogger(__name__)

SOCIAL_HOSTS = {
    "instagram": ("instagram.com", "instagr.am"),
    "facebook": ("facebook.com", "fb.com", "fb.me"),
    "twitter": ("twitter.com", "x.com"),
    "tiktok": ("tiktok.com",),
    "youtube": ("youtube.com", "youtu.be"),
    "linkedin": ("linkedin.com",),
    "line": ("line.me", "lin.ee"),
}

_COUNTRY_PREFIXES = ("日本、", "日本 ", "日本,", "Japan, ")
_COUNTRY_SUFFIXES = (", Japan", "、日本")


def parse_coordinates(location: Optional[Dict[str, Any]]) -> Optional[Coordinates]:
    if not location:
        return None
    latitude = _safe_float(location.get("latitude"))
    longitude = _safe_float(location.get("longitude"))
    if latitude is None or longitude is None:
        return None
    return Coordinates(latitude, longitude)


def to_candidates(places: Iterable[Dict[str, Any]]) -> List[PlaceCandidate]:
    candidates: List[PlaceCandidate] = []
    for place in places or []:
        place_id = place.get("id")
        if not place_id:
            logger.debug("Skipping search hit without id: %s", place)
            continue
        candidates.append(
            PlaceCandidate(
                place_id=place_id,
                name=_display_name(place),
                coordinates=parse_coordinates(place.get("location")),
            )
        )
    return candidates


def to_place_details(payload: Dict[str, Any], requested_id: str) -> PlaceDetails:
    hours = payload.get("regularOpeningHours") or {}
    descriptions = tuple(str(text) for text in hours.get("weekdayDescriptions") or [])
    website = (payload.get("websiteUri") or "").strip() or None
    return PlaceDetails(
        place_id=payload.get("id") or requested_id,
        name=_display_name(payload),
        address=clean_address(payload.get("formattedAddress")),
        coordinates=parse_coordinates(payload.get("location")),
        website_uri=website,
        weekday_descriptions=descriptions,
    )


def clean_address(address: Optional[str]) -> str:
    """Drop the country name the API prepends (ja) or appends (en)."""
    if not address:
        return ""
    cleaned = address.strip()
    for prefix in _COUNTRY_PREFIXES:
        if cleaned.startswith(prefix):
            cleaned = cleaned[len(prefix):].lstrip()
            break
    for suffix in _COUNTRY_SUFFIXES:
        if cleaned.endswith(suffix):
            cleaned = cleaned[: -len(suffix)].rstrip()
            break
    return cleaned


def is_social_url(url: str) -> bool:
    host = urlparse(url if "://" in url else f"https://{url}").netloc.lower()
    host = host.split(":", 1)[0]
    for allowed_hosts in SOCIAL_HOSTS.values():
        for allowed in allowed_hosts:
            if host == allowed or host.endswith(f".{allowed}"):
                return True
    return False


def classify_website(website_uri: Optional[str]) -> Tuple[Optional[str], Tuple[str, ...]]:
    """Split a website into (home page, social links)."""
    if not website_uri:
        return None, ()
    if is_social_url(website_uri):
        return None, (website_uri,)
    return website_uri, ()


def to_catalog_payload(place: CanonicalPlace, *, source_tag: str = "discord") -> Dict[str, Any]:
    """Shape a CanonicalPlace into the catalog's store create request."""
    payload: Dict[str, Any] = {
        "name": place.name,
        "address": place.address,
        "categories": [],
        "business_hours": place.business_hours.to_dict(),
        "parking_info": "",
        "website_url": place.website_url or "",
        "google_map_url": place.source_url,
        "sns_urls": list(place.sns_urls),
        "tags": [source_tag] if source_tag else [],
        "photos": [],
    }
    # Unknown coordinates are left out, never zero-filled.
    if place.coordinates is not None:
        payload["latitude"] = place.coordinates.latitude
        payload["longitude"] = place.coordinates.longitude
    return payload


def _display_name(place: Dict[str, Any]) -> str:
    display = place.get("displayName") or {}
    if isinstance(display, dict):
        return (display.get("text") or "").strip()
    return str(display).strip()


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None
