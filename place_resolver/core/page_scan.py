"""Fetch a map page once and scan its markup for embedded place data."""

import re
from typing import Iterator, Optional

import requests
from bs4 import BeautifulSoup

from place_resolver.core.context import RequestContext
from place_resolver.core.url_normalizer import BROWSER_USER_AGENT
from place_resolver.models import Coordinates


MIN_PLACE_ID_LENGTH = 10

_PLACE_ID_PATTERNS = (
    re.compile(r'"place_id"\s*:\s*"([A-Za-z0-9_-]+)"'),
    re.compile(r"place_id=([A-Za-z0-9_-]+)"),
    re.compile(r'"placeId"\s*:\s*"([A-Za-z0-9_-]+)"'),
)
_COORDINATE_PATTERNS = (
    re.compile(r'"lat"\s*:\s*(-?\d+\.\d+)\s*,\s*"lng"\s*:\s*(-?\d+\.\d+)'),
    re.compile(r"\blat\s*[:=]\s*(-?\d+\.\d+)\s*,\s*lng\s*[:=]\s*(-?\d+\.\d+)"),
    re.compile(r'"latitude"\s*:\s*(-?\d+\.\d+)\s*,\s*"longitude"\s*:\s*(-?\d+\.\d+)'),
    re.compile(r"\[null,null,(-?\d+\.\d+),(-?\d+\.\d+)\]"),
)


def fetch_page(session: requests.Session, url: str, *, context: RequestContext) -> Optional[BeautifulSoup]:
    """GET the page; a failed fetch only means there is nothing to scan."""
    try:
        response = session.get(
            url,
            headers={"User-Agent": BROWSER_USER_AGENT},
            timeout=context.timeout(),
            allow_redirects=True,
        )
    except requests.RequestException as exc:
        context.log.warning("Failed to fetch %s: %s", url, exc)
        return None

    if response.status_code != 200:
        context.log.warning("Page fetch for %s returned status %s", url, response.status_code)
        return None
    return BeautifulSoup(response.text, "html.parser")


def scan_place_id(soup: Optional[BeautifulSoup]) -> Optional[str]:
    if soup is None:
        return None
    node = soup.find(attrs={"data-place-id": True})
    if node is not None and len(node["data-place-id"]) > MIN_PLACE_ID_LENGTH:
        return node["data-place-id"]
    for text in _script_texts(soup):
        for pattern in _PLACE_ID_PATTERNS:
            for match in pattern.finditer(text):
                if len(match.group(1)) > MIN_PLACE_ID_LENGTH:
                    return match.group(1)
    return None


def scan_coordinates(soup: Optional[BeautifulSoup]) -> Optional[Coordinates]:
    if soup is None:
        return None
    for text in _script_texts(soup):
        for pattern in _COORDINATE_PATTERNS:
            for match in pattern.finditer(text):
                coordinates = plausible_coordinates(match.group(1), match.group(2))
                if coordinates is not None:
                    return coordinates
    return None


def plausible_coordinates(latitude: str, longitude: str) -> Optional[Coordinates]:
    try:
        lat, lng = float(latitude), float(longitude)
    except ValueError:
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return None
    return Coordinates(lat, lng)


def _script_texts(soup: BeautifulSoup) -> Iterator[str]:
    """Inline scripts first, then the whole document as a last resort."""
    for script in soup.find_all("script"):
        text = script.string or script.get_text()
        if text:
            yield text
    yield str(soup)
