"""Expand shortened map links and percent-decode map URLs."""

from typing import Iterable, Optional
from urllib.parse import parse_qs, unquote, urlparse

import requests

from place_resolver.core.config import DEFAULT_SHORT_LINK_PREFIXES
from place_resolver.core.context import RequestContext
from place_resolver.core.errors import UnsupportedUrlError, UrlExpansionError


BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)
MAP_URL_PREFIXES = (
    "https://www.google.com/maps",
    "https://google.com/maps",
    "https://maps.google.com/",
    "https://www.google.co.jp/maps",
)
_WRAPPED_TARGET_PARAMS = ("url", "link", "continue", "q")


def is_short_link(url: str, prefixes: Iterable[str] = DEFAULT_SHORT_LINK_PREFIXES) -> bool:
    return any(url.startswith(prefix) for prefix in prefixes)


def is_supported_maps_url(url: str, prefixes: Iterable[str] = DEFAULT_SHORT_LINK_PREFIXES) -> bool:
    url = (url or "").strip()
    return url.startswith(MAP_URL_PREFIXES) or is_short_link(url, prefixes)


def ensure_supported(url: str, prefixes: Iterable[str] = DEFAULT_SHORT_LINK_PREFIXES) -> str:
    cleaned = (url or "").strip()
    if not is_supported_maps_url(cleaned, prefixes):
        raise UnsupportedUrlError(
            "Unsupported URL. Use a Google Maps place link such as https://www.google.com/maps/place/..."
        )
    return cleaned


def normalize_url(
    raw_url: str,
    session: requests.Session,
    *,
    context: RequestContext,
    short_link_prefixes: Iterable[str] = DEFAULT_SHORT_LINK_PREFIXES,
) -> str:
    """Return the expanded, percent-decoded form of ``raw_url``."""
    return unquote(
        expand_url(raw_url, session, context=context, short_link_prefixes=short_link_prefixes)
    )


def expand_url(
    raw_url: str,
    session: requests.Session,
    *,
    context: RequestContext,
    short_link_prefixes: Iterable[str] = DEFAULT_SHORT_LINK_PREFIXES,
) -> str:
    """Expand a short link but leave percent-escapes alone.

    Name extraction reads this form: a decoded ``?`` or ``#`` inside a place
    name would otherwise end the path early.
    """
    url = (raw_url or "").strip()
    if is_short_link(url, tuple(short_link_prefixes)):
        url = expand_short_link(url, session, context=context)
        context.log.info("Expanded short link to %s", url)
    return url


def expand_short_link(short_url: str, session: requests.Session, *, context: RequestContext) -> str:
    """Probe the redirect without following it and read ``Location``."""
    try:
        response = session.head(
            short_url,
            allow_redirects=False,
            headers={"User-Agent": BROWSER_USER_AGENT},
            timeout=context.timeout(),
        )
    except requests.RequestException as exc:
        raise UrlExpansionError(f"Failed to expand shortened URL: {exc}") from exc

    location = response.headers.get("Location")
    if not location:
        raise UrlExpansionError("Failed to expand shortened URL: no redirect location found")

    return unwrap_redirect(location) or location


def unwrap_redirect(location: str) -> Optional[str]:
    """One more level: a redirector that carries the real target in its query."""
    parsed = urlparse(location)
    if "/maps/place/" in parsed.path:
        return None
    query = parse_qs(parsed.query)
    for name in _WRAPPED_TARGET_PARAMS:
        for value in query.get(name, []):
            if value.startswith(("http://", "https://")):
                return value
    return None
