"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_SHORT_LINK_PREFIXES = (
    "https://maps.app.goo.gl/",
    "https://goo.gl/maps/",
    "https://g.co/kgs/",
)


@dataclass(frozen=True)
class Settings:
    google_maps_api_key: str
    places_language_code: str = "ja"
    request_timeout_seconds: float = 10.0
    similarity_threshold: float = 0.3
    nearby_search_radius_meters: float = 50.0
    legacy_search_radius_meters: float = 1000.0
    nominatim_url: str = "https://nominatim.openstreetmap.org/reverse"
    http_user_agent: str = "PlaceResolverBot/1.0"
    catalog_api_url: str = ""
    catalog_api_token: str = ""
    catalog_source_tag: str = "discord"
    worker_port: int = 8082
    short_link_prefixes: Tuple[str, ...] = DEFAULT_SHORT_LINK_PREFIXES


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    google_maps_api_key = os.getenv("GOOGLE_MAPS_API_KEY", "")
    catalog_api_url = os.getenv("CATALOG_API_URL", "").rstrip("/")
    extra_prefixes = tuple(
        prefix.strip() for prefix in os.getenv("SHORT_LINK_PREFIXES", "").split(",") if prefix.strip()
    )

    if not google_maps_api_key:
        logger.warning("GOOGLE_MAPS_API_KEY is not configured; Places requests will fail.")
    if not catalog_api_url:
        logger.warning("CATALOG_API_URL is not configured; catalog submissions will fail.")

    return Settings(
        google_maps_api_key=google_maps_api_key,
        places_language_code=os.getenv("PLACES_LANGUAGE_CODE", "ja"),
        request_timeout_seconds=float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10")),
        similarity_threshold=float(os.getenv("SIMILARITY_THRESHOLD", "0.3")),
        nearby_search_radius_meters=float(os.getenv("NEARBY_SEARCH_RADIUS_METERS", "50")),
        legacy_search_radius_meters=float(os.getenv("LEGACY_SEARCH_RADIUS_METERS", "1000")),
        nominatim_url=os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org/reverse"),
        http_user_agent=os.getenv("HTTP_USER_AGENT", "PlaceResolverBot/1.0"),
        catalog_api_url=catalog_api_url,
        catalog_api_token=os.getenv("CATALOG_API_TOKEN", ""),
        catalog_source_tag=os.getenv("CATALOG_SOURCE_TAG", "discord"),
        worker_port=int(os.getenv("WORKER_PORT", "8082")),
        short_link_prefixes=DEFAULT_SHORT_LINK_PREFIXES + extra_prefixes,
    )
