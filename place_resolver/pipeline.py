"""Place resolution pipeline: map URL in, CanonicalPlace out."""

from __future__ import annotations

import logging
import threading
from typing import List, Optional
from urllib.parse import unquote

import requests

from place_resolver.core.config import Settings, get_settings
from place_resolver.core.context import RequestContext
from place_resolver.core.coordinates import CoordinateExtractor, coordinates_from_url
from place_resolver.core.details import PlaceDetailFetcher
from place_resolver.core.errors import Degradation
from place_resolver.core.identifier import IdentifierResolver, choose_strategy, identifier_from_url, is_legacy_id
from place_resolver.core.name_extractor import extract_name
from place_resolver.core.page_scan import fetch_page, scan_place_id
from place_resolver.core.reverse_geocode import reverse_geocode
from place_resolver.core.url_normalizer import expand_url
from place_resolver.etl.hours import parse_weekly_schedule
from place_resolver.etl.transform import classify_website
from place_resolver.models import CanonicalPlace, PlaceIdentifier
from place_resolver.vendors.google_places import GooglePlacesClient

UNKNOWN_NAME = "Unknown Store"


class PlaceResolver:
    """Runs one resolution at a time over a session it may own.

    Instances hold no state between ``resolve`` calls other than the HTTP
    session, so concurrent callers should each build their own resolver.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        session: Optional[requests.Session] = None,
        context: Optional[RequestContext] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.context = context or RequestContext(
            call_timeout=self.settings.request_timeout_seconds,
            logger=logger,
        )

    def __enter__(self) -> "PlaceResolver":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def resolve(self, raw_url: str) -> CanonicalPlace:
        settings = self.settings
        ctx = self.context
        log = ctx.log
        degradations: List[str] = []

        ctx.check()
        expanded = expand_url(raw_url, self.session, context=ctx, short_link_prefixes=settings.short_link_prefixes)
        url = unquote(expanded)
        log.debug("Normalized URL: %s", url)

        client = GooglePlacesClient(
            self.session,
            settings.google_maps_api_key,
            language_code=settings.places_language_code,
            context=ctx,
        )
        fetcher = PlaceDetailFetcher(client)

        name = extract_name(expanded)
        if not name.is_valid:
            log.warning("No plausible place name in URL path (segment=%r)", name.raw_segment)
            degradations.append(Degradation.NAME_EXTRACTION_AMBIGUOUS.value)

        identifier = identifier_from_url(url)
        page = None
        if identifier is None and coordinates_from_url(url) is None:
            page = fetch_page(self.session, url, context=ctx)
            page_id = scan_place_id(page)
            if page_id and not is_legacy_id(page_id):
                log.info("Found place id %s in page body", page_id)
                identifier = PlaceIdentifier(page_id)

        known_id = identifier.value if identifier is not None and not identifier.is_legacy else None
        coordinates = CoordinateExtractor(fetcher).extract(url, place_id=known_id, page=page)
        log.debug("Name=%r coordinates=%s identifier=%s", name.name, coordinates, identifier)

        ctx.check()
        strategy = choose_strategy(identifier, name, coordinates)
        resolver = IdentifierResolver(
            client,
            context=ctx,
            similarity_threshold=settings.similarity_threshold,
            nearby_radius_meters=settings.nearby_search_radius_meters,
            search_bias_radius_meters=settings.legacy_search_radius_meters,
        )
        place_id = resolver.resolve(strategy)

        ctx.check()
        details = fetcher.fetch(place_id.value)

        schedule, hours_degraded = parse_weekly_schedule(details.weekday_descriptions)
        if hours_degraded:
            degradations.append(Degradation.HOURS_PARSE_DEGRADED.value)

        final_coordinates = details.coordinates or coordinates
        address = details.address
        if not address:
            if final_coordinates is not None:
                ctx.check()
                address = reverse_geocode(
                    self.session,
                    final_coordinates,
                    context=ctx,
                    user_agent=settings.http_user_agent,
                    base_url=settings.nominatim_url,
                    accept_language=settings.places_language_code,
                )
            if not address:
                log.warning("Address unavailable for %s", place_id.value)
                degradations.append(Degradation.REVERSE_GEOCODE_UNAVAILABLE.value)

        website_url, sns_urls = classify_website(details.website_uri)
        place = CanonicalPlace(
            name=details.name or name.name or UNKNOWN_NAME,
            address=address,
            coordinates=final_coordinates,
            business_hours=schedule,
            source_url=(raw_url or "").strip(),
            place_id=details.place_id,
            website_url=website_url,
            sns_urls=sns_urls,
            degradations=tuple(degradations),
        )
        log.info("Resolved %r at %s", place.name, place.address or "<no address>")
        return place


def resolve_place(
    raw_url: str,
    *,
    settings: Optional[Settings] = None,
    budget_seconds: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None,
    logger: Optional[logging.Logger] = None,
) -> CanonicalPlace:
    """Resolve ``raw_url`` with a fresh session and context."""
    settings = settings or get_settings()
    context_kwargs = dict(call_timeout=settings.request_timeout_seconds, cancel_event=cancel_event, logger=logger)
    if budget_seconds is not None:
        context = RequestContext.with_budget(budget_seconds, **context_kwargs)
    else:
        context = RequestContext(**context_kwargs)
    with PlaceResolver(settings, context=context) as resolver:
        return resolver.resolve(raw_url)
