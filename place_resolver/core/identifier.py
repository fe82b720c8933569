"""Choose and run the lookup strategy that yields a modern place id.

The decision is made once per request by ``choose_strategy`` and returns one
of four strategy records:

* ``ById``: the URL already carries a modern id; nothing to look up.
* ``LegacyConvert``: the URL carries a legacy hex-pair CID, which the details
  endpoint rejects; a name-anchored text search converts it.
* ``NameSearch``: no coordinates, or the name segment came from a share link
  with a postal address; the service's own ranking is trusted.
* ``GeoSearch``: coordinates and a plausible name; nearby places are scored
  by name similarity and a weak best match is refused.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from place_resolver.core.context import RequestContext
from place_resolver.core.errors import (
    NoConfidentMatchError,
    PlaceNotFoundError,
    UnsupportedLegacyIdentifierError,
)
from place_resolver.core.similarity import best_match, rank_candidates
from place_resolver.etl.transform import to_candidates
from place_resolver.models import LEGACY, MODERN, Coordinates, PlaceIdentifier, ResolvedName
from place_resolver.vendors.google_places import GooglePlacesClient, GooglePlacesError


_MODERN_ID_PATTERNS = (
    re.compile(r"[?&](?:query_)?place_id=([A-Za-z0-9_-]+)"),
    re.compile(r"place_id:([A-Za-z0-9_-]+)"),
    # Any other long token after !1s is a modern id too (GhIJ..., EicK...).
    re.compile(r"!1s(ChIJ[A-Za-z0-9_-]+|(?!0x)[A-Za-z0-9_-]{16,}(?=$|[!?&/]))"),
)
_LEGACY_ID_PATTERNS = (
    re.compile(r"!1s(0x[0-9a-fA-F]+:0x[0-9a-fA-F]+)"),
    re.compile(r"[?&]ftid=(0x[0-9a-fA-F]+:0x[0-9a-fA-F]+)"),
)
_LEGACY_FORM = re.compile(r"^0x[0-9a-fA-F]+:0x[0-9a-fA-F]+$")


@dataclass(frozen=True)
class ById:
    place_id: str


@dataclass(frozen=True)
class LegacyConvert:
    legacy_id: str
    name: str
    coordinates: Optional[Coordinates] = None


@dataclass(frozen=True)
class NameSearch:
    query: str
    coordinates: Optional[Coordinates] = None


@dataclass(frozen=True)
class GeoSearch:
    coordinates: Coordinates
    name: str = ""


Strategy = Union[ById, LegacyConvert, NameSearch, GeoSearch]


def is_legacy_id(value: str) -> bool:
    return bool(_LEGACY_FORM.match(value or ""))


def identifier_from_url(url: str) -> Optional[PlaceIdentifier]:
    for pattern in _MODERN_ID_PATTERNS:
        match = pattern.search(url or "")
        if match:
            return PlaceIdentifier(match.group(1), MODERN)

    for pattern in _LEGACY_ID_PATTERNS:
        matches = pattern.findall(url or "")
        if matches:
            # Multi-place URLs list the target place last.
            return PlaceIdentifier(matches[-1], LEGACY)
    return None


def choose_strategy(
    identifier: Optional[PlaceIdentifier],
    name: ResolvedName,
    coordinates: Optional[Coordinates],
) -> Strategy:
    if identifier is not None and not identifier.is_legacy:
        return ById(identifier.value)
    if identifier is not None:
        return LegacyConvert(identifier.value, name.name, coordinates)
    if name.has_postal_code or coordinates is None:
        # A share-link segment carries the postal address as well as the name,
        # and a biased text search ranks the right branch first with both.
        query = name.raw_segment if name.has_postal_code else name.name
        return NameSearch(query, coordinates)
    return GeoSearch(coordinates, name.name)


class IdentifierResolver:
    def __init__(
        self,
        client: GooglePlacesClient,
        *,
        context: RequestContext,
        similarity_threshold: float = 0.3,
        nearby_radius_meters: float = 50.0,
        search_bias_radius_meters: float = 1000.0,
    ) -> None:
        self.client = client
        self.context = context
        self.similarity_threshold = similarity_threshold
        self.nearby_radius_meters = nearby_radius_meters
        self.search_bias_radius_meters = search_bias_radius_meters
        self._handlers: Dict[type, Callable[..., PlaceIdentifier]] = {
            ById: self._by_id,
            LegacyConvert: self._legacy_convert,
            NameSearch: self._name_search,
            GeoSearch: self._geo_search,
        }

    def resolve(self, strategy: Strategy) -> PlaceIdentifier:
        self.context.log.info("Resolving place id via %s", type(strategy).__name__)
        identifier = self._handlers[type(strategy)](strategy)
        self.context.log.info("Resolved place id %s", identifier.value)
        return identifier

    def _by_id(self, strategy: ById) -> PlaceIdentifier:
        return PlaceIdentifier(strategy.place_id, MODERN)

    def _legacy_convert(self, strategy: LegacyConvert) -> PlaceIdentifier:
        if not strategy.name:
            raise UnsupportedLegacyIdentifierError(
                f"Legacy place id {strategy.legacy_id} cannot be converted without a place name"
            )
        try:
            places = self.client.text_search(
                strategy.name,
                location_bias=strategy.coordinates,
                radius_meters=self.search_bias_radius_meters,
            )
        except GooglePlacesError as exc:
            raise UnsupportedLegacyIdentifierError(
                f"Legacy place id {strategy.legacy_id} could not be converted: {exc}"
            ) from exc

        candidates = [candidate for candidate in to_candidates(places) if not is_legacy_id(candidate.place_id)]
        ranked = rank_candidates(strategy.name, candidates)
        if not ranked:
            raise UnsupportedLegacyIdentifierError(
                f"Legacy place id {strategy.legacy_id} could not be converted: no places found for {strategy.name!r}"
            )
        candidate, score = ranked[0]
        self.context.log.info(
            "Converted legacy id %s to %s (%r, similarity=%.2f)",
            strategy.legacy_id,
            candidate.place_id,
            candidate.name,
            score,
        )
        return PlaceIdentifier(candidate.place_id, MODERN)

    def _name_search(self, strategy: NameSearch) -> PlaceIdentifier:
        if not strategy.query:
            raise PlaceNotFoundError("The URL carries neither a place name nor coordinates to search with")
        places = self.client.text_search(
            strategy.query,
            location_bias=strategy.coordinates,
            radius_meters=self.search_bias_radius_meters,
        )
        candidates = to_candidates(places)
        if not candidates:
            raise PlaceNotFoundError(f"No places found for {strategy.query!r}")
        top = candidates[0]
        self.context.log.info("Text search picked %s (%r)", top.place_id, top.name)
        return PlaceIdentifier(top.place_id, MODERN)

    def _geo_search(self, strategy: GeoSearch) -> PlaceIdentifier:
        places = self.client.nearby_search(
            strategy.coordinates,
            self.nearby_radius_meters,
            rank_by_distance=not strategy.name,
        )
        candidates = to_candidates(places)

        if not strategy.name:
            if not candidates:
                raise PlaceNotFoundError("No places found near the given coordinates")
            self.context.log.warning("No usable name; taking nearest place %s (%r)", candidates[0].place_id, candidates[0].name)
            return PlaceIdentifier(candidates[0].place_id, MODERN)

        match = best_match(strategy.name, candidates, self.similarity_threshold)
        if match is None:
            ranked = rank_candidates(strategy.name, candidates)
            best_score = ranked[0][1] if ranked else 0.0
            raise NoConfidentMatchError(
                f"No nearby place matches {strategy.name!r} confidently "
                f"(best similarity {best_score:.2f} < {self.similarity_threshold:.2f})"
            )
        candidate, score = match
        self.context.log.info("Nearby search matched %s (%r, similarity=%.2f)", candidate.place_id, candidate.name, score)
        return PlaceIdentifier(candidate.place_id, MODERN)
