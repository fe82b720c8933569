"""Error types raised by the place resolution pipeline."""

from enum import Enum


class ResolutionError(RuntimeError):
    """Base class for fatal failures; the message is shown to the requesting user."""

    @property
    def code(self) -> str:
        return type(self).__name__


class UnsupportedUrlError(ResolutionError):
    """Raised when the input is not a map URL we know how to read."""


class UrlExpansionError(ResolutionError):
    """Raised when a shortened link does not redirect anywhere."""


class UnsupportedLegacyIdentifierError(ResolutionError):
    """Raised when a legacy CID could not be converted to a modern place id."""


class NoConfidentMatchError(ResolutionError):
    """Raised when no nearby candidate is similar enough to the extracted name."""


class PlaceNotFoundError(ResolutionError):
    """Raised when a search has nothing to search for or returns no places."""


class PlaceDetailsError(ResolutionError):
    """Raised when the authoritative details lookup fails."""


class ResolutionCancelled(ResolutionError):
    """Raised when the caller's deadline passed or the request was cancelled."""


class Degradation(str, Enum):
    """Non-fatal conditions; the pipeline records them and keeps going."""

    NAME_EXTRACTION_AMBIGUOUS = "NameExtractionAmbiguous"
    HOURS_PARSE_DEGRADED = "HoursParseDegraded"
    REVERSE_GEOCODE_UNAVAILABLE = "ReverseGeocodeUnavailable"
