"""Core data models shared by the place resolution pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple

WEEKDAYS: Tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

MODERN = "modern"
LEGACY = "legacy"


@dataclass(frozen=True, slots=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class ResolvedName:
    """Best-effort place name pulled out of a map URL path."""

    name: str = ""
    raw_segment: str = ""
    is_valid: bool = False
    has_postal_code: bool = False


@dataclass(frozen=True, slots=True)
class PlaceIdentifier:
    value: str
    kind: str = MODERN

    @property
    def is_legacy(self) -> bool:
        return self.kind == LEGACY


@dataclass(frozen=True, slots=True)
class PlaceCandidate:
    """A search hit considered during disambiguation; never persisted."""

    place_id: str
    name: str
    coordinates: Optional[Coordinates] = None


@dataclass(frozen=True, slots=True)
class PlaceDetails:
    """Authoritative attributes returned by the places details endpoint."""

    place_id: str
    name: str = ""
    address: str = ""
    coordinates: Optional[Coordinates] = None
    website_uri: Optional[str] = None
    weekday_descriptions: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TimeSlot:
    open_time: str
    close_time: str
    last_order_time: str


@dataclass(frozen=True, slots=True)
class DaySchedule:
    is_closed: bool = False
    time_slots: Tuple[TimeSlot, ...] = ()


@dataclass(frozen=True, slots=True)
class WeeklySchedule:
    monday: DaySchedule = field(default_factory=DaySchedule)
    tuesday: DaySchedule = field(default_factory=DaySchedule)
    wednesday: DaySchedule = field(default_factory=DaySchedule)
    thursday: DaySchedule = field(default_factory=DaySchedule)
    friday: DaySchedule = field(default_factory=DaySchedule)
    saturday: DaySchedule = field(default_factory=DaySchedule)
    sunday: DaySchedule = field(default_factory=DaySchedule)

    def days(self) -> Tuple[DaySchedule, ...]:
        return tuple(getattr(self, day) for day in WEEKDAYS)

    def to_dict(self) -> Dict[str, Any]:
        return {
            day: {
                "is_closed": schedule.is_closed,
                "time_slots": [asdict(slot) for slot in schedule.time_slots],
            }
            for day, schedule in zip(WEEKDAYS, self.days())
        }


@dataclass(frozen=True, slots=True)
class CanonicalPlace:
    """Final, immutable output of one resolution request."""

    name: str
    address: str
    coordinates: Optional[Coordinates]
    business_hours: WeeklySchedule
    source_url: str
    place_id: str
    website_url: Optional[str] = None
    sns_urls: Tuple[str, ...] = ()
    degradations: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "address": self.address,
            "latitude": self.coordinates.latitude if self.coordinates else None,
            "longitude": self.coordinates.longitude if self.coordinates else None,
            "website_url": self.website_url,
            "sns_urls": list(self.sns_urls),
            "business_hours": self.business_hours.to_dict(),
            "source_url": self.source_url,
            "place_id": self.place_id,
            "degradations": list(self.degradations),
        }
