"""Parse Places ``weekdayDescriptions`` text into a structured weekly schedule.

Descriptions arrive one per day, Monday first, in either English
(``"Monday: 11:00 AM – 2:00 PM, 5:00 – 10:00 PM"``) or Japanese
(``"月曜日: 11時00分～20時00分"``). Each recognized range becomes a
``TimeSlot`` whose last order is thirty minutes before closing.
"""

import logging
import re
from typing import List, Optional, Sequence, Tuple

from place_resolver.models import WEEKDAYS, DaySchedule, TimeSlot, WeeklySchedule

logger = logging.getLogger(__name__)

MAX_SLOTS_PER_DAY = 3
LAST_ORDER_OFFSET_MINUTES = 30
LAST_ORDER_FALLBACK = "21:30"
CONTINUOUS = "00:00"
DEFAULT_SLOT = TimeSlot(open_time="11:00", close_time="22:00", last_order_time="21:30")

CLOSED_MARKERS = ("closed", "定休日", "休業日")
OPEN_24_HOURS_MARKERS = ("open 24 hours", "24 時間営業", "24時間営業")

_DAY_PREFIX = re.compile(
    r"^\s*(?:monday|tuesday|wednesday|thursday|friday|saturday|sunday|[月火水木金土日]曜日)\s*[:：]?\s*",
    re.IGNORECASE,
)
_SEGMENT_SEPARATOR = re.compile(r"[,、]")
_JA_RANGE = re.compile(r"(\d{1,2})時(\d{2})分\s*[～〜~\-–—]+\s*(\d{1,2})時(\d{2})分")
_EN_RANGE = re.compile(
    r"(\d{1,2}):(\d{2})\s*([AaPp][Mm])?\s*[–\-～〜~—]+\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])?"
)


def parse_weekly_schedule(descriptions: Sequence[str]) -> Tuple[WeeklySchedule, bool]:
    """Return the schedule and whether any default or ambiguity was involved."""
    if not descriptions:
        logger.info("No weekday descriptions; applying default 11:00-22:00 schedule")
        return default_schedule(), True

    degraded = len(descriptions) < len(WEEKDAYS)
    days: List[DaySchedule] = []
    for index, day in enumerate(WEEKDAYS):
        if index >= len(descriptions):
            days.append(DaySchedule())
            continue
        schedule = parse_day(descriptions[index])
        if not schedule.is_closed and not schedule.time_slots:
            logger.warning("Unrecognized hours for %s: %r", day, descriptions[index])
            degraded = True
        days.append(schedule)

    return WeeklySchedule(**dict(zip(WEEKDAYS, days))), degraded


def parse_day(description: str) -> DaySchedule:
    text = _DAY_PREFIX.sub("", description or "").strip()
    lowered = text.lower()

    if any(marker in lowered for marker in CLOSED_MARKERS):
        return DaySchedule(is_closed=True)
    if any(marker in lowered for marker in OPEN_24_HOURS_MARKERS):
        return DaySchedule(time_slots=(TimeSlot(CONTINUOUS, CONTINUOUS, CONTINUOUS),))

    slots: List[TimeSlot] = []
    for segment in _SEGMENT_SEPARATOR.split(text):
        time_range = parse_time_range(segment.strip())
        if time_range is None:
            continue
        open_time, close_time = time_range
        slots.append(TimeSlot(open_time, close_time, last_order_time(close_time)))

    if len(slots) > MAX_SLOTS_PER_DAY:
        logger.debug("Truncating %d slots to %d: %r", len(slots), MAX_SLOTS_PER_DAY, description)
    return DaySchedule(time_slots=tuple(slots[:MAX_SLOTS_PER_DAY]))


def parse_time_range(segment: str) -> Optional[Tuple[str, str]]:
    match = _JA_RANGE.search(segment)
    if match:
        start_hour, start_minute, end_hour, end_minute = (int(group) for group in match.groups())
        return _format(start_hour, start_minute), _format(end_hour, end_minute)

    match = _EN_RANGE.search(segment)
    if not match:
        return None

    start_hour, start_minute = int(match.group(1)), int(match.group(2))
    end_hour, end_minute = int(match.group(4)), int(match.group(5))
    start_period = (match.group(3) or "").upper()
    end_period = (match.group(6) or "").upper()

    close = _to_24_hour(end_hour, end_minute, end_period)
    if start_period or not end_period:
        return _format(*_to_24_hour(start_hour, start_minute, start_period)), _format(*close)

    # "5:00 – 10:00 PM": the opening shares the closing period unless that
    # would open after closing ("11:00 – 2:00 PM" opens in the morning).
    opening = _to_24_hour(start_hour, start_minute, end_period)
    if opening > close and close != (0, 0):
        other = "AM" if end_period == "PM" else "PM"
        opening = _to_24_hour(start_hour, start_minute, other)
    return _format(*opening), _format(*close)


def last_order_time(close_time: str) -> str:
    """Close minus thirty minutes; ``00:00`` stays put for continuous operation."""
    try:
        hour_text, minute_text = close_time.split(":")
        hour, minute = int(hour_text), int(minute_text)
    except (AttributeError, ValueError):
        return LAST_ORDER_FALLBACK

    if hour == 0 and minute == 0:
        return CONTINUOUS

    total = (hour * 60 + minute - LAST_ORDER_OFFSET_MINUTES) % (24 * 60)
    return _format(total // 60, total % 60)


def default_schedule() -> WeeklySchedule:
    day = DaySchedule(time_slots=(DEFAULT_SLOT,))
    return WeeklySchedule(**{name: day for name in WEEKDAYS})


def _to_24_hour(hour: int, minute: int, period: str) -> Tuple[int, int]:
    if period == "PM" and hour != 12:
        hour += 12
    elif period == "AM" and hour == 12:
        hour = 0
    return hour % 24, minute


def _format(hour: int, minute: int) -> str:
    return f"{hour % 24:02d}:{minute:02d}"
