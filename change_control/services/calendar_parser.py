"""Service for turning an iCal document into a collection of CalendarEvents."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, tzinfo

from icalendar import Calendar

from change_control.config import get_settings
from change_control.domain.models import CalendarEvent, EventCollection

logger = logging.getLogger(__name__)


class CalendarParseError(ValueError):
    """Raised when the calendar document cannot be parsed at all."""


def parse_calendar(data: str | bytes, floating_tz: tzinfo | None = None) -> EventCollection:
    """Parse an iCal document into CalendarEvents keyed by UID.

    Every top-level component becomes an entry whose ``kind`` is the component
    name, so callers can tell VEVENTs apart from todos, journals and so on.
    Overridden occurrences (``RECURRENCE-ID``) share their master's UID and
    are filed under ``<uid>#<recurrence-id>`` so neither replaces the other.
    Floating and date-only values are placed in *floating_tz* (the configured
    zone by default). Recurrence rules are not expanded.
    """
    if floating_tz is None:
        floating_tz = get_settings().floating_tzinfo

    try:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        calendar = Calendar.from_ical(data)
    except ValueError as exc:
        logger.warning("Could not parse calendar document: %s", exc)
        raise CalendarParseError(f"Invalid calendar document: {exc}") from exc
    if calendar.name != "VCALENDAR":
        raise CalendarParseError(f"Expected a VCALENDAR document, got {calendar.name}")

    events: EventCollection = {}
    for index, component in enumerate(calendar.subcomponents):
        key = _event_key(component, index)
        if key in events:
            key = f"{key}-{index}"
        events[key] = _to_calendar_event(component, floating_tz)
    return events


def _event_key(component, index: int) -> str:
    uid = component.get("UID")
    if uid is None:
        return f"{component.name}-{index}"
    recurrence_id = _raw_value(component, "RECURRENCE-ID")
    if recurrence_id is not None:
        return f"{uid}#{recurrence_id.isoformat()}"
    return str(uid)


def _to_calendar_event(component, floating_tz: tzinfo) -> CalendarEvent:
    raw_start = _raw_value(component, "DTSTART")
    raw_end = _raw_value(component, "DTEND")

    start = _as_instant(raw_start, floating_tz)
    end = _as_instant(raw_end, floating_tz)
    if start is not None and end is None:
        # RFC 5545 3.6.1: DURATION stands in for DTEND; an all-day DTSTART
        # alone covers that whole day.
        duration = _raw_value(component, "DURATION")
        if isinstance(duration, timedelta):
            end = start + duration
        elif isinstance(raw_start, date) and not isinstance(raw_start, datetime):
            end = start + timedelta(days=1)

    last_modified = _as_instant(
        _raw_value(component, "LAST-MODIFIED") or _raw_value(component, "DTSTAMP"),
        floating_tz,
    )

    return CalendarEvent(
        summary=str(component.get("SUMMARY", "")),
        start=start,
        end=end,
        kind=component.name,
        last_modified=last_modified,
    )


def _raw_value(component, name: str):
    prop = component.get(name)
    if prop is None:
        return None
    return getattr(prop, "dt", None)


def _as_instant(value, floating_tz: tzinfo) -> datetime | None:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=floating_tz)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=floating_tz)
    return None
