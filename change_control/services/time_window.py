"""Service deciding whether a blocking calendar suspends pipeline promotions."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from change_control.domain.models import (
    DEFAULT_ADVANCE_MARGIN_SEC,
    CalendarEvent,
    EventCollection,
    ensure_aware,
)
from change_control.services.calendar_parser import parse_calendar

logger = logging.getLogger(__name__)


class InvalidMarginError(ValueError):
    """Raised when the advance margin would look backwards in time."""


def should_block_pipeline(
    calendar: str | bytes | EventCollection,
    now: datetime | None = None,
    advance_margin_sec: int = DEFAULT_ADVANCE_MARGIN_SEC,
) -> CalendarEvent | None:
    """Return the event blocking promotions at *now*, or ``None``.

    *calendar* is either raw iCal text or an already-parsed collection.
    """
    _check_margin(advance_margin_sec)
    if isinstance(calendar, (str, bytes)):
        calendar = parse_calendar(calendar)
    return find_blocking_event(calendar, now, advance_margin_sec)


def find_blocking_event(
    events: EventCollection,
    now: datetime | None = None,
    advance_margin_sec: int = DEFAULT_ADVANCE_MARGIN_SEC,
) -> CalendarEvent | None:
    """Return a VEVENT overlapping ``[now, now + advance_margin_sec]``.

    When several events conflict, the one starting earliest is returned; equal
    starts keep the collection's iteration order.
    """
    _check_margin(advance_margin_sec)
    now = ensure_aware(now) if now is not None else datetime.now(timezone.utc)
    buffered_now = now + timedelta(seconds=advance_margin_sec)

    conflicts = [
        event
        for event in _candidate_events(events)
        if happens_between(event, now, buffered_now)
    ]
    if not conflicts:
        return None
    return min(conflicts, key=lambda e: e.start)


def happens_between(event: CalendarEvent, from_date: datetime, to_date: datetime) -> bool:
    """Check whether *event* touches the period ``[from_date, to_date]``.

    Matches any of::

        |--------------<=====EVENT=====>-------------------->
                          <WITHIN>
                   <OVERLAP AT START>
                                   <OVERLAP AT END>
                  <==COMPLETELY INCLUDES EVENT==>

    All edges are inclusive.
    """
    return (
        is_between(from_date, event.start, event.end)
        or is_between(to_date, event.start, event.end)
        or is_between(event.start, from_date, to_date)
        or is_between(event.end, from_date, to_date)
    )


def is_between(date: datetime, left: datetime, right: datetime) -> bool:
    return left <= date <= right


def _candidate_events(events: EventCollection) -> list[CalendarEvent]:
    candidates = []
    for uid, event in events.items():
        if not event.is_event:
            continue
        if event.start is None or event.end is None:
            logger.debug("Skipping event %s without start/end", uid)
            continue
        candidates.append(event)
    return candidates


def _check_margin(advance_margin_sec: int) -> None:
    if advance_margin_sec < 0:
        raise InvalidMarginError(
            f"advance_margin_sec must be non-negative, got {advance_margin_sec}"
        )
