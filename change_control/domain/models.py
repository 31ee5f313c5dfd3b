"""Domain models for the change-control service."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator


VEVENT = "VEVENT"

DEFAULT_ADVANCE_MARGIN_SEC = 3600


class TimelineEntryType(StrEnum):
    EVALUATED = "evaluated"
    TRANSITIONS_DISABLED = "transitions_disabled"
    TRANSITIONS_ENABLED = "transitions_enabled"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def ensure_aware(value: datetime) -> datetime:
    """Read naive datetimes as UTC so every instant compares cleanly."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class CalendarEvent(BaseModel):
    """One record of a blocking calendar.

    ``start`` and ``end`` may be missing on malformed records, and are not
    required to be ordered; the gate skips or tolerates such records rather
    than rejecting them here.
    """

    summary: str = ""
    start: datetime | None = None
    end: datetime | None = None
    kind: str = VEVENT
    last_modified: datetime | None = None

    @field_validator("start", "end", "last_modified")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_aware(value) if value is not None else None

    @property
    def is_event(self) -> bool:
        return self.kind == VEVENT


EventCollection = dict[str, CalendarEvent]


class PipelineState(BaseModel):
    name: str
    transitions_enabled: bool = True
    blocking_event: CalendarEvent | None = None
    updated_at: datetime = Field(default_factory=_utcnow)


class TimelineEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    pipeline: str
    timestamp: datetime = Field(default_factory=_utcnow)
    type: TimelineEntryType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class EvaluateRequest(BaseModel):
    calendar: str
    now: datetime | None = None
    advance_margin_sec: int | None = Field(default=None, ge=0)


class EvaluateResponse(BaseModel):
    blocked: bool
    blocking_event: CalendarEvent | None = None
    evaluated_at: datetime
    window_end: datetime
