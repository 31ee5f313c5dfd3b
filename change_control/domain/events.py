"""Domain events emitted as pipelines are evaluated against the calendar."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from change_control.domain.models import CalendarEvent


class PipelineEvaluated(BaseModel):
    """Fired after the blocking calendar has been checked for a pipeline."""

    pipeline: str
    blocking_event: CalendarEvent | None = None
    evaluated_at: datetime


class TransitionsDisabled(BaseModel):
    """Fired when promotions in a pipeline are suspended."""

    pipeline: str
    reason: str


class TransitionsEnabled(BaseModel):
    """Fired when promotions in a pipeline are allowed again."""

    pipeline: str
