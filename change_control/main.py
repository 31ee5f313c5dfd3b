"""FastAPI application — entry point for the change-control service."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi import FastAPI, HTTPException

from change_control.config import get_settings
from change_control.domain.bus import EventBus
from change_control.domain.events import PipelineEvaluated
from change_control.domain.handlers import HandlerRegistry
from change_control.domain.models import (
    EvaluateRequest,
    EvaluateResponse,
    PipelineState,
    TimelineEntry,
    ensure_aware,
)
from change_control.repos.memory import PipelineRepository, TimelineRepository
from change_control.services.calendar_parser import CalendarParseError
from change_control.services.time_window import InvalidMarginError, should_block_pipeline
from change_control.utils.logger import setup_logger

settings = get_settings()
setup_logger(level=settings.log_level)

app = FastAPI(title="Change Control Service")

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
pipeline_repo = PipelineRepository()
timeline_repo = TimelineRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    pipeline_repo=pipeline_repo,
    timeline_repo=timeline_repo,
)


def _evaluate(payload: EvaluateRequest) -> EvaluateResponse:
    now = ensure_aware(payload.now) if payload.now else datetime.now(timezone.utc)
    margin = payload.advance_margin_sec
    if margin is None:
        margin = settings.advance_margin_sec

    try:
        blocking = should_block_pipeline(payload.calendar, now, margin)
    except (CalendarParseError, InvalidMarginError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return EvaluateResponse(
        blocked=blocking is not None,
        blocking_event=blocking,
        evaluated_at=now,
        window_end=now + timedelta(seconds=margin),
    )


# ── Routes ────────────────────────────────────────────────────────────


@app.post("/evaluate", response_model=EvaluateResponse)
def evaluate(payload: EvaluateRequest) -> EvaluateResponse:
    """Check a calendar for a block at the given (or current) time."""
    return _evaluate(payload)


@app.post("/pipelines/{name}/evaluate", response_model=PipelineState)
def evaluate_pipeline(name: str, payload: EvaluateRequest) -> PipelineState:
    """Evaluate the calendar and apply the verdict to the pipeline's gate."""
    result = _evaluate(payload)
    event_bus.publish(
        PipelineEvaluated(
            pipeline=name,
            blocking_event=result.blocking_event,
            evaluated_at=result.evaluated_at,
        )
    )
    return pipeline_repo.get_or_create(name)


@app.get("/pipelines", response_model=list[PipelineState])
def list_pipelines() -> list[PipelineState]:
    """Return the gate state of every evaluated pipeline."""
    return pipeline_repo.list_all()


@app.get("/pipelines/{name}", response_model=PipelineState)
def get_pipeline(name: str) -> PipelineState:
    """Return the gate state of a pipeline."""
    state = pipeline_repo.get(name)
    if state is None:
        raise HTTPException(status_code=404, detail="Pipeline not found")
    return state


@app.get("/pipelines/{name}/timeline", response_model=list[TimelineEntry])
def get_pipeline_timeline(name: str) -> list[TimelineEntry]:
    """Return the evaluation and gate history of a pipeline."""
    if pipeline_repo.get(name) is None:
        raise HTTPException(status_code=404, detail="Pipeline not found")
    return timeline_repo.list_for_pipeline(name)
