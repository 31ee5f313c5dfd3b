"""Domain event handlers — wired up at application startup."""

from __future__ import annotations

import logging

from change_control.domain.bus import EventBus
from change_control.domain.events import (
    PipelineEvaluated,
    TransitionsDisabled,
    TransitionsEnabled,
)
from change_control.domain.models import TimelineEntry, TimelineEntryType
from change_control.repos.memory import PipelineRepository, TimelineRepository

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Applies evaluation verdicts to pipeline gate state.

    The latest evaluation always wins: a blocked verdict disables transitions,
    an unblocked one re-enables them, and a verdict matching the current state
    changes nothing.
    """

    def __init__(
        self,
        bus: EventBus,
        pipeline_repo: PipelineRepository,
        timeline_repo: TimelineRepository,
    ) -> None:
        self.bus = bus
        self.pipeline_repo = pipeline_repo
        self.timeline_repo = timeline_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(PipelineEvaluated, self.on_pipeline_evaluated)
        self.bus.subscribe(TransitionsDisabled, self.on_transitions_disabled)
        self.bus.subscribe(TransitionsEnabled, self.on_transitions_enabled)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_pipeline_evaluated(self, event: PipelineEvaluated) -> None:
        state = self.pipeline_repo.get_or_create(event.pipeline)
        blocking = event.blocking_event

        self.timeline_repo.add(
            TimelineEntry(
                pipeline=event.pipeline,
                type=TimelineEntryType.EVALUATED,
                payload={
                    "evaluated_at": event.evaluated_at.isoformat(),
                    "blocked": blocking is not None,
                    "summary": blocking.summary if blocking else None,
                },
            )
        )

        state.blocking_event = blocking
        state.updated_at = event.evaluated_at

        if blocking is not None and state.transitions_enabled:
            self.bus.publish(
                TransitionsDisabled(pipeline=event.pipeline, reason=blocking.summary)
            )
        elif blocking is None and not state.transitions_enabled:
            self.bus.publish(TransitionsEnabled(pipeline=event.pipeline))

    def on_transitions_disabled(self, event: TransitionsDisabled) -> None:
        state = self.pipeline_repo.get_or_create(event.pipeline)
        state.transitions_enabled = False
        logger.info("Disabled transitions for %s: %s", event.pipeline, event.reason)
        self.timeline_repo.add(
            TimelineEntry(
                pipeline=event.pipeline,
                type=TimelineEntryType.TRANSITIONS_DISABLED,
                payload={"reason": event.reason},
            )
        )

    def on_transitions_enabled(self, event: TransitionsEnabled) -> None:
        state = self.pipeline_repo.get_or_create(event.pipeline)
        state.transitions_enabled = True
        logger.info("Enabled transitions for %s", event.pipeline)
        self.timeline_repo.add(
            TimelineEntry(
                pipeline=event.pipeline,
                type=TimelineEntryType.TRANSITIONS_ENABLED,
            )
        )
