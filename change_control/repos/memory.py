"""In-memory repositories for pipeline gate state."""

from __future__ import annotations

from change_control.domain.models import PipelineState, TimelineEntry


class PipelineRepository:
    """Dict-backed store for PipelineState instances, keyed by pipeline name."""

    def __init__(self) -> None:
        self._store: dict[str, PipelineState] = {}

    def get(self, name: str) -> PipelineState | None:
        return self._store.get(name)

    def get_or_create(self, name: str) -> PipelineState:
        state = self._store.get(name)
        if state is None:
            state = PipelineState(name=name)
            self._store[name] = state
        return state

    def list_all(self) -> list[PipelineState]:
        return list(self._store.values())


class TimelineRepository:
    """List-backed store for TimelineEntry instances."""

    def __init__(self) -> None:
        self._entries: list[TimelineEntry] = []

    def add(self, entry: TimelineEntry) -> None:
        self._entries.append(entry)

    def list_for_pipeline(self, pipeline: str) -> list[TimelineEntry]:
        """Return entries in the order they were recorded."""
        return [e for e in self._entries if e.pipeline == pipeline]
