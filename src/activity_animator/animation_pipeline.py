"""Shared export orchestration used by CLI and web app entry points."""

from datetime import datetime, timezone
from typing import Sequence

from .activities import Activity, time_span
from .config import Settings, load_settings
from .export import (
    CancellationToken,
    Encoder,
    ExportArtifact,
    ExportEvents,
    ExportOrchestrator,
    ExportRequest,
    FrameSource,
    PhaseWeights,
)
from .export.progress import ProgressListener
from .map import RenderContext, TrackRenderer


def build_export_request(
    activities: Sequence[Activity],
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    **params: object,
) -> ExportRequest:
    """Build a request whose window defaults to the activities' full time span."""
    start = _as_utc(start)
    end = _as_utc(end)
    if start is None or end is None:
        span_start, span_end = time_span(activities)
        start = start or span_start
        end = end or span_end
    return ExportRequest(start=start, end=end, **params)  # type: ignore[arg-type]


def _as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC, matching cached activity timestamps."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def build_orchestrator(
    renderer: TrackRenderer,
    request: ExportRequest,
    settings: Settings,
    events: ExportEvents | None = None,
) -> ExportOrchestrator:
    """Wire a track renderer into a frame source, encoder and orchestrator."""
    frame_source = FrameSource(renderer, renderer, settle_seconds=settings.settle_seconds)
    encoder = Encoder(output_format=request.output_format, workers=settings.encoder_workers)
    return ExportOrchestrator(
        renderer,
        renderer.controls,
        frame_source,
        encoder=encoder,
        weights=PhaseWeights(capture=settings.capture_weight),
        events=events,
    )


def encode_animation(
    activities: Sequence[Activity],
    request: ExportRequest,
    *,
    settings: Settings | None = None,
    render_context: RenderContext | None = None,
    on_progress: ProgressListener | None = None,
    cancel: CancellationToken | None = None,
) -> ExportArtifact:
    """Render the activities' map across the request window and encode it."""
    settings = settings or load_settings()
    renderer = TrackRenderer(activities, request.width, request.height, render_context)
    events = ExportEvents()
    if on_progress is not None:
        events.subscribe_progress(on_progress)
    orchestrator = build_orchestrator(renderer, request, settings, events)
    return orchestrator.export(request, cancel=cancel)
