"""Export orchestrator: one exclusive capture-then-encode run at a time."""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from ..output import media_type_for_output_format
from .encoder import Encoder
from .errors import ExportAlreadyInProgress, ExportCancelled
from .frame_source import FrameSource, Overlay, Renderer
from .models import ExportArtifact, ExportRequest, ExportSession
from .progress import CancellationToken, ExportEvents, ExportOutcome, ExportPhase, PhaseWeights
from .sequencer import CaptureSequencer

logger = logging.getLogger(__name__)


class ExportLease:
    """Exclusive token held by the active export."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def held(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def hold(self) -> Iterator[None]:
        """Acquire without waiting; a held lease rejects rather than queues."""
        if not self._lock.acquire(blocking=False):
            raise ExportAlreadyInProgress()
        try:
            yield
        finally:
            self._lock.release()


# Shared by every orchestrator in the process
PROCESS_EXPORT_LEASE = ExportLease()


class ExportOrchestrator:
    """
    Runs the full export lifecycle against a renderer.

    Phases go ``IDLE -> CAPTURING_FRAMES -> ENCODING -> IDLE``. The renderer
    is paused and the controls overlay hidden for the duration of the export
    and both are restored on every exit path before the lease is released.
    """

    def __init__(
        self,
        renderer: Renderer,
        controls: Overlay,
        frame_source: FrameSource,
        encoder: Encoder | None = None,
        weights: PhaseWeights | None = None,
        lease: ExportLease = PROCESS_EXPORT_LEASE,
        events: ExportEvents | None = None,
    ):
        """
        Initialize orchestrator.

        Args:
            renderer: Renderer whose playback state is saved and restored
            controls: Overlay hidden while frames are captured
            frame_source: Source used by the capture sequencer
            encoder: Encoder for the compression phase; when omitted one is
                built per request for the request's output format
            weights: Progress split between capture and encode
            lease: Exclusive export lease, process-wide by default
            events: Progress and completion channel
        """
        self.renderer = renderer
        self.controls = controls
        self.sequencer = CaptureSequencer(frame_source)
        self.encoder = encoder
        self.weights = weights or PhaseWeights()
        self.lease = lease
        self.events = events or ExportEvents()
        self.phase = ExportPhase.IDLE
        self.last_outcome: ExportOutcome | None = None

    @property
    def is_exporting(self) -> bool:
        return self.lease.held

    def export(
        self,
        request: ExportRequest,
        cancel: CancellationToken | None = None,
    ) -> ExportArtifact:
        """
        Capture and encode the request into an artifact.

        Raises:
            ExportAlreadyInProgress: If any export already holds the lease
            SurfaceUnavailable, CaptureFailed, EncodeFailed, ExportCancelled:
                Re-raised unchanged after renderer and overlay are restored
        """
        with self.lease.hold():
            session = ExportSession(
                was_playing=self.renderer.is_playing,
                controls_visible=self.controls.visible,
            )
            try:
                self._open_session()
                artifact = self._run(request, cancel)
            except ExportCancelled:
                self.last_outcome = ExportOutcome.CANCELLED
                self._restore_after_failure(session)
                raise
            except BaseException:
                self.last_outcome = ExportOutcome.FAILED
                self._restore_after_failure(session)
                raise
            self._restore(session)
            self.last_outcome = ExportOutcome.SUCCEEDED

        self.events.complete(artifact)
        return artifact

    def _run(self, request: ExportRequest, cancel: CancellationToken | None) -> ExportArtifact:
        frame_count = request.frame_count
        label = request.output_format.upper()

        self.phase = ExportPhase.CAPTURING_FRAMES
        self.events.progress(0, f"Capturing {frame_count} frames...", self.phase)
        frames = self.sequencer.capture_range(
            request,
            on_progress=lambda fraction, message: self.events.progress(
                self.weights.capture_percent(fraction), message, ExportPhase.CAPTURING_FRAMES
            ),
            cancel=cancel,
        )

        self.phase = ExportPhase.ENCODING
        self.events.progress(self.weights.boundary, f"Encoding {label}...", self.phase)
        encoder = self.encoder or Encoder(output_format=request.output_format)
        artifact = encoder.encode(
            frames,
            request.frame_rate,
            request.quality,
            request.width,
            request.height,
            on_progress=lambda fraction, message: self.events.progress(
                self.weights.encode_percent(fraction), message, ExportPhase.ENCODING
            ),
            cancel=cancel,
        )
        # Raw frames are no longer needed once compressed
        del frames

        self.events.progress(100, "Complete!", self.phase)
        logger.info(
            "Exported %d frames (%s, %d bytes)",
            artifact.frame_count,
            media_type_for_output_format(request.output_format),
            artifact.size_bytes,
        )
        return artifact

    def _open_session(self) -> None:
        self.renderer.pause()
        self.controls.visible = False

    def _restore(self, session: ExportSession) -> None:
        if not session.is_active:
            return
        try:
            self.controls.visible = session.controls_visible
            if session.was_playing:
                self.renderer.play()
        finally:
            session.is_active = False
            self.phase = ExportPhase.IDLE

    def _restore_after_failure(self, session: ExportSession) -> None:
        """Restore state without masking the export's own error."""
        try:
            self._restore(session)
        except Exception:
            logger.exception("Failed to restore renderer state after export failure")
