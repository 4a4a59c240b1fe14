"""Animation capture-and-encode pipeline."""

from .encoder import Encoder
from .errors import (
    CaptureFailed,
    EncodeFailed,
    ExportAlreadyInProgress,
    ExportCancelled,
    ExportError,
    InvalidExportRequest,
    SurfaceUnavailable,
)
from .frame_source import FrameSource, IdleAwareRenderer, Overlay, RenderSurface, Renderer
from .models import ExportArtifact, ExportRequest, ExportSession, Frame, FrameSequence
from .orchestrator import PROCESS_EXPORT_LEASE, ExportLease, ExportOrchestrator
from .progress import (
    CancellationToken,
    ExportEvents,
    ExportOutcome,
    ExportPhase,
    PhaseWeights,
    ProgressEvent,
)
from .sequencer import CaptureSequencer

__all__ = [
    "CancellationToken",
    "CaptureFailed",
    "CaptureSequencer",
    "EncodeFailed",
    "Encoder",
    "ExportAlreadyInProgress",
    "ExportArtifact",
    "ExportCancelled",
    "ExportError",
    "ExportEvents",
    "ExportLease",
    "ExportOrchestrator",
    "ExportOutcome",
    "ExportPhase",
    "ExportRequest",
    "ExportSession",
    "Frame",
    "FrameSequence",
    "FrameSource",
    "IdleAwareRenderer",
    "InvalidExportRequest",
    "Overlay",
    "PROCESS_EXPORT_LEASE",
    "PhaseWeights",
    "ProgressEvent",
    "RenderSurface",
    "Renderer",
    "SurfaceUnavailable",
]
