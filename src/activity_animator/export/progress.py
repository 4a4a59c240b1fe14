"""Progress events, phase weighting and cooperative cancellation."""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

from ..constants import CAPTURE_PHASE_WEIGHT
from .errors import ExportCancelled

if TYPE_CHECKING:
    from .models import ExportArtifact

logger = logging.getLogger(__name__)


class ExportPhase(str, Enum):
    IDLE = "idle"
    CAPTURING_FRAMES = "capturing_frames"
    ENCODING = "encoding"


class ExportOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ProgressEvent:
    """A point on the unified 0-100 progress scale."""
    percent: float
    message: str
    phase: ExportPhase


ProgressListener = Callable[[ProgressEvent], None]
CompletionListener = Callable[["ExportArtifact"], None]
# Phase-local progress: fraction in [0, 1] plus a status message
PhaseProgress = Callable[[float, str], None]


@dataclass(frozen=True)
class PhaseWeights:
    """Split of the unified progress scale between capture and encode."""
    capture: float = CAPTURE_PHASE_WEIGHT

    def __post_init__(self) -> None:
        if not 0.0 <= self.capture <= 1.0:
            raise ValueError(f"Capture weight must be within [0, 1] (got {self.capture})")

    @property
    def encode(self) -> float:
        return 1.0 - self.capture

    @property
    def boundary(self) -> float:
        """Unified percent at which encoding starts."""
        return self.capture * 100

    def capture_percent(self, fraction: float) -> float:
        return fraction * self.capture * 100

    def encode_percent(self, fraction: float) -> float:
        return self.boundary + fraction * self.encode * 100


class ExportEvents:
    """Fan-out channel for progress and completion subscribers."""

    def __init__(self) -> None:
        self._progress_listeners: list[ProgressListener] = []
        self._completion_listeners: list[CompletionListener] = []

    def subscribe_progress(self, listener: ProgressListener) -> Callable[[], None]:
        """Register a progress listener; returns a callable that unsubscribes it."""
        self._progress_listeners.append(listener)
        return lambda: self._progress_listeners.remove(listener)

    def subscribe_complete(self, listener: CompletionListener) -> Callable[[], None]:
        self._completion_listeners.append(listener)
        return lambda: self._completion_listeners.remove(listener)

    def progress(self, percent: float, message: str, phase: ExportPhase) -> None:
        event = ProgressEvent(percent=percent, message=message, phase=phase)
        logger.debug("%.1f%% %s", percent, message)
        for listener in list(self._progress_listeners):
            listener(event)

    def complete(self, artifact: "ExportArtifact") -> None:
        for listener in list(self._completion_listeners):
            listener(artifact)


class CancellationToken:
    """Cooperative cancellation flag checked between frames."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ExportCancelled()
