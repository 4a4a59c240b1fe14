"""Capture sequencer: drives the frame source across an export's time window."""

import logging
from datetime import datetime

from .errors import CaptureFailed, ExportCancelled, SurfaceUnavailable
from .frame_source import FrameSource
from .models import ExportRequest, Frame, FrameSequence
from .progress import CancellationToken, PhaseProgress

logger = logging.getLogger(__name__)


class CaptureSequencer:
    """Captures evenly spaced frames strictly in ascending order."""

    def __init__(self, frame_source: FrameSource):
        self.frame_source = frame_source

    def capture_range(
        self,
        request: ExportRequest,
        on_progress: PhaseProgress | None = None,
        cancel: CancellationToken | None = None,
    ) -> FrameSequence:
        """
        Capture the request's full frame sequence.

        Renderer seeks are not reentrant, so frames are captured one at a
        time. Any failure aborts the whole sequence.

        Args:
            request: Time window, dimensions and frame timing
            on_progress: Receives (fraction captured, status message)
            cancel: Checked before each frame

        Returns:
            Gap-free FrameSequence of ``request.frame_count`` frames

        Raises:
            SurfaceUnavailable: With ``frame_index`` set to the failing frame
            CaptureFailed: For any other failure while capturing a frame
            ExportCancelled: If the token is cancelled between frames
        """
        frame_count = request.frame_count
        logger.info(
            "Capturing %d frames from %s to %s", frame_count, request.start, request.end
        )

        frames: list[Frame] = []
        for index, instant in request.iter_instants():
            if cancel is not None:
                cancel.raise_if_cancelled()

            frames.append(self._capture_one(index, instant, request))

            if on_progress is not None:
                on_progress((index + 1) / frame_count, f"Captured frame {index + 1}/{frame_count}")

        return FrameSequence(frames, expected_count=frame_count)

    def _capture_one(self, index: int, instant: datetime, request: ExportRequest) -> Frame:
        try:
            frame = self.frame_source.capture_indexed(
                index, instant, request.width, request.height
            )
        except SurfaceUnavailable as e:
            e.frame_index = index
            raise
        except (CaptureFailed, ExportCancelled):
            raise
        except Exception as e:
            raise CaptureFailed(index, str(e) or type(e).__name__) from e

        logger.debug("Captured frame %d at %s", index, instant)
        return frame
