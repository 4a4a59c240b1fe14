"""Exceptions raised by the capture-and-encode pipeline."""


class ExportError(Exception):
    """Base exception for export failures."""
    pass


class InvalidExportRequest(ExportError, ValueError):
    """The export request violates its invariants."""
    pass


class ExportAlreadyInProgress(ExportError):
    """Another export holds the export lease; retry once it finishes."""

    def __init__(self) -> None:
        super().__init__("Export already in progress")


class SurfaceUnavailable(ExportError):
    """The rendering surface is not mounted or visible."""

    def __init__(self, message: str = "Rendering surface is unavailable", frame_index: int | None = None):
        super().__init__(message)
        self.frame_index = frame_index


class CaptureFailed(ExportError):
    """Capturing a single frame failed."""

    def __init__(self, frame_index: int, reason: str):
        super().__init__(f"Failed to capture frame {frame_index}: {reason}")
        self.frame_index = frame_index
        self.reason = reason


class EncodeFailed(ExportError):
    """The compressor rejected the frame sequence."""

    def __init__(self, diagnostic: str):
        super().__init__(f"Encoding failed: {diagnostic}")
        self.diagnostic = diagnostic


class ExportCancelled(ExportError):
    """The export was cancelled through its cancellation token."""

    def __init__(self) -> None:
        super().__init__("Export cancelled")
