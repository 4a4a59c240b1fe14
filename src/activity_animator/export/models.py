"""Value types flowing through the export pipeline."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, Iterator

from PIL import Image

from ..constants import (
    DEFAULT_DURATION_SECONDS,
    DEFAULT_FPS,
    DEFAULT_HEIGHT,
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_QUALITY,
    DEFAULT_WIDTH,
    MAX_QUALITY,
    MIN_QUALITY,
)
from ..output import supported_output_formats
from .errors import InvalidExportRequest


@dataclass(frozen=True)
class ExportRequest:
    """Parameters of a single export, validated on construction."""
    start: datetime
    end: datetime
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    frame_rate: float = DEFAULT_FPS
    duration_seconds: float = DEFAULT_DURATION_SECONDS
    quality: int = DEFAULT_QUALITY
    output_format: str = DEFAULT_OUTPUT_FORMAT

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidExportRequest(
                f"Dimensions must be positive (got {self.width}x{self.height})"
            )
        if self.frame_rate <= 0:
            raise InvalidExportRequest(f"Frame rate must be positive (got {self.frame_rate})")
        if self.duration_seconds <= 0:
            raise InvalidExportRequest(
                f"Duration must be positive (got {self.duration_seconds})"
            )
        if not MIN_QUALITY <= self.quality <= MAX_QUALITY:
            raise InvalidExportRequest(
                f"Quality must be between {MIN_QUALITY} and {MAX_QUALITY} (got {self.quality})"
            )
        if self.output_format not in supported_output_formats():
            supported = ", ".join(supported_output_formats())
            raise InvalidExportRequest(
                f"Unsupported output format '{self.output_format}'. Supported formats: {supported}"
            )
        if self.end <= self.start:
            raise InvalidExportRequest("End instant must be after start instant")
        if self.frame_count < 1:
            raise InvalidExportRequest(
                "Duration and frame rate must yield at least one frame"
            )

    @property
    def frame_count(self) -> int:
        return math.floor(self.duration_seconds * self.frame_rate)

    @property
    def time_step(self) -> timedelta:
        """Animation time between consecutive frames."""
        return (self.end - self.start) / self.frame_count

    def instant_at(self, index: int) -> datetime:
        """Display instant of frame ``index``."""
        return self.start + (self.end - self.start) * index / self.frame_count

    def iter_instants(self) -> Iterator[tuple[int, datetime]]:
        for index in range(self.frame_count):
            yield index, self.instant_at(index)


@dataclass(frozen=True)
class Frame:
    """One rasterized snapshot of the scene at an animation instant."""
    index: int
    instant: datetime
    image: Image.Image = field(repr=False, compare=False)

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


class FrameSequence:
    """Complete, gap-free ordered frames of one export."""

    def __init__(self, frames: Iterable[Frame], expected_count: int | None = None):
        self._frames = tuple(frames)
        for position, frame in enumerate(self._frames):
            if frame.index != position:
                raise ValueError(
                    f"Frame sequence is not contiguous: expected index {position}, got {frame.index}"
                )
        if expected_count is not None and len(self._frames) != expected_count:
            raise ValueError(
                f"Frame sequence is incomplete: {len(self._frames)} of {expected_count} frames"
            )
        sizes = {frame.size for frame in self._frames}
        if len(sizes) > 1:
            raise ValueError("All frames must have the same dimensions")

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[Frame]:
        return iter(self._frames)

    def __getitem__(self, index: int) -> Frame:
        return self._frames[index]

    @property
    def size(self) -> tuple[int, int] | None:
        return self._frames[0].size if self._frames else None

    def images(self) -> list[Image.Image]:
        return [frame.image for frame in self._frames]


@dataclass(frozen=True)
class ExportArtifact:
    """Compressed animation returned to the caller."""
    data: bytes = field(repr=False)
    media_type: str
    suggested_filename: str
    frame_count: int
    frame_delay_ms: float

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    def write(self, path: str | Path) -> None:
        with open(path, "wb") as f:
            f.write(self.data)


@dataclass
class ExportSession:
    """Renderer and overlay state saved for the lifetime of one export."""
    was_playing: bool
    controls_visible: bool
    is_active: bool = True
