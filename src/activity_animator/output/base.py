"""Base class for output format providers."""

from io import BytesIO
from abc import ABC, abstractmethod
from typing import Generic, Iterator, TypeVar

from PIL import Image

from ..constants import DEFAULT_QUALITY

FrameT = TypeVar("FrameT")


class OutputProvider(ABC, Generic[FrameT]):
    """Abstract base class for output format providers."""

    def __init__(self, quality: int = DEFAULT_QUALITY):
        """
        Initialize the provider.

        Args:
            quality: Quality level, lower is higher fidelity and slower
        """
        self.quality = quality

    @property
    @abstractmethod
    def media_type(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def encode(self, frames: Iterator[FrameT], frame_duration: int) -> bytes:
        """
        Encode frames into the output format.

        Args:
            frames: Iterator of frame payloads consumed by this provider
            frame_duration: Frame duration in milliseconds

        Returns:
            Encoded output as bytes
        """
        raise NotImplementedError

    def frame_duration(self, delay_ms: float) -> int:
        """Per-frame duration in milliseconds as the container stores it."""
        return round(delay_ms)


class PillowSequenceOutputProvider(OutputProvider[Image.Image], ABC):
    """Template output provider for Pillow-supported animated image formats."""

    @property
    @abstractmethod
    def output_format(self) -> str:
        """Pillow format identifier (for example, ``gif`` or ``webp``)."""
        raise NotImplementedError

    def prepare_frame(self, image: Image.Image) -> Image.Image:
        """
        Convert one raw frame into the form written to the container.

        Runs on encoder worker threads, so it must not touch shared state.
        """
        return image.convert("RGB")

    def encode(self, frames: Iterator[Image.Image], frame_duration: int) -> bytes:
        frame_list = list(frames)
        if not frame_list:
            return b""

        buffer = BytesIO()
        frame_list[0].save(
            buffer,
            format=self.output_format,
            save_all=True,
            append_images=frame_list[1:],
            duration=frame_duration,
            loop=0,
            **self.save_options,
        )
        return buffer.getvalue()

    def count_frames(self, data: bytes) -> int:
        """
        Number of frames stored in encoded output.

        Pillow writers fold a frame identical to its predecessor into the
        previous frame's duration, so this can be lower than the input count.
        """
        with Image.open(BytesIO(data)) as im:
            return getattr(im, "n_frames", 1)

    @property
    def save_options(self) -> dict[str, object]:
        """Additional Pillow ``save`` kwargs for this format."""
        return {}
