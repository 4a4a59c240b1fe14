"""Encoder: compresses a frame sequence into one animated image."""

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable

from PIL import Image

from ..constants import DEFAULT_ENCODER_WORKERS, DEFAULT_FILENAME_STEM, DEFAULT_OUTPUT_FORMAT
from ..output import PillowSequenceOutputProvider, output_path_for_format, provider_for_format
from .errors import EncodeFailed, ExportCancelled
from .models import ExportArtifact, FrameSequence
from .progress import CancellationToken, PhaseProgress

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[str, int], PillowSequenceOutputProvider]


def _default_executor(workers: int) -> Executor:
    return ThreadPoolExecutor(max_workers=workers, thread_name_prefix="encoder")


class Encoder:
    """Encodes frames on a worker pool while preserving submission order."""

    def __init__(
        self,
        output_format: str = DEFAULT_OUTPUT_FORMAT,
        workers: int = DEFAULT_ENCODER_WORKERS,
        provider_factory: ProviderFactory = provider_for_format,
        executor_factory: Callable[[int], Executor] = _default_executor,
    ):
        if workers < 1:
            raise ValueError(f"Encoder needs at least one worker (got {workers})")
        self.output_format = output_format
        self.workers = workers
        self._provider_factory = provider_factory
        self._executor_factory = executor_factory

    def encode(
        self,
        frames: FrameSequence,
        frame_rate: float,
        quality: int,
        width: int,
        height: int,
        on_progress: PhaseProgress | None = None,
        cancel: CancellationToken | None = None,
    ) -> ExportArtifact:
        """
        Encode the frames into a single animated image.

        Per-frame palette preparation runs on the worker pool; results are
        consumed in submission order so the artifact's frame order matches
        the sequence. Native progress advances by ``1 / (n + 1)`` per
        prepared frame and reaches 1.0 once the container is written.

        Args:
            frames: Complete frame sequence
            frame_rate: Frames per second; every frame gets ``1000 / frame_rate`` ms,
                rounded to the container's timing resolution
            quality: Quality level handed to the output provider
            width: Expected frame width
            height: Expected frame height
            on_progress: Receives (native fraction, status message)
            cancel: Checked between prepared frames

        Returns:
            The encoded ExportArtifact. Its frame count is read back from the
            container, where a frame identical to the previous one is merged
            into that frame's delay.

        Raises:
            EncodeFailed: On empty input, mismatched dimensions or compressor errors
            ExportCancelled: If the token is cancelled mid-encode
        """
        self._validate(frames, width, height)

        provider = self._provider_factory(self.output_format, quality)
        label = provider.output_format.upper()
        frame_delay_ms = 1000 / frame_rate
        stored_delay_ms = provider.frame_duration(frame_delay_ms)
        total = len(frames)
        logger.info(
            "Encoding %d frames as %s (quality %d, %dms per frame)",
            total, label, quality, stored_delay_ms,
        )

        def report(fraction: float) -> None:
            if on_progress is not None:
                on_progress(fraction, f"Encoding {label}... {round(fraction * 100)}%")

        prepared: list[Image.Image] = []
        executor = self._executor_factory(self.workers)
        try:
            for image in executor.map(provider.prepare_frame, frames.images()):
                if cancel is not None:
                    cancel.raise_if_cancelled()
                prepared.append(image)
                report(len(prepared) / (total + 1))
            data = provider.encode(iter(prepared), frame_duration=stored_delay_ms)
            stored_count = provider.count_frames(data) if data else 0
        except ExportCancelled:
            raise
        except Exception as e:
            raise EncodeFailed(str(e) or type(e).__name__) from e
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        if not data:
            raise EncodeFailed("Compressor produced no output")
        if stored_count < total:
            logger.info(
                "%d of %d frames repeat their predecessor and were merged into its delay",
                total - stored_count, total,
            )
        report(1.0)

        filename = output_path_for_format(provider.output_format, DEFAULT_FILENAME_STEM)
        return ExportArtifact(
            data=data,
            media_type=provider.media_type,
            suggested_filename=filename,
            frame_count=stored_count,
            frame_delay_ms=stored_delay_ms,
        )

    def _validate(self, frames: FrameSequence, width: int, height: int) -> None:
        if len(frames) == 0:
            raise EncodeFailed("No frames to encode")
        for frame in frames:
            if frame.size != (width, height):
                raise EncodeFailed(
                    f"Frame {frame.index} is {frame.size[0]}x{frame.size[1]}, "
                    f"expected {width}x{height}"
                )
