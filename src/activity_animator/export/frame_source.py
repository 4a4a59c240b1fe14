"""Frame source: seeks the renderer and samples the rendering surface."""

import logging
import time
from datetime import datetime
from typing import Callable, Protocol, runtime_checkable

from PIL import Image, ImageOps

from ..constants import IDLE_POLL_INTERVAL_SECONDS, IDLE_WAIT_FACTOR, RENDER_SETTLE_SECONDS
from .errors import SurfaceUnavailable
from .models import Frame

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    """Time-seekable animation renderer."""

    @property
    def is_playing(self) -> bool: ...

    def seek(self, instant: datetime) -> None: ...

    def pause(self) -> None: ...

    def play(self) -> None: ...


@runtime_checkable
class IdleAwareRenderer(Protocol):
    """Renderer that can report when asynchronous redraws have finished."""

    def is_idle(self) -> bool: ...


class RenderSurface(Protocol):
    """Visual container that can be rasterized."""

    @property
    def is_available(self) -> bool: ...

    def snapshot(self) -> Image.Image: ...


class Overlay(Protocol):
    """On-screen controls that can be hidden while capturing."""

    visible: bool


class FrameSource:
    """Produces frames of the renderer's view at exact animation instants."""

    def __init__(
        self,
        renderer: Renderer,
        surface: RenderSurface,
        settle_seconds: float = RENDER_SETTLE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the frame source.

        Args:
            renderer: Renderer to seek before each capture
            surface: Surface rasterized after the renderer settles
            settle_seconds: Fixed deferral after a seek; also sets the idle
                polling budget for renderers exposing ``is_idle()``
            sleep: Sleep function, replaceable in tests
            clock: Monotonic clock used for idle polling
        """
        self.renderer = renderer
        self.surface = surface
        self.settle_seconds = settle_seconds
        self._sleep = sleep
        self._clock = clock

    def capture(self, instant: datetime, width: int, height: int) -> Frame:
        """Capture the view at ``instant`` as a ``width`` x ``height`` frame (index 0)."""
        return self.capture_indexed(0, instant, width, height)

    def capture_indexed(self, index: int, instant: datetime, width: int, height: int) -> Frame:
        if not self.surface.is_available:
            raise SurfaceUnavailable(frame_index=index)

        self.renderer.seek(instant)
        self._wait_for_render()

        snapshot = self.surface.snapshot()
        image = _fit_to(snapshot, width, height)
        return Frame(index=index, instant=instant, image=image)

    def _wait_for_render(self) -> None:
        if not isinstance(self.renderer, IdleAwareRenderer):
            if self.settle_seconds > 0:
                self._sleep(self.settle_seconds)
            return

        deadline = self._clock() + self.settle_seconds * IDLE_WAIT_FACTOR
        while not self.renderer.is_idle():
            if self._clock() >= deadline:
                logger.warning("Renderer still busy after %.2fs, capturing anyway",
                               self.settle_seconds * IDLE_WAIT_FACTOR)
                return
            self._sleep(IDLE_POLL_INTERVAL_SECONDS)


def _fit_to(image: Image.Image, width: int, height: int) -> Image.Image:
    """Scale and center-crop to exactly the target size; always returns a new image."""
    rgb = image.convert("RGB")
    if rgb.size == (width, height):
        return rgb.copy()
    return ImageOps.fit(rgb, (width, height), method=Image.Resampling.LANCZOS)
