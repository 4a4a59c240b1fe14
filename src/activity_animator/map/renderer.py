"""Renderer for drawing activity tracks on a map using Pillow."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from PIL import Image, ImageDraw, ImageFont

from ..activities import Activity, time_span
from .projection import Viewport
from .render_context import RenderContext


@dataclass
class ControlsOverlay:
    """On-screen playback controls drawn over the map."""
    visible: bool = True


@dataclass(frozen=True)
class _Track:
    activity: Activity
    points: tuple[tuple[float, float], ...]


class TrackRenderer:
    """
    Time-seekable map of activity tracks rendered as PIL Images.

    Every activity that started at or before the current instant is drawn;
    an activity still in progress is drawn up to its elapsed fraction.
    """

    def __init__(
        self,
        activities: Sequence[Activity],
        width: int,
        height: int,
        render_context: RenderContext | None = None,
    ):
        """
        Initialize renderer.

        Args:
            activities: Activities to draw, in any order
            width: On-screen width of the map in pixels
            height: On-screen height of the map in pixels
            render_context: Rendering configuration and theming
        """
        self.context = render_context or RenderContext.default()
        self.width = width
        self.height = height
        self.controls = ControlsOverlay()
        self.mounted = True

        self.viewport = Viewport.fit(
            (point for activity in activities for point in activity.coordinates),
            width,
            height,
            padding=self.context.padding,
        )
        self._tracks = [
            _Track(activity, tuple(self.viewport.to_pixel(lat, lng) for lat, lng in activity.coordinates))
            for activity in sorted(activities, key=lambda a: a.start_time)
        ]
        self._cursor: datetime | None = time_span(activities)[0] if activities else None
        self._playing = False

    @property
    def cursor(self) -> datetime | None:
        return self._cursor

    @property
    def is_playing(self) -> bool:
        return self._playing

    def play(self) -> None:
        self._playing = True

    def pause(self) -> None:
        self._playing = False

    def seek(self, instant: datetime) -> None:
        self._cursor = instant

    def is_idle(self) -> bool:
        # Drawing happens synchronously inside snapshot()
        return True

    @property
    def is_available(self) -> bool:
        return self.mounted and self.width > 0 and self.height > 0

    def snapshot(self) -> Image.Image:
        """
        Render the map at the current instant.

        Returns:
            RGB image at the renderer's on-screen size
        """
        img = Image.new("RGB", (self.width, self.height), self.context.background_color)

        overlay = Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay, "RGBA")
        for track in self._tracks:
            self._draw_track(draw, track)

        if self.controls.visible:
            self._draw_controls(draw)

        combined = Image.alpha_composite(img.convert("RGBA"), overlay)
        return combined.convert("RGB")

    def _draw_track(self, draw: ImageDraw.ImageDraw, track: _Track) -> None:
        if self._cursor is None or track.activity.start_time > self._cursor:
            return

        fraction = self._elapsed_fraction(track.activity)
        count = max(1, math.ceil(fraction * len(track.points)))
        points = list(track.points[:count])
        color = self.context.track_color(track.activity.type)
        if len(points) == 1:
            x, y = points[0]
            r = self.context.line_width / 2
            draw.ellipse((x - r, y - r, x + r, y + r), fill=color)
            return
        draw.line(points, fill=color, width=self.context.line_width, joint="curve")

    def _elapsed_fraction(self, activity: Activity) -> float:
        assert self._cursor is not None
        if activity.elapsed_seconds <= 0 or activity.end_time <= self._cursor:
            return 1.0
        elapsed = (self._cursor - activity.start_time).total_seconds()
        return max(0.0, min(1.0, elapsed / activity.elapsed_seconds))

    def _draw_controls(self, draw: ImageDraw.ImageDraw) -> None:
        """Draw the playback bar along the bottom edge."""
        font = ImageFont.load_default()
        bar_top = self.height - self.context.controls_bar_height
        draw.rectangle((0, bar_top, self.width, self.height), fill=self.context.controls_color)

        state = "Playing" if self._playing else "Paused"
        date = self._cursor.strftime("%Y-%m-%d") if self._cursor else "--"
        text = f"{state}  {date}"

        bbox = draw.textbbox((0, 0), text, font=font)
        text_height = bbox[3] - bbox[1]
        margin = 8
        y = bar_top + (self.context.controls_bar_height - text_height) / 2
        draw.text((margin, y), text, font=font, fill=self.context.controls_text_color)
