"""Rendering configuration and theming for the track map."""

from dataclasses import dataclass, field

from ..constants import (
    ACTIVITY_COLORS,
    BACKGROUND_COLOR,
    CONTROLS_BAR_HEIGHT,
    DEFAULT_ACTIVITY_COLOR,
    MAP_PADDING,
    TRACK_LINE_WIDTH,
    TRACK_OPACITY,
)

RGB = tuple[int, int, int]


@dataclass(frozen=True)
class RenderContext:
    background_color: RGB = BACKGROUND_COLOR
    line_width: int = TRACK_LINE_WIDTH
    opacity: float = TRACK_OPACITY
    padding: int = MAP_PADDING
    controls_bar_height: int = CONTROLS_BAR_HEIGHT
    controls_color: tuple[int, int, int, int] = (30, 30, 30, 200)
    controls_text_color: RGB = (255, 255, 255)
    activity_colors: dict[str, RGB] = field(default_factory=lambda: dict(ACTIVITY_COLORS))
    default_color: RGB = DEFAULT_ACTIVITY_COLOR

    @staticmethod
    def default() -> "RenderContext":
        return RenderContext()

    def track_color(self, activity_type: str) -> tuple[int, int, int, int]:
        """RGBA stroke color for an activity type."""
        r, g, b = self.activity_colors.get(activity_type, self.default_color)
        return (r, g, b, round(255 * self.opacity))
