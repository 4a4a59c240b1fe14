"""Web Mercator projection fitted to a pixel viewport."""

import math
from dataclasses import dataclass
from typing import Iterable

from ..polyline import Coordinate

# Latitude limit of the Web Mercator square
MAX_LATITUDE = 85.05112878


def mercator(lat: float, lng: float) -> tuple[float, float]:
    """Project (lat, lng) onto the unit Web Mercator square."""
    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))
    x = (lng + 180.0) / 360.0
    sin_lat = math.sin(math.radians(lat))
    y = 0.5 - math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi)
    return x, y


@dataclass(frozen=True)
class Viewport:
    """Maps geographic coordinates to pixels so that given bounds fit the view."""
    width: int
    height: int
    scale: float
    offset_x: float
    offset_y: float

    @classmethod
    def fit(
        cls,
        coordinates: Iterable[Coordinate],
        width: int,
        height: int,
        padding: int = 0,
    ) -> "Viewport":
        """
        Fit a viewport around all coordinates, preserving aspect ratio.

        Args:
            coordinates: Points that must be visible
            width: Viewport width in pixels
            height: Viewport height in pixels
            padding: Pixels to keep free on every side

        Returns:
            A viewport centred on the coordinate bounds
        """
        projected = [mercator(lat, lng) for lat, lng in coordinates]
        if not projected:
            return cls(width, height, scale=float(min(width, height)), offset_x=0.0, offset_y=0.0)

        xs = [p[0] for p in projected]
        ys = [p[1] for p in projected]
        min_x, max_x = min(xs), max(xs)
        min_y, max_y = min(ys), max(ys)

        usable_w = max(1, width - 2 * padding)
        usable_h = max(1, height - 2 * padding)
        span_x = max_x - min_x
        span_y = max_y - min_y
        if span_x == 0 and span_y == 0:
            # Single point: any finite zoom works
            scale = float(min(usable_w, usable_h)) * 1000
        else:
            scale = min(
                usable_w / span_x if span_x else math.inf,
                usable_h / span_y if span_y else math.inf,
            )

        center_x = (min_x + max_x) / 2
        center_y = (min_y + max_y) / 2
        return cls(
            width,
            height,
            scale=scale,
            offset_x=width / 2 - center_x * scale,
            offset_y=height / 2 - center_y * scale,
        )

    def to_pixel(self, lat: float, lng: float) -> tuple[float, float]:
        x, y = mercator(lat, lng)
        return x * self.scale + self.offset_x, y * self.scale + self.offset_y
