"""WebP output provider."""

from ..constants import MAX_QUALITY, MIN_QUALITY
from .base import PillowSequenceOutputProvider

_MIN_WEBP_QUALITY = 50


class WebPOutputProvider(PillowSequenceOutputProvider):
    """Output provider for WebP format."""

    @property
    def output_format(self) -> str:
        return "webp"

    @property
    def media_type(self) -> str:
        return "image/webp"

    @property
    def save_options(self) -> dict[str, object]:
        # Quality level 1 maps to WebP quality 100, level 30 to 50
        span = MAX_QUALITY - MIN_QUALITY
        webp_quality = 100 - round((self.quality - MIN_QUALITY) / span * (100 - _MIN_WEBP_QUALITY))
        return {
            "lossless": False,
            "quality": webp_quality,
            "method": 6 if self.quality <= 10 else 4,
        }
