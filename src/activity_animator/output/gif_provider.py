"""GIF output provider."""

from PIL import Image

from ..constants import MAX_KMEANS_PASSES, MAX_QUALITY, MIN_QUALITY, PALETTE_COLORS
from .base import PillowSequenceOutputProvider

# Quality levels at or below this use median-cut palettes, above it fast octree
_MEDIANCUT_QUALITY_LIMIT = 10
_GIF_DELAY_UNIT_MS = 10


class GifOutputProvider(PillowSequenceOutputProvider):
    """Output provider for GIF format."""

    @property
    def output_format(self) -> str:
        return "gif"

    @property
    def media_type(self) -> str:
        return "image/gif"

    @property
    def save_options(self) -> dict[str, object]:
        return {"optimize": False}

    @property
    def quantize_method(self) -> Image.Quantize:
        if self.quality <= _MEDIANCUT_QUALITY_LIMIT:
            return Image.Quantize.MEDIANCUT
        return Image.Quantize.FASTOCTREE

    @property
    def kmeans_passes(self) -> int:
        """Palette refinement passes: the best quality level gets the most."""
        span = MAX_QUALITY - MIN_QUALITY
        return round((MAX_QUALITY - self.quality) / span * MAX_KMEANS_PASSES)

    def frame_duration(self, delay_ms: float) -> int:
        # GIF stores delays in hundredths of a second
        return max(_GIF_DELAY_UNIT_MS, round(delay_ms / _GIF_DELAY_UNIT_MS) * _GIF_DELAY_UNIT_MS)

    def prepare_frame(self, image: Image.Image) -> Image.Image:
        return image.convert("RGB").quantize(
            colors=PALETTE_COLORS,
            method=self.quantize_method,
            kmeans=self.kmeans_passes,
            dither=Image.Dither.FLOYDSTEINBERG,
        )
