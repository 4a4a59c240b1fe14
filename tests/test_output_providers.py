"""Tests for output providers."""

from PIL import Image
import pytest
from activity_animator.output import (
    GifOutputProvider,
    WebPOutputProvider,
    format_for_output_path,
    media_type_for_output_format,
    output_path_for_format,
    provider_for_format,
)


def create_test_frame(color="red"):
    """Helper to create a test frame."""
    img = Image.new("RGB", (10, 10), color)
    return img


def test_gif_provider_encodes_frames():
    """GifOutputProvider should encode frames to GIF format."""
    provider = GifOutputProvider()
    frames = [create_test_frame("red"), create_test_frame("blue")]

    result = provider.encode(iter(frames), frame_duration=100)

    assert result.startswith(b"GIF89")
    assert len(result) > 0


def test_gif_provider_empty_frames():
    """GifOutputProvider should handle empty frame list."""
    provider = GifOutputProvider()
    result = provider.encode(iter([]), frame_duration=100)

    # Empty result for empty frames
    assert result == b""


def test_gif_prepare_frame_quantizes_to_palette():
    """Prepared GIF frames should be palette images."""
    provider = GifOutputProvider(quality=10)

    prepared = provider.prepare_frame(create_test_frame("green"))

    assert prepared.mode == "P"
    assert prepared.convert("RGB").getpixel((5, 5)) == (0, 128, 0)


def test_gif_quality_controls_palette_effort():
    """Lower quality numbers should spend more palette refinement passes."""
    best = GifOutputProvider(quality=1)
    default = GifOutputProvider(quality=10)
    fastest = GifOutputProvider(quality=30)

    assert best.kmeans_passes >= default.kmeans_passes >= fastest.kmeans_passes
    assert best.kmeans_passes > 0
    assert fastest.kmeans_passes == 0
    assert best.quantize_method == Image.Quantize.MEDIANCUT
    assert fastest.quantize_method == Image.Quantize.FASTOCTREE


def test_webp_provider_encodes_frames():
    """WebPOutputProvider should encode frames to WebP format."""
    provider = WebPOutputProvider()
    frames = [create_test_frame("red"), create_test_frame("blue")]

    result = provider.encode(iter(frames), frame_duration=100)

    # WebP files start with RIFF....WEBP
    assert result.startswith(b"RIFF")
    assert b"WEBP" in result
    assert len(result) > 0


def test_webp_provider_empty_frames():
    """WebPOutputProvider should handle empty frame list."""
    provider = WebPOutputProvider()
    result = provider.encode(iter([]), frame_duration=100)

    assert result == b""


def test_webp_quality_mapping():
    assert WebPOutputProvider(quality=1).save_options["quality"] == 100
    assert WebPOutputProvider(quality=30).save_options["quality"] == 50


def test_format_helpers():
    assert isinstance(provider_for_format("GIF"), GifOutputProvider)
    assert media_type_for_output_format("webp") == "image/webp"
    assert output_path_for_format("gif", "anim") == "anim.gif"
    assert format_for_output_path("out/Anim.WebP") == "webp"

    with pytest.raises(ValueError, match="Invalid format"):
        provider_for_format("svg")


def test_format_for_output_path_rejects_unknown_extension():
    """format_for_output_path should raise ValueError for unsupported extensions."""
    with pytest.raises(ValueError, match="Unsupported output format"):
        format_for_output_path("output.mp4")


def test_format_for_output_path_case_insensitive():
    assert format_for_output_path("output.GIF") == "gif"
    assert format_for_output_path("output.WEBP") == "webp"


def test_gif_frame_duration_uses_hundredths():
    provider = GifOutputProvider()

    assert provider.frame_duration(1000 / 15) == 70
    assert provider.frame_duration(100) == 100
    assert provider.frame_duration(1000 / 120) == 10


def test_webp_frame_duration_keeps_milliseconds():
    assert WebPOutputProvider().frame_duration(1000 / 15) == 67


def test_count_frames_reads_container():
    provider = GifOutputProvider()
    frames = [create_test_frame("red"), create_test_frame("blue"), create_test_frame("blue")]

    data = provider.encode(iter(frames), frame_duration=100)

    assert provider.count_frames(data) == 2
