"""Output providers for different animation formats."""

from dataclasses import dataclass
from pathlib import Path

from ..constants import DEFAULT_QUALITY
from .base import OutputProvider, PillowSequenceOutputProvider
from .gif_provider import GifOutputProvider
from .webp_provider import WebPOutputProvider


@dataclass(frozen=True)
class OutputFormatSpec:
    extension: str
    media_type: str
    provider_class: type[PillowSequenceOutputProvider]


_OUTPUT_FORMATS: dict[str, OutputFormatSpec] = {
    "gif": OutputFormatSpec(
        extension=".gif",
        media_type="image/gif",
        provider_class=GifOutputProvider,
    ),
    "webp": OutputFormatSpec(
        extension=".webp",
        media_type="image/webp",
        provider_class=WebPOutputProvider,
    ),
}


def provider_for_format(
    output_format: str,
    quality: int = DEFAULT_QUALITY,
) -> PillowSequenceOutputProvider:
    """Create the provider for a format name such as ``gif``."""
    spec = _output_spec_from_format(output_format)
    return spec.provider_class(quality=quality)


def supported_output_formats() -> tuple[str, ...]:
    """Return supported output format names."""
    return tuple(_OUTPUT_FORMATS.keys())


def media_type_for_output_format(output_format: str) -> str:
    """Resolve media type for a supported output format."""
    spec = _output_spec_from_format(output_format)
    return spec.media_type


def output_path_for_format(output_format: str, base_name: str = "output") -> str:
    """Build a synthetic output path from an output format name."""
    spec = _output_spec_from_format(output_format)
    return f"{base_name}{spec.extension}"


def format_for_output_path(file_path: str) -> str:
    """Return the format name matching a file path's extension."""
    ext = Path(file_path).suffix.lower()
    _output_spec_from_extension(ext)
    return ext.removeprefix(".")


def _output_spec_from_extension(ext: str) -> OutputFormatSpec:
    output_format = ext.removeprefix(".")
    spec = _OUTPUT_FORMATS.get(output_format)
    if spec is not None:
        return spec
    supported = ", ".join(spec.extension for spec in _OUTPUT_FORMATS.values())
    raise ValueError(f"Unsupported output format: {ext}. Supported formats: {supported}")


def _output_spec_from_format(output_format: str) -> OutputFormatSpec:
    spec = _OUTPUT_FORMATS.get(output_format.lower())
    if spec is not None:
        return spec
    supported = ", ".join(supported_output_formats())
    raise ValueError(f"Invalid format. Choose from: {supported}")


__all__ = [
    "OutputFormatSpec",
    "OutputProvider",
    "PillowSequenceOutputProvider",
    "GifOutputProvider",
    "WebPOutputProvider",
    "provider_for_format",
    "supported_output_formats",
    "media_type_for_output_format",
    "output_path_for_format",
    "format_for_output_path",
]
