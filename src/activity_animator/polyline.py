"""Encoded polyline codec for activity summary tracks."""

from .constants import POLYLINE_PRECISION

Coordinate = tuple[float, float]


def decode_polyline(encoded: str) -> list[Coordinate]:
    """
    Decode an encoded polyline string into (lat, lng) pairs.

    Args:
        encoded: Polyline string, 1e5 precision

    Returns:
        List of (latitude, longitude) tuples; empty for an empty string
    """
    if not encoded:
        return []

    points: list[Coordinate] = []
    index = 0
    lat = 0
    lng = 0
    while index < len(encoded):
        delta_lat, index = _decode_value(encoded, index)
        delta_lng, index = _decode_value(encoded, index)
        lat += delta_lat
        lng += delta_lng
        points.append((lat / POLYLINE_PRECISION, lng / POLYLINE_PRECISION))
    return points


def encode_polyline(coordinates: list[Coordinate]) -> str:
    """Encode (lat, lng) pairs into a polyline string."""
    chunks: list[str] = []
    prev_lat = 0
    prev_lng = 0
    for lat, lng in coordinates:
        scaled_lat = round(lat * POLYLINE_PRECISION)
        scaled_lng = round(lng * POLYLINE_PRECISION)
        chunks.append(_encode_value(scaled_lat - prev_lat))
        chunks.append(_encode_value(scaled_lng - prev_lng))
        prev_lat, prev_lng = scaled_lat, scaled_lng
    return "".join(chunks)


def _decode_value(encoded: str, index: int) -> tuple[int, int]:
    shift = 0
    result = 0
    while True:
        if index >= len(encoded):
            raise ValueError("Truncated polyline string")
        byte = ord(encoded[index]) - 63
        index += 1
        result |= (byte & 0x1F) << shift
        shift += 5
        if byte < 0x20:
            break
    value = ~(result >> 1) if result & 1 else result >> 1
    return value, index


def _encode_value(value: int) -> str:
    signed = ~(value << 1) if value < 0 else value << 1
    chars: list[str] = []
    while signed >= 0x20:
        chars.append(chr((0x20 | (signed & 0x1F)) + 63))
        signed >>= 5
    chars.append(chr(signed + 63))
    return "".join(chars)
