"""Loading and summarising cached activity data."""

import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Iterable

from .polyline import Coordinate, decode_polyline


class ActivityDataError(Exception):
    """Raised when cached activity data cannot be read or parsed."""
    pass


@dataclass(frozen=True)
class Activity:
    """A recorded activity with its decoded summary track."""
    id: int | None
    name: str
    type: str
    start_time: datetime
    elapsed_seconds: float
    distance_meters: float
    coordinates: tuple[Coordinate, ...]

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(seconds=self.elapsed_seconds)


@dataclass(frozen=True)
class ActivitySummary:
    count: int
    total_distance_km: float
    types: tuple[str, ...]


def load_activities(path: str | Path) -> list[Activity]:
    """
    Load activities from a cached activity-list JSON file.

    Activities without a summary track are skipped. The result is sorted
    by start time.

    Raises:
        ActivityDataError: If the file is missing or malformed
    """
    try:
        with open(path, "r") as f:
            raw = json.load(f)
    except FileNotFoundError:
        raise ActivityDataError(f"File '{path}' not found")
    except json.JSONDecodeError as e:
        raise ActivityDataError(f"Invalid JSON in '{path}': {e}")

    if not isinstance(raw, list):
        raise ActivityDataError(f"Expected a list of activities in '{path}'")
    return parse_activities(raw)


def parse_activities(raw: Iterable[dict[str, Any]]) -> list[Activity]:
    """Parse activity-list records, skipping those without a track."""
    activities = []
    for record in raw:
        activity = _parse_activity(record)
        if activity is not None:
            activities.append(activity)
    activities.sort(key=lambda a: a.start_time)
    return activities


def filter_by_type(activities: Iterable[Activity], activity_type: str | None) -> list[Activity]:
    """Keep activities of the given type; ``None`` or ``"all"`` keeps everything."""
    if activity_type is None or activity_type == "all":
        return list(activities)
    return [a for a in activities if a.type == activity_type]


def summarize(activities: Iterable[Activity]) -> ActivitySummary:
    items = list(activities)
    total_distance = sum(a.distance_meters for a in items)
    types = tuple(sorted({a.type for a in items}))
    return ActivitySummary(
        count=len(items),
        total_distance_km=total_distance / 1000,
        types=types,
    )


def time_span(activities: Iterable[Activity]) -> tuple[datetime, datetime]:
    """Return (first start, last end) across the activities."""
    items = list(activities)
    if not items:
        raise ActivityDataError("No activities with tracks to animate")
    start = min(a.start_time for a in items)
    end = max(a.end_time for a in items)
    return start, end


def _parse_activity(record: dict[str, Any]) -> Activity | None:
    summary_polyline = (record.get("map") or {}).get("summary_polyline")
    if not summary_polyline:
        return None

    try:
        coordinates = tuple(decode_polyline(summary_polyline))
        start_time = _parse_timestamp(record["start_date"])
    except (KeyError, ValueError) as e:
        name = record.get("name", "<unnamed>")
        raise ActivityDataError(f"Malformed activity '{name}': {e}") from e

    if not coordinates:
        return None

    return Activity(
        id=record.get("id"),
        name=record.get("name", ""),
        type=record.get("type", "default"),
        start_time=start_time,
        elapsed_seconds=float(record.get("elapsed_time") or 0),
        distance_meters=float(record.get("distance") or 0),
        coordinates=coordinates,
    )


def _parse_timestamp(value: str) -> datetime:
    # Cached timestamps carry a trailing "Z"
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
