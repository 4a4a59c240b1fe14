"""Shared fixtures and fakes for the export pipeline tests."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from PIL import Image

from activity_animator.export import (
    Encoder,
    ExportEvents,
    ExportLease,
    ExportOrchestrator,
    FrameSource,
    PhaseWeights,
)
from activity_animator.polyline import encode_polyline

T0 = datetime(2024, 1, 1, 7, 0, tzinfo=timezone.utc)


class FakeRenderer:
    """Renderer that records seeks and playback calls."""

    def __init__(self, playing: bool = True, on_seek=None):
        self._playing = playing
        self.seeks: list[datetime] = []
        self.calls: list[str] = []
        self.on_seek = on_seek

    @property
    def is_playing(self) -> bool:
        return self._playing

    def seek(self, instant: datetime) -> None:
        self.seeks.append(instant)
        self.calls.append("seek")
        if self.on_seek is not None:
            self.on_seek(len(self.seeks) - 1)

    def pause(self) -> None:
        self.calls.append("pause")
        self._playing = False

    def play(self) -> None:
        self.calls.append("play")
        self._playing = True


class FakeSurface:
    """Surface whose snapshot color changes with every seek."""

    def __init__(self, renderer: FakeRenderer, size: tuple[int, int] = (16, 12), available: bool = True):
        self.renderer = renderer
        self.size = size
        self.available = available
        self.fail_on: int | None = None

    @property
    def is_available(self) -> bool:
        return self.available

    def snapshot(self) -> Image.Image:
        index = len(self.renderer.seeks) - 1
        if self.fail_on is not None and index == self.fail_on:
            raise RuntimeError("snapshot exploded")
        return Image.new("RGB", self.size, frame_color(index))


class FakeControls:
    def __init__(self, visible: bool = True):
        self.visible = visible


def frame_color(index: int) -> tuple[int, int, int]:
    """Distinct solid color per frame index."""
    return ((index * 7) % 256, (index * 13 + 40) % 256, (index * 29 + 80) % 256)


def solid_frame(index: int, size: tuple[int, int] = (16, 12)) -> Image.Image:
    return Image.new("RGB", size, frame_color(index))


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def surface(renderer: FakeRenderer) -> FakeSurface:
    return FakeSurface(renderer)


@pytest.fixture
def controls() -> FakeControls:
    return FakeControls()


@pytest.fixture
def frame_source(renderer: FakeRenderer, surface: FakeSurface) -> FrameSource:
    return FrameSource(renderer, surface, settle_seconds=0)


@pytest.fixture
def lease() -> ExportLease:
    return ExportLease()


@pytest.fixture
def make_orchestrator(renderer, controls, frame_source, lease):
    """Build an orchestrator over the fakes with an isolated lease."""

    def factory(encoder: Encoder | None = None, weights: PhaseWeights | None = None) -> ExportOrchestrator:
        return ExportOrchestrator(
            renderer,
            controls,
            frame_source,
            encoder=encoder or Encoder(workers=1),
            weights=weights,
            lease=lease,
            events=ExportEvents(),
        )

    return factory


def activity_record(
    name: str,
    activity_type: str,
    start: datetime,
    coordinates: list[tuple[float, float]],
    elapsed_time: int = 1800,
    distance: float = 5000.0,
) -> dict:
    return {
        "id": len(name),
        "name": name,
        "type": activity_type,
        "distance": distance,
        "start_date": start.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "elapsed_time": elapsed_time,
        "map": {"summary_polyline": encode_polyline(coordinates)},
    }


SAMPLE_RECORDS = [
    activity_record(
        "Morning Run",
        "Run",
        T0,
        [(47.6062, -122.3321), (47.6100, -122.3300), (47.6150, -122.3250), (47.6200, -122.3200)],
    ),
    activity_record(
        "Lunch Ride",
        "Ride",
        T0 + timedelta(days=2),
        [(47.6000, -122.3400), (47.5950, -122.3350), (47.5900, -122.3300)],
        elapsed_time=3600,
        distance=20000.0,
    ),
    {
        "id": 3,
        "name": "Treadmill",
        "type": "Run",
        "distance": 3000.0,
        "start_date": (T0 + timedelta(days=1)).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "elapsed_time": 1200,
        "map": {"summary_polyline": None},
    },
]


@pytest.fixture
def activities_file(tmp_path):
    path = tmp_path / "all_activities.json"
    path.write_text(json.dumps(SAMPLE_RECORDS))
    return path
