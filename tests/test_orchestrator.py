"""Tests for ExportOrchestrator."""

from datetime import timedelta

import pytest

from activity_animator.export import (
    PROCESS_EXPORT_LEASE,
    CancellationToken,
    CaptureFailed,
    EncodeFailed,
    Encoder,
    ExportAlreadyInProgress,
    ExportCancelled,
    ExportOrchestrator,
    ExportOutcome,
    ExportPhase,
    ExportRequest,
    PhaseWeights,
    SurfaceUnavailable,
)

from conftest import T0


class SpyEncoder(Encoder):
    """Encoder that records calls and can be told to fail."""

    def __init__(self, fail: bool = False):
        super().__init__(workers=1)
        self.calls = 0
        self.fail = fail

    def encode(self, frames, *args, **kwargs):
        self.calls += 1
        if self.fail:
            raise EncodeFailed("compressor exploded")
        return super().encode(frames, *args, **kwargs)


def make_request(frame_rate=4, duration=2) -> ExportRequest:
    return ExportRequest(
        start=T0,
        end=T0 + timedelta(days=30),
        width=16,
        height=12,
        frame_rate=frame_rate,
        duration_seconds=duration,
    )


def collect(orchestrator) -> list:
    events = []
    orchestrator.events.subscribe_progress(events.append)
    return events


def test_export_returns_artifact_and_notifies_completion(make_orchestrator):
    orchestrator = make_orchestrator()
    completed = []
    orchestrator.events.subscribe_complete(completed.append)

    artifact = orchestrator.export(make_request())

    assert artifact.frame_count == 8
    assert artifact.data.startswith(b"GIF89")
    assert completed == [artifact]
    assert orchestrator.phase is ExportPhase.IDLE
    assert orchestrator.last_outcome is ExportOutcome.SUCCEEDED
    assert not orchestrator.is_exporting


def test_progress_is_monotonic_and_crosses_boundary(make_orchestrator):
    orchestrator = make_orchestrator()
    events = collect(orchestrator)

    orchestrator.export(make_request())

    percents = [event.percent for event in events]
    assert percents == sorted(percents)
    assert percents[0] == 0
    assert percents[-1] == 100
    assert events[0].message == "Capturing 8 frames..."
    assert events[-1].message == "Complete!"

    capture = [e for e in events if e.phase is ExportPhase.CAPTURING_FRAMES]
    encode = [e for e in events if e.phase is ExportPhase.ENCODING]
    assert all(e.percent <= 50 for e in capture)
    assert any(e.percent < 50 for e in capture)
    assert capture[-1].percent == 50
    assert encode[0].percent == 50
    assert encode[0].message == "Encoding GIF..."
    assert all(e.percent >= 50 for e in encode)
    assert capture[1].message == "Captured frame 1/8"
    assert capture[1].percent == pytest.approx(50 / 8)


def test_progress_split_is_configurable(make_orchestrator):
    orchestrator = make_orchestrator(weights=PhaseWeights(capture=0.8))
    events = collect(orchestrator)

    orchestrator.export(make_request())

    encode = [e for e in events if e.phase is ExportPhase.ENCODING]
    assert encode[0].percent == pytest.approx(80)
    assert events[-1].percent == pytest.approx(100)


def test_invalid_phase_weight_rejected():
    with pytest.raises(ValueError):
        PhaseWeights(capture=1.5)


def test_renderer_paused_and_controls_hidden_during_capture(make_orchestrator, renderer, controls):
    observed = []
    renderer.on_seek = lambda index: observed.append((renderer.is_playing, controls.visible))

    make_orchestrator().export(make_request())

    assert observed and all(state == (False, False) for state in observed)


@pytest.mark.parametrize("was_playing", [True, False])
@pytest.mark.parametrize("controls_visible", [True, False])
def test_state_restored_after_success(make_orchestrator, renderer, controls, was_playing, controls_visible):
    renderer._playing = was_playing
    controls.visible = controls_visible

    make_orchestrator().export(make_request())

    assert renderer.is_playing is was_playing
    assert controls.visible is controls_visible
    assert ("play" in renderer.calls) is was_playing


@pytest.mark.parametrize("was_playing", [True, False])
def test_state_restored_after_capture_failure(make_orchestrator, renderer, controls, surface, was_playing):
    renderer._playing = was_playing
    surface.fail_on = 3
    orchestrator = make_orchestrator()

    with pytest.raises(CaptureFailed):
        orchestrator.export(make_request())

    assert renderer.is_playing is was_playing
    assert controls.visible is True
    assert orchestrator.phase is ExportPhase.IDLE
    assert orchestrator.last_outcome is ExportOutcome.FAILED
    assert not orchestrator.is_exporting


def test_state_restored_after_encode_failure(make_orchestrator, renderer, controls):
    orchestrator = make_orchestrator(encoder=SpyEncoder(fail=True))

    with pytest.raises(EncodeFailed, match="compressor exploded"):
        orchestrator.export(make_request())

    assert renderer.is_playing is True
    assert controls.visible is True


def test_surface_unavailable_is_fatal(make_orchestrator, surface, renderer, controls):
    surface.available = False
    encoder = SpyEncoder()

    with pytest.raises(SurfaceUnavailable):
        make_orchestrator(encoder=encoder).export(make_request())

    assert encoder.calls == 0
    assert renderer.is_playing is True
    assert controls.visible is True


def test_capture_failure_aborts_before_encoding(make_orchestrator, surface):
    """A failure on frame 42 is reported with its index and nothing is encoded."""
    surface.fail_on = 42
    encoder = SpyEncoder()
    completed = []
    orchestrator = make_orchestrator(encoder=encoder)
    orchestrator.events.subscribe_complete(completed.append)

    with pytest.raises(CaptureFailed) as exc_info:
        orchestrator.export(make_request(frame_rate=15, duration=10))

    assert exc_info.value.frame_index == 42
    assert encoder.calls == 0
    assert completed == []


def test_concurrent_export_rejected_without_disturbing_active_one(make_orchestrator, renderer, controls):
    first = make_orchestrator()
    second = make_orchestrator()
    rejections = []

    def start_second_export(index):
        if index == 2:
            with pytest.raises(ExportAlreadyInProgress) as exc_info:
                second.export(make_request())
            rejections.append(exc_info.value)
            assert renderer.is_playing is False
            assert controls.visible is False

    renderer.on_seek = start_second_export

    artifact = first.export(make_request())

    assert len(rejections) == 1
    assert artifact.frame_count == 8
    assert second.last_outcome is None
    assert renderer.is_playing is True
    assert controls.visible is True


def test_process_lease_is_shared(renderer, controls, frame_source):
    """Orchestrators using the default lease exclude each other."""
    orchestrator = ExportOrchestrator(renderer, controls, frame_source, encoder=Encoder(workers=1))

    with PROCESS_EXPORT_LEASE.hold():
        assert orchestrator.is_exporting
        with pytest.raises(ExportAlreadyInProgress):
            orchestrator.export(make_request())

    assert renderer.calls == []
    assert orchestrator.export(make_request()).frame_count == 8


def test_lease_released_after_failure_allows_retry(make_orchestrator, surface):
    orchestrator = make_orchestrator()
    surface.fail_on = 0

    with pytest.raises(CaptureFailed):
        orchestrator.export(make_request())

    surface.fail_on = None
    assert orchestrator.export(make_request()).frame_count == 8


def test_cancellation_restores_state(make_orchestrator, renderer, controls):
    token = CancellationToken()
    renderer.on_seek = lambda index: token.cancel() if index == 1 else None
    orchestrator = make_orchestrator()

    with pytest.raises(ExportCancelled):
        orchestrator.export(make_request(), cancel=token)

    assert orchestrator.last_outcome is ExportOutcome.CANCELLED
    assert renderer.is_playing is True
    assert controls.visible is True


def test_restore_failure_does_not_mask_export_error(make_orchestrator, renderer, surface):
    def broken_play():
        raise RuntimeError("cannot resume")

    renderer.play = broken_play
    surface.fail_on = 1

    with pytest.raises(CaptureFailed):
        make_orchestrator().export(make_request())


class StuckControls:
    """Overlay that refuses to hide."""

    def __init__(self):
        self._visible = True

    @property
    def visible(self) -> bool:
        return self._visible

    @visible.setter
    def visible(self, value: bool) -> None:
        if not value:
            raise RuntimeError("overlay detached")
        self._visible = value


def test_playback_resumed_when_hiding_controls_fails(renderer, frame_source, lease):
    orchestrator = ExportOrchestrator(
        renderer, StuckControls(), frame_source, encoder=Encoder(workers=1), lease=lease
    )

    with pytest.raises(RuntimeError, match="overlay detached"):
        orchestrator.export(make_request())

    assert renderer.calls == ["pause", "play"]
    assert renderer.is_playing is True
    assert orchestrator.last_outcome is ExportOutcome.FAILED
    assert orchestrator.phase is ExportPhase.IDLE
    assert not lease.held
