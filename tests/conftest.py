"""
Pytest configuration and fixtures for BarCam tests.
Every device-facing collaborator is replaced by an in-memory fake.
"""
import pytest
import numpy as np
from pathlib import Path

from src.core.config import AUDIO_CONFIG
from src.core.errors import DecodeError, DeviceUnavailable, RecordingError
from src.core.session import SessionController
from src.core.track import Track
from src.core.types import RecordedArtifact


class FakeScheduler:
    """Collects scheduled callbacks; tests fire them explicitly."""

    def __init__(self):
        self.pending = []

    def schedule_next(self, callback):
        self.pending.append(callback)

    def run_frame(self):
        """Fire every callback queued so far, like one display refresh."""
        callbacks, self.pending = self.pending, []
        for cb in callbacks:
            cb()
        return len(callbacks)


class FakeMaster:
    """Audio engine stand-in with a position tests can move by hand."""

    def __init__(self):
        self.track = None
        self.position = 0.0
        self.playing = False
        self.play_calls = 0
        self.on_ended = None
        self.play_result = True

    def load(self, track):
        self.track = track
        self.position = 0.0
        self.playing = False

    def play(self):
        self.play_calls += 1
        if not self.play_result:
            return False
        self.playing = True
        return True

    def pause(self):
        self.playing = False

    def seek(self, seconds):
        self.position = seconds

    def current_position(self):
        return self.position

    def set_on_ended(self, callback):
        self.on_ended = callback


class FakeSlave:
    def __init__(self):
        self.position = None
        self.set_calls = 0

    def set_position(self, seconds):
        self.position = seconds
        self.set_calls += 1


class FakeRecordedTimeline(FakeSlave):
    def __init__(self):
        super().__init__()
        self.artifact = None
        self.playing = False

    def load(self, artifact):
        self.artifact = artifact

    def unload(self):
        self.artifact = None
        self.playing = False

    def play(self):
        self.playing = True

    def pause(self):
        self.playing = False

    def seek(self, seconds):
        self.position = seconds


class FakeCaptureProvider:
    def __init__(self, error=None):
        self.error = error
        self.acquired = []
        self.released = []

    def acquire(self, constraints):
        if self.error is not None:
            raise self.error
        stream = f"stream-{len(self.acquired)}"
        self.acquired.append((stream, constraints))
        return stream

    def release(self, stream):
        self.released.append(stream)

    @property
    def active(self):
        return len(self.acquired) - len(self.released)


class FakeRecorder:
    def __init__(self):
        self.start_error = None
        self.stop_error = None
        self.started = []
        self.stopped = []
        self.discarded = []
        self.on_stop = None

    def start(self, stream):
        if self.start_error is not None:
            raise self.start_error
        handle = ("handle", stream)
        self.started.append(handle)
        return handle

    def stop(self, handle):
        if self.on_stop is not None:
            # Stands in for host events handled while the file is finalized
            self.on_stop()
        if self.stop_error is not None:
            raise self.stop_error
        self.stopped.append(handle)
        return RecordedArtifact(Path(f"/tmp/take-{len(self.stopped)}.webm"), "video/webm", 3.0)

    def discard(self, handle):
        self.discarded.append(handle)


class FakeDecoder:
    """Returns the configured track, or raises DecodeError for b'garbage'."""

    def __init__(self, track):
        self.track = track
        self.calls = 0

    def decode(self, source, name=None):
        self.calls += 1
        if source == b"garbage":
            raise DecodeError("Unsupported or corrupt audio data")
        return self.track


class RecordingSink:
    def __init__(self):
        self.events = []

    def on_segment_changed(self, index):
        self.events.append(index)


@pytest.fixture
def sample_mono_audio() -> np.ndarray:
    """Generate 1 second of mono sine wave audio."""
    sr = AUDIO_CONFIG.default_samplerate
    t = np.linspace(0, 1, sr, dtype=np.float32)
    return np.sin(2 * np.pi * 440 * t).astype(np.float32)


@pytest.fixture
def sample_stereo_audio() -> np.ndarray:
    """Generate 1 second of stereo sine wave audio."""
    sr = AUDIO_CONFIG.default_samplerate
    t = np.linspace(0, 1, sr, dtype=np.float32)
    left = np.sin(2 * np.pi * 440 * t).astype(np.float32)
    right = np.sin(2 * np.pi * 880 * t).astype(np.float32)
    return np.column_stack((left, right))


@pytest.fixture
def song_track() -> Track:
    """A 24 second mono track at a low samplerate (8 bars of 3 s)."""
    sr = 1000
    t = np.linspace(0, 24, 24 * sr, endpoint=False, dtype=np.float32)
    return Track(np.sin(2 * np.pi * 2 * t).astype(np.float32), sr, "Song")


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def master() -> FakeMaster:
    return FakeMaster()


@pytest.fixture
def slave() -> FakeSlave:
    return FakeSlave()


@pytest.fixture
def recorded() -> FakeRecordedTimeline:
    return FakeRecordedTimeline()


@pytest.fixture
def capture() -> FakeCaptureProvider:
    return FakeCaptureProvider()


@pytest.fixture
def recorder() -> FakeRecorder:
    return FakeRecorder()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def session(song_track, master, capture, recorder, recorded, scheduler, sink) -> SessionController:
    """A session wired entirely to fakes, in IDLE."""
    states = []
    controller = SessionController(
        decoder=FakeDecoder(song_track),
        player=master,
        capture=capture,
        recorder=recorder,
        recorded=recorded,
        scheduler=scheduler,
        highlight=sink,
        on_state_changed=states.append,
    )
    controller.state_history = states
    return controller


@pytest.fixture
def ready_session(session) -> SessionController:
    session.load_track(b"song-bytes", waveform_width=100)
    return session


@pytest.fixture
def recorded_session(ready_session) -> SessionController:
    ready_session.start_recording()
    ready_session.stop_recording()
    return ready_session


# Error instances shared by tests
@pytest.fixture
def no_camera() -> DeviceUnavailable:
    return DeviceUnavailable("No camera found on this system.")


@pytest.fixture
def finalize_failure() -> RecordingError:
    return RecordingError("disk full")
