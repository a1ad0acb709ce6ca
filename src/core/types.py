"""
Type definitions for the BarCam core module.
Provides type aliases and the protocols of the collaborators the
session drives (audio engine, camera, recorder, frame scheduler, UI).
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol, Union
import numpy as np
from numpy.typing import NDArray

from .config import SessionState

if TYPE_CHECKING:
    from .track import Track

# Audio data types
AudioArray = NDArray[np.float32]  # Shape: (samples,) or (samples, channels)
MonoArray = NDArray[np.float32]   # Shape: (samples,)

# Anything the decoder accepts: a path on disk or the raw file bytes
AudioSource = Union[str, Path, bytes]

# Callback types
TickCallback = Callable[[], None]
EndedCallback = Callable[[], None]
SegmentCallback = Callable[[Optional[int]], None]


@dataclass(frozen=True, slots=True)
class RecordedArtifact:
    """A finalized recording, ready to be replayed."""
    location: Path
    mime_type: str
    duration_seconds: float = 0.0


class Decoder(Protocol):
    """Turns an uploaded file into a Track. Raises DecodeError."""
    def decode(self, source: AudioSource, name: Optional[str] = None) -> "Track": ...


class PlaybackClock(Protocol):
    """Read-only view of the master timeline position."""
    def current_position(self) -> float: ...


class MasterTimeline(PlaybackClock, Protocol):
    """The audio engine: authoritative clock for synchronization."""
    def load(self, track: "Track") -> None: ...
    def play(self) -> bool: ...
    def pause(self) -> None: ...
    def seek(self, seconds: float) -> None: ...
    def set_on_ended(self, callback: Optional[EndedCallback]) -> None: ...


class SlaveTimeline(Protocol):
    """A timeline that snaps to the master position on every tick."""
    def set_position(self, seconds: float) -> None: ...


class RecordedTimeline(SlaveTimeline, Protocol):
    """Playback of a finished recording."""
    def load(self, artifact: RecordedArtifact) -> None: ...
    def unload(self) -> None: ...
    def play(self) -> None: ...
    def pause(self) -> None: ...
    def seek(self, seconds: float) -> None: ...


class CaptureProvider(Protocol):
    """Grants and releases camera streams. Raises PermissionDenied/DeviceUnavailable."""
    def acquire(self, constraints: dict[str, bool]) -> Any: ...
    def release(self, stream: Any) -> None: ...


class Recorder(Protocol):
    """Records a capture stream into an artifact. Raises RecordingError."""
    def start(self, stream: Any) -> Any: ...
    def stop(self, handle: Any) -> RecordedArtifact: ...
    def discard(self, handle: Any) -> None: ...


class FrameScheduler(Protocol):
    """Calls back once on the next display refresh. No fixed interval."""
    def schedule_next(self, callback: TickCallback) -> None: ...


class HighlightSink(Protocol):
    """UI collaborator notified of the active segment. None clears it."""
    def on_segment_changed(self, index: Optional[int]) -> None: ...


class TransitionResult:
    """Result from SessionController transitions."""
    __slots__ = ('success', 'state', 'error')

    def __init__(
        self,
        success: bool,
        state: SessionState,
        error: Optional[Exception] = None
    ):
        self.success = success
        self.state = state
        self.error = error

    @property
    def ignored(self) -> bool:
        """True when the transition was not allowed from the current state."""
        return not self.success and self.error is None

    def __repr__(self) -> str:
        return f"TransitionResult(success={self.success}, state={self.state.name}, error={self.error!r})"
